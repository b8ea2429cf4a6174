"""Exception classes raised while dispatching an analysis run.

Every stage raises one of these and nothing recovers locally; the invoking
workflow engine decides whether to retry the whole step.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from bna.schemas.tasks import TaskHandle


class BNAError(Exception):
    """Base exception class for dispatch errors."""


class AuthError(BNAError):
    """Raised when the service account cannot be authenticated."""


class ConfigNotFoundError(BNAError):
    """Raised when a secret or parameter does not exist."""

    def __init__(self, name: str, message: Optional[str] = None) -> None:
        self.name = name
        super().__init__(message or f"Configuration value {name!r} was not found.")


class ConfigUnavailableError(BNAError):
    """Raised when a secret or parameter could not be fetched."""

    def __init__(self, name: str, message: Optional[str] = None) -> None:
        self.name = name
        super().__init__(message or f"Configuration value {name!r} is unavailable.")


class InvalidParametersError(BNAError):
    """Raised when the analysis request is inconsistent or malformed."""


class UrlParseError(BNAError):
    """Raised when a connection URL cannot be parsed or rewritten."""


class DispatchError(BNAError):
    """Raised when the ECS task could not be launched."""


class EmptyResultError(DispatchError):
    """Raised when ECS accepted the call but started no task."""

    def __init__(self, message: str, failures: Optional[List[Dict[str, Any]]] = None) -> None:
        self.failures = failures or []
        super().__init__(message)


class ReportError(BNAError):
    """Raised when the pipeline tracker rejects or misses an update.

    ``handle`` is set when the failure happened after the task was launched,
    meaning compute is running while the tracker is stale.
    """

    def __init__(self, message: str, handle: Optional["TaskHandle"] = None) -> None:
        self.handle = handle
        super().__init__(message)


__all__ = [
    "AuthError",
    "BNAError",
    "ConfigNotFoundError",
    "ConfigUnavailableError",
    "DispatchError",
    "EmptyResultError",
    "InvalidParametersError",
    "ReportError",
    "UrlParseError",
]
