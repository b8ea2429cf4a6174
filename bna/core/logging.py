"""
Logging utilities for the Lambda entrypoint and service layer.

The logging context is built explicitly at startup and handed to the services
that need it. Only the ``bna`` logger hierarchy is configured; the root logger
is left untouched.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "bna"

# CloudWatch stamps ingestion time on every line.
_LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"


class LoggingContext:
    """Own the handler attached to the ``bna`` logger for one process."""

    def __init__(self, level: str = "INFO", *, stream=None) -> None:
        self.logger = logging.getLogger(ROOT_LOGGER_NAME)
        self._previous_level = self.logger.level
        self._previous_propagate = self.logger.propagate
        self._handler: Optional[logging.Handler] = logging.StreamHandler(stream or sys.stdout)
        self._handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        self.logger.addHandler(self._handler)
        self.logger.setLevel(level.upper())
        self.logger.propagate = False

    def get_logger(self, name: str) -> logging.Logger:
        """Return a child logger inside the configured hierarchy."""
        return self.logger.getChild(name)

    def close(self) -> None:
        """Detach the handler and restore the logger's prior state."""
        if self._handler is None:
            return
        self.logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None
        self.logger.setLevel(self._previous_level)
        self.logger.propagate = self._previous_propagate

    def __enter__(self) -> "LoggingContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["LoggingContext", "ROOT_LOGGER_NAME"]
