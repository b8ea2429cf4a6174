"""
Pydantic models describing an incoming analysis request.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bna.core.errors import InvalidParametersError


class AnalysisParameters(BaseModel):
    """City to analyze.

    ``region`` and ``fips_code`` travel together; the pairing is checked when the
    job is built so the error surfaces as ``InvalidParametersError``.
    """

    model_config = ConfigDict(populate_by_name=True)

    country: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    region: Optional[str] = Field(None, description="State or province name.")
    fips_code: Optional[str] = Field(
        None,
        alias="fipsCode",
        description="US census FIPS code of the city.",
    )


class Setup(BaseModel):
    """Resources provisioned by the previous workflow step."""

    model_config = ConfigDict(populate_by_name=True)

    compute_endpoint_host: str = Field(
        ...,
        alias="computeEndpointHost",
        min_length=1,
        description="Per-tenant database host replacing the shared one.",
    )

    @model_validator(mode="before")
    @classmethod
    def _accept_neon_shape(cls, value: Any) -> Any:
        """Support the ``{"neon": {"host": ...}}`` shape emitted by the setup step."""
        if isinstance(value, dict) and "neon" in value:
            neon = value.get("neon") or {}
            if isinstance(neon, dict) and "host" in neon:
                return {"computeEndpointHost": neon["host"]}
        return value


class TaskInput(BaseModel):
    """Event delivered by the state machine."""

    model_config = ConfigDict(populate_by_name=True)

    analysis_parameters: AnalysisParameters = Field(..., alias="analysisParameters")
    setup: Setup
    context: Dict[str, Any] = Field(
        ...,
        description="State machine context object, echoed back unchanged.",
    )


def execution_ids(context: Dict[str, Any]) -> Tuple[UUID, str]:
    """
    Derive the identifiers of the running state machine execution.

    The execution ARN looks like
    ``arn:aws:states:<region>:<account>:execution:<state-machine>:<execution-name>``
    and the execution name is the UUID the pipeline tracker is keyed by.

    Returns a tuple of (execution_id, state_machine_name).
    """
    execution = context.get("Execution") if isinstance(context, dict) else None
    if not isinstance(execution, dict):
        raise InvalidParametersError("Context is missing the 'Execution' object.")

    arn = execution.get("Id")
    if not isinstance(arn, str) or not arn:
        raise InvalidParametersError("Context execution is missing its 'Id'.")

    parts = arn.split(":")
    if len(parts) < 8 or parts[5] != "execution":
        raise InvalidParametersError(f"Unrecognized execution ARN: {arn}")

    state_machine_name, execution_name = parts[6], parts[7]
    try:
        execution_id = UUID(execution_name)
    except ValueError as exc:
        raise InvalidParametersError(
            f"Execution name {execution_name!r} is not a valid UUID."
        ) from exc
    return execution_id, state_machine_name


__all__ = ["AnalysisParameters", "Setup", "TaskInput", "execution_ids"]
