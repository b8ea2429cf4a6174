"""
Models exchanged with the pipeline tracking API.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PipelineState(str, Enum):
    """Phases the tracker records for an analysis pipeline."""

    PIPELINE = "Pipeline"
    SQS_MESSAGE = "SqsMessage"
    SETUP = "Setup"
    ANALYSIS = "Analysis"
    EXPORT = "Export"


class PipelineUpdate(BaseModel):
    """
    Partial update of a pipeline record.

    Every field must be passed explicitly. ``None`` means the value is unknown
    at this point and leaves the tracker's stored value untouched.
    """

    model_config = ConfigDict(frozen=True)

    state_machine_id: UUID
    state: Optional[PipelineState] = Field(...)
    fargate_task_arn: Optional[str] = Field(...)
    s3_bucket: Optional[str] = Field(...)

    def to_payload(self) -> Dict[str, Any]:
        """Serialize the update, omitting fields marked unknown."""
        return self.model_dump(mode="json", exclude_none=True)


__all__ = ["PipelineState", "PipelineUpdate"]
