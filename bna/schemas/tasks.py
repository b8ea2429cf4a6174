"""
Pydantic models for the ECS task launched for an analysis run.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class JobSpec(BaseModel):
    """Container invocation: command line and environment overrides."""

    model_config = ConfigDict(frozen=True)

    container_name: str = Field(..., min_length=1)
    command: List[str] = Field(..., description="Arguments passed to the container.")
    environment: Dict[str, str] = Field(default_factory=dict)


class NetworkConfig(BaseModel):
    """VPC placement of the task. Public IP assignment is always enabled."""

    model_config = ConfigDict(frozen=True)

    subnets: List[str] = Field(..., min_length=1)
    security_groups: List[str] = Field(..., min_length=1)


class TaskHandle(BaseModel):
    """Reference to a launched task."""

    model_config = ConfigDict(frozen=True)

    cluster_arn: str
    task_arn: str
    last_status: str


class TaskOutput(BaseModel):
    """Response returned to the state machine once the task is running."""

    model_config = ConfigDict(populate_by_name=True)

    cluster_arn: str = Field(..., alias="clusterRef")
    task_arn: str = Field(..., alias="taskRef")
    last_status: str = Field(..., alias="lastStatus")
    context: Dict[str, Any]

    @classmethod
    def from_handle(cls, handle: TaskHandle, context: Dict[str, Any]) -> "TaskOutput":
        return cls(
            cluster_arn=handle.cluster_arn,
            task_arn=handle.task_arn,
            last_status=handle.last_status,
            context=context,
        )


__all__ = ["JobSpec", "NetworkConfig", "TaskHandle", "TaskOutput"]
