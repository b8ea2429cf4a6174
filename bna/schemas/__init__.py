"""Public schema exports."""

from .analysis import AnalysisParameters, Setup, TaskInput, execution_ids
from .auth import Credential
from .pipeline import PipelineState, PipelineUpdate
from .tasks import JobSpec, NetworkConfig, TaskHandle, TaskOutput

__all__ = [
    "AnalysisParameters",
    "Credential",
    "JobSpec",
    "NetworkConfig",
    "PipelineState",
    "PipelineUpdate",
    "Setup",
    "TaskHandle",
    "TaskInput",
    "TaskOutput",
    "execution_ids",
]
