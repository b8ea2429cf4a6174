"""Expose constructed client wrappers."""

from .aws_config import AWSConfigResolver, split_list_parameter
from .ecs import ECSClient, FARGATE_TASK_COUNT
from .identity import ServiceAccountClient
from .pipeline import PipelineClient

__all__ = [
    "AWSConfigResolver",
    "ECSClient",
    "FARGATE_TASK_COUNT",
    "PipelineClient",
    "ServiceAccountClient",
    "split_list_parameter",
]
