"""Service layer exports."""

from .fargate_run import FargateRunService, ResolvedConfig
from .job_spec import JobSpecBuilder, rewrite_database_host

__all__ = [
    "FargateRunService",
    "JobSpecBuilder",
    "ResolvedConfig",
    "rewrite_database_host",
]
