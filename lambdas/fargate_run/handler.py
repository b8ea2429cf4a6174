"""
AWS Lambda entrypoint for dispatching an analysis run.
"""

from __future__ import annotations

import asyncio
import atexit
from functools import lru_cache
from typing import Any, Dict

from pydantic import ValidationError

from bna.clients import AWSConfigResolver, ECSClient, PipelineClient, ServiceAccountClient
from bna.core.config import get_settings
from bna.core.errors import BNAError, InvalidParametersError, ReportError
from bna.core.logging import LoggingContext
from bna.schemas import TaskInput
from bna.services import FargateRunService, JobSpecBuilder


@lru_cache()
def _bootstrap() -> Dict[str, Any]:
    """Initialize the logging context and service once per Lambda runtime."""
    settings = get_settings()
    logging_context = LoggingContext(settings.log_level)
    atexit.register(logging_context.close)

    service = FargateRunService(
        identity_client=ServiceAccountClient(settings.identity),
        config_resolver=AWSConfigResolver(settings.aws),
        job_spec_builder=JobSpecBuilder(
            container_name=settings.container.container_name,
            verbosity_flag=settings.container.verbosity_flag,
        ),
        ecs_client=ECSClient(settings.aws),
        pipeline_client=PipelineClient(settings.pipeline),
        lookups=settings.lookups,
        logger=logging_context.get_logger("fargate_run"),
    )
    return {"service": service, "logging": logging_context}


def _parse_event(event: Dict[str, Any]) -> TaskInput:
    try:
        return TaskInput.model_validate(event)
    except ValidationError as exc:
        raise InvalidParametersError(f"Invalid task input: {exc}") from exc


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    AWS Lambda handler invoked by the state machine.

    Failures are re-raised so the state machine records a failed step and
    applies its own retry policy.
    """
    runtime = _bootstrap()
    service: FargateRunService = runtime["service"]
    logger = runtime["logging"].get_logger("handler")

    try:
        task_input = _parse_event(event)
        output = asyncio.run(service.run(task_input))
    except ReportError as exc:
        if exc.handle is not None:
            logger.error(
                "Task launched but pipeline update failed: %s",
                exc,
                extra={"task_arn": exc.handle.task_arn},
            )
        else:
            logger.error("Pipeline update failed: %s", exc)
        raise
    except BNAError as exc:
        logger.error("Analysis dispatch failed (%s): %s", type(exc).__name__, exc)
        raise

    return output.model_dump(mode="json", by_alias=True)


__all__ = ["lambda_handler"]
