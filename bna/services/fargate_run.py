"""
Dispatch one analyzer task for a state machine execution and keep the pipeline
tracker in sync with what was launched.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from bna.clients.aws_config import AWSConfigResolver, split_list_parameter
from bna.clients.ecs import ECSClient
from bna.clients.identity import ServiceAccountClient
from bna.clients.pipeline import PipelineClient
from bna.core.config import LookupSettings
from bna.core.errors import ReportError
from bna.schemas.analysis import TaskInput, execution_ids
from bna.schemas.auth import Credential
from bna.schemas.pipeline import PipelineState, PipelineUpdate
from bna.schemas.tasks import NetworkConfig, TaskHandle, TaskOutput
from bna.services.job_spec import JobSpecBuilder, rewrite_database_host


@dataclass(frozen=True)
class ResolvedConfig:
    """Values looked up for a single run."""

    database_url: str
    cluster_arn: str
    subnets: str
    security_groups: str
    task_definition: str
    bucket: str


class FargateRunService:
    """Sequence authentication, configuration, dispatch and pipeline reporting."""

    def __init__(
        self,
        *,
        identity_client: ServiceAccountClient,
        config_resolver: AWSConfigResolver,
        job_spec_builder: JobSpecBuilder,
        ecs_client: ECSClient,
        pipeline_client: PipelineClient,
        lookups: LookupSettings,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._identity = identity_client
        self._resolver = config_resolver
        self._builder = job_spec_builder
        self._ecs = ecs_client
        self._pipeline = pipeline_client
        self._lookups = lookups
        self._logger = logger or logging.getLogger(__name__)

    async def run(self, task_input: TaskInput) -> TaskOutput:
        """Launch the analyzer for ``task_input`` and return the task reference."""
        credential = await self._identity.authenticate()
        execution_id, state_machine_name = execution_ids(task_input.context)
        log_extra = {"execution_id": str(execution_id), "state_machine": state_machine_name}

        await self._pipeline.report(
            execution_id,
            PipelineUpdate(
                state_machine_id=execution_id,
                state=PipelineState.PIPELINE,
                fargate_task_arn=None,
                s3_bucket=None,
            ),
            credential=credential,
        )

        config = await self._resolve_config()
        self._logger.info("Resolved run configuration", extra=log_extra)

        database_url = rewrite_database_host(
            config.database_url, task_input.setup.compute_endpoint_host
        )
        spec = self._builder.build(
            task_input.analysis_parameters,
            config.bucket,
            environment={"DATABASE_URL": database_url},
        )
        network = NetworkConfig(
            subnets=split_list_parameter(config.subnets),
            security_groups=split_list_parameter(config.security_groups),
        )

        handle = await asyncio.to_thread(
            self._ecs.run_task,
            spec,
            cluster=config.cluster_arn,
            network=network,
            task_definition=config.task_definition,
        )
        self._logger.info(
            "Dispatched analyzer task",
            extra={**log_extra, "task_arn": handle.task_arn},
        )

        await self._report_dispatched(execution_id, handle, config.bucket, credential)
        return TaskOutput.from_handle(handle, task_input.context)

    async def _resolve_config(self) -> ResolvedConfig:
        """Issue the six independent lookups concurrently."""
        lookups = self._lookups
        values = await asyncio.gather(
            asyncio.to_thread(
                self._resolver.get_secret,
                lookups.database_url_secret,
                lookups.database_url_secret_key,
            ),
            asyncio.to_thread(self._resolver.get_parameter, lookups.cluster_parameter),
            asyncio.to_thread(self._resolver.get_parameter, lookups.subnets_parameter),
            asyncio.to_thread(self._resolver.get_parameter, lookups.security_groups_parameter),
            asyncio.to_thread(self._resolver.get_parameter, lookups.task_definition_parameter),
            asyncio.to_thread(self._resolver.get_parameter, lookups.bucket_parameter),
        )
        return ResolvedConfig(*values)

    async def _report_dispatched(
        self,
        execution_id: UUID,
        handle: TaskHandle,
        bucket: str,
        credential: Credential,
    ) -> None:
        update = PipelineUpdate(
            state_machine_id=execution_id,
            state=PipelineState.ANALYSIS,
            fargate_task_arn=handle.task_arn,
            s3_bucket=bucket,
        )
        try:
            await self._pipeline.report(execution_id, update, credential=credential)
        except ReportError as exc:
            self._logger.error(
                "Analyzer task %s is running but the pipeline tracker is stale for execution %s: %s",
                handle.task_arn,
                execution_id,
                exc,
                extra={"execution_id": str(execution_id), "task_arn": handle.task_arn},
            )
            raise ReportError(str(exc), handle=handle) from exc


__all__ = ["FargateRunService", "ResolvedConfig"]
