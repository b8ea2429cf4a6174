try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import io
from uuid import UUID

import pytest

from bna.core.config import LookupSettings
from bna.core.errors import (
    AuthError,
    ConfigNotFoundError,
    EmptyResultError,
    InvalidParametersError,
    ReportError,
)
from bna.core.logging import LoggingContext
from bna.schemas import Credential, PipelineState, TaskHandle, TaskInput
from bna.services import FargateRunService, JobSpecBuilder

EXECUTION_ID = UUID("3f2c6a1e-8d4b-4c2a-9e1f-5b7d0c9a2e41")
CLUSTER_ARN = "arn:aws:ecs:us-west-2:123456789012:cluster/bna"
TASK_ARN = "arn:aws:ecs:us-west-2:123456789012:task/bna/0a1b2c3d4e5f"


class StubIdentityClient:
    def __init__(self, error: Exception | None = None) -> None:
        self._error = error
        self.calls = 0

    async def authenticate(self) -> Credential:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return Credential(access_token="token", expires_in=3600)


class StubConfigResolver:
    def __init__(self, missing: str | None = None) -> None:
        self._missing = missing
        self._secrets = {"DATABASE_URL": "postgres://u:p@shared-host:5432/db"}
        self._parameters = {
            "BNA_CLUSTER_ARN": CLUSTER_ARN,
            "PRIVATE_SUBNETS": "subnet-a,subnet-b",
            "BNA_TASK_SECURITY_GROUP": "sg-1",
            "BNA_TASK_DEFINITION": "bna-analyzer:12",
            "BNA_BUCKET": "bna-bucket",
        }
        self.requested: list[str] = []

    def get_secret(self, name: str, key: str | None = None) -> str:
        self.requested.append(name)
        if name == self._missing:
            raise ConfigNotFoundError(name)
        return self._secrets[name]

    def get_parameter(self, name: str) -> str:
        self.requested.append(name)
        if name == self._missing:
            raise ConfigNotFoundError(name)
        return self._parameters[name]


class StubECSClient:
    def __init__(self, error: Exception | None = None) -> None:
        self._error = error
        self.calls: list[dict] = []

    def run_task(self, spec, *, cluster, network, task_definition) -> TaskHandle:
        self.calls.append(
            {
                "spec": spec,
                "cluster": cluster,
                "network": network,
                "task_definition": task_definition,
            }
        )
        if self._error is not None:
            raise self._error
        return TaskHandle(cluster_arn=cluster, task_arn=TASK_ARN, last_status="PROVISIONING")


class StubPipelineClient:
    def __init__(self, fail_on_call: int | None = None) -> None:
        self._fail_on_call = fail_on_call
        self.reports: list[tuple[UUID, object]] = []

    async def report(self, execution_id, update, *, credential) -> None:
        self.reports.append((execution_id, update))
        if self._fail_on_call == len(self.reports):
            raise ReportError("tracker unavailable")


def _service(
    *,
    identity=None,
    resolver=None,
    ecs=None,
    pipeline=None,
    logger=None,
) -> FargateRunService:
    return FargateRunService(
        identity_client=identity or StubIdentityClient(),
        config_resolver=resolver or StubConfigResolver(),
        job_spec_builder=JobSpecBuilder(container_name="brokenspoke-analyzer"),
        ecs_client=ecs or StubECSClient(),
        pipeline_client=pipeline or StubPipelineClient(),
        lookups=LookupSettings(),
        logger=logger,
    )


def _task_input(context: dict, **parameters) -> TaskInput:
    return TaskInput.model_validate(
        {
            "analysisParameters": {"country": "us", "city": "bna", **parameters},
            "setup": {"computeEndpointHost": "ep-1.example"},
            "context": context,
        }
    )


@pytest.mark.asyncio
async def test_run_dispatches_task_and_reports_twice(state_machine_context: dict) -> None:
    resolver = StubConfigResolver()
    ecs = StubECSClient()
    pipeline = StubPipelineClient()
    service = _service(resolver=resolver, ecs=ecs, pipeline=pipeline)

    output = await service.run(_task_input(state_machine_context))

    (call,) = ecs.calls
    spec = call["spec"]
    assert spec.command == [
        "-vv",
        "run",
        "--with-export",
        "s3",
        "--s3-bucket",
        "bna-bucket",
        "us",
        "bna",
    ]
    assert spec.environment == {"DATABASE_URL": "postgres://u:p@ep-1.example:5432/db"}
    assert call["cluster"] == CLUSTER_ARN
    assert call["task_definition"] == "bna-analyzer:12"
    assert list(call["network"].subnets) == ["subnet-a", "subnet-b"]
    assert list(call["network"].security_groups) == ["sg-1"]
    assert sorted(resolver.requested) == sorted(
        [
            "DATABASE_URL",
            "BNA_CLUSTER_ARN",
            "PRIVATE_SUBNETS",
            "BNA_TASK_SECURITY_GROUP",
            "BNA_TASK_DEFINITION",
            "BNA_BUCKET",
        ]
    )

    assert len(pipeline.reports) == 2
    (first_id, first), (last_id, last) = pipeline.reports
    assert first_id == last_id == EXECUTION_ID
    assert first.state is PipelineState.PIPELINE
    assert first.fargate_task_arn is None
    assert last.state is PipelineState.ANALYSIS
    assert last.fargate_task_arn == TASK_ARN
    assert last.s3_bucket == "bna-bucket"

    assert output.cluster_arn == CLUSTER_ARN
    assert output.task_arn == TASK_ARN
    assert output.last_status == "PROVISIONING"
    assert output.context == state_machine_context


@pytest.mark.asyncio
async def test_run_passes_region_and_fips_code(state_machine_context: dict) -> None:
    ecs = StubECSClient()
    service = _service(ecs=ecs)

    await service.run(_task_input(state_machine_context, region="tennessee", fipsCode="4752006"))

    assert ecs.calls[0]["spec"].command[-2:] == ["tennessee", "4752006"]


@pytest.mark.asyncio
async def test_authentication_failure_stops_before_reporting(state_machine_context: dict) -> None:
    pipeline = StubPipelineClient()
    ecs = StubECSClient()
    service = _service(identity=StubIdentityClient(error=AuthError("denied")), ecs=ecs, pipeline=pipeline)

    with pytest.raises(AuthError):
        await service.run(_task_input(state_machine_context))

    assert pipeline.reports == []
    assert ecs.calls == []


@pytest.mark.asyncio
async def test_pre_dispatch_report_failure_prevents_dispatch(state_machine_context: dict) -> None:
    ecs = StubECSClient()
    service = _service(ecs=ecs, pipeline=StubPipelineClient(fail_on_call=1))

    with pytest.raises(ReportError) as excinfo:
        await service.run(_task_input(state_machine_context))

    assert excinfo.value.handle is None
    assert ecs.calls == []


@pytest.mark.asyncio
async def test_missing_configuration_aborts_run(state_machine_context: dict) -> None:
    ecs = StubECSClient()
    service = _service(resolver=StubConfigResolver(missing="BNA_BUCKET"), ecs=ecs)

    with pytest.raises(ConfigNotFoundError):
        await service.run(_task_input(state_machine_context))

    assert ecs.calls == []


@pytest.mark.asyncio
async def test_unpaired_region_is_rejected_before_dispatch(state_machine_context: dict) -> None:
    ecs = StubECSClient()
    service = _service(ecs=ecs)

    with pytest.raises(InvalidParametersError):
        await service.run(_task_input(state_machine_context, region="tennessee"))

    assert ecs.calls == []


@pytest.mark.asyncio
async def test_empty_dispatch_result_skips_final_report(state_machine_context: dict) -> None:
    pipeline = StubPipelineClient()
    service = _service(ecs=StubECSClient(error=EmptyResultError("no task")), pipeline=pipeline)

    with pytest.raises(EmptyResultError):
        await service.run(_task_input(state_machine_context))

    assert [update.state for _, update in pipeline.reports] == [PipelineState.PIPELINE]


@pytest.mark.asyncio
async def test_report_failure_after_dispatch_carries_task_handle(
    state_machine_context: dict,
) -> None:
    ecs = StubECSClient()
    service = _service(ecs=ecs, pipeline=StubPipelineClient(fail_on_call=2))

    with pytest.raises(ReportError) as excinfo:
        await service.run(_task_input(state_machine_context))

    assert len(ecs.calls) == 1
    assert excinfo.value.handle is not None
    assert excinfo.value.handle.task_arn == TASK_ARN


@pytest.mark.asyncio
async def test_malformed_context_is_rejected(state_machine_context: dict) -> None:
    state_machine_context["Execution"]["Id"] = "not-an-arn"
    pipeline = StubPipelineClient()
    service = _service(pipeline=pipeline)

    with pytest.raises(InvalidParametersError):
        await service.run(_task_input(state_machine_context))

    assert pipeline.reports == []


@pytest.mark.asyncio
async def test_stale_tracker_log_names_the_running_task(state_machine_context: dict) -> None:
    stream = io.StringIO()
    with LoggingContext("INFO", stream=stream) as logging_context:
        service = _service(
            pipeline=StubPipelineClient(fail_on_call=2),
            logger=logging_context.get_logger("fargate_run"),
        )

        with pytest.raises(ReportError):
            await service.run(_task_input(state_machine_context))

    stale_lines = [line for line in stream.getvalue().splitlines() if "stale" in line]
    assert len(stale_lines) == 1
    assert stale_lines[0].startswith("ERROR | bna.fargate_run |")
    assert TASK_ARN in stale_lines[0]
    assert str(EXECUTION_ID) in stale_lines[0]
