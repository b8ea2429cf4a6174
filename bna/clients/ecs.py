"""
Amazon ECS client wrapper for launching analyzer tasks on Fargate.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from bna.core.config import AWSSettings
from bna.core.errors import DispatchError, EmptyResultError
from bna.schemas.tasks import JobSpec, NetworkConfig, TaskHandle

logger = logging.getLogger(__name__)

# One analysis run per request.
FARGATE_TASK_COUNT = 1


class ECSClient:
    """Submit analyzer jobs to an ECS cluster."""

    def __init__(self, settings: AWSSettings, *, client: Any = None) -> None:
        self._settings = settings
        self._client = client or boto3.client("ecs", region_name=settings.region_name)

    def run_task(
        self,
        spec: JobSpec,
        *,
        cluster: str,
        network: NetworkConfig,
        task_definition: str,
    ) -> TaskHandle:
        """
        Launch a single Fargate task running ``spec``.

        The call is not idempotent: every successful call starts billable
        compute.
        """
        try:
            response = self._client.run_task(
                cluster=cluster,
                count=FARGATE_TASK_COUNT,
                launchType="FARGATE",
                networkConfiguration=_network_configuration(network),
                overrides=_task_overrides(spec),
                taskDefinition=task_definition,
            )
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "ClientError")
            raise DispatchError(f"ECS RunTask failed ({code}): {exc}") from exc
        except BotoCoreError as exc:
            raise DispatchError(f"ECS RunTask failed: {exc}") from exc

        tasks: List[Dict[str, Any]] = response.get("tasks") or []
        if not tasks:
            failures = response.get("failures") or []
            reasons = ", ".join(str(failure.get("reason")) for failure in failures) or "no reason given"
            raise EmptyResultError(f"ECS RunTask started no task: {reasons}", failures=failures)

        task = tasks[0]
        try:
            handle = TaskHandle(
                cluster_arn=task["clusterArn"],
                task_arn=task["taskArn"],
                last_status=task["lastStatus"],
            )
        except KeyError as exc:
            raise DispatchError(f"ECS task description is missing {exc.args[0]!r}.") from exc

        logger.info(
            "Launched analyzer task",
            extra={"task_arn": handle.task_arn, "last_status": handle.last_status},
        )
        return handle


def _network_configuration(network: NetworkConfig) -> Dict[str, Any]:
    return {
        "awsvpcConfiguration": {
            "subnets": list(network.subnets),
            "securityGroups": list(network.security_groups),
            "assignPublicIp": "ENABLED",
        }
    }


def _task_overrides(spec: JobSpec) -> Dict[str, Any]:
    return {
        "containerOverrides": [
            {
                "name": spec.container_name,
                "command": list(spec.command),
                "environment": [
                    {"name": name, "value": value} for name, value in spec.environment.items()
                ],
            }
        ]
    }


__all__ = ["ECSClient", "FARGATE_TASK_COUNT"]
