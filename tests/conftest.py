"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

EXECUTION_NAME = "3f2c6a1e-8d4b-4c2a-9e1f-5b7d0c9a2e41"


@pytest.fixture
def state_machine_context() -> dict:
    """Context object as delivered by Step Functions."""
    return {
        "Execution": {
            "Id": f"arn:aws:states:us-west-2:123456789012:execution:brokenspoke-analyzer:{EXECUTION_NAME}",
            "Name": EXECUTION_NAME,
            "RoleArn": "arn:aws:iam::123456789012:role/bna-state-machine",
            "StartTime": "2026-10-18T09:30:00.000Z",
        },
        "State": {"EnteredTime": "2026-10-18T09:31:00.000Z", "Name": "Run Fargate"},
        "StateMachine": {
            "Id": "arn:aws:states:us-west-2:123456789012:stateMachine:brokenspoke-analyzer",
            "Name": "brokenspoke-analyzer",
        },
    }
