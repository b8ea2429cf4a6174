"""
Client for the BNA pipeline tracking API.
"""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

import httpx

from bna.core.config import PipelineSettings
from bna.core.errors import ReportError
from bna.schemas.auth import Credential
from bna.schemas.pipeline import PipelineUpdate

logger = logging.getLogger(__name__)


class PipelineClient:
    """Push lifecycle updates for a state machine execution to the tracker."""

    def __init__(
        self,
        settings: PipelineSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _pipeline_url(self, execution_id: UUID) -> str:
        return f"{str(self._settings.api_url).rstrip('/')}/{execution_id}"

    async def report(
        self,
        execution_id: UUID,
        update: PipelineUpdate,
        *,
        credential: Credential,
    ) -> None:
        """PATCH the pipeline record identified by ``execution_id``."""
        url = self._pipeline_url(execution_id)
        headers = {"Authorization": credential.authorization_header}

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.patch(url, json=update.to_payload(), headers=headers)
        except httpx.HTTPError as exc:
            raise ReportError(f"Pipeline API unreachable: {exc}") from exc

        if response.is_error:
            raise ReportError(
                f"Pipeline API rejected the update (HTTP {response.status_code}): {response.text}"
            )

        logger.info(
            "Updated pipeline",
            extra={
                "execution_id": str(execution_id),
                "state": update.state.value if update.state else None,
            },
        )


__all__ = ["PipelineClient"]
