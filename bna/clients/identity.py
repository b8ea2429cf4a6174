"""
Service account authentication against the Cognito token endpoint.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from bna.core.config import IdentitySettings
from bna.core.errors import AuthError
from bna.schemas.auth import Credential

logger = logging.getLogger(__name__)


class ServiceAccountClient:
    """Exchange the service account's client credentials for a bearer token."""

    def __init__(
        self,
        settings: IdentitySettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def authenticate(self) -> Credential:
        """Request a fresh access token using the client credentials grant."""
        auth = httpx.BasicAuth(
            self._settings.client_id,
            self._settings.client_secret.get_secret_value(),
        )
        payload = {
            "grant_type": "client_credentials",
            "client_id": self._settings.client_id,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(str(self._settings.token_url), data=payload, auth=auth)
        except httpx.HTTPError as exc:
            raise AuthError(f"Identity endpoint unreachable: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise AuthError(
                f"Identity endpoint rejected the service account (HTTP {response.status_code})."
            )

        try:
            credential = Credential.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AuthError("Incomplete token payload returned by the identity endpoint.") from exc

        logger.info(
            "Authenticated service account",
            extra={"client_id": self._settings.client_id, "expires_in": credential.expires_in},
        )
        return credential


__all__ = ["ServiceAccountClient"]
