"""
Secrets Manager and SSM Parameter Store lookups.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from bna.core.config import AWSSettings
from bna.core.errors import ConfigNotFoundError, ConfigUnavailableError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"ResourceNotFoundException", "ParameterNotFound"})


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "ClientError")


def split_list_parameter(value: str) -> List[str]:
    """Split an SSM ``StringList`` value into its items."""
    return [item.strip() for item in value.split(",") if item.strip()]


class AWSConfigResolver:
    """Resolve named secrets and parameters. Values are never cached or logged."""

    def __init__(
        self,
        settings: AWSSettings,
        *,
        secrets_client: Any = None,
        ssm_client: Any = None,
    ) -> None:
        self._settings = settings
        self._secrets = secrets_client or boto3.client(
            "secretsmanager", region_name=settings.region_name
        )
        self._ssm = ssm_client or boto3.client("ssm", region_name=settings.region_name)

    def get_secret(self, name: str, key: Optional[str] = None) -> str:
        """
        Fetch a secret string.

        When ``key`` is given the secret is a JSON object and the value stored
        under ``key`` is returned.
        """
        try:
            response = self._secrets.get_secret_value(SecretId=name)
        except ClientError as exc:
            code = _error_code(exc)
            if code in _NOT_FOUND_CODES:
                raise ConfigNotFoundError(name) from exc
            raise ConfigUnavailableError(name, f"Secret {name!r} unavailable ({code}).") from exc
        except BotoCoreError as exc:
            raise ConfigUnavailableError(name) from exc

        secret = response.get("SecretString")
        if secret is None:
            raise ConfigNotFoundError(name, f"Secret {name!r} has no string value.")
        logger.debug("Resolved secret", extra={"secret_name": name})

        if key is None:
            return secret
        try:
            document = json.loads(secret)
        except ValueError as exc:
            raise ConfigNotFoundError(name, f"Secret {name!r} is not a JSON object.") from exc
        value = document.get(key) if isinstance(document, dict) else None
        if not isinstance(value, str):
            raise ConfigNotFoundError(name, f"Secret {name!r} has no key {key!r}.")
        return value

    def get_parameter(self, name: str) -> str:
        """Fetch a parameter value, decrypting ``SecureString`` parameters."""
        try:
            response = self._ssm.get_parameter(Name=name, WithDecryption=True)
        except ClientError as exc:
            code = _error_code(exc)
            if code in _NOT_FOUND_CODES:
                raise ConfigNotFoundError(name) from exc
            raise ConfigUnavailableError(
                name, f"Parameter {name!r} unavailable ({code})."
            ) from exc
        except BotoCoreError as exc:
            raise ConfigUnavailableError(name) from exc

        value = response.get("Parameter", {}).get("Value")
        if value is None:
            raise ConfigNotFoundError(name, f"Parameter {name!r} has no value.")
        logger.debug("Resolved parameter", extra={"parameter_name": name})
        return value


__all__ = ["AWSConfigResolver", "split_list_parameter"]
