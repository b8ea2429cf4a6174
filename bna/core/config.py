"""
Application configuration models and helpers.

Centralizes settings management so the Lambda entrypoint and the service layer
share a consistent configuration surface. Every settings group reads the
process environment first and falls back to a ``.env`` file in the working
directory.
"""

from functools import lru_cache

from pydantic import Field, HttpUrl, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class _EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


class AWSSettings(_EnvSettings):
    """Settings for AWS services used by the dispatcher."""

    region_name: str = Field("us-west-2", validation_alias="AWS_REGION")


class IdentitySettings(_EnvSettings):
    """Service account used to call the BNA pipeline API."""

    token_url: HttpUrl = Field(
        "https://peopleforbikes.auth.us-west-2.amazoncognito.com/oauth2/token",
        validation_alias="BNA_COGNITO_TOKEN_URL",
    )
    client_id: str = Field(..., validation_alias="BNA_COGNITO_CLIENT_ID")
    client_secret: SecretStr = Field(..., validation_alias="BNA_COGNITO_CLIENT_SECRET")
    timeout_seconds: float = Field(10.0, validation_alias="BNA_HTTP_TIMEOUT")


class PipelineSettings(_EnvSettings):
    """Location of the pipeline tracking API."""

    api_url: HttpUrl = Field(
        "https://api.peopleforbikes.xyz/bnas/analysis",
        validation_alias="BNA_PIPELINE_API_URL",
        description="Base URL; the execution id is appended per request.",
    )
    timeout_seconds: float = Field(10.0, validation_alias="BNA_HTTP_TIMEOUT")


class LookupSettings(_EnvSettings):
    """Logical names of the secrets and parameters resolved for every run."""

    database_url_secret: str = Field("DATABASE_URL", validation_alias="BNA_DATABASE_URL_SECRET")
    database_url_secret_key: str = Field(
        "DATABASE_URL",
        validation_alias="BNA_DATABASE_URL_SECRET_KEY",
        description="Key inside the JSON secret string holding the connection URL.",
    )
    cluster_parameter: str = Field("BNA_CLUSTER_ARN", validation_alias="BNA_CLUSTER_PARAMETER")
    subnets_parameter: str = Field("PRIVATE_SUBNETS", validation_alias="BNA_SUBNETS_PARAMETER")
    security_groups_parameter: str = Field(
        "BNA_TASK_SECURITY_GROUP", validation_alias="BNA_SECURITY_GROUPS_PARAMETER"
    )
    task_definition_parameter: str = Field(
        "BNA_TASK_DEFINITION", validation_alias="BNA_TASK_DEFINITION_PARAMETER"
    )
    bucket_parameter: str = Field("BNA_BUCKET", validation_alias="BNA_BUCKET_PARAMETER")


class ContainerSettings(_EnvSettings):
    """Container invocation details for the analyzer task."""

    container_name: str = Field("brokenspoke-analyzer", validation_alias="BNA_CONTAINER_NAME")
    verbosity_flag: str = Field("-vv", validation_alias="BNA_VERBOSITY_FLAG")


class AppSettings(_EnvSettings):
    """Root settings object for the Fargate run Lambda."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    aws: AWSSettings = Field(default_factory=AWSSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    lookups: LookupSettings = Field(default_factory=LookupSettings)
    container: ContainerSettings = Field(default_factory=ContainerSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "AWSSettings",
    "ContainerSettings",
    "IdentitySettings",
    "LookupSettings",
    "PipelineSettings",
    "get_settings",
]
