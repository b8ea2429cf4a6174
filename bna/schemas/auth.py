"""Schemas for service account authentication."""

from pydantic import BaseModel, Field, SecretStr


class Credential(BaseModel):
    """Bearer token issued to the service account for a single invocation."""

    access_token: SecretStr
    token_type: str = Field("Bearer")
    expires_in: int = Field(..., gt=0)

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token.get_secret_value()}"
