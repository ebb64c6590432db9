"""Connection targets and credentials."""

from typing import Optional

from pydantic import ConfigDict, Field, SecretStr, field_validator

from gridsql.types.base import GridBaseModel


class ServerSpec(GridBaseModel):
    """Where an IRIS server's REST API lives.

    ``path_prefix`` falls back to ``settings.transport.default_path_prefix``
    when left empty.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    host: str
    port: int = Field(default=52773, gt=0, le=65535)
    scheme: str = "http"
    path_prefix: Optional[str] = None

    @field_validator("scheme")
    @classmethod
    def validate_scheme(cls, v: str) -> str:
        scheme = v.strip().lower()
        if scheme not in ("http", "https"):
            raise ValueError(f"Unsupported scheme: {v}")
        return scheme

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Host cannot be empty")
        return v.strip()


class Credentials(GridBaseModel):
    """Username and password for HTTP Basic authentication."""
    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr
