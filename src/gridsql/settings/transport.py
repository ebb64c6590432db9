from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import GridBaseSettings


class TransportSettings(GridBaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GRIDSQL_TRANSPORT_",
        case_sensitive=False,
        extra="ignore",
    )

    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=3600,
        description="Per-request timeout for calls to the SQL endpoint. "
                    "A request exceeding it fails with TIMEOUT_ERROR."
    )

    default_path_prefix: str = Field(
        default="/api/atelier/",
        description="URL path prefix of the REST API, used when a server "
                    "definition does not carry its own"
    )

    verify_tls: bool = Field(
        default=True,
        description="Verify server certificates on https connections"
    )

    @field_validator("default_path_prefix")
    @classmethod
    def validate_path_prefix(cls, v: str) -> str:
        """Normalize the prefix to start and end with a slash."""
        v = v.strip()
        if not v.startswith("/"):
            v = "/" + v
        if not v.endswith("/"):
            v = v + "/"
        return v
