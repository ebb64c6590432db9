from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import GridBaseSettings
from .query import QuerySettings
from .transport import TransportSettings


class _Settings(GridBaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GRIDSQL_",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    transport: TransportSettings = Field(
        default_factory=TransportSettings,
        description="HTTP transport configuration"
    )
    query: QuerySettings = Field(
        default_factory=QuerySettings,
        description="Query construction and paging configuration"
    )

    log_level: str = Field(
        default="INFO",
        description="Base log level passed to setup_logging"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


# Singleton instance
_settings: Optional[_Settings] = None


def get_settings(force_reload: bool = False) -> _Settings:
    """Get the singleton settings instance for the application.

    The settings are loaded from environment variables (and an optional
    ``.env`` file) on first access. Components accept an explicit settings
    object, so this accessor is only the default.

    Args:
        force_reload: If True, creates a new Settings instance even if
                     one already exists. Useful for testing or when
                     environment variables have changed.

    Returns:
        Settings: The singleton Settings instance

    Example:
        ```python
        settings = get_settings()
        settings.query.max_page_size
        ```
    """
    global _settings

    if _settings is None or force_reload:
        _settings = _Settings()

    return _settings


def _reload_settings() -> _Settings:
    """Force reload of settings.

    This is primarily for testing purposes where you need to reset
    the singleton instance.

    Returns:
        A fresh _Settings instance
    """
    global _settings
    _settings = None
    return get_settings(force_reload=True)
