from pydantic import Field, field_validator, model_validator
from pydantic_settings import SettingsConfigDict

from gridsql.constants import DEFAULT_SCHEMA, IDENTIFIER_PATTERN
from .base import GridBaseSettings


class QuerySettings(GridBaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GRIDSQL_QUERY_",
        case_sensitive=False,
        extra="ignore",
    )

    default_schema: str = Field(
        default=DEFAULT_SCHEMA,
        pattern=IDENTIFIER_PATTERN,
        description="Schema assumed for table names given without a schema qualifier"
    )

    default_page_size: int = Field(
        default=50,
        ge=1,
        description="Rows per page when the caller does not choose one"
    )

    max_page_size: int = Field(
        default=10000,
        ge=1,
        description="Largest page size accepted by fetch_page"
    )

    export_chunk_size: int = Field(
        default=500,
        ge=1,
        description="Rows fetched per round trip while exporting all matching rows"
    )

    @field_validator("default_schema")
    @classmethod
    def validate_default_schema(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Default schema cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_page_sizes(self) -> "QuerySettings":
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) cannot exceed "
                f"max_page_size ({self.max_page_size})"
            )
        if self.export_chunk_size > self.max_page_size:
            raise ValueError(
                f"export_chunk_size ({self.export_chunk_size}) cannot exceed "
                f"max_page_size ({self.max_page_size})"
            )
        return self
