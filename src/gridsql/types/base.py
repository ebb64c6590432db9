"""Base model class for all gridsql models with serialization support."""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class GridBaseModel(BaseModel):
    """Base model for all gridsql value objects with built-in serialization.

    Provides common functionality for all gridsql models including:
    - Serialization to dictionary via to_dict()
    - Consistent configuration
    - Proper handling of nested models

    Enum members are kept as members on the model (``use_enum_values`` is
    off) so callers can compare with ``is``; ``to_dict`` flattens them.
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary for serialization.

        Recursively converts nested GridBaseModel instances to dictionaries.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        data = self.model_dump(by_alias=False, exclude_none=True)

        def convert_nested(obj):
            if isinstance(obj, GridBaseModel):
                return obj.to_dict()
            elif isinstance(obj, dict):
                return {k: convert_nested(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [convert_nested(item) for item in obj]
            elif isinstance(obj, Enum):
                return obj.value
            return obj

        return convert_nested(data)
