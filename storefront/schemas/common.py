"""Common/shared schemas."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional


class CamelModel(BaseModel):
    """Accepts and emits camelCase while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    code: str
    missing: Optional[List[str]] = None
    errors: Optional[List[Any]] = None
