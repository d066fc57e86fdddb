"""Shared response envelope and base model conventions."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire; either form accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Uniform envelope for every response: {statusCode, message, data}."""

    status_code: int = Field(default=200, description="HTTP status code")
    message: str = Field(description="Short human-readable message")
    data: T | None = None


class ValidationIssue(BaseModel):
    path: str
    message: str


class ValidationErrorData(BaseModel):
    errors: list[ValidationIssue]
