"""Standardized error envelope schema."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body written for every caught failure."""

    error: str = Field(..., description="Machine-readable error code: prefix + code")
    details: Any | None = Field(None, description="Client-safe details, omitted when empty")


class FieldFailure(BaseModel):
    """The first field that failed validation, in wire (camelCase) form."""

    invalidField: str
    invalidValue: Any = None
