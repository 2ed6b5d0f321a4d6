"""Common Pydantic schemas."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


def reject_null(value: Any) -> Any:
    """Refuse an explicit null for a partial-update field whose column is NOT NULL."""
    if value is None:
        raise ValueError("may be omitted but not set to null")
    return value


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="JSON path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    code: Optional[str] = Field(None, description="Application-specific error code")
    retryable: Optional[bool] = Field(None, description="Whether the operation can be retried")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


class PageRequest(BaseModel):
    """Limit/offset pagination parameters."""

    limit: int = Field(20, ge=1, le=100, description="Results per page")
    offset: int = Field(0, ge=0, description="Number of results to skip")


class PageInfo(BaseModel):
    """Pagination metadata returned with list responses."""

    total: int = Field(..., ge=0, description="Total matching results")
    limit: int = Field(..., description="Results per page")
    offset: int = Field(..., description="Results skipped")
