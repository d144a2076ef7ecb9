"""
schemas/common.py

- Shared schemas used across the project
- Pydantic v2
- Contents:
  1) API base model: camelCase on the wire, snake_case in Python
  2) Error response standard: ErrorDetail, ErrorResponse
  3) Success envelope: ok()
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


# =========================================================
# 1) API base model
# =========================================================

class ApiModel(BaseModel):
    """
    Base for every request/response DTO
    - bodies arrive as camelCase ("courseId"), snake_case is accepted too
    - can be built straight from ORM rows and query rows
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =========================================================
# 2) Error response standard
# =========================================================

class ErrorDetail(BaseModel):
    code: str = Field(..., description="error code (e.g. NOT_FOUND, UNAUTHORIZED, INVALID_INPUT)")
    message: str = Field(..., description="human readable message")


class ErrorResponse(BaseModel):
    """
    Body returned by the global error handlers (middlewares/error_handler.py)
    """
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="response time (UTC)"
    )
    latency_ms: Optional[int] = Field(default=None, ge=0)
    trace_id: Optional[str] = Field(
        default=None, description="copied from X-Request-ID when the client sends one"
    )

    model_config = ConfigDict(extra="ignore")


# =========================================================
# 3) Success envelope
# =========================================================

def ok(data, message: Optional[str] = None) -> dict:
    """Builds the success envelope as a plain dict (FastAPI serializes nested models by alias)."""
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body
