"""Response models for the REST client."""

import math
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

# Recursive JSON value as decoded from a response body
JSONValue = Union[Dict[str, "JSONValue"], List["JSONValue"], str, int, float, bool, None]

LIMIT_HEADER = "X-RateLimit-Limit"
REMAINING_HEADER = "X-RateLimit-Remaining"
RESET_AFTER_HEADER = "X-RateLimit-Reset-After"
BUCKET_HEADER = "X-RateLimit-Bucket"


class FieldError(BaseModel):
    """One leaf entry of a per-field error list."""

    code: Any
    message: Any


class ErrorEnvelope(BaseModel):
    """Structured error body returned with non-success statuses."""

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "code": 50035,
                "message": "Invalid Form Body",
                "errors": {"content": {"_errors": [{"code": "BASE_TYPE_REQUIRED", "message": "This field is required"}]}},
            }
        },
    )

    code: Any
    message: str
    errors: Optional[Dict[str, Any]] = None


class RateLimitHeaders(BaseModel):
    """Rate-limit fields carried by a response."""

    limit: Optional[int] = None
    remaining: int = Field(ge=0)
    reset_after: float = Field(ge=0, allow_inf_nan=False)
    bucket: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> Optional["RateLimitHeaders"]:
        """Parse the rate-limit headers, or None when absent or malformed."""
        remaining = headers.get(REMAINING_HEADER)
        reset_after = headers.get(RESET_AFTER_HEADER)
        if remaining is None or reset_after is None:
            return None
        try:
            remaining_value = float(remaining)
            if not math.isfinite(remaining_value):
                return None
            return cls(
                limit=headers.get(LIMIT_HEADER),
                remaining=max(int(remaining_value), 0),
                reset_after=reset_after,
                bucket=headers.get(BUCKET_HEADER),
            )
        except (ValidationError, ValueError, OverflowError):
            return None
