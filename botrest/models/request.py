"""Request models for the REST client."""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

# Snowflake-style identifiers; shorter numbers (limits, indexes) stay literal
ID_SEGMENT_PATTERN = re.compile(r"^\d{16,}$")
ID_PLACEHOLDER = ":id"


class HTTPMethod(str, Enum):
    """Verbs the API accepts."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


def normalize_path(path: str) -> str:
    """Replace every identifier segment of ``path`` with the placeholder.

    The query string is not part of the result.
    """
    path = path.split("?", 1)[0]
    segments = [
        ID_PLACEHOLDER if ID_SEGMENT_PATTERN.match(segment) else segment
        for segment in path.split("/")
    ]
    return "/".join(segments)


def bucket_key_for(method: str, path: str) -> str:
    """Rate-limit bucket key shared by calls differing only by resource IDs."""
    return f"{method.upper()} {normalize_path(path)}"


class Route(BaseModel):
    """One logical API operation: a verb plus a path below the API prefix."""

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    path: str

    @field_validator("path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        if not value.startswith("/"):
            value = "/" + value
        return value

    @property
    def bucket_key(self) -> str:
        return bucket_key_for(self.method.value, self.path)

    def url(self, api_url: str) -> str:
        return f"{api_url.rstrip('/')}{self.path}"

    def __str__(self) -> str:
        return f"{self.method.value} {self.path}"
