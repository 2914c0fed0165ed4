"""Request body models and their wire encodings."""

import json
import uuid
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticSerializationError, to_jsonable_python

from botrest.exceptions import EncodingError

JSON_CONTENT_TYPE = "application/json"
DEFAULT_MIME_TYPE = "text/plain"
PAYLOAD_PART_NAME = "payload_json"

MIME_TYPES: Dict[str, str] = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",
    "html": "text/html",
    "json": "application/json",
    "pdf": "application/pdf",
    "zip": "application/zip",
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
    "wav": "audio/wav",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
}


def mime_type_for(file_name: str) -> str:
    """Resolve a content type from the file extension, defaulting to text."""
    _, dot, extension = file_name.rpartition(".")
    if not dot:
        return DEFAULT_MIME_TYPE
    return MIME_TYPES.get(extension.lower(), DEFAULT_MIME_TYPE)


def encode_json(value: Any) -> bytes:
    """Serialize a structured value, raising EncodingError on failure."""
    try:
        return json.dumps(
            to_jsonable_python(value), separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise EncodingError(f"Payload is not JSON serializable: {e}") from e


class Attachment(BaseModel):
    """A file uploaded alongside a structured payload."""

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(min_length=1)
    data: bytes

    @field_validator("file_name")
    @classmethod
    def _safe_file_name(cls, value: str) -> str:
        if any(char in value for char in '"\r\n'):
            raise ValueError("file name may not contain quotes or line breaks")
        return value

    @property
    def mime_type(self) -> str:
        return mime_type_for(self.file_name)


class EncodedBody(BaseModel):
    """Wire body plus the content type it implies."""

    content: bytes = b""
    content_type: Optional[str] = None
    boundary: Optional[str] = None

    @property
    def is_multipart(self) -> bool:
        return self.boundary is not None


class StructuredPayload(BaseModel):
    """A JSON body."""

    kind: Literal["structured"] = "structured"
    value: Any = None
    headers: Dict[str, str] = Field(default_factory=dict)

    def encode(self) -> EncodedBody:
        return EncodedBody(content=encode_json(self.value), content_type=JSON_CONTENT_TYPE)


class MultipartPayload(BaseModel):
    """A JSON body sent as the first part of a multipart form, followed by files."""

    kind: Literal["multipart"] = "multipart"
    value: Any = None
    attachments: List[Attachment] = Field(default_factory=list)
    headers: Dict[str, str] = Field(default_factory=dict)

    def encode(self, boundary: Optional[str] = None) -> EncodedBody:
        """Build the multipart body.

        A fresh boundary is generated per call unless one is given. Parts are
        the structured value under ``payload_json`` and then one
        ``files[<index>]`` part per attachment, in attachment order.
        """
        boundary = boundary or uuid.uuid4().hex
        delimiter = f"--{boundary}".encode("ascii")

        chunks: List[bytes] = [
            delimiter,
            b"\r\n",
            f'Content-Disposition: form-data; name="{PAYLOAD_PART_NAME}"\r\n'.encode("ascii"),
            f"Content-Type: {JSON_CONTENT_TYPE}\r\n\r\n".encode("ascii"),
            encode_json(self.value),
            b"\r\n",
        ]
        for index, attachment in enumerate(self.attachments):
            chunks.extend(
                [
                    delimiter,
                    b"\r\n",
                    (
                        f'Content-Disposition: form-data; name="files[{index}]"; '
                        f'filename="{attachment.file_name}"\r\n'
                    ).encode("utf-8"),
                    f"Content-Type: {attachment.mime_type}\r\n\r\n".encode("ascii"),
                    attachment.data,
                    b"\r\n",
                ]
            )
        chunks.extend([delimiter, b"--\r\n"])

        return EncodedBody(
            content=b"".join(chunks),
            content_type=f"multipart/form-data; boundary={boundary}",
            boundary=boundary,
        )


RequestPayload = Union[StructuredPayload, MultipartPayload]


def build_payload(
    value: Any = None,
    attachments: Optional[List[Union[Attachment, tuple]]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> RequestPayload:
    """Build the payload variant matching the arguments.

    Attachments may be given as ``Attachment`` models or ``(file_name, data)``
    pairs; any attachment selects the multipart variant.

    Raises:
        EncodingError: If an attachment or header map fails validation
    """
    try:
        if attachments:
            files = [
                item if isinstance(item, Attachment) else Attachment(file_name=item[0], data=item[1])
                for item in attachments
            ]
            return MultipartPayload(value=value, attachments=files, headers=dict(headers or {}))
        return StructuredPayload(value=value, headers=dict(headers or {}))
    except (ValidationError, IndexError, TypeError) as e:
        raise EncodingError(f"Invalid request payload: {e}") from e


def as_payload(value: Any) -> Optional[RequestPayload]:
    """Wrap a bare structured value; payload models pass through unchanged."""
    if value is None or isinstance(value, (StructuredPayload, MultipartPayload)):
        return value
    return StructuredPayload(value=value)


def assemble_headers(
    defaults: Mapping[str, str],
    payload: Optional[RequestPayload],
    body: EncodedBody,
) -> httpx.Headers:
    """Defaults, then caller overrides, then the forced multipart content type."""
    headers = httpx.Headers(dict(defaults))
    if payload is None:
        return headers

    if body.content_type and not body.is_multipart:
        headers["Content-Type"] = body.content_type
    headers.update(payload.headers)
    if body.is_multipart:
        headers["Content-Type"] = body.content_type
    return headers
