"""Decoding of non-success responses into client errors."""

import json
import logging
from typing import List, Mapping, Optional

from pydantic import ValidationError

from botrest.exceptions import APIError, HTTPError, ProtocolError
from botrest.models.response import ErrorEnvelope, FieldError, JSONValue

logger = logging.getLogger(__name__)

LEAF_KEY = "_errors"
INDENT = "  "


class ErrorService:
    """Service for turning error responses into exceptions."""

    @staticmethod
    def flatten_errors(tree: JSONValue, depth: int = 0) -> List[str]:
        """Render a nested per-field error tree as indented lines.

        Each object key is emitted on its own line and its contents one level
        deeper; each leaf ``_errors`` entry becomes ``"<code>: <message>"``.

        Args:
            tree: The ``errors`` member of an error envelope (or a subtree)
            depth: Current indentation level

        Returns:
            Trace lines, outermost field first
        """
        prefix = INDENT * depth
        lines: List[str] = []

        if isinstance(tree, dict):
            for key, value in tree.items():
                if key == LEAF_KEY:
                    lines.extend(ErrorService.flatten_errors(value, depth))
                else:
                    lines.append(f"{prefix}{key}")
                    lines.extend(ErrorService.flatten_errors(value, depth + 1))
        elif isinstance(tree, list):
            for entry in tree:
                if isinstance(entry, dict) and {"code", "message"} <= entry.keys():
                    leaf = FieldError.model_validate(entry)
                    lines.append(f"{prefix}{leaf.code}: {leaf.message}")
                else:
                    lines.extend(ErrorService.flatten_errors(entry, depth))
        elif tree is not None:
            lines.append(f"{prefix}{tree}")

        return lines

    @staticmethod
    def decode_error_response(
        status: int,
        reason: str,
        body: bytes,
        headers: Optional[Mapping[str, str]] = None,
    ) -> HTTPError:
        """Translate a non-success response into an exception.

        Args:
            status: HTTP status code
            reason: HTTP reason phrase
            body: Raw response body
            headers: Response headers

        Returns:
            APIError when the body is an error envelope, ProtocolError otherwise
        """
        header_map = dict(headers or {})
        text = body.decode("utf-8", errors="replace")

        try:
            envelope = ErrorEnvelope.model_validate(json.loads(text))
        except (ValueError, ValidationError):
            logger.debug(f"Undecodable error body for status {status}")
            return ProtocolError(status, reason, text, headers=header_map)

        trace = ErrorService.flatten_errors(envelope.errors) if envelope.errors else []
        return APIError(
            status,
            reason,
            envelope.code,
            envelope.message,
            trace=trace,
            headers=header_map,
        )
