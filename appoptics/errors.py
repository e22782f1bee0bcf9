"""Errors raised when the API reports a failure."""

from __future__ import annotations

import json
from typing import Any, Mapping


def _encode_json(value: Any) -> str:
    text = json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    return (
        text.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


class ErrorResponse(Exception):
    """An error status returned by the API, with its decoded error details."""

    def __init__(self, status: str = "", errors: Any = None, response: Any = None) -> None:
        super().__init__(status)
        self.status = status
        self.errors = errors
        self.response = response

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], status: str = "") -> ErrorResponse:
        """Build from a decoded error body; a status in the body takes precedence."""
        return cls(status=data.get("status", status), errors=data.get("errors"))

    def __str__(self) -> str:
        return f"{self.status} - {_encode_json(self.errors)}"


class BadStatusError(Exception):
    """The API answered a measurements POST with a status other than 200 or 202."""

    def __init__(self, message: str = "Received non-OK status from AppOptics POST") -> None:
        super().__init__(message)