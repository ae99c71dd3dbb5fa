from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from .errors import AuthError, HTTPError

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class ErrorPayload:
    message: str | None = None
    code: int | None = None
    type: str | None = None


def parse_api_error_detail(details: str | bytes | None) -> dict | None:
    if not details:
        return None
    try:
        data = json.loads(details)
    except Exception:
        return None
    return data if isinstance(data, dict) else None


def parse_error_payload(body: bytes) -> ErrorPayload | None:
    data = parse_api_error_detail(body)
    if data is None:
        return None
    message = data.get("message")
    code = _coerce_code(data.get("code"))
    error_type = data.get("type")
    return ErrorPayload(
        message=str(message) if message is not None else None,
        code=code,
        type=str(error_type) if error_type is not None else None,
    )


def _coerce_code(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _content_type(headers: Mapping[str, str] | httpx.Headers) -> str:
    if isinstance(headers, httpx.Headers):
        return headers.get("content-type", "")
    for key, value in headers.items():
        if key.lower() == "content-type":
            return value
    return ""


def translate_error(
        status_code: int,
        headers: Mapping[str, str] | httpx.Headers,
        body: bytes,
) -> HTTPError:
    """Build the error raised for a response with status >= 400.

    JSON bodies are read as ``{"message", "code", "type"}``; anything else is
    taken verbatim as the message. The raw body text is always kept on
    ``response``.
    """
    raw = body.decode("utf-8", errors="replace")
    message = raw
    code = status_code
    error_type = None

    if JSON_CONTENT_TYPE in _content_type(headers).lower():
        payload = parse_error_payload(body)
        if payload is not None:
            message = payload.message if payload.message is not None else ""
            code = payload.code if payload.code is not None else status_code
            error_type = payload.type

    cls = AuthError if status_code in (401, 403) else HTTPError
    return cls(
        message,
        code,
        error_type,
        raw,
        status_code=status_code,
        headers=headers if isinstance(headers, httpx.Headers) else httpx.Headers(dict(headers)),
    )
