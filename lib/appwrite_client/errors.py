from __future__ import annotations

from typing import Any

import httpx


class ClientError(Exception):
    """Base client error."""


class ApiError(ClientError):
    def __init__(
            self,
            message: str,
            code: int = 0,
            type: str | None = None,
            response: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.type = type
        self.response = response

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "type": self.type,
            "response": self.response,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, type={self.type!r})"


class HTTPError(ApiError):
    """Server answered with status >= 400."""

    def __init__(
            self,
            message: str,
            code: int,
            type: str | None = None,
            response: str | None = None,
            *,
            status_code: int,
            headers: httpx.Headers | None = None,
    ):
        super().__init__(message, code, type, response)
        self.status_code = status_code
        self.headers = headers if headers is not None else httpx.Headers()


class AuthError(HTTPError):
    """Auth-related API error."""


class TransportError(ApiError):
    """Transport/network layer error."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message, 0, None, None)
        self.cause = cause

    @classmethod
    def from_exception(cls, exc: BaseException, method: str, url: str) -> "TransportError":
        detail = str(exc) or type(exc).__name__
        err = cls(f"{method} {url} failed: {detail}", exc)
        err.__cause__ = exc
        return err


class MalformedURLError(ClientError, ValueError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"malformed url {url!r}: {reason}")
        self.url = url
        self.reason = reason


class TLSConfigurationError(ClientError):
    """SSL context could not be built."""


class SettingsError(ClientError):
    """Settings file could not be read."""
