from __future__ import annotations

from typing import Any

import httpx

from .config_types import (
    DEFAULT_ENDPOINT,
    DEFAULT_TIMEOUT_S,
    RESPONSE_FORMAT,
    ClientConfig,
    derive_realtime_endpoint,
    normalize_header_key,
)
from .cookies import CookieStore, PersistentCookieJar
from .invoker import AsyncInvoker, IncomingResponse
from .request_building import build_request
from .transport import TransportFactory, TransportHolder
from .version import sdk_version, user_agent

DEFAULT_APP_NAME = "appwrite-python"


class Client:
    def __init__(
            self,
            endpoint: str = DEFAULT_ENDPOINT,
            endpoint_realtime: str | None = None,
            self_signed: bool = False,
            *,
            app_name: str = DEFAULT_APP_NAME,
            app_version: str | None = None,
            cookie_store: CookieStore | None = None,
            timeout_s: float = DEFAULT_TIMEOUT_S,
            transport_factory: TransportFactory | None = None,
    ):
        self._cfg = ClientConfig(
            endpoint=endpoint,
            realtime_endpoint=endpoint_realtime,
            realtime_explicit=endpoint_realtime is not None,
            trust_any_certificate=self_signed,
            timeout_s=timeout_s,
        )
        if not self._cfg.realtime_explicit:
            self._cfg.realtime_endpoint = derive_realtime_endpoint(endpoint)

        for key, value in {
            "content-type": "application/json",
            "origin": f"appwrite-python://{app_name}",
            "user-agent": user_agent(app_name, app_version),
            "x-sdk-version": f"appwrite:python:{sdk_version()}",
            "x-appwrite-response-format": RESPONSE_FORMAT,
        }.items():
            self.add_header(key, value)

        self.cookie_jar = PersistentCookieJar(cookie_store)
        self._transports = TransportHolder(
            self_signed,
            self.cookie_jar,
            timeout_s=timeout_s,
            transport_factory=transport_factory,
        )
        self._invoker = AsyncInvoker(self._transports)

    @classmethod
    def from_settings(cls, settings, **kwargs: Any) -> "Client":
        client = cls(
            settings.endpoint,
            settings.endpoint_realtime,
            settings.self_signed,
            timeout_s=settings.timeout_s,
            **kwargs,
        )
        if settings.project:
            client.set_project(settings.project)
        if settings.jwt:
            client.set_jwt(settings.jwt)
        if settings.locale:
            client.set_locale(settings.locale)
        for key, value in settings.headers.items():
            client.add_header(key, value)
        return client

    # --- configuration ---
    @property
    def config(self) -> dict[str, str]:
        return dict(self._cfg.session_config)

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._cfg.headers)

    @property
    def endpoint(self) -> str:
        return self._cfg.endpoint

    @property
    def endpoint_realtime(self) -> str | None:
        return self._cfg.realtime_endpoint

    @property
    def self_signed(self) -> bool:
        return self._cfg.trust_any_certificate

    @property
    def http(self) -> httpx.AsyncClient:
        """Transport used by calls dispatched from now on."""
        return self._transports.current

    def set_project(self, value: str) -> "Client":
        """Your project ID."""
        self._cfg.session_config["project"] = value
        return self.add_header("x-appwrite-project", value)

    def set_jwt(self, value: str) -> "Client":
        """Your secret JSON Web Token."""
        self._cfg.session_config["jwt"] = value
        return self.add_header("x-appwrite-jwt", value)

    def set_locale(self, value: str) -> "Client":
        self._cfg.session_config["locale"] = value
        return self.add_header("x-appwrite-locale", value)

    def set_self_signed(self, status: bool) -> "Client":
        """Accept any certificate and hostname. Unsafe outside development."""
        self._transports.rebuild(bool(status))
        self._cfg.trust_any_certificate = bool(status)
        return self

    def set_endpoint(self, endpoint: str) -> "Client":
        self._cfg.endpoint = endpoint
        if not self._cfg.realtime_explicit:
            self._cfg.realtime_endpoint = derive_realtime_endpoint(endpoint)
        return self

    def set_endpoint_realtime(self, endpoint: str) -> "Client":
        self._cfg.realtime_endpoint = endpoint
        self._cfg.realtime_explicit = True
        return self

    def add_header(self, key: str, value: str) -> "Client":
        self._cfg.headers[normalize_header_key(key)] = value
        return self

    # --- calls ---
    async def call(
            self,
            method: str,
            path: str,
            headers: dict[str, str] | None = None,
            params: dict[str, Any] | None = None,
    ) -> IncomingResponse:
        request = build_request(method, self._cfg.endpoint, path, self._cfg.headers, headers, params)
        return await self._invoker.invoke(request)

    async def call_json(
            self,
            method: str,
            path: str,
            headers: dict[str, str] | None = None,
            params: dict[str, Any] | None = None,
    ) -> Any:
        """Like ``call`` but returns the decoded JSON body, or None when it is empty."""
        response = await self.call(method, path, headers, params)
        if not response.content:
            return None
        return response.json()

    async def aclose(self) -> None:
        await self._transports.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
