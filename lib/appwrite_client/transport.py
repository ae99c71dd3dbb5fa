from __future__ import annotations

import asyncio
import logging
import ssl
import threading
from http.cookiejar import CookieJar
from typing import Callable

import httpx

from .config_types import DEFAULT_TIMEOUT_S
from .errors import TLSConfigurationError

logger = logging.getLogger(__name__)


def build_ssl_context(trust_any_certificate: bool) -> ssl.SSLContext:
    """SSL context for the transport.

    With ``trust_any_certificate`` the context accepts every certificate chain
    and every hostname. That removes all authenticity and identity checks on
    the server and is only meant for development against self-signed
    endpoints. Never enable it for production traffic.
    """
    try:
        ctx = ssl.create_default_context()
        if trust_any_certificate:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
    except (ssl.SSLError, OSError, ValueError) as e:
        raise TLSConfigurationError(f"failed to build SSL context: {e}") from e
    if trust_any_certificate:
        logger.warning("certificate and hostname verification disabled (self-signed mode)")
    return ctx


TransportFactory = Callable[[ssl.SSLContext], httpx.AsyncBaseTransport]


def default_transport(ssl_context: ssl.SSLContext) -> httpx.AsyncBaseTransport:
    return httpx.AsyncHTTPTransport(verify=ssl_context)


def build_transport(
        trust_any_certificate: bool,
        cookie_jar: CookieJar,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport_factory: TransportFactory | None = None,
) -> httpx.AsyncClient:
    factory = transport_factory or default_transport
    return httpx.AsyncClient(
        cookies=cookie_jar,
        timeout=timeout_s,
        follow_redirects=True,
        transport=factory(build_ssl_context(trust_any_certificate)),
    )


class TransportHolder:
    """Owns the current ``httpx.AsyncClient`` and the ones it replaced.

    Calls lease the client that is current when they are dispatched and keep
    it until they finish, so a rebuild never changes the transport under an
    in-flight call. A replaced client is closed once its last lease ends.
    """

    def __init__(
            self,
            trust_any_certificate: bool,
            cookie_jar: CookieJar,
            *,
            timeout_s: float = DEFAULT_TIMEOUT_S,
            transport_factory: TransportFactory | None = None,
    ):
        self._lock = threading.Lock()
        self._cookie_jar = cookie_jar
        self._timeout_s = timeout_s
        self._transport_factory = transport_factory
        self._trust_any_certificate = trust_any_certificate
        self._current = self._build(trust_any_certificate)
        self._leases: dict[int, int] = {}
        self._retired: dict[int, httpx.AsyncClient] = {}
        self._closing: set[asyncio.Task] = set()

    def _build(self, trust_any_certificate: bool) -> httpx.AsyncClient:
        return build_transport(
            trust_any_certificate,
            self._cookie_jar,
            timeout_s=self._timeout_s,
            transport_factory=self._transport_factory,
        )

    @property
    def current(self) -> httpx.AsyncClient:
        return self._current

    @property
    def trust_any_certificate(self) -> bool:
        return self._trust_any_certificate

    def rebuild(self, trust_any_certificate: bool) -> bool:
        """Swap in a client for the given trust mode. Returns False if unchanged."""
        with self._lock:
            if trust_any_certificate == self._trust_any_certificate:
                return False
            fresh = self._build(trust_any_certificate)
            old = self._current
            self._current = fresh
            self._trust_any_certificate = trust_any_certificate
            if self._leases.get(id(old)):
                self._retired[id(old)] = old
                old = None
        logger.debug("transport rebuilt (trust_any_certificate=%s)", trust_any_certificate)
        if old is not None:
            self._schedule_close(old)
        return True

    def acquire(self) -> httpx.AsyncClient:
        with self._lock:
            client = self._current
            self._leases[id(client)] = self._leases.get(id(client), 0) + 1
            return client

    def release(self, client: httpx.AsyncClient) -> None:
        with self._lock:
            key = id(client)
            left = self._leases.get(key, 0) - 1
            if left > 0:
                self._leases[key] = left
                return
            self._leases.pop(key, None)
            retired = self._retired.pop(key, None)
        if retired is not None:
            self._schedule_close(retired)

    def _schedule_close(self, client: httpx.AsyncClient) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # closed by aclose() instead
            with self._lock:
                self._retired[id(client)] = client
            return
        task = loop.create_task(client.aclose())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def aclose(self) -> None:
        with self._lock:
            clients = [self._current, *self._retired.values()]
            self._retired.clear()
            self._leases.clear()
            pending = list(self._closing)
        for client in clients:
            await client.aclose()
        if pending:
            await asyncio.gather(*pending)
