from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import TransportError
from .errors_utils import translate_error
from .request_building import OutgoingRequest, to_httpx_kwargs
from .transport import TransportHolder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomingResponse:
    status_code: int
    headers: httpx.Headers
    content: bytes

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.content)


class PendingCall:
    """One-shot completion for a single call.

    Only the first of ``resolve``/``fail``/``cancel`` has an effect; later
    ones return False.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[IncomingResponse] = loop.create_future()

    @property
    def done(self) -> bool:
        return self._future.done()

    def resolve(self, response: IncomingResponse) -> bool:
        if self._future.done():
            return False
        self._future.set_result(response)
        return True

    def fail(self, exc: BaseException) -> bool:
        if self._future.done():
            return False
        self._future.set_exception(exc)
        return True

    def cancel(self) -> bool:
        return self._future.cancel()

    async def wait(self) -> IncomingResponse:
        return await self._future


class AsyncInvoker:
    def __init__(self, transports: TransportHolder):
        self._transports = transports

    async def invoke(self, request: OutgoingRequest) -> IncomingResponse:
        loop = asyncio.get_running_loop()
        pending = PendingCall(loop)
        client = self._transports.acquire()
        worker = loop.create_task(self._exchange(client, request, pending))
        worker.add_done_callback(lambda _: self._transports.release(client))
        try:
            return await pending.wait()
        finally:
            if not worker.done():
                worker.cancel()

    async def _exchange(
            self,
            client: httpx.AsyncClient,
            request: OutgoingRequest,
            pending: PendingCall,
    ) -> None:
        method, url = request.method, str(request.url)
        logger.debug("dispatch %s %s", method, url)
        try:
            outcome = await self._send(client, request)
        except httpx.RequestError as e:
            outcome = TransportError.from_exception(e, method, url)
        except Exception as e:
            outcome = e

        if isinstance(outcome, BaseException):
            delivered = pending.fail(outcome)
        else:
            delivered = pending.resolve(outcome)
        if not delivered:
            logger.debug("dropped late result for %s %s", method, url)

    async def _send(self, client: httpx.AsyncClient, request: OutgoingRequest) -> IncomingResponse:
        http_request = client.build_request(request.method, request.url, **to_httpx_kwargs(request))
        response = await client.send(http_request, stream=True)
        try:
            body = await response.aread()
        finally:
            await response.aclose()

        if response.status_code >= 400:
            raise translate_error(response.status_code, response.headers, body)
        return IncomingResponse(
            status_code=response.status_code,
            headers=response.headers,
            content=body,
        )
