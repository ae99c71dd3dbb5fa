from __future__ import annotations

import httpx
import pytest

from appwrite_client import Client

ENDPOINT = "https://cloud.test/v1"


@pytest.fixture
def make_client():
    def _make(handler, **kwargs) -> Client:
        return Client(ENDPOINT, transport_factory=lambda _ctx: httpx.MockTransport(handler), **kwargs)

    return _make
