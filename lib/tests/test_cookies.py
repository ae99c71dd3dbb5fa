from __future__ import annotations

import os
import stat

import httpx
import pytest

from appwrite_client import MemoryCookieStore, TomlCookieStore
from appwrite_client.cookies import PersistentCookieJar, cookie_from_dict


@pytest.mark.asyncio
async def test_cookies_are_persisted_and_replayed(make_client) -> None:
    store = MemoryCookieStore()
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path.endswith("/sessions"):
            return httpx.Response(201, headers={"set-cookie": "a_session=abc; Path=/; HttpOnly"})
        return httpx.Response(200, json={})

    first = make_client(handler, cookie_store=store)
    await first.call("POST", "/account/sessions", params={"email": "a@b.test"})
    await first.aclose()

    (saved,) = store.load("cloud.test")
    assert saved["name"] == "a_session"
    assert saved["value"] == "abc"
    assert saved["http_only"] is True

    second = make_client(handler, cookie_store=store)
    await second.call("GET", "/account")
    await second.aclose()

    assert seen[-1].headers["cookie"] == "a_session=abc"


@pytest.mark.asyncio
async def test_expired_cookie_is_removed_from_store(make_client) -> None:
    store = MemoryCookieStore()

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            return httpx.Response(204, headers={"set-cookie": "a_session=; Path=/; Max-Age=0"})
        return httpx.Response(201, headers={"set-cookie": "a_session=abc; Path=/"})

    client = make_client(handler, cookie_store=store)
    await client.call("POST", "/account/sessions")
    assert store.domains() == ["cloud.test"]

    await client.call("DELETE", "/account/sessions/current")
    assert store.load("cloud.test") == []
    assert store.domains() == []
    await client.aclose()


def test_jar_accepts_all_cookies() -> None:
    jar = PersistentCookieJar()
    assert jar._policy.set_ok(cookie_from_dict({"name": "n", "value": "v", "domain": "other.test"}), None)


def test_toml_store_roundtrip(tmp_path) -> None:
    path = tmp_path / "nested" / "cookies.toml"
    store = TomlCookieStore(path)
    cookie = {"name": "a", "value": "1", "domain": "cloud.test", "path": "/", "secure": True, "expires": None}

    store.save("cloud.test", [cookie])

    assert store.domains() == ["cloud.test"]
    assert store.load("cloud.test") == [{"name": "a", "value": "1", "domain": "cloud.test", "path": "/", "secure": True}]
    assert store.load("missing.test") == []
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    store.save("cloud.test", [])
    assert store.domains() == []


def test_jar_loads_cookies_from_toml_store(tmp_path) -> None:
    store = TomlCookieStore(tmp_path / "cookies.toml")
    store.save("cloud.test", [{"name": "a", "value": "1", "domain": "cloud.test", "path": "/"}])

    jar = PersistentCookieJar(store)
    cookies = {c.name: c.value for c in jar}
    assert cookies == {"a": "1"}


def test_toml_store_default_path(tmp_path, monkeypatch) -> None:
    from appwrite_client import cookies

    monkeypatch.setattr(cookies, "user_config_dir", lambda _: str(tmp_path))
    assert TomlCookieStore().path == tmp_path / "cookies.toml"


@pytest.mark.asyncio
async def test_toml_store_is_written_before_call_returns(make_client, tmp_path) -> None:
    path = tmp_path / "cookies.toml"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, headers={"set-cookie": "a_session=abc; Path=/"})

    client = make_client(handler, cookie_store=TomlCookieStore(path))
    await client.call("POST", "/account/sessions")

    assert path.exists()
    assert TomlCookieStore(path).load("cloud.test")[0]["value"] == "abc"
    await client.aclose()
