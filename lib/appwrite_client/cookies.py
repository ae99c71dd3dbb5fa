from __future__ import annotations

import os
import threading
import tomllib
from http.cookiejar import Cookie, CookieJar, DefaultCookiePolicy
from pathlib import Path
from typing import Any, Protocol

import tomli_w
from platformdirs import user_config_dir

APP_NAME = "appwrite"
COOKIES_FILENAME = "cookies.toml"


class CookieStore(Protocol):
    def domains(self) -> list[str]: ...

    def load(self, domain: str) -> list[dict[str, Any]]: ...

    def save(self, domain: str, cookies: list[dict[str, Any]]) -> None: ...


class MemoryCookieStore:
    def __init__(self) -> None:
        self._data: dict[str, list[dict[str, Any]]] = {}

    def domains(self) -> list[str]:
        return list(self._data)

    def load(self, domain: str) -> list[dict[str, Any]]:
        return [dict(c) for c in self._data.get(domain, [])]

    def save(self, domain: str, cookies: list[dict[str, Any]]) -> None:
        if cookies:
            self._data[domain] = [dict(c) for c in cookies]
        else:
            self._data.pop(domain, None)


def cookies_path() -> Path:
    return Path(user_config_dir(APP_NAME)) / COOKIES_FILENAME


class TomlCookieStore:
    """Cookies kept in a TOML file, one table per domain.

    ``save`` writes the file synchronously. The jar calls it from httpx while a
    response is processed, so a write blocks the event loop for as long as the
    file takes to rewrite. The file holds one small table per domain.
    """

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = Path(path) if path is not None else cookies_path()
        self._lock = threading.Lock()

    def _read(self) -> dict[str, Any]:
        try:
            with self.path.open("rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            return {}
        domains = data.get("domains")
        return domains if isinstance(domains, dict) else {}

    def domains(self) -> list[str]:
        return list(self._read())

    def load(self, domain: str) -> list[dict[str, Any]]:
        entry = self._read().get(domain)
        if not isinstance(entry, dict):
            return []
        cookies = entry.get("cookies")
        if not isinstance(cookies, list):
            return []
        return [c for c in cookies if isinstance(c, dict)]

    def save(self, domain: str, cookies: list[dict[str, Any]]) -> None:
        with self._lock:
            data = self._read()
            if cookies:
                data[domain] = {"cookies": [_prune_none(c) for c in cookies]}
            else:
                data.pop(domain, None)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(tomli_w.dumps({"domains": data}).encode("utf-8"))
            os.chmod(self.path, 0o600)


def _prune_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _prune_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_prune_none(item) for item in value if item is not None]
    return value


class AcceptAllCookiePolicy(DefaultCookiePolicy):
    """Accepts every cookie a server sends; sending is still domain-checked."""

    def set_ok(self, cookie, request) -> bool:
        return True


def cookie_to_dict(cookie: Cookie) -> dict[str, Any]:
    return {
        "name": cookie.name,
        "value": cookie.value,
        "domain": cookie.domain,
        "path": cookie.path,
        "secure": cookie.secure,
        "expires": cookie.expires,
        "port": cookie.port,
        "http_only": cookie.has_nonstandard_attr("HttpOnly"),
    }


def cookie_from_dict(data: dict[str, Any]) -> Cookie:
    domain = str(data.get("domain") or "")
    path = str(data.get("path") or "/")
    port = data.get("port")
    expires = data.get("expires")
    rest = {"HttpOnly": None} if data.get("http_only") else {}
    return Cookie(
        version=0,
        name=str(data.get("name") or ""),
        value=data.get("value"),
        port=str(port) if port else None,
        port_specified=bool(port),
        domain=domain,
        domain_specified=domain.startswith("."),
        domain_initial_dot=domain.startswith("."),
        path=path,
        path_specified=True,
        secure=bool(data.get("secure")),
        expires=int(expires) if expires is not None else None,
        discard=expires is None,
        comment=None,
        comment_url=None,
        rest=rest,
    )


def store_domain(domain: str) -> str:
    return domain.lstrip(".").lower()


class PersistentCookieJar(CookieJar):
    """Cookie jar that mirrors its content into a ``CookieStore``.

    Everything the store holds is loaded on construction. After each response
    the domains whose cookies changed are written back.
    """

    def __init__(self, store: CookieStore | None = None):
        super().__init__(policy=AcceptAllCookiePolicy())
        self.store = store if store is not None else MemoryCookieStore()
        for domain in self.store.domains():
            for data in self.store.load(domain):
                self.set_cookie(cookie_from_dict(data))
        self._saved = self._snapshot()

    def _snapshot(self) -> dict[str, list[dict[str, Any]]]:
        by_domain: dict[str, list[dict[str, Any]]] = {}
        for cookie in self:
            by_domain.setdefault(store_domain(cookie.domain), []).append(cookie_to_dict(cookie))
        return by_domain

    def persist(self) -> None:
        current = self._snapshot()
        with self._cookies_lock:
            for domain in set(current) | set(self._saved):
                cookies = current.get(domain, [])
                if cookies != self._saved.get(domain, []):
                    self.store.save(domain, cookies)
                    self._saved[domain] = cookies

    def extract_cookies(self, response, request) -> None:
        super().extract_cookies(response, request)
        self.persist()

    def clear(self, domain=None, path=None, name=None) -> None:
        super().clear(domain, path, name)
        self.persist()
