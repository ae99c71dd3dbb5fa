from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from .config_types import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT_S
from .errors import SettingsError

APP_NAME = "appwrite"
SETTINGS_FILENAME = "settings.toml"
ENV_ENDPOINT = "APPWRITE_ENDPOINT"
ENV_PROJECT = "APPWRITE_PROJECT"
ENV_SELF_SIGNED = "APPWRITE_SELF_SIGNED"

_TRUE = {"1", "true", "yes", "on"}


@dataclass
class ClientSettings:
    endpoint: str = DEFAULT_ENDPOINT
    endpoint_realtime: str | None = None
    project: str = ""
    jwt: str = ""
    locale: str = ""
    self_signed: bool = False
    timeout_s: float = DEFAULT_TIMEOUT_S
    headers: dict[str, str] = field(default_factory=dict)


def settings_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{SETTINGS_FILENAME}"


def normalize_endpoint(raw: str | None) -> str:
    return (raw or "").strip().rstrip("/")


def _read_toml(path: str) -> dict[str, Any] | None:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"invalid settings file {path}: {e}") from e


def _apply(base: ClientSettings, data: dict[str, Any]) -> ClientSettings:
    out = replace(base, headers=dict(base.headers))
    endpoint = normalize_endpoint(str(data.get("endpoint") or ""))
    if endpoint:
        out.endpoint = endpoint
    realtime = normalize_endpoint(str(data.get("endpoint_realtime") or ""))
    if realtime:
        out.endpoint_realtime = realtime
    for key in ("project", "jwt", "locale"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            setattr(out, key, value.strip())
    self_signed = data.get("self_signed")
    if isinstance(self_signed, bool):
        out.self_signed = self_signed
    timeout = data.get("timeout_s")
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout > 0:
        out.timeout_s = float(timeout)
    headers_raw = data.get("headers") or {}
    if isinstance(headers_raw, dict):
        for key, value in headers_raw.items():
            if isinstance(value, str):
                out.headers[str(key).lower()] = value
    return out


def from_toml(data: dict[str, Any], profile: str | None = None) -> ClientSettings:
    settings = _apply(ClientSettings(), data)
    if not profile:
        return settings
    profiles_raw = data.get("profiles") or {}
    prof = profiles_raw.get(profile) if isinstance(profiles_raw, dict) else None
    if not isinstance(prof, dict):
        raise SettingsError(f"profile '{profile}' not found")
    return _apply(settings, prof)


def to_toml(settings: ClientSettings) -> dict[str, Any]:
    data: dict[str, Any] = {
        "endpoint": settings.endpoint,
        "endpoint_realtime": settings.endpoint_realtime,
        "project": settings.project or None,
        "jwt": settings.jwt or None,
        "locale": settings.locale or None,
        "self_signed": settings.self_signed,
        "timeout_s": settings.timeout_s,
    }
    if settings.headers:
        data["headers"] = dict(settings.headers)
    return {k: v for k, v in data.items() if v is not None}


def apply_env(settings: ClientSettings) -> ClientSettings:
    out = replace(settings, headers=dict(settings.headers))
    endpoint = normalize_endpoint(os.getenv(ENV_ENDPOINT, ""))
    if endpoint:
        out.endpoint = endpoint
    project = os.getenv(ENV_PROJECT, "").strip()
    if project:
        out.project = project
    self_signed = os.getenv(ENV_SELF_SIGNED, "").strip().lower()
    if self_signed:
        out.self_signed = self_signed in _TRUE
    return out


def load_settings(path: str | os.PathLike | None = None, profile: str | None = None) -> ClientSettings:
    data = _read_toml(str(path) if path is not None else settings_path())
    settings = from_toml(data, profile) if data is not None else ClientSettings()
    return apply_env(settings)


def save_settings(settings: ClientSettings, path: str | os.PathLike | None = None) -> str:
    target = Path(path) if path is not None else Path(settings_path())
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(tomli_w.dumps(to_toml(settings)).encode("utf-8"))
    os.chmod(target, 0o600)
    return str(target)
