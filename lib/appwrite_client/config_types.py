from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_ENDPOINT = "https://cloud.appwrite.io/v1"
DEFAULT_TIMEOUT_S = 15.0
RESPONSE_FORMAT = "0.10.0"

_REALTIME_SCHEMES = {"http": "ws", "https": "wss"}


@dataclass
class ClientConfig:
    endpoint: str = DEFAULT_ENDPOINT
    realtime_endpoint: str | None = None
    realtime_explicit: bool = False
    trust_any_certificate: bool = False
    headers: dict[str, str] = field(default_factory=dict)
    session_config: dict[str, str] = field(default_factory=dict)
    timeout_s: float = DEFAULT_TIMEOUT_S


def normalize_header_key(key: str) -> str:
    return key.strip().lower()


def merge_headers(defaults: dict[str, str], overrides: dict[str, str] | None) -> dict[str, str]:
    merged = {normalize_header_key(k): v for k, v in defaults.items()}
    for key, value in (overrides or {}).items():
        merged[normalize_header_key(key)] = value
    return merged


def derive_realtime_endpoint(endpoint: str) -> str | None:
    """Map ``http``/``https`` endpoints to ``ws``/``wss``; other schemes give None."""
    scheme, sep, rest = (endpoint or "").partition("://")
    if not sep:
        return None
    target = _REALTIME_SCHEMES.get(scheme.lower())
    if target is None:
        return None
    return f"{target}://{rest}"
