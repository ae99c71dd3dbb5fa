from .client import Client
from .cookies import MemoryCookieStore, TomlCookieStore
from .errors import (
    ApiError,
    AuthError,
    ClientError,
    HTTPError,
    MalformedURLError,
    SettingsError,
    TLSConfigurationError,
    TransportError,
)
from .invoker import IncomingResponse
from .logging_ import setup_logging
from .params import InputFile
from .settings import ClientSettings, load_settings, save_settings

__all__ = [
    "Client",
    "ClientSettings",
    "load_settings",
    "save_settings",
    "setup_logging",
    "IncomingResponse",
    "InputFile",
    "MemoryCookieStore",
    "TomlCookieStore",
    "ClientError",
    "ApiError",
    "HTTPError",
    "AuthError",
    "TransportError",
    "MalformedURLError",
    "TLSConfigurationError",
    "SettingsError",
]
