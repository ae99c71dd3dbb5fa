from __future__ import annotations

from importlib import metadata

import httpx

DIST_NAME = "appwrite-client"


def sdk_version() -> str:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


def app_version(app_name: str) -> str:
    try:
        return metadata.version(app_name)
    except (metadata.PackageNotFoundError, ValueError):
        return ""


def user_agent(app_name: str, version: str | None = None) -> str:
    version = app_version(app_name) if version is None else version
    return f"{app_name}/{version}, python-httpx/{httpx.__version__}"
