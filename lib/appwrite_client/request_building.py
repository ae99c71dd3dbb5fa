from __future__ import annotations

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Union

import httpx

from .config_types import merge_headers
from .errors import MalformedURLError
from .params import (
    FILE_PARAM,
    InputFile,
    ParamValue,
    Sequence,
    resolve_params,
    stringify,
    to_file_param,
    to_json_value,
)

MULTIPART_FORM = "multipart/form-data"
JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class NoBody:
    pass


@dataclass(frozen=True)
class QueryEncoded:
    pairs: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class TextPart:
    name: str
    value: str


@dataclass(frozen=True)
class FilePart:
    name: str
    file: InputFile


@dataclass(frozen=True)
class MultipartForm:
    parts: tuple[Union[TextPart, FilePart], ...]


@dataclass(frozen=True)
class JsonBytes:
    data: bytes


RequestBody = Union[NoBody, QueryEncoded, MultipartForm, JsonBytes]


@dataclass(frozen=True)
class OutgoingRequest:
    method: str
    url: httpx.URL
    headers: Mapping[str, str]
    body: RequestBody


def build_url(endpoint: str, path: str) -> httpx.URL:
    raw = f"{endpoint}{path}"
    try:
        url = httpx.URL(raw)
    except (httpx.InvalidURL, TypeError) as e:
        raise MalformedURLError(raw, str(e)) from e
    if url.scheme not in ("http", "https"):
        raise MalformedURLError(raw, "scheme must be http or https")
    if not url.host:
        raise MalformedURLError(raw, "missing host")
    return url


def _query_pairs(params: dict[str, ParamValue]) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for key, param in params.items():
        if isinstance(param, Sequence):
            pairs.extend((f"{key}[]", stringify(item)) for item in param.items)
        else:
            pairs.append((key, stringify(to_json_value(param))))
    return pairs


def _multipart_parts(params: dict[str, ParamValue]) -> list[Union[TextPart, FilePart]]:
    parts: list[Union[TextPart, FilePart]] = []
    for key, param in params.items():
        if key == FILE_PARAM:
            parts.append(FilePart(key, to_file_param(param).file))
        elif isinstance(param, Sequence):
            parts.extend(TextPart(f"{key}[]", stringify(item)) for item in param.items)
        else:
            parts.append(TextPart(key, stringify(to_json_value(param))))
    return parts


def build_request(
        method: str,
        endpoint: str,
        path: str,
        default_headers: dict[str, str],
        header_overrides: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
) -> OutgoingRequest:
    method = method.upper()
    url = build_url(endpoint, path)
    headers = merge_headers(default_headers, header_overrides)
    filtered = resolve_params(params)

    if method == "GET":
        pairs = _query_pairs(filtered)
        if pairs:
            # path query is kept, params follow it
            url = url.copy_with(params=list(url.params.multi_items()) + pairs)
        body: RequestBody = QueryEncoded(tuple(pairs)) if pairs else NoBody()
    elif headers.get("content-type") == MULTIPART_FORM:
        # httpx adds the content-type with its boundary
        headers.pop("content-type")
        body = MultipartForm(tuple(_multipart_parts(filtered)))
    else:
        data = {key: to_json_value(param) for key, param in filtered.items()}
        headers["content-type"] = JSON_CONTENT_TYPE
        body = JsonBytes(json.dumps(data).encode("utf-8"))

    return OutgoingRequest(method=method, url=url, headers=MappingProxyType(headers), body=body)


def to_httpx_kwargs(request: OutgoingRequest) -> dict[str, Any]:
    """Keyword arguments for ``httpx.AsyncClient.build_request``."""
    kwargs: dict[str, Any] = {"headers": dict(request.headers)}
    body = request.body
    if isinstance(body, JsonBytes):
        kwargs["content"] = body.data
    elif isinstance(body, MultipartForm):
        files = []
        for part in body.parts:
            if isinstance(part, FilePart):
                f = part.file
                files.append((part.name, (f.filename, f.content, f.mime_type or "application/octet-stream")))
            else:
                # no filename: rendered as a plain form field
                files.append((part.name, (None, part.value)))
        kwargs["files"] = files
    return kwargs
