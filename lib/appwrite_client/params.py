from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

FILE_PARAM = "file"


@dataclass(frozen=True)
class InputFile:
    filename: str
    content: bytes
    mime_type: str | None = None

    @classmethod
    def from_path(cls, path: str | os.PathLike, mime_type: str | None = None) -> "InputFile":
        p = Path(path)
        return cls(
            filename=p.name,
            content=p.read_bytes(),
            mime_type=mime_type or mimetypes.guess_type(p.name)[0],
        )

    @classmethod
    def from_bytes(cls, data: bytes, filename: str, mime_type: str | None = None) -> "InputFile":
        return cls(filename=filename, content=bytes(data), mime_type=mime_type)


@dataclass(frozen=True)
class Scalar:
    value: Any


@dataclass(frozen=True)
class Sequence:
    items: tuple


@dataclass(frozen=True)
class FileRef:
    # a path is read only when the file part is built
    file: Union[InputFile, os.PathLike]

    @property
    def label(self) -> str:
        if isinstance(self.file, InputFile):
            return self.file.filename
        return os.fspath(self.file)


ParamValue = Union[Scalar, Sequence, FileRef]


def to_param(value: Any) -> ParamValue | None:
    """Resolve a raw parameter value into its tagged form. ``None`` means absent."""
    if value is None:
        return None
    if isinstance(value, (Scalar, Sequence, FileRef)):
        return value
    if isinstance(value, (InputFile, os.PathLike)):
        return FileRef(value)
    if isinstance(value, (list, tuple)):
        return Sequence(tuple(value))
    return Scalar(value)


def to_file_param(value: Any) -> FileRef:
    """Resolve the multipart file value, reading it from disk if it is a path."""
    param = to_param(value)
    if isinstance(param, FileRef):
        if isinstance(param.file, InputFile):
            return param
        return FileRef(InputFile.from_path(param.file))
    if isinstance(param, Scalar) and isinstance(param.value, str):
        return FileRef(InputFile.from_path(param.value))
    raise TypeError(f"'{FILE_PARAM}' parameter must be a path or InputFile, got {type(value).__name__}")


def resolve_params(params: dict[str, Any] | None) -> dict[str, ParamValue]:
    out: dict[str, ParamValue] = {}
    for key, value in (params or {}).items():
        param = to_param(value)
        if param is not None:
            out[str(key)] = param
    return out


def stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_json_value(param: ParamValue) -> Any:
    if isinstance(param, Scalar):
        return param.value
    if isinstance(param, Sequence):
        return list(param.items)
    raise TypeError(f"file {param.label!r} cannot be sent in a JSON body")
