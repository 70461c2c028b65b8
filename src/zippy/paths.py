"""Relative path checks shared by the pack and unpack pipelines."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from .errors import ValidationError

ARCHIVE_SUFFIX = ".zip"

PathRole = Literal["input", "output", "archive"]

_ROLE_LABELS: dict[str, str] = {
    "input": "Input path",
    "output": "Output path",
    "archive": "Zip path",
}


def validate_relative_path(path: str, *, role: PathRole, suffix: str | None = None) -> str:
    """Return ``path`` unchanged if it is relative and ends with ``suffix``.

    Only the leading character is inspected; no normalisation is attempted so
    that ``C:foo`` style or ``..`` paths are passed through to the filesystem
    as given.
    """

    label = _ROLE_LABELS[role]
    if path.startswith(("/", "\\")):
        raise ValidationError(
            f'{label} must be a relative path that doesn\'t start with a "/" character.',
            path=path,
        )
    if suffix is not None and not path.endswith(suffix):
        raise ValidationError(f"{label} must be of type {suffix}", path=path)
    return path


def resolve_path(path: str, cwd: str | os.PathLike[str] | None = None) -> Path:
    base = Path(cwd) if cwd is not None else Path.cwd()
    return base / path


def strip_archive_suffix(path: Path) -> Path:
    """``data/out.zip`` -> ``data/out``."""

    name = path.name
    if not name.endswith(ARCHIVE_SUFFIX):
        raise ValidationError(f"Zip path must be of type {ARCHIVE_SUFFIX}", path=path)
    if name == ARCHIVE_SUFFIX:
        raise ValidationError("Zip path must name a file before the .zip suffix", path=path)
    return path.with_name(name[: -len(ARCHIVE_SUFFIX)])


__all__ = [
    "ARCHIVE_SUFFIX",
    "PathRole",
    "resolve_path",
    "strip_archive_suffix",
    "validate_relative_path",
]
