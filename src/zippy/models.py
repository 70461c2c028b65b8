from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class EntryRecord(BaseModel):
    path: str
    kind: EntryKind

    @field_validator("path")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value:
            raise ValueError("entry path must not be empty")
        return value

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def archive_name(self) -> str:
        """Name as stored in the zip: directories carry a trailing slash."""

        name = self.path.replace("\\", "/")
        if self.is_dir and not name.endswith("/"):
            return name + "/"
        return name


class PackResult(BaseModel):
    source: Path
    archive: Path
    entries: list[EntryRecord] = Field(default_factory=list)

    @property
    def file_count(self) -> int:
        return sum(1 for entry in self.entries if not entry.is_dir)


class UnpackResult(BaseModel):
    archive: Path
    destination: Path
    entries: list[EntryRecord] = Field(default_factory=list)

    @property
    def file_count(self) -> int:
        return sum(1 for entry in self.entries if not entry.is_dir)


__all__ = ["EntryKind", "EntryRecord", "PackResult", "UnpackResult"]
