from __future__ import annotations

from pathlib import Path


class ZippyError(Exception):
    """Base error for zippy."""


class ConfigError(ZippyError):
    pass


class BackendError(ZippyError):
    """Raised by an archive backend; the message is the library's error text."""


class ArchiveError(ZippyError):
    """Base error for a failed pack or unpack call."""

    def __init__(
        self,
        message: str,
        *,
        path: str | Path | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None
        self.detail = detail


class ValidationError(ArchiveError):
    pass


class NotFoundError(ArchiveError):
    pass


class OpenError(ArchiveError):
    pass


class EntryError(ArchiveError):
    pass


class CommitError(ArchiveError):
    pass


class FilesystemError(ArchiveError):
    pass
