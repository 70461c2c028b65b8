"""Archive library capability interface and its :mod:`zipfile` implementation.

The pack and unpack pipelines only talk to the protocols defined here. Every
failure inside the library surfaces as :class:`~zippy.errors.BackendError`
whose message is the library's own error text.

Write handles stage entries and only produce a file on :meth:`commit`; the
archive is written to a temporary sibling and moved into place, so a
discarded or failed write leaves nothing behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
import zipfile
import zlib
from pathlib import Path
from types import TracebackType
from typing import IO, Protocol

from .errors import BackendError

logger = logging.getLogger(__name__)

# Exceptions zipfile raises for corrupt, encrypted or unsupported members.
_LIBRARY_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    ValueError,
    RuntimeError,
    NotImplementedError,
    EOFError,
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
)


class EntryStream(Protocol):
    def seekable(self) -> bool: ...

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int: ...

    def tell(self) -> int: ...

    def read(self, size: int = -1) -> bytes: ...

    def close(self) -> None: ...


class WriteHandle(Protocol):
    def add_file(self, name: str, source: Path, *, overwrite: bool = True) -> None: ...

    def add_directory(self, name: str) -> None: ...

    def commit(self) -> None: ...

    def discard(self) -> None: ...

    def __enter__(self) -> WriteHandle: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


class ReadHandle(Protocol):
    def entry_count(self) -> int: ...

    def entry_names(self) -> list[str]: ...

    def open_entry(self, name: str) -> EntryStream: ...

    def close(self) -> None: ...

    def __enter__(self) -> ReadHandle: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


class ArchiveBackend(Protocol):
    def open_write(self, path: Path) -> WriteHandle: ...

    def open_read(self, path: Path) -> ReadHandle: ...


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _default_file_mode() -> int:
    # mkstemp creates 0o600; give the archive the mode a plain open() would.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class ZipEntryStream:
    """Wrap a member file object so library errors become ``BackendError``."""

    def __init__(self, name: str, raw: IO[bytes]) -> None:
        self.name = name
        self._raw = raw

    def seekable(self) -> bool:
        try:
            return self._raw.seekable()
        except _LIBRARY_ERRORS as exc:
            raise BackendError(_describe(exc)) from exc

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        try:
            return self._raw.seek(offset, whence)
        except _LIBRARY_ERRORS as exc:
            raise BackendError(_describe(exc)) from exc

    def tell(self) -> int:
        try:
            return self._raw.tell()
        except _LIBRARY_ERRORS as exc:
            raise BackendError(_describe(exc)) from exc

    def read(self, size: int = -1) -> bytes:
        try:
            return self._raw.read(size)
        except _LIBRARY_ERRORS as exc:
            raise BackendError(_describe(exc)) from exc

    def close(self) -> None:
        self._raw.close()

    def __enter__(self) -> ZipEntryStream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class ZipWriteHandle:
    def __init__(
        self,
        path: Path,
        *,
        compression: int = zipfile.ZIP_DEFLATED,
        compresslevel: int | None = None,
    ) -> None:
        self.path = path
        self.compression = compression
        self.compresslevel = compresslevel
        # archive name -> source file, or None for a directory entry
        self._staged: dict[str, Path | None] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def staged_names(self) -> list[str]:
        return list(self._staged)

    def _ensure_open(self) -> None:
        if self._closed:
            raise BackendError("Archive handle is already closed")

    def add_file(self, name: str, source: Path, *, overwrite: bool = True) -> None:
        self._ensure_open()
        if not name or name.endswith("/"):
            raise BackendError(f"Invalid file entry name: {name!r}")
        if name in self._staged and not overwrite:
            raise BackendError("File already exists")
        try:
            source_ok = source.is_file()
        except OSError as exc:
            raise BackendError(f"Can't open file: {_describe(exc)}") from exc
        if not source_ok:
            raise BackendError(f"Can't open file: No such file: {source}")
        if not os.access(source, os.R_OK):
            raise BackendError(f"Can't open file: Permission denied: {source}")
        self._staged[name] = source
        logger.debug("Staged file %s", name)

    def add_directory(self, name: str) -> None:
        self._ensure_open()
        if not name:
            raise BackendError("Invalid directory entry name: ''")
        if not name.endswith("/"):
            name += "/"
        if name in self._staged:
            raise BackendError("File already exists")
        self._staged[name] = None
        logger.debug("Staged directory %s", name)

    def commit(self) -> None:
        self._ensure_open()
        self._closed = True
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
        except OSError as exc:
            self._staged.clear()
            raise BackendError(_describe(exc)) from exc
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as raw, zipfile.ZipFile(
                raw, "w", compression=self.compression, compresslevel=self.compresslevel
            ) as archive:
                for name, source in self._staged.items():
                    if source is None:
                        archive.mkdir(name)
                    else:
                        archive.write(source, arcname=name)
            tmp.chmod(_default_file_mode())
            tmp.replace(self.path)
        except _LIBRARY_ERRORS as exc:
            tmp.unlink(missing_ok=True)
            raise BackendError(_describe(exc)) from exc
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        finally:
            self._staged.clear()
        logger.debug("Committed archive %s", self.path)

    def discard(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._staged.clear()
        logger.debug("Discarded archive %s", self.path)

    def __enter__(self) -> ZipWriteHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.discard()


class ZipReadHandle:
    def __init__(self, path: Path, archive: zipfile.ZipFile) -> None:
        self.path = path
        self._archive = archive

    def entry_count(self) -> int:
        return len(self._archive.infolist())

    def entry_names(self) -> list[str]:
        return self._archive.namelist()

    def open_entry(self, name: str) -> ZipEntryStream:
        try:
            raw = self._archive.open(name, "r")
        except (KeyError, *_LIBRARY_ERRORS) as exc:
            raise BackendError(_describe(exc)) from exc
        return ZipEntryStream(name, raw)

    def close(self) -> None:
        self._archive.close()

    def __enter__(self) -> ZipReadHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class ZipFileBackend:
    def __init__(
        self,
        *,
        compression: int = zipfile.ZIP_DEFLATED,
        compresslevel: int | None = None,
    ) -> None:
        self.compression = compression
        self.compresslevel = compresslevel

    def open_write(self, path: Path) -> ZipWriteHandle:
        parent = path.parent
        try:
            parent_ok = parent.is_dir()
            target_is_dir = parent_ok and path.is_dir()
        except OSError as exc:
            raise BackendError(_describe(exc)) from exc
        if not parent_ok:
            raise BackendError(f"No such directory: {parent}")
        if target_is_dir:
            raise BackendError(f"Is a directory: {path}")
        return ZipWriteHandle(
            path, compression=self.compression, compresslevel=self.compresslevel
        )

    def open_read(self, path: Path) -> ZipReadHandle:
        try:
            archive = zipfile.ZipFile(path, "r")
        except _LIBRARY_ERRORS as exc:
            raise BackendError(_describe(exc)) from exc
        return ZipReadHandle(path, archive)


__all__ = [
    "ArchiveBackend",
    "EntryStream",
    "ReadHandle",
    "WriteHandle",
    "ZipEntryStream",
    "ZipFileBackend",
    "ZipReadHandle",
    "ZipWriteHandle",
]
