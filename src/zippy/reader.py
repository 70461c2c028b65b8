"""Unpack a zip archive into a directory named after it."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path, PurePosixPath

from .backend import ArchiveBackend, EntryStream, ReadHandle, ZipFileBackend
from .errors import (
    BackendError,
    EntryError,
    FilesystemError,
    NotFoundError,
    OpenError,
    ZippyError,
)
from .models import EntryKind, EntryRecord, UnpackResult
from .paths import ARCHIVE_SUFFIX, resolve_path, strip_archive_suffix, validate_relative_path
from .reporting import Reporter, default_reporter, report_error

logger = logging.getLogger(__name__)


def _normalize_name(name: str) -> str:
    return name.replace("\\", "/")


def is_directory_entry(name: str) -> bool:
    return name.endswith(("/", "\\"))


def entry_target(root: Path, name: str) -> Path:
    """Return where entry ``name`` lands under ``root``.

    ``root`` must already be resolved. Absolute names, drive-qualified names
    and names that climb out of ``root`` raise :class:`EntryError`.
    """

    member = PurePosixPath(_normalize_name(name))
    if member.is_absolute() or (member.parts and ":" in member.parts[0]):
        raise EntryError(f'Archive entry "{name}" has an absolute path', path=name)
    try:
        target = (root / member).resolve()
    except (OSError, RuntimeError) as exc:
        raise EntryError(
            f'Archive entry "{name}" cannot be resolved', path=name, detail=str(exc)
        ) from exc
    if target != root and root not in target.parents:
        raise EntryError(f'Archive entry "{name}" would extract outside "{root}"', path=name)
    return target


def read_entry(stream: EntryStream, name: str) -> bytes:
    """Read the whole of ``stream`` after measuring it with seek/tell."""

    if not stream.seekable():
        raise EntryError(
            f'The file: "{name}" is not seekable, cannot determine file size', path=name
        )
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    if size < 0:
        raise EntryError(
            f'The file: "{name}" could not be ftell-ed, cannot determine file size', path=name
        )
    stream.seek(0, os.SEEK_SET)
    data = stream.read(size)
    if len(data) != size:
        raise EntryError(
            f'Failed to read data from the file: "{name}"',
            path=name,
            detail=f"expected {size} bytes, got {len(data)}",
        )
    return data


def _reset_destination(destination: Path, reporter: Reporter) -> None:
    try:
        if destination.is_dir() and not destination.is_symlink():
            shutil.rmtree(destination)
            reporter.info(f'Old zip output folder: "{destination}" was removed')
        elif destination.exists() or destination.is_symlink():
            destination.unlink()
            reporter.info(f'Old zip output path: "{destination}" was removed')
        destination.mkdir()
    except OSError as exc:
        raise FilesystemError(
            f'Failed to prepare output folder: "{destination}"', path=destination, detail=str(exc)
        ) from exc


def _extract_file(handle: ReadHandle, name: str, target: Path) -> None:
    try:
        stream = handle.open_entry(name)
    except BackendError as exc:
        raise EntryError(
            f'Failed to read file entry: "{name}" from zip file', path=name, detail=str(exc)
        ) from exc
    try:
        data = read_entry(stream, name)
    except BackendError as exc:
        raise EntryError(
            f'Failed to read data from the file: "{name}"', path=name, detail=str(exc)
        ) from exc
    finally:
        stream.close()

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as exc:
        raise FilesystemError(
            f'Failed to create new file for: "{name}"', path=target, detail=str(exc)
        ) from exc
    logger.debug("Extracted %s (%d bytes)", name, len(data))


def unpack_archive(
    archive_in: str,
    *,
    reporter: Reporter | None = None,
    cwd: str | os.PathLike[str] | None = None,
    backend: ArchiveBackend | None = None,
) -> UnpackResult:
    """Extract ``archive_in`` into a sibling directory without the ``.zip`` suffix.

    An existing destination is removed first. On failure, entries extracted
    before the failing one are left on disk.
    """

    reporter = reporter or default_reporter()
    validate_relative_path(archive_in, role="archive", suffix=ARCHIVE_SUFFIX)
    archive = resolve_path(archive_in, cwd)
    destination = strip_archive_suffix(archive)

    try:
        archive_ok = archive.is_file()
    except OSError as exc:
        raise NotFoundError(
            f'The zip file: "{archive_in}" cannot be accessed', path=archive, detail=str(exc)
        ) from exc
    if not archive_ok:
        raise NotFoundError(f'The zip file: "{archive_in}" does not exist', path=archive)

    backend = backend or ZipFileBackend()
    try:
        handle = backend.open_read(archive)
    except BackendError as exc:
        raise OpenError(
            f'Failed to open zip file: "{archive}"', path=archive, detail=str(exc)
        ) from exc

    entries: list[EntryRecord] = []
    with handle:
        if handle.entry_count() < 0:
            raise OpenError(f'The zip file "{archive}" has an invalid entry table', path=archive)
        try:
            names = handle.entry_names()
        except BackendError as exc:
            raise EntryError(
                f'Failed to list entries of zip file: "{archive}"', path=archive, detail=str(exc)
            ) from exc

        _reset_destination(destination, reporter)
        root = destination.resolve()

        for name in names:
            target = entry_target(root, name)
            relative = _normalize_name(name).rstrip("/")
            if is_directory_entry(name):
                if not relative:
                    continue
                try:
                    target.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    raise FilesystemError(
                        f'Failed to create folder for: "{name}"', path=target, detail=str(exc)
                    ) from exc
                entries.append(EntryRecord(path=relative, kind=EntryKind.DIRECTORY))
            else:
                _extract_file(handle, name, target)
                entries.append(EntryRecord(path=relative, kind=EntryKind.FILE))

    logger.info("Unpacked %d entries from %s into %s", len(entries), archive, destination)
    reporter.success(f'Unpacked "{archive_in}" into "{destination}" ({len(entries)} entries)')
    return UnpackResult(archive=archive, destination=destination, entries=entries)


def unpack(
    archive_in: str,
    *,
    reporter: Reporter | None = None,
    cwd: str | os.PathLike[str] | None = None,
    backend: ArchiveBackend | None = None,
) -> bool:
    """Boolean form of :func:`unpack_archive`; failures are reported, not raised."""

    reporter = reporter or default_reporter()
    try:
        unpack_archive(archive_in, reporter=reporter, cwd=cwd, backend=backend)
    except ZippyError as exc:
        report_error(reporter, exc)
        return False
    return True


__all__ = [
    "entry_target",
    "is_directory_entry",
    "read_entry",
    "unpack",
    "unpack_archive",
]
