"""Pack a directory tree into a zip archive."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from .backend import ArchiveBackend, ZipFileBackend
from .config import ConfigData, resolve_config
from .errors import (
    BackendError,
    CommitError,
    EntryError,
    FilesystemError,
    NotFoundError,
    OpenError,
    ZippyError,
)
from .models import EntryKind, EntryRecord, PackResult
from .paths import ARCHIVE_SUFFIX, resolve_path, validate_relative_path
from .reporting import Reporter, default_reporter, report_error

logger = logging.getLogger(__name__)


def backend_from_config(config: ConfigData) -> ZipFileBackend:
    return ZipFileBackend(
        compression=config.compression_method, compresslevel=config.compresslevel
    )


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def walk_source(root: Path, *, sort: bool = False) -> Iterator[tuple[Path, str]]:
    """Yield ``(absolute path, POSIX path relative to root)`` depth first.

    Subdirectories of a directory are yielded before its files, and every
    directory is yielded before anything inside it. Symlinked directories are
    yielded but not descended into.
    """

    for current, dirs, files in os.walk(root, onerror=_raise_walk_error):
        if sort:
            dirs.sort()
            files.sort()
        base = Path(current)
        for name in (*dirs, *files):
            full = base / name
            yield full, full.relative_to(root).as_posix()


def pack_directory(
    source_dir: str,
    archive_out: str,
    *,
    reporter: Reporter | None = None,
    config: ConfigData | None = None,
    cwd: str | os.PathLike[str] | None = None,
    backend: ArchiveBackend | None = None,
) -> PackResult:
    """Archive ``source_dir`` into ``archive_out``.

    Both paths are relative to ``cwd`` (default: the process working
    directory). An existing archive at ``archive_out`` is replaced, never
    merged. Raises an :class:`~zippy.errors.ArchiveError` subclass on failure;
    a failed call leaves no archive file behind.
    """

    reporter = reporter or default_reporter()
    validate_relative_path(source_dir, role="input")
    validate_relative_path(archive_out, role="output", suffix=ARCHIVE_SUFFIX)

    cfg = config or resolve_config()
    source = resolve_path(source_dir, cwd)
    archive = resolve_path(archive_out, cwd)

    try:
        source_exists = source.exists()
        source_is_dir = source_exists and source.is_dir()
    except OSError as exc:
        raise NotFoundError(
            f'The data folder: "{source}" cannot be accessed', path=source, detail=str(exc)
        ) from exc
    if not source_exists:
        raise NotFoundError(f'The data folder: "{source}" does not exist', path=source)
    if not source_is_dir:
        raise NotFoundError(f'The data folder: "{source}" is not a directory', path=source)

    try:
        archive_present = archive.exists() or archive.is_symlink()
    except OSError as exc:
        raise FilesystemError(
            f'Failed to inspect zip file: "{archive}"', path=archive, detail=str(exc)
        ) from exc
    if archive_present:
        reporter.info(f'Removing existing zip file: "{archive}"')
        try:
            archive.unlink()
        except OSError as exc:
            raise FilesystemError(
                f'Failed to remove existing zip file: "{archive}"', path=archive, detail=str(exc)
            ) from exc

    backend = backend or backend_from_config(cfg)
    try:
        handle = backend.open_write(archive)
    except BackendError as exc:
        raise OpenError(
            f'Failed to create zip file: "{archive}"', path=archive, detail=str(exc)
        ) from exc

    entries: list[EntryRecord] = []
    with handle:
        walker = walk_source(source, sort=cfg.sort_entries)
        while True:
            try:
                full, relative = next(walker)
            except StopIteration:
                break
            except OSError as exc:
                failed = Path(exc.filename) if exc.filename else source
                raise EntryError(
                    f'Failed to read directory: "{failed}"', path=failed, detail=str(exc)
                ) from exc

            try:
                is_file = full.is_file()
                is_dir = not is_file and full.is_dir()
            except OSError as exc:
                raise EntryError(
                    f'Failed to read entry: "{relative}"', path=relative, detail=str(exc)
                ) from exc

            if is_file:
                record = EntryRecord(path=relative, kind=EntryKind.FILE)
                try:
                    handle.add_file(record.archive_name, full, overwrite=True)
                except BackendError as exc:
                    raise EntryError(
                        f'Failed to add file: "{relative}" to zip file',
                        path=relative,
                        detail=str(exc),
                    ) from exc
            elif is_dir:
                record = EntryRecord(path=relative, kind=EntryKind.DIRECTORY)
                try:
                    handle.add_directory(record.archive_name)
                except BackendError as exc:
                    raise EntryError(
                        f'Failed to add directory: "{relative}" to zip file',
                        path=relative,
                        detail=str(exc),
                    ) from exc
            else:
                reporter.warning(f'Skipping "{relative}": not a regular file or directory')
                continue
            entries.append(record)

        try:
            handle.commit()
        except BackendError as exc:
            raise CommitError(
                f'Failed to save the zip file: "{archive_out}"', path=archive, detail=str(exc)
            ) from exc

    logger.info("Packed %d entries from %s into %s", len(entries), source, archive)
    reporter.success(f'Packed "{source_dir}" into "{archive_out}" ({len(entries)} entries)')
    return PackResult(source=source, archive=archive, entries=entries)


def pack(
    source_dir: str,
    archive_out: str,
    *,
    reporter: Reporter | None = None,
    config: ConfigData | None = None,
    cwd: str | os.PathLike[str] | None = None,
    backend: ArchiveBackend | None = None,
) -> bool:
    """Boolean form of :func:`pack_directory`; failures are reported, not raised."""

    reporter = reporter or default_reporter()
    try:
        pack_directory(
            source_dir, archive_out, reporter=reporter, config=config, cwd=cwd, backend=backend
        )
    except ZippyError as exc:
        report_error(reporter, exc)
        return False
    return True


__all__ = ["backend_from_config", "pack", "pack_directory", "walk_source"]
