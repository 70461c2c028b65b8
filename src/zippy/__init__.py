"""Pack directory trees into zip archives and unpack them again."""

from .errors import (
    ArchiveError,
    CommitError,
    ConfigError,
    EntryError,
    FilesystemError,
    NotFoundError,
    OpenError,
    ValidationError,
    ZippyError,
)
from .models import EntryKind, EntryRecord, PackResult, UnpackResult
from .reader import unpack, unpack_archive
from .reporting import ConsoleReporter, LoggingReporter, MemoryReporter, Reporter
from .writer import pack, pack_directory

__version__ = "0.1.0"

__all__ = [
    "ArchiveError",
    "CommitError",
    "ConfigError",
    "ConsoleReporter",
    "EntryError",
    "EntryKind",
    "EntryRecord",
    "FilesystemError",
    "LoggingReporter",
    "MemoryReporter",
    "NotFoundError",
    "OpenError",
    "PackResult",
    "Reporter",
    "UnpackResult",
    "ValidationError",
    "ZippyError",
    "pack",
    "pack_directory",
    "unpack",
    "unpack_archive",
]
