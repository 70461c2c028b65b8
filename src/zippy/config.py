from __future__ import annotations

import json
import logging
import os
import zipfile
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from .errors import ConfigError

logger = logging.getLogger(__name__)

ZIPPY_DIR = os.path.expanduser(os.getenv("ZIPPY_HOME", "~/.zippy"))
CONFIG_PATH = os.path.join(ZIPPY_DIR, "config.json")

COMPRESSION_METHODS: dict[str, int] = {
    "stored": zipfile.ZIP_STORED,
    "deflated": zipfile.ZIP_DEFLATED,
    "bzip2": zipfile.ZIP_BZIP2,
    "lzma": zipfile.ZIP_LZMA,
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(key: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for '{key}': {raw!r}")


def _parse_compression(key: str, raw: Any) -> str:
    value = str(raw).strip().lower()
    if value not in COMPRESSION_METHODS:
        choices = ", ".join(sorted(COMPRESSION_METHODS))
        raise ConfigError(f"Unknown compression '{raw}' for '{key}'; expected one of: {choices}")
    return value


def _parse_level(key: str, raw: Any) -> int | None:
    if raw is None or (isinstance(raw, str) and raw.strip().lower() in {"", "none", "null"}):
        return None
    if isinstance(raw, bool):
        raise ConfigError(f"Invalid integer for '{key}': {raw!r}")
    try:
        level = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid integer for '{key}': {raw!r}") from exc
    if not 0 <= level <= 9:
        raise ConfigError(f"'{key}' must be between 0 and 9, got {level}")
    return level


_PARSERS = {
    "compression": _parse_compression,
    "compresslevel": _parse_level,
    "sort_entries": _parse_bool,
}

_ENV_OVERRIDES = {
    "compression": "ZIPPY_COMPRESSION",
    "compresslevel": "ZIPPY_COMPRESSLEVEL",
    "sort_entries": "ZIPPY_SORT_ENTRIES",
}


@dataclass
class ConfigData:
    compression: str = "deflated"
    compresslevel: int | None = None
    sort_entries: bool = False

    @property
    def compression_method(self) -> int:
        return COMPRESSION_METHODS[self.compression]

    @classmethod
    def from_mapping(cls, raw: dict[str, Any]) -> ConfigData:
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in raw.items():
            if key not in known:
                logger.debug("Ignoring unknown config key %s", key)
                continue
            values[key] = _PARSERS[key](key, value)
        return cls(**values)


class ConfigStore:
    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self.path = Path(path) if path else Path(CONFIG_PATH)

    def _ensure(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Config file {self.path} is not valid JSON: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ConfigError(f"Config file {self.path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Config file {self.path} could not be read: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {self.path} must contain a JSON object")
        return raw

    def _write(self, data: dict[str, Any]) -> None:
        self._ensure()
        tmp = self.path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
        tmp.replace(self.path)

    def load(self) -> ConfigData:
        return ConfigData.from_mapping(self._read())

    def save(self, cfg: ConfigData) -> None:
        self._write(asdict(cfg))

    def set_value(self, key: str, raw: str) -> ConfigData:
        """Parse ``raw`` for ``key`` and persist it."""

        if key not in _PARSERS:
            choices = ", ".join(sorted(_PARSERS))
            raise ConfigError(f"Unknown config key '{key}'; expected one of: {choices}")
        cfg = self.load()
        setattr(cfg, key, _PARSERS[key](key, raw))
        self.save(cfg)
        return cfg


def apply_env_overrides(cfg: ConfigData) -> ConfigData:
    values = asdict(cfg)
    for key, env_name in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or raw == "":
            continue
        values[key] = _PARSERS[key](env_name, raw)
    return ConfigData(**values)


def resolve_config(store: ConfigStore | None = None) -> ConfigData:
    """Return the stored config with ``ZIPPY_*`` environment overrides applied."""

    return apply_env_overrides((store or ConfigStore()).load())


__all__ = [
    "COMPRESSION_METHODS",
    "CONFIG_PATH",
    "ConfigData",
    "ConfigStore",
    "ZIPPY_DIR",
    "apply_env_overrides",
    "resolve_config",
]
