from __future__ import annotations

from dataclasses import asdict
from typing import Any

import typer

from .config import ConfigData, ConfigStore, resolve_config


def get_config_from_context(ctx: typer.Context, *, store: ConfigStore | None = None) -> ConfigData:
    """Return a cached :class:`ConfigData` instance stored on ``ctx``."""

    ctx.ensure_object(dict)
    existing = ctx.obj.get("config") if ctx.obj else None
    if isinstance(existing, ConfigData):
        return existing

    cfg = resolve_config(store)
    ctx.obj["config"] = cfg
    return cfg


def with_overrides(cfg: ConfigData, **overrides: Any) -> ConfigData:
    """Return ``cfg`` with every non-``None`` override applied and validated."""

    values = asdict(cfg)
    values.update({key: value for key, value in overrides.items() if value is not None})
    return ConfigData.from_mapping(values)


__all__ = ["get_config_from_context", "with_overrides"]
