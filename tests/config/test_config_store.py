from __future__ import annotations

import json
import zipfile
from pathlib import Path

import pytest

import zippy.config as config_module
from zippy.config import ConfigData, ConfigStore, resolve_config
from zippy.errors import ConfigError


def test_missing_file_loads_defaults(tmp_path: Path) -> None:
    cfg = ConfigStore(path=tmp_path / "config.json").load()
    assert cfg == ConfigData()
    assert cfg.compression_method == zipfile.ZIP_DEFLATED


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"
    store = ConfigStore(path=path)
    store.save(ConfigData(compression="lzma", compresslevel=7, sort_entries=True))

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "compression": "lzma",
        "compresslevel": 7,
        "sort_entries": True,
    }
    assert store.load() == ConfigData(compression="lzma", compresslevel=7, sort_entries=True)
    assert not path.with_suffix(".tmp").exists()


def test_default_path_follows_module_setting(isolated_config: Path) -> None:
    assert ConfigStore().path == isolated_config / "config.json"
    assert Path(config_module.CONFIG_PATH) == isolated_config / "config.json"


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"compression": "stored", "legacy": 1}), encoding="utf-8")

    assert ConfigStore(path=path).load() == ConfigData(compression="stored")


@pytest.mark.parametrize(
    ("key", "raw", "expected"),
    [
        ("compression", "BZIP2", "bzip2"),
        ("compresslevel", "5", 5),
        ("compresslevel", "none", None),
        ("sort_entries", "yes", True),
        ("sort_entries", "0", False),
    ],
)
def test_set_value_parses_and_persists(tmp_path: Path, key: str, raw: str, expected) -> None:
    store = ConfigStore(path=tmp_path / "config.json")

    cfg = store.set_value(key, raw)

    assert getattr(cfg, key) == expected
    assert getattr(store.load(), key) == expected


@pytest.mark.parametrize(
    ("key", "raw", "message"),
    [
        ("compression", "zstd", "Unknown compression"),
        ("compresslevel", "ten", "Invalid integer"),
        ("compresslevel", "12", "between 0 and 9"),
        ("sort_entries", "maybe", "Invalid boolean"),
        ("colour", "blue", "Unknown config key"),
    ],
)
def test_set_value_rejects_bad_input(tmp_path: Path, key: str, raw: str, message: str) -> None:
    store = ConfigStore(path=tmp_path / "config.json")
    with pytest.raises(ConfigError, match=message):
        store.set_value(key, raw)
    assert not store.path.exists()


def test_invalid_json_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid JSON"):
        ConfigStore(path=path).load()


def test_non_object_json_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError, match="JSON object"):
        ConfigStore(path=path).load()


def test_invalid_utf8_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_bytes(b"\xff\xfe{}")
    with pytest.raises(ConfigError, match="not valid UTF-8"):
        ConfigStore(path=path).load()


def test_unreadable_config_path_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.mkdir()
    with pytest.raises(ConfigError, match="could not be read"):
        ConfigStore(path=path).load()


def test_invalid_stored_value_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"compresslevel": True}), encoding="utf-8")
    with pytest.raises(ConfigError):
        ConfigStore(path=path).load()


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = ConfigStore(path=tmp_path / "config.json")
    store.save(ConfigData(compression="lzma", sort_entries=False))
    monkeypatch.setenv("ZIPPY_COMPRESSION", "stored")
    monkeypatch.setenv("ZIPPY_SORT_ENTRIES", "true")

    cfg = resolve_config(store)

    assert cfg == ConfigData(compression="stored", compresslevel=None, sort_entries=True)
    assert store.load().compression == "lzma"


def test_invalid_environment_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ZIPPY_COMPRESSLEVEL", "12")
    with pytest.raises(ConfigError, match="ZIPPY_COMPRESSLEVEL"):
        resolve_config(ConfigStore(path=tmp_path / "config.json"))
