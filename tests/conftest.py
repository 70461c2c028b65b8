from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

# Ensure the repository-local ``src`` directory is importable when the project is
# not installed as a package.
SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

import zippy.config as config_module  # noqa: E402
from zippy.reporting import MemoryReporter  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path_factory):
    """Point the config store at an empty per-test home."""

    home = tmp_path_factory.mktemp("zippy-home")
    monkeypatch.setenv("ZIPPY_HOME", str(home))
    monkeypatch.setattr(config_module, "ZIPPY_DIR", str(home), raising=False)
    monkeypatch.setattr(config_module, "CONFIG_PATH", str(home / "config.json"), raising=False)
    for name in ("ZIPPY_COMPRESSION", "ZIPPY_COMPRESSLEVEL", "ZIPPY_SORT_ENTRIES", "ZIPPY_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test with ``tmp_path`` as the working directory."""

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def reporter():
    return MemoryReporter()


@pytest.fixture
def make_tree():
    """Create files under a root from a ``{relative path: bytes | None}`` mapping.

    ``None`` creates an empty directory.
    """

    def _make(root: Path, layout: dict[str, bytes | None]) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for relative, content in layout.items():
            target = root / relative
            if content is None:
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content)
        return root

    return _make


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_zippy_logger():
    """Undo handlers and levels that ``configure_logging`` attaches during CLI tests."""

    logger = logging.getLogger("zippy")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
