import os
from pathlib import Path

import pytest

from plugin_harness.config import reset_config


@pytest.fixture
def fixture_path() -> Path:
    """Directory holding the fixture host modules"""
    return Path(__file__).parent.parent / "fixtures_data"


@pytest.fixture
def host_path(monkeypatch, fixture_path: Path) -> Path:
    """Make the fixture host modules importable"""
    path = fixture_path / "host"
    monkeypatch.syspath_prepend(str(path))
    return path


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path: Path):
    """Keep user configuration files and variables out of the tests"""
    for var in list(os.environ):
        if var.startswith("PLUGIN_HARNESS_"):
            monkeypatch.delenv(var)
    monkeypatch.setattr(
        "plugin_harness.config.default_config_path",
        lambda: tmp_path / "user-config" / "config.toml",
    )
    reset_config()
    yield
    reset_config()
