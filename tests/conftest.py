from __future__ import annotations

import logging
import os

import pytest

from portfolio_engine.settings import CONFIG_ENV_VAR, EngineSettings
from portfolio_engine.state import AppState


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the developer's env and config files out of every test."""
    for key in list(os.environ):
        if key.startswith("PORTFOLIO_ENGINE_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.toml"))


@pytest.fixture
def settings():
    return EngineSettings(source_timeout_seconds=1.0, max_tries=1)


@pytest.fixture
def state(settings):
    return AppState(settings=settings, logger=logging.getLogger("portfolio_engine.test"))


@pytest.fixture(autouse=True)
def restore_root_logging():
    """CLI tests call setup_logging, which replaces the root handlers."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
