"""Shared pytest fixtures for gofuzzbuild tests.

Factory functions live in ``_helpers.py``; this module re-exports them as
pytest fixtures so tests can receive them via dependency injection.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gofuzzbuild.core.config import BuildConfig, ConfigManager

from _helpers import make_build_config, make_config_manager


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep GOFUZZBUILD_* from the developer's shell out of the tests."""
    for key in ("GOFUZZBUILD_GO", "GOFUZZBUILD_WORK_DIR", "GOFUZZBUILD_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def config_manager(tmp_path: Path) -> ConfigManager:
    """A real ConfigManager backed by defaults (no YAML/env file)."""
    return make_config_manager(tmp_path)


@pytest.fixture()
def build_config() -> BuildConfig:
    """Default BuildConfig: entry point ``Fuzz``, no extra tags or toggles."""
    return make_build_config()
