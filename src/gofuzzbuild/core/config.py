"""Configuration: validated build intent plus tool settings from .env and YAML."""

from __future__ import annotations

import logging
import os
import unicodedata
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, ValidationError, field_validator

from gofuzzbuild.core.exceptions import ConfigError

log = logging.getLogger(__name__)

#: Prefix of the environment variables that override config values.
ENV_PREFIX = "GOFUZZBUILD_"

#: Build tags every fuzz build is compiled with, ahead of any user tags.
FUZZ_TAGS = ("gofuzz", "gofuzz_libfuzzer", "libfuzzer")

GO_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer",
        "else", "fallthrough", "for", "func", "go", "goto", "if", "import",
        "interface", "map", "package", "range", "return", "select", "struct",
        "switch", "type", "var",
    }
)


def is_identifier(name: str) -> bool:
    """True if ``name`` is a Go identifier (letters, ``_`` and decimal digits; not a keyword)."""
    if not name or name in GO_KEYWORDS:
        return False
    for i, ch in enumerate(name):
        if ch == "_" or ch.isalpha():
            continue
        if i > 0 and unicodedata.category(ch) == "Nd":
            continue
        return False
    return True


def is_exported(name: str) -> bool:
    """True if ``name`` starts with an upper-case letter."""
    return bool(name) and unicodedata.category(name[0]) == "Lu"


def compose_tags(extra_tags: tuple[str, ...] | list[str] = ()) -> str:
    """Join the fixed fuzz tags and the user tags into one ``-tags`` value."""
    return ",".join([*FUZZ_TAGS, *extra_tags])


class BuildConfig(BaseModel):
    """Validated, immutable user intent for a single build."""

    model_config = {"frozen": True}

    entry_func: str = "Fuzz"
    output: Path | None = None
    race: bool = False
    extra_tags: tuple[str, ...] = ()
    verbose: bool = False
    keep_work: bool = False
    print_commands: bool = False

    @field_validator("entry_func")
    @classmethod
    def check_entry_func(cls, value: str) -> str:
        if not is_identifier(value) or not is_exported(value):
            raise ValueError("--func must be an exported identifier")
        return value

    @field_validator("extra_tags", mode="before")
    @classmethod
    def split_tags(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        seen: list[str] = []
        for tag in value:
            tag = str(tag).strip()
            if tag and tag not in seen:
                seen.append(tag)
        return tuple(seen)

    @classmethod
    def create(cls, **kwargs: Any) -> BuildConfig:
        """Construct a BuildConfig, turning validation failures into ConfigError."""
        try:
            return cls(**kwargs)
        except ValidationError as e:
            err = e.errors()[0]
            cause = err.get("ctx", {}).get("error")
            raise ConfigError(str(cause) if cause else err["msg"]) from e

    @property
    def tags(self) -> str:
        return compose_tags(self.extra_tags)


def _find_project_root(start: Path | None = None) -> Path:
    """Find the enclosing Go module root by looking for go.mod upward."""
    current = Path(start or Path.cwd()).resolve()
    for _ in range(10):
        if (current / "go.mod").exists():
            return current
        parent = current.parent
        if parent == current:
            break
        current = parent
    return Path.cwd().resolve()


class AppConfig(BaseModel):
    """Tool-level settings shared by every build."""

    go_bin: str = "go"
    work_dir: str = "."
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level


class ConfigManager:
    """Load and merge configuration from .env and YAML."""

    def __init__(
        self,
        project_root: Path | None = None,
        env_path: Path | None = None,
        config_path: Path | None = None,
    ) -> None:
        self._root = Path(project_root or _find_project_root()).resolve()
        self._env_path = Path(env_path) if env_path else self._root / ".env"
        self._config_path = Path(config_path) if config_path else self._root / "gofuzzbuild.yaml"
        self._config: AppConfig | None = None
        self._env: dict[str, str] = {}

    def load_env(self) -> dict[str, str]:
        """Load .env file into a dict (without modifying os.environ).

        ``GOFUZZBUILD_*`` variables already set in the process environment win over .env.
        """
        env: dict[str, str] = {}
        try:
            env = {k: v for k, v in dotenv_values(self._env_path).items() if v is not None}
        except OSError as e:
            log.warning("Failed to read .env file %s: %s", self._env_path, e)
        env.update({k: v for k, v in os.environ.items() if k.startswith(ENV_PREFIX)})
        self._env = env
        return self._env

    def load_yaml(self) -> dict[str, Any]:
        """Load YAML config file if it exists."""
        if not self._config_path.exists():
            return {}
        try:
            with open(self._config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            log.warning("Failed to read config file %s: %s", self._config_path, e)
            return {}
        except yaml.YAMLError as e:
            log.warning("Malformed YAML in %s: %s", self._config_path, e)
            return {}
        if not isinstance(data, dict):
            log.warning("Ignoring config file %s: top level is not a mapping", self._config_path)
            return {}
        return data

    def load(self) -> AppConfig:
        """Load .env and YAML, merge with defaults, return AppConfig."""
        env = self.load_env()
        yaml_data = self.load_yaml()

        config_dict: dict[str, Any] = {
            key: yaml_data[key] for key in ("go_bin", "work_dir", "log_level") if key in yaml_data
        }
        # Environment variables override YAML values
        env_mapping = {
            "GOFUZZBUILD_GO": "go_bin",
            "GOFUZZBUILD_WORK_DIR": "work_dir",
            "GOFUZZBUILD_LOG_LEVEL": "log_level",
        }
        for env_key, config_key in env_mapping.items():
            if env.get(env_key):
                config_dict[config_key] = env[env_key]

        try:
            self._config = AppConfig(**config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
        return self._config

    @property
    def config(self) -> AppConfig:
        """Return loaded config; load if not yet loaded."""
        if self._config is None:
            self.load()
        if self._config is None:
            raise RuntimeError("ConfigManager.load() failed to produce a config")
        return self._config

    @property
    def work_dir(self) -> Path:
        """Directory the harness is written to and go runs in (relative paths resolve against cwd)."""
        return Path(self.config.work_dir).resolve()
