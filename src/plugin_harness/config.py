"""Harness configuration from defaults, a TOML file and the environment."""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

import appdirs
import tomli
from pydantic import Field, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from plugin_harness.errors import ConfigurationError

APP_NAME = "plugin-harness"
CONFIG_TABLE = "plugin_harness"
ENV_PREFIX = "PLUGIN_HARNESS_"
CONFIG_PATH_VAR = f"{ENV_PREFIX}CONFIG"


def default_config_path() -> Path:
    return Path(appdirs.user_config_dir(APP_NAME)) / "config.toml"


def config_file() -> Optional[Path]:
    """The TOML file to read: ``$PLUGIN_HARNESS_CONFIG`` or the per-user file.

    A file named by the variable must exist; the per-user file is optional.
    """
    explicit = os.environ.get(CONFIG_PATH_VAR)
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            raise ConfigurationError(
                f"Configuration file not found: {path}", {"path": str(path)}
            )
        return path

    user_path = default_config_path()
    return user_path if user_path.is_file() else None


def _read_table(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            document = tomli.load(f)
    except tomli.TOMLDecodeError as e:
        raise ConfigurationError(
            f"Malformed configuration file {path}: {e}", {"path": str(path)}
        ) from e
    return document.get(CONFIG_TABLE, {})


class TomlTableSource(PydanticBaseSettingsSource):
    """Settings from the ``[plugin_harness]`` table of a TOML file."""

    def __init__(self, settings_cls: Type[BaseSettings], path: Optional[Path]):
        super().__init__(settings_cls)
        self.path = path
        self.table = {} if path is None else _read_table(path)

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return self.table.get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        # unknown keys are passed on so validation rejects them
        return dict(self.table)


class HarnessConfig(BaseSettings):
    """Harness settings.

    Environment variables (``PLUGIN_HARNESS_<FIELD>``) override the TOML file,
    which overrides the defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX, env_ignore_empty=True, extra="forbid", frozen=True
    )

    temp_dir: Optional[Path] = None
    test_dir_name: str = Field("tests", min_length=1)
    build_dir_name: str = Field("build", min_length=1)
    environment_class: str = Field("legacy_host.LegacyEnvironment", min_length=1)
    log_level: str = "INFO"

    @field_validator("temp_dir")
    @classmethod
    def _expand_home(cls, value: Optional[Path]) -> Optional[Path]:
        return None if value is None else value.expanduser()

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, TomlTableSource(settings_cls, config_file())


def load_config(**overrides: Any) -> HarnessConfig:
    """Load configuration: defaults, then the TOML file, then environment variables.

    Keyword arguments take precedence over all of them.
    """
    try:
        return HarnessConfig(**overrides)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}", {"errors": e.errors(include_url=False)}
        ) from e


@lru_cache(maxsize=1)
def get_config() -> HarnessConfig:
    """Return the process-wide configuration, loading it once."""
    return load_config()


def reset_config() -> None:
    get_config.cache_clear()
