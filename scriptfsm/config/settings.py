"""
Configuration for scriptfsm.

Settings describe the user-script sandbox and the engine limits. They are
read from a YAML file (scriptfsm.yaml, scriptfsm.yml or $SCRIPTFSM_CONFIG),
from SCRIPTFSM_* environment variables and from .env:

    log_level: DEBUG
    script:
      blocked_modules: [os, sys, subprocess]
    engine:
      max_steps: 10000
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Type

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from scriptfsm.resolver.script import DEFAULT_BLOCKED_MODULES

logger = logging.getLogger(__name__)


class ScriptConfig(BaseModel):
    """User script sandbox configuration."""

    # Top-level modules user scripts may not import
    blocked_modules: List[str] = Field(
        default_factory=lambda: list(DEFAULT_BLOCKED_MODULES)
    )
    # Name reported in tracebacks
    filename: str = "<user>"


class EngineConfig(BaseModel):
    """Execution engine configuration."""

    # Ceiling on transitions per run. None = unbounded; a cyclic,
    # always-satisfied machine then runs forever.
    max_steps: Optional[int] = Field(default=None, ge=1)

_DEFAULT_CONFIG_FILES = ("scriptfsm.yaml", "scriptfsm.yml")


def find_config_file(explicit: Optional[Path] = None) -> Optional[Path]:
    """
    Locate the YAML config for a settings load.

    An explicit path or ``$SCRIPTFSM_CONFIG`` wins outright (a missing file
    there means no config, not a fallback to the working directory).
    Otherwise the first of ``_DEFAULT_CONFIG_FILES`` in the working directory
    is used.
    """
    chosen = explicit or os.environ.get("SCRIPTFSM_CONFIG")
    if chosen:
        path = Path(chosen)
        return path if path.is_file() else None
    return next(
        (Path(n) for n in _DEFAULT_CONFIG_FILES if Path(n).is_file()), None
    )


class YamlConfigSource(PydanticBaseSettingsSource):
    """
    Settings source backed by a scriptfsm YAML file.

    Top-level keys are FSMSettings field names; unknown keys are dropped.
    Invalid YAML propagates as yaml.YAMLError.
    """

    def __init__(self, settings_cls: Type[BaseSettings], path: Optional[Path] = None):
        super().__init__(settings_cls)
        self.path = find_config_file(path)
        self._data: Dict[str, Any] = self._read() if self.path else {}

    def _read(self) -> Dict[str, Any]:
        import yaml

        with open(self.path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config {self.path}: top level is not a mapping")
            return {}
        logger.debug(f"Loaded config from {self.path}")
        return data

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        value = self._data.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> Dict[str, Any]:
        known = self.settings_cls.model_fields
        return {k: v for k, v in self._data.items() if k in known and k != "config_file"}


class FSMSettings(BaseSettings):
    """
    scriptfsm configuration.

    Sources, highest priority first: constructor arguments, the YAML config
    file, ``SCRIPTFSM_*`` environment variables (``__`` separates nesting,
    e.g. ``SCRIPTFSM_ENGINE__MAX_STEPS``), ``.env``, defaults.

    Example:
        ```python
        settings = FSMSettings(config_file="ci.yaml")
        settings.engine.max_steps
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="SCRIPTFSM_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Only honored as a constructor argument; selects the YAML source
    config_file: Optional[Path] = Field(default=None, exclude=True)

    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    script: ScriptConfig = Field(default_factory=ScriptConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        explicit = init_settings.init_kwargs.get("config_file")
        return (
            init_settings,
            YamlConfigSource(settings_cls, Path(explicit) if explicit else None),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )
