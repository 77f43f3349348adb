"""Configuration management for scriptfsm."""

from scriptfsm.config.settings import (
    FSMSettings,
    ScriptConfig,
    EngineConfig,
)

__all__ = [
    "FSMSettings",
    "ScriptConfig",
    "EngineConfig",
]
