"""Pipeline settings loaded from YAML with environment overrides."""

from clone_lab.config.settings import (
    GeneratorSettings,
    PipelineSettings,
    configure_logging,
    get_settings,
    load_settings,
)

__all__ = [
    "GeneratorSettings",
    "PipelineSettings",
    "configure_logging",
    "get_settings",
    "load_settings",
]
