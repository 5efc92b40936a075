"""Settings loader.

Resolution order for the settings file:
1. Explicit path passed to load_settings()
2. CLONE_LAB_CONFIG environment variable
3. Packaged defaults.yaml

Environment overrides applied after the file is read:
- CLONE_LAB_LOG_LEVEL
- CLONE_LAB_GENERATOR_MODEL
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from clone_lab.minds.schemas import MindId
from clone_lab.orchestrator.schemas import OrchestratorConfig

logger = logging.getLogger(__name__)

DEFAULTS_FILE = Path(__file__).parent / "defaults.yaml"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class GeneratorSettings(BaseModel):
    model_id: str = "claude-sonnet-4-5-20250929"
    timeout_s: float = Field(default=120.0, gt=0)


class PipelineSettings(BaseModel):
    log_level: str = "INFO"
    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)
    minds: dict[MindId, dict[str, Any]] = Field(
        default_factory=dict,
        description="Per-Mind option overrides passed to Mind.initialize()",
    )
    generator: GeneratorSettings = Field(default_factory=GeneratorSettings)

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    def generator_enabled(self) -> bool:
        return bool(self.minds.get(MindId.VICTORIA, {}).get("use_generator"))


def load_settings(path: Optional[Union[str, Path]] = None) -> PipelineSettings:
    """Load settings from YAML and apply environment overrides.

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist
        pydantic.ValidationError: If the file content is invalid
    """
    if path is None:
        path = os.environ.get("CLONE_LAB_CONFIG") or DEFAULTS_FILE
    path = Path(path)

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    logger.debug(f"Loaded settings from {path}")

    if os.environ.get("CLONE_LAB_LOG_LEVEL"):
        data["log_level"] = os.environ["CLONE_LAB_LOG_LEVEL"]
    if os.environ.get("CLONE_LAB_GENERATOR_MODEL"):
        data.setdefault("generator", {})["model_id"] = os.environ["CLONE_LAB_GENERATOR_MODEL"]

    return PipelineSettings.model_validate(data)


_settings: Optional[PipelineSettings] = None


def get_settings() -> PipelineSettings:
    """Get or load the process-wide settings."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def configure_logging(settings: Optional[PipelineSettings] = None) -> None:
    """Configure root logging for entry points (API, scripts)."""
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level), format=LOG_FORMAT)
