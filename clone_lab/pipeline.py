"""Assemble an orchestrator from settings.

Shared by the HTTP API and the command-line script.
"""

import logging
from typing import Optional

from clone_lab.config.settings import PipelineSettings, get_settings
from clone_lab.llm.backends import ContentGenerator
from clone_lab.llm.factory import get_generator
from clone_lab.orchestrator.runner import MindOrchestrator

logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: Optional[PipelineSettings] = None,
    generator: Optional[ContentGenerator] = None,
) -> MindOrchestrator:
    """Create the registered Minds, wire a generator if enabled, and initialize them.

    Raises:
        PipelineConfigurationError: If the registered Minds do not form a valid
            plan, or a Mind enables use_generator while the generator is disabled
    """
    settings = settings or get_settings()
    if generator is None and settings.generator_enabled():
        generator = get_generator(settings.generator.model_id, timeout_s=settings.generator.timeout_s)
        logger.info(f"Content generator enabled: {generator.model_id}")

    return MindOrchestrator(
        config=settings.orchestrator,
        mind_options=settings.minds,
        generator=generator,
    )
