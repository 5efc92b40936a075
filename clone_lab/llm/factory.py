"""Generator factory.

Resolves model IDs to the appropriate generator implementation.
"""

import logging

from clone_lab.llm.backends import AnthropicGenerator

logger = logging.getLogger(__name__)


def get_generator(model_id: str, timeout_s: float = 120.0) -> AnthropicGenerator:
    """Get the generator for a model ID.

    Raises:
        ValueError: If model_id is not recognized
    """
    if model_id.startswith("claude-"):
        return AnthropicGenerator(model_id=model_id, timeout_s=timeout_s)
    raise ValueError(
        f"Unknown model: '{model_id}'. Expected a model ID starting with 'claude-'."
    )
