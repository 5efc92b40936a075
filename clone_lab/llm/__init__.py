"""Content generator layer.

Minds never construct network clients themselves. A ContentGenerator is
injected into the Mind that wants narrative output; the orchestrator and
the deterministic scoring code stay testable without network access.
"""

from clone_lab.llm.backends import AnthropicGenerator, ContentGenerator, GenerationResult
from clone_lab.llm.client import get_anthropic_client, parse_llm_json_response
from clone_lab.llm.factory import get_generator

__all__ = [
    "AnthropicGenerator",
    "ContentGenerator",
    "GenerationResult",
    "get_anthropic_client",
    "parse_llm_json_response",
    "get_generator",
]
