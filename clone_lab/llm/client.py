"""Anthropic client construction and LLM response parsing."""

import json
import logging
import os
from typing import Optional

import anthropic
import httpx

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


def get_anthropic_client(timeout_s: float = 120.0) -> Optional[anthropic.Anthropic]:
    """Get an Anthropic client if an API key is available.

    Returns None if ANTHROPIC_API_KEY is not set.
    """
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        logger.warning("ANTHROPIC_API_KEY not set; content generator unavailable")
        return None
    return anthropic.Anthropic(
        api_key=api_key,
        timeout=httpx.Timeout(
            connect=30.0,
            read=timeout_s,
            write=60.0,
            pool=30.0,
        ),
        max_retries=0,  # retries belong to the orchestrator
    )


def parse_llm_json_response(raw_text: str) -> dict:
    """Parse JSON from an LLM response, handling markdown code fences.

    Raises:
        json.JSONDecodeError: If the text cannot be parsed as JSON
    """
    content = raw_text.strip()

    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else content[3:]

    if content.endswith("```"):
        content = content.rsplit("```", 1)[0]

    return json.loads(content.strip())
