"""Content generator abstraction.

A generator turns a system prompt plus a user message into text. Minds
only depend on the ContentGenerator protocol; AnthropicGenerator is the
production implementation. Provider errors are translated into
GeneratorError / GeneratorTimeoutError so the orchestrator can retry them
without knowing about the SDK.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

import anthropic

from clone_lab.errors import GeneratorError, GeneratorTimeoutError
from clone_lab.llm.client import DEFAULT_MODEL, get_anthropic_client

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Normalized response from a content generator."""

    content: str
    model_id: str
    input_tokens: int = 0
    output_tokens: int = 0
    duration_ms: int = 0


@runtime_checkable
class ContentGenerator(Protocol):
    """Protocol for injected content generators."""

    @property
    def model_id(self) -> str: ...

    def generate(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: int,
        label: str = "",
    ) -> GenerationResult: ...


class AnthropicGenerator:
    """Claude-backed generator using a synchronous messages call."""

    def __init__(
        self,
        model_id: str = DEFAULT_MODEL,
        timeout_s: float = 120.0,
        client: Optional[anthropic.Anthropic] = None,
    ):
        self._model_id = model_id
        self._timeout_s = timeout_s
        self._client = client

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_client(self) -> anthropic.Anthropic:
        if self._client is None:
            self._client = get_anthropic_client(timeout_s=self._timeout_s)
            if self._client is None:
                raise GeneratorError("Anthropic client unavailable: ANTHROPIC_API_KEY is not set")
        return self._client

    def generate(
        self,
        system_prompt: str,
        user_message: str,
        *,
        max_tokens: int,
        label: str = "",
    ) -> GenerationResult:
        client = self._get_client()
        start_time = time.time()
        logger.info(f"[{label}] Anthropic call: model={self._model_id}, max_tokens={max_tokens}")

        try:
            response = client.messages.create(
                model=self._model_id,
                max_tokens=max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_message}],
            )
        except anthropic.APITimeoutError as e:
            raise GeneratorTimeoutError(f"[{label}] {self._model_id} timed out: {e}") from e
        except anthropic.APIError as e:
            raise GeneratorError(f"[{label}] {self._model_id} failed: {e}") from e

        duration_ms = int((time.time() - start_time) * 1000)
        raw_text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        if not raw_text.strip():
            raise GeneratorError(f"[{label}] Empty response from {self._model_id}")

        logger.info(
            f"[{label}] Completed: {response.usage.input_tokens}+"
            f"{response.usage.output_tokens} tokens, {duration_ms}ms"
        )
        return GenerationResult(
            content=raw_text.strip(),
            model_id=self._model_id,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            duration_ms=duration_ms,
        )
