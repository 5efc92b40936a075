"""Shared fixtures and factories for the Mind pipeline tests."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import pytest

from clone_lab.llm.backends import GenerationResult
from clone_lab.minds.base import Mind
from clone_lab.minds.schemas import (
    Evidence,
    ExtractedData,
    MindContext,
    MindId,
    MindPersona,
    MindResult,
    MindStatistics,
    PersonalityTrait,
    SourceType,
)

REFERENCE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)

CHAT_TEXT = "I love my career in design and I think it matters"
DOCUMENT_TEXT = " ".join(["career values integrity work"] * 250)


def make_source(
    source_id: str,
    content: str = "",
    source_type: SourceType = SourceType.CHAT,
    age_days: Optional[int] = None,
    metadata: Optional[dict] = None,
) -> ExtractedData:
    timestamp = REFERENCE_TIME - timedelta(days=age_days) if age_days is not None else None
    return ExtractedData(
        id=source_id,
        source_type=source_type,
        content=content,
        timestamp=timestamp,
        metadata=metadata or {},
    )


def make_context(sources, previous_results=None, options=None, session_id="test") -> MindContext:
    return MindContext.build(
        sources,
        previous_results=previous_results,
        options=options,
        session_id=session_id,
        reference_time=REFERENCE_TIME,
    )


def make_result(
    mind_id: MindId = MindId.TIM,
    traits=None,
    confidence: float = 0.8,
    evidence=None,
    metadata=None,
) -> MindResult:
    if traits is None:
        traits = [PersonalityTrait(category="data_quality", name="t", value=1, confidence=0.8, sources=["a", "b"])]
    if evidence is None:
        evidence = [Evidence(source="a", excerpt="x", relevance=0.9)]
    return MindResult(
        mind_id=mind_id,
        traits=traits,
        confidence=confidence,
        evidence=evidence,
        metadata=metadata if metadata is not None else {"sources_analyzed": 1},
    )


class SpyMind(Mind):
    """Configurable Mind recording what it saw when analyze() ran."""

    def __init__(
        self,
        mind_id: MindId,
        dependencies=(),
        action: Optional[Callable[[MindContext], None]] = None,
    ):
        self.persona = MindPersona(id=mind_id, name=f"spy-{mind_id.value}")
        self.dependencies = tuple(dependencies)
        super().__init__()
        self.action = action
        self.calls = 0
        self.seen_results: list[set[MindId]] = []

    def _analyze(self, context, options):
        self.calls += 1
        self.seen_results.append(set(context.previous_results))
        if self.action is not None:
            self.action(context)
        return self._build_result(
            traits=[PersonalityTrait(category="spy", name="ran", value=True, confidence=0.9)],
            confidence=0.9,
            evidence=[Evidence(source=context.extracted_data[0].id, excerpt="spy", relevance=1.0)],
            recommendations=[],
            statistics=MindStatistics(sources_analyzed=len(context.extracted_data)),
        )


class FakeGenerator:
    """ContentGenerator returning canned responses, or raising a queued error."""

    def __init__(self, responses=None, errors=None):
        self.responses = list(responses or [])
        self.errors = list(errors or [])
        self.calls = 0

    @property
    def model_id(self) -> str:
        return "fake-model"

    def generate(self, system_prompt, user_message, *, max_tokens, label=""):
        self.calls += 1
        if self.errors:
            error = self.errors.pop(0)
            if error is not None:
                raise error
        content = self.responses.pop(0) if self.responses else '{"insights": []}'
        return GenerationResult(content=content, model_id=self.model_id)


@pytest.fixture
def reference_time():
    return REFERENCE_TIME


@pytest.fixture
def scenario_sources():
    """Two identical chat messages plus a 1000-word document on career and values."""
    return [
        make_source("chat-1", CHAT_TEXT, SourceType.CHAT),
        make_source("chat-2", CHAT_TEXT, SourceType.CHAT),
        make_source("doc-1", DOCUMENT_TEXT, SourceType.DOCUMENT),
    ]

