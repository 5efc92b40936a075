"""Keyword tables Tim scans content with.

These are swappable strategy objects: TimMind takes a TimHeuristics at
construction. The numeric contracts (weights, buckets, point values per
category) live in quality.py and coverage.py.
"""

import re
from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class RelevanceIndicator:
    """A first-person indicator category; counts at most once per source."""

    category: str
    pattern: re.Pattern
    points: int


@dataclass(frozen=True)
class TimHeuristics:
    relevance_indicators: tuple[RelevanceIndicator, ...]
    topic_patterns: Mapping[str, re.Pattern]
    essential_topics: tuple[str, ...]

    def topics_in(self, content: str) -> list[str]:
        return [topic for topic, pattern in self.topic_patterns.items() if pattern.search(content)]

    def indicators_in(self, content: str) -> list[RelevanceIndicator]:
        return [ind for ind in self.relevance_indicators if ind.pattern.search(content)]


def _words(*alternatives: str) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")", re.IGNORECASE)


def _phrases(*alternatives: str) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")\b", re.IGNORECASE)


RELEVANCE_INDICATORS = (
    RelevanceIndicator("opinions", _phrases("i think", "i believe", "in my opinion", "personally"), 10),
    RelevanceIndicator("emotions", _phrases("i feel", "i felt", "emotion", "emotionally"), 10),
    RelevanceIndicator("goals", _phrases("my goal", "i want to", "i aspire", "i hope"), 10),
    RelevanceIndicator("values", _phrases("i value", "i care about", "important to me"), 10),
    RelevanceIndicator("behaviors", _phrases("i always", "i never", "typically", "usually"), 8),
    RelevanceIndicator("growth", _phrases("i learned", "i realized", "i discovered"), 8),
    RelevanceIndicator("experiences", _phrases("my experience", "i encountered", "i faced"), 8),
)

TOPIC_PATTERNS = {
    "career": _words("career", "work", "job", "profession"),
    "family": _words("family", "parent", "child", "sibling", "spouse"),
    "hobbies": _words("hobby", "hobbies", "leisure", "pastime"),
    "education": _words("education", "school", "university", "degree"),
    "health": _words("health", "exercise", "fitness", "wellness"),
    "travel": _words("travel", "trip", "journey", "vacation"),
    "reading": _words("reading", "book", "author", "novel"),
    "philosophy": _words("philosophy", "meaning of life", "purpose", "ethic"),
    "projects": _words("project", "side project", "prototype"),
    "challenges": _words("challenge", "problem", "difficult", "struggle"),
    "values": _words("value", "integrity", "principle", "honesty"),
    "communication": _words("communicat", "conversation", "listen", "feedback"),
    "relationships": _words("relationship", "friend", "partner", "colleague"),
    "goals": _words("goal", "ambition", "aspire", "aspiration"),
}

ESSENTIAL_TOPICS = ("career", "values", "communication", "relationships", "goals")

DEFAULT_TIM_HEURISTICS = TimHeuristics(
    relevance_indicators=RELEVANCE_INDICATORS,
    topic_patterns=TOPIC_PATTERNS,
    essential_topics=ESSENTIAL_TOPICS,
)
