"""Shared data model for Minds and the orchestrator.

ExtractedData is what an external collector hands us. MindResult is what
each Mind hands back. MindContext is the per-invocation view the
orchestrator builds; it is a plain frozen dataclass because it carries a
read-only mapping and a cancellation callable rather than serializable data.

Numeric fields on results (confidence, relevance) are NOT range-checked
here: results produced outside the scoring code must still be
representable so that Mind.validate() can flag them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MindId(str, Enum):
    """Closed set of analyzer identities. Also the dependency graph nodes."""
    TIM = "tim"
    DANIEL = "daniel"
    BRENE = "brene"
    BARBARA = "barbara"
    CHARLIE = "charlie"
    CONSTANTIN = "constantin"
    QUINN = "quinn"
    VICTORIA = "victoria"


class SourceType(str, Enum):
    CHAT = "chat"
    DOCUMENT = "document"
    VIDEO = "video"
    AUDIO = "audio"
    SOCIAL = "social"
    OTHER = "other"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class EvidenceType(str, Enum):
    QUOTE = "quote"
    BEHAVIOR = "behavior"
    PREFERENCE = "preference"
    OPINION = "opinion"
    OTHER = "other"


class ExtractedData(BaseModel):
    """One raw source record supplied by the collector."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique source identifier")
    source_type: SourceType = SourceType.OTHER
    content: str = ""
    timestamp: Optional[datetime] = Field(
        default=None,
        description="When the content was produced; naive values are read as UTC",
    )
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def word_count(self) -> int:
        return len(self.content.split())


class PersonaTone(str, Enum):
    ANALYTICAL = "analytical"
    EMPATHETIC = "empathetic"
    PRAGMATIC = "pragmatic"
    VISIONARY = "visionary"


class MindPersona(BaseModel):
    """Static descriptive identity of a Mind."""

    model_config = ConfigDict(frozen=True)

    id: MindId
    name: str
    inspiration: Optional[str] = None
    expertise: tuple[str, ...] = ()
    tone: PersonaTone = PersonaTone.ANALYTICAL
    description: Optional[str] = None
    version: str = "1.0.0"


class PersonalityTrait(BaseModel):
    """A single scored, evidenced assertion about the subject."""

    category: str
    name: str
    value: Union[bool, int, float, str]
    confidence: float = Field(description="Expected in [0, 1]")
    sources: list[str] = Field(default_factory=list, description="Supporting source ids")
    notes: Optional[str] = None


class Evidence(BaseModel):
    source: str
    excerpt: str
    relevance: float = Field(description="Expected in [0, 1]")
    type: Optional[EvidenceType] = None


class MindResult(BaseModel):
    """Output of one Mind.analyze() call. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    mind_id: MindId
    traits: list[PersonalityTrait] = Field(default_factory=list)
    confidence: float = Field(description="Overall confidence, expected in [0, 1]")
    evidence: list[Evidence] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Always carries timestamp, mind_version and statistics",
    )


class ValidationIssue(BaseModel):
    severity: Severity
    code: str
    message: str
    path: Optional[str] = None


class ValidationResult(BaseModel):
    valid: bool
    score: int = Field(ge=0, le=100)
    issues: list[ValidationIssue] = Field(default_factory=list)


class MindHealthStatus(BaseModel):
    mind_id: MindId
    healthy: bool
    last_success: Optional[datetime] = None
    error: Optional[str] = None


class MindStatistics(BaseModel):
    """Per-call counters stored under metadata["statistics"]."""

    duration_ms: int = 0
    sources_analyzed: int = 0
    traits_extracted: int = 0
    evidence_collected: int = 0
    generator_calls: int = 0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to an aware UTC value (naive means UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class MindContext:
    """Per-invocation input handed to Mind.can_handle() / Mind.analyze()."""

    extracted_data: tuple[ExtractedData, ...]
    previous_results: Mapping[MindId, MindResult] = field(
        default_factory=lambda: MappingProxyType({})
    )
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    session_id: str = ""
    reference_time: datetime = field(default_factory=utc_now)
    cancellation_check: Optional[Callable[[], bool]] = None

    def is_cancelled(self) -> bool:
        return bool(self.cancellation_check and self.cancellation_check())

    @classmethod
    def build(
        cls,
        extracted_data,
        previous_results: Optional[Mapping[MindId, MindResult]] = None,
        options: Optional[Mapping[str, Any]] = None,
        session_id: str = "",
        reference_time: Optional[datetime] = None,
        cancellation_check: Optional[Callable[[], bool]] = None,
    ) -> "MindContext":
        """Build a context with read-only copies of the given collections."""
        return cls(
            extracted_data=tuple(extracted_data),
            previous_results=MappingProxyType(dict(previous_results or {})),
            options=MappingProxyType(dict(options or {})),
            session_id=session_id,
            reference_time=as_utc(reference_time) if reference_time else utc_now(),
            cancellation_check=cancellation_check,
        )
