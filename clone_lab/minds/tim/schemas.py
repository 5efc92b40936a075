"""Schemas for Tim's quality and coverage analysis."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from clone_lab.minds.base import MindOptions


class TimOptions(MindOptions):
    min_quality_score: int = Field(default=30, ge=0, le=100)
    duplicate_threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    target_coverage_score: int = Field(default=70, ge=0, le=100)
    include_low_quality: bool = False
    batch_size: int = Field(default=50, ge=1, description="Sources scored per batch between cancellation checks")


class CredibilityFactor(BaseModel):
    score: int
    factors: list[str] = Field(default_factory=list)


class RecencyFactor(BaseModel):
    score: int
    age_days: Optional[int] = Field(default=None, description="None when the source has no timestamp")


class DepthFactor(BaseModel):
    score: int
    word_count: int
    is_substantive: bool


class RelevanceFactor(BaseModel):
    score: int
    indicators: list[str] = Field(default_factory=list, description="Matched indicator categories")


class SourceQuality(BaseModel):
    source_id: str
    score: int = Field(ge=0, le=100)
    credibility: CredibilityFactor
    recency: RecencyFactor
    depth: DepthFactor
    relevance: RelevanceFactor


class DuplicateType(str, Enum):
    EXACT = "exact"
    NEAR = "near"
    SEMANTIC = "semantic"


class DuplicateGroup(BaseModel):
    group_id: str
    source_ids: list[str]
    primary_source_id: str
    similarity: float = Field(ge=0.0, le=1.0)
    type: DuplicateType

    @model_validator(mode="after")
    def check_members(self):
        if len(self.source_ids) < 2:
            raise ValueError("A duplicate group needs at least two sources")
        if self.primary_source_id not in self.source_ids:
            raise ValueError(f"Primary source '{self.primary_source_id}' is not a group member")
        return self


class TopicCoverage(BaseModel):
    topic: str
    source_count: int
    source_ids: list[str]
    quality: int = Field(description="Mean quality score of contributing sources")


class GapSeverity(str, Enum):
    CRITICAL = "critical"
    MODERATE = "moderate"
    MINOR = "minor"


class CoverageGap(BaseModel):
    topic: str
    severity: GapSeverity
    recommendation: str


class TemporalPeriod(BaseModel):
    period: str = Field(description="Month bucket, YYYY-MM")
    count: int


class TemporalDistribution(BaseModel):
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None
    span_days: float = 0.0
    periods: list[TemporalPeriod] = Field(default_factory=list)
    spread_score: int = 30


class FormatDiversity(BaseModel):
    score: int
    by_type: dict[str, int] = Field(default_factory=dict)
    distinct_types: int = 0
    has_variety: bool = False


class CoverageResult(BaseModel):
    score: int = Field(ge=0, le=100)
    topic_score: int = 0
    gap_penalty_score: int = 100
    topics: list[TopicCoverage] = Field(default_factory=list)
    gaps: list[CoverageGap] = Field(default_factory=list)
    temporal: TemporalDistribution = Field(default_factory=TemporalDistribution)
    formats: FormatDiversity


class TimAnalysis(BaseModel):
    """Full intermediate artifact, exposed under MindResult.metadata["analysis"]."""

    source_quality: list[SourceQuality]
    duplicates: list[DuplicateGroup]
    coverage: CoverageResult
    prioritized_sources: list[str]
    sources_to_remove: list[str]
