"""Schemas for Quinn's quality-assurance report."""

from enum import Enum

from pydantic import BaseModel, Field

from clone_lab.minds.base import MindOptions
from clone_lab.minds.schemas import MindId


class QuinnOptions(MindOptions):
    minimum_overall_score: int = Field(default=70, ge=0, le=100)
    minimum_evidence_per_trait: int = Field(default=2, ge=0)
    maximum_inconsistencies: int = Field(default=3, ge=0)
    minimum_coverage_percentage: int = Field(default=80, ge=0, le=100)
    fail_on_critical: bool = True


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IssueType(str, Enum):
    MISSING_EVIDENCE = "missing-evidence"
    LOW_CONFIDENCE = "low-confidence"
    INSUFFICIENT_COVERAGE = "insufficient-coverage"
    INVALID_CONFIDENCE = "invalid-confidence"


class QualityIssue(BaseModel):
    id: str
    type: IssueType
    severity: IssueSeverity
    description: str
    source_mind: MindId
    affected_items: list[str] = Field(default_factory=list)
    recommendation: str


class GapCategory(str, Enum):
    MISSING_TRAITS = "missing-traits"
    UNANALYZED_DATA = "unanalyzed-data"
    LOW_CONFIDENCE = "low-confidence"


class QualityGap(BaseModel):
    id: str
    name: str
    category: GapCategory
    description: str
    impact: float = Field(ge=0.0, le=1.0)
    suggestions: list[str] = Field(default_factory=list)
    related_minds: list[MindId] = Field(default_factory=list)


class CheckType(str, Enum):
    TRAIT_ALIGNMENT = "trait-alignment"
    CONFIDENCE_CORRELATION = "confidence-correlation"
    EVIDENCE_OVERLAP = "evidence-overlap"


class Inconsistency(BaseModel):
    description: str
    involved_minds: list[MindId]
    item: str
    severity: IssueSeverity


class ConsistencyCheck(BaseModel):
    name: str
    type: CheckType
    passed: bool
    score: float = Field(ge=0.0, le=1.0)
    inconsistencies: list[Inconsistency] = Field(default_factory=list)


class FlagAction(str, Enum):
    WARN = "warn"
    INVESTIGATE = "investigate"
    BLOCK = "block"


class RedFlag(BaseModel):
    id: str
    type: str
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    action: FlagAction


class QualityBreakdown(BaseModel):
    completeness: float
    consistency: float
    evidence_quality: float
    confidence_calibration: float
    coverage: float


class QualityReport(BaseModel):
    overall_score: float = Field(ge=0.0, le=100.0)
    passed: bool
    breakdown: QualityBreakdown
    issues: list[QualityIssue] = Field(default_factory=list)
    gaps: list[QualityGap] = Field(default_factory=list)
    consistency: list[ConsistencyCheck] = Field(default_factory=list)
    red_flags: list[RedFlag] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
