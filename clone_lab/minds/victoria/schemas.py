"""Schemas for Victoria's feasibility analysis."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from clone_lab.minds.base import MindOptions

FEASIBILITY_DIMENSIONS = ("technical", "resource", "time", "risk", "strategic")


class VictoriaOptions(MindOptions):
    confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    include_mitigation: bool = True
    analyze_decision_style: bool = True
    dimension_weights: Optional[dict[str, float]] = Field(
        default=None,
        description="Weights per feasibility dimension; only affects weighted_overall",
    )
    use_generator: bool = False
    generator_max_tokens: int = Field(default=2000, ge=1)

    @field_validator("dimension_weights")
    @classmethod
    def check_dimension_weights(cls, value):
        if value is None:
            return value
        unknown = set(value) - set(FEASIBILITY_DIMENSIONS)
        if unknown:
            raise ValueError(f"Unknown feasibility dimensions: {sorted(unknown)}")
        if any(w < 0 for w in value.values()) or sum(value.values()) <= 0:
            raise ValueError("Dimension weights must be non-negative with a positive sum")
        return value


class TradeOffFactor(BaseModel):
    name: str
    description: str
    weight: float = 0.5


class TradeOff(BaseModel):
    id: str
    name: str
    description: str
    primary: TradeOffFactor
    secondary: TradeOffFactor
    preference: float = Field(ge=0.0, le=1.0, description="0 favors secondary, 1 favors primary")
    confidence: float = Field(ge=0.0, le=1.0)
    sources: list[str] = Field(default_factory=list)


class ConstraintType(str, Enum):
    TIME = "time"
    RESOURCE = "resource"
    SKILL = "skill"


class ConstraintSeverity(str, Enum):
    HARD = "hard"
    SOFT = "soft"
    FLEXIBLE = "flexible"


class Constraint(BaseModel):
    id: str
    name: str
    type: ConstraintType
    severity: ConstraintSeverity
    description: str
    negotiable: bool
    impact: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)
    sources: list[str] = Field(default_factory=list)


class RiskCategory(str, Enum):
    TECHNICAL = "technical"
    OPERATIONAL = "operational"
    FINANCIAL = "financial"


class Risk(BaseModel):
    id: str
    name: str
    category: RiskCategory
    probability: str
    impact: str
    score: float = Field(ge=0.0, le=1.0)
    consequences: str
    mitigation: Optional[str] = None
    confidence: float = Field(ge=0.0, le=1.0)
    sources: list[str] = Field(default_factory=list)


class DecisionFramework(str, Enum):
    DATA_DRIVEN = "data-driven"
    COLLABORATIVE = "collaborative"
    INTUITIVE = "intuitive"
    ANALYTICAL = "analytical"


class DecisionStyle(BaseModel):
    framework: DecisionFramework
    information_seeking: float = Field(ge=0.0, le=1.0)
    risk_tolerance: float = Field(ge=0.0, le=1.0)
    decision_speed: float = Field(ge=0.0, le=1.0)
    collaboration_preference: float = Field(ge=0.0, le=1.0)
    decisiveness: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)
    sources: list[str] = Field(default_factory=list)


class FeasibilityDimensions(BaseModel):
    technical: int = Field(ge=20, le=100)
    resource: int = Field(ge=20, le=100)
    time: int = Field(ge=20, le=100)
    risk: int = Field(ge=20, le=100)
    strategic: int = Field(ge=20, le=100)


class Recommendation(str, Enum):
    PROCEED = "proceed"
    PROCEED_WITH_CAUTION = "proceed-with-caution"
    RECONSIDER = "reconsider"
    NOT_FEASIBLE = "not-feasible"


class FeasibilityScore(BaseModel):
    overall: float = Field(description="Unweighted mean of the five dimensions")
    weighted_overall: Optional[float] = Field(
        default=None,
        description="Mean under configured dimension_weights, when given",
    )
    dimensions: FeasibilityDimensions
    key_factors: list[str] = Field(default_factory=list)
    confidence: float = 0.7
    recommendation: Recommendation
    rationale: str = ""


class VictoriaAnalysis(BaseModel):
    """Full intermediate artifact, exposed under MindResult.metadata["analysis"]."""

    trade_offs: list[TradeOff]
    constraints: list[Constraint]
    risks: list[Risk]
    decision_style: Optional[DecisionStyle] = None
    feasibility: FeasibilityScore
    analyzed_sources: list[str]
