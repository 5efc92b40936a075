"""Keyword tables Victoria scans content with.

Each entry describes one construct and how to detect it; victoria.analysis
turns matches into scored constructs.
"""

import re
from dataclasses import dataclass
from typing import Optional

from clone_lab.minds.victoria.schemas import (
    ConstraintSeverity,
    ConstraintType,
    DecisionFramework,
    RiskCategory,
)


def _any(*words: str) -> re.Pattern:
    return re.compile("|".join(words), re.IGNORECASE)


@dataclass(frozen=True)
class TradeOffRule:
    key: str
    name: str
    description: str
    primary: tuple[str, str]
    secondary: tuple[str, str]
    primary_pattern: re.Pattern
    secondary_pattern: re.Pattern


@dataclass(frozen=True)
class ConstraintRule:
    type: ConstraintType
    name: str
    description: str
    trigger: re.Pattern
    severity: ConstraintSeverity
    impact: float
    confidence: float
    hard_trigger: Optional[re.Pattern] = None


@dataclass(frozen=True)
class RiskRule:
    category: RiskCategory
    name: str
    trigger: re.Pattern
    probability: str
    impact: str
    score: float
    confidence: float
    consequences: str
    mitigation: str


@dataclass(frozen=True)
class VictoriaHeuristics:
    trade_offs: tuple[TradeOffRule, ...]
    constraints: tuple[ConstraintRule, ...]
    risks: tuple[RiskRule, ...]
    # first matching rule wins; no match means analytical
    frameworks: tuple[tuple[DecisionFramework, re.Pattern], ...]
    densities: dict[str, tuple[re.Pattern, int]]


TRADE_OFFS = (
    TradeOffRule(
        key="speed-quality",
        name="Speed vs Quality",
        description="Preference for fast delivery versus high quality output",
        primary=("Speed", "Fast delivery"),
        secondary=("Quality", "High quality output"),
        primary_pattern=_any("fast", "quick", "speed", "rapid"),
        secondary_pattern=_any("quality", "thorough", "detailed", "careful"),
    ),
    TradeOffRule(
        key="risk-reward",
        name="Risk vs Reward",
        description="Tolerance for risk in pursuit of rewards",
        primary=("Risk Taking", "Accepting uncertainty"),
        secondary=("Safety", "Avoiding risk"),
        primary_pattern=_any("risk", "opportunity", "potential", "reward"),
        secondary_pattern=_any("safe", "secure", "cautious", "careful"),
    ),
)

CONSTRAINTS = (
    ConstraintRule(
        type=ConstraintType.TIME,
        name="Time Constraint",
        description="Time-related limitations or deadlines",
        trigger=_any("deadline", "time", "urgent", "asap"),
        severity=ConstraintSeverity.SOFT,
        impact=0.7,
        confidence=0.6,
        hard_trigger=_any("urgent"),
    ),
    ConstraintRule(
        type=ConstraintType.RESOURCE,
        name="Resource Constraint",
        description="Budget or resource limitations",
        trigger=_any("budget", "resource", "money", "cost"),
        severity=ConstraintSeverity.SOFT,
        impact=0.6,
        confidence=0.6,
    ),
    ConstraintRule(
        type=ConstraintType.SKILL,
        name="Skill Constraint",
        description="Knowledge or expertise gaps",
        trigger=_any("skill", "learn", "experience", "training"),
        severity=ConstraintSeverity.FLEXIBLE,
        impact=0.5,
        confidence=0.5,
    ),
)

RISKS = (
    RiskRule(
        category=RiskCategory.TECHNICAL,
        name="Technical Risk",
        trigger=_any("technical", "technology", "system", "software"),
        probability="medium",
        impact="moderate",
        score=0.5,
        confidence=0.6,
        consequences="Technical challenges may delay or complicate implementation",
        mitigation="Ensure adequate technical review and testing",
    ),
    RiskRule(
        category=RiskCategory.OPERATIONAL,
        name="Operational Risk",
        trigger=_any("process", "workflow", "operation"),
        probability="low",
        impact="minor",
        score=0.3,
        confidence=0.5,
        consequences="Process disruptions may occur",
        mitigation="Establish backup procedures",
    ),
    RiskRule(
        category=RiskCategory.FINANCIAL,
        name="Financial Risk",
        trigger=_any("debt", "bankrupt", "financial loss", "savings"),
        probability="medium",
        impact="major",
        score=0.6,
        confidence=0.5,
        consequences="Losses may exceed what the subject can absorb",
        mitigation="Cap exposure and keep a financial reserve",
    ),
)

FRAMEWORKS = (
    (DecisionFramework.DATA_DRIVEN, _any("data", "analysis")),
    (DecisionFramework.COLLABORATIVE, _any("team", "collaborate")),
    (DecisionFramework.INTUITIVE, _any("intuition", "gut")),
)

# dimension -> (pattern, words per expected hit)
DENSITIES = {
    "information_seeking": (_any("research", "investigate", "analyze", "study"), 100),
    "risk_tolerance": (_any("risk", "opportunity", "chance", "try"), 50),
    "decision_speed": (_any("quick", "fast", "immediately", "now"), 100),
    "collaboration_preference": (_any("team", "together", "collaborate", "discuss"), 100),
    "decisiveness": (_any("decide", "decision", "choice", "final"), 100),
}

DEFAULT_VICTORIA_HEURISTICS = VictoriaHeuristics(
    trade_offs=TRADE_OFFS,
    constraints=CONSTRAINTS,
    risks=RISKS,
    frameworks=FRAMEWORKS,
    densities=DENSITIES,
)
