"""Feasibility analysis over source content.

Every function here is pure: sources in, constructs out. Constructs carry
the ids of the sources whose content matched.
"""

import logging
from typing import Optional, Sequence

from clone_lab.minds.scoring import clamp, clamp_confidence, mean, weighted_average
from clone_lab.minds.schemas import ExtractedData
from clone_lab.minds.victoria.heuristics import VictoriaHeuristics
from clone_lab.minds.victoria.schemas import (
    Constraint,
    ConstraintSeverity,
    ConstraintType,
    DecisionFramework,
    DecisionStyle,
    FeasibilityDimensions,
    FeasibilityScore,
    Recommendation,
    Risk,
    TradeOff,
    TradeOffFactor,
)

logger = logging.getLogger(__name__)

HIGH_RISK_SCORE = 0.6
DIMENSION_FLOOR = 20
TECHNICAL_PENALTY = 15
RESOURCE_PENALTY = 20
TIME_PENALTY = 25
RISK_PENALTY = 20
STRATEGIC_DEFAULT = 70
TRADE_OFF_MAX_CONFIDENCE = 0.8
DECISION_STYLE_CONFIDENCE = 0.6
FEASIBILITY_CONFIDENCE = 0.7
ABSENT_CATEGORY_CONFIDENCE = 0.5

# (min overall inclusive, recommendation)
RECOMMENDATION_THRESHOLDS = [
    (80, Recommendation.PROCEED),
    (60, Recommendation.PROCEED_WITH_CAUTION),
    (40, Recommendation.RECONSIDER),
]


def _matching_ids(sources: Sequence[ExtractedData], pattern) -> list[str]:
    return [s.id for s in sources if pattern.search(s.content)]


def _count(sources: Sequence[ExtractedData], pattern) -> int:
    return sum(len(pattern.findall(s.content)) for s in sources)


def analyze_trade_offs(
    sources: Sequence[ExtractedData],
    heuristics: VictoriaHeuristics,
    confidence_threshold: float,
) -> list[TradeOff]:
    """Trade-offs with enough signal to clear confidence_threshold."""
    trade_offs = []
    for rule in heuristics.trade_offs:
        primary_hits = _count(sources, rule.primary_pattern)
        secondary_hits = _count(sources, rule.secondary_pattern)
        hits = primary_hits + secondary_hits
        if hits == 0:
            continue

        confidence = min(hits / 10, TRADE_OFF_MAX_CONFIDENCE)
        if confidence < confidence_threshold:
            logger.debug(f"[victoria] Dropping trade-off {rule.key}: confidence {confidence:.2f}")
            continue

        matched = set(_matching_ids(sources, rule.primary_pattern))
        matched.update(_matching_ids(sources, rule.secondary_pattern))
        trade_offs.append(TradeOff(
            id=f"tradeoff-{rule.key}",
            name=rule.name,
            description=rule.description,
            primary=TradeOffFactor(name=rule.primary[0], description=rule.primary[1]),
            secondary=TradeOffFactor(name=rule.secondary[0], description=rule.secondary[1]),
            preference=primary_hits / (hits + 1),
            confidence=confidence,
            sources=[s.id for s in sources if s.id in matched],
        ))
    return trade_offs


def identify_constraints(sources: Sequence[ExtractedData], heuristics: VictoriaHeuristics) -> list[Constraint]:
    constraints = []
    for rule in heuristics.constraints:
        matched = _matching_ids(sources, rule.trigger)
        if not matched:
            continue
        severity = rule.severity
        if rule.hard_trigger is not None and _matching_ids(sources, rule.hard_trigger):
            severity = ConstraintSeverity.HARD
        constraints.append(Constraint(
            id=f"constraint-{rule.type.value}",
            name=rule.name,
            type=rule.type,
            severity=severity,
            description=rule.description,
            negotiable=severity != ConstraintSeverity.HARD,
            impact=rule.impact,
            confidence=rule.confidence,
            sources=matched,
        ))
    return constraints


def assess_risks(
    sources: Sequence[ExtractedData],
    heuristics: VictoriaHeuristics,
    include_mitigation: bool = True,
) -> list[Risk]:
    risks = []
    for rule in heuristics.risks:
        matched = _matching_ids(sources, rule.trigger)
        if not matched:
            continue
        risks.append(Risk(
            id=f"risk-{rule.category.value}",
            name=rule.name,
            category=rule.category,
            probability=rule.probability,
            impact=rule.impact,
            score=rule.score,
            consequences=rule.consequences,
            mitigation=rule.mitigation if include_mitigation else None,
            confidence=rule.confidence,
            sources=matched,
        ))
    return risks


def analyze_decision_style(sources: Sequence[ExtractedData], heuristics: VictoriaHeuristics) -> DecisionStyle:
    content = "\n\n".join(s.content for s in sources)
    total_words = len(content.split())

    framework = DecisionFramework.ANALYTICAL
    for candidate, pattern in heuristics.frameworks:
        if pattern.search(content):
            framework = candidate
            break

    densities = {}
    matched: set[str] = set()
    for name, (pattern, words_per_hit) in heuristics.densities.items():
        hits = len(pattern.findall(content))
        densities[name] = clamp(hits / (total_words / words_per_hit), 0.0, 1.0) if total_words else 0.0
        matched.update(_matching_ids(sources, pattern))

    return DecisionStyle(
        framework=framework,
        confidence=DECISION_STYLE_CONFIDENCE,
        sources=[s.id for s in sources if s.id in matched],
        **densities,
    )


def recommend(overall: float) -> Recommendation:
    for threshold, recommendation in RECOMMENDATION_THRESHOLDS:
        if overall >= threshold:
            return recommendation
    return Recommendation.NOT_FEASIBLE


def _dimension(penalty_each: int, count: int) -> int:
    return int(clamp(100 - penalty_each * count, DIMENSION_FLOOR, 100))


def calculate_feasibility(
    trade_offs: Sequence[TradeOff],
    constraints: Sequence[Constraint],
    risks: Sequence[Risk],
    dimension_weights: Optional[dict[str, float]] = None,
) -> FeasibilityScore:
    """Five bounded dimensions; overall is their plain mean."""
    high_risks = [r for r in risks if r.score >= HIGH_RISK_SCORE]
    hard = [c for c in constraints if c.severity == ConstraintSeverity.HARD]
    resource = [c for c in constraints if c.type == ConstraintType.RESOURCE]
    hard_time = [c for c in hard if c.type == ConstraintType.TIME]

    dimensions = FeasibilityDimensions(
        technical=_dimension(TECHNICAL_PENALTY, len(high_risks)),
        resource=_dimension(RESOURCE_PENALTY, len(resource)),
        time=_dimension(TIME_PENALTY, len(hard_time)),
        risk=_dimension(RISK_PENALTY, len(high_risks)),
        strategic=STRATEGIC_DEFAULT,
    )
    values = dimensions.model_dump()
    overall = mean(values.values())

    weighted = None
    if dimension_weights:
        weighted = weighted_average(values, dimension_weights)

    return FeasibilityScore(
        overall=overall,
        weighted_overall=weighted,
        dimensions=dimensions,
        key_factors=[
            f"{len(hard)} hard constraints identified",
            f"{len(high_risks)} high-risk items",
            f"{len(trade_offs)} trade-offs to consider",
        ],
        confidence=FEASIBILITY_CONFIDENCE,
        recommendation=recommend(overall),
        rationale=f"Based on {len(constraints)} constraints and {len(risks)} risks identified",
    )


def overall_confidence(
    trade_offs: Sequence[TradeOff],
    constraints: Sequence[Constraint],
    risks: Sequence[Risk],
    decision_style: Optional[DecisionStyle],
) -> float:
    """Mean of per-category confidences; an absent category counts as 0.5."""
    def category(items) -> float:
        return mean(i.confidence for i in items) if items else ABSENT_CATEGORY_CONFIDENCE

    parts = [
        category(trade_offs),
        category(constraints),
        category(risks),
        decision_style.confidence if decision_style else ABSENT_CATEGORY_CONFIDENCE,
    ]
    return clamp_confidence(mean(parts))
