"""Cross-Mind quality checks over previously published results."""

from typing import Mapping, Sequence

from clone_lab.minds.scoring import clamp, mean
from clone_lab.minds.schemas import ExtractedData, MindId, MindResult
from clone_lab.minds.quinn.schemas import (
    CheckType,
    ConsistencyCheck,
    FlagAction,
    GapCategory,
    Inconsistency,
    IssueSeverity,
    IssueType,
    QualityBreakdown,
    QualityGap,
    QualityIssue,
    QuinnOptions,
    RedFlag,
)

EXPECTED_CATEGORIES = ("communication", "values", "behavior", "emotional", "cognitive", "interpersonal")

RELATED_MINDS = {
    "communication": [MindId.TIM, MindId.DANIEL],
    "values": [MindId.BRENE, MindId.BARBARA],
    "behavior": [MindId.TIM, MindId.DANIEL],
    "emotional": [MindId.BRENE],
    "cognitive": [MindId.DANIEL],
    "interpersonal": [MindId.TIM, MindId.BRENE],
}
DEFAULT_RELATED = [MindId.TIM, MindId.DANIEL, MindId.BRENE, MindId.BARBARA]

LOW_TRAIT_CONFIDENCE = 0.3
LOW_MIND_CONFIDENCE = 0.5
UNANALYZED_SHARE = 0.2
CONFIDENCE_DISPARITY = 0.4
MIN_EVIDENCE_OVERLAP = 0.3
INCONSISTENCY_PENALTY = 15

BREAKDOWN_WEIGHTS = {
    "completeness": 0.25,
    "consistency": 0.25,
    "evidence_quality": 0.25,
    "confidence_calibration": 0.15,
    "coverage": 0.10,
}


def _avg_trait_confidence(result: MindResult) -> float:
    return mean(t.confidence for t in result.traits)


def _used_sources(result: MindResult) -> set[str]:
    return {s for t in result.traits for s in t.sources}


def find_quality_issues(results: Mapping[MindId, MindResult], options: QuinnOptions) -> list[QualityIssue]:
    issues: list[QualityIssue] = []

    def add(**fields):
        issues.append(QualityIssue(id=f"qi-{len(issues) + 1}", **fields))

    for mind_id, result in results.items():
        for trait in result.traits:
            if len(trait.sources) < options.minimum_evidence_per_trait:
                add(
                    type=IssueType.MISSING_EVIDENCE,
                    severity=IssueSeverity.MEDIUM,
                    description=(
                        f"Trait '{trait.name}' has insufficient evidence "
                        f"({len(trait.sources)}/{options.minimum_evidence_per_trait})"
                    ),
                    source_mind=mind_id,
                    affected_items=[trait.name],
                    recommendation=f"Add more supporting evidence for trait '{trait.name}'",
                )
            if trait.confidence < LOW_TRAIT_CONFIDENCE and len(trait.sources) > 2:
                add(
                    type=IssueType.LOW_CONFIDENCE,
                    severity=IssueSeverity.LOW,
                    description=f"Trait '{trait.name}' has low confidence despite good evidence",
                    source_mind=mind_id,
                    affected_items=[trait.name],
                    recommendation=f"Review confidence calibration for trait '{trait.name}'",
                )

        if not result.traits:
            add(
                type=IssueType.INSUFFICIENT_COVERAGE,
                severity=IssueSeverity.HIGH,
                description=f"{mind_id.value} produced no traits",
                source_mind=mind_id,
                recommendation=f"Review {mind_id.value} analysis for issues",
            )
        if not 0.0 <= result.confidence <= 1.0:
            add(
                type=IssueType.INVALID_CONFIDENCE,
                severity=IssueSeverity.CRITICAL,
                description=f"{mind_id.value} reported confidence {result.confidence} outside [0, 1]",
                source_mind=mind_id,
                recommendation=f"Fix confidence computation in {mind_id.value}",
            )
    return issues


def find_gaps(results: Mapping[MindId, MindResult], sources: Sequence[ExtractedData]) -> list[QualityGap]:
    gaps: list[QualityGap] = []

    def add(**fields):
        gaps.append(QualityGap(id=f"gap-{len(gaps) + 1}", **fields))

    categories = {t.category for r in results.values() for t in r.traits}
    for expected in EXPECTED_CATEGORIES:
        if expected not in categories:
            add(
                name=f"Missing {expected} analysis",
                category=GapCategory.MISSING_TRAITS,
                description=f"No traits found in the '{expected}' category",
                impact=0.6,
                suggestions=[
                    f"Analyze source data for {expected} patterns",
                    f"Request additional data sources for {expected} traits",
                ],
                related_minds=RELATED_MINDS.get(expected, DEFAULT_RELATED),
            )

    used = set().union(*(_used_sources(r) for r in results.values())) if results else set()
    unanalyzed = [s for s in sources if s.id not in used]
    if len(unanalyzed) > len(sources) * UNANALYZED_SHARE:
        add(
            name="Unanalyzed source data",
            category=GapCategory.UNANALYZED_DATA,
            description=f"{len(unanalyzed)} data items were not used in analysis",
            impact=0.5,
            suggestions=[
                "Review unanalyzed data for relevant patterns",
                "Check if data format is compatible with analysis",
            ],
            related_minds=[MindId.TIM, MindId.DANIEL],
        )

    for mind_id, result in results.items():
        avg = _avg_trait_confidence(result)
        if avg < LOW_MIND_CONFIDENCE:
            add(
                name=f"Low confidence in {mind_id.value}",
                category=GapCategory.LOW_CONFIDENCE,
                description=f"{mind_id.value} analysis has average confidence of {avg * 100:.0f}%",
                impact=0.7,
                suggestions=["Review source data quality", "Consider additional data sources"],
                related_minds=[mind_id],
            )
    return gaps


def check_trait_alignment(results: Mapping[MindId, MindResult], options: QuinnOptions) -> ConsistencyCheck:
    """Same category:name reported as both True and False by different Minds."""
    values: dict[str, dict[MindId, object]] = {}
    for mind_id, result in results.items():
        for trait in result.traits:
            values.setdefault(f"{trait.category}:{trait.name}", {})[mind_id] = trait.value

    inconsistencies = []
    for key, by_mind in values.items():
        reported = list(by_mind.values())
        if len(by_mind) > 1 and any(v is True for v in reported) and any(v is False for v in reported):
            inconsistencies.append(Inconsistency(
                description=f"Contradictory values for {key}",
                involved_minds=list(by_mind),
                item=key,
                severity=IssueSeverity.HIGH,
            ))

    return ConsistencyCheck(
        name="Trait Alignment",
        type=CheckType.TRAIT_ALIGNMENT,
        passed=len(inconsistencies) <= options.maximum_inconsistencies,
        score=max(0, 100 - INCONSISTENCY_PENALTY * len(inconsistencies)) / 100,
        inconsistencies=inconsistencies,
    )


def check_confidence_correlation(results: Mapping[MindId, MindResult]) -> ConsistencyCheck:
    averages = {mind_id: _avg_trait_confidence(r) for mind_id, r in results.items()}
    spread = max(averages.values()) - min(averages.values())
    inconsistencies = []
    if spread > CONFIDENCE_DISPARITY:
        inconsistencies.append(Inconsistency(
            description="Large confidence disparity between minds",
            involved_minds=list(averages),
            item="overall-confidence",
            severity=IssueSeverity.MEDIUM,
        ))
    return ConsistencyCheck(
        name="Confidence Correlation",
        type=CheckType.CONFIDENCE_CORRELATION,
        passed=spread <= CONFIDENCE_DISPARITY,
        score=clamp(1 - spread, 0.0, 1.0),
        inconsistencies=inconsistencies,
    )


def check_evidence_overlap(results: Mapping[MindId, MindResult]) -> ConsistencyCheck:
    """Mean per-Mind source usage relative to all sources used by any Mind."""
    usage = {mind_id: _used_sources(r) for mind_id, r in results.items()}
    all_sources = set().union(*usage.values())
    overlap = mean(len(u) for u in usage.values()) / len(all_sources) if all_sources else 0.0
    inconsistencies = []
    if overlap < MIN_EVIDENCE_OVERLAP:
        inconsistencies.append(Inconsistency(
            description="Low evidence overlap between minds",
            involved_minds=list(usage),
            item="evidence-overlap",
            severity=IssueSeverity.LOW,
        ))
    return ConsistencyCheck(
        name="Evidence Overlap",
        type=CheckType.EVIDENCE_OVERLAP,
        passed=overlap >= MIN_EVIDENCE_OVERLAP,
        score=clamp(overlap, 0.0, 1.0),
        inconsistencies=inconsistencies,
    )


def check_consistency(results: Mapping[MindId, MindResult], options: QuinnOptions) -> list[ConsistencyCheck]:
    if len(results) < 2:
        return []
    return [
        check_trait_alignment(results, options),
        check_confidence_correlation(results),
        check_evidence_overlap(results),
    ]


def detect_red_flags(results: Mapping[MindId, MindResult]) -> list[RedFlag]:
    flags: list[RedFlag] = []

    def add(**fields):
        flags.append(RedFlag(id=f"rf-{len(flags) + 1}", **fields))

    for mind_id, result in results.items():
        introvert = next((t for t in result.traits if "introvert" in t.name.lower()), None)
        extrovert = next((t for t in result.traits if "extrovert" in t.name.lower()), None)
        if introvert and extrovert and introvert.confidence > 0.7 and extrovert.confidence > 0.7:
            add(
                type="contradictory-traits",
                description=f"Both introvert and extrovert traits with high confidence in {mind_id.value}",
                confidence=0.8,
                action=FlagAction.INVESTIGATE,
            )

    for mind_id, result in results.items():
        traits = result.traits
        if len(traits) > 5 and all(t.confidence > 0.9 for t in traits):
            add(
                type="unusual-patterns",
                description=f"All traits in {mind_id.value} have very high confidence (>0.9)",
                confidence=0.6,
                action=FlagAction.WARN,
            )
        if len(traits) > 3 and all(t.confidence < 0.3 for t in traits):
            add(
                type="confidence-mismatch",
                description=f"All traits in {mind_id.value} have very low confidence (<0.3)",
                confidence=0.7,
                action=FlagAction.INVESTIGATE,
            )
    return flags


def quality_breakdown(
    results: Mapping[MindId, MindResult],
    sources: Sequence[ExtractedData],
    issues: Sequence[QualityIssue],
    gaps: Sequence[QualityGap],
    checks: Sequence[ConsistencyCheck],
    flags: Sequence[RedFlag],
) -> QualityBreakdown:
    completeness = max(0.0, 100 - sum(g.impact * 20 for g in gaps))
    consistency = mean(c.score * 100 for c in checks) if checks else 100.0
    evidence_issues = [i for i in issues if i.type == IssueType.MISSING_EVIDENCE]
    confidence_issues = [i for i in issues if i.type == IssueType.LOW_CONFIDENCE]
    mismatch_flags = [f for f in flags if f.type == "confidence-mismatch"]

    coverage = 100.0
    if sources:
        source_ids = {s.id for s in sources}
        used = set().union(*(_used_sources(r) for r in results.values())) & source_ids
        coverage = len(used) / len(source_ids) * 100

    return QualityBreakdown(
        completeness=completeness,
        consistency=consistency,
        evidence_quality=max(0.0, 100.0 - 15 * len(evidence_issues)),
        confidence_calibration=max(0.0, 100.0 - 10 * len(confidence_issues) - 20 * len(mismatch_flags)),
        coverage=coverage,
    )
