"""Quinn: quality assurance over the results of earlier Minds."""

import logging
from typing import Mapping

from clone_lab.minds.base import Mind
from clone_lab.minds.scoring import clamp_confidence, round_half_up, weighted_average
from clone_lab.minds.schemas import (
    Evidence,
    EvidenceType,
    MindContext,
    MindId,
    MindPersona,
    MindResult,
    MindStatistics,
    PersonaTone,
    PersonalityTrait,
    Severity,
)
from clone_lab.minds.quinn.checks import (
    BREAKDOWN_WEIGHTS,
    check_consistency,
    detect_red_flags,
    find_gaps,
    find_quality_issues,
    quality_breakdown,
)
from clone_lab.minds.quinn.schemas import (
    FlagAction,
    IssueSeverity,
    QualityReport,
    QuinnOptions,
)
from clone_lab.minds.validation import Deduction, deduction

logger = logging.getLogger(__name__)

RECOMMENDATION_LIMIT = 10
WEAK_AREA_SCORE = 70
EVIDENCE_PER_MIND = 3
RELEVANT_EVIDENCE = 0.7


class QuinnMind(Mind):
    """Quality engineer: consistency, gaps and red flags across Minds."""

    persona = MindPersona(
        id=MindId.QUINN,
        name="Quinn",
        inspiration="Quality engineering principles",
        expertise=(
            "Quality validation",
            "Consistency checking",
            "Edge case detection",
            "Heuristic verification",
        ),
        tone=PersonaTone.ANALYTICAL,
        description="Validates analysis quality and consistency across all Minds",
        version="1.0.0",
    )
    dependencies = (MindId.TIM, MindId.VICTORIA)
    options_model = QuinnOptions
    expected_categories = ("quality", "quality-metrics")

    def build_report(self, context: MindContext, options: QuinnOptions) -> QualityReport:
        results = context.previous_results
        sources = context.extracted_data

        issues = find_quality_issues(results, options)
        gaps = find_gaps(results, sources)
        checks = check_consistency(results, options)
        flags = detect_red_flags(results)
        breakdown = quality_breakdown(results, sources, issues, gaps, checks, flags)

        score = round_half_up(weighted_average(breakdown.model_dump(), BREAKDOWN_WEIGHTS), 2)
        has_critical = any(i.severity == IssueSeverity.CRITICAL for i in issues)
        has_block = any(f.action == FlagAction.BLOCK for f in flags)
        passed = score >= options.minimum_overall_score and not has_block
        if options.fail_on_critical and has_critical:
            passed = False

        recs = []
        if breakdown.completeness < WEAK_AREA_SCORE:
            recs.append("Address coverage gaps to improve analysis completeness")
        if breakdown.consistency < WEAK_AREA_SCORE:
            recs.append("Resolve inconsistencies between mind analyses")
        if breakdown.evidence_quality < WEAK_AREA_SCORE:
            recs.append("Add more supporting evidence for extracted traits")
        if breakdown.coverage < options.minimum_coverage_percentage:
            recs.append(
                f"Only {breakdown.coverage:.0f}% of sources support a trait "
                f"(target {options.minimum_coverage_percentage}%)"
            )
        recs.extend(
            i.recommendation for i in issues
            if i.severity in (IssueSeverity.HIGH, IssueSeverity.CRITICAL)
        )
        recs.extend(g.suggestions[0] for g in gaps if g.impact > 0.5 and g.suggestions)

        return QualityReport(
            overall_score=score,
            passed=passed,
            breakdown=breakdown,
            issues=issues,
            gaps=gaps,
            consistency=checks,
            red_flags=flags,
            recommendations=list(dict.fromkeys(recs))[:RECOMMENDATION_LIMIT],
        )

    def _analyze(self, context: MindContext, options: QuinnOptions) -> MindResult:
        report = self.build_report(context, options)
        logger.info(
            f"[quinn] Quality score {report.overall_score:.1f} "
            f"({'passed' if report.passed else 'failed'}), {len(report.issues)} issues, "
            f"{len(report.gaps)} gaps, {len(report.red_flags)} red flags"
        )

        traits = self._traits(report, context.previous_results)
        evidence = self._evidence(context.previous_results)
        return self._build_result(
            traits=traits,
            confidence=clamp_confidence(report.overall_score / 100),
            evidence=evidence,
            recommendations=self._recommendations(report),
            statistics=MindStatistics(
                sources_analyzed=len(context.extracted_data),
                traits_extracted=len(traits),
                evidence_collected=len(evidence),
            ),
            extra_metadata={
                "quality_score": report.overall_score,
                "passed": report.passed,
                "minds_reviewed": [m.value for m in context.previous_results],
                "report": report.model_dump(mode="json"),
            },
        )

    @staticmethod
    def _traits(report: QualityReport, results: Mapping[MindId, MindResult]) -> list[PersonalityTrait]:
        reviewed = [m.value for m in results]
        traits = [PersonalityTrait(
            category="quality",
            name="overall_quality_score",
            value=report.overall_score,
            confidence=clamp_confidence(report.overall_score / 100),
            sources=reviewed,
            notes=f"Analysis {'passed' if report.passed else 'failed'} quality threshold",
        )]
        for name, value in report.breakdown.model_dump().items():
            traits.append(PersonalityTrait(
                category="quality-metrics",
                name=name,
                value=int(round_half_up(value)),
                confidence=clamp_confidence(value / 100),
                sources=reviewed,
            ))
        for name, count in (
            ("issues_found", len(report.issues)),
            ("gaps_identified", len(report.gaps)),
            ("red_flags", len(report.red_flags)),
        ):
            traits.append(PersonalityTrait(
                category="quality-metrics", name=name, value=count, confidence=1.0, sources=reviewed,
            ))
        return traits

    @staticmethod
    def _evidence(results: Mapping[MindId, MindResult]) -> list[Evidence]:
        evidence = []
        for mind_id, result in results.items():
            evidence.append(Evidence(
                source=mind_id.value,
                excerpt=(
                    f"{mind_id.value} analyzed {len(result.traits)} traits "
                    f"with {result.confidence:.2f} confidence"
                ),
                relevance=0.8,
                type=EvidenceType.OTHER,
            ))
            strong = [e for e in result.evidence if e.relevance > RELEVANT_EVIDENCE][:EVIDENCE_PER_MIND]
            evidence.extend(
                e.model_copy(update={"source": f"{mind_id.value}:{e.source}"}) for e in strong
            )
        return evidence

    @staticmethod
    def _recommendations(report: QualityReport) -> list[str]:
        recs = list(report.recommendations)
        if not report.passed:
            recs.insert(0, "Analysis did not meet quality threshold - review issues and gaps")
        for flag in report.red_flags:
            prefix = "Investigate" if flag.action == FlagAction.INVESTIGATE else "Warning"
            recs.append(f"{prefix}: {flag.description}")
        return recs

    def _extra_deductions(self, result: MindResult) -> list[Deduction]:
        if "quality_score" not in result.metadata:
            return [deduction(
                Severity.WARNING,
                "MISSING_QUALITY_SCORE",
                "Result metadata has no quality_score",
                10,
                "metadata.quality_score",
            )]
        return []
