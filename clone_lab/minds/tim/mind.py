"""Tim: source quality and coverage analysis.

First stage of the pipeline, no dependencies. Scores every source,
detects duplicates, measures coverage and produces the prioritized
source ordering that downstream Minds read from
MindResult.metadata["prioritized_sources"].
"""

import logging
from typing import Optional, Sequence

from clone_lab.llm.backends import ContentGenerator
from clone_lab.minds.base import Mind
from clone_lab.minds.scoring import clamp_confidence, mean, round_half_up, round_score, weighted_average
from clone_lab.minds.schemas import (
    Evidence,
    EvidenceType,
    ExtractedData,
    MindContext,
    MindId,
    MindPersona,
    MindResult,
    MindStatistics,
    PersonaTone,
    PersonalityTrait,
    Severity,
)
from clone_lab.minds.tim.coverage import analyze_coverage
from clone_lab.minds.tim.duplicates import find_duplicate_groups, redundant_source_ids
from clone_lab.minds.tim.heuristics import DEFAULT_TIM_HEURISTICS, TimHeuristics
from clone_lab.minds.tim.quality import assess_source
from clone_lab.minds.tim.schemas import (
    CoverageResult,
    DuplicateGroup,
    SourceQuality,
    TimAnalysis,
    TimOptions,
)
from clone_lab.minds.validation import Deduction, deduction

logger = logging.getLogger(__name__)

TRAIT_CATEGORY = "data_quality"
EVIDENCE_MIN_SCORE = 70
EVIDENCE_LIMIT = 10
EXCERPT_CHARS = 200
GOOD_SOURCE_SCORE = 50
FULL_CONFIDENCE_SOURCES = 10
FEW_SOURCES = 5
TEMPORAL_SPREAD_TARGET = 50

CONFIDENCE_WEIGHTS = {
    "quality_ratio": 0.4,
    "coverage": 0.35,
    "source_count": 0.25,
}


def prioritize_sources(
    quality: Sequence[SourceQuality],
    duplicates: Sequence[DuplicateGroup],
    options: TimOptions,
) -> list[str]:
    """Source ids worth analyzing, best first.

    Non-primary duplicates are always dropped. Sources under
    min_quality_score are dropped unless include_low_quality is set.
    Equal scores keep input order.
    """
    redundant = redundant_source_ids(duplicates)
    kept = [
        q for q in quality
        if q.source_id not in redundant
        and (options.include_low_quality or q.score >= options.min_quality_score)
    ]
    kept.sort(key=lambda q: q.score, reverse=True)
    return [q.source_id for q in kept]


def sources_to_remove(
    quality: Sequence[SourceQuality],
    duplicates: Sequence[DuplicateGroup],
    options: TimOptions,
) -> list[str]:
    """Source ids a curator should drop, in input order."""
    redundant = redundant_source_ids(duplicates)
    return [
        q.source_id for q in quality
        if q.source_id in redundant
        or (not options.include_low_quality and q.score < options.min_quality_score)
    ]


class TimMind(Mind):
    """Extraction specialist: source quality, duplicates and coverage."""

    persona = MindPersona(
        id=MindId.TIM,
        name="Tim",
        inspiration="Tim Ferriss",
        expertise=(
            "Source quality assessment",
            "Content curation",
            "Data extraction optimization",
            "Efficiency in information gathering",
        ),
        tone=PersonaTone.PRAGMATIC,
        description="Identifies high-quality sources and optimizes data curation",
        version="1.0.0",
    )
    dependencies = ()
    options_model = TimOptions
    expected_categories = (TRAIT_CATEGORY,)
    validity_threshold = 60

    def __init__(
        self,
        generator: Optional[ContentGenerator] = None,
        heuristics: TimHeuristics = DEFAULT_TIM_HEURISTICS,
    ):
        super().__init__(generator)
        self.heuristics = heuristics

    def assess(self, context: MindContext, options: TimOptions) -> TimAnalysis:
        """Compute the full quality/coverage artifact for the context's sources."""
        sources = list(context.extracted_data)
        quality: list[SourceQuality] = []
        for start in range(0, len(sources), options.batch_size):
            if context.is_cancelled():
                raise InterruptedError(f"[tim] Cancelled after scoring {start} sources")
            batch = sources[start:start + options.batch_size]
            quality.extend(assess_source(s, context.reference_time, self.heuristics) for s in batch)
            logger.debug(f"[tim] Scored sources {start + 1}-{start + len(batch)} of {len(sources)}")

        duplicates = find_duplicate_groups(sources, quality, options.duplicate_threshold)
        coverage = analyze_coverage(sources, quality, self.heuristics)
        if coverage.score < options.target_coverage_score:
            logger.info(
                f"[tim] Coverage {coverage.score} below target {options.target_coverage_score} "
                f"({len(coverage.gaps)} gaps)"
            )

        return TimAnalysis(
            source_quality=quality,
            duplicates=duplicates,
            coverage=coverage,
            prioritized_sources=prioritize_sources(quality, duplicates, options),
            sources_to_remove=sources_to_remove(quality, duplicates, options),
        )

    def _analyze(self, context: MindContext, options: TimOptions) -> MindResult:
        analysis = self.assess(context, options)
        traits = self._traits(analysis)
        evidence = self._evidence(context.extracted_data, analysis.source_quality)
        average_quality = round_score(mean(q.score for q in analysis.source_quality))

        return self._build_result(
            traits=traits,
            confidence=self._confidence(analysis.source_quality, analysis.coverage),
            evidence=evidence,
            recommendations=self._recommendations(analysis, options),
            statistics=MindStatistics(
                sources_analyzed=len(context.extracted_data),
                traits_extracted=len(traits),
                evidence_collected=len(evidence),
            ),
            extra_metadata={
                "sources_analyzed": len(context.extracted_data),
                "duplicate_groups": len(analysis.duplicates),
                "coverage_score": analysis.coverage.score,
                "average_quality_score": average_quality,
                "prioritized_sources": analysis.prioritized_sources,
                "sources_to_remove": analysis.sources_to_remove,
                "analysis": analysis.model_dump(mode="json"),
            },
        )

    def _traits(self, analysis: TimAnalysis) -> list[PersonalityTrait]:
        quality = analysis.source_quality
        coverage = analysis.coverage
        redundant = sum(len(g.source_ids) - 1 for g in analysis.duplicates)

        traits = [
            PersonalityTrait(
                category=TRAIT_CATEGORY,
                name="source_quality_average",
                value=round_score(mean(q.score for q in quality)),
                confidence=clamp_confidence(len(quality) / FULL_CONFIDENCE_SOURCES),
                sources=[q.source_id for q in quality],
                notes=f"Average quality score across {len(quality)} sources",
            ),
            PersonalityTrait(
                category=TRAIT_CATEGORY,
                name="content_coverage",
                value=coverage.score,
                confidence=clamp_confidence(coverage.score / 100),
                sources=list(dict.fromkeys(i for t in coverage.topics for i in t.source_ids)),
                notes=f"Coverage score based on {len(coverage.topics)} topics",
            ),
            PersonalityTrait(
                category=TRAIT_CATEGORY,
                name="redundancy_ratio",
                value=round_half_up(redundant / len(quality), 2) if quality else 0.0,
                confidence=0.8,
                sources=[i for g in analysis.duplicates for i in g.source_ids],
                notes=f"{len(analysis.duplicates)} duplicate groups detected",
            ),
            PersonalityTrait(
                category=TRAIT_CATEGORY,
                name="format_diversity",
                value=coverage.formats.score,
                confidence=0.9 if coverage.formats.has_variety else 0.5,
                notes="Good variety of source formats" if coverage.formats.has_variety
                else "Limited format diversity",
            ),
        ]

        temporal = coverage.temporal
        if temporal.earliest and temporal.latest:
            traits.append(PersonalityTrait(
                category=TRAIT_CATEGORY,
                name="temporal_spread",
                value=temporal.spread_score,
                confidence=0.7,
                notes=f"Content spans {temporal.earliest.date()} to {temporal.latest.date()}",
            ))
        return traits

    @staticmethod
    def _evidence(sources: Sequence[ExtractedData], quality: Sequence[SourceQuality]) -> list[Evidence]:
        by_id = {s.id: s for s in sources}
        top = sorted(
            (q for q in quality if q.score >= EVIDENCE_MIN_SCORE),
            key=lambda q: q.score,
            reverse=True,
        )[:EVIDENCE_LIMIT]

        evidence = []
        for q in top:
            content = by_id[q.source_id].content
            excerpt = content[:EXCERPT_CHARS] + "..." if len(content) > EXCERPT_CHARS else content
            evidence.append(Evidence(
                source=q.source_id,
                excerpt=excerpt,
                relevance=clamp_confidence(q.score / 100),
                type=EvidenceType.OTHER,
            ))
        return evidence

    @staticmethod
    def _recommendations(analysis: TimAnalysis, options: TimOptions) -> list[str]:
        recs = []
        low = [q for q in analysis.source_quality if q.score < options.min_quality_score]
        if low:
            recs.append(
                f"Remove or improve {len(low)} low-quality sources "
                f"(score < {options.min_quality_score})"
            )

        if analysis.duplicates:
            redundant = sum(len(g.source_ids) - 1 for g in analysis.duplicates)
            recs.append(
                f"Remove {redundant} duplicate sources "
                f"({len(analysis.duplicates)} groups identified)"
            )

        recs.extend(gap.recommendation for gap in analysis.coverage.gaps)

        if not analysis.coverage.formats.has_variety:
            recs.append("Add sources in different formats (documents, videos, audio) for richer analysis")
        if analysis.coverage.temporal.spread_score < TEMPORAL_SPREAD_TARGET:
            recs.append("Include content from a wider time range to capture personality evolution")
        if len(analysis.source_quality) < FEW_SOURCES:
            recs.append("Consider adding more sources for a more comprehensive analysis")
        if analysis.prioritized_sources:
            recs.append(
                f"Focus analysis on top {min(5, len(analysis.prioritized_sources))} prioritized sources"
            )
        return recs

    @staticmethod
    def _confidence(quality: Sequence[SourceQuality], coverage: CoverageResult) -> float:
        if not quality:
            return 0.0
        good_ratio = sum(1 for q in quality if q.score >= GOOD_SOURCE_SCORE) / len(quality)
        combined = weighted_average(
            {
                "quality_ratio": good_ratio * 100,
                "coverage": coverage.score,
                "source_count": min(1.0, len(quality) / FULL_CONFIDENCE_SOURCES) * 100,
            },
            CONFIDENCE_WEIGHTS,
        )
        return clamp_confidence(round_half_up(combined) / 100)

    def _extra_deductions(self, result: MindResult) -> list[Deduction]:
        found = []
        if result.mind_id != MindId.TIM:
            found.append(deduction(
                Severity.ERROR,
                "INVALID_MIND_ID",
                f"Expected mind_id 'tim', got '{result.mind_id.value}'",
                20,
                "mind_id",
            ))
        if "sources_analyzed" not in result.metadata:
            found.append(deduction(
                Severity.WARNING,
                "MISSING_METADATA",
                "Result metadata does not record sources_analyzed",
                5,
                "metadata.sources_analyzed",
            ))
        return found
