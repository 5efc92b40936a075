"""Victoria: feasibility analysis.

Depends on Tim. Reads Tim's prioritized source list when present, derives
trade-offs, constraints, risks and a decision-style profile, and combines
them into a feasibility score. With use_generator set, an injected content
generator adds narrative insights to the recommendations.
"""

import json
import logging
from typing import Optional, Sequence

from clone_lab.errors import GeneratorError
from clone_lab.llm.backends import ContentGenerator
from clone_lab.minds.base import Mind
from clone_lab.minds.scoring import clamp_confidence
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
    SourceType,
)
from clone_lab.minds.validation import Deduction, deduction
from clone_lab.minds.victoria.analysis import (
    HIGH_RISK_SCORE,
    analyze_decision_style,
    analyze_trade_offs,
    assess_risks,
    calculate_feasibility,
    identify_constraints,
    overall_confidence,
)
from clone_lab.minds.victoria.heuristics import DEFAULT_VICTORIA_HEURISTICS, VictoriaHeuristics
from clone_lab.minds.victoria.schemas import ConstraintSeverity, VictoriaAnalysis, VictoriaOptions

logger = logging.getLogger(__name__)

EVIDENCE_LIMIT = 5
EXCERPT_CHARS = 200

INSIGHTS_SYSTEM_PROMPT = (
    "You are a pragmatic feasibility analyst. Given a structured feasibility "
    "assessment of a person's plans and decision habits, return JSON of the form "
    '{"insights": ["..."]} with at most five short, concrete insights. '
    "Return only the JSON object."
)


def select_sources(context: MindContext) -> list[ExtractedData]:
    """Sources to analyze: Tim's prioritized list when it has one, else all."""
    tim = context.previous_results.get(MindId.TIM)
    prioritized = tim.metadata.get("prioritized_sources") if tim else None
    if not prioritized:
        return list(context.extracted_data)
    by_id = {s.id: s for s in context.extracted_data}
    return [by_id[i] for i in prioritized if i in by_id]


class VictoriaMind(Mind):
    """Feasibility analyst: trade-offs, constraints, risks and decision style."""

    persona = MindPersona(
        id=MindId.VICTORIA,
        name="Victoria",
        inspiration="Pragmatic feasibility analyst",
        expertise=(
            "feasibility-analysis",
            "trade-off-assessment",
            "constraint-identification",
            "risk-evaluation",
            "decision-frameworks",
        ),
        tone=PersonaTone.PRAGMATIC,
        description="Assesses the practicality and viability of decisions and plans",
        version="1.0.0",
    )
    dependencies = (MindId.TIM,)
    options_model = VictoriaOptions
    expected_categories = ("decision-making", "risk", "feasibility", "constraints")

    def __init__(
        self,
        generator: Optional[ContentGenerator] = None,
        heuristics: VictoriaHeuristics = DEFAULT_VICTORIA_HEURISTICS,
    ):
        super().__init__(generator)
        self.heuristics = heuristics

    def assess(self, sources: Sequence[ExtractedData], options: VictoriaOptions) -> VictoriaAnalysis:
        trade_offs = analyze_trade_offs(sources, self.heuristics, options.confidence_threshold)
        constraints = identify_constraints(sources, self.heuristics)
        risks = assess_risks(sources, self.heuristics, options.include_mitigation)
        style = analyze_decision_style(sources, self.heuristics) if options.analyze_decision_style else None
        feasibility = calculate_feasibility(trade_offs, constraints, risks, options.dimension_weights)
        return VictoriaAnalysis(
            trade_offs=trade_offs,
            constraints=constraints,
            risks=risks,
            decision_style=style,
            feasibility=feasibility,
            analyzed_sources=[s.id for s in sources],
        )

    def _analyze(self, context: MindContext, options: VictoriaOptions) -> MindResult:
        sources = select_sources(context)
        analysis = self.assess(sources, options)

        recommendations = self._insights(analysis)
        generator_calls = 0
        if options.use_generator:
            recommendations.extend(self._generated_insights(context, analysis, options))
            generator_calls = 1

        traits = self._traits(analysis)
        evidence = self._evidence(sources)
        return self._build_result(
            traits=traits,
            confidence=overall_confidence(
                analysis.trade_offs, analysis.constraints, analysis.risks, analysis.decision_style,
            ),
            evidence=evidence,
            recommendations=recommendations,
            statistics=MindStatistics(
                sources_analyzed=len(sources),
                traits_extracted=len(traits),
                evidence_collected=len(evidence),
                generator_calls=generator_calls,
            ),
            extra_metadata={
                "feasibility": analysis.feasibility.model_dump(mode="json"),
                "analysis": analysis.model_dump(mode="json"),
            },
        )

    @staticmethod
    def _insights(analysis: VictoriaAnalysis) -> list[str]:
        feasibility = analysis.feasibility
        insights = [
            f"Overall feasibility: {feasibility.overall:.0f}% - "
            f"{feasibility.recommendation.value.replace('-', ' ')}"
        ]

        hard = [c for c in analysis.constraints if c.severity == ConstraintSeverity.HARD]
        if hard:
            insights.append(
                f"{len(hard)} hard constraints require attention: {', '.join(c.name for c in hard)}"
            )

        high_risks = [r for r in analysis.risks if r.score >= HIGH_RISK_SCORE]
        if high_risks:
            insights.append(f"{len(high_risks)} high-impact risks identified requiring mitigation")

        if analysis.trade_offs:
            main = analysis.trade_offs[0]
            favored = main.primary.name if main.preference >= 0.5 else main.secondary.name
            insights.append(f"Primary trade-off preference: {main.name} favors {favored}")
        return insights

    def _generated_insights(
        self,
        context: MindContext,
        analysis: VictoriaAnalysis,
        options: VictoriaOptions,
    ) -> list[str]:
        summary = analysis.model_dump(mode="json", exclude={"analyzed_sources"})
        parsed = self._generate_json(
            context,
            INSIGHTS_SYSTEM_PROMPT,
            json.dumps(summary, indent=2),
            options.generator_max_tokens,
        )
        insights = parsed.get("insights")
        if not isinstance(insights, list) or not all(isinstance(i, str) for i in insights):
            raise GeneratorError("[victoria] Generator response has no 'insights' list of strings")
        logger.info(f"[victoria] Generator added {len(insights)} insights")
        return insights

    @staticmethod
    def _traits(analysis: VictoriaAnalysis) -> list[PersonalityTrait]:
        traits = []
        style = analysis.decision_style
        if style is not None:
            traits.append(PersonalityTrait(
                category="decision-making",
                name="decision_framework",
                value=style.framework.value,
                confidence=style.confidence,
                sources=style.sources,
            ))
            traits.append(PersonalityTrait(
                category="risk",
                name="risk_tolerance",
                value=round(style.risk_tolerance, 3),
                confidence=style.confidence,
                sources=style.sources,
            ))

        traits.append(PersonalityTrait(
            category="feasibility",
            name="overall_feasibility",
            value=analysis.feasibility.overall,
            confidence=analysis.feasibility.confidence,
            notes=analysis.feasibility.recommendation.value,
        ))
        traits.append(PersonalityTrait(
            category="constraints",
            name="constraint_count",
            value=len(analysis.constraints),
            confidence=0.8,
            sources=list(dict.fromkeys(i for c in analysis.constraints for i in c.sources)),
        ))
        return traits

    @staticmethod
    def _evidence(sources: Sequence[ExtractedData]) -> list[Evidence]:
        return [
            Evidence(
                source=s.id,
                excerpt=s.content[:EXCERPT_CHARS],
                relevance=clamp_confidence(1 - index * 0.1),
                type=EvidenceType.QUOTE if s.source_type == SourceType.CHAT else EvidenceType.BEHAVIOR,
            )
            for index, s in enumerate(sources[:EVIDENCE_LIMIT])
        ]

    def _extra_deductions(self, result: MindResult) -> list[Deduction]:
        if "feasibility" not in result.metadata:
            return [deduction(
                Severity.ERROR,
                "MISSING_FEASIBILITY",
                "Result metadata has no feasibility score",
                25,
                "metadata.feasibility",
            )]
        return []
