"""Tests for Tim's coverage analysis and the TimMind stage."""

import pytest

from clone_lab.errors import MindPreconditionError
from clone_lab.minds.schemas import MindContext, MindId, SourceType
from clone_lab.minds.tim import TimMind
from clone_lab.minds.tim.coverage import analyze_formats, analyze_temporal, topic_score
from clone_lab.minds.tim.heuristics import DEFAULT_TIM_HEURISTICS
from clone_lab.minds.tim.schemas import GapSeverity, TopicCoverage

from tests.conftest import REFERENCE_TIME, make_context, make_result, make_source


def run_tim(sources, **options):
    mind = TimMind()
    mind.initialize(options or None)
    return mind, mind.analyze(make_context(sources))


class TestCoverageParts:
    def test_topic_matching_uses_word_prefixes(self):
        """Keywords match at word starts, so 'communication' hits 'communicat'."""
        topics = DEFAULT_TIM_HEURISTICS.topics_in("Better communication with my friends")
        assert topics == ["communication", "relationships"]

    def test_topic_score_blends_quality_and_breadth(self):
        topics = [
            TopicCoverage(topic="career", source_count=3, source_ids=["a"], quality=53),
            TopicCoverage(topic="values", source_count=1, source_ids=["b"], quality=70),
        ]
        assert topic_score(topics) == 41
        assert topic_score([]) == 0

    def test_temporal_without_timestamps(self):
        temporal = analyze_temporal([make_source("a")])
        assert temporal.spread_score == 30
        assert temporal.earliest is None

    def test_temporal_spread_and_periods(self):
        sources = [make_source("a", age_days=400), make_source("b", age_days=0), make_source("c", age_days=1)]
        temporal = analyze_temporal(sources)
        assert temporal.span_days == 400
        assert temporal.spread_score == 100
        assert [p.period for p in temporal.periods] == ["2024-11", "2025-12", "2026-01"]

    def test_format_buckets(self):
        two = analyze_formats([make_source("a", source_type=SourceType.CHAT), make_source("b", source_type=SourceType.VIDEO)])
        assert two.score == 40
        assert not two.has_variety

        three = analyze_formats([
            make_source("a", source_type=SourceType.CHAT),
            make_source("b", source_type=SourceType.VIDEO),
            make_source("c", source_type=SourceType.DOCUMENT),
        ])
        assert three.score == 60
        assert three.has_variety


class TestTimMind:
    def test_scenario_coverage_and_prioritization(self, scenario_sources):
        """Two identical chats and one document give the expected artifact."""
        _, result = run_tim(scenario_sources)
        meta = result.metadata

        assert meta["sources_analyzed"] == 3
        assert meta["duplicate_groups"] == 1
        assert meta["prioritized_sources"] == ["doc-1", "chat-1"]
        assert meta["sources_to_remove"] == ["chat-2"]
        assert meta["coverage_score"] == 38

        coverage = meta["analysis"]["coverage"]
        assert coverage["topic_score"] == 41
        gaps = [(g["topic"], g["severity"]) for g in coverage["gaps"]]
        assert gaps == [
            ("communication", GapSeverity.CRITICAL.value),
            ("relationships", GapSeverity.CRITICAL.value),
            ("goals", GapSeverity.CRITICAL.value),
            ("values", GapSeverity.MODERATE.value),
        ]

        group = meta["analysis"]["duplicates"][0]
        assert group["primary_source_id"] == "chat-1"
        assert group["type"] == "exact"

    def test_result_shape(self, scenario_sources):
        _, result = run_tim(scenario_sources)
        assert result.mind_id == MindId.TIM
        assert 0.0 <= result.confidence <= 1.0
        assert {t.category for t in result.traits} == {"data_quality"}
        assert [t.name for t in result.traits] == [
            "source_quality_average",
            "content_coverage",
            "redundancy_ratio",
            "format_diversity",
        ]
        # only the document clears the evidence bar
        assert [e.source for e in result.evidence] == ["doc-1"]
        assert result.evidence[0].excerpt.endswith("...")
        for key in ("timestamp", "mind_version", "statistics"):
            assert key in result.metadata
        assert result.metadata["statistics"]["sources_analyzed"] == 3

    def test_own_result_validates(self, scenario_sources):
        mind, result = run_tim(scenario_sources)
        validation = mind.validate(result)
        assert validation.valid
        assert validation.score == 100

    def test_recommendations_mention_duplicates_and_gaps(self, scenario_sources):
        _, result = run_tim(scenario_sources)
        joined = "\n".join(result.recommendations)
        assert "Remove 1 duplicate sources" in joined
        assert "communication" in joined
        assert "Focus analysis on top 2 prioritized sources" in joined

    def test_low_quality_kept_when_requested(self):
        sources = [make_source("tiny", "ok", age_days=1000), make_source("doc", "word " * 300, SourceType.DOCUMENT)]
        _, strict = run_tim(sources, min_quality_score=40)
        assert strict.metadata["prioritized_sources"] == ["doc"]
        assert strict.metadata["sources_to_remove"] == ["tiny"]

        _, lenient = run_tim(sources, min_quality_score=40, include_low_quality=True)
        assert lenient.metadata["prioritized_sources"] == ["doc", "tiny"]
        assert lenient.metadata["sources_to_remove"] == []

    def test_temporal_trait_only_with_timestamps(self):
        _, result = run_tim([make_source("a", "x", age_days=10), make_source("b", "y", age_days=200)])
        assert "temporal_spread" in [t.name for t in result.traits]

    def test_per_run_options_override(self, scenario_sources):
        """Options under context.options['tim'] apply to one call only."""
        mind = TimMind()
        mind.initialize()
        context = make_context(scenario_sources, options={"tim": {"min_quality_score": 50}})
        result = mind.analyze(context)
        assert result.metadata["prioritized_sources"] == ["doc-1"]
        assert mind.options.min_quality_score == 30

    def test_empty_data_is_a_precondition_failure(self):
        mind = TimMind()
        mind.initialize()
        context = make_context([])
        assert not mind.can_handle(context)
        with pytest.raises(MindPreconditionError, match="no extracted data"):
            mind.analyze(context)

    def test_cancellation_between_batches(self):
        mind = TimMind()
        mind.initialize({"batch_size": 1})
        context = MindContext.build(
            [make_source("a", "x")], reference_time=REFERENCE_TIME, cancellation_check=lambda: True,
        )
        with pytest.raises(InterruptedError):
            mind.analyze(context)


class TestTimValidation:
    def test_missing_metadata_and_wrong_id(self):
        mind = TimMind()
        result = make_result(mind_id=MindId.VICTORIA, metadata={})
        validation = mind.validate(result)
        codes = {i.code for i in validation.issues}
        assert {"INVALID_MIND_ID", "MISSING_METADATA"} <= codes
        assert validation.score == 75
        assert not validation.valid

    def test_validation_does_not_mutate(self):
        mind = TimMind()
        result = make_result()
        before = result.model_dump()
        mind.validate(result)
        assert result.model_dump() == before

    def test_validation_is_repeatable(self, scenario_sources):
        mind = TimMind()
        mind.initialize()
        result = mind.analyze(make_context(scenario_sources))
        assert mind.validate(result) == mind.validate(result)
        invalid = make_result(mind_id=MindId.VICTORIA, metadata={})
        assert mind.validate(invalid) == mind.validate(invalid)
