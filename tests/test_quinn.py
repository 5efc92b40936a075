"""Tests for Quinn's cross-Mind quality checks."""

import pytest

from clone_lab.errors import MindPreconditionError
from clone_lab.minds.quinn import QuinnMind, QuinnOptions
from clone_lab.minds.quinn.checks import (
    check_consistency,
    detect_red_flags,
    find_gaps,
    find_quality_issues,
)
from clone_lab.minds.quinn.schemas import FlagAction, GapCategory, IssueSeverity, IssueType
from clone_lab.minds.schemas import MindId, PersonalityTrait
from clone_lab.minds.tim import TimMind
from clone_lab.minds.victoria import VictoriaMind

from tests.conftest import make_context, make_result, make_source


def trait(name, value=True, category="communication", confidence=0.8, sources=("a", "b")):
    return PersonalityTrait(category=category, name=name, value=value, confidence=confidence, sources=list(sources))


def contradicting_results():
    return {
        MindId.TIM: make_result(MindId.TIM, traits=[trait("open", True)]),
        MindId.VICTORIA: make_result(MindId.VICTORIA, traits=[trait("open", False)]),
    }


SOURCES = [make_source("a", "x"), make_source("b", "y")]


class TestQualityChecks:
    def test_thin_evidence_is_reported(self):
        results = {MindId.TIM: make_result(traits=[trait("curious", sources=["a"])])}
        issues = find_quality_issues(results, QuinnOptions())
        assert [i.type for i in issues] == [IssueType.MISSING_EVIDENCE]
        assert issues[0].affected_items == ["curious"]

    def test_out_of_range_confidence_is_critical(self):
        results = {MindId.TIM: make_result(confidence=1.5)}
        issues = find_quality_issues(results, QuinnOptions())
        assert any(i.type == IssueType.INVALID_CONFIDENCE and i.severity == IssueSeverity.CRITICAL for i in issues)

    def test_missing_categories_become_gaps(self):
        gaps = find_gaps(contradicting_results(), SOURCES)
        missing = [g for g in gaps if g.category == GapCategory.MISSING_TRAITS]
        assert len(missing) == 5
        assert not any(g.category == GapCategory.UNANALYZED_DATA for g in gaps)

    def test_unanalyzed_sources_become_a_gap(self):
        sources = SOURCES + [make_source("c", "z"), make_source("d", "w")]
        gaps = find_gaps(contradicting_results(), sources)
        assert any(g.category == GapCategory.UNANALYZED_DATA for g in gaps)

    def test_consistency_needs_two_minds(self):
        assert check_consistency({MindId.TIM: make_result()}, QuinnOptions()) == []

    def test_contradicting_boolean_traits(self):
        checks = check_consistency(contradicting_results(), QuinnOptions())
        alignment = checks[0]
        assert alignment.passed
        assert alignment.score == pytest.approx(0.85)
        assert alignment.inconsistencies[0].item == "communication:open"

        strict = check_consistency(contradicting_results(), QuinnOptions(maximum_inconsistencies=0))
        assert not strict[0].passed

    def test_introvert_extrovert_flag(self):
        results = {MindId.TIM: make_result(traits=[trait("introvert_score"), trait("extrovert_score")])}
        flags = detect_red_flags(results)
        assert [f.type for f in flags] == ["contradictory-traits"]
        assert flags[0].action == FlagAction.INVESTIGATE


class TestQuinnMind:
    def build(self, results, **options):
        mind = QuinnMind()
        mind.initialize(options or None)
        return mind, mind.build_report(make_context(SOURCES, previous_results=results), mind.options)

    def test_report_scores(self):
        """Five missing categories and one contradiction still pass."""
        _, report = self.build(contradicting_results())
        assert report.breakdown.completeness == pytest.approx(40)
        assert report.breakdown.consistency == pytest.approx(95)
        assert report.breakdown.coverage == 100
        assert report.overall_score == pytest.approx(83.75)
        assert report.passed

    def test_critical_issue_fails_report(self):
        results = contradicting_results()
        results[MindId.VICTORIA] = make_result(MindId.VICTORIA, traits=[trait("open", False)], confidence=1.5)
        _, report = self.build(results)
        assert not report.passed

        _, lenient = self.build(results, fail_on_critical=False)
        assert lenient.passed

    def test_requires_tim_and_victoria(self):
        mind = QuinnMind()
        mind.initialize()
        with pytest.raises(MindPreconditionError) as excinfo:
            mind.analyze(make_context(SOURCES, previous_results={MindId.TIM: make_result()}))
        assert excinfo.value.unmet_dependencies == ["victoria"]

    def test_end_to_end_over_real_results(self, scenario_sources):
        tim = TimMind()
        tim.initialize()
        tim_result = tim.analyze(make_context(scenario_sources))
        victoria = VictoriaMind()
        victoria.initialize()
        victoria_result = victoria.analyze(
            make_context(scenario_sources, previous_results={MindId.TIM: tim_result})
        )

        quinn = QuinnMind()
        quinn.initialize()
        result = quinn.analyze(make_context(
            scenario_sources,
            previous_results={MindId.TIM: tim_result, MindId.VICTORIA: victoria_result},
        ))

        assert result.metadata["minds_reviewed"] == ["tim", "victoria"]
        score = result.metadata["quality_score"]
        assert 0 <= score <= 100
        assert result.metadata["passed"] == (score >= 70)
        assert result.traits[0].name == "overall_quality_score"
        assert {t.category for t in result.traits} == {"quality", "quality-metrics"}
        assert quinn.validate(result).valid

    def test_missing_quality_score_warning(self):
        validation = QuinnMind().validate(make_result(MindId.QUINN))
        assert "MISSING_QUALITY_SCORE" in {i.code for i in validation.issues}
