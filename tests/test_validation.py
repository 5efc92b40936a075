"""Tests for the shared result validation rubric."""

from clone_lab.minds.schemas import MindId, PersonalityTrait, Severity
from clone_lab.minds.validation import (
    Deduction,
    common_deductions,
    deduction,
    score_deductions,
    validate_result,
)

from tests.conftest import make_result


def codes(validation):
    return [i.code for i in validation.issues]


class TestValidationRubric:
    def test_clean_result(self):
        validation = validate_result(make_result(), ["data_quality"])
        assert validation.valid
        assert validation.score == 100
        assert validation.issues == []

    def test_empty_result(self):
        """No traits is an error, no evidence a warning."""
        result = make_result(traits=[], evidence=[])
        validation = validate_result(result)
        assert codes(validation) == ["NO_TRAITS", "NO_EVIDENCE"]
        assert validation.score == 50
        assert not validation.valid

    def test_low_confidence_majority(self):
        traits = [
            PersonalityTrait(category="c", name=str(i), value=1, confidence=conf)
            for i, conf in enumerate([0.1, 0.2, 0.9])
        ]
        validation = validate_result(make_result(traits=traits))
        assert codes(validation) == ["LOW_CONFIDENCE_TRAITS"]
        assert validation.score == 85
        assert validation.valid

    def test_half_low_confidence_is_not_a_majority(self):
        traits = [
            PersonalityTrait(category="c", name=str(i), value=1, confidence=conf)
            for i, conf in enumerate([0.1, 0.9])
        ]
        assert validate_result(make_result(traits=traits)).issues == []

    def test_confidence_out_of_range(self):
        validation = validate_result(make_result(confidence=-0.1))
        assert codes(validation) == ["CONFIDENCE_OUT_OF_RANGE"]
        assert validation.score == 80
        assert not validation.valid

    def test_each_missing_category_costs_ten(self):
        validation = validate_result(make_result(), ["data_quality", "risk", "values"])
        assert codes(validation) == ["MISSING_CATEGORY", "MISSING_CATEGORY"]
        assert validation.score == 80

    def test_threshold_decides_validity_without_errors(self):
        warnings = [deduction(Severity.WARNING, "W", "warn", 30)]
        assert score_deductions(warnings, threshold=70).valid
        assert not score_deductions(warnings, threshold=71).valid

    def test_score_floors_at_zero(self):
        many = [Deduction(issue=deduction(Severity.INFO, "I", "x", 0).issue, penalty=40)] * 3
        assert score_deductions(many).score == 0

    def test_common_deductions_keep_result_untouched(self):
        result = make_result(mind_id=MindId.QUINN, traits=[])
        before = result.model_dump()
        common_deductions(result, ["quality"])
        assert result.model_dump() == before
