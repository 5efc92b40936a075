"""Shared validation rubric for MindResult objects.

Every Mind validates its own output by running the shared checks below and
adding its own Mind-specific issues. Each detected issue class deducts a
fixed penalty from 100; the score floors at 0.

A result is valid when the score clears the Mind's threshold and no issue
has error severity. Validation never mutates the result.
"""

from dataclasses import dataclass
from typing import Iterable

from clone_lab.minds.schemas import MindResult, Severity, ValidationIssue, ValidationResult

DEFAULT_VALIDITY_THRESHOLD = 50
LOW_CONFIDENCE_CUTOFF = 0.3
LOW_CONFIDENCE_SHARE = 0.5

PENALTY_NO_TRAITS = 30
PENALTY_LOW_CONFIDENCE_TRAITS = 15
PENALTY_NO_EVIDENCE = 20
PENALTY_CONFIDENCE_OUT_OF_RANGE = 20
PENALTY_MISSING_CATEGORY = 10


@dataclass(frozen=True)
class Deduction:
    """An issue plus the points it costs."""

    issue: ValidationIssue
    penalty: int


def deduction(severity: Severity, code: str, message: str, penalty: int, path: str | None = None) -> Deduction:
    return Deduction(
        issue=ValidationIssue(severity=severity, code=code, message=message, path=path),
        penalty=penalty,
    )


def common_deductions(result: MindResult, expected_categories: Iterable[str] = ()) -> list[Deduction]:
    """Run the checks every Mind shares."""
    found: list[Deduction] = []

    if not result.traits:
        found.append(deduction(
            Severity.ERROR, "NO_TRAITS", "No traits extracted", PENALTY_NO_TRAITS, "traits",
        ))
    else:
        low = [t for t in result.traits if t.confidence < LOW_CONFIDENCE_CUTOFF]
        if len(low) / len(result.traits) > LOW_CONFIDENCE_SHARE:
            found.append(deduction(
                Severity.WARNING,
                "LOW_CONFIDENCE_TRAITS",
                f"{len(low)} of {len(result.traits)} traits have confidence below {LOW_CONFIDENCE_CUTOFF}",
                PENALTY_LOW_CONFIDENCE_TRAITS,
                "traits",
            ))

    if not result.evidence:
        found.append(deduction(
            Severity.WARNING, "NO_EVIDENCE", "No evidence collected", PENALTY_NO_EVIDENCE, "evidence",
        ))

    if not 0.0 <= result.confidence <= 1.0:
        found.append(deduction(
            Severity.ERROR,
            "CONFIDENCE_OUT_OF_RANGE",
            f"Confidence {result.confidence} is outside [0, 1]",
            PENALTY_CONFIDENCE_OUT_OF_RANGE,
            "confidence",
        ))

    present = {t.category for t in result.traits}
    for category in expected_categories:
        if category not in present:
            found.append(deduction(
                Severity.WARNING,
                "MISSING_CATEGORY",
                f"Expected trait category '{category}' is missing",
                PENALTY_MISSING_CATEGORY,
                f"traits.{category}",
            ))

    return found


def score_deductions(deductions: Iterable[Deduction], threshold: int = DEFAULT_VALIDITY_THRESHOLD) -> ValidationResult:
    """Turn a list of deductions into a ValidationResult."""
    deductions = list(deductions)
    score = max(0, 100 - sum(d.penalty for d in deductions))
    issues = [d.issue for d in deductions]
    has_error = any(i.severity == Severity.ERROR for i in issues)
    return ValidationResult(valid=score >= threshold and not has_error, score=score, issues=issues)


def validate_result(
    result: MindResult,
    expected_categories: Iterable[str] = (),
    threshold: int = DEFAULT_VALIDITY_THRESHOLD,
) -> ValidationResult:
    """Shared rubric alone, for Minds without extra checks."""
    return score_deductions(common_deductions(result, expected_categories), threshold)
