# /marksheet-backend/app/services/marksheet_helpers/computation.py

"""
The marksheet computation engine: a pure, synchronous transform from one
student's subject marks to per-subject pass/fail flags and the overall
result. No I/O happens here.

Rules:
- A component (theory or practical) fails only when a mark was recorded for
  it and that mark is below the component's threshold. Missing thresholds
  fall back to FIXED_THEORY_PASS_THRESHOLD / FIXED_PRACTICAL_PASS_THRESHOLD.
- Both components are always checked, so a subject can report a theory and
  a practical failure at the same time.
- Only Compulsory and Elective subjects count toward the aggregate and the
  overall result. Additional subjects are still flagged for display.
"""

from typing import Iterable, List, Optional

from ...models.marksheet_model import MarksheetComputation, OverallResult, SubjectRecord, SubjectResult
from ...models.student_model import SubjectCategory
from .number_words import number_to_words

FIXED_THEORY_PASS_THRESHOLD = 21
FIXED_PRACTICAL_PASS_THRESHOLD = 9

AGGREGATE_CATEGORIES = frozenset({SubjectCategory.COMPULSORY, SubjectCategory.ELECTIVE})


def _is_component_failed(obtained: Optional[float], threshold: Optional[float], fallback: float) -> bool:
    if obtained is None:
        return False
    effective_threshold = threshold if threshold is not None else fallback
    return obtained < effective_threshold


def evaluate_subject(subject: SubjectRecord) -> SubjectResult:
    obtained_total = (subject.theoryMarksObtained or 0) + (subject.practicalMarksObtained or 0)
    is_theory_failed = _is_component_failed(
        subject.theoryMarksObtained, subject.theoryPassMarks, FIXED_THEORY_PASS_THRESHOLD
    )
    is_practical_failed = _is_component_failed(
        subject.practicalMarksObtained, subject.practicalPassMarks, FIXED_PRACTICAL_PASS_THRESHOLD
    )
    return SubjectResult(
        **subject.model_dump(),
        obtainedTotal=obtained_total,
        isTheoryFailed=is_theory_failed,
        isPracticalFailed=is_practical_failed,
        isFailed=is_theory_failed or is_practical_failed,
    )


def counts_toward_aggregate(subject: SubjectRecord) -> bool:
    if subject.category in AGGREGATE_CATEGORIES:
        return True
    if subject.category == SubjectCategory.ADDITIONAL:
        return False
    raise ValueError(f"Unknown subject category: {subject.category!r}")


def compute_marksheet(subjects: Iterable[SubjectRecord], overall_passing_percentage: float) -> MarksheetComputation:
    """Computes per-subject flags and the aggregate result for one student."""
    results: List[SubjectResult] = [evaluate_subject(subject) for subject in subjects]
    included = [result for result in results if counts_toward_aggregate(result)]

    aggregate_marks = sum(result.obtainedTotal for result in included)
    total_possible_marks = sum(result.totalMarks for result in included)
    overall_percentage = (aggregate_marks / total_possible_marks) * 100 if total_possible_marks > 0 else 0.0

    any_included_failed = any(result.isFailed for result in included)
    overall_result = (
        OverallResult.FAIL
        if any_included_failed or overall_percentage < overall_passing_percentage
        else OverallResult.PASS
    )

    return MarksheetComputation(
        subjects=results,
        aggregateMarks=aggregate_marks,
        totalPossibleMarks=total_possible_marks,
        overallPercentage=overall_percentage,
        overallResult=overall_result,
        totalMarksInWords=number_to_words(int(round(aggregate_marks))),
    )
