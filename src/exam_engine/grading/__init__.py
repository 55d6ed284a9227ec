"""Answer normalisation, auto-grading and result banding."""

from .normalizer import normalize_answer
from .grader import AutoGrader, GradeOutcome, GradingSummary, OutcomeKind, is_correct_answer
from .results import PracticeResult, letter_grade

__all__ = [
    "normalize_answer",
    "AutoGrader",
    "GradeOutcome",
    "GradingSummary",
    "OutcomeKind",
    "is_correct_answer",
    "PracticeResult",
    "letter_grade",
]
