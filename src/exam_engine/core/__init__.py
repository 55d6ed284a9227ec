"""
Exam Engine Core Package

Shared data models, error types and record validation used by every other
subpackage.
"""

from .errors import (
    ExamEngineError,
    AlreadySubmittedError,
    PersistenceError,
    RecordValidationError,
)
from .models import (
    Question,
    QuestionType,
    Difficulty,
    Assessment,
    StudentResponse,
    StudentAssessmentAttempt,
    AttemptStatus,
    SubmitReason,
    ProctoringViolation,
    Severity,
)

__all__ = [
    "ExamEngineError",
    "AlreadySubmittedError",
    "PersistenceError",
    "RecordValidationError",
    "Question",
    "QuestionType",
    "Difficulty",
    "Assessment",
    "StudentResponse",
    "StudentAssessmentAttempt",
    "AttemptStatus",
    "SubmitReason",
    "ProctoringViolation",
    "Severity",
]
