"""
Core Models Package

Typed records for the attempt engine. Catalog data (Question, Assessment)
and closed violations are frozen dataclasses; the attempt and its responses
are mutable because a live session fills them in.

| Model | Mutable | Persisted as |
|-------|---------|--------------|
| `Question` | no | catalog JSON |
| `Assessment` | no | catalog JSON |
| `StudentResponse` | yes | responses.json (upsert by id) |
| `StudentAssessmentAttempt` | yes | attempts.json (upsert by id) |
| `ProctoringViolation` | no | violations.jsonl (insert-only) |
"""

from .questions import Question, QuestionType, Difficulty
from .assessments import Assessment
from .responses import StudentResponse
from .attempts import StudentAssessmentAttempt, AttemptStatus, SubmitReason, utc_now
from .violations import ProctoringViolation, Severity, classify_severity

__all__ = [
    "Question",
    "QuestionType",
    "Difficulty",
    "Assessment",
    "StudentResponse",
    "StudentAssessmentAttempt",
    "AttemptStatus",
    "SubmitReason",
    "utc_now",
    "ProctoringViolation",
    "Severity",
    "classify_severity",
]
