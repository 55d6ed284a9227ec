"""
Module: grading.results

Purpose:
    Letter grades and the practice-result record kept for practice
    assessments.

Key Classes:
    - PracticeResult: Completed practice attempt summary

Key Functions:
    - letter_grade(percentage): A-F banding

Dependencies:
    - dataclasses (std)

Used By:
    - persistence.json_store
    - session.attempt_session
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from exam_engine.core.models import StudentAssessmentAttempt

# (minimum percentage, grade), highest first
GRADE_BANDS: tuple[tuple[float, str], ...] = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
    (50, "E"),
)


def letter_grade(percentage: float) -> str:
    """
    Map a percentage to a letter grade.

    Example:
        >>> letter_grade(92.5), letter_grade(50), letter_grade(49.9)
        ('A', 'E', 'F')
    """
    for minimum, grade in GRADE_BANDS:
        if percentage >= minimum:
            return grade
    return "F"


@dataclass(frozen=True, slots=True)
class PracticeResult:
    """
    Summary row for a completed practice attempt (keyed by attempt id).
    """
    id: str
    examinee_id: str
    assessment_id: str
    title: str
    unit_code: str
    score: int
    total_possible: int
    percentage: float
    grade: str

    @classmethod
    def from_attempt(
        cls,
        attempt: StudentAssessmentAttempt,
        *,
        title: str = "",
        unit_code: str = "",
    ) -> PracticeResult:
        """
        Build the practice row for a completed attempt.

        Raises:
            ValueError: If the attempt has not been finalized
        """
        if not attempt.is_completed:
            raise ValueError(f"Attempt {attempt.id} is not completed")
        percentage = round(attempt.percentage, 2)
        return cls(
            id=attempt.id,
            examinee_id=attempt.examinee_id,
            assessment_id=attempt.assessment_id,
            title=title,
            unit_code=unit_code,
            score=attempt.score,
            total_possible=attempt.total_possible,
            percentage=percentage,
            grade=letter_grade(percentage),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "examinee_id": self.examinee_id,
            "assessment_id": self.assessment_id,
            "title": self.title,
            "unit_code": self.unit_code,
            "score": self.score,
            "total_possible": self.total_possible,
            "percentage": self.percentage,
            "grade": self.grade,
        }

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> PracticeResult:
        return cls(
            id=data["id"],
            examinee_id=data["examinee_id"],
            assessment_id=data["assessment_id"],
            title=data.get("title", ""),
            unit_code=data.get("unit_code", ""),
            score=int(data["score"]),
            total_possible=int(data["total_possible"]),
            percentage=float(data["percentage"]),
            grade=data["grade"],
        )
