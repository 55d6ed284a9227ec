"""
Module: assessments

Purpose:
    Provides the Assessment dataclass - the immutable description of a timed
    exam: which questions it contains, in what order, and how long it runs.

Key Classes:
    - Assessment: Frozen assessment record

Dependencies:
    - dataclasses (std)
    - .questions.Question

Used By:
    - catalog.loader
    - session.attempt_session
    - session.registry
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .questions import Question


@dataclass(frozen=True, slots=True)
class Assessment:
    """
    Assessment definition (immutable once an attempt starts).

    Attributes:
        id: Stable assessment identifier
        title: Display title
        unit_code: Owning unit
        question_ids: Ordered question identifiers
        duration_minutes: Time limit for one attempt
        is_practice: Practice assessments also produce a PracticeResult
        declared_total_marks: Total stored with the assessment, if any

    Invariants:
        - duration_minutes > 0
        - question_ids contains no duplicates
    """

    id: str
    title: str
    unit_code: str
    question_ids: tuple[str, ...]
    duration_minutes: int
    is_practice: bool = False
    declared_total_marks: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Assessment id cannot be empty")
        if self.duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive: {self.duration_minutes}")
        if len(set(self.question_ids)) != len(self.question_ids):
            raise ValueError(f"Assessment {self.id} lists a question more than once")

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60

    def total_marks(self, questions: Sequence[Question]) -> int:
        """
        Total marks for this assessment.

        The stored total is frequently stale, so it is only used when no
        questions have been resolved yet.

        Args:
            questions: Questions resolved for this assessment

        Returns:
            Sum of question marks, or the declared total if questions is empty
        """
        if questions:
            return sum(q.marks for q in questions)
        return self.declared_total_marks or 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "unit_code": self.unit_code,
            "question_ids": list(self.question_ids),
            "duration_minutes": self.duration_minutes,
            "is_practice": self.is_practice,
            "declared_total_marks": self.declared_total_marks,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Assessment:
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            unit_code=data.get("unit_code", ""),
            question_ids=tuple(data.get("question_ids", ())),
            duration_minutes=data["duration_minutes"],
            is_practice=bool(data.get("is_practice", False)),
            declared_total_marks=data.get("declared_total_marks"),
        )
