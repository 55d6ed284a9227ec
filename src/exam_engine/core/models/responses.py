"""
Module: responses

Purpose:
    Provides the StudentResponse dataclass - one examinee answer to one
    question within one attempt. Mutable: the raw text is overwritten when
    the examinee revisits a question, and grading fills in the outcome.

Key Classes:
    - StudentResponse: Mutable response record

Dependencies:
    - dataclasses (std)
    - uuid (std)

Used By:
    - session.response_store.ResponseStore
    - grading.grader
    - persistence.json_store
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(slots=True)
class StudentResponse:
    """
    Examinee response to a single question.

    Attributes:
        id: Response identity (upsert key), stable for (attempt, question)
        attempt_id: Owning attempt
        question_id: Answered question
        text: Raw response text as captured
        marks_awarded: 0 until graded
        is_correct: None until graded
    """

    id: str
    attempt_id: str
    question_id: str
    text: str = ""
    marks_awarded: int = 0
    is_correct: Optional[bool] = None

    @classmethod
    def new(cls, attempt_id: str, question_id: str, text: str = "") -> StudentResponse:
        """Create an ungraded response with a fresh identity."""
        return cls(
            id=str(uuid.uuid4()),
            attempt_id=attempt_id,
            question_id=question_id,
            text=text,
        )

    @property
    def is_graded(self) -> bool:
        return self.is_correct is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "attempt_id": self.attempt_id,
            "question_id": self.question_id,
            "text": self.text,
            "marks_awarded": self.marks_awarded,
            "is_correct": self.is_correct,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StudentResponse:
        return cls(
            id=data["id"],
            attempt_id=data["attempt_id"],
            question_id=data["question_id"],
            text=data.get("text") or "",
            marks_awarded=int(data.get("marks_awarded", 0)),
            is_correct=data.get("is_correct"),
        )
