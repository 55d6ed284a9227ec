"""
Module: questions

Purpose:
    Provides the Question dataclass - the immutable catalog entry an attempt
    is graded against. Holds the text, type, options and the set of accepted
    answers together with the marks a correct response earns.

Key Classes:
    - QuestionType: Closed set of question kinds
    - Difficulty: Difficulty labels carried through from the catalog
    - Question: Frozen question record with to_dict() / from_dict()

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.models.assessments.Assessment
    - grading.grader
    - catalog.loader
    - session.attempt_session
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class QuestionType(str, Enum):
    """Kind of question."""
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    SHORT_ANSWER = "SHORT_ANSWER"
    LIST_BASED = "LIST_BASED"
    TRUE_FALSE = "TRUE_FALSE"

    def __str__(self) -> str:
        return self.value

    @property
    def is_closed(self) -> bool:
        """True for types with an enumerable answer set (auto-gradable)."""
        return self in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE)


class Difficulty(str, Enum):
    """Difficulty label."""
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Question:
    """
    Catalog question (immutable during an attempt).

    Attributes:
        id: Stable question identifier
        text: Question stem shown to the examinee
        type: One of QuestionType
        marks: Positive integer awarded for a correct response
        options: Ordered option strings (choice questions only)
        correct_answers: Accepted answers; any match is correct
        difficulty: Difficulty label
        topic: Topic name
        unit_code: Owning unit, if known

    Invariants:
        - id is non-empty
        - marks > 0
        - options only present for MULTIPLE_CHOICE / TRUE_FALSE

    Example:
        >>> q = Question(
        ...     id="q1",
        ...     text="Capital of France?",
        ...     type=QuestionType.MULTIPLE_CHOICE,
        ...     marks=5,
        ...     options=("A. Paris", "B. Rome"),
        ...     correct_answers=frozenset({"Paris"}),
        ... )
        >>> q.is_auto_gradable
        True
    """

    id: str
    text: str
    type: QuestionType
    marks: int
    options: tuple[str, ...] = ()
    correct_answers: frozenset[str] = frozenset()
    difficulty: Difficulty = Difficulty.MEDIUM
    topic: str = ""
    unit_code: str = ""

    def __post_init__(self) -> None:
        """Validate question on construction."""
        if not self.id:
            raise ValueError("Question id cannot be empty")
        if not isinstance(self.type, QuestionType):
            raise ValueError(f"Invalid question type: {self.type!r}")
        if not isinstance(self.marks, int) or self.marks <= 0:
            raise ValueError(f"Question marks must be a positive integer: {self.marks!r}")
        if self.options and not self.type.is_closed:
            raise ValueError(f"{self.type} questions cannot declare options")

    @property
    def is_auto_gradable(self) -> bool:
        return self.type.is_closed

    @property
    def data_quality_issues(self) -> list[str]:
        """
        Problems that make the question unusable in a live attempt.

        Returns:
            Human readable issue strings, empty when the question is usable
        """
        issues = []
        if not self.text or not self.text.strip():
            issues.append("question text is blank")
        if self.type.is_closed and not self.options:
            issues.append(f"{self.type} question has no options")
        return issues

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "marks": self.marks,
            "options": list(self.options),
            "correct_answers": sorted(self.correct_answers),
            "difficulty": self.difficulty.value,
            "topic": self.topic,
            "unit_code": self.unit_code,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        """
        Deserialize from a dictionary.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has an invalid value
        """
        return cls(
            id=data["id"],
            text=data.get("text", ""),
            type=QuestionType(data["type"]),
            marks=data["marks"],
            options=tuple(data.get("options", ())),
            correct_answers=frozenset(data.get("correct_answers", ())),
            difficulty=Difficulty(data.get("difficulty", Difficulty.MEDIUM.value)),
            topic=data.get("topic", ""),
            unit_code=data.get("unit_code", ""),
        )
