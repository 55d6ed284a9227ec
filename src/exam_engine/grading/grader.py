"""
Module: grading.grader

Purpose:
    Deterministic auto-grading of closed-answer questions. Multiple-choice
    and true/false responses are compared against the accepted answers
    after normalisation; every other type scores 0 and is left for a
    human marker.

Key Classes:
    - GradeOutcome: Result of grading one question
    - GradingSummary: Results for a whole attempt
    - AutoGrader: Grades questions against an attempt's responses

Dependencies:
    - dataclasses (std)
    - .normalizer

Used By:
    - session.attempt_session: grading at submission
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

from exam_engine.core.models import Question, StudentAssessmentAttempt, StudentResponse

from .normalizer import normalize_answer

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNANSWERED = "unanswered"
    NOT_AUTO_GRADABLE = "not_auto_gradable"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class GradeOutcome:
    """Grading result for one question."""
    question_id: str
    kind: OutcomeKind
    marks_awarded: int
    marks_possible: int

    @property
    def is_correct(self) -> bool:
        return self.kind is OutcomeKind.CORRECT


@dataclass
class GradingSummary:
    """
    Grading results for every question in an attempt.

    Attributes:
        outcomes: One GradeOutcome per question, in question order
    """
    outcomes: list[GradeOutcome] = field(default_factory=list)

    @property
    def score(self) -> int:
        return sum(o.marks_awarded for o in self.outcomes)

    @property
    def total_possible(self) -> int:
        return sum(o.marks_possible for o in self.outcomes)

    @property
    def correct_count(self) -> int:
        return sum(1 for o in self.outcomes if o.is_correct)

    def outcome_for(self, question_id: str) -> Optional[GradeOutcome]:
        return next((o for o in self.outcomes if o.question_id == question_id), None)


def is_correct_answer(submitted: Optional[str], accepted: Iterable[str]) -> bool:
    """
    True if the submitted answer matches any accepted answer.

    An empty accepted set never matches.
    """
    candidate = normalize_answer(submitted)
    return any(candidate == normalize_answer(answer) for answer in accepted)


class AutoGrader:
    """
    Grades responses for closed-answer questions.

    Grading never raises for data problems: a question with no accepted
    answers, or a question nobody answered, simply earns 0 marks.

    Usage:
        grader = AutoGrader()
        summary = grader.grade_attempt(questions, attempt)
        summary.score
    """

    def grade(self, question: Question, response: Optional[StudentResponse]) -> GradeOutcome:
        """
        Grade one question and write the outcome onto its response.

        Args:
            question: Question being graded
            response: Recorded response, or None if unanswered

        Returns:
            GradeOutcome for the question
        """
        if response is None:
            return GradeOutcome(question.id, OutcomeKind.UNANSWERED, 0, question.marks)

        if not question.is_auto_gradable:
            kind = OutcomeKind.NOT_AUTO_GRADABLE
        elif not question.correct_answers:
            logger.warning(f"Question {question.id} has no correct answers; scoring 0")
            kind = OutcomeKind.INCORRECT
        elif is_correct_answer(response.text, question.correct_answers):
            kind = OutcomeKind.CORRECT
        else:
            kind = OutcomeKind.INCORRECT

        awarded = question.marks if kind is OutcomeKind.CORRECT else 0
        response.marks_awarded = awarded
        response.is_correct = kind is OutcomeKind.CORRECT
        return GradeOutcome(question.id, kind, awarded, question.marks)

    def grade_attempt(
        self,
        questions: Sequence[Question],
        attempt: StudentAssessmentAttempt,
    ) -> GradingSummary:
        """
        Grade every question of an attempt.

        Args:
            questions: Questions in presentation order
            attempt: Attempt whose responses are graded in place

        Returns:
            GradingSummary covering all questions
        """
        summary = GradingSummary()
        for question in questions:
            outcome = self.grade(question, attempt.response_for(question.id))
            logger.debug(f"Question {question.id}: {outcome.kind} ({outcome.marks_awarded} marks)")
            summary.outcomes.append(outcome)

        logger.info(
            f"Auto-grading complete for attempt {attempt.id}: "
            f"{summary.score}/{summary.total_possible} ({summary.correct_count} correct)"
        )
        return summary
