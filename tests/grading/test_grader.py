"""
Unit Tests for AutoGrader
"""

import pytest

from exam_engine.core.models import (
    Question,
    QuestionType,
    StudentAssessmentAttempt,
    StudentResponse,
)
from exam_engine.grading import AutoGrader, OutcomeKind, is_correct_answer


@pytest.fixture
def grader():
    return AutoGrader()


@pytest.fixture
def attempt(t0):
    return StudentAssessmentAttempt.start("s1", "a1", total_possible=8, now=t0)


def _answer(attempt, question_id, text):
    response = StudentResponse.new(attempt.id, question_id, text)
    attempt.responses[question_id] = response
    return response


class TestIsCorrectAnswer:
    
    def test_when_prefixed_answer_matches_then_correct(self):
        assert is_correct_answer("A. Paris", {"paris"})
    
    def test_when_any_accepted_matches_then_correct(self):
        assert is_correct_answer("colour", {"color", "Colour"})
    
    def test_when_no_match_then_incorrect(self):
        assert not is_correct_answer("Lyon", {"Paris"})
    
    def test_when_accepted_empty_then_incorrect(self):
        assert not is_correct_answer("anything", set())


class TestAutoGrader:
    """Tests for per-question grading."""
    
    def test_grade_when_correct_then_full_marks_written_to_response(
        self, grader, attempt, capital_question
    ):
        response = _answer(attempt, "q1", "A. Paris")
        
        outcome = grader.grade(capital_question, response)
        
        assert outcome.kind is OutcomeKind.CORRECT
        assert outcome.marks_awarded == 5
        assert response.marks_awarded == 5
        assert response.is_correct is True
    
    def test_grade_when_incorrect_then_zero(self, grader, attempt, capital_question):
        response = _answer(attempt, "q1", "Lyon")
        
        outcome = grader.grade(capital_question, response)
        
        assert outcome.kind is OutcomeKind.INCORRECT
        assert response.marks_awarded == 0
        assert response.is_correct is False
    
    def test_grade_when_unanswered_then_zero_without_error(self, grader, capital_question):
        outcome = grader.grade(capital_question, None)
        assert outcome.kind is OutcomeKind.UNANSWERED
        assert outcome.marks_awarded == 0
        assert outcome.marks_possible == 5
    
    def test_grade_when_no_correct_answers_then_incorrect(self, grader, attempt):
        question = Question(
            id="q9", text="Broken", type=QuestionType.MULTIPLE_CHOICE, marks=2, options=("A", "B")
        )
        response = _answer(attempt, "q9", "A")
        
        outcome = grader.grade(question, response)
        
        assert outcome.kind is OutcomeKind.INCORRECT
        assert response.marks_awarded == 0
    
    def test_grade_when_short_answer_then_not_auto_gradable(self, grader, attempt):
        question = Question(
            id="q3",
            text="Explain erosion",
            type=QuestionType.SHORT_ANSWER,
            marks=4,
            correct_answers=frozenset({"water"}),
        )
        response = _answer(attempt, "q3", "water")
        
        outcome = grader.grade(question, response)
        
        assert outcome.kind is OutcomeKind.NOT_AUTO_GRADABLE
        assert response.marks_awarded == 0
    
    def test_grade_when_regraded_then_previous_marks_replaced(
        self, grader, attempt, capital_question
    ):
        response = _answer(attempt, "q1", "Paris")
        grader.grade(capital_question, response)
        response.text = "Rome"
        
        grader.grade(capital_question, response)
        
        assert response.marks_awarded == 0


class TestGradeAttempt:
    
    def test_grade_attempt_when_one_of_two_answered_then_summary_totals(
        self, grader, attempt, questions
    ):
        _answer(attempt, "q1", "paris")
        
        summary = grader.grade_attempt(questions, attempt)
        
        assert summary.score == 5
        assert summary.total_possible == 8
        assert summary.correct_count == 1
        assert summary.outcome_for("q2").kind is OutcomeKind.UNANSWERED
        assert attempt.response_for("q2") is None
    
    def test_grade_attempt_when_true_false_then_graded(self, grader, attempt):
        question = Question(
            id="tf",
            text="The earth is round",
            type=QuestionType.TRUE_FALSE,
            marks=1,
            options=("True", "False"),
            correct_answers=frozenset({"True"}),
        )
        _answer(attempt, "tf", "true")
        
        summary = grader.grade_attempt([question], attempt)
        
        assert summary.score == 1
