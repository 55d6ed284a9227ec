"""
Unit Tests for StudentAssessmentAttempt and StudentResponse
"""

from datetime import timedelta

import pytest

from exam_engine.core.errors import AlreadySubmittedError
from exam_engine.core.models import (
    AttemptStatus,
    StudentAssessmentAttempt,
    StudentResponse,
)


@pytest.fixture
def attempt(t0):
    return StudentAssessmentAttempt.start("s1", "a1", total_possible=8, now=t0)


class TestStudentResponse:
    """Tests for StudentResponse."""
    
    def test_new_when_created_then_ungraded_with_identity(self):
        r = StudentResponse.new("att", "q1", "paris")
        assert r.id
        assert r.marks_awarded == 0
        assert r.is_graded is False
    
    def test_new_when_called_twice_then_distinct_ids(self):
        assert StudentResponse.new("att", "q1").id != StudentResponse.new("att", "q1").id
    
    def test_from_dict_when_text_missing_then_empty_string(self):
        r = StudentResponse.from_dict({"id": "r", "attempt_id": "a", "question_id": "q"})
        assert r.text == ""
        assert r.is_correct is None


class TestStudentAssessmentAttempt:
    """Tests for attempt lifecycle."""
    
    def test_start_when_created_then_in_progress(self, attempt, t0):
        assert attempt.status is AttemptStatus.IN_PROGRESS
        assert attempt.start_time == t0
        assert attempt.end_time is None
        assert attempt.score == 0
    
    def test_finalize_when_responses_graded_then_score_is_sum(self, attempt, t0):
        r1 = StudentResponse.new(attempt.id, "q1", "paris")
        r1.marks_awarded = 5
        r2 = StudentResponse.new(attempt.id, "q2", "red")
        attempt.responses = {"q1": r1, "q2": r2}
        
        attempt.finalize(t0 + timedelta(seconds=30))
        
        assert attempt.score == 5
        assert attempt.status is AttemptStatus.COMPLETED
        assert attempt.end_time == t0 + timedelta(seconds=30)
    
    def test_finalize_when_already_completed_then_raises_and_keeps_state(self, attempt, t0):
        end = t0 + timedelta(seconds=10)
        attempt.finalize(end)
        
        with pytest.raises(AlreadySubmittedError):
            attempt.finalize(t0 + timedelta(seconds=99))
        
        assert attempt.end_time == end
    
    def test_percentage_when_total_zero_then_zero(self, t0):
        attempt = StudentAssessmentAttempt.start("s1", "a1", total_possible=0, now=t0)
        assert attempt.percentage == 0.0
    
    def test_percentage_when_scored_then_ratio(self, attempt):
        attempt.score = 6
        assert attempt.percentage == pytest.approx(75.0)
    
    def test_to_record_when_called_then_excludes_responses(self, attempt):
        attempt.responses["q1"] = StudentResponse.new(attempt.id, "q1", "x")
        record = attempt.to_record()
        assert "responses" not in record
        assert record["status"] == "IN_PROGRESS"
        assert record["end_time"] is None
    
    def test_from_dict_when_round_tripped_then_responses_restored(self, attempt, t0):
        attempt.responses["q1"] = StudentResponse.new(attempt.id, "q1", "paris")
        attempt.finalize(t0 + timedelta(minutes=1))
        
        restored = StudentAssessmentAttempt.from_dict(attempt.to_dict())
        
        assert restored.id == attempt.id
        assert restored.status is AttemptStatus.COMPLETED
        assert restored.end_time == attempt.end_time
        assert restored.response_for("q1").text == "paris"
