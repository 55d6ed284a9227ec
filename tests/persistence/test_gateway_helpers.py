"""
Unit Tests for persist_attempt / persist_violation and PersistenceQueue
"""

import threading
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from exam_engine.core.errors import PersistenceError
from exam_engine.core.models import ProctoringViolation, StudentAssessmentAttempt, StudentResponse
from exam_engine.persistence import PersistenceQueue, persist_attempt, persist_violation


@pytest.fixture
def attempt(t0):
    attempt = StudentAssessmentAttempt.start("s1", "a1", total_possible=8, now=t0)
    for qid in ("q1", "q2", "q3"):
        attempt.responses[qid] = StudentResponse.new(attempt.id, qid, "x")
    return attempt


class TestPersistAttempt:
    
    def test_persist_when_all_succeed_then_report_ok(self, attempt):
        gateway = MagicMock()
        
        report = persist_attempt(gateway, attempt)
        
        assert report.ok
        assert len(report.saved) == 4
        gateway.save_attempt.assert_called_once_with(attempt)
        assert gateway.save_response.call_count == 3
    
    def test_persist_when_one_response_fails_then_others_still_written(self, attempt):
        gateway = MagicMock()
        failing = attempt.response_for("q2")
        
        def save_response(response):
            if response is failing:
                raise PersistenceError("disk full")
        
        gateway.save_response.side_effect = save_response
        
        report = persist_attempt(gateway, attempt)
        
        assert gateway.save_response.call_count == 3
        assert [f.record_id for f in report.failed] == [failing.id]
        assert report.failed[0].kind == "response"
        assert "disk full" in report.failed[0].error
    
    def test_persist_when_attempt_fails_then_responses_attempted(self, attempt):
        gateway = MagicMock()
        gateway.save_attempt.side_effect = PersistenceError("offline")
        
        report = persist_attempt(gateway, attempt)
        
        assert not report.ok
        assert gateway.save_response.call_count == 3
    
    def test_persist_violation_when_fails_then_reported(self, t0):
        gateway = MagicMock()
        gateway.save_violation.side_effect = PersistenceError("offline")
        violation = ProctoringViolation.between(
            t0, t0 + timedelta(seconds=3), assessment_id="a1", examinee_id="s1"
        )
        
        report = persist_violation(gateway, violation)
        
        assert report.failed[0].record_id == violation.id


class TestPersistenceQueue:
    
    def test_submit_when_synchronous_then_runs_inline(self):
        queue = PersistenceQueue(synchronous=True)
        future = queue.submit(lambda x: x * 2, 21)
        assert future.done()
        assert future.result() == 42
        assert queue.is_synchronous
    
    def test_submit_when_synchronous_job_raises_then_future_holds_error(self):
        queue = PersistenceQueue(synchronous=True)
        
        def boom():
            raise PersistenceError("offline")
        
        future = queue.submit(boom)
        
        with pytest.raises(PersistenceError):
            future.result()
    
    def test_submit_when_single_worker_then_fifo(self):
        order = []
        gate = threading.Event()
        with PersistenceQueue(max_workers=1) as queue:
            queue.submit(gate.wait, 5)
            for i in range(5):
                queue.submit(order.append, i)
            gate.set()
            completed = queue.wait_all(timeout=5)
        
        assert order == [0, 1, 2, 3, 4]
        assert completed == 6
    
    def test_wait_all_when_job_fails_then_counted_as_not_completed(self):
        def boom():
            raise RuntimeError("x")
        
        queue = PersistenceQueue(max_workers=1)
        try:
            queue.submit(boom)
            queue.submit(lambda: None)
            assert queue.wait_all(timeout=5) == 1
        finally:
            queue.shutdown()
