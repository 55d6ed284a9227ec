"""
Unit Tests for AttemptRegistry
"""

import threading
from unittest.mock import MagicMock

import pytest

from exam_engine.catalog import QuestionCatalog
from exam_engine.catalog.loader import PLACEHOLDER_TEXT
from exam_engine.core.errors import PersistenceError
from exam_engine.core.models import Assessment, AttemptStatus
from exam_engine.session import AttemptRegistry, EngineConfig
from exam_engine.timing import ManualTicker


@pytest.fixture
def registry(store, sync_config, clock):
    return AttemptRegistry(store, sync_config, ticker_factory=ManualTicker, clock=clock)


class TestOpen:
    
    def test_open_when_called_twice_then_same_session(self, registry, assessment, questions):
        first = registry.open(assessment, questions, "s1")
        first.start()
        second = registry.open(assessment, questions, "s1")
        assert second is first
        assert registry.active_sessions() == [first]
    
    def test_open_when_different_examinees_then_separate_sessions(self, registry, assessment, questions):
        a = registry.open(assessment, questions, "s1")
        b = registry.open(assessment, questions, "s2")
        assert a is not b
        assert registry.get("s2", "a1") is b
    
    def test_open_when_previous_submitted_then_new_attempt(self, registry, assessment, questions):
        first = registry.open(assessment, questions, "s1")
        first.start()
        first.submit()
        
        second = registry.open(assessment, questions, "s1")
        
        assert second is not first
        assert second.attempt.id != first.attempt.id
        assert registry.get("s1", "a1") is second
    
    def test_open_when_submitted_then_released_and_listener_called(self, registry, assessment, questions):
        received = []
        session = registry.open(assessment, questions, "s1", on_submitted=received.append)
        session.start()
        session.submit()
        assert registry.get("s1", "a1") is None
        assert received == [session.attempt]
    
    def test_open_when_persisted_in_progress_then_resumed(
        self, store, sync_config, clock, assessment, questions
    ):
        earlier = AttemptRegistry(store, sync_config, ticker_factory=ManualTicker, clock=clock)
        original = earlier.open(assessment, questions, "s1")
        original.start()
        original.record_response("q1", "paris")
        original.checkpoint()
        clock.advance(15)
        
        later = AttemptRegistry(store, sync_config, ticker_factory=ManualTicker, clock=clock)
        resumed = later.open(assessment, questions, "s1")
        
        assert resumed.attempt.id == original.attempt.id
        assert resumed.current_answered_set() == frozenset({"q1"})
        assert resumed.remaining_seconds == 45
        assert resumed.status is AttemptStatus.IN_PROGRESS
    
    def test_open_when_lookup_fails_then_new_attempt(self, sync_config, clock, assessment, questions):
        gateway = MagicMock()
        gateway.find_in_progress.side_effect = PersistenceError("offline")
        registry = AttemptRegistry(gateway, sync_config, ticker_factory=ManualTicker, clock=clock)
        
        session = registry.open(assessment, questions, "s1")
        
        assert session.status is AttemptStatus.IN_PROGRESS
        assert session.attempt.answered_count == 0
    
    def test_open_when_completed_write_failed_then_stale_row_not_resumed(
        self, store, sync_config, clock, assessment, questions
    ):
        def save_attempt(attempt):
            if attempt.is_completed:
                raise PersistenceError("disk full")
            store.save_attempt(attempt)
        
        gateway = MagicMock(wraps=store)
        gateway.save_attempt.side_effect = save_attempt
        registry = AttemptRegistry(gateway, sync_config, ticker_factory=ManualTicker, clock=clock)
        first = registry.open(assessment, questions, "s1")
        first.start()
        first.record_response("q1", "paris")
        first.submit()
        assert store.load_attempt(first.attempt.id).status is AttemptStatus.IN_PROGRESS
        
        second = registry.open(assessment, questions, "s1")
        
        assert second.attempt.id != first.attempt.id
        assert second.status is AttemptStatus.IN_PROGRESS
        assert second.attempt.answered_count == 0
        assert first.status is AttemptStatus.COMPLETED
    
    def test_open_when_completed_write_still_queued_then_new_attempt(
        self, store, tmp_path, clock, assessment, questions
    ):
        release = threading.Event()
        
        def save_attempt(attempt):
            if attempt.is_completed:
                release.wait(5)
            store.save_attempt(attempt)
        
        gateway = MagicMock(wraps=store)
        gateway.save_attempt.side_effect = save_attempt
        config = EngineConfig(data_dir=tmp_path)
        registry = AttemptRegistry(gateway, config, ticker_factory=ManualTicker, clock=clock)
        first = registry.open(assessment, questions, "s1")
        first.start()
        first.wait_for_persistence(5)
        first.submit()
        
        try:
            second = registry.open(assessment, questions, "s1")
        finally:
            release.set()
        first.wait_for_persistence(5)
        
        assert second.attempt.id != first.attempt.id
        assert second.status is AttemptStatus.IN_PROGRESS
        assert store.load_attempt(first.attempt.id).status is AttemptStatus.COMPLETED


class TestOpenFromCatalog:
    
    def test_open_from_catalog_when_questions_resolve_then_session(
        self, registry, assessment, questions
    ):
        catalog = QuestionCatalog(questions, [assessment])
        session = registry.open_from_catalog("a1", "s1", catalog)
        assert [q.id for q in session.questions] == ["q1", "q2"]
        assert session.attempt.total_possible == 8
    
    def test_open_from_catalog_when_unknown_assessment_then_lookup_error(self, registry):
        with pytest.raises(LookupError, match="Assessment not found"):
            registry.open_from_catalog("nope", "s1", QuestionCatalog())
    
    def test_open_from_catalog_when_nothing_resolves_then_placeholder(self, registry):
        empty = Assessment(
            id="e1", title="Empty", unit_code="GEO101", question_ids=("gone",), duration_minutes=5
        )
        session = registry.open_from_catalog("e1", "s1", QuestionCatalog([], [empty]))
        
        assert len(session.questions) == 1
        assert session.questions[0].text == PLACEHOLDER_TEXT
        assert session.attempt.total_possible == 1
    
    def test_open_from_catalog_when_placeholder_disabled_then_lookup_error(self, store, tmp_path):
        config = EngineConfig(
            data_dir=tmp_path, synchronous_persistence=True, use_placeholder_question=False
        )
        registry = AttemptRegistry(store, config, ticker_factory=ManualTicker)
        empty = Assessment(
            id="e1", title="Empty", unit_code="u", question_ids=(), duration_minutes=5
        )
        with pytest.raises(LookupError, match="no usable questions"):
            registry.open_from_catalog("e1", "s1", QuestionCatalog([], [empty]))
