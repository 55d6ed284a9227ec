"""
Module: session.registry

Purpose:
    Guarantees one live AttemptSession per (examinee, assessment). Opening
    an attempt that is already in progress, live in this process or
    persisted by an earlier one, resumes it instead of starting another.

Key Classes:
    - AttemptRegistry

Dependencies:
    - threading (std)
    - exam_engine.catalog

Used By:
    - Host presentation layers
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from exam_engine.catalog import QuestionCatalog, placeholder_question, resolve_questions
from exam_engine.core.errors import PersistenceError
from exam_engine.core.models import Assessment, Question, StudentAssessmentAttempt
from exam_engine.core.models.attempts import utc_now
from exam_engine.persistence import PersistenceGateway
from exam_engine.timing import Ticker

from .attempt_session import AttemptSession
from .config import EngineConfig

logger = logging.getLogger(__name__)

SessionKey = Tuple[str, str]


class AttemptRegistry:
    """
    Idempotent session factory keyed by (examinee_id, assessment_id).

    Sessions leave the registry once they are submitted. A submitted
    attempt is never resumed, even while its COMPLETED row is still
    queued or failed to write.

    Usage:
        registry = AttemptRegistry(JsonFileGateway(config.data_dir), config)
        session = registry.open(assessment, questions, "student-1")
        session.start()
        assert registry.open(assessment, questions, "student-1") is session
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        config: Optional[EngineConfig] = None,
        ticker_factory: Optional[Callable[[], Ticker]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._gateway = gateway
        self._config = config or EngineConfig()
        self._ticker_factory = ticker_factory
        self._clock = clock
        self._sessions: Dict[SessionKey, AttemptSession] = {}
        self._submitted_ids: Set[str] = set()
        self._lock = threading.Lock()

    def open(
        self,
        assessment: Assessment,
        questions: Sequence[Question],
        examinee_id: str,
        *,
        on_tick: Optional[Callable[[int], None]] = None,
        on_expired: Optional[Callable[[], None]] = None,
        on_submitted: Optional[Callable[[StudentAssessmentAttempt], None]] = None,
    ) -> AttemptSession:
        """
        Return the in-progress session for this examinee and assessment,
        resuming or creating one as needed. The session is not started.
        """
        key = (examinee_id, assessment.id)

        def submitted(attempt: StudentAssessmentAttempt) -> None:
            self._forget(key, attempt.id)
            if on_submitted is not None:
                on_submitted(attempt)

        with self._lock:
            live = self._sessions.get(key)
            if live is not None and not live.is_frozen:
                logger.debug(f"Reusing live session {live.attempt.id} for {key}")
                return live
            if live is not None:
                self._submitted_ids.add(live.attempt.id)

            callbacks = dict(on_tick=on_tick, on_expired=on_expired, on_submitted=submitted)
            stored = self._find_in_progress(examinee_id, assessment.id)
            if stored is not None and stored.id in self._submitted_ids:
                logger.warning(f"Ignoring stale in-progress row for submitted attempt {stored.id}")
                stored = None
            if stored is not None:
                session = AttemptSession.resume(
                    stored,
                    assessment,
                    questions,
                    gateway=self._gateway,
                    config=self._config,
                    ticker=self._new_ticker(),
                    clock=self._clock,
                    **callbacks,
                )
            else:
                session = AttemptSession(
                    assessment,
                    questions,
                    examinee_id,
                    gateway=self._gateway,
                    config=self._config,
                    ticker=self._new_ticker(),
                    clock=self._clock,
                    **callbacks,
                )
                logger.info(f"Created attempt {session.attempt.id} for {key}")
            self._sessions[key] = session
            return session

    def open_from_catalog(
        self,
        assessment_id: str,
        examinee_id: str,
        catalog: QuestionCatalog,
        **callbacks,
    ) -> AttemptSession:
        """
        Resolve an assessment from the catalog and open its session.

        When no question resolves, a placeholder question stands in (unless
        disabled in the config) so the examinee still gets a session.

        Raises:
            LookupError: If the assessment is unknown, or nothing resolves
                and placeholders are disabled
        """
        assessment = catalog.assessment(assessment_id)
        if assessment is None:
            raise LookupError(f"Assessment not found: {assessment_id}")
        questions = resolve_questions(assessment, catalog)
        if not questions:
            if not self._config.use_placeholder_question:
                raise LookupError(f"Assessment {assessment_id} has no usable questions")
            logger.warning(f"Using placeholder question for assessment {assessment_id}")
            questions = [placeholder_question(assessment.unit_code)]
        return self.open(assessment, questions, examinee_id, **callbacks)

    def get(self, examinee_id: str, assessment_id: str) -> Optional[AttemptSession]:
        with self._lock:
            return self._sessions.get((examinee_id, assessment_id))

    def active_sessions(self) -> List[AttemptSession]:
        with self._lock:
            return [s for s in self._sessions.values() if not s.is_frozen]

    def _new_ticker(self) -> Optional[Ticker]:
        return self._ticker_factory() if self._ticker_factory is not None else None

    def _find_in_progress(
        self, examinee_id: str, assessment_id: str
    ) -> Optional[StudentAssessmentAttempt]:
        try:
            return self._gateway.find_in_progress(examinee_id, assessment_id)
        except PersistenceError as e:
            logger.error(f"Could not look up in-progress attempt for {examinee_id}/{assessment_id}: {e}")
            return None

    def _forget(self, key: SessionKey, attempt_id: str) -> None:
        with self._lock:
            self._submitted_ids.add(attempt_id)
            session = self._sessions.get(key)
            if session is not None and session.attempt.id == attempt_id:
                del self._sessions[key]
                logger.debug(f"Session for {key} completed and released")
