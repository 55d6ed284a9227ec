"""
Module: session.attempt_session

Purpose:
    The attempt state machine. Owns one attempt's responses, countdown and
    proctoring monitor, and takes the attempt from IN_PROGRESS to COMPLETED
    exactly once: freeze, grade, finalize, persist.

Key Classes:
    - AttemptSession: Per-attempt session object

Dependencies:
    - threading (std)
    - exam_engine.grading, exam_engine.timing, exam_engine.proctoring,
      exam_engine.persistence

Used By:
    - session.registry.AttemptRegistry
    - Host presentation layers
"""

from __future__ import annotations

import copy
import logging
import threading
from concurrent.futures import Future
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from exam_engine.core.errors import AlreadySubmittedError
from exam_engine.core.models import (
    Assessment,
    AttemptStatus,
    ProctoringViolation,
    Question,
    StudentAssessmentAttempt,
    SubmitReason,
)
from exam_engine.core.models.attempts import utc_now
from exam_engine.grading import AutoGrader, GradingSummary, PracticeResult
from exam_engine.persistence import (
    FailedWrite,
    PersistenceGateway,
    PersistenceQueue,
    PersistenceReport,
    persist_attempt,
    persist_violation,
)
from exam_engine.proctoring import ProctoringMonitor, ViolationSummary
from exam_engine.timing import CountdownTimer, ThreadTicker, Ticker

from .config import EngineConfig
from .response_store import ResponseStore

logger = logging.getLogger(__name__)


class AttemptSession:
    """
    One examinee's live attempt at one assessment.

    User actions, countdown expiry and focus changes all reach the attempt
    through this object and are serialised by one re-entrant lock. Once
    submit() has begun the session is frozen: responses and focus events
    are ignored and a second submit raises AlreadySubmittedError.

    Persistence runs on a per-session single-worker queue, so records are
    written in the order they were produced and submit() never waits on
    storage. Failed writes are collected in pending_retries.

    Example:
        >>> session = AttemptSession(assessment, questions, "student-1", gateway=store)
        >>> session.start()
        >>> session.record_response("q1", "A. Paris")
        >>> attempt = session.submit()
        >>> attempt.score, attempt.total_possible
        (5, 8)
    """

    def __init__(
        self,
        assessment: Assessment,
        questions: Sequence[Question],
        examinee_id: str,
        *,
        gateway: PersistenceGateway,
        config: Optional[EngineConfig] = None,
        ticker: Optional[Ticker] = None,
        clock: Callable[[], datetime] = utc_now,
        attempt: Optional[StudentAssessmentAttempt] = None,
        duration_seconds: Optional[int] = None,
        on_tick: Optional[Callable[[int], None]] = None,
        on_expired: Optional[Callable[[], None]] = None,
        on_submitted: Optional[Callable[[StudentAssessmentAttempt], None]] = None,
    ):
        self.assessment = assessment
        self.questions: tuple[Question, ...] = tuple(questions)
        self.examinee_id = examinee_id
        self.config = config or EngineConfig()
        self._gateway = gateway
        self._clock = clock
        self._on_expired_listener = on_expired
        self._on_submitted = on_submitted
        self._question_ids = frozenset(q.id for q in self.questions)

        if attempt is None:
            attempt = StudentAssessmentAttempt.start(
                examinee_id,
                assessment.id,
                assessment.total_marks(self.questions),
                is_practice=assessment.is_practice,
                now=clock(),
            )
        self._attempt = attempt
        self._responses = ResponseStore(attempt.id, attempt.responses)

        self._lock = threading.RLock()
        self._started = False
        self._frozen = attempt.is_completed
        self._submit_reason: Optional[SubmitReason] = None
        self._grading: Optional[GradingSummary] = None
        self._practice_result: Optional[PracticeResult] = None
        self._last_report: Optional[PersistenceReport] = None
        self._pending_retries: List[FailedWrite] = []

        self._queue = PersistenceQueue(
            max_workers=1, synchronous=self.config.synchronous_persistence
        )
        self._timer = CountdownTimer(
            assessment.duration_seconds if duration_seconds is None else duration_seconds,
            on_tick=on_tick,
            on_expired=self._on_timer_expired,
            ticker=ticker or ThreadTicker(interval=self.config.tick_interval_seconds),
            warning_seconds=self.config.timer_warning_seconds,
        )
        self._monitor = ProctoringMonitor(
            assessment.id,
            examinee_id,
            attempt.id,
            clock=clock,
            on_violation=self._on_violation,
            low_limit=self.config.low_severity_limit_seconds,
            high_limit=self.config.high_severity_limit_seconds,
        )

    @classmethod
    def resume(
        cls,
        attempt: StudentAssessmentAttempt,
        assessment: Assessment,
        questions: Sequence[Question],
        *,
        gateway: PersistenceGateway,
        config: Optional[EngineConfig] = None,
        ticker: Optional[Ticker] = None,
        clock: Callable[[], datetime] = utc_now,
        on_tick: Optional[Callable[[int], None]] = None,
        on_expired: Optional[Callable[[], None]] = None,
        on_submitted: Optional[Callable[[StudentAssessmentAttempt], None]] = None,
    ) -> AttemptSession:
        """
        Rebuild a session around a persisted IN_PROGRESS attempt.

        total_possible keeps the value fixed when the attempt started. The
        countdown continues from whatever is left of the assessment duration
        measured from the attempt's start_time; if nothing is left the
        attempt is submitted as TIME_EXPIRED as soon as the session starts.

        Raises:
            AlreadySubmittedError: If the attempt is already COMPLETED
            ValueError: If the attempt belongs to a different assessment
        """
        if attempt.is_completed:
            raise AlreadySubmittedError(attempt.id)
        if attempt.assessment_id != assessment.id:
            raise ValueError(
                f"Attempt {attempt.id} belongs to assessment {attempt.assessment_id}, "
                f"not {assessment.id}"
            )
        elapsed = int((clock() - attempt.start_time).total_seconds())
        remaining = max(0, assessment.duration_seconds - max(0, elapsed))
        logger.info(
            f"Resuming attempt {attempt.id} with {attempt.answered_count} responses, "
            f"{remaining}s remaining"
        )
        return cls(
            assessment,
            questions,
            attempt.examinee_id,
            gateway=gateway,
            config=config,
            ticker=ticker,
            clock=clock,
            attempt=attempt,
            duration_seconds=remaining,
            on_tick=on_tick,
            on_expired=on_expired,
            on_submitted=on_submitted,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def start(self, initially_focused: bool = True) -> None:
        """
        Start the countdown and focus monitoring, and store the initial row.

        Args:
            initially_focused: Whether the assessment window has focus now
        """
        with self._lock:
            if self._started or self._frozen:
                logger.debug(f"Attempt {self._attempt.id} already started; ignoring start()")
                return
            self._started = True
            self._monitor.start(initially_focused=initially_focused, at=self._clock())
            self._queue.submit(self._persist, persist_attempt, copy.deepcopy(self._attempt))
        logger.info(
            f"Attempt {self._attempt.id} started: assessment {self.assessment.id}, "
            f"examinee {self.examinee_id}, {len(self.questions)} questions, "
            f"{self._attempt.total_possible} marks"
        )
        self._timer.start()

    def record_response(self, question_id: str, text: str) -> None:
        """
        Record (or overwrite) the answer to one question.

        Ignored once the session is frozen, for questions outside this
        assessment, and for blank text (the previous answer is kept).
        """
        with self._lock:
            if self._frozen:
                logger.debug(f"Attempt {self._attempt.id} is completed; ignoring response to {question_id}")
                return
            if question_id not in self._question_ids:
                logger.warning(f"Question {question_id} is not part of assessment {self.assessment.id}")
                return
            if text is None or not text.strip():
                logger.debug(f"Blank response to {question_id} ignored")
                return
            self._responses.upsert(question_id, text)

    def current_answered_set(self) -> frozenset[str]:
        with self._lock:
            return self._responses.answered_ids()

    def submit(self, reason: SubmitReason = SubmitReason.EXPLICIT) -> StudentAssessmentAttempt:
        """
        Freeze, grade, finalize and persist the attempt.

        Persistence is queued; the returned attempt is COMPLETED with its
        score whether or not the writes later succeed.

        Args:
            reason: EXPLICIT for a user submit, TIME_EXPIRED from the countdown

        Returns:
            The finalized attempt

        Raises:
            AlreadySubmittedError: If the session was already submitted
        """
        with self._lock:
            if self._frozen:
                raise AlreadySubmittedError(self._attempt.id)
            self._frozen = True
            self._submit_reason = reason
            submitted_at = self._clock()

        # Outside the lock: cancel() may wait for the ticker thread, which
        # may itself be waiting on the lock in _on_timer_expired.
        self._timer.cancel()

        with self._lock:
            self._monitor.stop(at=submitted_at)
            self._grading = AutoGrader().grade_attempt(self.questions, self._attempt)
            self._attempt.finalize(submitted_at)
            if self._attempt.is_practice:
                self._practice_result = PracticeResult.from_attempt(
                    self._attempt,
                    title=self.assessment.title,
                    unit_code=self.assessment.unit_code,
                )
            logger.info(
                f"Attempt {self._attempt.id} submitted ({reason}): "
                f"{self._attempt.score}/{self._attempt.total_possible}"
            )
            self._queue.submit(
                self._persist, persist_attempt, self._attempt, None, self._practice_result
            )
            self._queue.shutdown(wait=False)
            attempt = self._attempt

        if self._on_submitted is not None:
            try:
                self._on_submitted(attempt)
            except Exception as e:
                logger.warning(f"Submit listener failed: {e}")
        return attempt

    def checkpoint(self) -> Optional[Future]:
        """
        Persist the in-progress attempt and its responses without finalizing.

        Returns:
            Future resolving to a PersistenceReport, or None once frozen
        """
        with self._lock:
            if self._frozen:
                logger.debug(f"Attempt {self._attempt.id} is completed; checkpoint skipped")
                return None
            return self._queue.submit(self._persist, persist_attempt, copy.deepcopy(self._attempt))

    def wait_for_persistence(self, timeout: Optional[float] = None) -> int:
        """Block until queued writes finish; returns how many completed."""
        return self._queue.wait_all(timeout)

    # ─────────────────────────────────────────────────────────────────────────
    # Focus events
    # ─────────────────────────────────────────────────────────────────────────

    def focus_lost(self, at: Optional[datetime] = None) -> None:
        with self._lock:
            if self._frozen:
                return
            self._monitor.focus_lost(at)

    def focus_gained(self, at: Optional[datetime] = None) -> None:
        with self._lock:
            if self._frozen:
                return
            self._monitor.focus_gained(at)

    def on_focus_changed(self, focused: bool, at: Optional[datetime] = None) -> None:
        if focused:
            self.focus_gained(at)
        else:
            self.focus_lost(at)

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def attempt(self) -> StudentAssessmentAttempt:
        return self._attempt

    @property
    def status(self) -> AttemptStatus:
        with self._lock:
            return self._attempt.status

    @property
    def is_frozen(self) -> bool:
        with self._lock:
            return self._frozen

    @property
    def remaining_seconds(self) -> int:
        return self._timer.remaining_seconds

    @property
    def timer(self) -> CountdownTimer:
        return self._timer

    @property
    def monitor(self) -> ProctoringMonitor:
        return self._monitor

    @property
    def grading(self) -> Optional[GradingSummary]:
        return self._grading

    @property
    def practice_result(self) -> Optional[PracticeResult]:
        return self._practice_result

    @property
    def submit_reason(self) -> Optional[SubmitReason]:
        return self._submit_reason

    @property
    def last_report(self) -> Optional[PersistenceReport]:
        with self._lock:
            return self._last_report

    @property
    def pending_retries(self) -> List[FailedWrite]:
        with self._lock:
            return list(self._pending_retries)

    def violation_summary(self) -> ViolationSummary:
        return self._monitor.summary()

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _on_timer_expired(self) -> None:
        logger.info(f"Time expired for attempt {self._attempt.id}")
        try:
            self.submit(SubmitReason.TIME_EXPIRED)
        except AlreadySubmittedError:
            logger.debug(f"Attempt {self._attempt.id} was submitted before expiry")
            return
        if self._on_expired_listener is not None:
            try:
                self._on_expired_listener()
            except Exception as e:
                logger.warning(f"Expiry listener failed: {e}")

    def _on_violation(self, violation: ProctoringViolation) -> None:
        logger.info(
            f"Violation recorded for attempt {self._attempt.id}: "
            f"{violation.duration_seconds}s ({self._monitor.severity_of(violation)})"
        )
        self._queue.submit(self._persist, persist_violation, violation)

    def _persist(self, job: Callable[..., PersistenceReport], *records) -> PersistenceReport:
        """Run one persistence job on the queue and keep its report."""
        report = job(self._gateway, *records)
        with self._lock:
            self._last_report = report
            self._pending_retries.extend(report.failed)
        return report
