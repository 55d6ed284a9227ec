"""
Module: proctoring.monitor

Purpose:
    Turns window-focus transitions into ProctoringViolation records. Each
    loss -> gain cycle becomes one violation; an interval still open when
    the attempt is submitted is closed at the submission time.

Key Classes:
    - FocusEvent: One focus transition as observed
    - ProctoringMonitor: Focus state machine and violation accumulator

Dependencies:
    - threading (std)
    - core.models.violations

Used By:
    - session.attempt_session.AttemptSession
    - gui.focus_source.QtFocusSource (indirectly, through the session)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from exam_engine.core.models import ProctoringViolation, Severity, classify_severity, utc_now
from exam_engine.core.models.violations import HIGH_SEVERITY_LIMIT, LOW_SEVERITY_LIMIT

from .summary import ViolationSummary, summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FocusEvent:
    """A focus transition as reported by the host."""
    timestamp: datetime
    focused: bool

    def __str__(self) -> str:
        return f"{self.timestamp.isoformat()} - {'Focused' if self.focused else 'Unfocused'}"


class ProctoringMonitor:
    """
    Window-focus monitor for one attempt.

    The monitor is independent of the countdown: losing focus does not
    pause the timer, and expiry does not stop monitoring until the owning
    session calls stop(). Repeated loss (or gain) events are ignored, so
    only genuine loss -> gain cycles produce violations. Zero-length cycles
    are discarded.

    Listener failures are logged and disable further listener delivery;
    violations are still recorded on the monitor itself.

    Attributes:
        assessment_id: Assessment being monitored
        examinee_id: Examinee being monitored
        attempt_id: Owning attempt

    Example:
        >>> monitor = ProctoringMonitor("a1", "s1")
        >>> monitor.start()
        >>> monitor.focus_lost(at=t0)
        >>> monitor.focus_gained(at=t0 + timedelta(seconds=90))
        >>> monitor.total_violation_seconds
        90
    """

    def __init__(
        self,
        assessment_id: str,
        examinee_id: str,
        attempt_id: str = "",
        *,
        clock: Callable[[], datetime] = utc_now,
        on_violation: Optional[Callable[[ProctoringViolation], None]] = None,
        low_limit: int = LOW_SEVERITY_LIMIT,
        high_limit: int = HIGH_SEVERITY_LIMIT,
    ):
        self.assessment_id = assessment_id
        self.examinee_id = examinee_id
        self.attempt_id = attempt_id
        self.low_limit = low_limit
        self.high_limit = high_limit
        self._clock = clock
        self._on_violation = on_violation
        self._lock = threading.Lock()
        self._active_start: Optional[datetime] = None
        self._violations: List[ProctoringViolation] = []
        self._events: List[FocusEvent] = []
        self._total_seconds = 0
        self._running = False
        self._stopped = False

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def start(self, initially_focused: bool = True, at: Optional[datetime] = None) -> None:
        """
        Begin monitoring.

        Args:
            initially_focused: Focus state when monitoring begins; False
                opens a violation immediately
            at: Timestamp override (defaults to the clock)
        """
        with self._lock:
            if self._running or self._stopped:
                logger.debug("Proctoring monitor already started; ignoring start()")
                return
            self._running = True
            now = at or self._clock()
            self._events.append(FocusEvent(now, initially_focused))
            if not initially_focused:
                self._active_start = now
        logger.info(
            f"Proctoring started for assessment {self.assessment_id}, examinee {self.examinee_id}"
        )

    def stop(self, at: Optional[datetime] = None) -> Optional[ProctoringViolation]:
        """
        Stop monitoring, closing any open interval at `at`.

        Returns:
            The violation closed by stopping, if one was open
        """
        with self._lock:
            if not self._running:
                return None
            self._running = False
            self._stopped = True
            violation = self._close_active(at or self._clock())
        if violation is not None:
            logger.info(f"Open focus violation closed at submission: {violation}")
            self._notify(violation)
        logger.info(
            f"Proctoring stopped: {self.violation_count} violations, "
            f"{self.total_violation_seconds}s out of focus"
        )
        return violation

    # ─────────────────────────────────────────────────────────────────────────
    # Focus events
    # ─────────────────────────────────────────────────────────────────────────

    def focus_lost(self, at: Optional[datetime] = None) -> None:
        with self._lock:
            if not self._running:
                return
            now = at or self._clock()
            self._events.append(FocusEvent(now, False))
            if self._active_start is not None:
                return
            self._active_start = now
        logger.info("Assessment window lost focus")

    def focus_gained(self, at: Optional[datetime] = None) -> Optional[ProctoringViolation]:
        with self._lock:
            if not self._running:
                return None
            now = at or self._clock()
            self._events.append(FocusEvent(now, True))
            violation = self._close_active(now)
        if violation is not None:
            logger.info(f"Assessment window regained focus: {violation}")
            self._notify(violation)
        return violation

    def on_focus_changed(self, focused: bool, at: Optional[datetime] = None) -> None:
        """Single entry point for hosts that report a boolean focus state."""
        if focused:
            self.focus_gained(at)
        else:
            self.focus_lost(at)

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def violations(self) -> tuple[ProctoringViolation, ...]:
        with self._lock:
            return tuple(self._violations)

    @property
    def events(self) -> tuple[FocusEvent, ...]:
        with self._lock:
            return tuple(self._events)

    @property
    def violation_count(self) -> int:
        with self._lock:
            return len(self._violations)

    @property
    def total_violation_seconds(self) -> int:
        with self._lock:
            return self._total_seconds

    @property
    def is_focus_lost(self) -> bool:
        with self._lock:
            return self._active_start is not None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def severity_of(self, violation: ProctoringViolation) -> Severity:
        return classify_severity(violation.duration_seconds, self.low_limit, self.high_limit)

    def summary(self) -> ViolationSummary:
        return summarize(self.violations, self.low_limit, self.high_limit)

    # ─────────────────────────────────────────────────────────────────────────
    # Internals (lock held)
    # ─────────────────────────────────────────────────────────────────────────

    def _close_active(self, end: datetime) -> Optional[ProctoringViolation]:
        start = self._active_start
        if start is None:
            return None
        self._active_start = None
        if end <= start:
            logger.debug(f"Discarding zero-length focus loss at {start.isoformat()}")
            return None
        violation = ProctoringViolation.between(
            start,
            end,
            assessment_id=self.assessment_id,
            examinee_id=self.examinee_id,
            attempt_id=self.attempt_id,
        )
        self._violations.append(violation)
        self._total_seconds += violation.duration_seconds
        return violation

    def _notify(self, violation: ProctoringViolation) -> None:
        if self._on_violation is None:
            return
        try:
            self._on_violation(violation)
        except Exception as e:
            self._on_violation = None
            logger.warning(f"Violation listener failed; no further violations will be delivered: {e}")
