"""
Module: persistence.gateway

Purpose:
    The storage contract used by the attempt session, and the helper that
    writes a finished attempt record by record.

    Attempt and response writes are upserts keyed by identity, so a retry
    after a partial failure never produces duplicate rows. Violations are
    insert-only.

Key Classes:
    - PersistenceGateway: Storage protocol
    - FailedWrite: One record that could not be stored
    - PersistenceReport: Outcome of persisting an attempt

Key Functions:
    - persist_attempt: Upsert an attempt and each of its responses

Dependencies:
    - typing.Protocol (std)

Used By:
    - persistence.json_store.JsonFileGateway (implements)
    - session.attempt_session.AttemptSession
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from exam_engine.core.models import ProctoringViolation, StudentAssessmentAttempt, StudentResponse
from exam_engine.grading.results import PracticeResult

logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    """Durable store for attempts, responses, violations and practice results."""

    def save_attempt(self, attempt: StudentAssessmentAttempt) -> None:
        """Insert the attempt, or update end_time/score/status if it exists."""
        ...

    def save_response(self, response: StudentResponse) -> None:
        """Insert the response, or update text/marks_awarded if it exists."""
        ...

    def save_violation(self, violation: ProctoringViolation) -> None:
        """Insert a closed violation. Never updates."""
        ...

    def save_practice_result(self, result: PracticeResult) -> None:
        ...

    def load_attempt(self, attempt_id: str) -> Optional[StudentAssessmentAttempt]:
        ...

    def find_in_progress(
        self, examinee_id: str, assessment_id: str
    ) -> Optional[StudentAssessmentAttempt]:
        ...

    def attempts_for_student(self, examinee_id: str) -> List[StudentAssessmentAttempt]:
        ...

    def attempts_for_assessment(self, assessment_id: str) -> List[StudentAssessmentAttempt]:
        ...

    def responses_for_attempt(self, attempt_id: str) -> List[StudentResponse]:
        ...

    def violations_for(
        self, assessment_id: str, examinee_id: Optional[str] = None
    ) -> List[ProctoringViolation]:
        ...


@dataclass(frozen=True, slots=True)
class FailedWrite:
    """A record that could not be persisted, kept for the host to retry."""
    kind: str
    record_id: str
    error: str


@dataclass
class PersistenceReport:
    """
    Outcome of persisting one attempt.

    Attributes:
        saved: (kind, record_id) for every record written
        failed: Records that could not be written
    """
    saved: List[tuple[str, str]] = field(default_factory=list)
    failed: List[FailedWrite] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def merge(self, other: PersistenceReport) -> None:
        self.saved.extend(other.saved)
        self.failed.extend(other.failed)


def _attempt_write(report: PersistenceReport, kind: str, record_id: str, write) -> None:
    try:
        write()
    except Exception as e:
        logger.error(f"Failed to save {kind} {record_id}: {e}")
        report.failed.append(FailedWrite(kind, record_id, str(e)))
    else:
        report.saved.append((kind, record_id))


def persist_attempt(
    gateway: PersistenceGateway,
    attempt: StudentAssessmentAttempt,
    responses: Optional[Sequence[StudentResponse]] = None,
    practice_result: Optional[PracticeResult] = None,
) -> PersistenceReport:
    """
    Upsert an attempt and every response, each independently.

    A failure on one record is recorded in the report and does not stop
    the remaining writes.

    Args:
        gateway: Target store
        attempt: Attempt to save
        responses: Responses to save (defaults to the attempt's responses)
        practice_result: Practice summary to save, if any

    Returns:
        PersistenceReport listing saved and failed records
    """
    report = PersistenceReport()
    _attempt_write(report, "attempt", attempt.id, lambda: gateway.save_attempt(attempt))
    for response in responses if responses is not None else attempt.all_responses():
        _attempt_write(
            report, "response", response.id, lambda r=response: gateway.save_response(r)
        )
    if practice_result is not None:
        _attempt_write(
            report,
            "practice_result",
            practice_result.id,
            lambda: gateway.save_practice_result(practice_result),
        )
    if report.ok:
        logger.info(f"Persisted attempt {attempt.id} with {len(report.saved) - 1} dependent records")
    else:
        logger.error(
            f"Persisted attempt {attempt.id} with {len(report.failed)} failures; queued for retry"
        )
    return report


def persist_violation(gateway: PersistenceGateway, violation: ProctoringViolation) -> PersistenceReport:
    """Insert one violation, reporting rather than raising on failure."""
    report = PersistenceReport()
    _attempt_write(report, "violation", violation.id, lambda: gateway.save_violation(violation))
    return report
