"""
Module: attempts

Purpose:
    Provides StudentAssessmentAttempt - the mutable record of one examinee's
    run through one assessment, plus the status and submit-reason enums.

Key Classes:
    - AttemptStatus: IN_PROGRESS / COMPLETED
    - SubmitReason: EXPLICIT / TIME_EXPIRED
    - StudentAssessmentAttempt: Attempt record with its responses

Dependencies:
    - dataclasses (std)
    - datetime (std)
    - .responses.StudentResponse

Used By:
    - session.attempt_session
    - persistence.json_store
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import AlreadySubmittedError
from .responses import StudentResponse


class AttemptStatus(str, Enum):
    """Lifecycle state of an attempt."""
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    def __str__(self) -> str:
        return self.value


class SubmitReason(str, Enum):
    """Why an attempt was submitted."""
    EXPLICIT = "EXPLICIT"
    TIME_EXPIRED = "TIME_EXPIRED"

    def __str__(self) -> str:
        return self.value


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StudentAssessmentAttempt:
    """
    One examinee's attempt at one assessment.

    Attributes:
        id: Attempt identity (upsert key)
        examinee_id: Who is taking the assessment
        assessment_id: Which assessment
        start_time: When the attempt was created
        total_possible: Sum of question marks, fixed at session start
        end_time: Set once at submission
        status: IN_PROGRESS until finalized
        score: Sum of awarded marks after grading
        responses: question id -> StudentResponse
        is_practice: Copied from the assessment
        is_offline: Attempt taken without a live store

    Invariants:
        - status moves IN_PROGRESS -> COMPLETED exactly once (finalize)
        - score == sum(r.marks_awarded for r in responses) after finalize
    """

    id: str
    examinee_id: str
    assessment_id: str
    start_time: datetime
    total_possible: int
    end_time: Optional[datetime] = None
    status: AttemptStatus = AttemptStatus.IN_PROGRESS
    score: int = 0
    responses: Dict[str, StudentResponse] = field(default_factory=dict)
    is_practice: bool = False
    is_offline: bool = False

    @classmethod
    def start(
        cls,
        examinee_id: str,
        assessment_id: str,
        total_possible: int,
        *,
        is_practice: bool = False,
        now: Optional[datetime] = None,
    ) -> StudentAssessmentAttempt:
        """Create a fresh IN_PROGRESS attempt with a generated identity."""
        return cls(
            id=str(uuid.uuid4()),
            examinee_id=examinee_id,
            assessment_id=assessment_id,
            start_time=now or utc_now(),
            total_possible=total_possible,
            is_practice=is_practice,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def is_completed(self) -> bool:
        return self.status is AttemptStatus.COMPLETED

    @property
    def answered_count(self) -> int:
        return len(self.responses)

    @property
    def percentage(self) -> float:
        """Score as a percentage of total_possible (0 when nothing is possible)."""
        if self.total_possible <= 0:
            return 0.0
        return self.score / self.total_possible * 100

    def response_for(self, question_id: str) -> Optional[StudentResponse]:
        return self.responses.get(question_id)

    def all_responses(self) -> List[StudentResponse]:
        return list(self.responses.values())

    def calculate_score(self) -> int:
        return sum(r.marks_awarded for r in self.responses.values())

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def finalize(self, end_time: datetime) -> None:
        """
        Mark the attempt COMPLETED and fix its score.

        Raises:
            AlreadySubmittedError: If the attempt is already COMPLETED
        """
        if self.is_completed:
            raise AlreadySubmittedError(self.id)
        self.score = self.calculate_score()
        self.end_time = end_time
        self.status = AttemptStatus.COMPLETED

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_record(self) -> dict[str, Any]:
        """Row shape of the persisted attempt (responses are stored separately)."""
        return {
            "id": self.id,
            "examinee_id": self.examinee_id,
            "assessment_id": self.assessment_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "score": self.score,
            "total_possible": self.total_possible,
            "status": self.status.value,
            "is_practice": self.is_practice,
            "is_offline": self.is_offline,
        }

    def to_dict(self) -> dict[str, Any]:
        data = self.to_record()
        data["responses"] = [r.to_dict() for r in self.responses.values()]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StudentAssessmentAttempt:
        """Build an attempt from a record, with or without embedded responses."""
        responses = {}
        for raw in data.get("responses", []):
            response = StudentResponse.from_dict(raw)
            responses[response.question_id] = response
        end_time = data.get("end_time")
        return cls(
            id=data["id"],
            examinee_id=data["examinee_id"],
            assessment_id=data["assessment_id"],
            start_time=datetime.fromisoformat(data["start_time"]),
            total_possible=int(data.get("total_possible", 0)),
            end_time=datetime.fromisoformat(end_time) if end_time else None,
            status=AttemptStatus(data.get("status", AttemptStatus.IN_PROGRESS.value)),
            score=int(data.get("score", 0)),
            responses=responses,
            is_practice=bool(data.get("is_practice", False)),
            is_offline=bool(data.get("is_offline", False)),
        )
