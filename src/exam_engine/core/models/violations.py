"""
Module: violations

Purpose:
    Provides ProctoringViolation - one closed interval during which the
    examinee's window did not have input focus - and the severity scale
    derived from its duration.

Key Classes:
    - Severity: LOW / MEDIUM / HIGH
    - ProctoringViolation: Frozen violation record

Key Functions:
    - classify_severity(seconds): Severity from a duration alone

Dependencies:
    - dataclasses (std)
    - datetime (std)

Used By:
    - proctoring.monitor
    - proctoring.summary
    - persistence.json_store
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

# Severity bands in whole seconds
LOW_SEVERITY_LIMIT = 60
HIGH_SEVERITY_LIMIT = 300


class Severity(str, Enum):
    """How serious a focus violation is."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    def __str__(self) -> str:
        return self.value


def classify_severity(
    duration_seconds: int,
    low_limit: int = LOW_SEVERITY_LIMIT,
    high_limit: int = HIGH_SEVERITY_LIMIT,
) -> Severity:
    """
    Classify a violation by duration.

    Args:
        duration_seconds: Length of the violation
        low_limit: Durations below this are LOW
        high_limit: Durations above this are HIGH

    Returns:
        LOW for < low_limit, MEDIUM for low_limit..high_limit, HIGH above

    Example:
        >>> classify_severity(59), classify_severity(300), classify_severity(301)
        (<Severity.LOW: 'LOW'>, <Severity.MEDIUM: 'MEDIUM'>, <Severity.HIGH: 'HIGH'>)
    """
    if duration_seconds < low_limit:
        return Severity.LOW
    if duration_seconds <= high_limit:
        return Severity.MEDIUM
    return Severity.HIGH


@dataclass(frozen=True, slots=True)
class ProctoringViolation:
    """
    Closed loss-of-focus interval (immutable, insert-only when stored).

    Severity is not stored: it is always recomputed from duration_seconds.
    The severity property uses the default bands; configured bands are
    applied by ProctoringMonitor.severity_of and summarize.

    Attributes:
        id: Violation identity
        assessment_id: Assessment being taken
        examinee_id: Who lost focus
        start_time: When focus was lost
        end_time: When focus came back (or the attempt was submitted)
        attempt_id: Owning attempt, if known

    Invariants:
        - end_time > start_time
    """

    id: str
    assessment_id: str
    examinee_id: str
    start_time: datetime
    end_time: datetime
    attempt_id: str = ""

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Violation must end after it starts: {self.start_time} -> {self.end_time}"
            )

    @classmethod
    def between(
        cls,
        start_time: datetime,
        end_time: datetime,
        *,
        assessment_id: str,
        examinee_id: str,
        attempt_id: str = "",
    ) -> ProctoringViolation:
        return cls(
            id=str(uuid.uuid4()),
            assessment_id=assessment_id,
            examinee_id=examinee_id,
            start_time=start_time,
            end_time=end_time,
            attempt_id=attempt_id,
        )

    @property
    def duration_seconds(self) -> int:
        """Whole seconds between start and end (fractions truncated)."""
        return int((self.end_time - self.start_time).total_seconds())

    @property
    def severity(self) -> Severity:
        """
        Severity under the default 60s / 300s bands only.

        Hosts with configured limits should use
        ProctoringMonitor.severity_of or classify_severity instead.
        """
        return classify_severity(self.duration_seconds)

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "assessment_id": self.assessment_id,
            "examinee_id": self.examinee_id,
            "attempt_id": self.attempt_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_seconds": self.duration_seconds,
        }

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> ProctoringViolation:
        return cls(
            id=data["id"],
            assessment_id=data["assessment_id"],
            examinee_id=data["examinee_id"],
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=datetime.fromisoformat(data["end_time"]),
            attempt_id=data.get("attempt_id", ""),
        )

    def __repr__(self) -> str:
        return f"ProctoringViolation({self.duration_seconds}s, {self.severity.value})"
