"""
Module: proctoring.summary

Purpose:
    Read-time projections over recorded violations: counts, totals,
    per-severity breakdown and the longest intervals.

Key Classes:
    - ViolationSummary: Aggregate view of an attempt's violations

Key Functions:
    - summarize: Build a ViolationSummary
    - format_duration: "2m 30s" style durations

Used By:
    - proctoring.monitor.ProctoringMonitor.summary
    - session.attempt_session.AttemptSession.violation_summary
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence

from exam_engine.core.models import ProctoringViolation, Severity, classify_severity
from exam_engine.core.models.violations import HIGH_SEVERITY_LIMIT, LOW_SEVERITY_LIMIT

LONGEST_SHOWN = 5


def format_duration(seconds: int) -> str:
    """
    Human-readable duration.

    Example:
        >>> format_duration(45), format_duration(150), format_duration(3900)
        ('45s', '2m 30s', '1h 5m 0s')
    """
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m {secs}s"


@dataclass(frozen=True)
class ViolationSummary:
    """Aggregate view of an attempt's violations."""
    count: int = 0
    total_seconds: int = 0
    by_severity: Dict[Severity, int] = field(default_factory=dict)
    longest: tuple[ProctoringViolation, ...] = ()

    def describe(self) -> str:
        """Multi-line text summary for examiners."""
        if not self.count:
            return "No focus violations detected"
        lines = [
            "Focus Violations Summary:",
            f"Total violations: {self.count}",
            f"Total time out of focus: {format_duration(self.total_seconds)}",
            "Longest violations:",
        ]
        for rank, violation in enumerate(self.longest, start=1):
            lines.append(
                f"{rank}. {violation.start_time.strftime('%H:%M:%S')} - "
                f"{format_duration(violation.duration_seconds)}"
            )
        return "\n".join(lines)


def summarize(
    violations: Sequence[ProctoringViolation],
    low_limit: int = LOW_SEVERITY_LIMIT,
    high_limit: int = HIGH_SEVERITY_LIMIT,
) -> ViolationSummary:
    """
    Summarise violations without modifying their chronological order.

    Args:
        violations: Violations in any order
        low_limit: LOW/MEDIUM boundary in seconds
        high_limit: MEDIUM/HIGH boundary in seconds
    """
    by_severity = {severity: 0 for severity in Severity}
    for violation in violations:
        by_severity[classify_severity(violation.duration_seconds, low_limit, high_limit)] += 1
    longest = sorted(violations, key=lambda v: v.duration_seconds, reverse=True)[:LONGEST_SHOWN]
    return ViolationSummary(
        count=len(violations),
        total_seconds=sum(v.duration_seconds for v in violations),
        by_severity=by_severity,
        longest=tuple(longest),
    )
