"""
Record Validation Utilities

Validates persisted attempt, response and violation rows before they are
written and after they are read back.

Every stored row carries a `schema_version`. Rows written by a different
schema version are rejected rather than silently reinterpreted.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ..errors import RecordValidationError

# Bump when the stored row shape changes
RECORD_SCHEMA_VERSION = 1

_ATTEMPT_STATUSES = ("IN_PROGRESS", "COMPLETED")

_REQUIRED_FIELDS: dict[str, list[str]] = {
    "attempt": [
        "id", "examinee_id", "assessment_id", "start_time", "end_time",
        "score", "total_possible", "status",
    ],
    "response": ["id", "attempt_id", "question_id", "text", "marks_awarded"],
    "violation": [
        "id", "assessment_id", "examinee_id", "start_time", "end_time",
        "duration_seconds",
    ],
    "practice_result": [
        "id", "examinee_id", "assessment_id", "score", "total_possible",
        "percentage", "grade",
    ],
}


def _check_required(data: dict[str, Any], kind: str) -> None:
    missing = [f for f in _REQUIRED_FIELDS[kind] if f not in data]
    if missing:
        raise RecordValidationError(
            f"{kind} record missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing],
        )
    if not data["id"]:
        raise RecordValidationError(f"{kind} record has an empty id", path="id")


def _check_non_negative_int(data: dict[str, Any], key: str) -> None:
    value = data.get(key)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise RecordValidationError(
            f"Invalid {key}: {value!r} (must be non-negative integer)",
            path=key,
        )


def _check_timestamp(data: dict[str, Any], key: str, *, nullable: bool = False) -> None:
    value = data.get(key)
    if value is None and nullable:
        return
    try:
        datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise RecordValidationError(f"Invalid timestamp for {key}: {value!r}", path=key)


def _check_version(data: dict[str, Any]) -> None:
    version = data.get("schema_version", RECORD_SCHEMA_VERSION)
    if version != RECORD_SCHEMA_VERSION:
        raise RecordValidationError(
            f"Unsupported record schema version: {version} (expected {RECORD_SCHEMA_VERSION})",
            path="schema_version",
        )


def validate_attempt_record(data: dict[str, Any]) -> None:
    """
    Validate an attempt row.

    Raises:
        RecordValidationError: If the row is malformed
    """
    _check_required(data, "attempt")
    _check_version(data)
    _check_timestamp(data, "start_time")
    _check_timestamp(data, "end_time", nullable=True)
    _check_non_negative_int(data, "score")
    _check_non_negative_int(data, "total_possible")
    if data["status"] not in _ATTEMPT_STATUSES:
        raise RecordValidationError(f"Invalid status: {data['status']!r}", path="status")
    if data["status"] == "COMPLETED" and data["end_time"] is None:
        raise RecordValidationError("COMPLETED attempt has no end_time", path="end_time")


def validate_response_record(data: dict[str, Any]) -> None:
    """
    Validate a response row.

    Raises:
        RecordValidationError: If the row is malformed
    """
    _check_required(data, "response")
    _check_version(data)
    _check_non_negative_int(data, "marks_awarded")
    if not isinstance(data["text"], str):
        raise RecordValidationError("response text must be a string", path="text")


def validate_violation_record(data: dict[str, Any]) -> None:
    """
    Validate a violation row.

    Raises:
        RecordValidationError: If the row is malformed or ends before it starts
    """
    _check_required(data, "violation")
    _check_version(data)
    _check_timestamp(data, "start_time")
    _check_timestamp(data, "end_time")
    _check_non_negative_int(data, "duration_seconds")
    if datetime.fromisoformat(data["end_time"]) <= datetime.fromisoformat(data["start_time"]):
        raise RecordValidationError("violation ends before it starts", path="end_time")


def validate_practice_record(data: dict[str, Any]) -> None:
    """
    Validate a practice result row.

    Raises:
        RecordValidationError: If the row is malformed
    """
    _check_required(data, "practice_result")
    _check_version(data)
    _check_non_negative_int(data, "score")
    _check_non_negative_int(data, "total_possible")
    percentage = data["percentage"]
    if not isinstance(percentage, (int, float)) or not (0 <= percentage <= 100):
        raise RecordValidationError(f"Invalid percentage: {percentage!r}", path="percentage")
