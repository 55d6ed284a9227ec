"""Validation for persisted engine records."""

from .validator import (
    RECORD_SCHEMA_VERSION,
    validate_attempt_record,
    validate_response_record,
    validate_violation_record,
    validate_practice_record,
)

__all__ = [
    "RECORD_SCHEMA_VERSION",
    "validate_attempt_record",
    "validate_response_record",
    "validate_violation_record",
    "validate_practice_record",
]
