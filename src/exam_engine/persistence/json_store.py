"""
Module: persistence.json_store

Purpose:
    File-backed PersistenceGateway. Each table is a JSON document keyed by
    record id and rewritten under an exclusive portalocker lock; the
    insert-only violation table is a JSONL file.

    Layout under data_dir:
        attempts.json           {attempt_id: row}
        responses.json          {response_id: row}
        practice_results.json   {attempt_id: row}
        violations.jsonl        one row per line

Key Classes:
    - JsonFileGateway: The store

Dependencies:
    - persistence.file_locking (portalocker)
    - core.schemas.validator

Used By:
    - session.registry.AttemptRegistry (default gateway)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from exam_engine.core.errors import PersistenceError, RecordValidationError
from exam_engine.core.models import (
    AttemptStatus,
    ProctoringViolation,
    StudentAssessmentAttempt,
    StudentResponse,
)
from exam_engine.core.schemas import (
    RECORD_SCHEMA_VERSION,
    validate_attempt_record,
    validate_practice_record,
    validate_response_record,
    validate_violation_record,
)
from exam_engine.grading.results import PracticeResult

from .file_locking import (
    locked_append_jsonl_unique,
    locked_read_json,
    locked_read_jsonl,
    locked_read_modify_write_json,
)

logger = logging.getLogger(__name__)

ATTEMPTS_FILE = "attempts.json"
RESPONSES_FILE = "responses.json"
PRACTICE_FILE = "practice_results.json"
VIOLATIONS_FILE = "violations.jsonl"

# Fields an update may change; identity and start data are fixed at insert
ATTEMPT_MUTABLE_FIELDS = ("end_time", "score", "status")
RESPONSE_MUTABLE_FIELDS = ("text", "marks_awarded")


class JsonFileGateway:
    """
    JSON file store implementing PersistenceGateway.

    All I/O and decoding errors surface as PersistenceError so callers
    have one failure type to handle.

    Usage:
        gateway = JsonFileGateway(Path("workspace/exam_data"))
        gateway.save_attempt(attempt)
        gateway.load_attempt(attempt.id)
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    # ─────────────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────────────

    def save_attempt(self, attempt: StudentAssessmentAttempt) -> None:
        row = _versioned(attempt.to_record())
        self._upsert(ATTEMPTS_FILE, row, ATTEMPT_MUTABLE_FIELDS, validate_attempt_record)

    def save_response(self, response: StudentResponse) -> None:
        row = _versioned({
            "id": response.id,
            "attempt_id": response.attempt_id,
            "question_id": response.question_id,
            "text": response.text,
            "marks_awarded": response.marks_awarded,
        })
        self._upsert(RESPONSES_FILE, row, RESPONSE_MUTABLE_FIELDS, validate_response_record)

    def save_practice_result(self, result: PracticeResult) -> None:
        row = _versioned(result.to_record())
        self._upsert(PRACTICE_FILE, row, tuple(row), validate_practice_record)

    def save_violation(self, violation: ProctoringViolation) -> None:
        row = _versioned(violation.to_record())
        try:
            validate_violation_record(row)
            appended = locked_append_jsonl_unique(self._path(VIOLATIONS_FILE), row)
        except (OSError, RecordValidationError) as e:
            raise PersistenceError(f"Could not save violation {violation.id}: {e}") from e
        if not appended:
            logger.debug(f"Violation {violation.id} already stored; insert skipped")

    # ─────────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────────

    def load_attempt(self, attempt_id: str) -> Optional[StudentAssessmentAttempt]:
        row = self._read_table(ATTEMPTS_FILE).get(attempt_id)
        if row is None:
            return None
        return self._hydrate(row)

    def find_in_progress(
        self, examinee_id: str, assessment_id: str
    ) -> Optional[StudentAssessmentAttempt]:
        """Most recently started IN_PROGRESS attempt for the pair, if any."""
        candidates = [
            row for row in self._read_table(ATTEMPTS_FILE).values()
            if row["examinee_id"] == examinee_id
            and row["assessment_id"] == assessment_id
            and row["status"] == AttemptStatus.IN_PROGRESS.value
        ]
        if not candidates:
            return None
        latest = max(candidates, key=lambda row: row["start_time"])
        return self._hydrate(latest)

    def attempts_for_student(self, examinee_id: str) -> List[StudentAssessmentAttempt]:
        return self._attempts_where(lambda row: row["examinee_id"] == examinee_id)

    def attempts_for_assessment(self, assessment_id: str) -> List[StudentAssessmentAttempt]:
        return self._attempts_where(lambda row: row["assessment_id"] == assessment_id)

    def responses_for_attempt(self, attempt_id: str) -> List[StudentResponse]:
        rows = self._read_table(RESPONSES_FILE).values()
        return [
            StudentResponse.from_dict(row) for row in rows if row["attempt_id"] == attempt_id
        ]

    def violations_for(
        self, assessment_id: str, examinee_id: Optional[str] = None
    ) -> List[ProctoringViolation]:
        """Stored violations in chronological order."""
        try:
            rows = locked_read_jsonl(self._path(VIOLATIONS_FILE))
        except OSError as e:
            raise PersistenceError(f"Could not read violations: {e}") from e
        violations = [
            ProctoringViolation.from_record(row)
            for row in rows
            if row.get("assessment_id") == assessment_id
            and (examinee_id is None or row.get("examinee_id") == examinee_id)
        ]
        return sorted(violations, key=lambda v: v.start_time)

    def practice_result(self, attempt_id: str) -> Optional[PracticeResult]:
        row = self._read_table(PRACTICE_FILE).get(attempt_id)
        return PracticeResult.from_record(row) if row else None

    def row_count(self, table: str) -> int:
        """Number of rows in a JSON table file (e.g. ATTEMPTS_FILE)."""
        if table == VIOLATIONS_FILE:
            return len(locked_read_jsonl(self._path(table)))
        return len(self._read_table(table))

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _path(self, name: str) -> Path:
        return self.data_dir / name

    def _upsert(
        self,
        table: str,
        row: Dict[str, Any],
        mutable_fields: tuple[str, ...],
        validate: Callable[[Dict[str, Any]], None],
    ) -> None:
        def apply(existing: Dict[str, Any]) -> Dict[str, Any]:
            current = existing.get(row["id"])
            if current is None:
                existing[row["id"]] = row
            elif table == ATTEMPTS_FILE and current["status"] == AttemptStatus.COMPLETED.value:
                # Completed attempts are final
                logger.debug(f"Attempt {row['id']} is already COMPLETED; update skipped")
            else:
                for key in mutable_fields:
                    current[key] = row[key]
                validate(current)
            return existing

        try:
            validate(row)
            locked_read_modify_write_json(self._path(table), apply)
        except (OSError, json.JSONDecodeError, RecordValidationError) as e:
            raise PersistenceError(f"Could not save {table} row {row['id']}: {e}") from e
        logger.debug(f"Upserted {row['id']} into {table}")

    def _read_table(self, table: str) -> Dict[str, Dict[str, Any]]:
        try:
            return locked_read_json(self._path(table))
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read {table}: {e}") from e

    def _attempts_where(self, predicate) -> List[StudentAssessmentAttempt]:
        rows = [row for row in self._read_table(ATTEMPTS_FILE).values() if predicate(row)]
        rows.sort(key=lambda row: row["start_time"])
        return [self._hydrate(row) for row in rows]

    def _hydrate(self, row: Dict[str, Any]) -> StudentAssessmentAttempt:
        try:
            validate_attempt_record(row)
        except RecordValidationError as e:
            raise PersistenceError(f"Stored attempt {row.get('id')} is invalid: {e}") from e
        attempt = StudentAssessmentAttempt.from_dict(row)
        for response in self.responses_for_attempt(attempt.id):
            attempt.responses[response.question_id] = response
        return attempt


def _versioned(row: Dict[str, Any]) -> Dict[str, Any]:
    row["schema_version"] = RECORD_SCHEMA_VERSION
    return row
