"""
Exception types raised by the exam engine.

All engine errors derive from ExamEngineError so hosts can catch them in one
place. Model validation still raises ValueError, matching the dataclass
constructors.
"""

from __future__ import annotations


class ExamEngineError(Exception):
    """Base class for engine errors."""


class AlreadySubmittedError(ExamEngineError):
    """Raised when an attempt that is already COMPLETED is submitted again."""

    def __init__(self, attempt_id: str):
        super().__init__(f"Attempt {attempt_id} has already been submitted")
        self.attempt_id = attempt_id


class PersistenceError(ExamEngineError):
    """Raised by a gateway when a record cannot be stored or read."""


class RecordValidationError(ExamEngineError):
    """Raised when a stored record fails validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []
