"""Idempotent storage of attempts, responses and proctoring violations."""

from .gateway import (
    FailedWrite,
    PersistenceGateway,
    PersistenceReport,
    persist_attempt,
    persist_violation,
)
from .json_store import JsonFileGateway
from .write_queue import PersistenceQueue

__all__ = [
    "FailedWrite",
    "PersistenceGateway",
    "PersistenceReport",
    "persist_attempt",
    "persist_violation",
    "JsonFileGateway",
    "PersistenceQueue",
]
