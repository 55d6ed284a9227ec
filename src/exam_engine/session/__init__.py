"""Attempt session state machine, its configuration and the session registry."""

from .config import EngineConfig, get_data_dir
from .response_store import ResponseStore
from .attempt_session import AttemptSession
from .registry import AttemptRegistry

__all__ = [
    "EngineConfig",
    "get_data_dir",
    "ResponseStore",
    "AttemptSession",
    "AttemptRegistry",
]
