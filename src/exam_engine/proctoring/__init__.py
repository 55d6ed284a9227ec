"""Window-focus proctoring."""

from .monitor import FocusEvent, ProctoringMonitor
from .summary import ViolationSummary, format_duration, summarize

__all__ = [
    "FocusEvent",
    "ProctoringMonitor",
    "ViolationSummary",
    "format_duration",
    "summarize",
]
