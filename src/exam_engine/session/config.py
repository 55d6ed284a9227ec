"""
Module: session.config

Purpose:
    Configuration dataclass for attempt sessions. Immutable configuration
    with validation on construction.

Key Classes:
    - EngineConfig: Timer, proctoring and persistence settings

Key Functions:
    - get_data_dir: Default storage location

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - session.attempt_session.AttemptSession
    - session.registry.AttemptRegistry
"""

from __future__ import annotations

import os
import platform
import sys
from dataclasses import dataclass, field
from pathlib import Path

APP_DIR_NAME = "Exam Engine"


def is_frozen() -> bool:
    """Check if running as a frozen (PyInstaller) application."""
    return getattr(sys, 'frozen', False) or hasattr(sys, '_MEIPASS')


def get_data_dir() -> Path:
    """
    Directory for attempt/response/violation records.

    Frozen: %LOCALAPPDATA%/Exam Engine (Windows),
            ~/Library/Application Support/Exam Engine (macOS),
            ~/.local/share/Exam Engine (Linux)
    Dev: workspace/exam_data
    """
    if not is_frozen():
        return Path.cwd() / "workspace" / "exam_data"
    system = platform.system()
    if system == "Windows":
        base = os.environ.get("LOCALAPPDATA", os.environ.get("APPDATA"))
        return Path(base) / APP_DIR_NAME if base else Path.home() / ".exam_engine"
    if system == "Darwin":
        return Path.home() / "Library/Application Support" / APP_DIR_NAME
    return Path.home() / ".local/share" / APP_DIR_NAME


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration for attempt sessions (immutable).
    
    Attributes:
        data_dir: Where the JSON store keeps its files
        tick_interval_seconds: Real time between countdown ticks; each tick
            removes one second from the countdown
        timer_warning_seconds: Remaining time below which the timer warns
        low_severity_limit_seconds: Violations shorter than this are LOW
        high_severity_limit_seconds: Violations longer than this are HIGH
        synchronous_persistence: Write records on the submitting thread
        use_placeholder_question: Substitute a placeholder question when an
            assessment resolves to no usable questions
    
    Example:
        >>> config = EngineConfig(data_dir=Path("/tmp/exam"), synchronous_persistence=True)
        >>> config.tick_interval_seconds
        1.0
    """
    data_dir: Path = field(default_factory=get_data_dir)
    tick_interval_seconds: float = 1.0
    timer_warning_seconds: int = 300
    low_severity_limit_seconds: int = 60
    high_severity_limit_seconds: int = 300
    synchronous_persistence: bool = False
    use_placeholder_question: bool = True
    
    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.tick_interval_seconds <= 0:
            raise ValueError(f"tick_interval_seconds must be positive: {self.tick_interval_seconds}")
        if self.timer_warning_seconds < 0:
            raise ValueError(f"timer_warning_seconds cannot be negative: {self.timer_warning_seconds}")
        if not (0 < self.low_severity_limit_seconds <= self.high_severity_limit_seconds):
            raise ValueError(
                "Severity limits must satisfy 0 < low <= high: "
                f"{self.low_severity_limit_seconds}, {self.high_severity_limit_seconds}"
            )
