"""
Optional Qt adapters (install with the ``gui`` extra).

Importing this package requires PySide6.
"""

from .focus_source import QtFocusSource
from .qt_ticker import QtTicker

__all__ = ["QtFocusSource", "QtTicker"]
