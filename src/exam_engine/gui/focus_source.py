"""
Module: gui.focus_source

Purpose:
    Feeds Qt application focus changes into a session's proctoring.
    The application counts as focused only while it is ApplicationActive;
    hidden, inactive and suspended all count as lost focus.

Key Classes:
    - QtFocusSource

Dependencies:
    - PySide6 (gui extra)

Used By:
    - Qt host windows
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Qt, Slot
from PySide6.QtGui import QGuiApplication

logger = logging.getLogger(__name__)


class QtFocusSource(QObject):
    """
    Binds QGuiApplication.applicationStateChanged to a focus handler.

    Usage:
        source = QtFocusSource(session.on_focus_changed)
        source.attach()
        ...
        source.detach()
    """

    def __init__(self, handler: Callable[[bool], None], parent: Optional[QObject] = None):
        super().__init__(parent)
        self._handler = handler
        self._app: Optional[QGuiApplication] = None

    @property
    def is_attached(self) -> bool:
        return self._app is not None

    def attach(self, app: Optional[QGuiApplication] = None) -> None:
        """Start forwarding state changes from `app` (default: the running app)."""
        if self._app is not None:
            return
        app = app or QGuiApplication.instance()
        if app is None:
            raise RuntimeError("QtFocusSource needs a running QGuiApplication")
        app.applicationStateChanged.connect(self.on_application_state_changed)
        self._app = app
        logger.debug("Focus source attached")

    def detach(self) -> None:
        if self._app is None:
            return
        self._app.applicationStateChanged.disconnect(self.on_application_state_changed)
        self._app = None
        logger.debug("Focus source detached")

    @Slot(Qt.ApplicationState)
    def on_application_state_changed(self, state: Qt.ApplicationState) -> None:
        focused = state == Qt.ApplicationState.ApplicationActive
        try:
            self._handler(focused)
        except Exception as e:
            logger.warning(f"Focus handler failed: {e}")
