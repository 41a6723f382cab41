"""
sheetapp/widgets/control_dispatch.py -- Explicit table control dispatch.

Row controls (the add button of a table, the remove button of a row) do
not look up their handlers by name.  Each table registers a handler per
``(kind, action)`` pair and the buttons dispatch through the shared
registry.
"""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtWidgets import QWidget

logger = logging.getLogger(__name__)

CREATE = "create"
DELETE = "delete"

Handler = Callable[[QWidget], None]


class ControlDispatcher:
    """Registry mapping ``(collection kind, action)`` to a handler."""

    def __init__(self) -> None:
        self._handlers: dict[tuple[str, str], Handler] = {}

    def register(self, kind: str, action: str, handler: Handler) -> None:
        key = (kind, action)
        if key in self._handlers:
            raise ValueError(f"A handler for {kind}/{action} is already registered")
        self._handlers[key] = handler

    def unregister(self, kind: str) -> None:
        """Drop every handler registered for *kind*."""
        for key in [k for k in self._handlers if k[0] == kind]:
            del self._handlers[key]

    def handles(self, kind: str, action: str) -> bool:
        return (kind, action) in self._handlers

    def dispatch(self, kind: str, action: str, control: QWidget) -> bool:
        """Run the handler for ``(kind, action)``; False if there is none."""
        handler = self._handlers.get((kind, action))
        if handler is None:
            logger.debug("No handler for %s/%s, ignoring", kind, action)
            return False
        handler(control)
        return True
