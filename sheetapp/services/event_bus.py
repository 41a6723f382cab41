"""
sheetapp/services/event_bus.py -- Application-wide event bus using Qt signals.

Singleton that carries sheet lifecycle notifications between the sheet,
its tables and the main window, so none of them hold references to each
other.

Usage::

    from sheetapp.services.event_bus import EventBus

    bus = EventBus.instance()
    bus.submission_finished.connect(on_saved)
"""

from __future__ import annotations

import threading

from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """Application-wide signal bus.

    Signals
    -------
    row_created(str)
        A table gained an empty row.  Payload is the collection kind.
    row_deleted(str, str)
        A row was removed.  Payload is (kind, entity name or "").
    submission_started(str)
        A form submission was queued.  Payload is the document ID.
    submission_finished(str, str)
        A submission was applied.  Payload is (document ID, summary).
    error_occurred(str)
        Fired when an error needs to be shown to the user.
    status_message(str)
        Fired to update the status bar message.
    """

    row_created = Signal(str)
    row_deleted = Signal(str, str)

    submission_started = Signal(str)
    submission_finished = Signal(str, str)

    error_occurred = Signal(str)
    status_message = Signal(str)

    _instance: EventBus | None = None
    _lock = threading.Lock()

    @classmethod
    def instance(cls) -> EventBus:
        """Return the singleton EventBus instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance.deleteLater()
            cls._instance = None
