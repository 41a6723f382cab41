"""
sheetapp/services/submission_bridge.py -- Delivers submission futures to Qt.

The synchronizer completes submissions on its own worker threads.  The
bridge re-emits the outcome as Qt signals; because the bridge lives on
the GUI thread, connected slots run there too.

Usage::

    bridge = SubmissionBridge(parent=self)
    bridge.finished.connect(on_done)
    bridge.failed.connect(on_error)
    bridge.watch(synchronizer.submit(doc_id, form))
"""

from __future__ import annotations

import logging
from concurrent.futures import Future

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)


class SubmissionBridge(QObject):
    """Turns one ``Future[SubmissionResult]`` into Qt signals.

    Signals
    -------
    finished(object)
        The submission was applied.  Payload is the ``SubmissionResult``.
    failed(str)
        The submission raised.  Payload is the error message.
    """

    finished = Signal(object)
    failed = Signal(str)

    def watch(self, future: Future) -> None:
        """Start listening to *future*.  Connect the signals first."""
        future.add_done_callback(self._on_done)

    def _on_done(self, future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            self.failed.emit(str(exc) or exc.__class__.__name__)
            return
        self.finished.emit(future.result())
