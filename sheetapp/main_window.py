"""
sheetapp/main_window.py -- Main application window.

Hosts the ``CharacterSheet`` as central widget, a File menu with Save
(Ctrl+S) and Reload, and a status bar fed by the EventBus.
"""

from __future__ import annotations

import logging

from PySide6.QtGui import QAction, QCloseEvent, QKeySequence
from PySide6.QtWidgets import QMainWindow, QMessageBox, QStatusBar, QWidget

from sheetsync.errors import DocumentStoreError
from sheetsync.models import SheetConfig
from sheetsync.synchronizer import SheetSynchronizer
from sheetapp.services.event_bus import EventBus
from sheetapp.widgets.character_sheet import CharacterSheet

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Window editing a single character document."""

    def __init__(
        self,
        synchronizer: SheetSynchronizer,
        document_id: str,
        config: SheetConfig,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self._sync = synchronizer
        self._document_id = document_id

        self.setWindowTitle(f"Character Sheet - {document_id}")
        self.setMinimumSize(950, 800)

        self.sheet = CharacterSheet(synchronizer, document_id, config)
        self.setCentralWidget(self.sheet)

        self._build_menus()

        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)
        self._status_bar.showMessage("Ready")

        self._bus = bus = EventBus.instance()
        bus.status_message.connect(self._on_status_message)
        bus.error_occurred.connect(self._on_error)
        bus.submission_started.connect(lambda _doc: self._status_bar.showMessage("Saving..."))

        self.reload()

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------

    def _build_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")

        save_action = QAction("Save", self)
        save_action.setShortcut(QKeySequence.StandardKey.Save)
        save_action.triggered.connect(self.sheet.submit)
        file_menu.addAction(save_action)

        reload_action = QAction("Reload", self)
        reload_action.setShortcut(QKeySequence("Ctrl+R"))
        reload_action.triggered.connect(self.reload)
        file_menu.addAction(reload_action)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """Re-render the sheet from the stored document."""
        try:
            document = self._sync.store.get(self._document_id)
        except DocumentStoreError as exc:
            logger.exception("Failed to load document '%s'", self._document_id)
            self._bus.error_occurred.emit(str(exc))
            return
        self.sheet.load_document(document)

    def _on_status_message(self, message: str) -> None:
        self._status_bar.showMessage(message, 5000)

    def _on_error(self, message: str) -> None:
        self._status_bar.showMessage(f"Error: {message}", 10000)
        QMessageBox.warning(self, "Character Sheet", message)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def closeEvent(self, event: QCloseEvent) -> None:
        if self.sheet.has_pending_submissions:
            logger.info("Waiting for pending submissions before closing")
        super().closeEvent(event)
