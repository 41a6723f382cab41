"""
sheetapp/main.py -- Application entry point.

Initializes logging, the QApplication and the theme, opens the JSON
document store, and shows the character sheet for one document.

Usage::

    python -m sheetapp.main --document pc-001
    sheet-editor --document pc-001 --data-dir ./data --config my_game.json
"""

from __future__ import annotations

import os
os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")

import argparse
import logging
import sys
import traceback

from sheetsync.document_store import JsonDocumentStore
from sheetsync.errors import ConfigurationError, DocumentNotFoundError
from sheetsync.merger import MergePolicy
from sheetsync.models import load_sheet_config
from sheetsync.synchronizer import SheetSynchronizer
from sheetapp.paths import get_documents_dir

EMPTY_DOCUMENT = {
    "name": "",
    "data": {
        "skills": {},
        "abilities": {},
        "equipment": {"weapons": {}},
        "advances": {"stats": False, "edge": False, "effort": False, "skills": False, "other": False},
        "recoveries": {"action": False, "ten_min": False, "one_hour": False, "ten_hours": False},
        "damageTrack": 0,
    },
}


def _setup_logging() -> None:
    """Configure logging for the desktop application."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _global_exception_hook(exc_type, exc_value, exc_tb):
    """Last-resort handler for uncaught exceptions.

    Logs the traceback and shows a message box (if a QApplication exists).
    """
    logger = logging.getLogger("sheetapp")
    logger.critical(
        "Uncaught exception: %s",
        "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
    )

    try:
        from PySide6.QtWidgets import QApplication, QMessageBox
        app = QApplication.instance()
        if app is not None:
            QMessageBox.critical(
                None,
                "Unexpected Error",
                f"An unexpected error occurred:\n\n{exc_value}\n\n"
                "Unsaved edits are still in the sheet.\n"
                "Please check the logs for details.",
            )
    except Exception:
        pass  # Can't show GUI -- already logged above


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Edit a character sheet document.")
    parser.add_argument("--document", default="character", help="Document ID to edit")
    parser.add_argument("--data-dir", default=None, help="Override the user data directory")
    parser.add_argument("--config", default=None, help="Sheet configuration JSON file")
    parser.add_argument(
        "--strict", action="store_true",
        help="Reject unnamed and duplicate rows instead of ignoring them",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Launch the character sheet editor."""
    args = _parse_args(argv)
    _setup_logging()
    logger = logging.getLogger("sheetapp")
    logger.info("Starting character sheet editor")

    sys.excepthook = _global_exception_hook

    try:
        config = load_sheet_config(args.config)
    except ConfigurationError:
        logger.exception("Failed to load sheet configuration")
        return 2

    store = JsonDocumentStore(get_documents_dir(args.data_dir))
    logger.info("Document store: %s", store.root)
    try:
        store.get(args.document)
    except DocumentNotFoundError:
        logger.info("Creating empty document '%s'", args.document)
        store.put(args.document, EMPTY_DOCUMENT)

    policy = MergePolicy.STRICT if args.strict else MergePolicy.LENIENT
    synchronizer = SheetSynchronizer(store, policy=policy)

    # Must create QApplication before anything else Qt-related
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication(sys.argv)

    from sheetapp.theme.dark_theme import apply_theme
    apply_theme(app)

    from sheetapp.main_window import MainWindow
    window = MainWindow(synchronizer, args.document, config)
    window.show()
    logger.info("Main window displayed")

    exit_code = app.exec()

    logger.info("Shutting down...")
    synchronizer.shutdown(wait=True)
    store.close()

    logger.info("Goodbye!")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
