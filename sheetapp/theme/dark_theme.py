"""
sheetapp/theme/dark_theme.py -- Dark theme configuration.

Applies qt-material's dark_teal theme with QSS overrides for the sheet's
dense row tables.

Usage::

    from sheetapp.theme.dark_theme import apply_theme
    apply_theme(app)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PySide6.QtWidgets import QApplication

logger = logging.getLogger(__name__)

# Applied on top of qt-material
_SHEET_QSS = """
/* Collection tables */
QGroupBox {
    font-weight: bold;
    margin-top: 8px;
}

/* Rows are dense; keep inputs compact */
QLineEdit, QComboBox, QSpinBox {
    min-height: 20px;
    padding: 1px 4px;
}

/* Row remove buttons */
QPushButton[action="delete"] {
    color: #F44336;
    border: 1px solid #555;
    border-radius: 3px;
    padding: 0px;
}
QPushButton[action="delete"]:hover {
    background-color: #F44336;
    color: white;
}

/* Table add buttons */
QPushButton[action="create"] {
    background-color: #1B5E20;
    padding: 4px 10px;
}

QStatusBar {
    font-size: 12px;
}
"""


def apply_theme(app: "QApplication") -> None:
    """Apply the dark teal material theme with sheet overrides."""
    try:
        from qt_material import apply_stylesheet
        apply_stylesheet(app, theme="dark_teal.xml")
        logger.info("Applied qt-material dark_teal theme")
    except Exception:
        logger.warning("qt-material theme failed, falling back to Fusion", exc_info=True)
        from PySide6.QtWidgets import QApplication
        QApplication.setStyle("Fusion")

    existing = app.styleSheet() or ""
    app.setStyleSheet(existing + _SHEET_QSS)
