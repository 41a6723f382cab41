"""
sheetapp/widgets/row_field.py -- One editable field of the character sheet.

A ``RowField`` carries an explicit *role* (what the value means, e.g.
``"cost.pool"``) and a *path* (where the value is submitted, e.g.
``"data.abilities.Onslaught.cost.pool"``).  The path is rewritten by the
rebinder whenever the owning row is renamed; the role never changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QHBoxLayout,
    QLineEdit,
    QSpinBox,
    QWidget,
)

logger = logging.getLogger(__name__)


class FieldKind(Enum):
    TEXT = "text"
    CHOICE = "choice"
    CHECK = "check"
    NUMBER = "number"


@dataclass(frozen=True)
class FieldDef:
    """How one role is edited: input kind, choices, header label."""
    role: str
    kind: FieldKind = FieldKind.TEXT
    options: tuple[str, ...] = ()
    label: str = ""
    placeholder: str = ""

    @property
    def header(self) -> str:
        return self.label or self.role.split(".")[-1].replace("_", " ").title()


class RowField(QWidget):
    """A single input bound to a submission path."""

    changed = Signal()

    def __init__(
        self,
        field_def: FieldDef,
        path: str = "",
        value: Any = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self.field_def = field_def
        self.role = field_def.role
        self._path = ""
        self.path = path

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(2)

        kind = field_def.kind
        if kind is FieldKind.CHOICE:
            self.input = QComboBox()
            self.input.addItem("", "")
            for option in field_def.options:
                self.input.addItem(option, option)
            self.input.currentIndexChanged.connect(lambda: self.changed.emit())

        elif kind is FieldKind.CHECK:
            self.input = QCheckBox()
            self.input.toggled.connect(lambda: self.changed.emit())

        elif kind is FieldKind.NUMBER:
            self.input = QSpinBox()
            self.input.setRange(-999, 9999)
            self.input.valueChanged.connect(lambda: self.changed.emit())

        else:
            self.input = QLineEdit()
            if field_def.placeholder:
                self.input.setPlaceholderText(field_def.placeholder)
            self.input.textChanged.connect(lambda: self.changed.emit())

        layout.addWidget(self.input, 1)

        if value is not None:
            self.set_value(value)

    @property
    def path(self) -> str:
        return self._path

    @path.setter
    def path(self, value: str) -> None:
        self._path = value
        self.setObjectName(value)

    def get_value(self) -> Any:
        """Current value as it is submitted."""
        if isinstance(self.input, QComboBox):
            return self.input.currentData() or ""
        if isinstance(self.input, QCheckBox):
            return self.input.isChecked()
        if isinstance(self.input, QSpinBox):
            return self.input.value()
        return self.input.text()

    def set_value(self, value: Any) -> None:
        if isinstance(self.input, QComboBox):
            idx = self.input.findData(value if value is not None else "")
            if idx < 0 and value:
                # Keep persisted values that are not in the configured list.
                self.input.addItem(str(value), value)
                idx = self.input.count() - 1
            self.input.setCurrentIndex(max(idx, 0))
        elif isinstance(self.input, QCheckBox):
            self.input.setChecked(bool(value))
        elif isinstance(self.input, QSpinBox):
            try:
                self.input.setValue(int(value or 0))
            except (TypeError, ValueError):
                logger.warning("Non-numeric value %r for field '%s'", value, self.role)
                self.input.setValue(0)
        else:
            self.input.setText("" if value is None else str(value))
