"""
sheetapp/widgets/collection_table.py -- Dynamic tables of named entities.

A ``CollectionTable`` edits one managed collection (skills, weapons,
abilities) as a list of rows:

- ``create_row()`` clones the table's ``RowTemplate`` into a new, empty
  row at the end of the table.  Nothing is submitted.
- ``delete_row(control)`` finds the row containing the clicked control by
  its ``rowScope`` marker, detaches it, and immediately asks for a commit
  (``commit_requested``) so the deletion is never left pending.
- Leaving a row's name input rebinds every field path in the row to the
  new name (see ``sheetsync.rebinder``).
- After a save, ``refresh_rows()`` reloads only the saved rows that were
  not edited in the meantime; unnamed rows stay until they are deleted.
"""

from __future__ import annotations

import logging
from typing import Any

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from sheetsync.errors import ConfigurationError
from sheetsync.form_data import get_path
from sheetsync.rebinder import bind_fields, rebind_fields, transient_key
from sheetsync.schema import NAME_ROLE, CollectionSpec, key_segment
from sheetapp.widgets.control_dispatch import CREATE, DELETE, ControlDispatcher
from sheetapp.widgets.row_field import FieldDef, RowField

logger = logging.getLogger(__name__)

ROW_SCOPE_PROPERTY = "rowScope"
ACTION_PROPERTY = "action"


class RowTemplate:
    """The reusable description every row of one table is built from.

    Parameters
    ----------
    spec : CollectionSpec
        The collection the rows belong to.
    fields : list[FieldDef]
        One definition per role, in display order.  Every role of the
        spec must be present exactly once.
    """

    def __init__(self, spec: CollectionSpec, fields: list[FieldDef]):
        roles = [f.role for f in fields]
        if sorted(roles) != sorted(spec.roles):
            raise ConfigurationError(
                f"Row template for '{spec.kind}' must define roles {list(spec.roles)}, "
                f"got {roles}"
            )
        self.spec = spec
        self.fields = tuple(fields)

    def instantiate(self, segment: str, parent: QWidget | None = None) -> EntityRow:
        return EntityRow(self, segment, parent)


class EntityRow(QWidget):
    """One row: a field per role plus a remove control.

    Signals
    -------
    renamed(str)
        The row's field paths now use a new name.  Payload is the name.
    """

    renamed = Signal(str)

    def __init__(self, template: RowTemplate, segment: str, parent: QWidget | None = None):
        super().__init__(parent)
        self.spec = template.spec
        self.setProperty(ROW_SCOPE_PROPERTY, self.spec.kind)
        self._bound_name: str | None = None
        self._fields: dict[str, RowField] = {}

        layout = QHBoxLayout(self)
        layout.setContentsMargins(2, 1, 2, 1)
        layout.setSpacing(6)

        for field_def in template.fields:
            fw = RowField(field_def)
            layout.addWidget(fw, 2 if field_def.role == NAME_ROLE else 1)
            self._fields[field_def.role] = fw
        bind_fields(self._fields.values(), self.spec, segment)

        self.delete_control = QPushButton("X")
        self.delete_control.setObjectName(f"{self.spec.kind}-control")
        self.delete_control.setProperty(ACTION_PROPERTY, DELETE)
        self.delete_control.setFixedSize(22, 22)
        self.delete_control.setToolTip(f"Remove this {self.spec.kind}")
        layout.addWidget(self.delete_control)

        name_input = self._fields[NAME_ROLE].input
        if isinstance(name_input, QLineEdit):
            name_input.editingFinished.connect(self.rebind)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def fields(self) -> list[RowField]:
        return list(self._fields.values())

    def field(self, role: str) -> RowField:
        return self._fields[role]

    @property
    def name(self) -> str:
        return str(self._fields[NAME_ROLE].get_value() or "")

    def form_data(self) -> dict[str, Any]:
        return {fw.path: fw.get_value() for fw in self._fields.values()}

    @property
    def bound_name(self) -> str | None:
        """Name the field paths are bound to; None while the row is transient."""
        return self._bound_name

    def matches(self, submitted: dict[str, Any]) -> bool:
        """True if every field still holds the value it had in *submitted*."""
        return all(
            path in submitted and submitted[path] == value
            for path, value in self.form_data().items()
        )

    def load(self, entity: dict[str, Any]) -> None:
        """Fill the row's inputs from a persisted entity."""
        for role, fw in self._fields.items():
            fw.set_value(get_path(entity, role))
        self._bound_name = self.name.strip() or None

    # ------------------------------------------------------------------
    # Rebinding
    # ------------------------------------------------------------------

    def rebind(self) -> bool:
        """Address every field under the row's current name."""
        name = self.name
        if not rebind_fields(self._fields.values(), self.spec, name, self._bound_name):
            return False
        self._bound_name = name.strip()
        self.renamed.emit(self._bound_name)
        return True


class CollectionTable(QWidget):
    """Editable table of one name-keyed collection.

    Signals
    -------
    row_created(object)
        A new empty row was appended.  Payload is the ``EntityRow``.
    row_deleted(str)
        A row was removed.  Payload is its name (may be empty).
    commit_requested()
        The table's state must be submitted now.
    """

    row_created = Signal(object)
    row_deleted = Signal(str)
    commit_requested = Signal()

    def __init__(
        self,
        spec: CollectionSpec,
        template: RowTemplate | None = None,
        dispatcher: ControlDispatcher | None = None,
        title: str = "",
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        if template is not None and template.spec != spec:
            raise ConfigurationError(
                f"Row template for '{template.spec.kind}' cannot serve the '{spec.kind}' table"
            )
        self.spec = spec
        self._template = template
        self._dispatcher = dispatcher or ControlDispatcher()
        self._rows: list[EntityRow] = []
        self._next_index = 0

        self._dispatcher.register(spec.kind, CREATE, lambda control: self.create_row())
        self._dispatcher.register(spec.kind, DELETE, self.delete_row)

        self._setup_ui(title or spec.kind.title() + "s")

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------

    def _setup_ui(self, title: str) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        self._group = QGroupBox(title)
        group_layout = QVBoxLayout(self._group)
        group_layout.setContentsMargins(6, 10, 6, 6)
        group_layout.setSpacing(2)

        if self._template is not None:
            header = QHBoxLayout()
            header.setContentsMargins(2, 0, 2, 0)
            for field_def in self._template.fields:
                label = QLabel(field_def.header)
                label.setStyleSheet("color: #90CAF9; font-weight: bold;")
                header.addWidget(label, 2 if field_def.role == NAME_ROLE else 1)
            header.addSpacing(22)
            group_layout.addLayout(header)

        self._rows_container = QWidget()
        self._rows_layout = QVBoxLayout(self._rows_container)
        self._rows_layout.setContentsMargins(0, 0, 0, 0)
        self._rows_layout.setSpacing(2)
        self._rows_layout.setAlignment(Qt.AlignmentFlag.AlignTop)
        group_layout.addWidget(self._rows_container)

        self.create_control = QPushButton(f"+ Add {self.spec.kind}")
        self.create_control.setObjectName(f"{self.spec.kind}-control")
        self.create_control.setProperty(ACTION_PROPERTY, CREATE)
        self.create_control.clicked.connect(
            lambda: self._dispatcher.dispatch(self.spec.kind, CREATE, self.create_control)
        )
        group_layout.addWidget(self.create_control, 0, Qt.AlignmentFlag.AlignLeft)

        outer.addWidget(self._group)

    # ------------------------------------------------------------------
    # Row lifecycle
    # ------------------------------------------------------------------

    def set_title(self, title: str) -> None:
        self._group.setTitle(title)

    @property
    def template(self) -> RowTemplate | None:
        return self._template

    def rows(self) -> list[EntityRow]:
        return list(self._rows)

    def create_row(self) -> EntityRow:
        """Append one empty row built from the row template.

        Raises
        ------
        ConfigurationError
            If the table has no row template.
        """
        row = self._append_row(transient_key(self._next_index))
        self.row_created.emit(row)
        return row

    def _append_row(self, segment: str) -> EntityRow:
        if self._template is None:
            raise ConfigurationError(f"No row template found in {self.spec.kind} table")
        self._next_index += 1
        row = self._template.instantiate(segment, self._rows_container)
        row.delete_control.clicked.connect(
            lambda: self._dispatcher.dispatch(self.spec.kind, DELETE, row.delete_control)
        )
        self._rows_layout.addWidget(row)
        self._rows.append(row)
        return row

    def closest_row(self, control: QWidget) -> EntityRow | None:
        """Nearest ancestor of *control* carrying this table's row marker."""
        widget = control
        while widget is not None:
            if widget.property(ROW_SCOPE_PROPERTY) == self.spec.kind:
                return widget if isinstance(widget, EntityRow) else None
            widget = widget.parentWidget()
        return None

    def delete_row(self, control: QWidget) -> str:
        """Remove the row containing *control* and request a commit.

        Returns the removed row's name.

        Raises
        ------
        ConfigurationError
            If *control* is not inside a row of this table.
        """
        row = self.closest_row(control)
        if row is None or row not in self._rows:
            raise ConfigurationError(
                f"Control '{control.objectName()}' is not inside a {self.spec.kind} row"
            )
        name = row.name.strip()
        self._detach(row)
        logger.debug("Deleted %s row '%s'", self.spec.kind, name)
        self.row_deleted.emit(name)
        self.commit_requested.emit()
        return name

    def _detach(self, row: EntityRow) -> None:
        self._rows.remove(row)
        self._rows_layout.removeWidget(row)
        row.setParent(None)
        row.deleteLater()

    def clear(self) -> None:
        for row in list(self._rows):
            self._detach(row)

    def load_collection(self, entities: dict[str, Any]) -> None:
        """Replace all rows with one row per persisted entity."""
        self.clear()
        for key, entity in (entities or {}).items():
            if not key:
                continue
            row = self._append_row(key_segment(key) or transient_key(self._next_index))
            data = dict(entity) if isinstance(entity, dict) else {}
            data.setdefault(NAME_ROLE, key)
            row.load(data)

    def refresh_rows(self, entities: dict[str, Any], submitted: dict[str, Any]) -> int:
        """Update saved rows from *entities* after a submission.

        Only rows bound to a key present in *entities* and still holding
        the values in *submitted* are reloaded.  Unnamed rows and rows
        edited since the submission was collected are left untouched.
        Returns the number of rows reloaded.
        """
        entities = entities or {}
        refreshed = 0
        for row in self._rows:
            key = row.bound_name
            if key is None or key not in entities or not row.matches(submitted):
                continue
            entity = entities[key]
            data = dict(entity) if isinstance(entity, dict) else {}
            data.setdefault(NAME_ROLE, key)
            row.load(data)
            refreshed += 1
        return refreshed

    def form_data(self) -> dict[str, Any]:
        """Flat path -> value mapping of every row, in row order."""
        data: dict[str, Any] = {}
        for row in self._rows:
            data.update(row.form_data())
        return data
