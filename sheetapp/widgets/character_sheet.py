"""
sheetapp/widgets/character_sheet.py -- The editable character sheet form.

Holds the scalar fields of a character document plus one
``CollectionTable`` per managed collection.  ``submit()`` collects the
flat form data and hands it to the ``SheetSynchronizer``; the result
comes back through a ``SubmissionBridge``.  Saved rows that were not
edited in the meantime are refreshed from the stored document; unnamed
rows and newer edits stay as typed.  A failed submission is reported on
the event bus and leaves the form exactly as the user left it.
"""

from __future__ import annotations

import logging
from typing import Any

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QFormLayout,
    QGroupBox,
    QLabel,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from sheetsync.form_data import get_path
from sheetsync.models import SheetConfig
from sheetsync.schema import ABILITIES, SKILLS, WEAPONS
from sheetsync.synchronizer import SheetSynchronizer, SubmissionResult
from sheetsync.view_model import prepare_sheet_data
from sheetapp.services.event_bus import EventBus
from sheetapp.services.submission_bridge import SubmissionBridge
from sheetapp.widgets.collection_table import CollectionTable, RowTemplate
from sheetapp.widgets.control_dispatch import ControlDispatcher
from sheetapp.widgets.row_field import FieldDef, FieldKind, RowField

logger = logging.getLogger(__name__)


def default_row_templates(config: SheetConfig) -> dict[str, RowTemplate]:
    """Row templates for skills, weapons and abilities, keyed by kind."""
    stats = tuple(config.stats)
    return {
        SKILLS.kind: RowTemplate(SKILLS, [
            FieldDef("name", placeholder="Skill name"),
            FieldDef("stat", FieldKind.CHOICE, stats),
            FieldDef("inability", FieldKind.CHECK),
            FieldDef("trained", FieldKind.CHECK),
            FieldDef("specialized", FieldKind.CHECK),
        ]),
        WEAPONS.kind: RowTemplate(WEAPONS, [
            FieldDef("name", placeholder="Weapon name"),
            FieldDef("weightClass", FieldKind.CHOICE, tuple(config.weight_classes), label="Weight"),
            FieldDef("weaponType", FieldKind.CHOICE, tuple(config.weapon_types), label="Type"),
            FieldDef("damage", FieldKind.NUMBER),
            FieldDef("range", FieldKind.CHOICE, tuple(config.ranges)),
            FieldDef("notes"),
        ]),
        ABILITIES.kind: RowTemplate(ABILITIES, [
            FieldDef("name", placeholder="Ability name"),
            FieldDef("cost.amount", FieldKind.NUMBER, label="Cost"),
            FieldDef("cost.pool", FieldKind.CHOICE, stats, label="Pool"),
            FieldDef("description"),
        ]),
    }


def scalar_fields(config: SheetConfig) -> list[tuple[str, FieldDef]]:
    """(path, definition) of every non-collection field on the sheet."""
    return [
        ("name", FieldDef("name", label="Name")),
        ("data.descriptor", FieldDef("descriptor")),
        ("data.characterType", FieldDef(
            "characterType", FieldKind.CHOICE, tuple(t.abbrev for t in config.types), label="Type",
        )),
        ("data.focus", FieldDef("focus")),
        ("data.tier", FieldDef("tier", FieldKind.NUMBER)),
        ("data.effort", FieldDef("effort", FieldKind.NUMBER)),
        ("data.xp", FieldDef("xp", FieldKind.NUMBER, label="XP")),
    ]


class CharacterSheet(QWidget):
    """Form editing one character document.

    Signals
    -------
    submitted(object)
        A submission was applied.  Payload is the ``SubmissionResult``.
    submission_failed(str)
        A submission failed.  Payload is the error message.
    """

    submitted = Signal(object)
    submission_failed = Signal(str)

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
        self._config = config
        self._bus = EventBus.instance()
        self._dispatcher = ControlDispatcher()
        self._scalars: dict[str, RowField] = {}
        self._tables: dict[str, CollectionTable] = {}
        self._pending: list[SubmissionBridge] = []

        self._setup_ui()

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------

    def _setup_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        body = QWidget()
        body_layout = QVBoxLayout(body)
        body_layout.setContentsMargins(8, 8, 8, 8)
        body_layout.setSpacing(8)

        identity = QGroupBox("Character")
        form = QFormLayout(identity)
        for path, field_def in scalar_fields(self._config):
            fw = RowField(field_def, path=path)
            form.addRow(field_def.header, fw)
            self._scalars[path] = fw
        self._damage_label = QLabel("")
        self._damage_label.setWordWrap(True)
        self._damage_label.setStyleSheet("color: #888; font-size: 11px;")
        form.addRow("Damage", self._damage_label)
        body_layout.addWidget(identity)

        templates = default_row_templates(self._config)
        for spec in self._sync.specs:
            table = CollectionTable(spec, templates.get(spec.kind), self._dispatcher)
            table.row_created.connect(lambda _row, kind=spec.kind: self._bus.row_created.emit(kind))
            table.row_deleted.connect(lambda name, kind=spec.kind: self._bus.row_deleted.emit(kind, name))
            table.commit_requested.connect(self.submit)
            body_layout.addWidget(table)
            self._tables[spec.kind] = table

        body_layout.addStretch()
        scroll.setWidget(body)
        outer.addWidget(scroll, 1)

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    @property
    def document_id(self) -> str:
        return self._document_id

    def table(self, kind: str) -> CollectionTable:
        return self._tables[kind]

    def scalar(self, path: str) -> RowField:
        return self._scalars[path]

    def load_document(self, document: dict[str, Any]) -> None:
        """Render *document*: scalar fields and one row per entity."""
        for path, fw in self._scalars.items():
            fw.set_value(get_path(document, path))
        for spec in self._sync.specs:
            self._tables[spec.kind].load_collection(get_path(document, spec.path) or {})

        self._show_summary(document)

    def _show_summary(self, document: dict[str, Any]) -> None:
        sheet = prepare_sheet_data(document, self._config)
        self._damage_label.setText(sheet["damage_track_description"])
        ability_table = self._tables.get(ABILITIES.kind)
        if ability_table is not None:
            ability_table.set_title(sheet["abilities_name"])

    def form_data(self) -> dict[str, Any]:
        """The flat submission: dotted path -> value."""
        data: dict[str, Any] = {path: fw.get_value() for path, fw in self._scalars.items()}
        for table in self._tables.values():
            data.update(table.form_data())
        return data

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self) -> None:
        """Queue the current form state for the document store."""
        # Pending name edits must be rebound before paths are read.
        for table in self._tables.values():
            for row in table.rows():
                row.rebind()

        data = self.form_data()
        bridge = SubmissionBridge(self)
        bridge.finished.connect(lambda result: self._on_submitted(bridge, result, data))
        bridge.failed.connect(lambda message: self._on_failed(bridge, message))
        self._pending.append(bridge)

        self._bus.submission_started.emit(self._document_id)
        try:
            bridge.watch(self._sync.submit(self._document_id, data))
        except RuntimeError as exc:
            self._on_failed(bridge, str(exc))

    def _on_submitted(
        self, bridge: SubmissionBridge, result: SubmissionResult, submitted: dict[str, Any],
    ) -> None:
        self._release(bridge)
        summary = result.report.format_human()
        self._refresh_from(result.document, submitted)
        self._bus.submission_finished.emit(result.document_id, summary)
        self._bus.status_message.emit(f"Saved: {summary}")
        self.submitted.emit(result)

    def _refresh_from(self, document: dict[str, Any], submitted: dict[str, Any]) -> None:
        """Bring unchanged inputs up to date with the saved *document*.

        Anything edited after *submitted* was collected, and rows that
        were never named, keep what the user typed.
        """
        for path, fw in self._scalars.items():
            if path in submitted and submitted[path] == fw.get_value():
                fw.set_value(get_path(document, path))
        for spec in self._sync.specs:
            self._tables[spec.kind].refresh_rows(get_path(document, spec.path) or {}, submitted)
        self._show_summary(document)

    def _on_failed(self, bridge: SubmissionBridge, message: str) -> None:
        self._release(bridge)
        logger.error("Saving '%s' failed: %s", self._document_id, message)
        self._bus.error_occurred.emit(f"Could not save the sheet: {message}")
        self.submission_failed.emit(message)

    def _release(self, bridge: SubmissionBridge) -> None:
        if bridge in self._pending:
            self._pending.remove(bridge)
        bridge.deleteLater()

    @property
    def has_pending_submissions(self) -> bool:
        return bool(self._pending)
