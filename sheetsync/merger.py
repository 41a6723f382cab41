"""
sheetsync/merger.py -- Keyed collection merger.

Turns the row-indexed collections of an expanded form submission into
name-keyed maps, and adds a deletion sentinel (``"-=<key>": None``) for
every key the document currently holds that the submission no longer
contains.

Two conditions in a submission are ambiguous:

    empty name      The row is incomplete.  It cannot be keyed.
    duplicate name  Two rows trim to the same key.

Under ``MergePolicy.LENIENT`` empty rows are dropped and the later of two
duplicate rows wins, each occurrence logged and recorded in the
``MergeReport``.  Under ``MergePolicy.STRICT`` either condition raises
``MergeValidationError`` naming every offending row.

Usage::

    merger = KeyedCollectionMerger()
    finished, report = merger.merge(expand_object(form), document)
    finished["data.skills"]   # {"Climb": {...}, "-=Climbing": None}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from sheetsync.errors import MergeValidationError
from sheetsync.form_data import deletion_key, get_path
from sheetsync.schema import DEFAULT_COLLECTIONS, NAME_ROLE, CollectionSpec

logger = logging.getLogger(__name__)


class MergePolicy(Enum):
    LENIENT = "lenient"
    STRICT = "strict"


class IssueKind(Enum):
    EMPTY_NAME = "empty_name"
    DUPLICATE_NAME = "duplicate_name"


@dataclass
class MergeIssue:
    """One ambiguous row found while keying a collection."""
    collection: str
    row: str
    kind: IssueKind
    message: str
    key: str = ""


@dataclass
class MergeReport:
    """What a merge did, per collection path."""
    issues: list[MergeIssue] = field(default_factory=list)
    upserts: dict[str, list[str]] = field(default_factory=dict)
    deletions: dict[str, list[str]] = field(default_factory=dict)

    @property
    def dropped_rows(self) -> list[MergeIssue]:
        return [i for i in self.issues if i.kind is IssueKind.EMPTY_NAME]

    @property
    def duplicate_keys(self) -> list[MergeIssue]:
        return [i for i in self.issues if i.kind is IssueKind.DUPLICATE_NAME]

    @property
    def clean(self) -> bool:
        return not self.issues

    def format_human(self) -> str:
        """Summary suitable for a status bar or log line."""
        n_up = sum(len(v) for v in self.upserts.values())
        n_del = sum(len(v) for v in self.deletions.values())
        parts = [f"{n_up} saved", f"{n_del} removed"]
        if self.dropped_rows:
            parts.append(f"{len(self.dropped_rows)} unnamed row(s) ignored")
        if self.duplicate_keys:
            keys = sorted({i.key for i in self.duplicate_keys})
            parts.append(f"duplicate name(s) overwritten: {', '.join(keys)}")
        return ", ".join(parts)


def _row_order(rows: dict[str, Any]) -> list[str]:
    """Row keys in submission order; numeric indexes compare as numbers."""
    keys = list(rows.keys())
    if all(str(k).isdigit() for k in keys):
        return sorted(keys, key=int)
    return keys


def _entity_name(entity: Any) -> str:
    if not isinstance(entity, dict):
        return ""
    name = entity.get(NAME_ROLE)
    if not isinstance(name, str):
        return ""
    return name.strip()


def key_collection(
    rows: dict[str, Any] | None,
    spec: CollectionSpec,
    policy: MergePolicy = MergePolicy.LENIENT,
    report: MergeReport | None = None,
) -> dict[str, Any]:
    """Reduce row-indexed entities into a map keyed by trimmed name."""
    report = report if report is not None else MergeReport()
    rows = rows if isinstance(rows, dict) else {}
    keyed: dict[str, Any] = {}
    issues: list[MergeIssue] = []

    for row_key in _row_order(rows):
        entity = rows[row_key]
        name = _entity_name(entity)
        if not name:
            issues.append(MergeIssue(
                collection=spec.path,
                row=str(row_key),
                kind=IssueKind.EMPTY_NAME,
                message=f"{spec.kind} row '{row_key}' has no name",
            ))
            continue
        if name in keyed:
            issues.append(MergeIssue(
                collection=spec.path,
                row=str(row_key),
                kind=IssueKind.DUPLICATE_NAME,
                message=f"{spec.kind} '{name}' appears more than once",
                key=name,
            ))
        keyed[name] = entity

    if issues and policy is MergePolicy.STRICT:
        raise MergeValidationError(issues)
    for issue in issues:
        logger.warning("Ambiguous submission: %s", issue.message)
    report.issues.extend(issues)
    return keyed


def deletion_sentinels(keyed: dict[str, Any], current_keys: Iterable[str]) -> dict[str, None]:
    """Sentinels for every current key absent from *keyed*."""
    return {
        deletion_key(key): None
        for key in current_keys
        if key and key not in keyed
    }


class KeyedCollectionMerger:
    """Produces one finished map (upserts plus deletions) per collection."""

    def __init__(
        self,
        specs: tuple[CollectionSpec, ...] = DEFAULT_COLLECTIONS,
        policy: MergePolicy = MergePolicy.LENIENT,
    ):
        self.specs = specs
        self.policy = policy

    def merge(
        self,
        expanded_form: dict[str, Any],
        document: dict[str, Any],
    ) -> tuple[dict[str, dict[str, Any]], MergeReport]:
        """Merge every managed collection of *expanded_form*.

        Parameters
        ----------
        expanded_form : dict
            Submission after ``expand_object``.
        document : dict
            The document as currently persisted.

        Returns
        -------
        tuple
            ``(finished, report)`` where *finished* maps each collection
            path to its name-keyed map including deletion sentinels.

        Raises
        ------
        MergeValidationError
            Under the strict policy, listing the issues of every
            collection in the submission.
        """
        report = MergeReport()
        finished: dict[str, dict[str, Any]] = {}
        errors: list[MergeIssue] = []

        for spec in self.specs:
            rows = get_path(expanded_form, spec.path, default={})
            try:
                keyed = key_collection(rows, spec, self.policy, report)
            except MergeValidationError as exc:
                errors.extend(exc.issues)
                continue

            current = get_path(document, spec.path, default={})
            current_keys = list(current.keys()) if isinstance(current, dict) else []
            sentinels = deletion_sentinels(keyed, current_keys)

            report.upserts[spec.path] = list(keyed.keys())
            report.deletions[spec.path] = [k for k in current_keys if k and k not in keyed]
            finished[spec.path] = {**keyed, **sentinels}

        if errors:
            raise MergeValidationError(errors)
        return finished, report
