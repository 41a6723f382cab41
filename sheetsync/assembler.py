"""
sheetsync/assembler.py -- Builds the patch sent to the document store.

The raw per-row paths of managed collections (``data.skills.0.name``,
...) must not reach the store verbatim: they would upsert entities under
transient row keys next to the name-keyed maps.  They are replaced by the
merger's finished maps; every other raw path passes through untouched.
"""

from __future__ import annotations

from typing import Any

from sheetsync.schema import DEFAULT_COLLECTIONS, CollectionSpec

DOCUMENT_ID_KEY = "_id"


def assemble_patch(
    document_id: str,
    raw_form: dict[str, Any],
    finished: dict[str, dict[str, Any]],
    specs: tuple[CollectionSpec, ...] = DEFAULT_COLLECTIONS,
) -> dict[str, Any]:
    """Compose the final update patch for one submission.

    Parameters
    ----------
    document_id : str
        Identity of the document being updated.
    raw_form : dict
        The flat submission, dotted path -> value.
    finished : dict
        Collection path -> finished map, as produced by the merger.
    specs : tuple[CollectionSpec, ...]
        Managed collections whose raw paths are dropped.
    """
    patch: dict[str, Any] = {DOCUMENT_ID_KEY: document_id}
    for spec in specs:
        patch[spec.path] = dict(finished.get(spec.path, {}))

    for path, value in raw_form.items():
        if path == DOCUMENT_ID_KEY:
            continue
        if any(spec.owns(path) for spec in specs):
            continue
        patch[path] = value
    return patch
