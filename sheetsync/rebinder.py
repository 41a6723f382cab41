"""
sheetsync/rebinder.py -- Field identity rebinding for collection rows.

When a row's name changes, every field in the row must be re-addressed
under the new key before the next submit, otherwise its value would be
filed under the old key.  Fields are matched by their role tag, so the
visual order of the row's widgets is irrelevant.

The functions here are UI-agnostic: a "field" is anything with a ``role``
attribute and a writable ``path`` attribute.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from sheetsync.errors import ConfigurationError
from sheetsync.schema import CollectionSpec, key_segment

logger = logging.getLogger(__name__)

_TRANSIENT_PREFIX = "_row"


class BoundField(Protocol):
    role: str
    path: str


def transient_key(index: int) -> str:
    """Key segment for a row that has no name yet."""
    return f"{_TRANSIENT_PREFIX}{index}"


def is_transient_key(segment: str) -> bool:
    return segment.startswith(_TRANSIENT_PREFIX) and segment[len(_TRANSIENT_PREFIX):].isdigit()


def bind_fields(fields: Iterable[BoundField], spec: CollectionSpec, segment: str) -> None:
    """Address every field under *segment*, by role."""
    for field in fields:
        if not spec.has_role(field.role):
            raise ConfigurationError(
                f"Field role '{field.role}' is not part of the '{spec.kind}' row schema"
            )
        field.path = spec.field_path(segment, field.role)


def rebind_fields(
    fields: Iterable[BoundField],
    spec: CollectionSpec,
    new_name: str,
    old_name: str | None = None,
) -> bool:
    """Rewrite the paths of *fields* so they land under *new_name*.

    Returns ``False`` without touching anything when the new name is
    empty after trimming or is the same as *old_name*.  An empty name
    must never produce an empty key segment.
    """
    name = (new_name or "").strip()
    if not name:
        return False
    if old_name is not None and old_name.strip() == name:
        return False

    fields = list(fields)
    segment = key_segment(name)
    bind_fields(fields, spec, segment)
    logger.debug("Rebound %d %s field(s) to key '%s'", len(fields), spec.kind, segment)
    return True
