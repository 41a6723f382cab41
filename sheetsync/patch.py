"""
sheetsync/patch.py -- Patch-merge semantics used by the document stores.

Rules:

    - dotted keys at the top level of a patch are expanded into nested
      maps (``"data.tier": 2``); keys below the top level are literal, so
      an entity name containing a dot stays one key
    - ``"-=key": None`` removes ``key`` from the map at that level;
      deletions at a level are applied before the upserts at that level
    - a dict value merges into an existing dict value
    - anything else replaces the existing value

Applying the same patch twice gives the same document.
"""

from __future__ import annotations

import copy
from typing import Any

from sheetsync.assembler import DOCUMENT_ID_KEY
from sheetsync.form_data import DELETION_PREFIX, expand_object


def merge_into(target: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Merge *patch* into *target* in place and return *target*."""
    for key in patch:
        if key.startswith(DELETION_PREFIX):
            target.pop(key[len(DELETION_PREFIX):], None)

    for key, value in patch.items():
        if key.startswith(DELETION_PREFIX):
            continue
        existing = target.get(key)
        if isinstance(value, dict) and isinstance(existing, dict):
            merge_into(existing, value)
        elif isinstance(value, dict):
            target[key] = merge_into({}, value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def expand_patch(patch: dict[str, Any]) -> dict[str, Any]:
    """Expand the top-level dotted keys of *patch*, dropping ``_id``."""
    body = {k: v for k, v in patch.items() if k != DOCUMENT_ID_KEY}
    return expand_object(body)


def apply_patch(document: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *document* with *patch* applied.

    The ``_id`` entry of the patch identifies the document and is not
    written into it.
    """
    return merge_into(copy.deepcopy(document), expand_patch(patch))
