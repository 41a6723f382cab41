"""
sheetsync/document_store.py -- Document stores with patch-merge updates.

A document store owns the persisted character documents.  ``update()``
applies a patch asynchronously and returns a ``concurrent.futures.Future``
so callers on the UI thread never block on storage.  ``apply()`` is the
synchronous form used by the synchronizer, which already runs inside a
per-document serialized unit.

Two implementations:

    MemoryDocumentStore   dict-backed, for tests and previews
    JsonDocumentStore     one ``<id>.json`` file per document, written
                          atomically and validated with jsonschema

Usage::

    store = JsonDocumentStore("/path/to/actors")
    doc = store.get("pc-001")
    future = store.update({"_id": "pc-001", "data.tier": 2})
    future.result()
"""

from __future__ import annotations

import copy
import json
import logging
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any

import jsonschema

from sheetsync.assembler import DOCUMENT_ID_KEY
from sheetsync.errors import DocumentNotFoundError, DocumentStoreError
from sheetsync.patch import apply_patch

logger = logging.getLogger(__name__)

_MAP = {"type": "object"}

# Shape every stored document must keep; the managed collections must
# stay name-keyed maps for deletion sentinels to make sense.
DOCUMENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "data": {
            "type": "object",
            "properties": {
                "skills": _MAP,
                "abilities": _MAP,
                "equipment": {
                    "type": "object",
                    "properties": {"weapons": _MAP},
                },
            },
        },
    },
}

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_document(document: Any) -> None:
    """Raise ``DocumentStoreError`` if *document* breaks ``DOCUMENT_SCHEMA``."""
    try:
        jsonschema.validate(document, DOCUMENT_SCHEMA)
    except jsonschema.ValidationError as exc:
        location = ".".join(str(p) for p in exc.absolute_path) or "(root)"
        raise DocumentStoreError(f"Invalid document at {location}: {exc.message}") from exc


class DocumentStore(ABC):
    """Base class: asynchronous ``update`` on top of a synchronous ``apply``."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._document_locks: dict[str, threading.RLock] = {}
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="doc-store")

    def lock_for(self, document_id: str) -> threading.RLock:
        """Reentrant lock held while a patch to *document_id* is read, computed and written.

        Each document has its own lock, so work on one document never
        waits for another.
        """
        with self._lock:
            lock = self._document_locks.get(document_id)
            if lock is None:
                lock = self._document_locks[document_id] = threading.RLock()
            return lock

    @abstractmethod
    def get(self, document_id: str) -> dict[str, Any]:
        """Return a copy of the persisted document."""

    @abstractmethod
    def _write(self, document_id: str, document: dict[str, Any]) -> None:
        """Persist *document* under *document_id*."""

    def apply(self, patch: dict[str, Any]) -> dict[str, Any]:
        """Apply *patch* synchronously and return the resulting document."""
        document_id = patch.get(DOCUMENT_ID_KEY)
        if not document_id:
            raise DocumentStoreError("Patch has no document id")
        with self.lock_for(document_id):
            current = self.get(document_id)
            updated = apply_patch(current, patch)
            validate_document(updated)
            self._write(document_id, updated)
        logger.debug("Applied patch to document '%s'", document_id)
        return copy.deepcopy(updated)

    def update(self, patch: dict[str, Any]) -> Future:
        """Apply *patch* in the background.

        Errors are not raised here; they are set on the returned future.
        """
        return self._executor.submit(self.apply, patch)

    def close(self) -> None:
        self._executor.shutdown(wait=True)


class MemoryDocumentStore(DocumentStore):
    """Keeps documents in a dict, keyed by id."""

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None):
        super().__init__()
        self._documents: dict[str, dict[str, Any]] = {}
        for document_id, document in (documents or {}).items():
            validate_document(document)
            self._documents[document_id] = copy.deepcopy(document)

    def get(self, document_id: str) -> dict[str, Any]:
        with self._lock:
            if document_id not in self._documents:
                raise DocumentNotFoundError(f"No document with id '{document_id}'")
            return copy.deepcopy(self._documents[document_id])

    def put(self, document_id: str, document: dict[str, Any]) -> None:
        validate_document(document)
        with self.lock_for(document_id):
            self._write(document_id, document)

    def _write(self, document_id: str, document: dict[str, Any]) -> None:
        with self._lock:
            self._documents[document_id] = copy.deepcopy(document)


class JsonDocumentStore(DocumentStore):
    """Stores each document as ``<root>/<id>.json``.

    Parameters
    ----------
    root : str or pathlib.Path
        Directory holding the document files.  Created if missing.
    """

    def __init__(self, root: str | os.PathLike):
        super().__init__()
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, document_id: str) -> Path:
        if not _SAFE_ID.match(document_id or ""):
            raise DocumentStoreError(f"Invalid document id '{document_id}'")
        return self.root / f"{document_id}.json"

    def list_ids(self) -> list[str]:
        return sorted(p.stem for p in self.root.glob("*.json"))

    def get(self, document_id: str) -> dict[str, Any]:
        path = self._path_for(document_id)
        with self.lock_for(document_id):
            if not path.exists():
                raise DocumentNotFoundError(f"No document with id '{document_id}'")
            try:
                with open(path, "r", encoding="utf-8") as fh:
                    document = json.load(fh)
            except (OSError, json.JSONDecodeError) as exc:
                raise DocumentStoreError(
                    f"Document '{document_id}' could not be read. It may be corrupted."
                ) from exc
        validate_document(document)
        return document

    def put(self, document_id: str, document: dict[str, Any]) -> None:
        """Create or overwrite a whole document."""
        validate_document(document)
        with self.lock_for(document_id):
            self._write(document_id, document)

    def _write(self, document_id: str, document: dict[str, Any]) -> None:
        path = self._path_for(document_id)
        # Temp file in the same directory, then os.replace(), so readers
        # never see a partial file.
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(self.root), suffix=".tmp")
        except OSError as exc:
            raise DocumentStoreError(f"Cannot write document '{document_id}': {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            if isinstance(exc, OSError):
                raise DocumentStoreError(f"Cannot write document '{document_id}': {exc}") from exc
            raise
