"""
sheetsync/synchronizer.py -- Form submission pipeline, serialized per document.

A submission runs:

    expand_object -> KeyedCollectionMerger -> assemble_patch -> store.apply

Deletion sentinels are computed from the document's *current* keys, so a
submission must never compute them from a state that another in-flight
submission is about to change.  Each document therefore gets its own
single-worker queue, and the read / compute / write of one submission
runs under that document's store lock as one unit.  Submissions for
different documents use different queues and locks, so they proceed
independently.  A queue is retired as soon as it has no pending work, so
idle documents hold no threads.

Usage::

    sync = SheetSynchronizer(store)
    future = sync.submit("pc-001", sheet.form_data())
    result = future.result()      # SubmissionResult
    result.report.format_human()  # "2 saved, 1 removed"
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from sheetsync.assembler import assemble_patch
from sheetsync.document_store import DocumentStore
from sheetsync.form_data import expand_object
from sheetsync.merger import KeyedCollectionMerger, MergePolicy, MergeReport
from sheetsync.schema import DEFAULT_COLLECTIONS, CollectionSpec

logger = logging.getLogger(__name__)


@dataclass
class _DocumentQueue:
    executor: ThreadPoolExecutor
    pending: int = 0


@dataclass
class SubmissionResult:
    """Outcome of one applied submission."""
    document_id: str
    patch: dict[str, Any]
    report: MergeReport
    document: dict[str, Any] = field(default_factory=dict)


class SheetSynchronizer:
    """Turns flat form submissions into applied document patches."""

    def __init__(
        self,
        store: DocumentStore,
        specs: tuple[CollectionSpec, ...] = DEFAULT_COLLECTIONS,
        policy: MergePolicy = MergePolicy.LENIENT,
    ):
        self._store = store
        self._specs = specs
        self._merger = KeyedCollectionMerger(specs, policy)
        self._queues: dict[str, _DocumentQueue] = {}
        self._queues_lock = threading.Lock()
        self._closed = False

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def specs(self) -> tuple[CollectionSpec, ...]:
        return self._specs

    def build_patch(
        self,
        document_id: str,
        document: dict[str, Any],
        raw_form: dict[str, Any],
    ) -> tuple[dict[str, Any], MergeReport]:
        """Compute the patch for *raw_form* against *document*, without applying it."""
        expanded = expand_object(raw_form)
        finished, report = self._merger.merge(expanded, document)
        patch = assemble_patch(document_id, raw_form, finished, self._specs)
        return patch, report

    def submit_now(self, document_id: str, raw_form: dict[str, Any]) -> SubmissionResult:
        """Run one submission synchronously on the calling thread."""
        with self._store.lock_for(document_id):
            current = self._store.get(document_id)
            patch, report = self.build_patch(document_id, current, raw_form)
            updated = self._store.apply(patch)
        logger.info("Submitted document '%s': %s", document_id, report.format_human())
        return SubmissionResult(document_id, patch, report, updated)

    def submit(self, document_id: str, raw_form: dict[str, Any]) -> Future:
        """Queue a submission; the future resolves to a ``SubmissionResult``.

        Submissions for the same document run strictly in the order they
        were queued.  Once queued, a submission cannot be cancelled.
        """
        raw_form = dict(raw_form)
        with self._queues_lock:
            if self._closed:
                raise RuntimeError("SheetSynchronizer has been shut down")
            queue = self._queues.get(document_id)
            if queue is None:
                queue = self._queues[document_id] = _DocumentQueue(
                    ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"submit-{document_id}")
                )
            queue.pending += 1
            return queue.executor.submit(self._run, document_id, raw_form)

    def _run(self, document_id: str, raw_form: dict[str, Any]) -> SubmissionResult:
        try:
            return self.submit_now(document_id, raw_form)
        except Exception:
            logger.exception("Submission for document '%s' failed", document_id)
            raise
        finally:
            self._retire_if_idle(document_id)

    def _retire_if_idle(self, document_id: str) -> None:
        with self._queues_lock:
            queue = self._queues.get(document_id)
            if queue is None:
                return
            queue.pending -= 1
            if queue.pending == 0:
                # Runs on the queue's own worker; it exits once this task returns.
                del self._queues[document_id]
                queue.executor.shutdown(wait=False)

    @property
    def active_documents(self) -> list[str]:
        """IDs of documents with submissions queued or running."""
        with self._queues_lock:
            return sorted(self._queues)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting submissions and drain every queue."""
        with self._queues_lock:
            self._closed = True
            queues = list(self._queues.values())
            self._queues.clear()
        for queue in queues:
            queue.executor.shutdown(wait=wait)
