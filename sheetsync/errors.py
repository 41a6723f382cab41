"""
sheetsync/errors.py -- Exception types raised by the synchronization core.
"""

from __future__ import annotations

from typing import Any


class SheetSyncError(Exception):
    """Base class for all sheetsync errors."""


class ConfigurationError(SheetSyncError):
    """A table, row or configuration file is structurally unusable.

    Raised, for example, when a row is requested from a table that has no
    row template.  Fatal to the one operation; existing rows are untouched.
    """


class MergeValidationError(SheetSyncError, ValueError):
    """A submission contains rows the strict merge policy rejects."""

    def __init__(self, issues: list[Any]):
        self.issues = list(issues)
        lines = [f"{len(self.issues)} invalid row(s) in submission:"]
        for issue in self.issues:
            lines.append(f"  - {issue.message}")
        super().__init__("\n".join(lines))


class DocumentStoreError(SheetSyncError):
    """The document store could not read, validate or write a document."""


class DocumentNotFoundError(DocumentStoreError, KeyError):
    """No document exists under the requested id."""

    def __str__(self) -> str:
        return Exception.__str__(self)
