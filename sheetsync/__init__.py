"""
sheetsync/ -- Form-to-document synchronization core for the character sheet.

Submodules:
    schema          Collection kinds, field roles and submission paths.
    form_data       Flat dotted-path <-> nested dict conversion.
    rebinder        Keeps a row's field paths in step with its current name.
    merger          Keys row-indexed submissions by name, emits deletions.
    assembler       Composes the final patch handed to the document store.
    patch           Patch-merge semantics (upserts and ``-=`` deletions).
    document_store  In-memory and JSON-file document stores.
    synchronizer    Per-document serialized submit pipeline.
    models          Pydantic models for sheet configuration and entities.
    view_model      Rendering data for the sheet (not used by the core).
"""

from sheetsync.errors import (
    ConfigurationError,
    DocumentNotFoundError,
    DocumentStoreError,
    MergeValidationError,
    SheetSyncError,
)
from sheetsync.schema import ABILITIES, DEFAULT_COLLECTIONS, SKILLS, WEAPONS, CollectionSpec

__all__ = [
    "ABILITIES",
    "DEFAULT_COLLECTIONS",
    "SKILLS",
    "WEAPONS",
    "CollectionSpec",
    "ConfigurationError",
    "DocumentNotFoundError",
    "DocumentStoreError",
    "MergeValidationError",
    "SheetSyncError",
]
