"""
Shared pytest fixtures for the character sheet test suite.

Provides:
    - sample_document: a persisted character with two skills, a weapon
      and an ability
    - memory_store: a MemoryDocumentStore holding sample_document as "pc-001"
    - json_store: a JsonDocumentStore in a temp directory, same content
    - synchronizer: a SheetSynchronizer over memory_store
    - sheet_config: the bundled SheetConfig
"""

import copy
import os
import sys
from pathlib import Path

import pytest

# Widgets are created without a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# ---------------------------------------------------------------------------
# Ensure the packages are importable regardless of where pytest is invoked
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sheetsync.document_store import JsonDocumentStore, MemoryDocumentStore  # noqa: E402
from sheetsync.models import load_sheet_config  # noqa: E402
from sheetsync.synchronizer import SheetSynchronizer  # noqa: E402

DOCUMENT_ID = "pc-001"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_document():
    """Return a character document with every managed collection populated."""
    return {
        "name": "Ilsa Vantor",
        "data": {
            "characterType": "nano",
            "descriptor": "Clever",
            "focus": "Talks to Machines",
            "tier": 1,
            "effort": 1,
            "xp": 3,
            "damageTrack": 1,
            "advances": {"stats": True, "edge": False},
            "recoveries": {"action": True, "ten_min": False},
            "skills": {
                "Climbing": {
                    "name": "Climbing",
                    "stat": "Speed",
                    "inability": False,
                    "trained": True,
                    "specialized": False,
                },
                "Lore": {
                    "name": "Lore",
                    "stat": "Intellect",
                    "inability": False,
                    "trained": True,
                    "specialized": True,
                },
            },
            "equipment": {
                "weapons": {
                    "Dagger": {
                        "name": "Dagger",
                        "weightClass": "Light",
                        "weaponType": "Bladed",
                        "damage": 2,
                        "range": "Immediate",
                        "notes": "",
                    },
                },
            },
            "abilities": {
                "Onslaught": {
                    "name": "Onslaught",
                    "cost": {"amount": 1, "pool": "Intellect"},
                    "description": "Mental attack",
                },
            },
        },
    }


@pytest.fixture
def memory_store(sample_document):
    store = MemoryDocumentStore({DOCUMENT_ID: copy.deepcopy(sample_document)})
    yield store
    store.close()


@pytest.fixture
def json_store(tmp_path, sample_document):
    store = JsonDocumentStore(tmp_path / "actors")
    store.put(DOCUMENT_ID, copy.deepcopy(sample_document))
    yield store
    store.close()


@pytest.fixture
def synchronizer(memory_store):
    sync = SheetSynchronizer(memory_store)
    yield sync
    sync.shutdown(wait=True)


@pytest.fixture
def sheet_config():
    return load_sheet_config()
