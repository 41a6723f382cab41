"""
sheetapp/paths.py -- Where character documents live.

Uses platformdirs for the per-user data directory, overridable with the
``--data-dir`` command line option.
"""

from __future__ import annotations

import os

from platformdirs import user_data_dir

_APP_NAME = "CharacterSheetEditor"
_APP_AUTHOR = "SheetSync"


def get_user_data_dir() -> str:
    """Return the platform-appropriate user data directory."""
    path = user_data_dir(_APP_NAME, _APP_AUTHOR)
    os.makedirs(path, exist_ok=True)
    return path


def get_documents_dir(data_dir: str | None = None) -> str:
    """Return the directory holding one JSON file per character."""
    path = os.path.join(data_dir or get_user_data_dir(), "actors")
    os.makedirs(path, exist_ok=True)
    return path
