"""
sheetsync/models.py -- Pydantic v2 models for sheet configuration and entities.

``SheetConfig`` holds the game vocabulary (stat names, ranges, damage
track...).  It is opaque to the synchronization core and only consumed by
the view model and the UI.

The entity models normalise persisted collection entries for rendering.
They allow extra keys so that fields added by other tools survive a
round trip.

Usage::

    from sheetsync.models import load_sheet_config

    config = load_sheet_config()
    config.stats   # ["Might", "Speed", "Intellect"]
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sheetsync.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "data" / "sheet_config.json"


# ------------------------------------------------------------------
# Configuration
# ------------------------------------------------------------------

class ActorType(BaseModel):
    abbrev: str
    label: str


class DamageTrackLevel(BaseModel):
    index: int
    label: str
    description: str = ""


class SheetConfig(BaseModel):
    """Static, read-only vocabulary of the character sheet."""

    model_config = ConfigDict(frozen=True)

    stats: list[str] = Field(default_factory=list)
    ranges: list[str] = Field(default_factory=list)
    skill_levels: list[str] = Field(default_factory=list)
    weapon_types: list[str] = Field(default_factory=list)
    weight_classes: list[str] = Field(default_factory=list)
    types: list[ActorType] = Field(default_factory=list)
    type_powers: dict[str, str] = Field(default_factory=dict)
    advances: dict[str, str] = Field(default_factory=dict)
    damage_track: list[DamageTrackLevel] = Field(default_factory=list)
    recoveries: dict[str, str] = Field(default_factory=dict)


def load_sheet_config(path: str | Path | None = None) -> SheetConfig:
    """Load a ``SheetConfig`` from JSON; the bundled file by default.

    Raises
    ------
    ConfigurationError
        If the file is missing, is not JSON, or does not match the model.
    """
    path = Path(path) if path else DEFAULT_CONFIG_PATH
    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read sheet configuration '{path}': {exc}") from exc

    try:
        config = SheetConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid sheet configuration '{path}':\n{exc}") from exc
    logger.debug("Loaded sheet configuration from %s", path)
    return config


# ------------------------------------------------------------------
# Entities
# ------------------------------------------------------------------

class _Entity(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = ""


class Skill(_Entity):
    stat: str = ""
    inability: bool = False
    trained: bool = False
    specialized: bool = False


class Weapon(_Entity):
    weight_class: str = Field(default="", alias="weightClass")
    weapon_type: str = Field(default="", alias="weaponType")
    damage: Optional[Any] = None
    range: str = ""
    notes: str = ""


class AbilityCost(BaseModel):
    model_config = ConfigDict(extra="allow")

    amount: Optional[Any] = None
    pool: str = ""


class Ability(_Entity):
    cost: AbilityCost = Field(default_factory=AbilityCost)
    description: str = ""
