"""
sheetsync/view_model.py -- Rendering data for the character sheet.

Combines a persisted document with the ``SheetConfig`` vocabulary into
the structure the sheet widgets display: option lists with the current
choice marked ``checked``, the damage track with its description, and so
on.  Nothing in the synchronization path imports this module.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from sheetsync.form_data import get_path
from sheetsync.models import Ability, SheetConfig, Skill, Weapon

logger = logging.getLogger(__name__)

DEFAULT_ABILITIES_NAME = "Abilities"


def _options(labels: list[str], current: Any) -> list[dict[str, Any]]:
    return [{"label": label, "checked": label == current} for label in labels]


def _normalise(model: type[BaseModel], key: str, raw: Any) -> dict[str, Any]:
    """Validate one entity, falling back to the raw dict if it is malformed."""
    data = {k: v for k, v in raw.items() if v is not None} if isinstance(raw, dict) else {}
    data.setdefault("name", key)
    try:
        return model.model_validate(data).model_dump(by_alias=True)
    except ValidationError:
        logger.warning("Entity '%s' does not match %s; rendering as-is", key, model.__name__)
        return dict(data)


def prepare_sheet_data(document: dict[str, Any], config: SheetConfig) -> dict[str, Any]:
    """Build the data the sheet renders from *document*."""
    data = document.get("data", {}) or {}
    actor_type = data.get("characterType") or ""

    sheet: dict[str, Any] = {
        "name": document.get("name", ""),
        "stats": list(config.stats),
        "ranges": list(config.ranges),
        "skill_levels": list(config.skill_levels),
        "weapon_types": list(config.weapon_types),
        "weight_classes": list(config.weight_classes),
    }

    sheet["types"] = [
        {**t.model_dump(), "is_actor_type": t.abbrev == actor_type}
        for t in config.types
    ]

    sheet["advances"] = [
        {"name": key, "label": config.advances.get(key, key), "checked": bool(value)}
        for key, value in (data.get("advances") or {}).items()
    ]

    current_track = data.get("damageTrack", 0)
    sheet["damage_track"] = [
        {**level.model_dump(), "checked": level.index == current_track}
        for level in config.damage_track
    ]
    checked = [level for level in sheet["damage_track"] if level["checked"]]
    sheet["damage_track_description"] = checked[0]["description"] if checked else ""

    sheet["recoveries"] = [
        {"key": key, "label": config.recoveries.get(key, key), "checked": bool(value)}
        for key, value in (data.get("recoveries") or {}).items()
    ]

    skills = {}
    for key, raw in (get_path(document, "data.skills") or {}).items():
        skill = _normalise(Skill, key, raw)
        skill["stats"] = _options(config.stats, skill.get("stat"))
        skills[key] = skill
    sheet["skills"] = skills

    weapons = {}
    for key, raw in (get_path(document, "data.equipment.weapons") or {}).items():
        weapon = _normalise(Weapon, key, raw)
        weapon["ranges"] = _options(config.ranges, weapon.get("range"))
        weapon["weight_classes"] = _options(config.weight_classes, weapon.get("weightClass"))
        weapon["weapon_types"] = _options(config.weapon_types, weapon.get("weaponType"))
        weapons[key] = weapon
    sheet["weapons"] = weapons

    sheet["abilities_name"] = (
        config.type_powers.get(actor_type, DEFAULT_ABILITIES_NAME) if actor_type
        else DEFAULT_ABILITIES_NAME
    )
    abilities = {}
    for key, raw in (get_path(document, "data.abilities") or {}).items():
        ability = _normalise(Ability, key, raw)
        cost = ability.setdefault("cost", {})
        cost["stats"] = _options(config.stats, cost.get("pool"))
        abilities[key] = ability
    sheet["abilities"] = abilities

    return sheet
