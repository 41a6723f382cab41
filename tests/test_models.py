"""
Tests for sheetsync/models.py and sheetsync/view_model.py.
"""

import json

import pytest

from sheetsync.errors import ConfigurationError
from sheetsync.models import Ability, SheetConfig, Weapon, load_sheet_config
from sheetsync.view_model import prepare_sheet_data


# ==================================================================
# SheetConfig
# ==================================================================


class TestLoadSheetConfig:
    def test_bundled_config(self, sheet_config):
        assert sheet_config.stats == ["Might", "Speed", "Intellect"]
        assert [t.abbrev for t in sheet_config.types] == ["glaive", "nano", "jack"]
        assert sheet_config.type_powers["nano"] == "Esoteries"
        assert [lvl.label for lvl in sheet_config.damage_track] == [
            "Hale", "Impaired", "Debilitated", "Dead",
        ]

    def test_config_is_frozen(self, sheet_config):
        with pytest.raises(Exception):
            sheet_config.stats = []

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_sheet_config(tmp_path / "nope.json")

    def test_not_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("stats: [Might]", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_sheet_config(path)

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"stats": "Might"}), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid sheet configuration"):
            load_sheet_config(path)

    def test_partial_config_uses_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"stats": ["Body"]}), encoding="utf-8")
        config = load_sheet_config(path)
        assert config.stats == ["Body"]
        assert config.ranges == []


# ==================================================================
# Entity models
# ==================================================================


class TestEntityModels:
    def test_weapon_aliases(self):
        weapon = Weapon.model_validate({"name": "Axe", "weightClass": "Heavy", "weaponType": "Bladed"})
        assert weapon.weight_class == "Heavy"
        assert weapon.model_dump(by_alias=True)["weaponType"] == "Bladed"

    def test_extra_keys_survive(self):
        ability = Ability.model_validate({"name": "Flash", "tier": 2})
        dumped = ability.model_dump(by_alias=True)
        assert dumped["tier"] == 2
        assert dumped["cost"] == {"amount": None, "pool": ""}


# ==================================================================
# View model
# ==================================================================


class TestPrepareSheetData:
    def test_type_powers_title(self, sample_document, sheet_config):
        sheet = prepare_sheet_data(sample_document, sheet_config)
        assert sheet["abilities_name"] == "Esoteries"
        nano = [t for t in sheet["types"] if t["is_actor_type"]]
        assert [t["abbrev"] for t in nano] == ["nano"]

    def test_no_type_uses_generic_title(self, sheet_config):
        sheet = prepare_sheet_data({"name": "Nobody", "data": {}}, sheet_config)
        assert sheet["abilities_name"] == "Abilities"
        assert sheet["skills"] == {}

    def test_damage_track(self, sample_document, sheet_config):
        sheet = prepare_sheet_data(sample_document, sheet_config)
        checked = [lvl["label"] for lvl in sheet["damage_track"] if lvl["checked"]]
        assert checked == ["Impaired"]
        assert sheet["damage_track_description"].startswith("Combat actions cost")

    def test_damage_track_defaults_to_hale(self, sheet_config):
        sheet = prepare_sheet_data({"data": {}}, sheet_config)
        assert sheet["damage_track"][0]["checked"] is True

    def test_option_lists_mark_current_choice(self, sample_document, sheet_config):
        sheet = prepare_sheet_data(sample_document, sheet_config)
        stats = sheet["skills"]["Climbing"]["stats"]
        assert [o["label"] for o in stats if o["checked"]] == ["Speed"]

        dagger = sheet["weapons"]["Dagger"]
        assert dagger["weightClass"] == "Light"
        assert [o["label"] for o in dagger["weight_classes"] if o["checked"]] == ["Light"]
        assert [o["label"] for o in dagger["ranges"] if o["checked"]] == ["Immediate"]

        cost = sheet["abilities"]["Onslaught"]["cost"]
        assert [o["label"] for o in cost["stats"] if o["checked"]] == ["Intellect"]

    def test_advances_and_recoveries_use_config_labels(self, sample_document, sheet_config):
        sheet = prepare_sheet_data(sample_document, sheet_config)
        assert sheet["advances"][0] == {"name": "stats", "label": "+4 to stat pools", "checked": True}
        assert sheet["recoveries"][0]["label"] == "1 Action"

    def test_entity_name_defaults_to_key(self, sheet_config):
        document = {"data": {"skills": {"Swim": {"stat": None}}}}
        skill = prepare_sheet_data(document, sheet_config)["skills"]["Swim"]
        assert skill["name"] == "Swim"
        assert skill["stat"] == ""

    def test_malformed_entity_rendered_as_is(self, sheet_config):
        document = {"data": {"skills": {"Odd": {"trained": "sometimes"}}}}
        skill = prepare_sheet_data(document, sheet_config)["skills"]["Odd"]
        assert skill["trained"] == "sometimes"
        assert skill["name"] == "Odd"

    def test_empty_config(self, sample_document):
        sheet = prepare_sheet_data(sample_document, SheetConfig())
        assert sheet["stats"] == []
        assert sheet["abilities_name"] == "Abilities"
