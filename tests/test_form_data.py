"""
Tests for sheetsync/form_data.py -- expand/flatten, dotted lookup, sentinels.
"""

from sheetsync.form_data import (
    deletion_key,
    expand_object,
    flatten_object,
    get_path,
    is_deletion_key,
)


class TestExpandObject:
    def test_nests_dotted_paths(self):
        flat = {
            "name": "Ilsa",
            "data.skills.0.name": "Climbing",
            "data.skills.0.stat": "Speed",
            "data.abilities.1.cost.pool": "Might",
        }
        nested = expand_object(flat)
        assert nested["name"] == "Ilsa"
        assert nested["data"]["skills"]["0"] == {"name": "Climbing", "stat": "Speed"}
        assert nested["data"]["abilities"]["1"]["cost"]["pool"] == "Might"

    def test_later_path_replaces_scalar_on_the_way(self):
        nested = expand_object({"data.tier": 1, "data.tier.bonus": 2})
        assert nested == {"data": {"tier": {"bonus": 2}}}

    def test_empty_input(self):
        assert expand_object({}) == {}


class TestFlattenObject:
    def test_flattens_nested_dicts(self):
        nested = {"data": {"skills": {"Lore": {"stat": "Intellect"}}, "tier": 2}}
        assert flatten_object(nested) == {
            "data.skills.Lore.stat": "Intellect",
            "data.tier": 2,
        }

    def test_keeps_empty_dicts_as_leaves(self):
        nested = {"data": {"skills": {}, "tier": 1}}
        flat = flatten_object(nested)
        assert flat["data.skills"] == {}
        assert expand_object(flat) == nested


class TestGetPath:
    def test_returns_nested_value(self):
        obj = {"data": {"equipment": {"weapons": {"Dagger": {}}}}}
        assert get_path(obj, "data.equipment.weapons") == {"Dagger": {}}

    def test_missing_returns_default(self):
        assert get_path({"data": {}}, "data.skills", default={}) == {}

    def test_stops_at_scalars(self):
        assert get_path({"data": 3}, "data.skills") is None

    def test_none_value_is_returned_not_default(self):
        assert get_path({"a": None}, "a", default="x") is None


class TestDeletionKeys:
    def test_deletion_key(self):
        assert deletion_key("Climbing") == "-=Climbing"
        assert is_deletion_key("-=Climbing")
        assert not is_deletion_key("Climbing")
