"""
Tests for sheetsync/merger.py -- name keying, deletion sentinels, policies.
"""

import pytest

from sheetsync.errors import MergeValidationError
from sheetsync.form_data import expand_object
from sheetsync.merger import (
    IssueKind,
    KeyedCollectionMerger,
    MergePolicy,
    MergeReport,
    deletion_sentinels,
    key_collection,
)
from sheetsync.schema import ABILITIES, SKILLS, WEAPONS


def _skill(name, stat="Speed"):
    return {"name": name, "stat": stat, "inability": False, "trained": True, "specialized": False}


# ==================================================================
# key_collection
# ==================================================================


class TestKeyCollection:
    def test_keys_rows_by_trimmed_name(self):
        rows = {"0": _skill("  Climbing "), "1": _skill("Lore", "Intellect")}
        keyed = key_collection(rows, SKILLS)
        assert set(keyed) == {"Climbing", "Lore"}
        assert keyed["Lore"]["stat"] == "Intellect"

    def test_empty_names_are_dropped_and_reported(self):
        report = MergeReport()
        rows = {"0": _skill("   "), "1": _skill("Lore"), "2": {"stat": "Might"}}
        keyed = key_collection(rows, SKILLS, report=report)
        assert list(keyed) == ["Lore"]
        assert [i.row for i in report.dropped_rows] == ["0", "2"]

    def test_duplicate_names_last_row_wins(self):
        # Current behavior: the later row silently supersedes the earlier
        # one.  Recorded in the report, not rejected.
        report = MergeReport()
        rows = {"0": _skill("X", "Might"), "1": _skill("X", "Speed")}
        keyed = key_collection(rows, SKILLS, report=report)
        assert list(keyed) == ["X"]
        assert keyed["X"]["stat"] == "Speed"
        assert report.duplicate_keys[0].key == "X"

    def test_numeric_row_indexes_are_ordered_numerically(self):
        rows = {"10": _skill("X", "Intellect"), "2": _skill("X", "Might")}
        keyed = key_collection(rows, SKILLS)
        assert keyed["X"]["stat"] == "Intellect"

    def test_non_string_name_counts_as_empty(self):
        keyed = key_collection({"0": {"name": 5}}, SKILLS)
        assert keyed == {}

    def test_strict_policy_rejects_every_ambiguous_row(self):
        rows = {"0": _skill(""), "1": _skill("X"), "2": _skill("X")}
        with pytest.raises(MergeValidationError) as excinfo:
            key_collection(rows, SKILLS, MergePolicy.STRICT)
        kinds = [i.kind for i in excinfo.value.issues]
        assert kinds == [IssueKind.EMPTY_NAME, IssueKind.DUPLICATE_NAME]

    def test_non_dict_rows_become_empty_map(self):
        assert key_collection(None, SKILLS) == {}
        assert key_collection("garbage", SKILLS) == {}


class TestDeletionSentinels:
    def test_absent_current_keys_get_sentinels(self):
        sentinels = deletion_sentinels({"B": {}}, ["A", "B"])
        assert sentinels == {"-=A": None}

    def test_empty_current_keys_are_skipped(self):
        assert deletion_sentinels({}, ["", "A"]) == {"-=A": None}

    def test_keys_that_never_existed_are_not_deleted(self):
        assert deletion_sentinels({"New": {}}, []) == {}


# ==================================================================
# KeyedCollectionMerger
# ==================================================================


class TestKeyedCollectionMerger:
    def test_rename_produces_upsert_and_sentinel(self):
        document = {"data": {"skills": {"Climbing": {"name": "Climbing", "stat": "Speed"}}}}
        form = {"data.skills.Climb.name": "Climb", "data.skills.Climb.stat": "Speed"}
        finished, report = KeyedCollectionMerger().merge(expand_object(form), document)

        skills = finished["data.skills"]
        assert skills["Climb"] == {"name": "Climb", "stat": "Speed"}
        assert skills["-=Climbing"] is None
        assert "Climbing" not in skills
        assert report.deletions["data.skills"] == ["Climbing"]

    def test_deleted_row_yields_only_its_sentinel(self):
        document = {"data": {"skills": {"A": _skill("A"), "B": _skill("B")}}}
        form = {f"data.skills.B.{k}": v for k, v in _skill("B").items()}
        finished, _ = KeyedCollectionMerger().merge(expand_object(form), document)
        assert finished["data.skills"] == {"B": _skill("B"), "-=A": None}

    def test_noop_submission_mirrors_current_state(self, sample_document):
        form = {}
        for spec in (SKILLS, WEAPONS, ABILITIES):
            path_parts = spec.path.split(".")
            collection = sample_document
            for part in path_parts:
                collection = collection[part]
            for key, entity in collection.items():
                for role in spec.roles:
                    value = entity
                    for part in role.split("."):
                        value = value[part]
                    form[spec.field_path(key, role)] = value

        finished, report = KeyedCollectionMerger().merge(expand_object(form), sample_document)
        assert finished["data.skills"] == sample_document["data"]["skills"]
        assert finished["data.equipment.weapons"] == sample_document["data"]["equipment"]["weapons"]
        assert finished["data.abilities"] == sample_document["data"]["abilities"]
        assert report.clean
        assert all(not v for v in report.deletions.values())

    def test_missing_collection_deletes_all_current_keys(self, sample_document):
        finished, _ = KeyedCollectionMerger().merge({}, sample_document)
        assert finished["data.skills"] == {"-=Climbing": None, "-=Lore": None}
        assert finished["data.equipment.weapons"] == {"-=Dagger": None}

    def test_document_without_collections(self):
        form = {"data.abilities._row0.name": "Scan", "data.abilities._row0.cost.amount": 2}
        finished, report = KeyedCollectionMerger().merge(expand_object(form), {"data": {}})
        assert finished["data.abilities"] == {"Scan": {"name": "Scan", "cost": {"amount": 2}}}
        assert finished["data.skills"] == {}
        assert report.upserts["data.abilities"] == ["Scan"]

    def test_strict_merge_collects_issues_across_collections(self):
        form = {
            "data.skills.0.name": "",
            "data.abilities.0.name": "Scan",
            "data.abilities.1.name": "Scan",
        }
        merger = KeyedCollectionMerger(policy=MergePolicy.STRICT)
        with pytest.raises(MergeValidationError) as excinfo:
            merger.merge(expand_object(form), {})
        collections = {i.collection for i in excinfo.value.issues}
        assert collections == {"data.skills", "data.abilities"}

    def test_report_summary(self):
        document = {"data": {"skills": {"Old": _skill("Old")}}}
        form = {"data.skills.0.name": "New", "data.skills.1.name": ""}
        _, report = KeyedCollectionMerger().merge(expand_object(form), document)
        summary = report.format_human()
        assert "1 saved" in summary
        assert "1 removed" in summary
        assert "1 unnamed row(s) ignored" in summary
