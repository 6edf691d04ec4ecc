"""map, list and set: full values, partial update descriptors and transforms."""

from __future__ import annotations

import pytest

from cqlschema import ErrorCode, SchemaDefinitionError, cql, string, validate
from cqlschema.validation import ValidationMode


def strict_text():
    return cql.text().strict(True)


class TestMap:
    def test_string_value_passes(self):
        assert validate({"name": "true"}, cql.map("", strict_text())).error is None

    def test_boolean_value_fails(self):
        error = validate({"name": True}, cql.map("", strict_text())).error
        assert error is not None
        assert error.first_error.field_path == "name"

    @pytest.mark.parametrize("key", ["plain", "with-dash", "under_score", "x1"])
    def test_word_and_dash_keys_pass(self, key):
        assert validate({key: "v"}, cql.map("text", cql.text())).error is None

    @pytest.mark.parametrize("key", ["has space", "dot.ted", ""])
    def test_other_keys_fail(self, key):
        error = validate({key: "v"}, cql.map("text", cql.text())).error
        assert error.first_error.code is ErrorCode.E2006_UNKNOWN_KEY

    def test_non_mapping_fails(self):
        assert validate(["a"], cql.map("", cql.text())).error is not None

    def test_non_string_key_fails(self):
        outcome = validate({1: "x"}, cql.map("", cql.text()))
        assert outcome.error.first_error.code is ErrorCode.E2004_INVALID_TYPE
        assert outcome.error.first_error.field_path == "1"

    @pytest.mark.parametrize(("key_type", "expected"), [
        ("", "text"),
        (None, "text"),
        ("int", "int"),
        (cql.ascii(), "ascii"),
    ])
    def test_map_type_names_key_and_value(self, key_type, expected):
        assert cql.map(key_type, cql.uuid()).to_cql()["mapType"] == [expected, "uuid"]

    def test_unknown_key_type_name_raises(self):
        with pytest.raises(SchemaDefinitionError) as exc_info:
            cql.map("bogus", cql.text())
        assert exc_info.value.code is ErrorCode.E9100_UNKNOWN_TYPE

    def test_non_cql_value_type_raises(self):
        with pytest.raises(SchemaDefinitionError) as exc_info:
            cql.map("", string())
        assert exc_info.value.code is ErrorCode.E9102_NOT_A_CQL_TYPE

    def test_null_transforms_to_empty_mapping(self):
        meta = cql.map("", cql.text()).to_cql()
        assert meta["serialize"](None) == {}
        assert meta["deserialize"](None) == {}

    def test_value_transforms_are_applied_per_entry(self):
        meta = cql.map("", cql.json()).to_cql()
        stored = meta["serialize"]({"a": {"complex": "object"}, "b": [1]})
        assert stored == {"a": '{"complex":"object"}', "b": "[1]"}
        assert meta["deserialize"](stored) == {"a": {"complex": "object"}, "b": [1]}


class TestList:
    @pytest.mark.parametrize("value", [
        ["", "123", "abc"],
        ["dup", "dup"],
        [],
        {"remove": ["string"]},
        {"append": ["string"]},
        {"append": ["new string"], "remove": ["string"]},
        {"prepend": ["first"]},
        {"index": {"0": "zero", "12": "twelve"}},
    ])
    def test_passing(self, value):
        assert validate(value, cql.list(strict_text())).error is None

    @pytest.mark.parametrize("value", [
        [123, 45],
        ["", None, "54"],
        {},
        {"append": ["x"], "bogus": 1},
        {"add": ["x"]},
        {"index": {"-1": "x"}},
        {"index": {"first": "x"}},
        {"append": "x"},
        "abc",
    ])
    def test_failing(self, value):
        assert validate(value, cql.list(strict_text())).error is not None

    def test_boolean_elements_reject_strings(self):
        assert validate(["", "123", "abc"], cql.list(cql.boolean())).error is not None

    def test_integer_index_keys_fail(self):
        outcome = validate({"index": {0: "x"}}, cql.list(cql.text()))
        assert outcome.error.first_error.code is ErrorCode.E2004_INVALID_TYPE
        assert outcome.error.first_error.field_path == "index.0"

    def test_element_error_path(self):
        error = validate({"tracks": ["a", 1]}, {"tracks": cql.list(cql.text())}).error
        assert error.first_error.field_path == "tracks[1]"

    def test_empty_descriptor_reports_key_group(self):
        error = validate({}, cql.list(cql.text())).error
        assert error.first_error.code is ErrorCode.E2007_KEY_GROUP_MISSING

    def test_collect_all_reports_every_element(self):
        error = validate(["a", 1, 2], cql.list(cql.text()), mode=ValidationMode.COLLECT_ALL).error
        assert [d.field_path for d in error.details] == ["[1]", "[2]"]

    def test_canonical_annotation(self):
        meta = cql.list(cql.uuid()).to_cql()
        assert meta["cql"] is True
        assert meta["type"] == "list"
        assert meta["listType"] == "uuid"
        assert callable(meta["serialize"]) and callable(meta["deserialize"])

    def test_null_transforms_to_empty_list(self):
        meta = cql.list(cql.text()).to_cql()
        assert meta["serialize"](None) == []
        assert meta["deserialize"](None) == []

    def test_transforms_preserve_descriptor_shape(self):
        meta = cql.list(cql.json()).to_cql()
        descriptor = {"append": [{"a": 1}], "index": {"3": [1, 2]}}
        stored = meta["serialize"](descriptor)
        assert stored == {"append": ['{"a":1}'], "index": {"3": "[1,2]"}}
        assert meta["deserialize"](stored) == descriptor

    def test_transforms_convert_full_list(self):
        meta = cql.list(cql.json()).to_cql()
        assert meta["deserialize"](meta["serialize"]([{"a": 1}, "x"])) == [{"a": 1}, "x"]

    def test_non_cql_element_raises(self):
        with pytest.raises(SchemaDefinitionError):
            cql.list(string())


class TestSet:
    @pytest.mark.parametrize("value", [
        ["", "123", "abc"],
        {"remove": ["string"]},
        {"add": ["string"]},
        {"add": ["new string"], "remove": ["string"]},
    ])
    def test_passing(self, value):
        assert validate(value, cql.set(strict_text())).error is None

    @pytest.mark.parametrize("value", [
        [123, 45],
        ["", None, "54"],
        ["dup", "dup"],
        {},
        {"append": ["x"]},
        {"add": ["x"], "bogus": 1},
        {"add": ["x", "x"]},
    ])
    def test_failing(self, value):
        assert validate(value, cql.set(strict_text())).error is not None

    def test_duplicates_report_constraint_violation(self):
        error = validate(["a", "a"], cql.set(cql.text())).error
        assert error.first_error.code is ErrorCode.E2005_CONSTRAINT_VIOLATION

    def test_structural_duplicates_detected(self):
        assert validate([{"a": 1}, {"a": 1}], cql.set(cql.json())).error is not None

    def test_canonical_annotation(self):
        meta = cql.set(cql.text()).to_cql()
        assert (meta["type"], meta["setType"]) == ("set", "text")

    def test_null_transforms_to_empty_list(self):
        meta = cql.set(cql.text()).to_cql()
        assert meta["serialize"](None) == []
        assert meta["deserialize"](None) == []
