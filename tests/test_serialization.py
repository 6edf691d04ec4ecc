"""Serialization after validation, deserialization of stored rows."""

from __future__ import annotations

import json

import pytest

from cqlschema import BoundaryValidator, ErrorCode, cql, deserialize, object_, serialize, validate


@pytest.fixture
def profile():
    return {
        "id": cql.uuid({"default": "v4"}),
        "properties": cql.map("", cql.json()),
        "phones": cql.json(),
    }


class TestJsonFields:
    def test_object_serialized_on_validation(self, profile, create):
        target = {
            "phones": {"$default": "415-789-3456", "home": "415-678-9087"},
            "properties": {"audioSomething": {"complex": "object"}},
        }
        outcome = validate(target, profile, create)
        assert outcome.error is None
        assert isinstance(outcome.value["phones"], str)
        assert json.loads(outcome.value["phones"]) == target["phones"]
        assert json.loads(outcome.value["properties"]["audioSomething"]) == target["properties"]["audioSomething"]

    def test_array_accepted(self, profile, create):
        target = {"phones": ["415-789-3456", "415-678-9087"], "properties": {"audioSomething": [{"test": 123}]}}
        outcome = validate(target, profile, create)
        assert outcome.error is None
        assert json.loads(outcome.value["phones"]) == target["phones"]
        assert json.loads(outcome.value["properties"]["audioSomething"]) == [{"test": 123}]

    @pytest.mark.parametrize("value", ["", False, None])
    def test_falsy_values_are_encoded(self, profile, create, value):
        outcome = validate({"phones": value, "properties": {}}, profile, create)
        assert outcome.error is None
        assert outcome.value["phones"] == json.dumps(value)

    def test_non_ascii_kept(self):
        assert validate("café", cql.json()).value == '"café"'


class TestPipeline:
    def test_absent_fields_untouched(self, profile):
        assert serialize(profile, {"phones": [1]}) == {"phones": "[1]"}

    def test_unknown_keys_pass_through_transforms(self):
        assert serialize(object_().keys(a=cql.json()).allow_unknown(), {"a": 1, "b": 2}) == {"a": "1", "b": 2}

    def test_nested_objects_are_converted(self):
        schema = object_(outer=object_(inner=cql.json()))
        assert serialize(schema, {"outer": {"inner": {"x": 1}}}) == {"outer": {"inner": '{"x":1}'}}

    def test_nullable_collection_serializes_to_empty(self):
        schema = object_(tags=cql.set(cql.text()).allow_null(), attrs=cql.map("", cql.text()).allow_null())
        outcome = validate({"tags": None, "attrs": None}, schema)
        assert outcome.value == {"tags": [], "attrs": {}}

    def test_deserialize_round_trip(self, profile):
        value = {"phones": {"home": "1"}, "properties": {"a": [1, 2]}}
        assert deserialize(profile, serialize(profile, value)) == value

    @pytest.mark.parametrize(("field", "stored"), [
        (cql.json(), '{"a":[1,"b"]}'),
        (cql.map("", cql.json()), {"k": "[1]"}),
        (cql.list(cql.json()), {"append": ['{"a":1}'], "index": {"0": "2"}}),
        (cql.set(cql.json()), ['"x"', "3"]),
    ])
    def test_stored_values_survive_deserialize_then_serialize(self, field, stored):
        assert serialize(field, deserialize(field, stored)) == stored

    def test_serialize_single_validator(self):
        assert serialize(cql.list(cql.json()), [{"a": 1}]) == ['{"a":1}']
        assert serialize(cql.text(), "plain") == "plain"


class TestBoundaryValidator:
    def test_ingress_applies_defaults_and_transforms(self, profile):
        boundary = BoundaryValidator(profile)
        outcome = boundary.parse_ingress({"phones": {"home": "1"}}, operation="create")
        assert outcome.is_ok
        assert outcome.value["phones"] == '{"home":"1"}'
        assert "id" in outcome.value

    def test_ingress_error(self, profile):
        outcome = BoundaryValidator(profile).parse_ingress({"id": "nope"})
        assert not outcome.is_ok
        assert outcome.error.first_error.field_path == "id"

    def test_egress_decodes(self, profile):
        outcome = BoundaryValidator(profile).parse_egress({"phones": '{"home":"1"}', "properties": {"a": "[1]"}})
        assert outcome.unwrap() == {"phones": {"home": "1"}, "properties": {"a": [1]}}

    def test_egress_bad_json_is_an_error(self, profile):
        outcome = BoundaryValidator(profile).parse_egress({"phones": "{not json"})
        assert outcome.error.first_error.code is ErrorCode.E2002_INVALID_FORMAT
