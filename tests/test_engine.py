"""Validation engine: atomic rules, shape validators, contexts and validate() options."""

from __future__ import annotations

import pytest

from cqlschema import (
    ErrorCode,
    SchemaDefinitionError,
    ValidateOptions,
    ValidationContext,
    ValidationError,
    ValidationMode,
    alternatives,
    any_,
    array,
    cql,
    get_settings,
    integer,
    number,
    object_,
    string,
    validate,
)
from cqlschema.validation import (
    INVALID,
    IntegerString,
    IntegerValue,
    ObjectType,
    RegexPattern,
    StringToInt,
    StringType,
    UniqueItems,
)


class TestAtomicRules:
    def test_and_short_circuits_on_left(self):
        rule = StringType() & RegexPattern("[a-z]+")
        assert rule.validate("abc").is_valid
        result = rule.validate(3)
        assert result.error_code is ErrorCode.E2004_INVALID_TYPE

    def test_or_reports_both_sides(self):
        rule = IntegerValue(0, 10) | RegexPattern("[a-z]+")
        assert rule.validate(5).is_valid
        assert rule.validate("abc").is_valid
        result = rule.validate(11)
        assert result.error_code is ErrorCode.E2030_NO_ALTERNATIVE_MATCHED
        assert " OR " in result.error_message

    def test_regex_matches_whole_string(self):
        assert not RegexPattern("[a-z]+").validate("abc1").is_valid

    def test_integer_bounds(self):
        result = IntegerValue(0, 10).validate(11)
        assert result.error_code is ErrorCode.E2003_OUT_OF_RANGE

    def test_bool_is_not_an_integer(self):
        assert not IntegerValue().validate(True).is_valid

    def test_unique_items(self):
        assert UniqueItems().validate([{"a": 1}, {"a": 2}]).is_valid
        assert not UniqueItems().validate([{"a": 1}, {"a": 1}]).is_valid

    def test_result_to_dict(self):
        assert StringType(allow_empty=False).validate("").to_dict()["code"] == "E2001_REQUIRED_FIELD_MISSING"

    def test_coercion_rule_rejects_non_numerals(self):
        with pytest.raises(ValueError):
            StringToInt().coerce("12a")
        assert StringToInt()(" -7 ") == -7

    def test_coercion_leaves_very_long_numerals(self):
        assert not StringToInt().can_coerce("9" * 5000)
        assert StringToInt().can_coerce("-" + "9" * 4300)

    def test_integer_string_bounds_on_very_long_numerals(self):
        rule = IntegerString(min_value=0, max_value=10)
        assert rule.validate("9" * 5000).error_code is ErrorCode.E2003_OUT_OF_RANGE
        assert rule.validate("-" + "9" * 5000).error_code is ErrorCode.E2003_OUT_OF_RANGE
        assert rule.validate("0" * 5000 + "7").is_valid


class TestContext:
    def test_paths(self):
        ctx = ValidationContext()
        assert ctx.current_path == "$"
        for segment in ("tags", "index", 3, "name"):
            ctx.push_path(segment)
        assert ctx.current_path == "tags.index[3].name"

    def test_report_returns_falsy_sentinel(self):
        ctx = ValidationContext()
        assert not ctx.add_error("boom")
        assert ctx.add_error("boom") is INVALID

    def test_fail_fast_keeps_first_error(self):
        ctx = ValidationContext(ValidationMode.FAIL_FAST)
        ctx.add_error("first")
        ctx.add_error("second")
        assert ctx.should_stop
        assert [d.message for d in ctx.errors] == ["first"]

    def test_collect_all_caps_at_max_errors(self):
        ctx = ValidationContext(ValidationMode.COLLECT_ALL, max_errors=2)
        for message in ("a", "b", "c"):
            ctx.add_error(message)
        assert len(ctx.errors) == 2
        assert ctx.should_stop

    def test_fork_keeps_mode_and_path(self):
        ctx = ValidationContext(ValidationMode.COLLECT_ALL, operation="create")
        ctx.push_path("field")
        forked = ctx.fork()
        assert forked.mode is ValidationMode.COLLECT_ALL
        assert forked.operation == "create"
        assert forked.current_path == "field"
        assert not forked.has_errors


class TestShapes:
    def test_array_paths(self):
        outcome = validate(["a", 1, "b", 2], array(string()), mode="collect_all")
        assert [d.field_path for d in outcome.error.details] == ["[1]", "[3]"]

    def test_array_rejects_non_list(self):
        assert validate("abc", array()).error.first_error.code is ErrorCode.E2004_INVALID_TYPE

    def test_unique_array(self):
        outcome = validate([1, 1], array(integer(), unique=True))
        assert outcome.error.first_error.code is ErrorCode.E2005_CONSTRAINT_VIOLATION

    def test_integer_coerces_numeral_strings(self):
        assert validate("42", integer()).value == 42
        assert validate("42", integer().strict()).error is not None

    def test_number_and_any(self):
        assert validate(1.5, number()).error is None
        assert validate(float("nan"), number()).error is not None
        assert validate(object(), any_()).error is None

    def test_required_field(self):
        outcome = validate({}, object_(name=string().required()))
        assert outcome.error.first_error.code is ErrorCode.E2001_REQUIRED_FIELD_MISSING
        assert outcome.error.first_error.field_path == "name"
        assert validate({}, object_(name=string().required().optional())).error is None

    def test_or_group(self):
        schema = ObjectType().keys(a=string(), b=string()).or_("a", "b")
        assert validate({"b": "x"}, schema).error is None
        assert validate({}, schema).error.first_error.code is ErrorCode.E2007_KEY_GROUP_MISSING

    def test_object_without_fields_accepts_anything(self):
        assert validate({"x": 1, "y": [2]}, object_()).value == {"x": 1, "y": [2]}

    def test_object_rejects_non_string_keys(self):
        outcome = validate({"x": 1, 2: "y"}, object_())
        assert outcome.error.first_error.code is ErrorCode.E2004_INVALID_TYPE
        assert outcome.error.first_error.field_path == "2"

    def test_object_rejects_non_mapping(self):
        assert validate([1], object_(a=string())).error.first_error.code is ErrorCode.E2004_INVALID_TYPE

    def test_alias_keeps_source_key(self):
        schema = object_(a=string()).allow_unknown().rename("b", "a", alias=True)
        assert validate({"b": "x"}, schema).value == {"b": "x", "a": "x"}

    def test_override_replaces_existing_key(self):
        schema = object_(a=string()).rename("b", "a", override=True)
        assert validate({"a": "old", "b": "new"}, schema).value == {"a": "new"}

    def test_alternatives_generic_error(self):
        outcome = validate(True, alternatives(string(), array()))
        assert outcome.error.first_error.code is ErrorCode.E2030_NO_ALTERNATIVE_MATCHED

    def test_alternatives_first_match_wins(self):
        assert validate("7", alternatives(integer(), string())).value == 7

    def test_shape_matched_candidate_errors_are_reported(self):
        outcome = validate({"add": [1]}, cql.set(cql.text()))
        assert outcome.error.first_error.field_path == "add[0]"

    def test_descriptor_needs_a_known_key(self):
        outcome = validate({}, cql.list(cql.text()))
        assert outcome.error.first_error.code is ErrorCode.E2007_KEY_GROUP_MISSING


class TestValidateOptions:
    def test_collect_all_mode(self):
        schema = object_(a=cql.int(), b=cql.int())
        outcome = validate({"a": "x", "b": "y"}, schema, {"mode": "collect_all"})
        assert len(outcome.error.details) == 2
        assert outcome.error.mode is ValidationMode.COLLECT_ALL

    def test_abort_early_false_collects(self):
        schema = object_(a=cql.int(), b=cql.int())
        assert len(validate({"a": "x", "b": "y"}, schema, {"abortEarly": False}).error.details) == 2

    def test_fail_fast_is_the_default(self):
        schema = object_(a=cql.int(), b=cql.int())
        assert len(validate({"a": "x", "b": "y"}, schema).error.details) == 1

    def test_max_errors(self):
        outcome = validate(["x"] * 5, array(integer()), {"mode": "collect_all", "max_errors": 3})
        assert len(outcome.error.details) == 3

    def test_mode_from_environment(self, monkeypatch):
        monkeypatch.setenv("CQLSCHEMA_VALIDATION_MODE", "collect_all")
        get_settings.cache_clear()
        outcome = validate(["x", "y"], array(integer()))
        assert len(outcome.error.details) == 2

    def test_options_model_instance(self):
        options = ValidateOptions(context={"operation": "create"}, mode=ValidationMode.COLLECT_ALL)
        assert options.context.operation == "create"
        assert validate({}, {"id": cql.uuid()}, options).value["id"]

    def test_unknown_option_raises(self):
        with pytest.raises(SchemaDefinitionError) as exc_info:
            validate({}, object_(), {"strictness": "high"})
        assert exc_info.value.code is ErrorCode.E9101_INVALID_TYPE_OPTIONS

    @pytest.mark.parametrize("schema", [None, 42, "text"])
    def test_bad_schema_raises(self, schema):
        with pytest.raises(SchemaDefinitionError) as exc_info:
            validate({}, schema)
        assert exc_info.value.code is ErrorCode.E9102_NOT_A_CQL_TYPE


class TestOutcome:
    def test_unwrap_raises_validation_error(self):
        outcome = validate(1, string())
        with pytest.raises(ValidationError):
            outcome.unwrap()

    def test_value_is_none_on_error(self):
        assert validate(1, string()).value is None

    def test_error_to_dict(self):
        payload = validate({"n": "x"}, object_(n=cql.int())).to_dict()["error"]
        assert payload["type"] == "validation_error"
        assert payload["errors"][0]["field"] == "n"
        assert payload["errors"][0]["value"] == "x"

    def test_error_str_names_the_field(self):
        assert str(validate({"n": "x"}, object_(n=cql.int())).error).startswith("n: ")

    def test_ok_to_dict(self):
        assert validate("a", string()).to_dict() == {"value": "a"}
