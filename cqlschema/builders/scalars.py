"""Scalar CQL type builders.

Each builder returns an engine validator whose metadata chain starts with
the canonical annotation ``{"cql": True, "type": <kind>}``. Builders taking
options (timestamp, timeuuid, uuid) also record the raw ``default`` option
and attach the matching DefaultSpec.

CQL data types:

    type      accepts
    ---------------------------------------------------------------
    ascii     str, no coercion
    bigint    64-bit signed int, or its numeral string (up to 19 digits)
    blob      bytes, or a hex string (other text is encoded unless strict)
    boolean   bool
    counter   same as bigint
    decimal   finite number, or a decimal numeral string
    double    same as decimal
    float     same as decimal
    inet      IPv4/IPv6 literal, optional CIDR prefix
    int       32-bit signed int (numeral strings converted unless strict)
    text      str, no coercion
    timestamp epoch millis, datetime/date, or an ISO-8601 string
    timeuuid  UUID string
    uuid      UUID string
    varchar   str
    varint    arbitrary precision int, or its numeral string
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from cqlschema.defaults import date_default, uuid_default
from cqlschema.logging import builders_logger
from cqlschema.schema import Schema, object_
from cqlschema.serialization import json_decode, json_encode
from cqlschema.validation import (
    AtomicValidator,
    BinaryValue,
    BooleanValue,
    CoercionRule,
    DateTimeValidator,
    FiniteNumber,
    IntegerString,
    IntegerValue,
    IPAddressValidator,
    JsonSerializable,
    RegexPattern,
    ScalarType,
    StringToBytes,
    StringToInt,
    StringType,
    UUIDValidator,
    Validator,
)

from .options import OptionsInput, TypeOptions, parse_options

INT32_MIN, INT32_MAX = -2**31, 2**31 - 1
INT64_MIN, INT64_MAX = -2**63, 2**63 - 1


def _scalar(cql_type: str, rule: AtomicValidator, coercion: CoercionRule | None = None, **annotation: Any) -> ScalarType:
    builders_logger().debug("type_created", cql_type=cql_type)
    return ScalarType(rule, coercion).meta(cql=True, type=cql_type, **annotation)


def _nullable(validator: Validator, options: TypeOptions) -> Validator:
    return validator.allow_null() if options.nullable else validator


def _int64(cql_type: str) -> ScalarType:
    return _scalar(cql_type, IntegerValue(INT64_MIN, INT64_MAX) | IntegerString(19, INT64_MIN, INT64_MAX))


def _decimal(cql_type: str) -> ScalarType:
    return _scalar(cql_type, FiniteNumber() | RegexPattern(r"-?[0-9]+(\.[0-9]+)?", description="decimal numeral"))


def ascii_() -> ScalarType:
    return _scalar("ascii", StringType()).strict()


def bigint() -> ScalarType:
    return _int64("bigint")


def blob() -> ScalarType:
    return _scalar("blob", BinaryValue() | RegexPattern(r"[0-9a-f]+", re.IGNORECASE, "hex string"), StringToBytes())


def boolean() -> ScalarType:
    return _scalar("boolean", BooleanValue())


def counter() -> ScalarType:
    return _int64("counter")


def decimal() -> ScalarType:
    return _decimal("decimal")


def double() -> ScalarType:
    return _decimal("double")


def float_() -> ScalarType:
    return _decimal("float")


def inet() -> ScalarType:
    return _scalar("inet", IPAddressValidator(cidr=True))


def int_() -> ScalarType:
    return _scalar("int", IntegerValue(INT32_MIN, INT32_MAX), StringToInt())


def text() -> ScalarType:
    return _scalar("text", StringType()).strict()


def varchar() -> ScalarType:
    return _scalar("varchar", StringType())


def varint() -> ScalarType:
    return _scalar("varint", IntegerValue() | IntegerString())


def timestamp(options: OptionsInput = None, **kwargs: Any) -> ScalarType:
    """Epoch millis or ISO-8601 string, with an optional ``create``/``update`` date default."""
    opts = parse_options("timestamp", options, **kwargs)
    validator = _scalar("timestamp", IntegerValue() | DateTimeValidator(), default=opts.default)
    return _nullable(validator.with_default(date_default(opts.default)), opts)


def timeuuid(options: OptionsInput = None, **kwargs: Any) -> ScalarType:
    """UUID string; generates a version 1 UUID on ``create`` unless told otherwise."""
    opts = parse_options("timeuuid", options, **kwargs)
    validator = _scalar("timeuuid", UUIDValidator(), default=opts.default)
    return _nullable(validator.with_default(uuid_default(opts.default, "v1")), opts)


def uuid_(options: OptionsInput = None, **kwargs: Any) -> ScalarType:
    """UUID string; generates a version 4 UUID on ``create`` unless told otherwise."""
    opts = parse_options("uuid", options, **kwargs)
    validator = _scalar("uuid", UUIDValidator(), default=opts.default)
    return _nullable(validator.with_default(uuid_default(opts.default, "v4")), opts)


def json_(shape: Mapping[str, Validator] | Schema | None = None) -> Validator:
    """Any JSON-serializable value, or an object matching ``shape``; stored as JSON text."""
    if shape is None:
        validator: Validator = ScalarType(JsonSerializable(), nullable=True)
    else:
        validator = (shape if isinstance(shape, Schema) else object_(shape)).body
    builders_logger().debug("type_created", cql_type="json", shaped=shape is not None)
    return validator.meta(cql=True, type="text", serialize=json_encode, deserialize=json_decode)


SCALAR_BUILDERS = {
    "ascii": ascii_,
    "bigint": bigint,
    "blob": blob,
    "boolean": boolean,
    "counter": counter,
    "decimal": decimal,
    "double": double,
    "float": float_,
    "inet": inet,
    "int": int_,
    "json": json_,
    "text": text,
    "timestamp": timestamp,
    "timeuuid": timeuuid,
    "uuid": uuid_,
    "varchar": varchar,
    "varint": varint,
}
