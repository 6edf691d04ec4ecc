"""Serialization pipeline.

Each CQL type may declare ``serialize``/``deserialize`` transforms in its
canonical annotation. ``serialize`` turns validated application values into
their storage representation (JSON text, element-wise converted
collections); ``deserialize`` reverses it for rows read back from storage.
Objects are converted field by field; only present fields are touched.
"""
from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any, Literal

from cqlschema.schema import Schema, object_
from cqlschema.validation import ObjectType, Validator

Direction = Literal["serialize", "deserialize"]


def json_encode(value: Any) -> str:
    """Compact JSON text, non-ASCII kept as-is."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def json_decode(text: str | bytes) -> Any:
    return json.loads(text)


def transform_of(validator: Validator, direction: Direction) -> Callable[[Any], Any] | None:
    """The validator's declared transform for ``direction``, if any."""
    return (validator.to_cql() or {}).get(direction)


def _convert(schema: Schema | Validator | Mapping[str, Any], value: Any, direction: Direction) -> Any:
    if isinstance(schema, Mapping): schema = object_(schema)
    validator = schema.body if isinstance(schema, Schema) else schema
    if isinstance(validator, ObjectType) and validator.children is not None and validator.annotations.merged() is None:
        if not isinstance(value, Mapping): return value
        children = validator.children
        return {key: _convert(children[key], item, direction) if key in children else item
            for key, item in value.items()}
    transform = transform_of(validator, direction)
    return transform(value) if transform is not None else value


def serialize(schema: Schema | Validator | Mapping[str, Any], value: Any) -> Any:
    """Convert a validated value into its storage representation."""
    return _convert(schema, value, "serialize")


def deserialize(schema: Schema | Validator | Mapping[str, Any], stored: Any) -> Any:
    """Convert a stored representation back into the application shape."""
    return _convert(schema, stored, "deserialize")
