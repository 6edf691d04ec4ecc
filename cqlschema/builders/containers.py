"""Collection CQL type builders: map, list and set.

Lists and sets accept either a full replacement sequence or a partial
update descriptor:

    list: {"prepend": [...], "append": [...], "remove": [...], "index": {"0": ...}}
    set:  {"add": [...], "remove": [...]}

A descriptor needs at least one recognized key and no others. The element
type's own serialize/deserialize transforms are applied inside whichever
shape was given.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from cqlschema.errors import not_a_cql_type, unknown_type
from cqlschema.logging import builders_logger
from cqlschema.serialization import transform_of
from cqlschema.validation import AlternativesType, ArrayType, ObjectType, Validator

from .scalars import SCALAR_BUILDERS

MAP_KEY_PATTERN = r"[-\w]+"
LIST_INDEX_PATTERN = r"[0-9]+"

Transform = Callable[[Any], Any]


def _element_type(role: str, validator: Any) -> str:
    """Canonical CQL type of an element validator; non-CQL validators are a definition error."""
    if not isinstance(validator, Validator) or (meta := validator.to_cql()) is None or "type" not in meta:
        raise not_a_cql_type(role, validator)
    return meta["type"]


def _key_type_name(key_type: Validator | str | None) -> str:
    if isinstance(key_type, Validator): return _element_type("map key type", key_type)
    if not key_type: return "text"
    if isinstance(key_type, str):
        if key_type not in SCALAR_BUILDERS: raise unknown_type(key_type, sorted(SCALAR_BUILDERS))
        return key_type
    raise not_a_cql_type("map key type", key_type)


def map_converter(handler: Transform | None) -> Transform:
    """Apply ``handler`` to every value of a mapping; None becomes ``{}``."""
    def convert_map(data: Mapping[str, Any] | None) -> dict[str, Any]:
        if handler is None: return dict(data or {})
        return {key: handler(value) for key, value in (data or {}).items()}
    return convert_map


def array_converter(handler: Transform | None) -> Transform:
    """Apply ``handler`` to every element of a sequence or update descriptor; None becomes ``[]``."""
    def convert_items(items: Any) -> Any:
        if isinstance(items, Mapping): return map_converter(handler)(items)
        if handler is None: return list(items)
        return [handler(item) for item in items]

    def convert_array(data: Any) -> Any:
        if data is None: return []
        if isinstance(data, Mapping): return {operation: convert_items(items) for operation, items in data.items()}
        return convert_items(data)
    return convert_array


def map_(key_type: Validator | str | None, value_type: Validator) -> ObjectType:
    """Mapping from word/dash keys to ``value_type`` values.

    ``key_type`` only names the key type in ``mapType``; keys are matched
    against the word/dash pattern, not against ``key_type``.
    """
    value_name = _element_type("map value type", value_type)
    key_name = _key_type_name(key_type)
    builders_logger().debug("type_created", cql_type="map", map_type=[key_name, value_name])
    return ObjectType().pattern(MAP_KEY_PATTERN, value_type).meta(cql=True, type="map", mapType=[key_name, value_name],
        serialize=map_converter(transform_of(value_type, "serialize")),
        deserialize=map_converter(transform_of(value_type, "deserialize")))


def list_(element_type: Validator) -> AlternativesType:
    """Full list, or a ``prepend``/``append``/``remove``/``index`` descriptor."""
    element_name = _element_type("list element type", element_type)
    items = ArrayType(items=element_type)
    descriptor = ObjectType().keys(prepend=items, append=items, remove=items,
        index=ObjectType().pattern(LIST_INDEX_PATTERN, element_type)).or_("prepend", "append", "remove", "index").unknown(False)
    builders_logger().debug("type_created", cql_type="list", list_type=element_name)
    return AlternativesType(candidates=(items, descriptor)).meta(cql=True, type="list", listType=element_name,
        serialize=array_converter(transform_of(element_type, "serialize")),
        deserialize=array_converter(transform_of(element_type, "deserialize")))


def set_(element_type: Validator) -> AlternativesType:
    """Full set (structurally unique items), or an ``add``/``remove`` descriptor."""
    element_name = _element_type("set element type", element_type)
    items = ArrayType(items=element_type, unique=True)
    descriptor = ObjectType().keys(add=items, remove=items).or_("add", "remove").unknown(False)
    builders_logger().debug("type_created", cql_type="set", set_type=element_name)
    return AlternativesType(candidates=(items, descriptor)).meta(cql=True, type="set", setType=element_name,
        serialize=array_converter(transform_of(element_type, "serialize")),
        deserialize=array_converter(transform_of(element_type, "deserialize")))
