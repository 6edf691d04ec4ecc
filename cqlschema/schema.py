"""Object schemas with table key metadata.

Schema wraps an engine ObjectType and adds what a column store table needs
on top of field validation: partition key, clustering key, lookup keys and
aliases (the object's rename records). Only Schema carries these accessors;
scalar, array and collection validators do not have them at all.

Every setter returns a derived Schema, the receiver is never modified:

    album = object_(artist_id=cql.uuid(), album_id=cql.uuid(), name=cql.text())
    album = album.partition_key("artist_id").clustering_key("album_id")
    album.partition_key()   # "artist_id"
    album.lookup_keys()     # []
"""
from __future__ import annotations

import itertools
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from cqlschema.errors import ErrorCode, SchemaDefinitionError
from cqlschema.logging import schema_logger
from cqlschema.validation import ObjectType, ValidationContext, Validator, field_annotations

PARTITION_KEY = "partition_key"
CLUSTERING_KEY = "clustering_key"
LOOKUP_KEYS = "lookup_keys"

# Process-wide assignment order, lets concat() pick the most recent value per key
_assignment_sequence = itertools.count(1)


class _Unset:
    """Marker for 'argument not given', distinct from an explicit None."""
    __slots__ = ()

    def __repr__(self) -> str: return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True, slots=True)
class KeyAssignment:
    value: str | list[str] | None
    sequence: int


def _key_value(name: str, value: Any) -> str | list[str] | None:
    if value is None or isinstance(value, str): return value
    if isinstance(value, Sequence) and all(isinstance(item, str) for item in value): return list(value)
    raise SchemaDefinitionError(f"{name} must be a field name or a sequence of field names, got {value!r}",
        ErrorCode.E9103_INVALID_KEY_DEFINITION, key=name)


def _unwrap(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value.body if isinstance(value, Schema) else value for key, value in fields.items()}


@dataclass(frozen=True, slots=True)
class Schema:
    """Object validator plus partition/clustering/lookup key metadata."""
    body: ObjectType = field(default_factory=ObjectType)
    key_metadata: Mapping[str, KeyAssignment] = field(default_factory=lambda: MappingProxyType({}))

    # Table keys

    def partition_key(self, name: Any = UNSET) -> Any:
        """Stored partition key (``[]`` when unset), or a derived schema when ``name`` is given."""
        return self._read(PARTITION_KEY) if name is UNSET else self._assign(PARTITION_KEY, name)

    def clustering_key(self, name: Any = UNSET) -> Any:
        """Stored clustering key (``[]`` when unset), or a derived schema when ``name`` is given."""
        return self._read(CLUSTERING_KEY) if name is UNSET else self._assign(CLUSTERING_KEY, name)

    def lookup_keys(self, *names: Any) -> Any:
        """Stored lookup keys, or a derived schema.

        Accepts one sequence argument or the names as separate arguments.
        ``lookup_keys(None)`` resets them.
        """
        if not names: return self._read(LOOKUP_KEYS)
        if len(names) == 1 and (names[0] is None or not isinstance(names[0], str)):
            return self._assign(LOOKUP_KEYS, names[0])
        return self._assign(LOOKUP_KEYS, list(names))

    def aliases(self, from_: str | _Unset = UNSET, to: str | _Unset = UNSET, **options: bool) -> Any:
        """``{alias: field}`` for every rename, or a derived schema renaming ``from_`` to ``to``."""
        if from_ is UNSET: return {rename.from_: rename.to for rename in self.body.renames}
        if to is UNSET:
            raise SchemaDefinitionError(f"Alias '{from_}' needs a target field", ErrorCode.E9103_INVALID_KEY_DEFINITION,
                from_=from_)
        return self.rename(from_, to, **options)

    def _read(self, name: str) -> str | list[str]:
        assignment = self.key_metadata.get(name)
        if assignment is None or assignment.value is None: return []
        return list(assignment.value) if isinstance(assignment.value, list) else assignment.value

    def _assign(self, name: str, value: Any) -> Schema:
        value = _key_value(name, value)
        schema_logger().debug("schema_key_assigned", key=name, value=value)
        assignment = KeyAssignment(value, next(_assignment_sequence))
        return replace(self, key_metadata=MappingProxyType({**self.key_metadata, name: assignment}))

    # Object shape

    @property
    def fields(self) -> Mapping[str, Validator]:
        return self.body.children or MappingProxyType({})

    def keys(self, fields: Mapping[str, Validator | Schema] | None = None, **named: Validator | Schema) -> Schema:
        return replace(self, body=self.body.keys(_unwrap(fields or {}), **_unwrap(named)))

    def rename(self, from_: str, to: str, *, alias: bool = False, override: bool = False,
               ignore_undefined: bool = False) -> Schema:
        return replace(self, body=self.body.rename(from_, to, alias=alias, override=override,
            ignore_undefined=ignore_undefined))

    def allow_unknown(self, allow: bool = True) -> Schema:
        return replace(self, body=self.body.unknown(allow))

    def meta(self, annotation: Mapping[str, Any] | None = None, **keys: Any) -> Schema:
        return replace(self, body=self.body.meta(annotation, **keys))

    def concat(self, other: Schema | ObjectType) -> Schema:
        """Merge fields and renames; each table key keeps its most recent assignment."""
        if isinstance(other, ObjectType): return replace(self, body=self.body.concat(other))
        merged = dict(self.key_metadata)
        for name, assignment in other.key_metadata.items():
            if name not in merged or assignment.sequence > merged[name].sequence: merged[name] = assignment
        return Schema(self.body.concat(other.body), MappingProxyType(merged))

    # Export and validation

    def to_cql(self) -> dict[str, Any]:
        """``{field: canonical annotation}`` for every CQL-tagged field."""
        return field_annotations(self.fields)

    def check(self, value: Any, ctx: ValidationContext) -> Any:
        return self.body.check(value, ctx)


def object_(fields: Mapping[str, Validator | Schema] | None = None, **named: Validator | Schema) -> Schema:
    """Object schema; with no fields at all, any keys are accepted."""
    if fields is None and not named: return Schema()
    return Schema().keys(fields, **named)
