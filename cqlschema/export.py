"""Export of CQL metadata for external DDL generators.

Nothing here talks to a database. ``to_cql`` reports the canonical
annotation of a validator (or the per-field annotations of a schema) and
``describe_table`` bundles those with the table keys into a plain dict.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cqlschema.logging import schema_logger
from cqlschema.schema import Schema
from cqlschema.validation import Validator


@dataclass
class TableDescription:
    """Column annotations plus the table keys, keys normalized to lists."""
    columns: dict[str, dict[str, Any]]
    partition_key: list[str] = field(default_factory=list)
    clustering_key: list[str] = field(default_factory=list)
    lookup_keys: list[str] = field(default_factory=list)
    aliases: dict[str, str] = field(default_factory=dict)

    @property
    def key_columns(self) -> list[str]:
        return [*self.partition_key, *self.clustering_key, *self.lookup_keys]

    def to_dict(self) -> dict[str, Any]:
        return {"columns": self.columns, "partition_key": self.partition_key, "clustering_key": self.clustering_key,
            "lookup_keys": self.lookup_keys, "aliases": self.aliases}


def _as_list(value: str | list[str]) -> list[str]:
    return [value] if isinstance(value, str) else list(value)


def to_cql(schema: Schema | Validator) -> dict[str, Any] | None:
    """Field annotations of a schema, or the canonical annotation of a single validator."""
    return schema.to_cql()


def compile_table(schema: Schema) -> TableDescription:
    table = TableDescription(columns=schema.to_cql(), partition_key=_as_list(schema.partition_key()),
        clustering_key=_as_list(schema.clustering_key()), lookup_keys=_as_list(schema.lookup_keys()),
        aliases=schema.aliases())
    if missing := [name for name in table.key_columns if name not in table.columns]:
        schema_logger().warning("table_key_not_a_column", keys=missing, columns=list(table.columns))
    return table


def describe_table(schema: Schema) -> dict[str, Any]:
    """``{columns, partition_key, clustering_key, lookup_keys, aliases}`` for a DDL generator."""
    return compile_table(schema).to_dict()
