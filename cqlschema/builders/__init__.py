"""CQL type builders.

Usage:
    from cqlschema.builders import cql

    album = {
        "album_id": cql.uuid(),
        "tags": cql.set(cql.text()),
        "ratings": cql.map("text", cql.int()),
        "released": cql.timestamp({"default": "create"}),
    }
"""

from .options import TypeOptions, parse_options

from .scalars import (
    ascii_,
    bigint,
    blob,
    boolean,
    counter,
    decimal,
    double,
    float_,
    inet,
    int_,
    json_,
    text,
    timestamp,
    timeuuid,
    uuid_,
    varchar,
    varint,
    SCALAR_BUILDERS,
    INT32_MIN,
    INT32_MAX,
    INT64_MIN,
    INT64_MAX,
)

from .containers import map_, list_, set_, map_converter, array_converter

from .factory import create, cql, COLLECTION_BUILDERS, TYPE_NAMES

__all__ = [
    "TypeOptions",
    "parse_options",
    "ascii_",
    "bigint",
    "blob",
    "boolean",
    "counter",
    "decimal",
    "double",
    "float_",
    "inet",
    "int_",
    "json_",
    "text",
    "timestamp",
    "timeuuid",
    "uuid_",
    "varchar",
    "varint",
    "SCALAR_BUILDERS",
    "INT32_MIN",
    "INT32_MAX",
    "INT64_MIN",
    "INT64_MAX",
    "map_",
    "list_",
    "set_",
    "map_converter",
    "array_converter",
    "create",
    "cql",
    "COLLECTION_BUILDERS",
    "TYPE_NAMES",
]
