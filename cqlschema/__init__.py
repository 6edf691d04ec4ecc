"""cqlschema: CQL column types as composable validators.

Declare a table's columns once; the same declaration validates values,
generates operation-dependent defaults, serializes values into their
storage representation and exports the column metadata for DDL tooling.

Usage:
    from cqlschema import cql, object_, validate

    album = object_(
        artist_id=cql.uuid(),
        album_id=cql.uuid(),
        name=cql.text(),
        tracks=cql.list(cql.text()),
        created=cql.timestamp({"default": "create"}),
    ).partition_key("artist_id").clustering_key("album_id")

    outcome = validate({"name": "Blue"}, album, {"context": {"operation": "create"}})
    album.to_cql()  # {"artist_id": {"cql": True, "type": "uuid", "default": None}, ...}
"""

from cqlschema.errors import ErrorCode, SchemaDefinitionError
from cqlschema.metadata import CQL_KEY, MetadataChain

from cqlschema.validation import (
    ValidationMode,
    ValidationContext,
    ValidationError,
    ValidationErrorDetail,
    Validator,
    ScalarType,
    ArrayType,
    ObjectType,
    AlternativesType,
    string,
    number,
    integer,
    any_,
    array,
    alternatives,
)

from cqlschema.defaults import DefaultSpec, NIL_UUID, date_default, uuid_default
from cqlschema.schema import Schema, object_
from cqlschema.serialization import serialize, deserialize, json_encode, json_decode
from cqlschema.builders import TypeOptions, cql, create
from cqlschema.export import TableDescription, to_cql, compile_table, describe_table
from cqlschema.boundaries import (
    BoundaryValidator,
    OperationContext,
    ValidateOptions,
    ValidationOutcome,
    validate,
)
from cqlschema.config import Settings, get_settings
from cqlschema.logging import configure_logging, get_logger

__all__ = [
    # Errors
    "ErrorCode",
    "SchemaDefinitionError",
    "ValidationMode",
    "ValidationContext",
    "ValidationError",
    "ValidationErrorDetail",
    # Metadata
    "CQL_KEY",
    "MetadataChain",
    # Engine
    "Validator",
    "ScalarType",
    "ArrayType",
    "ObjectType",
    "AlternativesType",
    "string",
    "number",
    "integer",
    "any_",
    "array",
    "alternatives",
    "object_",
    "Schema",
    # CQL types
    "cql",
    "create",
    "TypeOptions",
    "DefaultSpec",
    "NIL_UUID",
    "date_default",
    "uuid_default",
    # Pipeline
    "validate",
    "ValidateOptions",
    "OperationContext",
    "ValidationOutcome",
    "BoundaryValidator",
    "serialize",
    "deserialize",
    "json_encode",
    "json_decode",
    "to_cql",
    "compile_table",
    "describe_table",
    "TableDescription",
    # Ambient
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
]
