"""Error Taxonomy

Two families of failure exist and they never mix:
- Data validation failures are returned as ValidationError values inside a
  ValidationOutcome (see cqlschema.validation.errors).
- Schema definition mistakes (unknown CQL type names, malformed builder
  options, non-CQL element types) are programmer errors and raise
  SchemaDefinitionError immediately.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Hierarchical error code taxonomy.

    E2xxx: Validation errors
    E9xxx: Schema definition errors
    """
    # Validation (E2xxx)
    E2000_VALIDATION_GENERIC = 2000
    E2001_REQUIRED_FIELD_MISSING = 2001
    E2002_INVALID_FORMAT = 2002
    E2003_OUT_OF_RANGE = 2003
    E2004_INVALID_TYPE = 2004
    E2005_CONSTRAINT_VIOLATION = 2005
    E2006_UNKNOWN_KEY = 2006
    E2007_KEY_GROUP_MISSING = 2007
    E2008_RENAME_CONFLICT = 2008
    E2011_INVALID_UUID = 2011
    E2012_INVALID_DATE = 2012
    E2013_INVALID_ADDRESS = 2013
    E2021_INVALID_JSON = 2021
    E2030_NO_ALTERNATIVE_MATCHED = 2030

    # Schema definition (E9xxx)
    E9100_UNKNOWN_TYPE = 9100
    E9101_INVALID_TYPE_OPTIONS = 9101
    E9102_NOT_A_CQL_TYPE = 9102
    E9103_INVALID_KEY_DEFINITION = 9103
    E9104_DUPLICATE_RENAME = 9104

    @property
    def category(self) -> str:
        """Human-readable error category."""
        return "validation" if 2000 <= self.value < 3000 else "definition"


class SchemaDefinitionError(Exception):
    """Raised when a schema or type is declared incorrectly.

    Distinct from data validation: these errors mean the calling code is wrong,
    not the data, so they are raised at construction time instead of being
    returned from validate().
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.E9101_INVALID_TYPE_OPTIONS, **metadata: Any):
        super().__init__(message)
        self.message, self.code, self.metadata = message, code, metadata

    def __str__(self) -> str: return f"[{self.code.name}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"type": "schema_definition_error", "code": self.code.name,
            "message": self.message, **self.metadata}}


def unknown_type(type_name: str, known: list[str]) -> SchemaDefinitionError:
    return SchemaDefinitionError(f"Unknown CQL type '{type_name}'", ErrorCode.E9100_UNKNOWN_TYPE,
        type_name=type_name, known_types=known)


def not_a_cql_type(role: str, validator: Any) -> SchemaDefinitionError:
    return SchemaDefinitionError(f"{role} must be a CQL type validator, got {type(validator).__name__}",
        ErrorCode.E9102_NOT_A_CQL_TYPE, role=role)


def invalid_options(type_name: str, problems: list[str]) -> SchemaDefinitionError:
    return SchemaDefinitionError(f"Invalid options for '{type_name}': {'; '.join(problems)}",
        ErrorCode.E9101_INVALID_TYPE_OPTIONS, type_name=type_name, problems=problems)
