"""Validation Engine

A small combinator library the CQL layer is built on: atomic rules that
check one value, shape validators (scalar, array, object, alternatives) that
compose them, and a per-run context that tracks field paths and accumulates
structured errors.

Key Features:
- Compositional atomic validators (AND/OR combinators)
- Immutable, fluent shape validators with ordered metadata chains
- Explicit opt-in coercion
- Structured error accumulation (fail-fast or collect-all)

Usage:
    from cqlschema.validation import ObjectType, ValidationContext, ValidationMode, string, integer

    person = ObjectType().keys(name=string(), age=integer(0, 150))
    ctx = ValidationContext(mode=ValidationMode.COLLECT_ALL)
    value = person.check({"name": "Ada", "age": "36"}, ctx)
    error = ctx.to_validation_error()
"""

# Compositional validators
from .validators import (
    ValidationResult,
    AtomicValidator,
    # String validators
    StringType,
    RegexPattern,
    # Numeric validators
    IntegerValue,
    IntegerString,
    FiniteNumber,
    # Scalar type validators
    BooleanValue,
    BinaryValue,
    AnyValue,
    JsonSerializable,
    # Format validators
    UUIDValidator,
    DateTimeValidator,
    IPAddressValidator,
    # Collection validators
    UniqueItems,
    # Combinators
    And,
    Or,
    SAFE_INTEGER,
)

# Coercion
from .coercion import (
    CoercionRule,
    StringToInt,
    StringToBytes,
)

# Error handling
from .errors import (
    INVALID,
    ValidationMode,
    ValidationErrorDetail,
    ValidationError,
    ValidationErrorAccumulator,
    FailFastAccumulator,
    CollectAllAccumulator,
    ValidationContext,
    create_accumulator,
)

# Shape validators
from .types import (
    DefaultFactory,
    Validator,
    ScalarType,
    ArrayType,
    ObjectType,
    AlternativesType,
    Rename,
    field_annotations,
    string,
    number,
    integer,
    any_,
    array,
    alternatives,
)

__all__ = [
    # Validators
    "ValidationResult",
    "AtomicValidator",
    "StringType",
    "RegexPattern",
    "IntegerValue",
    "IntegerString",
    "FiniteNumber",
    "BooleanValue",
    "BinaryValue",
    "AnyValue",
    "JsonSerializable",
    "UUIDValidator",
    "DateTimeValidator",
    "IPAddressValidator",
    "UniqueItems",
    "And",
    "Or",
    "SAFE_INTEGER",
    # Coercion
    "CoercionRule",
    "StringToInt",
    "StringToBytes",
    # Errors
    "INVALID",
    "ValidationMode",
    "ValidationErrorDetail",
    "ValidationError",
    "ValidationErrorAccumulator",
    "FailFastAccumulator",
    "CollectAllAccumulator",
    "ValidationContext",
    "create_accumulator",
    # Shapes
    "DefaultFactory",
    "Validator",
    "ScalarType",
    "ArrayType",
    "ObjectType",
    "AlternativesType",
    "Rename",
    "field_annotations",
    "string",
    "number",
    "integer",
    "any_",
    "array",
    "alternatives",
]
