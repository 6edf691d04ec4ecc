"""Validation at System Boundaries

- Ingress: validate application values, generate defaults for the caller's
  operation and serialize the result into its storage representation.
- Egress: deserialize rows read back from storage into application shape.

validate() never raises for bad data. It returns a ValidationOutcome whose
``error`` holds a ValidationError (fail-fast by default, collect-all on
request). Misusing the API itself (malformed options, a schema that is not
a validator) raises SchemaDefinitionError.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from cqlschema.config import get_settings
from cqlschema.errors import ErrorCode, SchemaDefinitionError, invalid_options
from cqlschema.logging import validation_logger
from cqlschema.schema import Schema, object_
from cqlschema.serialization import deserialize, serialize
from cqlschema.validation import (
    ValidationContext,
    ValidationError,
    ValidationErrorDetail,
    ValidationMode,
    Validator,
)


class OperationContext(BaseModel):
    """Caller-supplied run context; ``operation`` gates default generation."""

    model_config = ConfigDict(extra="allow", frozen=True)

    operation: str | None = None


class ValidateOptions(BaseModel):
    """Options of a single validate() call."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    context: OperationContext = Field(default_factory=OperationContext)
    mode: ValidationMode | None = None
    abort_early: bool | None = Field(default=None, alias="abortEarly")
    max_errors: int | None = Field(default=None, gt=0)

    def resolve_mode(self, default: ValidationMode) -> ValidationMode:
        """Explicit mode wins, then abort_early, then the configured default."""
        if self.mode is not None: return self.mode
        if self.abort_early is not None: return ValidationMode.FAIL_FAST if self.abort_early else ValidationMode.COLLECT_ALL
        return default


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Result of validate(): exactly one of ``error`` or a usable ``value``."""
    error: ValidationError | None
    value: Any = None

    @property
    def is_ok(self) -> bool: return self.error is None

    def unwrap(self) -> Any:
        """The value, or raise the validation error."""
        if self.error is not None: raise self.error
        return self.value

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value} if self.error is None else self.error.to_dict()


def as_schema(schema: Schema | Validator | Mapping[str, Any]) -> Schema | Validator:
    """Accept a Schema, a single validator or a plain ``{field: validator}`` mapping."""
    if isinstance(schema, (Schema, Validator)): return schema
    if isinstance(schema, Mapping): return object_(schema)
    raise SchemaDefinitionError(f"Cannot validate against {type(schema).__name__}; expected a validator, Schema or mapping",
        ErrorCode.E9102_NOT_A_CQL_TYPE)


def parse_validate_options(options: ValidateOptions | Mapping[str, Any] | None = None, **overrides: Any) -> ValidateOptions:
    if isinstance(options, ValidateOptions) and not overrides: return options
    data = options.model_dump(exclude_unset=True) if isinstance(options, ValidateOptions) else dict(options or {})
    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return ValidateOptions.model_validate(data)
    except PydanticValidationError as e:
        raise invalid_options("validate", [f"{'.'.join(str(loc) for loc in err['loc']) or 'options'}: {err['msg']}"
            for err in e.errors()]) from e


def validate(value: Any, schema: Schema | Validator | Mapping[str, Any],
             options: ValidateOptions | Mapping[str, Any] | None = None, *,
             context: OperationContext | Mapping[str, Any] | None = None,
             mode: ValidationMode | str | None = None) -> ValidationOutcome:
    """Validate ``value``, generate defaults for the context's operation, then serialize.

    Example:
        outcome = validate({"name": "Blue"}, album, {"context": {"operation": "create"}})
        if outcome.error: ...
        row = outcome.value
    """
    target = as_schema(schema)
    opts = parse_validate_options(options, context=context, mode=mode)
    settings = get_settings()
    ctx = ValidationContext(opts.resolve_mode(settings.VALIDATION_MODE), opts.max_errors or settings.MAX_ERRORS,
        opts.context.operation)

    result = target.check(value, ctx)
    if (error := ctx.to_validation_error()) is not None:
        validation_logger().debug("validation_failed", operation=ctx.operation, mode=ctx.mode.value,
            error_count=len(error.details), first_error=str(error))
        return ValidationOutcome(error)
    return ValidationOutcome(None, serialize(target, result))


class BoundaryValidator:
    """Schema bound once, reused at the storage boundary.

    Usage:
        albums = BoundaryValidator(album_schema)
        outcome = albums.parse_ingress(payload, operation="create")
        record = albums.parse_egress(row).unwrap()
    """

    __slots__ = ("schema", "mode")

    def __init__(self, schema: Schema | Validator | Mapping[str, Any], mode: ValidationMode | None = None):
        self.schema, self.mode = as_schema(schema), mode

    def parse_ingress(self, value: Any, *, operation: str | None = None, **context: Any) -> ValidationOutcome:
        """Validate, default and serialize a value headed for storage."""
        return validate(value, self.schema, context={"operation": operation, **context}, mode=self.mode)

    def parse_egress(self, row: Any) -> ValidationOutcome:
        """Deserialize a stored row; transform failures come back as a validation error."""
        try:
            return ValidationOutcome(None, deserialize(self.schema, row))
        except (TypeError, ValueError) as e:
            detail = ValidationErrorDetail(field_path="$", constraint="deserialize", code=ErrorCode.E2002_INVALID_FORMAT,
                message=f"Stored value could not be deserialized: {e}")
            return ValidationOutcome(ValidationError("Egress deserialization failed", [detail]))
