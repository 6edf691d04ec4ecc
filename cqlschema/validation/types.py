"""Shape validators: scalars, arrays, objects and alternatives.

Every validator is a frozen dataclass. Fluent methods (``meta``, ``strict``,
``allow_null``, ``keys``, ``rename``...) return modified copies, so a
validator can be shared between schemas as-is.

A run threads one ValidationContext through ``check()``. Each validator
returns the (possibly converted) value, or INVALID after recording its
errors on the context at the current path.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Self

from cqlschema.errors import ErrorCode, SchemaDefinitionError
from cqlschema.logging import validation_logger
from cqlschema.metadata import MetadataChain

from .coercion import CoercionRule, StringToInt
from .errors import INVALID, ValidationContext
from .validators import (
    SAFE_INTEGER,
    AnyValue,
    AtomicValidator,
    FiniteNumber,
    IntegerValue,
    StringType,
    UniqueItems,
)

DefaultFactory = Callable[[str | None], Any]

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True, kw_only=True)
class Validator(ABC):
    """Base of all shape validators.

    - annotations: ordered metadata chain, one entry per ``meta()`` call
    - nullable: accept ``None`` as a value
    - is_strict: disable opt-in coercion
    - presence_required: report the key as missing when absent from its object
    - default: factory called with the run's operation when the key is absent
    """
    annotations: MetadataChain = field(default_factory=MetadataChain)
    nullable: bool = False
    is_strict: bool = False
    presence_required: bool = False
    default: DefaultFactory | None = None

    def meta(self, annotation: Mapping[str, Any] | None = None, **keys: Any) -> Self:
        """Append one annotation to the metadata chain."""
        return replace(self, annotations=self.annotations.append({**(annotation or {}), **keys}))

    def strict(self, flag: bool = True) -> Self: return replace(self, is_strict=flag)

    def allow_null(self, flag: bool = True) -> Self: return replace(self, nullable=flag)

    def required(self) -> Self: return replace(self, presence_required=True)

    def optional(self) -> Self: return replace(self, presence_required=False)

    def with_default(self, factory: DefaultFactory | None) -> Self: return replace(self, default=factory)

    def to_cql(self) -> dict[str, Any] | None:
        """Canonical CQL annotation, or None for validators never tagged as CQL."""
        return self.annotations.merged()

    @property
    def cql_type(self) -> str | None:
        return (self.to_cql() or {}).get("type")

    def check(self, value: Any, ctx: ValidationContext) -> Any:
        if value is None:
            if self.nullable: return None
            return ctx.add_error("Value cannot be null", constraint="not_null", code=ErrorCode.E2004_INVALID_TYPE)
        return self._check(value, ctx)

    @abstractmethod
    def _check(self, value: Any, ctx: ValidationContext) -> Any:
        """Validate a non-null value."""


@dataclass(frozen=True, slots=True)
class ScalarType(Validator):
    """Single value checked by an atomic rule, after optional coercion."""
    rule: AtomicValidator
    coercion: CoercionRule | None = None

    def _check(self, value: Any, ctx: ValidationContext) -> Any:
        if self.coercion is not None and not self.is_strict and self.coercion.can_coerce(value):
            value = self.coercion.coerce(value)
        if not (result := self.rule.validate(value)).is_valid: return ctx.report(result)
        return value


@dataclass(frozen=True, slots=True)
class ArrayType(Validator):
    """List (or tuple) whose every item satisfies ``items``."""
    items: Validator | None = None
    unique: bool = False

    def _check(self, value: Any, ctx: ValidationContext) -> Any:
        if not isinstance(value, (list, tuple)):
            return ctx.add_error(f"Expected list, got {type(value).__name__}", constraint="array",
                code=ErrorCode.E2004_INVALID_TYPE, actual_value=value)

        result, failed = [], False
        for position, item in enumerate(value):
            if self.items is not None:
                ctx.push_path(position)
                item = self.items.check(item, ctx)
                ctx.pop_path()
            failed = failed or item is INVALID
            if ctx.should_stop: return INVALID
            result.append(item)

        if failed: return INVALID
        if self.unique and not (check := UniqueItems().validate(result)).is_valid: return ctx.report(check)
        return result


@dataclass(frozen=True, slots=True)
class Rename:
    """Rename rule applied to an object's input keys before field validation.

    With ``ignore_undefined`` a source key holding None is dropped instead of
    renamed, as if it were absent.
    """
    from_: str
    to: str
    alias: bool = False
    override: bool = False
    ignore_undefined: bool = False


@dataclass(frozen=True, slots=True)
class ObjectType(Validator):
    """Mapping with declared fields, pattern-matched keys and key renames.

    With no declared fields and no patterns, any key is accepted. Otherwise
    keys that are neither declared nor pattern-matched are rejected unless
    ``allow_unknown`` is set.
    """
    children: Mapping[str, Validator] | None = None
    patterns: tuple[tuple[str, Validator], ...] = ()
    renames: tuple[Rename, ...] = ()
    allow_unknown: bool | None = None
    or_groups: tuple[tuple[str, ...], ...] = ()

    def keys(self, fields: Mapping[str, Validator] | None = None, **named: Validator) -> ObjectType:
        merged = {**(self.children or _EMPTY), **(fields or {}), **named}
        for name, child in merged.items():
            if not isinstance(child, Validator):
                raise SchemaDefinitionError(f"Field '{name}' must be a validator, got {type(child).__name__}",
                    ErrorCode.E9103_INVALID_KEY_DEFINITION, field=name)
        return replace(self, children=MappingProxyType(merged))

    def pattern(self, regex: str, validator: Validator) -> ObjectType:
        return replace(self, patterns=self.patterns + ((regex, validator),))

    def rename(self, from_: str, to: str, *, alias: bool = False, override: bool = False,
               ignore_undefined: bool = False) -> ObjectType:
        if any(r.from_ == from_ for r in self.renames):
            raise SchemaDefinitionError(f"Cannot rename '{from_}' twice", ErrorCode.E9104_DUPLICATE_RENAME,
                from_=from_, to=to)
        return replace(self, renames=self.renames + (Rename(from_, to, alias, override, ignore_undefined),))

    def unknown(self, allow: bool = True) -> ObjectType: return replace(self, allow_unknown=allow)

    def or_(self, *names: str) -> ObjectType: return replace(self, or_groups=self.or_groups + (names,))

    def concat(self, other: ObjectType) -> ObjectType:
        """Combine two object validators; ``other``'s fields and flags win on collision."""
        result = self.keys(other.children) if other.children is not None else self
        for rename in other.renames:
            result = result.rename(rename.from_, rename.to, alias=rename.alias, override=rename.override,
                ignore_undefined=rename.ignore_undefined)
        return replace(result, patterns=result.patterns + other.patterns, annotations=self.annotations.concat(other.annotations),
            or_groups=result.or_groups + other.or_groups,
            allow_unknown=self.allow_unknown if other.allow_unknown is None else other.allow_unknown,
            nullable=self.nullable or other.nullable, is_strict=self.is_strict or other.is_strict)

    def to_cql(self) -> dict[str, Any] | None:
        if (own := self.annotations.merged()) is not None or self.children is None: return own
        return field_annotations(self.children)

    @property
    def _accepts_unknown(self) -> bool:
        if self.allow_unknown is not None: return self.allow_unknown
        return self.children is None and not self.patterns

    def _check(self, value: Any, ctx: ValidationContext) -> Any:
        if not isinstance(value, Mapping):
            return ctx.add_error(f"Expected object, got {type(value).__name__}", constraint="object",
                code=ErrorCode.E2004_INVALID_TYPE, actual_value=value)

        data, failed = dict(value), False
        for rename in self.renames:
            if rename.from_ not in data: continue
            if rename.ignore_undefined and data[rename.from_] is None:
                del data[rename.from_]
                continue
            if rename.to in data and not rename.override:
                ctx.push_path(rename.from_)
                ctx.add_error(f"Cannot rename '{rename.from_}' to existing key '{rename.to}'", constraint="rename",
                    code=ErrorCode.E2008_RENAME_CONFLICT)
                ctx.pop_path()
                failed = True
                if ctx.should_stop: return INVALID
                continue
            data[rename.to] = data[rename.from_] if rename.alias else data.pop(rename.from_)

        result: dict[str, Any] = {}
        children = self.children or _EMPTY
        for key, item in data.items():
            ctx.push_path(key if isinstance(key, str) else str(key))
            if not isinstance(key, str):
                item = ctx.add_error(f"Key {key!r} must be a string, got {type(key).__name__}", constraint="string_keys",
                    code=ErrorCode.E2004_INVALID_TYPE, actual_value=key)
            elif (child := children.get(key) or self._match_pattern(key)) is not None:
                item = child.check(item, ctx)
            elif not self._accepts_unknown:
                item = ctx.add_error(f"Key '{key}' is not allowed", constraint="known_keys", code=ErrorCode.E2006_UNKNOWN_KEY)
            ctx.pop_path()
            failed = failed or item is INVALID
            if ctx.should_stop: return INVALID
            result[key] = item

        for key, child in children.items():
            if key in data: continue
            if child.default is not None:
                if (generated := child.default(ctx.operation)) is not None:
                    result[key] = generated
                    validation_logger().debug("field_defaulted", field=key, operation=ctx.operation)
            elif child.presence_required:
                ctx.push_path(key)
                ctx.add_error(f"Key '{key}' is required", constraint="required", code=ErrorCode.E2001_REQUIRED_FIELD_MISSING)
                ctx.pop_path()
                failed = True
                if ctx.should_stop: return INVALID

        for group in self.or_groups:
            if not any(key in data for key in group):
                ctx.add_error(f"Value must contain at least one of {list(group)}", constraint=f"or[{', '.join(group)}]",
                    code=ErrorCode.E2007_KEY_GROUP_MISSING)
                failed = True
                if ctx.should_stop: return INVALID

        return INVALID if failed else result

    def _match_pattern(self, key: str) -> Validator | None:
        for regex, validator in self.patterns:
            if re.fullmatch(regex, key): return validator
        return None


@dataclass(frozen=True, slots=True)
class AlternativesType(Validator):
    """Value must satisfy at least one candidate, tried in order.

    The first passing candidate's output is kept. When all fail, errors of the
    candidate whose shape matches the value (list vs. mapping) are reported,
    otherwise a single no-match error.
    """
    candidates: tuple[Validator, ...] = ()

    def try_(self, *candidates: Validator) -> AlternativesType:
        return replace(self, candidates=self.candidates + candidates)

    def _check(self, value: Any, ctx: ValidationContext) -> Any:
        attempts: list[tuple[Validator, ValidationContext]] = []
        for candidate in self.candidates:
            attempt = ctx.fork()
            result = candidate.check(value, attempt)
            if not attempt.has_errors: return result
            attempts.append((candidate, attempt))

        for candidate, attempt in attempts:
            if (isinstance(value, (list, tuple)) and isinstance(candidate, ArrayType)) or \
                    (isinstance(value, Mapping) and isinstance(candidate, ObjectType)):
                ctx.absorb(attempt)
                return INVALID

        return ctx.add_error(f"Value does not match any allowed alternative ({len(self.candidates)} tried)",
            constraint="alternatives", code=ErrorCode.E2030_NO_ALTERNATIVE_MATCHED, actual_value=value)


def field_annotations(children: Mapping[str, Validator]) -> dict[str, Any]:
    """``{field: canonical annotation}`` for every CQL-tagged field."""
    return {key: meta for key, child in children.items() if (meta := child.to_cql()) is not None}


# ============================================================================
# Engine builders
# ============================================================================

def string() -> ScalarType:
    return ScalarType(StringType())


def number() -> ScalarType:
    return ScalarType(FiniteNumber())


def integer(min_value: int | None = None, max_value: int | None = None) -> ScalarType:
    return ScalarType(IntegerValue(min_value, max_value, SAFE_INTEGER), StringToInt())


def any_() -> ScalarType:
    return ScalarType(AnyValue())


def array(items: Validator | None = None, *, unique: bool = False) -> ArrayType:
    return ArrayType(items=items, unique=unique)


def alternatives(*candidates: Validator) -> AlternativesType:
    return AlternativesType(candidates=candidates)
