"""Compositional Validator System

Atomic validators check a single value and combine via AND/OR combinators.
Shape validators in ``types.py`` compose them into field, array and object
rules.

Features:
- Frozen dataclass validators for immutability
- Rich validation metadata for error context
- Lazy evaluation for OR combinators
- Short-circuit evaluation for AND combinators
"""
from __future__ import annotations

import json
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from ipaddress import ip_address
from typing import Any
from uuid import UUID as StdUUID

from cqlschema.errors import ErrorCode

# Largest integer a binary64 float represents exactly
SAFE_INTEGER = 2**53 - 1

# Longest numeral int() converts under the default interpreter limit
MAX_NUMERAL_DIGITS = 4300

UUID_PATTERN = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)

ISO_DATETIME_PATTERN = re.compile(
    r"(?P<year>[0-9]{4})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})"
    r"(?:[T ](?P<hour>[0-9]{2}):(?P<minute>[0-9]{2})"
    r"(?::(?P<second>[0-9]{2})(?:\.(?P<fraction>[0-9]+))?)?"
    r"(?P<zone>Z|[+-][0-9]{2}(?::?[0-9]{2})?)?)?"
)


def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of a validation check with rich context."""
    is_valid: bool
    error_message: str | None = None
    error_code: ErrorCode | None = None
    constraint: str | None = None
    expected: Any = None
    actual: Any = None

    @classmethod
    def valid(cls) -> ValidationResult: return cls(is_valid=True)

    @classmethod
    def invalid(cls, message: str, code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC, *,
                constraint: str | None = None, expected: Any = None, actual: Any = None) -> ValidationResult:
        return cls(is_valid=False, error_message=message, error_code=code, constraint=constraint,
            expected=expected, actual=actual)

    def to_dict(self) -> dict[str, Any]:
        if self.is_valid: return {"valid": True}
        return {"valid": False, "message": self.error_message, "code": self.error_code.name if self.error_code else None,
            "constraint": self.constraint, "expected": self.expected, "actual": self.actual}


class AtomicValidator(ABC):
    """Base class for atomic validators.

    Validators are immutable and composable via operators:
    - & (AND): both must pass
    - | (OR): at least one must pass
    """

    @abstractmethod
    def validate(self, value: Any) -> ValidationResult:
        """Validate a value. Returns ValidationResult."""

    @property
    @abstractmethod
    def constraint_name(self) -> str:
        """Human-readable constraint name for error messages."""

    def __call__(self, value: Any) -> ValidationResult: return self.validate(value)

    def __and__(self, other: AtomicValidator) -> And: return And(self, other)

    def __or__(self, other: AtomicValidator) -> Or: return Or(self, other)

    def _wrong_type(self, value: Any, expected: str) -> ValidationResult:
        return ValidationResult.invalid(f"Expected {expected}, got {_type_name(value)}", ErrorCode.E2004_INVALID_TYPE,
            constraint=self.constraint_name, expected=expected, actual=value)


# ============================================================================
# String Validators
# ============================================================================

@dataclass(frozen=True, slots=True)
class StringType(AtomicValidator):
    """Validate that the value is a string."""
    allow_empty: bool = True

    @property
    def constraint_name(self) -> str:
        return "string" if self.allow_empty else "non_empty_string"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return self._wrong_type(value, "string")
        if not value and not self.allow_empty:
            return ValidationResult.invalid("String cannot be empty", ErrorCode.E2001_REQUIRED_FIELD_MISSING,
                constraint=self.constraint_name, expected="non-empty string", actual=value)
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class RegexPattern(AtomicValidator):
    """Validate that the whole string matches a regex pattern."""
    pattern: str
    flags: int = 0
    description: str | None = None

    @property
    def constraint_name(self) -> str:
        return self.description or f"pattern[{self.pattern}]"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return self._wrong_type(value, "string")

        if not re.fullmatch(self.pattern, value, self.flags):
            return ValidationResult.invalid(
                f"Value does not match pattern: {self.description or self.pattern}",
                ErrorCode.E2002_INVALID_FORMAT,
                constraint=self.constraint_name,
                expected=f"match pattern '{self.pattern}'",
                actual=value[:50] + ("..." if len(value) > 50 else ""),
            )

        return ValidationResult.valid()


# ============================================================================
# Numeric Validators
# ============================================================================

@dataclass(frozen=True, slots=True)
class IntegerValue(AtomicValidator):
    """Validate an integer number within optional inclusive bounds.

    ``float`` values count as integers when they are finite, integral and no
    larger in magnitude than ``max_float`` (past which they lose precision).
    """
    min_value: int | None = None
    max_value: int | None = None
    max_float: int = SAFE_INTEGER

    @property
    def constraint_name(self) -> str:
        parts = []
        if self.min_value is not None: parts.append(f">={self.min_value}")
        if self.max_value is not None: parts.append(f"<={self.max_value}")
        return f"integer[{', '.join(parts)}]" if parts else "integer"

    def validate(self, value: Any) -> ValidationResult:
        if isinstance(value, bool) or not isinstance(value, (int, float)): return self._wrong_type(value, "integer")

        if isinstance(value, float):
            if not math.isfinite(value) or not value.is_integer():
                return ValidationResult.invalid(f"Value {value} is not an integer", ErrorCode.E2004_INVALID_TYPE,
                    constraint=self.constraint_name, expected="integer", actual=value)
            if abs(value) > self.max_float:
                return ValidationResult.invalid(f"Value {value} cannot be represented exactly", ErrorCode.E2003_OUT_OF_RANGE,
                    constraint=self.constraint_name, expected=f"|value| <= {self.max_float}", actual=value)

        return _check_bounds(self, value)


@dataclass(frozen=True, slots=True)
class IntegerString(AtomicValidator):
    """Validate a decimal numeral string with optional digit and value limits."""
    max_digits: int | None = None
    min_value: int | None = None
    max_value: int | None = None

    @property
    def constraint_name(self) -> str:
        return f"integer_string[{self.max_digits or '*'} digits]"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return self._wrong_type(value, "numeral string")

        digits = f"{{1,{self.max_digits}}}" if self.max_digits else "+"
        if not re.fullmatch(rf"-?[0-9]{digits}", value):
            return ValidationResult.invalid(f"Invalid integer string: {value[:50]}", ErrorCode.E2002_INVALID_FORMAT,
                constraint=self.constraint_name, expected="optional '-' followed by digits", actual=value)

        if self.min_value is None and self.max_value is None: return ValidationResult.valid()

        # Compare magnitudes by digit count first; int() refuses very long numerals
        negative, significant = value.startswith("-"), value.lstrip("-").lstrip("0") or "0"
        bound = self.min_value if negative else self.max_value
        if bound is not None and len(significant) > len(str(abs(bound))):
            return _check_bounds(self, bound - 1 if negative else bound + 1, actual=value)
        if bound is None and len(significant) > MAX_NUMERAL_DIGITS: return ValidationResult.valid()
        return _check_bounds(self, int(f"-{significant}" if negative else significant), actual=value)


def _shown(value: Any) -> str:
    if isinstance(value, int) and value.bit_length() > 3 * MAX_NUMERAL_DIGITS: return f"<{value.bit_length()}-bit integer>"
    text = str(value)
    return text if len(text) <= 50 else f"{text[:47]}..."


def _check_bounds(rule: IntegerValue | IntegerString, number: int | float, *, actual: Any = None) -> ValidationResult:
    actual = number if actual is None else actual
    if rule.min_value is not None and number < rule.min_value:
        return ValidationResult.invalid(f"Value {_shown(actual)} must be at least {rule.min_value}", ErrorCode.E2003_OUT_OF_RANGE,
            constraint=rule.constraint_name, expected=f">= {rule.min_value}", actual=actual)
    if rule.max_value is not None and number > rule.max_value:
        return ValidationResult.invalid(f"Value {_shown(actual)} must be at most {rule.max_value}", ErrorCode.E2003_OUT_OF_RANGE,
            constraint=rule.constraint_name, expected=f"<= {rule.max_value}", actual=actual)
    return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class FiniteNumber(AtomicValidator):
    """Validate any finite int, float or Decimal (booleans excluded)."""

    @property
    def constraint_name(self) -> str:
        return "number"

    def validate(self, value: Any) -> ValidationResult:
        if not _is_number(value): return self._wrong_type(value, "number")
        if isinstance(value, Decimal): finite = value.is_finite()
        else: finite = math.isfinite(value)
        if not finite:
            return ValidationResult.invalid(f"Value {value} is not finite", ErrorCode.E2003_OUT_OF_RANGE,
                constraint=self.constraint_name, expected="finite number", actual=value)
        return ValidationResult.valid()


# ============================================================================
# Scalar Type Validators
# ============================================================================

@dataclass(frozen=True, slots=True)
class BooleanValue(AtomicValidator):
    """Validate a strict boolean."""

    @property
    def constraint_name(self) -> str:
        return "boolean"

    def validate(self, value: Any) -> ValidationResult:
        return ValidationResult.valid() if isinstance(value, bool) else self._wrong_type(value, "boolean")


@dataclass(frozen=True, slots=True)
class BinaryValue(AtomicValidator):
    """Validate raw bytes."""

    @property
    def constraint_name(self) -> str:
        return "binary"

    def validate(self, value: Any) -> ValidationResult:
        return ValidationResult.valid() if isinstance(value, (bytes, bytearray, memoryview)) else self._wrong_type(value, "bytes")


@dataclass(frozen=True, slots=True)
class AnyValue(AtomicValidator):
    """Accept every value."""

    @property
    def constraint_name(self) -> str:
        return "any"

    def validate(self, value: Any) -> ValidationResult:
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class JsonSerializable(AtomicValidator):
    """Validate that the value survives JSON encoding."""

    @property
    def constraint_name(self) -> str:
        return "json"

    def validate(self, value: Any) -> ValidationResult:
        try:
            json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as e:
            return ValidationResult.invalid(f"Value is not JSON-serializable: {e}", ErrorCode.E2021_INVALID_JSON,
                constraint=self.constraint_name, expected="JSON-serializable value", actual=_type_name(value))
        return ValidationResult.valid()


# ============================================================================
# Format Validators
# ============================================================================

@dataclass(frozen=True, slots=True)
class UUIDValidator(AtomicValidator):
    """Validate canonical 8-4-4-4-12 UUID strings (any version, any case)."""

    @property
    def constraint_name(self) -> str:
        return "uuid"

    def validate(self, value: Any) -> ValidationResult:
        if isinstance(value, StdUUID): return ValidationResult.valid()
        if not isinstance(value, str): return self._wrong_type(value, "UUID string")

        if not UUID_PATTERN.fullmatch(value):
            return ValidationResult.invalid(
                f"Invalid UUID format: {value[:50]}",
                ErrorCode.E2011_INVALID_UUID,
                constraint=self.constraint_name,
                expected="xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx",
                actual=value[:50] if len(value) > 50 else value,
            )
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class DateTimeValidator(AtomicValidator):
    """Validate ISO8601 date/datetime strings.

    Accepted granularities: date only; date plus hours and minutes with
    optional seconds and fraction; either a ``T`` or a space separator; an
    optional ``Z`` or numeric offset, which requires a time component.
    """

    @property
    def constraint_name(self) -> str:
        return "iso_datetime"

    def validate(self, value: Any) -> ValidationResult:
        if isinstance(value, (datetime, date)): return ValidationResult.valid()
        if not isinstance(value, str): return self._wrong_type(value, "ISO8601 string")

        if not (match := ISO_DATETIME_PATTERN.fullmatch(value)):
            return self._invalid(value)

        parts = match.groupdict()
        try:
            datetime(int(parts["year"]), int(parts["month"]), int(parts["day"]),
                int(parts["hour"] or 0), int(parts["minute"] or 0), int(parts["second"] or 0),
                tzinfo=_parse_zone(parts["zone"]))
        except ValueError:
            return self._invalid(value)
        return ValidationResult.valid()

    def _invalid(self, value: str) -> ValidationResult:
        return ValidationResult.invalid(f"Invalid ISO8601 datetime: {value[:50]}", ErrorCode.E2012_INVALID_DATE,
            constraint=self.constraint_name, expected="ISO8601 datetime", actual=value)


def _parse_zone(zone: str | None) -> timezone | None:
    if not zone: return None
    if zone == "Z": return timezone.utc
    digits = zone[1:].replace(":", "")
    offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:] or 0))
    return timezone(-offset if zone[0] == "-" else offset)


@dataclass(frozen=True, slots=True)
class IPAddressValidator(AtomicValidator):
    """Validate IPv4/IPv6 address literals, optionally with a CIDR prefix."""
    version: int | None = None  # 4 or 6, None for both
    cidr: bool = False

    @property
    def constraint_name(self) -> str:
        return f"ip{f'v{self.version}' if self.version else ''}{'_cidr' if self.cidr else ''}"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return self._wrong_type(value, "IP address string")

        address, slash, prefix = value.partition("/")
        if "%" in address: return self._invalid(value)
        try:
            parsed = ip_address(address)
        except ValueError:
            return self._invalid(value)

        if self.version and parsed.version != self.version: return self._invalid(value)
        if slash:
            if not self.cidr or not prefix.isdigit() or not prefix.isascii() or int(prefix) > parsed.max_prefixlen:
                return self._invalid(value)
        return ValidationResult.valid()

    def _invalid(self, value: str) -> ValidationResult:
        expected = f"IPv{self.version}" if self.version else "IP address"
        return ValidationResult.invalid(f"Invalid {expected}: {value[:50]}", ErrorCode.E2013_INVALID_ADDRESS,
            constraint=self.constraint_name, expected=expected, actual=value)


# ============================================================================
# Collection Validators
# ============================================================================

@dataclass(frozen=True, slots=True)
class UniqueItems(AtomicValidator):
    """Validate that a list holds no structurally equal items."""

    @property
    def constraint_name(self) -> str:
        return "unique_items"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, (list, tuple)): return self._wrong_type(value, "list")

        for position, item in enumerate(value):
            if any(item == earlier for earlier in value[:position]):
                return ValidationResult.invalid(
                    f"List contains duplicate item at position {position}",
                    ErrorCode.E2005_CONSTRAINT_VIOLATION,
                    constraint=self.constraint_name,
                    expected="unique items",
                    actual=item,
                )

        return ValidationResult.valid()


# ============================================================================
# Combinators
# ============================================================================

@dataclass(frozen=True, slots=True)
class And(AtomicValidator):
    """AND combinator: all validators must pass (short-circuit on first failure)."""
    left: AtomicValidator
    right: AtomicValidator

    @property
    def constraint_name(self) -> str:
        return f"({self.left.constraint_name} AND {self.right.constraint_name})"

    def validate(self, value: Any) -> ValidationResult:
        if not (left_result := self.left.validate(value)).is_valid: return left_result
        return self.right.validate(value)


@dataclass(frozen=True, slots=True)
class Or(AtomicValidator):
    """OR combinator: at least one validator must pass (lazy evaluation)."""
    left: AtomicValidator
    right: AtomicValidator

    @property
    def constraint_name(self) -> str:
        return f"({self.left.constraint_name} OR {self.right.constraint_name})"

    def validate(self, value: Any) -> ValidationResult:
        if (left_result := self.left.validate(value)).is_valid: return ValidationResult.valid()
        if (right_result := self.right.validate(value)).is_valid: return ValidationResult.valid()
        return ValidationResult.invalid(f"Neither constraint satisfied: {left_result.error_message} OR {right_result.error_message}",
            ErrorCode.E2030_NO_ALTERNATIVE_MATCHED, constraint=self.constraint_name, actual=value)
