"""Validation Error System

Structured errors with field paths, constraints and the offending values.
Supports both fail-fast and collect-all accumulation modes. Errors are
returned to the caller inside a ValidationOutcome, never raised by validate().

Error Format:
{
    "error": {
        "type": "validation_error",
        "message": "Validation failed",
        "mode": "fail_fast",
        "errors": [
            {
                "field": "track_list[1]",
                "constraint": "string",
                "code": "E2004_INVALID_TYPE",
                "value": 123,
                "message": "Expected string, got int"
            }
        ]
    }
}
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from cqlschema.errors import ErrorCode

if TYPE_CHECKING:
    from .validators import ValidationResult


class ValidationMode(str, Enum):
    """Validation accumulation strategy."""
    FAIL_FAST = "fail_fast"
    COLLECT_ALL = "collect_all"


class _Invalid:
    """Marker returned by shape validators whose input failed."""
    __slots__ = ()

    def __repr__(self) -> str: return "INVALID"

    def __bool__(self) -> bool: return False


INVALID = _Invalid()


@dataclass(frozen=True, slots=True)
class ValidationErrorDetail:
    """Detailed validation error for a single field.

    - field_path: path to the offending value (e.g. "tags.index.3")
    - constraint: constraint violated (e.g. "uuid", "range[>=-2147483648, <=2147483647]")
    - code: taxonomy code
    - actual_value: the value that failed
    - message: human-readable error message
    """
    field_path: str
    constraint: str
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC
    actual_value: Any = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        result = {"field": self.field_path, "constraint": self.constraint, "code": self.code.name, "message": self.message}
        if self.actual_value is not None: result["value"] = self.actual_value
        return result


@dataclass
class ValidationError(Exception):
    """Validation error with structured details."""
    message: str
    details: list[ValidationErrorDetail]
    mode: ValidationMode = ValidationMode.FAIL_FAST

    def __post_init__(self):
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        if not self.details: return self.message
        if len(self.details) == 1: return f"{(d := self.details[0]).field_path}: {d.message}"
        return f"{self.message} ({len(self.details)} errors)"

    @property
    def field_errors(self) -> dict[str, list[ValidationErrorDetail]]:
        """Group errors by field path."""
        result: dict[str, list[ValidationErrorDetail]] = {}
        for detail in self.details: result.setdefault(detail.field_path, []).append(detail)
        return result

    @property
    def first_error(self) -> ValidationErrorDetail | None: return self.details[0] if self.details else None

    def get_errors_for_field(self, field_path: str) -> list[ValidationErrorDetail]:
        return [d for d in self.details if d.field_path == field_path]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"error": {"type": "validation_error", "message": self.message, "mode": self.mode.value,
            "error_count": len(self.details), "errors": [d.to_dict() for d in self.details]}}


class ValidationErrorAccumulator(ABC):
    """Abstract base for error accumulation strategies."""

    @abstractmethod
    def add_error(self, detail: ValidationErrorDetail) -> bool:
        """Add error detail. Returns True if should continue, False if should stop."""

    @abstractmethod
    def get_errors(self) -> list[ValidationErrorDetail]:
        """Get accumulated errors."""

    @abstractmethod
    def has_errors(self) -> bool:
        """Check if any errors accumulated."""

    @property
    @abstractmethod
    def stopped(self) -> bool:
        """True once no further errors will be accepted."""

    @property
    @abstractmethod
    def mode(self) -> ValidationMode:
        """Get the accumulation mode."""

    def to_validation_error(self, message: str = "Validation failed") -> ValidationError | None:
        """Convert to ValidationError if errors exist."""
        if not self.has_errors(): return None
        return ValidationError(message=message, details=self.get_errors(), mode=self.mode)


@dataclass
class FailFastAccumulator(ValidationErrorAccumulator):
    """Fail-fast accumulator: stops on first error."""
    _error: ValidationErrorDetail | None = None

    @property
    def mode(self) -> ValidationMode: return ValidationMode.FAIL_FAST

    @property
    def stopped(self) -> bool: return self._error is not None

    def add_error(self, detail: ValidationErrorDetail) -> bool:
        if self._error is None: self._error = detail
        return False

    def get_errors(self) -> list[ValidationErrorDetail]: return [self._error] if self._error else []

    def has_errors(self) -> bool: return self._error is not None


@dataclass
class CollectAllAccumulator(ValidationErrorAccumulator):
    """Collect-all accumulator: gathers all errors up to max_errors."""
    _errors: list[ValidationErrorDetail] = field(default_factory=list)
    max_errors: int = 50

    @property
    def mode(self) -> ValidationMode: return ValidationMode.COLLECT_ALL

    @property
    def stopped(self) -> bool: return len(self._errors) >= self.max_errors

    def add_error(self, detail: ValidationErrorDetail) -> bool:
        if len(self._errors) < self.max_errors: self._errors.append(detail)
        return len(self._errors) < self.max_errors

    def get_errors(self) -> list[ValidationErrorDetail]: return self._errors.copy()

    def has_errors(self) -> bool: return len(self._errors) > 0


def create_accumulator(mode: ValidationMode, max_errors: int = 50) -> ValidationErrorAccumulator:
    """Factory for creating accumulators based on mode."""
    return FailFastAccumulator() if mode == ValidationMode.FAIL_FAST else CollectAllAccumulator(max_errors=max_errors)


class ValidationContext:
    """Per-run state of one validate() call.

    Tracks the current field path, accumulates errors according to the mode
    and carries the caller's operation label for default generation.

    Usage:
        ctx = ValidationContext(mode=ValidationMode.COLLECT_ALL, operation="create")
        value = validator.check(data, ctx)
        error = ctx.to_validation_error()
    """

    def __init__(self, mode: ValidationMode = ValidationMode.FAIL_FAST, max_errors: int = 50,
                 operation: str | None = None, path: list[str | int] | None = None):
        self.accumulator, self.max_errors = create_accumulator(mode, max_errors), max_errors
        self.operation, self._path_stack = operation, list(path or [])

    @property
    def mode(self) -> ValidationMode: return self.accumulator.mode

    def push_path(self, segment: str | int) -> None: self._path_stack.append(segment)

    def pop_path(self) -> str | int | None: return self._path_stack.pop() if self._path_stack else None

    @property
    def current_path(self) -> str:
        if not self._path_stack: return "$"
        parts: list[str] = []
        for segment in self._path_stack:
            if isinstance(segment, int): parts.append(f"[{segment}]")
            elif parts: parts.append(f".{segment}")
            else: parts.append(str(segment))
        return "".join(parts)

    def report(self, result: ValidationResult) -> _Invalid:
        """Record a failed ValidationResult at the current path."""
        self.accumulator.add_error(ValidationErrorDetail(field_path=self.current_path,
            constraint=result.constraint or "custom", code=result.error_code or ErrorCode.E2000_VALIDATION_GENERIC,
            actual_value=result.actual, message=result.error_message or "Validation failed"))
        return INVALID

    def add_error(self, message: str, *, constraint: str = "custom", code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC,
                  actual_value: Any = None) -> _Invalid:
        """Manually add a validation error at the current path."""
        self.accumulator.add_error(ValidationErrorDetail(field_path=self.current_path, constraint=constraint,
            code=code, actual_value=actual_value, message=message))
        return INVALID

    def fork(self) -> ValidationContext:
        """Fresh context at the same path and mode, for trying alternatives."""
        return ValidationContext(self.mode, self.max_errors, self.operation, self._path_stack)

    def absorb(self, other: ValidationContext) -> None:
        for detail in other.errors:
            if not self.accumulator.add_error(detail): break

    @property
    def should_stop(self) -> bool: return self.accumulator.stopped

    @property
    def has_errors(self) -> bool: return self.accumulator.has_errors()

    @property
    def errors(self) -> list[ValidationErrorDetail]: return self.accumulator.get_errors()

    def to_validation_error(self, message: str = "Validation failed") -> ValidationError | None:
        return self.accumulator.to_validation_error(message)
