"""Explicit Opt-in Coercion System

Coercion rules are explicit and opt-in, NEVER implicit. A scalar validator
only coerces when it was built with a rule and has not been marked strict;
the coerced value is then checked by the validator's atomic rule as usual.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .validators import MAX_NUMERAL_DIGITS

T = TypeVar("T")
S = TypeVar("S")

HEX_PATTERN = re.compile(r"[0-9a-f]+", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class CoercionRule(ABC, Generic[S, T]):
    """Base class for coercion rules.

    Each rule defines:
    - Source type(s) it can coerce from
    - Target type it coerces to
    - Validation of coercion feasibility
    - The actual coercion logic
    """

    @property
    @abstractmethod
    def source_types(self) -> tuple[type, ...]:
        """Types this rule can coerce from."""

    @property
    @abstractmethod
    def target_type(self) -> type[T]:
        """Type this rule coerces to."""

    @abstractmethod
    def can_coerce(self, value: Any) -> bool:
        """Check if value can be coerced to target type."""

    @abstractmethod
    def coerce(self, value: Any) -> T:
        """Coerce value to target type. Raises ValueError when can_coerce() is False."""

    def __call__(self, value: Any) -> T:
        return self.coerce(value)


@dataclass(frozen=True, slots=True)
class StringToInt(CoercionRule[str, int]):
    """Coerce a decimal numeral string (surrounding whitespace ignored) to int.

    Numerals longer than ``max_digits`` are left as strings for the rule to reject.
    """
    max_digits: int = MAX_NUMERAL_DIGITS

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str,)

    @property
    def target_type(self) -> type[int]:
        return int

    def can_coerce(self, value: Any) -> bool:
        if not isinstance(value, str) or re.fullmatch(r"[+-]?[0-9]+", numeral := value.strip()) is None: return False
        return len(numeral.lstrip("+-")) <= self.max_digits

    def coerce(self, value: Any) -> int:
        if not self.can_coerce(value):
            raise ValueError(f"Cannot coerce {value!r} to int")
        return int(value.strip())


@dataclass(frozen=True, slots=True)
class StringToBytes(CoercionRule[str, bytes]):
    """Coerce free-form text to its encoded bytes.

    Hexadecimal strings are left alone: they are already a valid blob literal.
    """
    encoding: str = "utf-8"

    @property
    def source_types(self) -> tuple[type, ...]:
        return (str,)

    @property
    def target_type(self) -> type[bytes]:
        return bytes

    def can_coerce(self, value: Any) -> bool:
        return isinstance(value, str) and not HEX_PATTERN.fullmatch(value)

    def coerce(self, value: Any) -> bytes:
        if not self.can_coerce(value):
            raise ValueError(f"Cannot coerce {type(value).__name__} to bytes")
        return value.encode(self.encoding)
