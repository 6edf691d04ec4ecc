"""Context-dependent default values.

A default is a pure function of the operation label supplied to a validation
run (typically ``"create"`` or ``"update"``). It is evaluated only while an
object validator finds the field absent; returning None leaves the field
absent.

- date family: trigger ``update`` fires on ``create`` and ``update``; trigger
  ``create`` fires only on ``create``. Yields the current UTC time as an
  ISO-8601 string with millisecond precision and a ``Z`` suffix.
- uuid family: fires only on ``create``. ``empty`` yields the nil UUID,
  ``v1``/``v4`` a freshly generated UUID of that version.
"""
from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError, model_validator

from cqlschema.errors import ErrorCode, SchemaDefinitionError

NIL_UUID = "00000000-0000-0000-0000-000000000000"

DATE_TRIGGERS = frozenset({"create", "update"})
UUID_TRIGGERS = frozenset({"empty", "v1", "v4"})

UUID_GENERATORS: dict[str, Callable[[], str]] = {
    "empty": lambda: NIL_UUID,
    "v1": lambda: str(uuid.uuid1()),
    "v4": lambda: str(uuid.uuid4()),
}


def utc_timestamp() -> str:
    """Current UTC time, e.g. ``2016-03-01T12:30:05.123Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DefaultSpec(BaseModel):
    """Which value family to generate and which operation triggers it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    family: Literal["date", "uuid"]
    trigger: Literal["create", "update", "empty", "v1", "v4"]

    @model_validator(mode="after")
    def _check_trigger_matches_family(self) -> Self:
        allowed = DATE_TRIGGERS if self.family == "date" else UUID_TRIGGERS
        if self.trigger not in allowed:
            raise ValueError(f"trigger '{self.trigger}' is not valid for {self.family} defaults, expected one of {sorted(allowed)}")
        return self

    def resolve(self, operation: str | None) -> Any:
        """Generated value for this operation, or None when the trigger does not fire."""
        if self.family == "date":
            if operation == self.trigger or (self.trigger == "update" and operation in DATE_TRIGGERS):
                return utc_timestamp()
            return None
        return UUID_GENERATORS[self.trigger]() if operation == "create" else None

    def __call__(self, operation: str | None) -> Any:
        return self.resolve(operation)


def _build(family: str, trigger: str) -> DefaultSpec:
    try:
        return DefaultSpec(family=family, trigger=trigger)
    except PydanticValidationError as e:
        problems = [err["msg"] for err in e.errors()]
        raise SchemaDefinitionError(f"Invalid {family} default '{trigger}': {'; '.join(problems)}",
            ErrorCode.E9101_INVALID_TYPE_OPTIONS, family=family, trigger=trigger) from e


def date_default(trigger: str | None) -> DefaultSpec | None:
    """Date-family default for a ``timestamp`` option; None when no option was given."""
    return _build("date", trigger) if trigger else None


def uuid_default(trigger: str | None, version: Literal["v1", "v4"]) -> DefaultSpec:
    """UUID-family default for a builder that generates ``version`` UUIDs.

    No option means the builder's own version. ``empty`` and the builder's
    own version are honoured; any other valid trigger falls back to the
    builder's own version.
    """
    if not trigger: return _build("uuid", version)
    spec = _build("uuid", trigger)
    return spec if spec.trigger in (version, "empty") else _build("uuid", version)
