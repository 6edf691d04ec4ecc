"""Builder option models.

Options reach the builders as a mapping (``{"default": "v4"}``), as a
TypeOptions instance or as keyword arguments. All three are validated by the
same pydantic model; a malformed option is a programmer error and surfaces
as SchemaDefinitionError, never as a data validation failure.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from cqlschema.errors import invalid_options


class TypeOptions(BaseModel):
    """Options accepted by ``create`` and the option-taking builders.

    Collection sub-types accept both the snake_case field names and the
    camelCase spellings used in stored table definitions (``mapType``...).
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    default: str | None = None
    nullable: bool = False
    map_type: tuple[str, str] | None = Field(default=None, alias="mapType")
    list_type: str | None = Field(default=None, alias="listType")
    set_type: str | None = Field(default=None, alias="setType")

    def sub_type(self, type_name: str) -> str | None:
        """Element type name for ``list``/``set``."""
        return self.list_type if type_name == "list" else self.set_type if type_name == "set" else None


OptionsInput = TypeOptions | Mapping[str, Any] | None


def parse_options(type_name: str, options: OptionsInput = None, **overrides: Any) -> TypeOptions:
    """Normalize builder options into a TypeOptions, merging keyword overrides."""
    if isinstance(options, TypeOptions):
        if not overrides: return options
        data = options.model_dump(exclude_unset=True)
    elif options is None or isinstance(options, Mapping):
        data = dict(options or {})
    else:
        raise invalid_options(type_name, [f"options must be a mapping, got {type(options).__name__}"])

    try:
        return TypeOptions.model_validate({**data, **overrides})
    except PydanticValidationError as e:
        raise invalid_options(type_name, [f"{'.'.join(str(loc) for loc in err['loc']) or 'options'}: {err['msg']}"
            for err in e.errors()]) from e
