"""Dynamic type creation and the ``cql`` builder namespace.

``create`` builds a validator from a type name plus options, as stored in
table definitions:

    create("int")
    create("timestamp", {"default": "update", "nullable": True})
    create("map", {"mapType": ["text", "int"]})
    create("list", list_type="uuid")

``cql`` exposes every builder under its CQL type name (``cql.int()``,
``cql.map(...)``), including names that would shadow Python builtins.
"""
from __future__ import annotations

from types import SimpleNamespace
from typing import Any

from cqlschema.errors import invalid_options, unknown_type
from cqlschema.logging import builders_logger
from cqlschema.validation import Validator

from .containers import list_, map_, set_
from .options import OptionsInput, TypeOptions, parse_options
from .scalars import SCALAR_BUILDERS

COLLECTION_BUILDERS = {"map": map_, "list": list_, "set": set_}

# Scalar builders that accept TypeOptions
OPTION_BUILDERS = frozenset({"timestamp", "timeuuid", "uuid"})

TYPE_NAMES = sorted({*SCALAR_BUILDERS, *COLLECTION_BUILDERS})


def _sub_type(type_name: str) -> Validator:
    if (builder := SCALAR_BUILDERS.get(type_name)) is None: raise unknown_type(type_name, sorted(SCALAR_BUILDERS))
    return builder()


def _irrelevant_options(type_name: str, opts: TypeOptions) -> list[str]:
    problems = []
    if opts.default is not None and type_name not in OPTION_BUILDERS:
        problems.append(f"default: not supported by '{type_name}'")
    for option, owner in (("map_type", "map"), ("list_type", "list"), ("set_type", "set")):
        if getattr(opts, option) is not None and type_name != owner:
            problems.append(f"{option}: only valid for '{owner}'")
    return problems


def create(type_name: str, options: OptionsInput = None, **kwargs: Any) -> Validator:
    """Build the validator for ``type_name``; unknown names and bad options raise SchemaDefinitionError."""
    if type_name not in SCALAR_BUILDERS and type_name not in COLLECTION_BUILDERS:
        raise unknown_type(type_name, TYPE_NAMES)

    opts = parse_options(type_name, options, **kwargs)
    if problems := _irrelevant_options(type_name, opts): raise invalid_options(type_name, problems)

    if type_name == "map":
        if opts.map_type is None: raise invalid_options(type_name, ["mapType: key and value type names are required"])
        key_name, value_name = opts.map_type
        validator = map_(key_name, _sub_type(value_name))
    elif type_name in COLLECTION_BUILDERS:
        if (element_name := opts.sub_type(type_name)) is None:
            raise invalid_options(type_name, [f"{type_name}Type: element type name is required"])
        validator = COLLECTION_BUILDERS[type_name](_sub_type(element_name))
    elif type_name in OPTION_BUILDERS:
        validator = SCALAR_BUILDERS[type_name](opts)
    else:
        validator = SCALAR_BUILDERS[type_name]()

    builders_logger().debug("type_resolved", type_name=type_name, nullable=opts.nullable)
    return validator.allow_null() if opts.nullable else validator


cql = SimpleNamespace(**SCALAR_BUILDERS, map=map_, list=list_, set=set_, create=create)
