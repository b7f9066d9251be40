"""Shorthands for the composition shapes that come up in most API documents."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from oasdsl.model.spec import SchemaType
from oasdsl.schema.dsl import SchemaBlock, SchemaBuilder


def discriminated_union(
    builder: SchemaBuilder,
    property_name: str,
    mappings: Mapping[str, str | type],
) -> SchemaBuilder:
    """``oneOf`` the mapped schemas and name them in a discriminator."""
    builder.one_of(*mappings.values())
    return builder.discriminator(property_name, mapping=mappings)


def nullable(builder: SchemaBuilder, target: Any) -> SchemaBuilder:
    return builder.any_of(target, lambda null: null.type(SchemaType.NULL))


def optional_of(builder: SchemaBuilder, target: str | type) -> SchemaBuilder:
    return nullable(builder, target)


def extending(
    builder: SchemaBuilder,
    *bases: str | type,
    block: SchemaBlock | None = None,
) -> SchemaBuilder:
    """Inherit ``bases`` through ``allOf`` and add an object schema for the rest.

    Bases render first, in the order given.
    """

    def extension(child: SchemaBuilder) -> None:
        child.type(SchemaType.OBJECT)
        if block is not None:
            block(child)

    return builder.all_of(*bases, extension)


def one_of_types(
    builder: SchemaBuilder,
    *types: type,
    discriminator_property: str | None = None,
    discriminator_mappings: Mapping[str, type] | None = None,
) -> SchemaBuilder:
    builder.one_of(*types)
    if discriminator_property is not None:
        builder.discriminator(discriminator_property, mapping=discriminator_mappings)
    return builder
