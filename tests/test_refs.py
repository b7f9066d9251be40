from __future__ import annotations

import pytest

from oasdsl.model.spec import Inline, Pointer, Schema, SchemaType
from oasdsl.schema.dsl import SchemaBuilder
from oasdsl.schema.refs import (
    SchemaReferenceError,
    TypeRegistry,
    canonical_path,
    resolve,
    resolve_pointer,
)


class Pet:
    pass


class Dog(Pet):
    pass


def test_bare_names_become_component_pointers() -> None:
    assert canonical_path("Pet") == "#/components/schemas/Pet"


@pytest.mark.parametrize(
    "target",
    [
        "#/components/schemas/Pet",
        "#/definitions/Legacy",
        "https://example.com/schemas/pet.json",
    ],
)
def test_explicit_pointers_and_urls_are_kept_verbatim(target: str) -> None:
    assert canonical_path(target) == target


@pytest.mark.parametrize("target", ["", "   ", None, 42])
def test_blank_or_non_string_targets_are_rejected(target: object) -> None:
    with pytest.raises(SchemaReferenceError):
        canonical_path(target)  # type: ignore[arg-type]


def test_canonicalisation_is_idempotent() -> None:
    once = resolve("Pet")
    assert isinstance(once, Pointer)
    assert resolve(once.path) == once


def test_unregistered_types_fall_back_to_class_name() -> None:
    assert resolve(Dog) == Pointer("#/components/schemas/Dog")


def test_registered_types_use_their_schema_name() -> None:
    registry = TypeRegistry()
    registry.register(Dog, "Canine", description="A good dog")

    assert Dog in registry
    assert Pet not in registry
    assert registry.entry_for(Dog).description == "A good dog"
    assert resolve(Dog, registry=registry) == Pointer("#/components/schemas/Canine")


def test_register_returns_the_type_for_decorator_use() -> None:
    registry = TypeRegistry()

    @registry.register
    class Cat:
        pass

    assert registry.entry_for(Cat).name == "Cat"


def test_register_rejects_non_types() -> None:
    with pytest.raises(SchemaReferenceError):
        TypeRegistry().register("Pet")  # type: ignore[arg-type]


def test_schemas_builders_and_blocks_become_inline() -> None:
    built = Schema(type=SchemaType.STRING)

    assert resolve(built) == Inline(built)
    assert resolve(SchemaBuilder("string")) == Inline(built)
    assert resolve(lambda s: s.type("string")) == Inline(built)


def test_existing_refs_pass_through() -> None:
    pointer = Pointer("#/components/schemas/Pet")
    assert resolve(pointer) is pointer


def test_resolve_rejects_unsupported_targets() -> None:
    with pytest.raises(SchemaReferenceError, match="Cannot resolve"):
        resolve(3.14)


def test_resolve_pointer_rejects_inline_schemas() -> None:
    assert resolve_pointer("Dog") == "#/components/schemas/Dog"
    with pytest.raises(SchemaReferenceError, match="not an inline schema"):
        resolve_pointer(lambda s: s.type("object"))
