from __future__ import annotations

import pytest

from oasdsl.model.spec import Discriminator, Example, Inline, Pointer, Schema, SchemaFormat, SchemaType
from oasdsl.model.value import Bool, Int, Map, Str
from oasdsl.schema.dsl import (
    AllOfBuilder,
    DiscriminatorBuilder,
    EmptyCompositionError,
    MissingDiscriminatorProperty,
    OneOfBuilder,
    SchemaBuildError,
    SchemaBuilder,
    inline_schema,
    schema,
    schema_ref,
)
from oasdsl.schema.patterns import discriminated_union, extending, nullable, one_of_types, optional_of
from oasdsl.schema.refs import TypeRegistry, resolve


class Cat:
    pass


def test_discriminator_requires_property_name() -> None:
    with pytest.raises(MissingDiscriminatorProperty):
        DiscriminatorBuilder().build()


@pytest.mark.parametrize("name", ["", "   ", "\t"])
def test_discriminator_rejects_blank_property_name(name: str) -> None:
    with pytest.raises(MissingDiscriminatorProperty):
        DiscriminatorBuilder(name).build()


def test_discriminator_with_name_builds_without_mapping() -> None:
    built = DiscriminatorBuilder().property_name("petType").build()
    assert built == Discriminator(property_name="petType", mapping=None)


def test_discriminator_mapping_canonicalises_targets_and_last_write_wins() -> None:
    built = (
        DiscriminatorBuilder("petType")
        .mapping("dog", "Dog")
        .mapping("cat", Cat)
        .mapping("dog", "#/components/schemas/Hound")
        .build()
    )

    assert dict(built.mapping) == {
        "dog": "#/components/schemas/Hound",
        "cat": "#/components/schemas/Cat",
    }
    assert list(built.mapping) == ["dog", "cat"]


def test_discriminator_mapping_rejects_inline_targets() -> None:
    with pytest.raises(ValueError):
        DiscriminatorBuilder("kind").mapping("x", lambda s: s.type("object"))


def test_composition_builders_keep_order_and_duplicates() -> None:
    built = OneOfBuilder("A", "B").add("A", Cat).build()

    assert built == (
        resolve("A"),
        resolve("B"),
        resolve("A"),
        Pointer("#/components/schemas/Cat"),
    )


def test_schema_builder_composition_order_matches_inputs() -> None:
    inline = Schema(type=SchemaType.STRING)
    built = SchemaBuilder().any_of("a", inline, Cat).build()

    assert built.any_of == (resolve("a"), resolve(inline), resolve(Cat))


def test_composition_builder_can_be_passed_whole() -> None:
    built = SchemaBuilder().all_of(AllOfBuilder("Base"), "Mixin").build()
    assert built.all_of == (Pointer("#/components/schemas/Base"), Pointer("#/components/schemas/Mixin"))


def test_declared_but_empty_composition_fails_at_build() -> None:
    builder = SchemaBuilder().one_of()
    with pytest.raises(EmptyCompositionError, match="oneOf"):
        builder.build()


def test_property_order_and_required_list() -> None:
    built = (
        SchemaBuilder("object")
        .property("id", "integer", required=True)
        .property("name", "string", required=True, description="Display name")
        .property("nickname", "string")
        .property("id", "integer", required=True)
        .build()
    )

    assert list(built.properties) == ["id", "name", "nickname"]
    assert built.required == ("id", "name")
    assert built.properties["name"].description == "Display name"


def test_property_by_reference() -> None:
    built = SchemaBuilder("object").property("owner", ref="Person").build()
    assert built.properties["owner"] == Schema(ref="#/components/schemas/Person")
    assert built.properties["owner"].is_reference


def test_property_cannot_combine_ref_with_type() -> None:
    with pytest.raises(SchemaBuildError, match="cannot combine ref"):
        SchemaBuilder().property("owner", "string", ref="Person")


def test_explicit_empty_properties_differ_from_absent() -> None:
    assert SchemaBuilder("object").properties().build().properties == {}
    assert SchemaBuilder("object").build().properties is None


def test_required_replaces_list_with_unique_names() -> None:
    built = SchemaBuilder("object").required("b", "a", "b").build()
    assert built.required == ("b", "a")


def test_built_schema_is_immutable() -> None:
    built = SchemaBuilder("object").property("a", "string").build()
    with pytest.raises(TypeError):
        built.properties["b"] = Schema()  # type: ignore[index]
    with pytest.raises(AttributeError):
        built.title = "changed"  # type: ignore[misc]


def test_builder_changes_after_build_do_not_leak() -> None:
    builder = SchemaBuilder("object").property("a", "string")
    first = builder.build()
    builder.property("b", "string")
    assert list(first.properties) == ["a"]


def test_enum_and_defaults_are_converted_at_call_site() -> None:
    built = SchemaBuilder("string").enum("yes", "no").default("no").example({"answer": 1}).build()

    assert built.enum_values == (Str("yes"), Str("no"))
    assert built.default == Str("no")
    assert built.example == Map((("answer", Int(1)),))


def test_unsupported_enum_value_fails_immediately() -> None:
    with pytest.raises(TypeError):
        SchemaBuilder().enum(object())


@pytest.mark.parametrize(
    "call",
    [
        lambda b: b.min_length(-1),
        lambda b: b.max_items(1.5),
        lambda b: b.minimum("3"),
        lambda b: b.multiple_of(0),
        lambda b: b.unique_items("yes"),
        lambda b: b.type("text"),
        lambda b: b.format("phone"),
        lambda b: b.minimum(2**64),
        lambda b: b.maximum(-(2**63) - 1),
        lambda b: b.multiple_of(float("inf")),
        lambda b: b.max_length(2**63),
    ],
)
def test_setters_validate_arguments(call) -> None:
    with pytest.raises(SchemaBuildError):
        call(SchemaBuilder())


def test_exclusive_bounds_are_flags() -> None:
    built = SchemaBuilder("number").minimum(0, exclusive=True).maximum(10).build()
    assert built.minimum == 0
    assert built.exclusive_minimum is True
    assert built.maximum == 10
    assert built.exclusive_maximum is None


def test_extensions_require_x_prefix() -> None:
    built = SchemaBuilder().extension("x-internal", True).build()
    assert dict(built.extensions) == {"x-internal": Bool(True)}
    with pytest.raises(SchemaBuildError, match="x-"):
        SchemaBuilder().extension("internal", True)


def test_items_uniform_and_tuple_forms() -> None:
    uniform = SchemaBuilder("array").items(lambda s: s.type("string")).build()
    pair = SchemaBuilder("array").items(lambda s: s.type("string"), lambda s: s.type("integer")).build()

    assert uniform.items == Schema(type=SchemaType.STRING)
    assert not uniform.is_tuple
    assert pair.is_tuple
    assert pair.items == (Schema(type=SchemaType.STRING), Schema(type=SchemaType.INTEGER))


def test_examples_from_mapping_and_block() -> None:
    built = (
        SchemaBuilder("object")
        .examples({"small": {"size": 1}})
        .examples(lambda ex: ex.example("big", {"size": 99}, summary="Large"))
        .build()
    )

    assert list(built.examples) == ["small", "big"]
    assert built.examples["big"] == Example(summary="Large", value=Map((("size", Int(99)),)))


def test_format_accepts_strings_and_enum_members() -> None:
    assert SchemaBuilder("string").format("date-time").build().format is SchemaFormat.DATE_TIME
    assert SchemaBuilder("string").format(SchemaFormat.UUID).build().format is SchemaFormat.UUID


def test_discriminator_accepts_name_mapping_or_block() -> None:
    from_name = SchemaBuilder().one_of("Dog").discriminator("petType", mapping={"dog": "Dog"}).build()
    from_block = SchemaBuilder().one_of("Dog").discriminator(lambda d: d.property_name("petType").mapping("dog", "Dog")).build()

    assert from_name.discriminator == from_block.discriminator
    assert dict(from_name.discriminator.mapping) == {"dog": "#/components/schemas/Dog"}


def test_helpers() -> None:
    assert schema("string") == Schema(type=SchemaType.STRING)
    assert inline_schema(lambda s: s.type("integer")) == Inline(Schema(type=SchemaType.INTEGER))
    assert schema_ref("Pet") == Pointer("#/components/schemas/Pet")


def test_registry_flows_into_nested_builders() -> None:
    registry = TypeRegistry()
    registry.register(Cat, "Feline")

    built = schema(
        "object",
        lambda s: s.property("pet", block=lambda p: p.one_of(Cat)),
        registry=registry,
    )

    assert built.properties["pet"].one_of == (Pointer("#/components/schemas/Feline"),)


def test_discriminated_union_pattern() -> None:
    built = discriminated_union(SchemaBuilder(), "kind", {"dog": "Dog", "cat": Cat}).build()

    assert built.one_of == (Pointer("#/components/schemas/Dog"), Pointer("#/components/schemas/Cat"))
    assert built.discriminator.property_name == "kind"
    assert dict(built.discriminator.mapping) == {
        "dog": "#/components/schemas/Dog",
        "cat": "#/components/schemas/Cat",
    }


def test_nullable_pattern() -> None:
    built = nullable(SchemaBuilder(), "Pet").build()
    assert built.any_of == (Pointer("#/components/schemas/Pet"), Inline(Schema(type=SchemaType.NULL)))


def test_optional_of_accepts_registered_type() -> None:
    built = optional_of(SchemaBuilder(), Cat).build()
    assert built.any_of[0] == Pointer("#/components/schemas/Cat")
    assert built.any_of[1].schema.type is SchemaType.NULL


def test_extending_pattern_puts_bases_first() -> None:
    built = extending(SchemaBuilder(), "Base", block=lambda s: s.property("extra", "string")).build()

    assert built.all_of[0] == Pointer("#/components/schemas/Base")
    extension = built.all_of[1]
    assert isinstance(extension, Inline)
    assert extension.schema.type is SchemaType.OBJECT
    assert list(extension.schema.properties) == ["extra"]


def test_one_of_types_with_optional_discriminator() -> None:
    plain = one_of_types(SchemaBuilder(), Cat).build()
    tagged = one_of_types(SchemaBuilder(), Cat, discriminator_property="kind", discriminator_mappings={"cat": Cat}).build()

    assert plain.discriminator is None
    assert dict(tagged.discriminator.mapping) == {"cat": "#/components/schemas/Cat"}
