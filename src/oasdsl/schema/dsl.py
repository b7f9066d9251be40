from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Union

from oasdsl.logging import get_logger
from oasdsl.model.spec import (
    Discriminator,
    Example,
    Inline,
    Pointer,
    Schema,
    SchemaFormat,
    SchemaRef,
    SchemaType,
    freeze_mapping,
)
from oasdsl.model.value import DocumentValue, DocumentValueError, to_document_value
from oasdsl.schema.refs import TypeRegistry, resolve, resolve_pointer

logger = get_logger(__name__)

_MISSING = object()

SchemaBlock = Callable[["SchemaBuilder"], Any]
NestedSchema = Union[Schema, "SchemaBuilder", SchemaBlock]


class SchemaBuildError(RuntimeError):
    pass


class MissingDiscriminatorProperty(SchemaBuildError):
    pass


class EmptyCompositionError(SchemaBuildError):
    pass


class CompositionBuilder:
    """Ordered accumulator of schema references for one composition keyword."""

    keyword = ""

    def __init__(self, *targets: Any, registry: TypeRegistry | None = None):
        self._registry = registry
        self._members: list[SchemaRef] = []
        self.add(*targets)

    def add(self, *targets: Any) -> "CompositionBuilder":
        for target in targets:
            self._members.append(resolve(target, registry=self._registry))
        return self

    def __len__(self) -> int:
        return len(self._members)

    def build(self) -> tuple[SchemaRef, ...]:
        return tuple(self._members)


class AllOfBuilder(CompositionBuilder):
    keyword = "allOf"


class OneOfBuilder(CompositionBuilder):
    keyword = "oneOf"


class AnyOfBuilder(CompositionBuilder):
    keyword = "anyOf"


class DiscriminatorBuilder:
    def __init__(self, property_name: str | None = None, *, registry: TypeRegistry | None = None):
        self._property_name = property_name
        self._mapping: dict[str, str] | None = None
        self._registry = registry

    def property_name(self, name: str) -> "DiscriminatorBuilder":
        self._property_name = name
        return self

    def mapping(self, value: str, target: str | type) -> "DiscriminatorBuilder":
        if not isinstance(value, str):
            raise SchemaBuildError("Discriminator mapping values must be strings.")
        if self._mapping is None:
            self._mapping = {}
        # Duplicate values overwrite the earlier target.
        self._mapping[value] = resolve_pointer(target, registry=self._registry)
        return self

    def build(self) -> Discriminator:
        name = self._property_name
        if not isinstance(name, str) or not name.strip():
            raise MissingDiscriminatorProperty("Discriminator propertyName must be a non-blank string.")
        return Discriminator(property_name=name, mapping=freeze_mapping(self._mapping))


class ExampleBuilder:
    def __init__(self) -> None:
        self._summary: str | None = None
        self._description: str | None = None
        self._value: DocumentValue | None = None
        self._external_value: str | None = None

    def summary(self, text: str) -> "ExampleBuilder":
        self._summary = _require_string(text, "example.summary")
        return self

    def description(self, text: str) -> "ExampleBuilder":
        self._description = _require_string(text, "example.description")
        return self

    def value(self, value: Any) -> "ExampleBuilder":
        self._value = to_document_value(value)
        return self

    def external_value(self, uri: str) -> "ExampleBuilder":
        self._external_value = _require_string(uri, "example.externalValue")
        return self

    def build(self) -> Example:
        if self._value is not None and self._external_value is not None:
            logger.debug("Example sets both value and externalValue; both are kept.")
        return Example(
            summary=self._summary,
            description=self._description,
            value=self._value,
            external_value=self._external_value,
        )


def build_example(
    value: Any = _MISSING,
    *,
    summary: str | None = None,
    description: str | None = None,
    external_value: str | None = None,
    block: Callable[[ExampleBuilder], Any] | None = None,
) -> Example:
    builder = ExampleBuilder()
    if value is not _MISSING:
        builder.value(value)
    if summary is not None:
        builder.summary(summary)
    if description is not None:
        builder.description(description)
    if external_value is not None:
        builder.external_value(external_value)
    if block is not None:
        block(builder)
    return builder.build()


class ExamplesBuilder:
    def __init__(self) -> None:
        self._examples: dict[str, Example] = {}

    def example(
        self,
        name: str,
        value: Any = _MISSING,
        *,
        summary: str | None = None,
        description: str | None = None,
        external_value: str | None = None,
        block: Callable[[ExampleBuilder], Any] | None = None,
    ) -> "ExamplesBuilder":
        if not isinstance(name, str) or not name:
            raise SchemaBuildError("Example names must be non-empty strings.")
        self._examples[name] = build_example(
            value,
            summary=summary,
            description=description,
            external_value=external_value,
            block=block,
        )
        return self

    def add(self, name: str, example: Example) -> "ExamplesBuilder":
        if not isinstance(example, Example):
            raise SchemaBuildError(f"examples.{name} must be an Example.")
        self._examples[name] = example
        return self

    def build(self) -> Mapping[str, Example]:
        return freeze_mapping(self._examples)


class SchemaBuilder:
    """Mutable accumulator for a single schema node.

    Every setter returns the builder so calls can be chained; nested schemas
    are given as a built ``Schema``, another ``SchemaBuilder`` or a callable
    that receives a fresh child builder. Native values (enum members,
    examples, defaults) are converted to document values as soon as they are
    supplied, so an unsupported value fails at the call that introduced it.
    ``build()`` returns an immutable ``Schema`` snapshot.
    """

    def __init__(
        self,
        type: SchemaType | str | None = None,
        *,
        registry: TypeRegistry | None = None,
    ):
        self._registry = registry
        self._fields: dict[str, Any] = {}
        self._properties: dict[str, Schema] | None = None
        self._required: list[str] | None = None
        self._examples: dict[str, Example] | None = None
        self._extensions: dict[str, DocumentValue] | None = None
        self._compositions: dict[str, list[SchemaRef] | None] = {
            "all_of": None,
            "one_of": None,
            "any_of": None,
        }
        if type is not None:
            self.type(type)

    @property
    def registry(self) -> TypeRegistry | None:
        return self._registry

    def type(self, value: SchemaType | str) -> "SchemaBuilder":
        self._fields["type"] = _coerce_enum(SchemaType, value, "type")
        return self

    def format(self, value: SchemaFormat | str) -> "SchemaBuilder":
        self._fields["format"] = _coerce_enum(SchemaFormat, value, "format")
        return self

    def title(self, text: str) -> "SchemaBuilder":
        self._fields["title"] = _require_string(text, "title")
        return self

    def description(self, text: str) -> "SchemaBuilder":
        self._fields["description"] = _require_string(text, "description")
        return self

    def ref(self, target: Any) -> "SchemaBuilder":
        self._fields["ref"] = resolve_pointer(target, registry=self._registry)
        return self

    def minimum(self, value: int | float, *, exclusive: bool = False) -> "SchemaBuilder":
        self._fields["minimum"] = _require_number(value, "minimum")
        self._fields["exclusive_minimum"] = True if exclusive else None
        return self

    def maximum(self, value: int | float, *, exclusive: bool = False) -> "SchemaBuilder":
        self._fields["maximum"] = _require_number(value, "maximum")
        self._fields["exclusive_maximum"] = True if exclusive else None
        return self

    def multiple_of(self, value: int | float) -> "SchemaBuilder":
        number = _require_number(value, "multipleOf")
        if number <= 0:
            raise SchemaBuildError("multipleOf must be greater than zero.")
        self._fields["multiple_of"] = number
        return self

    def min_length(self, value: int) -> "SchemaBuilder":
        self._fields["min_length"] = _require_count(value, "minLength")
        return self

    def max_length(self, value: int) -> "SchemaBuilder":
        self._fields["max_length"] = _require_count(value, "maxLength")
        return self

    def pattern(self, regex: str) -> "SchemaBuilder":
        self._fields["pattern"] = _require_string(regex, "pattern")
        return self

    def min_items(self, value: int) -> "SchemaBuilder":
        self._fields["min_items"] = _require_count(value, "minItems")
        return self

    def max_items(self, value: int) -> "SchemaBuilder":
        self._fields["max_items"] = _require_count(value, "maxItems")
        return self

    def unique_items(self, flag: bool = True) -> "SchemaBuilder":
        self._fields["unique_items"] = _require_bool(flag, "uniqueItems")
        return self

    def deprecated(self, flag: bool = True) -> "SchemaBuilder":
        self._fields["deprecated"] = _require_bool(flag, "deprecated")
        return self

    def property(
        self,
        name: str,
        type: SchemaType | str | None = None,
        *,
        required: bool = False,
        block: NestedSchema | None = None,
        ref: Any = None,
        description: str | None = None,
    ) -> "SchemaBuilder":
        if not isinstance(name, str) or not name:
            raise SchemaBuildError("Property names must be non-empty strings.")
        if ref is not None:
            if type is not None or block is not None:
                raise SchemaBuildError(f"properties.{name} cannot combine ref with type or block.")
            child = SchemaBuilder(registry=self._registry).ref(ref)
            if description is not None:
                child.description(description)
            schema = child.build()
        else:
            schema = self._nested(block, type=type, description=description, path=f"properties.{name}")
        if self._properties is None:
            self._properties = {}
        self._properties[name] = schema
        if required:
            if self._required is None:
                self._required = []
            if name not in self._required:
                self._required.append(name)
        return self

    def properties(self, mapping: Mapping[str, NestedSchema] | None = None) -> "SchemaBuilder":
        if self._properties is None:
            self._properties = {}
        for name, block in (mapping or {}).items():
            self.property(name, block=block)
        return self

    def required(self, *names: str) -> "SchemaBuilder":
        ordered: list[str] = []
        for name in names:
            if not isinstance(name, str) or not name:
                raise SchemaBuildError("Required property names must be non-empty strings.")
            if name not in ordered:
                ordered.append(name)
        self._required = ordered
        return self

    def additional_properties(self, value: bool | NestedSchema) -> "SchemaBuilder":
        if isinstance(value, bool):
            self._fields["additional_properties"] = value
        else:
            self._fields["additional_properties"] = self._nested(value, path="additionalProperties")
        return self

    def items(self, *blocks: NestedSchema) -> "SchemaBuilder":
        if not blocks:
            raise SchemaBuildError("items requires at least one schema.")
        if len(blocks) == 1:
            self._fields["items"] = self._nested(blocks[0], path="items")
            return self
        return self.tuple_items(*blocks)

    def tuple_items(self, *blocks: NestedSchema) -> "SchemaBuilder":
        self._fields["items"] = tuple(
            self._nested(block, path=f"items[{index}]") for index, block in enumerate(blocks)
        )
        return self

    def enum(self, *values: Any) -> "SchemaBuilder":
        self._fields["enum_values"] = tuple(to_document_value(value) for value in values)
        return self

    def const(self, value: Any) -> "SchemaBuilder":
        self._fields["const"] = to_document_value(value)
        return self

    def default(self, value: Any) -> "SchemaBuilder":
        self._fields["default"] = to_document_value(value)
        return self

    def example(self, value: Any) -> "SchemaBuilder":
        self._fields["example"] = to_document_value(value)
        return self

    def examples(
        self,
        source: Mapping[str, Any] | Callable[[ExamplesBuilder], Any] | None = None,
    ) -> "SchemaBuilder":
        if self._examples is None:
            self._examples = {}
        if source is None:
            return self
        builder = ExamplesBuilder()
        if callable(source):
            source(builder)
        else:
            for name, value in source.items():
                if isinstance(value, Example):
                    builder.add(name, value)
                else:
                    builder.example(name, value)
        self._examples.update(builder.build())
        return self

    def extension(self, name: str, value: Any) -> "SchemaBuilder":
        if not isinstance(name, str) or not name.startswith("x-"):
            raise SchemaBuildError(f"Extension names must start with 'x-': {name!r}")
        if self._extensions is None:
            self._extensions = {}
        self._extensions[name] = to_document_value(value)
        return self

    def all_of(self, *targets: Any) -> "SchemaBuilder":
        return self._compose("all_of", targets)

    def one_of(self, *targets: Any) -> "SchemaBuilder":
        return self._compose("one_of", targets)

    def any_of(self, *targets: Any) -> "SchemaBuilder":
        return self._compose("any_of", targets)

    def not_(self, target: Any) -> "SchemaBuilder":
        self._fields["not_"] = resolve(target, registry=self._registry)
        return self

    def discriminator(
        self,
        source: str | DiscriminatorBuilder | Discriminator | Callable[[DiscriminatorBuilder], Any] | None = None,
        mapping: Mapping[str, str | type] | None = None,
    ) -> "SchemaBuilder":
        if isinstance(source, Discriminator):
            self._fields["discriminator"] = source
            return self
        if isinstance(source, DiscriminatorBuilder):
            builder = source
        elif callable(source):
            builder = DiscriminatorBuilder(registry=self._registry)
            source(builder)
        else:
            builder = DiscriminatorBuilder(source, registry=self._registry)
        for value, target in (mapping or {}).items():
            builder.mapping(value, target)
        self._fields["discriminator"] = builder.build()
        return self

    def build(self) -> Schema:
        compositions: dict[str, tuple[SchemaRef, ...] | None] = {}
        for field_name, members in self._compositions.items():
            if members is None:
                compositions[field_name] = None
                continue
            if not members:
                keyword = _COMPOSITION_KEYWORDS[field_name]
                raise EmptyCompositionError(f"{keyword} must list at least one schema.")
            compositions[field_name] = tuple(members)

        return Schema(
            properties=freeze_mapping(self._properties),
            required=tuple(self._required) if self._required is not None else None,
            examples=freeze_mapping(self._examples),
            extensions=freeze_mapping(self._extensions),
            **compositions,
            **self._fields,
        )

    def _compose(self, field_name: str, targets: tuple[Any, ...]) -> "SchemaBuilder":
        members = self._compositions[field_name]
        if members is None:
            members = []
            self._compositions[field_name] = members
        for target in targets:
            if isinstance(target, CompositionBuilder):
                members.extend(target.build())
            else:
                members.append(resolve(target, registry=self._registry))
        return self

    def _nested(
        self,
        block: NestedSchema | None,
        *,
        type: SchemaType | str | None = None,
        description: str | None = None,
        path: str,
    ) -> Schema:
        if isinstance(block, Schema):
            if type is not None or description is not None:
                raise SchemaBuildError(f"{path} cannot combine a built schema with type or description.")
            return block
        if isinstance(block, SchemaBuilder):
            builder = block
        else:
            builder = SchemaBuilder(registry=self._registry)
        if type is not None:
            builder.type(type)
        if description is not None:
            builder.description(description)
        if block is not None and not isinstance(block, SchemaBuilder):
            if not callable(block):
                raise SchemaBuildError(f"{path} must be a schema, a schema builder or a callable.")
            block(builder)
        return builder.build()


_COMPOSITION_KEYWORDS = {
    "all_of": AllOfBuilder.keyword,
    "one_of": OneOfBuilder.keyword,
    "any_of": AnyOfBuilder.keyword,
}


def schema(
    type: SchemaType | str | None = None,
    block: SchemaBlock | None = None,
    *,
    registry: TypeRegistry | None = None,
) -> Schema:
    builder = SchemaBuilder(type, registry=registry)
    if block is not None:
        block(builder)
    return builder.build()


def inline_schema(block: SchemaBlock, *, registry: TypeRegistry | None = None) -> Inline:
    return Inline(schema(block=block, registry=registry))


def schema_ref(target: str | type, *, registry: TypeRegistry | None = None) -> Pointer:
    return Pointer(resolve_pointer(target, registry=registry))


def _coerce_enum(enum_cls: type, value: Any, field: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise SchemaBuildError(f"{field} must be one of: {allowed}.") from exc


def _require_string(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise SchemaBuildError(f"{field} must be a string.")
    return value


def _require_bool(value: Any, field: str) -> bool:
    if not isinstance(value, bool):
        raise SchemaBuildError(f"{field} must be a boolean.")
    return value


def _require_number(value: Any, field: str) -> int | float:
    if not _is_number(value):
        raise SchemaBuildError(f"{field} must be numeric.")
    return _require_encodable(value, field)


def _require_count(value: Any, field: str) -> int:
    if not _is_integer(value) or value < 0:
        raise SchemaBuildError(f"{field} must be a non-negative integer.")
    return _require_encodable(value, field)


def _require_encodable(value: Any, field: str) -> Any:
    # Out-of-range ints and non-finite floats.
    try:
        to_document_value(value)
    except DocumentValueError as exc:
        raise SchemaBuildError(f"{field}: {exc}") from exc
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
