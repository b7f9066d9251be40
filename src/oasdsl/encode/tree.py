from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from oasdsl.model.spec import (
    Components,
    Discriminator,
    Example,
    Inline,
    OpenApiDocument,
    Pointer,
    Schema,
)
from oasdsl.model.value import (
    Bool,
    DocumentValue,
    Float,
    Int,
    Map,
    Seq,
    Str,
    is_document_value,
    to_document_value,
)

# Wire order of schema keywords; extensions follow the last one.
_SCHEMA_FIELDS: list[tuple[str, str]] = [
    ("ref", "$ref"),
    ("title", "title"),
    ("type", "type"),
    ("format", "format"),
    ("description", "description"),
    ("minimum", "minimum"),
    ("maximum", "maximum"),
    ("multiple_of", "multipleOf"),
    ("min_length", "minLength"),
    ("max_length", "maxLength"),
    ("pattern", "pattern"),
    ("properties", "properties"),
    ("required", "required"),
    ("additional_properties", "additionalProperties"),
    ("items", "items"),
    ("min_items", "minItems"),
    ("max_items", "maxItems"),
    ("unique_items", "uniqueItems"),
    ("enum_values", "enum"),
    ("const", "const"),
    ("default", "default"),
    ("all_of", "allOf"),
    ("one_of", "oneOf"),
    ("any_of", "anyOf"),
    ("not_", "not"),
    ("discriminator", "discriminator"),
    ("deprecated", "deprecated"),
    ("example", "example"),
    ("examples", "examples"),
]

_EXCLUSIVE_BOUNDS: dict[str, tuple[str, str]] = {
    "minimum": ("exclusive_minimum", "exclusiveMinimum"),
    "maximum": ("exclusive_maximum", "exclusiveMaximum"),
}

_EXAMPLE_FIELDS: list[tuple[str, str]] = [
    ("summary", "summary"),
    ("description", "description"),
    ("value", "value"),
    ("external_value", "externalValue"),
]

_COMPONENT_FIELDS: list[tuple[str, str]] = [
    ("schemas", "schemas"),
    ("examples", "examples"),
    ("security_schemes", "securitySchemes"),
]

_DOCUMENT_FIELDS: list[tuple[str, str]] = [
    ("openapi", "openapi"),
    ("info", "info"),
    ("servers", "servers"),
    ("paths", "paths"),
    ("components", "components"),
    ("security", "security"),
    ("tags", "tags"),
]


def to_tree(obj: Any) -> DocumentValue:
    """Render any model object or document value as a single value tree."""
    if is_document_value(obj):
        return obj
    if isinstance(obj, OpenApiDocument):
        return document_tree(obj)
    if isinstance(obj, Components):
        return components_tree(obj)
    if isinstance(obj, Schema):
        return schema_tree(obj)
    if isinstance(obj, (Pointer, Inline)):
        return ref_tree(obj)
    if isinstance(obj, Discriminator):
        return discriminator_tree(obj)
    if isinstance(obj, Example):
        return example_tree(obj)
    raise TypeError(f"Cannot encode {type(obj).__name__}.")


def attribute_bag(value: Any) -> DocumentValue:
    """Convert a native attribute bag that may embed schemas or examples."""
    return to_document_value(value, convert=_model_leaf)


def document_tree(document: OpenApiDocument) -> Map:
    entries = _field_entries(document, _DOCUMENT_FIELDS)
    entries.extend(_extension_entries(document.extensions))
    return Map(tuple(entries))


def components_tree(components: Components) -> Map:
    return Map(tuple(_field_entries(components, _COMPONENT_FIELDS)))


def schema_tree(schema: Schema) -> Map:
    entries: list[tuple[str, DocumentValue]] = []
    for attr, key in _SCHEMA_FIELDS:
        value = getattr(schema, attr)
        if value is None:
            continue
        if attr == "items" and isinstance(value, tuple):
            key = "prefixItems"
        elif attr in _EXCLUSIVE_BOUNDS:
            flag_attr, exclusive_key = _EXCLUSIVE_BOUNDS[attr]
            if getattr(schema, flag_attr):
                key = exclusive_key
        entries.append((key, _field_value(value)))
    entries.extend(_extension_entries(schema.extensions))
    return Map(tuple(entries))


def ref_tree(ref: Pointer | Inline) -> Map:
    if isinstance(ref, Pointer):
        return Map((("$ref", Str(ref.path)),))
    if isinstance(ref, Inline):
        return schema_tree(ref.schema)
    raise TypeError(f"Unknown schema reference variant: {type(ref).__name__}")


def discriminator_tree(discriminator: Discriminator) -> Map:
    entries: list[tuple[str, DocumentValue]] = [("propertyName", Str(discriminator.property_name))]
    if discriminator.mapping is not None:
        entries.append(
            ("mapping", Map(tuple((key, Str(path)) for key, path in discriminator.mapping.items())))
        )
    return Map(tuple(entries))


def example_tree(example: Example) -> Map:
    return Map(tuple(_field_entries(example, _EXAMPLE_FIELDS)))


def _field_entries(obj: Any, fields: list[tuple[str, str]]) -> list[tuple[str, DocumentValue]]:
    entries: list[tuple[str, DocumentValue]] = []
    for attr, key in fields:
        value = getattr(obj, attr)
        if value is None:
            continue
        entries.append((key, _field_value(value)))
    return entries


def _extension_entries(extensions: Mapping[str, DocumentValue] | None) -> list[tuple[str, DocumentValue]]:
    if not extensions:
        return []
    return [(name, value) for name, value in extensions.items()]


def _field_value(value: Any) -> DocumentValue:
    if is_document_value(value):
        return value
    if isinstance(value, Enum):
        return Str(value.value)
    if isinstance(value, bool):
        return Bool(value)
    if isinstance(value, int):
        return Int(value)
    if isinstance(value, float):
        return Float(value)
    if isinstance(value, str):
        return Str(value)
    if isinstance(value, (list, tuple)):
        return Seq(tuple(_field_value(item) for item in value))
    if isinstance(value, Mapping):
        return Map(tuple((key, _field_value(item)) for key, item in value.items()))
    return to_tree(value)


def _model_leaf(value: Any) -> DocumentValue | None:
    if isinstance(value, (OpenApiDocument, Components, Schema, Pointer, Inline, Discriminator, Example)):
        return to_tree(value)
    return None
