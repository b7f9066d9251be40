from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional, Union

from oasdsl.model.value import DocumentValue


class SchemaType(str, Enum):
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"


class SchemaFormat(str, Enum):
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    DOUBLE = "double"
    BYTE = "byte"
    BINARY = "binary"
    DATE = "date"
    DATE_TIME = "date-time"
    PASSWORD = "password"
    EMAIL = "email"
    UUID = "uuid"
    URI = "uri"
    URL = "url"


@dataclass(frozen=True)
class Pointer:
    """A schema reference rendered as ``{"$ref": path}``."""

    path: str

    def __post_init__(self) -> None:
        if not isinstance(self.path, str) or not self.path:
            raise ValueError("Pointer path must be a non-empty string.")


@dataclass(frozen=True)
class Inline:
    """A schema embedded in place of a reference."""

    schema: "Schema"


SchemaRef = Union[Pointer, Inline]


@dataclass(frozen=True)
class Discriminator:
    property_name: str
    mapping: Optional[Mapping[str, str]] = None


@dataclass(frozen=True)
class Example:
    summary: Optional[str] = None
    description: Optional[str] = None
    value: Optional[DocumentValue] = None
    external_value: Optional[str] = None


@dataclass(frozen=True)
class Schema:
    ref: Optional[str] = None
    title: Optional[str] = None
    type: Optional[SchemaType] = None
    format: Optional[SchemaFormat] = None
    description: Optional[str] = None
    minimum: Optional[Union[int, float]] = None
    exclusive_minimum: Optional[bool] = None
    maximum: Optional[Union[int, float]] = None
    exclusive_maximum: Optional[bool] = None
    multiple_of: Optional[Union[int, float]] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    properties: Optional[Mapping[str, "Schema"]] = None
    required: Optional[tuple[str, ...]] = None
    additional_properties: Optional[Union[bool, "Schema"]] = None
    items: Optional[Union["Schema", tuple["Schema", ...]]] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    unique_items: Optional[bool] = None
    enum_values: Optional[tuple[DocumentValue, ...]] = None
    const: Optional[DocumentValue] = None
    default: Optional[DocumentValue] = None
    all_of: Optional[tuple[SchemaRef, ...]] = None
    one_of: Optional[tuple[SchemaRef, ...]] = None
    any_of: Optional[tuple[SchemaRef, ...]] = None
    not_: Optional[SchemaRef] = None
    discriminator: Optional[Discriminator] = None
    deprecated: Optional[bool] = None
    example: Optional[DocumentValue] = None
    examples: Optional[Mapping[str, Example]] = None
    extensions: Optional[Mapping[str, DocumentValue]] = None

    @property
    def is_reference(self) -> bool:
        return self.ref is not None

    @property
    def is_tuple(self) -> bool:
        return isinstance(self.items, tuple)


@dataclass(frozen=True)
class Components:
    schemas: Optional[Mapping[str, Schema]] = None
    examples: Optional[Mapping[str, Example]] = None
    security_schemes: Optional[Mapping[str, DocumentValue]] = None


@dataclass(frozen=True)
class OpenApiDocument:
    openapi: str
    info: DocumentValue
    servers: Optional[DocumentValue] = None
    paths: Optional[DocumentValue] = None
    security: Optional[DocumentValue] = None
    tags: Optional[DocumentValue] = None
    components: Optional[Components] = None
    extensions: Optional[Mapping[str, DocumentValue]] = None


def freeze_mapping(mapping: Optional[Mapping]) -> Optional[Mapping]:
    if mapping is None:
        return None
    return MappingProxyType(dict(mapping))
