"""Builders for the ``components`` section and the document envelope.

Sections that are not schema nodes (info, servers, paths, tags, security and
security schemes) are kept as attribute bags: native mappings are converted to
document values when they are supplied, and schemas or examples embedded in a
bag are rendered through the encoder tree at that point.
"""

from __future__ import annotations

import dataclasses
import types
from collections.abc import Mapping, Sequence, Set
from typing import Any, Callable, Union, get_args, get_origin, get_type_hints

from oasdsl.encode.tree import attribute_bag
from oasdsl.logging import get_logger
from oasdsl.model.spec import Components, Example, OpenApiDocument, Schema, SchemaType, freeze_mapping
from oasdsl.model.value import DocumentValue, Map, Seq, to_document_value
from oasdsl.schema.dsl import (
    ExampleBuilder,
    NestedSchema,
    SchemaBuildError,
    SchemaBuilder,
    build_example,
)
from oasdsl.schema.refs import TypeRegistry

logger = get_logger(__name__)

DEFAULT_OPENAPI_VERSION = "3.1.0"

_MISSING = object()

# Field metadata key holding a property description.
DESCRIPTION_METADATA_KEY = "description"


class ComponentsBuilder:
    def __init__(self, *, registry: TypeRegistry | None = None):
        self._registry = registry
        self._schemas: dict[str, Schema] | None = None
        self._examples: dict[str, Example] | None = None
        self._security_schemes: dict[str, DocumentValue] | None = None

    def schema(self, target: str | type, block: NestedSchema | None = None) -> "ComponentsBuilder":
        """Add a named schema.

        A type is named through the registry, and a registered description
        becomes the default description of the schema. A dataclass also
        contributes one property per field (see ``dataclass_fields``); a block
        runs afterwards and can refine the derived schema.
        """
        if isinstance(target, type):
            registry = self._registry or TypeRegistry()
            entry = registry.entry_for(target)
            name, description = entry.name, entry.description
        elif isinstance(target, str) and target:
            name, description = target, None
        else:
            raise SchemaBuildError("Component schema names must be non-empty strings or types.")

        if isinstance(block, Schema):
            built = block
        else:
            builder = block if isinstance(block, SchemaBuilder) else SchemaBuilder(registry=self._registry)
            if description is not None:
                builder.description(description)
            if dataclasses.is_dataclass(target) and not isinstance(block, SchemaBuilder):
                dataclass_fields(builder, target)
            if block is not None and not isinstance(block, SchemaBuilder):
                if not callable(block):
                    raise SchemaBuildError(f"components.schemas.{name} must be a schema, a builder or a callable.")
                block(builder)
            built = builder.build()

        if self._schemas is None:
            self._schemas = {}
        if name in self._schemas:
            logger.debug("Replacing component schema %s.", name)
        self._schemas[name] = built
        return self

    def example(
        self,
        name: str,
        value: Any = _MISSING,
        *,
        summary: str | None = None,
        description: str | None = None,
        external_value: str | None = None,
        block: Callable[[ExampleBuilder], Any] | None = None,
    ) -> "ComponentsBuilder":
        if not isinstance(name, str) or not name:
            raise SchemaBuildError("Component example names must be non-empty strings.")
        if self._examples is None:
            self._examples = {}
        self._examples[name] = build_example(
            value,
            summary=summary,
            description=description,
            external_value=external_value,
            block=block,
        )
        return self

    def security_scheme(self, name: str, scheme: Mapping[str, Any]) -> "ComponentsBuilder":
        if not isinstance(name, str) or not name:
            raise SchemaBuildError("Security scheme names must be non-empty strings.")
        if self._security_schemes is None:
            self._security_schemes = {}
        self._security_schemes[name] = _require_map(scheme, f"components.securitySchemes.{name}")
        return self

    def build(self) -> Components:
        return Components(
            schemas=freeze_mapping(self._schemas),
            examples=freeze_mapping(self._examples),
            security_schemes=freeze_mapping(self._security_schemes),
        )


class OpenApiBuilder:
    def __init__(self, openapi: str = DEFAULT_OPENAPI_VERSION, *, registry: TypeRegistry | None = None):
        if not isinstance(openapi, str) or not openapi:
            raise SchemaBuildError("openapi must be a non-empty version string.")
        self._openapi = openapi
        self._registry = registry
        self._info: DocumentValue | None = None
        self._servers: list[DocumentValue] | None = None
        self._paths: dict[str, DocumentValue] | None = None
        self._security: list[DocumentValue] | None = None
        self._tags: list[DocumentValue] | None = None
        self._components: Components | None = None
        self._extensions: dict[str, DocumentValue] | None = None

    @property
    def registry(self) -> TypeRegistry | None:
        return self._registry

    def info(self, title: str, version: str, **fields: Any) -> "OpenApiBuilder":
        if not isinstance(title, str) or not title:
            raise SchemaBuildError("info.title must be a non-empty string.")
        if not isinstance(version, str) or not version:
            raise SchemaBuildError("info.version must be a non-empty string.")
        self._info = _require_map({"title": title, "version": version, **fields}, "info")
        return self

    def server(self, url: str, description: str | None = None, **fields: Any) -> "OpenApiBuilder":
        if not isinstance(url, str) or not url:
            raise SchemaBuildError("servers[].url must be a non-empty string.")
        entry: dict[str, Any] = {"url": url}
        if description is not None:
            entry["description"] = description
        entry.update(fields)
        if self._servers is None:
            self._servers = []
        self._servers.append(_require_map(entry, f"servers[{len(self._servers)}]"))
        return self

    def path(self, path: str, item: Mapping[str, Any]) -> "OpenApiBuilder":
        if not isinstance(path, str) or not path.startswith("/"):
            raise SchemaBuildError(f"Path keys must start with '/': {path!r}")
        if self._paths is None:
            self._paths = {}
        self._paths[path] = _require_map(item, f"paths.{path}")
        return self

    def tag(self, name: str, description: str | None = None, **fields: Any) -> "OpenApiBuilder":
        if not isinstance(name, str) or not name:
            raise SchemaBuildError("tags[].name must be a non-empty string.")
        entry: dict[str, Any] = {"name": name}
        if description is not None:
            entry["description"] = description
        entry.update(fields)
        if self._tags is None:
            self._tags = []
        self._tags.append(_require_map(entry, f"tags[{len(self._tags)}]"))
        return self

    def security(self, requirement: Mapping[str, list[str]]) -> "OpenApiBuilder":
        if self._security is None:
            self._security = []
        self._security.append(_require_map(requirement, f"security[{len(self._security)}]"))
        return self

    def components(
        self,
        source: Components | ComponentsBuilder | Callable[[ComponentsBuilder], Any],
    ) -> "OpenApiBuilder":
        if isinstance(source, Components):
            self._components = source
            return self
        if isinstance(source, ComponentsBuilder):
            builder = source
        elif callable(source):
            builder = ComponentsBuilder(registry=self._registry)
            source(builder)
        else:
            raise SchemaBuildError("components must be Components, a ComponentsBuilder or a callable.")
        self._components = builder.build()
        return self

    def extension(self, name: str, value: Any) -> "OpenApiBuilder":
        if not isinstance(name, str) or not name.startswith("x-"):
            raise SchemaBuildError(f"Extension names must start with 'x-': {name!r}")
        if self._extensions is None:
            self._extensions = {}
        self._extensions[name] = to_document_value(value)
        return self

    def build(self) -> OpenApiDocument:
        if self._info is None:
            raise SchemaBuildError("info is required; call info(title, version) before build().")
        return OpenApiDocument(
            openapi=self._openapi,
            info=self._info,
            servers=Seq(tuple(self._servers)) if self._servers is not None else None,
            paths=Map(tuple(self._paths.items())) if self._paths is not None else None,
            security=Seq(tuple(self._security)) if self._security is not None else None,
            tags=Seq(tuple(self._tags)) if self._tags is not None else None,
            components=self._components,
            extensions=freeze_mapping(self._extensions),
        )


def open_api(
    block: Callable[[OpenApiBuilder], Any],
    *,
    openapi: str = DEFAULT_OPENAPI_VERSION,
    registry: TypeRegistry | None = None,
) -> OpenApiDocument:
    builder = OpenApiBuilder(openapi, registry=registry)
    block(builder)
    return builder.build()


def _require_map(value: Any, path: str) -> Map:
    if not isinstance(value, Mapping):
        raise SchemaBuildError(f"{path} must be a mapping.")
    converted = attribute_bag(value)
    if not isinstance(converted, Map):
        raise SchemaBuildError(f"{path} must be a mapping.")
    return converted



def dataclass_fields(builder: SchemaBuilder, cls: type) -> SchemaBuilder:
    """Declare an object schema with one property per dataclass field.

    Field annotations map to ``string``, ``integer``, ``number``, ``boolean``,
    ``array`` or ``object``. ``Optional`` fields are left out of ``required``.
    A property description is read from ``field(metadata={"description": ...})``.
    """
    if not dataclasses.is_dataclass(cls) or not isinstance(cls, type):
        raise SchemaBuildError(f"{cls!r} is not a dataclass type.")
    try:
        hints = get_type_hints(cls)
    except (NameError, TypeError) as exc:
        raise SchemaBuildError(f"Cannot read the field types of {cls.__name__}: {exc}") from exc

    builder.type(SchemaType.OBJECT)
    for field in dataclasses.fields(cls):
        schema_type, required = _field_type(hints.get(field.name, Any))
        builder.property(
            field.name,
            schema_type,
            required=required,
            description=field.metadata.get(DESCRIPTION_METADATA_KEY),
        )
    return builder


def _field_type(hint: Any) -> tuple[SchemaType, bool]:
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        nullable = len(members) < len(get_args(hint))
        schema_type = _field_type(members[0])[0] if len(members) == 1 else SchemaType.OBJECT
        return schema_type, not nullable
    return _plain_type(origin or hint), True


def _plain_type(hint: Any) -> SchemaType:
    if not isinstance(hint, type):
        return SchemaType.OBJECT
    if issubclass(hint, bool):
        return SchemaType.BOOLEAN
    if issubclass(hint, str):
        return SchemaType.STRING
    if issubclass(hint, int):
        return SchemaType.INTEGER
    if issubclass(hint, float):
        return SchemaType.NUMBER
    if issubclass(hint, (Sequence, Set)) and not issubclass(hint, (str, bytes)):
        return SchemaType.ARRAY
    return SchemaType.OBJECT
