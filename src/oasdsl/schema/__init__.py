from .components import ComponentsBuilder, OpenApiBuilder, dataclass_fields, open_api
from .dsl import (
    AllOfBuilder,
    AnyOfBuilder,
    CompositionBuilder,
    DiscriminatorBuilder,
    EmptyCompositionError,
    ExampleBuilder,
    ExamplesBuilder,
    MissingDiscriminatorProperty,
    OneOfBuilder,
    SchemaBuildError,
    SchemaBuilder,
    inline_schema,
    schema,
    schema_ref,
)
from .refs import SchemaReferenceError, TypeRegistry, canonical_path, resolve

__all__ = [
    "AllOfBuilder",
    "AnyOfBuilder",
    "ComponentsBuilder",
    "CompositionBuilder",
    "DiscriminatorBuilder",
    "EmptyCompositionError",
    "ExampleBuilder",
    "ExamplesBuilder",
    "MissingDiscriminatorProperty",
    "OneOfBuilder",
    "OpenApiBuilder",
    "SchemaBuildError",
    "SchemaBuilder",
    "SchemaReferenceError",
    "TypeRegistry",
    "canonical_path",
    "dataclass_fields",
    "inline_schema",
    "open_api",
    "resolve",
    "schema",
    "schema_ref",
]
