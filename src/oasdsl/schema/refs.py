from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from oasdsl.logging import get_logger
from oasdsl.model.spec import Inline, Pointer, Schema, SchemaRef

SCHEMA_POINTER_PREFIX = "#/components/schemas/"

logger = get_logger(__name__)


class SchemaReferenceError(ValueError):
    pass


@dataclass(frozen=True)
class TypeEntry:
    name: str
    description: str | None = None


class TypeRegistry:
    """Explicit mapping from Python types to component schema names.

    Callers register the types they want to reference by type instead of by
    name. An unregistered type resolves to its ``__name__``.
    """

    def __init__(self) -> None:
        self._entries: dict[type, TypeEntry] = {}

    def register(
        self,
        cls: type,
        name: str | None = None,
        *,
        description: str | None = None,
    ) -> type:
        if not isinstance(cls, type):
            raise SchemaReferenceError(f"Only types can be registered, got {cls!r}.")
        schema_name = cls.__name__ if name is None else name
        if not isinstance(schema_name, str) or not schema_name.strip():
            raise SchemaReferenceError("Registered schema names must be non-empty strings.")
        self._entries[cls] = TypeEntry(name=schema_name, description=description)
        return cls

    def __contains__(self, cls: object) -> bool:
        return cls in self._entries

    def entry_for(self, cls: type) -> TypeEntry:
        entry = self._entries.get(cls)
        if entry is None:
            logger.debug("Type %s is not registered; using its class name.", cls.__qualname__)
            return TypeEntry(name=cls.__name__)
        return entry


def canonical_path(target: str) -> str:
    if not isinstance(target, str) or not target.strip():
        raise SchemaReferenceError("Schema reference must be a non-empty string.")
    if "://" in target or target.startswith("#"):
        return target
    return SCHEMA_POINTER_PREFIX + target


def type_path(cls: type, registry: TypeRegistry | None = None) -> str:
    entry = (registry or TypeRegistry()).entry_for(cls)
    return canonical_path(entry.name)


def resolve(target: Any, *, registry: TypeRegistry | None = None) -> SchemaRef:
    if isinstance(target, (Pointer, Inline)):
        return target
    if isinstance(target, str):
        return Pointer(canonical_path(target))
    if isinstance(target, type):
        return Pointer(type_path(target, registry))
    if isinstance(target, Schema):
        return Inline(target)

    from oasdsl.schema.dsl import SchemaBuilder

    if isinstance(target, SchemaBuilder):
        return Inline(target.build())
    if callable(target):
        builder = SchemaBuilder(registry=registry)
        target(builder)
        return Inline(builder.build())
    raise SchemaReferenceError(f"Cannot resolve a schema reference from {type(target).__name__}.")


def resolve_pointer(target: Any, *, registry: TypeRegistry | None = None) -> str:
    """Resolve ``target`` and require a path rather than an inline schema."""
    resolved = resolve(target, registry=registry)
    if not isinstance(resolved, Pointer):
        raise SchemaReferenceError("Expected a schema name, pointer or type, not an inline schema.")
    return resolved.path
