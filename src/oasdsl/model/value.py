from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Iterator, Optional, Union

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class DocumentValueError(TypeError):
    pass


@dataclass(frozen=True)
class Null:
    kind: ClassVar[str] = "null"


@dataclass(frozen=True)
class Bool:
    value: bool
    kind: ClassVar[str] = "boolean"

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise DocumentValueError(f"Bool requires a bool, got {type(self.value).__name__}.")


@dataclass(frozen=True)
class Int:
    value: int
    kind: ClassVar[str] = "integer"

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise DocumentValueError(f"Int requires an int, got {type(self.value).__name__}.")
        if not _INT64_MIN <= self.value <= _INT64_MAX:
            raise DocumentValueError(f"Integer {self.value} is outside the 64-bit range.")


@dataclass(frozen=True)
class Float:
    value: float
    kind: ClassVar[str] = "number"

    def __post_init__(self) -> None:
        if not isinstance(self.value, float):
            raise DocumentValueError(f"Float requires a float, got {type(self.value).__name__}.")
        if not math.isfinite(self.value):
            raise DocumentValueError(f"Float must be finite, got {self.value!r}.")


@dataclass(frozen=True)
class Str:
    value: str
    kind: ClassVar[str] = "string"

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise DocumentValueError(f"Str requires a str, got {type(self.value).__name__}.")


@dataclass(frozen=True)
class Seq:
    items: tuple["DocumentValue", ...] = ()
    kind: ClassVar[str] = "array"

    def __post_init__(self) -> None:
        items = tuple(self.items)
        for index, item in enumerate(items):
            if not isinstance(item, _VALUE_TYPES):
                raise DocumentValueError(f"Seq item {index} is not a document value.")
        object.__setattr__(self, "items", items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator["DocumentValue"]:
        return iter(self.items)


@dataclass(frozen=True)
class Map:
    """Ordered key/value mapping; keys are unique strings in insertion order."""

    entries: tuple[tuple[str, "DocumentValue"], ...] = ()
    kind: ClassVar[str] = "object"

    def __post_init__(self) -> None:
        entries = tuple((key, item) for key, item in self.entries)
        seen: set[str] = set()
        for key, item in entries:
            if not isinstance(key, str):
                raise DocumentValueError(f"Map keys must be strings, got {type(key).__name__}.")
            if key in seen:
                raise DocumentValueError(f"Duplicate map key: {key!r}")
            if not isinstance(item, _VALUE_TYPES):
                raise DocumentValueError(f"Map value for {key!r} is not a document value.")
            seen.add(key)
        object.__setattr__(self, "entries", entries)

    def __len__(self) -> int:
        return len(self.entries)

    def keys(self) -> list[str]:
        return [key for key, _ in self.entries]

    def get(self, key: str, default: Optional["DocumentValue"] = None) -> Optional["DocumentValue"]:
        for entry_key, item in self.entries:
            if entry_key == key:
                return item
        return default


DocumentValue = Union[Null, Bool, Int, Float, Str, Seq, Map]

_VALUE_TYPES = (Null, Bool, Int, Float, Str, Seq, Map)

NULL = Null()

# Returns a document value for a leaf it understands, or None to decline.
LeafConverter = Callable[[Any], Optional[DocumentValue]]


def is_document_value(value: Any) -> bool:
    return isinstance(value, _VALUE_TYPES)


def to_document_value(value: Any, *, convert: LeafConverter | None = None) -> DocumentValue:
    return _convert(value, path="$", active=set(), convert=convert)


def from_document_value(value: DocumentValue) -> Any:
    if isinstance(value, Null):
        return None
    if isinstance(value, (Bool, Int, Float, Str)):
        return value.value
    if isinstance(value, Seq):
        return [from_document_value(item) for item in value.items]
    if isinstance(value, Map):
        return {key: from_document_value(item) for key, item in value.entries}
    raise DocumentValueError(f"Not a document value: {type(value).__name__}")


def _convert(
    value: Any,
    *,
    path: str,
    active: set[int],
    convert: LeafConverter | None,
) -> DocumentValue:
    if isinstance(value, _VALUE_TYPES):
        return value
    if value is None:
        return NULL
    if isinstance(value, bool):
        return Bool(value)
    if isinstance(value, int):
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise DocumentValueError(f"{path}: integer {value} is outside the 64-bit range.")
        return Int(int(value))
    if isinstance(value, float):
        if not math.isfinite(value):
            raise DocumentValueError(f"{path}: non-finite float {value!r} is not supported.")
        return Float(float(value))
    if isinstance(value, str):
        return Str(str.__str__(value))
    if isinstance(value, Mapping):
        marker = id(value)
        if marker in active:
            raise DocumentValueError(f"{path}: cyclic structure detected.")
        active.add(marker)
        entries: list[tuple[str, DocumentValue]] = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise DocumentValueError(
                    f"{path}: mapping keys must be strings, got {type(key).__name__}."
                )
            entries.append((key, _convert(item, path=f"{path}.{key}", active=active, convert=convert)))
        active.discard(marker)
        return Map(tuple(entries))
    if isinstance(value, (list, tuple)):
        marker = id(value)
        if marker in active:
            raise DocumentValueError(f"{path}: cyclic structure detected.")
        active.add(marker)
        items = [
            _convert(item, path=f"{path}[{index}]", active=active, convert=convert)
            for index, item in enumerate(value)
        ]
        active.discard(marker)
        return Seq(tuple(items))
    if convert is not None:
        converted = convert(value)
        if converted is not None:
            return converted
    raise DocumentValueError(f"{path}: unsupported value of type {type(value).__name__}.")
