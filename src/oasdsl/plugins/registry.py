from __future__ import annotations

from importlib import import_module
from importlib.metadata import entry_points
from typing import Any

DOCUMENT_GROUP = "oasdsl.documents"


class DocumentTargetError(ValueError):
    pass


def load_document_target(target: str) -> Any:
    """Load a document from an entry point name or a ``module:attribute`` target.

    Callables are invoked without arguments and their result is returned.
    """
    obj = _load_entry_point(target)
    if obj is None:
        obj = _import_target(target)
    if callable(obj) and not isinstance(obj, type):
        obj = obj()
    return obj


def _load_entry_point(name: str) -> Any:
    for ep in entry_points(group=DOCUMENT_GROUP):
        if ep.name == name:
            return ep.load()
    return None


def _import_target(target: str) -> Any:
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise DocumentTargetError(f"Unknown document target: {target} (expected module:attribute)")
    try:
        obj: Any = import_module(module_name)
    except ImportError as exc:
        raise DocumentTargetError(f"Cannot import module {module_name!r}: {exc}") from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise DocumentTargetError(f"{module_name} has no attribute {attr_path!r}") from exc
    return obj
