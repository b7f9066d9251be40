from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from oasdsl.config.load import DocumentLoadError, load_document_file
from oasdsl.encode.tree import to_tree
from oasdsl.model.value import DocumentValue, DocumentValueError, Map, Str, to_document_value
from oasdsl.plugins.registry import DocumentTargetError, load_document_target

DOCUMENT_SUFFIXES = {".json", ".yaml", ".yml"}


@dataclass(frozen=True)
class LoadedDocument:
    tree: DocumentValue
    origin: str
    kind: str
    title: str | None = None


def load_source(project_dir: Path, source: str) -> LoadedDocument:
    """Resolve ``source`` to a document value tree.

    A source is a JSON or YAML file (relative to ``project_dir``) or a
    document target: an ``oasdsl.documents`` entry point name or
    ``module:attribute``.
    """
    path = Path(source)
    if not path.is_absolute():
        path = project_dir / path
    if path.exists() or path.suffix.lower() in DOCUMENT_SUFFIXES:
        data = load_document_file(path)
        try:
            tree = to_document_value(data)
        except DocumentValueError as exc:
            raise DocumentLoadError(f"{path}: {exc}") from exc
        return LoadedDocument(tree=tree, origin="file", kind=_kind(tree), title=_title(tree))

    try:
        obj = load_document_target(source)
    except DocumentTargetError as exc:
        raise DocumentLoadError(str(exc)) from exc
    tree = _target_tree(obj, source)
    return LoadedDocument(tree=tree, origin="target", kind=_kind(tree), title=_title(tree))


def _target_tree(obj: Any, source: str) -> DocumentValue:
    try:
        if isinstance(obj, dict):
            return to_document_value(obj)
        return to_tree(obj)
    except (TypeError, ValueError) as exc:
        raise DocumentLoadError(f"{source} did not produce an encodable document: {exc}") from exc


def _kind(tree: DocumentValue) -> str:
    if isinstance(tree, Map) and tree.get("openapi") is not None:
        return "document"
    return tree.kind


def _title(tree: DocumentValue) -> str | None:
    if not isinstance(tree, Map):
        return None
    info = tree.get("info")
    if isinstance(info, Map):
        title = info.get("title")
        if isinstance(title, Str):
            return title.value
    title = tree.get("title")
    if isinstance(title, Str):
        return title.value
    return None
