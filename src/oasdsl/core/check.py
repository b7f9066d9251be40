from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Iterable

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from oasdsl.config.load import ConfigError, DocumentLoadError, load_config
from oasdsl.config.model import RenderSettings
from oasdsl.core import events as ev
from oasdsl.core.documents import load_source
from oasdsl.encode.json_text import JsonDecodeError, decode_json, encode_json
from oasdsl.encode.yaml_text import YamlDecodeError, decode_yaml, encode_yaml
from oasdsl.model.value import DocumentValue, from_document_value
from oasdsl.schema.meta_schema import DOCUMENT_META_SCHEMA

# Keywords whose value is a single subschema, a list of subschemas or a
# mapping of subschemas. Everything else in a schema node is data.
_SUBSCHEMA_KEYWORDS = {"items", "additionalProperties", "not", "contains", "propertyNames", "if", "then", "else"}
_SUBSCHEMA_LIST_KEYWORDS = {"allOf", "oneOf", "anyOf", "prefixItems"}
_SUBSCHEMA_MAP_KEYWORDS = {"properties", "patternProperties", "$defs", "dependentSchemas"}


def check_events(
    project_dir: Path,
    source: str,
    *,
    config_path: Path | None = None,
) -> Iterable[ev.OasdslEvent]:
    project_dir = project_dir.resolve()

    yield ev.CommandStarted(
        command="check",
        project_dir=project_dir,
        config_path=config_path,
        source=source,
    )

    yield ev.StageStarted(command="check", stage_id="load_config", label="Load config")
    started = time.perf_counter()
    try:
        config = load_config(project_dir, config_path)
    except ConfigError as exc:
        yield from _fail("load_config", started, "config_error", str(exc))
        return
    yield ev.StageCompleted(command="check", stage_id="load_config", duration_ms=_elapsed_ms(started))

    yield ev.StageStarted(command="check", stage_id="load_document", label="Load document")
    started = time.perf_counter()
    try:
        loaded = load_source(project_dir, source)
    except DocumentLoadError as exc:
        yield from _fail("load_document", started, "document_error", str(exc))
        return
    yield ev.DocumentLoaded(
        command="check",
        source=source,
        origin=loaded.origin,
        kind=loaded.kind,
        title=loaded.title,
    )
    yield ev.StageCompleted(command="check", stage_id="load_document", duration_ms=_elapsed_ms(started))
    native = from_document_value(loaded.tree)

    yield ev.StageStarted(command="check", stage_id="document_shape", label="Document shape")
    started = time.perf_counter()
    errors = document_shape_errors(native)
    if errors:
        yield ev.SchemaCheckFailed(command="check", check="document_shape", errors=errors)
        yield from _fail(
            "document_shape",
            started,
            "document_shape",
            f"Document does not match the OpenAPI envelope ({len(errors)} errors).",
        )
        return
    yield ev.SchemaCheckPassed(command="check", check="document_shape", checked=1)
    yield ev.StageCompleted(command="check", stage_id="document_shape", duration_ms=_elapsed_ms(started))

    yield ev.StageStarted(command="check", stage_id="component_schemas", label="Component schemas")
    started = time.perf_counter()
    if not config.check.schemas:
        yield ev.StageCompleted(
            command="check",
            stage_id="component_schemas",
            duration_ms=_elapsed_ms(started),
            status="skipped",
        )
    else:
        schemas = (native.get("components") or {}).get("schemas") or {}
        errors = component_schema_errors(schemas)
        if errors:
            yield ev.SchemaCheckFailed(command="check", check="component_schemas", errors=errors)
            yield from _fail(
                "component_schemas",
                started,
                "schema_invalid",
                f"{len(errors)} component schema(s) are not valid JSON Schema 2020-12.",
            )
            return
        if not schemas:
            yield ev.Warning(command="check", code="no_schemas", message="Document declares no component schemas.")
        yield ev.SchemaCheckPassed(command="check", check="component_schemas", checked=len(schemas))
        yield ev.StageCompleted(command="check", stage_id="component_schemas", duration_ms=_elapsed_ms(started))

    yield ev.StageStarted(command="check", stage_id="cross_format", label="Cross-format check")
    started = time.perf_counter()
    if not config.check.cross_format:
        yield ev.StageCompleted(
            command="check",
            stage_id="cross_format",
            duration_ms=_elapsed_ms(started),
            status="skipped",
        )
        yield ev.CommandCompleted(command="check", ok=True, exit_code=0)
        return
    errors = cross_format_errors(loaded.tree, config.render)
    if errors:
        yield ev.SchemaCheckFailed(command="check", check="cross_format", errors=errors)
        yield from _fail(
            "cross_format",
            started,
            "format_mismatch",
            "JSON and YAML renderings do not decode to the same document.",
        )
        return
    yield ev.SchemaCheckPassed(command="check", check="cross_format", checked=2)
    yield ev.StageCompleted(command="check", stage_id="cross_format", duration_ms=_elapsed_ms(started))
    yield ev.CommandCompleted(command="check", ok=True, exit_code=0)


def document_shape_errors(document: Any) -> list[dict[str, str]]:
    validator = Draft202012Validator(DOCUMENT_META_SCHEMA)
    errors = sorted(validator.iter_errors(document), key=lambda err: list(map(str, err.path)))
    return [{"path": _pointer(error.path), "message": error.message} for error in errors]


def component_schema_errors(schemas: dict[str, Any]) -> list[dict[str, str]]:
    formatted: list[dict[str, str]] = []
    for name, node in schemas.items():
        try:
            Draft202012Validator.check_schema(json_schema_view(node))
        except SchemaError as exc:
            path = _pointer(["components", "schemas", name, *exc.path])
            formatted.append({"path": path, "message": exc.message})
    return formatted


def cross_format_errors(tree: DocumentValue, settings: RenderSettings) -> list[dict[str, str]]:
    errors: list[dict[str, str]] = []
    decoded: dict[str, DocumentValue] = {}
    for name, encode, decode in (
        ("json", encode_json, decode_json),
        ("yaml", encode_yaml, decode_yaml),
    ):
        try:
            decoded[name] = decode(encode(tree, settings))
        except (JsonDecodeError, YamlDecodeError) as exc:
            errors.append({"path": "/", "message": f"{name} output does not decode: {exc}"})
            continue
        if decoded[name] != tree:
            errors.append({"path": "/", "message": f"{name} output does not round-trip to the source document."})
    if not errors and decoded["json"] != decoded["yaml"]:
        errors.append({"path": "/", "message": "JSON and YAML outputs decode to different documents."})
    return errors


def json_schema_view(node: Any) -> Any:
    """Drop the OpenAPI ``examples`` mapping, which 2020-12 defines as an array."""
    if not isinstance(node, dict):
        return node
    view: dict[str, Any] = {}
    for key, value in node.items():
        if key == "examples" and isinstance(value, dict):
            continue
        if key in _SUBSCHEMA_KEYWORDS:
            view[key] = json_schema_view(value)
        elif key in _SUBSCHEMA_LIST_KEYWORDS and isinstance(value, list):
            view[key] = [json_schema_view(item) for item in value]
        elif key in _SUBSCHEMA_MAP_KEYWORDS and isinstance(value, dict):
            view[key] = {name: json_schema_view(item) for name, item in value.items()}
        else:
            view[key] = value
    return view


def _pointer(parts: Iterable[Any]) -> str:
    parts = [str(part) for part in parts]
    if not parts:
        return "/"
    return "/" + "/".join(parts)


def _fail(stage_id: str, started: float, error_code: str, message: str) -> Iterable[ev.OasdslEvent]:
    yield ev.StageFailed(
        command="check",
        stage_id=stage_id,
        duration_ms=_elapsed_ms(started),
        error_code=error_code,
        message=message,
    )
    yield ev.CommandCompleted(command="check", ok=False, exit_code=2)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
