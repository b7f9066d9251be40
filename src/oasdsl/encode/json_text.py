from __future__ import annotations

import json
from typing import Any

from oasdsl.config.model import RenderSettings
from oasdsl.encode.tree import to_tree
from oasdsl.logging import get_logger
from oasdsl.model.value import DocumentValue, from_document_value, to_document_value

logger = get_logger(__name__)


class JsonDecodeError(ValueError):
    pass


def encode_json(obj: Any, settings: RenderSettings | None = None) -> str:
    settings = settings or RenderSettings()
    native = from_document_value(to_tree(obj))
    if settings.json_indent is None:
        payload = json.dumps(native, ensure_ascii=settings.ensure_ascii, separators=(",", ":"))
    else:
        payload = json.dumps(native, indent=settings.json_indent, ensure_ascii=settings.ensure_ascii)
    logger.debug("Encoded JSON document (%d characters).", len(payload))
    return f"{payload}\n"


def decode_json(text: str) -> DocumentValue:
    try:
        parsed = json.loads(text, object_pairs_hook=_unique_pairs, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise JsonDecodeError(f"Invalid JSON: {exc}") from exc
    return to_document_value(parsed)


def _unique_pairs(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise JsonDecodeError(f"Duplicate key in JSON object: {key!r}")
        result[key] = value
    return result


def _reject_constant(name: str) -> Any:
    raise JsonDecodeError(f"Non-finite number {name} is not valid JSON.")
