from __future__ import annotations

import io
import re
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError
from ruamel.yaml.representer import RoundTripRepresenter
from ruamel.yaml.scalarstring import DoubleQuotedScalarString

from oasdsl.config.model import RenderSettings
from oasdsl.encode.tree import to_tree
from oasdsl.logging import get_logger
from oasdsl.model.value import (
    Bool,
    DocumentValue,
    Float,
    Int,
    Map,
    Null,
    Seq,
    Str,
    to_document_value,
)

logger = get_logger(__name__)

# Plain scalars that a YAML 1.1 or 1.2 reader resolves to something other
# than a string. Strings matching any of these are always quoted.
_IMPLICIT_SCALAR = re.compile(
    r"""^(?:
        y|Y|yes|Yes|YES|n|N|no|No|NO
        |true|True|TRUE|false|False|FALSE
        |on|On|ON|off|Off|OFF
        |null|Null|NULL|~|
        |[-+]?0b[0-1_]+
        |[-+]?0o?[0-7_]+
        |[-+]?(?:0|[1-9][0-9_]*)
        |[-+]?0x[0-9a-fA-F_]+
        |[-+]?[1-9][0-9_]*(?::[0-5]?[0-9])+(?:\.[0-9_]*)?
        |[-+]?(?:[0-9][0-9_]*)?\.[0-9_]*(?:[eE][-+]?[0-9]+)?
        |[-+]?[0-9][0-9_]*[eE][-+]?[0-9]+
        |[-+]?\.(?:inf|Inf|INF)
        |\.(?:nan|NaN|NAN)
        |[0-9]{4}-[0-9]{1,2}-[0-9]{1,2}(?:(?:[Tt]|[ \t]+)[0-9]{1,2}:[0-9]{2}:[0-9]{2}(?:\.[0-9]*)?(?:[ \t]*(?:Z|[-+][0-9]{1,2}(?::[0-9]{2})?))?)?
        |<<|=
    )$""",
    re.VERBOSE,
)


# Characters a reader would fold or normalise inside a plain or single-quoted
# scalar; only a double-quoted escape keeps them intact.
_ESCAPE_ONLY = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f\u2028\u2029\ufeff\ufffe\uffff]")


class YamlDecodeError(ValueError):
    pass


class _DocumentRepresenter(RoundTripRepresenter):
    pass


def _represent_null(representer: RoundTripRepresenter, data: None) -> Any:
    return representer.represent_scalar("tag:yaml.org,2002:null", "null")


_DocumentRepresenter.add_representer(type(None), _represent_null)


def encode_yaml(obj: Any, settings: RenderSettings | None = None) -> str:
    settings = settings or RenderSettings()
    yaml = _dumper(settings)
    stream = io.StringIO()
    yaml.dump(_to_yaml_node(to_tree(obj)), stream)
    text = stream.getvalue()
    logger.debug("Encoded YAML document (%d characters).", len(text))
    return text


def decode_yaml(text: str) -> DocumentValue:
    try:
        parsed = YAML(typ="safe").load(text)
    except YAMLError as exc:
        raise YamlDecodeError(f"Invalid YAML: {exc}") from exc
    return to_document_value(parsed)


def needs_quotes(text: str) -> bool:
    return _IMPLICIT_SCALAR.match(text) is not None


def _dumper(settings: RenderSettings) -> YAML:
    yaml = YAML()
    yaml.Representer = _DocumentRepresenter
    yaml.default_flow_style = False
    yaml.width = settings.yaml_width
    yaml.indent(
        mapping=settings.yaml_indent,
        sequence=settings.yaml_sequence_indent,
        offset=settings.yaml_sequence_offset,
    )
    return yaml


def _to_yaml_node(value: DocumentValue) -> Any:
    if isinstance(value, Null):
        return None
    if isinstance(value, (Bool, Int, Float)):
        return value.value
    if isinstance(value, Str):
        return _yaml_string(value.value)
    if isinstance(value, Seq):
        node = CommentedSeq()
        node.extend(_to_yaml_node(item) for item in value.items)
        return node
    if isinstance(value, Map):
        node = CommentedMap()
        for key, item in value.entries:
            node[_yaml_string(key)] = _to_yaml_node(item)
        return node
    raise TypeError(f"Not a document value: {type(value).__name__}")


def _yaml_string(text: str) -> str:
    if needs_quotes(text) or _ESCAPE_ONLY.search(text):
        return DoubleQuotedScalarString(text)
    return text
