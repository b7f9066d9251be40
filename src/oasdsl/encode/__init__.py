from .json_text import JsonDecodeError, decode_json, encode_json
from .tree import attribute_bag, to_tree
from .yaml_text import YamlDecodeError, decode_yaml, encode_yaml

__all__ = [
    "JsonDecodeError",
    "YamlDecodeError",
    "attribute_bag",
    "decode_json",
    "decode_yaml",
    "encode_json",
    "encode_yaml",
    "to_tree",
]
