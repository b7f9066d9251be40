from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML

from .model import Config

DEFAULT_CONFIG = Path("oasdsl.yaml")


class ConfigError(RuntimeError):
    pass


class DocumentLoadError(ConfigError):
    pass


_yaml = YAML(typ="safe")


def load_config(project_dir: Path, config_path: Path | None = None) -> Config:
    explicit = config_path is not None
    config_path = config_path or DEFAULT_CONFIG
    if not config_path.is_absolute():
        config_path = project_dir / config_path
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Missing config: {config_path}")
        return Config()
    data = _load_yaml(config_path)
    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError("Config must be a YAML mapping at the top level.")
    try:
        return Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def load_document_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise DocumentLoadError(f"Document not found: {path}")
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            parsed = _load_yaml(path)
        except ConfigError as exc:
            raise DocumentLoadError(f"Failed to parse document YAML: {path}") from exc
        parsed = _plain_yaml(parsed)
    elif suffix == ".json":
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise DocumentLoadError(f"Invalid JSON document: {path}") from exc
    else:
        raise DocumentLoadError(f"Unsupported document type: {path.suffix or path.name}")
    if not isinstance(parsed, dict):
        raise DocumentLoadError("Document must be a mapping at the top level.")
    return parsed


def _load_yaml(path: Path) -> Any:
    try:
        return _yaml.load(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(f"Failed to parse YAML: {path}") from exc


def _plain_yaml(value: Any) -> Any:
    # Unquoted status codes load as ints and unquoted dates as date objects.
    if isinstance(value, dict):
        return {_plain_key(key): _plain_yaml(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain_yaml(item) for item in value]
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value


def _plain_key(key: Any) -> Any:
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    return key
