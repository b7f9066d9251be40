from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class OasdslEvent:
    ts: float = field(default_factory=time.perf_counter)
    level: str = "INFO"
    command: str = ""
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _serialize(asdict(self))


@dataclass(frozen=True)
class CommandStarted(OasdslEvent):
    type: str = "CommandStarted"
    project_dir: Path | None = None
    config_path: Path | None = None
    source: str = ""
    options: dict[str, Any] | None = None


@dataclass(frozen=True)
class CommandCompleted(OasdslEvent):
    type: str = "CommandCompleted"
    ok: bool = True
    exit_code: int = 0


@dataclass(frozen=True)
class StageStarted(OasdslEvent):
    type: str = "StageStarted"
    stage_id: str = ""
    label: str = ""


@dataclass(frozen=True)
class StageCompleted(OasdslEvent):
    type: str = "StageCompleted"
    stage_id: str = ""
    duration_ms: float = 0.0
    status: str = "success"


@dataclass(frozen=True)
class StageFailed(OasdslEvent):
    type: str = "StageFailed"
    stage_id: str = ""
    duration_ms: float = 0.0
    error_code: str = ""
    message: str = ""
    hint: str | None = None


@dataclass(frozen=True)
class DocumentLoaded(OasdslEvent):
    type: str = "DocumentLoaded"
    source: str = ""
    origin: str = ""
    kind: str = ""
    title: str | None = None


@dataclass(frozen=True)
class DocumentEncoded(OasdslEvent):
    type: str = "DocumentEncoded"
    format: str = ""
    bytes: int = 0
    text: str = ""


@dataclass(frozen=True)
class OutputWritten(OasdslEvent):
    type: str = "OutputWritten"
    path: Path | None = None
    bytes: int = 0


@dataclass(frozen=True)
class SchemaCheckPassed(OasdslEvent):
    type: str = "SchemaCheckPassed"
    check: str = ""
    checked: int = 0


@dataclass(frozen=True)
class SchemaCheckFailed(OasdslEvent):
    type: str = "SchemaCheckFailed"
    check: str = ""
    errors: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class Warning(OasdslEvent):
    type: str = "Warning"
    code: str = ""
    message: str = ""
    hint: str | None = None


def _serialize(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    return value
