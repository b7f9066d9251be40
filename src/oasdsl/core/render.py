from __future__ import annotations

import time
from pathlib import Path
from typing import Iterable

from oasdsl.config.load import ConfigError, DocumentLoadError, load_config
from oasdsl.core import events as ev
from oasdsl.core.documents import load_source
from oasdsl.encode.json_text import encode_json
from oasdsl.encode.yaml_text import encode_yaml
from oasdsl.logging import get_logger
from oasdsl.model.value import DocumentValueError

logger = get_logger(__name__)

FORMATS = ("json", "yaml")


def render_events(
    project_dir: Path,
    source: str,
    *,
    config_path: Path | None = None,
    fmt: str = "json",
    output: Path | None = None,
) -> Iterable[ev.OasdslEvent]:
    project_dir = project_dir.resolve()
    if output is not None and not output.is_absolute():
        output = project_dir / output

    yield ev.CommandStarted(
        command="render",
        project_dir=project_dir,
        config_path=config_path,
        source=source,
        options={"format": fmt, "output": str(output) if output else None},
    )

    yield ev.StageStarted(command="render", stage_id="load_config", label="Load config")
    started = time.perf_counter()
    try:
        config = load_config(project_dir, config_path)
    except ConfigError as exc:
        yield from _fail("load_config", started, "config_error", str(exc))
        return
    if fmt not in FORMATS:
        yield from _fail(
            "load_config",
            started,
            "config_error",
            f"Unknown output format: {fmt}",
            hint="Use --format json or --format yaml.",
        )
        return
    yield ev.StageCompleted(command="render", stage_id="load_config", duration_ms=_elapsed_ms(started))

    yield ev.StageStarted(command="render", stage_id="load_document", label="Load document")
    started = time.perf_counter()
    try:
        loaded = load_source(project_dir, source)
    except DocumentLoadError as exc:
        yield from _fail("load_document", started, "document_error", str(exc))
        return
    yield ev.DocumentLoaded(
        command="render",
        source=source,
        origin=loaded.origin,
        kind=loaded.kind,
        title=loaded.title,
    )
    yield ev.StageCompleted(command="render", stage_id="load_document", duration_ms=_elapsed_ms(started))

    yield ev.StageStarted(command="render", stage_id="encode", label="Encode")
    started = time.perf_counter()
    try:
        if fmt == "yaml":
            text = encode_yaml(loaded.tree, config.render)
        else:
            text = encode_json(loaded.tree, config.render)
    except (DocumentValueError, ValueError) as exc:
        yield from _fail("encode", started, "encode_error", str(exc))
        return
    payload = text.encode("utf-8")
    yield ev.DocumentEncoded(command="render", format=fmt, bytes=len(payload), text=text)
    yield ev.StageCompleted(command="render", stage_id="encode", duration_ms=_elapsed_ms(started))

    yield ev.StageStarted(command="render", stage_id="write_output", label="Write output")
    started = time.perf_counter()
    if output is None:
        yield ev.StageCompleted(
            command="render",
            stage_id="write_output",
            duration_ms=_elapsed_ms(started),
            status="skipped",
        )
        yield ev.CommandCompleted(command="render", ok=True, exit_code=0)
        return
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(payload)
    except OSError as exc:
        yield from _fail("write_output", started, "write_error", f"Failed to write {output}: {exc}")
        return
    logger.debug("Wrote %d bytes to %s.", len(payload), output)
    yield ev.OutputWritten(command="render", path=output, bytes=len(payload))
    yield ev.StageCompleted(command="render", stage_id="write_output", duration_ms=_elapsed_ms(started))
    yield ev.CommandCompleted(command="render", ok=True, exit_code=0)


def _fail(
    stage_id: str,
    started: float,
    error_code: str,
    message: str,
    *,
    hint: str | None = None,
) -> Iterable[ev.OasdslEvent]:
    yield ev.StageFailed(
        command="render",
        stage_id=stage_id,
        duration_ms=_elapsed_ms(started),
        error_code=error_code,
        message=message,
        hint=hint,
    )
    yield ev.CommandCompleted(command="render", ok=False, exit_code=2)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
