from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from oasdsl import __version__
from oasdsl.core import events as ev
from oasdsl.core.stages import CHECK_STAGES, RENDER_STAGES

RULE_WIDTH = 64
RULE_LINE = "-" * RULE_WIDTH
STATUS_GLYPHS = {
    "pending": "⏸",
    "running": "⠋",
    "success": "✅",
    "failed": "❌",
    "skipped": "⏭",
    "warning": "⚠️",
}

CHECK_LABELS = {
    "load_config": "Config",
    "load_document": "Document",
    "document_shape": "Document shape",
    "component_schemas": "Component schemas",
    "cross_format": "Cross-format",
}

MAX_LISTED_ERRORS = 20


def run_events(events: Iterable[ev.OasdslEvent], renderer: "Renderer") -> int:
    exit_code = 0
    for event in events:
        renderer.handle(event)
        if isinstance(event, ev.CommandCompleted):
            exit_code = event.exit_code
    renderer.close()
    return exit_code


class Renderer:
    def handle(self, event: ev.OasdslEvent) -> None:  # noqa: D401
        """Handle a single event."""

    def close(self) -> None:
        return None


class _DocumentEcho:
    """Writes the encoded document to stdout when no output file was given."""

    def __init__(self) -> None:
        self._to_stdout = True

    def observe(self, event: ev.OasdslEvent) -> None:
        if isinstance(event, ev.CommandStarted):
            self._to_stdout = not (event.options and event.options.get("output"))
        elif isinstance(event, ev.DocumentEncoded) and self._to_stdout:
            typer.echo(event.text, nl=False)


class RenderRichRenderer(Renderer):
    def __init__(self, console: Console):
        self.console = console
        self._echo = _DocumentEcho()
        self._loaded: ev.DocumentLoaded | None = None
        self._encoded: ev.DocumentEncoded | None = None
        self._written: ev.OutputWritten | None = None
        self._failed: ev.StageFailed | None = None

    def handle(self, event: ev.OasdslEvent) -> None:
        self._echo.observe(event)
        if isinstance(event, ev.CommandStarted):
            _print_header(self.console, event)
            return
        if isinstance(event, ev.DocumentLoaded):
            self._loaded = event
            return
        if isinstance(event, ev.DocumentEncoded):
            self._encoded = event
            return
        if isinstance(event, ev.OutputWritten):
            self._written = event
            return
        if isinstance(event, ev.StageFailed):
            self._failed = event
            return
        if isinstance(event, ev.CommandCompleted):
            if event.ok:
                self._print_summary()
            else:
                self.console.print(_stage_failure_panel(self._failed, title="Render failed"))

    def _print_summary(self) -> None:
        lines = []
        if self._loaded:
            lines.append(f"Source:  {self._loaded.source} ({self._loaded.origin}, {self._loaded.kind})")
            if self._loaded.title:
                lines.append(f"Title:   {self._loaded.title}")
        if self._encoded:
            lines.append(f"Format:  {self._encoded.format} ({_format_bytes(self._encoded.bytes)})")
        if self._written:
            lines.append(f"Output:  {self._written.path}")
        else:
            lines.append("Output:  stdout")
        self.console.print(Panel(Text("\n".join(lines)), title="Render complete", box=box.ROUNDED, title_align="left"))


class RenderPlainRenderer(Renderer):
    def __init__(self, console: Console):
        self.console = console
        self._echo = _DocumentEcho()
        self._failed: ev.StageFailed | None = None

    def handle(self, event: ev.OasdslEvent) -> None:
        self._echo.observe(event)
        if isinstance(event, ev.CommandStarted):
            _print_header(self.console, event)
            return
        if isinstance(event, ev.StageStarted):
            index = _stage_index(event.stage_id, RENDER_STAGES)
            label = _stage_label(event.stage_id, RENDER_STAGES)
            self.console.print(_format_stage_start_line(index, label, len(RENDER_STAGES)))
            return
        if isinstance(event, ev.StageCompleted):
            index = _stage_index(event.stage_id, RENDER_STAGES)
            label = _stage_label(event.stage_id, RENDER_STAGES)
            self.console.print(
                _format_stage_line(index, label, event.status, event.duration_ms, len(RENDER_STAGES))
            )
            return
        if isinstance(event, ev.StageFailed):
            self._failed = event
            label = _stage_label(event.stage_id, RENDER_STAGES)
            self.console.print(f"{label} FAIL: {event.message}", markup=False)
            return
        if isinstance(event, ev.OutputWritten):
            self.console.print(f"Wrote {event.path} ({_format_bytes(event.bytes)})", markup=False)
            return
        if isinstance(event, ev.CommandCompleted):
            self.console.print("RENDER OK" if event.ok else "RENDER FAIL")


class RenderJsonRenderer(Renderer):
    def __init__(self, console: Console):
        self.console = console
        self._payload: dict[str, Any] = {"document": None, "errors": []}

    def handle(self, event: ev.OasdslEvent) -> None:
        if isinstance(event, ev.CommandStarted):
            self._payload["source"] = event.source
            self._payload["output"] = (event.options or {}).get("output")
            return
        if isinstance(event, ev.DocumentEncoded):
            self._payload["format"] = event.format
            self._payload["bytes"] = event.bytes
            if self._payload.get("output") is None:
                self._payload["document"] = event.text
            return
        if isinstance(event, ev.StageFailed):
            self._payload["errors"].append(
                {"stage": event.stage_id, "code": event.error_code, "message": event.message}
            )
            return
        if isinstance(event, ev.CommandCompleted):
            self._payload["ok"] = event.ok
            self.console.out(json.dumps(self._payload, indent=2, sort_keys=True))


class CheckRichRenderer(Renderer):
    def __init__(self, console: Console):
        self.console = console
        self._checks: dict[str, str] = {}
        self._warnings: list[str] = []
        self._errors: list[str] = []
        self._loaded: ev.DocumentLoaded | None = None

    def handle(self, event: ev.OasdslEvent) -> None:
        if isinstance(event, ev.CommandStarted):
            _print_header(self.console, event)
            return
        if isinstance(event, ev.DocumentLoaded):
            self._loaded = event
            return
        if isinstance(event, ev.StageCompleted):
            self._checks[event.stage_id] = event.status
            return
        if isinstance(event, ev.StageFailed):
            self._checks[event.stage_id] = "failed"
            self._errors.append(event.message)
            return
        if isinstance(event, ev.Warning):
            self._warnings.append(event.message)
            return
        if isinstance(event, ev.SchemaCheckFailed):
            self._errors.extend(_error_lines(event))
            return
        if isinstance(event, ev.CommandCompleted):
            self._render_summary(event)

    def _render_summary(self, event: ev.CommandCompleted) -> None:
        title = "Check"
        if self._loaded and self._loaded.title:
            title = f"Check: {self._loaded.title}"
        self.console.print(title, markup=False)
        self.console.print(RULE_LINE)
        table = Table(show_header=True, box=box.MINIMAL)
        table.add_column("Check", style="bold")
        table.add_column("Status")
        for stage_id, label in CHECK_STAGES:
            status = self._checks.get(stage_id, "skipped")
            table.add_row(CHECK_LABELS.get(stage_id, label), _check_status_text(status))
        self.console.print(table)
        if self._warnings:
            warnings_text = Text("\n".join(f"- {warning}" for warning in self._warnings), style="orange1")
            self.console.print(
                Panel(
                    warnings_text,
                    title="[orange1]Warnings[/orange1]",
                    box=box.ROUNDED,
                    title_align="left",
                    border_style="orange1",
                )
            )
        if self._errors:
            errors_text = Text("\n".join(f"- {error}" for error in self._errors))
            self.console.print(Panel(errors_text, title="Errors", box=box.ROUNDED, title_align="left"))
        self.console.print("")
        self.console.print(Text.assemble(Text("Check status: "), _status_badge("success" if event.ok else "failed")))


class CheckPlainRenderer(Renderer):
    def __init__(self, console: Console):
        self.console = console
        self._checks: dict[str, str] = {}
        self._warnings: list[str] = []
        self._errors: list[str] = []

    def handle(self, event: ev.OasdslEvent) -> None:
        if isinstance(event, ev.CommandStarted):
            _print_header(self.console, event)
            return
        if isinstance(event, ev.StageStarted):
            index = _stage_index(event.stage_id, CHECK_STAGES)
            label = CHECK_LABELS.get(event.stage_id, _stage_label(event.stage_id, CHECK_STAGES))
            self.console.print(_format_stage_start_line(index, label, len(CHECK_STAGES)))
            return
        if isinstance(event, ev.DocumentLoaded):
            self.console.print(f"Document loaded: {event.source} ({event.kind})", markup=False)
            return
        if isinstance(event, ev.StageCompleted):
            self._checks[event.stage_id] = event.status
            return
        if isinstance(event, ev.StageFailed):
            self._checks[event.stage_id] = "failed"
            self._errors.append(event.message)
            label = CHECK_LABELS.get(event.stage_id, _stage_label(event.stage_id, CHECK_STAGES))
            self.console.print(f"{label} FAIL: {event.message}", markup=False)
            return
        if isinstance(event, ev.Warning):
            self._warnings.append(event.message)
            return
        if isinstance(event, ev.SchemaCheckFailed):
            self._errors.extend(_error_lines(event))
            return
        if isinstance(event, ev.CommandCompleted):
            self.console.print(RULE_LINE)
            for stage_id, label in CHECK_STAGES:
                status = self._checks.get(stage_id, "skipped")
                self.console.print(f"{CHECK_LABELS.get(stage_id, label)}: {_status_word(status)}")
            for heading, lines in (("Warnings", self._warnings), ("Errors", self._errors)):
                if not lines:
                    continue
                self.console.print("")
                self.console.print(heading)
                self.console.print(RULE_LINE)
                for line in lines:
                    self.console.print(f"- {line}", markup=False)
            self.console.print("")
            self.console.print("CHECK OK" if event.ok else "CHECK FAIL")


class CheckJsonRenderer(Renderer):
    def __init__(self, console: Console):
        self.console = console
        self._checks: dict[str, str] = {}
        self._warnings: list[str] = []
        self._errors: list[dict[str, str]] = []

    def handle(self, event: ev.OasdslEvent) -> None:
        if isinstance(event, ev.StageCompleted):
            self._checks[event.stage_id] = event.status
            return
        if isinstance(event, ev.StageFailed):
            self._checks[event.stage_id] = "failed"
            self._errors.append({"check": event.stage_id, "message": event.message})
            return
        if isinstance(event, ev.Warning):
            self._warnings.append(event.message)
            return
        if isinstance(event, ev.SchemaCheckFailed):
            for item in event.errors[:MAX_LISTED_ERRORS]:
                self._errors.append({"check": event.check, "message": item["message"], "path": item["path"]})
            return
        if isinstance(event, ev.CommandCompleted):
            payload = {
                "ok": event.ok,
                "checks": self._checks,
                "warnings": self._warnings,
                "errors": self._errors,
            }
            self.console.out(json.dumps(payload, indent=2, sort_keys=True))


def _print_header(console: Console, event: ev.CommandStarted) -> None:
    config = event.config_path or Path("oasdsl.yaml")
    console.print(f"oasdsl v{__version__} | source: {event.source} | config: {config}\n{RULE_LINE}", markup=False)


def _error_lines(event: ev.SchemaCheckFailed) -> list[str]:
    lines = [f"{item['path']}: {item['message']}" for item in event.errors[:MAX_LISTED_ERRORS]]
    if len(event.errors) > MAX_LISTED_ERRORS:
        lines.append(f"...and {len(event.errors) - MAX_LISTED_ERRORS} more")
    return lines


def _format_duration(elapsed_ms: float) -> str:
    if elapsed_ms < 1000:
        return f"{elapsed_ms:.0f}ms"
    seconds = elapsed_ms / 1000
    if seconds < 10:
        return f"{seconds:.2f}s"
    return f"{seconds:.1f}s"


def _format_bytes(num: int) -> str:
    size = float(num)
    for unit in ["B", "KB", "MB"]:
        if size < 1024 or unit == "MB":
            if unit == "B":
                return f"{size:.0f} {unit}"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} MB"


def _format_stage_line(index: int, label: str, status: str, elapsed_ms: float | None, total: int) -> str:
    glyph = STATUS_GLYPHS.get(status, "?")
    duration = f"  {_format_duration(elapsed_ms)}" if elapsed_ms is not None else ""
    padding = "." * max(2, 28 - len(label))
    return f"[{index}/{total}] {label} {padding} {glyph} {_status_word(status)}{duration}"


def _format_stage_start_line(index: int, label: str, total: int) -> str:
    padding = "." * max(2, 28 - len(label))
    return f"[{index}/{total}] {label} {padding} START"


def _stage_label(stage_id: str, mapping: list[tuple[str, str]]) -> str:
    for key, label in mapping:
        if key == stage_id:
            return label
    return stage_id


def _stage_index(stage_id: str, mapping: list[tuple[str, str]]) -> int:
    for index, (key, _label) in enumerate(mapping, start=1):
        if key == stage_id:
            return index
    return 0


def _status_word(status: str) -> str:
    return {
        "success": "OK",
        "failed": "FAIL",
        "skipped": "SKIP",
    }.get(status, status.upper())


def _status_badge(status: str) -> Text:
    normalized = status.strip().lower()
    label = {"success": "ok", "failed": "fail", "skipped": "skip"}.get(normalized, normalized)
    style = {
        "success": "bold black on green3",
        "failed": "bold white on red3",
    }.get(normalized, "bold white on grey35")
    return Text(f" {label} ", style=style)


def _check_status_text(status: str) -> Text:
    style = {
        "success": "green",
        "failed": "red",
        "skipped": "bright_black",
    }.get(status, "default")
    return Text(_status_word(status).lower(), style=style)


def _stage_failure_panel(event: ev.StageFailed | None, *, title: str) -> Panel:
    if event is None:
        return Panel("Command failed.", title=title, box=box.ROUNDED, title_align="left")
    lines = [f"stage: {event.stage_id}", f"error: {event.message}"]
    if event.hint:
        lines.append(f"hint: {event.hint}")
    return Panel(Text("\n".join(lines)), title=title, box=box.ROUNDED, title_align="left")
