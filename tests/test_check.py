from __future__ import annotations

import json
from pathlib import Path

import pytest

from oasdsl.config.model import RenderSettings
from oasdsl.core.check import check_events, cross_format_errors, json_schema_view
from oasdsl.core.events import (
    CommandCompleted,
    SchemaCheckFailed,
    SchemaCheckPassed,
    StageCompleted,
    StageFailed,
    Warning,
)
from oasdsl.model.value import to_document_value


def _write_json(project: Path, name: str, document: dict) -> str:
    (project / name).write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    return name


@pytest.mark.integration
def test_check_passes_for_valid_json_document(sample_project: Path) -> None:
    events = list(check_events(sample_project, "petstore.json"))

    completed = events[-1]
    assert isinstance(completed, CommandCompleted)
    assert completed.ok is True
    assert completed.exit_code == 0

    passed = [event.check for event in events if isinstance(event, SchemaCheckPassed)]
    assert passed == ["document_shape", "component_schemas", "cross_format"]


@pytest.mark.integration
def test_check_passes_for_yaml_document_with_unquoted_codes_and_dates(sample_project: Path) -> None:
    events = list(check_events(sample_project, "petstore.yaml"))
    assert events[-1].ok is True


@pytest.mark.integration
def test_check_passes_for_document_target(sample_project: Path, document_module: str) -> None:
    events = list(check_events(sample_project, f"{document_module}:DOCUMENT"))
    assert events[-1].ok is True


@pytest.mark.integration
def test_check_fails_when_info_is_missing(sample_project: Path) -> None:
    source = _write_json(sample_project, "no_info.json", {"openapi": "3.1.0", "paths": {}})

    events = list(check_events(sample_project, source))

    failed = next(event for event in events if isinstance(event, SchemaCheckFailed))
    assert failed.check == "document_shape"
    assert any("'info' is a required property" in item["message"] for item in failed.errors)
    stage = next(event for event in events if isinstance(event, StageFailed))
    assert stage.error_code == "document_shape"
    assert events[-1].exit_code == 2


@pytest.mark.integration
def test_check_fails_for_invalid_component_schema(sample_project: Path) -> None:
    source = _write_json(
        sample_project,
        "bad_schema.json",
        {
            "openapi": "3.1.0",
            "info": {"title": "Bad", "version": "1"},
            "components": {"schemas": {"Bad": {"type": "objekt"}}},
        },
    )

    events = list(check_events(sample_project, source))

    failed = next(event for event in events if isinstance(event, SchemaCheckFailed))
    assert failed.check == "component_schemas"
    assert failed.errors[0]["path"].startswith("/components/schemas/Bad")
    assert events[-1].ok is False


@pytest.mark.integration
def test_check_skips_component_schemas_when_disabled(sample_project: Path) -> None:
    (sample_project / "oasdsl.yaml").write_text("check:\n  schemas: false\n", encoding="utf-8")
    source = _write_json(
        sample_project,
        "bad_schema.json",
        {
            "openapi": "3.1.0",
            "info": {"title": "Bad", "version": "1"},
            "components": {"schemas": {"Bad": {"type": "objekt"}}},
        },
    )

    events = list(check_events(sample_project, source))

    stage = next(
        event for event in events if isinstance(event, StageCompleted) and event.stage_id == "component_schemas"
    )
    assert stage.status == "skipped"
    assert events[-1].ok is True


@pytest.mark.integration
def test_check_warns_when_no_component_schemas(sample_project: Path) -> None:
    source = _write_json(sample_project, "bare.json", {"openapi": "3.1.0", "info": {"title": "Bare", "version": "1"}})

    events = list(check_events(sample_project, source))

    assert any(isinstance(event, Warning) and event.code == "no_schemas" for event in events)
    assert events[-1].ok is True


@pytest.mark.integration
def test_check_reports_config_errors(sample_project: Path) -> None:
    events = list(check_events(sample_project, "petstore.json", config_path=Path("nope.yaml")))

    failed = next(event for event in events if isinstance(event, StageFailed))
    assert failed.stage_id == "load_config"
    assert failed.error_code == "config_error"


def test_json_schema_view_drops_named_examples_only() -> None:
    node = {
        "type": "object",
        "examples": {"one": {"value": 1}},
        "properties": {"examples": {"type": "array", "examples": [[1]]}},
        "allOf": [{"examples": {"two": {}}}],
    }

    assert json_schema_view(node) == {
        "type": "object",
        "properties": {"examples": {"type": "array", "examples": [[1]]}},
        "allOf": [{}],
    }


def test_cross_format_errors_empty_for_plain_tree() -> None:
    tree = to_document_value({"a": ["yes", 1, 1.5, None, {"b": ""}]})
    assert cross_format_errors(tree, RenderSettings()) == []
