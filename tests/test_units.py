from __future__ import annotations

from pathlib import Path

import pytest

from oasdsl.config.load import ConfigError, DocumentLoadError, load_config, load_document_file
from oasdsl.config.model import RenderSettings
from oasdsl.core.events import CommandStarted, SchemaCheckFailed
from oasdsl.plugins.registry import DocumentTargetError, load_document_target


def test_load_config_defaults_when_default_file_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)
    assert config.render.json_indent == 2
    assert config.render.yaml_width == 80
    assert config.check.cross_format is True


def test_load_config_explicit_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Missing config"):
        load_config(tmp_path, Path("custom.yaml"))


def test_load_config_rejects_unknown_keys(tmp_path: Path) -> None:
    (tmp_path / "oasdsl.yaml").write_text("version: v1\nrender:\n  colour: blue\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_unsupported_version(tmp_path: Path) -> None:
    (tmp_path / "oasdsl.yaml").write_text("version: v2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Only version v1"):
        load_config(tmp_path)


def test_load_config_accepts_compact_json(tmp_path: Path) -> None:
    (tmp_path / "oasdsl.yaml").write_text("render:\n  json_indent: null\n", encoding="utf-8")
    assert load_config(tmp_path).render.json_indent is None


def test_render_settings_validate_layout() -> None:
    with pytest.raises(ValueError):
        RenderSettings(yaml_sequence_offset=4, yaml_sequence_indent=4)
    with pytest.raises(ValueError):
        RenderSettings(json_indent=-1)


def test_load_document_file_stringifies_yaml_status_codes_and_dates(sample_project: Path) -> None:
    data = load_document_file(sample_project / "petstore.yaml")

    assert list(data["paths"]["/pets"]["get"]["responses"]) == ["200"]
    assert data["components"]["schemas"]["Pet"]["properties"]["born"]["example"] == "2020-01-31"
    assert data["info"]["version"] == "1.0.0"


def test_load_document_file_errors(tmp_path: Path) -> None:
    with pytest.raises(DocumentLoadError, match="not found"):
        load_document_file(tmp_path / "missing.json")

    (tmp_path / "list.json").write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(DocumentLoadError, match="mapping at the top level"):
        load_document_file(tmp_path / "list.json")

    (tmp_path / "broken.json").write_text("{", encoding="utf-8")
    with pytest.raises(DocumentLoadError, match="Invalid JSON"):
        load_document_file(tmp_path / "broken.json")

    (tmp_path / "doc.txt").write_text("{}", encoding="utf-8")
    with pytest.raises(DocumentLoadError, match="Unsupported document type"):
        load_document_file(tmp_path / "doc.txt")


def test_load_document_target_calls_factories(document_module: str) -> None:
    built = load_document_target(f"{document_module}:build_document")
    constant = load_document_target(f"{document_module}:DOCUMENT")
    assert built == constant


@pytest.mark.parametrize("target", ["no_separator", "missing_module_xyz:thing", "json:not_there"])
def test_load_document_target_errors(target: str) -> None:
    with pytest.raises(DocumentTargetError):
        load_document_target(target)


def test_event_to_dict_serializes_paths() -> None:
    event = CommandStarted(
        command="render",
        project_dir=Path("project"),
        config_path=Path("project") / "oasdsl.yaml",
        source="petstore.json",
    )
    payload = event.to_dict()

    assert payload["project_dir"] == "project"
    assert payload["config_path"] == str(Path("project") / "oasdsl.yaml")
    assert payload["type"] == "CommandStarted"


def test_schema_check_failed_event_keeps_errors() -> None:
    event = SchemaCheckFailed(command="check", check="document_shape", errors=[{"path": "/", "message": "bad"}])
    assert event.to_dict()["errors"] == [{"path": "/", "message": "bad"}]
