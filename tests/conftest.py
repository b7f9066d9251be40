from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    project_dir = tmp_path / "project"
    project_dir.mkdir(parents=True)

    (project_dir / "oasdsl.yaml").write_text(
        """
version: v1

render:
  json_indent: 2
  yaml_width: 80

check:
  schemas: true
  cross_format: true
""".strip()
        + "\n",
        encoding="utf-8",
    )

    (project_dir / "petstore.json").write_text(
        """
{
  "openapi": "3.1.0",
  "info": { "title": "Petstore", "version": "1.0.0" },
  "paths": {
    "/pets": {
      "get": {
        "responses": {
          "200": { "description": "A list of pets" }
        }
      }
    }
  },
  "components": {
    "schemas": {
      "Pet": {
        "type": "object",
        "properties": {
          "name": { "type": "string" },
          "petType": { "type": "string", "enum": ["dog", "cat", "yes"] }
        },
        "required": ["name", "petType"],
        "discriminator": {
          "propertyName": "petType",
          "mapping": { "dog": "#/components/schemas/Dog" }
        }
      },
      "Dog": {
        "allOf": [
          { "$ref": "#/components/schemas/Pet" },
          { "type": "object", "properties": { "bark": { "type": "boolean" } } }
        ]
      }
    }
  }
}
""".strip()
        + "\n",
        encoding="utf-8",
    )

    (project_dir / "petstore.yaml").write_text(
        """
openapi: 3.1.0
info:
  title: Petstore
  version: 1.0.0
paths:
  /pets:
    get:
      responses:
        200:
          description: A list of pets
components:
  schemas:
    Pet:
      type: object
      properties:
        name:
          type: string
        born:
          type: string
          format: date
          example: 2020-01-31
""".strip()
        + "\n",
        encoding="utf-8",
    )

    return project_dir


@pytest.fixture
def document_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    module_dir = tmp_path / "modules"
    module_dir.mkdir()
    (module_dir / "petdocs.py").write_text(
        '''
from oasdsl.schema import open_api


def _pet(schema):
    schema.type("object")
    schema.property("name", "string", required=True)
    schema.property("answer", "string", block=lambda s: s.enum("yes", "no"))


def _components(components):
    components.schema("Pet", _pet)


def build_document():
    return open_api(
        lambda api: api.info("Pets", "2.0").path("/pets", {"get": {"responses": {"200": {"description": "ok"}}}}).components(_components)
    )


DOCUMENT = build_document()
NOT_A_DOCUMENT = object()
'''.lstrip(),
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(module_dir))
    monkeypatch.delitem(sys.modules, "petdocs", raising=False)
    return "petdocs"
