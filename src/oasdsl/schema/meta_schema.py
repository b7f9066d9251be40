from __future__ import annotations

from typing import Any

# Top-level shape of a rendered document. Schema nodes themselves are checked
# separately against the JSON Schema 2020-12 meta-schema.
DOCUMENT_META_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://oasdsl.dev/schema/openapi-document/v1",
    "title": "OpenAPI document envelope",
    "type": "object",
    "additionalProperties": False,
    "required": ["openapi", "info"],
    "patternProperties": {"^x-": {}},
    "properties": {
        "openapi": {"type": "string", "pattern": "^3\\.[0-9]+\\.[0-9]+(-.+)?$"},
        "info": {"$ref": "#/$defs/info"},
        "jsonSchemaDialect": {"type": "string"},
        "servers": {"type": "array", "items": {"$ref": "#/$defs/server"}},
        "paths": {
            "type": "object",
            "propertyNames": {"anyOf": [{"pattern": "^/"}, {"pattern": "^x-"}]},
            "additionalProperties": {"type": "object"},
        },
        "webhooks": {"type": "object", "additionalProperties": {"type": "object"}},
        "components": {"$ref": "#/$defs/components"},
        "security": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": {"type": "array", "items": {"type": "string"}},
            },
        },
        "tags": {"type": "array", "items": {"$ref": "#/$defs/tag"}},
        "externalDocs": {
            "type": "object",
            "required": ["url"],
            "properties": {"url": {"type": "string"}, "description": {"type": "string"}},
        },
    },
    "$defs": {
        "info": {
            "type": "object",
            "required": ["title", "version"],
            "patternProperties": {"^x-": {}},
            "properties": {
                "title": {"type": "string", "minLength": 1},
                "version": {"type": "string", "minLength": 1},
                "summary": {"type": "string"},
                "description": {"type": "string"},
                "termsOfService": {"type": "string"},
                "contact": {"type": "object"},
                "license": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {"name": {"type": "string"}},
                },
            },
            "additionalProperties": False,
        },
        "server": {
            "type": "object",
            "required": ["url"],
            "properties": {
                "url": {"type": "string", "minLength": 1},
                "description": {"type": "string"},
                "variables": {"type": "object"},
            },
        },
        "tag": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "description": {"type": "string"},
            },
        },
        "components": {
            "type": "object",
            "patternProperties": {"^x-": {}},
            "properties": {
                "schemas": {
                    "type": "object",
                    "additionalProperties": {"type": ["object", "boolean"]},
                },
                "examples": {"type": "object", "additionalProperties": {"type": "object"}},
                "securitySchemes": {
                    "type": "object",
                    "additionalProperties": {
                        "type": "object",
                        "anyOf": [{"required": ["type"]}, {"required": ["$ref"]}],
                    },
                },
                "responses": {"type": "object"},
                "parameters": {"type": "object"},
                "requestBodies": {"type": "object"},
                "headers": {"type": "object"},
                "links": {"type": "object"},
                "callbacks": {"type": "object"},
                "pathItems": {"type": "object"},
            },
            "additionalProperties": False,
        },
    },
}
