"""
tests/conftest.py
Shared fixtures for the apitypes test suite.

Real file I/O is performed inside temporary directories managed by
pytest's tmp_path fixtures; HTTP is served by ``httpx.MockTransport``.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Callable, Dict

import httpx
import pytest
import yaml

from apitypes.loader import ApiDescription, parse_description
from apitypes.registry import SchemaRegistry
from apitypes.synthesizer import TypeExpressionSynthesizer


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
EXAMPLE_DESCRIPTION_PATH: pathlib.Path = ROOT_DIR / "openapi_example.yaml"


# ---------------------------------------------------------------------------
# Raw description fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_description_dict() -> Dict[str, Any]:
    """Load the reference openapi_example.yaml once per session."""
    assert EXAMPLE_DESCRIPTION_PATH.exists(), (
        f"Reference description not found at {EXAMPLE_DESCRIPTION_PATH}. "
        "Make sure openapi_example.yaml is in the project root."
    )
    with open(EXAMPLE_DESCRIPTION_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def description_dict(raw_description_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_description_dict)


@pytest.fixture()
def description(description_dict: Dict[str, Any]) -> ApiDescription:
    return parse_description(description_dict, str(EXAMPLE_DESCRIPTION_PATH))


@pytest.fixture()
def registry(description: ApiDescription) -> SchemaRegistry:
    return description.registry


@pytest.fixture()
def description_json_path(
    description_dict: Dict[str, Any], tmp_path: pathlib.Path
) -> pathlib.Path:
    """Write the description as JSON and return its path."""
    path = tmp_path / "openapi.json"
    path.write_text(json.dumps(description_dict), encoding="utf-8")
    return path


@pytest.fixture()
def description_yaml_path(
    description_dict: Dict[str, Any], tmp_path: pathlib.Path
) -> pathlib.Path:
    """Write the description as YAML and return its path."""
    path = tmp_path / "openapi.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(description_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


# ---------------------------------------------------------------------------
# Engine helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_registry() -> Callable[[Dict[str, Any]], SchemaRegistry]:
    """Factory: raw ``components.schemas`` mapping → registry."""

    def _make(raw_schemas: Dict[str, Any]) -> SchemaRegistry:
        return SchemaRegistry.from_components(raw_schemas)

    return _make


@pytest.fixture()
def synth(registry: SchemaRegistry) -> TypeExpressionSynthesizer:
    return TypeExpressionSynthesizer(registry)


@pytest.fixture()
def minimal_description_dict() -> Dict[str, Any]:
    """Smallest useful description: one schema, one operation."""
    return {
        "openapi": "3.1.0",
        "info": {"title": "Minimal", "version": "0.1.0"},
        "paths": {
            "/items": {
                "get": {
                    "operationId": "listItems",
                    "responses": {
                        "200": {
                            "description": "ok",
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "array",
                                        "items": {"$ref": "#/components/schemas/Item"},
                                    }
                                }
                            },
                        }
                    },
                }
            }
        },
        "components": {
            "schemas": {
                "Item": {
                    "type": "object",
                    "required": ["id"],
                    "properties": {
                        "id": {"type": "integer"},
                        "title": {"type": ["string", "null"]},
                    },
                }
            }
        },
    }


@pytest.fixture()
def mock_http_client(
    description_dict: Dict[str, Any],
) -> httpx.Client:
    """
    Client serving the example description:

    - ``/openapi.json``  → JSON body
    - ``/openapi.yaml``  → YAML body
    - ``/swagger.json``  → a Swagger 2.0 document
    - anything else      → 404
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/openapi.json":
            return httpx.Response(200, json=description_dict)
        if request.url.path == "/openapi.yaml":
            return httpx.Response(200, text=yaml.safe_dump(description_dict))
        if request.url.path == "/swagger.json":
            return httpx.Response(200, json={"swagger": "2.0", "paths": {}})
        return httpx.Response(404, text="not found")

    return httpx.Client(transport=httpx.MockTransport(handler))
