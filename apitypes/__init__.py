# File: apitypes/__init__.py
"""
apitypes — TypeScript Types from OpenAPI Descriptions
======================================================

Turns an OpenAPI 3.x description (URL, JSON or YAML) into TypeScript
declarations: one module per operation, holding the declarations of every
named schema the operation reaches plus its ``Params``, ``Request`` and
``Response`` types.  Self-referential and mutually recursive schemas are
handled by an explicit cycle guard.

Architecture overview::

    ┌──────────────┐     ┌───────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ TypeGenerator │────▶│ NamedTypeEmitter │
    │   (cli.py)   │     │ (generator.py)│     │   (emitter.py)   │
    └──────────────┘     └───────┬───────┘     └────────┬─────────┘
                                 │                      ▼
                    ┌────────────┼────────────┐  ┌─────────────┐
                    ▼            ▼            ▼  │ synthesizer │
             ┌──────────┐ ┌───────────┐ ┌──────────┐ renderer  │
             │  loader  │ │ collector │ │exporters │───────────┘
             └──────────┘ └───────────┘ └──────────┘

Usage::

    # As a library
    from apitypes import TypeGenerator
    report = TypeGenerator().generate_from_source("openapi.yaml", Path("./src/api"))

    # From the command line
    python -m apitypes -s openapi.yaml -o ./src/api --spec-name PETSTORE
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from apitypes.models import (
    ArrayNode,
    CompositeNode,
    CompositeOp,
    GenerateOptions,
    ObjectNode,
    OperationDescriptor,
    PrimitiveKind,
    PrimitiveNode,
    ProjectConfig,
    PropertySpec,
    ReferenceNode,
    SchemaNode,
    UnknownNode,
    parse_schema_node,
)
from apitypes.registry import SchemaRegistry
from apitypes.synthesizer import TypeExpressionSynthesizer
from apitypes.renderer import TypeScriptRenderer, split_field_clauses
from apitypes.emitter import Declaration, NamedTypeEmitter
from apitypes.collector import DependencyCollector
from apitypes.loader import ApiDescription, DescriptionLoadError, load_description
from apitypes.validators import ValidationResult, validate_full
from apitypes.exporters import ExportManifest, ExportResult, ProjectExporter
from apitypes.generator import GenerationReport, TypeGenerator

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Orchestrator
    "TypeGenerator",
    "GenerationReport",
    # Engine
    "SchemaRegistry",
    "TypeExpressionSynthesizer",
    "TypeScriptRenderer",
    "split_field_clauses",
    "NamedTypeEmitter",
    "Declaration",
    "DependencyCollector",
    # Models
    "SchemaNode",
    "PrimitiveKind",
    "PrimitiveNode",
    "ArrayNode",
    "PropertySpec",
    "ObjectNode",
    "CompositeOp",
    "CompositeNode",
    "ReferenceNode",
    "UnknownNode",
    "parse_schema_node",
    "OperationDescriptor",
    "GenerateOptions",
    "ProjectConfig",
    # Loading & validation
    "ApiDescription",
    "DescriptionLoadError",
    "load_description",
    "ValidationResult",
    "validate_full",
    # Export
    "ProjectExporter",
    "ExportManifest",
    "ExportResult",
]
