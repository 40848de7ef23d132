# File: apitypes/models.py
"""
apitypes - Core Data Models
============================
Pydantic V2 models representing the parsed API description and the
generation configuration.  These models form the single source of truth
for the entire pipeline: Description Loading → Validation → Dependency
Collection → Type Synthesis → Export.

Schema nodes are a *closed* family of frozen variants discriminated by
``kind``.  Raw OpenAPI fragments are converted exactly once, at load time,
by :func:`parse_schema_node`; downstream code dispatches on the variant
type and never inspects raw dictionaries again.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.models")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SCHEMA_REF_PREFIX: str = "#/components/schemas/"


def ref_name(ref: str) -> str:
    """
    Extract the schema name from a ``$ref`` string.

    Only the local ``#/components/schemas/`` prefix is stripped; any other
    reference keeps its full text and will simply not resolve.
    """
    if ref.startswith(SCHEMA_REF_PREFIX):
        return ref[len(SCHEMA_REF_PREFIX):]
    return ref


# ---------------------------------------------------------------------------
# Enums: fixed sets used across the entire project
# ---------------------------------------------------------------------------


class PrimitiveKind(str, Enum):
    """Scalar schema types."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


class CompositeOp(str, Enum):
    """Schema composition operators."""

    AND = "and"  # allOf
    OR = "or"  # oneOf / anyOf


class ParameterLocation(str, Enum):
    """Where an operation parameter lives in the request."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_NODE_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
)

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    use_enum_values=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Schema nodes
# ---------------------------------------------------------------------------


class _BaseNode(BaseModel):
    """Fields shared by every schema node variant."""

    model_config = _NODE_CONFIG

    nullable: bool = Field(default=False, description="Schema admits null.")


class PrimitiveNode(_BaseNode):
    """``string`` / ``integer`` / ``number`` / ``boolean``."""

    kind: Literal["primitive"] = "primitive"
    primitive: PrimitiveKind = Field(..., description="Scalar type.")
    enum_values: Optional[Tuple[Any, ...]] = Field(
        default=None, description="Allowed literal values, declaration order."
    )
    format: Optional[str] = Field(default=None, description="OpenAPI format hint.")

    def __repr__(self) -> str:
        return f"<Primitive {self.primitive.value}>"


class ArrayNode(_BaseNode):
    """Homogeneous list of ``items``."""

    kind: Literal["array"] = "array"
    items: SchemaNode = Field(..., description="Element schema.")

    def __repr__(self) -> str:
        return f"<Array of {self.items!r}>"


class PropertySpec(BaseModel):
    """One declared property of an object schema."""

    model_config = _NODE_CONFIG

    name: str = Field(..., description="Property key, verbatim.")
    node: SchemaNode = Field(..., description="Property schema.")
    required: bool = Field(default=False, description="Listed in ``required``.")


class AnyValue(_BaseNode):
    """Sentinel for ``additionalProperties: true``."""

    kind: Literal["any"] = "any"


class ObjectNode(_BaseNode):
    """Object with declared properties and/or an open value schema."""

    kind: Literal["object"] = "object"
    properties: Tuple[PropertySpec, ...] = Field(
        default=(), description="Declared properties, declaration order."
    )
    open_value: Optional[OpenValue] = Field(
        default=None, description="``additionalProperties`` schema or sentinel."
    )

    @property
    def property_names(self) -> List[str]:
        return [p.name for p in self.properties]

    def __repr__(self) -> str:
        return f"<Object {len(self.properties)} props>"


class CompositeNode(_BaseNode):
    """``allOf`` (AND) or ``oneOf`` / ``anyOf`` (OR)."""

    kind: Literal["composite"] = "composite"
    op: CompositeOp = Field(..., description="Composition operator.")
    members: Tuple[SchemaNode, ...] = Field(
        default=(), description="Member schemas, declaration order."
    )

    def __repr__(self) -> str:
        return f"<Composite {self.op.value} x{len(self.members)}>"


class ReferenceNode(_BaseNode):
    """Named pointer into the schema registry."""

    kind: Literal["reference"] = "reference"
    name: str = Field(..., description="Registry key, verbatim.")

    def __repr__(self) -> str:
        return f"<Ref {self.name}>"


class UnknownNode(_BaseNode):
    """A fragment with no recognised kind."""

    kind: Literal["unknown"] = "unknown"

    def __repr__(self) -> str:
        return "<Unknown>"


SchemaNode = Annotated[
    Union[
        PrimitiveNode,
        ArrayNode,
        ObjectNode,
        CompositeNode,
        ReferenceNode,
        UnknownNode,
    ],
    Field(discriminator="kind"),
]

OpenValue = Annotated[
    Union[
        AnyValue,
        PrimitiveNode,
        ArrayNode,
        ObjectNode,
        CompositeNode,
        ReferenceNode,
        UnknownNode,
    ],
    Field(discriminator="kind"),
]

SCHEMA_NODE_TYPES: Tuple[type, ...] = (
    PrimitiveNode,
    ArrayNode,
    ObjectNode,
    CompositeNode,
    ReferenceNode,
    UnknownNode,
)

for _model in (ArrayNode, PropertySpec, ObjectNode, CompositeNode):
    _model.model_rebuild()


# ---------------------------------------------------------------------------
# Raw fragment → node conversion
# ---------------------------------------------------------------------------

_PRIMITIVE_TYPES: Dict[str, PrimitiveKind] = {kind.value: kind for kind in PrimitiveKind}


def _resolve_type_field(raw_type: Any) -> Tuple[Optional[str], bool]:
    """
    Normalise ``type`` into a single type name plus a null flag.

    OpenAPI 3.1 allows ``type: [string, "null"]``; the null entry becomes
    the node's ``nullable`` flag and the first other entry wins.
    """
    if isinstance(raw_type, str):
        return raw_type, raw_type == "null"
    if isinstance(raw_type, (list, tuple)):
        names: List[str] = [t for t in raw_type if isinstance(t, str)]
        has_null: bool = "null" in names
        non_null: List[str] = [t for t in names if t != "null"]
        return (non_null[0] if non_null else None), has_null
    return None, False


def _parse_members(raw_members: Any) -> Tuple[SchemaNode, ...]:
    if not isinstance(raw_members, (list, tuple)):
        return ()
    return tuple(parse_schema_node(m) for m in raw_members)


def parse_schema_node(raw: Any) -> SchemaNode:
    """
    Convert one raw OpenAPI schema fragment into a :data:`SchemaNode`.

    Precedence follows the order in which a generator must interpret the
    fragment: ``$ref``, ``allOf``, ``oneOf``, ``anyOf``, then ``type``.
    Objects are also recognised by the presence of ``properties`` or
    ``additionalProperties`` when ``type`` is omitted.

    Never raises: anything unrecognised becomes :class:`UnknownNode`.
    """
    if not isinstance(raw, Mapping):
        return UnknownNode()

    type_name, type_null = _resolve_type_field(raw.get("type"))
    nullable: bool = bool(raw.get("nullable", False)) or type_null

    ref: Any = raw.get("$ref")
    if isinstance(ref, str):
        return ReferenceNode(name=ref_name(ref), nullable=nullable)

    if "allOf" in raw:
        return CompositeNode(
            op=CompositeOp.AND, members=_parse_members(raw["allOf"]), nullable=nullable
        )
    for key in ("oneOf", "anyOf"):
        if key in raw:
            return CompositeNode(
                op=CompositeOp.OR, members=_parse_members(raw[key]), nullable=nullable
            )

    if type_name in _PRIMITIVE_TYPES:
        enum_raw: Any = raw.get("enum")
        enum_values: Optional[Tuple[Any, ...]] = (
            tuple(enum_raw) if isinstance(enum_raw, (list, tuple)) and enum_raw else None
        )
        fmt: Any = raw.get("format")
        return PrimitiveNode(
            primitive=_PRIMITIVE_TYPES[type_name],
            enum_values=enum_values,
            format=fmt if isinstance(fmt, str) else None,
            nullable=nullable,
        )

    if type_name == "array":
        items: SchemaNode = (
            parse_schema_node(raw["items"]) if "items" in raw else UnknownNode()
        )
        return ArrayNode(items=items, nullable=nullable)

    if type_name == "object" or (
        type_name is None and ("properties" in raw or "additionalProperties" in raw)
    ):
        return _parse_object(raw, nullable)

    return UnknownNode(nullable=nullable)


def _parse_object(raw: Mapping[str, Any], nullable: bool) -> ObjectNode:
    raw_required: Any = raw.get("required")
    required: frozenset = (
        frozenset(r for r in raw_required if isinstance(r, str))
        if isinstance(raw_required, (list, tuple))
        else frozenset()
    )

    raw_props: Any = raw.get("properties")
    properties: Tuple[PropertySpec, ...] = ()
    if isinstance(raw_props, Mapping):
        properties = tuple(
            PropertySpec(
                name=str(key),
                node=parse_schema_node(value),
                required=key in required,
            )
            for key, value in raw_props.items()
        )

    additional: Any = raw.get("additionalProperties")
    open_value: Optional[Union[AnyValue, SchemaNode]]
    if additional is True:
        open_value = AnyValue()
    elif isinstance(additional, Mapping):
        open_value = parse_schema_node(additional)
    else:
        open_value = None

    return ObjectNode(properties=properties, open_value=open_value, nullable=nullable)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class ParameterSpec(BaseModel):
    """A single operation parameter (path / query / header / cookie)."""

    model_config = _NODE_CONFIG

    name: str = Field(..., min_length=1, description="Parameter name.")
    location: ParameterLocation = Field(
        default=ParameterLocation.QUERY, description="The ``in`` field."
    )
    required: bool = Field(default=False, description="Parameter is required.")
    node: Optional[SchemaNode] = Field(default=None, description="Parameter schema.")
    description: Optional[str] = Field(default=None)


class OperationDescriptor(BaseModel):
    """
    Everything the engine reads about one operation.

    ``responses`` maps the status label (``"200"``, ``"4XX"``, ``"default"``)
    to the JSON response schema, or ``None`` when the response has no JSON
    body.  Mapping order is declaration order.
    """

    model_config = _NODE_CONFIG

    method: str = Field(..., min_length=1, description="Lower-case HTTP method.")
    path: str = Field(..., min_length=1, description="Templated URL path.")
    operation_id: str = Field(..., min_length=1)
    summary: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    tags: Tuple[str, ...] = Field(default=())
    parameters: Tuple[ParameterSpec, ...] = Field(default=())
    request_body: Optional[SchemaNode] = Field(default=None)
    request_body_required: bool = Field(default=False)
    responses: Dict[str, Optional[SchemaNode]] = Field(default_factory=dict)

    def __repr__(self) -> str:
        return f"<Operation {self.method.upper()} {self.path}>"


class TagInfo(BaseModel):
    """Top-level ``tags`` entry of the description."""

    model_config = _NODE_CONFIG

    name: str
    description: Optional[str] = None


class ApiInfo(BaseModel):
    """Display-oriented summary of one operation."""

    model_config = _SHARED_CONFIG

    method: str
    path: str
    operation_id: str
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class GenerateOptions(BaseModel):
    """
    Output switches for declaration emission.

    Read from the ``generate`` section of the project configuration; the
    type engine itself treats them as opaque flags.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        alias_generator=to_camel,
        extra="allow",
    )

    emit_interfaces: bool = Field(
        default=True,
        description="Record shapes become ``interface`` declarations "
        "instead of ``type`` aliases.",
    )
    export_keyword: bool = Field(
        default=True, description="Prefix declarations with ``export``."
    )
    indent_size: int = Field(default=2, ge=1, le=8, description="Field indentation.")
    include_params: bool = Field(
        default=True, description="Emit an ``<Op>Params`` type per operation."
    )
    include_request: bool = Field(
        default=True, description="Emit an ``<Op>Request`` type per operation."
    )
    include_response: bool = Field(
        default=True, description="Emit an ``<Op>Response`` type per operation."
    )


class SpecConfig(BaseModel):
    """One API description registered in the project configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    url: str = Field(..., min_length=1, description="URL or path of the description.")
    description: Optional[str] = Field(default=None)


class ProjectConfig(BaseModel):
    """
    Persisted project configuration (``apitypes.config.json``).

    Keys are camelCase on disk.  Unknown keys are preserved so that a
    load/save cycle never drops settings written by other tools.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        extra="allow",
    )

    schema_url: Optional[str] = Field(default=None, alias="$schema")
    output_path: str = Field(default="./src/api", alias="outputPath", min_length=1)
    http_client: Optional[str] = Field(default=None, alias="httpClient")
    generate: GenerateOptions = Field(default_factory=GenerateOptions)
    specs: Dict[str, SpecConfig] = Field(default_factory=dict)

    @field_validator("output_path")
    @classmethod
    def _strip_output_path(cls, v: str) -> str:
        stripped: str = v.strip()
        if not stripped:
            raise ValueError("outputPath must not be blank.")
        return stripped

    def to_file_dict(self) -> Dict[str, Any]:
        """Serialise with on-disk aliases, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SCHEMA_REF_PREFIX",
    "ref_name",
    "PrimitiveKind",
    "CompositeOp",
    "ParameterLocation",
    "PrimitiveNode",
    "ArrayNode",
    "PropertySpec",
    "AnyValue",
    "ObjectNode",
    "CompositeNode",
    "ReferenceNode",
    "UnknownNode",
    "SchemaNode",
    "OpenValue",
    "SCHEMA_NODE_TYPES",
    "parse_schema_node",
    "ParameterSpec",
    "OperationDescriptor",
    "TagInfo",
    "ApiInfo",
    "GenerateOptions",
    "SpecConfig",
    "ProjectConfig",
]

logger.debug("apitypes.models loaded — %d public symbols.", len(__all__))
