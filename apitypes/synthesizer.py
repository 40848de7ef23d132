# File: apitypes/synthesizer.py
"""
apitypes - Type Expression Synthesizer
=======================================
Recursive translation of a :data:`~apitypes.models.SchemaNode` into a
:class:`~apitypes.expressions.TypeExpr`.

Termination is guaranteed for any finite registry:

* every reference being expanded is recorded in ``active_path``; meeting
  the same name again on that path yields a bare :class:`ReferenceType`
  instead of another expansion;
* object nesting beyond :data:`MAX_OBJECT_DEPTH` collapses to ``object``.

``active_path`` is created fresh for every top-level call and is only
mutated along the current call chain, so a single synthesizer can be
shared between threads for the same read-only registry.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple

from apitypes.expressions import (
    BLOB,
    BOOLEAN,
    NULLABLE_UNKNOWN,
    NUMBER,
    OBJECT,
    STRING,
    UNKNOWN,
    UNTYPED_MAP,
    ArrayType,
    FieldClause,
    IntersectionType,
    LiteralType,
    MapType,
    RecordType,
    ReferenceType,
    TypeExpr,
    UnionType,
)
from apitypes.models import (
    AnyValue,
    ArrayNode,
    CompositeNode,
    CompositeOp,
    ObjectNode,
    PrimitiveKind,
    PrimitiveNode,
    ReferenceNode,
    SchemaNode,
)
from apitypes.registry import SchemaRegistry
from apitypes.renderer import TypeScriptRenderer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.synthesizer")

# Object nesting levels expanded below the top-level call
MAX_OBJECT_DEPTH: int = 3


class TypeExpressionSynthesizer:
    """
    Schema node → type expression, bound to one registry.

    Usage::

        synth = TypeExpressionSynthesizer(registry)
        expr = synth.synthesize(node)
        text = synth.synthesize_text(node)   # 'string[]'
    """

    __slots__ = ("_registry", "_renderer")

    def __init__(
        self,
        registry: SchemaRegistry,
        renderer: Optional[TypeScriptRenderer] = None,
    ) -> None:
        self._registry: SchemaRegistry = registry
        self._renderer: TypeScriptRenderer = renderer or TypeScriptRenderer()

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def synthesize(
        self,
        node: SchemaNode,
        depth: int = 0,
        active_path: Optional[Set[str]] = None,
    ) -> TypeExpr:
        """
        Build the type expression for *node*.

        Args:
            node: Any schema node variant.
            depth: Object nesting level of *node*; 0 for a top-level call.
            active_path: Reference names being expanded on the current call
                chain.  Omit for a top-level call.

        Never raises for any node shape.
        """
        if depth < 0:
            raise ValueError(f"depth must be non-negative, got {depth}.")
        path: Set[str] = set() if active_path is None else active_path
        return self._visit(node, depth, path)

    def synthesize_text(self, node: SchemaNode, depth: int = 0) -> str:
        """Synthesize and render in one step."""
        return self._renderer.render(self.synthesize(node, depth))

    # -----------------------------------------------------------------
    # Dispatch
    # -----------------------------------------------------------------

    def _visit(self, node: SchemaNode, depth: int, path: Set[str]) -> TypeExpr:
        if isinstance(node, ReferenceNode):
            return self._visit_reference(node, depth, path)
        if isinstance(node, CompositeNode):
            return self._visit_composite(node, depth, path)
        if isinstance(node, PrimitiveNode):
            return self._visit_primitive(node)
        if isinstance(node, ArrayNode):
            return ArrayType(self._visit(node.items, depth, path))
        if isinstance(node, ObjectNode):
            return self._visit_object(node, depth, path)
        return NULLABLE_UNKNOWN if getattr(node, "nullable", False) else UNKNOWN

    def _visit_reference(
        self, node: ReferenceNode, depth: int, path: Set[str]
    ) -> TypeExpr:
        name: str = node.name
        if name in path:
            return ReferenceType(name)

        target: Optional[SchemaNode] = self._registry.resolve(name)
        if target is None:
            logger.debug("Unresolved reference '%s' rendered as bare name.", name)
            return ReferenceType(name)

        path.add(name)
        try:
            return self._visit(target, depth, path)
        finally:
            path.discard(name)

    def _visit_composite(
        self, node: CompositeNode, depth: int, path: Set[str]
    ) -> TypeExpr:
        members: Tuple[TypeExpr, ...] = tuple(
            self._visit(member, depth, path) for member in node.members
        )
        if not members:
            return UNKNOWN
        if node.op == CompositeOp.AND:
            return IntersectionType(members)
        return UnionType(members)

    @staticmethod
    def _visit_primitive(node: PrimitiveNode) -> TypeExpr:
        if node.primitive == PrimitiveKind.STRING:
            if node.enum_values:
                return UnionType(
                    tuple(
                        LiteralType(None if v is None else str(v))
                        for v in node.enum_values
                    )
                )
            if node.format == "binary":
                return BLOB
            return STRING
        if node.primitive in (PrimitiveKind.INTEGER, PrimitiveKind.NUMBER):
            return NUMBER
        return BOOLEAN

    def _visit_object(self, node: ObjectNode, depth: int, path: Set[str]) -> TypeExpr:
        if not node.properties:
            open_value = node.open_value
            if open_value is None or isinstance(open_value, AnyValue):
                return UNTYPED_MAP
            return MapType(self._visit(open_value, depth + 1, path))

        if depth > MAX_OBJECT_DEPTH:
            return OBJECT

        fields: List[FieldClause] = []
        for prop in node.properties:
            field_type: TypeExpr = self._visit(prop.node, depth + 1, path)
            if prop.node.nullable and field_type == NULLABLE_UNKNOWN:
                # the clause adds its own "| null"
                field_type = UNKNOWN
            fields.append(
                FieldClause(
                    name=prop.name,
                    type=field_type,
                    optional=not prop.required,
                    nullable=prop.node.nullable,
                )
            )
        return RecordType(tuple(fields))


__all__: List[str] = [
    "MAX_OBJECT_DEPTH",
    "TypeExpressionSynthesizer",
]

logger.debug("apitypes.synthesizer loaded — %d public symbols.", len(__all__))
