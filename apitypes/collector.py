# File: apitypes/collector.py
"""
apitypes - Dependency Collector
================================
Computes the named schemas an operation needs: every registry name
transitively reachable from its parameters, its JSON request body and
its JSON responses.

The walk mirrors the synthesizer's traversal but only records names.
A name is expanded at most once per ``collect`` call, which also makes
the walk terminate on self-referential and mutually recursive schemas.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from apitypes.models import (
    AnyValue,
    ArrayNode,
    CompositeNode,
    ObjectNode,
    OperationDescriptor,
    ReferenceNode,
    SchemaNode,
)
from apitypes.registry import SchemaRegistry

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.collector")


class DependencyCollector:
    """
    Operation → ordered tuple of schema names.

    Usage::

        collector = DependencyCollector(registry)
        names = collector.collect(operation)   # ('Pet', 'Category', 'Tag')
    """

    __slots__ = ("_registry",)

    def __init__(self, registry: SchemaRegistry) -> None:
        self._registry: SchemaRegistry = registry

    def collect(self, operation: OperationDescriptor) -> Tuple[str, ...]:
        """Names in first-discovery order: parameters, body, responses."""
        roots: List[SchemaNode] = [
            p.node for p in operation.parameters if p.node is not None
        ]
        if operation.request_body is not None:
            roots.append(operation.request_body)
        roots.extend(n for n in operation.responses.values() if n is not None)

        names: Tuple[str, ...] = self.collect_from_nodes(roots)
        logger.debug(
            "Operation '%s' depends on %d schema(s).",
            operation.operation_id,
            len(names),
        )
        return names

    def collect_from_nodes(self, nodes: Iterable[SchemaNode]) -> Tuple[str, ...]:
        """Shared walk over several root nodes with one visited set."""
        # dict keeps insertion order
        visited: Dict[str, None] = {}
        for node in nodes:
            self._walk(node, visited)
        return tuple(visited)

    def _walk(self, node: SchemaNode, visited: Dict[str, None]) -> None:
        if isinstance(node, ReferenceNode):
            if node.name in visited:
                return
            visited[node.name] = None
            target: Optional[SchemaNode] = self._registry.resolve(node.name)
            if target is not None:
                self._walk(target, visited)
        elif isinstance(node, ArrayNode):
            self._walk(node.items, visited)
        elif isinstance(node, ObjectNode):
            for prop in node.properties:
                self._walk(prop.node, visited)
            if node.open_value is not None and not isinstance(node.open_value, AnyValue):
                self._walk(node.open_value, visited)
        elif isinstance(node, CompositeNode):
            for member in node.members:
                self._walk(member, visited)


__all__: List[str] = ["DependencyCollector"]

logger.debug("apitypes.collector loaded — %d public symbols.", len(__all__))
