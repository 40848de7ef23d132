# File: apitypes/emitter.py
"""
apitypes - Named Type Emitter
==============================
Turns ``(name, schema node)`` pairs into TypeScript declarations.

* Record shapes become multi-line ``interface`` declarations (or ``type``
  literals when ``emit_interfaces`` is off), one field clause per line in
  declaration order.
* Everything else becomes a one-line ``type`` alias.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from apitypes.expressions import RecordType, TypeExpr
from apitypes.models import GenerateOptions, SchemaNode
from apitypes.registry import SchemaRegistry
from apitypes.renderer import TypeScriptRenderer, split_field_clauses
from apitypes.synthesizer import TypeExpressionSynthesizer
from apitypes.utils import indent_lines

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.emitter")

DECLARATION_ALIAS: str = "alias"
DECLARATION_RECORD: str = "record"


@dataclass(frozen=True, slots=True)
class Declaration:
    """One emitted top-level declaration."""

    name: str
    kind: str  # "alias" | "record"
    expression: TypeExpr
    fields: Tuple[str, ...]
    text: str

    @property
    def is_record(self) -> bool:
        return self.kind == DECLARATION_RECORD


class NamedTypeEmitter:
    """
    Emit declarations for named schemas against one registry.

    Usage::

        emitter = NamedTypeEmitter(registry)
        decl = emitter.emit("Pet", registry.resolve("Pet"))
        print(decl.text)
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        options: Optional[GenerateOptions] = None,
    ) -> None:
        self._registry: SchemaRegistry = registry
        self._options: GenerateOptions = options or GenerateOptions()
        self._renderer: TypeScriptRenderer = TypeScriptRenderer()
        self._synth: TypeExpressionSynthesizer = TypeExpressionSynthesizer(
            registry, self._renderer
        )

    @property
    def synthesizer(self) -> TypeExpressionSynthesizer:
        return self._synth

    @property
    def renderer(self) -> TypeScriptRenderer:
        return self._renderer

    def emit(self, name: str, node: SchemaNode) -> Declaration:
        """Synthesize *node* from a fresh state and declare it as *name*."""
        expr: TypeExpr = self._synth.synthesize(node, 0, set())
        return self.declare(name, expr)

    def declare(self, name: str, expr: TypeExpr) -> Declaration:
        """Format an already synthesized expression as a declaration."""
        prefix: str = "export " if self._options.export_keyword else ""

        if not isinstance(expr, RecordType):
            text: str = f"{prefix}type {name} = {self._renderer.render(expr)};"
            return Declaration(name, DECLARATION_ALIAS, expr, (), text)

        fields: Tuple[str, ...] = split_field_clauses(
            self._renderer.render_record_inline(expr)
        )
        body: List[str] = indent_lines(
            [f"{clause};" for clause in fields], size=self._options.indent_size
        )
        if self._options.emit_interfaces:
            head: str = f"{prefix}interface {name} {{"
            tail: str = "}"
        else:
            head = f"{prefix}type {name} = {{"
            tail = "};"
        text = "\n".join([head, *body, tail])
        return Declaration(name, DECLARATION_RECORD, expr, fields, text)

    def emit_all(self, names: Iterable[str]) -> List[Declaration]:
        """
        Emit every registered name in the given order.

        Names missing from the registry are skipped with a warning.
        """
        declarations: List[Declaration] = []
        for name in names:
            node: Optional[SchemaNode] = self._registry.resolve(name)
            if node is None:
                logger.warning("No schema named '%s'; declaration skipped.", name)
                continue
            declarations.append(self.emit(name, node))
        logger.debug("Emitted %d declaration(s).", len(declarations))
        return declarations


__all__: List[str] = [
    "DECLARATION_ALIAS",
    "DECLARATION_RECORD",
    "Declaration",
    "NamedTypeEmitter",
]

logger.debug("apitypes.emitter loaded — %d public symbols.", len(__all__))
