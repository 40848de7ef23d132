# File: apitypes/renderer.py
"""
apitypes - TypeScript Renderer
===============================
Single formatting pass from :mod:`apitypes.expressions` to TypeScript
source text, plus :func:`split_field_clauses`, the inverse of inline
record rendering used when a record is re-laid out one field per line.

Rendering rules:

* unions join with ``" | "``, intersections with ``" & "``;
* array element types that are unions or intersections are parenthesized
  (``("a" | "b")[]``) so the postfix ``[]`` applies to the whole element;
* a union nested inside an intersection is parenthesized for the same
  reason (``&`` binds tighter than ``|``);
* records render inline as ``{ a: string; b?: number }``.
"""

from __future__ import annotations

import json
import logging
from typing import List, Tuple

from apitypes.expressions import (
    ArrayType,
    FieldClause,
    IntersectionType,
    KeywordType,
    LiteralType,
    MapType,
    RecordType,
    ReferenceType,
    TypeExpr,
    UnionType,
)
from apitypes.utils import quote_ts_string, safe_property_key

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.renderer")

RECORD_OPEN: str = "{ "
RECORD_CLOSE: str = " }"
FIELD_SEPARATOR: str = "; "

_OPENERS: str = "{[(<"
_CLOSERS: str = "}])>"


def _is_compound(expr: TypeExpr) -> bool:
    return isinstance(expr, (UnionType, IntersectionType)) and len(expr.members) > 1


class TypeScriptRenderer:
    """
    Stateless renderer.  One instance can be shared freely.
    """

    def render(self, expr: TypeExpr) -> str:
        """Render any expression node to TypeScript text."""
        if isinstance(expr, KeywordType):
            return expr.name
        if isinstance(expr, ReferenceType):
            return expr.name
        if isinstance(expr, LiteralType):
            return self.render_literal(expr.value)
        if isinstance(expr, ArrayType):
            inner: str = self.render(expr.item)
            if _is_compound(expr.item):
                return f"({inner})[]"
            return f"{inner}[]"
        if isinstance(expr, MapType):
            return f"Record<string, {self.render(expr.value)}>"
        if isinstance(expr, UnionType):
            return " | ".join(self.render(m) for m in expr.members)
        if isinstance(expr, IntersectionType):
            parts: List[str] = []
            for member in expr.members:
                text: str = self.render(member)
                if isinstance(member, UnionType) and len(member.members) > 1:
                    text = f"({text})"
                parts.append(text)
            return " & ".join(parts)
        if isinstance(expr, RecordType):
            return self.render_record_inline(expr)
        raise TypeError(f"Unsupported expression node: {type(expr).__name__}")

    @staticmethod
    def render_literal(value: object) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return json.dumps(value)
        return quote_ts_string(str(value))

    def render_field(self, clause: FieldClause) -> str:
        """``key?: type | null`` without a trailing separator."""
        marker: str = "?" if clause.optional else ""
        suffix: str = " | null" if clause.nullable else ""
        return f"{safe_property_key(clause.name)}{marker}: {self.render(clause.type)}{suffix}"

    def render_fields(self, record: RecordType) -> Tuple[str, ...]:
        return tuple(self.render_field(f) for f in record.fields)

    def render_record_inline(self, record: RecordType) -> str:
        return RECORD_OPEN + FIELD_SEPARATOR.join(self.render_fields(record)) + RECORD_CLOSE


# ---------------------------------------------------------------------------
# Inline record → field clauses
# ---------------------------------------------------------------------------


def is_record_text(text: str) -> bool:
    """True when *text* is one inline record rendered by this module."""
    if not (text.startswith(RECORD_OPEN) and text.endswith(RECORD_CLOSE)):
        return False
    depth: int = 0
    in_string: bool = False
    escaped: bool = False
    for index, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth == 0 and index != len(text) - 1:
                return False
    return depth == 0


def split_field_clauses(text: str) -> Tuple[str, ...]:
    """
    Split an inline record ``{ a: T; b?: U }`` into ``("a: T", "b?: U")``.

    Separators inside nested records, generic arguments, parentheses and
    quoted keys or literals are ignored, so the split is lossless:
    ``"{ " + "; ".join(split_field_clauses(t)) + " }" == t``.

    Raises:
        ValueError: If *text* is not an inline record.
    """
    if not is_record_text(text):
        raise ValueError(f"Not an inline record type: {text[:60]!r}")

    body: str = text[len(RECORD_OPEN):-len(RECORD_CLOSE)]
    clauses: List[str] = []
    depth: int = 0
    in_string: bool = False
    escaped: bool = False
    start: int = 0
    index: int = 0

    while index < len(body):
        ch: str = body[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif depth == 0 and body.startswith(FIELD_SEPARATOR, index):
            clauses.append(body[start:index])
            index += len(FIELD_SEPARATOR)
            start = index
            continue
        index += 1

    clauses.append(body[start:])
    return tuple(c for c in clauses if c)


__all__: List[str] = [
    "TypeScriptRenderer",
    "is_record_text",
    "split_field_clauses",
]
