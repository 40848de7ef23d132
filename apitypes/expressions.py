# File: apitypes/expressions.py
"""
apitypes - Type Expression AST
===============================
A small, language-neutral tree describing a synthesized type.  The
synthesizer builds these values; :mod:`apitypes.renderer` turns them into
TypeScript text in a single formatting pass.

All nodes are frozen, hashable dataclasses: two expressions are equal
exactly when they render identically.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple, Union


class TypeExpr:
    """Marker base for every expression node."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class KeywordType(TypeExpr):
    """Built-in type name: ``string``, ``number``, ``unknown``, ..."""

    name: str


@dataclass(frozen=True, slots=True)
class LiteralType(TypeExpr):
    """A literal value type such as ``"active"``."""

    value: Union[str, int, float, bool, None]


@dataclass(frozen=True, slots=True)
class ReferenceType(TypeExpr):
    """A named type declared elsewhere."""

    name: str


@dataclass(frozen=True, slots=True)
class ArrayType(TypeExpr):
    item: TypeExpr


@dataclass(frozen=True, slots=True)
class MapType(TypeExpr):
    """String-keyed map of ``value``."""

    value: TypeExpr


@dataclass(frozen=True, slots=True)
class UnionType(TypeExpr):
    members: Tuple[TypeExpr, ...]


@dataclass(frozen=True, slots=True)
class IntersectionType(TypeExpr):
    members: Tuple[TypeExpr, ...]


@dataclass(frozen=True, slots=True)
class FieldClause:
    """One ``key?: type | null`` entry of a record."""

    name: str
    type: TypeExpr
    optional: bool = False
    nullable: bool = False


@dataclass(frozen=True, slots=True)
class RecordType(TypeExpr):
    """Structural object type with an ordered field list."""

    fields: Tuple[FieldClause, ...]


# ---------------------------------------------------------------------------
# Shared instances
# ---------------------------------------------------------------------------

STRING: KeywordType = KeywordType("string")
NUMBER: KeywordType = KeywordType("number")
BOOLEAN: KeywordType = KeywordType("boolean")
UNKNOWN: KeywordType = KeywordType("unknown")
OBJECT: KeywordType = KeywordType("object")
NULL: KeywordType = KeywordType("null")
BLOB: KeywordType = KeywordType("Blob")

NULLABLE_UNKNOWN: UnionType = UnionType((UNKNOWN, NULL))
UNTYPED_MAP: MapType = MapType(UNKNOWN)


__all__: List[str] = [
    "TypeExpr",
    "KeywordType",
    "LiteralType",
    "ReferenceType",
    "ArrayType",
    "MapType",
    "UnionType",
    "IntersectionType",
    "FieldClause",
    "RecordType",
    "STRING",
    "NUMBER",
    "BOOLEAN",
    "UNKNOWN",
    "OBJECT",
    "NULL",
    "BLOB",
    "NULLABLE_UNKNOWN",
    "UNTYPED_MAP",
]
