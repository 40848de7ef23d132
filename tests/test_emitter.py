"""
tests/test_emitter.py
TypeScript rendering, inline-record splitting and named declarations.
"""

from __future__ import annotations

import pytest

from apitypes.emitter import DECLARATION_ALIAS, DECLARATION_RECORD, NamedTypeEmitter
from apitypes.expressions import (
    NUMBER,
    STRING,
    ArrayType,
    FieldClause,
    IntersectionType,
    LiteralType,
    MapType,
    RecordType,
    ReferenceType,
    UnionType,
)
from apitypes.models import GenerateOptions, parse_schema_node
from apitypes.renderer import TypeScriptRenderer, is_record_text, split_field_clauses


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class TestRenderer:
    @pytest.fixture()
    def renderer(self):
        return TypeScriptRenderer()

    def test_literals(self, renderer):
        assert renderer.render(LiteralType(None)) == "null"
        assert renderer.render(LiteralType(True)) == "true"
        assert renderer.render(LiteralType(3)) == "3"
        assert renderer.render(LiteralType(1.5)) == "1.5"
        assert renderer.render(LiteralType("a\tb")) == '"a\\tb"'

    def test_map_and_reference(self, renderer):
        assert renderer.render(MapType(ReferenceType("Pet"))) == "Record<string, Pet>"

    def test_array_of_intersection(self, renderer):
        expr = ArrayType(IntersectionType((ReferenceType("A"), ReferenceType("B"))))
        assert renderer.render(expr) == "(A & B)[]"

    def test_field_markers(self, renderer):
        clause = FieldClause(name="when", type=STRING, optional=True, nullable=True)
        assert renderer.render_field(clause) == "when?: string | null"

    def test_empty_record(self, renderer):
        assert renderer.render(RecordType(())) == "{  }"

    def test_unsupported_node(self, renderer):
        with pytest.raises(TypeError):
            renderer.render(object())  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# split_field_clauses
# ---------------------------------------------------------------------------


class TestSplitFieldClauses:
    def test_flat_record(self):
        assert split_field_clauses("{ a: string; b?: number }") == ("a: string", "b?: number")

    def test_nested_record_kept_whole(self):
        text = "{ a: { x: string; y: number }; b: Record<string, { z: boolean; w: 1 }> }"
        assert split_field_clauses(text) == (
            "a: { x: string; y: number }",
            "b: Record<string, { z: boolean; w: 1 }>",
        )

    def test_separators_inside_strings_ignored(self):
        text = '{ "a; b"?: "x; }"; c: "d\\"; e" }'
        assert split_field_clauses(text) == ('"a; b"?: "x; }"', 'c: "d\\"; e"')

    def test_round_trip_is_lossless(self, registry):
        renderer = TypeScriptRenderer()
        emitter = NamedTypeEmitter(registry)
        for name in registry:
            expr = emitter.synthesizer.synthesize(registry.resolve(name))
            if not isinstance(expr, RecordType):
                continue
            inline = renderer.render(expr)
            clauses = split_field_clauses(inline)
            assert len(clauses) == len(expr.fields)
            assert "{ " + "; ".join(clauses) + " }" == inline

    @pytest.mark.parametrize(
        "text",
        ["string", "{ a: string } | { b: number }", "{ a: string }[]", "Record<string, number>"],
    )
    def test_non_record_rejected(self, text):
        assert not is_record_text(text)
        with pytest.raises(ValueError):
            split_field_clauses(text)


# ---------------------------------------------------------------------------
# NamedTypeEmitter
# ---------------------------------------------------------------------------


class TestNamedTypeEmitter:
    def test_alias_for_non_record(self, make_registry):
        emitter = NamedTypeEmitter(make_registry({}))
        decl = emitter.emit("Status", parse_schema_node({"type": "string", "enum": ["on", "off"]}))
        assert decl.kind == DECLARATION_ALIAS
        assert not decl.is_record
        assert decl.fields == ()
        assert decl.text == 'export type Status = "on" | "off";'

    def test_interface_for_record(self, make_registry):
        emitter = NamedTypeEmitter(make_registry({}))
        node = parse_schema_node(
            {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "integer"},
                    "tags": {"type": "array", "items": {"type": "string"}, "nullable": True},
                },
            }
        )
        decl = emitter.emit("Item", node)
        assert decl.kind == DECLARATION_RECORD
        assert decl.fields == ("id: number", "tags?: string[] | null")
        assert decl.text == (
            "export interface Item {\n"
            "  id: number;\n"
            "  tags?: string[] | null;\n"
            "}"
        )

    def test_type_literal_without_export(self, make_registry):
        options = GenerateOptions(emit_interfaces=False, export_keyword=False, indent_size=4)
        emitter = NamedTypeEmitter(make_registry({}), options)
        node = parse_schema_node({"type": "object", "properties": {"a": {"type": "string"}}})
        assert emitter.emit("A", node).text == "type A = {\n    a?: string;\n};"

    def test_field_count_matches_properties(self, registry):
        emitter = NamedTypeEmitter(registry)
        decl = emitter.emit("Order", registry.resolve("Order"))
        names = [c.split(":", 1)[0].rstrip("?") for c in decl.fields]
        assert names == [
            "id",
            "petId",
            "quantity",
            "shipDate",
            "status",
            "complete",
            '"x-tracking-code"',
        ]
        assert all("?" in c.split(":", 1)[0] for c in decl.fields)

    def test_nested_record_stays_on_one_line(self, registry):
        decl = NamedTypeEmitter(registry).emit("Pet", registry.resolve("Pet"))
        assert len(decl.text.splitlines()) == len(decl.fields) + 2
        assert "  category?: { id?: number; name?: string; parent?: Category };" in decl.text

    def test_declare_prebuilt_expression(self, make_registry):
        emitter = NamedTypeEmitter(make_registry({}))
        decl = emitter.declare("Ids", ArrayType(UnionType((NUMBER, STRING))))
        assert decl.text == "export type Ids = (number | string)[];"

    def test_emit_all_skips_missing(self, registry):
        decls = NamedTypeEmitter(registry).emit_all(["Tag", "Missing", "Metadata"])
        assert [d.name for d in decls] == ["Tag", "Metadata"]
        assert decls[1].text == "export type Metadata = Record<string, unknown>;"
