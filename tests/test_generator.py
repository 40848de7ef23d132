"""
tests/test_generator.py
End-to-end pipeline tests: description → rendered modules → files on disk.

Real file I/O happens under pytest's tmp_path.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from apitypes.exporters import MANIFEST_FILE_NAME, ProjectExporter
from apitypes.generator import (
    TypeGenerator,
    is_success_status,
    parameters_node,
    select_operations,
)
from apitypes.loader import parse_description
from apitypes.models import GenerateOptions, ProjectConfig, SpecConfig

EXPECTED_FILES = {
    "API/post/pet.ts",
    "API/get/pet/findByStatus.ts",
    "API/get/pet/{petId}.ts",
    "API/delete/pet/{petId}.ts",
    "API/post/pet/{petId}/uploadImage.ts",
    "API/get/store/inventory.ts",
    "API/post/store/order.ts",
    "API/get/owners/{ownerId}.ts",
}


@pytest.fixture()
def generator():
    return TypeGenerator()


@pytest.fixture()
def dry_files(description, tmp_path):
    report = TypeGenerator(dry_run=True).generate(description, tmp_path)
    assert report.success, report.summary()
    return report.files


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    @pytest.mark.parametrize(
        "status, expected",
        [("200", True), ("204", True), ("2XX", True), ("301", False), ("default", False)],
    )
    def test_is_success_status(self, status, expected):
        assert is_success_status(status) is expected

    def test_select_by_tag(self, description):
        ops = select_operations(description.operations, tags=["store"])
        assert [o.operation_id for o in ops] == ["getInventory", "placeOrder"]

    def test_select_by_tag_and_id(self, description):
        ops = select_operations(
            description.operations, tags=["pet"], operation_ids=["deletePet", "placeOrder"]
        )
        assert [o.operation_id for o in ops] == ["deletePet"]

    def test_select_without_filters(self, description):
        assert len(select_operations(description.operations)) == description.operation_count

    def test_parameters_node(self, description):
        node = parameters_node(description.find_operation("deletePet"))
        assert node.property_names == ["petId", "api_key"]
        assert [p.required for p in node.properties] == [True, False]
        assert parameters_node(description.find_operation("getInventory")) is None


# ---------------------------------------------------------------------------
# Rendered modules
# ---------------------------------------------------------------------------


class TestRenderedModules:
    def test_one_file_per_operation(self, dry_files):
        assert set(dry_files) == EXPECTED_FILES

    def test_minimal_module_exact_text(self, minimal_description_dict, tmp_path):
        desc = parse_description(minimal_description_dict)
        report = TypeGenerator(dry_run=True).generate(desc, tmp_path)
        assert report.files["API/get/items.ts"] == (
            "/**\n"
            " * GET /items\n"
            " *\n"
            " * Generated by apitypes from Minimal 0.1.0. Do not edit.\n"
            " */\n"
            "\n"
            "export interface Item {\n"
            "  id: number;\n"
            "  title?: string | null;\n"
            "}\n"
            "\n"
            "export type ListItemsResponse = { id: number; title?: string | null }[];\n"
        )
        assert report.total_declarations == 2

    def test_get_pet_by_id_module(self, dry_files):
        content = dry_files["API/get/pet/{petId}.ts"]
        assert content.startswith("/**\n * GET /pet/{petId}\n * Find pet by ID\n *\n")
        positions = [
            content.index(f"export interface {name} {{")
            for name in ("Pet", "Category", "Tag", "Owner")
        ]
        assert positions == sorted(positions)
        assert "export interface GetPetByIdParams {\n  petId: number;\n}" in content
        assert content.endswith("export type GetPetByIdResponse = Pet;\n")
        assert "Request" not in content

    def test_request_alias_and_error_status_ignored(self, dry_files):
        content = dry_files["API/post/pet.ts"]
        assert "export type AddPetRequest = Pet;" in content
        assert "export type AddPetResponse = Pet;" in content

    def test_request_body_via_component(self, dry_files):
        content = dry_files["API/post/store/order.ts"]
        assert "export interface Order {" in content
        assert '  "x-tracking-code"?: string;' in content
        assert "export type PlaceOrderRequest = Order;" in content

    def test_bodyless_success_is_void(self, dry_files):
        content = dry_files["API/delete/pet/{petId}.ts"]
        assert "export type DeletePetResponse = void;" in content
        assert "  api_key?: string;" in content

    def test_map_response_and_no_dependencies(self, dry_files):
        content = dry_files["API/get/store/inventory.ts"]
        assert "interface" not in content
        assert "export type GetInventoryResponse = Record<string, number>;" in content

    def test_query_enum_parameter(self, dry_files):
        content = dry_files["API/get/pet/findByStatus.ts"]
        assert '  status?: "available" | "pending" | "sold";' in content
        assert "export type FindPetsByStatusResponse = " in content

    def test_default_operation_id_type_names(self, dry_files):
        content = dry_files["API/get/owners/{ownerId}.ts"]
        assert "export type GetOwnersOwnerIdResponse = Owner;" in content
        assert "export interface GetOwnersOwnerIdParams {" in content

    def test_binary_body_has_no_request_type(self, dry_files):
        content = dry_files["API/post/pet/{petId}/uploadImage.ts"]
        assert "UploadFileRequest" not in content
        assert "UploadFileParams" not in content
        assert "export type UploadFileResponse = ApiResponse;" in content

    def test_union_of_success_bodies(self, tmp_path):
        desc = parse_description(
            {
                "openapi": "3.0.0",
                "info": {"title": "U", "version": "1"},
                "paths": {
                    "/a": {
                        "get": {
                            "operationId": "getA",
                            "responses": {
                                "200": {
                                    "content": {"application/json": {"schema": {"type": "string"}}}
                                },
                                "201": {
                                    "content": {"application/json": {"schema": {"type": "number"}}}
                                },
                                "202": {
                                    "content": {"application/json": {"schema": {"type": "string"}}}
                                },
                                "default": {
                                    "content": {"application/json": {"schema": {"type": "boolean"}}}
                                },
                            },
                        }
                    }
                },
            }
        )
        report = TypeGenerator(dry_run=True).generate(desc, tmp_path)
        assert report.files["API/get/a.ts"].endswith(
            "export type GetAResponse = string | number;\n"
        )

    def test_generate_options_respected(self, description, tmp_path):
        config = ProjectConfig(
            generate=GenerateOptions(
                emit_interfaces=False,
                export_keyword=False,
                include_params=False,
                include_response=False,
            )
        )
        report = TypeGenerator(dry_run=True).generate(
            description, tmp_path, config=config, operation_ids=["getPetById"]
        )
        content = report.files["API/get/pet/{petId}.ts"]
        assert "type Pet = {\n" in content
        assert "export" not in content
        assert "Params" not in content
        assert "Response" not in content

    def test_deterministic_output(self, description, tmp_path):
        first = TypeGenerator(dry_run=True).generate(description, tmp_path).files
        second = TypeGenerator(dry_run=True).generate(description, tmp_path).files
        assert first == second


# ---------------------------------------------------------------------------
# Pipeline behaviour
# ---------------------------------------------------------------------------


class TestPipeline:
    def test_files_written_with_manifest(self, generator, description, tmp_path):
        report = generator.generate(description, tmp_path, spec_name="PETSTORE")
        assert report.success, report.summary()
        assert report.total_operations_processed == 8
        assert report.total_files == 8
        assert (tmp_path / "PETSTORE" / "get" / "pet" / "{petId}.ts").is_file()

        manifest = json.loads((tmp_path / "PETSTORE" / MANIFEST_FILE_NAME).read_text())
        assert manifest["specName"] == "PETSTORE"
        assert manifest["apiVersion"] == "1.0.0"
        assert manifest["totalFiles"] == 8
        assert {f["path"] for f in manifest["files"]} == {
            p.replace("API/", "PETSTORE/", 1) for p in EXPECTED_FILES
        }

    def test_validation_warning_reported(self, generator, description, tmp_path):
        report = generator.generate(description, tmp_path)
        assert len(report.validation_warnings) == 1
        assert "UNDECLARED_PATH_PARAMETER" in report.validation_warnings[0]

    def test_fail_on_warnings_blocks_generation(self, description, tmp_path):
        report = TypeGenerator(fail_on_warnings=True).generate(description, tmp_path)
        assert not report.success
        assert report.validation_warnings == []
        assert len(report.validation_errors) == 1
        assert not (tmp_path / "API").exists()

    def test_strict_validation_error(self, description, tmp_path):
        config = ProjectConfig(specs={"API": SpecConfig(url=" ")})
        report = TypeGenerator().generate(description, tmp_path, config=config)
        assert not report.success
        assert report.files == {}

    def test_non_strict_continues(self, description, tmp_path):
        config = ProjectConfig(specs={"API": SpecConfig(url=" ")})
        report = TypeGenerator(strict_validation=False, dry_run=True).generate(
            description, tmp_path, config=config
        )
        assert not report.success
        assert len(report.files) == len(EXPECTED_FILES)

    def test_filter_matching_nothing(self, generator, description, tmp_path):
        report = generator.generate(description, tmp_path, operation_ids=["nope"])
        assert not report.success
        assert "No operations matched the requested tag/operation filters." in (
            report.generation_errors
        )

    def test_tag_filter(self, generator, description, tmp_path):
        report = generator.generate(description, tmp_path, tags=["store"])
        assert report.success
        assert sorted(report.files) == ["API/get/store/inventory.ts", "API/post/store/order.ts"]

    def test_duplicate_output_path_skipped(self, tmp_path):
        desc = parse_description(
            {
                "openapi": "3.0.0",
                "info": {"title": "D", "version": "1"},
                "paths": {
                    "/a": {"get": {"operationId": "first", "responses": {"204": {}}}},
                    "/a/": {"get": {"operationId": "second", "responses": {"204": {}}}},
                },
            }
        )
        report = TypeGenerator(dry_run=True).generate(desc, tmp_path)
        assert list(report.files) == ["API/get/a.ts"]
        assert report.skipped_operations == ["second: output path API/get/a.ts already used"]

    def test_dry_run_writes_nothing(self, description, tmp_path):
        report = TypeGenerator(dry_run=True).generate(description, tmp_path)
        assert report.total_files == len(EXPECTED_FILES)
        assert report.total_lines > 0
        assert list(tmp_path.iterdir()) == []

    def test_clean_only_touches_spec_directory(self, description, tmp_path):
        stale = tmp_path / "API" / "stale.ts"
        stale.parent.mkdir(parents=True)
        stale.write_text("old", encoding="utf-8")
        keep = tmp_path / "OTHER" / "keep.ts"
        keep.parent.mkdir(parents=True)
        keep.write_text("keep", encoding="utf-8")

        report = TypeGenerator(clean_output=True).generate(description, tmp_path)
        assert report.success
        assert not stale.exists()
        assert keep.exists()

    def test_generate_from_file_source(self, generator, description_yaml_path, tmp_path):
        out = tmp_path / "out"
        report = generator.generate_from_source(description_yaml_path, out, spec_name="PET")
        assert report.success, report.summary()
        assert report.step_metrics[0].step_name == "Load Description"
        assert (out / "PET" / "post" / "pet.ts").is_file()

    def test_generate_from_http_source(self, generator, mock_http_client, tmp_path):
        report = generator.generate_from_source(
            "https://api.test/openapi.json", tmp_path, client=mock_http_client
        )
        assert report.success, report.summary()

    def test_generate_from_missing_source(self, generator, tmp_path):
        report = generator.generate_from_source(tmp_path / "missing.yaml", tmp_path)
        assert not report.success
        assert "not found" in report.generation_errors[0]
        assert "FAILED" in report.summary()


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------


class TestProjectExporter:
    def test_export_and_manifest_totals(self, tmp_path):
        exporter = ProjectExporter(tmp_path, generate_manifest=False)
        result = exporter.export({"S/a.ts": "one\ntwo\n", "S/b/c.ts": "x"}, spec_name="S")
        assert result.success
        assert (tmp_path / "S" / "b" / "c.ts").read_text() == "x"
        assert result.manifest.total_files == 2
        assert result.manifest.total_lines == 3
        assert not (tmp_path / "S" / MANIFEST_FILE_NAME).exists()

    def test_refuses_paths_outside_root(self, tmp_path):
        out = tmp_path / "out"
        result = ProjectExporter(out).export({"../escape.ts": "x"})
        assert not result.success
        assert "outside the output directory" in result.errors[0]
        assert not (tmp_path / "escape.ts").exists()

    def test_overwrites_existing_file(self, tmp_path):
        exporter = ProjectExporter(tmp_path, generate_manifest=False)
        exporter.export({"a.ts": "first"})
        exporter.export({"a.ts": "second"})
        assert (tmp_path / "a.ts").read_text() == "second"
        assert [p.name for p in Path(tmp_path).iterdir()] == ["a.ts"]

    def test_manifest_json_has_checksums(self, tmp_path):
        result = ProjectExporter(tmp_path).export({"X/a.ts": "a"}, spec_name="X")
        data = json.loads(result.manifest.to_json())
        assert data["files"][0]["path"] == "X/a.ts"
        assert len(data["files"][0]["sha256"]) == 64
