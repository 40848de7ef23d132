"""
tests/test_cli.py
Command-line interface: modes, exit codes and project configuration.
"""

from __future__ import annotations

import json

import pytest

from apitypes.cli import (
    EXIT_GENERATION_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    cli_main,
)
from apitypes.config import CONFIG_FILE_NAME, load_config


def run_cli(*argv):
    with pytest.raises(SystemExit) as exc_info:
        cli_main(list(argv))
    return exc_info.value.code


class TestArguments:
    def test_version(self, capsys):
        assert run_cli("--version") == 0
        assert "apitypes v" in capsys.readouterr().out

    def test_no_source_and_no_config(self, tmp_path):
        assert run_cli("--cwd", str(tmp_path)) == EXIT_INPUT_ERROR

    def test_spec_name_requires_source(self, tmp_path):
        assert run_cli("--cwd", str(tmp_path), "--spec-name", "X") == EXIT_INPUT_ERROR

    def test_missing_project_directory(self, tmp_path):
        assert run_cli("--cwd", str(tmp_path / "nope"), "-s", "x.yaml") == EXIT_INPUT_ERROR

    def test_modes_are_mutually_exclusive(self, tmp_path):
        assert run_cli("--cwd", str(tmp_path), "--list", "--init") == 2


class TestListAndValidate:
    def test_list(self, description_yaml_path, tmp_path, capsys):
        code = run_cli("--cwd", str(tmp_path), "-s", str(description_yaml_path), "--list", "-q")
        out = capsys.readouterr().out
        assert code == EXIT_SUCCESS
        assert "API: Petstore 1.0.0" in out
        assert "[pet] (5)" in out
        assert "[untagged] (1)" in out
        assert "GET     /pet/findByStatus - Finds pets by status" in out

    def test_validate_only(self, description_yaml_path, tmp_path, capsys):
        code = run_cli(
            "--cwd", str(tmp_path), "-s", str(description_yaml_path), "--validate-only", "-q"
        )
        out = capsys.readouterr().out
        assert code == EXIT_SUCCESS
        assert "Valid:      Yes" in out
        assert "UNDECLARED_PATH_PARAMETER" in out
        assert not (tmp_path / "src").exists()

    def test_validate_only_bad_source(self, tmp_path):
        code = run_cli(
            "--cwd", str(tmp_path), "-s", str(tmp_path / "missing.yaml"), "--validate-only", "-q"
        )
        assert code == EXIT_INPUT_ERROR


class TestGeneration:
    def test_generate_from_source(self, description_yaml_path, tmp_path, capsys):
        out_dir = tmp_path / "types"
        code = run_cli(
            "--cwd", str(tmp_path),
            "-s", str(description_yaml_path),
            "-o", str(out_dir),
            "--spec-name", "PETSTORE",
            "-q",
        )
        assert code == EXIT_SUCCESS
        assert (out_dir / "PETSTORE" / "get" / "store" / "inventory.ts").is_file()
        assert "SUCCESS" in capsys.readouterr().out

    def test_default_output_directory(self, description_yaml_path, tmp_path):
        code = run_cli("--cwd", str(tmp_path), "-s", str(description_yaml_path), "-q")
        assert code == EXIT_SUCCESS
        assert (tmp_path / "src" / "api" / "API" / "post" / "pet.ts").is_file()

    def test_fail_on_warnings(self, description_yaml_path, tmp_path):
        code = run_cli(
            "--cwd", str(tmp_path), "-s", str(description_yaml_path), "--fail-on-warnings", "-q"
        )
        assert code == EXIT_VALIDATION_ERROR

    def test_operation_filter_without_match(self, description_yaml_path, tmp_path):
        code = run_cli(
            "--cwd", str(tmp_path),
            "-s", str(description_yaml_path),
            "--operation", "nope",
            "--dry-run",
            "-q",
        )
        assert code == EXIT_GENERATION_ERROR

    def test_missing_source_file(self, tmp_path):
        code = run_cli("--cwd", str(tmp_path), "-s", str(tmp_path / "missing.yaml"), "-q")
        assert code == EXIT_GENERATION_ERROR

    def test_dry_run_writes_nothing(self, description_yaml_path, tmp_path):
        code = run_cli(
            "--cwd", str(tmp_path), "-s", str(description_yaml_path), "--dry-run", "-q"
        )
        assert code == EXIT_SUCCESS
        assert not (tmp_path / "src").exists()


class TestProjectConfig:
    def test_init_creates_config(self, tmp_path, capsys):
        code = run_cli(
            "--cwd", str(tmp_path),
            "--init",
            "-s", "openapi.yaml",
            "--spec-name", "PETSTORE",
            "-o", "./generated",
        )
        assert code == EXIT_SUCCESS
        assert "Created" in capsys.readouterr().out
        config = load_config(tmp_path).config
        assert config.output_path == "./generated"
        assert config.specs["PETSTORE"].url == "openapi.yaml"

    def test_init_refuses_to_overwrite(self, tmp_path):
        assert run_cli("--cwd", str(tmp_path), "--init") == EXIT_SUCCESS
        assert run_cli("--cwd", str(tmp_path), "--init") == EXIT_INPUT_ERROR

    def test_generate_from_config(self, description_yaml_path, tmp_path):
        (tmp_path / CONFIG_FILE_NAME).write_text(
            json.dumps(
                {
                    "outputPath": "./out",
                    "generate": {"emitInterfaces": False},
                    "specs": {"PETSTORE": {"url": description_yaml_path.name}},
                }
            ),
            encoding="utf-8",
        )
        assert run_cli("--cwd", str(tmp_path), "-q") == EXIT_SUCCESS
        content = (tmp_path / "out" / "PETSTORE" / "post" / "pet.ts").read_text(encoding="utf-8")
        assert "export type Pet = {" in content

    def test_broken_config(self, tmp_path):
        (tmp_path / CONFIG_FILE_NAME).write_text("{ nope", encoding="utf-8")
        assert run_cli("--cwd", str(tmp_path), "-s", "x.yaml") == EXIT_INPUT_ERROR
