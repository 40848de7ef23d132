# File: apitypes/cli.py
"""
apitypes - Command-Line Interface
==================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Generate from a URL into ./src/api/PETSTORE/...
    python -m apitypes -s https://petstore3.swagger.io/api/v3/openapi.json \\
        --spec-name PETSTORE -o ./src/api

    # Generate every spec registered in apitypes.config.json
    python -m apitypes

    # Only the "pet" tag, verbose, clean the spec directory first
    python -m apitypes -s openapi.yaml --tag pet -v --clean

    # List operations grouped by tag
    python -m apitypes -s openapi.yaml --list

    # Validate only (no file output)
    python -m apitypes -s openapi.yaml --validate-only

    # Create a starter apitypes.config.json
    python -m apitypes --init -s openapi.yaml --spec-name PETSTORE

Exit codes:
    0 — success
    1 — validation error
    2 — generation error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence, Tuple

from apitypes.config import (
    CONFIG_FILE_NAME,
    ConfigErrorType,
    LoadConfigResult,
    get_config_path,
    load_config,
    save_config,
)
from apitypes.models import ProjectConfig, SpecConfig

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root apitypes logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("apitypes")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from apitypes import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="apitypes",
        description=(
            "apitypes — TypeScript types from OpenAPI 3.x descriptions.\n\n"
            "Writes one module per operation containing the declarations of "
            "every schema it uses plus its Params / Request / Response types."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s openapi.yaml --spec-name PETSTORE -o ./src/api\n"
            "  %(prog)s -s https://example.com/openapi.json --list\n"
            "  %(prog)s -s openapi.yaml --validate-only\n"
            "  %(prog)s                       (uses apitypes.config.json)\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"apitypes v{__version__}",
    )

    # --- Input / output ---
    parser.add_argument(
        "-s", "--source",
        type=str,
        default=None,
        metavar="URL_OR_PATH",
        help=(
            "OpenAPI description (URL, JSON or YAML file). "
            f"Defaults to the specs registered in {CONFIG_FILE_NAME}."
        ),
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output root. Defaults to the configured outputPath.",
    )
    parser.add_argument(
        "--spec-name",
        type=str,
        default=None,
        metavar="NAME",
        help="Output sub-directory for --source (UPPER_SNAKE_CASE, default: API).",
    )
    parser.add_argument(
        "--cwd",
        type=str,
        default=".",
        metavar="DIR",
        help=f"Project directory holding {CONFIG_FILE_NAME}.",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    modes = mode_group.add_mutually_exclusive_group()
    modes.add_argument(
        "--list",
        action="store_true",
        default=False,
        help="List operations grouped by tag and exit.",
    )
    modes.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the description without generating code.",
    )
    modes.add_argument(
        "--init",
        action="store_true",
        default=False,
        help=f"Create {CONFIG_FILE_NAME} in the project directory and exit.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the full pipeline but don't write files to disk.",
    )

    # --- Selection ---
    select_group = parser.add_argument_group("operation selection")
    select_group.add_argument(
        "--tag",
        dest="tags",
        action="append",
        default=None,
        metavar="TAG",
        help="Only generate operations carrying TAG (repeatable).",
    )
    select_group.add_argument(
        "--operation",
        dest="operation_ids",
        action="append",
        default=None,
        metavar="ID",
        help="Only generate the operation with this operationId (repeatable).",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--clean",
        action="store_true",
        default=False,
        help="Clean the spec's output directory before generation.",
    )
    behaviour_group.add_argument(
        "--no-strict",
        action="store_true",
        default=False,
        help="Continue even if validation reports errors.",
    )
    behaviour_group.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=False,
        help="Treat validation warnings as errors.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config & source resolution
# ---------------------------------------------------------------------------


def _load_project_config(cwd: Path) -> Tuple[Optional[ProjectConfig], int]:
    """Configuration (or None when absent) plus an exit code for hard failures."""
    result: LoadConfigResult = load_config(cwd)
    if result.config is not None:
        logger.info("Using configuration %s", result.config_path)
        return result.config, EXIT_SUCCESS
    if result.error is not None and result.error.type == ConfigErrorType.NOT_FOUND:
        return None, EXIT_SUCCESS
    message: str = result.error.message if result.error is not None else "unknown error"
    logger.error("Cannot use %s: %s", result.config_path, message)
    return None, EXIT_INPUT_ERROR


def _resolve_sources(
    args: argparse.Namespace, config: Optional[ProjectConfig], cwd: Path
) -> List[Tuple[str, str]]:
    """
    ``(spec_name, source)`` pairs to process.

    Relative file paths in the configuration are relative to the project
    directory.
    """
    from apitypes.generator import DEFAULT_SPEC_NAME
    from apitypes.loader import is_url

    if args.source:
        return [(args.spec_name or DEFAULT_SPEC_NAME, args.source)]
    if config is None:
        return []
    return [
        (name, spec.url if is_url(spec.url) else str(cwd / spec.url))
        for name, spec in config.specs.items()
    ]


# ---------------------------------------------------------------------------
# Init mode
# ---------------------------------------------------------------------------


def _run_init(cwd: Path, args: argparse.Namespace) -> int:
    config_path: Path = get_config_path(cwd)
    if config_path.exists():
        logger.error("%s already exists; not overwriting.", config_path)
        return EXIT_INPUT_ERROR

    from apitypes.generator import DEFAULT_SPEC_NAME

    config: ProjectConfig = ProjectConfig()
    if args.output:
        config.output_path = args.output
    if args.source:
        config.specs = {args.spec_name or DEFAULT_SPEC_NAME: SpecConfig(url=args.source)}

    written: Path = save_config(config, cwd)
    print(f"Created {written}")
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# List mode
# ---------------------------------------------------------------------------


def _run_list(sources: List[Tuple[str, str]]) -> int:
    from apitypes.apis import (
        count_apis_by_tag,
        extract_all_apis,
        format_api_display,
        group_apis_by_tag,
    )
    from apitypes.loader import DescriptionLoadError, load_description

    for spec_name, source in sources:
        try:
            description = load_description(source)
        except DescriptionLoadError as exc:
            logger.error("Failed to load %s: %s", source, exc)
            return EXIT_INPUT_ERROR

        print(f"\n{spec_name}: {description.title} {description.version}")
        groups = group_apis_by_tag(extract_all_apis(description))
        for tag, count, tag_description in count_apis_by_tag(description):
            suffix: str = f" — {tag_description}" if tag_description else ""
            print(f"\n  [{tag}] ({count}){suffix}")
            for api in groups.get(tag, []):
                print(f"    {format_api_display(api)}")
    print()
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(
    sources: List[Tuple[str, str]], config: Optional[ProjectConfig]
) -> int:
    """
    Run validation only (no code generation).

    Returns the appropriate exit code.
    """
    from apitypes.loader import DescriptionLoadError, load_description
    from apitypes.utils import Timer
    from apitypes.validators import validate_full

    exit_code: int = EXIT_SUCCESS
    for spec_name, source in sources:
        logger.info("Running validation-only mode for: %s", source)
        try:
            description = load_description(source)
        except DescriptionLoadError as exc:
            logger.error("Failed to load description: %s", exc)
            return EXIT_INPUT_ERROR

        with Timer("validation") as t:
            result = validate_full(description, config)

        print(f"\n{'='*50}")
        print("  Description Validation Report")
        print(f"{'='*50}")
        print(f"  Spec:       {spec_name}")
        print(f"  Source:     {source}")
        print(f"  Schemas:    {len(description.registry)}")
        print(f"  Operations: {description.operation_count}")
        print(f"  Time:       {t.elapsed:.3f}s")
        print(f"  Valid:      {'Yes' if result.is_valid else 'No'}")

        if result.errors:
            print(f"\n  Errors ({len(result.errors)}):")
            for err in result.errors:
                print(f"    ✗ {err}")

        if result.warnings:
            print(f"\n  Warnings ({len(result.warnings)}):")
            for warn in result.warnings:
                print(f"    ⚠ {warn}")

        if result.is_valid and not result.warnings:
            print("\n  ✅ All validations passed!")

        print(f"{'='*50}\n")

        if not result.is_valid:
            exit_code = EXIT_VALIDATION_ERROR

    return exit_code


# ---------------------------------------------------------------------------
# Full generation mode
# ---------------------------------------------------------------------------


def _run_generation(
    sources: List[Tuple[str, str]],
    output_dir: Path,
    config: Optional[ProjectConfig],
    args: argparse.Namespace,
) -> int:
    """
    Run the full generation pipeline for every source.

    Returns the most severe exit code.
    """
    from apitypes.generator import GenerationReport, TypeGenerator

    generator: TypeGenerator = TypeGenerator(
        strict_validation=not args.no_strict,
        fail_on_warnings=args.fail_on_warnings,
        clean_output=args.clean,
        dry_run=args.dry_run,
    )

    exit_code: int = EXIT_SUCCESS
    for spec_name, source in sources:
        report: GenerationReport = generator.generate_from_source(
            source,
            output_dir,
            spec_name=spec_name,
            config=config,
            tags=args.tags,
            operation_ids=args.operation_ids,
        )
        print(report.summary())

        if not report.success:
            if report.validation_errors:
                code: int = EXIT_VALIDATION_ERROR
            elif report.generation_errors:
                code = EXIT_GENERATION_ERROR
            elif report.export_errors:
                code = EXIT_EXPORT_ERROR
            else:
                code = EXIT_GENERATION_ERROR
            exit_code = max(exit_code, code)

    return exit_code


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
    else:
        verbosity = args.verbose

    _setup_logging(verbosity)
    if args.quiet:
        logging.getLogger("apitypes").setLevel(logging.ERROR)

    cwd: Path = Path(args.cwd).resolve()
    if not cwd.is_dir():
        logger.error("Project directory not found: %s", cwd)
        sys.exit(EXIT_INPUT_ERROR)

    if args.init:
        sys.exit(_run_init(cwd, args))

    config, config_status = _load_project_config(cwd)
    if config_status != EXIT_SUCCESS:
        sys.exit(config_status)

    if args.spec_name and not args.source:
        logger.error("--spec-name requires -s/--source.")
        sys.exit(EXIT_INPUT_ERROR)

    sources: List[Tuple[str, str]] = _resolve_sources(args, config, cwd)
    if not sources:
        logger.error(
            "No description given. Use -s/--source or register specs in %s "
            "(see --init).",
            CONFIG_FILE_NAME,
        )
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    if args.list:
        sys.exit(_run_list(sources))

    if args.validate_only:
        sys.exit(_run_validate_only(sources, config))

    if args.output:
        output_dir: Path = Path(args.output).resolve()
    elif config is not None:
        output_dir = (cwd / config.output_path).resolve()
    else:
        output_dir = (cwd / ProjectConfig().output_path).resolve()

    logger.info("Output:  %s", output_dir)
    logger.info("Specs:   %s", ", ".join(name for name, _ in sources))
    logger.info("Clean:   %s", args.clean)
    logger.info("Strict:  %s", not args.no_strict)

    exit_code: int = _run_generation(sources, output_dir, config, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("apitypes.cli loaded.")
