# File: apitypes/generator.py
"""
apitypes - Master Generation Pipeline (Orchestrator)
=====================================================

Connects every phase together:

    Description Input → Validation → Dependency Collection
        → Declaration Emission → File Export

Workflow::

    1. Load the description from a URL or a file (loader.py).
    2. Run the validation pipeline (validators.py).
    3. Select operations (optional tag / operation-id filters).
    4. Per operation: collect the named schemas it needs
       (collector.py), emit their declarations plus the operation's
       ``Params`` / ``Request`` / ``Response`` types (emitter.py).
    5. Hand the rendered files to ``ProjectExporter`` (exporters.py).
    6. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - Validation issues are collected and surfaced, not swallowed.
    - Generation errors per operation are isolated: one bad operation
      doesn't stop the others.
    - Export errors are recorded in the report.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import httpx

from apitypes.collector import DependencyCollector
from apitypes.emitter import Declaration, NamedTypeEmitter
from apitypes.exporters import ExportManifest, ExportResult, ProjectExporter
from apitypes.expressions import NULL, KeywordType, ReferenceType, TypeExpr, UnionType
from apitypes.loader import ApiDescription, DescriptionLoadError, load_description
from apitypes.models import (
    GenerateOptions,
    ObjectNode,
    OperationDescriptor,
    ProjectConfig,
    PropertySpec,
    ReferenceNode,
    SchemaNode,
    UnknownNode,
)
from apitypes.utils import Timer, count_lines, generate_spec_file_path, to_type_name
from apitypes.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.generator")

DEFAULT_SPEC_NAME: str = "API"

VOID: KeywordType = KeywordType("void")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Comprehensive report produced by ``TypeGenerator.generate()``.
    """

    success: bool = False
    spec_name: str = ""
    source: str = ""
    output_directory: str = ""

    # Metrics
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_operations_processed: int = 0
    total_declarations: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)
    skipped_operations: List[str] = field(default_factory=list)

    # Rendered files (relative path → content), kept for dry runs
    files: Dict[str, str] = field(default_factory=dict)

    manifest: Optional[ExportManifest] = None

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append("  apitypes — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Spec:             {self.spec_name}")
        lines.append(f"  Source:           {self.source}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Operations:       {self.total_operations_processed}")
        lines.append(f"  Declarations:     {self.total_declarations}")
        lines.append(f"  Files generated:  {self.total_files}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        sections: Tuple[Tuple[str, List[str], str], ...] = (
            ("Validation Errors", self.validation_errors, "✗"),
            ("Validation Warnings", self.validation_warnings, "⚠"),
            ("Generation Errors", self.generation_errors, "✗"),
            ("Export Errors", self.export_errors, "✗"),
            ("Skipped Operations", self.skipped_operations, "⊘"),
        )
        for title, items, icon in sections:
            if not items:
                continue
            lines.append(f"{'─'*60}")
            lines.append(f"  {title} ({len(items)}):")
            for item in items:
                lines.append(f"    {icon} {item}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Operation helpers
# ---------------------------------------------------------------------------


def is_success_status(status: str) -> bool:
    """``200``, ``201``, ``2XX`` ... but not ``default``."""
    return len(status) == 3 and status[0] == "2"


def select_operations(
    operations: Sequence[OperationDescriptor],
    *,
    tags: Optional[Iterable[str]] = None,
    operation_ids: Optional[Iterable[str]] = None,
) -> List[OperationDescriptor]:
    """Keep operations matching any given tag and any given operation id."""
    tag_set = set(tags) if tags else None
    id_set = set(operation_ids) if operation_ids else None
    selected: List[OperationDescriptor] = []
    for op in operations:
        if tag_set is not None and not tag_set.intersection(op.tags):
            continue
        if id_set is not None and op.operation_id not in id_set:
            continue
        selected.append(op)
    return selected


def parameters_node(operation: OperationDescriptor) -> Optional[ObjectNode]:
    """All parameters folded into one object schema, or ``None`` without parameters."""
    if not operation.parameters:
        return None
    return ObjectNode(
        properties=tuple(
            PropertySpec(
                name=p.name,
                node=p.node if p.node is not None else UnknownNode(),
                required=p.required,
            )
            for p in operation.parameters
        )
    )


# ---------------------------------------------------------------------------
# TypeGenerator: master orchestrator
# ---------------------------------------------------------------------------


class TypeGenerator:
    """
    Master pipeline orchestrator.

    Usage::

        generator = TypeGenerator()
        report = generator.generate_from_source(
            "https://petstore3.swagger.io/api/v3/openapi.json",
            Path("./src/api"),
            spec_name="PETSTORE",
        )
        print(report.summary())

    The generator is reusable: create once, call generate() many times.
    """

    def __init__(
        self,
        *,
        strict_validation: bool = True,
        fail_on_warnings: bool = False,
        clean_output: bool = False,
        dry_run: bool = False,
    ) -> None:
        """
        Args:
            strict_validation: Abort on any validation error.
            fail_on_warnings: Treat validation warnings as errors.
            clean_output: Wipe the spec's output directory before writing.
            dry_run: Render everything but write nothing.
        """
        self._strict_validation: bool = strict_validation
        self._fail_on_warnings: bool = fail_on_warnings
        self._clean_output: bool = clean_output
        self._dry_run: bool = dry_run

        logger.debug(
            "TypeGenerator initialised: strict=%s, fail_on_warnings=%s, "
            "clean=%s, dry_run=%s.",
            strict_validation,
            fail_on_warnings,
            clean_output,
            dry_run,
        )

    # -----------------------------------------------------------------
    # Public: rendering
    # -----------------------------------------------------------------

    def render_operation(
        self,
        description: ApiDescription,
        operation: OperationDescriptor,
        emitter: NamedTypeEmitter,
        collector: DependencyCollector,
        options: GenerateOptions,
    ) -> Tuple[str, int]:
        """
        Render the TypeScript module for one operation.

        Returns:
            ``(content, declaration_count)``.
        """
        declarations: List[Declaration] = emitter.emit_all(collector.collect(operation))
        base: str = to_type_name(operation.operation_id)

        if options.include_params:
            params: Optional[ObjectNode] = parameters_node(operation)
            if params is not None:
                declarations.append(emitter.emit(f"{base}Params", params))

        if options.include_request and operation.request_body is not None:
            declarations.append(
                self._operation_type(emitter, f"{base}Request", operation.request_body)
            )

        if options.include_response:
            response: Optional[Declaration] = self._response_declaration(
                emitter, f"{base}Response", operation
            )
            if response is not None:
                declarations.append(response)

        header: List[str] = [
            "/**",
            f" * {operation.method.upper()} {operation.path}",
        ]
        if operation.summary:
            header.append(f" * {operation.summary}")
        header.extend(
            [
                " *",
                f" * Generated by apitypes from {description.title or 'API'} "
                f"{description.version}. Do not edit.",
                " */",
            ]
        )

        blocks: List[str] = ["\n".join(header)]
        blocks.extend(d.text for d in declarations)
        return "\n\n".join(blocks) + "\n", len(declarations)

    @staticmethod
    def _operation_type(
        emitter: NamedTypeEmitter, name: str, node: SchemaNode
    ) -> Declaration:
        # A top-level reference aliases the declaration already in the file
        if isinstance(node, ReferenceNode) and node.name in emitter.synthesizer.registry:
            expr: TypeExpr = ReferenceType(node.name)
            if node.nullable:
                expr = UnionType((expr, NULL))
            return emitter.declare(name, expr)
        return emitter.emit(name, node)

    def _response_declaration(
        self,
        emitter: NamedTypeEmitter,
        name: str,
        operation: OperationDescriptor,
    ) -> Optional[Declaration]:
        """Union of the 2xx JSON bodies; ``void`` when no 2xx has a body."""
        statuses: List[str] = [s for s in operation.responses if is_success_status(s.upper())]
        if not statuses:
            return None

        members: List[TypeExpr] = []
        for status in statuses:
            node: Optional[SchemaNode] = operation.responses[status]
            if node is None:
                continue
            expr: TypeExpr = self._operation_type(emitter, name, node).expression
            if expr not in members:
                members.append(expr)

        if not members:
            return emitter.declare(name, VOID)
        if len(members) == 1:
            return emitter.declare(name, members[0])
        return emitter.declare(name, UnionType(tuple(members)))

    # -----------------------------------------------------------------
    # Public: generate from a URL or path
    # -----------------------------------------------------------------

    def generate_from_source(
        self,
        source: Union[str, Path],
        output_dir: Path,
        *,
        spec_name: str = DEFAULT_SPEC_NAME,
        config: Optional[ProjectConfig] = None,
        tags: Optional[Sequence[str]] = None,
        operation_ids: Optional[Sequence[str]] = None,
        client: Optional[httpx.Client] = None,
    ) -> GenerationReport:
        """Full pipeline: load → validate → generate → export."""
        report: GenerationReport = GenerationReport(
            spec_name=spec_name,
            source=str(source),
            output_directory=str(Path(output_dir).resolve()),
        )

        description: Optional[ApiDescription] = None
        load_error: str = ""
        with Timer("load_description") as t_load:
            try:
                description = load_description(source, client=client)
            except DescriptionLoadError as exc:
                load_error = str(exc)

        if description is None:
            report.generation_errors.append(load_error)
            report.step_metrics.append(
                GenerationStepMetric(
                    step_name="Load Description",
                    success=False,
                    elapsed_seconds=t_load.elapsed,
                    detail=load_error,
                )
            )
            return self._finalise_report(report, t_load.elapsed)

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Load Description",
                success=True,
                elapsed_seconds=t_load.elapsed,
                detail=f"{description.operation_count} operations, "
                f"{len(description.registry)} schemas",
            )
        )

        return self._run_pipeline(
            description,
            Path(output_dir),
            report,
            config=config,
            tags=tags,
            operation_ids=operation_ids,
            preceding=t_load.elapsed,
        )

    # -----------------------------------------------------------------
    # Public: generate from a loaded description
    # -----------------------------------------------------------------

    def generate(
        self,
        description: ApiDescription,
        output_dir: Path,
        *,
        spec_name: str = DEFAULT_SPEC_NAME,
        config: Optional[ProjectConfig] = None,
        tags: Optional[Sequence[str]] = None,
        operation_ids: Optional[Sequence[str]] = None,
    ) -> GenerationReport:
        """Full pipeline from an already loaded description."""
        report: GenerationReport = GenerationReport(
            spec_name=spec_name,
            source=description.source,
            output_directory=str(Path(output_dir).resolve()),
        )
        return self._run_pipeline(
            description,
            Path(output_dir),
            report,
            config=config,
            tags=tags,
            operation_ids=operation_ids,
        )

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        description: ApiDescription,
        output_dir: Path,
        report: GenerationReport,
        *,
        config: Optional[ProjectConfig],
        tags: Optional[Sequence[str]],
        operation_ids: Optional[Sequence[str]],
        preceding: float = 0.0,
    ) -> GenerationReport:
        pipeline_start: float = time.perf_counter() - preceding

        validation_ok: bool = self._step_validate(description, config, report)
        if not validation_ok and self._strict_validation:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        options: GenerateOptions = config.generate if config is not None else GenerateOptions()
        generated_files: Dict[str, str] = self._step_generate(
            description, options, report, tags=tags, operation_ids=operation_ids
        )
        report.files = generated_files

        if not generated_files:
            report.generation_errors.append("No files were generated — aborting export.")
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        if self._dry_run:
            report.total_files = len(generated_files)
            report.total_lines = sum(count_lines(c) for c in generated_files.values())
            report.total_bytes = sum(len(c.encode("utf-8")) for c in generated_files.values())
            logger.info("Dry run: %d file(s) rendered, nothing written.", len(generated_files))
        else:
            self._step_export(generated_files, description, output_dir, report)

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    # -----------------------------------------------------------------
    # Pipeline step: Validation
    # -----------------------------------------------------------------

    def _step_validate(
        self,
        description: ApiDescription,
        config: Optional[ProjectConfig],
        report: GenerationReport,
    ) -> bool:
        """
        Returns True if validation passed (or only warnings and not
        ``fail_on_warnings``).
        """
        with Timer("validation") as t:
            result: ValidationResult = validate_full(description, config)

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.has_errors:
            detail: str = f"{result.error_count} error(s)"
        elif result.has_warnings:
            detail = f"{result.warning_count} warning(s)"
        else:
            detail = "all checks passed"

        passed: bool = result.is_valid and not (
            self._fail_on_warnings and result.has_warnings
        )
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Validate Description",
                success=passed,
                elapsed_seconds=t.elapsed,
                detail=detail,
            )
        )

        if result.has_errors:
            logger.error(
                "Validation failed with %d error(s) in %.3fs.",
                result.error_count,
                t.elapsed,
            )
            for err in result.errors:
                logger.error("  ✗ %s", err)
            return False

        if result.has_warnings:
            logger.warning(
                "Validation passed with %d warning(s) in %.3fs.",
                result.warning_count,
                t.elapsed,
            )
            for warn in result.warnings:
                logger.warning("  ⚠ %s", warn)
            if self._fail_on_warnings:
                # warnings become blocking errors
                report.validation_errors.extend(report.validation_warnings)
                report.validation_warnings.clear()
                return False

        return True

    # -----------------------------------------------------------------
    # Pipeline step: Type generation
    # -----------------------------------------------------------------

    def _step_generate(
        self,
        description: ApiDescription,
        options: GenerateOptions,
        report: GenerationReport,
        *,
        tags: Optional[Sequence[str]],
        operation_ids: Optional[Sequence[str]],
    ) -> Dict[str, str]:
        """Render one file per selected operation, isolating failures."""
        generated_files: Dict[str, str] = {}

        with Timer("type_generation") as t:
            selected: List[OperationDescriptor] = select_operations(
                description.operations, tags=tags, operation_ids=operation_ids
            )
            if (tags or operation_ids) and not selected:
                report.generation_errors.append(
                    "No operations matched the requested tag/operation filters."
                )

            emitter: NamedTypeEmitter = NamedTypeEmitter(description.registry, options)
            collector: DependencyCollector = DependencyCollector(description.registry)

            for op in selected:
                rel_path: str = generate_spec_file_path(report.spec_name, op.method, op.path)
                if rel_path in generated_files:
                    report.skipped_operations.append(
                        f"{op.operation_id}: output path {rel_path} already used"
                    )
                    continue
                try:
                    content, count = self.render_operation(
                        description, op, emitter, collector, options
                    )
                except (TypeError, ValueError, RecursionError) as exc:
                    error_msg: str = (
                        f"{op.operation_id}: {type(exc).__name__}: {exc}"
                    )
                    report.generation_errors.append(error_msg)
                    logger.error("Generation failed for %s", error_msg, exc_info=True)
                    continue

                generated_files[rel_path] = content
                report.total_declarations += count
                report.total_operations_processed += 1

        total_lines: int = sum(count_lines(c) for c in generated_files.values())
        detail_str: str = (
            f"{len(generated_files)} files, ~{total_lines:,} lines, "
            f"{report.total_declarations} declarations"
        )
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Type Generation",
                success=len(report.generation_errors) == 0,
                elapsed_seconds=t.elapsed,
                detail=detail_str,
            )
        )
        logger.info("Type generation complete: %s in %.3fs.", detail_str, t.elapsed)

        return generated_files

    # -----------------------------------------------------------------
    # Pipeline step: Export
    # -----------------------------------------------------------------

    def _step_export(
        self,
        generated_files: Dict[str, str],
        description: ApiDescription,
        output_dir: Path,
        report: GenerationReport,
    ) -> None:
        """Write all generated files to the filesystem."""
        with Timer("export") as t:
            exporter: ProjectExporter = ProjectExporter(
                output_dir,
                clean_before_export=self._clean_output,
                clean_scope=report.spec_name,
                atomic_writes=True,
                generate_manifest=True,
            )
            export_result: ExportResult = exporter.export(
                generated_files,
                spec_name=report.spec_name,
                source=description.source,
                api_version=description.version,
            )

        report.total_files = export_result.manifest.total_files
        report.total_bytes = export_result.manifest.total_bytes
        report.total_lines = export_result.manifest.total_lines
        report.export_errors.extend(export_result.errors)
        report.manifest = export_result.manifest

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Export to Filesystem",
                success=export_result.success,
                elapsed_seconds=t.elapsed,
                detail=(
                    f"{export_result.manifest.total_files} files, "
                    f"{export_result.manifest.total_bytes:,} bytes"
                ),
            )
        )

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(
        self,
        report: GenerationReport,
        total_elapsed: float,
    ) -> GenerationReport:
        """Set final status and timing on the report."""
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.validation_errors or report.generation_errors or report.export_errors
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_SPEC_NAME",
    "TypeGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "is_success_status",
    "select_operations",
    "parameters_node",
]

logger.debug("apitypes.generator loaded — %d public symbols.", len(__all__))
