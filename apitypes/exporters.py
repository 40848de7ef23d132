# File: apitypes/exporters.py
"""
apitypes - Module Exporter
===========================

Writes the rendered ``.ts`` modules of one spec under the output root:

    <output>/<SPEC>/<method>/<path>.ts
    <output>/<SPEC>/apitypes-manifest.json

Every module is written through a temporary file in its target directory
followed by ``os.replace``, so a reader never observes a half-written
module.  A failed write is recorded in the :class:`ExportResult` and the
remaining modules are still written.

The manifest lists each module with its size and SHA-256 so that two
generation runs can be compared without diffing the trees.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from apitypes.utils import Timer, count_lines, sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apitypes.exporters")

MANIFEST_FILE_NAME: str = "apitypes-manifest.json"

# Never removed by a clean
_PRESERVED_NAMES: frozenset = frozenset({".git", ".gitignore", ".gitkeep"})


# ---------------------------------------------------------------------------
# Export records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WrittenModule:
    """One module on disk."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.relative_path,
            "bytes": self.size_bytes,
            "lines": self.line_count,
            "sha256": self.sha256,
        }


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """
    What one export wrote, and from which description.

    Serialised with camelCase keys, like ``apitypes.config.json``.  The
    manifest file itself is not listed.
    """

    spec_name: str = ""
    source: str = ""
    api_version: str = ""
    generator_version: str = ""
    generated_at: str = ""
    output_directory: str = ""
    modules: List[WrittenModule] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.modules)

    @property
    def total_bytes(self) -> int:
        return sum(m.size_bytes for m in self.modules)

    @property
    def total_lines(self) -> int:
        return sum(m.line_count for m in self.modules)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "specName": self.spec_name,
            "source": self.source,
            "apiVersion": self.api_version,
            "generatorVersion": self.generator_version,
            "generatedAt": self.generated_at,
            "outputDirectory": self.output_directory,
            "totalFiles": self.total_files,
            "totalBytes": self.total_bytes,
            "totalLines": self.total_lines,
            "files": [m.to_dict() for m in self.modules],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Outcome of :meth:`ProjectExporter.export`."""

    success: bool
    manifest: ExportManifest
    manifest_path: Optional[str]
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    elapsed_seconds: float

    @property
    def written_paths(self) -> List[str]:
        return [m.relative_path for m in self.manifest.modules]


# ---------------------------------------------------------------------------
# ProjectExporter
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes rendered modules under one output root.

    Usage::

        exporter = ProjectExporter(Path("./src/api"), clean_scope="PETSTORE")
        result = exporter.export(files, spec_name="PETSTORE")
        print(result.manifest.to_json())

    Not thread-safe: one exporter per output root at a time.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        clean_before_export: bool = False,
        clean_scope: Optional[str] = None,
        atomic_writes: bool = True,
        generate_manifest: bool = True,
    ) -> None:
        """
        Args:
            output_dir: Output root; spec directories live below it.
            clean_before_export: Empty the target directory first.
            clean_scope: Sub-directory to empty instead of the whole root.
            atomic_writes: Write through a temporary file + ``os.replace``.
            generate_manifest: Write ``apitypes-manifest.json`` as well.
        """
        self._root: Path = Path(output_dir).resolve()
        self._clean_before_export: bool = clean_before_export
        self._clean_scope: Optional[str] = clean_scope
        self._atomic_writes: bool = atomic_writes
        self._generate_manifest: bool = generate_manifest

        self._errors: List[str] = []
        self._warnings: List[str] = []
        self._modules: List[WrittenModule] = []

        logger.debug(
            "ProjectExporter ready: root=%s, clean=%s (scope=%s), atomic=%s.",
            self._root,
            clean_before_export,
            clean_scope,
            atomic_writes,
        )

    @property
    def output_dir(self) -> Path:
        return self._root

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(
        self,
        generated_files: Mapping[str, str],
        *,
        spec_name: str = "",
        source: str = "",
        api_version: str = "",
    ) -> ExportResult:
        """
        Write every ``relative path → content`` entry of *generated_files*.

        Args:
            generated_files: Rendered modules keyed by path relative to
                the output root.
            spec_name: Recorded in the manifest; the manifest is written
                inside this sub-directory when given.
            source: Description URL or path, recorded in the manifest.
            api_version: ``info.version`` of the description.
        """
        self._errors = []
        self._warnings = []
        self._modules = []
        manifest_path: Optional[str] = None

        with Timer("export") as timer:
            try:
                self._clean()
                self._root.mkdir(parents=True, exist_ok=True)
                for rel_path, content in generated_files.items():
                    self._write_module(rel_path, content)
                if self._generate_manifest:
                    manifest_path = self._write_manifest(spec_name, source, api_version)
            except OSError as exc:
                message: str = f"Fatal export error: {type(exc).__name__}: {exc}"
                self._errors.append(message)
                logger.error(message, exc_info=True)

        manifest: ExportManifest = self._manifest(spec_name, source, api_version)
        result: ExportResult = ExportResult(
            success=not self._errors,
            manifest=manifest,
            manifest_path=manifest_path,
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            elapsed_seconds=timer.elapsed,
        )

        if result.success:
            logger.info(
                "Exported %d module(s), %d bytes to %s in %.3fs.",
                manifest.total_files,
                manifest.total_bytes,
                self._root,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export to %s finished with %d error(s).", self._root, len(self._errors)
            )
        return result

    # -----------------------------------------------------------------
    # Internal: cleaning & paths
    # -----------------------------------------------------------------

    def _clean(self) -> None:
        if not self._clean_before_export:
            return

        target: Path = self._root / self._clean_scope if self._clean_scope else self._root
        if not target.is_dir():
            return

        logger.info("Cleaning %s", target)
        for entry in target.iterdir():
            if entry.name in _PRESERVED_NAMES:
                continue
            try:
                if entry.is_dir():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as exc:
                warning: str = f"Could not remove {entry}: {exc}"
                self._warnings.append(warning)
                logger.warning(warning)

    def _resolve_target(self, rel_path: str) -> Path:
        """Absolute target path; refuses paths that escape the output root."""
        full_path: Path = (self._root / rel_path).resolve()
        if full_path != self._root and self._root not in full_path.parents:
            raise ValueError(f"Refusing to write outside the output directory: {rel_path}")
        return full_path

    # -----------------------------------------------------------------
    # Internal: writing
    # -----------------------------------------------------------------

    def _write_module(self, rel_path: str, content: str) -> None:
        try:
            written: WrittenModule = self._write(rel_path, content)
        except (OSError, ValueError) as exc:
            message: str = f"Failed to write {rel_path}: {type(exc).__name__}: {exc}"
            self._errors.append(message)
            logger.error(message)
            return
        self._modules.append(written)

    def _write(self, rel_path: str, content: str) -> WrittenModule:
        full_path: Path = self._resolve_target(rel_path)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        data: bytes = content.encode("utf-8")
        if self._atomic_writes:
            self._atomic_write(full_path, data)
        else:
            full_path.write_bytes(data)

        logger.debug("Wrote %s (%d bytes).", rel_path, len(data))
        return WrittenModule(
            relative_path=rel_path,
            absolute_path=str(full_path),
            size_bytes=len(data),
            line_count=count_lines(content),
            sha256=sha256_hex(content),
        )

    @staticmethod
    def _atomic_write(target_path: Path, data: bytes) -> None:
        """
        Temporary file in the target directory, then ``os.replace``; the
        temporary file is removed if anything fails.
        """
        fd, tmp_path = tempfile.mkstemp(
            dir=str(target_path.parent),
            prefix=f".{target_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, str(target_path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    # -----------------------------------------------------------------
    # Internal: manifest
    # -----------------------------------------------------------------

    def _manifest(self, spec_name: str, source: str, api_version: str) -> ExportManifest:
        from apitypes import __version__

        return ExportManifest(
            spec_name=spec_name,
            source=source,
            api_version=api_version,
            generator_version=__version__,
            generated_at=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            output_directory=str(self._root),
            modules=list(self._modules),
        )

    def _write_manifest(
        self, spec_name: str, source: str, api_version: str
    ) -> Optional[str]:
        """Write the manifest; a failure is only a warning."""
        rel_path: str = f"{spec_name}/{MANIFEST_FILE_NAME}" if spec_name else MANIFEST_FILE_NAME
        text: str = self._manifest(spec_name, source, api_version).to_json() + "\n"
        try:
            written: WrittenModule = self._write(rel_path, text)
        except (OSError, ValueError) as exc:
            self._warnings.append(f"Could not write manifest: {exc}")
            logger.warning("Failed to write manifest: %s", exc)
            return None
        return written.absolute_path


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MANIFEST_FILE_NAME",
    "ProjectExporter",
    "ExportManifest",
    "ExportResult",
    "WrittenModule",
]

logger.debug("apitypes.exporters loaded — %d public symbols.", len(__all__))
