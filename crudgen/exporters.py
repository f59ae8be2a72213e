# File: crudgen/exporters.py
"""
CrudGen - Artifact Exporter
============================
Writes rendered artifacts below the project root and keeps a manifest of
what was written.

- Every write replaces the target file unconditionally; regenerating an
  entity is always safe to repeat.
- Each file is written atomically (temp file + rename); a failure on one
  artifact leaves previously written artifacts in place.
- The manifest carries a SHA-256 per file so two runs can be compared for
  byte-identical output.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from crudgen.utils import count_lines, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudgen.exporters")


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    kind: str
    relative_path: str
    size_bytes: int
    line_count: int
    sha256: str
    written: bool = True


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """All artifacts exported for one entity."""

    entity_name: str = ""
    project_root: str = ""
    generator_version: str = ""
    files: List[FileRecord] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    def to_dict(self) -> Dict[str, Any]:
        """Convert manifest to a JSON-serialisable dictionary."""
        return {
            "entity_name": self.entity_name,
            "project_root": self.project_root,
            "generator_version": self.generator_version,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "kind": f.kind,
                    "relative_path": f.relative_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                    "written": f.written,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        """Serialise manifest to pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


# ---------------------------------------------------------------------------
# ArtifactExporter
# ---------------------------------------------------------------------------


class ArtifactExporter:
    """
    Writes artifacts under a project root and records them in a manifest.

    Usage::

        exporter = ArtifactExporter(Path("."), entity_name="Widget")
        exporter.export("service", Path("src/services/widgetService.ts"), content)
        print(exporter.manifest.to_json())

    NOT thread-safe; use one exporter per run.
    """

    def __init__(
        self,
        project_root: Path,
        *,
        entity_name: str = "",
        generator_version: str = "",
        atomic_writes: bool = True,
        dry_run: bool = False,
    ) -> None:
        self._project_root: Path = project_root
        self._atomic_writes: bool = atomic_writes
        self._dry_run: bool = dry_run
        self.manifest: ExportManifest = ExportManifest(
            entity_name=entity_name,
            project_root=str(project_root),
            generator_version=generator_version,
        )

    def export(self, kind: str, relative_path: Path, content: str) -> FileRecord:
        """
        Write *content* to *relative_path* (under the project root).

        Raises:
            OSError: If the file cannot be written.
        """
        full_path: Path = self._project_root / relative_path

        if not self._dry_run:
            write_file(full_path, content, atomic=self._atomic_writes)

        record: FileRecord = FileRecord(
            kind=kind,
            relative_path=relative_path.as_posix(),
            size_bytes=len(content.encode("utf-8")),
            line_count=count_lines(content),
            sha256=sha256_hex(content),
            written=not self._dry_run,
        )
        self.manifest.files.append(record)

        logger.debug(
            "%s %s (%d bytes, %d lines).",
            "Rendered" if self._dry_run else "Wrote",
            record.relative_path,
            record.size_bytes,
            record.line_count,
        )
        return record

    def write_manifest(self, path: Path) -> None:
        """Write the manifest as JSON to *path* (relative paths resolve against the root)."""
        if not path.is_absolute():
            path = self._project_root / path
        write_file(path, self.manifest.to_json() + "\n", atomic=self._atomic_writes)
        logger.info("Manifest written to %s.", path)


__all__: List[str] = [
    "FileRecord",
    "ExportManifest",
    "ArtifactExporter",
]
