# File: crudgen/generator.py
"""
CrudGen - Generation Pipeline (Orchestrator)
=============================================

Sequences every component for one entity name and one permission name::

    1. Read the schema file (whole file, in memory).
    2. Extract the entity's ``ModelDefinition``.
    3. Synthesise validation rules and test data.
    4. Render + write every artifact kind (``TemplateEngine`` / exporter).
    5. Patch every shared file (``Patcher``).
    6. Return a ``GenerationReport``.

Error handling strategy:
    - Steps 1-2 are fatal: ``SchemaReadError`` / ``EntityNotFoundError``
      propagate before anything is written.
    - Steps 4-5 are best-effort: a failing artifact or patch is recorded in
      the report and the pipeline moves on.  Nothing is rolled back.
    - No step is retried.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from crudgen.errors import ConfigError, CrudGenError
from crudgen.exporters import ArtifactExporter, ExportManifest, FileRecord
from crudgen.models import (
    GeneratorConfig,
    ModelDefinition,
    PatchResult,
    PatchTarget,
    TestDataSet,
    ValidationRuleSet,
)
from crudgen.patcher import Patcher, default_patch_targets
from crudgen.schema import extract_model, read_schema
from crudgen.templates import ARTIFACTS, TemplateEngine, build_context
from crudgen.testdata import synthesize_test_data
from crudgen.utils import Timer
from crudgen.validators import synthesize_rules

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudgen.generator")

DEFAULT_CONFIG_FILE: str = "crudgen.yaml"


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """Outcome of one generation run."""

    entity_name: str = ""
    permission: str = ""
    project_root: str = ""
    dry_run: bool = False
    success: bool = False
    total_elapsed_seconds: float = 0.0

    files: List[FileRecord] = field(default_factory=list)
    patches: List[PatchResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    manifest: Optional[ExportManifest] = None

    @property
    def written_paths(self) -> List[str]:
        return [f.relative_path for f in self.files]

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        verb: str = "Rendered (dry run)" if self.dry_run else "Generated"

        lines.append(f"{'='*60}")
        lines.append("  CrudGen - Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:      {status}")
        lines.append(f"  Entity:      {self.entity_name}")
        lines.append(f"  Permission:  {self.permission}")
        lines.append(f"  Project:     {self.project_root}")
        lines.append(f"  Time:        {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        lines.append(f"  {verb} Files ({len(self.files)}):")
        for record in self.files:
            lines.append(f"    ✓ {record.kind:<18s} {record.relative_path}")

        if self.patches:
            lines.append(f"{'─'*60}")
            lines.append(f"  Shared Files ({len(self.patches)}):")
            for patch in self.patches:
                if patch.applied:
                    state: str = f"patched ({patch.insertions_applied} insertion(s))"
                elif patch.warnings:
                    state = "not patched"
                else:
                    state = "already registered"
                lines.append(f"    • {patch.file_path}: {state}")

        if self.warnings:
            lines.append(f"{'─'*60}")
            lines.append(f"  Warnings ({len(self.warnings)}):")
            for warn in self.warnings:
                lines.append(f"    ⚠ {warn}")

        if self.errors:
            lines.append(f"{'─'*60}")
            lines.append(f"  Errors ({len(self.errors)}):")
            for err in self.errors:
                lines.append(f"    ✗ {err}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config loader helpers
# ---------------------------------------------------------------------------


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration file into a dictionary.

    An empty file yields an empty dictionary.

    Raises:
        ConfigError: If the file is missing, unreadable, not valid YAML,
            or its top level is not a mapping.
    """
    try:
        text: str = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected a YAML mapping at top level of {path}, got {type(data).__name__}."
        )
    return data


def resolve_config(
    config_path: Optional[Path] = None,
    *,
    project_root: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> GeneratorConfig:
    """
    Build the effective ``GeneratorConfig``.

    Precedence (lowest first): model defaults, ``crudgen.yaml`` in the
    project root (or *config_path* when given), *overrides*.

    Raises:
        ConfigError: If the file or the merged values are invalid.
    """
    raw: Dict[str, Any] = {}
    root: Path = project_root or Path(".")

    if config_path is not None:
        raw = load_config_file(config_path)
        logger.info("Loaded config file %s.", config_path)
    elif (root / DEFAULT_CONFIG_FILE).is_file():
        raw = load_config_file(root / DEFAULT_CONFIG_FILE)
        logger.info("Loaded config file %s.", root / DEFAULT_CONFIG_FILE)

    if project_root is not None:
        raw["project_root"] = str(project_root)
    if overrides:
        raw.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return GeneratorConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Config validation failed: {exc}") from exc


# ---------------------------------------------------------------------------
# CrudGenerator - pipeline orchestrator
# ---------------------------------------------------------------------------


class CrudGenerator:
    """
    Generates the full artifact set for one entity and registers it.

    Usage::

        generator = CrudGenerator(resolve_config(project_root=Path(".")))
        report = generator.generate("Widget", "Widget")
        print(report.summary())

    The generator holds no per-run state and can be reused.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        *,
        dry_run: bool = False,
        templates_dir: Optional[Path] = None,
    ) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._dry_run: bool = dry_run
        self._templates_dir: Optional[Path] = templates_dir
        self._root: Path = Path(self._config.project_root)

        logger.debug(
            "CrudGenerator initialised: root=%s, dry_run=%s.",
            self._root,
            dry_run,
        )

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def patch_targets(self) -> List[PatchTarget]:
        if self._config.patch_targets is None:
            return default_patch_targets()
        return list(self._config.patch_targets)

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def load_model(self, entity_name: str) -> ModelDefinition:
        """
        Read the schema and extract *entity_name*.

        Raises:
            SchemaReadError: If the schema file cannot be read.
            EntityNotFoundError: If the entity has no block in the schema.
        """
        schema_text: str = read_schema(self._root / self._config.schema_path)
        return extract_model(
            schema_text,
            entity_name,
            optional_system_fields=self._config.optional_system_fields,
        )

    def generate(
        self,
        entity_name: str,
        permission: str,
        *,
        manifest_path: Optional[Path] = None,
    ) -> GenerationReport:
        """
        Run the whole pipeline for one entity.

        Raises:
            SchemaReadError, EntityNotFoundError: Before any file is written.
        """
        from crudgen import __version__

        started: float = time.perf_counter()
        report: GenerationReport = GenerationReport(
            entity_name=entity_name,
            permission=permission,
            project_root=str(self._root),
            dry_run=self._dry_run,
        )

        with Timer("extract model"):
            model: ModelDefinition = self.load_model(entity_name)
        report.warnings.extend(model.warnings)

        rules: ValidationRuleSet = synthesize_rules(
            model,
            max_length=self._config.string_max_length,
            system_fields=self._config.system_fields,
        )
        test_data: TestDataSet = synthesize_test_data(
            model,
            optional_cap=self._config.create_optional_cap,
            invalid_cap=self._config.invalid_field_cap,
            system_fields=self._config.system_fields,
        )
        context: Dict[str, str] = build_context(
            model, permission, rules, test_data, self._config
        )

        exporter: ArtifactExporter = ArtifactExporter(
            self._root,
            entity_name=entity_name,
            generator_version=__version__,
            dry_run=self._dry_run,
        )
        with Timer("render artifacts"):
            self._step_render(entity_name, context, exporter, report)

        with Timer("patch shared files"):
            self._step_patch(entity_name, context, report)

        report.manifest = exporter.manifest
        if manifest_path is not None and not self._dry_run:
            try:
                exporter.write_manifest(manifest_path)
            except OSError as exc:
                self._record_error(report, f"Manifest: {exc}")

        report.total_elapsed_seconds = time.perf_counter() - started
        report.success = not report.errors
        return report

    # -----------------------------------------------------------------
    # Pipeline steps
    # -----------------------------------------------------------------

    def _step_render(
        self,
        entity_name: str,
        context: Dict[str, str],
        exporter: ArtifactExporter,
        report: GenerationReport,
    ) -> None:
        engine: TemplateEngine = TemplateEngine(self._config, self._templates_dir)

        for layout in ARTIFACTS:
            try:
                content: str = engine.render(layout.kind, context)
                record: FileRecord = exporter.export(
                    layout.kind.value,
                    engine.output_path(layout.kind, entity_name),
                    content,
                )
            except (CrudGenError, OSError) as exc:
                self._record_error(report, f"{layout.kind.value}: {exc}")
                continue
            report.files.append(record)

        logger.info(
            "%d/%d artifact(s) %s for %s.",
            len(report.files),
            len(ARTIFACTS),
            "rendered" if self._dry_run else "written",
            entity_name,
        )

    def _step_patch(
        self,
        entity_name: str,
        context: Dict[str, str],
        report: GenerationReport,
    ) -> None:
        patcher: Patcher = Patcher(
            self._root,
            api_prefix=self._config.api_prefix,
            dry_run=self._dry_run,
        )

        for target in self.patch_targets:
            try:
                result: PatchResult = patcher.patch(target, entity_name, context)
            except OSError as exc:
                self._record_error(report, f"{target.file_path}: {exc}")
                continue
            report.patches.append(result)
            report.warnings.extend(f"{result.file_path}: {w}" for w in result.warnings)

    @staticmethod
    def _record_error(report: GenerationReport, message: str) -> None:
        report.errors.append(message)
        logger.error(message)


__all__: List[str] = [
    "DEFAULT_CONFIG_FILE",
    "GenerationReport",
    "load_config_file",
    "resolve_config",
    "CrudGenerator",
]
