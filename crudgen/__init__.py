"""
CrudGen - CRUD Scaffolding Generator
=====================================

Reads one entity from a Prisma schema file and produces the full set of
per-entity source artifacts for an Express + Prisma + inversify project
(model interface, controller, service, routes, request validator, API-doc
fragments, unit and integration tests), then registers the entity in the
project's shared files.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│  CrudGenerator │────▶│  TemplateEngine  │
    │   (cli.py)   │     │ (generator.py) │     │  (templates.py)  │
    └──────────────┘     └───────┬────────┘     └──────────────────┘
                                 │
          ┌──────────┬───────────┼────────────┬────────────┐
          ▼          ▼           ▼            ▼            ▼
     ┌─────────┐ ┌──────────┐ ┌──────────┐ ┌───────────┐ ┌─────────┐
     │ schema  │ │validators│ │ testdata │ │ exporters │ │ patcher │
     └─────────┘ └──────────┘ └──────────┘ └───────────┘ └─────────┘

Usage::

    # As a library
    from crudgen import CrudGenerator, resolve_config
    report = CrudGenerator(resolve_config()).generate("Widget", "Widget")

    # From the command line
    crudgen -m Widget -p Widget --verbose
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from crudgen.errors import (
    ConfigError,
    CrudGenError,
    EntityNotFoundError,
    SchemaReadError,
    TemplateReadError,
)
from crudgen.models import (
    ArtifactKind,
    FieldDescriptor,
    GeneratorConfig,
    Insertion,
    ModelDefinition,
    PatchResult,
    PatchTarget,
    PathsConfig,
    ScalarType,
    TestDataSet,
    ValidationRuleSet,
)
from crudgen.schema import extract_model, read_schema
from crudgen.validators import synthesize_rules
from crudgen.testdata import synthesize_test_data
from crudgen.templates import ARTIFACTS, TemplateEngine, build_context, substitute
from crudgen.exporters import ArtifactExporter, ExportManifest, FileRecord
from crudgen.patcher import Patcher, default_patch_targets
from crudgen.generator import CrudGenerator, GenerationReport, resolve_config
from crudgen.utils import Timer, to_lower_camel, to_plural

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Orchestrator
    "CrudGenerator",
    "GenerationReport",
    "resolve_config",
    # Errors
    "CrudGenError",
    "ConfigError",
    "SchemaReadError",
    "EntityNotFoundError",
    "TemplateReadError",
    # Models
    "ArtifactKind",
    "FieldDescriptor",
    "GeneratorConfig",
    "Insertion",
    "ModelDefinition",
    "PatchResult",
    "PatchTarget",
    "PathsConfig",
    "ScalarType",
    "TestDataSet",
    "ValidationRuleSet",
    # Stages
    "read_schema",
    "extract_model",
    "synthesize_rules",
    "synthesize_test_data",
    "ARTIFACTS",
    "TemplateEngine",
    "build_context",
    "substitute",
    "ArtifactExporter",
    "ExportManifest",
    "FileRecord",
    "Patcher",
    "default_patch_targets",
    # Utilities
    "Timer",
    "to_lower_camel",
    "to_plural",
]
