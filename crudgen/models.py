# File: crudgen/models.py
"""
CrudGen - Core Data Models
===========================
Pydantic V2 models shared by every stage of the generation pipeline:

    Schema Extraction → Rule / Test-Data Synthesis → Rendering → Patching

Models produced by a generation run (``ModelDefinition``,
``ValidationRuleSet``, ``TestDataSet``) are frozen: they are built once and
only read by downstream stages.  ``GeneratorConfig`` is the single source of
configuration and may be loaded from a YAML file.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudgen.models")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Fields managed by the persistence layer, never user-editable.
SYSTEM_FIELDS: Tuple[str, ...] = ("id", "createdAt", "updatedAt", "deletedAt")

# System fields that are always treated as optional on extraction.
OPTIONAL_SYSTEM_FIELDS: Tuple[str, ...] = ("id", "deletedAt")

DEFAULT_STRING_MAX_LENGTH: int = 190


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ScalarType(str, Enum):
    """Canonical primitive types of the schema-definition language."""

    STRING = "String"
    INT = "Int"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    DECIMAL = "Decimal"
    BIGINT = "BigInt"
    JSON = "Json"
    BYTES = "Bytes"


class ArtifactKind(str, Enum):
    """Every per-entity artifact the generator renders."""

    MODEL = "model"
    CONTROLLER = "controller"
    SERVICE = "service"
    ROUTES = "routes"
    VALIDATOR = "validator"
    DOC_PATHS = "doc_paths"
    DOC_DEFINITION = "doc_definition"
    CONTROLLER_TEST = "controller_test"
    SERVICE_TEST = "service_test"
    INTEGRATION_TEST = "integration_test"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
    populate_by_name=True,
)

_SETTINGS_CONFIG: ConfigDict = ConfigDict(
    validate_assignment=True,
    extra="forbid",
    populate_by_name=True,
)


# ---------------------------------------------------------------------------
# Extraction results
# ---------------------------------------------------------------------------


class FieldDescriptor(BaseModel):
    """
    One field of an entity block, as declared in the schema text.

    ``raw_type`` never carries the ``?`` or ``[]`` markers; those are
    reflected in ``is_optional`` and ``is_array``.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Field name.")
    raw_type: str = Field(..., min_length=1, description="Type token without markers.")
    is_optional: bool = Field(default=False, description="Optional marker or system field.")
    is_array: bool = Field(default=False, description="Declared with a trailing '[]'.")
    is_unique: bool = Field(default=False, description="Carries an @unique attribute.")

    @computed_field  # type: ignore[misc]
    @property
    def type_token(self) -> str:
        """Type as used by the type mapper, e.g. ``String`` or ``Int[]``."""
        return f"{self.raw_type}[]" if self.is_array else self.raw_type

    def __repr__(self) -> str:
        flags: str = ""
        if self.is_unique:
            flags += " unique"
        flags += " optional" if self.is_optional else " required"
        return f"<Field {self.name}:{self.type_token}{flags}>"


class ModelDefinition(BaseModel):
    """Ordered field list of one entity, owned by a single generation run."""

    model_config = _FROZEN_CONFIG

    entity_name: str = Field(..., min_length=1, description="Entity name (original case).")
    fields: Tuple[FieldDescriptor, ...] = Field(
        default_factory=tuple, description="Fields in source order."
    )
    warnings: Tuple[str, ...] = Field(
        default_factory=tuple,
        description="Lines skipped during extraction.",
    )

    def editable_fields(
        self, system_fields: Tuple[str, ...] = SYSTEM_FIELDS
    ) -> List[FieldDescriptor]:
        """Fields that are not system fields, in source order."""
        return [f for f in self.fields if f.name not in system_fields]

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        """Return the field called *name*, or ``None`` if the model has none."""
        for f in self.fields:
            if f.name == name:
                return f
        return None


class ValidationRuleSet(BaseModel):
    """Rule expressions for the create and update request validators."""

    model_config = _FROZEN_CONFIG

    create_rules: Tuple[str, ...] = Field(default_factory=tuple)
    update_rules: Tuple[str, ...] = Field(default_factory=tuple)


class TestDataSet(BaseModel):
    """Literal payload entries used to fill the generated test files."""

    __test__ = False  # not a pytest test class

    model_config = _FROZEN_CONFIG

    create_data: Tuple[str, ...] = Field(default_factory=tuple)
    create_expectation: Tuple[str, ...] = Field(default_factory=tuple)
    update_data: Tuple[str, ...] = Field(default_factory=tuple)
    update_expectation: Tuple[str, ...] = Field(default_factory=tuple)
    partial_update_data: Tuple[str, ...] = Field(default_factory=tuple)
    invalid_data: Tuple[str, ...] = Field(default_factory=tuple)
    filter_param: str = Field(default="id=1")


# ---------------------------------------------------------------------------
# Patching
# ---------------------------------------------------------------------------


class Insertion(BaseModel):
    """A snippet to splice into a shared file."""

    model_config = _FROZEN_CONFIG

    anchor: str = Field(..., min_length=1, description="Text the snippet goes before.")
    snippet: str = Field(..., min_length=1, description="Text to insert (template).")
    section: Optional[str] = Field(
        default=None,
        description="Tagged section name; preferred over the anchor when present.",
    )


class PatchTarget(BaseModel):
    """One shared file and the insertions that register an entity in it."""

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Short label used in reports.")
    file_path: str = Field(..., min_length=1, description="Path relative to the project root.")
    existence_marker: str = Field(
        ..., min_length=1, description="Text whose presence means 'already registered'."
    )
    insertions: Tuple[Insertion, ...] = Field(..., min_length=1)


class PatchResult(BaseModel):
    """Outcome of patching one target."""

    model_config = _FROZEN_CONFIG

    target_name: str
    file_path: str
    applied: bool = False
    insertions_applied: int = 0
    warnings: Tuple[str, ...] = Field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class PathsConfig(BaseModel):
    """Output directories per artifact family, relative to the project root."""

    model_config = _SETTINGS_CONFIG

    models: str = "src/models"
    controllers: str = "src/controllers"
    services: str = "src/services"
    routes: str = "src/routes"
    validators: str = "src/validators"
    doc_paths: str = "src/config/swagger/paths"
    doc_definitions: str = "src/config/swagger/definitions"
    unit_tests: str = "src/tests/unit"
    integration_tests: str = "src/tests/integration"


class GeneratorConfig(BaseModel):
    """
    Generation settings.

    Every field has a default matching the layout of a standard
    Express + Prisma project, so an empty config file is valid.
    ``patch_targets`` left as ``None`` selects the built-in catalog; an
    explicit empty list disables patching.
    """

    model_config = _SETTINGS_CONFIG

    project_root: str = Field(default=".", description="Root all relative paths resolve against.")
    schema_path: str = Field(default="db/prisma/schema.prisma")
    templates_dir: Optional[str] = Field(
        default=None,
        description="Template directory; the packaged templates are used when unset.",
    )
    api_prefix: str = Field(default="/api/v1")
    paths: PathsConfig = Field(default_factory=PathsConfig)
    patch_targets: Optional[List[PatchTarget]] = Field(default=None)

    string_max_length: int = Field(default=DEFAULT_STRING_MAX_LENGTH, ge=1)
    create_optional_cap: int = Field(default=2, ge=0)
    invalid_field_cap: int = Field(default=2, ge=0)
    system_fields: Tuple[str, ...] = Field(default=SYSTEM_FIELDS)
    optional_system_fields: Tuple[str, ...] = Field(default=OPTIONAL_SYSTEM_FIELDS)

    @field_validator("api_prefix")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


__all__: List[str] = [
    "SYSTEM_FIELDS",
    "OPTIONAL_SYSTEM_FIELDS",
    "DEFAULT_STRING_MAX_LENGTH",
    "ScalarType",
    "ArtifactKind",
    "FieldDescriptor",
    "ModelDefinition",
    "ValidationRuleSet",
    "TestDataSet",
    "Insertion",
    "PatchTarget",
    "PatchResult",
    "PathsConfig",
    "GeneratorConfig",
]
