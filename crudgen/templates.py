# File: crudgen/templates.py
"""
CrudGen - Template Engine
==========================
Turns a ``ModelDefinition`` plus the synthesised rule and test-data sets
into the source text of every per-entity artifact.

Each ``ArtifactKind`` maps to exactly one template file and one output
path::

    kind              template                   output (under its directory)
    ----------------  -------------------------  ---------------------------------
    model             model.ts.tpl               <Entity>.ts
    controller        controller.ts.tpl          <entity>Controller.ts
    service           service.ts.tpl             <entity>Service.ts
    routes            routes.ts.tpl              <entity>Routes.ts
    validator         validator.ts.tpl           <entity>Validator.ts
    doc_paths         swaggerPaths.ts.tpl        <entity>Paths.ts
    doc_definition    swaggerDefinition.ts.tpl   <entity>Definition.ts
    controller_test   controller.test.ts.tpl     controllers/<entity>Controller.test.ts
    service_test      service.test.ts.tpl        services/<entity>Service.test.ts
    integration_test  integration.test.ts.tpl    <entity>.integration.test.ts

Placeholders are ``${name}`` tokens.  Substitution is a single regex pass:
replacement values are never re-scanned, so the order in which
placeholders are declared cannot change the result, and ``${...}``
sequences that are not context keys (target-language template literals)
pass through untouched.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Pattern, Tuple

from crudgen.errors import TemplateReadError
from crudgen.models import (
    SYSTEM_FIELDS,
    ArtifactKind,
    GeneratorConfig,
    ModelDefinition,
    TestDataSet,
    ValidationRuleSet,
)
from crudgen.testdata import data_placeholders
from crudgen.typemap import to_doc_type, to_output_type
from crudgen.utils import read_file, to_lower_camel, to_plural

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudgen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PACKAGED_TEMPLATES_DIR: Path = Path(__file__).resolve().parent / "template_files"

PLACEHOLDER_RE: Pattern[str] = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

_RULE_SEPARATOR: str = ",\n      "
_MODEL_FIELD_SEPARATOR: str = "\n    "


# ---------------------------------------------------------------------------
# Artifact catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ArtifactLayout:
    """Where an artifact kind comes from and where it goes."""

    kind: ArtifactKind
    template_name: str
    directory: str  # attribute name on PathsConfig
    subdirectory: str
    suffix: str
    keep_case: bool = False

    def file_name(self, entity_name: str) -> str:
        stem: str = entity_name if self.keep_case else to_lower_camel(entity_name)
        return f"{stem}{self.suffix}"


ARTIFACTS: Tuple[ArtifactLayout, ...] = (
    ArtifactLayout(ArtifactKind.MODEL, "model.ts.tpl", "models", "", ".ts", keep_case=True),
    ArtifactLayout(ArtifactKind.CONTROLLER, "controller.ts.tpl", "controllers", "", "Controller.ts"),
    ArtifactLayout(ArtifactKind.SERVICE, "service.ts.tpl", "services", "", "Service.ts"),
    ArtifactLayout(ArtifactKind.ROUTES, "routes.ts.tpl", "routes", "", "Routes.ts"),
    ArtifactLayout(ArtifactKind.VALIDATOR, "validator.ts.tpl", "validators", "", "Validator.ts"),
    ArtifactLayout(ArtifactKind.DOC_PATHS, "swaggerPaths.ts.tpl", "doc_paths", "", "Paths.ts"),
    ArtifactLayout(
        ArtifactKind.DOC_DEFINITION,
        "swaggerDefinition.ts.tpl",
        "doc_definitions",
        "",
        "Definition.ts",
    ),
    ArtifactLayout(
        ArtifactKind.CONTROLLER_TEST,
        "controller.test.ts.tpl",
        "unit_tests",
        "controllers",
        "Controller.test.ts",
    ),
    ArtifactLayout(
        ArtifactKind.SERVICE_TEST,
        "service.test.ts.tpl",
        "unit_tests",
        "services",
        "Service.test.ts",
    ),
    ArtifactLayout(
        ArtifactKind.INTEGRATION_TEST,
        "integration.test.ts.tpl",
        "integration_tests",
        "",
        ".integration.test.ts",
    ),
)

_ARTIFACTS_BY_KIND: Dict[ArtifactKind, ArtifactLayout] = {layout.kind: layout for layout in ARTIFACTS}


def artifact_layout(kind: ArtifactKind) -> ArtifactLayout:
    return _ARTIFACTS_BY_KIND[ArtifactKind(kind)]


# ---------------------------------------------------------------------------
# Substitution
# ---------------------------------------------------------------------------


def substitute(template: str, context: Mapping[str, str]) -> str:
    """
    Replace every ``${key}`` whose key is in *context*.

    Examples:
        >>> substitute("class ${ModelName}Service", {"ModelName": "Widget"})
        'class WidgetService'
        >>> substitute("`${Date.now()}` ${other}", {})
        '`${Date.now()}` ${other}'
    """

    def _replace(match: "re.Match[str]") -> str:
        key: str = match.group(1)
        if key in context:
            return context[key]
        return match.group(0)

    return PLACEHOLDER_RE.sub(_replace, template)


# ---------------------------------------------------------------------------
# Generated blocks
# ---------------------------------------------------------------------------


def render_model_fields(model: ModelDefinition) -> str:
    """Interface members for the model artifact, system fields included."""
    lines: List[str] = []
    for field in model.fields:
        optional: str = "?" if field.is_optional else ""
        lines.append(f"{field.name}{optional}: {to_output_type(field.raw_type, field.is_array)};")
    return _MODEL_FIELD_SEPARATOR.join(lines)


def build_doc_definition(
    model: ModelDefinition,
    system_fields: Tuple[str, ...] = SYSTEM_FIELDS,
) -> Dict[str, Any]:
    """
    API-documentation object definition for the entity.

    Only non-system fields are described; a field is listed as required
    when it is not optional.
    """
    required: List[str] = []
    properties: Dict[str, Dict[str, str]] = {}
    for field in model.editable_fields(system_fields):
        properties[field.name] = {"type": to_doc_type(field.raw_type, field.is_array)}
        if not field.is_optional:
            required.append(field.name)
    return {
        model.entity_name: {
            "type": "object",
            "required": required,
            "properties": properties,
        }
    }


def build_context(
    model: ModelDefinition,
    permission: str,
    rules: ValidationRuleSet,
    test_data: TestDataSet,
    config: Optional[GeneratorConfig] = None,
) -> Dict[str, str]:
    """Placeholder mapping shared by every artifact of one entity."""
    config = config or GeneratorConfig()
    lower: str = to_lower_camel(model.entity_name)
    context: Dict[str, str] = {
        "ModelName": model.entity_name,
        "modelName": lower,
        "pluralModelName": to_plural(lower),
        "permission": permission,
        "apiPrefix": config.api_prefix,
        "modelFields": render_model_fields(model),
        "createValidation": _RULE_SEPARATOR.join(rules.create_rules),
        "updateValidation": _RULE_SEPARATOR.join(rules.update_rules),
        "swaggerDef": json.dumps(
            build_doc_definition(model, config.system_fields), indent=2
        ),
    }
    context.update(data_placeholders(test_data))
    return context


# ---------------------------------------------------------------------------
# TemplateEngine
# ---------------------------------------------------------------------------


class TemplateEngine:
    """
    Loads artifact templates and renders them against a context.

    Usage::

        engine = TemplateEngine(config)
        content = engine.render(ArtifactKind.SERVICE, context)
        path = engine.output_path(ArtifactKind.SERVICE, "Widget")

    Templates are read once per engine and cached.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        templates_dir: Optional[Path] = None,
    ) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        if templates_dir is None and self._config.templates_dir:
            templates_dir = Path(self._config.project_root) / self._config.templates_dir
        self._templates_dir: Path = templates_dir or PACKAGED_TEMPLATES_DIR
        self._cache: Dict[ArtifactKind, str] = {}

        logger.debug("TemplateEngine using templates from %s.", self._templates_dir)

    @property
    def templates_dir(self) -> Path:
        return self._templates_dir

    def template_path(self, kind: ArtifactKind) -> Path:
        return self._templates_dir / artifact_layout(kind).template_name

    def load_template(self, kind: ArtifactKind) -> str:
        """
        Read the template for *kind*.

        Raises:
            TemplateReadError: If the file is missing or unreadable.
        """
        kind = ArtifactKind(kind)
        if kind in self._cache:
            return self._cache[kind]

        path: Path = self.template_path(kind)
        try:
            template: str = read_file(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateReadError(kind.value, path, str(exc)) from exc

        self._cache[kind] = template
        return template

    def render(self, kind: ArtifactKind, context: Mapping[str, str]) -> str:
        """Render the template of *kind* with *context*."""
        content: str = substitute(self.load_template(kind), context)
        leftovers: List[str] = sorted(
            {m.group(1) for m in PLACEHOLDER_RE.finditer(content)} & _KNOWN_PLACEHOLDERS
        )
        if leftovers:
            logger.warning(
                "Template '%s' left placeholder(s) unfilled: %s",
                ArtifactKind(kind).value,
                ", ".join(leftovers),
            )
        return content

    def output_path(self, kind: ArtifactKind, entity_name: str) -> Path:
        """Path of the artifact relative to the project root."""
        layout: ArtifactLayout = artifact_layout(kind)
        directory: Path = Path(getattr(self._config.paths, layout.directory))
        if layout.subdirectory:
            directory = directory / layout.subdirectory
        return directory / layout.file_name(entity_name)


_KNOWN_PLACEHOLDERS = frozenset(
    {
        "ModelName",
        "modelName",
        "pluralModelName",
        "permission",
        "apiPrefix",
        "modelFields",
        "createValidation",
        "updateValidation",
        "swaggerDef",
        "testCreateData",
        "testCreateExpectation",
        "testUpdateData",
        "testUpdateExpectation",
        "testPartialUpdateData",
        "testInvalidData",
        "testFilterParam",
    }
)


__all__: List[str] = [
    "PACKAGED_TEMPLATES_DIR",
    "PLACEHOLDER_RE",
    "ArtifactLayout",
    "ARTIFACTS",
    "artifact_layout",
    "substitute",
    "render_model_fields",
    "build_doc_definition",
    "build_context",
    "TemplateEngine",
]
