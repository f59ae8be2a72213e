"""
tests/test_templates.py
Unit tests for crudgen.templates (TemplateEngine and context building).

Tests cover:
- Single-pass placeholder substitution
- Output paths for every artifact kind
- Model interface and API-doc definition blocks
- Rendering of the packaged templates
- Determinism of rendering
- Template read errors
"""

from __future__ import annotations

import json
import pathlib
from typing import Dict

import pytest

from crudgen.errors import TemplateReadError
from crudgen.models import ArtifactKind, GeneratorConfig, ModelDefinition, PathsConfig
from crudgen.templates import (
    ARTIFACTS,
    PACKAGED_TEMPLATES_DIR,
    TemplateEngine,
    build_context,
    build_doc_definition,
    render_model_fields,
    substitute,
)
from crudgen.testdata import synthesize_test_data
from crudgen.validators import synthesize_rules


# ===========================================================================
# Helpers
# ===========================================================================


def _context(model: ModelDefinition, permission: str = "Widget") -> Dict[str, str]:
    return build_context(
        model,
        permission,
        synthesize_rules(model),
        synthesize_test_data(model),
        GeneratorConfig(),
    )


# ===========================================================================
# Substitution
# ===========================================================================


class TestSubstitute:
    def test_replaces_known_keys(self) -> None:
        assert substitute("${ModelName}/${modelName}", {"ModelName": "W", "modelName": "w"}) == "W/w"

    def test_unknown_sequences_left_intact(self) -> None:
        template = "`${baseUrl}/create` ${Date.now()}"
        assert substitute(template, {"ModelName": "Widget"}) == template

    def test_values_are_not_rescanned(self) -> None:
        out = substitute("${a}", {"a": "${b}", "b": "oops"})
        assert out == "${b}"

    def test_nested_placeholder_resolves_inner_only(self) -> None:
        assert substitute("${created${ModelName}Id}", {"ModelName": "Widget"}) == "${createdWidgetId}"


# ===========================================================================
# Context blocks
# ===========================================================================


class TestModelFields:
    def test_interface_members(self, widget_model: ModelDefinition) -> None:
        lines = render_model_fields(widget_model).split("\n    ")
        assert lines[0] == "id?: number;"
        assert "name: string;" in lines
        assert "description?: string;" in lines
        assert "price: number;" in lines
        assert "tags: string[];" in lines
        assert "launchedAt?: Date;" in lines
        assert lines[-1] == "deletedAt?: Date;"


class TestDocDefinition:
    def test_structure(self, widget_model: ModelDefinition) -> None:
        definition = build_doc_definition(widget_model)
        widget = definition["Widget"]

        assert widget["type"] == "object"
        assert widget["required"] == ["name", "price", "active", "tags"]
        assert widget["properties"] == {
            "name": {"type": "string"},
            "description": {"type": "string"},
            "price": {"type": "number"},
            "active": {"type": "boolean"},
            "tags": {"type": "array[string]"},
            "launchedAt": {"type": "string"},
        }

    def test_serialised_with_two_space_indent(self, widget_model: ModelDefinition) -> None:
        context = _context(widget_model)
        assert context["swaggerDef"].startswith('{\n  "Widget": {\n    "type": "object"')
        assert json.loads(context["swaggerDef"]) == build_doc_definition(widget_model)


class TestBuildContext:
    def test_names(self) -> None:
        context = _context(ModelDefinition(entity_name="Category"), permission="catalog")
        assert context["ModelName"] == "Category"
        assert context["modelName"] == "category"
        assert context["pluralModelName"] == "categories"
        assert context["permission"] == "catalog"
        assert context["apiPrefix"] == "/api/v1"

    def test_rules_joined(self, one_line_model: ModelDefinition) -> None:
        context = _context(one_line_model)
        assert context["createValidation"].count("body('") == 2
        assert ",\n      body('qty')" in context["createValidation"]


# ===========================================================================
# TemplateEngine
# ===========================================================================


class TestOutputPaths:
    @pytest.mark.parametrize(
        "kind, expected",
        [
            (ArtifactKind.MODEL, "src/models/OrderItem.ts"),
            (ArtifactKind.CONTROLLER, "src/controllers/orderItemController.ts"),
            (ArtifactKind.SERVICE, "src/services/orderItemService.ts"),
            (ArtifactKind.ROUTES, "src/routes/orderItemRoutes.ts"),
            (ArtifactKind.VALIDATOR, "src/validators/orderItemValidator.ts"),
            (ArtifactKind.DOC_PATHS, "src/config/swagger/paths/orderItemPaths.ts"),
            (
                ArtifactKind.DOC_DEFINITION,
                "src/config/swagger/definitions/orderItemDefinition.ts",
            ),
            (
                ArtifactKind.CONTROLLER_TEST,
                "src/tests/unit/controllers/orderItemController.test.ts",
            ),
            (ArtifactKind.SERVICE_TEST, "src/tests/unit/services/orderItemService.test.ts"),
            (
                ArtifactKind.INTEGRATION_TEST,
                "src/tests/integration/orderItem.integration.test.ts",
            ),
        ],
    )
    def test_default_layout(self, kind: ArtifactKind, expected: str) -> None:
        assert TemplateEngine().output_path(kind, "OrderItem").as_posix() == expected

    def test_configured_directory(self) -> None:
        config = GeneratorConfig(paths=PathsConfig(services="app/services"))
        path = TemplateEngine(config).output_path(ArtifactKind.SERVICE, "Widget")
        assert path.as_posix() == "app/services/widgetService.ts"

    def test_catalog_covers_every_kind(self) -> None:
        assert {layout.kind for layout in ARTIFACTS} == set(ArtifactKind)


class TestRender:
    def test_every_packaged_template_loads(self) -> None:
        engine = TemplateEngine()
        assert engine.templates_dir == PACKAGED_TEMPLATES_DIR
        for layout in ARTIFACTS:
            assert engine.load_template(layout.kind)

    def test_no_known_placeholder_left(self, widget_model: ModelDefinition) -> None:
        engine = TemplateEngine()
        context = _context(widget_model)
        for layout in ARTIFACTS:
            content = engine.render(layout.kind, context)
            for key in context:
                assert "${" + key + "}" not in content, (layout.kind, key)

    def test_model_interface(self, widget_model: ModelDefinition) -> None:
        content = TemplateEngine().render(ArtifactKind.MODEL, _context(widget_model))
        assert content.startswith("export interface Widget {")
        assert "    price: number;" in content

    def test_routes_use_permission(self, widget_model: ModelDefinition) -> None:
        content = TemplateEngine().render(
            ArtifactKind.ROUTES, _context(widget_model, permission="inventory")
        )
        assert "permission: 'inventory', action: 'add'" in content
        assert "widgetValidationRules()" in content
        assert "from '../controllers/widgetController'" in content

    def test_doc_paths_use_plural_collection(self, widget_model: ModelDefinition) -> None:
        content = TemplateEngine().render(ArtifactKind.DOC_PATHS, _context(widget_model))
        assert "'/api/v1/widgets/create'" in content
        assert "'/api/v1/widgets/{id}'" in content

    def test_integration_test_keeps_target_literals(self, widget_model: ModelDefinition) -> None:
        content = TemplateEngine().render(ArtifactKind.INTEGRATION_TEST, _context(widget_model))
        assert "${baseUrl}" in content
        assert "${authToken}" in content
        assert "createdWidgetId" in content
        assert "price: 10.5" in content

    def test_rendering_is_deterministic(self, widget_model: ModelDefinition) -> None:
        first = TemplateEngine()
        second = TemplateEngine()
        for layout in ARTIFACTS:
            assert first.render(layout.kind, _context(widget_model)) == second.render(
                layout.kind, _context(widget_model)
            )
            assert first.output_path(layout.kind, "Widget") == second.output_path(layout.kind, "Widget")

    def test_custom_templates_dir(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "service.ts.tpl").write_text("// ${ModelName} service\n", encoding="utf-8")
        engine = TemplateEngine(templates_dir=tmp_path)
        assert engine.render(ArtifactKind.SERVICE, {"ModelName": "Widget"}) == "// Widget service\n"

    def test_templates_dir_from_config(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "tpl").mkdir()
        config = GeneratorConfig(project_root=str(tmp_path), templates_dir="tpl")
        assert TemplateEngine(config).templates_dir == tmp_path / "tpl"

    def test_missing_template(self, tmp_path: pathlib.Path) -> None:
        engine = TemplateEngine(templates_dir=tmp_path)
        with pytest.raises(TemplateReadError) as exc_info:
            engine.load_template(ArtifactKind.CONTROLLER)
        assert exc_info.value.kind == "controller"
        assert "controller.ts.tpl" in exc_info.value.path
