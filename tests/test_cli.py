"""
tests/test_cli.py
End-to-end tests for the crudgen command-line interface.

The CLI always terminates through ``sys.exit``; every test asserts on the
exit code and on the files left in the temporary project.
"""

from __future__ import annotations

import json
import pathlib
from typing import Iterator, List

import pytest

from crudgen.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_GENERATION_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_SCHEMA_ERROR,
    EXIT_SUCCESS,
    InputAborted,
    cli_main,
    prompt_name,
)


# ===========================================================================
# Helpers
# ===========================================================================


def _run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        cli_main(argv)
    return exc_info.value.code


def _answers(*values: str):
    iterator: Iterator[str] = iter(values)

    def _input(prompt: str = "") -> str:
        try:
            return next(iterator)
        except StopIteration:
            raise EOFError from None

    return _input


# ===========================================================================
# Non-interactive runs
# ===========================================================================


class TestCliRun:
    def test_success(
        self, project_root: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = _run(["--project-root", str(project_root), "-m", "Widget", "-p", "Widget"])

        assert code == EXIT_SUCCESS
        assert (project_root / "src/controllers/widgetController.ts").is_file()
        out = capsys.readouterr().out
        assert "SUCCESS" in out
        assert "src/controllers/widgetController.ts" in out

    def test_unknown_model(
        self, project_root: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = _run(["--project-root", str(project_root), "-m", "Gadget", "-p", "Gadget"])

        assert code == EXIT_SCHEMA_ERROR
        assert "Model Gadget not found in schema" in capsys.readouterr().err
        assert not (project_root / "src/controllers").exists()

    def test_schema_override(self, project_root: pathlib.Path) -> None:
        code = _run(
            [
                "--project-root", str(project_root),
                "--schema", "nowhere.prisma",
                "-m", "Widget", "-p", "Widget",
            ]
        )
        assert code == EXIT_SCHEMA_ERROR

    def test_bad_config(self, project_root: pathlib.Path) -> None:
        (project_root / "crudgen.yaml").write_text("- not a mapping\n", encoding="utf-8")
        code = _run(["--project-root", str(project_root), "-m", "Widget", "-p", "Widget"])
        assert code == EXIT_CONFIG_ERROR

    def test_generation_error(self, project_root: pathlib.Path, tmp_path: pathlib.Path) -> None:
        empty_templates = tmp_path / "no-templates"
        empty_templates.mkdir()
        code = _run(
            [
                "--project-root", str(project_root),
                "--templates", str(empty_templates),
                "-m", "Widget", "-p", "Widget",
            ]
        )
        assert code == EXIT_GENERATION_ERROR

    def test_empty_model_flag(self, project_root: pathlib.Path) -> None:
        code = _run(["--project-root", str(project_root), "-m", "  ", "-p", "Widget"])
        assert code == EXIT_INPUT_ERROR

    def test_dry_run_and_manifest(self, project_root: pathlib.Path) -> None:
        code = _run(
            [
                "--project-root", str(project_root),
                "-m", "Widget", "-p", "Widget",
                "--dry-run", "--manifest", "manifest.json",
            ]
        )
        assert code == EXIT_SUCCESS
        assert not (project_root / "src/models").exists()
        assert not (project_root / "manifest.json").exists()

    def test_manifest(self, project_root: pathlib.Path) -> None:
        code = _run(
            [
                "--project-root", str(project_root),
                "-m", "Widget", "-p", "Widget",
                "--manifest", "manifest.json",
            ]
        )
        assert code == EXIT_SUCCESS
        data = json.loads((project_root / "manifest.json").read_text(encoding="utf-8"))
        assert data["total_files"] == 10

    def test_quiet(self, project_root: pathlib.Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = _run(["--project-root", str(project_root), "-m", "Widget", "-p", "Widget", "-q"])
        assert code == EXIT_SUCCESS
        assert capsys.readouterr().err == ""

    def test_verbose_logs_to_stderr(
        self, project_root: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _run(["--project-root", str(project_root), "-m", "Widget", "-p", "Widget", "-v"])
        err = capsys.readouterr().err
        assert "crudgen.generator" in err
        assert "INFO" in err

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["--version"]) == 0
        assert "CrudGen v" in capsys.readouterr().out


# ===========================================================================
# Prompts
# ===========================================================================


class TestPrompts:
    def test_prompt_repeats_until_non_empty(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert prompt_name("Model name", input_func=_answers("", "   ", "Widget")) == "Widget"
        assert capsys.readouterr().err.count("Model name cannot be empty.") == 2

    def test_prompt_eof(self) -> None:
        with pytest.raises(InputAborted):
            prompt_name("Model name", input_func=_answers())

    def test_interactive_run(
        self, project_root: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("builtins.input", _answers("", "Widget", "inventory"))
        code = _run(["--project-root", str(project_root)])

        assert code == EXIT_SUCCESS
        routes = (project_root / "src/routes/widgetRoutes.ts").read_text(encoding="utf-8")
        assert "permission: 'inventory'" in routes

    def test_interactive_eof(
        self, project_root: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("builtins.input", _answers("Widget"))
        code = _run(["--project-root", str(project_root)])
        assert code == EXIT_INPUT_ERROR
        assert not (project_root / "src/models").exists()
