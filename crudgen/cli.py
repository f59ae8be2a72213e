# File: crudgen/cli.py
"""
CrudGen - Command-Line Interface
=================================

CLI built with the standard-library ``argparse`` module.  The entity and
permission names are asked for interactively unless given as flags.

Usage examples::

    # Interactive: prompts for the entity and permission names
    python -m crudgen

    # Non-interactive
    crudgen -m Widget -p Widget

    # Preview without touching the project, with a manifest of what would change
    crudgen -m Widget -p Widget --dry-run -v

    # Explicit project root and config file
    crudgen --project-root ../api --config ../api/crudgen.yaml -m Order -p Order

Exit codes:
    0 - success
    1 - schema error (schema unreadable, entity not found)
    2 - generation error (an artifact or shared-file patch failed)
    3 - configuration error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, NoReturn, Optional, Sequence

from crudgen.errors import ConfigError, EntityNotFoundError, SchemaReadError

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudgen.cli")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_SCHEMA_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_CONFIG_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


class InputAborted(Exception):
    """The user closed standard input while a prompt was waiting."""


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``crudgen`` logger based on verbosity level.

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

    root_logger: logging.Logger = logging.getLogger("crudgen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from crudgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="crudgen",
        description=(
            "CrudGen - CRUD scaffolding generator.\n\n"
            "Reads one entity from a Prisma schema and writes its model, "
            "controller, service, routes, validator, API docs and tests, "
            "then registers it in the project's DI container, route "
            "aggregator and API-doc aggregator."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s\n"
            "  %(prog)s -m Widget -p Widget\n"
            "  %(prog)s -m Widget -p Widget --dry-run -v\n"
            "  %(prog)s --project-root ../api -m Order -p Order\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"CrudGen v{__version__}",
    )

    # --- Entity ---
    entity_group = parser.add_argument_group("entity")
    entity_group.add_argument(
        "-m", "--model",
        type=str,
        default=None,
        metavar="NAME",
        help="Entity (model) name as declared in the schema. Prompted for when omitted.",
    )
    entity_group.add_argument(
        "-p", "--permission",
        type=str,
        default=None,
        metavar="NAME",
        help="Permission name used by the generated routes. Prompted for when omitted.",
    )

    # --- Config ---
    config_group = parser.add_argument_group("configuration")
    config_group.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="YAML config file (default: crudgen.yaml in the project root, if present).",
    )
    config_group.add_argument(
        "--project-root",
        type=str,
        default=None,
        metavar="DIR",
        help="Root of the target project (default: current directory).",
    )
    config_group.add_argument(
        "--schema",
        type=str,
        default=None,
        metavar="PATH",
        help="Schema file, relative to the project root.",
    )
    config_group.add_argument(
        "--templates",
        type=str,
        default=None,
        metavar="DIR",
        help="Template directory (default: the templates shipped with crudgen).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Render everything and compute every patch without writing any file.",
    )
    mode_group.add_argument(
        "--manifest",
        type=str,
        default=None,
        metavar="PATH",
        help="Write a JSON manifest of the generated files to PATH.",
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
        help="Suppress all log output.",
    )

    return parser


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def prompt_name(
    label: str,
    *,
    input_func: Optional[Callable[[str], str]] = None,
    output: Any = None,
) -> str:
    """
    Ask for a non-empty name, repeating the question until one is given.

    Raises:
        InputAborted: On end of input.
    """
    input_func = input_func or input
    output = output or sys.stderr
    while True:
        try:
            answer: str = input_func(f"{label}: ").strip()
        except EOFError as exc:
            raise InputAborted(label) from exc
        if answer:
            return answer
        print(f"{label} cannot be empty.", file=output)


def _resolve_name(value: Optional[str], label: str) -> str:
    """Use the flag value when given, otherwise prompt."""
    if value is None:
        return prompt_name(label)
    value = value.strip()
    if not value:
        raise ValueError(f"{label} cannot be empty.")
    return value


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, object]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, object] = {}

    if args.schema is not None:
        overrides["schema_path"] = args.schema

    if args.templates is not None:
        overrides["templates_dir"] = args.templates

    return overrides


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _run_generation(
    entity_name: str,
    permission: str,
    args: argparse.Namespace,
) -> int:
    """
    Run the full generation pipeline.

    Returns the appropriate exit code.
    """
    from crudgen.generator import CrudGenerator, GenerationReport, resolve_config

    project_root: Optional[Path] = Path(args.project_root) if args.project_root else None
    config_path: Optional[Path] = Path(args.config) if args.config else None

    try:
        config = resolve_config(
            config_path,
            project_root=project_root,
            overrides=_build_config_overrides(args),
        )
    except ConfigError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG_ERROR

    if args.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")

    generator: CrudGenerator = CrudGenerator(config, dry_run=args.dry_run)
    try:
        report: GenerationReport = generator.generate(
            entity_name,
            permission,
            manifest_path=Path(args.manifest) if args.manifest else None,
        )
    except (SchemaReadError, EntityNotFoundError) as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_SCHEMA_ERROR

    print(report.summary())

    return EXIT_SUCCESS if report.success else EXIT_GENERATION_ERROR


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
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose

    _setup_logging(verbosity)

    try:
        entity_name: str = _resolve_name(args.model, "Model name")
        permission: str = _resolve_name(args.permission, "Permission name")
    except InputAborted as exc:
        logger.error("No input for %s; aborting.", exc)
        sys.exit(EXIT_INPUT_ERROR)
    except ValueError as exc:
        logger.error("%s", exc)
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    logger.info("Model:       %s", entity_name)
    logger.info("Permission:  %s", permission)
    logger.info("Dry run:     %s", args.dry_run)

    exit_code: int = _run_generation(entity_name, permission, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


def main() -> None:
    """Console-script entry point."""
    cli_main()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "main",
    "prompt_name",
    "InputAborted",
    "EXIT_SUCCESS",
    "EXIT_SCHEMA_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_CONFIG_ERROR",
    "EXIT_INPUT_ERROR",
]
