# File: crudgen/patcher.py
"""
CrudGen - Idempotent Patcher
=============================
Registers a newly generated entity in the shared files of the target
project (DI container, route aggregator, API-doc aggregator).

Each ``PatchTarget`` names a file, an existence marker and an ordered list
of ``Insertion`` objects.  Markers, snippets and anchors are templates and
are rendered with the entity's placeholder context before use.

Algorithm for one target:

    1. Read the whole file.
    2. If the rendered existence marker is already present, stop
       (``applied=False``); the entity is registered.
    3. For each insertion, in declaration order:
         a. If the file has a tagged section for it::

                // crudgen:begin <section>
                ...
                // crudgen:end <section>

            append the snippet at the end of the section, unless the
            section already contains it.
         b. Otherwise splice the snippet immediately before the first
            occurrence of the anchor text, unless the file already
            contains every line of the snippet.
         c. If neither exists, record a warning and move on.
    4. Write the whole file back.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from crudgen.models import Insertion, PatchResult, PatchTarget
from crudgen.templates import substitute
from crudgen.utils import read_file, to_lower_camel, to_plural, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudgen.patcher")

SECTION_BEGIN: str = "// crudgen:begin {name}"
SECTION_END: str = "// crudgen:end {name}"


# ---------------------------------------------------------------------------
# Built-in catalog
# ---------------------------------------------------------------------------


def default_patch_targets() -> List[PatchTarget]:
    """The three shared files of a standard Express + Prisma project."""
    return [
        PatchTarget(
            name="di_registry",
            file_path="src/config/inversifyConfig.ts",
            existence_marker="import { ${ModelName}Controller }",
            insertions=(
                Insertion(
                    anchor="const container = new Container();",
                    snippet=(
                        "import { ${ModelName}Controller } from "
                        "'../controllers/${modelName}Controller';\n"
                        "import { ${ModelName}Service } from "
                        "'../services/${modelName}Service';\n"
                    ),
                    section="imports",
                ),
                Insertion(
                    anchor="export default container;",
                    snippet=(
                        "container.bind<${ModelName}Controller>"
                        "(${ModelName}Controller).toSelf();\n"
                        "container.bind<${ModelName}Service>"
                        "(${ModelName}Service).toSelf();\n"
                    ),
                    section="bindings",
                ),
            ),
        ),
        PatchTarget(
            name="route_aggregator",
            file_path="src/routes/v1.ts",
            existence_marker="from './${modelName}Routes'",
            insertions=(
                Insertion(
                    anchor="const router = Router();",
                    snippet="import ${ModelName}Routes from './${modelName}Routes';\n",
                    section="imports",
                ),
                Insertion(
                    anchor="export default router;",
                    snippet=(
                        "router.use('${apiPrefix}/${pluralModelName}', "
                        "authMiddleware, ${ModelName}Routes);\n"
                    ),
                    section="routes",
                ),
            ),
        ),
        PatchTarget(
            name="doc_aggregator",
            file_path="src/config/swagger/swaggerConfig.ts",
            existence_marker="from './paths/${modelName}Paths'",
            insertions=(
                Insertion(
                    anchor="// Path Imports ends",
                    snippet="import ${modelName}Paths from './paths/${modelName}Paths';\n",
                    section="path-imports",
                ),
                Insertion(
                    anchor="// Definition Imports ends",
                    snippet=(
                        "import ${modelName}Definitions from "
                        "'./definitions/${modelName}Definition';\n"
                    ),
                    section="definition-imports",
                ),
                Insertion(
                    anchor="// register new paths here",
                    snippet="...${modelName}Paths,\n",
                    section="paths",
                ),
                Insertion(
                    anchor="// register new defintions here",
                    snippet="...${modelName}Definitions,\n",
                    section="definitions",
                ),
            ),
        ),
    ]


def entity_context(entity_name: str, api_prefix: str = "/api/v1") -> Dict[str, str]:
    """Minimal placeholder context needed by the patch catalog."""
    lower: str = to_lower_camel(entity_name)
    return {
        "ModelName": entity_name,
        "modelName": lower,
        "pluralModelName": to_plural(lower),
        "apiPrefix": api_prefix.rstrip("/"),
    }


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def _line_start(content: str, index: int) -> int:
    return content.rfind("\n", 0, index) + 1


def _indent_snippet(snippet: str, indent: str) -> str:
    """Indent each non-blank snippet line and terminate it with a newline."""
    lines: List[str] = snippet.rstrip("\n").split("\n")
    return "".join(f"{indent}{line}\n" if line.strip() else "\n" for line in lines)


def find_section(content: str, name: str) -> Optional[Tuple[int, int]]:
    """
    Locate a tagged section.

    Returns ``(body_start, end_line_start)``: the offset just after the
    begin-marker line and the offset of the line holding the end marker.
    """
    begin: int = content.find(SECTION_BEGIN.format(name=name))
    if begin < 0:
        return None
    body_start: int = content.find("\n", begin)
    if body_start < 0:
        return None
    body_start += 1
    end: int = content.find(SECTION_END.format(name=name), body_start)
    if end < 0:
        return None
    return body_start, _line_start(content, end)


def snippet_present(text: str, snippet: str) -> bool:
    """True if every non-blank line of *snippet* already occurs in *text*."""
    lines: List[str] = [line.strip() for line in snippet.splitlines() if line.strip()]
    return bool(lines) and all(line in text for line in lines)


def insert_into_section(content: str, name: str, snippet: str) -> Optional[str]:
    """
    Append *snippet* at the end of section *name*.

    Returns the new content, the unchanged content if the section already
    holds the snippet, or ``None`` if there is no such section.
    """
    bounds: Optional[Tuple[int, int]] = find_section(content, name)
    if bounds is None:
        return None
    body_start, end_line = bounds
    body: str = content[body_start:end_line]
    if snippet_present(body, snippet):
        return content

    end_marker_line: str = content[end_line:]
    indent: str = end_marker_line[: len(end_marker_line) - len(end_marker_line.lstrip(" \t"))]
    return content[:end_line] + _indent_snippet(snippet, indent) + content[end_line:]


def insert_before_anchor(content: str, anchor: str, snippet: str) -> Optional[str]:
    """
    Splice *snippet* immediately before the first occurrence of *anchor*.

    When the anchor is the first text on its line, the snippet takes the
    anchor's indentation and the anchor keeps it.  Returns ``None`` if the
    anchor is absent.
    """
    index: int = content.find(anchor)
    if index < 0:
        return None
    line_start: int = _line_start(content, index)
    prefix: str = content[line_start:index]
    indent: str = prefix if not prefix.strip() else ""
    return content[:index] + _indent_snippet(snippet, indent).lstrip(" \t") + indent + content[index:]


def apply_insertions(
    content: str,
    insertions: Sequence[Insertion],
    context: Mapping[str, str],
) -> Tuple[str, int, List[str]]:
    """
    Apply *insertions* to *content* without touching the filesystem.

    Returns ``(new_content, applied_count, warnings)``.
    """
    applied: int = 0
    warnings: List[str] = []

    for insertion in insertions:
        snippet: str = substitute(insertion.snippet, context)
        anchor: str = substitute(insertion.anchor, context)

        if insertion.section:
            patched: Optional[str] = insert_into_section(content, insertion.section, snippet)
            if patched is not None:
                if patched != content:
                    applied += 1
                content = patched
                continue

        if snippet_present(content, snippet):
            continue

        patched = insert_before_anchor(content, anchor, snippet)
        if patched is None:
            warnings.append(f"Anchor not found: {anchor!r}")
            continue
        content = patched
        applied += 1

    return content, applied, warnings


# ---------------------------------------------------------------------------
# Patcher
# ---------------------------------------------------------------------------


class Patcher:
    """
    Applies patch targets to files under a project root.

    Usage::

        patcher = Patcher(Path("."))
        for target in default_patch_targets():
            result = patcher.patch(target, "Widget")

    With ``dry_run=True`` the new content is computed but never written.
    """

    def __init__(
        self,
        project_root: Path,
        *,
        api_prefix: str = "/api/v1",
        dry_run: bool = False,
    ) -> None:
        self._project_root: Path = project_root
        self._api_prefix: str = api_prefix
        self._dry_run: bool = dry_run

    def patch(
        self,
        target: PatchTarget,
        entity_name: str,
        context: Optional[Mapping[str, str]] = None,
    ) -> PatchResult:
        """
        Register *entity_name* in *target*.

        Raises:
            OSError: If the file exists but cannot be read or written.
        """
        if context is None:
            context = entity_context(entity_name, self._api_prefix)
        path: Path = self._project_root / target.file_path

        if not path.is_file():
            message: str = f"Shared file not found: {target.file_path}"
            logger.warning(message)
            return PatchResult(
                target_name=target.name,
                file_path=target.file_path,
                applied=False,
                warnings=(message,),
            )

        content: str = read_file(path)
        marker: str = substitute(target.existence_marker, context)

        if marker in content:
            logger.info(
                "%s already registered in %s; leaving it untouched.",
                entity_name,
                target.file_path,
            )
            return PatchResult(target_name=target.name, file_path=target.file_path)

        patched, applied, warnings = apply_insertions(content, target.insertions, context)
        for warning in warnings:
            logger.warning("%s: %s", target.file_path, warning)

        if patched != content and not self._dry_run:
            write_file(path, patched)

        logger.info(
            "Patched %s for %s: %d/%d insertion(s)%s.",
            target.file_path,
            entity_name,
            applied,
            len(target.insertions),
            " (dry run)" if self._dry_run else "",
        )
        return PatchResult(
            target_name=target.name,
            file_path=target.file_path,
            applied=applied > 0,
            insertions_applied=applied,
            warnings=tuple(warnings),
        )


__all__: List[str] = [
    "SECTION_BEGIN",
    "SECTION_END",
    "default_patch_targets",
    "entity_context",
    "find_section",
    "snippet_present",
    "insert_into_section",
    "insert_before_anchor",
    "apply_insertions",
    "Patcher",
]
