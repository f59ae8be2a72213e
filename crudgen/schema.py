# File: crudgen/schema.py
"""
CrudGen - Schema Reader & Model Extractor
==========================================
Loads a schema-definition file wholesale and decomposes one entity block
into an ordered list of ``FieldDescriptor`` objects.

Block grammar (one field per line, ``;`` also separates fields)::

    model Widget {
      id        Int       @id @default(autoincrement())
      name      String    @unique
      tags      String[]
      deletedAt DateTime?
      // relation starts
      owner     User      @relation(fields: [ownerId], references: [id])
    }

Everything after a comment containing "relation starts" is a relation or
foreign-key field and is not extracted.  Lines with fewer than two tokens
are skipped and reported in ``ModelDefinition.warnings``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, List, Optional, Pattern, Tuple

from crudgen.errors import EntityNotFoundError, SchemaReadError
from crudgen.models import OPTIONAL_SYSTEM_FIELDS, FieldDescriptor, ModelDefinition

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudgen.schema")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_COMMENT_PREFIX: str = "//"
_BLOCK_ATTRIBUTE_PREFIX: str = "@@"
_RELATION_MARKER: str = "relation starts"
_UNIQUE_ATTRIBUTE: str = "@unique"
_OPTIONAL_MARKER: str = "?"
_ARRAY_MARKER: str = "[]"
_WHITESPACE_RE: Pattern[str] = re.compile(r"\s+")
# ";" followed by an even number of double quotes lies outside any string.
_SEPARATOR_RE: Pattern[str] = re.compile(r';(?=(?:[^"]*"[^"]*")*[^"]*$)')


# ---------------------------------------------------------------------------
# Schema reader
# ---------------------------------------------------------------------------


def read_schema(path: Path) -> str:
    """
    Load the whole schema file into memory.

    Raises:
        SchemaReadError: If the file is missing, not a file, or not UTF-8.
    """
    if not path.exists():
        raise SchemaReadError(path, "file not found")
    if not path.is_file():
        raise SchemaReadError(path, "not a file")
    try:
        text: str = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SchemaReadError(path, str(exc)) from exc

    logger.info("Loaded schema file %s (%d bytes).", path, len(text))
    return text


# ---------------------------------------------------------------------------
# Model extractor
# ---------------------------------------------------------------------------


def _block_pattern(entity_name: str) -> Pattern[str]:
    return re.compile(
        r"^[ \t]*model[ \t]+" + re.escape(entity_name) + r"[ \t]*\{(.*?)\}",
        re.MULTILINE | re.DOTALL,
    )


def find_model_block(schema_text: str, entity_name: str) -> str:
    """
    Return the body of the first ``model <entity_name> { ... }`` block.

    The name match is exact and case-sensitive.

    Raises:
        EntityNotFoundError: If no such block exists.
    """
    match: Optional[re.Match[str]] = _block_pattern(entity_name).search(schema_text)
    if match is None:
        raise EntityNotFoundError(entity_name)
    return match.group(1)


def _iter_body_lines(body: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, stripped_line)`` for each logical line of a block."""
    for number, physical in enumerate(body.split("\n"), start=1):
        stripped: str = physical.strip()
        if stripped.startswith(_COMMENT_PREFIX):
            yield number, stripped
            continue
        for part in _SEPARATOR_RE.split(stripped):
            yield number, part.strip()


def parse_field_line(
    line: str,
    optional_system_fields: Tuple[str, ...] = OPTIONAL_SYSTEM_FIELDS,
) -> Optional[FieldDescriptor]:
    """
    Parse one field declaration, or return ``None`` for a malformed line.

    Examples:
        >>> parse_field_line("name String @unique").is_unique
        True
        >>> parse_field_line("orphan") is None
        True
    """
    tokens: List[str] = _WHITESPACE_RE.split(line.strip())
    if len(tokens) < 2 or not tokens[0] or not tokens[1]:
        return None

    name, type_token, attributes = tokens[0], tokens[1], tokens[2:]
    raw_type: str = type_token.replace(_OPTIONAL_MARKER, "").replace(_ARRAY_MARKER, "")
    if not raw_type:
        return None

    return FieldDescriptor(
        name=name,
        raw_type=raw_type,
        is_optional=(
            type_token.endswith(_OPTIONAL_MARKER) or name in optional_system_fields
        ),
        is_array=_ARRAY_MARKER in type_token,
        is_unique=_UNIQUE_ATTRIBUTE in attributes,
    )


def extract_model(
    schema_text: str,
    entity_name: str,
    *,
    optional_system_fields: Tuple[str, ...] = OPTIONAL_SYSTEM_FIELDS,
) -> ModelDefinition:
    """
    Decompose the block of *entity_name* into a ``ModelDefinition``.

    Args:
        schema_text: Full schema-definition text.
        entity_name: Exact, case-sensitive entity name.
        optional_system_fields: Field names always treated as optional.

    Returns:
        ModelDefinition with fields in source order.

    Raises:
        EntityNotFoundError: If the entity has no block in *schema_text*.
    """
    body: str = find_model_block(schema_text, entity_name)

    fields: List[FieldDescriptor] = []
    warnings: List[str] = []

    for number, line in _iter_body_lines(body):
        if not line:
            continue

        if line.startswith(_COMMENT_PREFIX):
            if _RELATION_MARKER in line.lower():
                logger.debug(
                    "Relation marker in model %s at line %d; ignoring the rest.",
                    entity_name,
                    number,
                )
                break
            continue

        if line.startswith(_BLOCK_ATTRIBUTE_PREFIX):
            logger.debug("Skipping block attribute in model %s: %s", entity_name, line)
            continue

        descriptor: Optional[FieldDescriptor] = parse_field_line(
            line, optional_system_fields
        )
        if descriptor is None:
            message: str = (
                f"Skipped malformed line {number} in model {entity_name}: {line!r}"
            )
            warnings.append(message)
            logger.warning(message)
            continue

        fields.append(descriptor)

    logger.info(
        "Extracted %d field(s) from model %s (%d skipped line(s)).",
        len(fields),
        entity_name,
        len(warnings),
    )
    return ModelDefinition(
        entity_name=entity_name,
        fields=tuple(fields),
        warnings=tuple(warnings),
    )


__all__: List[str] = [
    "read_schema",
    "find_model_block",
    "parse_field_line",
    "extract_model",
]
