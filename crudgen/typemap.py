# File: crudgen/typemap.py
"""
CrudGen - Type Mapper
======================
Maps schema-language primitive names onto the names used by each output
format.

A single table keyed by the canonical ``ScalarType`` holds every rendering,
so the target-language type, the documentation type and the test matcher of
a primitive are always declared together.  Type names that are not
primitives (enums, custom types) resolve to ``None`` and fall back per
renderer:

    =================  ====================  ==================
    renderer           unmapped name          array form
    =================  ====================  ==================
    to_output_type     passed through         ``<type>[]``
    to_doc_type        ``string``             ``array[<type>]``
    to_expect_matcher  ``String``             n/a
    =================  ====================  ==================
"""

from __future__ import annotations

import functools
import logging
from typing import Dict, List, NamedTuple, Optional

from crudgen.models import ScalarType

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudgen.typemap")


class TypeRendering(NamedTuple):
    output: str
    doc: Optional[str]
    matcher: str


# ---------------------------------------------------------------------------
# Canonical rendering table
# ---------------------------------------------------------------------------

# doc=None means the documentation format has no dedicated type and the
# generic "string" fallback applies.
_RENDERINGS: Dict[ScalarType, TypeRendering] = {
    ScalarType.STRING: TypeRendering("string", "string", "String"),
    ScalarType.INT: TypeRendering("number", "integer", "Number"),
    ScalarType.FLOAT: TypeRendering("number", "number", "Number"),
    ScalarType.BOOLEAN: TypeRendering("boolean", "boolean", "Boolean"),
    ScalarType.DATETIME: TypeRendering("Date", "string", "String"),
    ScalarType.DECIMAL: TypeRendering("number", None, "String"),
    ScalarType.BIGINT: TypeRendering("bigint", None, "String"),
    ScalarType.JSON: TypeRendering("any", None, "String"),
    ScalarType.BYTES: TypeRendering("Buffer", None, "String"),
}

_GENERIC_DOC_TYPE: str = "string"
_GENERIC_MATCHER: str = "String"


@functools.lru_cache(maxsize=None)
def scalar_type(raw_type: str) -> Optional[ScalarType]:
    """
    Resolve a raw schema type name to its canonical tag.

    Markers (``?``, ``[]``) are ignored.  Returns ``None`` for names that
    are not primitives of the schema language.

    Examples:
        >>> scalar_type("Int")
        <ScalarType.INT: 'Int'>
        >>> scalar_type("Role") is None
        True
    """
    base: str = raw_type.replace("?", "").replace("[]", "")
    try:
        return ScalarType(base)
    except ValueError:
        return None


def to_output_type(raw_type: str, is_array: bool = False) -> str:
    """Target-language type for a field, e.g. ``number`` or ``string[]``."""
    tag: Optional[ScalarType] = scalar_type(raw_type)
    if tag is None:
        base: str = raw_type.replace("?", "").replace("[]", "")
        logger.debug("Type '%s' is not a primitive; passing it through.", base)
    else:
        base = _RENDERINGS[tag].output
    return f"{base}[]" if is_array else base


def to_doc_type(raw_type: str, is_array: bool = False) -> str:
    """API-documentation type for a field, e.g. ``integer`` or ``array[string]``."""
    tag: Optional[ScalarType] = scalar_type(raw_type)
    doc: Optional[str] = _RENDERINGS[tag].doc if tag is not None else None
    base: str = doc or _GENERIC_DOC_TYPE
    return f"array[{base}]" if is_array else base


def to_expect_matcher(raw_type: str) -> str:
    """Constructor name used in ``expect.any(...)`` test assertions."""
    tag: Optional[ScalarType] = scalar_type(raw_type)
    if tag is None:
        return _GENERIC_MATCHER
    return _RENDERINGS[tag].matcher


__all__: List[str] = [
    "TypeRendering",
    "scalar_type",
    "to_output_type",
    "to_doc_type",
    "to_expect_matcher",
]
