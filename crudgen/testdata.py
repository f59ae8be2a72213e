# File: crudgen/testdata.py
"""
CrudGen - Test-Data Synthesizer.

Produces the literal payload entries (``field: value``) substituted into the
three generated test tiers.  Literals come from a fixed table keyed by the
canonical scalar type; anything else uses the generic fallback row.
"""

from __future__ import annotations

import logging
from typing import Dict, List, NamedTuple, Optional, Tuple

from crudgen.models import SYSTEM_FIELDS, ModelDefinition, ScalarType, TestDataSet
from crudgen.typemap import scalar_type, to_expect_matcher

logger: logging.Logger = logging.getLogger("crudgen.testdata")

DEFAULT_FILTER_PARAM: str = "id=1"
ENTRY_SEPARATOR: str = ",\n" + " " * 16


class Literals(NamedTuple):
    create: str
    update: str
    invalid: str


_ISO_NOW: str = "new Date().toISOString()"

_LITERALS: Dict[ScalarType, Literals] = {
    ScalarType.INT: Literals("1", "2", "'not a number'"),
    ScalarType.FLOAT: Literals("10.5", "20.5", "'not a float'"),
    ScalarType.BOOLEAN: Literals("true", "false", "'not a boolean'"),
    ScalarType.DATETIME: Literals(_ISO_NOW, _ISO_NOW, "'invalid date'"),
}

_FALLBACK: Literals = Literals("'test value'", "'updated value'", "123")


def literals_for(field_name: str, raw_type: str, is_array: bool = False) -> Literals:
    """Create/update/invalid literals for one field; lists use the fallback row."""
    if is_array:
        return _FALLBACK
    tag: Optional[ScalarType] = scalar_type(raw_type)
    if tag is ScalarType.STRING:
        return Literals(
            f"`Test {field_name} ${{Date.now()}}`",
            f"`Updated {field_name} ${{Date.now()}}`",
            "12345",
        )
    if tag is None:
        return _FALLBACK
    return _LITERALS.get(tag, _FALLBACK)


def synthesize_test_data(
    model: ModelDefinition,
    *,
    optional_cap: int = 2,
    invalid_cap: int = 2,
    system_fields: Tuple[str, ...] = SYSTEM_FIELDS,
) -> TestDataSet:
    """
    Build the test payloads for *model*.

    - create: every required field; an optional field only while the
      payload holds fewer than *optional_cap* entries
    - update: every non-system field
    - partial update: the first non-system field only
    - invalid: the first *invalid_cap* fields with mismatched literals
    - filter: ``<first string field>=test``, else ``id=1``
    """
    create_data: List[str] = []
    create_expectation: List[str] = []
    update_data: List[str] = []
    update_expectation: List[str] = []
    partial_update_data: List[str] = []
    invalid_data: List[str] = []
    filter_param: Optional[str] = None

    for field in model.editable_fields(system_fields):
        literals: Literals = literals_for(field.name, field.raw_type, field.is_array)
        matcher: str = f"{field.name}: expect.any({to_expect_matcher(field.raw_type)})"

        if (
            filter_param is None
            and not field.is_array
            and scalar_type(field.raw_type) is ScalarType.STRING
        ):
            filter_param = f"{field.name}=test"

        if not field.is_optional or len(create_data) < optional_cap:
            create_data.append(f"{field.name}: {literals.create}")
            create_expectation.append(matcher)

        update_data.append(f"{field.name}: {literals.update}")
        update_expectation.append(matcher)

        if not partial_update_data:
            partial_update_data.append(f"{field.name}: {literals.update}")

        if len(invalid_data) < invalid_cap:
            invalid_data.append(f"{field.name}: {literals.invalid}")

    data: TestDataSet = TestDataSet(
        create_data=tuple(create_data),
        create_expectation=tuple(create_expectation),
        update_data=tuple(update_data),
        update_expectation=tuple(update_expectation),
        partial_update_data=tuple(partial_update_data),
        invalid_data=tuple(invalid_data),
        filter_param=filter_param or DEFAULT_FILTER_PARAM,
    )
    logger.debug(
        "Test data for %s: %d create, %d update entries, filter %s.",
        model.entity_name,
        len(create_data),
        len(update_data),
        data.filter_param,
    )
    return data


def data_placeholders(data: TestDataSet) -> Dict[str, str]:
    """Placeholder values for the test templates."""
    return {
        "testCreateData": ENTRY_SEPARATOR.join(data.create_data),
        "testCreateExpectation": ENTRY_SEPARATOR.join(data.create_expectation),
        "testUpdateData": ENTRY_SEPARATOR.join(data.update_data),
        "testUpdateExpectation": ENTRY_SEPARATOR.join(data.update_expectation),
        "testPartialUpdateData": ENTRY_SEPARATOR.join(data.partial_update_data),
        "testInvalidData": ENTRY_SEPARATOR.join(data.invalid_data),
        "testFilterParam": data.filter_param,
    }


__all__: List[str] = [
    "Literals",
    "DEFAULT_FILTER_PARAM",
    "ENTRY_SEPARATOR",
    "literals_for",
    "synthesize_test_data",
    "data_placeholders",
]
