# File: crudgen/validators.py
"""
CrudGen - Validation-Rule Synthesizer
======================================
Derives the request-validation chains written into the generated
``<entity>Validator.ts`` file.

Each non-system field yields exactly one create rule and one update rule.
A rule is a chain of fragments, always in this order:

    1. presence   - ``.notEmpty()`` for required fields, else ``.optional()``
    2. type       - dispatched on the canonical scalar type (may be absent)
    3. length     - string fields only (may be absent)
    4. uniqueness - ``@unique`` fields only (may be absent)

Update rules are always optional (partial update), and their uniqueness
check ignores the record addressed by the ``:id`` path parameter.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from crudgen.models import (
    DEFAULT_STRING_MAX_LENGTH,
    SYSTEM_FIELDS,
    FieldDescriptor,
    ModelDefinition,
    ScalarType,
    ValidationRuleSet,
)
from crudgen.typemap import scalar_type
from crudgen.utils import to_lower_camel, to_upper_key

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudgen.validators")

# ---------------------------------------------------------------------------
# Fragment tables
# ---------------------------------------------------------------------------

_FRAGMENT_SEPARATOR: str = "\n          "

_TYPE_CHECKS: Dict[ScalarType, str] = {
    ScalarType.STRING: ".isString().withMessage(i18n.__('validator.MUST_BE_A_STRING'))",
    ScalarType.INT: ".toInt().isInt().withMessage(i18n.__('validator.MUST_BE_A_VALID_INTEGER'))",
    ScalarType.FLOAT: ".isFloat().withMessage(i18n.__('validator.MUST_BE_A_VALID_FLOAT'))",
    ScalarType.BOOLEAN: ".isBoolean().withMessage(i18n.__('validator.MUST_BE_A_BOOLEAN'))",
}

_CREATE_UNIQUE_TEMPLATE: str = """.custom(async ({field}) => {{
              const {var} = await prisma.{delegate}.findUnique({{
                  where: {{ {field} }},
              }});
              if ({var}) {{
                  throw new Error(i18n.__('{key}'));
              }}
              return true;
          }})"""

_UPDATE_UNIQUE_TEMPLATE: str = """.custom(async ({field}, {{ req }}) => {{
              const {{ id }}: any = req.params;
              const {var} = await prisma.{delegate}.findUnique({{
                  where: {{ {field} }},
              }});
              if ({var} && {var}.id !== Number(id)) {{
                  throw new Error(i18n.__('{key}'));
              }}
              return true;
          }})"""


# ---------------------------------------------------------------------------
# Fragment builders
# ---------------------------------------------------------------------------


def _message_key(entity_name: str, field_name: str, suffix: str) -> str:
    return f"validator.{to_upper_key(entity_name)}_{to_upper_key(field_name)}_{suffix}"


def presence_fragment(entity_name: str, field: FieldDescriptor, *, force_optional: bool) -> str:
    if force_optional or field.is_optional:
        return ".optional()"
    key: str = _message_key(entity_name, field.name, "IS_REQUIRED")
    return f".notEmpty().withMessage(i18n.__('{key}'))"


def type_fragment(field: FieldDescriptor) -> str:
    """Type check for scalar fields; lists and unrecognised types get none."""
    if field.is_array:
        return ""
    tag: Optional[ScalarType] = scalar_type(field.raw_type)
    if tag is None:
        return ""
    return _TYPE_CHECKS.get(tag, "")


def length_fragment(entity_name: str, field: FieldDescriptor, max_length: int) -> str:
    if field.is_array or scalar_type(field.raw_type) is not ScalarType.STRING:
        return ""
    key: str = _message_key(
        entity_name, field.name, f"MUST_BE_LESS_THAN_{max_length + 1}_CHARACTERS"
    )
    return f".isLength({{ max: {max_length} }}).withMessage(i18n.__('{key}'))"


def unique_fragment(entity_name: str, field: FieldDescriptor, *, for_update: bool) -> str:
    if not field.is_unique:
        return ""
    delegate: str = to_lower_camel(entity_name)
    template: str = _UPDATE_UNIQUE_TEMPLATE if for_update else _CREATE_UNIQUE_TEMPLATE
    return template.format(
        field=field.name,
        var=delegate,
        delegate=delegate,
        key=_message_key(entity_name, field.name, "MUST_BE_UNIQUE"),
    )


def build_rule(
    entity_name: str,
    field: FieldDescriptor,
    *,
    for_update: bool,
    max_length: int = DEFAULT_STRING_MAX_LENGTH,
) -> str:
    """Assemble one ``body('<field>')`` chain, dropping empty fragments."""
    fragments: List[str] = [
        f"body('{field.name}')",
        presence_fragment(entity_name, field, force_optional=for_update),
        type_fragment(field),
        length_fragment(entity_name, field, max_length),
        unique_fragment(entity_name, field, for_update=for_update),
    ]
    return _FRAGMENT_SEPARATOR.join(fragment for fragment in fragments if fragment)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def synthesize_rules(
    model: ModelDefinition,
    *,
    max_length: int = DEFAULT_STRING_MAX_LENGTH,
    system_fields: Tuple[str, ...] = SYSTEM_FIELDS,
) -> ValidationRuleSet:
    """
    Build the create and update rule lists for *model*.

    System fields are excluded; every other field contributes exactly one
    rule to each list, in source order.
    """
    create_rules: List[str] = []
    update_rules: List[str] = []

    for field in model.editable_fields(system_fields):
        create_rules.append(
            build_rule(model.entity_name, field, for_update=False, max_length=max_length)
        )
        update_rules.append(
            build_rule(model.entity_name, field, for_update=True, max_length=max_length)
        )

    logger.debug(
        "Synthesised %d validation rule pair(s) for %s.",
        len(create_rules),
        model.entity_name,
    )
    return ValidationRuleSet(create_rules=tuple(create_rules), update_rules=tuple(update_rules))


__all__: List[str] = [
    "presence_fragment",
    "type_fragment",
    "length_fragment",
    "unique_fragment",
    "build_rule",
    "synthesize_rules",
]
