# File: crudgen/errors.py
"""
CrudGen - Exception hierarchy.

Only conditions that stop a stage are exceptions.  Skipped schema lines and
missing patch anchors are reported as warnings instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union


class CrudGenError(Exception):
    """Base class for every error raised by crudgen."""


class ConfigError(CrudGenError):
    """The configuration file could not be loaded or validated."""


class SchemaReadError(CrudGenError):
    """The schema-definition file is missing or unreadable."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path: str = str(path)
        self.reason: str = reason
        super().__init__(f"Cannot read schema file {self.path}: {reason}")


class EntityNotFoundError(CrudGenError):
    """No ``model <name> { ... }`` block exists for the requested entity."""

    def __init__(self, entity_name: str) -> None:
        self.entity_name: str = entity_name
        super().__init__(f"Model {entity_name} not found in schema")


class TemplateReadError(CrudGenError):
    """A template file for an artifact kind is missing or unreadable."""

    def __init__(self, kind: str, path: Union[str, Path], reason: str = "") -> None:
        self.kind: str = kind
        self.path: str = str(path)
        message: str = f"Cannot read template for '{kind}' at {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


__all__: List[str] = [
    "CrudGenError",
    "ConfigError",
    "SchemaReadError",
    "EntityNotFoundError",
    "TemplateReadError",
]
