# File: crudgen/utils.py
"""
CrudGen - Utility Functions & Helpers
======================================
Entity-name transformations, file I/O and a profiling timer used
throughout the generation pipeline.

- Name conversions are ``lru_cache``-decorated; they are pure and called
  once per placeholder per artifact.
- ``write_file`` writes through a temporary file and renames it into place,
  so an interrupted run never leaves a half-written artifact behind.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import List, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudgen.utils")

_VOWELS: str = "aeiou"
_ES_SUFFIXES: Tuple[str, ...] = ("s", "x", "z", "ch", "sh")


# ---------------------------------------------------------------------------
# Cached name transformations
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_lower_camel(name: str) -> str:
    """
    Lower-case the first character and keep the rest untouched.

    Examples:
        >>> to_lower_camel("Widget")
        'widget'
        >>> to_lower_camel("OrderItem")
        'orderItem'
    """
    if not name:
        return ""
    return name[0].lower() + name[1:]


@functools.lru_cache(maxsize=None)
def to_plural(word: str) -> str:
    """
    Deterministic English pluralisation for URL segments.

    Examples:
        >>> to_plural("category")
        'categories'
        >>> to_plural("box")
        'boxes'
        >>> to_plural("day")
        'days'
        >>> to_plural("widget")
        'widgets'
    """
    if not word:
        return ""
    if word.endswith("y") and len(word) > 1 and word[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if word.endswith(_ES_SUFFIXES):
        return word + "es"
    return word + "s"


@functools.lru_cache(maxsize=None)
def to_upper_key(name: str) -> str:
    """Upper-case form used inside i18n message keys."""
    return name.upper()


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def read_file(path: Path) -> str:
    """Read a file and return its content as a string."""
    return path.read_text(encoding="utf-8")


def _current_umask() -> int:
    mask: int = os.umask(0)
    os.umask(mask)
    return mask


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*, replacing any existing file.

    Parent directories are created as needed.  When *atomic* is True the
    content goes to a temporary file in the same directory first and is
    then renamed over the target.  An existing target keeps its permission
    bits; a new file gets the default mode for the current umask.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")

    if atomic:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(encoded)
            if path.exists():
                shutil.copymode(str(path), tmp_path)
            else:
                os.chmod(tmp_path, 0o666 & ~_current_umask())
            os.replace(tmp_path, str(path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for profiling pipeline stages.

    Usage:
        with Timer("render artifacts") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.elapsed = time.perf_counter() - self.start_time
        logger.info("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "to_lower_camel",
    "to_plural",
    "to_upper_key",
    "ensure_directory",
    "read_file",
    "write_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]
