# File: schemaforge/utils.py
"""
SchemaForge - Utility Functions & Helpers
==========================================
T-SQL text helpers, artifact I/O and timing utilities shared by the
generator, the exporter and the CLI.

- Identifier / literal quoting helpers are pure and cached where they are
  called once per column.
- Artifacts are written as UTF-8 with the ``\\n`` line endings the renderers
  produce; ``artifact_stats`` describes exactly those bytes, so manifest
  checksums match the files on disk.
"""

from __future__ import annotations

import contextlib
import functools
import hashlib
import logging
import os
import re
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemaforge.utils")

# An acronym run before a capitalised word, a (capitalised) lowercase word, a
# bare acronym, or digits.  Digits stay attached to the word they follow.
_STEM_WORD_RE: re.Pattern[str] = re.compile(
    r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+[0-9]*|[A-Z]+[0-9]*|[0-9]+"
)


@functools.lru_cache(maxsize=None)
def file_stem(name: str) -> str:
    """
    Lower-case, underscore-joined file stem for a project name.

    Examples:
        >>> file_stem("Online Shop")
        'online_shop'
        >>> file_stem("HRSystem v2")
        'hr_system_v2'
        >>> file_stem("!!!")
        ''
    """
    return "_".join(word.lower() for word in _STEM_WORD_RE.findall(name))


# ---------------------------------------------------------------------------
# T-SQL text helpers
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def quote_identifier(name: str) -> str:
    """``Order Items`` → ``[Order Items]``; closing brackets are doubled."""
    return "[" + name.replace("]", "]]") + "]"


def qualify_name(name: str, schema_name: Optional[str] = None) -> str:
    """``[schema].[name]`` when *schema_name* is given, else ``[name]``."""
    if schema_name:
        return f"{quote_identifier(schema_name)}.{quote_identifier(name)}"
    return quote_identifier(name)


def sql_string_literal(value: str) -> str:
    """Single-quoted T-SQL string literal with embedded quotes doubled."""
    return "'" + value.replace("'", "''") + "'"


def sql_line_comment(text: str) -> str:
    """Collapse *text* onto one line so it is safe after ``--``."""
    return " ".join(text.split())


def sql_block_comment(text: str) -> str:
    """Neutralise ``*/`` so *text* can sit inside a ``/* */`` block."""
    return text.replace("*/", "* /")


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 4) -> List[str]:
    """Indent a list of lines, returning a new list. O(n)."""
    prefix: str = " " * (level * size)
    return [prefix + line if line.strip() else line for line in lines]


# ---------------------------------------------------------------------------
# Artifact I/O
# ---------------------------------------------------------------------------


class ArtifactStats(NamedTuple):
    size_bytes: int
    line_count: int
    sha256: str


def artifact_stats(content: str) -> ArtifactStats:
    """Size, line count and SHA-256 digest of *content* encoded as UTF-8."""
    encoded: bytes = content.encode("utf-8")
    return ArtifactStats(
        size_bytes=len(encoded),
        line_count=len(content.splitlines()),
        sha256=hashlib.sha256(encoded).hexdigest(),
    )


def write_artifact(path: Path, content: str, atomic: bool = True) -> None:
    """
    Write *content* to *path*, creating missing parent directories.

    Line endings are written untranslated.  With *atomic*, the text goes to
    a hidden sibling file that then replaces *path*; on failure the sibling
    is removed and the error propagates.

    Raises:
        OSError: If the directory cannot be created or the file written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    if not atomic:
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        logger.debug("Wrote %s.", path)
        return

    staging = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".part",
        delete=False,
    )
    try:
        with staging:
            staging.write(content)
        os.replace(staging.name, path)
    except OSError:
        Path(staging.name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %s via %s.", path, Path(staging.name).name)


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------


@dataclass
class Elapsed:
    """Wall-clock duration of one ``timed`` block; ``seconds`` is set on exit."""

    label: str
    seconds: float = 0.0


@contextlib.contextmanager
def timed(label: str) -> Iterator[Elapsed]:
    """
    Measure the body of a ``with`` block.

    Usage:
        with timed("export") as elapsed:
            ...
        elapsed.seconds
    """
    elapsed: Elapsed = Elapsed(label)
    started: float = time.perf_counter()
    try:
        yield elapsed
    finally:
        elapsed.seconds = time.perf_counter() - started
        logger.debug("%s took %.4fs.", label, elapsed.seconds)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "file_stem",
    "quote_identifier",
    "qualify_name",
    "sql_string_literal",
    "sql_line_comment",
    "sql_block_comment",
    "indent_lines",
    "ArtifactStats",
    "artifact_stats",
    "write_artifact",
    "Elapsed",
    "timed",
]

logger.debug("schemaforge.utils loaded — %d public symbols.", len(__all__))
