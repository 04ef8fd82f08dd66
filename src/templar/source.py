"""Read, prepare, and write source documents and their derived variants."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

# Lines that invoke the generator itself; derived documents must not re-run it.
DIRECTIVE_PATTERN = re.compile(r"versions\([^)]*\)")

_FRONT_MATTER_DELIMITER = "---"


def read_source_lines(path: Path, encoding: str = "utf-8") -> list[str]:
    """Read a document as a list of lines without line terminators."""
    return path.read_text(encoding=encoding).splitlines()


def write_lines(path: Path, lines: Sequence[str], encoding: str = "utf-8") -> None:
    """Write ``lines`` to ``path``, each terminated by a newline."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{line}\n" for line in lines), encoding=encoding)


def strip_directive_lines(
    lines: Sequence[str], pattern: re.Pattern[str] = DIRECTIVE_PATTERN
) -> list[str]:
    """Drop every line matching ``pattern``."""
    kept = [line for line in lines if not pattern.search(line)]
    dropped = len(lines) - len(kept)
    if dropped:
        logger.debug("Dropped %d directive line(s)", dropped)
    return kept


def warning_header(source_name: str) -> list[str]:
    return [
        f"# Warning:  File created automatically from {source_name}",
        "# Do NOT edit this file directly, as it may be overwritten.",
    ]


def insert_warning_header(lines: Sequence[str], source_name: str) -> list[str]:
    """Insert a "generated file" warning at the end of the YAML front matter.

    The warning lines are YAML comments placed just before the closing
    ``---``. Documents without front matter are returned unchanged.
    """
    result = list(lines)
    closing = _front_matter_end(result)
    if closing is None:
        logger.debug("No front matter in %s; skipping warning header", source_name)
        return result
    result[closing:closing] = warning_header(source_name)
    return result


def prepare_source(
    lines: Sequence[str],
    source_name: str,
    *,
    strip_directives: bool = True,
    add_header: bool = True,
) -> list[str]:
    """Apply directive removal and the warning header before scanning."""
    prepared = list(lines)
    if strip_directives:
        prepared = strip_directive_lines(prepared)
    if add_header:
        prepared = insert_warning_header(prepared, source_name)
    return prepared


def derived_path(source: Path, version: str, output_dir: Path | None = None) -> Path:
    """Path for a variant: ``-{version}`` inserted before the extension.

    Examples:
        exam.Rmd -> exam-A.Rmd
        notes/lab.md, version "B-solution" -> notes/lab-B-solution.md
    """
    name = f"{source.stem}-{version}{source.suffix}"
    return (output_dir or source.parent) / name


def _front_matter_end(lines: Sequence[str]) -> int | None:
    if not lines or lines[0].strip() != _FRONT_MATTER_DELIMITER:
        return None
    for index in range(1, len(lines)):
        if lines[index].strip() == _FRONT_MATTER_DELIMITER:
            return index
    return None
