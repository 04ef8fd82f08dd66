"""Scan a source document for version-tagged code blocks and text sections."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Sequence

from templar.config import CODE_FENCE, TEMPLAR_SECTION_SIGIL
from templar.exceptions import MalformedSourceError
from templar.schemas import CodeBlock, TextSection

logger = logging.getLogger(__name__)

_OPENER_RE = re.compile(r"^\s*```\s*\{")
_QUOTED_NAME_RE = re.compile(r"""(["'])([^\W_]+)\1""")
_VERSION_KEY = "version"
_SECTION_DECLARATION = "version:"
_CLOSING = {"(": ")", "[": "]", "{": "}"}


def scan_blocks(
    lines: Sequence[str], *, sigil: str = TEMPLAR_SECTION_SIGIL
) -> tuple[list[CodeBlock], list[TextSection]]:
    """Find every code block and text section in ``lines``.

    Args:
        lines: The whole source document, one entry per line.
        sigil: Marker line that wraps text sections.

    Returns:
        Tuple of (code blocks, text sections), each in source order.

    Raises:
        MalformedSourceError: If fences or section markers are unbalanced.
    """
    code_blocks = scan_code_blocks(lines)
    text_sections = scan_text_sections(lines, sigil=sigil)
    logger.debug(
        "Found %d code blocks and %d text sections", len(code_blocks), len(text_sections)
    )
    return code_blocks, text_sections


def scan_code_blocks(lines: Sequence[str]) -> list[CodeBlock]:
    """Find fenced code blocks whose opener carries a ``{...}`` option list.

    Plain fences (no option list) are skipped over so their contents are
    never mistaken for block delimiters. A plain fence closes on a bare run
    of at least as many backticks as opened it.

    Raises:
        MalformedSourceError: If a code block opens inside another one, or a
            fence is still open at the end of the document.
    """
    blocks: list[CodeBlock] = []
    open_start: int | None = None
    plain_start: int | None = None
    plain_run = 0

    for number, line in enumerate(lines, start=1):
        stripped = line.strip()

        if plain_start is not None:
            if _is_fence_close(stripped, plain_run):
                plain_start = None
            continue

        if open_start is not None:
            if stripped == CODE_FENCE:
                blocks.append(_make_code_block(lines[open_start - 1], open_start, number))
                open_start = None
            elif _OPENER_RE.match(line):
                raise MalformedSourceError(
                    f"code block opened inside the block starting at line {open_start}",
                    line=number,
                )
            continue

        if _OPENER_RE.match(line):
            open_start = number
        elif stripped.startswith(CODE_FENCE):
            plain_start = number
            plain_run = len(stripped) - len(stripped.lstrip("`"))

    if open_start is not None:
        raise MalformedSourceError("code block is never closed", line=open_start)
    if plain_start is not None:
        raise MalformedSourceError("code fence is never closed", line=plain_start)

    return blocks


def scan_text_sections(
    lines: Sequence[str], *, sigil: str = TEMPLAR_SECTION_SIGIL
) -> list[TextSection]:
    """Pair sigil lines left to right into text sections.

    Raises:
        MalformedSourceError: If the number of sigil lines is odd.
    """
    markers = [number for number, line in enumerate(lines, start=1) if line.strip() == sigil]
    if len(markers) % 2:
        raise MalformedSourceError(f"unpaired section marker {sigil!r}", line=markers[-1])

    sections: list[TextSection] = []
    for start, end in zip(markers[::2], markers[1::2]):
        # lines[start] is the line right after the opening marker
        declaration = lines[start] if start + 1 < end else ""
        versions = parse_section_versions(declaration)
        if versions is None:
            sections.append(TextSection(start=start, end=end))
            continue
        if not versions:
            logger.warning(
                "Text section at line %d declares no version names; "
                "it will be dropped from every variant",
                start,
            )
        sections.append(
            TextSection(start=start, end=end, is_versioned=True, raw_tag=versions)
        )
    return sections


def parse_chunk_options(header: str) -> dict[str, str]:
    """Parse ``key = value`` options from a code block opener line.

    Segments without ``=`` (the engine name, a chunk label) are ignored.
    Commas inside quotes or brackets do not split options.
    """
    body = _extract_option_body(header)
    options: dict[str, str] = {}
    for segment in _split_top_level(body):
        key, sep, value = segment.partition("=")
        if not sep:
            continue
        options[key.strip()] = value.strip()
    return options


def parse_chunk_versions(header: str) -> list[str] | None:
    """Extract version names from a code block opener.

    Returns:
        None if the opener has no ``version`` option, otherwise every quoted
        alphanumeric name in its value (possibly an empty list).
    """
    options = parse_chunk_options(header)
    if _VERSION_KEY not in options:
        return None
    return _unique(match.group(2) for match in _QUOTED_NAME_RE.finditer(options[_VERSION_KEY]))


def parse_section_versions(line: str) -> list[str] | None:
    """Extract version names from a ``version: A, B`` declaration line.

    Returns:
        None if the line has no declaration, otherwise the trimmed,
        comma-separated names after it.
    """
    _, found, rest = line.partition(_SECTION_DECLARATION)
    if not found:
        return None
    return _unique(piece.strip() for piece in rest.split(",") if piece.strip())


def _is_fence_close(stripped: str, run: int) -> bool:
    return len(stripped) >= run and not stripped.strip("`")


def _make_code_block(header: str, start: int, end: int) -> CodeBlock:
    versions = parse_chunk_versions(header)
    if versions is None:
        return CodeBlock(start=start, end=end)
    if not versions:
        logger.warning(
            "Code block at line %d has a version option without quoted names; "
            "it will be dropped from every variant",
            start,
        )
    return CodeBlock(start=start, end=end, is_versioned=True, raw_tag=versions)


def _extract_option_body(header: str) -> str:
    """Return the text inside the outermost braces of an opener line.

    An unterminated option list runs to the end of the line.
    """
    open_pos = header.find("{")
    if open_pos < 0:
        return ""

    depth = 0
    quote: str | None = None
    for i in range(open_pos, len(header)):
        char = header[i]
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return header[open_pos + 1 : i]
    return header[open_pos + 1 :]


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are outside quotes and brackets."""
    segments: list[str] = []
    stack: list[str] = []
    quote: str | None = None
    current: list[str] = []

    for char in text:
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char in _CLOSING:
            stack.append(_CLOSING[char])
        elif stack and char == stack[-1]:
            stack.pop()
        elif char == "," and not stack:
            segments.append("".join(current))
            current = []
            continue
        current.append(char)

    segments.append("".join(current))
    return [segment.strip() for segment in segments if segment.strip()]


def _unique(names: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for name in names:
        seen.setdefault(name, None)
    return list(seen)
