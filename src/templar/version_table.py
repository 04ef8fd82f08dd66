"""Build the block-by-version membership table."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from templar.config import NONE_VERSION
from templar.schemas import Block, CodeBlock, MembershipRow, MembershipTable, TextSection

logger = logging.getLogger(__name__)


def discover_versions(blocks: Iterable[Block]) -> list[str]:
    """Collect distinct version names from block tags, in first-seen order."""
    seen: dict[str, None] = {}
    for block in blocks:
        for name in block.raw_tag:
            seen.setdefault(name, None)
    return list(seen)


def block_memberships(block: Block, versions: Sequence[str]) -> dict[str, bool]:
    """Map every version name to whether ``block`` belongs to it.

    Untagged blocks belong to every version. A tag containing ``"none"``
    excludes the block from every version, whatever else the tag lists.
    """
    if not block.is_versioned:
        return {version: True for version in versions}
    if NONE_VERSION in block.raw_tag:
        return {version: False for version in versions}
    tag = set(block.raw_tag)
    return {version: version in tag for version in versions}


def build_membership_table(
    code_blocks: Sequence[CodeBlock],
    text_sections: Sequence[TextSection],
) -> MembershipTable:
    """Combine code blocks and text sections into one membership table.

    Args:
        code_blocks: Code block descriptors from the scanner.
        text_sections: Text section descriptors from the scanner.

    Returns:
        Table with one row per block, ordered by position in the source.
    """
    blocks: list[Block] = sorted(
        [*code_blocks, *text_sections], key=lambda block: (block.start, block.end)
    )
    versions = discover_versions(blocks)
    rows = [
        MembershipRow(block=block, memberships=block_memberships(block, versions))
        for block in blocks
    ]
    logger.debug("Discovered versions %s across %d blocks", versions, len(rows))
    return MembershipTable(versions=versions, rows=rows)
