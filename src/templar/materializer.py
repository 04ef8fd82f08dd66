"""Materialize per-version variants from a membership table."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from templar.config import NONE_VERSION, SOLUTION_VERSION
from templar.exceptions import ReservedVersionError, UnknownVersionError
from templar.schemas import MaterializedVariant, MembershipTable, VariantPlan

logger = logging.getLogger(__name__)

SOLUTION_SUFFIX = "-solution"


def resolve_targets(
    table: MembershipTable,
    to_knit: Iterable[str] | None = None,
    *,
    pull_solutions: bool = True,
) -> list[VariantPlan]:
    """Decide which variants to build and which rows each one keeps.

    Args:
        table: Membership table for the document.
        to_knit: Versions to build. Defaults to every discovered version
            except ``"none"``.
        pull_solutions: If True, fold ``"solution"`` blocks into every other
            version, emitting ``"{v}-solution"`` variants instead of ``v``.

    Returns:
        One plan per variant, in request (or discovery) order.

    Raises:
        UnknownVersionError: If a requested version is not in the document.
        ReservedVersionError: If ``"none"`` is requested.
    """
    if to_knit is None:
        targets = [version for version in table.versions if version != NONE_VERSION]
    else:
        targets = _validate_requested(table, to_knit)

    if not pull_solutions:
        return [VariantPlan(name=version, keep=table.column(version)) for version in targets]

    if not table.has_version(SOLUTION_VERSION):
        logger.info("No %r blocks found; solution variants match their base versions", SOLUTION_VERSION)

    solution_column = table.column(SOLUTION_VERSION)
    return [
        VariantPlan(
            name=f"{version}{SOLUTION_SUFFIX}",
            keep=[
                member or solution
                for member, solution in zip(table.column(version), solution_column)
            ],
        )
        for version in targets
        if version != SOLUTION_VERSION
    ]


def lines_to_delete(table: MembershipTable, keep: Sequence[bool]) -> set[int]:
    """Line numbers (1-indexed) to drop for a variant.

    Covers every versioned block the variant does not keep, plus the sigil
    and declaration lines of every text section.
    """
    doomed: set[int] = set()
    for row, kept in zip(table.rows, keep):
        if row.is_versioned and not kept:
            doomed.update(row.block.line_numbers())
    for section in table.text_sections:
        doomed.update(section.decoration_lines())
    return doomed


def materialize_variant(
    lines: Sequence[str], table: MembershipTable, plan: VariantPlan
) -> MaterializedVariant:
    """Filter a fresh copy of ``lines`` down to one variant."""
    doomed = lines_to_delete(table, plan.keep)
    kept = [line for number, line in enumerate(lines, start=1) if number not in doomed]
    logger.debug("Variant %r keeps %d of %d lines", plan.name, len(kept), len(lines))
    return MaterializedVariant(name=plan.name, lines=kept)


def materialize_variants(
    lines: Sequence[str],
    table: MembershipTable,
    to_knit: Iterable[str] | None = None,
    *,
    pull_solutions: bool = True,
) -> list[MaterializedVariant]:
    """Build every requested variant, each from the original lines."""
    plans = resolve_targets(table, to_knit, pull_solutions=pull_solutions)
    return [materialize_variant(lines, table, plan) for plan in plans]


def _validate_requested(table: MembershipTable, to_knit: Iterable[str]) -> list[str]:
    requested = list(dict.fromkeys(to_knit))
    if NONE_VERSION in requested:
        raise ReservedVersionError(
            f"{NONE_VERSION!r} marks author-only blocks and cannot be built as a variant"
        )
    unknown = [version for version in requested if not table.has_version(version)]
    if unknown:
        raise UnknownVersionError(
            f"Requested versions not found in document: {', '.join(unknown)} "
            f"(available: {', '.join(table.versions) or 'no versions'})"
        )
    return requested
