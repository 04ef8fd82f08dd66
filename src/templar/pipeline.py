"""Pipeline: source document -> per-version derived documents -> rendered output."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from templar.materializer import materialize_variant, resolve_targets
from templar.render import (
    PandocRenderer,
    Renderer,
    preserved_render_settings,
    set_render_settings,
)
from templar.scanner import scan_blocks
from templar.schemas import MembershipTable, VariantPlan, VariantResult
from templar.source import derived_path, prepare_source, read_source_lines, write_lines
from templar.version_table import build_membership_table

logger = logging.getLogger(__name__)


@dataclass
class VariantOptions:
    """Options for variant generation.

    Attributes:
        pull_solutions: If True, merge "solution" blocks into every other
            version and emit "{version}-solution" documents instead.
        to_knit: Versions to build. None builds every discovered version.
        render: If True, render each derived document after writing it.
        output_dir: Directory for derived documents. Defaults to the
            source's directory.
        strip_directives: If True, drop lines that invoke the generator.
        warning_header: If True, add a "generated file" warning to the
            front matter of each derived document.
    """

    pull_solutions: bool = True
    to_knit: list[str] | None = None
    render: bool = True
    output_dir: Path | None = None
    strip_directives: bool = True
    warning_header: bool = True


def load_document(
    source: Path, options: VariantOptions | None = None
) -> tuple[list[str], MembershipTable]:
    """Read, prepare, and scan a source document.

    Returns:
        Tuple of (prepared lines, membership table).

    Raises:
        MalformedSourceError: If fences or section markers are unbalanced.
        OSError: If the source cannot be read.
    """
    opts = options or VariantOptions()
    lines = prepare_source(
        read_source_lines(source),
        source.name,
        strip_directives=opts.strip_directives,
        add_header=opts.warning_header,
    )
    code_blocks, text_sections = scan_blocks(lines)
    return lines, build_membership_table(code_blocks, text_sections)


def generate_variants(
    source: Path,
    options: VariantOptions | None = None,
    renderer: Renderer | None = None,
) -> list[VariantResult]:
    """Write (and optionally render) one derived document per version.

    Input problems are detected before anything is written. Once writing
    starts, each variant succeeds or fails on its own; failures are logged
    and reported in the returned results.

    Args:
        source: Path to the annotated source document.
        options: Generation options. Uses defaults if None.
        renderer: Renderer to use when rendering is enabled. Defaults to
            PandocRenderer.

    Returns:
        One result per variant, in build order.

    Raises:
        MalformedSourceError: If the source is malformed.
        UnknownVersionError: If a requested version is not in the source.
        ReservedVersionError: If a reserved version is requested.
    """
    opts = options or VariantOptions()
    source = Path(source)
    lines, table = load_document(source, opts)
    plans = resolve_targets(table, opts.to_knit, pull_solutions=opts.pull_solutions)
    if not plans:
        logger.warning("No variants to build for %s", source)
        return []

    active_renderer: Renderer | None = None
    if opts.render:
        active_renderer = renderer or PandocRenderer()

    results: list[VariantResult] = []
    with preserved_render_settings() as snapshot:
        # Let derived documents resolve resources relative to the source.
        set_render_settings(
            snapshot.model_copy(
                update={"resource_path": [source.parent.resolve(), *snapshot.resource_path]}
            )
        )
        for plan in plans:
            results.append(
                _build_variant(source, lines, table, plan, opts, active_renderer)
            )

    failed = [result.version for result in results if not result.ok]
    if failed:
        logger.warning("%d of %d variants failed: %s", len(failed), len(results), ", ".join(failed))
    return results


def _build_variant(
    source: Path,
    lines: Sequence[str],
    table: MembershipTable,
    plan: VariantPlan,
    opts: VariantOptions,
    renderer: Renderer | None,
) -> VariantResult:
    path = derived_path(source, plan.name, opts.output_dir)
    try:
        variant = materialize_variant(lines, table, plan)
        write_lines(path, variant.lines)
        output = renderer.render(path) if renderer else None
    except Exception as exc:
        logger.exception("Failed to build variant %r", plan.name)
        return VariantResult(version=plan.name, path=path, error=str(exc))

    logger.info("Built variant %r -> %s", plan.name, output or path)
    return VariantResult(version=plan.name, path=path, output_path=output)
