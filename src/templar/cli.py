"""Command-line entry point for templar."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from templar.config import TEMPLAR_LOG_LEVEL, TEMPLAR_OUTPUT_FORMAT
from templar.exceptions import TemplarError
from templar.pipeline import VariantOptions, generate_variants, load_document
from templar.render import preserved_render_settings, set_render_settings

EXIT_OK = 0
EXIT_VARIANT_FAILED = 1
EXIT_BAD_INPUT = 2

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="templar",
        description="Write and render one document per version from a version-tagged source.",
    )
    parser.add_argument("source", type=Path, help="Annotated source document (e.g. exam.Rmd)")
    parser.add_argument(
        "--to-knit",
        action="append",
        metavar="VERSION",
        help="Version to build; repeatable. Defaults to every version in the source.",
    )
    parser.add_argument(
        "--no-pull-solutions",
        dest="pull_solutions",
        action="store_false",
        help='Treat "solution" as an ordinary version instead of merging it into the others',
    )
    parser.add_argument("--no-render", dest="render", action="store_false", help="Only write derived documents")
    parser.add_argument("--to", dest="to_format", default=TEMPLAR_OUTPUT_FORMAT, help="Pandoc output format")
    parser.add_argument("--output-dir", type=Path, help="Directory for derived documents")
    parser.add_argument(
        "--keep-directives",
        dest="strip_directives",
        action="store_false",
        help="Keep lines that call versions() in derived documents",
    )
    parser.add_argument(
        "--no-header",
        dest="warning_header",
        action="store_false",
        help='Do not add the "generated file" warning to front matter',
    )
    parser.add_argument("--list-versions", action="store_true", help="Print discovered versions and exit")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=TEMPLAR_LOG_LEVEL,
        help="Logging level (default: %(default)s)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    options = VariantOptions(
        pull_solutions=args.pull_solutions,
        to_knit=args.to_knit,
        render=args.render,
        output_dir=args.output_dir,
        strip_directives=args.strip_directives,
        warning_header=args.warning_header,
    )

    if args.list_versions:
        try:
            _, table = load_document(args.source, options)
        except (TemplarError, OSError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return EXIT_BAD_INPUT
        for version in table.versions:
            print(version)
        return EXIT_OK

    with preserved_render_settings() as snapshot:
        set_render_settings(snapshot.model_copy(update={"to_format": args.to_format}))
        try:
            results = generate_variants(args.source, options)
        except (TemplarError, OSError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return EXIT_BAD_INPUT

    for result in results:
        if result.ok:
            print(f"{result.version}: {result.output_path or result.path}")
        else:
            print(f"{result.version}: FAILED ({result.error})", file=sys.stderr)

    return EXIT_OK if all(result.ok for result in results) else EXIT_VARIANT_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
