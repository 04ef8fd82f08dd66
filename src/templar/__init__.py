"""templar: write per-version documents from a single version-tagged source."""

from templar.exceptions import (
    MalformedSourceError,
    ParseError,
    RenderError,
    ReservedVersionError,
    TemplarError,
    UnknownVersionError,
    VersionError,
)
from templar.materializer import materialize_variants, resolve_targets
from templar.pipeline import VariantOptions, generate_variants
from templar.scanner import scan_blocks
from templar.schemas import (
    CodeBlock,
    MaterializedVariant,
    MembershipTable,
    TextSection,
    VariantResult,
)
from templar.version_table import build_membership_table

__all__ = [
    "CodeBlock",
    "MalformedSourceError",
    "MaterializedVariant",
    "MembershipTable",
    "ParseError",
    "RenderError",
    "ReservedVersionError",
    "TemplarError",
    "TextSection",
    "UnknownVersionError",
    "VariantOptions",
    "VariantResult",
    "VersionError",
    "build_membership_table",
    "generate_variants",
    "materialize_variants",
    "resolve_targets",
    "scan_blocks",
]
