"""Shared schemas for templar."""

from templar.schemas.blocks import Block, CodeBlock, TextSection
from templar.schemas.table import MembershipRow, MembershipTable
from templar.schemas.variants import MaterializedVariant, VariantPlan, VariantResult

__all__ = [
    "Block",
    "CodeBlock",
    "MaterializedVariant",
    "MembershipRow",
    "MembershipTable",
    "TextSection",
    "VariantPlan",
    "VariantResult",
]
