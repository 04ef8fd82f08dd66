"""Variant planning and result models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class VariantPlan(BaseModel):
    """A variant to materialize: its name and a keep flag per table row."""

    name: str
    keep: list[bool] = Field(default_factory=list)


class MaterializedVariant(BaseModel):
    """Filtered line sequence for a single variant."""

    name: str
    lines: list[str] = Field(default_factory=list)


class VariantResult(BaseModel):
    """Outcome of writing and rendering one variant."""

    version: str
    path: Path
    output_path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
