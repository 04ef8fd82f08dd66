"""Block descriptor models."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _BlockBase(BaseModel):
    """A contiguous, 1-indexed, inclusive line span of the source document."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=1)
    end: int = Field(..., ge=1)
    is_versioned: bool = False
    raw_tag: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_span(self) -> "_BlockBase":
        if self.end <= self.start:
            raise ValueError(f"block end ({self.end}) must follow start ({self.start})")
        return self

    def line_numbers(self) -> range:
        """Every line number covered by the block, delimiters included."""
        return range(self.start, self.end + 1)


class CodeBlock(_BlockBase):
    """A fenced code block whose opener carries an option list."""

    kind: Literal["code"] = "code"


class TextSection(_BlockBase):
    """A run of text wrapped in a pair of sigil lines."""

    kind: Literal["text"] = "text"

    @property
    def has_declaration(self) -> bool:
        return self.is_versioned

    def decoration_lines(self) -> list[int]:
        """Sigil lines, plus the ``version:`` declaration when there is one."""
        lines = [self.start, self.end]
        if self.has_declaration:
            lines.append(self.start + 1)
        return lines


Block = Annotated[Union[CodeBlock, TextSection], Field(discriminator="kind")]
