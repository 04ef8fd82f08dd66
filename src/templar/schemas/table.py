"""Membership table models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from templar.schemas.blocks import Block, TextSection


class MembershipRow(BaseModel):
    """One block and the versions it belongs to."""

    block: Block
    memberships: dict[str, bool] = Field(default_factory=dict)

    @property
    def start(self) -> int:
        return self.block.start

    @property
    def end(self) -> int:
        return self.block.end

    @property
    def is_versioned(self) -> bool:
        return self.block.is_versioned

    def member_of(self, version: str) -> bool:
        """Whether the block belongs to ``version``.

        Untagged blocks belong to every version, including names the table
        has never seen. Tagged blocks default to ``False`` for unknown names.
        """
        if not self.is_versioned:
            return True
        return self.memberships.get(version, False)


class MembershipTable(BaseModel):
    """Every block of a document, in source order, with its memberships."""

    versions: list[str] = Field(default_factory=list)
    rows: list[MembershipRow] = Field(default_factory=list)

    def column(self, version: str) -> list[bool]:
        return [row.member_of(version) for row in self.rows]

    def has_version(self, version: str) -> bool:
        return version in self.versions

    @property
    def text_sections(self) -> list[TextSection]:
        return [row.block for row in self.rows if isinstance(row.block, TextSection)]
