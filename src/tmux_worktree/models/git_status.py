"""Pydantic model for aggregated git change counts."""

from pydantic import BaseModel, Field


class GitStatus(BaseModel):
    """Number of changed files per bucket in a worktree."""

    modified: int = Field(default=0, ge=0, description="Modified, renamed or conflicted files")
    added: int = Field(default=0, ge=0, description="Added files")
    deleted: int = Field(default=0, ge=0, description="Deleted files")
    untracked: int = Field(default=0, ge=0, description="Untracked files")

    @property
    def total(self) -> int:
        return self.modified + self.added + self.deleted + self.untracked

    @property
    def is_dirty(self) -> bool:
        """True when any bucket is non-empty."""
        return self.total > 0

    def summary(self) -> str:
        """Compact summary used in item descriptions."""
        return f"M:{self.modified} A:{self.added} U:{self.untracked}"
