"""Pydantic models for worktree information."""

from pathlib import Path

from pydantic import BaseModel, Field


class Worktree(BaseModel):
    """A single entry of ``git worktree list --porcelain``."""

    path: str = Field(description="Absolute path to the worktree directory")
    branch: str = Field(default="", description="Branch name without the refs/heads/ prefix")
    head: str = Field(default="", description="SHA of the HEAD commit")
    is_main: bool = Field(
        default=False,
        description="Derived from the branch name; task branches are never main",
    )
    prunable: bool = Field(default=False, description="Whether git marked the entry prunable")

    @property
    def name(self) -> str:
        """Get the worktree directory name."""
        return Path(self.path).name

    @property
    def short_head(self) -> str:
        """Get the abbreviated HEAD commit."""
        return self.head[:7]

    @property
    def short_path(self) -> str:
        """Get a shortened display path."""
        path = Path(self.path)
        try:
            return f"~/{path.relative_to(Path.home())}"
        except (ValueError, RuntimeError):
            return self.path
