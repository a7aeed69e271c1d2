"""Pydantic models for the records handed to the presentation layer."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from tmux_worktree.models.git_status import GitStatus
from tmux_worktree.models.session import SessionIdentity


class SortBy(str, Enum):
    """Available orderings for worktree items."""

    NAME = "name"
    RECENT = "recent"
    ACTIVE = "active"


class WorktreeItem(BaseModel):
    """One worktree, fully resolved for display."""

    title: str = Field(description="'(root) <repo>' for the root checkout, else the slug")
    description: str = Field(default="", description="Branch and change summary")
    path: str = Field(description="Worktree path")
    branch: str = Field(default="")
    identity: SessionIdentity
    status: Optional[GitStatus] = Field(
        default=None,
        description="Change counts; None when git status failed or timed out",
    )
    recent_time: Optional[datetime] = Field(default=None, description="Combined recency")
    has_session: bool = False
    attached: bool = False
    windows: int = Field(default=0, ge=0)

    @property
    def session_name(self) -> str:
        return self.identity.session_name

    @property
    def is_dirty(self) -> bool:
        return self.status is not None and self.status.is_dirty


class CollectResult(BaseModel):
    """Output of a full collection pass."""

    repos: list[WorktreeItem] = Field(default_factory=list)
    sessions: list[WorktreeItem] = Field(
        default_factory=list,
        description="Subset of repos that have a running tmux session",
    )
