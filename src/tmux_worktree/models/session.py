"""Pydantic models for session naming and tmux sessions."""

from typing import Optional

from pydantic import BaseModel, Field


class SessionIdentity(BaseModel):
    """Naming bundle that ties a worktree to a tmux session."""

    repo_name: str = Field(description="Basename of the repository root")
    slug: str = Field(description="Short name of the worktree; 'main' for the root")
    session_name: str = Field(description="Composite '<repo>_<slug>' session name")
    is_root: bool = Field(default=False, description="Whether this is the canonical checkout")


class TmuxSession(BaseModel):
    """A running tmux session as seen by the lister."""

    name: str
    windows: int = Field(default=0, ge=0)
    attached: bool = False
    workdir: Optional[str] = Field(
        default=None,
        description="@workdir session option, falling back to session_path",
    )
