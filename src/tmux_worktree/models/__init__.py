"""
Pydantic models for tmux-worktree.

This package contains data models for:
- Worktree entries and change counts
- Session identities and tmux sessions
- Recency records and OpenCode session files
- Display items
"""

from tmux_worktree.models.git_status import GitStatus
from tmux_worktree.models.item import CollectResult, SortBy, WorktreeItem
from tmux_worktree.models.recency import OpenCodeSession, RecencyRecord, SessionTime
from tmux_worktree.models.session import SessionIdentity, TmuxSession
from tmux_worktree.models.worktree_info import Worktree

__all__ = [
    "CollectResult",
    "GitStatus",
    "OpenCodeSession",
    "RecencyRecord",
    "SessionIdentity",
    "SessionTime",
    "SortBy",
    "TmuxSession",
    "Worktree",
    "WorktreeItem",
]
