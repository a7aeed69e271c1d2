"""
Core modules for tmux-worktree.

This package contains the core logic for:
- Repository discovery
- Worktree listing and session naming
- Git status counts
- Recency tracking
- tmux session lookup
- Collecting display items
"""

from tmux_worktree.core.collector import collect_items, filter_dirty, sort_items
from tmux_worktree.core.discovery import RepoScanner, expand_tilde, find_git_repos
from tmux_worktree.core.git_status import get_status, parse_status_porcelain
from tmux_worktree.core.naming import (
    get_repo_name,
    get_session_name,
    get_slug_from_session_name,
    get_slug_from_worktree,
    is_main_branch,
    is_root,
    resolve_identity,
)
from tmux_worktree.core.recency import (
    combine_recent_times,
    format_relative_time,
    get_combined_recent_time,
    get_opencode_last_used,
    get_recent_time,
)
from tmux_worktree.core.tmux_sessions import TmuxSessionLister, is_inside_tmux
from tmux_worktree.core.worktree import get_repo_root, list_worktrees, parse_worktree_porcelain

__all__ = [
    "collect_items",
    "filter_dirty",
    "sort_items",
    "RepoScanner",
    "expand_tilde",
    "find_git_repos",
    "get_status",
    "parse_status_porcelain",
    "get_repo_name",
    "get_session_name",
    "get_slug_from_session_name",
    "get_slug_from_worktree",
    "is_main_branch",
    "is_root",
    "resolve_identity",
    "combine_recent_times",
    "format_relative_time",
    "get_combined_recent_time",
    "get_opencode_last_used",
    "get_recent_time",
    "TmuxSessionLister",
    "is_inside_tmux",
    "get_repo_root",
    "list_worktrees",
    "parse_worktree_porcelain",
]
