"""
tmux-worktree - Discover git worktrees and match them to tmux sessions.

This package finds repositories under configured search paths, lists their
worktrees with change counts and recency, and names the tmux session that
belongs to each one.
"""

__version__ = "0.1.0"

from tmux_worktree.config import Config, load_config

__all__ = [
    "__version__",
    "Config",
    "load_config",
]
