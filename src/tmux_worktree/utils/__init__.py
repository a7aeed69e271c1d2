"""Utility helpers for tmux-worktree."""

from tmux_worktree.utils.io import atomic_write_json

__all__ = ["atomic_write_json"]
