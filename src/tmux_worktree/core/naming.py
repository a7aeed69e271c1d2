"""Naming rules for worktrees and their tmux sessions.

Every function here is pure: no filesystem access, no subprocesses, and no
error channel. Any string input yields a defined output.

Session names have the form ``{repo_name}_{slug}``. The slug ``"main"`` is
reserved for the canonical checkout of a repository.
"""

import os

from tmux_worktree.models.session import SessionIdentity

# Directory that houses non-main worktrees, e.g. /repos/foo/.worktrees/bar
WORKTREE_CONTAINER = ".worktrees"

# Branches created for tasks; a worktree on one of these is never main
TASK_BRANCH_PREFIX = "task/"

MAIN_SLUG = "main"


def _basename(path: str) -> str:
    """Basename that ignores trailing separators; "" gives "." and "/" gives "/"."""
    stripped = path.rstrip("/" + os.sep)
    if not stripped:
        return os.sep if path else "."
    return os.path.basename(stripped)


def _in_container(worktree_path: str) -> bool:
    return WORKTREE_CONTAINER in worktree_path


def get_repo_name(repo_root: str) -> str:
    """Get the repository name from its root directory."""
    return _basename(repo_root)


def get_slug_from_worktree(worktree_path: str, repo_name: str, is_main: bool) -> str:
    """
    Determine the slug for a worktree path.

    Args:
        worktree_path: Path of the worktree.
        repo_name: Name of the repository the worktree belongs to.
        is_main: Whether the worktree is on a main (non-task) branch.

    Returns:
        ``"main"`` for the canonical checkout, otherwise the directory name.
    """
    slug = _basename(worktree_path)

    if is_main and not _in_container(worktree_path):
        return MAIN_SLUG

    if slug == repo_name:
        return MAIN_SLUG

    return slug


def get_session_name(repo_name: str, slug: str) -> str:
    """Build the tmux session name for a repository and slug."""
    return f"{repo_name}_{slug}"


def get_slug_from_session_name(session_name: str, repo_name: str) -> str:
    """
    Extract the slug from a tmux session name.

    Session names that do not carry the ``{repo_name}_`` prefix are returned
    unchanged. This is not a strict inverse of :func:`get_session_name`: only an
    empty slug round-trips to ``"main"``.
    """
    prefix = f"{repo_name}_"
    if not session_name.startswith(prefix):
        return session_name

    slug = session_name[len(prefix):]
    return slug or MAIN_SLUG


def is_root(slug: str, repo_name: str, worktree_path: str, is_main: bool) -> bool:
    """Whether a worktree should be presented as the repository root."""
    if not slug or slug == repo_name or slug == MAIN_SLUG:
        return True

    if worktree_path:
        if _basename(worktree_path) == repo_name:
            return True

        if is_main and not _in_container(worktree_path):
            return True

    return False


def is_main_branch(branch: str) -> bool:
    """Any branch outside the task namespace counts as main."""
    return not branch.startswith(TASK_BRANCH_PREFIX)


def resolve_identity(worktree_path: str, repo_name: str, is_main: bool) -> SessionIdentity:
    """
    Derive the full naming bundle for a worktree.

    Args:
        worktree_path: Path of the worktree.
        repo_name: Name of the owning repository.
        is_main: Whether the worktree is on a main branch.

    Returns:
        SessionIdentity with slug, session name and root flag filled in.
    """
    slug = get_slug_from_worktree(worktree_path, repo_name, is_main)
    return SessionIdentity(
        repo_name=repo_name,
        slug=slug,
        session_name=get_session_name(repo_name, slug),
        is_root=is_root(slug, repo_name, worktree_path, is_main),
    )
