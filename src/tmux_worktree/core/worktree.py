"""Git worktree listing and repository root resolution."""

import logging
from typing import Optional

import git
from git.exc import CommandError

from tmux_worktree.core.naming import is_main_branch
from tmux_worktree.exceptions import ExternalToolError
from tmux_worktree.models.worktree_info import Worktree

logger = logging.getLogger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"


def _command_error_message(error: Exception) -> str:
    """Extract a readable message from a GitPython command error."""
    if not isinstance(error, CommandError):
        return str(error)
    stderr = error.stderr.strip() if isinstance(error.stderr, str) else ""
    if stderr:
        return f"exit {error.status}: {stderr}"
    return str(error)


def list_worktrees(repo_root: str) -> list[Worktree]:
    """
    List the worktrees of a repository.

    Runs ``git worktree list --porcelain`` with ``repo_root`` as working directory.
    There is no deadline on this command.

    Args:
        repo_root: Path to the repository root.

    Returns:
        Worktrees in the order git reports them, prunable entries excluded.

    Raises:
        ExternalToolError: If git is missing, the path is not a repository, or
            the command exits non-zero.
    """
    try:
        output = git.Git(repo_root).worktree("list", "--porcelain")
    except (CommandError, OSError) as e:
        raise ExternalToolError(
            "git worktree list", repo_root, _command_error_message(e)
        ) from e

    worktrees = parse_worktree_porcelain(output)
    logger.debug(f"Found {len(worktrees)} worktrees in {repo_root}")
    return worktrees


def parse_worktree_porcelain(output: str) -> list[Worktree]:
    """
    Parse the porcelain output of ``git worktree list``.

    Blocks are separated by blank lines. Blocks without a ``worktree`` line and
    blocks marked ``prunable`` are dropped.

    Args:
        output: Raw command output.

    Returns:
        List of Worktree objects.
    """
    worktrees = []

    for block in output.split("\n\n"):
        if not block.strip():
            continue

        worktree = _parse_block(block)
        if worktree is not None:
            worktrees.append(worktree)

    return worktrees


def _parse_block(block: str) -> Optional[Worktree]:
    """Parse one porcelain block into a Worktree, or None if it is unusable."""
    entry: dict = {}

    for line in block.split("\n"):
        line = line.rstrip("\r")

        if line.startswith("worktree "):
            entry["path"] = line[len("worktree "):]
        elif line.startswith("branch "):
            branch_ref = line[len("branch "):]
            if branch_ref.startswith(BRANCH_REF_PREFIX):
                branch_ref = branch_ref[len(BRANCH_REF_PREFIX):]
            entry["branch"] = branch_ref
        elif line.startswith("HEAD "):
            entry["head"] = line[len("HEAD "):]
        elif line == "prunable" or line.startswith("prunable "):
            entry["prunable"] = True

    if not entry.get("path"):
        return None

    if entry.get("prunable"):
        logger.debug(f"Skipping prunable worktree {entry['path']}")
        return None

    branch = entry.get("branch", "")
    return Worktree(
        path=entry["path"],
        branch=branch,
        head=entry.get("head", ""),
        is_main=is_main_branch(branch),
    )


def get_repo_root(path: str) -> str:
    """
    Resolve the top-level directory of the repository containing ``path``.

    Raises:
        ExternalToolError: If ``path`` is not inside a git repository.
    """
    try:
        output = git.Git(path).rev_parse("--show-toplevel")
    except (CommandError, OSError) as e:
        raise ExternalToolError(
            "git rev-parse --show-toplevel", path, _command_error_message(e)
        ) from e

    root = output.strip()
    if not root:
        raise ExternalToolError("git rev-parse --show-toplevel", path, "empty output")
    return root
