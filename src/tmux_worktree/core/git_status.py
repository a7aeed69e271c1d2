"""
Change-state classification for worktrees.

Runs ``git status --porcelain`` under a hard deadline and folds the two-letter
``XY`` code of every line into exactly one bucket of a GitStatus.
"""

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional

from tmux_worktree.exceptions import ExternalToolError, GitTimeoutError
from tmux_worktree.models.git_status import GitStatus

logger = logging.getLogger(__name__)

STATUS_TIMEOUT_SECONDS = 2.0

# Evaluated in order; the first matching predicate decides the bucket.
STATUS_RULES: list[tuple[Callable[[str], bool], str]] = [
    (lambda xy: xy == "??", "untracked"),
    (lambda xy: "A" in xy, "added"),
    (lambda xy: "M" in xy, "modified"),
    (lambda xy: "D" in xy, "deleted"),
    (lambda xy: xy[0] == "R", "modified"),
    (lambda xy: xy == "UU", "modified"),
]


def classify_status_code(xy: str) -> Optional[str]:
    """
    Map a porcelain status code to a GitStatus bucket.

    Args:
        xy: The two-character status code.

    Returns:
        Name of the bucket, or None if no rule matches.
    """
    for predicate, bucket in STATUS_RULES:
        if predicate(xy):
            return bucket
    return None


def parse_status_porcelain(output: str) -> GitStatus:
    """Aggregate porcelain status lines into change counts."""
    counts = {"modified": 0, "added": 0, "deleted": 0, "untracked": 0}

    for line in output.split("\n"):
        if len(line) < 2:
            continue

        bucket = classify_status_code(line[:2])
        if bucket is not None:
            counts[bucket] += 1

    return GitStatus(**counts)


def _run_git_command(
    worktree_path: str,
    args: list[str],
    timeout: float,
) -> subprocess.CompletedProcess:
    """Run a git command in the worktree directory."""
    return subprocess.run(
        ["git"] + args,
        cwd=worktree_path,
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def get_status(worktree_path: str | Path, timeout: float = STATUS_TIMEOUT_SECONDS) -> GitStatus:
    """
    Get the change counts of a worktree.

    Args:
        worktree_path: Path to the worktree.
        timeout: Seconds before the git process is killed.

    Returns:
        GitStatus with per-bucket counts.

    Raises:
        GitTimeoutError: If git did not finish before the deadline.
        ExternalToolError: If git is missing or exits non-zero.
    """
    path = str(worktree_path)
    command = "git status --porcelain"

    try:
        result = _run_git_command(path, ["status", "--porcelain"], timeout)
    except subprocess.TimeoutExpired as e:
        logger.debug(f"{command} timed out in {path}")
        raise GitTimeoutError(command, path, timeout) from e
    except OSError as e:
        raise ExternalToolError(command, path, str(e)) from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        message = f"exit {result.returncode}: {stderr}" if stderr else f"exit {result.returncode}"
        raise ExternalToolError(command, path, message)

    return parse_status_porcelain(result.stdout)
