"""
Builds display items for every worktree of every discovered repository.

Per-worktree lookups (git status, recency) run concurrently; a repository whose
worktrees cannot be listed is skipped and logged.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Optional

from tmux_worktree.core.discovery import find_git_repos
from tmux_worktree.core.git_status import STATUS_TIMEOUT_SECONDS, get_status
from tmux_worktree.core.naming import get_repo_name, resolve_identity
from tmux_worktree.core.recency import get_combined_recent_time
from tmux_worktree.core.worktree import list_worktrees
from tmux_worktree.exceptions import ExternalToolError
from tmux_worktree.models.git_status import GitStatus
from tmux_worktree.models.item import CollectResult, SortBy, WorktreeItem
from tmux_worktree.models.session import TmuxSession
from tmux_worktree.models.worktree_info import Worktree

if TYPE_CHECKING:
    from tmux_worktree.config import Config

logger = logging.getLogger(__name__)

ROOT_TITLE_PREFIX = "(root) "
DESCRIPTION_SEPARATOR = " • "


def build_title(repo_name: str, slug: str, is_root: bool) -> str:
    return f"{ROOT_TITLE_PREFIX}{repo_name}" if is_root else slug


def build_description(branch: str, status: Optional[GitStatus]) -> str:
    """'<branch> • M:<m> A:<a> U:<u>'; the counts are left out when unknown."""
    status_str = status.summary() if status is not None else ""
    return f"{branch}{DESCRIPTION_SEPARATOR}{status_str}"


def build_item(
    worktree: Worktree,
    repo_name: str,
    sessions: dict[str, TmuxSession],
    status_timeout: float = STATUS_TIMEOUT_SECONDS,
) -> WorktreeItem:
    """Resolve identity, status, recency and session for one worktree."""
    identity = resolve_identity(worktree.path, repo_name, worktree.is_main)

    status: Optional[GitStatus]
    try:
        status = get_status(worktree.path, timeout=status_timeout)
    except ExternalToolError as e:
        logger.debug(f"Status unknown for {worktree.path}: {e}")
        status = None

    session = sessions.get(identity.session_name)

    return WorktreeItem(
        title=build_title(repo_name, identity.slug, identity.is_root),
        description=build_description(worktree.branch, status),
        path=worktree.path,
        branch=worktree.branch,
        identity=identity,
        status=status,
        recent_time=get_combined_recent_time(worktree.path),
        has_session=session is not None,
        attached=session is not None and session.attached,
        windows=session.windows if session is not None else 0,
    )


def collect_items(
    config: "Config",
    sessions: Optional[dict[str, TmuxSession]] = None,
    status_timeout: float = STATUS_TIMEOUT_SECONDS,
    max_workers: Optional[int] = None,
) -> CollectResult:
    """
    Discover repositories and build one item per worktree.

    Args:
        config: Search paths and depth.
        sessions: Running tmux sessions keyed by name.
        status_timeout: Deadline for each git status call.
        max_workers: Thread pool size for per-worktree lookups.

    Returns:
        CollectResult with all items sorted by title, plus the subset that has
        a running session.
    """
    sessions = sessions or {}
    repos = find_git_repos(config.search_paths, config.depth)

    jobs: list[tuple[Worktree, str]] = []
    for repo_path in repos:
        repo_name = get_repo_name(repo_path)
        try:
            worktrees = list_worktrees(repo_path)
        except ExternalToolError as e:
            logger.warning(f"Skipping {repo_path}: {e}")
            continue
        jobs.extend((wt, repo_name) for wt in worktrees)

    items: list[WorktreeItem] = []
    if jobs:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="collect") as executor:
            futures = {
                executor.submit(build_item, wt, repo_name, sessions, status_timeout): wt
                for wt, repo_name in jobs
            }
            for future in as_completed(futures):
                items.append(future.result())

    items = sort_items(items, SortBy.NAME)
    logger.debug(f"Collected {len(items)} worktrees from {len(repos)} repositories")

    return CollectResult(
        repos=items,
        sessions=[item for item in items if item.has_session],
    )


def sort_items(items: Iterable[WorktreeItem], sort_by: SortBy) -> list[WorktreeItem]:
    """
    Order items for display.

    NAME sorts by title. RECENT puts the newest first and unknown times last.
    ACTIVE puts items with a session first, then sorts by title.
    """
    items = list(items)

    if sort_by == SortBy.RECENT:
        known = [i for i in items if i.recent_time is not None]
        unknown = [i for i in items if i.recent_time is None]
        known.sort(key=lambda i: _timestamp_key(i.recent_time), reverse=True)
        return known + unknown

    if sort_by == SortBy.ACTIVE:
        return sorted(items, key=lambda i: (not i.has_session, i.title))

    return sorted(items, key=lambda i: i.title)


def _timestamp_key(timestamp: datetime) -> float:
    return timestamp.timestamp()


def filter_dirty(items: Iterable[WorktreeItem]) -> list[WorktreeItem]:
    """Keep only items with uncommitted changes."""
    return [item for item in items if item.is_dirty]
