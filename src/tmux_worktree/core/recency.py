"""
Recency tracking for worktrees.

This module provides two independent "last active" signals and merges them:
- Filesystem: newest modification time in a shallow, ignore-aware walk
- OpenCode: newest ``time.updated`` of the OpenCode sessions opened in a path

The filesystem walk runs in a background thread and is raced against a
deadline, so a slow disk never blocks a refresh for longer than the timeout.
"""

import logging
import os
import threading
from datetime import datetime
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Optional

from tmux_worktree.exceptions import RecencyError, ScanError, ScanTimeoutError
from tmux_worktree.models.recency import OpenCodeSession, RecencyRecord

logger = logging.getLogger(__name__)

RECENT_TIMEOUT_SECONDS = 2.0

# Root is depth 0; its subdirectories are depth 1. Nothing deeper is entered.
MAX_SCAN_DEPTH = 1

# Always pruned, whatever the ignore file says
EXCLUDED_DIRS = frozenset(
    {
        ".git",
        "node_modules",
        "dist",
        "build",
        "vendor",
        ".sisyphus",
        "__pycache__",
        ".venv",
        "venv",
    }
)

IGNORE_FILENAME = ".gitignore"

OPENCODE_SESSION_DIR = Path(".local") / "share" / "opencode" / "storage" / "session"
OPENCODE_SESSION_GLOB = "ses_*.json"


def load_ignore_patterns(repo_path: str | Path) -> list[str]:
    """
    Load patterns from the top-level ignore file.

    Args:
        repo_path: Repository root.

    Returns:
        Non-empty, non-comment lines; empty if the file is missing or unreadable.
    """
    ignore_file = Path(repo_path) / IGNORE_FILENAME
    try:
        content = ignore_file.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return []

    patterns = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


def should_ignore(rel_path: str, patterns: list[str], is_dir: bool) -> bool:
    """
    Check a path against ignore patterns using simplified matching.

    Only a subset of the ignore-file rules is honoured: ``dir/`` patterns apply to
    directories only, patterns with ``*`` are globbed against the relative path and
    its basename, and anything else matches exactly or as a path prefix. A leading
    ``/`` anchors the pattern at the root. Negations are not supported.

    Args:
        rel_path: Path relative to the scan root.
        patterns: Patterns from :func:`load_ignore_patterns`.
        is_dir: Whether the path is a directory.

    Returns:
        True if the path should be skipped.
    """
    if not patterns:
        return False

    normalized = rel_path.replace(os.sep, "/")
    basename = normalized.rstrip("/").rsplit("/", 1)[-1]
    if is_dir and not normalized.endswith("/"):
        normalized += "/"

    for pattern in patterns:
        if pattern.startswith("!"):
            continue

        if pattern.endswith("/"):
            if not is_dir:
                continue
            pattern = pattern.rstrip("/")

        pattern = pattern.lstrip("/")
        if not pattern:
            continue

        if "*" in pattern:
            if fnmatchcase(normalized, pattern) or fnmatchcase(basename, pattern):
                return True
        elif normalized == pattern or normalized.startswith(pattern + "/"):
            return True

    return False


class _ScanState:
    """Newest modification time seen so far, shared with the waiting caller."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._most_recent: Optional[float] = None

    def observe(self, mtime: float) -> None:
        with self._lock:
            if self._most_recent is None or mtime > self._most_recent:
                self._most_recent = mtime

    @property
    def most_recent(self) -> Optional[datetime]:
        with self._lock:
            if self._most_recent is None:
                return None
            return datetime.fromtimestamp(self._most_recent)


def _scan_directory(
    directory: str,
    rel_dir: str,
    depth: int,
    patterns: list[str],
    state: _ScanState,
    stop: threading.Event,
) -> None:
    """Record file mtimes under ``directory``; unreadable entries are skipped."""
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                if stop.is_set():
                    return

                rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name

                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError:
                    continue

                if is_dir:
                    if depth + 1 > MAX_SCAN_DEPTH:
                        continue
                    if entry.name in EXCLUDED_DIRS:
                        continue
                    if should_ignore(rel_path, patterns, True):
                        continue
                    _scan_directory(entry.path, rel_path, depth + 1, patterns, state, stop)
                    continue

                if should_ignore(rel_path, patterns, False):
                    continue

                try:
                    mtime = entry.stat(follow_symlinks=False).st_mtime
                except OSError:
                    continue
                state.observe(mtime)
    except OSError as e:
        logger.debug(f"Skipping unreadable directory {directory}: {e}")


def get_recent_time(
    repo_path: str | Path,
    timeout: float = RECENT_TIMEOUT_SECONDS,
) -> tuple[Optional[datetime], Optional[RecencyError]]:
    """
    Find the newest file modification time in a shallow walk of ``repo_path``.

    Files in the root and in its immediate subdirectories are inspected. Noise
    directories and paths matched by the top-level ignore file are pruned.

    Args:
        repo_path: Directory to scan.
        timeout: Seconds to wait for the walk before giving up.

    Returns:
        Tuple of (timestamp, error). On timeout the timestamp is the best value
        found so far and the error is a ScanTimeoutError. If the path cannot be
        scanned at all the timestamp is None and the error is a ScanError.
    """
    root = os.path.normpath(str(repo_path))
    if not os.path.isdir(root):
        return None, ScanError(root, "not a directory")

    patterns = load_ignore_patterns(root)
    state = _ScanState()
    done = threading.Event()
    stop = threading.Event()
    failures: list[Exception] = []

    def walk() -> None:
        try:
            _scan_directory(root, "", 0, patterns, state, stop)
        except Exception as e:
            failures.append(e)
        finally:
            done.set()

    worker = threading.Thread(target=walk, name=f"recency-scan:{root}", daemon=True)
    worker.start()

    if not done.wait(timeout):
        stop.set()
        logger.debug(f"Recency scan of {root} timed out after {timeout:g}s")
        return state.most_recent, ScanTimeoutError(root, timeout)

    if failures:
        return None, ScanError(root, str(failures[0]))

    return state.most_recent, None


def get_opencode_storage_dir() -> Optional[Path]:
    """Get the OpenCode session storage directory, or None without a home directory."""
    try:
        return Path.home() / OPENCODE_SESSION_DIR
    except RuntimeError:
        return None


def _load_session(session_file: Path) -> Optional[OpenCodeSession]:
    """Decode an OpenCode session file; None if unreadable or malformed."""
    try:
        return OpenCodeSession.model_validate_json(session_file.read_bytes())
    except (OSError, ValueError) as e:
        logger.debug(f"Skipping session file {session_file}: {e}")
        return None


def get_opencode_last_used(
    repo_path: str | Path,
    storage_dir: Optional[str | Path] = None,
) -> Optional[datetime]:
    """
    Find the most recent OpenCode session activity for a directory.

    Scans ``<storage>/<project>/ses_*.json`` and keeps sessions whose
    ``directory`` equals ``repo_path`` after normalization.

    Args:
        repo_path: Directory to look up.
        storage_dir: Session storage root. Defaults to OpenCode's location in
            the user's home directory.

    Returns:
        Latest ``time.updated`` of a matching session, or None. Never raises.
    """
    target = os.path.normpath(str(repo_path))
    storage = Path(storage_dir) if storage_dir is not None else get_opencode_storage_dir()

    if storage is None:
        return None

    try:
        if not storage.is_dir():
            return None
        project_dirs = [p for p in storage.iterdir() if p.is_dir()]
    except OSError as e:
        logger.debug(f"Cannot read OpenCode storage {storage}: {e}")
        return None

    latest_ms: Optional[int] = None

    for project_dir in project_dirs:
        try:
            session_files = list(project_dir.glob(OPENCODE_SESSION_GLOB))
        except OSError:
            continue

        for session_file in session_files:
            session = _load_session(session_file)
            if session is None:
                continue

            if os.path.normpath(session.directory) != target:
                continue

            updated = session.time.updated
            if updated > 0 and (latest_ms is None or updated > latest_ms):
                latest_ms = updated

    if latest_ms is None:
        return None

    try:
        return datetime.fromtimestamp(latest_ms / 1000)
    except (OverflowError, OSError, ValueError):
        return None


def _is_later(candidate: Optional[datetime], reference: Optional[datetime]) -> bool:
    """Strict ordering where an unknown time is earlier than any known one."""
    if candidate is None:
        return False
    if reference is None:
        return True
    return candidate > reference


def combine_recent_times(
    mtime: Optional[datetime], opencode_time: Optional[datetime]
) -> Optional[datetime]:
    """Pick the later signal; the filesystem time wins a tie."""
    if _is_later(opencode_time, mtime):
        return opencode_time
    return mtime


def get_combined_recent_time(repo_path: str | Path) -> Optional[datetime]:
    """
    Merge the filesystem and OpenCode signals for a path.

    The OpenCode time wins only when it is strictly later; ties go to the
    filesystem. Errors from either signal are discarded.
    """
    mtime, _ = get_recent_time(repo_path)
    return combine_recent_times(mtime, get_opencode_last_used(repo_path))


def get_recency_record(repo_path: str | Path) -> RecencyRecord:
    """Wrap the combined recency of a path in a RecencyRecord."""
    return RecencyRecord(path=str(repo_path), timestamp=get_combined_recent_time(repo_path))


def format_relative_time(timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Format a timestamp as a short relative string.

    Args:
        timestamp: Time to format; None renders as "N/A".
        now: Reference time. Defaults to the current time.

    Returns:
        "just now", "5m ago", "2h ago", "3d ago", "2w ago" or "2mo ago".
    """
    if timestamp is None:
        return "N/A"

    seconds = ((now or datetime.now()) - timestamp).total_seconds()

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 24 * 3600:
        return f"{int(seconds // 3600)}h ago"

    days = int(seconds // (24 * 3600))
    if days < 7:
        return f"{days}d ago"
    if days < 30:
        return f"{days // 7}w ago"
    return f"{days // 30}mo ago"
