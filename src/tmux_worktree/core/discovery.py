"""Repository discovery across configured search roots.

Each root is scanned by its own worker. Workers collect into a private list and
merge it into the shared result under a lock once their scan is done; the caller
waits for every worker before reading the result.
"""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

REPO_MARKER = ".git"
DEFAULT_SCAN_DEPTH = 2


def expand_tilde(path: str) -> str:
    """
    Replace a leading ``~`` with the user's home directory.

    Only ``~`` and ``~/...`` are expanded; ``~user`` forms are left alone, as is
    every path when the home directory cannot be determined.
    """
    if not path.startswith("~"):
        return path

    try:
        home = str(Path.home())
    except RuntimeError:
        return path

    if path == "~":
        return home
    if path.startswith("~/"):
        return os.path.join(home, path[2:]).rstrip("/") or home
    return path


class RepoScanner:
    """
    Finds git repositories below a set of root directories.

    A directory holding a ``.git`` entry is reported and not descended into.
    Hidden entries are skipped, symlinks to directories are followed and
    reported under their resolved path.
    """

    def __init__(self, max_depth: int = DEFAULT_SCAN_DEPTH, max_workers: Optional[int] = None):
        self.max_depth = max_depth
        self.max_workers = max_workers
        self._lock = threading.Lock()
        self._repos: list[str] = []
        self._seen: set[str] = set()

    def find(self, roots: Iterable[str]) -> list[str]:
        """
        Scan every root concurrently.

        Args:
            roots: Root directories; ``~`` is expanded.

        Returns:
            Repository paths, without duplicates (by resolved path).
        """
        roots = list(roots)
        with self._lock:
            self._repos = []
            self._seen = set()

        if not roots:
            return []

        workers = self.max_workers or len(roots)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="repo-scan") as executor:
            futures = [executor.submit(self._scan_root, root) for root in roots]

        for future in futures:
            future.result()

        with self._lock:
            logger.debug(f"Discovered {len(self._repos)} repositories in {len(roots)} roots")
            return list(self._repos)

    def _scan_root(self, root: str) -> None:
        path = os.path.abspath(expand_tilde(root))
        found = self.scan(path, self.max_depth)
        self._merge(found)

    def _merge(self, found: list[str]) -> None:
        with self._lock:
            for repo in found:
                key = os.path.realpath(repo)
                if key in self._seen:
                    continue
                self._seen.add(key)
                self._repos.append(repo)

    def scan(self, root: str, depth: int, visited: Optional[set[str]] = None) -> list[str]:
        """
        Recursively scan one directory.

        Args:
            root: Directory to scan.
            depth: Remaining levels; nothing is read once this drops below zero.
            visited: Resolved symlink targets on the current descent path.

        Returns:
            Repository paths found below ``root``.
        """
        if depth < 0:
            return []

        if visited is None:
            visited = set()

        try:
            with os.scandir(root) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError:
            return []

        if any(entry.name == REPO_MARKER for entry in entries):
            return [root]

        results = []
        for entry in entries:
            if entry.name.startswith("."):
                continue

            try:
                if entry.is_symlink():
                    results.extend(self._scan_symlink(entry.path, depth, visited))
                elif entry.is_dir(follow_symlinks=False):
                    results.extend(self.scan(entry.path, depth - 1, visited))
            except OSError:
                continue

        return results

    def _scan_symlink(self, link_path: str, depth: int, visited: set[str]) -> list[str]:
        resolved = os.path.realpath(link_path)
        if not os.path.isdir(resolved):
            return []

        # Refuse targets already on the descent path so A -> B -> A terminates.
        if resolved in visited:
            logger.debug(f"Skipping symlink cycle back to {resolved}")
            return []

        visited.add(resolved)
        try:
            return self.scan(resolved, depth - 1, visited)
        finally:
            visited.discard(resolved)


def find_git_repos(roots: Iterable[str], max_depth: int = DEFAULT_SCAN_DEPTH) -> list[str]:
    """Find git repositories under ``roots`` up to ``max_depth`` levels deep."""
    return RepoScanner(max_depth=max_depth).find(roots)
