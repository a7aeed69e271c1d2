"""
Pytest configuration and shared fixtures for tmux-worktree tests.
"""

import json
import os
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest


def run_git(args: list[str], cwd: Path) -> subprocess.CompletedProcess:
    """Run a git command for test setup."""
    return subprocess.run(
        ["git"] + args,
        cwd=cwd,
        capture_output=True,
        text=True,
    )


def set_mtime(path: Path, seconds_ago: float) -> float:
    """Backdate a file and return the new mtime."""
    mtime = float(int(time.time() - seconds_ago))
    os.utime(path, (mtime, mtime))
    return mtime


@pytest.fixture
def temp_directory() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir).resolve()


@pytest.fixture
def git_repo(temp_directory: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository for tests."""
    repo_path = temp_directory / "test-repo"
    repo_path.mkdir()

    run_git(["init", "-b", "main"], repo_path)
    run_git(["config", "user.email", "test@example.com"], repo_path)
    run_git(["config", "user.name", "Test User"], repo_path)

    readme = repo_path / "README.md"
    readme.write_text("# Test Repository\n")

    run_git(["add", "."], repo_path)
    run_git(["commit", "-m", "Initial commit"], repo_path)

    yield repo_path


@pytest.fixture
def git_worktree(git_repo: Path) -> Generator[Path, None, None]:
    """Create a task worktree inside the repository's .worktrees container."""
    worktree_path = git_repo / ".worktrees" / "feature-x"

    run_git(["worktree", "add", "-b", "task/feature-x", str(worktree_path)], git_repo)

    yield worktree_path

    run_git(["worktree", "remove", "--force", str(worktree_path)], git_repo)


@pytest.fixture
def search_root(temp_directory: Path) -> Path:
    """
    Create a tree of directories to scan for repositories.

    Layout::

        root/
          alpha/.git/
          group/beta/.git/
          group/beta/nested/.git/
          .hidden/gamma/.git/
          a/b/c/deep/.git/
          notes.txt
    """
    root = temp_directory / "root"
    for repo in ("alpha", "group/beta", "group/beta/nested", ".hidden/gamma", "a/b/c/deep"):
        (root / repo / ".git").mkdir(parents=True)
    (root / "notes.txt").write_text("not a repo\n")
    return root


@pytest.fixture
def opencode_storage(temp_directory: Path) -> Path:
    """Create an empty OpenCode session storage directory."""
    storage = temp_directory / "opencode" / "storage" / "session"
    storage.mkdir(parents=True)
    return storage


def write_opencode_session(
    storage: Path,
    project: str,
    session_id: str,
    directory: str,
    updated_ms: int,
) -> Path:
    """Write an OpenCode session file into ``storage``."""
    project_dir = storage / project
    project_dir.mkdir(parents=True, exist_ok=True)
    session_file = project_dir / f"ses_{session_id}.json"
    session_file.write_text(
        json.dumps(
            {
                "id": f"ses_{session_id}",
                "directory": directory,
                "time": {"created": updated_ms - 1000, "updated": updated_ms},
            }
        )
    )
    return session_file


@pytest.fixture
def config_file(temp_directory: Path) -> Path:
    """Path for a configuration file that does not exist yet."""
    return temp_directory / "config" / "config.json"


# Mock fixtures for tmux


@pytest.fixture
def mock_libtmux_server() -> MagicMock:
    """Create a mock libtmux server."""
    server = MagicMock()
    server.sessions = []
    return server


def make_libtmux_session(
    name: str,
    windows: int = 1,
    attached: str = "0",
    workdir: str = "",
    session_path: str = "/tmp",
) -> MagicMock:
    """Create a mock libtmux session."""
    session = MagicMock()
    session.name = name
    session.windows = [MagicMock() for _ in range(windows)]
    session.session_attached = attached
    session.session_path = session_path

    response = MagicMock()
    response.stdout = [workdir] if workdir else []
    session.cmd.return_value = response

    return session


@pytest.fixture
def mock_subprocess_run():
    """Fixture to mock subprocess.run for git commands."""
    with patch("tmux_worktree.core.git_status.subprocess.run") as mock_run:
        mock_result = MagicMock()
        mock_result.returncode = 0
        mock_result.stdout = ""
        mock_result.stderr = ""
        mock_run.return_value = mock_result
        yield mock_run
