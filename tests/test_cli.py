"""Tests for the command line interface."""

import json
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from rich.console import Console

from tmux_worktree.cli import find_containing_worktree, main
from tmux_worktree.models.git_status import GitStatus
from tmux_worktree.models.item import CollectResult, WorktreeItem
from tmux_worktree.models.session import SessionIdentity
from tmux_worktree.models.worktree_info import Worktree

CLI = "tmux_worktree.cli"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def wide_console():
    """Render tables without wrapping so cell values stay on one line."""
    with patch(f"{CLI}.console", Console(width=300)):
        yield


@pytest.fixture
def config_with_root(temp_directory: Path, git_repo: Path) -> Path:
    """Write a config file whose only search path holds the test repository."""
    config_path = temp_directory / "config.json"
    config_path.write_text(json.dumps({"search_paths": [str(git_repo.parent)], "depth": 1}))
    return config_path


def _item(title: str, session: bool = False, dirty: bool = False) -> WorktreeItem:
    return WorktreeItem(
        title=title,
        path=f"/r/{title}",
        branch="main",
        identity=SessionIdentity(repo_name="r", slug=title, session_name=f"r_{title}"),
        status=GitStatus(untracked=1 if dirty else 0),
        recent_time=datetime(2024, 1, 1),
        has_session=session,
    )


class TestFindContainingWorktree:
    """Tests for find_containing_worktree."""

    def test_nested_worktree_preferred(self, temp_directory: Path):
        """Test the closest enclosing worktree wins."""
        main_wt = temp_directory / "foo"
        task_wt = main_wt / ".worktrees" / "bar"
        (task_wt / "src").mkdir(parents=True)
        worktrees = [Worktree(path=str(main_wt)), Worktree(path=str(task_wt))]

        assert find_containing_worktree(worktrees, str(task_wt / "src")).path == str(task_wt)
        assert find_containing_worktree(worktrees, str(main_wt)).path == str(main_wt)

    def test_sibling_prefix_not_matched(self, temp_directory: Path):
        """Test a sibling sharing a name prefix is not a match."""
        (temp_directory / "foo").mkdir()
        (temp_directory / "foobar").mkdir()

        worktrees = [Worktree(path=str(temp_directory / "foo"))]

        assert find_containing_worktree(worktrees, str(temp_directory / "foobar")) is None


class TestReposCommand:
    """Tests for twt repos."""

    def test_lists_repositories(self, runner: CliRunner, config_with_root: Path, git_repo: Path):
        """Test discovered repositories are printed one per line."""
        result = runner.invoke(main, ["--config", str(config_with_root), "repos"])

        assert result.exit_code == 0
        assert result.output.strip().splitlines() == [str(git_repo)]

    def test_path_override(self, runner: CliRunner, temp_directory: Path):
        """Test --path replaces the configured search paths."""
        (temp_directory / "x" / "r" / ".git").mkdir(parents=True)

        result = runner.invoke(
            main,
            ["--config", str(temp_directory / "none.json"), "repos", "--path", str(temp_directory / "x")],
        )

        assert result.exit_code == 0
        assert str(temp_directory / "x" / "r") in result.output

    def test_no_search_paths(self, runner: CliRunner, temp_directory: Path):
        """Test a friendly message without search paths."""
        result = runner.invoke(main, ["--config", str(temp_directory / "none.json"), "repos"])

        assert result.exit_code == 0
        assert "No search paths configured" in result.output

    def test_invalid_config(self, runner: CliRunner, temp_directory: Path):
        """Test an invalid config file is reported as an error."""
        bad = temp_directory / "bad.json"
        bad.write_text("{oops")

        result = runner.invoke(main, ["--config", str(bad), "repos"])

        assert result.exit_code == 1
        assert "Error" in result.output


class TestWorktreesCommand:
    """Tests for twt worktrees."""

    def test_lists_worktrees(self, runner: CliRunner, git_repo: Path, git_worktree: Path):
        """Test the table shows session names for every worktree."""
        result = runner.invoke(main, ["worktrees", str(git_repo)])

        assert result.exit_code == 0
        assert "test-repo_main" in result.output
        assert "test-repo_feature-x" in result.output

    def test_not_a_repository(self, runner: CliRunner, temp_directory: Path):
        """Test a plain directory is an error."""
        result = runner.invoke(main, ["worktrees", str(temp_directory)])

        assert result.exit_code == 1


class TestStatusCommand:
    """Tests for twt status."""

    def test_clean(self, runner: CliRunner, git_repo: Path):
        """Test a clean repository."""
        result = runner.invoke(main, ["status", str(git_repo)])

        assert result.exit_code == 0
        assert "clean" in result.output

    def test_dirty(self, runner: CliRunner, git_repo: Path):
        """Test untracked files are counted."""
        (git_repo / "new.txt").write_text("x\n")

        result = runner.invoke(main, ["status", str(git_repo)])

        assert result.exit_code == 0
        assert "dirty" in result.output
        assert "Untracked: 1" in result.output


class TestRecentCommand:
    """Tests for twt recent."""

    def test_shows_all_signals(self, runner: CliRunner, git_repo: Path):
        """Test all three recency lines are printed."""
        with patch(f"{CLI}.get_opencode_last_used", return_value=None):
            result = runner.invoke(main, ["recent", str(git_repo)])

        assert result.exit_code == 0
        assert "Files:" in result.output
        assert "OpenCode: N/A" in result.output
        assert "Combined:" in result.output

    def test_signals_computed_once(self, runner: CliRunner, git_repo: Path):
        """Test the combined line reuses the file and OpenCode values."""
        fs_time = datetime(2024, 1, 1, 12, 0)
        oc_time = datetime(2024, 1, 2, 12, 0)

        with patch(f"{CLI}.get_recent_time", return_value=(fs_time, None)) as mock_recent, \
                patch(f"{CLI}.get_opencode_last_used", return_value=oc_time) as mock_opencode, \
                patch(f"{CLI}.format_relative_time", side_effect=lambda t: t.isoformat()):
            result = runner.invoke(main, ["recent", str(git_repo)])

        assert result.exit_code == 0
        assert mock_recent.call_count == 1
        assert mock_opencode.call_count == 1
        assert f"Combined: {oc_time.isoformat()}" in result.output


class TestListCommand:
    """Tests for twt list."""

    @pytest.fixture
    def collected(self):
        items = [_item("b", session=True), _item("a", dirty=True), _item("c")]
        result = CollectResult(repos=items, sessions=[items[0]])
        with patch(f"{CLI}.collect_items", return_value=result), \
                patch(f"{CLI}.TmuxSessionLister") as mock_lister:
            mock_lister.return_value.session_map.return_value = {}
            yield

    def test_table(self, runner: CliRunner, collected, temp_directory: Path):
        """Test the table lists every item."""
        result = runner.invoke(main, ["--config", str(temp_directory / "none.json"), "list"])

        assert result.exit_code == 0
        for title in ("a", "b", "c"):
            assert f"/r/{title}" in result.output

    def test_json_sorted_active(self, runner: CliRunner, collected, temp_directory: Path):
        """Test JSON output honours the sort order."""
        result = runner.invoke(
            main,
            ["--config", str(temp_directory / "none.json"), "list", "--json", "--sort", "active"],
        )

        assert result.exit_code == 0
        assert [item["title"] for item in json.loads(result.output)] == ["b", "a", "c"]

    def test_dirty_filter(self, runner: CliRunner, collected, temp_directory: Path):
        """Test --dirty keeps only items with changes."""
        result = runner.invoke(main, ["--config", str(temp_directory / "none.json"), "list", "--json", "--dirty"])

        assert [item["title"] for item in json.loads(result.output)] == ["a"]

    def test_sessions_only(self, runner: CliRunner, collected, temp_directory: Path):
        """Test --sessions keeps only items with a tmux session."""
        result = runner.invoke(main, ["--config", str(temp_directory / "none.json"), "list", "--json", "--sessions"])

        assert [item["title"] for item in json.loads(result.output)] == ["b"]

    def test_invalid_sort(self, runner: CliRunner, temp_directory: Path):
        """Test an unknown sort order is rejected."""
        result = runner.invoke(main, ["--config", str(temp_directory / "none.json"), "list", "--sort", "size"])

        assert result.exit_code == 2


class TestSessionNameCommand:
    """Tests for twt session-name."""

    def test_main_checkout(self, runner: CliRunner, git_repo: Path):
        """Test the main checkout maps to the main session."""
        result = runner.invoke(main, ["session-name", str(git_repo)])

        assert result.exit_code == 0
        assert result.output.strip() == "test-repo_main"

    def test_task_worktree(self, runner: CliRunner, git_worktree: Path):
        """Test a task worktree maps to its own session."""
        result = runner.invoke(main, ["session-name", str(git_worktree)])

        assert result.exit_code == 0
        assert result.output.strip() == "test-repo_feature-x"

    def test_outside_repository(self, runner: CliRunner, temp_directory: Path):
        """Test a non-repository path is an error."""
        result = runner.invoke(main, ["session-name", str(temp_directory)])

        assert result.exit_code == 1
