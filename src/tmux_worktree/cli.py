"""CLI entry point for tmux-worktree."""

import json
import os
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from tmux_worktree.config import Config, load_config
from tmux_worktree.core.collector import collect_items, filter_dirty, sort_items
from tmux_worktree.core.discovery import find_git_repos
from tmux_worktree.core.git_status import get_status
from tmux_worktree.core.naming import get_repo_name, resolve_identity
from tmux_worktree.core.recency import (
    combine_recent_times,
    format_relative_time,
    get_opencode_last_used,
    get_recent_time,
)
from tmux_worktree.core.tmux_sessions import TmuxSessionLister
from tmux_worktree.core.worktree import get_repo_root, list_worktrees
from tmux_worktree.exceptions import TmuxWorktreeError
from tmux_worktree.logging_config import setup_logging
from tmux_worktree.models.item import SortBy, WorktreeItem
from tmux_worktree.models.worktree_info import Worktree

console = Console()


def get_config(ctx: click.Context) -> Config:
    """
    Load the configuration named on the command line.

    Raises:
        click.ClickException: If the configuration file is invalid.
    """
    try:
        return load_config(ctx.obj.get("config_path"))
    except TmuxWorktreeError as e:
        raise click.ClickException(str(e)) from e


def find_containing_worktree(worktrees: list[Worktree], path: str) -> Optional[Worktree]:
    """Pick the worktree whose directory is the closest ancestor of ``path``."""
    target = os.path.realpath(path)
    best: Optional[Worktree] = None
    best_len = -1

    for wt in worktrees:
        wt_path = os.path.realpath(wt.path)
        if target == wt_path or target.startswith(wt_path.rstrip(os.sep) + os.sep):
            if len(wt_path) > best_len:
                best, best_len = wt, len(wt_path)

    return best


def main_worktree_root(worktrees: list[Worktree], fallback: str) -> str:
    """The main checkout is listed first; a linked worktree's own toplevel is not the repo."""
    return worktrees[0].path if worktrees else fallback


def _status_cell(item: WorktreeItem) -> str:
    if item.status is None:
        return "[dim]unknown[/dim]"
    if item.is_dirty:
        return f"[yellow]{item.status.summary()}[/yellow]"
    return "[green]clean[/green]"


def _session_cell(item: WorktreeItem) -> str:
    if not item.has_session:
        return ""
    if item.attached:
        return f"[bold green]attached[/bold green] ({item.windows})"
    return f"[cyan]running[/cyan] ({item.windows})"


@click.group()
@click.version_option(package_name="tmux-worktree")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    help="Path to the JSON configuration file.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show informational log messages.")
@click.option("--debug", is_flag=True, help="Show debug log messages.")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], verbose: bool, debug: bool) -> None:
    """tmux-worktree - Git worktrees and their tmux sessions.

    Find repositories, list their worktrees and show which tmux session
    belongs to each one.
    """
    setup_logging(verbose=verbose, debug=debug)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command("repos")
@click.option(
    "-p",
    "--path",
    "paths",
    multiple=True,
    help="Search path (repeatable). Defaults to the configured search paths.",
)
@click.option("-d", "--depth", type=click.IntRange(min=0), help="Maximum scan depth.")
@click.pass_context
def list_repos(ctx: click.Context, paths: tuple[str, ...], depth: Optional[int]) -> None:
    """List git repositories found under the search paths.

    Example:
        twt repos
        twt repos -p ~/code -d 3
    """
    config = get_config(ctx)
    roots = list(paths) or config.search_paths
    max_depth = depth if depth is not None else config.depth

    if not roots:
        console.print("[yellow]No search paths configured.[/yellow]")
        return

    for repo in sorted(find_git_repos(roots, max_depth)):
        click.echo(repo)


@main.command("worktrees")
@click.argument("repo", type=click.Path(exists=True, file_okay=False), default=".")
def show_worktrees(repo: str) -> None:
    """List the worktrees of a repository with their session names.

    Example:
        twt worktrees ~/code/myrepo
    """
    try:
        root = get_repo_root(repo)
        worktrees = list_worktrees(root)
    except TmuxWorktreeError as e:
        raise click.ClickException(str(e)) from e

    if not worktrees:
        console.print("[yellow]No worktrees found.[/yellow]")
        return

    repo_name = get_repo_name(main_worktree_root(worktrees, root))

    table = Table(title=f"Worktrees of {repo_name}", show_header=True, header_style="bold cyan")
    table.add_column("Slug", style="bold")
    table.add_column("Branch", style="green")
    table.add_column("Commit", style="dim")
    table.add_column("Session")
    table.add_column("Path")

    for wt in worktrees:
        identity = resolve_identity(wt.path, repo_name, wt.is_main)
        slug = f"{identity.slug} [blue](root)[/blue]" if identity.is_root else identity.slug
        table.add_row(slug, wt.branch, wt.short_head, identity.session_name, wt.short_path)

    console.print()
    console.print(table)
    console.print()


@main.command("status")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("-t", "--timeout", type=float, default=2.0, show_default=True, help="Seconds to wait for git.")
def show_status(path: str, timeout: float) -> None:
    """Show change counts for a worktree."""
    try:
        status = get_status(path, timeout=timeout)
    except TmuxWorktreeError as e:
        raise click.ClickException(str(e)) from e

    state = "[yellow]dirty[/yellow]" if status.is_dirty else "[green]clean[/green]"
    console.print(f"[bold]Status:[/bold]    {state}")
    console.print(f"[bold]Modified:[/bold]  {status.modified}")
    console.print(f"[bold]Added:[/bold]     {status.added}")
    console.print(f"[bold]Deleted:[/bold]   {status.deleted}")
    console.print(f"[bold]Untracked:[/bold] {status.untracked}")


@main.command("recent")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
def show_recent(path: str) -> None:
    """Show when a worktree was last active."""
    path = os.path.abspath(path)
    mtime, error = get_recent_time(path)
    opencode_time = get_opencode_last_used(path)
    combined = combine_recent_times(mtime, opencode_time)

    files = format_relative_time(mtime)
    if error is not None:
        files += f" [yellow]({error})[/yellow]"

    console.print(f"[bold]Files:[/bold]    {files}")
    console.print(f"[bold]OpenCode:[/bold] {format_relative_time(opencode_time)}")
    console.print(f"[bold]Combined:[/bold] {format_relative_time(combined)}")


@main.command("list")
@click.option(
    "-s",
    "--sort",
    "sort_by",
    type=click.Choice([s.value for s in SortBy]),
    default=SortBy.NAME.value,
    show_default=True,
    help="Sort order.",
)
@click.option("--dirty", is_flag=True, help="Only show worktrees with uncommitted changes.")
@click.option("--sessions", "sessions_only", is_flag=True, help="Only show worktrees with a tmux session.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_items(ctx: click.Context, sort_by: str, dirty: bool, sessions_only: bool, as_json: bool) -> None:
    """List every worktree of every discovered repository.

    Example:
        twt list
        twt list --sort recent --dirty
    """
    config = get_config(ctx)
    sessions = TmuxSessionLister().session_map()
    result = collect_items(config, sessions=sessions)

    items = result.sessions if sessions_only else result.repos
    if dirty:
        items = filter_dirty(items)
    items = sort_items(items, SortBy(sort_by))

    if as_json:
        click.echo(json.dumps([item.model_dump(mode="json") for item in items], indent=2))
        return

    if not items:
        console.print("[yellow]No worktrees found.[/yellow]")
        return

    table = Table(title="Worktrees", show_header=True, header_style="bold cyan")
    table.add_column("Title", style="bold")
    table.add_column("Branch", style="green")
    table.add_column("Changes", justify="center")
    table.add_column("Session")
    table.add_column("Active", style="dim")
    table.add_column("Path")

    for item in items:
        table.add_row(
            item.title,
            item.branch,
            _status_cell(item),
            _session_cell(item),
            format_relative_time(item.recent_time),
            item.path,
        )

    console.print()
    console.print(table)
    console.print()


@main.command("session-name")
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
def show_session_name(path: str) -> None:
    """Print the tmux session name for the worktree containing PATH."""
    try:
        root = get_repo_root(path)
        worktrees = list_worktrees(root)
    except TmuxWorktreeError as e:
        raise click.ClickException(str(e)) from e

    worktree = find_containing_worktree(worktrees, path)
    if worktree is None:
        raise click.ClickException(f"No worktree of {root} contains {path}")

    repo_name = get_repo_name(main_worktree_root(worktrees, root))
    identity = resolve_identity(worktree.path, repo_name, worktree.is_main)
    click.echo(identity.session_name)


if __name__ == "__main__":
    main()
