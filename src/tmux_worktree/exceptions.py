"""Custom exceptions for tmux-worktree."""

from typing import Optional


class TmuxWorktreeError(Exception):
    """Base exception for all tmux-worktree errors."""


class ExternalToolError(TmuxWorktreeError):
    """Raised when a shelled-out command is missing, fails, or returns unusable output."""

    def __init__(
        self,
        command: str,
        path: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.command = command
        self.path = path
        self.message = message

        error_msg = f"'{command}' failed"
        if path:
            error_msg += f" in {path}"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class GitTimeoutError(ExternalToolError, TimeoutError):
    """Raised when a git command exceeds its deadline and is killed."""

    def __init__(self, command: str, path: Optional[str] = None, timeout: float = 0.0):
        self.timeout = timeout
        super().__init__(command, path, f"timed out after {timeout:g} seconds")


class RecencyError(TmuxWorktreeError):
    """Base exception for recency scanning."""


class ScanTimeoutError(RecencyError, TimeoutError):
    """Returned alongside a partial result when a recency scan hits its deadline."""

    def __init__(self, path: str, timeout: float):
        self.path = path
        self.timeout = timeout
        super().__init__(f"scan of {path} timed out after {timeout:g} seconds")


class ScanError(RecencyError):
    """Returned when a recency scan cannot run at all."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"scan of {path} failed: {message}")


class ConfigError(TmuxWorktreeError):
    """Raised when the configuration file exists but cannot be used."""
