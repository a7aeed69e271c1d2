"""
Read-only view of running tmux sessions.

Sessions are matched to worktrees by name (see :mod:`tmux_worktree.core.naming`).
Creating and attaching sessions is left to the caller.
"""

import logging
import os
from typing import Optional

import libtmux
from libtmux.exc import LibTmuxException

from tmux_worktree.models.session import TmuxSession

logger = logging.getLogger(__name__)

WORKDIR_OPTION = "@workdir"


class TmuxSessionLister:
    """Lists tmux sessions through a lazily created libtmux server."""

    def __init__(self, server: Optional[libtmux.Server] = None):
        self._server = server

    @property
    def server(self) -> libtmux.Server:
        """Get or create libtmux server instance."""
        if self._server is None:
            self._server = libtmux.Server()
        return self._server

    def list_sessions(self) -> list[TmuxSession]:
        """
        List all tmux sessions.

        Returns:
            TmuxSession for every running session; empty if no server is running.
        """
        try:
            sessions = list(self.server.sessions)
        except (LibTmuxException, OSError) as e:
            logger.debug(f"Could not list tmux sessions: {e}")
            return []

        result = []
        for session in sessions:
            try:
                result.append(self._get_session_info(session))
            except (LibTmuxException, OSError) as e:
                logger.debug(f"Skipping tmux session {session.name}: {e}")

        return result

    def session_map(self) -> dict[str, TmuxSession]:
        """Map session name to TmuxSession."""
        return {s.name: s for s in self.list_sessions()}

    def _get_session_info(self, session: libtmux.Session) -> TmuxSession:
        """Extract session information from libtmux session object."""
        return TmuxSession(
            name=session.name,
            windows=len(session.windows),
            attached=int(session.session_attached or 0) > 0,
            workdir=self._get_session_workdir(session),
        )

    def _get_session_workdir(self, session: libtmux.Session) -> Optional[str]:
        """Prefer the @workdir option; fall back to the session path."""
        response = session.cmd("show-options", "-v", WORKDIR_OPTION)
        if response.stdout and response.stdout[0].strip():
            return response.stdout[0].strip()

        return session.session_path or None


def is_inside_tmux() -> bool:
    """Check if currently running inside a tmux session."""
    return "TMUX" in os.environ
