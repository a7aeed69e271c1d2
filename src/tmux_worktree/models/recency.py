"""Pydantic models for recency lookups."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RecencyRecord(BaseModel):
    """Best-effort "last active" time for a path."""

    path: str
    timestamp: Optional[datetime] = Field(
        default=None,
        description="Most recent activity; None means unknown",
    )

    @property
    def is_known(self) -> bool:
        return self.timestamp is not None


class SessionTime(BaseModel):
    """The ``time`` object of an OpenCode session file."""

    updated: int = Field(default=0, description="Epoch milliseconds of the last update")


class OpenCodeSession(BaseModel):
    """The fields read from an OpenCode ``ses_*.json`` file."""

    directory: str = ""
    time: SessionTime = Field(default_factory=SessionTime)
