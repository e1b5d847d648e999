"""Input records: the message window, its authors, and the server layout.

These are owned by whoever supplies the window. The engine only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Message:
    """A single chat message."""

    id: str
    user: str  # Author identifier as recorded by the message store
    content: str
    timestamp: datetime | None = None
    channel: str = "general"
    reactions: int | None = None  # Positive reactions; None = no reaction data


@dataclass(frozen=True)
class User:
    """A community member."""

    id: str
    name: str
    join_date: datetime | None = None


@dataclass(frozen=True)
class Channel:
    """A text channel on a server."""

    id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class Server:
    """Server layout handed to the channel-health collaborator."""

    id: str
    name: str
    text_channels: tuple[Channel, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ServerRule:
    """A numbered community rule and the violation types it covers."""

    number: int
    title: str
    violation_types: tuple[str, ...] = field(default_factory=tuple)
