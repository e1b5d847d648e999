"""Window files: one analysis window serialized as YAML or JSON.

A window holds the records a host would otherwise hand the engine directly::

    server:
      id: s1
      name: Example
      channels:
        - {id: c1, name: general}
    users:
      - {id: u1, name: alice, join_date: 2026-01-05}
    messages:
      - {id: m1, user: u1, content: "hi", timestamp: 2026-01-06T10:00:00Z, channel: general}
    rules:                      # optional, replaces the packaged rules
      - {number: 1, title: Be Respectful, violation_types: [harassment]}
    channel_health:             # optional, precomputed by the channel analyzer
      channels:
        - channel_id: c1
          channel_name: general
          health_score: 82
          activity_level: high
          recommendation: {action: keep, confidence: 0.9}
      optimization:
        optimization_score: 78

JSON is a subset of YAML, so both go through ``yaml.safe_load``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import yaml

from modscope.errors import TableLoadError, WindowLoadError
from modscope.lexicon.tables import server_rule_from_dict
from modscope.models.channels import (
    ChannelHealth,
    ChannelRecommendation,
    OptimizationRecommendation,
    ServerOptimization,
)
from modscope.models.chat import Channel, Message, Server, ServerRule, User
from modscope.reports.channel_health import StaticChannelHealth

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Window:
    users: tuple[User, ...] = ()
    messages: tuple[Message, ...] = ()
    rules: tuple[ServerRule, ...] = ()
    server: Server | None = None
    channel_health: StaticChannelHealth | None = None

    def summary(self) -> str:
        server = self.server.name if self.server else "no server"
        return f"{len(self.messages)} messages, {len(self.users)} users ({server})"


def load_window(path: str | Path, neutral_health: float = 70.0) -> Window:
    """Load a window file into input records."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise WindowLoadError(f"cannot read window: {e}", path) from e
    except yaml.YAMLError as e:
        raise WindowLoadError(f"invalid YAML/JSON: {e}", path) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise WindowLoadError("window file must contain a mapping", path)

    try:
        window = window_from_dict(data, neutral_health=neutral_health)
    except TableLoadError as e:
        raise WindowLoadError(e.message, path) from e
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise WindowLoadError(f"malformed window entry: {e}", path) from e

    logger.debug("Loaded window from %s: %s", path, window.summary())
    return window


def window_from_dict(data: dict[str, Any], neutral_health: float = 70.0) -> Window:
    health = data.get("channel_health")
    return Window(
        users=tuple(_user(u) for u in data.get("users") or []),
        messages=tuple(_message(m, i) for i, m in enumerate(data.get("messages") or [])),
        rules=tuple(server_rule_from_dict(r, i) for i, r in enumerate(data.get("rules") or [])),
        server=_server(data["server"]) if data.get("server") else None,
        channel_health=_channel_health(health, neutral_health) if health else None,
    )


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def _user(data: dict) -> User:
    user_id = str(data["id"])
    return User(
        id=user_id,
        name=str(data.get("name", user_id)),
        join_date=parse_timestamp(data.get("join_date"), f"user {user_id} join_date"),
    )


def _message(data: dict, index: int) -> Message:
    message_id = str(data.get("id", index))
    reactions = data.get("reactions")
    return Message(
        id=message_id,
        user=str(data["user"]),
        content=str(data.get("content", "")),
        timestamp=parse_timestamp(data.get("timestamp"), f"message {message_id} timestamp"),
        channel=str(data.get("channel", "general")),
        reactions=int(reactions) if reactions is not None else None,
    )


def _server(data: dict) -> Server:
    return Server(
        id=str(data.get("id", "")),
        name=str(data.get("name", "")),
        text_channels=tuple(
            Channel(id=str(c["id"]), name=str(c.get("name", c["id"])), description=c.get("description", ""))
            for c in data.get("channels") or []
        ),
    )


def _channel_health(data: dict, neutral_health: float) -> StaticChannelHealth:
    optimization = data.get("optimization")
    return StaticChannelHealth.from_values(
        (_health(c) for c in data.get("channels") or []),
        optimization=_optimization(optimization) if optimization else None,
        neutral_health=neutral_health,
    )


def _health(data: dict) -> ChannelHealth:
    rec = data.get("recommendation") or {}
    return ChannelHealth(
        channel_id=str(data["channel_id"]),
        channel_name=str(data.get("channel_name", data["channel_id"])),
        health_score=float(data.get("health_score", 0.0)),
        activity_level=data.get("activity_level", "moderate"),
        engagement_rate=float(data.get("engagement_rate", 0.0)),
        last_activity=str(data.get("last_activity", "unknown")),
        recommendation=ChannelRecommendation(
            action=rec.get("action", "keep"),
            confidence=float(rec.get("confidence", 0.0)),
            reason=rec.get("reason", ""),
        ),
    )


def _optimization(data: dict) -> ServerOptimization:
    return ServerOptimization(
        total_channels=int(data.get("total_channels", 0)),
        active_channels=int(data.get("active_channels", 0)),
        redundant_channels=tuple(data.get("redundant_channels") or ()),
        deletion_candidates=tuple(data.get("deletion_candidates") or ()),
        optimization_score=float(data.get("optimization_score", 0.0)),
        recommendations=tuple(
            OptimizationRecommendation(
                action=r["action"],
                priority=r.get("priority", "medium"),
                reason=r.get("reason", ""),
                expected_impact=r.get("expected_impact", ""),
                channel=r.get("channel", ""),
            )
            for r in data.get("recommendations") or []
        ),
    )


def parse_timestamp(value: Any, what: str = "timestamp") -> datetime | None:
    """Accept datetimes, dates and ISO-8601 strings; anything else becomes None."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    logger.warning("Ignoring unparseable %s: %r", what, value)
    return None
