"""Activity windowing: recency counts, message length, peak hours, channels."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from modscope.models.chat import Message
from modscope.models.risk import ActivitySummary

PEAK_HOURS = 3
DEFAULT_REACTION_RATIO = 0.5


def summarize_activity(
    messages: Sequence[Message],
    now: datetime | None = None,
    default_reaction_ratio: float = DEFAULT_REACTION_RATIO,
) -> ActivitySummary:
    """Summarize a user's messages relative to *now* (UTC when omitted).

    Messages without a timestamp count toward length, channels and reactions
    but not toward the recency windows or peak hours.
    """
    now = as_utc(now or datetime.now(timezone.utc))
    last_24h = now - timedelta(hours=24)
    last_week = now - timedelta(days=7)

    stamps = [as_utc(m.timestamp) for m in messages if m.timestamp is not None]

    return ActivitySummary(
        messages_last_24h=sum(1 for t in stamps if t > last_24h),
        messages_last_week=sum(1 for t in stamps if t > last_week),
        average_message_length=average_length(messages),
        peak_activity_hours=peak_hours(messages),
        channel_distribution=dict(Counter(m.channel for m in messages)),
        reaction_ratio=reaction_ratio(messages, default_reaction_ratio),
    )


def average_length(messages: Sequence[Message]) -> float:
    if not messages:
        return 0.0
    return sum(len(m.content) for m in messages) / len(messages)


def peak_hours(messages: Sequence[Message], limit: int = PEAK_HOURS) -> tuple[int, ...]:
    """Most frequent UTC hours of day; ties keep first-encountered order."""
    counts = Counter(
        as_utc(m.timestamp).astimezone(timezone.utc).hour for m in messages if m.timestamp is not None
    )
    # Counter preserves insertion order and most_common() sorts stably
    return tuple(hour for hour, _ in counts.most_common(limit))


def reaction_ratio(messages: Sequence[Message], default: float = DEFAULT_REACTION_RATIO) -> float:
    """Share of messages that drew a positive reaction.

    Falls back to *default* when no message carries reaction data at all.
    """
    reported = [m for m in messages if m.reactions is not None]
    if not messages or not reported:
        return min(max(default, 0.0), 1.0)
    reacted = sum(1 for m in reported if m.reactions > 0)
    return min(reacted / len(messages), 1.0)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
