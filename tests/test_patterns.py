"""Tests for behavior pattern detection."""

from datetime import datetime, timedelta, timezone

from modscope.analyzers.patterns import (
    analyze_behavior_patterns,
    count_bursts,
    detect_excessive_profanity,
    detect_rapid_posting,
)
from modscope.lexicon import default_tables
from modscope.models.chat import Message
from modscope.models.risk import PatternType

START = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _make_messages(contents, spacing_seconds=600):
    return [
        Message(
            id=f"m{i}",
            user="u1",
            content=content,
            timestamp=START + timedelta(seconds=i * spacing_seconds),
        )
        for i, content in enumerate(contents)
    ]


def _mixed(profane: int, total: int):
    return [f"you noob {i}" for i in range(profane)] + [
        f"good morning {i}" for i in range(total - profane)
    ]


def test_excessive_profanity_confidence_is_ratio():
    pattern = detect_excessive_profanity(_make_messages(_mixed(4, 10)), default_tables())
    assert pattern is not None
    assert pattern.pattern == PatternType.EXCESSIVE_PROFANITY
    assert pattern.confidence == 0.4
    assert pattern.frequency == 4
    assert pattern.examples == ("you noob 0", "you noob 1", "you noob 2")
    assert pattern.timespan == "recent activity"


def test_excessive_profanity_needs_more_than_thirty_percent():
    assert detect_excessive_profanity(_make_messages(_mixed(3, 10)), default_tables()) is None


def test_excessive_profanity_empty():
    assert detect_excessive_profanity([], default_tables()) is None


def test_rapid_posting_counts_every_window():
    messages = _make_messages(["hi"] * 10, spacing_seconds=1)
    assert count_bursts(messages) == 6

    pattern = detect_rapid_posting(messages, default_tables())
    assert pattern is not None
    assert pattern.pattern == PatternType.RAPID_POSTING
    assert pattern.frequency == 6
    assert pattern.confidence == 0.6


def test_rapid_posting_needs_more_than_three_bursts():
    assert detect_rapid_posting(_make_messages(["hi"] * 8, 1), default_tables()) is not None
    assert detect_rapid_posting(_make_messages(["hi"] * 7, 1), default_tables()) is None


def test_slow_posting_has_no_bursts():
    assert count_bursts(_make_messages(["hi"] * 10, spacing_seconds=30)) == 0


def test_bursts_use_input_order():
    messages = _make_messages(["hi"] * 10, spacing_seconds=1)
    messages[2] = Message(id="late", user="u1", content="hi", timestamp=START + timedelta(hours=1))
    # Every window containing index 2 spans an hour
    assert count_bursts(messages) == 3


def test_missing_timestamps_do_not_burst():
    messages = [Message(id=str(i), user="u1", content="hi") for i in range(10)]
    assert count_bursts(messages) == 0


def test_naive_and_aware_timestamps_mix():
    messages = _make_messages(["hi"] * 5, spacing_seconds=1)
    messages[0] = Message(id="naive", user="u1", content="hi", timestamp=START.replace(tzinfo=None))
    assert count_bursts(messages) == 1


def test_analyze_runs_detectors_in_order():
    messages = _make_messages(["you noob"] * 10, spacing_seconds=1)
    patterns = analyze_behavior_patterns(messages, default_tables())
    assert [p.pattern for p in patterns] == [
        PatternType.EXCESSIVE_PROFANITY,
        PatternType.RAPID_POSTING,
    ]


def test_analyze_accepts_custom_detectors():
    messages = _make_messages(["you noob"] * 10, spacing_seconds=1)
    assert analyze_behavior_patterns(messages, default_tables(), detectors=()) == []
