"""Behavior pattern detection across a user's message sequence.

Every detector follows the same template: measure a ratio or count, compare
it to a threshold, and turn it into a bounded confidence. Detectors are kept
in an ordered registry so new pattern types slot in without touching the
existing ones.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from modscope.analyzers.activity import as_utc
from modscope.lexicon.tables import LexiconTables
from modscope.models.chat import Message
from modscope.models.risk import BehaviorPattern, PatternType

PROFANITY_RATIO_THRESHOLD = 0.3

RAPID_WINDOW_SIZE = 5
RAPID_WINDOW_SECONDS = 60
RAPID_BURST_THRESHOLD = 3
RAPID_CONFIDENCE_SCALE = 10

MAX_EXAMPLES = 3
TIMESPAN_LABEL = "recent activity"

PatternDetector = Callable[[Sequence[Message], LexiconTables], "BehaviorPattern | None"]


def detect_excessive_profanity(
    messages: Sequence[Message], tables: LexiconTables
) -> BehaviorPattern | None:
    """Share of messages containing any lexicon word above 30%."""
    if not messages:
        return None

    matching = [m for m in messages if tables.has_toxic_keyword(m.content)]
    ratio = len(matching) / len(messages)
    if ratio <= PROFANITY_RATIO_THRESHOLD:
        return None

    return BehaviorPattern(
        pattern=PatternType.EXCESSIVE_PROFANITY,
        confidence=min(ratio, 1.0),
        frequency=len(matching),
        examples=tuple(m.content for m in matching[:MAX_EXAMPLES]),
        timespan=TIMESPAN_LABEL,
    )


def detect_rapid_posting(
    messages: Sequence[Message], tables: LexiconTables
) -> BehaviorPattern | None:
    """More than three 5-message windows posted within one minute."""
    bursts = count_bursts(messages)
    if bursts <= RAPID_BURST_THRESHOLD:
        return None

    return BehaviorPattern(
        pattern=PatternType.RAPID_POSTING,
        confidence=min(bursts / RAPID_CONFIDENCE_SCALE, 1.0),
        frequency=bursts,
        examples=tuple(m.content for m in messages[:MAX_EXAMPLES]),
        timespan=TIMESPAN_LABEL,
    )


def count_bursts(
    messages: Sequence[Message],
    window: int = RAPID_WINDOW_SIZE,
    max_span_seconds: float = RAPID_WINDOW_SECONDS,
) -> int:
    """Count sliding windows (input order) whose timestamps span under the limit."""
    bursts = 0
    for start in range(len(messages) - window + 1):
        if _is_burst(messages[start : start + window], max_span_seconds):
            bursts += 1
    return bursts


def _is_burst(window: Sequence[Message], max_span_seconds: float) -> bool:
    times = [as_utc(m.timestamp) for m in window if m.timestamp is not None]
    if len(times) < 2:
        return False
    return (max(times) - min(times)).total_seconds() < max_span_seconds


PATTERN_DETECTORS: tuple[PatternDetector, ...] = (
    detect_excessive_profanity,
    detect_rapid_posting,
)


def analyze_behavior_patterns(
    messages: Sequence[Message],
    tables: LexiconTables,
    detectors: Sequence[PatternDetector] = PATTERN_DETECTORS,
) -> list[BehaviorPattern]:
    """Run every detector in order and collect the patterns they emit."""
    patterns = []
    for detector in detectors:
        pattern = detector(messages, tables)
        if pattern is not None:
            patterns.append(pattern)
    return patterns
