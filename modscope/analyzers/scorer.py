"""Risk scorer -- deterministic weighted combination of all per-user signals.

score = sum of violation severity weights
      + sum of pattern confidence x 20
      + activity adjustments
clamped to [0, 100].
"""

from __future__ import annotations

from collections.abc import Sequence

from modscope.models.risk import ActivitySummary, BehaviorPattern, Severity, Violation

SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 8,
    Severity.LOW: 3,
}

PATTERN_WEIGHT = 20

EXCESSIVE_POSTING_MESSAGES = 100
EXCESSIVE_POSTING_PENALTY = 10
SHORT_MESSAGE_LENGTH = 10
SHORT_MESSAGE_PENALTY = 5
LOW_REACTION_RATIO = 0.1
LOW_REACTION_PENALTY = 8

MIN_SCORE = 0
MAX_SCORE = 100


def calculate_risk_score(
    violations: Sequence[Violation],
    patterns: Sequence[BehaviorPattern],
    activity: ActivitySummary,
) -> int:
    """Combine violations, patterns and activity into a score within [0, 100]."""
    score = violation_score(violations) + pattern_score(patterns) + activity_adjustment(activity)
    return int(round(max(MIN_SCORE, min(MAX_SCORE, score))))


def violation_score(violations: Sequence[Violation]) -> int:
    return sum(SEVERITY_WEIGHTS[v.severity] for v in violations)


def pattern_score(patterns: Sequence[BehaviorPattern]) -> float:
    return sum(p.confidence * PATTERN_WEIGHT for p in patterns)


def activity_adjustment(activity: ActivitySummary) -> int:
    adjustment = 0
    if activity.messages_last_24h > EXCESSIVE_POSTING_MESSAGES:
        adjustment += EXCESSIVE_POSTING_PENALTY
    if activity.average_message_length < SHORT_MESSAGE_LENGTH:
        adjustment += SHORT_MESSAGE_PENALTY
    if activity.reaction_ratio < LOW_REACTION_RATIO:
        adjustment += LOW_REACTION_PENALTY
    return adjustment
