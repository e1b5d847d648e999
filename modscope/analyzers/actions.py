"""Action recommender -- ordered threshold rules, first match wins."""

from __future__ import annotations

from collections.abc import Sequence

from modscope.models.risk import (
    ActionPriority,
    ActionType,
    ModerationAction,
    Severity,
    Violation,
)

BAN_SCORE = 85
MUTE_SCORE = 70
MUTE_HIGH_VIOLATIONS = 3
MUTE_DURATION = "24 hours"
WARN_SCORE = 50
MONITOR_SCORE = 30


def recommend_action(risk_score: int, violations: Sequence[Violation]) -> ModerationAction:
    """Map a score and its violation mix to a recommended action.

    Rules are evaluated in order and are not cumulative:

    1. score >= 85 or any critical violation -> ban (urgent)
    2. score >= 70 or >= 3 high violations   -> mute 24h (high)
    3. score >= 50                           -> warn (medium)
    4. score >= 30                           -> monitor (low)
    5. otherwise                             -> monitor (low), low risk
    """
    critical = sum(1 for v in violations if v.severity == Severity.CRITICAL)
    high = sum(1 for v in violations if v.severity == Severity.HIGH)

    if risk_score >= BAN_SCORE or critical > 0:
        return ModerationAction(
            action=ActionType.BAN,
            priority=ActionPriority.URGENT,
            reason="Multiple severe violations detected",
            auto_flag=True,
        )

    if risk_score >= MUTE_SCORE or high >= MUTE_HIGH_VIOLATIONS:
        return ModerationAction(
            action=ActionType.MUTE,
            priority=ActionPriority.HIGH,
            reason="Repeated rule violations and toxic behavior",
            duration=MUTE_DURATION,
            auto_flag=True,
        )

    if risk_score >= WARN_SCORE:
        return ModerationAction(
            action=ActionType.WARN,
            priority=ActionPriority.MEDIUM,
            reason="Concerning behavior patterns detected",
            auto_flag=True,
        )

    if risk_score >= MONITOR_SCORE:
        return ModerationAction(
            action=ActionType.MONITOR,
            priority=ActionPriority.LOW,
            reason="Minor violations, monitor for escalation",
        )

    return ModerationAction(
        action=ActionType.MONITOR,
        priority=ActionPriority.LOW,
        reason="Low risk user",
    )


def no_activity_action() -> ModerationAction:
    return ModerationAction(
        action=ActionType.MONITOR,
        priority=ActionPriority.LOW,
        reason="No activity found",
    )
