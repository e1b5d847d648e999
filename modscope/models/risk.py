"""Per-user risk models: violations, behavior patterns, activity and actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ViolationType(Enum):
    HARASSMENT = "harassment"
    SPAM = "spam"
    TOXICITY = "toxicity"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    RULE_VIOLATION = "rule_violation"
    SUSPICIOUS_LINKS = "suspicious_links"


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_RANK: dict[Severity, int] = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class PatternType(Enum):
    EXCESSIVE_PROFANITY = "excessive_profanity"
    TARGETED_HARASSMENT = "targeted_harassment"
    SPAM_POSTING = "spam_posting"
    LINK_FARMING = "link_farming"
    RAPID_POSTING = "rapid_posting"
    OFF_TOPIC = "off_topic"
    BOT_LIKE = "bot_like"


class ActionType(Enum):
    MONITOR = "monitor"
    WARN = "warn"
    MUTE = "mute"
    KICK = "kick"
    BAN = "ban"
    REQUIRE_VERIFICATION = "require_verification"


class ActionPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


@dataclass(frozen=True)
class Violation:
    """A single detected rule infraction tied to one message."""

    id: str
    type: ViolationType
    severity: Severity
    description: str
    evidence: tuple[str, ...]
    timestamp: str  # ISO 8601, or "unknown"
    channel: str
    resolved: bool = False


@dataclass(frozen=True)
class BehaviorPattern:
    """A frequency-based signal aggregated across a user's messages."""

    pattern: PatternType
    confidence: float  # 0.0 - 1.0
    frequency: int
    examples: tuple[str, ...] = ()  # At most 3
    timespan: str = "recent activity"


@dataclass(frozen=True)
class ActivitySummary:
    messages_last_24h: int = 0
    messages_last_week: int = 0
    average_message_length: float = 0.0
    peak_activity_hours: tuple[int, ...] = ()
    channel_distribution: dict[str, int] = field(default_factory=dict)
    reaction_ratio: float = 0.0  # 0.0 - 1.0


@dataclass(frozen=True)
class ModerationAction:
    """A recommended (never enforced) moderation step."""

    action: ActionType
    priority: ActionPriority
    reason: str
    duration: str | None = None
    auto_flag: bool = False


@dataclass(frozen=True)
class UserRiskProfile:
    """Everything the engine knows about one user for one analysis call."""

    user_id: str
    username: str
    risk_score: int  # 0 - 100
    violations: tuple[Violation, ...]
    behavior_patterns: tuple[BehaviorPattern, ...]
    recent_activity: ActivitySummary
    recommended_action: ModerationAction
    message_count: int = 0
    channels_active: tuple[str, ...] = ()
    join_date: datetime | None = None

    def summary(self) -> str:
        return (
            f"[{self.risk_score:>3}] {self.username}: "
            f"{len(self.violations)} violation(s), "
            f"{self.recommended_action.action.value}"
        )
