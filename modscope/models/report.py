"""Report aggregation models.

A ``ModerationReport`` carries exactly one payload class per report type.
The report's ``type`` is read off the payload, so the discriminant and the
payload shape cannot disagree.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Union

from modscope.models.channels import ChannelHealth, ServerOptimization
from modscope.models.links import LinkSafetyReport
from modscope.models.risk import SEVERITY_RANK, Severity, UserRiskProfile


class ReportType(Enum):
    USER_SAFETY = "user_safety"
    CHANNEL_OPTIMIZATION = "channel_optimization"
    SERVER_HEALTH = "server_health"
    COMPREHENSIVE = "comprehensive"


class IssueType(Enum):
    USER_VIOLATION = "user_violation"
    CHANNEL_PROBLEM = "channel_problem"
    SERVER_ISSUE = "server_issue"
    SAFETY_CONCERN = "safety_concern"


class RecommendationCategory(Enum):
    MODERATION = "moderation"
    CHANNEL_MANAGEMENT = "channel_management"
    COMMUNITY_BUILDING = "community_building"
    SAFETY = "safety"


class RecommendationPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


PRIORITY_RANK: dict[RecommendationPriority, int] = {
    RecommendationPriority.HIGH: 3,
    RecommendationPriority.MEDIUM: 2,
    RecommendationPriority.LOW: 1,
}


class CommunityTrend(Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


@dataclass(frozen=True)
class Issue:
    id: str
    type: IssueType
    severity: Severity
    title: str
    description: str
    evidence: tuple[str, ...] = ()
    suggested_actions: tuple[str, ...] = ()
    timeframe: str = ""
    auto_flag: bool = False
    affected_users: tuple[str, ...] = ()
    affected_channels: tuple[str, ...] = ()


@dataclass(frozen=True)
class Recommendation:
    id: str
    category: RecommendationCategory
    priority: RecommendationPriority
    title: str
    description: str
    expected_impact: str
    implementation: tuple[str, ...] = ()
    time_estimate: str = ""
    resources: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReportMetrics:
    total_users: int = 0
    active_users: int = 0
    risk_users: int = 0
    total_channels: int = 0
    active_channels: int = 0
    server_health_score: float = 0.0  # 0 - 100
    community_trend: CommunityTrend = CommunityTrend.STABLE
    violations_this_week: int = 0
    engagement_rate: int = 0  # Percent


# -- payloads ----------------------------------------------------------------


@dataclass(frozen=True)
class UserSafetyData:
    kind: ClassVar[ReportType] = ReportType.USER_SAFETY

    user_profiles: tuple[UserRiskProfile, ...]  # High-risk profiles only
    total_analyzed: int
    risk_distribution: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ChannelOptimizationData:
    kind: ClassVar[ReportType] = ReportType.CHANNEL_OPTIMIZATION

    server_optimization: ServerOptimization
    channel_healths: tuple[ChannelHealth, ...] = ()
    deletion_candidates: tuple[str, ...] = ()


@dataclass(frozen=True)
class ServerHealthData:
    kind: ClassVar[ReportType] = ReportType.SERVER_HEALTH

    link_report: LinkSafetyReport
    messages_scanned: int = 0


@dataclass(frozen=True)
class ComprehensiveData:
    kind: ClassVar[ReportType] = ReportType.COMPREHENSIVE

    user_safety: UserSafetyData
    channel_optimization: ChannelOptimizationData
    overall_health: float


ReportPayload = Union[UserSafetyData, ChannelOptimizationData, ServerHealthData, ComprehensiveData]


@dataclass(frozen=True)
class ModerationReport:
    """Top-level output of one analysis call."""

    generated_at: datetime
    summary: str
    high_priority_issues: tuple[Issue, ...]
    recommendations: tuple[Recommendation, ...]
    metrics: ReportMetrics
    data: ReportPayload

    @property
    def type(self) -> ReportType:
        return self.data.kind

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible values."""
        data = to_plain(self)
        data["type"] = self.type.value
        return data


def sort_issues(issues) -> tuple[Issue, ...]:
    """Stable sort, most severe first."""
    return tuple(sorted(issues, key=lambda i: SEVERITY_RANK[i.severity], reverse=True))


def sort_recommendations(recommendations) -> tuple[Recommendation, ...]:
    """Stable sort, highest priority first."""
    return tuple(
        sorted(recommendations, key=lambda r: PRIORITY_RANK[r.priority], reverse=True)
    )


def to_plain(value: Any) -> Any:
    """Recursively convert dataclasses, enums and datetimes to plain values."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value
