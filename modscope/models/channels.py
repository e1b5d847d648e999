"""Values produced by the external channel-health analyzer.

The engine treats these as opaque inputs: it filters and aggregates them but
never computes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ChannelRecommendation:
    action: str  # "keep" | "merge" | "archive" | "delete" | ...
    confidence: float = 0.0
    reason: str = ""


@dataclass(frozen=True)
class ChannelHealth:
    channel_id: str
    channel_name: str
    health_score: float = 0.0  # 0 - 100
    activity_level: str = "moderate"  # "dead" | "low" | "moderate" | "high"
    engagement_rate: float = 0.0  # 0.0 - 1.0
    last_activity: str = "unknown"
    recommendation: ChannelRecommendation = field(
        default_factory=lambda: ChannelRecommendation(action="keep")
    )


@dataclass(frozen=True)
class OptimizationRecommendation:
    action: str
    priority: str  # "low" | "medium" | "high"
    reason: str
    expected_impact: str = ""
    channel: str = ""


@dataclass(frozen=True)
class ServerOptimization:
    total_channels: int = 0
    active_channels: int = 0
    redundant_channels: tuple[str, ...] = ()
    deletion_candidates: tuple[str, ...] = ()
    optimization_score: float = 0.0  # 0 - 100
    recommendations: tuple[OptimizationRecommendation, ...] = ()
