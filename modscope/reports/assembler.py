"""Report assembler -- orchestrates per-user and per-channel analyses.

Each ``generate_*`` method recomputes everything from the inputs it is
given and returns a ``ModerationReport`` whose payload matches its type.
Missing channel data never fails a report: counts fall back to zero and the
channel health to the configured neutral value.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import cast

from modscope.analyzers.activity import as_utc
from modscope.analyzers.profiler import UserProfiler
from modscope.config import EngineConfig
from modscope.links.classifier import extract_links, generate_safety_report
from modscope.models.channels import ChannelHealth, ServerOptimization
from modscope.models.chat import Message, Server, User
from modscope.models.links import LinkSafetyResult, LinkStatus
from modscope.models.report import (
    ChannelOptimizationData,
    CommunityTrend,
    ComprehensiveData,
    Issue,
    IssueType,
    ModerationReport,
    Recommendation,
    RecommendationCategory,
    RecommendationPriority,
    ReportMetrics,
    ServerHealthData,
    UserSafetyData,
    sort_issues,
    sort_recommendations,
)
from modscope.models.risk import Severity, UserRiskProfile
from modscope.reports.channel_health import ChannelHealthAnalyzer
from modscope.reports.formatter import format_report_for_ai, format_score

logger = logging.getLogger(__name__)

DECLINING_RISK_RATIO = 0.1
IMPROVING_RISK_RATIO = 0.05
DECLINING_CHANNEL_HEALTH = 60
IMPROVING_CHANNEL_HEALTH = 80
DELETE_CONFIDENCE = 0.8

_ALL_USERS_KEYWORDS = ("harass", "toxic")
_NEW_USER_KEYWORDS = ("new", "recent")
_DELETE_KEYWORDS = ("delete", "remove")
_INACTIVE_KEYWORDS = ("inactive", "unused")


@dataclass(frozen=True)
class ReportAssembler:
    """Stateless report service. Construct once and share freely."""

    profiler: UserProfiler = field(default_factory=UserProfiler)
    channel_analyzer: ChannelHealthAnalyzer | None = None

    @property
    def config(self) -> EngineConfig:
        return self.profiler.config

    # -- user safety ---------------------------------------------------------

    def generate_user_safety_report(
        self,
        messages: Sequence[Message],
        users: Sequence[User],
        query: str | None = None,
        now: datetime | None = None,
    ) -> ModerationReport:
        now = _now(now)
        logger.info("Generating user safety report (%d messages, %d users)", len(messages), len(users))

        targets = filter_users_by_query(users, query, now, self.config.new_user_days)
        profiles = self.profiler.analyze_multiple_users(
            [u.id for u in targets], messages, users, now=now
        )
        high_risk = [p for p in profiles if p.risk_score >= self.config.high_risk_threshold]
        active = sum(1 for p in profiles if p.message_count > 0)

        metrics = ReportMetrics(
            total_users=len(users),
            active_users=min(active, len(users)),
            risk_users=len(high_risk),
            server_health_score=user_health_score(profiles),
            community_trend=community_trend(len(high_risk), len(profiles)),
            violations_this_week=sum(len(p.violations) for p in high_risk),
            engagement_rate=round(active / len(profiles) * 100) if profiles else 0,
        )

        return ModerationReport(
            generated_at=now,
            summary=_user_safety_summary(profiles, high_risk, self.config.critical_issue_threshold),
            high_priority_issues=sort_issues(self._user_issues(high_risk)),
            recommendations=sort_recommendations(_user_recommendations(high_risk)),
            metrics=metrics,
            data=UserSafetyData(
                user_profiles=tuple(high_risk),
                total_analyzed=len(profiles),
                risk_distribution=risk_distribution(profiles),
            ),
        )

    def _user_issues(self, profiles: Sequence[UserRiskProfile]) -> list[Issue]:
        issues = []
        for profile in profiles:
            if profile.risk_score < self.config.critical_issue_threshold:
                continue
            issues.append(
                Issue(
                    id=f"critical_user_{profile.user_id}",
                    type=IssueType.USER_VIOLATION,
                    severity=Severity.CRITICAL,
                    title=f"Critical Risk User: {profile.username}",
                    description=(
                        f"User shows severe behavioral issues with "
                        f"{len(profile.violations)} violations"
                    ),
                    affected_users=(profile.username,),
                    evidence=tuple(v.description for v in profile.violations),
                    suggested_actions=(profile.recommended_action.reason,),
                    timeframe="Immediate action required",
                    auto_flag=profile.recommended_action.auto_flag,
                )
            )
        return issues

    # -- channel optimization ------------------------------------------------

    def generate_channel_optimization_report(
        self,
        server: Server | None,
        query: str | None = None,
        now: datetime | None = None,
    ) -> ModerationReport:
        now = _now(now)

        if server is None or self.channel_analyzer is None:
            logger.warning("No channel data supplied; using neutral channel metrics")
            optimization = ServerOptimization(optimization_score=self.config.neutral_channel_health)
            healths: list[ChannelHealth] = []
            total_channels = 0
        else:
            logger.info("Generating channel optimization report for %s", server.name)
            optimization = self.channel_analyzer.analyze_server(server)
            healths = [self.channel_analyzer.analyze_channel(c, server) for c in server.text_channels]
            total_channels = len(server.text_channels)

        targets = filter_channels_by_query(healths, query)
        active = sum(1 for h in healths if h.activity_level != "dead")
        health = max(0.0, min(100.0, float(optimization.optimization_score)))

        metrics = ReportMetrics(
            total_channels=total_channels,
            active_channels=min(active, total_channels),
            server_health_score=health,
            community_trend=CommunityTrend.STABLE,
            engagement_rate=(
                round(sum(h.engagement_rate for h in healths) / len(healths) * 100) if healths else 0
            ),
        )

        return ModerationReport(
            generated_at=now,
            summary=(
                f"Server has {metrics.active_channels}/{metrics.total_channels} active channels. "
                f"Optimization score: {format_score(health)}/100. "
                f"{len(optimization.recommendations)} improvement opportunities identified."
            ),
            high_priority_issues=sort_issues(_channel_issues(targets)),
            recommendations=sort_recommendations(_channel_recommendations(optimization)),
            metrics=metrics,
            data=ChannelOptimizationData(
                server_optimization=optimization,
                channel_healths=tuple(targets),
                deletion_candidates=tuple(optimization.deletion_candidates),
            ),
        )

    # -- comprehensive -------------------------------------------------------

    def generate_comprehensive_report(
        self,
        server: Server | None,
        messages: Sequence[Message],
        users: Sequence[User],
        query: str | None = None,
        now: datetime | None = None,
    ) -> ModerationReport:
        now = _now(now)
        logger.info("Generating comprehensive moderation report")

        user_report = self.generate_user_safety_report(messages, users, query=query, now=now)
        channel_report = self.generate_channel_optimization_report(server, query=query, now=now)
        um, cm = user_report.metrics, channel_report.metrics

        metrics = ReportMetrics(
            total_users=um.total_users,
            active_users=um.active_users,
            risk_users=um.risk_users,
            total_channels=cm.total_channels,
            active_channels=cm.active_channels,
            server_health_score=round((um.server_health_score + cm.server_health_score) / 2),
            community_trend=combined_trend(um.community_trend, cm.server_health_score),
            violations_this_week=um.violations_this_week,
            engagement_rate=round((um.engagement_rate + cm.engagement_rate) / 2),
        )

        return ModerationReport(
            generated_at=now,
            summary=(
                f"Overall server health: {format_score(metrics.server_health_score)}/100. "
                f"Community trend: {metrics.community_trend.value}. "
                f"{metrics.risk_users} users need attention, "
                f"{metrics.active_channels}/{metrics.total_channels} channels active."
            ),
            high_priority_issues=sort_issues(
                user_report.high_priority_issues + channel_report.high_priority_issues
            ),
            recommendations=sort_recommendations(
                user_report.recommendations + channel_report.recommendations
            ),
            metrics=metrics,
            data=ComprehensiveData(
                user_safety=cast(UserSafetyData, user_report.data),
                channel_optimization=cast(ChannelOptimizationData, channel_report.data),
                overall_health=metrics.server_health_score,
            ),
        )

    # -- server health (link sweep) ------------------------------------------

    def generate_server_health_report(
        self,
        messages: Sequence[Message],
        users: Sequence[User],
        now: datetime | None = None,
    ) -> ModerationReport:
        now = _now(now)

        posters: dict[str, list[str]] = {}
        for message in messages:
            for url in extract_links(message.content):
                authors = posters.setdefault(url, [])
                if message.user not in authors:
                    authors.append(message.user)

        link_report = generate_safety_report(posters, self.profiler.tables)
        flagged = link_report.flagged
        logger.info("Scanned %d message(s): %s", len(messages), link_report.summary())

        authors = {m.user for m in messages}
        active = sum(1 for u in users if u.id in authors or u.name in authors)
        flagged_posters = {a for r in flagged for a in posters[r.url]}

        if link_report.dangerous_links:
            trend = CommunityTrend.DECLINING
        elif link_report.total_links and link_report.safe_links == link_report.total_links:
            trend = CommunityTrend.IMPROVING
        else:
            trend = CommunityTrend.STABLE

        metrics = ReportMetrics(
            total_users=len(users),
            active_users=active,
            risk_users=len(flagged_posters),
            server_health_score=(
                round(link_report.safe_links / link_report.total_links * 100)
                if link_report.total_links
                else 100
            ),
            community_trend=trend,
            violations_this_week=len(flagged),
            engagement_rate=round(active / len(users) * 100) if users else 0,
        )

        return ModerationReport(
            generated_at=now,
            summary=f"Scanned {len(messages)} message(s) and found {link_report.summary()}.",
            high_priority_issues=sort_issues(
                _link_issue(i, r, posters[r.url]) for i, r in enumerate(flagged)
            ),
            recommendations=sort_recommendations(
                _link_recommendations(link_report.dangerous_links, len(flagged))
            ),
            metrics=metrics,
            data=ServerHealthData(link_report=link_report, messages_scanned=len(messages)),
        )

    # -- rendering -----------------------------------------------------------

    def format_report_for_ai(self, report: ModerationReport, query: str = "") -> str:
        return format_report_for_ai(report, query, rules=self.profiler.tables.rules)


# ---------------------------------------------------------------------------
# Query narrowing
# ---------------------------------------------------------------------------


def filter_users_by_query(
    users: Sequence[User],
    query: str | None,
    now: datetime,
    new_user_days: int = 30,
) -> list[User]:
    """Narrow the analyzed users by keywords in *query*.

    "harass"/"toxic" keep everyone; "new"/"recent" keep users who joined
    fewer than *new_user_days* days before *now* (users without a join date
    are dropped). Anything else keeps everyone.
    """
    if not query:
        return list(users)

    lower = query.lower()
    if any(k in lower for k in _ALL_USERS_KEYWORDS):
        return list(users)

    if any(k in lower for k in _NEW_USER_KEYWORDS):
        cutoff = timedelta(days=new_user_days)
        now = as_utc(now)
        return [u for u in users if u.join_date is not None and now - as_utc(u.join_date) < cutoff]

    return list(users)


def filter_channels_by_query(channels: Sequence[ChannelHealth], query: str | None) -> list[ChannelHealth]:
    if not query:
        return list(channels)

    lower = query.lower()
    if any(k in lower for k in _DELETE_KEYWORDS):
        return [
            c for c in channels if c.recommendation.action == "delete" or c.activity_level == "dead"
        ]
    if any(k in lower for k in _INACTIVE_KEYWORDS):
        return [c for c in channels if c.activity_level in ("dead", "low")]

    return list(channels)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def user_health_score(profiles: Sequence[UserRiskProfile]) -> float:
    """100 minus the average risk score; 100 when nobody was analyzed."""
    if not profiles:
        return 100.0
    average = sum(p.risk_score for p in profiles) / len(profiles)
    return max(0.0, 100.0 - average)


def community_trend(high_risk: int, analyzed: int) -> CommunityTrend:
    if analyzed == 0:
        return CommunityTrend.STABLE
    ratio = high_risk / analyzed
    if ratio > DECLINING_RISK_RATIO:
        return CommunityTrend.DECLINING
    if ratio < IMPROVING_RISK_RATIO:
        return CommunityTrend.IMPROVING
    return CommunityTrend.STABLE


def combined_trend(user_trend: CommunityTrend, channel_health: float) -> CommunityTrend:
    if user_trend == CommunityTrend.DECLINING or channel_health < DECLINING_CHANNEL_HEALTH:
        return CommunityTrend.DECLINING
    if user_trend == CommunityTrend.IMPROVING and channel_health > IMPROVING_CHANNEL_HEALTH:
        return CommunityTrend.IMPROVING
    return CommunityTrend.STABLE


def risk_distribution(profiles: Sequence[UserRiskProfile]) -> dict[str, int]:
    distribution = {"low": 0, "medium": 0, "high": 0, "critical": 0}
    for p in profiles:
        if p.risk_score >= 80:
            distribution["critical"] += 1
        elif p.risk_score >= 60:
            distribution["high"] += 1
        elif p.risk_score >= 30:
            distribution["medium"] += 1
        else:
            distribution["low"] += 1
    return distribution


# ---------------------------------------------------------------------------
# Issues, recommendations and summaries
# ---------------------------------------------------------------------------


def _user_recommendations(high_risk: Sequence[UserRiskProfile]) -> list[Recommendation]:
    if not high_risk:
        return []
    return [
        Recommendation(
            id="enhance_moderation",
            category=RecommendationCategory.MODERATION,
            priority=RecommendationPriority.HIGH,
            title="Enhance Moderation Protocols",
            description=f"{len(high_risk)} users require immediate attention",
            expected_impact="Improved community safety and reduced harassment",
            implementation=(
                "Review flagged users immediately",
                "Implement stricter chat monitoring",
                "Consider temporary mutes for repeat offenders",
            ),
            time_estimate="1-2 hours",
        )
    ]


def _channel_issues(channels: Sequence[ChannelHealth]) -> list[Issue]:
    issues = []
    for channel in channels:
        rec = channel.recommendation
        if rec.action != "delete" or rec.confidence <= DELETE_CONFIDENCE:
            continue
        issues.append(
            Issue(
                id=f"delete_channel_{channel.channel_id}",
                type=IssueType.CHANNEL_PROBLEM,
                severity=Severity.MEDIUM,
                title=f"Channel Deletion Candidate: #{channel.channel_name}",
                description=rec.reason,
                affected_channels=(channel.channel_name,),
                evidence=(
                    f"Health Score: {format_score(channel.health_score)}",
                    f"Last Activity: {channel.last_activity}",
                ),
                suggested_actions=(f"Delete channel #{channel.channel_name}",),
                timeframe="Within 1 week",
            )
        )
    return issues


def _channel_recommendations(optimization: ServerOptimization) -> list[Recommendation]:
    redundant = len(optimization.redundant_channels)
    if not redundant:
        return []
    return [
        Recommendation(
            id="consolidate_channels",
            category=RecommendationCategory.CHANNEL_MANAGEMENT,
            priority=RecommendationPriority.MEDIUM,
            title="Consolidate Redundant Channels",
            description=f"{redundant} channels have overlapping purposes",
            expected_impact="Reduced confusion and increased activity in remaining channels",
            implementation=(
                "Identify channel pairs with similar content",
                "Announce consolidation plan to community",
                "Merge channels and archive old ones",
            ),
            time_estimate="2-3 hours",
        )
    ]


def _link_issue(index: int, result: LinkSafetyResult, posters: Sequence[str]) -> Issue:
    dangerous = result.status == LinkStatus.DANGEROUS
    return Issue(
        id=f"{result.status.value}_link_{index}",
        type=IssueType.SAFETY_CONCERN,
        severity=Severity.HIGH if dangerous else Severity.MEDIUM,
        title="Dangerous Link Shared" if dangerous else "Suspicious Link Shared",
        description=f"{result.url} ({result.reasons[0]})",
        affected_users=tuple(posters),
        evidence=result.reasons,
        suggested_actions=(
            ("Delete the message and review the poster",)
            if dangerous
            else ("Review the link before it spreads",)
        ),
        timeframe="Immediate action required" if dangerous else "Within 24 hours",
        auto_flag=dangerous,
    )


def _link_recommendations(dangerous: int, flagged: int) -> list[Recommendation]:
    if not flagged:
        return []
    return [
        Recommendation(
            id="link_filtering",
            category=RecommendationCategory.SAFETY,
            priority=RecommendationPriority.HIGH if dangerous else RecommendationPriority.MEDIUM,
            title="Enable Link Filtering",
            description=f"{flagged} flagged link(s) were shared in the analyzed window",
            expected_impact="Fewer phishing and malware exposures",
            implementation=(
                "Block known malicious domains at post time",
                "Hold links from new members for review",
                "Remind members not to download unknown executables",
            ),
            time_estimate="30 minutes",
        )
    ]


def _user_safety_summary(
    profiles: Sequence[UserRiskProfile],
    high_risk: Sequence[UserRiskProfile],
    critical_threshold: int,
) -> str:
    if not high_risk:
        return (
            f"Analyzed {len(profiles)} users - community shows healthy behavior patterns "
            f"with no high-risk users detected."
        )
    critical = sum(1 for p in high_risk if p.risk_score >= critical_threshold)
    return (
        f"Found {len(high_risk)} users requiring immediate attention out of "
        f"{len(profiles)} analyzed. {critical} users show critical risk levels."
    )


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)
