"""Tests for report assembly."""

import json
import logging
from datetime import datetime, timedelta, timezone

from modscope.analyzers import UserProfiler
from modscope.config import EngineConfig
from modscope.models.channels import (
    ChannelHealth,
    ChannelRecommendation,
    OptimizationRecommendation,
    ServerOptimization,
)
from modscope.models.chat import Channel, Message, Server, User
from modscope.models.report import (
    ChannelOptimizationData,
    CommunityTrend,
    IssueType,
    RecommendationPriority,
    ReportType,
    UserSafetyData,
)
from modscope.models.risk import Severity
from modscope.reports import ReportAssembler, StaticChannelHealth
from modscope.reports.assembler import (
    combined_trend,
    community_trend,
    filter_channels_by_query,
    filter_users_by_query,
    risk_distribution,
    user_health_score,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _make_message(user: str, content: str, index: int) -> Message:
    return Message(
        id=f"m{index}",
        user=user,
        content=content,
        timestamp=NOW - timedelta(minutes=10 * (index + 1)),
    )


def _make_users():
    return [
        User(id="u1", name="troll", join_date=NOW - timedelta(days=10)),
        User(id="u2", name="friendly", join_date=NOW - timedelta(days=60)),
    ]


def _make_messages(troll_messages: int = 3):
    messages = [_make_message("u1", "kill yourself", i) for i in range(troll_messages)]
    messages += [
        _make_message("u2", "good morning everyone", 10),
        _make_message("u2", "anyone up for a game later", 11),
    ]
    return messages


def _make_server() -> Server:
    return Server(
        id="s1",
        name="Example",
        text_channels=(
            Channel(id="c1", name="old-announcements"),
            Channel(id="c2", name="general"),
            Channel(id="c3", name="random"),
        ),
    )


def _make_channel_health() -> StaticChannelHealth:
    return StaticChannelHealth.from_values(
        [
            ChannelHealth(
                channel_id="c1",
                channel_name="old-announcements",
                health_score=5,
                activity_level="dead",
                engagement_rate=0.0,
                last_activity="90 days ago",
                recommendation=ChannelRecommendation("delete", 0.9, "No messages in 90 days"),
            ),
            ChannelHealth(
                channel_id="c2",
                channel_name="general",
                health_score=92,
                activity_level="high",
                engagement_rate=0.6,
                recommendation=ChannelRecommendation("keep", 0.95, "Healthy"),
            ),
            ChannelHealth(
                channel_id="c3",
                channel_name="random",
                health_score=40,
                activity_level="low",
                engagement_rate=0.3,
                recommendation=ChannelRecommendation("delete", 0.5, "Overlaps with general"),
            ),
        ],
        optimization=ServerOptimization(
            total_channels=3,
            active_channels=2,
            redundant_channels=("general", "random"),
            deletion_candidates=("old-announcements",),
            optimization_score=55,
            recommendations=(
                OptimizationRecommendation(
                    action="delete",
                    priority="high",
                    reason="Channel has been dead for 90 days",
                    expected_impact="Cleaner channel list",
                    channel="old-announcements",
                ),
            ),
        ),
    )


def _make_assembler(**config) -> ReportAssembler:
    return ReportAssembler(
        profiler=UserProfiler(config=EngineConfig(**config)),
        channel_analyzer=_make_channel_health(),
    )


# -- user safety -------------------------------------------------------------


def test_user_safety_report():
    report = _make_assembler().generate_user_safety_report(_make_messages(), _make_users(), now=NOW)
    assert report.type == ReportType.USER_SAFETY
    assert [p.user_id for p in report.data.user_profiles] == ["u1"]
    assert report.data.total_analyzed == 2
    assert report.data.risk_distribution == {"low": 1, "medium": 0, "high": 1, "critical": 0}

    # Score 65 is high risk but below the critical-issue threshold
    assert report.high_priority_issues == ()
    assert [r.id for r in report.recommendations] == ["enhance_moderation"]

    m = report.metrics
    assert (m.total_users, m.active_users, m.risk_users) == (2, 2, 1)
    assert m.server_health_score == 67.5
    assert m.community_trend == CommunityTrend.DECLINING
    assert m.violations_this_week == 3
    assert m.engagement_rate == 100
    assert "Found 1 users requiring immediate attention out of 2 analyzed" in report.summary


def test_critical_user_raises_issue():
    report = _make_assembler().generate_user_safety_report(_make_messages(5), _make_users(), now=NOW)
    assert len(report.high_priority_issues) == 1
    issue = report.high_priority_issues[0]
    assert issue.id == "critical_user_u1"
    assert issue.severity == Severity.CRITICAL
    assert issue.type == IssueType.USER_VIOLATION
    assert issue.affected_users == ("troll",)
    assert issue.suggested_actions == ("Multiple severe violations detected",)
    assert issue.auto_flag is True


def test_healthy_community_summary():
    messages = [_make_message("u2", "good morning everyone", 0)]
    report = _make_assembler().generate_user_safety_report(messages, _make_users(), now=NOW)
    assert report.data.user_profiles == ()
    assert report.recommendations == ()
    assert report.metrics.community_trend == CommunityTrend.IMPROVING
    assert "no high-risk users detected" in report.summary


def test_empty_window():
    report = _make_assembler().generate_user_safety_report([], [], now=NOW)
    assert report.metrics.server_health_score == 100
    assert report.metrics.community_trend == CommunityTrend.STABLE
    assert report.metrics.engagement_rate == 0


def test_new_user_query_narrows_analysis():
    report = _make_assembler().generate_user_safety_report(
        _make_messages(), _make_users(), query="any new members causing trouble?", now=NOW
    )
    assert report.data.total_analyzed == 1
    assert report.metrics.total_users == 2


def test_active_users_never_exceed_total():
    # Containment attributes every message in the window to id "u"
    users = [User(id="u", name="everyone")]
    report = _make_assembler().generate_user_safety_report(_make_messages(), users, now=NOW)
    # 3 x 15 + 0.6 x 20
    assert report.data.risk_distribution["medium"] == 1
    assert (report.metrics.active_users, report.metrics.total_users) == (1, 1)


def test_user_report_serializes_to_json():
    report = _make_assembler().generate_user_safety_report(_make_messages(), _make_users(), now=NOW)
    data = report.to_dict()
    assert data["type"] == "user_safety"
    assert data["generated_at"] == NOW.isoformat()
    json.dumps(data)


# -- channel optimization ----------------------------------------------------


def test_channel_optimization_report():
    report = _make_assembler().generate_channel_optimization_report(_make_server(), now=NOW)
    assert report.type == ReportType.CHANNEL_OPTIMIZATION
    m = report.metrics
    assert (m.total_channels, m.active_channels) == (3, 2)
    assert m.server_health_score == 55
    assert m.engagement_rate == 30

    # Only the confident deletion becomes an issue
    assert [i.id for i in report.high_priority_issues] == ["delete_channel_c1"]
    assert report.high_priority_issues[0].severity == Severity.MEDIUM
    assert [r.id for r in report.recommendations] == ["consolidate_channels"]
    assert report.data.deletion_candidates == ("old-announcements",)


def test_channel_query_filters_healths():
    report = _make_assembler().generate_channel_optimization_report(
        _make_server(), query="which channels should we delete?", now=NOW
    )
    assert [h.channel_id for h in report.data.channel_healths] == ["c1", "c3"]

    report = _make_assembler().generate_channel_optimization_report(
        _make_server(), query="show inactive channels", now=NOW
    )
    assert [h.channel_id for h in report.data.channel_healths] == ["c1", "c3"]


def test_missing_channel_data_is_neutral(caplog):
    assembler = ReportAssembler()
    with caplog.at_level(logging.WARNING, logger="modscope.reports.assembler"):
        report = assembler.generate_channel_optimization_report(None, now=NOW)
    assert report.metrics.server_health_score == 70
    assert report.metrics.total_channels == 0
    assert report.high_priority_issues == ()
    assert "No channel data supplied" in caplog.text


def test_unknown_channel_gets_neutral_health():
    analyzer = StaticChannelHealth()
    server = _make_server()
    health = analyzer.analyze_channel(server.text_channels[0], server)
    assert health.health_score == 70
    assert analyzer.analyze_server(server).optimization_score == 70


# -- comprehensive -----------------------------------------------------------


def test_comprehensive_report_merges_both():
    report = _make_assembler().generate_comprehensive_report(
        _make_server(), _make_messages(5), _make_users(), now=NOW
    )
    assert report.type == ReportType.COMPREHENSIVE

    user_health = 100 - (95 + 0) / 2
    assert report.metrics.server_health_score == round((user_health + 55) / 2)
    assert report.data.overall_health == report.metrics.server_health_score
    assert isinstance(report.data.user_safety, UserSafetyData)
    assert isinstance(report.data.channel_optimization, ChannelOptimizationData)
    assert report.metrics.community_trend == CommunityTrend.DECLINING
    assert report.metrics.engagement_rate == round((100 + 30) / 2)

    # Critical user issue sorts ahead of the medium channel issue
    assert [i.severity for i in report.high_priority_issues] == [Severity.CRITICAL, Severity.MEDIUM]
    assert [r.priority for r in report.recommendations] == [
        RecommendationPriority.HIGH,
        RecommendationPriority.MEDIUM,
    ]


def test_comprehensive_health_is_rounded_mean():
    report = _make_assembler().generate_comprehensive_report(
        _make_server(), _make_messages(), _make_users(), now=NOW
    )
    # (67.5 + 55) / 2 = 61.25
    assert report.metrics.server_health_score == 61


# -- server health -----------------------------------------------------------


def test_server_health_link_sweep():
    messages = [
        _make_message("u1", "free stuff https://bit.ly/malware", 0),
        _make_message("u2", "code is at https://github.com/org/repo", 1),
        _make_message("u2", "admin panel http://192.168.0.1/x", 2),
    ]
    report = _make_assembler().generate_server_health_report(messages, _make_users(), now=NOW)
    assert report.type == ReportType.SERVER_HEALTH
    assert report.data.link_report.total_links == 3
    assert report.metrics.server_health_score == 33
    assert report.metrics.community_trend == CommunityTrend.DECLINING
    assert report.metrics.risk_users == 2

    issues = report.high_priority_issues
    assert [i.severity for i in issues] == [Severity.HIGH, Severity.MEDIUM]
    assert all(i.type == IssueType.SAFETY_CONCERN for i in issues)
    assert issues[0].affected_users == ("u1",)
    assert report.recommendations[0].id == "link_filtering"
    assert report.recommendations[0].priority == RecommendationPriority.HIGH


def test_server_health_without_links():
    messages = [_make_message("u2", "good morning", 0)]
    report = _make_assembler().generate_server_health_report(messages, _make_users(), now=NOW)
    assert report.metrics.server_health_score == 100
    assert report.metrics.community_trend == CommunityTrend.STABLE
    assert report.high_priority_issues == ()
    assert report.recommendations == ()


# -- helpers -----------------------------------------------------------------


def test_filter_users_by_query():
    users = _make_users() + [User(id="u3", name="undated")]
    assert filter_users_by_query(users, None, NOW) == users
    assert filter_users_by_query(users, "who is toxic? any new ones?", NOW) == users
    assert [u.id for u in filter_users_by_query(users, "recent joins", NOW)] == ["u1"]
    assert [u.id for u in filter_users_by_query(users, "new", NOW, new_user_days=90)] == ["u1", "u2"]


def test_filter_channels_by_query_keeps_everything_otherwise():
    healths = list(_make_channel_health().channels.values())
    assert filter_channels_by_query(healths, "how are channels doing?") == healths


def test_trend_helpers():
    assert community_trend(0, 0) == CommunityTrend.STABLE
    assert community_trend(2, 10) == CommunityTrend.DECLINING
    assert community_trend(1, 10) == CommunityTrend.STABLE
    assert community_trend(0, 10) == CommunityTrend.IMPROVING

    assert combined_trend(CommunityTrend.IMPROVING, 85) == CommunityTrend.IMPROVING
    assert combined_trend(CommunityTrend.IMPROVING, 70) == CommunityTrend.STABLE
    assert combined_trend(CommunityTrend.STABLE, 50) == CommunityTrend.DECLINING


def test_user_health_score_bounds():
    assert user_health_score([]) == 100.0


def test_risk_distribution_empty():
    assert risk_distribution([]) == {"low": 0, "medium": 0, "high": 0, "critical": 0}
