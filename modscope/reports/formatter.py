"""Bounded text rendering of a ModerationReport.

The rendered block is the only artifact handed to the conversational
assistant, so its size is capped regardless of how large the report is:

    title, summary
    up to 5 issues (one suggested action each)
    type-specific details (top 3 entries per section)
    up to 3 recommendations
    metrics footer
"""

from __future__ import annotations

from collections.abc import Sequence

from modscope.models.chat import ServerRule
from modscope.models.report import (
    ChannelOptimizationData,
    ComprehensiveData,
    ModerationReport,
    ReportType,
    ServerHealthData,
    UserSafetyData,
)
from modscope.models.risk import Severity
from modscope.reports.rules import map_violation_to_rule

MAX_ISSUES = 5
MAX_DETAILS = 3
MAX_VIOLATIONS_PER_USER = 2
MAX_RECOMMENDATIONS = 3

REPORT_TITLES = {
    ReportType.USER_SAFETY: "User Safety Analysis",
    ReportType.CHANNEL_OPTIMIZATION: "Channel Optimization",
    ReportType.SERVER_HEALTH: "Server Health",
    ReportType.COMPREHENSIVE: "Comprehensive Moderation",
}

_URGENCY_MARKERS = {
    Severity.CRITICAL: "[!!!]",
    Severity.HIGH: "[!!]",
    Severity.MEDIUM: "[!]",
    Severity.LOW: "[-]",
}


def format_report_for_ai(
    report: ModerationReport,
    query: str = "",
    rules: Sequence[ServerRule] = (),
) -> str:
    lines = [f"**{REPORT_TITLES[report.type]} Report**", ""]
    if query:
        lines += [f"**Question:** {query}", ""]
    lines += [f"**Summary:** {report.summary}", ""]

    if report.high_priority_issues:
        lines.append("**High Priority Issues:**")
        for issue in report.high_priority_issues[:MAX_ISSUES]:
            lines.append("")
            lines.append(
                f"{_URGENCY_MARKERS[issue.severity]} **{issue.title}** - "
                f"{issue.severity.value.upper()}"
            )
            lines.append(f"   {issue.description}")
            if issue.suggested_actions:
                lines.append(f"   **Action:** {issue.suggested_actions[0]}")
        lines.append("")

    lines += _details(report, rules)

    if report.recommendations:
        lines.append("**Recommendations:**")
        for index, rec in enumerate(report.recommendations[:MAX_RECOMMENDATIONS], start=1):
            lines.append("")
            lines.append(f"{index}. **{rec.title}** ({rec.priority.value} priority)")
            lines.append(f"   {rec.description}")
            lines.append(f"   **Impact:** {rec.expected_impact}")
        lines.append("")

    metrics = report.metrics
    lines.append("**Key Metrics:**")
    lines.append(f"- Server Health Score: {format_score(metrics.server_health_score)}/100")
    lines.append(f"- Community Trend: {metrics.community_trend.value}")
    lines.append(f"- Active Users: {metrics.active_users}/{metrics.total_users}")
    if metrics.total_channels:
        lines.append(f"- Active Channels: {metrics.active_channels}/{metrics.total_channels}")
    if metrics.risk_users > 0:
        lines.append(f"- Users Requiring Attention: {metrics.risk_users}")

    return "\n".join(lines) + "\n"


def _details(report: ModerationReport, rules: Sequence[ServerRule]) -> list[str]:
    data = report.data
    if isinstance(data, UserSafetyData):
        return _user_details(data, rules)
    if isinstance(data, ChannelOptimizationData):
        return _channel_details(data)
    if isinstance(data, ServerHealthData):
        return _link_details(data)
    if isinstance(data, ComprehensiveData):
        return _user_details(data.user_safety, rules) + _channel_details(data.channel_optimization)
    raise TypeError(f"unhandled report payload: {type(data).__name__}")


def _user_details(data: UserSafetyData, rules: Sequence[ServerRule]) -> list[str]:
    if not data.user_profiles:
        return []

    lines = ["**High-Risk Users Detected:**"]
    for index, profile in enumerate(data.user_profiles[:MAX_DETAILS], start=1):
        lines.append("")
        lines.append(f"**{index}. {profile.username}** - Risk Score: {profile.risk_score}/100")
        lines.append(f"   - {len(profile.violations)} violations detected")
        for violation in profile.violations[:MAX_VIOLATIONS_PER_USER]:
            rule = map_violation_to_rule(violation.type, rules)
            if rule:
                lines.append(f"   - **Rule #{rule.number}** ({rule.title}): {violation.description}")
            else:
                lines.append(f"   - {violation.type.value}: {violation.description}")
        lines.append(f"   - Active in {len(profile.channels_active)} channels")
        lines.append(f"   - **Recommended Action:** {profile.recommended_action.action.value}")
    lines.append("")
    return lines


def _channel_details(data: ChannelOptimizationData) -> list[str]:
    if not data.deletion_candidates or not data.server_optimization.recommendations:
        return []

    lines = ["**Channels Recommended for Review:**"]
    for index, rec in enumerate(data.server_optimization.recommendations[:MAX_DETAILS], start=1):
        lines.append("")
        lines.append(f"**{index}. Action: {rec.action}** ({rec.priority} priority)")
        lines.append(f"   - Reason: {rec.reason}")
        if rec.expected_impact:
            lines.append(f"   - Expected Impact: {rec.expected_impact}")
    lines.append("")
    return lines


def _link_details(data: ServerHealthData) -> list[str]:
    flagged = data.link_report.flagged
    if not flagged:
        return []

    lines = ["**Flagged Links:**"]
    for index, result in enumerate(flagged[:MAX_DETAILS], start=1):
        lines.append("")
        lines.append(
            f"**{index}. {result.url}** - {result.status.value.upper()} "
            f"({result.confidence:.0%} confidence)"
        )
        for reason in result.reasons:
            lines.append(f"   - {reason}")
    lines.append("")
    return lines


def format_score(value: float) -> str:
    return f"{round(value, 1):g}"
