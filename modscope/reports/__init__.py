"""Moderation reports: assembly, channel-health boundary and bounded rendering."""

from modscope.reports.assembler import ReportAssembler
from modscope.reports.channel_health import ChannelHealthAnalyzer, StaticChannelHealth
from modscope.reports.formatter import format_report_for_ai

__all__ = [
    "ChannelHealthAnalyzer",
    "ReportAssembler",
    "StaticChannelHealth",
    "format_report_for_ai",
]
