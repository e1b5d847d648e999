"""Boundary to the external channel-health analyzer.

The engine never scores channels itself. Hosts plug in any object with the
two methods of ``ChannelHealthAnalyzer``; ``StaticChannelHealth`` serves
values computed elsewhere (for example, read from a window file).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from modscope.models.channels import ChannelHealth, ChannelRecommendation, ServerOptimization
from modscope.models.chat import Channel, Server


@runtime_checkable
class ChannelHealthAnalyzer(Protocol):
    def analyze_channel(self, channel: Channel, server: Server) -> ChannelHealth: ...

    def analyze_server(self, server: Server) -> ServerOptimization: ...


@dataclass(frozen=True)
class StaticChannelHealth:
    """Serves precomputed channel-health values.

    Channels without a precomputed entry get a neutral health record so a
    partial data set never fails a report.
    """

    channels: dict[str, ChannelHealth] = field(default_factory=dict)
    optimization: ServerOptimization | None = None
    neutral_health: float = 70.0

    @classmethod
    def from_values(
        cls,
        channels: Iterable[ChannelHealth],
        optimization: ServerOptimization | None = None,
        neutral_health: float = 70.0,
    ) -> StaticChannelHealth:
        return cls(
            channels={c.channel_id: c for c in channels},
            optimization=optimization,
            neutral_health=neutral_health,
        )

    def analyze_channel(self, channel: Channel, server: Server) -> ChannelHealth:
        health = self.channels.get(channel.id)
        if health is not None:
            return health
        return ChannelHealth(
            channel_id=channel.id,
            channel_name=channel.name,
            health_score=self.neutral_health,
            activity_level="moderate",
            recommendation=ChannelRecommendation(action="keep", reason="No health data available"),
        )

    def analyze_server(self, server: Server) -> ServerOptimization:
        if self.optimization is not None:
            return self.optimization
        total = len(server.text_channels)
        return ServerOptimization(
            total_channels=total,
            active_channels=total,
            optimization_score=self.neutral_health,
        )
