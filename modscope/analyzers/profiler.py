"""Per-user risk profiling.

Runs violation detection, pattern analysis and activity summarization for
one user, then scores the result and recommends an action. Each call
recomputes from the supplied window; nothing is cached between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from modscope.analyzers.actions import no_activity_action, recommend_action
from modscope.analyzers.activity import summarize_activity
from modscope.analyzers.patterns import analyze_behavior_patterns
from modscope.analyzers.scorer import calculate_risk_score
from modscope.analyzers.violations import detect_violations
from modscope.config import EngineConfig
from modscope.lexicon.tables import LexiconTables, default_tables
from modscope.models.chat import Message, User
from modscope.models.risk import ActivitySummary, UserRiskProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserProfiler:
    """Stateless per-user analysis service."""

    tables: LexiconTables = field(default_factory=default_tables)
    config: EngineConfig = field(default_factory=EngineConfig)

    def messages_for(self, user_id: str, messages: Iterable[Message]) -> list[Message]:
        """Messages attributed to *user_id* under the configured match strategy."""
        return [m for m in messages if self.config.user_match.matches(user_id, m.user)]

    def analyze_user(
        self,
        user_id: str,
        messages: Sequence[Message],
        users: Sequence[User],
        now: datetime | None = None,
    ) -> UserRiskProfile:
        user = _find_user(user_id, users)
        username = user.name if user else user_id
        join_date = user.join_date if user else None

        user_messages = self.messages_for(user_id, messages)
        if not user_messages:
            return _no_activity_profile(user_id, username, join_date)

        violations = detect_violations(user_messages, self.tables)
        patterns = analyze_behavior_patterns(user_messages, self.tables)
        activity = summarize_activity(
            user_messages, now=now, default_reaction_ratio=self.config.default_reaction_ratio
        )
        score = calculate_risk_score(violations, patterns, activity)

        logger.debug(
            "Profiled %s: %d message(s), %d violation(s), %d pattern(s), score %d",
            user_id,
            len(user_messages),
            len(violations),
            len(patterns),
            score,
        )

        return UserRiskProfile(
            user_id=user_id,
            username=username,
            risk_score=score,
            violations=tuple(violations),
            behavior_patterns=tuple(patterns),
            recent_activity=activity,
            recommended_action=recommend_action(score, violations),
            message_count=len(user_messages),
            channels_active=tuple(dict.fromkeys(m.channel for m in user_messages)),
            join_date=join_date,
        )

    def analyze_multiple_users(
        self,
        user_ids: Iterable[str],
        messages: Sequence[Message],
        users: Sequence[User],
        now: datetime | None = None,
    ) -> list[UserRiskProfile]:
        """Profile every id, riskiest first (stable for equal scores)."""
        profiles = [self.analyze_user(uid, messages, users, now=now) for uid in user_ids]
        return sorted(profiles, key=lambda p: p.risk_score, reverse=True)

    def get_high_risk_users(
        self,
        messages: Sequence[Message],
        users: Sequence[User],
        threshold: int | None = None,
        now: datetime | None = None,
    ) -> list[UserRiskProfile]:
        """Profiles of every author in the window at or above *threshold*."""
        if threshold is None:
            threshold = self.config.high_risk_threshold
        authors = dict.fromkeys(m.user for m in messages)
        profiles = self.analyze_multiple_users(authors, messages, users, now=now)
        return [p for p in profiles if p.risk_score >= threshold]


def _find_user(user_id: str, users: Sequence[User]) -> User | None:
    for user in users:
        if user.id == user_id or user.name == user_id:
            return user
    return None


def _no_activity_profile(user_id: str, username: str, join_date: datetime | None) -> UserRiskProfile:
    return UserRiskProfile(
        user_id=user_id,
        username=username,
        risk_score=0,
        violations=(),
        behavior_patterns=(),
        recent_activity=ActivitySummary(),
        recommended_action=no_activity_action(),
        message_count=0,
        channels_active=(),
        join_date=join_date,
    )
