"""Tests for per-user risk profiling."""

from datetime import datetime, timedelta, timezone

from modscope.analyzers import UserProfiler
from modscope.config import EngineConfig, UserMatchStrategy
from modscope.models.chat import Message, User
from modscope.models.risk import ActionType, PatternType, ViolationType

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

USERS = [
    User(id="u1", name="troll"),
    User(id="u2", name="friendly"),
]


def _make_message(user: str, content: str, index: int, channel: str = "general") -> Message:
    return Message(
        id=f"m{index}",
        user=user,
        content=content,
        timestamp=NOW - timedelta(minutes=10 * (index + 1)),
        channel=channel,
    )


def _make_window():
    return [
        _make_message("u1", "kill yourself", 0),
        _make_message("u2", "good morning everyone", 1),
        _make_message("u1", "kill yourself", 2, channel="memes"),
        _make_message("u2", "anyone up for a game later", 3),
        _make_message("u1", "kill yourself", 4),
    ]


def test_zero_messages_gives_no_activity_profile():
    profile = UserProfiler().analyze_user("u9", _make_window(), USERS, now=NOW)
    assert profile.user_id == "u9"
    assert profile.username == "u9"
    assert profile.risk_score == 0
    assert profile.violations == ()
    assert profile.message_count == 0
    assert profile.recommended_action.action == ActionType.MONITOR
    assert profile.recommended_action.reason == "No activity found"


def test_harasser_profile():
    profile = UserProfiler().analyze_user("u1", _make_window(), USERS, now=NOW)
    assert profile.username == "troll"
    assert profile.message_count == 3
    assert [v.type for v in profile.violations] == [ViolationType.HARASSMENT] * 3
    assert [p.pattern for p in profile.behavior_patterns] == [PatternType.EXCESSIVE_PROFANITY]
    # 3 x 15 + 1.0 x 20
    assert profile.risk_score == 65
    assert profile.recommended_action.action == ActionType.MUTE
    assert profile.channels_active == ("general", "memes")
    assert profile.recent_activity.messages_last_24h == 3


def test_clean_user_scores_zero():
    profile = UserProfiler().analyze_user("friendly", _make_window(), USERS, now=NOW)
    # Found by name, but messages are keyed by id
    assert profile.username == "friendly"
    assert profile.message_count == 0

    profile = UserProfiler().analyze_user("u2", _make_window(), USERS, now=NOW)
    assert profile.risk_score == 0
    assert profile.recommended_action.reason == "Low risk user"


def test_containment_matching_is_default():
    messages = [_make_message("joanna", "hello there", 0)]
    profiler = UserProfiler()
    assert profiler.messages_for("ann", messages) == messages


def test_exact_matching_is_configurable():
    messages = [_make_message("joanna", "hello there", 0)]
    profiler = UserProfiler(config=EngineConfig(user_match=UserMatchStrategy.EXACT))
    assert profiler.messages_for("ann", messages) == []
    assert profiler.messages_for("joanna", messages) == messages


def test_multiple_users_riskiest_first():
    profiles = UserProfiler().analyze_multiple_users(["u2", "u1", "u3"], _make_window(), USERS, now=NOW)
    assert [p.user_id for p in profiles] == ["u1", "u2", "u3"]


def test_equal_scores_keep_input_order():
    profiles = UserProfiler().analyze_multiple_users(["u3", "u2", "u4"], _make_window(), USERS, now=NOW)
    assert [p.user_id for p in profiles] == ["u3", "u2", "u4"]


def test_high_risk_users():
    profiler = UserProfiler()
    high = profiler.get_high_risk_users(_make_window(), USERS, now=NOW)
    assert [p.user_id for p in high] == ["u1"]
    assert profiler.get_high_risk_users(_make_window(), USERS, threshold=70, now=NOW) == []


def test_profiles_are_recomputed_each_call():
    profiler = UserProfiler()
    first = profiler.analyze_user("u1", _make_window(), USERS, now=NOW)
    second = profiler.analyze_user("u1", _make_window()[:1], USERS, now=NOW)
    assert first.message_count == 3
    assert second.message_count == 1
