"""Per-message violation detection.

Three independent checks run on every message, so one message can yield
zero to three violations:

- toxicity: weighted keyword/pattern density above 0.6
- harassment: any harassment pattern
- spam: any spam indicator
"""

from __future__ import annotations

from collections.abc import Sequence

from modscope.lexicon.tables import LexiconTables
from modscope.models.chat import Message
from modscope.models.risk import Severity, Violation, ViolationType

TOXICITY_THRESHOLD = 0.6
HIGH_TOXICITY_THRESHOLD = 0.8

# Pattern hits count double and widen the denominator by one each.
_PATTERN_WEIGHT = 2


def detect_violations(messages: Sequence[Message], tables: LexiconTables) -> list[Violation]:
    """Scan one user's messages and return every violation found, in message order."""
    violations: list[Violation] = []

    for index, message in enumerate(messages):
        toxicity = toxicity_score(message.content, tables)
        if toxicity > TOXICITY_THRESHOLD:
            severity = Severity.HIGH if toxicity > HIGH_TOXICITY_THRESHOLD else Severity.MEDIUM
            violations.append(
                _violation(ViolationType.TOXICITY, severity, "Toxic language detected", message, index)
            )

        if is_harassment(message.content, tables):
            violations.append(
                _violation(
                    ViolationType.HARASSMENT,
                    Severity.HIGH,
                    "Harassment language detected",
                    message,
                    index,
                )
            )

        if is_spam(message.content, tables):
            violations.append(
                _violation(ViolationType.SPAM, Severity.MEDIUM, "Spam content detected", message, index)
            )

    return violations


def toxicity_score(content: str, tables: LexiconTables) -> float:
    """Weighted share of lexicon and harassment hits, within [0, 1]."""
    lower = content.lower()
    total_possible = len(tables.toxicity_keywords) + len(tables.harassment_patterns)

    score = sum(1 for keyword in tables.toxicity_keywords if keyword in lower)
    for pattern in tables.harassment_patterns:
        if pattern.search(content):
            score += _PATTERN_WEIGHT
            total_possible += 1

    if total_possible == 0:
        return 0.0
    return min(score / total_possible, 1.0)


def is_harassment(content: str, tables: LexiconTables) -> bool:
    return any(p.search(content) for p in tables.harassment_patterns)


def is_spam(content: str, tables: LexiconTables) -> bool:
    return any(p.search(content) for p in tables.spam_patterns)


def _violation(
    violation_type: ViolationType,
    severity: Severity,
    description: str,
    message: Message,
    index: int,
) -> Violation:
    return Violation(
        id=f"{violation_type.value}_{index}",
        type=violation_type,
        severity=severity,
        description=description,
        evidence=(message.content,),
        timestamp=message.timestamp.isoformat() if message.timestamp else "unknown",
        channel=message.channel,
    )
