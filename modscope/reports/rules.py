"""Cross-referencing violations against numbered server rules."""

from __future__ import annotations

from collections.abc import Sequence

from modscope.models.chat import ServerRule
from modscope.models.risk import Violation, ViolationType


def map_violation_to_rule(
    violation_type: ViolationType, rules: Sequence[ServerRule]
) -> ServerRule | None:
    """The first rule that covers *violation_type*, if any."""
    for rule in rules:
        if violation_type.value in rule.violation_types:
            return rule
    return None


def get_applicable_rules(violation: Violation, rules: Sequence[ServerRule]) -> list[ServerRule]:
    """Every rule that covers the violation's type, in rule order."""
    return [r for r in rules if violation.type.value in r.violation_types]
