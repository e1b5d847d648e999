"""Link classification results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class LinkStatus(Enum):
    SAFE = "safe"
    SUSPICIOUS = "suspicious"
    DANGEROUS = "dangerous"


class LinkCategory(Enum):
    REGISTRATION = "registration"
    LEARNING = "learning"
    PRODUCT = "product"
    SUPPORT = "support"
    COMMUNITY = "community"
    DOWNLOAD = "download"
    DOCUMENTATION = "documentation"
    PRICING = "pricing"
    BLOG = "blog"
    SOCIAL = "social"
    OTHER = "other"


@dataclass(frozen=True)
class LinkSafetyResult:
    url: str
    status: LinkStatus
    reasons: tuple[str, ...]  # In the order the checks fired
    confidence: float  # 0.0 - 1.0


@dataclass(frozen=True)
class LinkPurposeClassification:
    url: str
    purpose: str
    category: LinkCategory
    description: str
    relevance: float  # 0.0 - 1.0


@dataclass(frozen=True)
class LinkSafetyReport:
    """Aggregate of safety results over a batch of links."""

    total_links: int = 0
    safe_links: int = 0
    suspicious_links: int = 0
    dangerous_links: int = 0
    results: tuple[LinkSafetyResult, ...] = field(default_factory=tuple)

    @property
    def flagged(self) -> list[LinkSafetyResult]:
        """Non-safe results, dangerous first."""
        order = {LinkStatus.DANGEROUS: 0, LinkStatus.SUSPICIOUS: 1}
        return sorted(
            (r for r in self.results if r.status != LinkStatus.SAFE),
            key=lambda r: order[r.status],
        )

    def summary(self) -> str:
        return (
            f"{self.total_links} link(s): {self.safe_links} safe, "
            f"{self.suspicious_links} suspicious, {self.dangerous_links} dangerous"
        )
