"""Link extraction, safety classification and purpose classification.

Safety precedence:

1. malicious substring in host + path     -> dangerous (0.95), final
2. trusted substring in host              -> safe (0.90), final
3. suspicious host pattern                -> suspicious (0.70)
4. Discord invite host                    -> safe (0.85)
5. traversal or percent-encoding in path  -> suspicious (0.60)
6. executable/archive download            -> suspicious (0.50)
7. nothing fired                          -> safe (0.80)

Steps 3-6 are cumulative: each one that fires appends its reason, and the
last one to fire sets status and confidence.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urlsplit

from modscope.lexicon.tables import LexiconTables
from modscope.models.links import (
    LinkCategory,
    LinkPurposeClassification,
    LinkSafetyReport,
    LinkSafetyResult,
    LinkStatus,
)

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"https?://\S+")
_TRAILING_PUNCTUATION_RE = re.compile(r"[.,;:!?]+$")


class InvalidURLError(ValueError):
    """Raised internally for URLs that cannot be classified."""


@dataclass(frozen=True)
class _ParsedURL:
    host: str
    path: str

    @property
    def location(self) -> str:
        return self.host + self.path


def extract_links(text: str) -> list[str]:
    """Every http(s) URL in *text*, with trailing punctuation trimmed."""
    return [_TRAILING_PUNCTUATION_RE.sub("", url) for url in _URL_RE.findall(text)]


def classify_link_safety(url: str, tables: LexiconTables) -> LinkSafetyResult:
    """Classify one URL. Never raises: malformed input is reported as suspicious."""
    try:
        parsed = _parse(url)
    except InvalidURLError as e:
        logger.debug("Invalid URL %r: %s", url, e)
        return LinkSafetyResult(
            url=url, status=LinkStatus.SUSPICIOUS, reasons=("Invalid URL format",), confidence=0.3
        )

    links = tables.links
    location = parsed.location.lower()

    if any(m in location for m in links.malicious):
        return LinkSafetyResult(
            url=url,
            status=LinkStatus.DANGEROUS,
            reasons=("Domain is on known malicious list",),
            confidence=0.95,
        )

    if any(t in parsed.host for t in links.trusted):
        return LinkSafetyResult(
            url=url, status=LinkStatus.SAFE, reasons=("Domain is on trusted list",), confidence=0.9
        )

    status = LinkStatus.SAFE
    confidence = 0.8
    reasons: list[str] = []

    if any(p.search(parsed.host) for p in links.suspicious_host_patterns):
        status, confidence = LinkStatus.SUSPICIOUS, 0.7
        reasons.append("Domain matches suspicious pattern")

    if any(_is_invite(parsed, entry) for entry in links.invite_hosts):
        status, confidence = LinkStatus.SAFE, 0.85
        reasons.append("Official Discord invite link")

    if any(m in parsed.path for m in links.risky_path_markers):
        status, confidence = LinkStatus.SUSPICIOUS, 0.6
        reasons.append("Suspicious URL structure detected")

    if links.risky_extension_pattern and links.risky_extension_pattern.search(parsed.path):
        status, confidence = LinkStatus.SUSPICIOUS, 0.5
        reasons.append("Direct file download detected - exercise caution")

    if not reasons:
        reasons.append("No obvious security concerns detected")

    return LinkSafetyResult(url=url, status=status, reasons=tuple(reasons), confidence=confidence)


def classify_link_purpose(url: str, tables: LexiconTables) -> LinkPurposeClassification:
    """First matching purpose rule wins; unmatched links are "other"."""
    try:
        parsed = _parse(url)
    except InvalidURLError:
        return LinkPurposeClassification(
            url=url,
            purpose="Unknown or invalid link",
            category=LinkCategory.OTHER,
            description="Unable to analyze this link",
            relevance=0.1,
        )

    path = parsed.path.lower()
    for rule in tables.purposes:
        if rule.matches(parsed.host, path):
            return LinkPurposeClassification(
                url=url,
                purpose=rule.purpose,
                category=rule.category,
                description=rule.description,
                relevance=rule.relevance,
            )

    return LinkPurposeClassification(
        url=url,
        purpose="General website or resource",
        category=LinkCategory.OTHER,
        description="General web resource or information",
        relevance=0.3,
    )


def generate_safety_report(links: Iterable[str], tables: LexiconTables) -> LinkSafetyReport:
    results = tuple(classify_link_safety(url, tables) for url in links)
    return LinkSafetyReport(
        total_links=len(results),
        safe_links=sum(1 for r in results if r.status == LinkStatus.SAFE),
        suspicious_links=sum(1 for r in results if r.status == LinkStatus.SUSPICIOUS),
        dangerous_links=sum(1 for r in results if r.status == LinkStatus.DANGEROUS),
        results=results,
    )


def _parse(url: str) -> _ParsedURL:
    try:
        parts = urlsplit(url.strip())
        parts.port  # Raises ValueError for out-of-range or non-numeric ports
    except ValueError as e:
        raise InvalidURLError(str(e)) from e

    if parts.scheme.lower() not in ("http", "https"):
        raise InvalidURLError(f"unsupported scheme {parts.scheme!r}")
    if not parts.hostname:
        raise InvalidURLError("missing host")

    return _ParsedURL(host=parts.hostname.lower(), path=parts.path or "/")


def _is_invite(parsed: _ParsedURL, entry: str) -> bool:
    """Whether *parsed* is on the invite host named by ``host[/path-prefix]``."""
    host, _, prefix = entry.partition("/")
    if parsed.host != host and not parsed.host.endswith("." + host):
        return False
    if not prefix:
        return True
    path = parsed.path.lower()
    return path == "/" + prefix or path.startswith("/" + prefix + "/")
