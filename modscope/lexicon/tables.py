"""Lexicon and pattern tables.

Classification is table-driven: keywords, regexes, domain lists, purpose
markers and server rules live in a versioned YAML file and are loaded into
frozen dataclasses. Tests substitute fixture tables with ``load_tables`` or
``tables_from_dict`` without touching any classifier.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from modscope.errors import TableLoadError
from modscope.models.chat import ServerRule
from modscope.models.links import LinkCategory
from modscope.models.risk import ViolationType

logger = logging.getLogger(__name__)

DEFAULT_TABLES_PATH = Path(__file__).parent / "default_tables.yaml"


@dataclass(frozen=True)
class PurposeRule:
    """One row of the ordered link-purpose table."""

    category: LinkCategory
    purpose: str
    description: str
    relevance: float
    path_markers: tuple[str, ...] = ()
    domain_markers: tuple[str, ...] = ()

    def matches(self, domain: str, path: str) -> bool:
        return any(m in path for m in self.path_markers) or any(
            m in domain for m in self.domain_markers
        )


@dataclass(frozen=True)
class IntentRule:
    """Maps query keywords to the link categories that answer them."""

    intent: str
    keywords: tuple[str, ...]
    categories: tuple[LinkCategory, ...]


@dataclass(frozen=True)
class LinkTables:
    malicious: tuple[str, ...] = ()
    trusted: tuple[str, ...] = ()
    suspicious_host_patterns: tuple[re.Pattern[str], ...] = ()
    invite_hosts: tuple[str, ...] = ()
    risky_path_markers: tuple[str, ...] = ()
    risky_extension_pattern: re.Pattern[str] | None = None


@dataclass(frozen=True)
class LexiconTables:
    """Immutable, shareable classification tables."""

    version: str
    toxicity_keywords: tuple[str, ...] = ()
    harassment_patterns: tuple[re.Pattern[str], ...] = ()
    spam_patterns: tuple[re.Pattern[str], ...] = ()
    links: LinkTables = field(default_factory=LinkTables)
    purposes: tuple[PurposeRule, ...] = ()
    intents: tuple[IntentRule, ...] = ()
    rules: tuple[ServerRule, ...] = ()

    def has_toxic_keyword(self, text: str) -> bool:
        lower = text.lower()
        return any(k in lower for k in self.toxicity_keywords)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_tables(path: str | Path) -> LexiconTables:
    """Load tables from a YAML file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise TableLoadError(f"cannot read tables: {e}", path) from e
    except yaml.YAMLError as e:
        raise TableLoadError(f"invalid YAML: {e}", path) from e

    if not isinstance(data, dict):
        raise TableLoadError("tables file must contain a mapping", path)

    try:
        tables = tables_from_dict(data)
    except TableLoadError as e:
        raise TableLoadError(e.message, path) from e
    except (AttributeError, TypeError, ValueError) as e:
        raise TableLoadError(f"malformed table entry: {e}", path) from e

    logger.debug("Loaded tables v%s from %s", tables.version, path)
    return tables


@lru_cache(maxsize=1)
def default_tables() -> LexiconTables:
    """The packaged default tables. Immutable, so one shared copy suffices."""
    return load_tables(DEFAULT_TABLES_PATH)


def tables_from_dict(data: dict[str, Any]) -> LexiconTables:
    """Build tables from an already-parsed mapping."""
    links = data.get("links", {}) or {}
    extension = links.get("risky_extension_pattern")

    return LexiconTables(
        version=str(data.get("version", "0")),
        toxicity_keywords=tuple(str(k).lower() for k in data.get("toxicity_keywords", [])),
        harassment_patterns=_compile_all(data.get("harassment_patterns", []), "harassment_patterns"),
        spam_patterns=_compile_all(data.get("spam_patterns", []), "spam_patterns"),
        links=LinkTables(
            malicious=_strings(links.get("malicious", [])),
            trusted=_strings(links.get("trusted", [])),
            suspicious_host_patterns=_compile_all(
                links.get("suspicious_host_patterns", []), "links.suspicious_host_patterns"
            ),
            invite_hosts=_strings(links.get("invite_hosts", [])),
            risky_path_markers=tuple(str(m) for m in links.get("risky_path_markers", [])),
            risky_extension_pattern=(
                _compile(extension, "links.risky_extension_pattern") if extension else None
            ),
        ),
        purposes=tuple(_purpose_rule(p, i) for i, p in enumerate(data.get("purposes", []))),
        intents=tuple(_intent_rule(p, i) for i, p in enumerate(data.get("intents", []))),
        rules=tuple(server_rule_from_dict(r, i) for i, r in enumerate(data.get("rules", []))),
    )


def _strings(values) -> tuple[str, ...]:
    return tuple(str(v).lower() for v in values)


def _compile(entry: Any, where: str) -> re.Pattern[str]:
    """Compile a pattern entry: a bare string or ``{pattern, ignore_case}``."""
    if isinstance(entry, dict):
        source = entry.get("pattern")
        ignore_case = entry.get("ignore_case", True)
    else:
        source = entry
        ignore_case = True

    if not isinstance(source, str) or not source:
        raise TableLoadError(f"{where}: pattern must be a non-empty string, got {source!r}")
    try:
        return re.compile(source, re.IGNORECASE if ignore_case else 0)
    except re.error as e:
        raise TableLoadError(f"{where}: invalid regex {source!r}: {e}") from e


def _compile_all(entries, where: str) -> tuple[re.Pattern[str], ...]:
    return tuple(_compile(e, f"{where}[{i}]") for i, e in enumerate(entries))


def _category(value: Any, where: str) -> LinkCategory:
    try:
        return LinkCategory(value)
    except ValueError as e:
        raise TableLoadError(f"{where}: unknown link category {value!r}") from e


def _purpose_rule(data: dict, index: int) -> PurposeRule:
    where = f"purposes[{index}]"
    relevance = float(data.get("relevance", 0.0))
    if not 0.0 <= relevance <= 1.0:
        raise TableLoadError(f"{where}: relevance must be within [0, 1], got {relevance}")
    return PurposeRule(
        category=_category(data.get("category"), where),
        purpose=data.get("purpose", ""),
        description=data.get("description", ""),
        relevance=relevance,
        path_markers=_strings(data.get("path_markers", [])),
        domain_markers=_strings(data.get("domain_markers", [])),
    )


def _intent_rule(data: dict, index: int) -> IntentRule:
    where = f"intents[{index}]"
    return IntentRule(
        intent=data.get("intent", "general"),
        keywords=_strings(data.get("keywords", [])),
        categories=tuple(_category(c, where) for c in data.get("categories", [])),
    )


def server_rule_from_dict(data: dict, index: int) -> ServerRule:
    where = f"rules[{index}]"
    types = []
    for value in data.get("violation_types", []) or []:
        try:
            types.append(ViolationType(value).value)
        except ValueError as e:
            raise TableLoadError(f"{where}: unknown violation type {value!r}") from e
    return ServerRule(
        number=int(data.get("number", index + 1)),
        title=data.get("title", ""),
        violation_types=tuple(types),
    )
