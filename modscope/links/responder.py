"""Intent-aware link answers for the conversational collaborator."""

from __future__ import annotations

from collections.abc import Sequence

from modscope.lexicon.tables import IntentRule, LexiconTables
from modscope.links.classifier import classify_link_purpose
from modscope.models.links import LinkPurposeClassification

GENERAL_INTENT = "general"
MAX_LINKS = 3
HIGHLY_RELEVANT = 0.8

_CLOSING_TIPS = {
    "registration": "Start with the first link to create your account!",
    "learning": "Check out the learning resources to get started!",
    "product": "These links will help you understand the product better!",
}


def infer_intent(query: str, tables: LexiconTables) -> IntentRule | None:
    """First intent whose keywords appear in *query*, if any."""
    lower = query.lower()
    for rule in tables.intents:
        if any(k in lower for k in rule.keywords):
            return rule
    return None


def rank_links(
    query: str, links: Sequence[str], tables: LexiconTables
) -> tuple[str, list[LinkPurposeClassification]]:
    """Return the inferred intent and the links that answer it, best first.

    Falls back to every link sorted by relevance when no intent matches or
    no link falls in the intent's categories.
    """
    analyses = [classify_link_purpose(url, tables) for url in links]
    by_relevance = sorted(analyses, key=lambda a: a.relevance, reverse=True)

    rule = infer_intent(query, tables)
    if rule is None:
        return GENERAL_INTENT, by_relevance

    relevant = [a for a in by_relevance if a.category in rule.categories]
    return rule.intent, relevant or by_relevance


def generate_smart_link_response(query: str, links: Sequence[str], tables: LexiconTables) -> str:
    if not links:
        return (
            "I don't see any links in the recent messages to analyze. "
            "Could you share the links you're asking about?"
        )

    intent, ranked = rank_links(query, links, tables)

    lines = [
        "**Smart Link Analysis**",
        "",
        f"Based on your question about **{intent}**, here are the most relevant links:",
        "",
    ]
    for index, link in enumerate(ranked[:MAX_LINKS], start=1):
        lines.append(f"**{index}. {link.purpose}** ({link.category.value})")
        lines.append(f"   {link.url}")
        lines.append(f"   {link.description}")
        if link.relevance > HIGHLY_RELEVANT:
            lines.append("   **Highly recommended for your query**")
        lines.append("")

    tip = _CLOSING_TIPS.get(intent)
    if tip:
        lines.append(f"**Recommendation:** {tip}")

    return "\n".join(lines).rstrip() + "\n"

