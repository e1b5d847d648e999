"""URL-only pipeline: extraction, safety and purpose classification."""

from modscope.links.classifier import (
    classify_link_purpose,
    classify_link_safety,
    extract_links,
    generate_safety_report,
)
from modscope.links.responder import generate_smart_link_response, rank_links

__all__ = [
    "classify_link_purpose",
    "classify_link_safety",
    "extract_links",
    "generate_safety_report",
    "generate_smart_link_response",
    "rank_links",
]
