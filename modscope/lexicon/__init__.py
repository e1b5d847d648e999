"""Versioned keyword, pattern and domain tables used by the classifiers."""

from modscope.lexicon.tables import (
    IntentRule,
    LexiconTables,
    LinkTables,
    PurposeRule,
    default_tables,
    load_tables,
    tables_from_dict,
)

__all__ = [
    "IntentRule",
    "LexiconTables",
    "LinkTables",
    "PurposeRule",
    "default_tables",
    "load_tables",
    "tables_from_dict",
]
