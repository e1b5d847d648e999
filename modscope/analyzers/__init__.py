"""Per-user analyzers: violations, behavior patterns, activity, scoring and actions.

The entry point is ``UserProfiler``; the modules below it are plain functions
over a message sequence and a ``LexiconTables`` value.
"""

from modscope.analyzers.profiler import UserProfiler

__all__ = ["UserProfiler"]
