"""modscope -- community risk & moderation analytics engine."""

__version__ = "0.1.0"
