"""Error hierarchy for the host boundary.

Analysis itself never raises for message content: malformed URLs, empty
windows and missing channel data all resolve to well-formed values. Only
loading tables, configuration or window files can fail, and those failures
derive from ``ModscopeError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ModscopeError(Exception):
    """Base exception for modscope."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.message = message
        self.path = str(path) if path is not None else None
        super().__init__(f"{self.path}: {message}" if self.path else message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "path": self.path,
        }


class TableLoadError(ModscopeError):
    """Lexicon/pattern tables are missing, malformed or hold a bad regex."""


class ConfigError(ModscopeError):
    """Engine configuration file is malformed."""


class WindowLoadError(ModscopeError):
    """A message window file could not be parsed into input records."""
