"""Engine configuration.

All knobs have defaults matching the documented behavior, so an empty or
missing config file is valid. Files are YAML::

    high_risk_threshold: 60
    critical_issue_threshold: 80
    new_user_days: 30
    user_match: contains     # or "exact"
    default_reaction_ratio: 0.5
    neutral_channel_health: 70
    tables_path: ./my_tables.yaml
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from modscope.errors import ConfigError
from modscope.lexicon.tables import LexiconTables, default_tables, load_tables

logger = logging.getLogger(__name__)


class UserMatchStrategy(Enum):
    """How messages are attributed to a user id.

    ``contains`` also matches when the id is a substring of the message's
    user field, so "ann" picks up messages from "joanna". It is kept as the
    default for compatibility; ``exact`` avoids the misattribution.
    """

    CONTAINS = "contains"
    EXACT = "exact"

    def matches(self, user_id: str, author: str) -> bool:
        if self is UserMatchStrategy.EXACT:
            return author == user_id
        return author == user_id or user_id in author


@dataclass(frozen=True)
class EngineConfig:
    high_risk_threshold: int = 60
    critical_issue_threshold: int = 80
    new_user_days: int = 30
    user_match: UserMatchStrategy = UserMatchStrategy.CONTAINS
    default_reaction_ratio: float = 0.5
    neutral_channel_health: float = 70.0  # Between the 60/80 trend thresholds
    tables_path: str | None = None

    def load_tables(self) -> LexiconTables:
        """Tables named by ``tables_path``, or the packaged defaults."""
        if self.tables_path:
            return load_tables(self.tables_path)
        return default_tables()


def load_config(path: str | Path) -> EngineConfig:
    """Load an EngineConfig from a YAML file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config: {e}", path) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}", path) from e

    try:
        config = config_from_dict(data or {})
    except ConfigError as e:
        raise ConfigError(e.message, path) from e

    if config.tables_path and not Path(config.tables_path).is_absolute():
        # Relative table paths resolve against the config file
        config = replace(config, tables_path=str(path.parent / config.tables_path))

    logger.debug("Loaded config from %s: %s", path, config)
    return config


def config_from_dict(data: dict[str, Any]) -> EngineConfig:
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping")

    known = {f.name: f for f in fields(EngineConfig)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, raw in data.items():
        values[key] = _coerce(key, raw)

    config = EngineConfig(**values)
    _validate(config)
    return config


def _coerce(key: str, raw: Any) -> Any:
    try:
        if key == "user_match":
            return UserMatchStrategy(raw)
        if key == "tables_path":
            return None if raw is None else str(raw)
        if key in ("high_risk_threshold", "critical_issue_threshold", "new_user_days"):
            return int(raw)
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key}: invalid value {raw!r}") from e


def _validate(config: EngineConfig) -> None:
    for name in ("high_risk_threshold", "critical_issue_threshold", "neutral_channel_health"):
        value = getattr(config, name)
        if not 0 <= value <= 100:
            raise ConfigError(f"{name} must be within [0, 100], got {value}")
    if not 0.0 <= config.default_reaction_ratio <= 1.0:
        raise ConfigError(
            f"default_reaction_ratio must be within [0, 1], got {config.default_reaction_ratio}"
        )
    if config.new_user_days < 0:
        raise ConfigError(f"new_user_days must be >= 0, got {config.new_user_days}")
