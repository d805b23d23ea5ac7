"""
pokerscore.config — YAML Configuration Loader
==============================================

Reads ``config.yaml`` for club identity and service settings.  Secrets
(``DATABASE_URL``) stay in the environment / ``.env`` and never appear
in this file.

Usage::

    from pokerscore.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.club_name)         # "Poker du Jeudi"
    print(cfg.news_feed_limit)   # 20
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo

import yaml

from pokerscore.constants import DEFAULT_NEWS_LIMIT


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class LeagueConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    club_name: str
    club_motto: str = ""

    # API
    api_port: int = 8000

    # Display
    news_feed_limit: int = DEFAULT_NEWS_LIMIT
    timezone: str = "Europe/Paris"

    @property
    def zone(self) -> ZoneInfo:
        """Zone in which dates are shown to the club."""
        return ZoneInfo(self.timezone)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> LeagueConfig:
    """Read *path* and return a :class:`LeagueConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If ``club_name`` is missing from the YAML file.
    zoneinfo.ZoneInfoNotFoundError
        If ``timezone`` is not a known IANA zone.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    timezone = raw.get("timezone", "Europe/Paris")
    ZoneInfo(timezone)  # raises on an unknown zone

    return LeagueConfig(
        club_name=raw["club_name"],
        club_motto=raw.get("club_motto", ""),
        api_port=int(raw.get("api_port", 8000)),
        news_feed_limit=int(raw.get("news_feed_limit", DEFAULT_NEWS_LIMIT)),
        timezone=timezone,
    )
