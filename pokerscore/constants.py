"""
pokerscore.constants — Shared Constants & Helpers
==================================================

Single source of truth for the scoring formula and presentation constants.
Import from here instead of duplicating in the engine, services, and API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------
POINTS_PER_PLACE: int = 10
"""Points earned for every player finishing below you in a game."""

DEFAULT_NEWS_LIMIT: int = 20

RANK_BADGES: list[str] = ["\U0001f947", "\U0001f948", "\U0001f949"]  # 🥇🥈🥉

UNKNOWN_PLAYER_NAME = "Un joueur"
UNKNOWN_FORMER_HOLDER = "Un ancien"
UNKNOWN_NEW_HOLDER = "Un nouveau"


def points_for_rank(rank: int, total_players: int) -> int:
    """Points awarded for finishing at *rank* among *total_players*.

    Uses the canonical formula::

        score = (total_players - rank) * POINTS_PER_PLACE

    The winner earns ``(N - 1) * 10`` and the last player 0.
    """
    return (total_players - rank) * POINTS_PER_PLACE


def median_rank(total_players: int) -> int | None:
    """The exact numeric median rank, or ``None`` for an even table."""
    if total_players % 2 == 0:
        return None
    return (total_players + 1) // 2


def placeholder_image(name: str, size: int = 60) -> str:
    """Avatar fallback used when a player has no image URL."""
    initial = name[:1].upper() or "P"
    return f"https://placehold.co/{size}x{size}/1f2937/ffffff?text={initial}"
