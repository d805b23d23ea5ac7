"""
pokerscore.engine.records — Domain Records
===========================================

Plain immutable records passed through the scoring, statistics and
achievement pipeline.  The engine never touches ORM objects: the store
converts rows into these records on read and back into rows on commit.

Updates are expressed with :func:`dataclasses.replace`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

__all__ = [
    "Game",
    "GameResult",
    "LeaderboardEntry",
    "NewsItem",
    "ParticipantEntry",
    "Player",
    "PlayerAchievement",
    "Season",
    "new_id",
    "utcnow",
]


def new_id() -> str:
    """Opaque identifier generated by the core before anything is persisted."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Player — identity + lifetime counters
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Player:
    """A club member and their running counters.

    ``total_score`` is the current season's points; every other counter
    is lifetime and survives season rollover (except the streaks the
    rollover explicitly resets).
    """

    id: str
    name: str
    image_url: str | None = None
    total_score: int = 0
    total_chips_amassed: int = 0
    second_place_count: int = 0
    zero_chip_count: int = 0
    first_blood_count: int = 0
    invincible_streak: int = 0
    ventre_mou_count: int = 0
    season_wins: int = 0
    consecutive_season_wins: int = 0
    consecutive_games_streak: int = 0


# ---------------------------------------------------------------------------
# Games
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class GameResult:
    player_id: str
    name: str
    chip_count: int
    score: int
    rank: int


@dataclass(frozen=True, slots=True)
class Game:
    """One completed session.  ``results`` are ordered by rank."""

    id: str
    season_id: str
    date: datetime
    results: tuple[GameResult, ...] = ()

    @property
    def total_players(self) -> int:
        return len(self.results)

    def result_for(self, player_id: str) -> GameResult | None:
        for result in self.results:
            if result.player_id == player_id:
                return result
        return None

    def player_at_rank(self, rank: int) -> GameResult | None:
        for result in self.results:
            if result.rank == rank:
                return result
        return None


@dataclass(frozen=True, slots=True)
class ParticipantEntry:
    """Raw input for one participant of a game being recorded.

    An entry with ``elimination_order`` set is *eliminated* (1 = first
    player out).  Otherwise it is a survivor; a missing chip count is
    read as 0.
    """

    player_id: str
    name: str = ""
    chip_count: int | None = None
    elimination_order: int | None = None

    @property
    def is_eliminated(self) -> bool:
        return self.elimination_order is not None


# ---------------------------------------------------------------------------
# Seasons
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    """One line of a season leaderboard (live or archived)."""

    id: str
    name: str
    image_url: str | None
    total_score: int
    games_played: int
    wins: int
    rank: int


@dataclass(frozen=True, slots=True)
class Season:
    id: str
    name: str
    end_date: datetime | None = None
    prize: str = ""
    image_url: str | None = None
    is_active: bool = False
    is_closed: bool = False
    final_leaderboard: tuple[LeaderboardEntry, ...] | None = None
    winner_id: str | None = None
    closed_at: datetime | None = None


# ---------------------------------------------------------------------------
# Achievements & news
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class PlayerAchievement:
    id: str
    player_id: str
    achievement_id: str
    unlocked_at: datetime


@dataclass(frozen=True, slots=True)
class NewsItem:
    id: str
    text: str
    created_at: datetime
