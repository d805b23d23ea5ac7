"""
pokerscore.engine.stats — Statistics Aggregator
================================================

Derives player statistics from game history.

Two kinds of numbers live here:

* **Persisted lifetime counters** on :class:`Player` — updated
  incrementally by :func:`apply_game` each time a game is recorded and
  written in the same batch as the game itself.
* **Derived views** — season leaderboard, per-season stats for seasonal
  titles, player profile.  Recomputed from games on every read, never
  stored.

Pure calculation — no database I/O.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from pokerscore.constants import median_rank
from pokerscore.engine.records import Game, GameResult, LeaderboardEntry, Player

logger = logging.getLogger(__name__)

__all__ = [
    "PlayerProfile",
    "SeasonStat",
    "apply_game",
    "games_of_season",
    "lifetime_games_played",
    "player_profile",
    "score_deltas",
    "season_leaderboard",
    "season_stat",
]


class SeasonStat(enum.StrEnum):
    """Per-season statistics that seasonal titles compete on."""
    WINS = "wins"
    LAST_PLACES = "last_places"
    SECOND_PLACES = "second_places"
    ZERO_CHIPS = "zero_chips"
    APPEARANCES = "appearances"
    APPEARANCE_STREAK = "appearance_streak"


# ---------------------------------------------------------------------------
# Incremental lifetime counters
# ---------------------------------------------------------------------------
def apply_game(players: Sequence[Player], results: Sequence[GameResult]) -> list[Player]:
    """Return every known player updated for one newly recorded game.

    Participants accumulate score, chips and finish counters; every
    player *not* in the game has their ``consecutive_games_streak`` reset.
    Order of *players* is preserved.
    """
    total_players = len(results)
    median = median_rank(total_players)
    by_player = {r.player_id: r for r in results}

    updated: list[Player] = []
    for player in players:
        result = by_player.get(player.id)
        if result is None:
            updated.append(replace(player, consecutive_games_streak=0))
            continue

        finished_last = result.rank == total_players
        updated.append(replace(
            player,
            total_score=player.total_score + result.score,
            total_chips_amassed=player.total_chips_amassed + result.chip_count,
            second_place_count=player.second_place_count + (result.rank == 2),
            zero_chip_count=player.zero_chip_count + (result.chip_count == 0),
            first_blood_count=player.first_blood_count + finished_last,
            invincible_streak=0 if finished_last else player.invincible_streak + 1,
            ventre_mou_count=player.ventre_mou_count + (result.rank == median),
            consecutive_games_streak=player.consecutive_games_streak + 1,
        ))
    return updated


def score_deltas(
    old_results: Iterable[GameResult], new_results: Iterable[GameResult]
) -> dict[str, int]:
    """Per-player change in points between two versions of the same game."""
    deltas: dict[str, int] = {}
    for result in old_results:
        deltas[result.player_id] = deltas.get(result.player_id, 0) - result.score
    for result in new_results:
        deltas[result.player_id] = deltas.get(result.player_id, 0) + result.score
    return deltas


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------
def games_of_season(games: Iterable[Game], season_id: str | None) -> list[Game]:
    """Games belonging to *season_id*, oldest first."""
    if season_id is None:
        return []
    return sorted((g for g in games if g.season_id == season_id), key=lambda g: g.date)


def season_leaderboard(
    players: Sequence[Player], season_games: Iterable[Game]
) -> list[LeaderboardEntry]:
    """Rank players by season points, with games played and wins.

    Ties on ``total_score`` keep the order of *players*.
    """
    played = dict.fromkeys((p.id for p in players), 0)
    wins = dict.fromkeys((p.id for p in players), 0)
    for game in season_games:
        for result in game.results:
            if result.player_id not in played:
                continue
            played[result.player_id] += 1
            if result.rank == 1:
                wins[result.player_id] += 1

    ordered = sorted(players, key=lambda p: p.total_score, reverse=True)
    return [
        LeaderboardEntry(
            id=p.id,
            name=p.name,
            image_url=p.image_url,
            total_score=p.total_score,
            games_played=played[p.id],
            wins=wins[p.id],
            rank=index,
        )
        for index, p in enumerate(ordered, start=1)
    ]


def season_stat(
    stat: SeasonStat, players: Sequence[Player], season_games: Sequence[Game]
) -> dict[str, int]:
    """Compute *stat* for every player over one season's games.

    Keys follow the order of *players*; results for unknown player ids
    are ignored.
    """
    values = dict.fromkeys((p.id for p in players), 0)

    if stat is SeasonStat.APPEARANCE_STREAK:
        ordered = sorted(season_games, key=lambda g: g.date)
        for player_id in values:
            streak = 0
            for game in reversed(ordered):
                if game.result_for(player_id) is None:
                    break
                streak += 1
            values[player_id] = streak
        return values

    for game in season_games:
        total_players = game.total_players
        for result in game.results:
            if result.player_id not in values:
                continue
            if stat is SeasonStat.WINS:
                hit = result.rank == 1
            elif stat is SeasonStat.LAST_PLACES:
                hit = result.rank == total_players
            elif stat is SeasonStat.SECOND_PLACES:
                hit = result.rank == 2
            elif stat is SeasonStat.ZERO_CHIPS:
                hit = result.chip_count == 0
            elif stat is SeasonStat.APPEARANCES:
                hit = True
            else:
                raise ValueError(f"Unsupported season stat: {stat!r}")
            if hit:
                values[result.player_id] += 1
    return values


def lifetime_games_played(player_id: str, games: Iterable[Game]) -> int:
    return sum(1 for g in games if g.result_for(player_id) is not None)


@dataclass(frozen=True, slots=True)
class PlayerProfile:
    """Global statistics shown on a player's profile (all seasons)."""

    player_id: str
    games_played: int
    wins: int
    average_rank: float | None
    last_place_count: int


def player_profile(player_id: str, games: Iterable[Game]) -> PlayerProfile:
    """Scan every game the player appears in.

    ``average_rank`` is rounded to two decimals and is ``None`` when the
    player has never played.
    """
    games_played = wins = last_places = rank_total = 0
    for game in games:
        result = game.result_for(player_id)
        if result is None:
            continue
        games_played += 1
        rank_total += result.rank
        if result.rank == 1:
            wins += 1
        if result.rank == game.total_players:
            last_places += 1

    average = round(rank_total / games_played, 2) if games_played else None
    return PlayerProfile(
        player_id=player_id,
        games_played=games_played,
        wins=wins,
        average_rank=average,
        last_place_count=last_places,
    )
