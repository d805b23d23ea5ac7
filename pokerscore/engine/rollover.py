"""
pokerscore.engine.rollover — Season Rollover
=============================================

Closes the active season and opens another one:

1. Snapshot the closing season's leaderboard into ``final_leaderboard``.
2. Credit the winner (``season_wins``, ``consecutive_season_wins``) and
   evaluate season-win milestones.
3. Reset ``total_score`` and ``consecutive_games_streak`` for everyone.
4. Mark the incoming season active.

Pure calculation: the caller commits the plan as one batch.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime

from pokerscore.engine.achievements import AchievementOutcome, evaluate_season_wins
from pokerscore.engine.catalog import ACHIEVEMENTS, Achievement
from pokerscore.engine.records import Game, Player, PlayerAchievement, Season, utcnow
from pokerscore.engine.stats import games_of_season, season_leaderboard
from pokerscore.errors import SeasonAlreadyActive, SeasonClosed, SeasonNotFound

logger = logging.getLogger(__name__)

__all__ = ["RolloverPlan", "plan_rollover"]


@dataclass
class RolloverPlan:
    """Everything that changes when a season is activated."""

    activated_season: Season
    players: list[Player]
    closed_season: Season | None = None
    winner_id: str | None = None
    outcome: AchievementOutcome = field(default_factory=AchievementOutcome)

    @property
    def seasons(self) -> list[Season]:
        """Seasons to persist, closed one first."""
        if self.closed_season is None:
            return [self.activated_season]
        return [self.closed_season, self.activated_season]


def _previous_winner(seasons: Sequence[Season], closing_id: str) -> str | None:
    """Winner of the most recently closed season other than *closing_id*."""
    closed = [
        s for s in seasons
        if s.is_closed and s.id != closing_id and s.closed_at is not None
    ]
    if not closed:
        return None
    return max(closed, key=lambda s: s.closed_at).winner_id


def plan_rollover(
    incoming_id: str,
    seasons: Sequence[Season],
    players: Sequence[Player],
    games: Sequence[Game],
    grants: Sequence[PlayerAchievement],
    *,
    catalog: tuple[Achievement, ...] = ACHIEVEMENTS,
    now: datetime | None = None,
) -> RolloverPlan:
    """Build the rollover that activates season *incoming_id*.

    Parameters
    ----------
    incoming_id : Season to activate.
    seasons : Every known season.
    players : Every player, in stable display order.
    games : Full game history.
    grants : Current achievement grant records.

    Raises
    ------
    SeasonNotFound
        If *incoming_id* is not a known season.
    SeasonClosed
        If the incoming season has already been archived.
    SeasonAlreadyActive
        If the incoming season is the one currently active.
    """
    now = now or utcnow()
    incoming = next((s for s in seasons if s.id == incoming_id), None)
    if incoming is None:
        raise SeasonNotFound(f"Season {incoming_id} not found")
    if incoming.is_closed:
        raise SeasonClosed(f"Season {incoming.name!r} is closed and cannot be reopened")
    if incoming.is_active:
        raise SeasonAlreadyActive(f"Season {incoming.name!r} is already active")

    current = next((s for s in seasons if s.is_active), None)
    updated = list(players)
    plan = RolloverPlan(activated_season=replace(incoming, is_active=True), players=updated)

    if current is not None:
        season_games = games_of_season(games, current.id)
        leaderboard = season_leaderboard(players, season_games)

        winner_id = leaderboard[0].id if leaderboard and season_games else None
        plan.closed_season = replace(
            current,
            is_active=False,
            is_closed=True,
            final_leaderboard=tuple(leaderboard),
            winner_id=winner_id,
            closed_at=now,
        )
        plan.winner_id = winner_id

        if winner_id is not None:
            streak_continues = _previous_winner(seasons, current.id) == winner_id
            for i, player in enumerate(updated):
                if player.id != winner_id:
                    continue
                winner = replace(
                    player,
                    season_wins=player.season_wins + 1,
                    consecutive_season_wins=(
                        player.consecutive_season_wins + 1 if streak_continues else 1
                    ),
                )
                updated[i] = winner
                plan.outcome = evaluate_season_wins(winner, grants, catalog=catalog, now=now)

        logger.info(
            "SEASON_ROLL: closed %r (winner=%s, %d games)",
            current.name, winner_id, len(season_games),
        )

    for i, player in enumerate(updated):
        updated[i] = replace(
            player,
            total_score=0,
            consecutive_games_streak=0,
            consecutive_season_wins=(
                player.consecutive_season_wins if player.id == plan.winner_id else 0
            ),
        )

    logger.info("SEASON_ROLL: activated %r", incoming.name)
    return plan
