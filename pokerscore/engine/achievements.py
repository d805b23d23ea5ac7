"""
pokerscore.engine.achievements — Achievement Evaluation
========================================================

Handler-registry implementation for achievement evaluation.  Each
permanent :class:`TriggerType` maps to a pure handler that receives the
entry's ``trigger_config`` and an :class:`AchievementContext`.  Seasonal
titles are decided by comparing a per-season statistic across players.

Evaluation is best-effort: a rule that raises is logged and skipped,
so a badge bug can never prevent a game or a season from being saved.

This module is pure calculation — no database I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from pokerscore.constants import (
    UNKNOWN_FORMER_HOLDER,
    UNKNOWN_NEW_HOLDER,
    UNKNOWN_PLAYER_NAME,
)
from pokerscore.engine.catalog import (
    ACHIEVEMENTS,
    Achievement,
    TriggerType,
    permanent_achievements,
    seasonal_achievements,
)
from pokerscore.engine.records import (
    Game,
    GameResult,
    NewsItem,
    Player,
    PlayerAchievement,
    new_id,
    utcnow,
)
from pokerscore.engine.stats import games_of_season, lifetime_games_played, season_stat

logger = logging.getLogger(__name__)

__all__ = [
    "AchievementContext",
    "AchievementOutcome",
    "GAME_TRIGGERS",
    "ROLLOVER_TRIGGERS",
    "TRIGGER_HANDLERS",
    "check_permanent",
    "evaluate_game",
    "evaluate_season_wins",
    "evaluate_seasonal",
]

# ---------------------------------------------------------------------------
# Player counters a COUNTER_THRESHOLD trigger may read
# ---------------------------------------------------------------------------
VALID_COUNTER_FIELDS: set[str] = {
    "total_chips_amassed",
    "second_place_count",
    "zero_chip_count",
    "first_blood_count",
    "invincible_streak",
    "ventre_mou_count",
    "season_wins",
    "consecutive_season_wins",
    "consecutive_games_streak",
}


# ---------------------------------------------------------------------------
# Achievement Context — passed to every trigger handler
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class AchievementContext:
    """Snapshot of one player's state passed to trigger handlers.

    Parameters
    ----------
    player : The player with counters already updated for this event.
    games_played : Lifetime games played, including the current game.
    game : The game just recorded (None at season rollover).
    result : The player's own result in ``game`` (None at season rollover).
    """

    player: Player
    games_played: int = 0
    game: Game | None = None
    result: GameResult | None = None


# ---------------------------------------------------------------------------
# Achievement Outcome — the side-effect set of one evaluation
# ---------------------------------------------------------------------------
@dataclass
class AchievementOutcome:
    """Grants, revocations and news produced by one evaluation."""

    grants: list[PlayerAchievement] = field(default_factory=list)
    revocations: list[PlayerAchievement] = field(default_factory=list)
    news: list[NewsItem] = field(default_factory=list)

    def extend(self, other: AchievementOutcome) -> None:
        self.grants.extend(other.grants)
        self.revocations.extend(other.revocations)
        self.news.extend(other.news)

    @property
    def is_empty(self) -> bool:
        return not (self.grants or self.revocations or self.news)


# ---------------------------------------------------------------------------
# Trigger handlers — pure functions (config, ctx) → bool
# ---------------------------------------------------------------------------

def _check_games_played(config: dict, ctx: AchievementContext) -> bool:
    """Fires when lifetime participation reaches a threshold.

    Config: {"value": 10}
    """
    value = config.get("value")
    if value is None:
        return False
    return ctx.games_played >= value


def _check_counter_threshold(config: dict, ctx: AchievementContext) -> bool:
    """Fires when a persisted player counter reaches a threshold.

    Config: {"field": "second_place_count", "value": 10}
    """
    field_name = config.get("field", "")
    if field_name not in VALID_COUNTER_FIELDS:
        return False
    value = config.get("value")
    if value is None:
        return False
    return getattr(ctx.player, field_name) >= value


def _check_chip_stack(config: dict, ctx: AchievementContext) -> bool:
    """Fires when the player ends the current game with a large stack.

    Config: {"value": 50000}
    """
    value = config.get("value")
    if value is None or ctx.result is None:
        return False
    return ctx.result.chip_count >= value


def _check_round_stack(config: dict, ctx: AchievementContext) -> bool:
    """Fires on a positive stack that is an exact multiple.

    Config: {"multiple": 10000}
    """
    multiple = config.get("multiple")
    if not multiple or ctx.result is None:
        return False
    chips = ctx.result.chip_count
    return chips > 0 and chips % multiple == 0


def _check_repeated_digits(config: dict, ctx: AchievementContext) -> bool:
    """Fires on a stack written with one repeated digit (e.g. 7777).

    Config: {"min_digits": 3}
    """
    if ctx.result is None or ctx.result.chip_count <= 0:
        return False
    digits = str(ctx.result.chip_count)
    return len(digits) >= config.get("min_digits", 3) and len(set(digits)) == 1


def _check_last_standing(config: dict, ctx: AchievementContext) -> bool:
    """Fires when the winner is the only player left holding chips.

    Config: {"min_players": 5}
    """
    if ctx.game is None or ctx.result is None:
        return False
    if ctx.game.total_players < config.get("min_players", 5):
        return False
    if ctx.result.rank != 1 or ctx.result.chip_count <= 0:
        return False
    return all(
        r.chip_count == 0 for r in ctx.game.results if r.player_id != ctx.result.player_id
    )


def _check_narrow_survival(config: dict, ctx: AchievementContext) -> bool:
    """Fires when the player survives on a tiny stack at a big table.

    Config: {"min_players": 6, "min_chips": 1, "max_chips": 3000}
    """
    if ctx.game is None or ctx.result is None:
        return False
    if ctx.game.total_players < config.get("min_players", 6):
        return False
    chips = ctx.result.chip_count
    return config.get("min_chips", 1) <= chips <= config.get("max_chips", 3000)


def _check_season_wins(config: dict, ctx: AchievementContext) -> bool:
    """Fires when total season titles reach a threshold.

    Config: {"value": 3}
    """
    value = config.get("value")
    if value is None:
        return False
    return ctx.player.season_wins >= value


def _check_consecutive_season_wins(config: dict, ctx: AchievementContext) -> bool:
    """Fires when back-to-back season titles reach a threshold.

    Config: {"value": 2}
    """
    value = config.get("value")
    if value is None:
        return False
    return ctx.player.consecutive_season_wins >= value


# ---------------------------------------------------------------------------
# Handler registry
# ---------------------------------------------------------------------------
TRIGGER_HANDLERS: dict[str, Callable[[dict, AchievementContext], bool]] = {
    TriggerType.GAMES_PLAYED: _check_games_played,
    TriggerType.COUNTER_THRESHOLD: _check_counter_threshold,
    TriggerType.CHIP_STACK: _check_chip_stack,
    TriggerType.ROUND_STACK: _check_round_stack,
    TriggerType.REPEATED_DIGITS: _check_repeated_digits,
    TriggerType.LAST_STANDING: _check_last_standing,
    TriggerType.NARROW_SURVIVAL: _check_narrow_survival,
    TriggerType.SEASON_WINS: _check_season_wins,
    TriggerType.CONSECUTIVE_SEASON_WINS: _check_consecutive_season_wins,
}

ROLLOVER_TRIGGERS: frozenset[TriggerType] = frozenset({
    TriggerType.SEASON_WINS,
    TriggerType.CONSECUTIVE_SEASON_WINS,
})
GAME_TRIGGERS: frozenset[TriggerType] = frozenset(TriggerType) - ROLLOVER_TRIGGERS


# ---------------------------------------------------------------------------
# Permanent badges
# ---------------------------------------------------------------------------
def check_permanent(
    ctx: AchievementContext,
    already_earned: set[str],
    *,
    triggers: frozenset[TriggerType] = GAME_TRIGGERS,
    catalog: tuple[Achievement, ...] = ACHIEVEMENTS,
) -> list[Achievement]:
    """Return the permanent achievements the player has newly earned.

    Only entries whose trigger is in *triggers* are considered.  An
    entry is skipped when already earned, or when a higher tier that
    supersedes it is earned (now or before).
    """
    newly_earned: list[Achievement] = []

    for achievement in permanent_achievements(catalog):
        if achievement.id in already_earned or achievement.trigger not in triggers:
            continue

        handler = TRIGGER_HANDLERS.get(achievement.trigger)
        if handler is None:
            continue

        try:
            fired = handler(achievement.trigger_config or {}, ctx)
        except Exception:
            logger.exception(
                "Achievement rule %s failed for player %s — skipped",
                achievement.id, ctx.player.id,
            )
            continue

        if fired:
            newly_earned.append(achievement)

    held = already_earned | {a.id for a in newly_earned}
    superseded = {a.supersedes for a in catalog if a.supersedes and a.id in held}
    return [a for a in newly_earned if a.id not in superseded]


def _grant(player: Player, achievement: Achievement, now: datetime) -> AchievementOutcome:
    logger.info("Achievement unlocked: %s for %s", achievement.id, player.name)
    return AchievementOutcome(
        grants=[PlayerAchievement(
            id=new_id(),
            player_id=player.id,
            achievement_id=achievement.id,
            unlocked_at=now,
        )],
        news=[NewsItem(id=new_id(), text=achievement.news_phrase(player.name), created_at=now)],
    )


def _earned_by_player(grants: Iterable[PlayerAchievement]) -> dict[str, set[str]]:
    earned: dict[str, set[str]] = {}
    for grant in grants:
        earned.setdefault(grant.player_id, set()).add(grant.achievement_id)
    return earned


# ---------------------------------------------------------------------------
# Seasonal titles
# ---------------------------------------------------------------------------
def _evaluate_title(
    achievement: Achievement,
    players: Sequence[Player],
    season_games: Sequence[Game],
    grants: Sequence[PlayerAchievement],
    now: datetime,
) -> AchievementOutcome:
    outcome = AchievementOutcome()
    values = season_stat(achievement.stat, players, season_games)
    if not values:
        return outcome

    best = max(values.values())
    if best == 0:
        return outcome

    leaders = [player_id for player_id, value in values.items() if value == best]
    holders = [g for g in grants if g.achievement_id == achievement.id]
    holder_ids = {g.player_id for g in holders}
    if holder_ids == set(leaders):
        return outcome

    names = {p.id: p.name for p in players}

    for grant in holders:
        if grant.player_id in leaders:
            continue
        outcome.revocations.append(grant)
        if achievement.loss_phrase is not None and leaders:
            text = achievement.loss_phrase(
                names.get(grant.player_id, UNKNOWN_FORMER_HOLDER),
                names.get(leaders[0], UNKNOWN_NEW_HOLDER),
            )
            outcome.news.append(NewsItem(id=new_id(), text=text, created_at=now))

    for player_id in leaders:
        if player_id in holder_ids:
            continue
        outcome.grants.append(PlayerAchievement(
            id=new_id(),
            player_id=player_id,
            achievement_id=achievement.id,
            unlocked_at=now,
        ))
        outcome.news.append(NewsItem(
            id=new_id(),
            text=achievement.news_phrase(names.get(player_id, UNKNOWN_PLAYER_NAME)),
            created_at=now,
        ))

    logger.info(
        "Title %s changed hands: %s → %s",
        achievement.id, sorted(holder_ids), leaders,
    )
    return outcome


def evaluate_seasonal(
    players: Sequence[Player],
    season_games: Sequence[Game],
    grants: Sequence[PlayerAchievement],
    *,
    catalog: tuple[Achievement, ...] = ACHIEVEMENTS,
    now: datetime | None = None,
) -> AchievementOutcome:
    """Recompute every seasonal title over the season's games.

    All players sharing the maximum value are co-leaders.  A maximum of
    zero recognizes nobody and leaves current holders untouched.
    """
    now = now or utcnow()
    outcome = AchievementOutcome()
    for achievement in seasonal_achievements(catalog):
        if achievement.stat is None:
            continue
        try:
            outcome.extend(_evaluate_title(achievement, players, season_games, grants, now))
        except Exception:
            logger.exception("Seasonal title %s failed — skipped", achievement.id)
    return outcome


# ---------------------------------------------------------------------------
# Main entry points
# ---------------------------------------------------------------------------
def evaluate_game(
    game: Game,
    players: Sequence[Player],
    all_games: Sequence[Game],
    grants: Sequence[PlayerAchievement],
    *,
    catalog: tuple[Achievement, ...] = ACHIEVEMENTS,
    now: datetime | None = None,
) -> AchievementOutcome:
    """Evaluate achievements after *game* has been recorded.

    Parameters
    ----------
    game : The game just recorded.
    players : Every player, counters already updated for *game*.
    all_games : Full game history, *game* included.
    grants : Grant records held before this game.

    Returns
    -------
    AchievementOutcome with permanent grants for the game's participants
    followed by seasonal title changes.
    """
    now = now or utcnow()
    outcome = AchievementOutcome()
    earned = _earned_by_player(grants)
    by_id = {p.id: p for p in players}

    for result in game.results:
        player = by_id.get(result.player_id)
        if player is None:
            continue
        ctx = AchievementContext(
            player=player,
            games_played=lifetime_games_played(player.id, all_games),
            game=game,
            result=result,
        )
        for achievement in check_permanent(
            ctx, earned.get(player.id, set()), catalog=catalog,
        ):
            outcome.extend(_grant(player, achievement, now))

    season_games = games_of_season(all_games, game.season_id)
    outcome.extend(evaluate_seasonal(players, season_games, grants, catalog=catalog, now=now))
    return outcome


def evaluate_season_wins(
    winner: Player,
    grants: Sequence[PlayerAchievement],
    *,
    catalog: tuple[Achievement, ...] = ACHIEVEMENTS,
    now: datetime | None = None,
) -> AchievementOutcome:
    """Season-win milestones for a season's winner (counters already bumped)."""
    now = now or utcnow()
    outcome = AchievementOutcome()
    ctx = AchievementContext(player=winner)
    already = _earned_by_player(grants).get(winner.id, set())
    for achievement in check_permanent(
        ctx, already, triggers=ROLLOVER_TRIGGERS, catalog=catalog,
    ):
        outcome.extend(_grant(winner, achievement, now))
    return outcome
