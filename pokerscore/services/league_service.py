"""
pokerscore.services.league_service — League Entry Points
=========================================================

Every mutation follows the same pattern:

  1. Read the current state through the :class:`Store`
  2. Validate (nothing is written when validation fails)
  3. Compute the new state with the pure engine
  4. Hand the whole change to ``store.commit_batch`` — all or nothing

Achievement evaluation after a game is best-effort: if it blows up, the
game is still saved and the failure is logged.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import UTC, datetime, timedelta

from pokerscore.constants import DEFAULT_NEWS_LIMIT
from pokerscore.engine.achievements import AchievementOutcome, evaluate_game
from pokerscore.engine.records import (
    Game,
    LeaderboardEntry,
    NewsItem,
    ParticipantEntry,
    Player,
    PlayerAchievement,
    Season,
    new_id,
    utcnow,
)
from pokerscore.engine.rollover import plan_rollover
from pokerscore.engine.scoring import score_game
from pokerscore.engine.stats import (
    PlayerProfile,
    apply_game,
    games_of_season,
    player_profile,
    score_deltas,
    season_leaderboard,
)
from pokerscore.errors import (
    GameNotFound,
    NoActiveSeason,
    PlayerNotFound,
    SeasonClosed,
    SeasonNotFound,
    UnknownPlayer,
)
from pokerscore.services.store import (
    DeleteAchievement,
    DeleteGame,
    DeleteNews,
    DeletePlayer,
    DeleteSeason,
    InsertAchievement,
    InsertNews,
    SaveGame,
    Store,
    UpsertPlayer,
    UpsertSeason,
    Write,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _outcome_writes(outcome: AchievementOutcome) -> list[Write]:
    """Revocations first so a title never has two sets of holders mid-batch."""
    writes: list[Write] = [DeleteAchievement(grant.id) for grant in outcome.revocations]
    writes += [InsertAchievement(grant) for grant in outcome.grants]
    # one microsecond apart so the feed keeps emission order
    writes += [
        InsertNews(replace(item, created_at=item.created_at + timedelta(microseconds=i)))
        for i, item in enumerate(outcome.news)
    ]
    return writes


def _find_player(store: Store, player_id: str) -> Player:
    player = next((p for p in store.read_players() if p.id == player_id), None)
    if player is None:
        raise PlayerNotFound(f"Player {player_id} not found")
    return player


def _find_season(store: Store, season_id: str) -> Season:
    season = next((s for s in store.read_seasons() if s.id == season_id), None)
    if season is None:
        raise SeasonNotFound(f"Season {season_id} not found")
    return season


def _named_entries(
    entries: Sequence[ParticipantEntry], names: dict[str, str]
) -> list[ParticipantEntry]:
    """Stamp each entry with the player's current name.

    Raises UnknownPlayer for an id missing from *names*.
    """
    named = []
    for entry in entries:
        if entry.player_id not in names:
            raise UnknownPlayer(f"Unknown player {entry.player_id}")
        named.append(replace(entry, name=names[entry.player_id]))
    return named


# ---------------------------------------------------------------------------
# Games
# ---------------------------------------------------------------------------

def record_game(
    store: Store,
    season_id: str,
    entries: Sequence[ParticipantEntry],
    *,
    played_at: datetime | None = None,
) -> Game:
    """Score a completed game and commit it with every consequence.

    One batch holds the game, the updated player counters and the
    achievement grants, revocations and news produced by the game.

    Raises
    ------
    NoActiveSeason
        If *season_id* is not the currently active season.
    UnknownPlayer
        If an entry references a player that does not exist.
    RankingInconsistency
        If the entries cannot be ranked.
    StoreError
        If the batch could not be persisted.
    """
    active = next((s for s in store.read_seasons() if s.is_active), None)
    if active is None or active.id != season_id:
        raise NoActiveSeason("Games can only be recorded in the active season.")

    players = store.read_players()
    named = _named_entries(entries, {p.id: p.name for p in players})
    results = score_game(named)

    now = utcnow()
    game = Game(
        id=new_id(), season_id=season_id, date=_as_utc(played_at) or now, results=tuple(results),
    )
    updated = apply_game(players, results)

    writes: list[Write] = [SaveGame(game)]
    writes += [
        UpsertPlayer(after) for before, after in zip(players, updated) if after != before
    ]

    history = [*store.read_games(), game]
    grants = store.read_achievement_grants()
    try:
        outcome = evaluate_game(game, updated, history, grants, now=now)
    except Exception:
        logger.exception("Achievement evaluation failed for game %s — saving game alone", game.id)
        outcome = AchievementOutcome()
    writes += _outcome_writes(outcome)

    store.commit_batch(writes)
    logger.info(
        "Game %s recorded in %r: %d players, winner %s, %d achievement changes",
        game.id, active.name, game.total_players, results[0].name,
        len(outcome.grants) + len(outcome.revocations),
    )
    return game


def edit_game(store: Store, game_id: str, entries: Sequence[ParticipantEntry]) -> Game:
    """Re-score an existing game and adjust season points by the difference.

    Only ``total_score`` is corrected; lifetime counters and achievements
    keep the values earned when the game was first recorded.

    Raises
    ------
    GameNotFound, SeasonClosed, UnknownPlayer, RankingInconsistency, StoreError
    """
    old = next((g for g in store.read_games() if g.id == game_id), None)
    if old is None:
        raise GameNotFound(f"Game {game_id} not found")

    season = next((s for s in store.read_seasons() if s.id == old.season_id), None)
    if season is not None and season.is_closed:
        raise SeasonClosed(f"Season {season.name!r} is closed; its games are final")

    players = store.read_players()
    # Players deleted since the game keep their recorded name
    names = {r.player_id: r.name for r in old.results}
    names.update({p.id: p.name for p in players})
    results = score_game(_named_entries(entries, names))

    game = replace(old, results=tuple(results))
    deltas = score_deltas(old.results, results)

    writes: list[Write] = [SaveGame(game)]
    for player in players:
        delta = deltas.get(player.id, 0)
        if delta:
            writes.append(UpsertPlayer(replace(player, total_score=player.total_score + delta)))

    store.commit_batch(writes)
    logger.info("Game %s edited: %d score adjustments", game.id, len(writes) - 1)
    return game


def list_games(store: Store, season_id: str | None = None) -> list[Game]:
    """Game history, newest first."""
    return sorted(store.read_games(season_id), key=lambda g: g.date, reverse=True)


# ---------------------------------------------------------------------------
# Seasons
# ---------------------------------------------------------------------------

def activate_season(store: Store, season_id: str) -> Season:
    """Close the active season (if any) and activate *season_id*.

    Raises
    ------
    SeasonNotFound, SeasonClosed, SeasonAlreadyActive, StoreError
    """
    plan = plan_rollover(
        season_id,
        store.read_seasons(),
        store.read_players(),
        store.read_games(),
        store.read_achievement_grants(),
    )

    writes: list[Write] = [UpsertSeason(s) for s in plan.seasons]
    writes += [UpsertPlayer(p) for p in plan.players]
    writes += _outcome_writes(plan.outcome)

    store.commit_batch(writes)
    logger.info(
        "SEASON_ROLL: %s → %r (winner=%s)",
        plan.closed_season.name if plan.closed_season else "none",
        plan.activated_season.name, plan.winner_id,
    )
    return plan.activated_season


def create_season(
    store: Store,
    name: str,
    *,
    end_date: datetime | None = None,
    prize: str = "",
    image_url: str | None = None,
) -> Season:
    """Create an inactive season; activate it with :func:`activate_season`."""
    season = Season(
        id=new_id(), name=name, end_date=_as_utc(end_date), prize=prize, image_url=image_url,
    )
    store.commit_batch([UpsertSeason(season)])
    logger.info("Season created: %r", name)
    return season


def update_season(
    store: Store,
    season_id: str,
    *,
    name: str | None = None,
    end_date: datetime | None = None,
    prize: str | None = None,
    image_url: str | None = None,
) -> Season:
    """Edit a season's descriptive fields.  ``None`` leaves a field as is."""
    season = _find_season(store, season_id)
    changes = {
        key: value
        for key, value in {
            "name": name, "end_date": _as_utc(end_date), "prize": prize, "image_url": image_url,
        }.items()
        if value is not None
    }
    updated = replace(season, **changes)
    store.commit_batch([UpsertSeason(updated)])
    return updated


def delete_season(store: Store, season_id: str) -> None:
    """Delete a season record.  Its games are left untouched."""
    season = _find_season(store, season_id)
    store.commit_batch([DeleteSeason(season.id)])
    logger.info("Season deleted: %r (active=%s)", season.name, season.is_active)


def get_active_season(store: Store) -> Season | None:
    return next((s for s in store.read_seasons() if s.is_active), None)


def get_leaderboard(store: Store, season_id: str | None = None) -> list[LeaderboardEntry]:
    """Live leaderboard of the active season, or the archive of a closed one.

    With no *season_id* the active season is used; an empty list is
    returned when no season is active.  A season that has never been
    active has an empty leaderboard.
    """
    if season_id is None:
        season = get_active_season(store)
        if season is None:
            return []
    else:
        season = _find_season(store, season_id)

    if season.is_closed:
        return list(season.final_leaderboard or ())
    if not season.is_active:
        return []
    return season_leaderboard(
        store.read_players(), games_of_season(store.read_games(season.id), season.id)
    )


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------

def create_player(store: Store, name: str, image_url: str | None = None) -> Player:
    player = Player(id=new_id(), name=name, image_url=image_url)
    store.commit_batch([UpsertPlayer(player)])
    logger.info("Player created: %r", name)
    return player


def update_player(
    store: Store,
    player_id: str,
    *,
    name: str | None = None,
    image_url: str | None = None,
) -> Player:
    """Rename a player or change their picture.  Counters are untouched."""
    player = _find_player(store, player_id)
    if name is not None:
        player = replace(player, name=name)
    if image_url is not None:
        player = replace(player, image_url=image_url)
    store.commit_batch([UpsertPlayer(player)])
    return player


def delete_player(store: Store, player_id: str) -> None:
    """Delete a player and their achievements; recorded games keep their name."""
    player = _find_player(store, player_id)
    writes: list[Write] = [
        DeleteAchievement(g.id) for g in store.read_achievement_grants() if g.player_id == player.id
    ]
    writes.append(DeletePlayer(player.id))
    store.commit_batch(writes)
    logger.info("Player deleted: %r", player.name)


def get_player_profile(store: Store, player_id: str) -> tuple[Player, PlayerProfile]:
    """The player record with global statistics over every game played."""
    player = _find_player(store, player_id)
    return player, player_profile(player.id, store.read_games())


def list_player_achievements(store: Store, player_id: str) -> list[PlayerAchievement]:
    player = _find_player(store, player_id)
    return [g for g in store.read_achievement_grants() if g.player_id == player.id]


# ---------------------------------------------------------------------------
# News & reset
# ---------------------------------------------------------------------------

def list_news(store: Store, limit: int = DEFAULT_NEWS_LIMIT) -> list[NewsItem]:
    """Most recent news first."""
    return store.read_news(limit)


def reset_league(store: Store) -> None:
    """General reset: wipe games, seasons, news and achievements.

    Players are kept, with every counter back to zero.
    """
    writes: list[Write] = [DeleteGame(g.id) for g in store.read_games()]
    writes += [DeleteSeason(s.id) for s in store.read_seasons()]
    writes += [DeleteNews(n.id) for n in store.read_news()]
    writes += [DeleteAchievement(g.id) for g in store.read_achievement_grants()]
    writes += [
        UpsertPlayer(Player(id=p.id, name=p.name, image_url=p.image_url))
        for p in store.read_players()
    ]
    store.commit_batch(writes)
    logger.warning("LEAGUE_RESET: %d records rewritten", len(writes))
