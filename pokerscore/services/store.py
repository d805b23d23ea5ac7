"""
pokerscore.services.store — Persistence Contract & SQLAlchemy Store
====================================================================

The league service never talks to the ORM directly.  It reads plain
records through a :class:`Store` and hands back a *batch* of write
operations which the store applies atomically — every write of the
batch persists, or none does.

Write kinds are small frozen dataclasses; :class:`SqlAlchemyStore`
dispatches each one to an applier through ``WRITE_APPLIERS``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy import Engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from pokerscore.database import models
from pokerscore.database.engine import get_session
from pokerscore.engine.records import (
    Game,
    GameResult,
    LeaderboardEntry,
    NewsItem,
    Player,
    PlayerAchievement,
    Season,
)
from pokerscore.errors import StoreError

logger = logging.getLogger(__name__)

__all__ = [
    "DeleteAchievement",
    "DeleteGame",
    "DeleteNews",
    "DeletePlayer",
    "DeleteSeason",
    "InsertAchievement",
    "InsertNews",
    "SaveGame",
    "SqlAlchemyStore",
    "Store",
    "UpsertPlayer",
    "UpsertSeason",
    "Write",
]


# ---------------------------------------------------------------------------
# Write kinds
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class UpsertPlayer:
    player: Player


@dataclass(frozen=True, slots=True)
class SaveGame:
    """Insert a game, or replace an existing game and all its results."""
    game: Game


@dataclass(frozen=True, slots=True)
class UpsertSeason:
    season: Season


@dataclass(frozen=True, slots=True)
class InsertAchievement:
    grant: PlayerAchievement


@dataclass(frozen=True, slots=True)
class DeleteAchievement:
    grant_id: str


@dataclass(frozen=True, slots=True)
class InsertNews:
    item: NewsItem


@dataclass(frozen=True, slots=True)
class DeletePlayer:
    player_id: str


@dataclass(frozen=True, slots=True)
class DeleteSeason:
    season_id: str


@dataclass(frozen=True, slots=True)
class DeleteGame:
    game_id: str


@dataclass(frozen=True, slots=True)
class DeleteNews:
    news_id: str


Write = (
    UpsertPlayer | SaveGame | UpsertSeason | InsertAchievement | DeleteAchievement
    | InsertNews | DeletePlayer | DeleteSeason | DeleteGame | DeleteNews
)


# ---------------------------------------------------------------------------
# Store contract
# ---------------------------------------------------------------------------
class Store(Protocol):
    """What the league service needs from persistence."""

    def read_players(self) -> list[Player]: ...

    def read_games(self, season_id: str | None = None) -> list[Game]: ...

    def read_seasons(self) -> list[Season]: ...

    def read_achievement_grants(self) -> list[PlayerAchievement]: ...

    def read_news(self, limit: int | None = None) -> list[NewsItem]: ...

    def commit_batch(self, writes: Sequence[Write]) -> None: ...


# ---------------------------------------------------------------------------
# Row → record conversion
# ---------------------------------------------------------------------------
def _aware(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _player_record(row: models.Player) -> Player:
    return Player(
        id=row.id,
        name=row.name,
        image_url=row.image_url,
        total_score=row.total_score,
        total_chips_amassed=row.total_chips_amassed,
        second_place_count=row.second_place_count,
        zero_chip_count=row.zero_chip_count,
        first_blood_count=row.first_blood_count,
        invincible_streak=row.invincible_streak,
        ventre_mou_count=row.ventre_mou_count,
        season_wins=row.season_wins,
        consecutive_season_wins=row.consecutive_season_wins,
        consecutive_games_streak=row.consecutive_games_streak,
    )


def _game_record(row: models.Game) -> Game:
    return Game(
        id=row.id,
        season_id=row.season_id,
        date=_aware(row.date),
        results=tuple(
            GameResult(
                player_id=r.player_id,
                name=r.name,
                chip_count=r.chip_count,
                score=r.score,
                rank=r.rank,
            )
            for r in sorted(row.results, key=lambda r: r.rank)
        ),
    )


def _season_record(row: models.Season) -> Season:
    leaderboard = None
    if row.final_leaderboard is not None:
        leaderboard = tuple(LeaderboardEntry(**entry) for entry in row.final_leaderboard)
    return Season(
        id=row.id,
        name=row.name,
        end_date=_aware(row.end_date),
        prize=row.prize or "",
        image_url=row.image_url,
        is_active=row.is_active,
        is_closed=row.is_closed,
        final_leaderboard=leaderboard,
        winner_id=row.winner_id,
        closed_at=_aware(row.closed_at),
    )


# ---------------------------------------------------------------------------
# Write appliers — (session, write) → None
# ---------------------------------------------------------------------------
def _upsert_player(session: Session, write: UpsertPlayer) -> None:
    player = write.player
    row = session.get(models.Player, player.id)
    if row is None:
        row = models.Player(id=player.id)
        session.add(row)
    for key, value in asdict(player).items():
        setattr(row, key, value)


def _save_game(session: Session, write: SaveGame) -> None:
    game = write.game
    row = session.get(models.Game, game.id)
    if row is None:
        row = models.Game(id=game.id)
        session.add(row)
    else:
        row.results.clear()
        session.flush()
    row.season_id = game.season_id
    row.date = game.date
    row.results = [
        models.GameResult(
            player_id=r.player_id,
            name=r.name,
            chip_count=r.chip_count,
            score=r.score,
            rank=r.rank,
        )
        for r in game.results
    ]


def _upsert_season(session: Session, write: UpsertSeason) -> None:
    season = write.season
    row = session.get(models.Season, season.id)
    if row is None:
        row = models.Season(id=season.id)
        session.add(row)
    row.name = season.name
    row.end_date = season.end_date
    row.prize = season.prize
    row.image_url = season.image_url
    row.is_active = season.is_active
    row.is_closed = season.is_closed
    row.final_leaderboard = (
        [asdict(entry) for entry in season.final_leaderboard]
        if season.final_leaderboard is not None else None
    )
    row.winner_id = season.winner_id
    row.closed_at = season.closed_at


def _insert_achievement(session: Session, write: InsertAchievement) -> None:
    grant = write.grant
    session.add(models.PlayerAchievement(
        id=grant.id,
        player_id=grant.player_id,
        achievement_id=grant.achievement_id,
        unlocked_at=grant.unlocked_at,
    ))


def _insert_news(session: Session, write: InsertNews) -> None:
    item = write.item
    session.add(models.NewsItem(id=item.id, text=item.text, created_at=item.created_at))


def _deleter(model: type[models.Base], attr: str) -> Callable[[Session, Write], None]:
    def _delete(session: Session, write: Write) -> None:
        row = session.get(model, getattr(write, attr))
        if row is not None:
            session.delete(row)
    return _delete


WRITE_APPLIERS: dict[type, Callable[[Session, Write], None]] = {
    UpsertPlayer: _upsert_player,
    SaveGame: _save_game,
    UpsertSeason: _upsert_season,
    InsertAchievement: _insert_achievement,
    DeleteAchievement: _deleter(models.PlayerAchievement, "grant_id"),
    InsertNews: _insert_news,
    DeletePlayer: _deleter(models.Player, "player_id"),
    DeleteSeason: _deleter(models.Season, "season_id"),
    DeleteGame: _deleter(models.Game, "game_id"),
    DeleteNews: _deleter(models.NewsItem, "news_id"),
}


# ---------------------------------------------------------------------------
# SQLAlchemy store
# ---------------------------------------------------------------------------
class SqlAlchemyStore:
    """:class:`Store` backed by the pokerscore ORM models.

    Players are read in name order, which is the stable order used to
    break leaderboard ties.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _read(self, fn: Callable[[Session], list]) -> list:
        try:
            with Session(self._engine) as session:
                return fn(session)
        except SQLAlchemyError as exc:
            logger.exception("Store read failed")
            raise StoreError("The league data could not be read.") from exc

    def read_players(self) -> list[Player]:
        return self._read(lambda session: [
            _player_record(row)
            for row in session.scalars(
                select(models.Player).order_by(models.Player.name, models.Player.id)
            )
        ])

    def read_games(self, season_id: str | None = None) -> list[Game]:
        stmt = (
            select(models.Game)
            .options(selectinload(models.Game.results))
            .order_by(models.Game.date, models.Game.id)
        )
        if season_id is not None:
            stmt = stmt.where(models.Game.season_id == season_id)
        return self._read(lambda session: [_game_record(row) for row in session.scalars(stmt)])

    def read_seasons(self) -> list[Season]:
        return self._read(lambda session: [
            _season_record(row)
            for row in session.scalars(
                select(models.Season).order_by(models.Season.name, models.Season.id)
            )
        ])

    def read_achievement_grants(self) -> list[PlayerAchievement]:
        return self._read(lambda session: [
            PlayerAchievement(
                id=row.id,
                player_id=row.player_id,
                achievement_id=row.achievement_id,
                unlocked_at=_aware(row.unlocked_at),
            )
            for row in session.scalars(
                select(models.PlayerAchievement).order_by(
                    models.PlayerAchievement.unlocked_at, models.PlayerAchievement.id,
                )
            )
        ])

    def read_news(self, limit: int | None = None) -> list[NewsItem]:
        stmt = select(models.NewsItem).order_by(
            models.NewsItem.created_at.desc(), models.NewsItem.id.desc(),
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._read(lambda session: [
            NewsItem(id=row.id, text=row.text, created_at=_aware(row.created_at))
            for row in session.scalars(stmt)
        ])

    def commit_batch(self, writes: Sequence[Write]) -> None:
        """Apply *writes* in order inside a single transaction.

        Raises
        ------
        StoreError
            If the database rejects any write; nothing is persisted.
        """
        if not writes:
            return
        try:
            with get_session(self._engine) as session:
                for write in writes:
                    WRITE_APPLIERS[type(write)](session, write)
                    session.flush()
        except SQLAlchemyError as exc:
            logger.error("Batch of %d writes rolled back: %s", len(writes), exc)
            raise StoreError("The change could not be saved.") from exc
        logger.debug("Committed batch of %d writes", len(writes))
