"""
pokerscore.database.models — SQLAlchemy 2.0 Data Models
========================================================

Tables:
- players             — Club members and their running counters
- seasons             — Competition periods, with the archived leaderboard
- games               — One row per completed session
- game_results        — Ranked, scored participants of a game
- player_achievements — Earned badges and current seasonal title holders
- news_items          — Append-only club news feed

Game results keep a name snapshot and no foreign key to ``players``:
deleting a player never rewrites history.  Games likewise outlive the
season they were played in.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all pokerscore ORM models."""


# ---------------------------------------------------------------------------
# Players — one row per club member
# ---------------------------------------------------------------------------
class Player(Base):
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(500), default=None)

    # Current season
    total_score: Mapped[int] = mapped_column(Integer, default=0)

    # Lifetime counters
    total_chips_amassed: Mapped[int] = mapped_column(Integer, default=0)
    second_place_count: Mapped[int] = mapped_column(Integer, default=0)
    zero_chip_count: Mapped[int] = mapped_column(Integer, default=0)
    first_blood_count: Mapped[int] = mapped_column(Integer, default=0)
    invincible_streak: Mapped[int] = mapped_column(Integer, default=0)
    ventre_mou_count: Mapped[int] = mapped_column(Integer, default=0)
    season_wins: Mapped[int] = mapped_column(Integer, default=0)
    consecutive_season_wins: Mapped[int] = mapped_column(Integer, default=0)
    consecutive_games_streak: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    achievements: Mapped[list[PlayerAchievement]] = relationship(
        back_populates="player", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_players_total_score", "total_score"),
    )

    def __repr__(self) -> str:
        return f"<Player id={self.id} name={self.name!r} score={self.total_score}>"


# ---------------------------------------------------------------------------
# Seasons — competition periods
# ---------------------------------------------------------------------------
class Season(Base):
    __tablename__ = "seasons"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    prize: Mapped[str] = mapped_column(Text, default="")
    image_url: Mapped[str | None] = mapped_column(String(500), default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    is_closed: Mapped[bool] = mapped_column(Boolean, default=False)

    # Archived at rollover: list of {id, name, image_url, total_score, games_played, wins, rank}
    final_leaderboard: Mapped[list | None] = mapped_column(JSONB, default=None)
    winner_id: Mapped[str | None] = mapped_column(String(36), default=None)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    __table_args__ = (
        Index("ix_seasons_active", "is_active"),
    )

    def __repr__(self) -> str:
        return (
            f"<Season id={self.id} name={self.name!r} "
            f"active={self.is_active} closed={self.is_closed}>"
        )


# ---------------------------------------------------------------------------
# Games — completed sessions
# ---------------------------------------------------------------------------
class Game(Base):
    __tablename__ = "games"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    season_id: Mapped[str] = mapped_column(String(36), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    results: Mapped[list[GameResult]] = relationship(
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="GameResult.rank",
    )

    __table_args__ = (
        Index("ix_games_season_date", "season_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<Game id={self.id} season={self.season_id} date={self.date}>"


class GameResult(Base):
    __tablename__ = "game_results"

    game_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("games.id", ondelete="CASCADE"), primary_key=True
    )
    player_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    chip_count: Mapped[int] = mapped_column(Integer, default=0)
    score: Mapped[int] = mapped_column(Integer, default=0)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)

    game: Mapped[Game] = relationship(back_populates="results")

    __table_args__ = (
        UniqueConstraint("game_id", "rank", name="uq_game_results_game_rank"),
        Index("ix_game_results_player", "player_id"),
    )

    def __repr__(self) -> str:
        return f"<GameResult game={self.game_id} player={self.player_id} rank={self.rank}>"


# ---------------------------------------------------------------------------
# PlayerAchievement — earned badges / current title holders
# ---------------------------------------------------------------------------
class PlayerAchievement(Base):
    __tablename__ = "player_achievements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    player_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    achievement_id: Mapped[str] = mapped_column(String(50), nullable=False)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    player: Mapped[Player] = relationship(back_populates="achievements")

    __table_args__ = (
        UniqueConstraint(
            "player_id", "achievement_id", name="uq_player_achievements_player_achievement",
        ),
        Index("ix_player_achievements_achievement", "achievement_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerAchievement player={self.player_id} "
            f"achievement={self.achievement_id!r}>"
        )


# ---------------------------------------------------------------------------
# NewsItem — append-only club feed
# ---------------------------------------------------------------------------
class NewsItem(Base):
    __tablename__ = "news_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_news_items_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<NewsItem id={self.id} at={self.created_at}>"
