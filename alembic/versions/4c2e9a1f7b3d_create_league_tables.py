"""Create league tables

Revision ID: 4c2e9a1f7b3d
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '4c2e9a1f7b3d'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_COUNTERS = (
    "total_score",
    "total_chips_amassed",
    "second_place_count",
    "zero_chip_count",
    "first_blood_count",
    "invincible_streak",
    "ventre_mou_count",
    "season_wins",
    "consecutive_season_wins",
    "consecutive_games_streak",
)


def upgrade() -> None:
    """Create players, seasons, games, game_results, player_achievements, news_items."""

    # --- players ---
    op.create_table(
        "players",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        *(sa.Column(name, sa.Integer, nullable=False, server_default="0") for name in _COUNTERS),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_players_total_score", "players", ["total_score"])

    # --- seasons ---
    op.create_table(
        "seasons",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("prize", sa.Text, nullable=False, server_default=""),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_closed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("final_leaderboard", postgresql.JSONB, nullable=True),
        sa.Column("winner_id", sa.String(36), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_seasons_active", "seasons", ["is_active"])

    # --- games ---
    op.create_table(
        "games",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("season_id", sa.String(36), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_games_season_date", "games", ["season_id", "date"])

    op.create_table(
        "game_results",
        sa.Column(
            "game_id", sa.String(36),
            sa.ForeignKey("games.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("player_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("chip_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("score", sa.Integer, nullable=False, server_default="0"),
        sa.Column("rank", sa.Integer, nullable=False),
        sa.UniqueConstraint("game_id", "rank", name="uq_game_results_game_rank"),
    )
    op.create_index("ix_game_results_player", "game_results", ["player_id"])

    # --- player_achievements ---
    op.create_table(
        "player_achievements",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "player_id", sa.String(36),
            sa.ForeignKey("players.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("achievement_id", sa.String(50), nullable=False),
        sa.Column("unlocked_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "player_id", "achievement_id",
            name="uq_player_achievements_player_achievement",
        ),
    )
    op.create_index(
        "ix_player_achievements_achievement", "player_achievements", ["achievement_id"],
    )

    # --- news_items ---
    op.create_table(
        "news_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_news_items_created_at", "news_items", [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop every league table."""
    op.drop_index("ix_news_items_created_at", table_name="news_items")
    op.drop_table("news_items")
    op.drop_index("ix_player_achievements_achievement", table_name="player_achievements")
    op.drop_table("player_achievements")
    op.drop_index("ix_game_results_player", table_name="game_results")
    op.drop_table("game_results")
    op.drop_index("ix_games_season_date", table_name="games")
    op.drop_table("games")
    op.drop_index("ix_seasons_active", table_name="seasons")
    op.drop_table("seasons")
    op.drop_index("ix_players_total_score", table_name="players")
    op.drop_table("players")
