"""
pokerscore.api.routes.public — Read-only public endpoints
==========================================================
"""

from __future__ import annotations

from datetime import tzinfo

from fastapi import APIRouter, Depends, Query

from pokerscore.api.deps import get_config, get_store
from pokerscore.config import LeagueConfig
from pokerscore.constants import RANK_BADGES, placeholder_image
from pokerscore.engine.catalog import ACHIEVEMENTS, Achievement, get_achievement
from pokerscore.engine.records import (
    Game,
    LeaderboardEntry,
    NewsItem,
    Player,
    PlayerAchievement,
    Season,
)
from pokerscore.services import league_service
from pokerscore.services.store import Store

router = APIRouter(tags=["public"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _iso(value, tz: tzinfo | None = None) -> str | None:
    """ISO 8601 in the club's zone when *tz* is given, else as stored (UTC)."""
    if value is None:
        return None
    return (value.astimezone(tz) if tz else value).isoformat()


def player_dict(p: Player) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "image_url": p.image_url or placeholder_image(p.name),
        "total_score": p.total_score,
        "total_chips_amassed": p.total_chips_amassed,
        "second_place_count": p.second_place_count,
        "zero_chip_count": p.zero_chip_count,
        "first_blood_count": p.first_blood_count,
        "invincible_streak": p.invincible_streak,
        "ventre_mou_count": p.ventre_mou_count,
        "season_wins": p.season_wins,
        "consecutive_season_wins": p.consecutive_season_wins,
        "consecutive_games_streak": p.consecutive_games_streak,
    }


def entry_dict(e: LeaderboardEntry) -> dict:
    return {
        "id": e.id,
        "name": e.name,
        "image_url": e.image_url or placeholder_image(e.name),
        "total_score": e.total_score,
        "games_played": e.games_played,
        "wins": e.wins,
        "rank": e.rank,
        "badge": RANK_BADGES[e.rank - 1] if e.rank <= len(RANK_BADGES) else None,
    }


def season_dict(s: Season, tz: tzinfo | None = None) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "end_date": _iso(s.end_date, tz),
        "prize": s.prize,
        "image_url": s.image_url,
        "is_active": s.is_active,
        "is_closed": s.is_closed,
        "winner_id": s.winner_id,
        "closed_at": _iso(s.closed_at, tz),
        "final_leaderboard": (
            [entry_dict(e) for e in s.final_leaderboard]
            if s.final_leaderboard is not None else None
        ),
    }


def game_dict(g: Game, tz: tzinfo | None = None) -> dict:
    return {
        "id": g.id,
        "season_id": g.season_id,
        "date": _iso(g.date, tz),
        "total_players": g.total_players,
        "results": [
            {
                "player_id": r.player_id,
                "name": r.name,
                "chip_count": r.chip_count,
                "score": r.score,
                "rank": r.rank,
            }
            for r in g.results
        ],
    }


def achievement_dict(a: Achievement) -> dict:
    return {
        "id": a.id,
        "name": a.name,
        "description": a.description,
        "emoji": a.emoji,
        "type": a.type.value,
    }


def grant_dict(g: PlayerAchievement, tz: tzinfo | None = None) -> dict:
    achievement = get_achievement(g.achievement_id)
    return {
        **(achievement_dict(achievement) if achievement else {"id": g.achievement_id}),
        "unlocked_at": _iso(g.unlocked_at, tz),
    }


def news_dict(n: NewsItem, tz: tzinfo | None = None) -> dict:
    return {"id": n.id, "text": n.text, "created_at": _iso(n.created_at, tz)}


# ---------------------------------------------------------------------------
# GET /leaderboard
# ---------------------------------------------------------------------------
@router.get("/leaderboard")
def get_leaderboard(
    season_id: str | None = Query(None),
    store: Store = Depends(get_store),
    cfg: LeagueConfig = Depends(get_config),
):
    """Live leaderboard of the active season, or the archive of a closed one."""
    if season_id is None:
        season = league_service.get_active_season(store)
    else:
        season = next((s for s in store.read_seasons() if s.id == season_id), None)
    entries = league_service.get_leaderboard(store, season_id)
    return {
        "season": season_dict(season, cfg.zone) if season else None,
        "entries": [entry_dict(e) for e in entries],
    }


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------
@router.get("/players")
def list_players(store: Store = Depends(get_store)):
    return {"players": [player_dict(p) for p in store.read_players()]}


@router.get("/players/{player_id}")
def get_player(
    player_id: str,
    store: Store = Depends(get_store),
    cfg: LeagueConfig = Depends(get_config),
):
    """Player card: counters, global statistics and achievements."""
    player, profile = league_service.get_player_profile(store, player_id)
    grants = league_service.list_player_achievements(store, player_id)
    return {
        **player_dict(player),
        "stats": {
            "games_played": profile.games_played,
            "wins": profile.wins,
            "average_rank": profile.average_rank,
            "last_place_count": profile.last_place_count,
        },
        "achievements": [grant_dict(g, cfg.zone) for g in grants],
    }


# ---------------------------------------------------------------------------
# Games, seasons, news, catalog
# ---------------------------------------------------------------------------
@router.get("/games")
def list_games(
    season_id: str | None = Query(None),
    store: Store = Depends(get_store),
    cfg: LeagueConfig = Depends(get_config),
):
    """Game history, newest first."""
    games = league_service.list_games(store, season_id)
    return {"games": [game_dict(g, cfg.zone) for g in games]}


@router.get("/seasons")
def list_seasons(
    store: Store = Depends(get_store),
    cfg: LeagueConfig = Depends(get_config),
):
    return {"seasons": [season_dict(s, cfg.zone) for s in store.read_seasons()]}


@router.get("/news")
def list_news(
    limit: int | None = Query(None, ge=1, le=100),
    store: Store = Depends(get_store),
    cfg: LeagueConfig = Depends(get_config),
):
    items = league_service.list_news(store, limit or cfg.news_feed_limit)
    return {"news": [news_dict(n, cfg.zone) for n in items]}


@router.get("/achievements")
def list_achievements():
    return {"achievements": [achievement_dict(a) for a in ACHIEVEMENTS]}


@router.get("/club")
def get_club(cfg: LeagueConfig = Depends(get_config)):
    """Club identity shown in the page header."""
    return {"name": cfg.club_name, "motto": cfg.club_motto, "timezone": cfg.timezone}
