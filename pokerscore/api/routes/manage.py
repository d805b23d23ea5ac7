"""
pokerscore.api.routes.manage — League management endpoints
===========================================================

Players, games and seasons are created and edited here.  The club trusts
whoever runs the table, so these routes carry no authentication.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from pokerscore.api.deps import get_config, get_store
from pokerscore.api.routes.public import game_dict, player_dict, season_dict
from pokerscore.config import LeagueConfig
from pokerscore.engine.records import ParticipantEntry
from pokerscore.errors import NoActiveSeason
from pokerscore.services import league_service
from pokerscore.services.store import Store

router = APIRouter(prefix="/manage", tags=["manage"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class PlayerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    image_url: str | None = None


class PlayerUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    image_url: str | None = None


class Participant(BaseModel):
    player_id: str
    chip_count: int | None = Field(None, ge=0)
    elimination_order: int | None = Field(None, ge=1)  # 1 = first player out


class GameCreate(BaseModel):
    season_id: str | None = None  # defaults to the active season
    played_at: datetime | None = None
    participants: list[Participant] = Field(min_length=1)


class GameUpdate(BaseModel):
    participants: list[Participant] = Field(min_length=1)


class SeasonCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    end_date: datetime | None = None
    prize: str = ""
    image_url: str | None = None


class SeasonUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    end_date: datetime | None = None
    prize: str | None = None
    image_url: str | None = None


def _entries(participants: list[Participant]) -> list[ParticipantEntry]:
    return [
        ParticipantEntry(
            player_id=p.player_id,
            chip_count=p.chip_count,
            elimination_order=p.elimination_order,
        )
        for p in participants
    ]


# ---------------------------------------------------------------------------
# Players
# ---------------------------------------------------------------------------
@router.post("/players", status_code=201)
def create_player(body: PlayerCreate, store: Store = Depends(get_store)):
    player = league_service.create_player(store, body.name.strip(), body.image_url)
    return player_dict(player)


@router.patch("/players/{player_id}")
def update_player(player_id: str, body: PlayerUpdate, store: Store = Depends(get_store)):
    kwargs = body.model_dump(exclude_none=True)
    if not kwargs:
        raise HTTPException(400, "No fields to update")
    player = league_service.update_player(store, player_id, **kwargs)
    return player_dict(player)


@router.delete("/players/{player_id}")
def delete_player(player_id: str, store: Store = Depends(get_store)):
    league_service.delete_player(store, player_id)
    return {"deleted": player_id}


# ---------------------------------------------------------------------------
# Games
# ---------------------------------------------------------------------------
@router.post("/games", status_code=201)
def record_game(
    body: GameCreate,
    store: Store = Depends(get_store),
    cfg: LeagueConfig = Depends(get_config),
):
    season_id = body.season_id
    if season_id is None:
        active = league_service.get_active_season(store)
        if active is None:
            raise NoActiveSeason("No season is active; activate one before recording games.")
        season_id = active.id
    game = league_service.record_game(
        store, season_id, _entries(body.participants), played_at=body.played_at,
    )
    return game_dict(game, cfg.zone)


@router.put("/games/{game_id}")
def edit_game(
    game_id: str,
    body: GameUpdate,
    store: Store = Depends(get_store),
    cfg: LeagueConfig = Depends(get_config),
):
    game = league_service.edit_game(store, game_id, _entries(body.participants))
    return game_dict(game, cfg.zone)


# ---------------------------------------------------------------------------
# Seasons
# ---------------------------------------------------------------------------
@router.post("/seasons", status_code=201)
def create_season(
    body: SeasonCreate,
    store: Store = Depends(get_store),
    cfg: LeagueConfig = Depends(get_config),
):
    season = league_service.create_season(
        store,
        body.name.strip(),
        end_date=body.end_date,
        prize=body.prize,
        image_url=body.image_url,
    )
    return season_dict(season, cfg.zone)


@router.patch("/seasons/{season_id}")
def update_season(
    season_id: str,
    body: SeasonUpdate,
    store: Store = Depends(get_store),
    cfg: LeagueConfig = Depends(get_config),
):
    kwargs = body.model_dump(exclude_none=True)
    if not kwargs:
        raise HTTPException(400, "No fields to update")
    season = league_service.update_season(store, season_id, **kwargs)
    return season_dict(season, cfg.zone)


@router.delete("/seasons/{season_id}")
def delete_season(season_id: str, store: Store = Depends(get_store)):
    league_service.delete_season(store, season_id)
    return {"deleted": season_id}


@router.post("/seasons/{season_id}/activate")
def activate_season(
    season_id: str,
    store: Store = Depends(get_store),
    cfg: LeagueConfig = Depends(get_config),
):
    """Close the current season (archiving its leaderboard) and start this one."""
    season = league_service.activate_season(store, season_id)
    return season_dict(season, cfg.zone)


# ---------------------------------------------------------------------------
# General reset
# ---------------------------------------------------------------------------
@router.post("/reset")
def reset_league(store: Store = Depends(get_store)):
    league_service.reset_league(store)
    return {"status": "reset"}
