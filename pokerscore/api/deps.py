"""
pokerscore.api.deps — FastAPI dependency injection
===================================================
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy import Engine

from pokerscore.config import LeagueConfig, load_config
from pokerscore.database.engine import create_db_engine
from pokerscore.services.store import SqlAlchemyStore, Store


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> LeagueConfig:
    return load_config()


def get_store(engine: Annotated[Engine, Depends(get_engine)]) -> Store:
    return SqlAlchemyStore(engine)
