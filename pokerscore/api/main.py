"""
pokerscore.api.main — FastAPI application entry point
======================================================

Run with::

    uvicorn pokerscore.api.main:app --reload --port 8000

or ``python -m pokerscore.api`` to use the port from ``config.yaml``.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from pokerscore import __version__  # noqa: E402
from pokerscore.api.deps import get_engine  # noqa: E402
from pokerscore.api.routes.manage import router as manage_router  # noqa: E402
from pokerscore.api.routes.public import router as public_router  # noqa: E402
from pokerscore.errors import (  # noqa: E402
    GameNotFound,
    LeagueError,
    NoActiveSeason,
    PlayerNotFound,
    RankingInconsistency,
    SeasonAlreadyActive,
    SeasonClosed,
    SeasonNotFound,
    StoreError,
    UnknownPlayer,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Domain error → HTTP status
# ---------------------------------------------------------------------------
ERROR_STATUS: dict[type[LeagueError], int] = {
    RankingInconsistency: 400,
    UnknownPlayer: 400,
    NoActiveSeason: 409,
    SeasonClosed: 409,
    SeasonAlreadyActive: 409,
    PlayerNotFound: 404,
    GameNotFound: 404,
    SeasonNotFound: 404,
    StoreError: 503,
}


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine."""
    engine = get_engine()
    logger.info("pokerscore API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("pokerscore API shutting down")


app = FastAPI(
    title="pokerscore League API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LeagueError)
async def league_error_handler(request: Request, exc: LeagueError) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 400)
    if isinstance(exc, StoreError):
        # The underlying database error is logged by the store, not exposed
        return JSONResponse(status_code=status, content={"detail": "Could not save, please retry."})
    return JSONResponse(status_code=status, content={"detail": str(exc)})


# Mount routers
app.include_router(public_router, prefix="/api")
app.include_router(manage_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
