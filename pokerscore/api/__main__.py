"""
pokerscore.api.__main__ — Entry point for ``python -m pokerscore.api``
======================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Serve the API with uvicorn.
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

from pokerscore.config import load_config
from pokerscore.database.engine import create_db_engine, init_db

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("pokerscore")


def main() -> None:
    """Bootstrap and serve the league API."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2. Soft configuration.
    cfg = load_config()
    logger.info("Club: %s", cfg.club_name)

    # 3. Database.
    engine = create_db_engine()
    init_db(engine)
    engine.dispose()

    # 4. Serve (blocking).
    uvicorn.run("pokerscore.api.main:app", host="0.0.0.0", port=cfg.api_port, log_config=None)


if __name__ == "__main__":
    main()
