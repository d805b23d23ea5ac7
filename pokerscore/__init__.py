"""
Pokerscore — Club Poker League Score Tracker
=============================================
Records club poker games, keeps per-player season scores and lifetime
counters, archives season results, and awards achievements (badges)
from historical performance patterns.

Package layout::

    pokerscore/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Scoring constants + presentation helpers
    ├── errors.py          # Domain error kinds
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helper
    │   └── models.py      # ORM models (players, games, seasons, badges, news)
    ├── engine/
    │   ├── records.py     # Plain domain records passed through the engine
    │   ├── scoring.py     # Chip counts / elimination order → ranks + points
    │   ├── stats.py       # Player counters, leaderboards, profiles
    │   ├── catalog.py     # Static achievement catalog
    │   ├── achievements.py # Achievement evaluation (grant / revoke / news)
    │   └── rollover.py    # Season rollover planning
    ├── services/
    │   ├── store.py           # Store contract + SQLAlchemy implementation
    │   └── league_service.py  # record_game / edit_game / activate_season + CRUD
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Dependency injection
        └── routes/        # Public + management REST endpoints
"""

__version__ = "0.1.0"
