"""
pokerscore.errors — Domain Error Kinds
=======================================

Every failure the league core can report to its caller.  Validation
errors are raised *before* a write batch is built, so nothing is ever
half-committed.  Achievement-rule failures are not represented here:
they are logged and skipped inside the evaluator.
"""

from __future__ import annotations


class LeagueError(Exception):
    """Base class for all pokerscore domain errors."""


class RankingInconsistency(LeagueError):
    """Scored results do not form a valid ranking of the participants."""


class NoActiveSeason(LeagueError):
    """A game was submitted while no (or another) season is active."""


class UnknownPlayer(LeagueError):
    """A participant entry references a player that does not exist."""


class PlayerNotFound(LeagueError):
    pass


class GameNotFound(LeagueError):
    pass


class SeasonNotFound(LeagueError):
    pass


class SeasonClosed(LeagueError):
    """The season has been archived and can no longer change."""


class SeasonAlreadyActive(LeagueError):
    pass


class StoreError(LeagueError):
    """The persistence collaborator failed; the batch was not applied."""
