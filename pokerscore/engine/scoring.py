"""
pokerscore.engine.scoring — Game Scoring
=========================================

Pure calculation: turns the participant list of one game into ranked,
scored results.  No database I/O.

Pipeline::

    entries → partition → rank survivors (chips desc)
            → rank eliminated (first out = worst) → score → validate
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pokerscore.constants import points_for_rank
from pokerscore.engine.records import GameResult, ParticipantEntry
from pokerscore.errors import RankingInconsistency

logger = logging.getLogger(__name__)

__all__ = ["entries_from_results", "score_game"]


def score_game(entries: Sequence[ParticipantEntry]) -> list[GameResult]:
    """Rank and score every participant of a game.

    Survivors rank above every eliminated player, ordered by chip count
    descending (ties keep input order).  Eliminated players are ordered by
    elimination order reversed: the k-th player out receives rank
    ``N - k + 1``.  Every participant scores ``(N - rank) * 10``.

    Returns the results sorted by rank.

    Raises
    ------
    RankingInconsistency
        If the entries cannot produce a ranking of exactly ``1..N``
        (no participants, duplicate players, duplicate elimination slots,
        negative chips, chips on an eliminated entry).
    """
    total_players = len(entries)
    if total_players == 0:
        raise RankingInconsistency("A game needs at least one participant.")

    player_ids = [e.player_id for e in entries]
    if len(set(player_ids)) != total_players:
        raise RankingInconsistency("A player appears more than once in the game.")

    survivors = [e for e in entries if not e.is_eliminated]
    eliminated = [e for e in entries if e.is_eliminated]

    orders = [e.elimination_order for e in eliminated]
    if len(set(orders)) != len(orders):
        raise RankingInconsistency("Two players share the same elimination slot.")

    for entry in eliminated:
        if entry.chip_count is not None:
            raise RankingInconsistency(
                f"{entry.name or entry.player_id} has chips but is marked eliminated."
            )

    for entry in survivors:
        if entry.chip_count is not None and entry.chip_count < 0:
            raise RankingInconsistency(
                f"Negative chip count for {entry.name or entry.player_id}."
            )

    # 1. Survivors — most chips first; sorted() is stable so ties keep input order
    ranked_survivors = sorted(survivors, key=lambda e: e.chip_count or 0, reverse=True)
    results = [
        GameResult(
            player_id=entry.player_id,
            name=entry.name,
            chip_count=entry.chip_count or 0,
            score=points_for_rank(rank, total_players),
            rank=rank,
        )
        for rank, entry in enumerate(ranked_survivors, start=1)
    ]

    # 2. Eliminated — first out gets the worst rank
    out_order = sorted(eliminated, key=lambda e: e.elimination_order)
    for k, entry in enumerate(out_order, start=1):
        rank = total_players - k + 1
        results.append(GameResult(
            player_id=entry.player_id,
            name=entry.name,
            chip_count=0,
            score=points_for_rank(rank, total_players),
            rank=rank,
        ))

    results.sort(key=lambda r: r.rank)

    # 3. Validate
    if len(results) != total_players:
        raise RankingInconsistency(
            f"Ranked {len(results)} players but {total_players} took part."
        )
    if [r.rank for r in results] != list(range(1, total_players + 1)):
        raise RankingInconsistency("Ranks do not cover 1..N exactly once.")

    logger.debug(
        "Scored game: %d players (%d survivors, %d eliminated)",
        total_players, len(survivors), len(eliminated),
    )
    return results


def entries_from_results(results: Sequence[GameResult]) -> list[ParticipantEntry]:
    """Rebuild editable participant entries from stored results.

    Results with a positive chip count become survivors.  Zero-chip
    results become eliminated entries, the worst rank being the first
    player out.  Re-scoring the returned entries reproduces the ranks of
    any game whose zero-chip players were all eliminated.
    """
    survivors = [
        ParticipantEntry(player_id=r.player_id, name=r.name, chip_count=r.chip_count)
        for r in sorted(results, key=lambda r: r.rank)
        if r.chip_count > 0
    ]
    busted = sorted((r for r in results if r.chip_count == 0), key=lambda r: r.rank, reverse=True)
    eliminated = [
        ParticipantEntry(player_id=r.player_id, name=r.name, elimination_order=order)
        for order, r in enumerate(busted, start=1)
    ]
    return survivors + eliminated
