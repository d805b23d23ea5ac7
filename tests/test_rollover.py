"""
tests/test_rollover.py — Unit Tests for Season Rollover
========================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime

import pytest

from pokerscore.engine.records import Player, Season
from pokerscore.engine.rollover import plan_rollover
from pokerscore.errors import SeasonAlreadyActive, SeasonClosed, SeasonNotFound

from builders import ranked

NOW = datetime(2026, 6, 30, tzinfo=UTC)


@pytest.fixture
def seasons() -> list[Season]:
    return [
        Season(id="s1", name="Hiver", is_active=True),
        Season(id="s2", name="Printemps"),
    ]


@pytest.fixture
def players() -> list[Player]:
    return [
        Player(id="p1", name="P1", total_score=300, consecutive_games_streak=4),
        Player(id="p2", name="P2", total_score=300, consecutive_season_wins=1),
        Player(id="p3", name="P3", total_score=100),
    ]


@pytest.fixture
def games() -> list:
    return [ranked("g1", "s1", 1, "p1", "p2", "p3"), ranked("g2", "s1", 2, "p2", "p1", "p3")]


class TestRollover:
    def test_tied_leaders_first_in_order_wins(self, seasons, players, games):
        plan = plan_rollover("s2", seasons, players, games, [], now=NOW)

        closed = plan.closed_season
        assert [(e.id, e.total_score, e.rank) for e in closed.final_leaderboard] == [
            ("p1", 300, 1),
            ("p2", 300, 2),
            ("p3", 100, 3),
        ]
        assert closed.winner_id == "p1"
        assert plan.winner_id == "p1"

        by_id = {p.id: p for p in plan.players}
        assert by_id["p1"].season_wins == 1
        assert by_id["p2"].season_wins == 0

    def test_season_is_archived_and_next_activated(self, seasons, players, games):
        plan = plan_rollover("s2", seasons, players, games, [], now=NOW)

        assert plan.closed_season.is_closed
        assert not plan.closed_season.is_active
        assert plan.closed_season.closed_at == NOW
        assert len(plan.closed_season.final_leaderboard) == len(players)
        assert plan.activated_season.id == "s2"
        assert plan.activated_season.is_active
        assert [s.id for s in plan.seasons] == ["s1", "s2"]

    def test_scores_and_streaks_reset(self, seasons, players, games):
        plan = plan_rollover("s2", seasons, players, games, [], now=NOW)
        assert all(p.total_score == 0 for p in plan.players)
        assert all(p.consecutive_games_streak == 0 for p in plan.players)

    def test_non_winners_lose_consecutive_titles(self, seasons, players, games):
        plan = plan_rollover("s2", seasons, players, games, [], now=NOW)
        by_id = {p.id: p for p in plan.players}
        assert by_id["p2"].consecutive_season_wins == 0
        assert by_id["p1"].consecutive_season_wins == 1

    def test_leaderboard_counts_games_and_wins(self, seasons, players, games):
        plan = plan_rollover("s2", seasons, players, games, [], now=NOW)
        p1 = plan.closed_season.final_leaderboard[0]
        assert (p1.games_played, p1.wins) == (2, 1)

    def test_winner_earns_champion(self, seasons, players, games):
        plan = plan_rollover("s2", seasons, players, games, [], now=NOW)
        assert [(g.player_id, g.achievement_id) for g in plan.outcome.grants] == [("p1", "champion")]
        assert len(plan.outcome.news) == 1

    def test_back_to_back_titles(self, players, games):
        previous = Season(
            id="s0", name="Automne", is_closed=True, winner_id="p1",
            closed_at=datetime(2025, 12, 31, tzinfo=UTC),
        )
        older = Season(
            id="s-1", name="Été", is_closed=True, winner_id="p3",
            closed_at=datetime(2025, 9, 30, tzinfo=UTC),
        )
        seasons = [
            older,
            previous,
            Season(id="s1", name="Hiver", is_active=True),
            Season(id="s2", name="Printemps"),
        ]
        players = [replace(players[0], season_wins=1, consecutive_season_wins=1), *players[1:]]

        plan = plan_rollover("s2", seasons, players, games, [], now=NOW)

        winner = next(p for p in plan.players if p.id == "p1")
        assert winner.season_wins == 2
        assert winner.consecutive_season_wins == 2
        assert {g.achievement_id for g in plan.outcome.grants} == {"champion", "double", "back_to_back"}

    def test_broken_streak_restarts_at_one(self, players, games):
        seasons = [
            Season(
                id="s0", name="Automne", is_closed=True, winner_id="p3",
                closed_at=datetime(2025, 12, 31, tzinfo=UTC),
            ),
            Season(id="s1", name="Hiver", is_active=True),
            Season(id="s2", name="Printemps"),
        ]
        players = [replace(players[0], consecutive_season_wins=3), *players[1:]]
        plan = plan_rollover("s2", seasons, players, games, [], now=NOW)
        assert next(p for p in plan.players if p.id == "p1").consecutive_season_wins == 1

    def test_season_without_games_has_no_winner(self, seasons, players):
        plan = plan_rollover("s2", seasons, players, [], [], now=NOW)
        assert plan.closed_season.winner_id is None
        assert len(plan.closed_season.final_leaderboard) == 3
        assert all(p.season_wins == 0 for p in plan.players)
        assert plan.outcome.is_empty

    def test_first_activation(self, players):
        plan = plan_rollover("s1", [Season(id="s1", name="Hiver")], players, [], [], now=NOW)
        assert plan.closed_season is None
        assert plan.activated_season.is_active
        assert all(p.total_score == 0 for p in plan.players)


class TestRolloverErrors:
    def test_unknown_season(self, seasons, players):
        with pytest.raises(SeasonNotFound):
            plan_rollover("nope", seasons, players, [], [])

    def test_closed_season_cannot_reopen(self, players):
        seasons = [Season(id="s0", name="Automne", is_closed=True)]
        with pytest.raises(SeasonClosed):
            plan_rollover("s0", seasons, players, [], [])

    def test_already_active(self, seasons, players):
        with pytest.raises(SeasonAlreadyActive):
            plan_rollover("s1", seasons, players, [], [])
