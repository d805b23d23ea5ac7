"""
tests/test_scoring.py — Unit Tests for Game Scoring
====================================================

Pure function tests: ParticipantEntry list → ranked, scored GameResults.
"""

from __future__ import annotations

import pytest

from pokerscore.constants import median_rank, points_for_rank
from pokerscore.engine.records import ParticipantEntry
from pokerscore.engine.scoring import entries_from_results, score_game
from pokerscore.errors import RankingInconsistency

from builders import out, survivor


class TestPointsFormula:
    def test_winner_and_last(self):
        assert points_for_rank(1, 4) == 30
        assert points_for_rank(4, 4) == 0

    def test_median_rank(self):
        assert median_rank(5) == 3
        assert median_rank(1) == 1
        assert median_rank(4) is None


class TestScoreGame:
    def test_four_player_example(self):
        """Two survivors (one on 0 chips) ahead of two eliminated players."""
        results = score_game([
            survivor("p1", 5000),
            survivor("p2", 0),
            out("p3", 2),
            out("p4", 1),
        ])
        assert [(r.player_id, r.rank, r.score) for r in results] == [
            ("p1", 1, 30),
            ("p2", 2, 20),
            ("p3", 3, 10),
            ("p4", 4, 0),
        ]

    def test_results_sorted_by_rank_regardless_of_input_order(self):
        results = score_game([out("a", 1), survivor("b", 100), out("c", 2)])
        assert [r.player_id for r in results] == ["b", "c", "a"]
        assert [r.rank for r in results] == [1, 2, 3]

    def test_survivors_ranked_by_chips(self):
        results = score_game([survivor("a", 100), survivor("b", 900), survivor("c", 500)])
        assert [r.player_id for r in results] == ["b", "c", "a"]

    def test_survivor_chip_tie_keeps_input_order(self):
        results = score_game([survivor("a", 500), survivor("b", 500), survivor("c", 900)])
        assert [r.player_id for r in results] == ["c", "a", "b"]

    def test_eliminated_record_zero_chips(self):
        results = score_game([survivor("w", 10), out("x", 1)])
        assert results[1].chip_count == 0

    def test_missing_survivor_chips_read_as_zero(self):
        results = score_game([ParticipantEntry(player_id="a"), survivor("b", 10)])
        assert results[1].player_id == "a"
        assert results[1].chip_count == 0

    def test_single_player(self):
        results = score_game([survivor("solo", 1000)])
        assert len(results) == 1
        assert results[0].rank == 1
        assert results[0].score == 0

    def test_everyone_eliminated(self):
        results = score_game([out("a", 3), out("b", 1), out("c", 2)])
        assert [r.player_id for r in results] == ["a", "c", "b"]

    def test_scores_sum_to_triangular_number(self):
        entries = [survivor(f"s{i}", 1000 * i) for i in range(1, 4)]
        entries += [out(f"e{i}", i) for i in range(1, 4)]
        results = score_game(entries)
        assert sum(r.score for r in results) == 10 * (6 * 5 // 2)
        assert sorted(r.rank for r in results) == list(range(1, 7))

    def test_input_order_does_not_matter_without_ties(self):
        entries = [survivor("a", 300), survivor("b", 900), out("c", 2), out("d", 1)]
        expected = score_game(entries)
        assert score_game(entries[::-1]) == expected
        assert score_game([entries[2], entries[0], entries[3], entries[1]]) == expected


class TestRankingInconsistency:
    def test_duplicate_player(self):
        with pytest.raises(RankingInconsistency):
            score_game([survivor("a", 10), survivor("a", 20)])

    def test_duplicate_elimination_order(self):
        with pytest.raises(RankingInconsistency):
            score_game([survivor("w", 10), out("a", 1), out("b", 1)])

    def test_negative_chips(self):
        with pytest.raises(RankingInconsistency):
            score_game([survivor("a", -5), survivor("b", 10)])

    def test_no_participants(self):
        with pytest.raises(RankingInconsistency):
            score_game([])

    def test_chips_on_eliminated_entry(self):
        entry = ParticipantEntry(player_id="a", chip_count=50_000, elimination_order=1)
        with pytest.raises(RankingInconsistency, match="marked eliminated"):
            score_game([entry, survivor("b", 100)])


class TestEntriesFromResults:
    def test_rebuilt_entries_reproduce_ranks(self):
        original = score_game([
            survivor("p1", 5000),
            survivor("p2", 2000),
            out("p3", 2),
            out("p4", 1),
        ])
        entries = entries_from_results(original)

        assert [e.player_id for e in entries if not e.is_eliminated] == ["p1", "p2"]
        assert {e.player_id: e.elimination_order for e in entries if e.is_eliminated} == {
            "p4": 1,
            "p3": 2,
        }
        assert score_game(entries) == original
