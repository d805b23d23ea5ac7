"""
tests/test_league_service.py — League Service Integration Tests
================================================================

Runs the entry points against the SQLAlchemy store on in-memory SQLite:
atomic batches, validation before writes, best-effort achievements,
rollover persistence and the management operations.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from pokerscore.engine.achievements import AchievementOutcome
from pokerscore.engine.records import NewsItem, ParticipantEntry
from pokerscore.errors import (
    GameNotFound,
    NoActiveSeason,
    PlayerNotFound,
    RankingInconsistency,
    SeasonClosed,
    SeasonNotFound,
    StoreError,
    UnknownPlayer,
)
from pokerscore.services import league_service as svc

from builders import day


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _survivor(player, chips: int) -> ParticipantEntry:
    return ParticipantEntry(player_id=player.id, chip_count=chips)


def _out(player, order: int) -> ParticipantEntry:
    return ParticipantEntry(player_id=player.id, elimination_order=order)


@pytest.fixture
def league(store):
    """Four players and an active season."""
    players = [svc.create_player(store, name) for name in ("Alice", "Bob", "Chloé", "David")]
    season = svc.create_season(store, "Hiver 2026", prize="Un jambon")
    svc.activate_season(store, season.id)
    return store, season, players


def _example(players) -> list[ParticipantEntry]:
    p1, p2, p3, p4 = players
    return [_survivor(p1, 5000), _survivor(p2, 0), _out(p3, 2), _out(p4, 1)]


def _scores(store) -> dict[str, int]:
    return {p.name: p.total_score for p in store.read_players()}


# ---------------------------------------------------------------------------
# record_game
# ---------------------------------------------------------------------------
class TestRecordGame:
    def test_game_and_counters_committed_together(self, league):
        store, season, players = league
        game = svc.record_game(store, season.id, _example(players), played_at=day(1))

        (stored,) = store.read_games()
        assert stored == game
        assert [r.name for r in stored.results] == ["Alice", "Bob", "Chloé", "David"]
        assert _scores(store) == {"Alice": 30, "Bob": 20, "Chloé": 10, "David": 0}

        david = next(p for p in store.read_players() if p.name == "David")
        assert david.first_blood_count == 1
        assert david.invincible_streak == 0

    def test_seasonal_titles_and_news_after_first_game(self, league):
        store, season, players = league
        svc.record_game(store, season.id, _example(players), played_at=day(1))

        names = {p.id: p.name for p in store.read_players()}
        holders = {}
        for grant in store.read_achievement_grants():
            holders.setdefault(grant.achievement_id, set()).add(names[grant.player_id])

        assert holders["conqueror"] == {"Alice"}
        assert holders["red_lantern"] == {"David"}
        assert holders["eternal_second"] == {"Bob"}
        assert holders["kamikaze"] == {"Bob", "Chloé", "David"}
        assert len(store.read_news()) == len(store.read_achievement_grants())

    def test_no_active_season(self, store):
        alice = svc.create_player(store, "Alice")
        season = svc.create_season(store, "Hiver")
        with pytest.raises(NoActiveSeason):
            svc.record_game(store, season.id, [_survivor(alice, 100)])
        assert store.read_games() == []

    def test_inactive_season_rejected(self, league):
        store, _, players = league
        other = svc.create_season(store, "Printemps")
        with pytest.raises(NoActiveSeason):
            svc.record_game(store, other.id, _example(players))

    def test_unknown_player(self, league):
        store, season, players = league
        entries = [*_example(players), ParticipantEntry(player_id="ghost", chip_count=10)]
        with pytest.raises(UnknownPlayer):
            svc.record_game(store, season.id, entries)
        assert store.read_games() == []

    def test_ranking_inconsistency_writes_nothing(self, league):
        store, season, players = league
        p1, p2, p3, _ = players
        with pytest.raises(RankingInconsistency):
            svc.record_game(store, season.id, [_survivor(p1, 10), _out(p2, 1), _out(p3, 1)])
        assert store.read_games() == []
        assert set(_scores(store).values()) == {0}

    def test_failed_batch_leaves_store_untouched(self, league, monkeypatch):
        store, season, players = league

        def _duplicate_news(game, *args, **kwargs):
            item = NewsItem(id="same-id", text="dup", created_at=datetime.now(UTC))
            return AchievementOutcome(news=[item, item])

        monkeypatch.setattr(svc, "evaluate_game", _duplicate_news)
        with pytest.raises(StoreError):
            svc.record_game(store, season.id, _example(players))

        assert store.read_games() == []
        assert set(_scores(store).values()) == {0}
        assert store.read_news() == []

    def test_achievement_failure_still_saves_game(self, league, monkeypatch, caplog):
        store, season, players = league

        def _boom(*args, **kwargs):
            raise RuntimeError("evaluator down")

        monkeypatch.setattr(svc, "evaluate_game", _boom)
        svc.record_game(store, season.id, _example(players))

        assert len(store.read_games()) == 1
        assert store.read_achievement_grants() == []
        assert "Achievement evaluation failed" in caplog.text

    def test_veteran_granted_once(self, league):
        store, season, players = league
        for n in range(1, 12):
            svc.record_game(store, season.id, _example(players), played_at=day(n))

        veterans = [g for g in store.read_achievement_grants() if g.achievement_id == "veteran"]
        assert len(veterans) == 4
        assert len({g.player_id for g in veterans}) == 4

    def test_title_transfer_emits_loss_and_gain_news(self, league):
        store, season, players = league
        alice, bob, chloe, david = players
        svc.record_game(store, season.id, _example(players), played_at=day(1))
        before = {n.id for n in store.read_news()}

        # Bob wins twice: Alice loses the Conquérant title
        reordered = [_survivor(bob, 5000), _survivor(alice, 0), _out(chloe, 2), _out(david, 1)]
        svc.record_game(store, season.id, reordered, played_at=day(2))
        svc.record_game(store, season.id, reordered, played_at=day(3))

        conquerors = [g for g in store.read_achievement_grants() if g.achievement_id == "conqueror"]
        assert [g.player_id for g in conquerors] == [bob.id]

        new_texts = [n.text for n in store.read_news() if n.id not in before]
        assert sum("Conquérant" in t and "perdu" in t for t in new_texts) == 1
        assert sum("s'empare du titre de Conquérant" in t for t in new_texts) == 1

    def test_feed_lists_title_gains_above_the_loss_they_caused(self, league):
        store, season, players = league
        alice, bob, chloe, _ = players
        def record(entries, n):
            svc.record_game(store, season.id, entries, played_at=day(n))

        record([_survivor(alice, 100), _survivor(bob, 50)], 1)
        record([_survivor(alice, 100)], 2)
        # Alice sits out: her attendance streak drops while Bob and Chloé start one
        record([_survivor(bob, 100), _survivor(chloe, 50)], 3)

        feed = [n.text for n in store.read_news()]
        loss = feed.index("⏱️ Alice a manqué le rythme : Bob devient le Métronome !")
        bob_gain, chloe_gain = (
            feed.index(f"⏱️ {name} est le Métronome de la saison, présent partie après partie.")
            for name in ("Bob", "Chloé")
        )
        assert chloe_gain < bob_gain < loss

    def test_news_of_one_game_get_distinct_timestamps(self, league):
        store, season, players = league
        svc.record_game(store, season.id, _example(players), played_at=day(1))
        stamps = [n.created_at for n in store.read_news()]
        assert len(stamps) > 1
        assert len(set(stamps)) == len(stamps)

    def test_played_at_offset_stored_as_utc(self, league):
        store, season, players = league
        summer = timezone(timedelta(hours=2))
        svc.record_game(
            store, season.id, _example(players),
            played_at=datetime(2026, 6, 4, 21, 0, tzinfo=summer),
        )
        (stored,) = store.read_games()
        assert stored.date == datetime(2026, 6, 4, 19, 0, tzinfo=UTC)
        assert stored.date.utcoffset() == timedelta(0)



# ---------------------------------------------------------------------------
# edit_game
# ---------------------------------------------------------------------------
class TestEditGame:
    def test_scores_adjusted_by_difference(self, league):
        store, season, players = league
        alice, bob, chloe, david = players
        game = svc.record_game(store, season.id, _example(players), played_at=day(1))

        fixed = [_survivor(david, 8000), _survivor(alice, 100), _out(chloe, 2), _out(bob, 1)]
        edited = svc.edit_game(store, game.id, fixed)

        assert edited.id == game.id
        assert edited.date == game.date
        assert _scores(store) == {"Alice": 20, "Bob": 0, "Chloé": 10, "David": 30}
        (stored,) = store.read_games()
        assert [r.name for r in stored.results] == ["David", "Alice", "Chloé", "Bob"]

    def test_edit_keeps_lifetime_counters(self, league):
        store, season, players = league
        alice, bob, chloe, david = players
        game = svc.record_game(store, season.id, _example(players), played_at=day(1))
        svc.edit_game(store, game.id, [_survivor(david, 1), _out(alice, 3), _out(bob, 2), _out(chloe, 1)])

        david_after = next(p for p in store.read_players() if p.id == david.id)
        assert david_after.first_blood_count == 1

    def test_unknown_game(self, league):
        store, _, players = league
        with pytest.raises(GameNotFound):
            svc.edit_game(store, "nope", _example(players))

    def test_closed_season_games_are_final(self, league):
        store, season, players = league
        game = svc.record_game(store, season.id, _example(players), played_at=day(1))
        svc.activate_season(store, svc.create_season(store, "Printemps").id)

        with pytest.raises(SeasonClosed):
            svc.edit_game(store, game.id, _example(players))


# ---------------------------------------------------------------------------
# activate_season
# ---------------------------------------------------------------------------
class TestActivateSeason:
    def test_rollover_persists_archive(self, league):
        store, season, players = league
        svc.record_game(store, season.id, _example(players), played_at=day(1))

        spring = svc.create_season(store, "Printemps")
        svc.activate_season(store, spring.id)

        seasons = {s.id: s for s in store.read_seasons()}
        closed = seasons[season.id]
        assert closed.is_closed and not closed.is_active
        assert [e.name for e in closed.final_leaderboard] == ["Alice", "Bob", "Chloé", "David"]
        assert [e.total_score for e in closed.final_leaderboard] == [30, 20, 10, 0]
        assert closed.winner_id == players[0].id
        assert seasons[spring.id].is_active

        assert set(_scores(store).values()) == {0}
        alice = next(p for p in store.read_players() if p.id == players[0].id)
        assert alice.season_wins == 1
        assert any(g.achievement_id == "champion" for g in store.read_achievement_grants())

    def test_archived_leaderboard_served_for_closed_season(self, league):
        store, season, players = league
        svc.record_game(store, season.id, _example(players), played_at=day(1))
        svc.activate_season(store, svc.create_season(store, "Printemps").id)

        archived = svc.get_leaderboard(store, season.id)
        assert [e.total_score for e in archived] == [30, 20, 10, 0]
        assert all(e.total_score == 0 for e in svc.get_leaderboard(store))

    def test_closed_season_cannot_be_reactivated(self, league):
        store, season, _ = league
        svc.activate_season(store, svc.create_season(store, "Printemps").id)
        with pytest.raises(SeasonClosed):
            svc.activate_season(store, season.id)


# ---------------------------------------------------------------------------
# Management & reads
# ---------------------------------------------------------------------------
class TestManagement:
    def test_update_player(self, league):
        store, _, players = league
        svc.update_player(store, players[0].id, name="Alicia", image_url="https://img/a.png")
        alicia = next(p for p in store.read_players() if p.id == players[0].id)
        assert alicia.name == "Alicia"
        assert alicia.image_url == "https://img/a.png"

    def test_delete_player_keeps_history(self, league):
        store, season, players = league
        svc.record_game(store, season.id, _example(players), played_at=day(1))
        david = players[3]

        svc.delete_player(store, david.id)

        assert david.id not in {p.id for p in store.read_players()}
        assert all(g.player_id != david.id for g in store.read_achievement_grants())
        (game,) = store.read_games()
        assert game.result_for(david.id).name == "David"

    def test_missing_player(self, store):
        with pytest.raises(PlayerNotFound):
            svc.update_player(store, "nope", name="X")
        with pytest.raises(PlayerNotFound):
            svc.get_player_profile(store, "nope")

    def test_update_and_delete_season(self, league):
        store, season, _ = league
        svc.update_season(store, season.id, prize="Deux jambons")
        assert store.read_seasons()[0].prize == "Deux jambons"

        summer = timezone(timedelta(hours=2))
        svc.update_season(store, season.id, end_date=datetime(2026, 6, 30, 23, 0, tzinfo=summer))
        assert store.read_seasons()[0].end_date == datetime(2026, 6, 30, 21, 0, tzinfo=UTC)

        svc.delete_season(store, season.id)
        assert store.read_seasons() == []
        with pytest.raises(SeasonNotFound):
            svc.delete_season(store, season.id)

    def test_deleting_season_keeps_games(self, league):
        store, season, players = league
        svc.record_game(store, season.id, _example(players), played_at=day(1))
        svc.delete_season(store, season.id)
        assert len(store.read_games()) == 1
        assert svc.get_active_season(store) is None

    def test_player_profile(self, league):
        store, season, players = league
        svc.record_game(store, season.id, _example(players), played_at=day(1))
        svc.record_game(store, season.id, _example(players[::-1]), played_at=day(2))

        player, profile = svc.get_player_profile(store, players[0].id)
        assert player.name == "Alice"
        assert profile.games_played == 2
        assert profile.wins == 1
        assert profile.last_place_count == 1
        assert profile.average_rank == 2.5

    def test_news_newest_first_with_limit(self, league):
        store, season, players = league
        svc.record_game(store, season.id, _example(players), played_at=day(1))
        news = svc.list_news(store, limit=3)
        assert len(news) == 3
        assert news == sorted(news, key=lambda n: n.created_at, reverse=True)

    def test_list_games_newest_first(self, league):
        store, season, players = league
        first = svc.record_game(store, season.id, _example(players), played_at=day(1))
        second = svc.record_game(store, season.id, _example(players), played_at=day(5))
        assert [g.id for g in svc.list_games(store)] == [second.id, first.id]
        assert [g.id for g in svc.list_games(store, "other")] == []

    def test_reset_league(self, league):
        store, season, players = league
        svc.record_game(store, season.id, _example(players), played_at=day(1))

        svc.reset_league(store)

        assert store.read_games() == []
        assert store.read_seasons() == []
        assert store.read_news() == []
        assert store.read_achievement_grants() == []
        survivors = store.read_players()
        assert [p.name for p in survivors] == ["Alice", "Bob", "Chloé", "David"]
        assert all(
            p.total_score == p.total_chips_amassed == p.first_blood_count == 0 for p in survivors
        )
