"""Tests for leaderboard aggregation."""

from collections import Counter
from datetime import datetime

import pytest

from conftest import make_game, make_score, make_user
from scoreboard.services.leaderboard import LeaderboardAggregator, TieBreak, UNTITLED_GAME


def by_player(entries):
    return {entry.player_id: entry for entry in entries}


@pytest.fixture
def aggregator():
    return LeaderboardAggregator(limit=100)


class TestWinCredit:
    def test_highest_score_game(self, aggregator):
        game = make_game(game_id="g1")
        scores = [make_score("g1", "alice", 10), make_score("g1", "bob", 20)]

        entries = by_player(aggregator.calculate([game], scores, []))

        bob, alice = entries["bob"], entries["alice"]
        assert bob.total_wins == 1
        assert bob.highest_score_wins == 1
        assert bob.lowest_score_wins == 0
        assert bob.total_games == 1 and alice.total_games == 1
        assert bob.win_rate == 1.0
        assert alice.win_rate == 0.0
        assert alice.losses == 1

    def test_lowest_score_game(self, aggregator):
        game = make_game(game_id="golf", win_condition="lowestScore")
        scores = [make_score("golf", "alice", 72), make_score("golf", "bob", 68)]

        entries = by_player(aggregator.calculate([game], scores, []))

        assert entries["bob"].total_wins == 1
        assert entries["bob"].lowest_score_wins == 1
        assert entries["bob"].highest_score_wins == 0
        assert entries["alice"].total_wins == 0

    def test_active_game_counts_games_but_not_wins(self, aggregator):
        game = make_game(game_id="g1", game_status="active")
        scores = [make_score("g1", "alice", 5), make_score("g1", "bob", 9)]

        entries = aggregator.calculate([game], scores, [])

        assert all(entry.total_wins == 0 for entry in entries)
        assert all(entry.total_games == 1 for entry in entries)

    def test_cancelled_game_gives_no_wins(self, aggregator):
        game = make_game(game_id="g1", game_status="cancelled")
        scores = [make_score("g1", "alice", 5)]

        entries = aggregator.calculate([game], scores, [])

        assert entries[0].total_wins == 0
        assert entries[0].total_games == 1

    def test_completed_game_without_win_condition_is_excluded(self, aggregator):
        game = make_game(game_id="g1", win_condition=None)
        scores = [make_score("g1", "alice", 5), make_score("g1", "bob", 9)]

        entries = aggregator.calculate([game], scores, [])

        assert sum(entry.total_wins for entry in entries) == 0
        assert all(entry.total_games == 1 for entry in entries)

    def test_unknown_win_condition_is_excluded(self, aggregator):
        game = make_game(game_id="g1", win_condition="closestToPin")
        scores = [make_score("g1", "alice", 5)]

        assert aggregator.calculate([game], scores, [])[0].total_wins == 0

    def test_completed_game_without_scores_is_skipped(self, aggregator):
        game = make_game(game_id="empty")
        assert aggregator.calculate([game], [], []) == []

    def test_winner_is_best_single_score_row(self, aggregator):
        game = make_game(game_id="g1")
        scores = [
            make_score("g1", "alice", 8, round_number=1),
            make_score("g1", "alice", 8, round_number=2),
            make_score("g1", "bob", 12, round_number=1),
            make_score("g1", "bob", 1, round_number=2),
        ]

        entries = by_player(aggregator.calculate([game], scores, []))

        assert entries["bob"].total_wins == 1
        assert entries["alice"].total_wins == 0
        # Multiple rounds in one game still count as one game played
        assert entries["alice"].total_games == 1

    def test_exactly_one_winner_per_eligible_game(self, aggregator):
        games = [make_game(game_id=f"g{i}") for i in range(5)]
        scores = []
        for i in range(5):
            scores += [
                make_score(f"g{i}", "alice", i),
                make_score(f"g{i}", "bob", 4 - i),
                make_score(f"g{i}", "carol", 2),
            ]

        entries = aggregator.calculate(games, scores, [])

        wins_by_game = Counter(detail.game_id for entry in entries for detail in entry.games_won)
        assert wins_by_game == {f"g{i}": 1 for i in range(5)}


class TestWinDetails:
    def test_detail_fields(self, aggregator):
        created = datetime(2024, 3, 1, 18, 30)
        game = make_game(
            game_id="g1",
            player_ids=("alice", "bob", "anon:Sam"),
            game_name="Board Night",
            created_at=created,
        )
        scores = [make_score("g1", "alice", 30), make_score("g1", "bob", 21)]

        alice = by_player(aggregator.calculate([game], scores, []))["alice"]

        (detail,) = alice.games_won
        assert detail.game_id == "g1"
        assert detail.game_name == "Board Night"
        assert detail.win_condition == "highestScore"
        assert detail.final_score == 30
        assert detail.date == created
        assert detail.total_players == 3

    def test_untitled_game_fallback(self, aggregator):
        game = make_game(game_id="g1", game_name=None)
        scores = [make_score("g1", "alice", 1)]

        alice = aggregator.calculate([game], scores, [])[0]

        assert alice.games_won[0].game_name == UNTITLED_GAME == "Untitled Game"


class TestGamesPlayed:
    def test_counts_distinct_games_regardless_of_status(self, aggregator):
        games = [
            make_game(game_id="done"),
            make_game(game_id="live", game_status="active"),
            make_game(game_id="off", game_status="cancelled"),
        ]
        scores = [
            make_score("done", "alice", 3),
            make_score("live", "alice", 3),
            make_score("live", "alice", 4, round_number=2),
            make_score("off", "alice", 1),
        ]

        alice = aggregator.calculate(games, scores, [])[0]

        assert alice.total_games == 3
        assert alice.total_wins == 1
        assert alice.win_rate == pytest.approx(1 / 3)

    def test_scores_for_unlisted_games_still_count(self, aggregator):
        scores = [make_score("deleted-game", "alice", 3)]

        alice = aggregator.calculate([], scores, [])[0]

        assert alice.total_games == 1
        assert alice.total_wins == 0

    def test_win_rate_stays_in_unit_interval(self, aggregator):
        games = [make_game(game_id=f"g{i}", game_status=status)
                 for i, status in enumerate(["completed", "completed", "active"])]
        scores = [make_score(g.id, p, s) for g in games for p, s in (("alice", 5), ("bob", 3))]

        for entry in aggregator.calculate(games, scores, []):
            assert 0.0 <= entry.win_rate <= 1.0
            assert entry.win_rate == entry.total_wins / entry.total_games


class TestNicknames:
    def test_registered_user_name(self, aggregator):
        scores = [make_score("g1", "user-1", 4)]
        users = [make_user("user-1", "Ari")]

        assert aggregator.calculate([], scores, users)[0].nickname == "Ari"

    def test_empty_username_falls_back(self, aggregator):
        scores = [make_score("g1", "user-1", 4)]
        users = [make_user("user-1", "")]

        assert aggregator.calculate([], scores, users)[0].nickname == "Unknown Player"

    def test_long_unknown_id_is_truncated(self, aggregator):
        scores = [make_score("g1", "abcdefghijkl", 4)]

        assert aggregator.calculate([], scores, [])[0].nickname == "abcdefgh"

    def test_short_unknown_id_is_kept(self, aggregator):
        scores = [make_score("g1", "Team 1", 4), make_score("g1", "ten_chars!", 5)]

        nicknames = {entry.nickname for entry in aggregator.calculate([], scores, [])}

        assert nicknames == {"Team 1", "ten_chars!"}

    def test_lookup_is_exact_id_match(self, aggregator):
        scores = [make_score("g1", "user-1:Guest Sam", 4)]
        users = [make_user("user-1", "Ari")]

        assert aggregator.calculate([], scores, users)[0].nickname == "user-1:G"


class TestRanking:
    def test_empty_input(self, aggregator):
        assert aggregator.calculate([], [], []) == []

    def test_sorted_by_wins_then_win_rate(self, aggregator):
        games = [make_game(game_id=f"g{i}") for i in range(4)]
        scores = [
            # alice: 2 wins in 2 games
            make_score("g0", "alice", 10), make_score("g0", "bob", 1),
            make_score("g1", "alice", 10), make_score("g1", "carol", 1),
            # bob: 2 wins in 3 games
            make_score("g2", "bob", 10), make_score("g2", "carol", 1),
            make_score("g3", "bob", 10), make_score("g3", "dave", 1),
        ]

        ranked = [entry.player_id for entry in aggregator.calculate(games, scores, [])]

        assert ranked == ["alice", "bob", "carol", "dave"]

    def test_equal_keys_keep_first_score_order(self, aggregator):
        scores = [
            make_score("x", "zed", 1),
            make_score("y", "amy", 1),
            make_score("z", "mo", 1),
        ]

        ranked = [entry.player_id for entry in aggregator.calculate([], scores, [])]

        assert ranked == ["zed", "amy", "mo"]

    def test_truncated_to_limit(self):
        scores = [make_score(f"g{i}", f"player-{i:03d}", i) for i in range(150)]

        entries = LeaderboardAggregator(limit=100).calculate([], scores, [])

        assert len(entries) == 100

    def test_default_limit_is_one_hundred(self):
        assert LeaderboardAggregator().limit == 100

    def test_rejects_non_positive_limit(self):
        with pytest.raises(ValueError):
            LeaderboardAggregator(limit=0)


class TestTieBreak:
    def test_tie_credits_exactly_one_player(self, aggregator):
        game = make_game(game_id="g1")
        scores = [make_score("g1", "alice", 20), make_score("g1", "bob", 20), make_score("g1", "carol", 3)]

        entries = aggregator.calculate([game], scores, [])

        assert sum(entry.total_wins for entry in entries) == 1
        winner = next(entry for entry in entries if entry.total_wins)
        assert winner.player_id in {"alice", "bob"}

    def test_first_recorded_takes_input_order(self):
        aggregator = LeaderboardAggregator(tie_break=TieBreak.FIRST_RECORDED)
        scores = [make_score("g1", "bob", 7), make_score("g1", "alice", 7)]

        assert aggregator.pick_winner(scores, "lowestScore").player_id == "bob"

    def test_earliest_submitted_uses_timestamps(self):
        aggregator = LeaderboardAggregator(tie_break=TieBreak.EARLIEST_SUBMITTED)
        scores = [
            make_score("g1", "bob", 7, created_at=datetime(2024, 1, 1, 12, 5)),
            make_score("g1", "alice", 7, created_at=datetime(2024, 1, 1, 12, 0)),
            make_score("g1", "carol", 7),
        ]

        assert aggregator.pick_winner(scores, "highestScore").player_id == "alice"

    def test_earliest_submitted_falls_back_to_input_order(self):
        aggregator = LeaderboardAggregator(tie_break="earliest_submitted")
        scores = [make_score("g1", "bob", 7), make_score("g1", "alice", 7)]

        assert aggregator.pick_winner(scores, "highestScore").player_id == "bob"

    def test_pick_winner_validates_input(self, aggregator):
        with pytest.raises(ValueError):
            aggregator.pick_winner([], "highestScore")
        with pytest.raises(ValueError):
            aggregator.pick_winner([make_score("g1", "bob", 1)], "mostGoals")
