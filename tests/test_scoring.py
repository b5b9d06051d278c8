"""
Unit tests for game and match scoring.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket_engine.models import GameScore
from bracket_engine.scoring import (
    create_empty_score,
    is_game_complete,
    game_winner,
    calculate_match_score,
    determine_winner,
    score_from_sets,
)


class TestGameCompletion:
    """Tests for is_game_complete and game_winner."""

    def test_reaching_target_with_margin(self):
        """11-9 ends the game."""
        assert is_game_complete(GameScore(1, 11, 9))
        assert game_winner(GameScore(1, 9, 11)) == 2

    def test_win_by_two(self):
        """11-10 is not over; 12-10 is."""
        assert not is_game_complete(GameScore(1, 11, 10))
        assert game_winner(GameScore(1, 11, 10)) is None
        assert is_game_complete(GameScore(1, 12, 10))

    def test_max_points_cap(self):
        """Reaching the cap ends the game without a margin."""
        assert not is_game_complete(GameScore(1, 15, 14))
        assert is_game_complete(GameScore(1, 15, 14), max_points=15)
        assert game_winner(GameScore(1, 14, 15), max_points=15) == 2

    def test_custom_target(self):
        """Games to 21 need 21 points."""
        assert not is_game_complete(GameScore(1, 15, 3), points_to_win=21)
        assert is_game_complete(GameScore(1, 21, 3), points_to_win=21)


class TestMatchScore:
    """Tests for calculate_match_score."""

    def test_best_of_three(self):
        """Two games out of three win the match."""
        games = [GameScore(1, 11, 5), GameScore(2, 9, 11), GameScore(3, 11, 7)]
        score = calculate_match_score(games, best_of=3)
        assert score.team1_games_won == 2
        assert score.team2_games_won == 1
        assert score.team1_total_points == 31
        assert score.team2_total_points == 23
        assert score.winner == 1

    def test_unfinished_game_counts_points_only(self):
        """A game in progress adds points but no game win."""
        score = calculate_match_score([GameScore(1, 11, 5), GameScore(2, 5, 3)], best_of=3)
        assert score.team1_games_won == 1
        assert score.team1_total_points == 16
        assert score.winner is None

    def test_best_of_one(self):
        """A single game decides a best-of-one."""
        assert calculate_match_score([GameScore(1, 4, 11)], best_of=1).winner == 2

    def test_empty_score(self):
        """An empty score has no games and no winner."""
        score = create_empty_score()
        assert score.games == []
        assert score.winner is None


class TestSetScores:
    """Tests for plain [a, b] set lists."""

    def test_determine_winner(self):
        assert determine_winner([[11, 5], [11, 7]]) == 1
        assert determine_winner([[11, 5], [5, 11], [7, 11]]) == 2
        assert determine_winner([[11, 5], [5, 11]]) is None
        assert determine_winner([]) is None

    def test_score_from_sets(self):
        """Set lists become numbered games with totals."""
        score = score_from_sets([[11, 7], [9, 11], [11, 4]])
        assert [g.game_number for g in score.games] == [1, 2, 3]
        assert (score.team1_games_won, score.team2_games_won) == (2, 1)
        assert (score.team1_total_points, score.team2_total_points) == (31, 22)
        assert score.winner == 1
