"""
Score helpers for rally-scored games played to a target with a win-by margin.
"""
import math
from typing import List, Optional

from .models import GameScore, MatchScore


def create_empty_score() -> MatchScore:
    return MatchScore()


def is_game_complete(score: GameScore, points_to_win: int = 11, win_by: int = 2,
                     max_points: Optional[int] = None) -> bool:
    """
    A game ends when a side reaches points_to_win with a win_by lead, or
    when either side reaches the max_points cap.
    """
    if max_points and (score.team1_score >= max_points or score.team2_score >= max_points):
        return True
    if score.team1_score >= points_to_win and score.team1_score - score.team2_score >= win_by:
        return True
    if score.team2_score >= points_to_win and score.team2_score - score.team1_score >= win_by:
        return True
    return False


def game_winner(score: GameScore, points_to_win: int = 11, win_by: int = 2,
                max_points: Optional[int] = None) -> Optional[int]:
    """1 or 2 for a finished game, None while it is still in play."""
    if not is_game_complete(score, points_to_win, win_by, max_points):
        return None
    if score.team1_score > score.team2_score:
        return 1
    if score.team2_score > score.team1_score:
        return 2
    return None


def calculate_match_score(games: List[GameScore], best_of: int = 3, points_to_win: int = 11,
                          win_by: int = 2, max_points: Optional[int] = None) -> MatchScore:
    """
    Tally games into a MatchScore.

    The first side to win ceil(best_of / 2) games wins the match; unfinished
    games count toward points but not games.
    """
    team1_games = team2_games = 0
    team1_points = team2_points = 0
    for game in games:
        team1_points += game.team1_score
        team2_points += game.team2_score
        winner = game_winner(game, points_to_win, win_by, max_points)
        if winner == 1:
            team1_games += 1
        elif winner == 2:
            team2_games += 1

    games_needed = math.ceil(best_of / 2)
    winner = None
    if team1_games >= games_needed:
        winner = 1
    elif team2_games >= games_needed:
        winner = 2

    return MatchScore(
        games=list(games),
        team1_games_won=team1_games,
        team2_games_won=team2_games,
        team1_total_points=team1_points,
        team2_total_points=team2_points,
        winner=winner,
    )


def determine_winner(sets: List[List[int]]) -> Optional[int]:
    """
    Winner of a match given as plain [team1, team2] set scores.

    Whoever took more sets wins; a level count is undecided.
    """
    team1_sets = sum(1 for a, b in sets if a > b)
    team2_sets = sum(1 for a, b in sets if b > a)
    if team1_sets > team2_sets:
        return 1
    if team2_sets > team1_sets:
        return 2
    return None


def score_from_sets(sets: List[List[int]]) -> MatchScore:
    """Build a MatchScore from plain [team1, team2] set scores."""
    games = [GameScore(game_number=i, team1_score=a, team2_score=b)
             for i, (a, b) in enumerate(sets, start=1)]
    return MatchScore(
        games=games,
        team1_games_won=sum(1 for a, b in sets if a > b),
        team2_games_won=sum(1 for a, b in sets if b > a),
        team1_total_points=sum(a for a, _ in sets),
        team2_total_points=sum(b for _, b in sets),
        winner=determine_winner(sets),
    )
