"""
Shared pytest fixtures for bracket engine tests.

Running tests:
    pytest tests/
"""
import pytest
import random
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket_engine.models import Participant, Player, Team, GameScore, MatchScore


def _singles(ratings, prefix='p'):
    participants = []
    for i, rating in enumerate(ratings, start=1):
        player = Player(id=f"{prefix}{i}", first_name="Player", last_name=str(i), rating=rating)
        participants.append(Participant.singles(player))
    return participants


@pytest.fixture
def make_singles():
    """Factory: singles participants p1..pn with the given ratings, in order."""
    return _singles


@pytest.fixture
def seeded_eight():
    """Eight singles participants whose rating order matches their id: p1 strongest."""
    return _singles([8.0, 7.0, 6.0, 5.0, 4.0, 3.0, 2.0, 1.0])


@pytest.fixture
def make_doubles():
    """Factory: doubles participants t1..tn, each built from two player ratings."""
    def factory(rating_pairs):
        participants = []
        for i, (r1, r2) in enumerate(rating_pairs, start=1):
            team = Team(
                id=f"t{i}",
                player1=Player(id=f"t{i}a", first_name="A", last_name=str(i), rating=r1),
                player2=Player(id=f"t{i}b", first_name="B", last_name=str(i), rating=r2),
            )
            participants.append(Participant.doubles(team))
        return participants
    return factory


@pytest.fixture
def win_for():
    """Factory: a 2-0 MatchScore (11-5, 11-5) for the given side."""
    def factory(side, points=(11, 5)):
        high, low = points
        if side == 1:
            games = [GameScore(1, high, low), GameScore(2, high, low)]
        else:
            games = [GameScore(1, low, high), GameScore(2, low, high)]
        return MatchScore(
            games=games,
            team1_games_won=2 if side == 1 else 0,
            team2_games_won=2 if side == 2 else 0,
            team1_total_points=sum(g.team1_score for g in games),
            team2_total_points=sum(g.team2_score for g in games),
            winner=side,
        )
    return factory


@pytest.fixture
def rng():
    """Deterministic random source for seeding tests."""
    return random.Random(42)
