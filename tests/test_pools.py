"""
Unit tests for pool generation.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket_engine.models import SeedingMethod
from bracket_engine.pools import generate_pools, snake_distribute, pool_label, get_pool_progress
from bracket_engine.results import record_pool_match_result


def member_ids(pool):
    return {p.id for p in pool.participants}


class TestSnakeDistribution:
    """Tests for serpentine distribution."""

    def test_two_pools(self):
        """Seeds 1..8 into two pools go 1,4,5,8 and 2,3,6,7."""
        assert snake_distribute(list(range(1, 9)), 2) == [[1, 4, 5, 8], [2, 3, 6, 7]]

    def test_three_pools(self):
        """Pool 1 gets seeds 1 and 2K, pool K gets K and K+1."""
        assert snake_distribute(list(range(1, 10)), 3) == [[1, 6, 7], [2, 5, 8], [3, 4, 9]]

    def test_uneven(self):
        """Leftover seeds continue the serpentine."""
        assert snake_distribute([1, 2, 3, 4, 5], 2) == [[1, 4, 5], [2, 3]]


class TestPoolLabel:
    """Tests for pool labels."""

    def test_letters(self):
        """Pools are lettered A, B, ... then AA."""
        assert pool_label(0) == "A"
        assert pool_label(1) == "B"
        assert pool_label(25) == "Z"
        assert pool_label(26) == "AA"


class TestGeneratePools:
    """Tests for generate_pools."""

    def test_eight_into_two_pools(self, seeded_eight):
        """Snake seeding splits seeds {1,4,5,8} and {2,3,6,7}, six matches each."""
        pools = generate_pools(seeded_eight, number_of_pools=2)
        assert [pool.name for pool in pools] == ["Pool A", "Pool B"]
        assert member_ids(pools[0]) == {"p1", "p4", "p5", "p8"}
        assert member_ids(pools[1]) == {"p2", "p3", "p6", "p7"}
        assert all(len(pool.matches) == 6 for pool in pools)
        assert all(pool.total_matches == 6 for pool in pools)

    def test_pool_count_from_target_size(self, make_singles):
        """Without a pool count, ceil(n / target size) pools are made, at least two."""
        assert len(generate_pools(make_singles([1.0] * 12), target_pool_size=4)) == 3
        assert len(generate_pools(make_singles([1.0] * 5), target_pool_size=4)) == 2
        assert len(generate_pools(make_singles([1.0] * 3), target_pool_size=8)) == 2

    def test_fewer_than_three(self, make_singles):
        """Fewer than three participants make no pools."""
        assert generate_pools(make_singles([1.0, 2.0])) == []
        assert generate_pools([]) == []

    def test_matches_stay_inside_pool(self, make_singles):
        """Every pool match is between members of that pool."""
        pools = generate_pools(make_singles([float(i) for i in range(11)]), number_of_pools=3)
        for pool in pools:
            members = member_ids(pool)
            for match in pool.matches:
                assert match.participant1.id in members
                assert match.participant2.id in members
                assert match.pool_id == pool.id

    def test_initial_standings(self, seeded_eight):
        """Standings exist from the start with nothing played."""
        pool = generate_pools(seeded_eight, number_of_pools=2, advancement_count=2)[0]
        assert len(pool.standings) == 4
        assert all(row.matches_played == 0 for row in pool.standings)
        assert [row.rank for row in pool.standings] == [1, 2, 3, 4]
        assert [row.advances for row in pool.standings] == [True, True, False, False]

    def test_manual_seeding_uses_given_order(self, make_singles):
        """Manual seeding distributes in input order."""
        participants = make_singles([1.0, 2.0, 3.0, 4.0])
        pools = generate_pools(participants, number_of_pools=2, seeding_method=SeedingMethod.MANUAL)
        assert member_ids(pools[0]) == {"p1", "p4"}

    def test_pool_numbers_and_event(self, seeded_eight):
        """Pools are numbered from 1 and carry the event id."""
        pools = generate_pools(seeded_eight, number_of_pools=2, event_id="ev1")
        assert [pool.pool_number for pool in pools] == [1, 2]
        assert all(pool.event_id == "ev1" for pool in pools)


class TestPoolProgress:
    """Tests for get_pool_progress."""

    def test_progress_counts_completed(self, seeded_eight, win_for):
        """Progress reflects recorded matches."""
        pool = generate_pools(seeded_eight, number_of_pools=2)[0]
        progress = get_pool_progress(pool)
        assert progress['total_matches'] == 6
        assert progress['completed_matches'] == 0
        assert progress['percent_complete'] == 0

        pool = record_pool_match_result(pool, pool.matches[0].id, win_for(1))
        pool = record_pool_match_result(pool, pool.matches[1].id, win_for(2))
        progress = get_pool_progress(pool)
        assert progress['completed_matches'] == 2
        assert progress['remaining_matches'] == 4
        assert progress['percent_complete'] == pytest.approx(100 * 2 / 6)
        assert not progress['is_complete']
