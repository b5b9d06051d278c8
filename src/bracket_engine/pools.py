"""
Pool play generation.

Seeded participants are dealt into pools in a serpentine order so that each
pool gets a comparable spread of strength, then every pool is scheduled as a
round robin.
"""
import logging
import math
import random
from typing import List, Dict, Optional

from .models import (
    Participant, Pool, PoolMatch, MatchStatus, SeedingMethod, TiebreakerRule,
    generate_id
)
from .round_robin import generate_round_robin
from .seeding import seed_participants
from .standings import calculate_pool_standings, DEFAULT_TIEBREAKERS

logger = logging.getLogger(__name__)

MIN_POOL_PARTICIPANTS = 3


def pool_label(index: int) -> str:
    """Letter label for a 0-based pool index: A..Z, then AA, AB, ..."""
    label = ''
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        label = chr(ord('A') + remainder) + label
    return label


def snake_distribute(items: List, pool_count: int) -> List[List]:
    """
    Deal items into pool_count buckets forward then backward.

    For 2 pools and items 1..8: [[1, 4, 5, 8], [2, 3, 6, 7]].
    """
    buckets: List[List] = [[] for _ in range(pool_count)]
    if pool_count <= 0:
        return buckets
    for i, item in enumerate(items):
        lap, offset = divmod(i, pool_count)
        index = offset if lap % 2 == 0 else pool_count - 1 - offset
        buckets[index].append(item)
    return buckets


def build_pool_matches(pool_id: str, participants: List[Participant]) -> List[PoolMatch]:
    schedule = generate_round_robin(participants)
    return [
        PoolMatch(
            id=match.id,
            pool_id=pool_id,
            round=match.round,
            match_number=number,
            participant1=match.side1,
            participant2=match.side2,
            court=match.court,
        )
        for number, match in enumerate(schedule.matches, start=1)
    ]


def generate_pools(participants: List[Participant],
                   number_of_pools: Optional[int] = None,
                   target_pool_size: int = 4,
                   advancement_count: int = 2,
                   seeding_method: SeedingMethod = SeedingMethod.SNAKE,
                   tiebreakers: Optional[List[TiebreakerRule]] = None,
                   event_id: str = '',
                   rng: Optional[random.Random] = None) -> List[Pool]:
    """
    Split participants into round-robin pools.

    Args:
        participants: Entrants in any order; seeding_method orders them.
        number_of_pools: Explicit pool count. Defaults to
            max(2, ceil(n / target_pool_size)).
        target_pool_size: Desired pool size when no count is given.
        advancement_count: Finishers per pool marked as advancing.
        seeding_method: How to order participants before distribution.
        tiebreakers: Standings tiebreaker chain.

    Returns:
        List of pools named "Pool A", "Pool B", ... Empty for fewer than
        three participants.
    """
    if len(participants) < MIN_POOL_PARTICIPANTS:
        logger.debug(f"Not enough participants for pools: {len(participants)}")
        return []

    if tiebreakers is None:
        tiebreakers = list(DEFAULT_TIEBREAKERS)

    if number_of_pools:
        pool_count = number_of_pools
    else:
        pool_count = max(2, math.ceil(len(participants) / max(1, target_pool_size)))

    seeded = seed_participants(participants, seeding_method, rng)
    distribution = snake_distribute(seeded, pool_count)

    pools = []
    for index, members in enumerate(distribution):
        pool_id = generate_id()
        matches = build_pool_matches(pool_id, members)
        pools.append(Pool(
            id=pool_id,
            name=f"Pool {pool_label(index)}",
            pool_number=index + 1,
            participants=members,
            matches=matches,
            standings=calculate_pool_standings(matches, members, advancement_count, tiebreakers),
            advancement_count=advancement_count,
            tiebreakers=list(tiebreakers),
            event_id=event_id,
            total_matches=len(matches),
        ))

    logger.debug(f"Generated {pool_count} pools for {len(participants)} participants")
    return pools


def get_pool_progress(pool: Pool) -> Dict:
    """Completion summary for a pool."""
    total = len(pool.matches)
    completed = sum(1 for match in pool.matches if match.status == MatchStatus.COMPLETED)
    return {
        'total_matches': total,
        'completed_matches': completed,
        'remaining_matches': total - completed,
        'percent_complete': completed / total * 100 if total else 0.0,
        'is_complete': total > 0 and completed == total,
    }
