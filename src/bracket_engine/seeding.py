"""
Participant seeding.

Every method returns a new list; the caller's list is never reordered.
"""
import math
import random
from typing import List, Optional

from .models import Participant, SeedingMethod


def shuffle_participants(items: List, rng: Optional[random.Random] = None) -> List:
    """Return a Fisher-Yates shuffled copy of items."""
    rng = rng or random
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def sort_by_rating(participants: List[Participant]) -> List[Participant]:
    """Highest rating first. Equal ratings keep their input order."""
    return sorted(participants, key=lambda p: p.rating, reverse=True)


def seed_participants(participants: List[Participant], method: SeedingMethod,
                      rng: Optional[random.Random] = None) -> List[Participant]:
    """
    Order participants according to a seeding method.

    - rating / snake: descending rating (snake distribution into pools is
      done by the pool builder, not here)
    - random: uniform shuffle drawn from rng
    - manual: the order given
    - hybrid: top quarter by rating kept in order, the rest shuffled
    """
    method = SeedingMethod(method)

    if method == SeedingMethod.MANUAL:
        return list(participants)

    if method == SeedingMethod.RANDOM:
        return shuffle_participants(participants, rng)

    if method == SeedingMethod.HYBRID:
        ranked = sort_by_rating(participants)
        top_count = math.ceil(len(ranked) / 4)
        return ranked[:top_count] + shuffle_participants(ranked[top_count:], rng)

    return sort_by_rating(participants)
