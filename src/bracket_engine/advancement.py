"""
Advancing pool finishers into a playoff bracket.

Finishers are ordered into a seed list so that same-rank finishers from
different pools stay apart, then handed to the bracket builders with manual
seeding.
"""
import logging
from dataclasses import dataclass
from typing import List, Dict, Union

from .models import (
    Bracket, CrossPoolSeeding, DoubleEliminationBracket, Participant, Pool,
    SeedingMethod, SlotSource, TournamentFormat
)
from .elimination import generate_single_elimination_bracket
from .double_elimination import generate_double_elimination_bracket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Advancer:
    participant: Participant
    pool_number: int
    pool_id: str
    rank: int


def collect_advancing(pools: List[Pool], advancement_count: int) -> List[Advancer]:
    """Top advancement_count finishers of every pool, tagged with pool and rank."""
    advancers = []
    for pool in pools:
        for standing in pool.standings:
            if standing.rank <= advancement_count:
                advancers.append(Advancer(
                    participant=standing.participant,
                    pool_number=pool.pool_number,
                    pool_id=pool.id,
                    rank=standing.rank,
                ))
    return advancers


def _rank_groups(advancers: List[Advancer]) -> List[List[Advancer]]:
    by_rank: Dict[int, List[Advancer]] = {}
    for advancer in advancers:
        by_rank.setdefault(advancer.rank, []).append(advancer)
    return [sorted(by_rank[rank], key=lambda a: a.pool_number) for rank in sorted(by_rank)]


def _serpentine(groups: List[List[Advancer]]) -> List[Advancer]:
    ordered = []
    for index, group in enumerate(groups):
        ordered.extend(reversed(group) if index % 2 == 1 else group)
    return ordered


def order_cross_pool(advancers: List[Advancer], method: CrossPoolSeeding) -> List[Advancer]:
    """
    Turn pool finishers into a bracket seed order.

    - standard: by rank, pools alternating direction on every other rank.
      With exactly two pools the ranks are interleaved A1, B1, A2, B2, ...
      which under standard placement pairs A[i] with B[last - i] and puts
      both pool winners in opposite halves.
    - reverse: by rank, then by pool number descending.
    - snake: by rank, always alternating pool direction.
    """
    method = CrossPoolSeeding(method)
    groups = _rank_groups(advancers)

    if method == CrossPoolSeeding.REVERSE:
        return sorted(advancers, key=lambda a: (a.rank, -a.pool_number))

    if method == CrossPoolSeeding.STANDARD:
        pool_numbers = {advancer.pool_number for advancer in advancers}
        if len(pool_numbers) == 2:
            return [advancer for group in groups for advancer in group]

    return _serpentine(groups)


def _stamp_pool_sources(bracket: Bracket, advancers: List[Advancer]) -> None:
    by_id = {advancer.participant.id: advancer for advancer in advancers}
    if not bracket.rounds:
        return
    for match in bracket.rounds[0].matches:
        for slot in (1, 2):
            participant = match.participant(slot)
            if participant is None or participant.id not in by_id:
                continue
            advancer = by_id[participant.id]
            source = SlotSource(type='pool', source_id=advancer.pool_id, position='rank',
                                rank=advancer.rank)
            if slot == 1:
                match.participant1_source = source
            else:
                match.participant2_source = source


def advance_to_playoffs(pools: List[Pool], advancement_count: int,
                        bracket_format: TournamentFormat = TournamentFormat.SINGLE_ELIMINATION,
                        cross_pool_seeding: CrossPoolSeeding = CrossPoolSeeding.STANDARD,
                        event_id: str = '', best_of: int = 1,
                        finals_best_of=None) -> Union[Bracket, DoubleEliminationBracket]:
    """
    Build the playoff bracket from pool standings.

    Returns a single elimination Bracket, or a DoubleEliminationBracket when
    bracket_format is double elimination. First-round slots record which
    pool and rank each participant came from.
    """
    advancers = order_cross_pool(collect_advancing(pools, advancement_count), cross_pool_seeding)
    seeded = [advancer.participant for advancer in advancers]
    logger.debug(f"Advancing {len(seeded)} participants from {len(pools)} pools "
                 f"({CrossPoolSeeding(cross_pool_seeding).value} seeding)")

    if TournamentFormat(bracket_format) == TournamentFormat.DOUBLE_ELIMINATION:
        bracket = generate_double_elimination_bracket(
            seeded, event_id=event_id, best_of=best_of, finals_best_of=finals_best_of,
            seeding_method=SeedingMethod.MANUAL,
        )
        _stamp_pool_sources(bracket.winners, advancers)
        return bracket

    bracket = generate_single_elimination_bracket(
        seeded, event_id=event_id, best_of=best_of, finals_best_of=finals_best_of,
        seeding_method=SeedingMethod.MANUAL, name="Playoff Bracket",
    )
    _stamp_pool_sources(bracket, advancers)
    return bracket
