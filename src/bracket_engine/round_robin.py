"""
Round robin scheduling using the circle (rotation) method.

The first entrant stays fixed while everyone else rotates one step per round.
Odd counts get a bye placeholder, so the entrant paired with it sits out that
round and no match is emitted.
"""
import logging
from typing import List, Dict, Optional

from .models import (
    Participant, Player, Team, RoundRobinMatch, RoundRobinSchedule,
    RoundRobinStanding, generate_id
)

logger = logging.getLogger(__name__)


def entrant_id(entrant) -> str:
    return entrant.id


def entrant_name(entrant) -> str:
    if isinstance(entrant, Participant):
        return entrant.display_name
    if isinstance(entrant, Team):
        return entrant.display_name
    if isinstance(entrant, Player):
        return entrant.name
    return str(entrant)


def rotated_index(position: int, rotation: int, count: int) -> int:
    """Index of the entrant sitting at `position` after `rotation` steps."""
    if position == 0:
        return 0
    return ((position + rotation - 1) % (count - 1)) + 1


def generate_round_robin(entrants: List, max_rounds: Optional[int] = None) -> RoundRobinSchedule:
    """
    Generate a round robin schedule where every pair meets once per cycle.

    Args:
        entrants: Players, teams or participants. Anything with an `id`.
        max_rounds: Number of rounds to produce. Defaults to one full cycle;
            more than a full cycle repeats matchups from the start.

    Returns:
        RoundRobinSchedule with rounds numbered from 1 and courts numbered
        from 1 within each round.
    """
    n = len(entrants)
    if n < 2:
        return RoundRobinSchedule(matches=[], rounds=0, total_possible_rounds=0)

    slots = list(entrants)
    if n % 2 == 1:
        slots.append(None)  # bye

    count = len(slots)
    total_possible_rounds = count - 1
    rounds_to_generate = total_possible_rounds if max_rounds is None else max(0, max_rounds)
    matches_per_round = count // 2

    matches = []
    for round_index in range(rounds_to_generate):
        rotation = round_index % total_possible_rounds
        court = 1
        for match in range(matches_per_round):
            home = slots[rotated_index(match, rotation, count)]
            away = slots[rotated_index(count - 1 - match, rotation, count)]
            if home is None or away is None:
                continue
            matches.append(RoundRobinMatch(
                id=generate_id(),
                round=round_index + 1,
                court=court,
                side1=home,
                side2=away,
            ))
            court += 1

    logger.debug(f"Round robin for {n} entrants: {len(matches)} matches over {rounds_to_generate} rounds")
    return RoundRobinSchedule(matches=matches, rounds=rounds_to_generate,
                              total_possible_rounds=total_possible_rounds)


def generate_rotating_partners_round_robin(players: List[Player],
                                           max_rounds: Optional[int] = None) -> RoundRobinSchedule:
    """
    Doubles round robin where individual players rotate partners every round.

    Players are padded with byes to a multiple of four. Each round pairs
    positions (k, k + n/2) against (k + 1, k + 1 + n/2); any match touching a
    bye is dropped. With exactly five players every candidate match touches a
    bye, so the schedule comes back empty.
    """
    n = len(players)
    if n < 4:
        return RoundRobinSchedule(matches=[], rounds=0, total_possible_rounds=0)

    slots = list(players)
    while len(slots) % 4 != 0:
        slots.append(None)

    count = len(slots)
    half = count // 2
    matches_per_round = count // 4
    total_possible_rounds = count - 1
    rounds_to_generate = total_possible_rounds if max_rounds is None else max(0, max_rounds)

    partnerships: Dict[tuple, int] = {}
    matches = []
    for round_index in range(rounds_to_generate):
        rotation = round_index % total_possible_rounds
        round_players = [slots[rotated_index(i, rotation, count)] for i in range(count)]

        court = 1
        for m in range(matches_per_round):
            base = m * 2
            p1 = round_players[base % half]
            p2 = round_players[(base % half) + half]
            p3 = round_players[(base + 1) % half]
            p4 = round_players[((base + 1) % half) + half]
            if None in (p1, p2, p3, p4):
                continue

            for a, b in ((p1, p2), (p3, p4)):
                key = tuple(sorted((a.id, b.id)))
                partnerships[key] = partnerships.get(key, 0) + 1

            matches.append(RoundRobinMatch(
                id=generate_id(),
                round=round_index + 1,
                court=court,
                side1=Team(id=generate_id(), player1=p1, player2=p2),
                side2=Team(id=generate_id(), player1=p3, player2=p4),
            ))
            court += 1

    rounds = max((match.round for match in matches), default=0)
    logger.debug(f"Rotating partners for {n} players: {len(matches)} matches, "
                 f"{len(partnerships)} distinct partnerships")
    return RoundRobinSchedule(matches=matches, rounds=rounds,
                              total_possible_rounds=total_possible_rounds)


def calculate_round_robin_standings(matches: List[RoundRobinMatch],
                                    entrants: List) -> List[RoundRobinStanding]:
    """Win/loss table for a round robin, sorted by wins then point differential."""
    standings: Dict[str, RoundRobinStanding] = {}
    for entrant in entrants:
        standings[entrant_id(entrant)] = RoundRobinStanding(
            entrant_id=entrant_id(entrant),
            name=entrant_name(entrant),
        )

    for match in matches:
        if not match.completed:
            continue
        first = standings.get(entrant_id(match.side1))
        second = standings.get(entrant_id(match.side2))
        if first is None or second is None:
            continue

        first.played += 1
        second.played += 1
        first.points_for += match.team1_score
        first.points_against += match.team2_score
        second.points_for += match.team2_score
        second.points_against += match.team1_score

        if match.team1_score > match.team2_score:
            first.won += 1
            second.lost += 1
        elif match.team2_score > match.team1_score:
            second.won += 1
            first.lost += 1

    for standing in standings.values():
        standing.point_diff = standing.points_for - standing.points_against

    return sorted(standings.values(), key=lambda s: (-s.won, -s.point_diff))


def get_matches_by_round(matches: List[RoundRobinMatch]) -> Dict[int, List[RoundRobinMatch]]:
    by_round: Dict[int, List[RoundRobinMatch]] = {}
    for match in matches:
        by_round.setdefault(match.round, []).append(match)
    return by_round


def is_round_robin_complete(matches: List[RoundRobinMatch]) -> bool:
    return len(matches) > 0 and all(match.completed for match in matches)


def get_completed_match_count(matches: List[RoundRobinMatch]) -> int:
    return sum(1 for match in matches if match.completed)
