"""
Single elimination bracket generation.
"""
import logging
import math
import random
from typing import List, Optional, Tuple, Callable

from .models import (
    Bracket, BracketMatch, BracketRound, BracketType, Participant, SeedingMethod,
    SlotDestination, SlotSource, generate_id
)
from .results import build_arena, refresh_bracket, resolve_byes
from .seeding import seed_participants

logger = logging.getLogger(__name__)

# (participant, seed, source) for one first-round slot
Slot = Tuple[Optional[Participant], Optional[int], Optional[SlotSource]]


def calculate_bracket_rounds(participant_count: int) -> int:
    """Number of rounds needed: ceil(log2(n)), 0 for fewer than two entrants."""
    if participant_count <= 1:
        return 0
    return math.ceil(math.log2(participant_count))


def calculate_bracket_size(participant_count: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if participant_count <= 0:
        return 0
    return 2 ** calculate_bracket_rounds(participant_count)


def calculate_byes(participant_count: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(participant_count) - participant_count


def get_round_name(round_number: int, total_rounds: int) -> str:
    """Name a round by its distance from the final."""
    rounds_from_final = total_rounds - round_number + 1
    if rounds_from_final == 1:
        return "Finals"
    elif rounds_from_final == 2:
        return "Semifinals"
    elif rounds_from_final == 3:
        return "Quarterfinals"
    elif 4 <= rounds_from_final <= 8:
        return f"Round of {2 ** rounds_from_final}"
    else:
        return f"Round {round_number}"


def generate_match_identifier(bracket_type: BracketType, round_number: int,
                              position: int, total_rounds: int) -> str:
    """
    Short label for a match, e.g. "F", "SF1", "QF3", "W1-5".

    Losers and consolation brackets use an "L" / "C" prefix ("LF", "LSF1",
    "C1-2").
    """
    prefix = {BracketType.LOSERS: 'L', BracketType.CONSOLATION: 'C'}.get(bracket_type, '')
    rounds_from_final = total_rounds - round_number + 1

    if rounds_from_final == 1:
        return f"{prefix}F"
    if rounds_from_final == 2:
        return f"{prefix}SF{position + 1}"
    if rounds_from_final == 3:
        return f"{prefix}QF{position + 1}"
    return f"{prefix or 'W'}{round_number}-{position + 1}"


def generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.
    This ensures that if all higher seeds win, they meet in the proper rounds.

    For 8 entrants: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)
    """
    if bracket_size <= 1:
        return [1] if bracket_size == 1 else []
    if bracket_size == 2:
        return [1, 2]

    half_size = bracket_size // 2
    upper_half = generate_bracket_order(half_size)

    # Lower half is the complement of the upper half
    lower_half = [bracket_size + 1 - seed for seed in upper_half]

    result = []
    for u, l in zip(upper_half, lower_half):
        result.extend([u, l])
    return result


def build_elimination_rounds(bracket_id: str, bracket_type: BracketType,
                             first_round_slots: List[Slot], best_of: int = 1,
                             finals_best_of: Optional[int] = None,
                             round_namer: Callable[[int, int], str] = get_round_name) -> List[BracketRound]:
    """
    Build the round/match graph for an elimination bracket.

    first_round_slots holds two entries per first-round match. Later rounds
    start empty with sources pointing at the previous round, and every match
    but the final gets a winner_goes_to.
    """
    if finals_best_of is None:
        finals_best_of = best_of
    total_rounds = calculate_bracket_rounds(len(first_round_slots))

    rounds: List[BracketRound] = []
    for round_number in range(1, total_rounds + 1):
        matches = []
        for position in range(2 ** (total_rounds - round_number)):
            match = BracketMatch(
                id=generate_id(),
                bracket_id=bracket_id,
                round=round_number,
                position=position,
                match_identifier=generate_match_identifier(bracket_type, round_number, position, total_rounds),
            )
            if round_number == 1:
                participant1, seed1, source1 = first_round_slots[position * 2]
                participant2, seed2, source2 = first_round_slots[position * 2 + 1]
                match.participant1, match.participant1_seed, match.participant1_source = participant1, seed1, source1
                match.participant2, match.participant2_seed, match.participant2_source = participant2, seed2, source2
            else:
                previous = rounds[-1].matches
                for slot, feeder in ((1, previous[position * 2]), (2, previous[position * 2 + 1])):
                    source = SlotSource(type='match', source_id=feeder.id, position='winner', bracket_id=bracket_id)
                    if slot == 1:
                        match.participant1_source = source
                    else:
                        match.participant2_source = source
                    feeder.winner_goes_to = SlotDestination(bracket_id=bracket_id, match_id=match.id, slot=slot)
            matches.append(match)

        rounds.append(BracketRound(
            round_number=round_number,
            name=round_namer(round_number, total_rounds),
            matches=matches,
            best_of=finals_best_of if round_number == total_rounds else best_of,
        ))
    return rounds


def assemble_bracket(bracket_id: str, bracket_type: BracketType, name: str,
                     rounds: List[BracketRound], event_id: str = '') -> Bracket:
    return Bracket(
        id=bracket_id,
        type=bracket_type,
        name=name,
        total_rounds=len(rounds),
        rounds=rounds,
        matches={match.id: match for round_ in rounds for match in round_.matches},
        event_id=event_id,
    )


def trivial_bracket(bracket_id: str, bracket_type: BracketType, name: str,
                    participants: List[Participant], event_id: str = '') -> Bracket:
    """A bracket with no matches: complete, champion is the sole entrant if any."""
    return Bracket(
        id=bracket_id,
        type=bracket_type,
        name=name,
        total_rounds=0,
        rounds=[],
        matches={},
        event_id=event_id,
        is_complete=True,
        champion=participants[0] if participants else None,
    )


def seeded_slots(seeded: List[Participant]) -> List[Slot]:
    """Place seeded participants into standard bracket positions; missing seeds are byes."""
    bracket_size = calculate_bracket_size(len(seeded))
    slots = []
    for seed in generate_bracket_order(bracket_size):
        if seed <= len(seeded):
            participant = seeded[seed - 1]
            source = SlotSource(type='seed', source_id=participant.id, position='rank', rank=seed)
            slots.append((participant, seed, source))
        else:
            slots.append((None, None, None))
    return slots


def generate_single_elimination_bracket(participants: List[Participant],
                                        bracket_id: Optional[str] = None,
                                        event_id: str = '',
                                        best_of: int = 1,
                                        finals_best_of: Optional[int] = None,
                                        seeding_method: SeedingMethod = SeedingMethod.RATING,
                                        rng: Optional[random.Random] = None,
                                        bracket_type: BracketType = BracketType.WINNERS,
                                        name: str = "Main Bracket") -> Bracket:
    """
    Generate a single elimination bracket.

    Participants are seeded, placed so seeds 1 and 2 can only meet in the
    final, and byes fill the bracket up to the next power of two. Bye
    matches are completed immediately and their winners already sit in
    round two.
    """
    bracket_id = bracket_id or generate_id()
    seeded = seed_participants(participants, seeding_method, rng)

    if len(seeded) < 2:
        return trivial_bracket(bracket_id, bracket_type, name, seeded, event_id)

    slots = seeded_slots(seeded)
    rounds = build_elimination_rounds(bracket_id, bracket_type, slots, best_of, finals_best_of)
    bracket = assemble_bracket(bracket_id, bracket_type, name, rounds, event_id)

    resolve_byes(build_arena([bracket]))
    refresh_bracket(bracket)

    byes = sum(1 for match in rounds[0].matches if match.is_bye)
    logger.debug(f"Single elimination for {len(seeded)} participants: "
                 f"size {len(slots)}, {bracket.total_rounds} rounds, {byes} byes")
    return bracket
