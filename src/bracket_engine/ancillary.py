"""
Extra placement matches hung off a main elimination bracket.

- Third place: the two semifinal losers play a bronze match.
- Consolation: first-round losers play their own elimination bracket.

Both hook into the main bracket through loser_goes_to, so results recorded
on the main bracket flow into them the same way winners flow forward.
"""
import logging
from typing import List, Optional, Tuple

from .models import (
    Bracket, BracketMatch, BracketType, SlotDestination, SlotSource, generate_id
)
from .elimination import (
    build_elimination_rounds, assemble_bracket, trivial_bracket, get_round_name
)
from .results import (
    build_arena, copy_bracket, propagate_match, refresh_bracket, resolve_byes
)

logger = logging.getLogger(__name__)

THIRD_PLACE_IDENTIFIER = '3P'


def get_consolation_round_name(round_number: int, total_rounds: int) -> str:
    return f"Consolation {get_round_name(round_number, total_rounds)}"


def _replay_losers(arena, matches: List[BracketMatch]) -> None:
    """Send losers of already completed matches into newly wired slots."""
    for match in matches:
        if not match.is_bye:
            propagate_match(arena, match, match.completed_at)


def add_third_place_match(bracket: Bracket) -> Bracket:
    """
    Return a copy of the bracket with a bronze match between the semifinal losers.

    The match sits in the final round at position 1. Brackets with fewer than
    two rounds, or that already route semifinal losers elsewhere, come back
    unchanged.
    """
    if bracket.total_rounds < 2:
        logger.debug(f"{bracket.name} has {bracket.total_rounds} rounds, no third place match")
        return bracket
    if bracket.third_place_match() is not None:
        return bracket

    semifinals = bracket.rounds[-2].matches
    if any(match.loser_goes_to is not None for match in semifinals):
        logger.warning(f"Semifinal losers of {bracket.name} are already routed, no third place match")
        return bracket

    updated = copy_bracket(bracket)
    semifinals = updated.rounds[-2].matches
    final_round = updated.rounds[-1]

    bronze = BracketMatch(
        id=generate_id(),
        bracket_id=updated.id,
        round=updated.total_rounds,
        position=1,
        match_identifier=THIRD_PLACE_IDENTIFIER,
        is_third_place=True,
    )
    for slot, semifinal in ((1, semifinals[0]), (2, semifinals[1])):
        source = SlotSource(type='match', source_id=semifinal.id, position='loser', bracket_id=updated.id)
        if slot == 1:
            bronze.participant1_source = source
        else:
            bronze.participant2_source = source
        semifinal.loser_goes_to = SlotDestination(bracket_id=updated.id, match_id=bronze.id, slot=slot)

    final_round.matches.append(bronze)
    updated.matches[bronze.id] = bronze

    arena = build_arena([updated])
    resolve_byes(arena)
    _replay_losers(arena, semifinals)
    return refresh_bracket(updated)


def generate_consolation_bracket(main_bracket: Bracket, best_of: int = 1,
                                 finals_best_of: Optional[int] = None) -> Tuple[Bracket, Bracket]:
    """
    Build a consolation bracket for first-round losers.

    Consolation match i takes the losers of first-round matches 2i and 2i+1.
    Returns (main, consolation) where main is a copy of main_bracket with
    its first-round loser_goes_to pointing into the consolation bracket.
    """
    consolation_id = generate_id()
    first_round = main_bracket.rounds[0].matches if main_bracket.rounds else []

    if len(first_round) < 2 or any(match.loser_goes_to is not None for match in first_round):
        logger.debug(f"No consolation play possible for {main_bracket.name}")
        return main_bracket, trivial_bracket(consolation_id, BracketType.CONSOLATION,
                                             "Consolation Bracket", [], main_bracket.event_id)

    main = copy_bracket(main_bracket)
    first_round = main.rounds[0].matches
    slots = [
        (None, None, SlotSource(type='match', source_id=match.id, position='loser', bracket_id=main.id))
        for match in first_round
    ]
    rounds = build_elimination_rounds(consolation_id, BracketType.CONSOLATION, slots, best_of,
                                      finals_best_of, round_namer=get_consolation_round_name)

    for index, match in enumerate(first_round):
        target = rounds[0].matches[index // 2]
        match.loser_goes_to = SlotDestination(bracket_id=consolation_id, match_id=target.id,
                                              slot=1 if index % 2 == 0 else 2)

    consolation = assemble_bracket(consolation_id, BracketType.CONSOLATION, "Consolation Bracket",
                                   rounds, main.event_id)

    arena = build_arena([main, consolation])
    resolve_byes(arena)
    _replay_losers(arena, first_round)
    refresh_bracket(main)
    refresh_bracket(consolation)

    logger.debug(f"Consolation bracket for {main.name}: {consolation.total_rounds} rounds")
    return main, consolation
