"""
Double elimination bracket generation.

In double elimination:
- Participants must lose twice to be eliminated
- Winners Bracket: participants that haven't lost yet
- Losers Bracket: participants that have lost once
- Grand Finals: winners bracket champion vs losers bracket champion

The losers bracket alternates two kinds of rounds. Odd rounds are drop-down
rounds: each match takes one loser from the winners bracket in slot 1 and one
losers-bracket survivor in slot 2 (round 1 has no survivors yet, so each of
its matches just passes a first-round loser through). Even rounds pair the
survivors off. The grand final is a single match with no bracket reset.
"""
import logging
import math
import random
from typing import List, Optional

from .models import (
    Bracket, BracketMatch, BracketRound, BracketType, DoubleEliminationBracket,
    Participant, SeedingMethod, SlotDestination, SlotSource, generate_id
)
from .elimination import (
    generate_single_elimination_bracket, generate_match_identifier,
    assemble_bracket, trivial_bracket, get_round_name
)
from .results import build_arena, refresh_bracket, resolve_byes

logger = logging.getLogger(__name__)


def calculate_losers_bracket_rounds(winners_rounds: int) -> int:
    """Losers bracket has 2 * winners_rounds - 1 rounds."""
    if winners_rounds < 1:
        return 0
    return 2 * winners_rounds - 1


def get_losers_round_name(round_number: int, total_losers_rounds: int) -> str:
    """Get the name for a losers bracket round (1-indexed)."""
    rounds_from_end = total_losers_rounds - round_number
    if rounds_from_end == 0:
        return "Losers Final"
    elif rounds_from_end == 1:
        return "Losers Semifinal"
    else:
        return f"Losers Round {round_number}"


def get_winners_round_name(round_number: int, total_rounds: int) -> str:
    return f"Winners {get_round_name(round_number, total_rounds)}"


def _build_losers_rounds(winners: Bracket, losers_id: str, best_of: int,
                         finals_best_of: int) -> List[BracketRound]:
    total_rounds = calculate_losers_bracket_rounds(winners.total_rounds)
    rounds: List[BracketRound] = []
    survivors = len(winners.rounds[0].matches)

    for round_number in range(1, total_rounds + 1):
        drop_down = round_number % 2 == 1
        match_count = survivors if drop_down else math.ceil(survivors / 2)

        matches = []
        for position in range(match_count):
            match = BracketMatch(
                id=generate_id(),
                bracket_id=losers_id,
                round=round_number,
                position=position,
                match_identifier=generate_match_identifier(BracketType.LOSERS, round_number,
                                                           position, total_rounds),
            )
            if drop_down:
                feeder = winners.rounds[(round_number + 1) // 2 - 1].matches[position]
                match.participant1_source = SlotSource(type='match', source_id=feeder.id,
                                                       position='loser', bracket_id=winners.id)
                feeder.loser_goes_to = SlotDestination(bracket_id=losers_id, match_id=match.id, slot=1)
                if round_number > 1:
                    survivor = rounds[-1].matches[position]
                    match.participant2_source = SlotSource(type='match', source_id=survivor.id,
                                                           position='winner', bracket_id=losers_id)
                    survivor.winner_goes_to = SlotDestination(bracket_id=losers_id, match_id=match.id, slot=2)
            else:
                previous = rounds[-1].matches
                for slot, index in ((1, position * 2), (2, position * 2 + 1)):
                    if index >= len(previous):
                        continue
                    feeder = previous[index]
                    source = SlotSource(type='match', source_id=feeder.id,
                                        position='winner', bracket_id=losers_id)
                    if slot == 1:
                        match.participant1_source = source
                    else:
                        match.participant2_source = source
                    feeder.winner_goes_to = SlotDestination(bracket_id=losers_id, match_id=match.id, slot=slot)
            matches.append(match)

        rounds.append(BracketRound(
            round_number=round_number,
            name=get_losers_round_name(round_number, total_rounds),
            matches=matches,
            best_of=finals_best_of if round_number == total_rounds else best_of,
        ))
        survivors = match_count

    return rounds


def _build_grand_finals(winners: Bracket, losers: Bracket, grand_finals_id: str,
                        finals_best_of: int, event_id: str) -> Bracket:
    winners_final = winners.final_match()
    losers_final = losers.final_match()

    match = BracketMatch(
        id=generate_id(),
        bracket_id=grand_finals_id,
        round=1,
        position=0,
        match_identifier='GF',
        participant1_source=SlotSource(type='match', source_id=winners_final.id,
                                       position='winner', bracket_id=winners.id),
        participant2_source=SlotSource(type='match', source_id=losers_final.id,
                                       position='winner', bracket_id=losers.id),
    )
    winners_final.winner_goes_to = SlotDestination(bracket_id=grand_finals_id, match_id=match.id, slot=1)
    losers_final.winner_goes_to = SlotDestination(bracket_id=grand_finals_id, match_id=match.id, slot=2)

    rounds = [BracketRound(round_number=1, name="Grand Finals", matches=[match], best_of=finals_best_of)]
    return assemble_bracket(grand_finals_id, BracketType.FINALS, "Grand Finals", rounds, event_id)


def generate_double_elimination_bracket(participants: List[Participant],
                                        event_id: str = '',
                                        best_of: int = 1,
                                        finals_best_of: Optional[int] = None,
                                        seeding_method: SeedingMethod = SeedingMethod.RATING,
                                        rng: Optional[random.Random] = None) -> DoubleEliminationBracket:
    """
    Generate a double elimination bracket.

    Returns the winners, losers and grand finals brackets. Every winners
    match sends its loser into the losers bracket; losers of first-round
    byes do not exist, so the losers-bracket slots they would have filled
    are byes as well.
    """
    if finals_best_of is None:
        finals_best_of = best_of

    winners = generate_single_elimination_bracket(
        participants,
        event_id=event_id,
        best_of=best_of,
        finals_best_of=finals_best_of,
        seeding_method=seeding_method,
        rng=rng,
        bracket_type=BracketType.WINNERS,
        name="Winners Bracket",
    )
    losers_id = generate_id()
    grand_finals_id = generate_id()

    if winners.total_rounds == 0:
        entrants = [winners.champion] if winners.champion else []
        return DoubleEliminationBracket(
            winners=winners,
            losers=trivial_bracket(losers_id, BracketType.LOSERS, "Losers Bracket", [], event_id),
            grand_finals=trivial_bracket(grand_finals_id, BracketType.FINALS, "Grand Finals",
                                         entrants, event_id),
        )

    for round_ in winners.rounds:
        round_.name = get_winners_round_name(round_.round_number, winners.total_rounds)

    losers_rounds = _build_losers_rounds(winners, losers_id, best_of, finals_best_of)
    losers = assemble_bracket(losers_id, BracketType.LOSERS, "Losers Bracket", losers_rounds, event_id)
    grand_finals = _build_grand_finals(winners, losers, grand_finals_id, finals_best_of, event_id)

    brackets = [winners, losers, grand_finals]
    resolve_byes(build_arena(brackets))
    for bracket in brackets:
        refresh_bracket(bracket)

    logger.debug(f"Double elimination: {winners.total_rounds} winners rounds, "
                 f"{losers.total_rounds} losers rounds")
    return DoubleEliminationBracket(winners=winners, losers=losers, grand_finals=grand_finals)
