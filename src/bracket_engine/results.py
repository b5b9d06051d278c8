"""
Match result recording and bracket progress queries.

Brackets are never modified in place here. Recording a result copies the
brackets involved, applies the score, pushes the winner and loser into the
slots the match points at, and returns the new brackets.

Matches from several brackets can point at each other (double elimination,
a main bracket feeding a consolation bracket). They are handled together as
an arena: bracket id -> {match id -> match}.
"""
import logging
import math
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Dict, Optional

from .models import (
    Bracket, BracketMatch, DoubleEliminationBracket, MatchScore,
    MatchStatus, Participant, Pool, PoolMatch, SlotDestination, SlotSource
)
from .standings import calculate_pool_standings

logger = logging.getLogger(__name__)

Arena = Dict[str, Dict[str, BracketMatch]]


def build_arena(brackets: List[Bracket]) -> Arena:
    return {bracket.id: bracket.matches for bracket in brackets}


def find_match(arena: Arena, match_id: str) -> Optional[BracketMatch]:
    for matches in arena.values():
        match = matches.get(match_id)
        if match is not None:
            return match
    return None


# =============================================================================
# Slot propagation
# =============================================================================

def _source_is_dead(arena: Arena, source: SlotSource) -> bool:
    """True when a match-fed slot can never receive a participant."""
    if source.type != 'match':
        return False
    matches = arena.get(source.bracket_id)
    if matches is None:
        return False
    upstream = matches.get(source.source_id)
    if upstream is None:
        return False
    if upstream.status == MatchStatus.BYE:
        return True
    # A bye has a winner but never a loser.
    return source.position == 'loser' and upstream.is_bye


def mark_dead_slots(arena: Arena) -> None:
    """
    Clear sources that can never fill and flag the matches they leave short.

    A match with one dead slot becomes a pending bye; with two it is void
    (status BYE) and its own outgoing slots die in turn, so this runs until
    nothing changes.
    """
    changed = True
    while changed:
        changed = False
        for matches in arena.values():
            for match in matches.values():
                if match.participant1_source is not None and _source_is_dead(arena, match.participant1_source):
                    match.participant1_source = None
                    changed = True
                if match.participant2_source is not None and _source_is_dead(arena, match.participant2_source):
                    match.participant2_source = None
                    changed = True

                dead = [slot for slot in (1, 2) if match.source(slot) is None]
                if dead and not match.is_bye:
                    match.is_bye = True
                    changed = True
                if len(dead) == 2 and match.status != MatchStatus.BYE:
                    match.status = MatchStatus.BYE
                    changed = True


def _live_slot(match: BracketMatch) -> int:
    return 1 if match.participant1_source is not None else 2


def _complete_bye(arena: Arena, match: BracketMatch, completed_at: Optional[str]) -> None:
    """Advance the single entrant of a pending bye."""
    slot = _live_slot(match)
    entrant = match.participant(slot)
    if entrant is None:
        return
    match.status = MatchStatus.COMPLETED
    match.winner = slot
    match.winner_id = entrant.id
    match.loser_id = None
    match.completed_at = completed_at
    _propagate(arena, match, completed_at)


def resolve_byes(arena: Arena, completed_at: Optional[str] = None) -> None:
    """Mark dead slots, then advance every pending bye that already has its entrant."""
    mark_dead_slots(arena)
    for matches in arena.values():
        for match in list(matches.values()):
            if match.is_bye and match.status == MatchStatus.NOT_STARTED:
                _complete_bye(arena, match, completed_at)


def place_participant(arena: Arena, destination: SlotDestination,
                      participant: Optional[Participant], seed: Optional[int],
                      completed_at: Optional[str] = None) -> None:
    """Write a participant into a downstream slot, advancing pending byes it fills."""
    matches = arena.get(destination.bracket_id)
    if matches is None:
        logger.debug(f"Destination bracket {destination.bracket_id} not loaded, skipping")
        return
    target = matches.get(destination.match_id)
    if target is None:
        logger.warning(f"Destination match {destination.match_id} missing from bracket {destination.bracket_id}")
        return

    if destination.slot == 1:
        target.participant1 = participant
        target.participant1_seed = seed
    else:
        target.participant2 = participant
        target.participant2_seed = seed

    if target.is_bye and target.status != MatchStatus.BYE and destination.slot == _live_slot(target):
        _complete_bye(arena, target, completed_at)


def _propagate(arena: Arena, match: BracketMatch, completed_at: Optional[str]) -> None:
    if match.winner not in (1, 2):
        return
    loser_slot = 3 - match.winner
    if match.winner_goes_to is not None:
        place_participant(arena, match.winner_goes_to, match.participant(match.winner),
                          match.seed(match.winner), completed_at)
    if match.loser_goes_to is not None and not match.is_bye:
        place_participant(arena, match.loser_goes_to, match.participant(loser_slot),
                          match.seed(loser_slot), completed_at)


def propagate_match(arena: Arena, match: BracketMatch, completed_at: Optional[str] = None) -> None:
    """Re-send a settled match's winner and loser to their destinations."""
    if match.status == MatchStatus.COMPLETED:
        _propagate(arena, match, completed_at)


# =============================================================================
# Bracket bookkeeping
# =============================================================================

def copy_bracket(bracket: Bracket) -> Bracket:
    """Copy a bracket and its matches so they can be changed independently."""
    matches = {match_id: replace(match) for match_id, match in bracket.matches.items()}
    rounds = [
        replace(round_, matches=[matches[match.id] for match in round_.matches])
        for round_ in bracket.rounds
    ]
    return replace(bracket, matches=matches, rounds=rounds)


def refresh_bracket(bracket: Bracket) -> Bracket:
    """
    Recompute round and bracket completion in place.

    Once every match is settled the final's winner becomes champion and the
    loser runner-up; a bronze match, if present, supplies third place.
    """
    for round_ in bracket.rounds:
        round_.is_complete = all(match.is_settled for match in round_.matches)

    if not bracket.matches:
        return bracket

    bracket.is_complete = all(match.is_settled for match in bracket.matches.values())
    bracket.champion = None
    bracket.runner_up = None
    bracket.third_place = None
    if not bracket.is_complete:
        return bracket

    final = bracket.final_match()
    if final is not None and final.winner in (1, 2):
        bracket.champion = final.participant(final.winner)
        bracket.runner_up = final.participant(3 - final.winner)

    bronze = bracket.third_place_match()
    if bronze is not None and bronze.winner in (1, 2):
        bracket.third_place = bronze.participant(bronze.winner)
    return bracket


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Recording
# =============================================================================

def record_linked_result(brackets: List[Bracket], match_id: str, score: MatchScore,
                         completed_at: Optional[str] = None) -> List[Bracket]:
    """
    Record a result for a match in any of a set of linked brackets.

    Returns new brackets in the same order. If no bracket holds the match,
    or the score names no winner, the input list is returned unchanged.
    """
    if find_match(build_arena(brackets), match_id) is None:
        logger.debug(f"Match {match_id} not found, nothing recorded")
        return brackets
    if score.winner not in (1, 2):
        logger.warning(f"Score for match {match_id} has no winner, nothing recorded")
        return brackets

    completed_at = completed_at or _now()
    updated = [copy_bracket(bracket) for bracket in brackets]
    arena = build_arena(updated)
    match = find_match(arena, match_id)

    winner = match.participant(score.winner)
    loser = match.participant(3 - score.winner)
    match.score = score
    match.status = MatchStatus.COMPLETED
    match.winner = score.winner
    match.winner_id = winner.id if winner is not None else None
    match.loser_id = loser.id if loser is not None else None
    match.completed_at = completed_at

    logger.info(f"Recorded {match.match_identifier}: winner={match.winner_id} loser={match.loser_id}")
    _propagate(arena, match, completed_at)

    for bracket in updated:
        refresh_bracket(bracket)
    return updated


def record_match_result(bracket: Bracket, match_id: str, score: MatchScore,
                        completed_at: Optional[str] = None) -> Bracket:
    """
    Record a completed match and return the updated bracket.

    Unknown match ids return the same bracket object. Recording the same
    match again overwrites the earlier result and re-propagates it.
    Destinations in other brackets are skipped; use record_linked_result
    when brackets feed each other.
    """
    return record_linked_result([bracket], match_id, score, completed_at)[0]


def record_double_elimination_result(bracket: DoubleEliminationBracket, match_id: str,
                                     score: MatchScore,
                                     completed_at: Optional[str] = None) -> DoubleEliminationBracket:
    winners, losers, grand_finals = record_linked_result(bracket.brackets, match_id, score, completed_at)
    if winners is bracket.winners and losers is bracket.losers and grand_finals is bracket.grand_finals:
        return bracket
    return DoubleEliminationBracket(winners=winners, losers=losers, grand_finals=grand_finals)


def record_pool_match_result(pool: Pool, match_id: str, score: MatchScore,
                             completed_at: Optional[str] = None) -> Pool:
    """Record a pool match and return the pool with standings recomputed."""
    if not any(match.id == match_id for match in pool.matches):
        logger.debug(f"Pool match {match_id} not found in {pool.name}")
        return pool
    if score.winner not in (1, 2):
        logger.warning(f"Score for pool match {match_id} has no winner, nothing recorded")
        return pool

    completed_at = completed_at or _now()
    matches: List[PoolMatch] = []
    for match in pool.matches:
        if match.id == match_id:
            winner = match.participant1 if score.winner == 1 else match.participant2
            match = replace(match, score=score, status=MatchStatus.COMPLETED,
                            winner_id=winner.id, completed_at=completed_at)
            logger.info(f"Recorded {pool.name} match {match.match_number}: winner={winner.id}")
        matches.append(match)

    completed = sum(1 for match in matches if match.status == MatchStatus.COMPLETED)
    return replace(
        pool,
        matches=matches,
        standings=calculate_pool_standings(matches, pool.participants,
                                           pool.advancement_count, pool.tiebreakers or None),
        completed_matches=completed,
        is_complete=completed == len(matches) and len(matches) > 0,
    )


# =============================================================================
# Queries
# =============================================================================

def _playable(bracket: Bracket) -> List[BracketMatch]:
    return [match for round_ in bracket.rounds for match in round_.matches]


def get_next_match(bracket: Bracket) -> Optional[BracketMatch]:
    """First match, in round order, that has both entrants and has not started."""
    for match in _playable(bracket):
        if match.is_ready:
            return match
    return None


def get_ready_matches(bracket: Bracket) -> List[BracketMatch]:
    return [match for match in _playable(bracket) if match.is_ready]


def get_in_progress_matches(bracket: Bracket) -> List[BracketMatch]:
    return [match for match in _playable(bracket) if match.status == MatchStatus.IN_PROGRESS]


def get_bracket_progress(bracket: Bracket, round_namer=None) -> Dict:
    """
    Progress summary for a bracket. Byes are not counted as matches.

    `round_namer(round_number, total_rounds)` names the current round; by
    default the round's own name is used.
    """
    real = [match for match in bracket.matches.values() if not match.is_bye]
    completed = sum(1 for match in real if match.status == MatchStatus.COMPLETED)
    total = len(real)

    current_round = 1
    for round_ in bracket.rounds:
        if not all(match.is_settled for match in round_.matches):
            current_round = round_.round_number
            break
        current_round = round_.round_number + 1
    current_round = min(current_round, bracket.total_rounds)

    if round_namer is not None:
        current_name = round_namer(current_round, bracket.total_rounds)
    elif 1 <= current_round <= len(bracket.rounds):
        current_name = bracket.rounds[current_round - 1].name
    else:
        current_name = ''

    return {
        'total_matches': total,
        'completed_matches': completed,
        'remaining_matches': total - completed,
        'percent_complete': completed / total * 100 if total else 0.0,
        'current_round': current_round,
        'current_round_name': current_name,
    }


def format_score_display(score: Optional[MatchScore]) -> str:
    """Games as "11-7, 9-11, 11-5", or "-" when nothing has been played."""
    if score is None or not score.games:
        return '-'
    return ', '.join(f"{game.team1_score}-{game.team2_score}" for game in score.games)


def get_estimated_remaining_time(remaining_matches: int, avg_match_duration_minutes: float,
                                 available_courts: int) -> float:
    """Minutes left if matches run in parallel waves across the available courts."""
    if available_courts <= 0 or remaining_matches <= 0:
        return 0
    return math.ceil(remaining_matches / available_courts) * avg_match_duration_minutes
