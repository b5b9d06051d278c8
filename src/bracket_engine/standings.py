"""
Pool standings with an ordered tiebreaker chain.

Standings are always rebuilt from the match list, so calling this again after
any result change gives the current table.
"""
from typing import List, Dict, Optional

from .models import (
    Participant, PoolMatch, PoolStanding, MatchStatus, TiebreakerRule
)

DEFAULT_TIEBREAKERS = [
    TiebreakerRule.HEAD_TO_HEAD,
    TiebreakerRule.POINT_DIFFERENTIAL,
    TiebreakerRule.POINTS_FOR,
]


def _counts(match: PoolMatch) -> bool:
    return match.status == MatchStatus.COMPLETED and match.score is not None


def match_winner_side(match: PoolMatch) -> Optional[int]:
    """1 or 2 for the winning side of a completed pool match, else None."""
    if match.winner_id is not None:
        if match.winner_id == match.participant1.id:
            return 1
        if match.winner_id == match.participant2.id:
            return 2
    if match.score is not None:
        return match.score.winner
    return None


def _head_to_head_credits(rows: List[PoolStanding], matches: List[PoolMatch]) -> Dict[str, int]:
    """
    Wins each participant has over others tied with it on win percentage.

    For two tied participants this is just their direct result. In a larger
    group every member is credited with wins over the rest of the group, so
    a perfect cycle credits everyone equally.
    """
    win_percentage = {row.participant_id: row.win_percentage for row in rows}
    credits = {row.participant_id: 0 for row in rows}
    for match in matches:
        if not _counts(match):
            continue
        side = match_winner_side(match)
        if side is None:
            continue
        winner, loser = match.participant1.id, match.participant2.id
        if side == 2:
            winner, loser = loser, winner
        if winner not in credits or loser not in credits:
            continue
        if win_percentage[winner] == win_percentage[loser]:
            credits[winner] += 1
    return credits


def _tiebreak_value(rule: TiebreakerRule, row: PoolStanding, credits: Dict[str, int]):
    """Sort key component for one rule. Smaller sorts first."""
    if rule == TiebreakerRule.HEAD_TO_HEAD:
        return -credits.get(row.participant_id, 0)
    if rule == TiebreakerRule.POINT_DIFFERENTIAL:
        return -row.point_differential
    if rule == TiebreakerRule.POINTS_FOR:
        return -row.points_for
    if rule == TiebreakerRule.POINTS_AGAINST:
        return row.points_against
    if rule == TiebreakerRule.GAMES_WON:
        return -row.games_won
    if rule == TiebreakerRule.RATING:
        return -row.participant.rating
    return 0


def calculate_pool_standings(matches: List[PoolMatch], participants: List[Participant],
                             advancement_count: int,
                             tiebreakers: Optional[List[TiebreakerRule]] = None) -> List[PoolStanding]:
    """
    Calculate ranked standings for a pool.

    Only completed matches with a score count. Participants are ordered by
    win percentage, then by each tiebreaker in turn. Participants still tied
    after every rule keep their input (seed) order.
    """
    if tiebreakers is None:
        tiebreakers = DEFAULT_TIEBREAKERS
    tiebreakers = [TiebreakerRule(rule) for rule in tiebreakers]

    rows: Dict[str, PoolStanding] = {}
    for participant in participants:
        rows[participant.id] = PoolStanding(participant_id=participant.id, participant=participant)

    for match in matches:
        if not _counts(match):
            continue
        first = rows.get(match.participant1.id)
        second = rows.get(match.participant2.id)
        if first is None or second is None:
            continue

        score = match.score
        first.matches_played += 1
        second.matches_played += 1
        first.games_won += score.team1_games_won
        first.games_lost += score.team2_games_won
        second.games_won += score.team2_games_won
        second.games_lost += score.team1_games_won
        first.points_for += score.team1_total_points
        first.points_against += score.team2_total_points
        second.points_for += score.team2_total_points
        second.points_against += score.team1_total_points

        side = match_winner_side(match)
        if side == 1:
            first.matches_won += 1
            second.matches_lost += 1
        elif side == 2:
            second.matches_won += 1
            first.matches_lost += 1

    ordered = list(rows.values())
    for row in ordered:
        row.point_differential = row.points_for - row.points_against
        row.win_percentage = row.matches_won / row.matches_played if row.matches_played else 0.0

    credits = _head_to_head_credits(ordered, matches)

    def sort_key(row: PoolStanding):
        return (-row.win_percentage,) + tuple(
            _tiebreak_value(rule, row, credits) for rule in tiebreakers
        )

    ordered.sort(key=sort_key)
    for rank, row in enumerate(ordered, start=1):
        row.rank = rank
        row.advances = rank <= advancement_count
    return ordered
