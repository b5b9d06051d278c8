"""
Tournament format catalogue and participant count validation.
"""
from dataclasses import dataclass
from typing import Optional

from .models import TournamentFormat
from .elimination import calculate_bracket_size

FORMAT_INFO = {
    TournamentFormat.SINGLE_ELIMINATION: {
        'display_name': 'Single Elimination',
        'short_name': 'SE',
        'description': 'Lose once and you are out',
        'min_participants': 2,
        'optimal_participants': [4, 8, 16, 32, 64, 128],
        'supports_double_elim': False,
        'supports_pools': False,
    },
    TournamentFormat.DOUBLE_ELIMINATION: {
        'display_name': 'Double Elimination',
        'short_name': 'DE',
        'description': 'Must lose twice to be eliminated',
        'min_participants': 4,
        'optimal_participants': [4, 8, 16, 32, 64],
        'supports_double_elim': True,
        'supports_pools': False,
    },
    TournamentFormat.ROUND_ROBIN: {
        'display_name': 'Round Robin',
        'short_name': 'RR',
        'description': 'Everyone plays everyone',
        'min_participants': 3,
        'optimal_participants': [4, 5, 6, 7, 8],
        'supports_double_elim': False,
        'supports_pools': False,
    },
    TournamentFormat.POOL_PLAY: {
        'display_name': 'Pool Play',
        'short_name': 'PP',
        'description': 'Divided into pools with round robin',
        'min_participants': 6,
        'optimal_participants': [8, 12, 16, 20, 24, 32],
        'supports_double_elim': False,
        'supports_pools': True,
    },
    TournamentFormat.POOL_TO_BRACKET: {
        'display_name': 'Pool Play + Bracket',
        'short_name': 'P2B',
        'description': 'Pool play followed by elimination bracket',
        'min_participants': 8,
        'optimal_participants': [8, 12, 16, 24, 32, 48, 64],
        'supports_double_elim': True,
        'supports_pools': True,
    },
}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    message: Optional[str] = None
    recommendation: Optional[int] = None


def validate_participant_count(count: int, format: TournamentFormat) -> ValidationResult:
    """
    Check whether a participant count suits a format.

    Too few participants is invalid. Elimination formats that would need
    more byes than half the bracket stay valid but come back with advice.
    """
    format = TournamentFormat(format)
    minimum = FORMAT_INFO[format]['min_participants']

    if count < minimum:
        return ValidationResult(
            valid=False,
            message=f"{format.value} requires at least {minimum} participants",
            recommendation=minimum,
        )

    if format in (TournamentFormat.SINGLE_ELIMINATION, TournamentFormat.DOUBLE_ELIMINATION):
        bracket_size = calculate_bracket_size(count)
        byes = bracket_size - count
        if byes > bracket_size / 2:
            return ValidationResult(
                valid=True,
                message=f"{byes} byes will be needed. "
                        f"Consider waiting for {bracket_size // 2 - byes + count} participants",
                recommendation=bracket_size // 2 + 1,
            )

    return ValidationResult(valid=True)
