"""
Data models shared by the bracket and pool engine.

Participants are a tagged variant (singles or doubles) rather than a class
hierarchy. Matches refer to each other only through SlotSource and
SlotDestination references, so every structure can be built in any order and
serialized without cycles.
"""
import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Optional


class TournamentFormat(str, Enum):
    SINGLE_ELIMINATION = 'single_elimination'
    DOUBLE_ELIMINATION = 'double_elimination'
    ROUND_ROBIN = 'round_robin'
    POOL_PLAY = 'pool_play'
    POOL_TO_BRACKET = 'pool_to_bracket'


class RegistrationStatus(str, Enum):
    REGISTERED = 'registered'
    CONFIRMED = 'confirmed'
    WAITLISTED = 'waitlisted'
    WITHDRAWN = 'withdrawn'
    DISQUALIFIED = 'disqualified'


class MatchStatus(str, Enum):
    NOT_STARTED = 'not_started'
    SCHEDULED = 'scheduled'
    CALLED_TO_COURT = 'called_to_court'
    WARMUP = 'warmup'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    FORFEITED = 'forfeited'
    CANCELLED = 'cancelled'
    DISPUTED = 'disputed'
    BYE = 'bye'


class BracketType(str, Enum):
    WINNERS = 'winners'
    LOSERS = 'losers'
    CONSOLATION = 'consolation'
    FINALS = 'finals'
    GOLD = 'gold'
    BRONZE = 'bronze'


class SeedingMethod(str, Enum):
    RANDOM = 'random'
    RATING = 'rating'
    MANUAL = 'manual'
    SNAKE = 'snake'
    HYBRID = 'hybrid'


class TiebreakerRule(str, Enum):
    HEAD_TO_HEAD = 'head_to_head'
    POINT_DIFFERENTIAL = 'point_differential'
    POINTS_FOR = 'points_for'
    POINTS_AGAINST = 'points_against'
    GAMES_WON = 'games_won'
    RATING = 'rating'


class CrossPoolSeeding(str, Enum):
    STANDARD = 'standard'
    REVERSE = 'reverse'
    SNAKE = 'snake'


SINGLES = 'singles'
DOUBLES = 'doubles'


def generate_id() -> str:
    """Generate a short unique id for matches, pools and brackets."""
    return uuid.uuid4().hex[:12]


def sanitize_rating(value) -> float:
    """
    Coerce a raw rating into a float usable for ordering.

    Missing or non-numeric ratings read as 0; negative ratings read as the
    lowest possible value.
    """
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(rating):
        return 0.0
    if rating < 0:
        return float('-inf')
    return rating


@dataclass(frozen=True)
class Player:
    id: str
    first_name: str = ''
    last_name: str = ''
    rating: float = 0.0
    display_name: Optional[str] = None

    @property
    def name(self) -> str:
        if self.display_name:
            return self.display_name
        return f"{self.first_name} {self.last_name}".strip() or self.id


@dataclass(frozen=True)
class Team:
    """A doubles pairing. Ratings are derived from the two players."""
    id: str
    player1: Player
    player2: Player
    name: Optional[str] = None

    @property
    def combined_rating(self) -> float:
        return sanitize_rating(self.player1.rating) + sanitize_rating(self.player2.rating)

    @property
    def average_rating(self) -> float:
        return self.combined_rating / 2

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"{_short_name(self.player1)} / {_short_name(self.player2)}"


def _short_name(player: Player) -> str:
    if player.display_name:
        return player.display_name
    if player.last_name:
        return f"{player.first_name} {player.last_name[0]}."
    return player.first_name or player.id


@dataclass(frozen=True)
class Participant:
    """
    A bracket or pool entrant: either a singles player or a doubles team.

    The `type` tag decides which of `player` / `team` is populated; every
    accessor below dispatches on it.
    """
    type: str
    player: Optional[Player] = None
    team: Optional[Team] = None
    seed: Optional[int] = None
    status: RegistrationStatus = RegistrationStatus.REGISTERED

    @classmethod
    def singles(cls, player: Player, seed: Optional[int] = None,
                status: RegistrationStatus = RegistrationStatus.REGISTERED) -> 'Participant':
        return cls(type=SINGLES, player=player, seed=seed, status=status)

    @classmethod
    def doubles(cls, team: Team, seed: Optional[int] = None,
                status: RegistrationStatus = RegistrationStatus.REGISTERED) -> 'Participant':
        return cls(type=DOUBLES, team=team, seed=seed, status=status)

    @property
    def id(self) -> str:
        if self.type == SINGLES:
            return self.player.id
        return self.team.id

    @property
    def rating(self) -> float:
        if self.type == SINGLES:
            return sanitize_rating(self.player.rating)
        return self.team.average_rating

    @property
    def display_name(self) -> str:
        if self.type == SINGLES:
            return self.player.name
        return self.team.display_name

    def __repr__(self):
        return f"Participant(type={self.type}, id={self.id}, rating={self.rating})"


# =============================================================================
# Scores
# =============================================================================

@dataclass(frozen=True)
class GameScore:
    game_number: int
    team1_score: int
    team2_score: int


@dataclass(frozen=True)
class MatchScore:
    games: List[GameScore] = field(default_factory=list)
    team1_games_won: int = 0
    team2_games_won: int = 0
    team1_total_points: int = 0
    team2_total_points: int = 0
    winner: Optional[int] = None


# =============================================================================
# Match graph references
# =============================================================================

@dataclass(frozen=True)
class SlotSource:
    """Where a not-yet-known participant will come from."""
    type: str  # 'seed' | 'match' | 'pool'
    source_id: str
    position: str  # 'winner' | 'loser' | 'rank'
    bracket_id: Optional[str] = None
    rank: Optional[int] = None


@dataclass(frozen=True)
class SlotDestination:
    """Downstream match slot (1 or 2) that receives a winner or loser."""
    bracket_id: str
    match_id: str
    slot: int


# =============================================================================
# Pools
# =============================================================================

@dataclass
class PoolMatch:
    id: str
    pool_id: str
    round: int
    match_number: int
    participant1: Participant
    participant2: Participant
    status: MatchStatus = MatchStatus.NOT_STARTED
    score: Optional[MatchScore] = None
    winner_id: Optional[str] = None
    court: Optional[int] = None
    completed_at: Optional[str] = None


@dataclass
class PoolStanding:
    participant_id: str
    participant: Participant
    rank: int = 0
    matches_played: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    games_won: int = 0
    games_lost: int = 0
    points_for: int = 0
    points_against: int = 0
    point_differential: int = 0
    win_percentage: float = 0.0
    advances: bool = False


@dataclass
class Pool:
    id: str
    name: str
    pool_number: int
    participants: List[Participant]
    matches: List[PoolMatch]
    standings: List[PoolStanding]
    advancement_count: int
    tiebreakers: List[TiebreakerRule] = field(default_factory=list)
    event_id: str = ''
    is_complete: bool = False
    completed_matches: int = 0
    total_matches: int = 0


# =============================================================================
# Brackets
# =============================================================================

SETTLED_STATUSES = (MatchStatus.COMPLETED, MatchStatus.BYE)


@dataclass
class BracketMatch:
    id: str
    bracket_id: str
    round: int
    position: int
    match_identifier: str
    participant1: Optional[Participant] = None
    participant2: Optional[Participant] = None
    participant1_seed: Optional[int] = None
    participant2_seed: Optional[int] = None
    participant1_source: Optional[SlotSource] = None
    participant2_source: Optional[SlotSource] = None
    status: MatchStatus = MatchStatus.NOT_STARTED
    score: Optional[MatchScore] = None
    winner: Optional[int] = None
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None
    winner_goes_to: Optional[SlotDestination] = None
    loser_goes_to: Optional[SlotDestination] = None
    completed_at: Optional[str] = None
    is_bye: bool = False
    is_third_place: bool = False

    def participant(self, slot: int) -> Optional[Participant]:
        return self.participant1 if slot == 1 else self.participant2

    def seed(self, slot: int) -> Optional[int]:
        return self.participant1_seed if slot == 1 else self.participant2_seed

    def source(self, slot: int) -> Optional[SlotSource]:
        return self.participant1_source if slot == 1 else self.participant2_source

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES

    @property
    def is_ready(self) -> bool:
        return (self.status == MatchStatus.NOT_STARTED and not self.is_bye
                and self.participant1 is not None and self.participant2 is not None)


@dataclass
class BracketRound:
    round_number: int
    name: str
    matches: List[BracketMatch]
    best_of: int = 1
    is_complete: bool = False


@dataclass
class Bracket:
    id: str
    type: BracketType
    name: str
    total_rounds: int
    rounds: List[BracketRound]
    matches: Dict[str, BracketMatch]
    event_id: str = ''
    is_complete: bool = False
    champion: Optional[Participant] = None
    runner_up: Optional[Participant] = None
    third_place: Optional[Participant] = None

    def get_match(self, match_id: str) -> Optional[BracketMatch]:
        return self.matches.get(match_id)

    def final_match(self) -> Optional[BracketMatch]:
        for match in self.matches.values():
            if match.round == self.total_rounds and not match.is_third_place:
                return match
        return None

    def third_place_match(self) -> Optional[BracketMatch]:
        for match in self.matches.values():
            if match.is_third_place:
                return match
        return None


@dataclass
class DoubleEliminationBracket:
    winners: Bracket
    losers: Bracket
    grand_finals: Bracket

    @property
    def brackets(self) -> List[Bracket]:
        return [self.winners, self.losers, self.grand_finals]

    @property
    def champion(self) -> Optional[Participant]:
        return self.grand_finals.champion

    @property
    def is_complete(self) -> bool:
        return self.grand_finals.is_complete


# =============================================================================
# Round robin schedules
# =============================================================================

@dataclass
class RoundRobinMatch:
    """A scheduled round-robin pairing. Sides are whatever entrants were scheduled."""
    id: str
    round: int
    court: int
    side1: object
    side2: object
    team1_score: int = 0
    team2_score: int = 0
    completed: bool = False


@dataclass
class RoundRobinSchedule:
    matches: List[RoundRobinMatch]
    rounds: int
    total_possible_rounds: int


@dataclass
class RoundRobinStanding:
    entrant_id: str
    name: str
    played: int = 0
    won: int = 0
    lost: int = 0
    points_for: int = 0
    points_against: int = 0
    point_diff: int = 0
