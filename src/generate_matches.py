#!/usr/bin/env python3
"""
Generate pools, brackets or a round robin schedule from a participants file.

Usage:
    python src/generate_matches.py participants.yaml
    python src/generate_matches.py participants.yaml --format double_elimination
    python src/generate_matches.py participants.yaml --settings settings.yaml --seed 7

The participants file holds either a `singles:` list of players or a
`doubles:` list of teams:

    singles:
      - {id: p1, first_name: Ann, last_name: Lee, rating: 4.5}
    doubles:
      - id: t1
        name: Net Gains
        players:
          - {id: p1, first_name: Ann, rating: 4.5}
          - {id: p2, first_name: Bo, rating: 4.1}

Exit codes:
    0: Success
    1: Participants or settings could not be read
"""
import argparse
import logging
import os
import random
import sys

import yaml

from bracket_engine.models import (
    MatchStatus, Participant, Player, Team, TournamentFormat, RegistrationStatus
)
from bracket_engine.config import load_settings
from bracket_engine.formats import validate_participant_count
from bracket_engine.pools import generate_pools
from bracket_engine.round_robin import generate_round_robin
from bracket_engine.elimination import generate_single_elimination_bracket
from bracket_engine.double_elimination import generate_double_elimination_bracket
from bracket_engine.ancillary import add_third_place_match, generate_consolation_bracket
from bracket_engine.advancement import advance_to_playoffs

logger = logging.getLogger(__name__)


def _player(data):
    if not isinstance(data, dict) or 'id' not in data:
        raise ValueError(f"Player entry needs an id: {data!r}")
    return Player(
        id=str(data['id']),
        first_name=data.get('first_name', ''),
        last_name=data.get('last_name', ''),
        rating=data.get('rating', 0.0),
        display_name=data.get('display_name'),
    )


def _status(data):
    return RegistrationStatus(data.get('status', RegistrationStatus.REGISTERED.value))


def load_participants(file_path):
    """Read participants from a YAML file. Raises ValueError on malformed input."""
    if not os.path.exists(file_path):
        raise ValueError(f"Participants file not found: {file_path}")
    with open(file_path, mode='r', encoding='utf-8') as file:
        try:
            data = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse {file_path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"{file_path} must contain a 'singles' or 'doubles' list")

    participants = []
    for entry in data.get('singles') or []:
        participants.append(Participant.singles(_player(entry), seed=entry.get('seed'),
                                                status=_status(entry)))
    for entry in data.get('doubles') or []:
        if not isinstance(entry, dict) or 'id' not in entry:
            raise ValueError(f"Team entry needs an id: {entry!r}")
        players = entry.get('players') or []
        if len(players) != 2:
            raise ValueError(f"Team {entry.get('id')!r} needs exactly two players")
        team = Team(id=str(entry['id']), player1=_player(players[0]),
                    player2=_player(players[1]), name=entry.get('name'))
        participants.append(Participant.doubles(team, seed=entry.get('seed'), status=_status(entry)))

    return participants


def _name(participant):
    return participant.display_name if participant is not None else 'TBD'


def _pool_slot(source, pool_names):
    if source is None or source.type != 'pool':
        return 'BYE'
    return f"{pool_names.get(source.source_id, source.source_id)} #{source.rank}"


def _match_line(match, pool_names):
    if match.is_bye and match.status == MatchStatus.COMPLETED:
        return f"{_name(match.participant(match.winner))} (bye)"
    line = f"{match.match_identifier}: {_name(match.participant1)} vs {_name(match.participant2)}"
    if match.participant1_source is not None and match.participant1_source.type == 'pool':
        line += (f"  [{_pool_slot(match.participant1_source, pool_names)} vs "
                 f"{_pool_slot(match.participant2_source, pool_names)}]")
    return line


def format_pools(pools):
    lines = []
    for pool in pools:
        if lines:
            lines.append('')
        lines.append(f"# {pool.name}")
        for match in pool.matches:
            lines.append(f"{_name(match.participant1)} vs {_name(match.participant2)}")
    return lines


def format_bracket(bracket, pool_names=None):
    """One header per round, then a line per match. Void matches are left out."""
    pool_names = pool_names or {}
    lines = []
    for round_ in bracket.rounds:
        if lines:
            lines.append('')
        lines.append(f"# {bracket.name} - {round_.name}")
        for match in round_.matches:
            if match.status == MatchStatus.BYE:
                continue
            lines.append(_match_line(match, pool_names))
    if not bracket.rounds and bracket.champion is not None:
        lines.append(f"# {bracket.name}")
        lines.append(f"Champion: {_name(bracket.champion)}")
    return lines


def format_round_robin(schedule):
    lines = []
    current = None
    for match in schedule.matches:
        if match.round != current:
            if lines:
                lines.append('')
            lines.append(f"# Round {match.round}")
            current = match.round
        lines.append(f"Court {match.court}: {_name(match.side1)} vs {_name(match.side2)}")
    return lines


def generate(participants, tournament_format, settings, rng=None):
    """Build the requested structure and return its printable lines."""
    scoring = settings['scoring']
    pool_settings = settings['pool_play']
    bracket_settings = settings['bracket']

    if tournament_format == TournamentFormat.ROUND_ROBIN:
        return format_round_robin(generate_round_robin(participants))

    if tournament_format in (TournamentFormat.POOL_PLAY, TournamentFormat.POOL_TO_BRACKET):
        pools = generate_pools(
            participants,
            number_of_pools=pool_settings['number_of_pools'],
            target_pool_size=pool_settings['target_pool_size'],
            advancement_count=pool_settings['advancement_count'],
            seeding_method=pool_settings['seeding_method'],
            tiebreakers=pool_settings['tiebreakers'],
            rng=rng,
        )
        lines = format_pools(pools)
        if tournament_format == TournamentFormat.POOL_TO_BRACKET and pools:
            playoff = advance_to_playoffs(
                pools,
                pool_settings['advancement_count'],
                cross_pool_seeding=bracket_settings['cross_pool_seeding'],
                best_of=scoring['best_of'],
                finals_best_of=scoring['finals_best_of'],
            )
            pool_names = {pool.id: pool.name for pool in pools}
            lines.append('')
            lines.extend(format_bracket(playoff, pool_names))
        return lines

    if tournament_format == TournamentFormat.DOUBLE_ELIMINATION:
        bracket = generate_double_elimination_bracket(
            participants,
            best_of=scoring['best_of'],
            finals_best_of=scoring['finals_best_of'],
            seeding_method=bracket_settings['seeding_method'],
            rng=rng,
        )
        lines = []
        for part in bracket.brackets:
            if part.rounds or part.champion is not None:
                if lines:
                    lines.append('')
                lines.extend(format_bracket(part))
        return lines

    bracket = generate_single_elimination_bracket(
        participants,
        best_of=scoring['best_of'],
        finals_best_of=scoring['finals_best_of'],
        seeding_method=bracket_settings['seeding_method'],
        rng=rng,
    )
    extras = []
    if bracket_settings['consolation_bracket']:
        bracket, consolation = generate_consolation_bracket(bracket, best_of=scoring['best_of'])
        extras.append(consolation)
    if bracket_settings['third_place_match']:
        bracket = add_third_place_match(bracket)

    lines = format_bracket(bracket)
    for extra in extras:
        if extra.rounds:
            lines.append('')
            lines.extend(format_bracket(extra))
    return lines


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Generate pools, brackets or round robin schedules'
    )
    parser.add_argument(
        'participants',
        help='YAML file with a singles or doubles participant list'
    )
    parser.add_argument(
        '--settings',
        help='YAML settings file (defaults apply for anything missing)'
    )
    parser.add_argument(
        '--format',
        choices=[f.value for f in TournamentFormat],
        help='Tournament format (default: bracket.format from settings)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        help='Random seed for random and hybrid seeding'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log debug output to stderr'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    try:
        participants = load_participants(args.participants)
        settings = load_settings(args.settings)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    tournament_format = TournamentFormat(args.format) if args.format else settings['bracket']['format']

    validation = validate_participant_count(len(participants), tournament_format)
    if not validation.valid:
        print(f"Warning: {validation.message}", file=sys.stderr)
    elif validation.message:
        logger.info(validation.message)

    rng = random.Random(args.seed) if args.seed is not None else None
    for line in generate(participants, tournament_format, settings, rng):
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(main())
