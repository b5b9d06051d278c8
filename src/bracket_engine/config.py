"""
Tournament settings stored as YAML.

Missing keys fall back to the defaults below, so a settings file only needs
the values that differ.
"""
import copy
import logging
import os
from enum import Enum

import yaml

from .models import CrossPoolSeeding, SeedingMethod, TiebreakerRule, TournamentFormat

logger = logging.getLogger(__name__)


def get_default_settings():
    """Return default settings."""
    return {
        'scoring': {
            'points_to_win': 11,
            'win_by': 2,
            'max_points': None,
            'best_of': 1,
            'finals_best_of': 3,
        },
        'pool_play': {
            'number_of_pools': None,
            'target_pool_size': 4,
            'advancement_count': 2,
            'tiebreakers': ['head_to_head', 'point_differential', 'points_for'],
            'seeding_method': 'snake',
        },
        'bracket': {
            'format': 'single_elimination',
            'third_place_match': False,
            'consolation_bracket': False,
            'seeding_method': 'rating',
            'cross_pool_seeding': 'standard',
        },
    }


def merge_settings(data):
    """Merge a partial settings dict over the defaults, section by section."""
    settings = get_default_settings()
    for section, values in (data or {}).items():
        if values is None:
            continue
        if isinstance(values, dict) and isinstance(settings.get(section), dict):
            settings[section].update(values)
        else:
            settings[section] = values
    return settings


def settings_enums(settings):
    """
    Convert the string values in settings to their enum types.

    Returns a new dict. Raises ValueError naming the offending key for
    values that are not a known option.
    """
    converted = copy.deepcopy(settings)
    fields = [
        ('pool_play', 'seeding_method', SeedingMethod),
        ('bracket', 'format', TournamentFormat),
        ('bracket', 'seeding_method', SeedingMethod),
        ('bracket', 'cross_pool_seeding', CrossPoolSeeding),
    ]
    for section, key, enum_type in fields:
        value = converted[section][key]
        try:
            converted[section][key] = enum_type(value)
        except ValueError:
            raise ValueError(f"Invalid {section}.{key}: {value!r}")

    tiebreakers = []
    for rule in converted['pool_play']['tiebreakers'] or []:
        try:
            tiebreakers.append(TiebreakerRule(rule))
        except ValueError:
            raise ValueError(f"Invalid pool_play.tiebreakers entry: {rule!r}")
    converted['pool_play']['tiebreakers'] = tiebreakers
    return converted


def load_settings(path):
    """Load settings from a YAML file, merging with defaults."""
    if not path or not os.path.exists(path):
        return settings_enums(get_default_settings())
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.warning(f'Failed to parse {path}: {e}')
            data = None
    if not isinstance(data, dict):
        return settings_enums(get_default_settings())
    return settings_enums(merge_settings(data))


def _plain(value):
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, Enum):
        return value.value
    return value


def save_settings(settings, path):
    """Save settings to YAML file."""
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(_plain(settings), f, default_flow_style=False)
