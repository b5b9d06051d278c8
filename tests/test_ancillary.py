"""
Unit tests for third place matches and consolation brackets.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket_engine.models import BracketType, MatchStatus
from bracket_engine.elimination import generate_single_elimination_bracket
from bracket_engine.ancillary import (
    add_third_place_match,
    generate_consolation_bracket,
    get_consolation_round_name,
    THIRD_PLACE_IDENTIFIER,
)
from bracket_engine.results import record_match_result, record_linked_result


def ids(match):
    return (
        match.participant1.id if match.participant1 else None,
        match.participant2.id if match.participant2 else None,
    )


class TestThirdPlaceMatch:
    """Tests for add_third_place_match."""

    def test_bronze_match_added_to_final_round(self, make_singles):
        """The bronze match sits beside the final and takes both semifinal losers."""
        bracket = generate_single_elimination_bracket(make_singles([4.0, 3.0, 2.0, 1.0]))
        with_bronze = add_third_place_match(bracket)
        final_round = with_bronze.rounds[-1]
        assert len(final_round.matches) == 2
        bronze = with_bronze.third_place_match()
        assert bronze.match_identifier == THIRD_PLACE_IDENTIFIER
        assert bronze.position == 1
        assert bronze.round == with_bronze.total_rounds
        for semifinal in with_bronze.rounds[-2].matches:
            assert semifinal.loser_goes_to.match_id == bronze.id
        assert with_bronze.final_match().match_identifier == "F"

    def test_original_not_changed(self, make_singles):
        """Adding a bronze match copies the bracket."""
        bracket = generate_single_elimination_bracket(make_singles([4.0, 3.0, 2.0, 1.0]))
        add_third_place_match(bracket)
        assert len(bracket.rounds[-1].matches) == 1
        assert all(m.loser_goes_to is None for m in bracket.matches.values())

    def test_full_podium(self, make_singles, win_for):
        """Champion, runner-up and third place are all filled once everything is played."""
        bracket = add_third_place_match(generate_single_elimination_bracket(make_singles([4.0, 3.0, 2.0, 1.0])))
        for semifinal in bracket.rounds[0].matches:
            bracket = record_match_result(bracket, semifinal.id, win_for(1))
        bronze = bracket.third_place_match()
        assert ids(bronze) == ("p4", "p3")
        assert not bracket.is_complete

        bracket = record_match_result(bracket, bracket.final_match().id, win_for(1))
        assert not bracket.is_complete
        bracket = record_match_result(bracket, bronze.id, win_for(2))
        assert bracket.is_complete
        assert bracket.champion.id == "p1"
        assert bracket.runner_up.id == "p2"
        assert bracket.third_place.id == "p3"

    def test_added_after_semifinal_played(self, make_singles, win_for):
        """Losers of semifinals already played are placed immediately."""
        bracket = generate_single_elimination_bracket(make_singles([4.0, 3.0, 2.0, 1.0]))
        bracket = record_match_result(bracket, bracket.rounds[0].matches[0].id, win_for(1))
        bracket = add_third_place_match(bracket)
        assert ids(bracket.third_place_match()) == ("p4", None)

    def test_bye_semifinal_leaves_bronze_to_other_loser(self, make_singles, win_for):
        """With three entrants the only semifinal loser takes third place."""
        bracket = add_third_place_match(generate_single_elimination_bracket(make_singles([3.0, 2.0, 1.0])))
        bronze = bracket.third_place_match()
        assert bronze.is_bye
        real_semifinal = [m for m in bracket.rounds[0].matches if not m.is_bye][0]
        bracket = record_match_result(bracket, real_semifinal.id, win_for(1))
        bronze = bracket.third_place_match()
        assert bronze.status == MatchStatus.COMPLETED
        bracket = record_match_result(bracket, bracket.final_match().id, win_for(1))
        assert bracket.is_complete
        assert bracket.third_place.id == "p3"

    def test_too_small_unchanged(self, make_singles):
        """A one-round bracket has no semifinals."""
        bracket = generate_single_elimination_bracket(make_singles([2.0, 1.0]))
        assert add_third_place_match(bracket) is bracket

    def test_adding_twice_is_noop(self, make_singles):
        """A second call leaves the bracket alone."""
        bracket = add_third_place_match(generate_single_elimination_bracket(make_singles([4.0, 3.0, 2.0, 1.0])))
        assert add_third_place_match(bracket) is bracket


class TestConsolationBracket:
    """Tests for generate_consolation_bracket."""

    def test_eight_participants(self, seeded_eight):
        """Four first-round losers play a two-round consolation bracket."""
        main, consolation = generate_consolation_bracket(generate_single_elimination_bracket(seeded_eight))
        assert consolation.type == BracketType.CONSOLATION
        assert consolation.total_rounds == 2
        assert [len(r.matches) for r in consolation.rounds] == [2, 1]
        assert consolation.rounds[0].name == "Consolation Semifinals"
        assert consolation.rounds[-1].matches[0].match_identifier == "CF"
        for index, match in enumerate(main.rounds[0].matches):
            destination = match.loser_goes_to
            assert destination.bracket_id == consolation.id
            assert destination.match_id == consolation.rounds[0].matches[index // 2].id
            assert destination.slot == index % 2 + 1

    def test_linked_results_feed_consolation(self, seeded_eight, win_for):
        """First-round losers land in consolation when both brackets are recorded together."""
        main, consolation = generate_consolation_bracket(generate_single_elimination_bracket(seeded_eight))
        first_round = main.rounds[0].matches
        brackets = [main, consolation]
        for match in first_round[:2]:
            brackets = record_linked_result(brackets, match.id, win_for(1))
        main, consolation = brackets
        assert ids(consolation.rounds[0].matches[0]) == ("p8", "p5")

    def test_main_only_recording_skips_consolation(self, seeded_eight, win_for):
        """Recording on the main bracket alone still works; the consolation slot is not touched."""
        main, consolation = generate_consolation_bracket(generate_single_elimination_bracket(seeded_eight))
        updated = record_match_result(main, main.rounds[0].matches[0].id, win_for(1))
        assert updated.rounds[1].matches[0].participant1.id == "p1"
        assert consolation.rounds[0].matches[0].participant1 is None

    def test_byes_shrink_consolation(self, make_singles, win_for):
        """With five entrants the single first-round loser wins consolation outright."""
        main, consolation = generate_consolation_bracket(
            generate_single_elimination_bracket(make_singles([5.0, 4.0, 3.0, 2.0, 1.0])))
        assert consolation.rounds[0].matches[1].status == MatchStatus.BYE
        real = [m for m in main.rounds[0].matches if not m.is_bye][0]
        main, consolation = record_linked_result([main, consolation], real.id, win_for(1))
        assert consolation.is_complete
        assert consolation.champion.id == "p5"

    def test_too_few_first_round_matches(self, make_singles):
        """A single first-round match gives an empty consolation bracket."""
        bracket = generate_single_elimination_bracket(make_singles([2.0, 1.0]))
        main, consolation = generate_consolation_bracket(bracket)
        assert main is bracket
        assert consolation.matches == {}
        assert consolation.is_complete

    def test_third_place_and_consolation_conflict(self, make_singles):
        """In a four-entrant bracket the semifinals are the first round, so only one extra fits."""
        bracket = generate_single_elimination_bracket(make_singles([4.0, 3.0, 2.0, 1.0]))
        main, consolation = generate_consolation_bracket(bracket)
        assert add_third_place_match(main) is main

        with_bronze = add_third_place_match(bracket)
        main, consolation = generate_consolation_bracket(with_bronze)
        assert main is with_bronze
        assert consolation.matches == {}


def test_consolation_round_name():
    """Consolation rounds are prefixed."""
    assert get_consolation_round_name(2, 2) == "Consolation Finals"
