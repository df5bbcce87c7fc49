"""
Unit tests for round-1 seeding.

Seeding is by registration order: the earliest registrants take the byes,
everyone else is paired in order.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.errors import (
    DuplicateParticipantError,
    InvalidBracketSizeError,
    NotEnoughParticipantsError,
    TooManyParticipantsError,
)
from bracket.models import Participant
from bracket.seeding import calculate_byes, seed, seed_order


def _ids(slots):
    return [slot.participant_id for slot in slots]


class TestSeedOrder:
    """Tests for the slot-to-participant mapping."""

    def test_full_bracket_is_insertion_order(self):
        """Position i receives participant i when nobody gets a bye."""
        assert seed_order(8, 8) == [0, 1, 2, 3, 4, 5, 6, 7]
        assert seed_order(2, 2) == [0, 1]

    def test_byes_go_to_earliest_registrants(self):
        assert seed_order(5, 8) == [0, -1, 1, -1, 2, -1, 3, 4]
        assert seed_order(3, 4) == [0, -1, 1, 2]

    def test_half_full_bracket_is_all_byes(self):
        assert seed_order(4, 8) == [0, -1, 1, -1, 2, -1, 3, -1]

    def test_too_few_participants_leaves_empty_matchups(self):
        assert seed_order(3, 8) == [-1, -1, 0, -1, 1, -1, 2, -1]

    def test_calculate_byes(self):
        assert calculate_byes(8, 8) == 0
        assert calculate_byes(5, 8) == 3
        assert calculate_byes(12, 16) == 4


class TestSeed:
    """Tests for seed()."""

    def test_scenario_b_pairs_in_order(self, participants):
        """A vs B and C vs D in a full bracket of 4."""
        roster = [Participant(x) for x in 'ABCD']
        assert _ids(seed(roster, 4)) == ['A', 'B', 'C', 'D']

    def test_seed_with_byes(self, participants):
        slots = seed(participants(5), 8)
        assert len(slots) == 8
        assert _ids(slots) == ['P1', None, 'P2', None, 'P3', None, 'P4', 'P5']

    def test_seed_copies_display_names(self, participants):
        slots = seed(participants(2), 2)
        assert slots[0].display_name == 'Artist P1'
        assert slots[1].display_name == 'Artist P2'

    def test_seeded_slots_have_no_source(self, participants):
        assert all(slot.source_matchup_id is None for slot in seed(participants(4), 4))

    def test_seed_is_deterministic(self, participants):
        roster = participants(11)
        assert _ids(seed(roster, 16)) == _ids(seed(roster, 16))

    @pytest.mark.parametrize('size', [0, 1, 3, 12, 128, None, '8'])
    def test_invalid_bracket_size(self, participants, size):
        with pytest.raises(InvalidBracketSizeError):
            seed(participants(2), size)

    def test_too_many_participants(self, participants):
        with pytest.raises(TooManyParticipantsError) as exc_info:
            seed(participants(9), 8)
        assert exc_info.value.num_participants == 9
        assert exc_info.value.bracket_size == 8

    def test_not_enough_participants(self, participants):
        with pytest.raises(NotEnoughParticipantsError):
            seed(participants(1), 2)
        with pytest.raises(NotEnoughParticipantsError):
            seed([], 4)

    def test_duplicate_participants(self):
        with pytest.raises(DuplicateParticipantError) as exc_info:
            seed([Participant('a'), Participant('b'), Participant('a')], 4)
        assert exc_info.value.participant_id == 'a'

    def test_size_is_checked_before_roster(self, participants):
        """An unsupported size wins over a roster that is too large."""
        with pytest.raises(InvalidBracketSizeError):
            seed(participants(20), 12)
