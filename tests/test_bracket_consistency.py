"""
Tests for tree-to-display consistency.

The display projection is what renderers group by; it must agree with the
tree it was built from and with the round/region mapper.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.advancement import declare_winner
from bracket.display import bracket_display
from bracket.elimination import build_bracket_tree
from bracket.models import Tournament
from bracket.rounds import SUPPORTED_BRACKET_SIZES, display_round_label, region_index
from bracket.status import start_tournament


def _started(roster, size):
    tournament = Tournament('cup', 'creator')
    start_tournament(tournament, build_bracket_tree(roster, size))
    return tournament


class TestDisplayMatchesTree:

    @pytest.mark.parametrize('size', SUPPORTED_BRACKET_SIZES)
    def test_every_matchup_is_displayed_once(self, participants, size):
        tournament = _started(participants(size), size)
        view = bracket_display(tournament)['bracket']
        displayed = [m['matchup_id'] for r in view['rounds'] for m in r['matchups']]
        assert displayed == [m.matchup_id for m in tournament.bracket]
        assert len(set(displayed)) == size - 1

    @pytest.mark.parametrize('size', SUPPORTED_BRACKET_SIZES)
    def test_labels_and_regions_come_from_mapper(self, participants, size):
        tournament = _started(participants(size // 2 + 1), size)
        view = bracket_display(tournament)['bracket']
        for round_view in view['rounds']:
            for m in round_view['matchups']:
                assert m['label'] == display_round_label(size, m['round_number'])
                assert m['region'] == region_index(size, m['round_number'], m['position'])

    def test_flags_for_byes_and_placeholders(self, participants):
        view = bracket_display(_started(participants(5), 8))['bracket']
        first_round = view['rounds'][0]['matchups']
        assert [m['is_bye'] for m in first_round] == [True, True, True, False]
        assert [m['is_playable'] for m in first_round] == [False, False, False, True]

        semis = view['rounds'][1]['matchups']
        assert semis[0]['is_placeholder'] is False
        assert semis[1]['is_placeholder'] is True
        assert semis[1]['slot_b']['display_name'] == 'Winner of R1M4'
        assert view['matches_per_round'] == {'Top 8': 1, 'Semifinals': 2, 'Finals': 1}
        assert view['region_count'] == 4
        assert view['total_participants'] == 5

    def test_champion_shown_after_final(self, participants):
        tournament = _started(participants(2), 2)
        assert bracket_display(tournament)['bracket']['champion'] is None
        declare_winner(tournament, 'R1M1', 'P2', 'creator')
        view = bracket_display(tournament)
        assert view['status'] == 'completed'
        assert view['bracket']['champion']['display_name'] == 'Artist P2'

    def test_display_does_not_mutate(self, participants):
        tournament = _started(participants(6), 8)
        before = tournament.to_dict()
        bracket_display(tournament)
        assert tournament.to_dict() == before
