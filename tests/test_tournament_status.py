"""
Unit tests for tournament status transitions.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.advancement import declare_winner
from bracket.elimination import build_bracket_tree
from bracket.errors import BracketAlreadyBuiltError, TournamentNotActiveError
from bracket.models import Participant, TournamentStatus
from bracket.status import complete_tournament, derive_status, require_active, start_tournament


class TestStartTournament:
    """upcoming -> ongoing"""

    def test_start_attaches_bracket(self, tournament, participants):
        bracket = build_bracket_tree(participants(4))
        start_tournament(tournament, bracket)
        assert tournament.status == TournamentStatus.ONGOING
        assert tournament.bracket is bracket
        assert tournament.started_at

    def test_start_twice_fails(self, tournament, participants):
        start_tournament(tournament, build_bracket_tree(participants(4)))
        original = tournament.bracket
        with pytest.raises(BracketAlreadyBuiltError) as exc_info:
            start_tournament(tournament, build_bracket_tree(participants(8)))
        assert exc_info.value.tournament_id == 'spring-cup'
        assert tournament.bracket is original

    def test_start_completed_tournament_fails(self, tournament, participants):
        tournament.status = TournamentStatus.COMPLETED
        with pytest.raises(BracketAlreadyBuiltError):
            start_tournament(tournament, build_bracket_tree(participants(2)))


class TestCompleteTournament:
    """ongoing -> completed"""

    def test_requires_decided_final(self, tournament, participants):
        start_tournament(tournament, build_bracket_tree(participants(4)))
        with pytest.raises(TournamentNotActiveError):
            complete_tournament(tournament)
        assert tournament.status == TournamentStatus.ONGOING

    def test_upcoming_cannot_complete(self, tournament):
        with pytest.raises(TournamentNotActiveError):
            complete_tournament(tournament)

    def test_final_completes_tournament(self, tournament):
        start_tournament(tournament, build_bracket_tree([Participant('a'), Participant('b')]))
        declare_winner(tournament, 'R1M1', 'b', 'creator')
        assert tournament.status == TournamentStatus.COMPLETED
        with pytest.raises(TournamentNotActiveError):
            complete_tournament(tournament)


class TestRequireActive:
    def test_upcoming(self, tournament):
        with pytest.raises(TournamentNotActiveError) as exc_info:
            require_active(tournament)
        assert exc_info.value.status == TournamentStatus.UPCOMING

    def test_ongoing(self, tournament, participants):
        start_tournament(tournament, build_bracket_tree(participants(2)))
        require_active(tournament)


class TestDeriveStatus:
    def test_follows_bracket(self, tournament):
        assert derive_status(tournament) == TournamentStatus.UPCOMING
        start_tournament(tournament, build_bracket_tree([Participant('a'), Participant('b')]))
        assert derive_status(tournament) == TournamentStatus.ONGOING
        declare_winner(tournament, 'R1M1', 'a', 'creator')
        assert derive_status(tournament) == TournamentStatus.COMPLETED
