"""
Tournament status transitions: upcoming -> ongoing -> completed.

These are the only transitions. Starting happens once, when the bracket is
built; completion happens once, when the final is decided.
"""
import logging

from .errors import BracketAlreadyBuiltError, TournamentNotActiveError
from .models import BracketTree, MatchupStatus, Tournament, TournamentStatus, now_iso

logger = logging.getLogger(__name__)


def start_tournament(tournament: Tournament, bracket: BracketTree) -> Tournament:
    """Attach the bracket and move an upcoming tournament to ongoing."""
    if tournament.bracket is not None or tournament.status != TournamentStatus.UPCOMING:
        raise BracketAlreadyBuiltError(tournament.tournament_id)

    tournament.bracket = bracket
    tournament.status = TournamentStatus.ONGOING
    tournament.started_at = now_iso()
    logger.info("Tournament %s is ongoing (bracket of %d)",
                tournament.tournament_id, bracket.bracket_size)
    return tournament


def complete_tournament(tournament: Tournament) -> Tournament:
    """Move an ongoing tournament whose final has been decided to completed."""
    require_active(tournament)
    if tournament.bracket.final.status != MatchupStatus.COMPLETED:
        raise TournamentNotActiveError(tournament.tournament_id, tournament.status)

    tournament.status = TournamentStatus.COMPLETED
    tournament.completed_at = now_iso()
    logger.info("Tournament %s completed, champion %s",
                tournament.tournament_id, tournament.bracket.champion_id)
    return tournament


def require_active(tournament: Tournament) -> None:
    if tournament.status != TournamentStatus.ONGOING or tournament.bracket is None:
        raise TournamentNotActiveError(tournament.tournament_id, tournament.status)


def derive_status(tournament: Tournament) -> str:
    """Status implied by the bracket alone."""
    if tournament.bracket is None:
        return TournamentStatus.UPCOMING
    if tournament.bracket.final.status == MatchupStatus.COMPLETED:
        return TournamentStatus.COMPLETED
    return TournamentStatus.ONGOING
