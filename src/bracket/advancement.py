"""
Winner declaration and advancement.

A declared winner is written to the matchup and deposited into the slot of
the next round that the matchup feeds. Validation runs to completion before
anything is written, so a failed call leaves the tournament untouched.
"""
import logging
from typing import List, Optional, Sequence

from .errors import (
    InvalidWinnerError,
    MatchupAlreadyDecidedError,
    MatchupNotFoundError,
    MatchupNotReadyError,
    UnauthorizedActorError,
)
from .models import BracketTree, Matchup, MatchupStatus, Tournament, now_iso
from .status import complete_tournament, require_active

logger = logging.getLogger(__name__)


def _check_declaration(tournament: Tournament, matchup_id: str, winner_participant_id,
                       actor_id) -> Matchup:
    """Run every precondition in order and return the target matchup."""
    tournament_id = tournament.tournament_id

    if actor_id is None or str(actor_id) != str(tournament.creator_id):
        raise UnauthorizedActorError(actor_id, tournament_id, matchup_id)

    require_active(tournament)

    matchup = tournament.bracket.get(matchup_id)
    if matchup is None:
        raise MatchupNotFoundError(matchup_id, tournament_id)

    if matchup.status not in MatchupStatus.OPEN:
        raise MatchupAlreadyDecidedError(matchup_id, tournament_id, matchup.status)

    if not matchup.is_ready:
        raise MatchupNotReadyError(matchup_id, tournament_id)

    if matchup.slot_for(winner_participant_id) is None:
        raise InvalidWinnerError(winner_participant_id, matchup_id, tournament_id)

    return matchup


def _parse_score(score: Optional[Sequence]):
    if score is None:
        return None
    if not isinstance(score, (list, tuple)) or len(score) != 2:
        raise ValueError("Score must be a pair of numbers")
    try:
        return int(score[0]), int(score[1])
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid score {score!r}") from e


def declare_winner(tournament: Tournament, matchup_id: str, winner_participant_id,
                   actor_id, score: Optional[Sequence] = None) -> BracketTree:
    """
    Record the winner of a matchup and advance them.

    Preconditions are checked in this order: actor is the creator, the
    tournament is ongoing, the matchup exists and is still open, both slots
    are occupied, and the winner is one of the occupants. The optional score
    is a (slot_a, slot_b) pair kept for display.

    Returns the updated bracket.
    """
    if winner_participant_id is not None:
        winner_participant_id = str(winner_participant_id)
    matchup = _check_declaration(tournament, matchup_id, winner_participant_id, actor_id)
    scores = _parse_score(score)
    bracket = tournament.bracket
    parent = bracket.parent_of(matchup)
    target = parent.fed_by(matchup.matchup_id) if parent is not None else None

    # All checks passed; nothing below can fail.
    matchup.winner_participant_id = winner_participant_id
    matchup.status = MatchupStatus.COMPLETED
    matchup.decided_at = now_iso()
    if scores is not None:
        matchup.slot_a.score, matchup.slot_b.score = scores

    winning_slot = matchup.slot_for(winner_participant_id)
    logger.info("Tournament %s: %s won %s", tournament.tournament_id,
                winner_participant_id, matchup.matchup_id)

    if target is not None:
        target.participant_id = winner_participant_id
        target.display_name = winning_slot.display_name
        if parent.is_ready and parent.status == MatchupStatus.UPCOMING:
            parent.status = MatchupStatus.ACTIVE
            logger.debug("Matchup %s is now active", parent.matchup_id)
    else:
        complete_tournament(tournament)

    return bracket


def playable_matchups(bracket: BracketTree) -> List[Matchup]:
    """Matchups waiting only for a winner, in round order."""
    return [m for m in bracket if m.status == MatchupStatus.ACTIVE]


def pending_matchups(bracket: BracketTree) -> List[Matchup]:
    """Matchups still waiting for at least one participant."""
    return [m for m in bracket if m.status == MatchupStatus.UPCOMING]
