"""
Error taxonomy for bracket construction and progression.

Every error is terminal for the call that raised it: nothing has been
mutated when one of these propagates to the caller.
"""
from typing import Optional


class BracketError(Exception):
    """Base class for all bracket engine failures."""

    code = 'bracket_error'
    status_code = 400

    def __init__(self, message: str, tournament_id: Optional[str] = None,
                 matchup_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.tournament_id = tournament_id
        self.matchup_id = matchup_id

    def to_dict(self) -> dict:
        data = {'error': self.message, 'code': self.code}
        if self.tournament_id is not None:
            data['tournament_id'] = self.tournament_id
        if self.matchup_id is not None:
            data['matchup_id'] = self.matchup_id
        return data


# Construction errors

class InvalidBracketSizeError(BracketError):
    code = 'invalid_bracket_size'

    def __init__(self, bracket_size, tournament_id: Optional[str] = None):
        super().__init__(
            f"Unsupported bracket size {bracket_size!r}: must be one of 2, 4, 8, 16, 32, 64",
            tournament_id=tournament_id,
        )
        self.bracket_size = bracket_size


class TooManyParticipantsError(BracketError):
    code = 'too_many_participants'

    def __init__(self, num_participants: int, bracket_size: int,
                 tournament_id: Optional[str] = None):
        super().__init__(
            f"{num_participants} participants do not fit in a bracket of {bracket_size}",
            tournament_id=tournament_id,
        )
        self.num_participants = num_participants
        self.bracket_size = bracket_size


class NotEnoughParticipantsError(BracketError):
    code = 'not_enough_participants'

    def __init__(self, num_participants: int, tournament_id: Optional[str] = None):
        super().__init__(
            f"At least 2 participants are required, got {num_participants}",
            tournament_id=tournament_id,
        )
        self.num_participants = num_participants


class DuplicateParticipantError(BracketError):
    code = 'duplicate_participant'

    def __init__(self, participant_id: str, tournament_id: Optional[str] = None):
        super().__init__(
            f"Participant {participant_id!r} appears more than once",
            tournament_id=tournament_id,
        )
        self.participant_id = participant_id


class MalformedBracketError(BracketError):
    code = 'malformed_bracket'
    status_code = 422


class BracketAlreadyBuiltError(BracketError):
    code = 'bracket_already_built'
    status_code = 409

    def __init__(self, tournament_id: Optional[str] = None):
        super().__init__(
            f"Bracket for tournament {tournament_id!r} has already been built",
            tournament_id=tournament_id,
        )


# Tournament lookup and lifecycle errors

class TournamentNotFoundError(BracketError):
    code = 'tournament_not_found'
    status_code = 404

    def __init__(self, tournament_id: Optional[str] = None):
        super().__init__(f"Tournament {tournament_id!r} not found", tournament_id=tournament_id)


class TournamentExistsError(BracketError):
    code = 'tournament_exists'
    status_code = 409

    def __init__(self, tournament_id: Optional[str] = None):
        super().__init__(f"Tournament {tournament_id!r} already exists", tournament_id=tournament_id)


class TournamentNotActiveError(BracketError):
    code = 'tournament_not_active'
    status_code = 409

    def __init__(self, tournament_id: Optional[str] = None, status: Optional[str] = None):
        super().__init__(
            f"Tournament {tournament_id!r} is not ongoing (status: {status})",
            tournament_id=tournament_id,
        )
        self.status = status


# Advancement errors

class UnauthorizedActorError(BracketError):
    code = 'unauthorized_actor'
    status_code = 403

    def __init__(self, actor_id, tournament_id: Optional[str] = None,
                 matchup_id: Optional[str] = None):
        super().__init__(
            f"User {actor_id!r} is not the creator of tournament {tournament_id!r}",
            tournament_id=tournament_id,
            matchup_id=matchup_id,
        )
        self.actor_id = actor_id


class MatchupNotFoundError(BracketError):
    code = 'matchup_not_found'
    status_code = 404

    def __init__(self, matchup_id: Optional[str] = None, tournament_id: Optional[str] = None):
        super().__init__(
            f"Matchup {matchup_id!r} not found in tournament {tournament_id!r}",
            tournament_id=tournament_id,
            matchup_id=matchup_id,
        )


class MatchupAlreadyDecidedError(BracketError):
    code = 'matchup_already_decided'
    status_code = 409

    def __init__(self, matchup_id: Optional[str] = None, tournament_id: Optional[str] = None,
                 status: Optional[str] = None):
        super().__init__(
            f"Matchup {matchup_id!r} is already decided (status: {status})",
            tournament_id=tournament_id,
            matchup_id=matchup_id,
        )
        self.status = status


class MatchupNotReadyError(BracketError):
    code = 'matchup_not_ready'
    status_code = 409

    def __init__(self, matchup_id: Optional[str] = None, tournament_id: Optional[str] = None):
        super().__init__(
            f"Matchup {matchup_id!r} is still waiting for a participant",
            tournament_id=tournament_id,
            matchup_id=matchup_id,
        )


class InvalidWinnerError(BracketError):
    code = 'invalid_winner'

    def __init__(self, winner_participant_id, matchup_id: Optional[str] = None,
                 tournament_id: Optional[str] = None):
        super().__init__(
            f"Participant {winner_participant_id!r} is not playing in matchup {matchup_id!r}",
            tournament_id=tournament_id,
            matchup_id=matchup_id,
        )
        self.winner_participant_id = winner_participant_id
