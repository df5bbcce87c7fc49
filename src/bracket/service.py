"""
Tournament-level operations: build, read and advance a bracket by id.

Mutations are serialized per tournament for the whole load, validate, write
sequence: a thread lock inside the process and the store's file lock across
processes. Reads take no lock; the store only ever exposes complete files.
"""
import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Dict, Iterable, Optional, Sequence, Union

from .advancement import declare_winner as advance_winner
from .elimination import build_bracket_tree, validate_bracket_tree
from .display import bracket_display
from .errors import (
    BracketAlreadyBuiltError,
    BracketError,
    MalformedBracketError,
    TooManyParticipantsError,
    TournamentExistsError,
    UnauthorizedActorError,
)
from .models import BracketTree, Participant, Tournament, TournamentStatus
from .status import derive_status, start_tournament
from .storage import YamlTournamentStore, validate_tournament_id

logger = logging.getLogger(__name__)


def to_participant(entry: Union[Participant, Dict]) -> Participant:
    if isinstance(entry, Participant):
        return entry
    if isinstance(entry, dict):
        return Participant.from_dict(entry)
    raise ValueError(f"Cannot read participant from {entry!r}")


class BracketService:
    def __init__(self, store: YamlTournamentStore):
        self.store = store
        # Entries vanish once no writer holds the lock.
        self._locks = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _thread_lock(self, tournament_id: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(tournament_id)
            if lock is None:
                lock = self._locks[tournament_id] = threading.RLock()
            return lock

    @contextmanager
    def _writing(self, tournament_id: str):
        """Hold both locks for one tournament."""
        validate_tournament_id(tournament_id)
        lock = self._thread_lock(tournament_id)
        with lock:
            with self.store.lock(tournament_id):
                yield

    def _load(self, tournament_id: str) -> Tournament:
        tournament = self.store.load(tournament_id)
        if tournament.bracket is not None:
            validate_bracket_tree(tournament.bracket)
        if derive_status(tournament) != tournament.status:
            raise MalformedBracketError(
                f"Tournament {tournament_id!r} is stored as {tournament.status} "
                f"but its bracket says {derive_status(tournament)}",
                tournament_id=tournament_id,
            )
        return tournament

    def create_tournament(self, tournament_id: str, creator_id: str, name: Optional[str] = None,
                          max_participants: Optional[int] = None) -> Tournament:
        """Register an upcoming tournament with no bracket."""
        if not creator_id:
            raise ValueError("Tournament creator is required")
        if max_participants is not None and (
                isinstance(max_participants, bool) or not isinstance(max_participants, int)
                or max_participants < 2):
            raise ValueError(f"max_participants must be a whole number of at least 2, got {max_participants!r}")
        with self._writing(tournament_id):
            if self.store.exists(tournament_id):
                raise TournamentExistsError(tournament_id)
            tournament = Tournament(tournament_id, str(creator_id), name=name,
                                    max_participants=max_participants)
            self.store.save(tournament)
        logger.info("Created tournament %s for %s", tournament_id, creator_id)
        return tournament

    def get_tournament(self, tournament_id: str) -> Tournament:
        return self._load(validate_tournament_id(tournament_id))

    def build_bracket(self, tournament_id: str, participants: Iterable,
                      bracket_size: Optional[int] = None,
                      actor_id: Optional[str] = None) -> BracketTree:
        """
        Close registration: build the bracket and start the tournament.

        Errors carry the tournament id. Nothing is stored unless the whole
        bracket was built.
        """
        roster = [to_participant(p) for p in participants]
        with self._writing(tournament_id):
            tournament = self._load(tournament_id)
            if actor_id is not None and str(actor_id) != tournament.creator_id:
                raise UnauthorizedActorError(actor_id, tournament_id)
            if tournament.bracket is not None or tournament.status != TournamentStatus.UPCOMING:
                raise BracketAlreadyBuiltError(tournament_id)
            if tournament.max_participants and len(roster) > tournament.max_participants:
                raise TooManyParticipantsError(len(roster), tournament.max_participants, tournament_id)

            try:
                bracket = build_bracket_tree(roster, bracket_size)
            except BracketError as e:
                if e.tournament_id is None:
                    e.tournament_id = tournament_id
                raise

            start_tournament(tournament, bracket)
            self.store.save(tournament)
        return bracket

    def get_bracket(self, tournament_id: str) -> Dict:
        """Display projection of the bracket; read only."""
        return bracket_display(self.get_tournament(tournament_id))

    def declare_winner(self, tournament_id: str, matchup_id: str, winner_participant_id,
                       actor_id, score: Optional[Sequence] = None) -> BracketTree:
        with self._writing(tournament_id):
            tournament = self._load(tournament_id)
            bracket = advance_winner(tournament, matchup_id, winner_participant_id,
                                     actor_id, score=score)
            self.store.save(tournament)
        return bracket
