"""
Data model for tournaments and their single elimination brackets.

Matchups live in a flat list owned by the BracketTree; links between rounds
are stored as matchup ids (slot.source_matchup_id, matchup.parent_matchup_id)
and resolved through the tree's index.
"""
from datetime import datetime
from typing import Dict, Iterator, List, Optional

BYE_LABEL = 'BYE'


class MatchupStatus:
    UPCOMING = 'upcoming'
    ACTIVE = 'active'
    COMPLETED = 'completed'
    BYE = 'bye'

    ALL = (UPCOMING, ACTIVE, COMPLETED, BYE)
    OPEN = (UPCOMING, ACTIVE)


class TournamentStatus:
    UPCOMING = 'upcoming'
    ONGOING = 'ongoing'
    COMPLETED = 'completed'

    ALL = (UPCOMING, ONGOING, COMPLETED)


def make_matchup_id(round_number: int, position: int) -> str:
    """Matchup ids read like R1M1: round number, then 1-based position."""
    return f"R{round_number}M{position + 1}"


def placeholder_name(source_matchup_id: str) -> str:
    return f"Winner of {source_matchup_id}"


def now_iso() -> str:
    return datetime.now().isoformat(timespec='seconds')


class Participant:
    """A registered entrant. The submission is owned by the upload service."""

    def __init__(self, participant_id, display_name=None, submission=None):
        if participant_id is None or str(participant_id) == '':
            raise ValueError("Participant id is required")
        self._participant_id = str(participant_id)
        self._display_name = display_name if display_name else self._participant_id
        self._submission = dict(submission) if submission else None

    @property
    def participant_id(self) -> str:
        return self._participant_id

    @property
    def display_name(self) -> str:
        return self._display_name

    @property
    def submission(self) -> Optional[dict]:
        return dict(self._submission) if self._submission else None

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(self._participant_id)

    def __repr__(self):
        return f"Participant(id={self._participant_id}, name={self._display_name})"

    def to_dict(self) -> dict:
        data = {'id': self._participant_id, 'display_name': self._display_name}
        if self._submission:
            data['submission'] = dict(self._submission)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Participant':
        participant_id = data.get('id', data.get('participant_id'))
        return cls(participant_id, data.get('display_name'), data.get('submission'))


class Slot:
    """One of the two participant positions in a matchup."""

    def __init__(self, participant_id=None, source_matchup_id=None, display_name=None, score=0):
        self.participant_id = participant_id
        self.source_matchup_id = source_matchup_id
        self.display_name = display_name
        self.score = score

    @property
    def is_occupied(self) -> bool:
        return self.participant_id is not None

    @property
    def is_empty(self) -> bool:
        return self.participant_id is None

    def fill(self, participant: Participant) -> None:
        self.participant_id = participant.participant_id
        self.display_name = participant.display_name

    def __repr__(self):
        return (f"Slot(participant_id={self.participant_id}, "
                f"source_matchup_id={self.source_matchup_id})")

    def to_dict(self) -> dict:
        return {
            'participant_id': self.participant_id,
            'source_matchup_id': self.source_matchup_id,
            'display_name': self.display_name,
            'score': self.score,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Slot':
        return cls(
            participant_id=data.get('participant_id'),
            source_matchup_id=data.get('source_matchup_id'),
            display_name=data.get('display_name'),
            score=data.get('score', 0),
        )


class Matchup:
    def __init__(self, matchup_id: str, round_number: int, position: int,
                 slot_a: Optional[Slot] = None, slot_b: Optional[Slot] = None,
                 status: str = MatchupStatus.UPCOMING, winner_participant_id=None,
                 parent_matchup_id: Optional[str] = None, region=None,
                 decided_at: Optional[str] = None):
        self.matchup_id = matchup_id
        self.round_number = round_number
        self.position = position
        self.slot_a = slot_a if slot_a is not None else Slot()
        self.slot_b = slot_b if slot_b is not None else Slot()
        self.status = status
        self.winner_participant_id = winner_participant_id
        self.parent_matchup_id = parent_matchup_id
        self.region = region
        self.decided_at = decided_at

    @property
    def slots(self):
        return (self.slot_a, self.slot_b)

    @property
    def is_ready(self) -> bool:
        """Both slots hold real participants."""
        return self.slot_a.is_occupied and self.slot_b.is_occupied

    @property
    def is_final(self) -> bool:
        return self.parent_matchup_id is None

    @property
    def is_bye(self) -> bool:
        return self.status == MatchupStatus.BYE

    def occupants(self) -> List[str]:
        return [slot.participant_id for slot in self.slots if slot.is_occupied]

    def slot_for(self, participant_id) -> Optional[Slot]:
        for slot in self.slots:
            if slot.is_occupied and slot.participant_id == participant_id:
                return slot
        return None

    def fed_by(self, source_matchup_id: str) -> Optional[Slot]:
        """Slot whose back-reference points at the given matchup."""
        for slot in self.slots:
            if slot.source_matchup_id == source_matchup_id:
                return slot
        return None

    def __repr__(self):
        return (f"Matchup(id={self.matchup_id}, round={self.round_number}, "
                f"a={self.slot_a.participant_id}, b={self.slot_b.participant_id}, "
                f"status={self.status}, winner={self.winner_participant_id})")

    def to_dict(self) -> dict:
        return {
            'matchup_id': self.matchup_id,
            'round_number': self.round_number,
            'position': self.position,
            'slot_a': self.slot_a.to_dict(),
            'slot_b': self.slot_b.to_dict(),
            'status': self.status,
            'winner_participant_id': self.winner_participant_id,
            'parent_matchup_id': self.parent_matchup_id,
            'region': self.region,
            'decided_at': self.decided_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Matchup':
        return cls(
            matchup_id=data['matchup_id'],
            round_number=data['round_number'],
            position=data['position'],
            slot_a=Slot.from_dict(data.get('slot_a') or {}),
            slot_b=Slot.from_dict(data.get('slot_b') or {}),
            status=data.get('status', MatchupStatus.UPCOMING),
            winner_participant_id=data.get('winner_participant_id'),
            parent_matchup_id=data.get('parent_matchup_id'),
            region=data.get('region'),
            decided_at=data.get('decided_at'),
        )


class BracketTree:
    """All matchups of one bracket, round-major, with an id index."""

    def __init__(self, bracket_size: int, matchups: List[Matchup],
                 participants: Optional[List[Participant]] = None):
        self.bracket_size = bracket_size
        self.matchups = list(matchups)
        self.participants = list(participants) if participants else []
        self._index: Dict[str, Matchup] = {m.matchup_id: m for m in self.matchups}
        self._participant_index: Dict[str, Participant] = {
            p.participant_id: p for p in self.participants
        }

    @property
    def total_rounds(self) -> int:
        return self.bracket_size.bit_length() - 1

    def __iter__(self) -> Iterator[Matchup]:
        return iter(self.matchups)

    def __len__(self) -> int:
        return len(self.matchups)

    def __contains__(self, matchup_id) -> bool:
        return matchup_id in self._index

    def get(self, matchup_id) -> Optional[Matchup]:
        return self._index.get(matchup_id)

    def round(self, round_number: int) -> List[Matchup]:
        return [m for m in self.matchups if m.round_number == round_number]

    def rounds(self) -> List[List[Matchup]]:
        return [self.round(r) for r in range(1, self.total_rounds + 1)]

    @property
    def final(self) -> Matchup:
        return self.round(self.total_rounds)[0]

    def parent_of(self, matchup: Matchup) -> Optional[Matchup]:
        if matchup.parent_matchup_id is None:
            return None
        return self._index.get(matchup.parent_matchup_id)

    def participant(self, participant_id) -> Optional[Participant]:
        return self._participant_index.get(participant_id)

    @property
    def champion_id(self) -> Optional[str]:
        final = self.final
        if final.status == MatchupStatus.COMPLETED:
            return final.winner_participant_id
        return None

    def __repr__(self):
        return f"BracketTree(size={self.bracket_size}, matchups={len(self.matchups)})"

    def to_dict(self) -> dict:
        return {
            'bracket_size': self.bracket_size,
            'participants': [p.to_dict() for p in self.participants],
            'matchups': [m.to_dict() for m in self.matchups],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'BracketTree':
        return cls(
            bracket_size=data['bracket_size'],
            matchups=[Matchup.from_dict(m) for m in data.get('matchups', [])],
            participants=[Participant.from_dict(p) for p in data.get('participants', [])],
        )


class Tournament:
    """A tournament aggregate; it exclusively owns its bracket."""

    def __init__(self, tournament_id: str, creator_id: str, name: Optional[str] = None,
                 status: str = TournamentStatus.UPCOMING,
                 bracket: Optional[BracketTree] = None,
                 max_participants: Optional[int] = None,
                 created_at: Optional[str] = None,
                 started_at: Optional[str] = None,
                 completed_at: Optional[str] = None):
        self.tournament_id = tournament_id
        self.creator_id = creator_id
        self.name = name if name else tournament_id
        self.status = status
        self.bracket = bracket
        self.max_participants = max_participants
        self.created_at = created_at if created_at else now_iso()
        self.started_at = started_at
        self.completed_at = completed_at

    @property
    def champion_id(self) -> Optional[str]:
        if self.bracket is None:
            return None
        return self.bracket.champion_id

    def __repr__(self):
        return f"Tournament(id={self.tournament_id}, status={self.status})"

    def to_dict(self) -> dict:
        return {
            'tournament_id': self.tournament_id,
            'creator_id': self.creator_id,
            'name': self.name,
            'status': self.status,
            'max_participants': self.max_participants,
            'created_at': self.created_at,
            'started_at': self.started_at,
            'completed_at': self.completed_at,
            'bracket': self.bracket.to_dict() if self.bracket else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Tournament':
        bracket_data = data.get('bracket')
        return cls(
            tournament_id=data['tournament_id'],
            creator_id=data['creator_id'],
            name=data.get('name'),
            status=data.get('status', TournamentStatus.UPCOMING),
            bracket=BracketTree.from_dict(bracket_data) if bracket_data else None,
            max_participants=data.get('max_participants'),
            created_at=data.get('created_at'),
            started_at=data.get('started_at'),
            completed_at=data.get('completed_at'),
        )
