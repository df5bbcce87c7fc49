"""
Seeding: place an ordered participant list into round-1 slots.

Seeding follows registration order, with no skill rating involved. When the
bracket is not full, the earliest registrants receive the byes, the same way
a higher seed gets the bye in a seeded draw; everyone else is paired in order.

For 5 participants in a bracket of 8:
    M1: P1 vs BYE, M2: P2 vs BYE, M3: P3 vs BYE, M4: P4 vs P5
"""
from typing import Iterable, List

from .errors import (
    DuplicateParticipantError,
    NotEnoughParticipantsError,
    TooManyParticipantsError,
)
from .models import Participant, Slot
from .rounds import require_supported_size


def calculate_byes(num_participants: int, bracket_size: int) -> int:
    """Calculate number of byes needed."""
    return max(0, bracket_size - num_participants)


def validate_participants(participants: Iterable[Participant], bracket_size: int) -> List[Participant]:
    """Check the roster against the bracket size and return it as a list."""
    require_supported_size(bracket_size)
    roster = list(participants)

    if len(roster) > bracket_size:
        raise TooManyParticipantsError(len(roster), bracket_size)
    if len(roster) < 2:
        raise NotEnoughParticipantsError(len(roster))

    seen = set()
    for participant in roster:
        if participant.participant_id in seen:
            raise DuplicateParticipantError(participant.participant_id)
        seen.add(participant.participant_id)
    return roster


def seed_order(num_participants: int, bracket_size: int) -> List[int]:
    """
    Participant index for each round-1 slot, or -1 for an empty slot.

    Slots are listed M1.a, M1.b, M2.a, M2.b, ...
    """
    byes = calculate_byes(num_participants, bracket_size)
    order = []
    next_participant = 0

    for matchup_index in range(bracket_size // 2):
        if matchup_index < byes:
            # More byes than matchups leaves the leading matchups with nobody.
            if matchup_index + bracket_size // 2 < byes:
                order.extend([-1, -1])
            else:
                order.extend([next_participant, -1])
                next_participant += 1
        else:
            order.extend([next_participant, next_participant + 1])
            next_participant += 2
    return order


def seed(participants: Iterable[Participant], bracket_size: int) -> List[Slot]:
    """
    Seed participants into the round-1 slots of a bracket.

    Returns bracket_size slots in M1.a, M1.b, M2.a, ... order. Empty slots
    are byes. Raises InvalidBracketSizeError, TooManyParticipantsError,
    NotEnoughParticipantsError or DuplicateParticipantError.
    """
    roster = validate_participants(participants, bracket_size)

    slots = []
    for index in seed_order(len(roster), bracket_size):
        slot = Slot()
        if index >= 0:
            slot.fill(roster[index])
        slots.append(slot)
    return slots
