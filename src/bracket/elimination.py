"""
Single elimination bracket construction.

The whole tree is built up front: every matchup of every round exists from
the start, each later-round slot records which matchup feeds it, and first
round byes are resolved before the tree is handed back.
"""
import logging
from typing import Iterable, List, Optional

from .errors import InvalidBracketSizeError, MalformedBracketError
from .models import (
    BYE_LABEL,
    BracketTree,
    Matchup,
    MatchupStatus,
    Participant,
    make_matchup_id,
    placeholder_name,
)
from .rounds import calculate_bracket_size, matchups_in_round, region_index, total_rounds
from .seeding import seed, validate_participants

logger = logging.getLogger(__name__)


def _parent_position(position: int) -> int:
    return position // 2


def _create_empty_rounds(bracket_size: int) -> List[List[Matchup]]:
    """Create every matchup and wire each one to the slot it feeds."""
    rounds_count = total_rounds(bracket_size)
    rounds = []

    for round_number in range(1, rounds_count + 1):
        round_matchups = []
        for position in range(matchups_in_round(bracket_size, round_number)):
            round_matchups.append(Matchup(
                matchup_id=make_matchup_id(round_number, position),
                round_number=round_number,
                position=position,
                region=region_index(bracket_size, round_number, position),
            ))
        rounds.append(round_matchups)

    for round_matchups, next_round in zip(rounds, rounds[1:]):
        for matchup in round_matchups:
            parent = next_round[_parent_position(matchup.position)]
            slot = parent.slot_a if matchup.position % 2 == 0 else parent.slot_b
            slot.source_matchup_id = matchup.matchup_id
            slot.display_name = placeholder_name(matchup.matchup_id)
            matchup.parent_matchup_id = parent.matchup_id

    return rounds


def _advance_bye(matchup: Matchup, parent: Optional[Matchup], participant: Participant) -> None:
    matchup.status = MatchupStatus.BYE
    if parent is None:
        return
    target = parent.fed_by(matchup.matchup_id)
    target.fill(participant)
    if parent.is_ready:
        parent.status = MatchupStatus.ACTIVE


def build_bracket_tree(participants: Iterable[Participant],
                       bracket_size: Optional[int] = None) -> BracketTree:
    """
    Build a complete bracket for an ordered list of participants.

    bracket_size defaults to the next power of two that fits everyone. Raises
    InvalidBracketSizeError, TooManyParticipantsError, NotEnoughParticipantsError,
    DuplicateParticipantError or MalformedBracketError; nothing is returned
    half built.
    """
    roster = list(participants)
    if bracket_size is None:
        bracket_size = calculate_bracket_size(len(roster)) or 2
    roster = validate_participants(roster, bracket_size)
    by_id = {p.participant_id: p for p in roster}

    first_round_slots = seed(roster, bracket_size)
    rounds = _create_empty_rounds(bracket_size)
    index = {m.matchup_id: m for round_matchups in rounds for m in round_matchups}

    byes = 0
    for matchup in rounds[0]:
        matchup.slot_a = first_round_slots[2 * matchup.position]
        matchup.slot_b = first_round_slots[2 * matchup.position + 1]

        if matchup.is_ready:
            matchup.status = MatchupStatus.ACTIVE
            continue

        occupants = matchup.occupants()
        if not occupants:
            raise MalformedBracketError(
                f"Matchup {matchup.matchup_id} has no participants: "
                f"{len(roster)} participants cannot fill a bracket of {bracket_size}",
                matchup_id=matchup.matchup_id,
            )

        for slot in matchup.slots:
            if slot.is_empty:
                slot.display_name = BYE_LABEL
        parent = index.get(matchup.parent_matchup_id) if matchup.parent_matchup_id else None
        _advance_bye(matchup, parent, by_id[occupants[0]])
        byes += 1
        logger.debug("Bye in %s: %s advances", matchup.matchup_id, occupants[0])

    tree = BracketTree(
        bracket_size,
        [m for round_matchups in rounds for m in round_matchups],
        participants=roster,
    )
    logger.info("Built bracket of %d for %d participants (%d byes, %d matchups)",
                bracket_size, len(roster), byes, len(tree))
    return tree


def validate_bracket_tree(tree: BracketTree) -> BracketTree:
    """
    Check the structural invariants of a bracket.

    Raises MalformedBracketError describing the first violation found;
    returns the tree unchanged otherwise.
    """
    try:
        rounds_count = total_rounds(tree.bracket_size)
    except InvalidBracketSizeError as e:
        raise MalformedBracketError(f"Invalid bracket size {tree.bracket_size!r}") from e

    if len(tree) != tree.bracket_size - 1:
        raise MalformedBracketError(
            f"Bracket of {tree.bracket_size} has {len(tree)} matchups, "
            f"expected {tree.bracket_size - 1}"
        )

    feeds = {}
    for round_number in range(1, rounds_count + 1):
        round_matchups = tree.round(round_number)
        expected = matchups_in_round(tree.bracket_size, round_number)
        if len(round_matchups) != expected:
            raise MalformedBracketError(
                f"Round {round_number} has {len(round_matchups)} matchups, expected {expected}"
            )
        positions = sorted(m.position for m in round_matchups)
        if positions != list(range(expected)):
            raise MalformedBracketError(f"Round {round_number} has duplicate or missing positions")

        for matchup in round_matchups:
            _validate_matchup(matchup)
            if round_number == 1:
                continue
            for slot in matchup.slots:
                source = tree.get(slot.source_matchup_id)
                if source is None or source.round_number != round_number - 1:
                    raise MalformedBracketError(
                        f"Slot of {matchup.matchup_id} is fed by unknown matchup "
                        f"{slot.source_matchup_id!r}",
                        matchup_id=matchup.matchup_id,
                    )
                if source.matchup_id in feeds:
                    raise MalformedBracketError(
                        f"Matchup {source.matchup_id} feeds more than one slot",
                        matchup_id=source.matchup_id,
                    )
                if source.parent_matchup_id != matchup.matchup_id:
                    raise MalformedBracketError(
                        f"Matchup {source.matchup_id} does not point back to {matchup.matchup_id}",
                        matchup_id=source.matchup_id,
                    )
                feeds[source.matchup_id] = matchup.matchup_id

    for matchup in tree:
        if matchup.round_number < rounds_count and matchup.matchup_id not in feeds:
            raise MalformedBracketError(
                f"Matchup {matchup.matchup_id} feeds no slot", matchup_id=matchup.matchup_id
            )
    if tree.final.parent_matchup_id is not None:
        raise MalformedBracketError("The final matchup cannot have a parent")
    return tree


def _validate_matchup(matchup: Matchup) -> None:
    if matchup.status not in MatchupStatus.ALL:
        raise MalformedBracketError(
            f"Matchup {matchup.matchup_id} has unknown status {matchup.status!r}",
            matchup_id=matchup.matchup_id,
        )
    has_winner = matchup.winner_participant_id is not None
    if (matchup.status == MatchupStatus.COMPLETED) != has_winner:
        raise MalformedBracketError(
            f"Matchup {matchup.matchup_id} is {matchup.status} "
            f"with winner {matchup.winner_participant_id!r}",
            matchup_id=matchup.matchup_id,
        )
    if has_winner and matchup.winner_participant_id not in matchup.occupants():
        raise MalformedBracketError(
            f"Winner of {matchup.matchup_id} is not one of its participants",
            matchup_id=matchup.matchup_id,
        )
    if matchup.status == MatchupStatus.BYE and len(matchup.occupants()) != 1:
        raise MalformedBracketError(
            f"Bye matchup {matchup.matchup_id} must have exactly one participant",
            matchup_id=matchup.matchup_id,
        )
