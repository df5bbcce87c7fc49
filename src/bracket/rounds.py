"""
Round and region mapping for bracket display.

Pure functions of the bracket size: they decide where a matchup is shown,
never what it contains.
"""
import math
from typing import List, Union

from .errors import InvalidBracketSizeError

SUPPORTED_BRACKET_SIZES = (2, 4, 8, 16, 32, 64)

# Labels for a 64 bracket; smaller brackets use the tail of this list.
ROUND_LABELS = ("Round 1", "Round 2", "Round 3", "Top 8", "Semifinals", "Finals")

FINAL_FOUR = "final_four"
CHAMPIONSHIP = "championship"

REGIONS_FOR_LARGE_BRACKETS = 4


def is_supported_bracket_size(bracket_size) -> bool:
    """Check whether a bracket of this size can be built."""
    return isinstance(bracket_size, int) and not isinstance(bracket_size, bool) \
        and bracket_size in SUPPORTED_BRACKET_SIZES


def require_supported_size(bracket_size) -> None:
    if not is_supported_bracket_size(bracket_size):
        raise InvalidBracketSizeError(bracket_size)


def calculate_bracket_size(num_participants: int) -> int:
    """Calculate the bracket size (next power of 2, at least 2)."""
    if num_participants <= 0:
        return 0
    return max(2, 2 ** math.ceil(math.log2(num_participants)))


def total_rounds(bracket_size: int) -> int:
    """Number of rounds in a bracket: log2 of its size."""
    require_supported_size(bracket_size)
    return int(math.log2(bracket_size))


def matchups_in_round(bracket_size: int, round_number: int) -> int:
    """Number of matchups played in a round (round 1 is the first)."""
    rounds = total_rounds(bracket_size)
    if not 1 <= round_number <= rounds:
        raise ValueError(f"Round {round_number} is outside a {rounds}-round bracket")
    return bracket_size // (2 ** round_number)


def region_count(bracket_size: int) -> int:
    """
    Number of display regions.

    Brackets of 8 and more are split into quarters. A 4 bracket is a single
    region and a 2 bracket, being only the final, has none.
    """
    require_supported_size(bracket_size)
    if bracket_size >= 8:
        return REGIONS_FOR_LARGE_BRACKETS
    if bracket_size == 4:
        return 1
    return 0


def region_index(bracket_size: int, round_number: int, position: int) -> Union[int, str]:
    """
    Region a matchup is displayed in.

    Returns an integer region while the round still has at least one matchup
    per region, FINAL_FOUR for the rounds after regions have merged, and
    CHAMPIONSHIP for the final.
    """
    count = matchups_in_round(bracket_size, round_number)
    if not 0 <= position < count:
        raise ValueError(f"Position {position} is outside round {round_number} ({count} matchups)")

    if round_number == total_rounds(bracket_size):
        return CHAMPIONSHIP

    regions = region_count(bracket_size)
    if count < regions:
        return FINAL_FOUR
    if regions <= 1:
        return 0
    return position // (count // regions)


def display_round_label(bracket_size: int, round_number: int) -> str:
    """Human label for a round; the last round is always "Finals"."""
    rounds = total_rounds(bracket_size)
    if not 1 <= round_number <= rounds:
        raise ValueError(f"Round {round_number} is outside a {rounds}-round bracket")
    return ROUND_LABELS[len(ROUND_LABELS) - rounds + round_number - 1]


def round_labels(bracket_size: int) -> List[str]:
    """All round labels of a bracket, first round first."""
    return list(ROUND_LABELS[len(ROUND_LABELS) - total_rounds(bracket_size):])
