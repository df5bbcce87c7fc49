"""
Read-only projection of a tournament's bracket for renderers.
"""
from typing import Dict, List

from .models import BracketTree, Matchup, MatchupStatus, Slot, Tournament
from .rounds import display_round_label, region_count


def _slot_display(slot: Slot) -> Dict:
    return {
        'participant_id': slot.participant_id,
        'display_name': slot.display_name,
        'score': slot.score,
        'source_matchup_id': slot.source_matchup_id,
    }


def matchup_display(bracket: BracketTree, matchup: Matchup) -> Dict:
    """Flatten one matchup, adding its label and layout flags."""
    return {
        'matchup_id': matchup.matchup_id,
        'round_number': matchup.round_number,
        'position': matchup.position,
        'label': display_round_label(bracket.bracket_size, matchup.round_number),
        'region': matchup.region,
        'slot_a': _slot_display(matchup.slot_a),
        'slot_b': _slot_display(matchup.slot_b),
        'status': matchup.status,
        'winner_participant_id': matchup.winner_participant_id,
        'decided_at': matchup.decided_at,
        'is_bye': matchup.status == MatchupStatus.BYE,
        'is_placeholder': matchup.round_number > 1 and not matchup.is_ready,
        'is_playable': matchup.status == MatchupStatus.ACTIVE,
    }


def rounds_display(bracket: BracketTree) -> List[Dict]:
    rounds = []
    for round_number, round_matchups in enumerate(bracket.rounds(), start=1):
        rounds.append({
            'round_number': round_number,
            'label': display_round_label(bracket.bracket_size, round_number),
            'matchups': [matchup_display(bracket, m) for m in round_matchups],
        })
    return rounds


def bracket_display(tournament: Tournament) -> Dict:
    """
    Get bracket data formatted for display.

    The bracket key is None until the tournament has started.
    """
    data = {
        'tournament_id': tournament.tournament_id,
        'name': tournament.name,
        'status': tournament.status,
        'creator_id': tournament.creator_id,
        'bracket': None,
    }
    bracket = tournament.bracket
    if bracket is None:
        return data

    rounds = rounds_display(bracket)
    matches_per_round = {
        r['label']: sum(1 for m in r['matchups'] if not m['is_bye']) for r in rounds
    }
    champion_id = bracket.champion_id
    champion = bracket.participant(champion_id) if champion_id else None

    data['bracket'] = {
        'bracket_size': bracket.bracket_size,
        'total_rounds': bracket.total_rounds,
        'region_count': region_count(bracket.bracket_size),
        'total_participants': len(bracket.participants),
        'byes': sum(1 for m in bracket.round(1) if m.status == MatchupStatus.BYE),
        'matches_per_round': matches_per_round,
        'rounds': rounds,
        'champion': champion.to_dict() if champion else None,
    }
    return data
