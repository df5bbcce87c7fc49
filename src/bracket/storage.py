"""
YAML file storage for tournaments.

One file per tournament. Writes go to a temporary file that replaces the
real one, so a reader always sees either the old or the new tournament.
"""
import logging
import os
import re
import tempfile
from typing import List

import yaml
from filelock import FileLock

from .errors import MalformedBracketError, TournamentNotFoundError
from .models import Tournament

logger = logging.getLogger(__name__)

TOURNAMENT_ID_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_-]*$')
DEFAULT_LOCK_TIMEOUT = 10


def validate_tournament_id(tournament_id) -> str:
    """Tournament ids double as file names."""
    if not isinstance(tournament_id, str) or not TOURNAMENT_ID_PATTERN.match(tournament_id):
        raise ValueError(
            f"Invalid tournament id {tournament_id!r}: use letters, numbers, hyphens, underscores"
        )
    return tournament_id


class YamlTournamentStore:
    def __init__(self, data_dir: str, lock_timeout: float = DEFAULT_LOCK_TIMEOUT):
        self.data_dir = data_dir
        self.lock_timeout = lock_timeout
        os.makedirs(self.data_dir, exist_ok=True)

    def _path(self, tournament_id: str) -> str:
        return os.path.join(self.data_dir, f"{validate_tournament_id(tournament_id)}.yaml")

    def lock(self, tournament_id: str) -> FileLock:
        """Cross-process lock held for a whole read-modify-write."""
        return FileLock(self._path(tournament_id) + '.lock', timeout=self.lock_timeout)

    def exists(self, tournament_id: str) -> bool:
        return os.path.exists(self._path(tournament_id))

    def load(self, tournament_id: str) -> Tournament:
        """Load a tournament from YAML."""
        path = self._path(tournament_id)
        if not os.path.exists(path):
            raise TournamentNotFoundError(tournament_id)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
            if not data:
                raise MalformedBracketError(f"Empty tournament file {path}", tournament_id=tournament_id)
            return Tournament.from_dict(data)
        except (yaml.YAMLError, KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning("Failed to parse %s: %s", path, e)
            raise MalformedBracketError(
                f"Could not read tournament file {path}: {e}", tournament_id=tournament_id
            ) from e

    def save(self, tournament: Tournament) -> None:
        """Save a tournament to YAML, replacing the previous file atomically."""
        path = self._path(tournament.tournament_id)
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix='.tmp-', suffix='.yaml')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                yaml.safe_dump(tournament.to_dict(), f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def list_ids(self) -> List[str]:
        ids = []
        for name in sorted(os.listdir(self.data_dir)):
            if name.endswith('.yaml') and not name.startswith('.'):
                ids.append(name[:-len('.yaml')])
        return ids
