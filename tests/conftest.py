"""
Shared pytest fixtures for bracket engine tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset (skips the every-size runs)
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
os.environ.setdefault('SECRET_KEY', 'test-secret-key')

from bracket.models import Participant, Tournament
from bracket.service import BracketService
from bracket.storage import YamlTournamentStore


def make_participants(count, prefix='P'):
    """Participants P1..Pn with display names and a track submission."""
    return [
        Participant(f"{prefix}{i}", f"Artist {prefix}{i}", {'title': f"Track {i}"})
        for i in range(1, count + 1)
    ]


@pytest.fixture
def participants():
    """Factory fixture: participants(5) -> [P1..P5]."""
    return make_participants


@pytest.fixture
def tournament():
    """An upcoming tournament created by 'creator'."""
    return Tournament('spring-cup', 'creator', name='Spring Cup')


@pytest.fixture
def store(tmp_path):
    return YamlTournamentStore(str(tmp_path / 'tournaments'), lock_timeout=5)


@pytest.fixture
def service(store):
    return BracketService(store)


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the Flask app at a temporary data directory."""
    import app as app_module

    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    return str(data_dir)


@pytest.fixture
def client(temp_data_dir):
    """Create a test client logged in as 'creator'."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        with client.session_transaction() as sess:
            sess['user'] = 'creator'
        yield client


@pytest.fixture
def anonymous_client(temp_data_dir):
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
