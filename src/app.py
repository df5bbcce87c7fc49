"""
Flask JSON API for the bracket engine.
"""
import os
from datetime import timedelta
from filelock import FileLock
from flask import Flask, request, jsonify, session, g
from bracket.errors import BracketError
from bracket.display import bracket_display
from bracket.service import BracketService
from bracket.storage import YamlTournamentStore

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))
LOCK_TIMEOUT = float(os.environ.get('BRACKET_LOCK_TIMEOUT', '10'))


def load_secret_key(data_dir: str) -> bytes:
    """SECRET_KEY from the environment, else a key kept beside the tournament files."""
    configured = os.environ.get('SECRET_KEY')
    if configured:
        return configured.encode()
    os.makedirs(data_dir, exist_ok=True)
    key_path = os.path.join(data_dir, '.secret_key')
    # Workers starting together must agree on one key.
    with FileLock(key_path + '.lock', timeout=LOCK_TIMEOUT):
        if not os.path.exists(key_path):
            with open(key_path, 'wb') as f:
                f.write(os.urandom(24))
        with open(key_path, 'rb') as f:
            return f.read()


app.secret_key = load_secret_key(DATA_DIR)
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=30)

_services = {}


def get_service() -> BracketService:
    """Service for the current DATA_DIR (tests repoint DATA_DIR)."""
    service = _services.get(DATA_DIR)
    if service is None:
        service = BracketService(YamlTournamentStore(DATA_DIR, lock_timeout=LOCK_TIMEOUT))
        _services[DATA_DIR] = service
    return service


@app.before_request
def require_user():
    """Every API call acts on behalf of the logged-in user."""
    if request.endpoint in ('static', 'health', None):
        return
    # Reads are public; writes need a user.
    if request.method == 'GET':
        g.user = session.get('user')
        return
    if 'user' not in session:
        return jsonify({'error': 'Login required'}), 401
    g.user = session['user']


@app.errorhandler(BracketError)
def handle_bracket_error(error: BracketError):
    app.logger.warning(f'{request.method} {request.path} rejected: {error.message}')
    return jsonify(error.to_dict()), error.status_code


@app.errorhandler(ValueError)
def handle_value_error(error: ValueError):
    app.logger.warning(f'{request.method} {request.path} bad request: {error}')
    return jsonify({'error': str(error)}), 400


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError('Request body must be a JSON object')
    return data


@app.route('/health')
def health():
    return jsonify({'status': 'ok'})


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """Create an upcoming tournament owned by the current user."""
    data = _json_body()
    tournament_id = data.get('tournament_id')
    if not tournament_id:
        return jsonify({'error': 'Missing tournament_id'}), 400

    tournament = get_service().create_tournament(
        tournament_id, g.user, name=data.get('name'), max_participants=data.get('max_participants')
    )
    return jsonify(bracket_display(tournament)), 201


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['GET'])
def api_get_bracket(tournament_id):
    return jsonify(get_service().get_bracket(tournament_id))


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['POST'])
def api_build_bracket(tournament_id):
    """Close registration and build the bracket."""
    data = _json_body()
    participants = data.get('participants')
    if not isinstance(participants, list):
        return jsonify({'error': 'participants must be a list'}), 400

    # Sizes are checked as sent: 8.0 or "8" is not a bracket size.
    service = get_service()
    service.build_bracket(tournament_id, participants,
                          bracket_size=data.get('bracket_size'), actor_id=g.user)
    app.logger.info(f'Bracket built for {tournament_id} by {g.user}')
    return jsonify(service.get_bracket(tournament_id)), 201


@app.route('/api/tournaments/<tournament_id>/matchups/<matchup_id>/winner', methods=['POST'])
def api_declare_winner(tournament_id, matchup_id):
    """Declare the winner of a matchup."""
    data = _json_body()
    winner = data.get('winner_participant_id')
    if not winner:
        return jsonify({'error': 'Missing winner_participant_id'}), 400

    service = get_service()
    service.declare_winner(tournament_id, matchup_id, winner, g.user, score=data.get('score'))
    return jsonify(service.get_bracket(tournament_id))


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
