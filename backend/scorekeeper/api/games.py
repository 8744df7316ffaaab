from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required
from scorekeeper import db, socketio
from scorekeeper.auth import admin_required
from scorekeeper.services.games import GameLedger, Outcome, ValidationError
from scorekeeper.services.games.errors import GAME_CHANGED, GAME_NOT_FOUND
from scorekeeper.services.games.scoring import newest_first, variant_leaderboard
from scorekeeper.services.games.storage import GameStore
from scorekeeper.services.games.types import parse_variant
from scorekeeper.services.games.variants import AceGame, game_from_dict
from scorekeeper.services.roster import PlayerStore
from scorekeeper.socketio_events import game_room


games = Blueprint('games', __name__)


def _ledger() -> GameLedger:
    return GameLedger(
        GameStore(db.session),
        PlayerStore(db.session),
        sequence=current_app.extensions['daily_sequence'],
        default_max_points=current_app.config.get('DEFAULT_RUMMY_MAX_POINTS', 120),
    )


def _as_int(value):
    # Form-ish clients send numbers as strings
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value)
    return value


def _notify(game_id: str) -> None:
    socketio.emit('state_update', {'game_id': game_id}, to=game_room(game_id), namespace='/ws')
    socketio.emit('games_changed', {'game_id': game_id}, namespace='/ws')


def _respond(outcome: Outcome, created: bool = False):
    if not outcome.success:
        if outcome.error == GAME_NOT_FOUND:
            status = 404
        elif outcome.error == GAME_CHANGED:
            status = 409
        else:
            status = 400
        current_app.logger.info(f"[rejected] status={status} reason={outcome.error!r}")
        return jsonify(outcome.to_dict()), status
    _notify(outcome.game.id)
    return jsonify(outcome.to_dict()), 201 if created else 200


@games.errorhandler(ValidationError)
def _validation_failed(exc):
    return jsonify({'success': False, 'error': str(exc)}), 400


@games.route('', methods=['GET'])
@login_required
def list_games():
    """All games, newest first. Optional ``variant`` and ``status`` filters."""
    found = _ledger().list_games()
    variant = request.args.get('variant')
    if variant:
        kind = parse_variant(variant)
        found = [g for g in found if g.variant == kind]
    status = request.args.get('status')
    if status:
        found = [g for g in found if g.status.value == status]
    return jsonify([g.to_dict() for g in newest_first(found)])


@games.route('', methods=['PUT'])
@admin_required
def replace_games():
    """Replace the whole collection (bulk import from older clients)."""
    data = request.get_json(silent=True)
    if not isinstance(data, list):
        return jsonify({'success': False, 'error': 'Expected a list of games'}), 400
    parsed = [game_from_dict(item) for item in data]
    if not GameStore(db.session).replace_all_games(parsed):
        return jsonify({'success': False, 'error': 'Save failed'}), 500
    socketio.emit('games_changed', {'game_id': None}, namespace='/ws')
    return jsonify({'success': True, 'count': len(parsed)})


@games.route('/recent', methods=['GET'])
@login_required
def recent_games():
    limit = current_app.config.get('RECENT_GAMES_LIMIT', 10)
    return jsonify([g.to_dict() for g in newest_first(_ledger().list_games(), limit)])


@games.route('/leaderboard', methods=['GET'])
@login_required
def leaderboard():
    kind = parse_variant(request.args.get('variant', 'rummy'))
    size = current_app.config.get('LEADERBOARD_SIZE', 5)
    entries = variant_leaderboard(_ledger().list_games(), kind, limit=size)
    return jsonify({'variant': kind.value, 'players': [e.to_dict() for e in entries]})


@games.route('/create', methods=['POST'])
@admin_required
def create_game():
    data = request.get_json(silent=True) or {}
    outcome = _ledger().create_game(
        data.get('game_type') or data.get('variant'),
        data.get('player_ids') or [],
        _as_int(data.get('max_points')),
    )
    return _respond(outcome, created=True)


@games.route('/<string:game_id>', methods=['GET'])
@login_required
def get_game(game_id):
    game = _ledger().get_game(game_id)
    if game is None:
        return jsonify({'success': False, 'error': GAME_NOT_FOUND}), 404
    return jsonify(game.to_dict())


@games.route('/<string:game_id>/history', methods=['GET'])
@login_required
def get_history(game_id):
    game = _ledger().get_game(game_id)
    if game is None:
        return jsonify({'success': False, 'error': GAME_NOT_FOUND}), 404
    return jsonify([e.to_dict() for e in game.timeline()])


@games.route('/<string:game_id>/leaders', methods=['GET'])
@login_required
def get_ace_leaders(game_id):
    """Players tied on the most points: the default winner selection for Ace."""
    game = _ledger().get_game(game_id)
    if game is None:
        return jsonify({'success': False, 'error': GAME_NOT_FOUND}), 404
    if not isinstance(game, AceGame):
        return jsonify({'success': False, 'error': 'Only Ace games have leaders'}), 400
    return jsonify({'winner_ids': GameLedger.suggest_ace_winners(game)})


@games.route('/<string:game_id>/rounds', methods=['POST'])
@admin_required
def add_round(game_id):
    data = request.get_json(silent=True) or {}
    scores = data.get('scores')
    if isinstance(scores, dict):
        scores = {str(k): _as_int(v) for k, v in scores.items()}
    return _respond(_ledger().add_round(game_id, scores if scores is not None else {}))


@games.route('/<string:game_id>/ace', methods=['POST'])
@admin_required
def mark_ace_loser(game_id):
    data = request.get_json(silent=True) or {}
    loser_id = data.get('loser_id')
    if not loser_id:
        return jsonify({'success': False, 'error': 'loser_id is required'}), 400
    return _respond(_ledger().mark_ace_loser(game_id, str(loser_id)))


@games.route('/<string:game_id>/players', methods=['POST'])
@admin_required
def add_player(game_id):
    data = request.get_json(silent=True) or {}
    player_id = data.get('player_id')
    if not player_id:
        return jsonify({'success': False, 'error': 'player_id is required'}), 400
    return _respond(_ledger().add_player_to_game(game_id, str(player_id)))


@games.route('/<string:game_id>/winner', methods=['POST'])
@admin_required
def declare_winner(game_id):
    data = request.get_json(silent=True) or {}
    winner_id = data.get('winner_id')
    if not winner_id:
        return jsonify({'success': False, 'error': 'winner_id is required'}), 400
    return _respond(_ledger().declare_winner(game_id, str(winner_id)))


@games.route('/<string:game_id>/winners', methods=['POST'])
@admin_required
def declare_winners(game_id):
    data = request.get_json(silent=True) or {}
    winner_ids = data.get('winner_ids') or []
    if not isinstance(winner_ids, list):
        return jsonify({'success': False, 'error': 'winner_ids must be a list'}), 400
    return _respond(_ledger().declare_ace_winners(game_id, winner_ids))
