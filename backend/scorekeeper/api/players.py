from flask import Blueprint, jsonify, request
from scorekeeper import db
from scorekeeper.auth import admin_required
from scorekeeper.services.games.errors import ValidationError
from scorekeeper.services.games.scoring import rank_players
from scorekeeper.services.games.types import PlayerStats
from scorekeeper.services.roster import PlayerStore


players = Blueprint('players', __name__)


@players.errorhandler(ValidationError)
def _validation_failed(exc):
    return jsonify({'success': False, 'error': str(exc)}), 400


@players.route('', methods=['GET'])
def list_players():
    """Roster with stats. Public: the dashboard shows it before login."""
    return jsonify([p.to_dict() for p in PlayerStore(db.session).list_players()])


@players.route('/leaderboard', methods=['GET'])
def leaderboard():
    ranked = rank_players(PlayerStore(db.session).list_players())
    return jsonify([p.to_dict() for p in ranked])


@players.route('', methods=['POST'])
@admin_required
def add_player():
    data = request.get_json(silent=True) or {}
    player = PlayerStore(db.session).add_player(data.get('name'), avatar=data.get('avatar'))
    return jsonify({'success': True, 'player': player.to_dict()}), 201


@players.route('', methods=['PUT'])
@admin_required
def replace_players():
    data = request.get_json(silent=True)
    if not isinstance(data, list):
        return jsonify({'success': False, 'error': 'Expected a list of players'}), 400
    try:
        roster = [PlayerStats.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f'Malformed player: {exc}') from exc
    if not PlayerStore(db.session).replace_all_players(roster):
        return jsonify({'success': False, 'error': 'Save failed'}), 500
    return jsonify({'success': True, 'count': len(roster)})
