from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from scorekeeper.auth import admin_required, create_user, ensure_default_admin
from scorekeeper.models import User
from scorekeeper.services.games.errors import ValidationError

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the scorekeeper server!'})

@main.route('/users/add', methods=['POST'])
@admin_required
def add_user():
    data = request.get_json(silent=True) or {}
    try:
        user = create_user(
            data.get('username'),
            data.get('password'),
            name=data.get('name'),
            role=data.get('role') or 'player',
            avatar=data.get('avatar'),
        )
    except ValidationError as exc:
        return jsonify({'error': str(exc)}), 400

    return jsonify({'message': 'User created successfully', 'user': user.to_dict()}), 201

@main.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    if not data.get('username') or not data.get('password'):
        return jsonify({'error': 'Username and password required'}), 400

    # First login on an empty database creates the configured admin
    ensure_default_admin()

    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password')):
        login_user(user, remember=True)
        current_app.logger.info(f"[login] user={user.id}")
        return jsonify({'success': True, 'user': user.to_dict()})
    return jsonify({'error': 'Invalid credentials'}), 401

@main.route('/me')
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})

@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})
