from functools import wraps

from flask import current_app, jsonify
from flask_login import current_user, login_required

from scorekeeper import db
from scorekeeper.models import User, naive_utc, utcnow
from scorekeeper.services.games.errors import ValidationError
from scorekeeper.services.roster import ADMIN_AVATAR, PlayerStore

ROLES = ('admin', 'player')


def admin_required(view):
    """Login required, and the user must be an admin."""

    @wraps(view)
    @login_required
    def wrapped(*args, **kwargs):
        if not current_user.is_admin():
            return jsonify({'success': False, 'error': 'Admin access required'}), 403
        return view(*args, **kwargs)

    return wrapped


def create_user(username, password, name=None, role='player', user_id=None, avatar=None):
    """Create a login and the roster player that shares its id."""
    username = (username or '').strip()
    if not username or not password:
        raise ValidationError('Missing username or password')
    if role not in ROLES:
        raise ValidationError(f'Unknown role: {role}')
    if User.query.filter_by(username=username).first():
        raise ValidationError('Username already exists')

    user = User(username=username, name=(name or username).strip(), role=role, created_at=naive_utc(utcnow()))
    if user_id:
        user.id = user_id
    user.set_password(password)
    db.session.add(user)
    db.session.flush()

    roster = PlayerStore(db.session)
    if roster.get_player(user.id) is None:
        roster.add_player(user.name, avatar=avatar, player_id=user.id)
    else:
        db.session.commit()
    current_app.logger.info(f"[user] created user={user.id} username={user.username} role={role}")
    return user


def ensure_default_admin():
    """Seed the configured admin when nobody can log in yet."""
    existing = User.query.filter_by(role='admin').first()
    if existing or User.query.count():
        return existing
    cfg = current_app.config
    return create_user(
        cfg['INITIAL_ADMIN_USERNAME'],
        cfg['INITIAL_ADMIN_PASSWORD'],
        name=cfg.get('INITIAL_ADMIN_NAME', 'Admin'),
        role='admin',
        user_id='admin-1',
        avatar=ADMIN_AVATAR,
    )
