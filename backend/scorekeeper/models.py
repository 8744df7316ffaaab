from scorekeeper import db, bcrypt
from flask_login import UserMixin
from datetime import datetime, timezone
import json
import uuid


def utcnow():
    return datetime.now(timezone.utc)


def naive_utc(value):
    """Columns store naive UTC so SQLite and PostgreSQL round-trip the same value."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def aware_utc(value):
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def new_id():
    return uuid.uuid4().hex


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.String(64), primary_key=True, default=new_id)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    name = db.Column(db.String(64), nullable=False)
    role = db.Column(db.String(16), nullable=False, default='player')  # admin, player
    created_at = db.Column(db.DateTime, default=lambda: naive_utc(utcnow()))

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name,
            'role': self.role,
            'created_at': aware_utc(self.created_at).isoformat() if self.created_at else None,
        }


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.String(64), primary_key=True, default=new_id)
    name = db.Column(db.String(64), nullable=False)
    avatar = db.Column(db.String(16), nullable=False, default='👤')
    wins = db.Column(db.Integer, nullable=False, default=0)
    total_games = db.Column(db.Integer, nullable=False, default=0)
    win_percentage = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=lambda: naive_utc(utcnow()))


class RummyGameRecord(db.Model):
    __tablename__ = 'rummy_game'
    id = db.Column(db.String(64), primary_key=True)
    title = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False, default='in_progress')  # in_progress, completed
    winner = db.Column(db.String(64), nullable=True)
    max_points = db.Column(db.Integer, nullable=False)
    players_json = db.Column(db.Text, nullable=False, default='[]')
    rounds_json = db.Column(db.Text, nullable=False, default='[]')
    history_json = db.Column(db.Text, nullable=True)  # NULL on games saved before join events existed
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}


class ChessGameRecord(db.Model):
    __tablename__ = 'chess_game'
    id = db.Column(db.String(64), primary_key=True)
    title = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False, default='in_progress')
    winner = db.Column(db.String(64), nullable=True)
    player1_id = db.Column(db.String(64), nullable=False)
    player1_name = db.Column(db.String(64), nullable=False)
    player1_avatar = db.Column(db.String(16), nullable=False)
    player2_id = db.Column(db.String(64), nullable=False)
    player2_name = db.Column(db.String(64), nullable=False)
    player2_avatar = db.Column(db.String(16), nullable=False)
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}


class AceGameRecord(db.Model):
    __tablename__ = 'ace_game'
    id = db.Column(db.String(64), primary_key=True)
    title = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False, default='in_progress')
    winners = db.Column(db.Text, nullable=True)  # JSON-encoded list of player ids
    players_json = db.Column(db.Text, nullable=False, default='[]')
    rounds_json = db.Column(db.Text, nullable=False, default='[]')
    history_json = db.Column(db.Text, nullable=True)
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}

    @property
    def winner_ids(self):
        return json.loads(self.winners) if self.winners else []
