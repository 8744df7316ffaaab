import logging
import random
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from scorekeeper import db
from scorekeeper.models import Player, aware_utc, naive_utc, new_id, utcnow
from scorekeeper.services.games.errors import ValidationError
from scorekeeper.services.games.types import PlayerStats

log = logging.getLogger(__name__)

AVATARS = ['🦸', '🦹', '🕷️', '🦇', '⚡', '💪', '🔥', '⭐', '🎯', '🏆', '👊', '🛡️', '⚔️', '🎪', '🎭', '🎬']
ADMIN_AVATAR = '👑'


def _to_stats(row: Player) -> PlayerStats:
    return PlayerStats(
        id=row.id,
        name=row.name,
        avatar=row.avatar,
        wins=row.wins or 0,
        total_games=row.total_games or 0,
        win_percentage=row.win_percentage or 0,
        created_at=aware_utc(row.created_at),
    )


def _fill(row: Player, stats: PlayerStats) -> None:
    row.name = stats.name
    row.avatar = stats.avatar
    row.wins = stats.wins
    row.total_games = stats.total_games
    row.win_percentage = stats.win_percentage
    if stats.created_at is not None:
        row.created_at = naive_utc(stats.created_at)


class PlayerStore:
    """The roster and its aggregate stats."""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def list_players(self) -> List[PlayerStats]:
        rows = self.session.query(Player).order_by(Player.created_at, Player.id).all()
        return [_to_stats(r) for r in rows]

    def get_player(self, player_id: str) -> Optional[PlayerStats]:
        row = self.session.get(Player, player_id)
        return _to_stats(row) if row else None

    def add_player(self, name: str, avatar: Optional[str] = None, player_id: Optional[str] = None) -> PlayerStats:
        name = (name or '').strip()
        if not name:
            raise ValidationError('Player name is required')
        player_id = player_id or new_id()
        if self.session.get(Player, player_id) is not None:
            raise ValidationError(f'Player {player_id} already exists')
        row = Player(
            id=player_id,
            name=name,
            avatar=avatar or random.choice(AVATARS),
            created_at=naive_utc(utcnow()),
        )
        self.session.add(row)
        self.session.commit()
        log.info(f"[roster] added player={row.id} name={row.name}")
        return _to_stats(row)

    def upsert_players(self, players: Iterable[PlayerStats]) -> bool:
        try:
            for stats in players:
                row = self.session.get(Player, stats.id)
                if row is None:
                    row = Player(id=stats.id)
                    self.session.add(row)
                _fill(row, stats)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.error(f"[roster-fail] upsert error={exc}")
            return False
        return True

    def replace_all_players(self, players: Iterable[PlayerStats]) -> bool:
        """Make the roster exactly ``players``; later duplicates of an id win."""
        unique: Dict[str, PlayerStats] = {}
        for stats in players:
            unique[stats.id] = stats
        try:
            existing = {row.id: row for row in self.session.query(Player).all()}
            for player_id, row in existing.items():
                if player_id not in unique:
                    self.session.delete(row)
            for stats in unique.values():
                row = existing.get(stats.id)
                if row is None:
                    row = Player(id=stats.id, created_at=naive_utc(utcnow()))
                    self.session.add(row)
                _fill(row, stats)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.error(f"[roster-fail] replace_all players={len(unique)} error={exc}")
            return False
        log.info(f"[roster] replaced roster count={len(unique)}")
        return True
