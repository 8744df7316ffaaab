from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .errors import ValidationError


class Variant(str, Enum):
    RUMMY = 'rummy'
    CHESS = 'chess'
    ACE = 'ace'

    @property
    def label(self) -> str:
        return self.value.capitalize()


class GameStatus(str, Enum):
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


def parse_variant(value: Any) -> Variant:
    if isinstance(value, Variant):
        return value
    try:
        return Variant(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f'Unknown game type: {value}') from None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class PlayerStats:
    """A roster player with aggregate results across every game."""

    id: str
    name: str
    avatar: str = '👤'
    wins: int = 0
    total_games: int = 0
    win_percentage: int = 0
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'avatar': self.avatar,
            'wins': self.wins,
            'total_games': self.total_games,
            'win_percentage': self.win_percentage,
            'created_at': format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlayerStats':
        return cls(
            id=str(data['id']),
            name=data.get('name') or '',
            avatar=data.get('avatar') or '👤',
            wins=int(data.get('wins') or 0),
            total_games=int(data.get('total_games') or 0),
            win_percentage=int(data.get('win_percentage') or 0),
            created_at=parse_timestamp(data.get('created_at')),
        )


@dataclass
class GamePlayer:
    id: str
    name: str
    avatar: str
    total_points: int = 0
    is_lost: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'avatar': self.avatar,
            'total_points': self.total_points,
            'is_lost': self.is_lost,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GamePlayer':
        return cls(
            id=str(data['id']),
            name=data.get('name') or '',
            avatar=data.get('avatar') or '👤',
            total_points=int(data.get('total_points') or 0),
            is_lost=bool(data.get('is_lost')),
        )


@dataclass
class Round:
    id: str
    round_number: int
    scores: Dict[str, int]
    timestamp: datetime
    kind = 'round'

    def score_for(self, player_id: str) -> int:
        return self.scores.get(player_id, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'kind': self.kind,
            'round_number': self.round_number,
            'scores': dict(self.scores),
            'timestamp': format_timestamp(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Round':
        return cls(
            id=str(data['id']),
            round_number=int(data['round_number']),
            scores={str(k): int(v) for k, v in (data.get('scores') or {}).items()},
            timestamp=parse_timestamp(data.get('timestamp')),
        )


@dataclass
class PlayerJoinedEvent:
    id: str
    timestamp: datetime
    player_id: str
    player_name: str
    player_avatar: str
    starting_points: int
    kind = 'player_added'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'kind': self.kind,
            'timestamp': format_timestamp(self.timestamp),
            'player_id': self.player_id,
            'player_name': self.player_name,
            'player_avatar': self.player_avatar,
            'starting_points': self.starting_points,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlayerJoinedEvent':
        return cls(
            id=str(data['id']),
            timestamp=parse_timestamp(data.get('timestamp')),
            player_id=str(data['player_id']),
            player_name=data.get('player_name') or '',
            player_avatar=data.get('player_avatar') or '👤',
            starting_points=int(data.get('starting_points') or 0),
        )


Event = Union[Round, PlayerJoinedEvent]


def event_from_dict(data: Dict[str, Any]) -> Event:
    kind = data.get('kind', Round.kind)
    if kind == PlayerJoinedEvent.kind:
        return PlayerJoinedEvent.from_dict(data)
    if kind == Round.kind:
        return Round.from_dict(data)
    raise ValidationError(f'Unknown history event: {kind}')


@dataclass
class Outcome:
    """Result of a ledger mutation.

    ``persisted`` is False when the change was applied but could not be
    written; the caller still gets the updated game and should warn.
    """

    success: bool
    game: Optional[Any] = None
    error: Optional[str] = None
    persisted: bool = True

    @classmethod
    def ok(cls, game, persisted: bool = True) -> 'Outcome':
        return cls(success=True, game=game, persisted=persisted)

    @classmethod
    def fail(cls, reason: str, game=None) -> 'Outcome':
        return cls(success=False, game=game, error=reason)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {'success': self.success, 'persisted': self.persisted}
        if self.error:
            payload['error'] = self.error
        if self.game is not None:
            payload['game'] = self.game.to_dict()
        if self.success and not self.persisted:
            payload['warning'] = 'Changes could not be saved, they will be lost on reload'
        return payload


@dataclass
class LeaderboardEntry:
    id: str
    name: str
    avatar: str
    wins: int = 0
    total_games: int = 0
    win_percentage: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'avatar': self.avatar,
            'wins': self.wins,
            'total_games': self.total_games,
            'win_percentage': self.win_percentage,
        }


History = List[Event]
ScoreMap = Dict[str, int]
