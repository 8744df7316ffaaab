"""Game variants as a closed set of dataclasses.

``Game`` holds what every variant shares; ``RummyGame``, ``ChessGame`` and
``AceGame`` add their own fields and answer the rule questions the ledger
asks (who may join, at how many points, what a round does, who won).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Type

from .errors import CHESS_NO_ROUNDS, CHESS_ROSTER_FIXED, ROSTER_FROZEN, ValidationError
from .types import (
    Event,
    GamePlayer,
    GameStatus,
    PlayerJoinedEvent,
    Round,
    Variant,
    event_from_dict,
    format_timestamp,
    parse_timestamp,
    parse_variant,
)


@dataclass
class Game:
    id: str
    title: str
    created_at: datetime
    status: GameStatus = GameStatus.IN_PROGRESS
    players: List[GamePlayer] = field(default_factory=list)
    rounds: List[Round] = field(default_factory=list)
    history: List[Event] = field(default_factory=list)
    winner: Optional[str] = None
    version: int = 0

    variant: ClassVar[Variant]
    min_players: ClassVar[int] = 2
    max_players: ClassVar[Optional[int]] = None

    @property
    def is_completed(self) -> bool:
        return self.status == GameStatus.COMPLETED

    def player(self, player_id: str) -> Optional[GamePlayer]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def has_player(self, player_id: str) -> bool:
        return self.player(player_id) is not None

    def timeline(self) -> List[Event]:
        """Chronological events; older games without a history fall back to their rounds."""
        if self.history:
            return list(self.history)
        return list(self.rounds)

    def join_blocked_reason(self) -> Optional[str]:
        return None

    def joining_points(self) -> int:
        return 0

    def add_player(self, player: GamePlayer, event: PlayerJoinedEvent) -> None:
        if not self.history and self.rounds:
            self.history = list(self.rounds)
        self.players.append(player)
        self.history.append(event)

    def rounds_blocked_reason(self) -> Optional[str]:
        return None

    def apply_round(self, round_: Round) -> Optional[List[str]]:
        """Add a round's scores. Returns the winner ids if the round ended the game."""
        raise NotImplementedError

    def _record_round(self, round_: Round) -> None:
        if not self.history and self.rounds:
            self.history = list(self.rounds)
        self.rounds.append(round_)
        self.history.append(round_)

    def complete(self, winner_ids: List[str]) -> None:
        self.status = GameStatus.COMPLETED
        self.winner = winner_ids[0]

    def winner_ids(self) -> List[str]:
        return [self.winner] if self.winner else []

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'variant': self.variant.value,
            'type': self.variant.label,
            'title': self.title,
            'created_at': format_timestamp(self.created_at),
            'status': self.status.value,
            'max_points': None,
            'winner': self.winner,
            'winners': None,
            'players': [p.to_dict() for p in self.players],
            'rounds': [r.to_dict() for r in self.rounds],
            'history': [e.to_dict() for e in self.timeline()],
            'version': self.version,
        }


@dataclass
class RummyGame(Game):
    """Points are bad. Reaching ``max_points`` eliminates; the last one standing wins."""

    max_points: int = 120

    variant: ClassVar[Variant] = Variant.RUMMY

    def survivors(self) -> List[GamePlayer]:
        return [p for p in self.players if not p.is_lost]

    def join_blocked_reason(self) -> Optional[str]:
        if any(p.is_lost for p in self.players):
            return ROSTER_FROZEN
        return None

    def joining_points(self) -> int:
        # Joiners start one point behind the current leader
        return max([p.total_points for p in self.players] + [0]) + 1

    def apply_round(self, round_: Round) -> Optional[List[str]]:
        for p in self.players:
            p.total_points += round_.score_for(p.id)
            p.is_lost = p.total_points >= self.max_points
        self._record_round(round_)

        survivors = self.survivors()
        if len(survivors) == 1:
            winner = survivors[0]
        elif not survivors:
            # Everyone went out together: lowest total wins, min() keeps the earliest joiner on ties
            winner = min(self.players, key=lambda p: p.total_points)
        else:
            return None
        self.complete([winner.id])
        return [winner.id]

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload['max_points'] = self.max_points
        return payload


@dataclass
class ChessGame(Game):
    """Two players, no points; closed by declaring the winner."""

    variant: ClassVar[Variant] = Variant.CHESS
    max_players: ClassVar[Optional[int]] = 2

    def join_blocked_reason(self) -> Optional[str]:
        return CHESS_ROSTER_FIXED

    def rounds_blocked_reason(self) -> Optional[str]:
        return CHESS_NO_ROUNDS

    def apply_round(self, round_: Round) -> Optional[List[str]]:
        raise ValidationError(CHESS_NO_ROUNDS)


@dataclass
class AceGame(Game):
    """Points are good, nobody is eliminated and an admin ends the game.

    Several players can share the win.
    """

    winners: List[str] = field(default_factory=list)

    variant: ClassVar[Variant] = Variant.ACE

    def apply_round(self, round_: Round) -> Optional[List[str]]:
        for p in self.players:
            p.total_points += round_.score_for(p.id)
            p.is_lost = False
        self._record_round(round_)
        return None

    def loser_scores(self, loser_id: str) -> Dict[str, int]:
        """Scores for an ace event: the loser takes nothing, everyone else a point."""
        return {p.id: 0 if p.id == loser_id else 1 for p in self.players}

    def leaders(self) -> List[GamePlayer]:
        if not self.players:
            return []
        best = max(p.total_points for p in self.players)
        return [p for p in self.players if p.total_points == best]

    def complete(self, winner_ids: List[str]) -> None:
        super().complete(winner_ids)
        self.winners = list(winner_ids)

    def winner_ids(self) -> List[str]:
        if self.winners:
            return list(self.winners)
        return super().winner_ids()

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload['winners'] = list(self.winners) if self.winners else None
        return payload


GAME_TYPES: Dict[Variant, Type[Game]] = {
    Variant.RUMMY: RummyGame,
    Variant.CHESS: ChessGame,
    Variant.ACE: AceGame,
}


def game_type_for(variant: Variant) -> Type[Game]:
    return GAME_TYPES[variant]


def game_from_dict(data: Mapping[str, Any]) -> Game:
    """Rebuild a game from its ``to_dict`` form (used for bulk replace)."""
    if not isinstance(data, Mapping):
        raise ValidationError(f'Malformed game: expected an object, got {type(data).__name__}')
    variant = parse_variant(data.get('variant') or data.get('type'))
    try:
        kwargs: Dict[str, Any] = dict(
            id=str(data['id']),
            title=data.get('title') or '',
            created_at=parse_timestamp(data.get('created_at')),
            status=GameStatus(data.get('status') or GameStatus.IN_PROGRESS.value),
            players=[GamePlayer.from_dict(p) for p in data.get('players') or []],
            rounds=[Round.from_dict(r) for r in data.get('rounds') or []],
            history=[event_from_dict(e) for e in data.get('history') or []],
            winner=data.get('winner'),
            version=int(data.get('version') or 0),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f'Malformed game: {exc}') from exc
    if kwargs['created_at'] is None:
        raise ValidationError('Malformed game: created_at is required')
    if variant == Variant.RUMMY:
        kwargs['max_points'] = int(data.get('max_points') or 120)
    elif variant == Variant.ACE:
        kwargs['winners'] = [str(w) for w in data.get('winners') or []]
    return game_type_for(variant)(**kwargs)
