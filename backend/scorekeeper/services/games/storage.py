"""Persistence gateway for games.

Each variant lives in its own table keyed by game id: rummy and ace keep
players, rounds and history as JSON text, chess keeps its two players in
flat columns. Rows carry a SQLAlchemy ``version_id_col`` so a write only
lands if nobody else wrote the game since it was loaded.
"""

import json
import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from scorekeeper import db
from scorekeeper.models import AceGameRecord, ChessGameRecord, RummyGameRecord, aware_utc, naive_utc

from .errors import StaleGameError, ValidationError
from .types import GamePlayer, GameStatus, Round, Variant, event_from_dict
from .variants import AceGame, ChessGame, Game, RummyGame

log = logging.getLogger(__name__)

RECORD_TYPES = {
    Variant.RUMMY: RummyGameRecord,
    Variant.CHESS: ChessGameRecord,
    Variant.ACE: AceGameRecord,
}


def _dump(items) -> str:
    return json.dumps([item.to_dict() for item in items])


def _load_rounds(raw: Optional[str]) -> List[Round]:
    return [Round.from_dict(r) for r in json.loads(raw or '[]')]


def _load_history(raw: Optional[str], rounds: List[Round]):
    if raw is None:
        return list(rounds)
    return [event_from_dict(e) for e in json.loads(raw)]


def _load_players(raw: Optional[str]) -> List[GamePlayer]:
    return [GamePlayer.from_dict(p) for p in json.loads(raw or '[]')]


def _fill_common(record, game: Game) -> None:
    record.title = game.title
    record.created_at = naive_utc(game.created_at)
    record.status = game.status.value


def _fill_rummy(record: RummyGameRecord, game: RummyGame) -> None:
    _fill_common(record, game)
    record.winner = game.winner
    record.max_points = game.max_points
    record.players_json = _dump(game.players)
    record.rounds_json = _dump(game.rounds)
    record.history_json = _dump(game.timeline())


def _fill_chess(record: ChessGameRecord, game: ChessGame) -> None:
    if len(game.players) != 2:
        raise ValidationError('Chess games need exactly two players')
    _fill_common(record, game)
    record.winner = game.winner
    first, second = game.players
    record.player1_id, record.player1_name, record.player1_avatar = first.id, first.name, first.avatar
    record.player2_id, record.player2_name, record.player2_avatar = second.id, second.name, second.avatar


def _fill_ace(record: AceGameRecord, game: AceGame) -> None:
    _fill_common(record, game)
    record.winners = json.dumps(game.winners) if game.winners else None
    record.players_json = _dump(game.players)
    record.rounds_json = _dump(game.rounds)
    record.history_json = _dump(game.timeline())


def _rummy_from_record(record: RummyGameRecord) -> RummyGame:
    rounds = _load_rounds(record.rounds_json)
    return RummyGame(
        id=record.id,
        title=record.title,
        created_at=aware_utc(record.created_at),
        status=GameStatus(record.status),
        players=_load_players(record.players_json),
        rounds=rounds,
        history=_load_history(record.history_json, rounds),
        winner=record.winner,
        version=record.version,
        max_points=record.max_points,
    )


def _chess_from_record(record: ChessGameRecord) -> ChessGame:
    return ChessGame(
        id=record.id,
        title=record.title,
        created_at=aware_utc(record.created_at),
        status=GameStatus(record.status),
        players=[
            GamePlayer(id=record.player1_id, name=record.player1_name, avatar=record.player1_avatar),
            GamePlayer(id=record.player2_id, name=record.player2_name, avatar=record.player2_avatar),
        ],
        winner=record.winner,
        version=record.version,
    )


def _ace_from_record(record: AceGameRecord) -> AceGame:
    rounds = _load_rounds(record.rounds_json)
    winners = record.winner_ids
    return AceGame(
        id=record.id,
        title=record.title,
        created_at=aware_utc(record.created_at),
        status=GameStatus(record.status),
        players=_load_players(record.players_json),
        rounds=rounds,
        history=_load_history(record.history_json, rounds),
        winner=winners[0] if winners else None,
        version=record.version,
        winners=winners,
    )


_FILLERS: Dict[Variant, Callable] = {
    Variant.RUMMY: _fill_rummy,
    Variant.CHESS: _fill_chess,
    Variant.ACE: _fill_ace,
}

_LOADERS: Dict[Variant, Callable] = {
    Variant.RUMMY: _rummy_from_record,
    Variant.CHESS: _chess_from_record,
    Variant.ACE: _ace_from_record,
}


class GameStore:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def list_games(self) -> List[Game]:
        games: List[Game] = []
        for variant, model in RECORD_TYPES.items():
            games.extend(_LOADERS[variant](r) for r in self.session.query(model).all())
        games.sort(key=lambda g: g.created_at)
        return games

    def get_game(self, game_id: str) -> Optional[Game]:
        for variant, model in RECORD_TYPES.items():
            record = self.session.get(model, game_id)
            if record is not None:
                return _LOADERS[variant](record)
        return None

    def count_created_on(self, day: date) -> int:
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        return sum(
            self.session.query(model).filter(model.created_at >= start, model.created_at < end).count()
            for model in RECORD_TYPES.values()
        )

    def upsert_game(self, game: Game) -> bool:
        """Insert or update one game.

        Raises ``StaleGameError`` when the stored version differs from the one
        the game was loaded at. Returns False if the database write failed.
        """
        model = RECORD_TYPES[game.variant]
        try:
            record = self.session.get(model, game.id)
            if record is None:
                record = model(id=game.id)
                _FILLERS[game.variant](record, game)
                self.session.add(record)
            elif record.version != game.version:
                raise StaleGameError(game.id, game.version, record.version)
            else:
                _FILLERS[game.variant](record, game)
            self.session.commit()
        except StaleDataError:
            self.session.rollback()
            raise StaleGameError(game.id, game.version, -1) from None
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.error(f"[store-fail] game={game.id} variant={game.variant.value} error={exc}")
            return False
        game.version = record.version
        return True

    def replace_all_games(self, games: Iterable[Game]) -> bool:
        """Swap every stored game for ``games`` in one transaction."""
        unique: Dict[str, Game] = {}
        for game in games:
            unique[game.id] = game
        for game in unique.values():
            if game.variant == Variant.CHESS and len(game.players) != 2:
                raise ValidationError('Chess games need exactly two players')
        try:
            for variant, model in RECORD_TYPES.items():
                wanted = {g.id: g for g in unique.values() if g.variant == variant}
                for record in self.session.query(model).all():
                    game = wanted.pop(record.id, None)
                    if game is None:
                        self.session.delete(record)
                    else:
                        _FILLERS[variant](record, game)
                for game in wanted.values():
                    record = model(id=game.id)
                    _FILLERS[variant](record, game)
                    self.session.add(record)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.error(f"[store-fail] replace_all games={len(unique)} error={exc}")
            return False
        log.info(f"[store] replaced all games count={len(unique)}")
        return True
