"""The game ledger: creating games, recording rounds, admitting late
joiners and closing games, with player stats updated on completion.

Every mutation runs under a per-game lock, loads the game from the store,
applies the variant's rules in memory and writes the game back with a keyed
upsert. A failed write is logged and reported through ``Outcome.persisted``
without undoing the in-memory result. Callers are expected to have checked
``is_admin()`` already; the ledger does no authorization.
"""

import logging
import threading
import uuid
import weakref
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .errors import (
    GAME_CHANGED,
    GAME_COMPLETED,
    GAME_NOT_FOUND,
    NOT_AN_ACE_GAME,
    PLAYER_ALREADY_IN_GAME,
    PLAYER_NOT_FOUND,
    WINNER_NOT_IN_GAME,
    StaleGameError,
    ValidationError,
)
from .numbering import DailySequence
from .scoring import apply_result
from .types import GamePlayer, Outcome, PlayerJoinedEvent, Round, Variant, parse_variant
from .variants import AceGame, Game, game_type_for

log = logging.getLogger(__name__)

# An entry lives only while some caller holds its lock
_game_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_game_locks_guard = threading.Lock()


def _lock_for(game_id: str) -> threading.Lock:
    with _game_locks_guard:
        lock = _game_locks.get(game_id)
        if lock is None:
            lock = _game_locks[game_id] = threading.Lock()
        return lock


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class GameLedger:
    def __init__(
        self,
        games,
        roster,
        sequence: Optional[DailySequence] = None,
        default_max_points: int = 120,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.games = games
        self.roster = roster
        self.sequence = sequence or DailySequence()
        self.default_max_points = default_max_points
        self.clock = clock

    # ---- queries ----

    def list_games(self) -> List[Game]:
        return self.games.list_games()

    def get_game(self, game_id: str) -> Optional[Game]:
        return self.games.get_game(game_id)

    # ---- mutations ----

    def create_game(self, variant, player_ids: Iterable[str], max_points=None) -> Outcome:
        kind = parse_variant(variant)
        game_cls = game_type_for(kind)
        ids = [str(pid) for pid in (player_ids or [])]
        if len(set(ids)) != len(ids):
            raise ValidationError('A player can only be selected once')
        if game_cls.max_players is not None and game_cls.max_players == game_cls.min_players:
            if len(ids) != game_cls.min_players:
                raise ValidationError(f'{kind.label} requires exactly {game_cls.min_players} players')
        elif len(ids) < game_cls.min_players:
            raise ValidationError(f'{kind.label} requires at least {game_cls.min_players} players')

        roster = {p.id: p for p in self.roster.list_players()}
        for pid in ids:
            if pid not in roster:
                raise ValidationError(f'Unknown player: {pid}')

        extra = {}
        if kind == Variant.RUMMY:
            points = self.default_max_points if max_points is None else max_points
            if not _is_int(points) or points <= 0:
                raise ValidationError('max_points must be a positive integer')
            extra['max_points'] = points

        now = self.clock()
        number = self.sequence.next_for(now.date(), self.games.count_created_on)
        game = game_cls(
            id=_new_id(),
            title=f'{kind.label} Game {number}',
            created_at=now,
            players=[GamePlayer(id=pid, name=roster[pid].name, avatar=roster[pid].avatar) for pid in ids],
            **extra,
        )
        log.info(f"[create] game={game.id} variant={kind.value} players={len(ids)} title={game.title!r}")
        return self._commit(game)

    def add_player_to_game(self, game_id: str, player_id: str) -> Outcome:
        with _lock_for(game_id):
            game = self.games.get_game(game_id)
            if game is None:
                return Outcome.fail(GAME_NOT_FOUND)
            blocked = game.join_blocked_reason()
            if blocked:
                return Outcome.fail(blocked)
            if game.is_completed:
                return Outcome.fail(GAME_COMPLETED)
            if game.has_player(player_id):
                return Outcome.fail(PLAYER_ALREADY_IN_GAME)
            player = self.roster.get_player(player_id)
            if player is None:
                return Outcome.fail(PLAYER_NOT_FOUND)

            points = game.joining_points()
            game.add_player(
                GamePlayer(id=player.id, name=player.name, avatar=player.avatar, total_points=points),
                PlayerJoinedEvent(
                    id=_new_id(),
                    timestamp=self.clock(),
                    player_id=player.id,
                    player_name=player.name,
                    player_avatar=player.avatar,
                    starting_points=points,
                ),
            )
            log.info(f"[join] game={game.id} player={player.id} starting_points={points}")
            return self._commit(game)

    def add_round(self, game_id: str, scores: Mapping[str, int]) -> Outcome:
        with _lock_for(game_id):
            game = self.games.get_game(game_id)
            if game is None:
                return Outcome.fail(GAME_NOT_FOUND)
            return self._add_round(game, scores)

    def mark_ace_loser(self, game_id: str, loser_id: str) -> Outcome:
        """Score one ace event: ``loser_id`` gets nothing, everyone else a point."""
        with _lock_for(game_id):
            game = self.games.get_game(game_id)
            if game is None:
                return Outcome.fail(GAME_NOT_FOUND)
            if not isinstance(game, AceGame):
                raise ValidationError('Only Ace games have ace events')
            if not game.has_player(loser_id):
                raise ValidationError(f'Unknown player in game: {loser_id}')
            return self._add_round(game, game.loser_scores(loser_id))

    def declare_winner(self, game_id: str, winner_id: str) -> Outcome:
        return self._close(game_id, [winner_id], ace_only=False)

    def declare_ace_winners(self, game_id: str, winner_ids: Iterable[str]) -> Outcome:
        ordered = list(dict.fromkeys(str(w) for w in (winner_ids or [])))
        if not ordered:
            raise ValidationError('At least one winner is required')
        return self._close(game_id, ordered, ace_only=True)

    @staticmethod
    def suggest_ace_winners(game: AceGame) -> List[str]:
        return [p.id for p in game.leaders()]

    # ---- helpers ----

    def _add_round(self, game: Game, scores: Mapping[str, int]) -> Outcome:
        # Caller holds the game's lock
        if game.is_completed:
            return Outcome.fail(GAME_COMPLETED)
        blocked = game.rounds_blocked_reason()
        if blocked:
            return Outcome.fail(blocked)
        cleaned = self._check_scores(game, scores)

        round_ = Round(id=_new_id(), round_number=len(game.rounds) + 1, scores=cleaned, timestamp=self.clock())
        winners = game.apply_round(round_)
        log.info(
            f"[round] game={game.id} round={round_.round_number} "
            f"status={game.status.value} winner={game.winner}"
        )
        return self._commit(game, winners)

    def _close(self, game_id: str, winner_ids: List[str], ace_only: bool) -> Outcome:
        with _lock_for(game_id):
            game = self.games.get_game(game_id)
            if game is None:
                return Outcome.fail(GAME_NOT_FOUND)
            if ace_only and not isinstance(game, AceGame):
                return Outcome.fail(NOT_AN_ACE_GAME)
            if game.is_completed:
                return Outcome.fail(GAME_COMPLETED)
            if not all(game.has_player(w) for w in winner_ids):
                return Outcome.fail(WINNER_NOT_IN_GAME)
            game.complete(winner_ids)
            return self._commit(game, winner_ids)

    def _check_scores(self, game: Game, scores: Mapping[str, int]) -> Dict[str, int]:
        if not isinstance(scores, Mapping):
            raise ValidationError('scores must be an object of player id to points')
        cleaned = {}
        for player_id, points in scores.items():
            if not game.has_player(player_id):
                raise ValidationError(f'Unknown player in scores: {player_id}')
            if not _is_int(points) or points < 0:
                raise ValidationError('Scores must be non-negative integers')
            cleaned[player_id] = points
        return cleaned

    def _commit(self, game: Game, winner_ids: Optional[List[str]] = None) -> Outcome:
        try:
            persisted = self.games.upsert_game(game)
        except StaleGameError as exc:
            log.warning(f"[stale] {exc}")
            return Outcome.fail(GAME_CHANGED)
        if not persisted:
            # Stats follow the stored game, so an unsaved completion credits nobody
            log.warning(f"[unsaved] game={game.id} kept in memory only")
            return Outcome.ok(game, persisted=False)
        if winner_ids:
            log.info(f"[complete] game={game.id} variant={game.variant.value} winners={winner_ids}")
            updated = apply_result(self.roster.list_players(), [p.id for p in game.players], winner_ids)
            if not self.roster.upsert_players(updated):
                log.warning(f"[unsaved] game={game.id} player stats not written")
                return Outcome.ok(game, persisted=False)
        return Outcome.ok(game, persisted=True)
