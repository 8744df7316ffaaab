"""Game domain services: variant rules, the ledger, stats and storage.

This package contains pure(ish) domain logic that should be imported by
HTTP routes and socket handlers, keeping transport concerns separated
from core game mechanics. Only ``storage`` touches the database.
"""

from .errors import StaleGameError, ValidationError
from .ledger import GameLedger
from .types import GamePlayer, GameStatus, Outcome, PlayerStats, Round, Variant
from .variants import AceGame, ChessGame, Game, RummyGame

__all__ = [
    'AceGame',
    'ChessGame',
    'Game',
    'GameLedger',
    'GamePlayer',
    'GameStatus',
    'Outcome',
    'PlayerStats',
    'Round',
    'RummyGame',
    'StaleGameError',
    'ValidationError',
    'Variant',
]
