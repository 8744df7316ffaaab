"""Ledger error taxonomy.

Validation problems raise ``ValidationError``. Precondition failures are
returned as ``Outcome(success=False, error=<reason>)`` using the reason
strings below so callers can branch on them.
"""


class ValidationError(Exception):
    """Bad input: the operation had no effect."""


class StaleGameError(Exception):
    """The stored game moved on since it was loaded."""

    def __init__(self, game_id: str, expected: int, actual: int) -> None:
        super().__init__(f"game {game_id}: expected version {expected}, found {actual}")
        self.game_id = game_id
        self.expected = expected
        self.actual = actual


GAME_NOT_FOUND = 'Game not found'
GAME_COMPLETED = 'Game is already completed'
ROSTER_FROZEN = 'Cannot add players after someone has reached max points!'
CHESS_ROSTER_FIXED = 'Chess games are limited to two players'
CHESS_NO_ROUNDS = 'Chess games do not record rounds'
PLAYER_ALREADY_IN_GAME = 'Player already in game'
PLAYER_NOT_FOUND = 'Player not found'
WINNER_NOT_IN_GAME = 'Winner must be a player in this game'
NOT_AN_ACE_GAME = 'Only Ace games can have multiple winners'
GAME_CHANGED = 'Game was changed by someone else, reload and try again'
