import math
from typing import Dict, Iterable, List, Optional

from .types import GameStatus, LeaderboardEntry, PlayerStats, Variant
from .variants import Game


def win_percentage(wins: int, total_games: int) -> int:
    """Whole-number win rate, rounding halves up (1 of 8 is 13%)."""
    if total_games <= 0:
        return 0
    return int(math.floor(wins * 100 / total_games + 0.5))


def apply_result(players: Iterable[PlayerStats], participant_ids: Iterable[str], winner_ids: Iterable[str]) -> List[PlayerStats]:
    """Credit a finished game to the roster.

    +1 game to every participant, +1 win to each winner. Returns only the
    players that changed; participants missing from the roster are skipped.
    """
    participants = set(participant_ids)
    winners = set(winner_ids)
    changed = []
    for player in players:
        if player.id not in participants:
            continue
        player.total_games += 1
        if player.id in winners:
            player.wins += 1
        player.win_percentage = win_percentage(player.wins, player.total_games)
        changed.append(player)
    return changed


def rank_players(players: Iterable[PlayerStats]) -> List[PlayerStats]:
    return sorted(players, key=lambda p: (-p.wins, -p.win_percentage, -p.total_games))


def variant_leaderboard(games: Iterable[Game], variant: Variant, limit: Optional[int] = 5) -> List[LeaderboardEntry]:
    """Top players for one variant, recomputed from its completed games."""
    table: Dict[str, LeaderboardEntry] = {}
    for game in games:
        if game.variant != variant or game.status != GameStatus.COMPLETED:
            continue
        winners = set(game.winner_ids())
        for gp in game.players:
            entry = table.get(gp.id)
            if entry is None:
                entry = table[gp.id] = LeaderboardEntry(id=gp.id, name=gp.name, avatar=gp.avatar)
            entry.total_games += 1
            if gp.id in winners:
                entry.wins += 1
    for entry in table.values():
        entry.win_percentage = win_percentage(entry.wins, entry.total_games)
    ranked = sorted(table.values(), key=lambda e: (-e.win_percentage, -e.wins, -e.total_games))
    return ranked[:limit] if limit else ranked


def newest_first(games: Iterable[Game], limit: Optional[int] = None) -> List[Game]:
    ordered = sorted(games, key=lambda g: g.created_at, reverse=True)
    return ordered[:limit] if limit else ordered
