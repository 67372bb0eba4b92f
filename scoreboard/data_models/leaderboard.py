"""
Leaderboard data models.

Provides immutable data transfer objects for the win/loss leaderboard. Entries
are derived from game and score snapshots on every aggregation pass and are
never persisted.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class GameWinDetail:
    """One game a player won."""
    game_id: str
    game_name: str
    win_condition: str
    final_score: int
    date: Optional[datetime]
    total_players: int


@dataclass(frozen=True)
class PlayerLeaderboardEntry:
    """Single leaderboard row."""
    nickname: str
    player_id: str
    total_wins: int
    total_games: int
    win_rate: float
    highest_score_wins: int
    lowest_score_wins: int
    games_won: Tuple[GameWinDetail, ...] = ()
    
    @property
    def losses(self) -> int:
        return self.total_games - self.total_wins
