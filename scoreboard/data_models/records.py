"""
Snapshot records of backend collections.

The data manager only ever holds these immutable copies, so readers can keep
a reference across a refresh while the collections are swapped out.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class GameRecord:
    """Single game as listed by the backend."""
    id: str
    host_user_id: str
    player_ids: Tuple[str, ...] = ()
    game_status: str = "active"
    win_condition: Optional[str] = None
    game_name: Optional[str] = None
    rounds: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ScoreRecord:
    """One player's score for one round of a game."""
    id: str
    game_id: str
    player_id: str
    round_number: int
    score: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class UserRecord:
    """Registered user profile."""
    id: str
    username: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
