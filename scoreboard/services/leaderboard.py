"""
Leaderboard aggregation.

Folds game, score and user snapshots into ranked per-player win/loss entries.
The fold is synchronous and read-only over its inputs; entries are rebuilt from
scratch on every call.

Win credit only comes from completed games that have a win condition. Games
played counts every distinct game a player has at least one score row in,
whatever the game's status.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set

from scoreboard.config import Config
from scoreboard.data_models.leaderboard import GameWinDetail, PlayerLeaderboardEntry
from scoreboard.data_models.records import GameRecord, ScoreRecord, UserRecord
from scoreboard.database.models import GameStatus, WinCondition
from scoreboard.utils.logger import setup_logger
from scoreboard.utils.player_ids import is_registered_player, resolve_nickname

logger = setup_logger(__name__)

UNTITLED_GAME = "Untitled Game"


class TieBreak(str, Enum):
    """How a single winner is chosen when several scores share the extreme value."""
    FIRST_RECORDED = "first_recorded"          # first in input order
    EARLIEST_SUBMITTED = "earliest_submitted"  # earliest created_at, then input order


class PlayerType(str, Enum):
    ALL = "all"
    REGISTERED = "registered"
    ANONYMOUS = "anonymous"


@dataclass
class _PlayerStats:
    total_wins: int = 0
    highest_score_wins: int = 0
    lowest_score_wins: int = 0
    games_won: List[GameWinDetail] = field(default_factory=list)
    games_played: Set[str] = field(default_factory=set)


class LeaderboardAggregator:
    """Computes the ranked win/loss leaderboard from backend snapshots."""

    def __init__(self, limit: int = None, tie_break: TieBreak = TieBreak.FIRST_RECORDED):
        if limit is None:
            limit = Config.LEADERBOARD_LIMIT
        if limit < 1:
            raise ValueError("limit must be a positive integer")
        self.limit = limit
        self.tie_break = TieBreak(tie_break)

    def calculate(
        self,
        games: Iterable[GameRecord],
        scores: Iterable[ScoreRecord],
        users: Iterable[UserRecord]
    ) -> List[PlayerLeaderboardEntry]:
        """Build the ranked leaderboard, best first, capped at the limit."""
        scores = list(scores)
        users_by_id = {user.id: user for user in users}

        # Players are registered in order of their first score row
        stats: Dict[str, _PlayerStats] = {}
        scores_by_game: Dict[str, List[ScoreRecord]] = defaultdict(list)
        for score in scores:
            player_stats = stats.setdefault(score.player_id, _PlayerStats())
            player_stats.games_played.add(score.game_id)
            scores_by_game[score.game_id].append(score)

        for game in games:
            if not self.is_win_eligible(game):
                continue

            game_scores = scores_by_game.get(game.id)
            if not game_scores:
                logger.debug(f"Skipping game {game.id}: no scores recorded")
                continue

            winner = self.pick_winner(game_scores, game.win_condition)
            self._credit_win(stats[winner.player_id], game, winner)

        entries = [
            self._build_entry(player_id, player_stats, users_by_id)
            for player_id, player_stats in stats.items()
        ]

        # sorted() is stable, so equal keys keep first-score order
        entries = sorted(entries, key=lambda e: (-e.total_wins, -e.win_rate))
        return entries[:self.limit]

    @staticmethod
    def is_win_eligible(game: GameRecord) -> bool:
        """Only completed games with a known win condition produce a winner."""
        if game.game_status != GameStatus.COMPLETED.value:
            return False
        if game.win_condition is None:
            return False
        if game.win_condition not in (WinCondition.HIGHEST_SCORE.value, WinCondition.LOWEST_SCORE.value):
            logger.warning(f"Game {game.id} has unknown win condition '{game.win_condition}', skipping")
            return False
        return True

    def pick_winner(self, scores: Sequence[ScoreRecord], win_condition: str) -> ScoreRecord:
        """Pick exactly one winning score row according to the tie-break policy."""
        if not scores:
            raise ValueError("cannot pick a winner from no scores")

        if win_condition == WinCondition.HIGHEST_SCORE.value:
            best_value = max(score.score for score in scores)
        elif win_condition == WinCondition.LOWEST_SCORE.value:
            best_value = min(score.score for score in scores)
        else:
            raise ValueError(f"Invalid win condition: {win_condition}")

        tied = [score for score in scores if score.score == best_value]
        if len(tied) > 1:
            logger.debug(f"{len(tied)} scores tied at {best_value}, applying {self.tie_break.value}")

        if self.tie_break == TieBreak.EARLIEST_SUBMITTED:
            # min() returns the first of equal keys, keeping input order
            return min(tied, key=lambda s: (
                s.created_at is None,
                _as_naive_utc(s.created_at) if s.created_at is not None else datetime.min
            ))
        return tied[0]

    @staticmethod
    def _credit_win(player_stats: _PlayerStats, game: GameRecord, winner: ScoreRecord):
        player_stats.total_wins += 1
        player_stats.games_won.append(GameWinDetail(
            game_id=game.id,
            game_name=game.game_name or UNTITLED_GAME,
            win_condition=game.win_condition,
            final_score=winner.score,
            date=game.created_at,
            total_players=len(game.player_ids)
        ))
        if game.win_condition == WinCondition.HIGHEST_SCORE.value:
            player_stats.highest_score_wins += 1
        else:
            player_stats.lowest_score_wins += 1

    @staticmethod
    def _build_entry(player_id: str, player_stats: _PlayerStats, users_by_id) -> PlayerLeaderboardEntry:
        total_games = len(player_stats.games_played)
        win_rate = player_stats.total_wins / total_games if total_games > 0 else 0.0
        return PlayerLeaderboardEntry(
            nickname=resolve_nickname(player_id, users_by_id),
            player_id=player_id,
            total_wins=player_stats.total_wins,
            total_games=total_games,
            win_rate=win_rate,
            highest_score_wins=player_stats.highest_score_wins,
            lowest_score_wins=player_stats.lowest_score_wins,
            games_won=tuple(player_stats.games_won)
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def start_of_month(now: Optional[datetime] = None) -> datetime:
    """Midnight on the first day of the month containing `now` (naive UTC)."""
    now = _as_naive_utc(now) if now is not None else _utcnow()
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def filter_leaderboard(
    entries: Iterable[PlayerLeaderboardEntry],
    search: Optional[str] = None,
    win_condition: Optional[str] = None,
    player_type: PlayerType = PlayerType.ALL,
    since: Optional[datetime] = None
) -> List[PlayerLeaderboardEntry]:
    """
    Narrow a computed leaderboard without re-ranking it.

    Args:
        entries: Ranked leaderboard entries
        search: Case-insensitive substring of the nickname
        win_condition: Keep players with at least one win under this condition
        player_type: Registered players, anonymous players, or everyone
        since: Keep players with at least one win in a game created on/after this time

    Returns:
        Matching entries in their original order
    """
    players = list(entries)

    if search:
        needle = search.casefold()
        players = [p for p in players if needle in p.nickname.casefold()]

    if win_condition is not None:
        players = [
            p for p in players
            if any(game.win_condition == win_condition for game in p.games_won)
        ]

    player_type = PlayerType(player_type)
    if player_type == PlayerType.REGISTERED:
        players = [p for p in players if is_registered_player(p.player_id)]
    elif player_type == PlayerType.ANONYMOUS:
        players = [p for p in players if not is_registered_player(p.player_id)]

    if since is not None:
        cutoff = _as_naive_utc(since)
        players = [
            p for p in players
            if any(game.date is not None and _as_naive_utc(game.date) >= cutoff for game in p.games_won)
        ]

    return players
