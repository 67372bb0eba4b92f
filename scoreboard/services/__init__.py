"""
Services package for the scoreboard.

Fetch caching, leaderboard aggregation and the backend mutation services.
"""

from .fetch_cache import FetchCache
from .leaderboard import LeaderboardAggregator, TieBreak, PlayerType, filter_leaderboard
from .data_manager import DataManager

__all__ = ['FetchCache', 'LeaderboardAggregator', 'TieBreak', 'PlayerType', 'filter_leaderboard', 'DataManager']
