"""
ScoreBoard - multiplayer score tracking with a computed win/loss leaderboard.
"""

__version__ = "0.1.0"
