"""
Custom exceptions for the scoreboard with user-friendly error messages.
"""

class ScoreboardException(Exception):
    """Base exception for scoreboard errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class FetchFailure(ScoreboardException):
    """Raised when listing a resource from the backend fails."""
    def __init__(self, resource: str, details: str = None):
        super().__init__(
            f"Failed to fetch {resource}: {details}",
            f"Failed to load {resource}: {details or 'unknown error'}"
        )
        self.resource = resource

class GameNotFoundError(ScoreboardException):
    """Raised when a game id does not resolve to a game."""
    def __init__(self, game_id: str):
        super().__init__(
            f"Game '{game_id}' not found",
            "This game no longer exists."
        )
        self.game_id = game_id

class NotGameHostError(ScoreboardException):
    """Raised when someone other than the host tries a host-only action."""
    def __init__(self, game_id: str, user_id: str):
        super().__init__(
            f"User '{user_id}' is not the host of game '{game_id}'",
            "Only the game creator can do that."
        )
        self.game_id = game_id
        self.user_id = user_id

class InvalidScoreError(ScoreboardException):
    """Raised when a score submission fails validation."""
    def __init__(self, reason: str):
        super().__init__(
            f"Invalid score: {reason}",
            reason
        )

class MigrationError(ScoreboardException):
    """Raised when guest data cannot be migrated."""
    def __init__(self, reason: str):
        super().__init__(
            f"Guest migration failed: {reason}",
            f"Could not move your guest data: {reason}"
        )
