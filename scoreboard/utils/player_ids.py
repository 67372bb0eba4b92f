"""
Helpers for player identifiers.

A game's player list mixes registered user ids with "userId:displayName"
tokens for anonymous participants, so every lookup has to handle both.
"""

from typing import Iterable, Mapping, Optional, Tuple

from scoreboard.data_models.records import UserRecord

COMPOSITE_SEPARATOR = ":"
GUEST_PREFIX = "guest_"

UNKNOWN_PLAYER = "Unknown Player"
ANONYMOUS_NAME_MAX_LENGTH = 10
ANONYMOUS_NAME_PREFIX_LENGTH = 8


def split_player_token(token: str) -> Tuple[str, Optional[str]]:
    """Split a player token into (user_id, display_name)."""
    if COMPOSITE_SEPARATOR not in token:
        return token, None
    user_id, display_name = token.split(COMPOSITE_SEPARATOR, 1)
    return user_id, display_name


def is_user_in_game(user_id: str, player_ids: Iterable[str]) -> bool:
    """Check if a user appears in a game's player list in any supported form."""
    if not user_id:
        return False
    player_ids = list(player_ids)
    
    # Registered users are stored by their plain id
    if user_id in player_ids:
        return True
    
    # Anonymous users are stored as "userID:displayName"
    if any(pid.startswith(user_id + COMPOSITE_SEPARATOR) for pid in player_ids):
        return True
    
    # Fall back to a containment check for other token shapes
    return any(user_id in pid for pid in player_ids)


def shorten_player_id(player_id: str) -> str:
    """Shorten long anonymous/composite ids for display."""
    if len(player_id) > ANONYMOUS_NAME_MAX_LENGTH:
        return player_id[:ANONYMOUS_NAME_PREFIX_LENGTH]
    return player_id


def resolve_nickname(player_id: str, users_by_id: Mapping[str, UserRecord]) -> str:
    """Resolve the display nickname for a player id."""
    user = users_by_id.get(player_id)
    if user is not None:
        return user.username or UNKNOWN_PLAYER
    return shorten_player_id(player_id)


def is_registered_player(player_id: str) -> bool:
    """Registered players are guest accounts or identity-provider UUIDs."""
    if player_id.startswith(GUEST_PREFIX):
        return True
    return len(player_id) > 20 and "-" in player_id
