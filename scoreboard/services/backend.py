"""
Backend API adapter.

The data manager only needs three full-collection listings. BackendAPI is that
contract; DatabaseBackend serves it from the SQLAlchemy database and converts
rows into immutable snapshot records.
"""

from typing import List, Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError

from scoreboard.data_models.records import GameRecord, ScoreRecord, UserRecord
from scoreboard.database.database import Database
from scoreboard.database.models import Game, Score, User
from scoreboard.services.events import GAMES, SCORES, USERS
from scoreboard.utils.exceptions import FetchFailure
from scoreboard.utils.logger import setup_logger

logger = setup_logger(__name__)


@runtime_checkable
class BackendAPI(Protocol):
    """Full-collection listings of the backend's resources."""
    
    async def list_games(self) -> List[GameRecord]: ...
    
    async def list_scores(self) -> List[ScoreRecord]: ...
    
    async def list_users(self) -> List[UserRecord]: ...


def game_to_record(game: Game) -> GameRecord:
    return GameRecord(
        id=game.id,
        host_user_id=game.host_user_id,
        player_ids=tuple(game.player_ids or ()),
        game_status=game.game_status,
        win_condition=game.win_condition,
        game_name=game.game_name,
        rounds=game.rounds,
        created_at=game.created_at,
        updated_at=game.updated_at,
    )


def score_to_record(score: Score) -> ScoreRecord:
    return ScoreRecord(
        id=score.id,
        game_id=score.game_id,
        player_id=score.player_id,
        round_number=score.round_number,
        score=score.score,
        created_at=score.created_at,
        updated_at=score.updated_at,
    )


def user_to_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class DatabaseBackend:
    """BackendAPI served from the local database."""
    
    def __init__(self, database: Database):
        self.database = database
    
    async def list_games(self) -> List[GameRecord]:
        try:
            games = await self.database.list_games()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list games: {e}", exc_info=True)
            raise FetchFailure(GAMES, str(e)) from e
        return [game_to_record(game) for game in games]
    
    async def list_scores(self) -> List[ScoreRecord]:
        try:
            scores = await self.database.list_scores()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list scores: {e}", exc_info=True)
            raise FetchFailure(SCORES, str(e)) from e
        return [score_to_record(score) for score in scores]
    
    async def list_users(self) -> List[UserRecord]:
        try:
            users = await self.database.list_users()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list users: {e}", exc_info=True)
            raise FetchFailure(USERS, str(e)) from e
        return [user_to_record(user) for user in users]
