"""
Game service for creating games, recording round scores and deleting games.

Every successful write is announced on the change feed so the data manager
can refresh the affected collection.
"""

from typing import Iterable, Optional

from scoreboard.data_models.records import GameRecord, ScoreRecord
from scoreboard.database.models import GameStatus, WinCondition
from scoreboard.services.backend import game_to_record, score_to_record
from scoreboard.services.base import BaseService
from scoreboard.services.events import GAMES, SCORES
from scoreboard.utils.exceptions import GameNotFoundError, InvalidScoreError, NotGameHostError
from scoreboard.utils.logger import setup_logger

logger = setup_logger(__name__)


class GameService(BaseService):
    """Game and score mutations against the database."""

    async def create_game(
        self,
        host_user_id: str,
        player_ids: Iterable[str],
        game_name: str = None,
        rounds: int = 1,
        win_condition: Optional[str] = WinCondition.HIGHEST_SCORE.value
    ) -> GameRecord:
        """Create a new active game hosted by host_user_id."""
        player_ids = list(player_ids)
        if rounds < 1:
            raise ValueError("rounds must be at least 1")
        if win_condition is not None:
            win_condition = WinCondition(win_condition).value

        game = await self.database.create_game(
            host_user_id=host_user_id,
            player_ids=player_ids,
            game_name=game_name,
            rounds=rounds,
            win_condition=win_condition
        )
        logger.info(f"Created game {game.id} with {len(player_ids)} players")
        self.notify(GAMES, 'created', game.id)
        return game_to_record(game)

    async def record_score(self, game_id: str, player_id: str, round_number: int, score: int) -> ScoreRecord:
        """Record (or overwrite) a player's score for one round."""
        if round_number < 1:
            raise InvalidScoreError("Round numbers start at 1")

        game = await self.database.get_game(game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        if game.game_status != GameStatus.ACTIVE.value:
            raise InvalidScoreError(f"Game is {game.game_status}, scores can no longer change")

        row = await self.database.upsert_score(game_id, player_id, round_number, score)
        logger.debug(f"Recorded score {score} for {player_id} in game {game_id} round {round_number}")
        self.notify(SCORES, 'updated', row.id)
        return score_to_record(row)

    async def complete_game(self, game_id: str) -> GameRecord:
        """Mark a game as completed so it is eligible for win credit."""
        game = await self.database.update_game(game_id, game_status=GameStatus.COMPLETED.value)
        if game is None:
            raise GameNotFoundError(game_id)
        logger.info(f"Completed game {game_id}")
        self.notify(GAMES, 'updated', game_id)
        return game_to_record(game)

    async def delete_game(self, game_id: str, current_user_id: str) -> bool:
        """
        Delete a game and all its scores.

        Only the game creator (host) may delete a game.

        Raises:
            GameNotFoundError: the game does not exist
            NotGameHostError: current_user_id is not the host
        """
        game = await self.database.get_game(game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        if not self.is_game_creator(game_to_record(game), current_user_id):
            raise NotGameHostError(game_id, current_user_id)

        async with self.database.transaction() as session:
            deleted_scores = await self.database.delete_scores_for_game(game_id, session)
            deleted = await self.database.delete_game(game_id, session)
        logger.info(f"Deleted game {game_id} and {deleted_scores} scores")

        if deleted_scores:
            self.notify(SCORES, 'deleted', game_id)
        if deleted:
            self.notify(GAMES, 'deleted', game_id)
        return deleted

    @staticmethod
    def is_game_creator(game: GameRecord, current_user_id: str) -> bool:
        return game.host_user_id == current_user_id
