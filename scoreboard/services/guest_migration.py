"""
Guest to registered account migration.

Moves everything a guest player owns onto a newly registered user id: games
they host, their entries in game player lists, and their score rows. The guest
profile is removed afterwards. All of it runs in one transaction, so a failed
migration leaves the guest's data exactly as it was. Account sign-up itself
happens with the identity provider before this runs.
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from scoreboard.database.models import Game, User
from scoreboard.services.base import BaseService
from scoreboard.services.events import GAMES, SCORES, USERS
from scoreboard.utils.exceptions import MigrationError
from scoreboard.utils.logger import setup_logger
from scoreboard.utils.player_ids import COMPOSITE_SEPARATOR, split_player_token

logger = setup_logger(__name__)


@dataclass(frozen=True)
class MigrationResult:
    """Outcome of a guest migration."""
    games_updated: int
    scores_updated: int


def _rewrite_player_ids(player_ids: List[str], guest_user_id: str, new_user_id: str) -> List[str]:
    rewritten = []
    for token in player_ids:
        user_id, display_name = split_player_token(token)
        if user_id != guest_user_id:
            rewritten.append(token)
        elif display_name is None:
            rewritten.append(new_user_id)
        else:
            rewritten.append(f"{new_user_id}{COMPOSITE_SEPARATOR}{display_name}")
    return rewritten


def _involves_guest(game: Game, guest_user_id: str) -> bool:
    if game.host_user_id == guest_user_id:
        return True
    return any(split_player_token(token)[0] == guest_user_id for token in game.player_ids or [])


class GuestMigrationService(BaseService):
    """Re-attributes a guest's games and scores to a registered user."""

    async def migrate(self, guest_user_id: str, new_user_id: str, email: Optional[str] = None) -> MigrationResult:
        """
        Migrate all guest data to new_user_id.

        Args:
            guest_user_id: Id of the existing guest profile
            new_user_id: Id issued by the identity provider for the new account
            email: Email for the new profile, if it has to be created

        Returns:
            MigrationResult with the number of games and scores moved

        Raises:
            MigrationError: the guest profile does not exist, the ids are
                invalid, or the database rejected the migration
        """
        if not new_user_id or new_user_id == guest_user_id:
            raise MigrationError("the new account id must differ from the guest id")

        logger.info(f"Migrating guest {guest_user_id} to {new_user_id}")

        try:
            async with self.database.transaction() as session:
                guest = await session.get(User, guest_user_id)
                if guest is None:
                    raise MigrationError("no guest user found to migrate")

                result = await session.execute(select(Game))
                games = [game for game in result.scalars().all() if _involves_guest(game, guest_user_id)]
                logger.info(f"Found {len(games)} games to migrate")

                for game in games:
                    game.player_ids = _rewrite_player_ids(list(game.player_ids or []), guest_user_id, new_user_id)
                    if game.host_user_id == guest_user_id:
                        game.host_user_id = new_user_id

                scores_updated = await self.database.reassign_scores(guest_user_id, new_user_id, session)

                if await session.get(User, new_user_id) is None:
                    session.add(User(id=new_user_id, username=guest.username, email=email or guest.email))
                await self.database.delete_user(guest_user_id, session)
        except SQLAlchemyError as e:
            logger.error(f"Guest migration of {guest_user_id} rolled back: {e}", exc_info=True)
            raise MigrationError("your games and scores could not be moved") from e

        games_updated = len(games)
        logger.info(f"Guest migration finished: {games_updated} games, {scores_updated} scores")

        if games_updated:
            self.notify(GAMES, 'updated')
        if scores_updated:
            self.notify(SCORES, 'updated')
        self.notify(USERS, 'updated', new_user_id)

        return MigrationResult(games_updated=games_updated, scores_updated=scores_updated)
