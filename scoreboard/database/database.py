from datetime import datetime
from typing import Optional, List, Iterable
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import select, update, delete
from contextlib import asynccontextmanager

from scoreboard.config import Config
from scoreboard.database.models import Base, Game, Score, User, GameStatus
from scoreboard.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: str = None):
        self.logger = setup_logger(__name__)
        self.database_url = Config.get_async_database_url(database_url)
        self.engine = None
        self.async_session = None

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        self.engine = create_async_engine(
            self.database_url,
            echo=Config.DEBUG,
            future=True
        )

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        # Create all tables
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        All operations within the context are committed together on success,
        or rolled back together on failure.

        Usage:
            async with db.transaction() as session:
                session.add(game)
                session.add(score)
                # Both commit together here
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def session_scope(self, session: Optional[AsyncSession] = None):
        """
        Use the caller's session if one is given, otherwise open a new transaction.

        Lets single writes run on their own or as one step of a larger
        transaction that the caller commits.
        """
        if session is not None:
            yield session
        else:
            async with self.transaction() as own_session:
                yield own_session

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")

    # Full collection listings
    async def list_games(self) -> List[Game]:
        """Get all games, oldest first"""
        async with self.get_session() as session:
            result = await session.execute(select(Game).order_by(Game.created_at, Game.id))
            return list(result.scalars().all())

    async def list_scores(self) -> List[Score]:
        """Get all scores in submission order"""
        async with self.get_session() as session:
            result = await session.execute(select(Score).order_by(Score.created_at, Score.id))
            return list(result.scalars().all())

    async def list_users(self) -> List[User]:
        """Get all user profiles"""
        async with self.get_session() as session:
            result = await session.execute(select(User).order_by(User.created_at, User.id))
            return list(result.scalars().all())

    # Game operations
    async def get_game(self, game_id: str) -> Optional[Game]:
        """Get a game by id"""
        async with self.get_session() as session:
            return await session.get(Game, game_id)

    async def create_game(
        self,
        host_user_id: str,
        player_ids: Iterable[str],
        game_name: str = None,
        rounds: int = 1,
        win_condition: Optional[str] = None,
        game_status: str = GameStatus.ACTIVE.value,
        created_at: Optional[datetime] = None
    ) -> Game:
        """Create a new game"""
        async with self.get_session() as session:
            game = Game(
                host_user_id=host_user_id,
                player_ids=list(player_ids),
                game_name=game_name,
                rounds=rounds,
                win_condition=win_condition,
                game_status=game_status
            )
            if created_at is not None:
                game.created_at = created_at
            session.add(game)
            await session.commit()
            await session.refresh(game)
            return game

    async def update_game(self, game_id: str, **values) -> Optional[Game]:
        """Update columns of a game, returning the refreshed row"""
        async with self.get_session() as session:
            game = await session.get(Game, game_id)
            if game is None:
                return None
            for key, value in values.items():
                if not hasattr(Game, key):
                    raise AttributeError(f"Game has no column '{key}'")
                setattr(game, key, list(value) if key == 'player_ids' else value)
            await session.commit()
            await session.refresh(game)
            return game

    async def delete_game(self, game_id: str, session: AsyncSession = None) -> bool:
        """Delete a game row (scores must be removed first)"""
        async with self.session_scope(session) as s:
            result = await s.execute(delete(Game).where(Game.id == game_id))
            return result.rowcount > 0

    # User operations
    async def get_user(self, user_id: str) -> Optional[User]:
        """Get a user profile by id"""
        async with self.get_session() as session:
            return await session.get(User, user_id)

    async def create_user(self, username: str, email: str = None, user_id: str = None) -> User:
        """Create a new user profile"""
        async with self.get_session() as session:
            user = User(username=username, email=email)
            if user_id is not None:
                user.id = user_id
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    async def delete_user(self, user_id: str, session: AsyncSession = None) -> bool:
        """Delete a user profile"""
        async with self.session_scope(session) as s:
            result = await s.execute(delete(User).where(User.id == user_id))
            return result.rowcount > 0

    # Score operations
    async def upsert_score(self, game_id: str, player_id: str, round_number: int, score: int) -> Score:
        """Insert or replace the score for a (game, player, round) triple"""
        async with self.get_session() as session:
            result = await session.execute(
                select(Score).where(
                    Score.game_id == game_id,
                    Score.player_id == player_id,
                    Score.round_number == round_number
                )
            )
            existing = result.scalar_one_or_none()

            if existing:
                existing.score = score
                row = existing
            else:
                row = Score(
                    game_id=game_id,
                    player_id=player_id,
                    round_number=round_number,
                    score=score
                )
                session.add(row)

            await session.commit()
            await session.refresh(row)
            return row

    async def list_scores_for_game(self, game_id: str) -> List[Score]:
        """Get all scores for a game ordered by round"""
        async with self.get_session() as session:
            result = await session.execute(
                select(Score)
                .where(Score.game_id == game_id)
                .order_by(Score.round_number, Score.created_at)
            )
            return list(result.scalars().all())

    async def delete_scores_for_game(self, game_id: str, session: AsyncSession = None) -> int:
        """Delete every score belonging to a game"""
        async with self.session_scope(session) as s:
            result = await s.execute(delete(Score).where(Score.game_id == game_id))
            return result.rowcount

    async def reassign_scores(self, old_player_id: str, new_player_id: str, session: AsyncSession = None) -> int:
        """Move all score rows from one player id to another"""
        async with self.session_scope(session) as s:
            result = await s.execute(
                update(Score)
                .where(Score.player_id == old_player_id)
                .values(player_id=new_player_id)
            )
            return result.rowcount
