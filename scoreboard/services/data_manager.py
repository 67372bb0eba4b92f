"""
Data manager for backend collections and the derived leaderboard.

Loads games, scores and users from a BackendAPI through a FetchCache, keeps
immutable snapshots of each, and recomputes the leaderboard after a complete
load. Snapshots are replaced wholesale, never mutated in place, so readers may
hold on to a previous tuple while a refresh runs.
"""

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from scoreboard.data_models.leaderboard import PlayerLeaderboardEntry
from scoreboard.data_models.records import GameRecord, ScoreRecord, UserRecord
from scoreboard.services.backend import BackendAPI
from scoreboard.services.events import GAMES, SCORES, USERS, RESOURCES, ChangeFeed, ResourceChanged
from scoreboard.services.fetch_cache import FetchCache
from scoreboard.services.leaderboard import LeaderboardAggregator
from scoreboard.utils.exceptions import FetchFailure
from scoreboard.utils.logger import setup_logger
from scoreboard.utils.player_ids import is_user_in_game, resolve_nickname

logger = setup_logger(__name__)


class DataManager:
    """Fetch-then-aggregate pipeline over the backend collections."""

    def __init__(
        self,
        backend: BackendAPI,
        cache: Optional[FetchCache] = None,
        aggregator: Optional[LeaderboardAggregator] = None
    ):
        self.backend = backend
        self.cache = cache or FetchCache()
        self.aggregator = aggregator or LeaderboardAggregator()

        self.games: Tuple[GameRecord, ...] = ()
        self.scores: Tuple[ScoreRecord, ...] = ()
        self.users: Tuple[UserRecord, ...] = ()
        self.leaderboard: Tuple[PlayerLeaderboardEntry, ...] = ()

        # Loading states
        self.loading: Dict[str, bool] = {key: False for key in RESOURCES}
        self.is_loading_leaderboard = False

        # Outstanding fetch errors keyed by resource
        self.errors: Dict[str, str] = {}

        # At most one in-flight fetch per resource
        self._locks: Dict[str, asyncio.Lock] = {key: asyncio.Lock() for key in RESOURCES}

    @property
    def last_error(self) -> Optional[str]:
        """Most recent unresolved fetch error, for display."""
        if not self.errors:
            return None
        return list(self.errors.values())[-1]

    # Loading

    async def load_all_data(self, force: bool = False) -> Tuple[PlayerLeaderboardEntry, ...]:
        """Load all collections concurrently, then recompute the leaderboard if every load succeeded."""
        results = await asyncio.gather(*(self._load(key, self._fetcher(key), force=force) for key in RESOURCES))
        if not all(results):
            failed = [key for key, ok in zip(RESOURCES, results) if not ok]
            logger.warning(f"Keeping previous leaderboard, failed to load: {', '.join(failed)}")
            return self.leaderboard
        return self.calculate_leaderboard()

    async def load_games(self) -> bool:
        return await self._load(GAMES, self._fetcher(GAMES))

    async def load_scores(self) -> bool:
        return await self._load(SCORES, self._fetcher(SCORES))

    async def load_users(self) -> bool:
        return await self._load(USERS, self._fetcher(USERS))

    async def _load(self, key: str, fetch: Callable[[], Awaitable[Sequence]], force: bool = False) -> bool:
        """
        Fetch one collection unless its cache entry is still fresh.

        A forced load always runs its own fetch, after any fetch already in
        flight for the key, so it never settles for data read before the
        caller's invalidation.

        Returns:
            True if the snapshot is usable (fresh or just fetched), False if the fetch failed
        """
        if not force and not self.cache.should_fetch(key):
            logger.debug(f"Cache hit for {key}, skipping fetch")
            return True

        async with self._locks[key]:
            # A concurrent caller may have finished the fetch while we waited
            if not force and not self.cache.should_fetch(key):
                logger.debug(f"{key} fetched by a concurrent load")
                return True

            self.loading[key] = True
            try:
                records = await fetch()
            except FetchFailure as e:
                # Re-insert so the latest failure sorts last
                self.errors.pop(key, None)
                self.errors[key] = e.user_message
                logger.warning(f"Keeping {len(getattr(self, key))} cached {key}: {e}")
                return False
            finally:
                self.loading[key] = False

            setattr(self, key, tuple(records))
            self.cache.mark_fetched(key)
            self.errors.pop(key, None)
            logger.info(f"Loaded {len(records)} {key}")
            return True

    # Leaderboard

    def calculate_leaderboard(self) -> Tuple[PlayerLeaderboardEntry, ...]:
        """Recompute the leaderboard from the current snapshots."""
        self.is_loading_leaderboard = True
        try:
            self.leaderboard = tuple(self.aggregator.calculate(self.games, self.scores, self.users))
        finally:
            self.is_loading_leaderboard = False
        logger.info(f"Leaderboard recalculated with {len(self.leaderboard)} players")
        return self.leaderboard

    # Refreshing

    async def refresh_data(self) -> Tuple[PlayerLeaderboardEntry, ...]:
        self.cache.invalidate_all()
        return await self.load_all_data(force=True)

    async def refresh_games(self) -> bool:
        return await self._refresh(GAMES)

    async def refresh_scores(self) -> bool:
        return await self._refresh(SCORES)

    async def refresh_users(self) -> bool:
        return await self._refresh(USERS)

    async def _refresh(self, key: str) -> bool:
        self.cache.invalidate(key)
        loaded = await self._load(key, self._fetcher(key), force=True)
        if loaded:
            self.calculate_leaderboard()
        return loaded

    async def watch(self, feed: ChangeFeed):
        """
        Refresh collections as change events arrive, until cancelled.

        Events that pile up while a refresh runs are coalesced, so each
        affected resource is reloaded once per batch.
        """
        queue = feed.subscribe()
        logger.info("Watching change feed")
        try:
            while True:
                batch: List[ResourceChanged] = [await queue.get()]
                while not queue.empty():
                    batch.append(queue.get_nowait())
                try:
                    await self.apply_changes(batch)
                finally:
                    for _ in batch:
                        queue.task_done()
        finally:
            feed.unsubscribe(queue)
            logger.info("Stopped watching change feed")

    async def apply_changes(self, events: Sequence[ResourceChanged]) -> bool:
        """Reload every resource named by the events and recompute once."""
        resources = [key for key in RESOURCES if any(event.resource == key for event in events)]
        if not resources:
            return True

        for key in resources:
            self.cache.invalidate(key)
        results = await asyncio.gather(*(self._load(key, self._fetcher(key), force=True) for key in resources))

        if not all(results):
            logger.warning(f"Change refresh incomplete for {resources}, leaderboard unchanged")
            return False
        self.calculate_leaderboard()
        return True

    def _fetcher(self, key: str) -> Callable[[], Awaitable[Sequence]]:
        return {
            GAMES: self.backend.list_games,
            SCORES: self.backend.list_scores,
            USERS: self.backend.list_users,
        }[key]

    # Data access

    def get_games_for_user(self, user_id: str) -> List[GameRecord]:
        """Games the user hosts or plays in."""
        return [
            game for game in self.games
            if game.host_user_id == user_id or is_user_in_game(user_id, game.player_ids)
        ]

    def get_scores_for_game(self, game_id: str) -> List[ScoreRecord]:
        return [score for score in self.scores if score.game_id == game_id]

    def get_scores_for_player(self, player_id: str) -> List[ScoreRecord]:
        return [score for score in self.scores if score.player_id == player_id]

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return next((user for user in self.users if user.id == user_id), None)

    def get_player_name(self, player_id: str) -> str:
        return resolve_nickname(player_id, {user.id: user for user in self.users})
