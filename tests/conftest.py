"""Shared fixtures: file-backed SQLite databases, stub backends and a fake clock."""

import itertools
from collections import Counter
from datetime import datetime

import pytest
import pytest_asyncio

from scoreboard.data_models.records import GameRecord, ScoreRecord, UserRecord
from scoreboard.database.database import Database
from scoreboard.utils.exceptions import FetchFailure

_ids = itertools.count(1)


def make_game(
    game_id=None,
    player_ids=("alice", "bob"),
    game_status="completed",
    win_condition="highestScore",
    game_name="Friday Darts",
    host_user_id="alice",
    created_at=datetime(2024, 5, 10, 20, 0),
):
    return GameRecord(
        id=game_id or f"game-{next(_ids)}",
        host_user_id=host_user_id,
        player_ids=tuple(player_ids),
        game_status=game_status,
        win_condition=win_condition,
        game_name=game_name,
        created_at=created_at,
    )


def make_score(game_id, player_id, score, round_number=1, created_at=None):
    return ScoreRecord(
        id=f"score-{next(_ids)}",
        game_id=game_id,
        player_id=player_id,
        round_number=round_number,
        score=score,
        created_at=created_at,
    )


def make_user(user_id, username):
    return UserRecord(id=user_id, username=username, email=f"{user_id}@example.com")


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class StubBackend:
    """In-memory BackendAPI that counts calls and can be told to fail."""

    def __init__(self, games=(), scores=(), users=()):
        self.games = list(games)
        self.scores = list(scores)
        self.users = list(users)
        self.calls = Counter()
        self.failing = set()

    async def _list(self, resource):
        self.calls[resource] += 1
        if resource in self.failing:
            raise FetchFailure(resource, "backend unavailable")
        return list(getattr(self, resource))

    async def list_games(self):
        return await self._list("games")

    async def list_scores(self):
        return await self._list("scores")

    async def list_users(self):
        return await self._list("users")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return StubBackend()


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'scoreboard_test.db'}")
    await db.initialize()
    yield db
    await db.close()
