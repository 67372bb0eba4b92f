import asyncio
import sys

from scoreboard.config import Config
from scoreboard.database.database import Database
from scoreboard.services.backend import DatabaseBackend
from scoreboard.services.data_manager import DataManager
from scoreboard.utils.logger import setup_logger

logger = setup_logger(__name__)

TOP_ENTRIES_SHOWN = 10

async def main() -> int:
    """Load every collection and log the top of the leaderboard"""
    Config.validate()
    
    db = Database()
    await db.initialize()
    
    try:
        manager = DataManager(DatabaseBackend(db))
        leaderboard = await manager.load_all_data()
        
        if manager.last_error:
            logger.error(f"Leaderboard may be stale: {manager.last_error}")
            return 1
        
        logger.info(
            f"Loaded {len(manager.games)} games, {len(manager.scores)} scores, "
            f"{len(manager.users)} users"
        )
        for rank, entry in enumerate(leaderboard[:TOP_ENTRIES_SHOWN], start=1):
            logger.info(
                f"#{rank} {entry.nickname}: {entry.total_wins} wins / {entry.total_games} games "
                f"({entry.win_rate:.0%})"
            )
        return 0
    finally:
        await db.close()

def run():
    """Console entry point"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted")

if __name__ == "__main__":
    run()
