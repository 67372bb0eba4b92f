import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Scoreboard configuration settings"""
    
    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///scoreboard.db')
    
    # Runtime settings
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    
    # Fetch cache settings
    CACHE_EXPIRATION_SECONDS = float(os.getenv('CACHE_EXPIRATION_SECONDS', 300))  # 5 minutes
    
    # Leaderboard settings
    LEADERBOARD_LIMIT = int(os.getenv('LEADERBOARD_LIMIT', 100))
    
    @classmethod
    def get_async_database_url(cls, database_url: str = None) -> str:
        """Convert a plain sqlite URL to its aiosqlite form"""
        url = database_url or cls.DATABASE_URL
        if url.startswith('sqlite:///'):
            url = url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return url
    
    @classmethod
    def validate(cls):
        """Validate that configuration values are usable"""
        if cls.CACHE_EXPIRATION_SECONDS <= 0:
            raise ValueError("CACHE_EXPIRATION_SECONDS must be positive")
        if cls.LEADERBOARD_LIMIT <= 0:
            raise ValueError("LEADERBOARD_LIMIT must be positive")
