"""
Fetch timestamp cache for backend collections.

Tracks when each resource collection was last fetched successfully so repeated
loads inside the expiration window are skipped. Only successful fetches are
recorded; a failed fetch leaves the previous timestamp untouched so the next
check retries immediately.
"""

import time
import logging
from typing import Callable, Dict, Optional

from scoreboard.config import Config

logger = logging.getLogger(__name__)

DEFAULT_EXPIRATION_SECONDS = 300.0


class FetchCache:
    """TTL bookkeeping of the last successful fetch per resource key."""
    
    def __init__(self, expiration_seconds: float = None, clock: Callable[[], float] = time.time):
        if expiration_seconds is None:
            expiration_seconds = Config.CACHE_EXPIRATION_SECONDS
        if expiration_seconds <= 0:
            raise ValueError("expiration_seconds must be positive")
        self.expiration_seconds = expiration_seconds
        self._clock = clock
        self._last_fetch: Dict[str, float] = {}
    
    def should_fetch(self, key: str) -> bool:
        """True if the key was never fetched or its last fetch is older than the window."""
        last_fetch = self._last_fetch.get(key)
        if last_fetch is None:
            return True
        return self._clock() - last_fetch > self.expiration_seconds
    
    def mark_fetched(self, key: str):
        """Record a successful fetch at the current time."""
        self._last_fetch[key] = self._clock()
    
    def last_fetched(self, key: str) -> Optional[float]:
        return self._last_fetch.get(key)
    
    def invalidate(self, key: str):
        """Force the next check for a key to fetch."""
        if self._last_fetch.pop(key, None) is not None:
            logger.debug(f"Invalidated fetch cache for '{key}'")
    
    def invalidate_all(self):
        """Clear every timestamp."""
        self._last_fetch.clear()
        logger.debug("Invalidated entire fetch cache")
