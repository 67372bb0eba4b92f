"""
Change feed for backend resources.

Mutating services publish a ResourceChanged event after each successful write;
consumers such as the data manager subscribe and refresh the affected
collection. Each subscriber gets its own unbounded queue.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

GAMES = "games"
SCORES = "scores"
USERS = "users"
RESOURCES = (GAMES, SCORES, USERS)


@dataclass(frozen=True)
class ResourceChanged:
    """A backend resource collection was mutated."""
    resource: str
    action: str  # 'created', 'updated', 'deleted'
    record_id: Optional[str] = None


class ChangeFeed:
    """Fan-out of ResourceChanged events to every subscriber queue."""
    
    def __init__(self):
        self._subscribers: List[asyncio.Queue] = []
    
    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(queue)
        return queue
    
    def unsubscribe(self, queue: asyncio.Queue):
        if queue in self._subscribers:
            self._subscribers.remove(queue)
    
    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
    
    def publish(self, event: ResourceChanged):
        """Deliver an event to all current subscribers without blocking."""
        if event.resource not in RESOURCES:
            raise ValueError(f"Unknown resource '{event.resource}'")
        logger.debug(f"Publishing {event.action} on {event.resource} ({event.record_id})")
        for queue in list(self._subscribers):
            queue.put_nowait(event)
