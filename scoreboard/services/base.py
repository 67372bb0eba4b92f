"""
Base service class for scoreboard mutation services.

Holds the database handle and the optional change feed that mutations are
announced on.
"""

import logging
from typing import Optional

from scoreboard.database.database import Database
from scoreboard.services.events import ChangeFeed, ResourceChanged

logger = logging.getLogger(__name__)

class BaseService:
    """Base class for services that write to the backend."""
    
    def __init__(self, database: Database, feed: Optional[ChangeFeed] = None):
        """
        Initialize base service.
        
        Args:
            database: Initialized Database instance
            feed: Change feed to announce mutations on, if any
        """
        self.database = database
        self.feed = feed
    
    def notify(self, resource: str, action: str, record_id: str = None):
        """Announce a completed mutation on the change feed."""
        if self.feed is None:
            return
        self.feed.publish(ResourceChanged(resource=resource, action=action, record_id=record_id))
