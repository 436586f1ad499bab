"""Activity Log Repository Interface

Defines the contract for appending audit entries.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.activity_log import ActivityLogEntry


class ActivityLogRepository(ABC):
    """
    Repository interface for the append-only activity log

    There are deliberately no update or delete operations.
    """

    @abstractmethod
    async def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        """
        Append an entry to the activity log

        Args:
            entry: ActivityLogEntry to persist

        Returns:
            Persisted entry
        """
        pass

    @abstractmethod
    async def list_by_entity(self, entity_type: str, entity_id: str) -> List[ActivityLogEntry]:
        """
        Retrieve entries for one entity, oldest first

        Args:
            entity_type: Entity type (e.g., invoice)
            entity_id: Entity ID

        Returns:
            List of entries
        """
        pass
