"""SQLAlchemy Activity Log Repository Implementation

Append-only persistence of audit entries.
"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.activity_log_repository import ActivityLogRepository
from src.domain.activity_log import ActivityLogEntry


class SqlAlchemyActivityLogRepository(ActivityLogRepository):
    """SQLAlchemy implementation of ActivityLogRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_by_entity(self, entity_type: str, entity_id: str) -> List[ActivityLogEntry]:
        statement = (
            select(ActivityLogEntry)
            .where(ActivityLogEntry.entity_type == entity_type)
            .where(ActivityLogEntry.entity_id == entity_id)
            .order_by(ActivityLogEntry.timestamp)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
