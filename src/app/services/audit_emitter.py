"""Audit Emitter

Appends activity log entries after the financial state has been committed.
Audit failures are reported, never propagated: a payment that was recorded
stays recorded even if its log entry could not be written.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional
import sentry_sdk
from src.app.repositories.activity_log_repository import ActivityLogRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.activity_log import ActivityLogEntry

logger = logging.getLogger(__name__)


class AuditEmitter:
    """
    Best-effort writer of ActivityLogEntry records

    Each record() call writes and commits exactly one entry in its own
    transaction.
    """

    def __init__(self, uow: UnitOfWork, activity_log_repo: ActivityLogRepository):
        self.uow = uow
        self.activity_log_repo = activity_log_repo

    async def record(
        self,
        actor_id: str,
        action: str,
        entity_type: str,
        entity_id: Optional[str],
        timestamp: Optional[datetime] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Append an audit entry

        Args:
            actor_id: ID of the acting user
            action: Action name (see ActivityAction)
            entity_type: Type of the affected entity
            entity_id: ID of the affected entity, if any
            timestamp: When the action happened (defaults to now)
            details: Optional structured context

        Returns:
            True if the entry was written, False if writing failed
        """
        entry = ActivityLogEntry(
            user_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            timestamp=timestamp or datetime.utcnow(),
        )

        try:
            await self.activity_log_repo.append(entry)
            await self.uow.commit()
            return True
        except Exception as e:
            logger.error(
                f"Failed to write activity log entry action={action} "
                f"entity={entity_type}:{entity_id} actor={actor_id}: {e}"
            )
            sentry_sdk.capture_exception(e)
            try:
                await self.uow.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback after audit failure also failed: {rollback_error}")
            return False
