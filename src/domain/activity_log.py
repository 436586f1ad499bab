"""Activity Log Domain Entity

Append-only audit trail of state-changing actions.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, String
from src.domain.base import BaseModel, generate_uuid


class ActivityAction:
    """Action names written by the payment core"""
    RECORD_PAYMENT = "record_payment"
    DELETE_PAYMENT = "delete_payment"
    RECONCILE_INVOICE = "reconcile_invoice"


class ActivityLogEntry(BaseModel, table=True):
    """
    Activity Log Entry - Immutable record of a user action

    Domain Rules:
    - Entries are appended only; never updated or deleted
    - entity_id may be None for actions not tied to one entity
    """

    __tablename__ = "activity_logs"
    __table_args__ = (
        Index('ix_activity_logs_entity', 'entity_type', 'entity_id'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique entry identifier (UUID)"
    )

    user_id: str = Field(
        description="ID of the acting user"
    )

    action: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Action name (e.g., record_payment)"
    )

    entity_type: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Type of the affected entity (e.g., invoice)"
    )

    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the affected entity"
    )

    details: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Optional structured context (payment id, amount)"
    )

    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the action happened"
    )
