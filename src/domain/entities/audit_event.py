"""
AuditEvent Entity

Immutable log of session events (login, logout, revoke, extend).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utcnow


class AuditEvent(SQLModel, table=True):
    """
    AuditEvent entity - immutable log of session activity.

    Business Rules:
    - Immutable (never updated or deleted)
    - resource_id is a session id, or "bulk" for bulk revocations
    - Metadata stores additional context (device, location, risk level)
    """

    __tablename__ = "audit_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: Optional[UUID] = Field(default=None, index=True)

    action: str = Field(max_length=100)  # e.g., "login", "logout"
    resource_type: str = Field(max_length=50)
    resource_id: Optional[str] = Field(default=None, max_length=64)
    message: str = Field(default="", max_length=255)
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_user_action", "user_id", "action"),
    )
