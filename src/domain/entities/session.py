"""
Session Entity

Server-side record of one authenticated browser/client binding.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import DeviceType, LoginMethod, RiskLevel, SessionStatus


class Session(SQLModel, table=True):
    """
    Session entity - identified externally by an opaque bearer token.

    Business Rules:
    - Only the SHA-256 hash of the token is stored, never the token
    - Live iff is_active and status == active and expires_at > now
    - Revoked is terminal and always has is_active == False
    - expires_at only moves on explicit extension
    - Device, geo and security snapshots are captured once at creation
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    token_hash: str = Field(max_length=64, unique=True, index=True)  # SHA-256 hex

    is_active: bool = Field(default=True)
    status: SessionStatus = Field(default=SessionStatus.active)

    # Device snapshot
    device_name: Optional[str] = Field(default=None, max_length=255)
    device_browser: Optional[str] = Field(default=None, max_length=100)
    device_os: Optional[str] = Field(default=None, max_length=100)
    device_type: DeviceType = Field(default=DeviceType.unknown)
    device_user_agent: Optional[str] = Field(default=None, max_length=512)

    # Location snapshot
    geo_country: Optional[str] = Field(default=None, max_length=100)
    geo_city: Optional[str] = Field(default=None, max_length=100)
    geo_timezone: Optional[str] = Field(default=None, max_length=64)
    geo_ip: Optional[str] = Field(default=None, max_length=45)  # IPv6 compatible
    geo_latitude: Optional[float] = None
    geo_longitude: Optional[float] = None

    # Security snapshot
    login_method: LoginMethod = Field(default=LoginMethod.password)
    risk_score: int = Field(default=0)
    risk_level: RiskLevel = Field(default=RiskLevel.medium)
    is_verified: bool = Field(default=False)
    failed_attempts: int = Field(default=0)
    last_security_check: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_accessed_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_created", "user_id", "created_at"),
        Index("idx_session_active_status", "is_active", "status"),
    )

    def is_live(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return (
            self.is_active
            and self.status == SessionStatus.active
            and self.expires_at > now
        )
