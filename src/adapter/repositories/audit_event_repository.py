from typing import List
from uuid import UUID

from sqlmodel import select

from src.adapter.repositories.base import GuardedRepository
from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.domain.entities import AuditEvent


class AuditEventRepository(GuardedRepository, IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Create a new audit event (immutable)"""
        self.session.add(audit_event)
        await self._run(self.session.flush())
        await self._run(self.session.refresh(audit_event))
        return audit_event

    async def get_by_user_id(self, user_id: UUID, limit: int = 50) -> List[AuditEvent]:
        stmt = (
            select(AuditEvent)
            .where(AuditEvent.user_id == user_id)
            .order_by(AuditEvent.created_at.desc())
            .limit(limit)
        )
        result = await self._run(self.session.exec(stmt))
        return list(result.all())
