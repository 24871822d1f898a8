import logging
from typing import Any, Dict, Optional
from uuid import UUID

from src.app.repositories.exceptions import StoreUnavailable
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import ActionType, AuditEvent, ResourceType

logger = logging.getLogger(__name__)


class ActivityAuditor:
    """
    Writes session audit events.

    Fire-and-forget from the caller's point of view: a failed write is logged
    and rolled back, it never fails the session operation that produced it.
    Must be called inside an entered unit of work, after the caller's commit.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def log(
        self,
        user_id: UUID,
        action: ActionType,
        resource_type: ResourceType,
        message: str,
        resource_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        event = AuditEvent(
            user_id=user_id,
            action=action.value,
            resource_type=resource_type.value,
            resource_id=resource_id,
            message=message,
            event_metadata=metadata,
        )
        try:
            await self.uow.audit_events.create(event)
            await self.uow.commit()
        except StoreUnavailable as exc:
            logger.warning(f"Audit event {action.value} for user {user_id} dropped: {exc}")
            await self.uow.rollback()
