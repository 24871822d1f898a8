from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, update
from sqlalchemy import select as sa_select
from sqlmodel import select

from src.adapter.repositories.base import GuardedRepository
from src.app.repositories.session_repository import (
    GroupCount,
    ISessionRepository,
    SessionFilter,
)
from src.domain.base import utcnow
from src.domain.entities import Session, SessionStatus


def _clauses(session_filter: SessionFilter) -> list:
    clauses = []
    if session_filter.id is not None:
        clauses.append(Session.id == session_filter.id)
    if session_filter.user_id is not None:
        clauses.append(Session.user_id == session_filter.user_id)
    if session_filter.exclude_id is not None:
        clauses.append(Session.id != session_filter.exclude_id)
    if session_filter.is_active is not None:
        clauses.append(Session.is_active == session_filter.is_active)
    if session_filter.status is not None:
        clauses.append(Session.status == session_filter.status)
    if session_filter.expires_before is not None:
        clauses.append(Session.expires_at < session_filter.expires_before)
    if session_filter.expires_after is not None:
        clauses.append(Session.expires_at > session_filter.expires_after)
    return clauses


class SessionRepository(GuardedRepository, ISessionRepository):
    """Session repository implementation using SQLModel"""

    async def create(self, session_obj: Session) -> Session:
        """Persist a new session"""
        self.session.add(session_obj)
        await self._run(self.session.flush())
        await self._run(self.session.refresh(session_obj))
        return session_obj

    async def find_by_token_hash(
        self,
        token_hash: str,
        active_only: bool = True,
        not_expired: bool = True,
        now: Optional[datetime] = None,
    ) -> Optional[Session]:
        """Find the session bound to a token hash (unique index lookup)"""
        stmt = select(Session).where(Session.token_hash == token_hash)
        if active_only:
            stmt = stmt.where(
                Session.is_active == True,  # noqa: E712
                Session.status == SessionStatus.active,
            )
        if not_expired:
            stmt = stmt.where(Session.expires_at > (now or utcnow()))
        result = await self._run(self.session.exec(stmt))
        return result.one_or_none()

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self._run(self.session.exec(stmt))
        return result.one_or_none()

    async def get_by_user_id(
        self,
        user_id: UUID,
        created_after: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Session]:
        """Sessions of a user, newest first"""
        stmt = select(Session).where(Session.user_id == user_id)
        if created_after is not None:
            stmt = stmt.where(Session.created_at >= created_after)
        stmt = stmt.order_by(Session.created_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._run(self.session.exec(stmt))
        return list(result.all())

    async def update_fields(self, session_id: UUID, values: Dict[str, Any]) -> bool:
        """Single-row update, atomic per document"""
        stmt = update(Session).where(Session.id == session_id).values(**values)
        result = await self._run(self.session.execute(stmt))
        await self._run(self.session.flush())
        return result.rowcount > 0

    async def bulk_update_where(
        self, session_filter: SessionFilter, values: Dict[str, Any]
    ) -> int:
        stmt = update(Session).where(*_clauses(session_filter)).values(**values)
        result = await self._run(self.session.execute(stmt))
        await self._run(self.session.flush())
        return result.rowcount

    async def delete_where(self, session_filter: SessionFilter) -> int:
        clauses = _clauses(session_filter)
        if not clauses:
            raise ValueError("Refusing to delete sessions with an empty filter")
        stmt = delete(Session).where(*clauses)
        result = await self._run(self.session.execute(stmt))
        await self._run(self.session.flush())
        return result.rowcount

    async def count_where(self, session_filter: SessionFilter) -> int:
        stmt = sa_select(func.count()).select_from(Session).where(*_clauses(session_filter))
        result = await self._run(self.session.execute(stmt))
        return result.scalar_one()

    async def aggregate(
        self, user_id: UUID, group_by: Sequence[str]
    ) -> List[GroupCount]:
        """GROUP BY the requested columns, COUNT(*) per group"""
        unknown = [name for name in group_by if name not in Session.__table__.columns]
        if unknown:
            raise ValueError(f"Cannot group sessions by {unknown}")

        columns = [getattr(Session, name) for name in group_by]
        stmt = (
            sa_select(*columns, func.count())
            .where(Session.user_id == user_id)
            .group_by(*columns)
        )
        result = await self._run(self.session.execute(stmt))
        return [(tuple(row[:-1]), row[-1]) for row in result.all()]
