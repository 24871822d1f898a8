from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from src.domain.entities import Session, SessionStatus


@dataclass(frozen=True)
class SessionFilter:
    """
    Conjunctive filter over session rows. Unset fields do not constrain.

    expires_before / expires_after are strict comparisons against expires_at.
    """

    id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    exclude_id: Optional[UUID] = None
    is_active: Optional[bool] = None
    status: Optional[SessionStatus] = None
    expires_before: Optional[datetime] = None
    expires_after: Optional[datetime] = None

    @classmethod
    def live(cls, now: datetime, **kwargs) -> "SessionFilter":
        """Rows that are active, not revoked and not yet expired at ``now``"""
        return cls(is_active=True, status=SessionStatus.active, expires_after=now, **kwargs)


# ((value per grouped field), count)
GroupCount = Tuple[Tuple[Any, ...], int]


class ISessionRepository(ABC):
    """
    Session store interface - application layer.

    Pure persistence, no business rules. Every operation raises StoreUnavailable
    when the backing store errors or times out.
    """

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Persist a new session"""
        pass

    @abstractmethod
    async def find_by_token_hash(
        self,
        token_hash: str,
        active_only: bool = True,
        not_expired: bool = True,
        now: Optional[datetime] = None,
    ) -> Optional[Session]:
        """Find the session bound to a token hash. ``now`` defaults to the current time."""
        pass

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def get_by_user_id(
        self,
        user_id: UUID,
        created_after: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Session]:
        """Sessions of a user, newest first"""
        pass

    @abstractmethod
    async def update_fields(self, session_id: UUID, values: Dict[str, Any]) -> bool:
        """Update columns of one session. Returns True if the row existed."""
        pass

    @abstractmethod
    async def bulk_update_where(
        self, session_filter: SessionFilter, values: Dict[str, Any]
    ) -> int:
        """Update every matching row. Returns count of updated rows."""
        pass

    @abstractmethod
    async def delete_where(self, session_filter: SessionFilter) -> int:
        """Hard-delete every matching row. Returns count of deleted rows."""
        pass

    @abstractmethod
    async def count_where(self, session_filter: SessionFilter) -> int:
        """Count matching rows"""
        pass

    @abstractmethod
    async def aggregate(
        self, user_id: UUID, group_by: Sequence[str]
    ) -> List[GroupCount]:
        """Count a user's sessions grouped by the given columns"""
        pass
