"""
Session Management

Session views and the analytics dashboard exposed to the rest of the system.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from uuid import UUID

from src.app.repositories.exceptions import StoreUnavailable
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Session
from src.libs.result import Error, Result, Return

from .dtos import (
    CleanupReport,
    DeviceAnalytics,
    LocationAnalytics,
    SecurityAnalytics,
    SessionDashboard,
    SessionStats,
    SessionView,
)
from .risk_engine import RiskEngine
from .session_analytics import SessionAnalytics

logger = logging.getLogger(__name__)


class SessionManagementService:
    """
    Business Rules:
    - Session listings carry a security analysis per session, never the token hash
    - The dashboard is best-effort: a failing section is zero-valued and the
      dashboard is flagged as degraded
    """

    def __init__(
        self,
        uow: UnitOfWork,
        trust_window: timedelta = timedelta(days=30),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.trust_window = trust_window
        self.clock = clock
        self.analytics = SessionAnalytics(uow, clock)

    async def get_user_sessions(
        self, user_id: UUID, current_session_id: Optional[UUID] = None
    ) -> Result[List[SessionView]]:
        """All sessions of a user, newest first, with security analysis"""
        now = self.clock()
        async with self.uow:
            try:
                sessions = await self.uow.sessions.get_by_user_id(user_id)
            except StoreUnavailable as exc:
                logger.warning(f"Session listing degraded for user {user_id}: {exc}")
                return Return.err(Error("STORE_UNAVAILABLE", f"Session store unavailable: {exc}"))

            views = [
                self._view(session, sessions, now, session.id == current_session_id)
                for session in sessions
            ]
        return Return.ok(views)

    async def describe_session(self, session: Session) -> Result[SessionView]:
        """One session with its security context, judged against the owner's other sessions"""
        session_id, user_id = session.id, session.user_id
        now = self.clock()
        async with self.uow:
            try:
                sessions = await self.uow.sessions.get_by_user_id(user_id)
            except StoreUnavailable as exc:
                logger.warning(f"Session description degraded for user {user_id}: {exc}")
                return Return.err(Error("STORE_UNAVAILABLE", f"Session store unavailable: {exc}"))

            current = next((s for s in sessions if s.id == session_id), session)
            view = self._view(current, sessions, now, True)
        return Return.ok(view)

    def _view(
        self, session: Session, sessions: List[Session], now: datetime, is_current: bool
    ) -> SessionView:
        security = RiskEngine.analyze_session(session, sessions, self.trust_window, now)
        return SessionView.from_session(session, security=security, is_current=is_current)

    async def get_session_dashboard(self, user_id: UUID) -> SessionDashboard:
        """Bundle of the four analytics reports; never raises"""
        # Sequential: the reports share one unit of work
        stats = await self.analytics.get_session_stats(user_id)
        devices = await self.analytics.get_device_analytics(user_id)
        locations = await self.analytics.get_location_analytics(user_id)
        security = await self.analytics.get_security_analytics(user_id)

        degraded = any(r.is_err() for r in (stats, devices, locations, security))
        security_default = SecurityAnalytics(
            security_recommendations=["Unable to analyze session security"]
        )
        return SessionDashboard(
            overview=stats.unwrap_or(SessionStats()),
            devices=devices.unwrap_or(DeviceAnalytics()),
            locations=locations.unwrap_or(LocationAnalytics()),
            security=security.unwrap_or(security_default),
            degraded=degraded,
            last_updated=self.clock(),
        )

    async def cleanup_expired_sessions(self) -> Result[CleanupReport]:
        return await self.analytics.cleanup_expired_sessions()
