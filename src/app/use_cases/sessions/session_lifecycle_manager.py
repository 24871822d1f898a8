"""
Session Lifecycle Manager

Creation, validation, extension and revocation of cookie-bound sessions.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from src.app.repositories.exceptions import StoreUnavailable
from src.app.repositories.session_repository import SessionFilter
from src.app.services.activity_auditor import ActivityAuditor
from src.app.services.cookie_sealer import CookieSealer, SealingFailure
from src.app.services.request_probe import IRequestProbe
from src.app.services.session_settings import SessionSettings
from src.app.services.token_codec import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    ActionType,
    LoginMethod,
    ResourceType,
    RiskLevel,
    Session,
    SessionStatus,
)
from src.libs.result import Error, Result, Return

from .dtos import SessionCookie, SessionGrant, SessionView
from .risk_engine import RiskEngine

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)

REVOKED_VALUES = {"status": SessionStatus.revoked, "is_active": False}


def store_unavailable(exc: StoreUnavailable) -> Error:
    return Error("STORE_UNAVAILABLE", f"Session store unavailable: {exc}")


class SessionLifecycleManager:
    """
    Orchestrates the session state machine: created -> active -> revoked | expired.

    Business Rules:
    - A session is live iff is_active, status == active and expires_at > now
    - expires_at is absolute; only extend_session advances it
    - Revocation is terminal and idempotent
    - Read paths (get_current_session, validate_token) treat every failure as
      "no session"; write paths return an explicit error
    - Every successful write emits an audit event; audit failures are ignored
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: SessionSettings,
        codec: Optional[TokenCodec] = None,
        sealer: Optional[CookieSealer] = None,
        risk_engine: Optional[RiskEngine] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.settings = settings
        self.codec = codec or TokenCodec()
        self.sealer = sealer or CookieSealer(settings.secrets, settings.cookie_name)
        self.risk_engine = risk_engine or RiskEngine(uow, settings.risk_lookback)
        self.auditor = ActivityAuditor(uow)
        self.clock = clock

    # ------------------------------------------------------------------
    # Cookie binding
    # ------------------------------------------------------------------

    def issue_cookie(self, token: str, expires_at: datetime) -> SessionCookie:
        return SessionCookie(
            name=self.settings.cookie_name,
            value=self.sealer.seal(token),
            expires=expires_at,
            secure=self.settings.production,
            domain=self.settings.cookie_domain,
        )

    def clearing_cookie(self) -> SessionCookie:
        return SessionCookie(
            name=self.settings.cookie_name,
            value="",
            expires=EPOCH,
            secure=self.settings.production,
            domain=self.settings.cookie_domain,
        )

    def _unseal(self, presented_cookie: Optional[str]) -> Optional[str]:
        if not presented_cookie:
            return None
        try:
            return self.sealer.unseal(presented_cookie)
        except SealingFailure as exc:
            logger.info(f"Rejected session cookie: {exc}")
            return None

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_session(
        self,
        user_id: UUID,
        request_probe: IRequestProbe,
        method: LoginMethod = LoginMethod.password,
    ) -> Result[SessionGrant]:
        """
        Mint a session for a user whose credentials were already verified.

        Gathers device/location signals, scores them, persists exactly one
        session row and returns the cookie that binds it.

        Returns:
            Result with SessionGrant (session, raw token, cookie), or Error
        """
        device = await request_probe.get_device_info()
        location = await request_probe.get_geo_info()
        now = self.clock()

        async with self.uow:
            try:
                assessment = await self.risk_engine.assess(user_id, device, location, now=now)

                token = self.codec.generate_token()
                session = Session(
                    user_id=user_id,
                    token_hash=self.codec.hash(token),
                    is_active=True,
                    status=SessionStatus.active,
                    device_name=device.name,
                    device_browser=device.browser,
                    device_os=device.os,
                    device_type=device.type,
                    device_user_agent=device.user_agent,
                    geo_country=location.country,
                    geo_city=location.city,
                    geo_timezone=location.timezone,
                    geo_ip=location.ip,
                    geo_latitude=location.latitude,
                    geo_longitude=location.longitude,
                    login_method=method,
                    risk_score=assessment.score,
                    risk_level=assessment.level,
                    is_verified=assessment.level == RiskLevel.low,
                    failed_attempts=0,
                    last_security_check=now,
                    created_at=now,
                    last_accessed_at=now,
                    expires_at=now + self.settings.duration,
                )
                await self.uow.sessions.create(session)
                await self.uow.commit()
            except StoreUnavailable as exc:
                logger.error(f"Session creation failed for user {user_id}: {exc}")
                return Return.err(store_unavailable(exc))

            view = SessionView.from_session(session, is_current=True)
            logger.info(
                f"Session {session.id} created for user {user_id} "
                f"(risk {assessment.score}/{assessment.level.value})"
            )
            await self.auditor.log(
                user_id,
                ActionType.login,
                ResourceType.session,
                f"User logged in via {method.value}",
                str(session.id),
                {
                    "device": device.name or "Unknown",
                    "method": method.value,
                    "risk_level": assessment.level.value,
                    "location": f"{location.city or 'Unknown'}, {location.country or 'Unknown'}",
                },
            )

        return Return.ok(
            SessionGrant(
                session=session,
                token=token,
                cookie=self.issue_cookie(token, view.expires_at),
                view=view,
            )
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def get_current_session(self, presented_cookie: Optional[str]) -> Optional[Session]:
        """
        Resolve the live session behind a presented cookie and touch last_accessed_at.

        Never raises: a missing, garbled or unknown cookie, and an unreachable
        store, all resolve to None.
        """
        token = self._unseal(presented_cookie)
        if token is None:
            return None

        now = self.clock()
        async with self.uow:
            try:
                session = await self.uow.sessions.find_by_token_hash(
                    self.codec.hash(token), now=now
                )
                if session is None:
                    return None
                await self.uow.sessions.update_fields(session.id, {"last_accessed_at": now})
                await self.uow.commit()
            except StoreUnavailable as exc:
                logger.warning(f"Session lookup degraded to logged-out: {exc}")
                return None
        return session

    async def validate_token(self, raw_token: str) -> bool:
        """Liveness check without touching last_accessed_at"""
        if not raw_token:
            return False

        async with self.uow:
            try:
                session = await self.uow.sessions.find_by_token_hash(
                    self.codec.hash(raw_token), now=self.clock()
                )
            except StoreUnavailable as exc:
                logger.warning(f"Token validation degraded to invalid: {exc}")
                return False
        return session is not None

    # ------------------------------------------------------------------
    # Extension
    # ------------------------------------------------------------------

    async def extend_session(self, presented_cookie: Optional[str]) -> Result[SessionGrant]:
        """
        Explicitly re-issue the session behind a cookie: expires_at becomes
        now + configured duration and a matching cookie is returned.
        """
        token = self._unseal(presented_cookie)
        if token is None:
            return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

        now = self.clock()
        async with self.uow:
            try:
                session = await self.uow.sessions.find_by_token_hash(
                    self.codec.hash(token), now=now
                )
                if session is None:
                    return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

                previous_expiry = session.expires_at
                expires_at = now + self.settings.duration
                await self.uow.sessions.update_fields(
                    session.id, {"expires_at": expires_at, "last_accessed_at": now}
                )
                await self.uow.commit()
            except StoreUnavailable as exc:
                logger.error(f"Session extension failed: {exc}")
                return Return.err(store_unavailable(exc))

            session.expires_at = expires_at
            session.last_accessed_at = now
            view = SessionView.from_session(session, is_current=True)
            await self.auditor.log(
                session.user_id,
                ActionType.session_extended,
                ResourceType.session,
                "Session extended",
                str(session.id),
                {
                    "previous_expires_at": previous_expiry.isoformat(),
                    "expires_at": expires_at.isoformat(),
                },
            )

        return Return.ok(
            SessionGrant(
                session=session,
                token=token,
                cookie=self.issue_cookie(token, expires_at),
                view=view,
            )
        )

    # ------------------------------------------------------------------
    # Revocation
    # ------------------------------------------------------------------

    async def invalidate_session(
        self,
        session: Session,
        action: ActionType = ActionType.session_invalidated,
        description: str = "Session invalidated",
    ) -> Result[SessionCookie]:
        """
        Revoke a session and return the cookie that clears it on the client.
        Invalidating an already revoked session is a successful no-op.
        """
        if session.status == SessionStatus.revoked and not session.is_active:
            return Return.ok(self.clearing_cookie())

        async with self.uow:
            return await self._revoke_and_clear(session, action, description)

    async def _revoke_and_clear(
        self, session: Session, action: ActionType, description: str
    ) -> Result[SessionCookie]:
        # Runs inside an open unit of work
        try:
            await self.uow.sessions.update_fields(session.id, REVOKED_VALUES)
            await self.uow.commit()
        except StoreUnavailable as exc:
            logger.error(f"Session {session.id} invalidation failed: {exc}")
            return Return.err(store_unavailable(exc))

        session.status = SessionStatus.revoked
        session.is_active = False
        await self.auditor.log(
            session.user_id,
            action,
            ResourceType.session,
            description,
            str(session.id),
        )
        return Return.ok(self.clearing_cookie())

    async def logout(self, presented_cookie: Optional[str]) -> Result[SessionCookie]:
        """Invalidate the session behind a cookie, if any. Always yields a clearing cookie."""
        token = self._unseal(presented_cookie)
        if token is None:
            return Return.ok(self.clearing_cookie())

        async with self.uow:
            try:
                session = await self.uow.sessions.find_by_token_hash(
                    self.codec.hash(token), now=self.clock()
                )
            except StoreUnavailable as exc:
                logger.error(f"Logout failed: {exc}")
                return Return.err(store_unavailable(exc))
            if session is None:
                return Return.ok(self.clearing_cookie())

            # Same unit of work: leaving it would expire the loaded row
            return await self._revoke_and_clear(session, ActionType.logout, "User logged out")

    async def revoke_session(self, session_id: UUID, requesting_user_id: UUID) -> Result[dict]:
        """
        Revoke one session on behalf of its owner.

        The UPDATE only matches a session that is still active, so of two
        concurrent revocations exactly one reports revoked=True and audits.

        Returns:
            Result with {"session_id", "revoked"}; revoked is False when the
            session was already revoked. Error codes: SESSION_NOT_FOUND,
            NOT_OWNER, STORE_UNAVAILABLE.
        """
        async with self.uow:
            try:
                session = await self.uow.sessions.get_by_id(session_id)
                if session is None:
                    return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

                if session.user_id != requesting_user_id:
                    logger.warning(
                        f"User {requesting_user_id} tried to revoke session {session_id} "
                        f"owned by another user"
                    )
                    return Return.err(Error("NOT_OWNER", "Session does not belong to current user"))

                revoked = await self.uow.sessions.bulk_update_where(
                    SessionFilter(id=session_id, status=SessionStatus.active),
                    REVOKED_VALUES,
                )
                await self.uow.commit()
            except StoreUnavailable as exc:
                logger.error(f"Session {session_id} revocation failed: {exc}")
                return Return.err(store_unavailable(exc))

            if revoked == 0:
                return Return.ok({"session_id": str(session_id), "revoked": False})

            await self.auditor.log(
                requesting_user_id,
                ActionType.session_revoked,
                ResourceType.session,
                "Session revoked by user",
                str(session_id),
            )

        return Return.ok({"session_id": str(session_id), "revoked": True})

    async def revoke_all_sessions(
        self, user_id: UUID, exclude_session_id: Optional[UUID] = None
    ) -> Result[dict]:
        """
        Revoke every live session of a user, optionally keeping one.

        Rows already revoked or expired are not touched, so repeating the call
        converges and reports 0.
        """
        now = self.clock()
        async with self.uow:
            try:
                count = await self.uow.sessions.bulk_update_where(
                    SessionFilter.live(now, user_id=user_id, exclude_id=exclude_session_id),
                    REVOKED_VALUES,
                )
                await self.uow.commit()
            except StoreUnavailable as exc:
                logger.error(f"Bulk revocation failed for user {user_id}: {exc}")
                return Return.err(store_unavailable(exc))

            if count > 0:
                logger.info(f"Revoked {count} session(s) for user {user_id}")
                await self.auditor.log(
                    user_id,
                    ActionType.sessions_revoked_bulk,
                    ResourceType.session,
                    f"Revoked {count} sessions",
                    "bulk",
                    {
                        "revoked_count": count,
                        "kept_session_id": str(exclude_session_id) if exclude_session_id else None,
                    },
                )

        return Return.ok({"revoked_count": count})
