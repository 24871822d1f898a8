"""
Session Analytics

Read-side aggregation over a user's sessions, and the cleanup sweep.

Reporting is advisory: every method returns a Result instead of raising, so
a broken store never blocks login/logout, and callers can still tell
"no data" (ok, zero-valued) from "store failed" (err).
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List
from uuid import UUID

from src.app.repositories.exceptions import StoreUnavailable
from src.app.repositories.session_repository import GroupCount, SessionFilter
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import DeviceType, RiskLevel, SessionStatus
from src.libs.result import Error, Result, Return

from .dtos import (
    CleanupReport,
    DeviceAnalytics,
    LocationAnalytics,
    SecurityAnalytics,
    SessionActivity,
    SessionStats,
)
from .risk_engine import HIGH_RISK_LEVELS

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10
UNKNOWN = "Unknown"


def _label(value: Any, default: str = UNKNOWN) -> str:
    if value is None or value == "":
        return default
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _distribution(groups: List[GroupCount]) -> Dict[str, int]:
    """Single-column grouping to {label: count}"""
    return {_label(key[0], "unknown"): count for key, count in groups}


def _add(counter: Dict[str, int], key: str, count: int) -> None:
    counter[key] = counter.get(key, 0) + count


def _degraded(operation: str, user_id, exc: StoreUnavailable) -> Result:
    logger.warning(f"{operation} degraded for user {user_id}: {exc}")
    return Return.err(Error("STORE_UNAVAILABLE", f"Session store unavailable: {exc}"))


class SessionAnalytics:
    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def get_session_stats(self, user_id: UUID) -> Result[SessionStats]:
        """Counts by liveness, device type, risk level and status, plus the 10 newest sessions"""
        now = self.clock()
        async with self.uow:
            try:
                sessions = self.uow.sessions
                total = await sessions.count_where(SessionFilter(user_id=user_id))
                active = await sessions.count_where(SessionFilter.live(now, user_id=user_id))
                expired = await sessions.count_where(
                    SessionFilter(user_id=user_id, expires_before=now)
                )
                by_device = await sessions.aggregate(user_id, ["device_type"])
                by_risk = await sessions.aggregate(user_id, ["risk_level"])
                by_status = await sessions.aggregate(user_id, ["status"])
                recent = await sessions.get_by_user_id(user_id, limit=RECENT_ACTIVITY_LIMIT)
            except StoreUnavailable as exc:
                return _degraded("Session stats", user_id, exc)

            activity = [
                SessionActivity(
                    id=str(s.id),
                    device=s.device_name or UNKNOWN,
                    location=s.geo_country or s.geo_city or UNKNOWN,
                    login_at=s.created_at,
                    last_accessed_at=s.last_accessed_at,
                    status=s.status,
                    risk_level=s.risk_level,
                    is_active=s.is_active,
                )
                for s in recent
            ]

        return Return.ok(
            SessionStats(
                total=total,
                active=active,
                expired=expired,
                by_device=_distribution(by_device),
                by_risk_level=_distribution(by_risk),
                by_status=_distribution(by_status),
                recent_activity=activity,
            )
        )

    async def get_device_analytics(self, user_id: UUID) -> Result[DeviceAnalytics]:
        """
        Device diversity. The device name stands in for the browser in the
        browser distribution; a device is trusted when its type is classifiable.
        """
        async with self.uow:
            try:
                groups = await self.uow.sessions.aggregate(
                    user_id, ["device_name", "device_os", "device_type"]
                )
            except StoreUnavailable as exc:
                return _degraded("Device analytics", user_id, exc)

        analytics = DeviceAnalytics()
        for (name, os_name, device_type), count in groups:
            key = f"{_label(name)}-{_label(os_name)}"
            if key not in analytics.unique_devices:
                analytics.unique_devices.append(key)

            _add(analytics.device_types, _label(device_type, DeviceType.unknown.value), count)
            _add(analytics.os_distribution, _label(os_name), count)
            _add(analytics.browser_distribution, _label(name), count)

            if device_type is not None and device_type != DeviceType.unknown:
                analytics.trusted_devices += count
            else:
                analytics.suspicious_devices += count

        analytics.total_devices = len(analytics.unique_devices)
        return Return.ok(analytics)

    async def get_location_analytics(self, user_id: UUID) -> Result[LocationAnalytics]:
        """Location diversity; a session missing both country and IP is suspicious"""
        async with self.uow:
            try:
                groups = await self.uow.sessions.aggregate(
                    user_id, ["geo_country", "geo_city", "geo_timezone", "geo_ip"]
                )
            except StoreUnavailable as exc:
                return _degraded("Location analytics", user_id, exc)

        analytics = LocationAnalytics(total_locations=len(groups))
        for (country, city, timezone, ip), count in groups:
            _add(analytics.country_distribution, _label(country), count)
            _add(analytics.city_distribution, _label(city), count)
            _add(analytics.timezone_distribution, _label(timezone), count)

            if country and country not in analytics.unique_countries:
                analytics.unique_countries.append(country)
            if city and city not in analytics.unique_cities:
                analytics.unique_cities.append(city)

            if not country and not ip:
                analytics.suspicious_locations += count

        return Return.ok(analytics)

    async def get_security_analytics(self, user_id: UUID) -> Result[SecurityAnalytics]:
        async with self.uow:
            try:
                groups = await self.uow.sessions.aggregate(
                    user_id, ["risk_level", "is_verified", "login_method"]
                )
            except StoreUnavailable as exc:
                return _degraded("Security analytics", user_id, exc)

        analytics = SecurityAnalytics()
        for (risk_level, is_verified, login_method), count in groups:
            risk_level = risk_level or RiskLevel.medium
            _add(analytics.risk_level_distribution, _label(risk_level), count)
            _add(analytics.login_method_distribution, _label(login_method, "unknown"), count)

            if is_verified:
                analytics.verified_sessions += count
            else:
                analytics.unverified_sessions += count

            if risk_level in HIGH_RISK_LEVELS:
                analytics.high_risk_sessions += count

        recommendations = analytics.security_recommendations
        if analytics.high_risk_sessions > 0:
            recommendations.append("Review high-risk sessions")
            recommendations.append("Consider enabling two-factor authentication")
        if analytics.unverified_sessions > analytics.verified_sessions:
            recommendations.append("Many unverified sessions detected")
            recommendations.append("Review recent login activity")
        if not analytics.risk_level_distribution:
            recommendations.append("No session data available for analysis")

        return Return.ok(analytics)

    async def cleanup_expired_sessions(self) -> Result[CleanupReport]:
        """
        Hard-delete rows that are already expired or already revoked.

        Live sessions never match either filter. Safe to repeat: a second run
        with no new activity deletes nothing.
        """
        now = self.clock()
        async with self.uow:
            try:
                expired = await self.uow.sessions.delete_where(
                    SessionFilter(expires_before=now)
                )
                revoked = await self.uow.sessions.delete_where(
                    SessionFilter(is_active=False, status=SessionStatus.revoked)
                )
                await self.uow.commit()
            except StoreUnavailable as exc:
                logger.warning(f"Session cleanup failed: {exc}")
                return Return.err(Error("STORE_UNAVAILABLE", f"Session store unavailable: {exc}"))

        if expired or revoked:
            logger.info(f"Session cleanup deleted {expired} expired and {revoked} revoked session(s)")
        return Return.ok(
            CleanupReport(
                expired_deleted=expired,
                revoked_deleted=revoked,
                total_deleted=expired + revoked,
            )
        )
