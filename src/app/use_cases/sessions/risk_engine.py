"""
Risk Engine

Heuristic risk scoring for new sessions, plus per-session security analysis
used when listing sessions.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import DeviceType, RiskLevel, Session
from src.domain.signals import DeviceSignal, LocationSignal

from .dtos import RiskAssessment, SessionSecurityAnalysis, SignalAnalysis

# Additive point table
UNKNOWN_DEVICE_TYPE_POINTS = 20
MISSING_BROWSER_POINTS = 15
MISSING_OS_POINTS = 10
MISSING_COUNTRY_POINTS = 25
MISSING_IP_POINTS = 20
NEW_DEVICE_POINTS = 30
NEW_LOCATION_POINTS = 25

UNKNOWN_USER_SCORE = 100

# Evaluated high to low, first match wins
TIER_THRESHOLDS = (
    (70, RiskLevel.critical),
    (50, RiskLevel.high),
    (30, RiskLevel.medium),
)

TRUSTED_SIGNAL_THRESHOLD = 30

HIGH_RISK_LEVELS = (RiskLevel.high, RiskLevel.critical)


def tier_for(score: int) -> RiskLevel:
    for threshold, level in TIER_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.low


def signal_points(device: DeviceSignal, location: LocationSignal) -> int:
    """Points for missing or unclassifiable signal fields"""
    score = 0
    if device.type == DeviceType.unknown:
        score += UNKNOWN_DEVICE_TYPE_POINTS
    if not device.browser:
        score += MISSING_BROWSER_POINTS
    if not device.os:
        score += MISSING_OS_POINTS
    if not location.country:
        score += MISSING_COUNTRY_POINTS
    if not location.ip:
        score += MISSING_IP_POINTS
    return score


def is_new_device(device: DeviceSignal, history: Iterable[Session]) -> bool:
    # An incomplete signal never matches history, so dropping a field can only add points
    if not device.user_agent or not device.os:
        return True
    return not any(
        s.device_user_agent == device.user_agent and s.device_os == device.os
        for s in history
    )


def is_new_location(location: LocationSignal, history: Iterable[Session]) -> bool:
    if not location.country:
        return True
    return not any(
        s.geo_country == location.country and s.geo_city == location.city
        for s in history
    )


def analyze_device(device: DeviceSignal) -> SignalAnalysis:
    score = 0
    recommendations = []
    if device.type == DeviceType.unknown:
        score += 20
        recommendations.append("Device type could not be determined")
    if not device.os:
        score += 15
        recommendations.append("Operating system information missing")
    if not device.browser:
        score += 10
        recommendations.append("Browser could not be detected")
    if not device.user_agent:
        score += 5
        recommendations.append("User agent not reported")
    return SignalAnalysis(
        is_trusted=score < TRUSTED_SIGNAL_THRESHOLD,
        risk_score=score,
        recommendations=recommendations,
    )


def analyze_location(location: LocationSignal) -> SignalAnalysis:
    score = 0
    recommendations = []
    if not location.country:
        score += 25
        recommendations.append("Country could not be determined")
    if not location.ip:
        score += 20
        recommendations.append("IP address not detected")
    if not location.timezone:
        score += 10
        recommendations.append("Timezone not detected")
    if location.latitude is None or location.longitude is None:
        score += 15
        recommendations.append("Geographic coordinates not available")
    return SignalAnalysis(
        is_trusted=score < TRUSTED_SIGNAL_THRESHOLD,
        risk_score=score,
        recommendations=recommendations,
    )


def security_recommendations(
    device_analysis: SignalAnalysis,
    location_analysis: SignalAnalysis,
    level: Optional[RiskLevel],
) -> List[str]:
    recommendations = []
    if not device_analysis.is_trusted:
        recommendations.extend(device_analysis.recommendations)
    if not location_analysis.is_trusted:
        recommendations.extend(location_analysis.recommendations)
    if level in HIGH_RISK_LEVELS:
        recommendations.append("Consider enabling two-factor authentication")
        recommendations.append("Review recent account activity")
    if level == RiskLevel.critical:
        recommendations.append("Contact support if this wasn't you")
    return recommendations


def device_signal_of(session: Session) -> DeviceSignal:
    return DeviceSignal(
        name=session.device_name,
        browser=session.device_browser,
        os=session.device_os,
        type=session.device_type,
        user_agent=session.device_user_agent,
    )


def location_signal_of(session: Session) -> LocationSignal:
    return LocationSignal(
        country=session.geo_country,
        city=session.geo_city,
        timezone=session.geo_timezone,
        ip=session.geo_ip,
        latitude=session.geo_latitude,
        longitude=session.geo_longitude,
    )


class RiskEngine:
    """
    Scores the originating context of a new session.

    Business Rules:
    - Independent additive signals, order-insensitive
    - Novelty is judged against the user's sessions created within the lookback window
    - An unresolvable user scores 100 / critical (fail closed)

    Must be used inside an entered unit of work.
    """

    def __init__(self, uow: UnitOfWork, lookback: timedelta = timedelta(days=7)):
        self.uow = uow
        self.lookback = lookback

    async def assess(
        self,
        user_id: UUID,
        device: DeviceSignal,
        location: LocationSignal,
        now: Optional[datetime] = None,
    ) -> RiskAssessment:
        user = await self.uow.users.get_by_id(user_id)
        if user is None:
            return RiskAssessment(score=UNKNOWN_USER_SCORE, level=RiskLevel.critical)

        now = now or utcnow()
        history = await self.uow.sessions.get_by_user_id(
            user_id, created_after=now - self.lookback
        )

        score = signal_points(device, location)
        if is_new_device(device, history):
            score += NEW_DEVICE_POINTS
        if is_new_location(location, history):
            score += NEW_LOCATION_POINTS

        return RiskAssessment(score=score, level=tier_for(score))

    @staticmethod
    def analyze_session(
        session: Session,
        others: Iterable[Session],
        trust_window: timedelta = timedelta(days=30),
        now: Optional[datetime] = None,
    ) -> SessionSecurityAnalysis:
        """
        Security context of an existing session. ``others`` are the user's
        other sessions; the device or location is trusted when one of them,
        created within ``trust_window``, shares it.
        """
        now = now or utcnow()
        recent = [
            s for s in others
            if s.id != session.id and s.created_at >= now - trust_window
        ]
        trusted_device = bool(session.device_name) and any(
            s.device_name == session.device_name and s.device_os == session.device_os
            for s in recent
        )
        trusted_location = bool(session.geo_country) and any(
            s.geo_country == session.geo_country and s.geo_city == session.geo_city
            for s in recent
        )

        device_analysis = analyze_device(device_signal_of(session))
        location_analysis = analyze_location(location_signal_of(session))
        return SessionSecurityAnalysis(
            device_analysis=device_analysis,
            location_analysis=location_analysis,
            is_trusted_device=trusted_device,
            is_trusted_location=trusted_location,
            recommendations=security_recommendations(
                device_analysis, location_analysis, session.risk_level
            ),
        )
