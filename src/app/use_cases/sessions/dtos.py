"""
Session Use Case DTOs (Data Transfer Objects)

Response and value classes for the session domain.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities import (
    DeviceType,
    LoginMethod,
    RiskLevel,
    Session,
    SessionStatus,
)


# ============================================================================
# Risk & security analysis
# ============================================================================


class RiskAssessment(BaseModel):
    """Score on the additive point scale plus the tier it maps to"""

    model_config = ConfigDict(frozen=True)

    score: int
    level: RiskLevel


class SignalAnalysis(BaseModel):
    """Completeness analysis of one signal (device or location)"""

    is_trusted: bool
    risk_score: int
    recommendations: List[str] = Field(default_factory=list)


class SessionSecurityAnalysis(BaseModel):
    device_analysis: SignalAnalysis
    location_analysis: SignalAnalysis
    is_trusted_device: bool
    is_trusted_location: bool
    recommendations: List[str]


class SessionView(BaseModel):
    """Public view of a session; never carries the token hash"""

    id: str
    device_name: Optional[str]
    device_type: DeviceType
    device_os: Optional[str]
    device_browser: Optional[str]
    country: Optional[str]
    city: Optional[str]
    timezone: Optional[str]
    login_method: LoginMethod
    risk_score: int
    risk_level: RiskLevel
    is_verified: bool
    is_active: bool
    status: SessionStatus
    created_at: datetime
    last_accessed_at: datetime
    expires_at: datetime
    is_current: bool = False
    security: Optional[SessionSecurityAnalysis] = None

    @classmethod
    def from_session(
        cls,
        session: Session,
        security: Optional[SessionSecurityAnalysis] = None,
        is_current: bool = False,
    ) -> "SessionView":
        return cls(
            id=str(session.id),
            device_name=session.device_name,
            device_type=session.device_type,
            device_os=session.device_os,
            device_browser=session.device_browser,
            country=session.geo_country,
            city=session.geo_city,
            timezone=session.geo_timezone,
            login_method=session.login_method,
            risk_score=session.risk_score,
            risk_level=session.risk_level,
            is_verified=session.is_verified,
            is_active=session.is_active,
            status=session.status,
            created_at=session.created_at,
            last_accessed_at=session.last_accessed_at,
            expires_at=session.expires_at,
            is_current=is_current,
            security=security,
        )


# ============================================================================
# Cookie binding
# ============================================================================


class SessionCookie(BaseModel):
    """
    Set-Cookie instruction produced by the lifecycle manager.

    An empty value with an expiry in the past instructs the client to delete it.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    expires: datetime  # naive UTC
    http_only: bool = True
    secure: bool = False
    same_site: str = "lax"
    path: str = "/"
    domain: Optional[str] = None

    @property
    def is_clearing(self) -> bool:
        return self.value == ""

    def set_cookie_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for starlette's Response.set_cookie"""
        return {
            "key": self.name,
            "value": self.value,
            "expires": self.expires.replace(tzinfo=UTC),
            "path": self.path,
            "domain": self.domain,
            "secure": self.secure,
            "httponly": self.http_only,
            "samesite": self.same_site,
        }


@dataclass(frozen=True)
class SessionGrant:
    """
    A freshly minted or re-issued session together with its cookie.

    ``view`` is a detached snapshot taken right after the write, safe to
    serialize once the unit of work has closed.
    """

    session: Session
    token: str
    cookie: SessionCookie
    view: SessionView


# ============================================================================
# Analytics
# ============================================================================


class SessionActivity(BaseModel):
    id: str
    device: str
    location: str
    login_at: datetime
    last_accessed_at: datetime
    status: SessionStatus
    risk_level: RiskLevel
    is_active: bool


class SessionStats(BaseModel):
    total: int = 0
    active: int = 0
    expired: int = 0
    by_device: Dict[str, int] = Field(default_factory=dict)
    by_risk_level: Dict[str, int] = Field(default_factory=dict)
    by_status: Dict[str, int] = Field(default_factory=dict)
    recent_activity: List[SessionActivity] = Field(default_factory=list)


class DeviceAnalytics(BaseModel):
    total_devices: int = 0
    unique_devices: List[str] = Field(default_factory=list)
    device_types: Dict[str, int] = Field(default_factory=dict)
    os_distribution: Dict[str, int] = Field(default_factory=dict)
    browser_distribution: Dict[str, int] = Field(default_factory=dict)
    trusted_devices: int = 0
    suspicious_devices: int = 0


class LocationAnalytics(BaseModel):
    total_locations: int = 0
    unique_countries: List[str] = Field(default_factory=list)
    unique_cities: List[str] = Field(default_factory=list)
    country_distribution: Dict[str, int] = Field(default_factory=dict)
    city_distribution: Dict[str, int] = Field(default_factory=dict)
    timezone_distribution: Dict[str, int] = Field(default_factory=dict)
    suspicious_locations: int = 0


class SecurityAnalytics(BaseModel):
    risk_level_distribution: Dict[str, int] = Field(default_factory=dict)
    verified_sessions: int = 0
    unverified_sessions: int = 0
    high_risk_sessions: int = 0
    security_recommendations: List[str] = Field(default_factory=list)
    login_method_distribution: Dict[str, int] = Field(default_factory=dict)


class SessionDashboard(BaseModel):
    overview: SessionStats
    devices: DeviceAnalytics
    locations: LocationAnalytics
    security: SecurityAnalytics
    degraded: bool = False
    last_updated: datetime


class CleanupReport(BaseModel):
    expired_deleted: int = 0
    revoked_deleted: int = 0
    total_deleted: int = 0
