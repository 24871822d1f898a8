"""
Session Service Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserStatus(str, Enum):
    """User account status"""

    active = "active"
    disabled = "disabled"


class SessionStatus(str, Enum):
    """Session lifecycle status. Revoked and expired are terminal."""

    active = "active"
    revoked = "revoked"
    expired = "expired"


class RiskLevel(str, Enum):
    """Coarse risk tier derived from the risk score"""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class DeviceType(str, Enum):
    desktop = "desktop"
    mobile = "mobile"
    tablet = "tablet"
    bot = "bot"
    unknown = "unknown"


class LoginMethod(str, Enum):
    """How the principal proved their identity before the session was minted"""

    password = "password"
    oauth = "oauth"
    magic_link = "magic_link"
    otp = "otp"


class ActionType(str, Enum):
    """Audit action recorded for session events"""

    login = "login"
    logout = "logout"
    session_revoked = "session_revoked"
    sessions_revoked_bulk = "sessions_revoked_bulk"
    session_extended = "session_extended"
    session_invalidated = "session_invalidated"


class ResourceType(str, Enum):
    session = "session"
