"""
Session Use Cases

Session lifecycle, risk scoring and analytics.
"""

from .risk_engine import RiskEngine
from .session_lifecycle_manager import SessionLifecycleManager
from .session_analytics import SessionAnalytics
from .session_management import SessionManagementService
from .dtos import (
    RiskAssessment,
    SignalAnalysis,
    SessionSecurityAnalysis,
    SessionView,
    SessionCookie,
    SessionGrant,
    SessionActivity,
    SessionStats,
    DeviceAnalytics,
    LocationAnalytics,
    SecurityAnalytics,
    SessionDashboard,
    CleanupReport,
)

__all__ = [
    # Use Cases
    "RiskEngine",
    "SessionLifecycleManager",
    "SessionAnalytics",
    "SessionManagementService",
    # DTOs
    "RiskAssessment",
    "SignalAnalysis",
    "SessionSecurityAnalysis",
    "SessionView",
    "SessionCookie",
    "SessionGrant",
    "SessionActivity",
    "SessionStats",
    "DeviceAnalytics",
    "LocationAnalytics",
    "SecurityAnalytics",
    "SessionDashboard",
    "CleanupReport",
]
