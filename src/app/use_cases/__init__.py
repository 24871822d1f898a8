"""
Use Cases

Organized into domain folders:
- auth/: Credential verification
- sessions/: Session lifecycle, risk scoring and analytics
"""

from .auth import LoginUseCase
from .sessions import (
    RiskEngine,
    SessionLifecycleManager,
    SessionAnalytics,
    SessionManagementService,
)

__all__ = [
    # Auth
    "LoginUseCase",
    # Sessions
    "RiskEngine",
    "SessionLifecycleManager",
    "SessionAnalytics",
    "SessionManagementService",
]
