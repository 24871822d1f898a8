"""
Admin API Routes - System Administration Endpoints

These endpoints are for operators and internal service integrations.
Authentication is via Admin API Key, not session cookies.
"""

from fastapi import APIRouter, Depends, status

from src.api.error import ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import CleanupReport, SessionManagementService
from src.depends import get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/sessions/cleanup",
    status_code=status.HTTP_200_OK,
    response_model=CleanupReport,
    dependencies=[Depends(verify_admin_api_key)],
)
async def cleanup_sessions(uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Cleanup Sessions

    Hard-deletes sessions that are already expired or already revoked.
    Live sessions are never touched; repeating the call deletes nothing new.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 500 Internal Server Error: Session store unavailable
    """
    service = SessionManagementService(uow)
    result = await service.cleanup_expired_sessions()

    if result.is_err():
        raise ServerError(result.error)

    return result.value
