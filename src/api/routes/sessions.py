from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.app.services.session_settings import SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import (
    SessionDashboard,
    SessionLifecycleManager,
    SessionManagementService,
    SessionView,
)
from src.depends import (
    get_current_session,
    get_session_cookie,
    get_session_manager,
    get_session_settings,
    get_unit_of_work,
)
from src.domain.entities import Session

router = APIRouter(prefix="/sessions", tags=["Sessions"])


class RevokeAllSessionsRequest(BaseModel):
    """Request to revoke the caller's sessions"""

    keep_current: bool = Field(True, description="Keep the session making this request")


class RevokeSessionResponse(BaseModel):
    """Response for session revocation operations"""

    message: str
    revoked_count: int


class RevokeSpecificSessionResponse(BaseModel):
    """Response for specific session revocation"""

    message: str
    session_id: str
    revoked: bool


@router.get("", status_code=status.HTTP_200_OK, response_model=List[SessionView])
async def list_sessions(
    current: Session = Depends(get_current_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: SessionSettings = Depends(get_session_settings),
):
    """
    List Sessions

    All sessions of the caller, newest first, each with its security analysis.
    The session making the request is flagged with is_current.
    """
    session_id, user_id = current.id, current.user_id

    service = SessionManagementService(uow, settings.trust_window)
    result = await service.get_user_sessions(user_id, current_session_id=session_id)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.post("/extend", status_code=status.HTTP_200_OK, response_model=SessionView)
async def extend_session(
    response: Response,
    cookie: Optional[str] = Depends(get_session_cookie),
    manager: SessionLifecycleManager = Depends(get_session_manager),
):
    """
    Extend Session

    Moves the session expiry to now + the configured duration and re-issues
    the cookie to match.

    Raises:
        - 401 Unauthorized: No live session
        - 500 Internal Server Error: Session store unavailable
    """
    result = await manager.extend_session(cookie)

    if result.is_err():
        error = result.error
        if error.code == "SESSION_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    grant = result.value
    response.set_cookie(**grant.cookie.set_cookie_kwargs())
    return grant.view


@router.post(
    "/revoke-all",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionResponse,
)
async def revoke_all_sessions(
    request: Optional[RevokeAllSessionsRequest] = None,
    current: Session = Depends(get_current_session),
    manager: SessionLifecycleManager = Depends(get_session_manager),
):
    """
    Revoke All Sessions

    Revokes every live session of the caller. Useful for:
    - Security incidents (account compromise)
    - Password changes
    - Logging out other devices (keep_current=true, the default)
    """
    session_id, user_id = current.id, current.user_id
    keep_current = request.keep_current if request is not None else True

    result = await manager.revoke_all_sessions(
        user_id, exclude_session_id=session_id if keep_current else None
    )

    if result.is_err():
        raise ServerError(result.error)

    data = result.value
    return {
        "message": f"Successfully revoked {data['revoked_count']} session(s)",
        "revoked_count": data["revoked_count"],
    }


@router.get("/dashboard", status_code=status.HTTP_200_OK, response_model=SessionDashboard)
async def session_dashboard(
    current: Session = Depends(get_current_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: SessionSettings = Depends(get_session_settings),
):
    """
    Session Dashboard

    Stats, device, location and security analytics for the caller. Sections
    that could not be computed are zero-valued and the dashboard is flagged
    as degraded.
    """
    user_id = current.user_id

    service = SessionManagementService(uow, settings.trust_window)
    return await service.get_session_dashboard(user_id)


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSpecificSessionResponse,
)
async def revoke_specific_session(
    session_id: UUID,
    current: Session = Depends(get_current_session),
    manager: SessionLifecycleManager = Depends(get_session_manager),
):
    """
    Revoke Specific Session

    Revokes a single session of the caller by ID. Useful for:
    - Managing individual devices/sessions
    - Logging out from specific devices

    Raises:
        - 403 Forbidden: Session belongs to another user
        - 404 Not Found: Session not found
        - 500 Internal Server Error: Server error
    """
    requesting_user_id = current.user_id

    result = await manager.revoke_session(session_id, requesting_user_id)

    if result.is_err():
        error = result.error
        if error.code == "NOT_OWNER":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == "SESSION_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    data = result.value
    message = "Session revoked successfully" if data["revoked"] else "Session already revoked"
    return {
        "message": message,
        "session_id": data["session_id"],
        "revoked": data["revoked"],
    }
