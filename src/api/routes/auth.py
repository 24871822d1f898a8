from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import ClientError, ServerError
from src.app.services.request_probe import IRequestProbe
from src.app.services.session_settings import SessionSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import LoginUseCase
from src.app.use_cases.sessions import (
    SessionLifecycleManager,
    SessionManagementService,
    SessionView,
)
from src.depends import (
    get_current_session,
    get_request_probe,
    get_session_cookie,
    get_session_manager,
    get_session_settings,
    get_unit_of_work,
)
from src.domain.entities import LoginMethod, Session

router = APIRouter(prefix="/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    Validates incoming login request.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")
    method: LoginMethod = Field(LoginMethod.password, description="Login method recorded on the session")


class LoginResponse(BaseModel):
    session: SessionView


class LogoutResponse(BaseModel):
    message: str


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    manager: SessionLifecycleManager = Depends(get_session_manager),
    probe: IRequestProbe = Depends(get_request_probe),
):
    """
    User Login

    Verifies credentials, scores the login context and sets the session cookie.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: User disabled
        - 500 Internal Server Error: Session store unavailable
    """
    use_case = LoginUseCase(uow, manager)
    result = await use_case.execute(request.email, request.password, probe, request.method)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_CREDENTIALS":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "USER_DISABLED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    grant = result.value
    response.set_cookie(**grant.cookie.set_cookie_kwargs())
    return {"session": grant.view}


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    response: Response,
    cookie: Optional[str] = Depends(get_session_cookie),
    manager: SessionLifecycleManager = Depends(get_session_manager),
):
    """
    User Logout

    Revokes the session behind the cookie, if any, and clears the cookie.
    Always succeeds from the client's point of view.
    """
    result = await manager.logout(cookie)

    if result.is_err():
        raise ServerError(result.error)

    response.set_cookie(**result.value.set_cookie_kwargs())
    return {"message": "Logged out"}


@router.get("/me", status_code=status.HTTP_200_OK, response_model=SessionView)
async def me(
    current: Session = Depends(get_current_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: SessionSettings = Depends(get_session_settings),
):
    """
    Current Session

    Returns the session bound to the cookie with its security context.

    Raises:
        - 401 Unauthorized: No live session
    """
    service = SessionManagementService(uow, settings.trust_window)
    result = await service.describe_session(current)

    if result.is_err():
        raise ServerError(result.error)

    return result.value
