"""
Login Use Case

Verifies a password and mints a cookie-bound session.
"""

import bcrypt

from src.app.repositories.exceptions import StoreUnavailable
from src.app.services.request_probe import IRequestProbe
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import SessionGrant, SessionLifecycleManager
from src.domain.base import utcnow
from src.domain.entities import LoginMethod, UserStatus
from src.libs.result import Error, Result, Return


class LoginUseCase:
    """
    Use case for password login.

    Business Rules:
    - Constant-time password comparison to prevent timing attacks
    - User must have status=active
    - Updates user.last_login_at
    - Session creation (risk scoring, cookie, audit) is delegated to the
      lifecycle manager
    """

    def __init__(self, uow: UnitOfWork, manager: SessionLifecycleManager):
        self.uow = uow
        self.manager = manager

    async def execute(
        self,
        email: str,
        password: str,
        request_probe: IRequestProbe,
        method: LoginMethod = LoginMethod.password,
    ) -> Result[SessionGrant]:
        """
        Execute login use case.

        Args:
            email: User email
            password: Plain text password
            request_probe: Device/geo probe of the login request
            method: Login method recorded on the session

        Returns:
            Result with SessionGrant, or Error
        """
        async with self.uow:
            try:
                user = await self.uow.users.get_by_email(email)
            except StoreUnavailable as exc:
                return Return.err(Error("STORE_UNAVAILABLE", f"Session store unavailable: {exc}"))

            # Always perform a hash check even if user not found
            if user is None:
                bcrypt.checkpw(b"dummy_password", bcrypt.gensalt(12))
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Invalid email or password")
                )

            if not bcrypt.checkpw(password.encode(), user.password_hash.encode()):
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Invalid email or password")
                )

            if user.status == UserStatus.disabled:
                return Return.err(Error("USER_DISABLED", "User account is disabled"))

            user_id = user.id
            user.last_login_at = utcnow()
            try:
                await self.uow.users.update(user)
                await self.uow.commit()
            except StoreUnavailable as exc:
                return Return.err(Error("STORE_UNAVAILABLE", f"Session store unavailable: {exc}"))

        return await self.manager.create_session(user_id, request_probe, method)
