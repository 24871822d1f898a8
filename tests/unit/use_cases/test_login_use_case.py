from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import bcrypt
import pytest

from src.app.repositories.exceptions import StoreUnavailable
from src.app.use_cases.auth.login_use_case import LoginUseCase
from src.domain.entities import LoginMethod, User, UserStatus
from src.libs.result import Return

PASSWORD = "SecurePass123!"


@pytest.fixture
def active_user():
    return User(
        id=uuid4(),
        email="user@acme.com",
        password_hash=bcrypt.hashpw(PASSWORD.encode(), bcrypt.gensalt(4)).decode(),
        status=UserStatus.active,
    )


@pytest.fixture
def manager():
    manager = MagicMock()
    manager.create_session = AsyncMock(return_value=Return.ok("grant"))
    return manager


@pytest.fixture
def probe():
    return MagicMock()


@pytest.mark.asyncio
async def test_successful_login(mock_uow, manager, probe, active_user):
    """Test successful login flow"""
    # Arrange
    mock_uow.users.get_by_email.return_value = active_user
    use_case = LoginUseCase(mock_uow, manager)

    # Act
    result = await use_case.execute("user@acme.com", PASSWORD, probe)

    # Assert
    assert result.is_ok()
    assert result.value == "grant"
    assert active_user.last_login_at is not None
    mock_uow.users.update.assert_called_once_with(active_user)
    mock_uow.commit.assert_called_once()
    manager.create_session.assert_called_once_with(
        active_user.id, probe, LoginMethod.password
    )


@pytest.mark.asyncio
async def test_login_records_method(mock_uow, manager, probe, active_user):
    mock_uow.users.get_by_email.return_value = active_user
    use_case = LoginUseCase(mock_uow, manager)

    await use_case.execute("user@acme.com", PASSWORD, probe, LoginMethod.otp)

    assert manager.create_session.call_args.args[2] == LoginMethod.otp


@pytest.mark.asyncio
async def test_login_invalid_credentials_wrong_password(mock_uow, manager, probe, active_user):
    """Test login with wrong password"""
    mock_uow.users.get_by_email.return_value = active_user
    use_case = LoginUseCase(mock_uow, manager)

    result = await use_case.execute("user@acme.com", "WrongPassword", probe)

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    manager.create_session.assert_not_called()


@pytest.mark.asyncio
async def test_login_invalid_credentials_unknown_email(mock_uow, manager, probe):
    """Unknown email yields the same error as a wrong password"""
    mock_uow.users.get_by_email.return_value = None
    use_case = LoginUseCase(mock_uow, manager)

    result = await use_case.execute("nobody@acme.com", PASSWORD, probe)

    assert result.error.code == "INVALID_CREDENTIALS"
    manager.create_session.assert_not_called()


@pytest.mark.asyncio
async def test_login_user_disabled(mock_uow, manager, probe, active_user):
    """Test login with disabled user"""
    active_user.status = UserStatus.disabled
    mock_uow.users.get_by_email.return_value = active_user
    use_case = LoginUseCase(mock_uow, manager)

    result = await use_case.execute("user@acme.com", PASSWORD, probe)

    assert result.error.code == "USER_DISABLED"
    manager.create_session.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_login_store_unavailable(mock_uow, manager, probe):
    mock_uow.users.get_by_email.side_effect = StoreUnavailable("timeout")
    use_case = LoginUseCase(mock_uow, manager)

    result = await use_case.execute("user@acme.com", PASSWORD, probe)

    assert result.error.code == "STORE_UNAVAILABLE"
