from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.app.services.session_settings import SessionSettings
from src.domain.entities import User, UserStatus
from tests.fixtures.session_factory import NOW


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_id = AsyncMock()
    uow.users.get_by_email = AsyncMock()
    uow.users.update = AsyncMock()

    uow.sessions = MagicMock()
    uow.sessions.create = AsyncMock(side_effect=lambda s: s)
    uow.sessions.find_by_token_hash = AsyncMock(return_value=None)
    uow.sessions.get_by_id = AsyncMock(return_value=None)
    uow.sessions.get_by_user_id = AsyncMock(return_value=[])
    uow.sessions.update_fields = AsyncMock(return_value=True)
    uow.sessions.bulk_update_where = AsyncMock(return_value=0)
    uow.sessions.delete_where = AsyncMock(return_value=0)
    uow.sessions.count_where = AsyncMock(return_value=0)
    uow.sessions.aggregate = AsyncMock(return_value=[])

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()

    return uow


@pytest.fixture
def settings():
    return SessionSettings(secrets=("primary-secret", "previous-secret"))


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def user():
    return User(
        id=uuid4(),
        email="user@example.com",
        password_hash="hash",
        status=UserStatus.active,
    )

