from datetime import timedelta
from uuid import uuid4

import pytest

from src.app.repositories.exceptions import StoreUnavailable
from src.app.use_cases.sessions import SessionManagementService
from src.domain.entities import DeviceType
from tests.fixtures.session_factory import NOW, make_session


@pytest.fixture
def service(mock_uow, clock):
    return SessionManagementService(mock_uow, timedelta(days=30), clock)


@pytest.mark.asyncio
async def test_get_user_sessions_flags_current(service, mock_uow):
    user_id = uuid4()
    current = make_session(user_id, created_at=NOW)
    older = make_session(user_id, created_at=NOW - timedelta(days=2))
    mock_uow.sessions.get_by_user_id.return_value = [current, older]

    views = (await service.get_user_sessions(user_id, current_session_id=current.id)).value

    assert [v.id for v in views] == [str(current.id), str(older.id)]
    assert views[0].is_current is True
    assert views[1].is_current is False
    assert views[0].security.is_trusted_device is True
    assert "token_hash" not in views[0].model_dump()


@pytest.mark.asyncio
async def test_get_user_sessions_store_failure(service, mock_uow):
    mock_uow.sessions.get_by_user_id.side_effect = StoreUnavailable("timeout")

    result = await service.get_user_sessions(uuid4())

    assert result.error.code == "STORE_UNAVAILABLE"


@pytest.mark.asyncio
async def test_describe_session(service, mock_uow):
    user_id = uuid4()
    session = make_session(user_id, created_at=NOW)
    mock_uow.sessions.get_by_user_id.return_value = [session]

    view = (await service.describe_session(session)).value

    assert view.id == str(session.id)
    assert view.is_current is True
    assert view.security.is_trusted_device is False


@pytest.mark.asyncio
async def test_dashboard_bundles_reports(service, mock_uow):
    user_id = uuid4()
    mock_uow.sessions.count_where.side_effect = [2, 2, 0]
    mock_uow.sessions.aggregate.return_value = []

    dashboard = await service.get_session_dashboard(user_id)

    assert dashboard.degraded is False
    assert dashboard.overview.total == 2
    assert dashboard.last_updated == NOW


@pytest.mark.asyncio
async def test_dashboard_degrades_to_zero_values(service, mock_uow):
    mock_uow.sessions.count_where.side_effect = StoreUnavailable("timeout")
    mock_uow.sessions.aggregate.side_effect = StoreUnavailable("timeout")

    dashboard = await service.get_session_dashboard(uuid4())

    assert dashboard.degraded is True
    assert dashboard.overview.total == 0
    assert dashboard.devices.total_devices == 0
    assert dashboard.locations.total_locations == 0
    assert dashboard.security.security_recommendations == ["Unable to analyze session security"]


@pytest.mark.asyncio
async def test_dashboard_partial_failure(service, mock_uow):
    async def flaky_aggregate(user_id, group_by):
        if group_by == ["risk_level", "is_verified", "login_method"]:
            raise StoreUnavailable("timeout")
        return [((DeviceType.desktop,), 1)] if group_by == ["device_type"] else []

    mock_uow.sessions.count_where.return_value = 1
    mock_uow.sessions.aggregate.side_effect = flaky_aggregate

    dashboard = await service.get_session_dashboard(uuid4())

    assert dashboard.degraded is True
    assert dashboard.overview.by_device == {"desktop": 1}
    assert dashboard.security.high_risk_sessions == 0
