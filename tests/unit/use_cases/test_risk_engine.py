from datetime import timedelta
from uuid import uuid4

import pytest

from src.app.use_cases.sessions.risk_engine import (
    RiskEngine,
    analyze_device,
    analyze_location,
    tier_for,
)
from src.domain.entities import DeviceType, RiskLevel
from src.domain.signals import DeviceSignal, LocationSignal
from tests.fixtures.session_factory import NOW, make_session

UA = "Mozilla/5.0 (X11; Linux x86_64) Chrome/120.0"

FULL_DEVICE = DeviceSignal(
    name="Chrome on Linux", browser="Chrome", os="Linux", type=DeviceType.desktop, user_agent=UA
)
FULL_LOCATION = LocationSignal(country="IN", city="Mumbai", ip="1.2.3.4", timezone="Asia/Kolkata")


@pytest.mark.parametrize(
    "score, level",
    [
        (0, RiskLevel.low),
        (29, RiskLevel.low),
        (30, RiskLevel.medium),
        (49, RiskLevel.medium),
        (50, RiskLevel.high),
        (69, RiskLevel.high),
        (70, RiskLevel.critical),
        (175, RiskLevel.critical),
    ],
)
def test_tier_thresholds(score, level):
    assert tier_for(score) == level


@pytest.mark.asyncio
async def test_unknown_user_fails_closed(mock_uow):
    mock_uow.users.get_by_id.return_value = None
    engine = RiskEngine(mock_uow)

    assessment = await engine.assess(uuid4(), FULL_DEVICE, FULL_LOCATION, now=NOW)

    assert assessment.score == 100
    assert assessment.level == RiskLevel.critical
    mock_uow.sessions.get_by_user_id.assert_not_called()


@pytest.mark.asyncio
async def test_first_login_scores_new_device_and_location(mock_uow, user):
    """desktop/Linux/Chrome from IN with an IP and no history: 30 + 25 = 55"""
    mock_uow.users.get_by_id.return_value = user
    engine = RiskEngine(mock_uow)

    device = DeviceSignal(type=DeviceType.desktop, os="Linux", browser="Chrome")
    location = LocationSignal(country="IN", ip="1.2.3.4")
    assessment = await engine.assess(user.id, device, location, now=NOW)

    assert assessment.score == 55
    assert assessment.level == RiskLevel.high


@pytest.mark.asyncio
async def test_history_lookback_window(mock_uow, user):
    mock_uow.users.get_by_id.return_value = user
    engine = RiskEngine(mock_uow, lookback=timedelta(days=7))

    await engine.assess(user.id, FULL_DEVICE, FULL_LOCATION, now=NOW)

    mock_uow.sessions.get_by_user_id.assert_called_once_with(
        user.id, created_after=NOW - timedelta(days=7)
    )


@pytest.mark.asyncio
async def test_known_device_and_location_score_zero(mock_uow, user):
    mock_uow.users.get_by_id.return_value = user
    mock_uow.sessions.get_by_user_id.return_value = [
        make_session(user.id, device_user_agent=UA, device_os="Linux", geo_country="IN", geo_city="Mumbai")
    ]
    engine = RiskEngine(mock_uow)

    assessment = await engine.assess(user.id, FULL_DEVICE, FULL_LOCATION, now=NOW)

    assert assessment.score == 0
    assert assessment.level == RiskLevel.low


@pytest.mark.asyncio
async def test_missing_everything_is_critical(mock_uow, user):
    mock_uow.users.get_by_id.return_value = user
    engine = RiskEngine(mock_uow)

    assessment = await engine.assess(user.id, DeviceSignal(), LocationSignal(), now=NOW)

    # 20 + 15 + 10 + 25 + 20 + 30 + 25
    assert assessment.score == 145
    assert assessment.level == RiskLevel.critical


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "device_changes, location_changes",
    [
        ({"type": DeviceType.unknown}, {}),
        ({"browser": None}, {}),
        ({"os": None}, {}),
        ({"user_agent": None}, {}),
        ({}, {"country": None}),
        ({}, {"ip": None}),
        ({}, {"city": None}),
    ],
)
async def test_removing_a_signal_never_lowers_the_score(
    mock_uow, user, device_changes, location_changes
):
    mock_uow.users.get_by_id.return_value = user
    mock_uow.sessions.get_by_user_id.return_value = [
        make_session(user.id, device_user_agent=UA, device_os="Linux", geo_country="IN", geo_city="Mumbai")
    ]
    engine = RiskEngine(mock_uow)

    baseline = await engine.assess(user.id, FULL_DEVICE, FULL_LOCATION, now=NOW)
    degraded = await engine.assess(
        user.id,
        FULL_DEVICE.model_copy(update=device_changes),
        FULL_LOCATION.model_copy(update=location_changes),
        now=NOW,
    )

    assert degraded.score >= baseline.score


def test_analyze_device_flags_missing_fields():
    analysis = analyze_device(DeviceSignal())
    assert analysis.risk_score == 50
    assert analysis.is_trusted is False
    assert "Device type could not be determined" in analysis.recommendations

    assert analyze_device(FULL_DEVICE).is_trusted is True
    assert analyze_device(FULL_DEVICE).recommendations == []


def test_analyze_location_flags_missing_fields():
    analysis = analyze_location(LocationSignal())
    assert analysis.risk_score == 70
    assert analysis.is_trusted is False

    # Coordinates alone are not enough to distrust a location
    partial = analyze_location(FULL_LOCATION)
    assert partial.risk_score == 15
    assert partial.is_trusted is True


def test_analyze_session_trusts_recently_shared_device_and_location(user):
    current = make_session(user.id, created_at=NOW)
    other = make_session(user.id, created_at=NOW - timedelta(days=3))

    analysis = RiskEngine.analyze_session(current, [current, other], timedelta(days=30), NOW)

    assert analysis.is_trusted_device is True
    assert analysis.is_trusted_location is True
    # Stored risk level is high
    assert "Consider enabling two-factor authentication" in analysis.recommendations


def test_analyze_session_ignores_itself_and_old_sessions(user):
    current = make_session(user.id, created_at=NOW, risk_level=RiskLevel.low)
    stale = make_session(user.id, created_at=NOW - timedelta(days=45))

    analysis = RiskEngine.analyze_session(current, [current, stale], timedelta(days=30), NOW)

    assert analysis.is_trusted_device is False
    assert analysis.is_trusted_location is False
    assert analysis.recommendations == []


def test_analyze_session_critical_recommendations(user):
    current = make_session(
        user.id,
        created_at=NOW,
        risk_level=RiskLevel.critical,
        device_type=DeviceType.unknown,
        device_os=None,
        device_browser=None,
        device_user_agent=None,
    )

    analysis = RiskEngine.analyze_session(current, [current], timedelta(days=30), NOW)

    assert analysis.device_analysis.is_trusted is False
    assert "Operating system information missing" in analysis.recommendations
    assert analysis.recommendations[-1] == "Contact support if this wasn't you"
