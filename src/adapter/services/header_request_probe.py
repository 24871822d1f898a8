"""
Header-based request probe

Derives device and location signals from the headers of an inbound HTTP
request. User-agent parsing is delegated to ``user_agents``; geolocation
comes from CDN headers when a CDN sits in front of the service.
"""

from typing import Mapping, Optional

import user_agents

from src.app.services.request_probe import IRequestProbe
from src.domain.entities import DeviceType
from src.domain.signals import DeviceSignal, LocationSignal

# ua-parser reports this family when nothing matched
UNMATCHED_FAMILY = "Other"

UNRESOLVED_COUNTRY = "XX"


def _family(family: Optional[str]) -> Optional[str]:
    if not family or family == UNMATCHED_FAMILY:
        return None
    return family


def classify_device(user_agent: Optional[str]) -> DeviceType:
    if not user_agent:
        return DeviceType.unknown
    parsed = user_agents.parse(user_agent)
    if parsed.is_bot:
        return DeviceType.bot
    if parsed.is_tablet:
        return DeviceType.tablet
    if parsed.is_mobile:
        return DeviceType.mobile
    if parsed.is_pc:
        return DeviceType.desktop
    return DeviceType.unknown


def parse_user_agent(user_agent: Optional[str]) -> DeviceSignal:
    """Best-effort device signal; undetected fields stay None"""
    if not user_agent:
        return DeviceSignal()

    parsed = user_agents.parse(user_agent)
    browser = _family(parsed.browser.family)
    os_name = _family(parsed.os.family)
    if browser and os_name:
        name = f"{browser} on {os_name}"
    else:
        name = browser or os_name

    return DeviceSignal(
        name=name,
        browser=browser,
        os=os_name,
        type=classify_device(user_agent),
        user_agent=user_agent,
    )


def _coordinate(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class HeaderRequestProbe(IRequestProbe):
    def __init__(self, headers: Mapping[str, str], client_host: Optional[str] = None):
        # Header lookups are case-insensitive
        self.headers = {k.lower(): v for k, v in headers.items()}
        self.client_host = client_host

    def _header(self, name: str) -> Optional[str]:
        value = self.headers.get(name)
        if value is None:
            return None
        value = value.strip()
        return value or None

    def client_ip(self) -> Optional[str]:
        forwarded = self._header("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
        return (
            self._header("x-real-ip")
            or self._header("cf-connecting-ip")
            or self.client_host
        )

    def country(self) -> Optional[str]:
        country = self._header("cf-ipcountry") or self._header("x-vercel-ip-country")
        # Cloudflare reports XX when it cannot resolve the address
        if country is None or country.upper() == UNRESOLVED_COUNTRY:
            return None
        return country.upper()

    async def get_device_info(self) -> DeviceSignal:
        return parse_user_agent(self._header("user-agent"))

    async def get_geo_info(self) -> LocationSignal:
        return LocationSignal(
            country=self.country(),
            city=self._header("x-vercel-ip-city"),
            timezone=self._header("x-vercel-ip-timezone"),
            ip=self.client_ip(),
            latitude=_coordinate(self._header("x-vercel-ip-latitude")),
            longitude=_coordinate(self._header("x-vercel-ip-longitude")),
        )
