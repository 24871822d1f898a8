"""
Request signals

Device and location metadata captured for an inbound request. Every field is
best-effort and may be absent.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from src.domain.entities.enums import DeviceType


class DeviceSignal(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    type: DeviceType = DeviceType.unknown
    user_agent: Optional[str] = None


class LocationSignal(BaseModel):
    model_config = ConfigDict(frozen=True)

    country: Optional[str] = None
    city: Optional[str] = None
    timezone: Optional[str] = None
    ip: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
