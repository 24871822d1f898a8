from abc import ABC, abstractmethod

from src.domain.signals import DeviceSignal, LocationSignal


class IRequestProbe(ABC):
    """Device/geo probe for the inbound request. Best-effort: any field may be absent."""

    @abstractmethod
    async def get_device_info(self) -> DeviceSignal:
        pass

    @abstractmethod
    async def get_geo_info(self) -> LocationSignal:
        pass
