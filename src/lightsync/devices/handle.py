"""Device handle contract consumed by lightsync.

A device handle owns the transport for one physical light. Values cross this
boundary already scaled: hue 0-360, saturation/brightness/IR 0-100, kelvin.
"""

from typing import Protocol

from lightsync.models.device import DeviceState, HardwareInfo


class DeviceHandle(Protocol):
    """Transport for a single light."""

    id: str
    address: str | None

    async def get_state(self) -> DeviceState: ...

    async def get_hardware_version(self) -> HardwareInfo: ...

    async def get_max_ir(self) -> int: ...

    async def set_color(
        self,
        hue: float,
        saturation: float,
        brightness: float,
        kelvin: float,
        duration_ms: int,
    ) -> None: ...

    async def set_power(self, on: bool, duration_ms: int) -> None: ...

    async def set_infrared_level(self, level: int) -> None: ...
