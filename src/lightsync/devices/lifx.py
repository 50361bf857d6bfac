"""Device handle backed by the lifxlan library."""

import asyncio
import logging
from typing import Any

from lightsync.models.device import DeviceState, HardwareInfo

logger = logging.getLogger(__name__)

LIFX_MAX = 65535


def to_lifx(value: float, scale: float) -> int:
    """Scale a value in [0, scale] to the LIFX 16-bit range."""
    return int(round(max(0.0, min(scale, value)) / scale * LIFX_MAX))


def from_lifx(value: int, scale: float) -> float:
    """Scale a LIFX 16-bit value to [0, scale], rounded to 2 decimals."""
    return round(value / LIFX_MAX * scale, 2)


class LifxLanHandle:
    """Wraps a lifxlan.Light, running its blocking calls in a thread."""

    def __init__(self, lifx_device: Any, mac: str, ip: str | None = None):
        self._lifx_device = lifx_device
        self.id = mac.lower()
        self.address = ip

    async def _run_sync(self, func: Any, *args: Any) -> Any:
        """Run a synchronous LIFX function in a thread."""
        return await asyncio.to_thread(func, *args)

    async def get_state(self) -> DeviceState:
        power = await self._run_sync(self._lifx_device.get_power)
        hue, saturation, brightness, kelvin = await self._run_sync(self._lifx_device.get_color)
        label = await self._run_sync(self._lifx_device.get_label)
        return DeviceState(
            power=power > 0,
            hue=from_lifx(hue, 360),
            saturation=from_lifx(saturation, 100),
            brightness=from_lifx(brightness, 100),
            kelvin=kelvin,
            label=label,
        )

    async def get_hardware_version(self) -> HardwareInfo:
        from lifxlan.products import product_map

        product = await self._run_sync(self._lifx_device.get_product)
        color = await self._run_sync(self._lifx_device.supports_color)
        infrared = await self._run_sync(self._lifx_device.supports_infrared)
        return HardwareInfo(
            product_name=product_map.get(product),
            color=bool(color),
            infrared=bool(infrared),
        )

    async def get_max_ir(self) -> int:
        level = await self._run_sync(self._lifx_device.get_infrared)
        return int(round(from_lifx(level, 100)))

    async def set_color(
        self,
        hue: float,
        saturation: float,
        brightness: float,
        kelvin: float,
        duration_ms: int,
    ) -> None:
        color = [
            to_lifx(hue % 360, 360),
            to_lifx(saturation, 100),
            to_lifx(brightness, 100),
            int(kelvin),
        ]
        await self._run_sync(self._lifx_device.set_color, color, duration_ms)

    async def set_power(self, on: bool, duration_ms: int) -> None:
        await self._run_sync(self._lifx_device.set_power, LIFX_MAX if on else 0, duration_ms)

    async def set_infrared_level(self, level: int) -> None:
        await self._run_sync(self._lifx_device.set_infrared, to_lifx(level, 100))


def create_lifx_handle(mac: str, ip: str) -> LifxLanHandle:
    """Factory function to create a handle for a LIFX light at a known address."""
    try:
        import lifxlan
    except ImportError:
        logger.error("lifxlan package not installed. Install with: pip install lifxlan")
        raise

    handle = LifxLanHandle(lifxlan.Light(mac, ip), mac, ip)
    logger.info(f"Created LIFX handle {handle.id} at {ip}")
    return handle
