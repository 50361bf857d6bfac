"""Light devices for lightsync."""

from lightsync.devices.handle import DeviceHandle
from lightsync.devices.lifx import LifxLanHandle, create_lifx_handle
from lightsync.devices.light import LightItem
from lightsync.devices.manager import LightManager

__all__ = [
    "DeviceHandle",
    "LifxLanHandle",
    "LightItem",
    "LightManager",
    "create_lifx_handle",
]
