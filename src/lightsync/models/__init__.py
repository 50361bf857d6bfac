"""Data models for lightsync."""

from lightsync.models.base import Capability, CapabilitySet, ColorMode, DeviceStatus
from lightsync.models.device import DeviceState, HardwareInfo
from lightsync.models.light import LightDelta, LightState

__all__ = [
    "Capability",
    "CapabilitySet",
    "ColorMode",
    "DeviceState",
    "DeviceStatus",
    "HardwareInfo",
    "LightDelta",
    "LightState",
]
