"""lightsync: keep a smart light and its in-process color model in sync."""

from lightsync.config import LightsyncConfig, ServerConfig, load_config
from lightsync.devices import LightItem, LightManager
from lightsync.events import EventFanout, EventKind, LightEvent
from lightsync.models import Capability, CapabilitySet, ColorMode, DeviceStatus, LightState
from lightsync.resolver import Resolution, resolve_command

__all__ = [
    "Capability",
    "CapabilitySet",
    "ColorMode",
    "DeviceStatus",
    "EventFanout",
    "EventKind",
    "LightEvent",
    "LightItem",
    "LightManager",
    "LightState",
    "LightsyncConfig",
    "Resolution",
    "ServerConfig",
    "load_config",
    "resolve_command",
]
