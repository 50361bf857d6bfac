"""Base models for lightsync: reachability, capabilities and color mode."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from lightsync.models.device import HardwareInfo


class DeviceStatus(Enum):
    """Device reachability status."""

    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"


class Capability(Enum):
    """Light features detected at initialization."""

    COLOR = "color"
    TEMPERATURE = "temperature"
    INFRARED = "infrared"


class ColorMode(Enum):
    """Which color fields the last command made active."""

    COLOR = "color"
    TEMPERATURE = "temperature"


@dataclass(frozen=True)
class CapabilitySet:
    """Immutable set of capabilities for one light."""

    capabilities: frozenset[Capability] = frozenset({Capability.TEMPERATURE})

    @classmethod
    def of(cls, *capabilities: Capability) -> "CapabilitySet":
        return cls(frozenset(capabilities) | {Capability.TEMPERATURE})

    @classmethod
    def from_hardware(cls, info: "HardwareInfo") -> "CapabilitySet":
        """Build from hardware metadata. Temperature is always supported."""
        found = []
        if info.color:
            found.append(Capability.COLOR)
        if info.infrared:
            found.append(Capability.INFRARED)
        return cls.of(*found)

    def __contains__(self, capability: object) -> bool:
        return capability in self.capabilities

    def __iter__(self) -> Iterator[Capability]:
        # Enum declaration order, so host output is stable
        return iter([c for c in Capability if c in self.capabilities])

    def names(self) -> list[str]:
        """Lowercase capability names for host messages."""
        return [c.value for c in self]
