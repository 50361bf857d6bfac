"""Pytest configuration and fixtures for lightsync tests."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lightsync.config import ServerConfig
from lightsync.devices.light import LightItem
from lightsync.devices.manager import LightManager
from lightsync.models.device import DeviceState, HardwareInfo

DEFAULT_ID = "d073d5000001"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.time = start

    def now(self) -> float:
        return self.time

    def advance(self, seconds: float) -> None:
        self.time += seconds


def make_state(**overrides) -> DeviceState:
    values = {
        "power": True,
        "hue": 0,
        "saturation": 100,
        "brightness": 100,
        "kelvin": 4000,
        "label": "Test Lifx",
    }
    values.update(overrides)
    return DeviceState(**values)


def make_handle(
    device_id: str = DEFAULT_ID,
    state: DeviceState | None = None,
    color: bool = True,
    infrared: bool = False,
    max_ir: int = 0,
) -> MagicMock:
    """Emulated device handle. Calls are recorded in order on ``mock_calls``."""
    handle = MagicMock()
    handle.id = device_id
    handle.address = "192.168.1.50"
    handle.get_state = AsyncMock(return_value=state or make_state())
    handle.get_hardware_version = AsyncMock(
        return_value=HardwareInfo(product_name="Original 1000", color=color, infrared=infrared)
    )
    handle.get_max_ir = AsyncMock(return_value=max_ir)
    handle.set_color = AsyncMock()
    handle.set_power = AsyncMock()
    handle.set_infrared_level = AsyncMock()
    return handle


def command_calls(handle: MagicMock) -> list:
    """Device commands sent to a handle, in order."""
    commands = ("set_color", "set_power", "set_infrared_level")
    return [c for c in handle.mock_calls if c[0] in commands]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> ServerConfig:
    return ServerConfig(interval=500, settle_margin=2.0, device_timeout=1.0)


@pytest.fixture
def handle() -> MagicMock:
    return make_handle()


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
async def light(handle, config, clock, events) -> LightItem:
    """An initialized, online light with a color-capable handle."""
    item = LightItem(handle, config, clock=clock)
    await item.initialize()
    item.events.subscribe(events.append)
    yield item
    await item.stop()


@pytest.fixture
async def off_light(config, clock, events) -> LightItem:
    """An initialized light that is powered off."""
    item = LightItem(make_handle(state=make_state(power=False)), config, clock=clock)
    await item.initialize()
    item.events.subscribe(events.append)
    yield item
    await item.stop()


@pytest.fixture
async def manager(config, clock) -> LightManager:
    mgr = LightManager(config, clock=clock)
    yield mgr
    await mgr.stop()
