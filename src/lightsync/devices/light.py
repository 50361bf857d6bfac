"""A single light kept in sync with its device.

LightItem owns the authoritative LightState for one device handle. Local
commands are merged immediately and sent to the device in the background;
polled readings are merged only once the echo suppression deadline set by the
last command has passed, so a reading taken while a command is still settling
cannot overwrite the intended state.
"""

import asyncio
import logging
import math
from typing import Any, Callable

from lightsync.color import (
    clamp,
    hsv_to_rgb,
    kelvin_to_rgb,
    rgb_to_hex,
    rgb_to_hsv,
    rgb_to_keyword,
)
from lightsync.config import ServerConfig
from lightsync.devices.handle import DeviceHandle
from lightsync.events import EventFanout, EventKind, LightEvent
from lightsync.models.base import Capability, CapabilitySet, ColorMode, DeviceStatus
from lightsync.models.device import DeviceState
from lightsync.models.light import INFRARED_RANGE, LightDelta, LightState
from lightsync.resolver import resolve_command
from lightsync.utils.clock import Clock, MonotonicClock
from lightsync.utils.errors import (
    InitializationError,
    classify_exception,
    execute_with_timeout,
)
from lightsync.utils.health import PollHealth

logger = logging.getLogger(__name__)

# Display saturation for lights showing a color temperature
TEMPERATURE_DISPLAY_SATURATION = 5

Command = tuple[str, Callable[..., Any], tuple[Any, ...]]


class LightItem:
    """Light state, reachability and polling for one device handle."""

    def __init__(
        self,
        handle: DeviceHandle,
        config: ServerConfig | None = None,
        clock: Clock | None = None,
    ):
        self.id: str = handle.id
        self.handle = handle
        self.config = config or ServerConfig()
        self.clock = clock or MonotonicClock()
        self.events = EventFanout()
        self.health = PollHealth(device_id=handle.id)

        self.status = DeviceStatus.UNKNOWN
        self.capabilities = CapabilitySet()
        self.state = LightState()
        self.label: str | None = None
        self.model: str | None = None
        self.max_ir: int | None = None
        self.suppress_until = 0.0
        self.initialized = False

        self._poll_task: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()

    @property
    def address(self) -> str | None:
        return self.handle.address

    @property
    def reachable(self) -> bool:
        return self.status is DeviceStatus.ONLINE

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    @property
    def is_suppressed(self) -> bool:
        """True while polled readings are being discarded."""
        return self.clock.now() < self.suppress_until

    async def _call(self, operation: str, coro: Any) -> Any:
        return await execute_with_timeout(
            coro,
            timeout=self.config.device_timeout,
            device_id=self.id,
            operation=operation,
        )

    async def _query(self) -> tuple[DeviceState, int | None]:
        """Fetch state, and the IR level when supported, concurrently."""
        queries = [self._call("get_state", self.handle.get_state())]
        if Capability.INFRARED in self.capabilities:
            queries.append(self._call("get_max_ir", self.handle.get_max_ir()))

        results = await asyncio.gather(*queries)
        max_ir = None
        if len(results) > 1:
            max_ir = int(clamp(results[1], *INFRARED_RANGE))
        return results[0], max_ir

    async def initialize(self) -> None:
        """Query hardware info then current state, and start polling.

        Raises:
            InitializationError: If any query fails. The light stays UNKNOWN
                and no poll task is started.
        """
        try:
            hardware = await self._call(
                "get_hardware_version", self.handle.get_hardware_version()
            )
            self.capabilities = CapabilitySet.from_hardware(hardware)
            reading, max_ir = await self._query()
        except Exception as e:
            raise InitializationError(self.id, e) from e

        self.model = hardware.product_name
        self.label = reading.label
        self.max_ir = max_ir
        self.state = LightState.from_device(reading, mode=self._observed_mode(reading))
        self.status = DeviceStatus.ONLINE
        self.initialized = True
        self.start_polling()

        logger.info(
            f"Initialized light {self.id} ({self.label}, {self.model}) "
            f"capabilities={self.capabilities.names()}"
        )

    # Polling

    def start_polling(self) -> None:
        """Start (or restart) the poll task."""
        self.stop_polling()
        self._poll_task = asyncio.create_task(self._poll_loop(), name=f"poll-{self.id}")

    def stop_polling(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.poll_interval)
            try:
                await self.poll()
            except Exception:
                logger.exception(f"Unexpected error polling light {self.id}")

    async def poll(self) -> bool:
        """Fetch device state and reconcile it.

        Transport failures are recorded and otherwise ignored.

        Returns:
            True if the state changed
        """
        try:
            reading, max_ir = await self._query()
        except Exception as e:
            self.health.record_failure(e)
            logger.debug(f"Poll failed for light {self.id}: {e}")
            return False

        self.health.record_success()
        return self.reconcile(reading, max_ir)

    def reconcile(self, reading: DeviceState, max_ir: int | None = None) -> bool:
        """Merge a device reading unless echo suppression is active.

        Returns:
            True if the state changed and an update event was published
        """
        if self.is_suppressed:
            logger.debug(f"Discarding reading for light {self.id}, command still settling")
            return False

        observed = LightState.from_device(reading, mode=self._observed_mode(reading))
        changed = not self.state.same_reading(observed)

        if max_ir is not None and max_ir != self.max_ir:
            self.max_ir = max_ir
            changed = True

        if reading.label and reading.label != self.label:
            self.label = reading.label
            changed = True

        if not changed:
            return False

        self.state = observed
        self._publish(EventKind.UPDATE)
        return True

    def _observed_mode(self, reading: DeviceState) -> ColorMode:
        if Capability.COLOR not in self.capabilities or reading.saturation == 0:
            return ColorMode.TEMPERATURE
        if reading.hue != self.state.hue or reading.saturation != self.state.saturation:
            return ColorMode.COLOR
        return self.state.mode

    # Reachability

    async def set_reachable(self, reachable: bool) -> None:
        """Apply a transport reachability notification."""
        status = DeviceStatus.ONLINE if reachable else DeviceStatus.OFFLINE
        if status is self.status:
            return

        if not self.initialized:
            logger.debug(f"Ignoring reachability change for uninitialized light {self.id}")
            return

        if not reachable:
            self.stop_polling()
            self.status = DeviceStatus.OFFLINE
            logger.info(f"Light {self.id} is offline")
            self._publish(EventKind.CHANGE)
            return

        # Refresh before accepting commands again
        await self.poll()
        self.status = DeviceStatus.ONLINE
        self.start_polling()
        logger.info(f"Light {self.id} is back online")
        self._publish(EventKind.CHANGE)

    # Commands

    def apply_command(self, payload: Any) -> LightDelta | None:
        """Resolve a payload, update state and send commands to the device.

        Device commands run in the background. Returns the applied delta, or
        None when nothing was applied.
        """
        resolution = resolve_command(payload, self.state, self.capabilities)

        if resolution.is_unhandled:
            self._warn("Unhandled input", payload)
            return None

        if resolution.is_invalid:
            self._warn("Invalid input", {"payload": payload, "rejected": resolution.rejected})
            return None

        if resolution.rejected:
            logger.debug(f"Light {self.id} ignored invalid keys {resolution.rejected}")

        if not self.reachable:
            logger.info(f"Light {self.id} is {self.status.value}, command not sent")
            return None

        delta = resolution.delta
        if delta.is_empty:
            return delta

        was_on = self.state.on
        self.state = self.state.merge(delta)
        if delta.max_ir is not None:
            self.max_ir = delta.max_ir

        self._dispatch(self._plan_commands(was_on, delta, resolution.duration))
        self._extend_suppression(resolution.duration)
        self._publish(EventKind.CHANGE)
        return delta

    def _plan_commands(self, was_on: bool, delta: LightDelta, duration: int) -> list[Command]:
        commands: list[Command] = []

        if delta.max_ir is not None:
            commands.append(("set_infrared_level", self.handle.set_infrared_level, (delta.max_ir,)))

        if not delta.has_light_changes:
            return commands

        s = self.state
        color = (s.hue, s.saturation, s.brightness, s.kelvin)

        if was_on and not s.on:
            commands.append(("set_power", self.handle.set_power, (False, duration)))
        elif was_on:
            commands.append(("set_color", self.handle.set_color, (*color, duration)))
        elif s.on:
            # Color first so the light fades up already showing it
            commands.append(("set_color", self.handle.set_color, (*color, 0)))
            commands.append(("set_power", self.handle.set_power, (True, duration)))
        else:
            commands.append(("set_color", self.handle.set_color, (*color, 0)))

        return commands

    def _dispatch(self, commands: list[Command]) -> None:
        task = asyncio.create_task(self._run_commands(commands))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _run_commands(self, commands: list[Command]) -> None:
        for operation, method, args in commands:
            try:
                await self._call(operation, method(*args))
            except Exception as e:
                logger.error(f"Failed to {operation} for light {self.id}: {e}")
                self._error(f"Failed to {operation}", e)
                return

    def _extend_suppression(self, duration_ms: int) -> None:
        deadline = self.clock.now() + self.config.settle_margin + math.ceil(duration_ms / 1000)
        # Strictly increasing even if the clock has not advanced
        self.suppress_until = max(deadline, math.nextafter(self.suppress_until, math.inf))

    async def wait_commands(self) -> None:
        """Wait for in-flight device commands to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def stop(self) -> None:
        """Cancel polling and wait for in-flight commands."""
        task = self._poll_task
        self.stop_polling()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self.wait_commands()

    # Host boundary

    def get_colors(self) -> dict[str, Any]:
        """Display payload with the color in several color spaces."""
        s = self.state

        if Capability.COLOR in self.capabilities and s.mode is ColorMode.COLOR:
            hsv = (s.hue, s.saturation, s.brightness)
        else:
            hue, _, _ = rgb_to_hsv(*kelvin_to_rgb(s.kelvin))
            hsv = (hue, TEMPERATURE_DISPLAY_SATURATION, s.brightness)

        rgb = hsv_to_rgb(*hsv, rounding=math.floor)

        payload: dict[str, Any] = {
            "on": s.on,
            "reachable": self.reachable,
            "bri": math.floor(s.brightness),
            "hsv": [math.floor(c) for c in hsv],
            "rgb": list(rgb),
            "hex": rgb_to_hex(rgb),
            "color": rgb_to_keyword(rgb),
        }

        if Capability.TEMPERATURE in self.capabilities:
            payload["kelvin"] = math.floor(s.kelvin)
            payload["mired"] = math.floor(1_000_000 / s.kelvin)

        return payload

    def to_message(self) -> dict[str, Any]:
        """State message for the host."""
        message: dict[str, Any] = {
            "id": self.id,
            "info": {
                "id": self.id,
                "label": self.label,
                "address": self.address,
                "model": self.model,
                "capability": self.capabilities.names(),
            },
            "payload": self.get_colors(),
            "state": self.state.to_state_dict(),
        }
        if Capability.INFRARED in self.capabilities:
            message["maxIR"] = self.max_ir
        return message

    def _publish(self, kind: EventKind) -> None:
        self.events.publish(LightEvent(kind=kind, light_id=self.id, message=self.to_message()))

    def _warn(self, text: str, detail: Any = None) -> None:
        logger.warning(f"{text} for light {self.id}: {detail!r}")
        self.events.publish(
            LightEvent(kind=EventKind.WARNING, light_id=self.id, text=text, detail=detail)
        )

    def _error(self, text: str, error: BaseException) -> None:
        detail = classify_exception(error, self.id).to_dict()
        self.events.publish(
            LightEvent(kind=EventKind.ERROR, light_id=self.id, text=text, detail=detail)
        )
