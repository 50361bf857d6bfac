"""Light registry for lightsync."""

import asyncio
import logging
from typing import Any, Callable

from lightsync.config import ServerConfig
from lightsync.devices.handle import DeviceHandle
from lightsync.devices.light import LightItem
from lightsync.events import EventFanout, EventKind, LightEvent, Observer
from lightsync.utils.clock import Clock
from lightsync.utils.errors import LightNotFoundError, classify_exception

logger = logging.getLogger(__name__)


class LightManager:
    """Owns all active lights and routes transport and host calls to them.

    Transport notifications (new light, offline, online) and host commands
    enter here. Every light event is republished on ``events``; observers
    subscribed for a single light only see that light's events.
    """

    def __init__(self, config: ServerConfig | None = None, clock: Clock | None = None):
        self.config = config or ServerConfig()
        self.clock = clock
        self.events = EventFanout()
        self._lights: dict[str, LightItem] = {}
        self._light_observers: dict[str, EventFanout] = {}
        self._unsubscribers: dict[str, Callable[[], None]] = {}
        self._initializing: dict[str, asyncio.Task] = {}

    def _is_wanted(self, device_id: str) -> bool:
        return not self.config.lights or device_id in self.config.lights

    async def add_light(self, handle: DeviceHandle) -> LightItem | None:
        """Initialize and register a newly discovered light.

        Returns:
            The light, or None if it is filtered out or failed to initialize
        """
        if not self._is_wanted(handle.id):
            logger.debug(f"Ignoring light {handle.id}, not in configured lights")
            return None

        if handle.id in self._lights:
            return self._lights[handle.id]

        # Overlapping discoveries of one id share a single initialization
        pending = self._initializing.get(handle.id)
        if pending is not None:
            return await asyncio.shield(pending)

        task = asyncio.create_task(self._initialize_light(handle), name=f"init-{handle.id}")
        self._initializing[handle.id] = task
        task.add_done_callback(lambda _: self._initializing.pop(handle.id, None))
        return await asyncio.shield(task)

    async def _initialize_light(self, handle: DeviceHandle) -> LightItem | None:
        light = LightItem(handle, self.config, clock=self.clock)
        try:
            await light.initialize()
        except Exception as e:
            logger.error(str(e))
            error = classify_exception(e, handle.id)
            self.events.publish(
                LightEvent(
                    kind=EventKind.ERROR,
                    light_id=handle.id,
                    text=error.message,
                    detail=error.to_dict(),
                )
            )
            return None

        self._lights[light.id] = light
        self._unsubscribers[light.id] = light.events.subscribe(self._forward)
        logger.info(f"Added light {light.id} at {light.address}")
        self._forward(LightEvent(kind=EventKind.NEW, light_id=light.id, message=light.to_message()))
        return light

    async def remove_light(self, device_id: str) -> None:
        """Stop and forget a light.

        Per-light observers are kept, so a subscription made before discovery
        or across a remove and re-add keeps receiving events. The observer
        list for an id is dropped once its last observer unsubscribes.
        """
        light = self._lights.pop(device_id, None)
        if light is None:
            return
        unsubscribe = self._unsubscribers.pop(device_id, None)
        if unsubscribe:
            unsubscribe()
        await light.stop()
        logger.info(f"Removed light {device_id}")

    def _forward(self, event: LightEvent) -> None:
        observers = self._light_observers.get(event.light_id or "")
        if observers:
            observers.publish(event)
        self.events.publish(event)

    # Transport notifications

    async def set_reachable(self, device_id: str, reachable: bool) -> None:
        light = self._lights.get(device_id)
        if light is None:
            logger.debug(f"Reachability change for unknown light {device_id}")
            return
        await light.set_reachable(reachable)

    async def light_online(self, device_id: str) -> None:
        await self.set_reachable(device_id, True)

    async def light_offline(self, device_id: str) -> None:
        await self.set_reachable(device_id, False)

    # Host calls

    def subscribe(self, observer: Observer, light_id: str | None = None) -> Callable[[], None]:
        """Subscribe to all events, or to the events of one light.

        A per-light observer immediately receives the current state if the
        light is already known.
        """
        if light_id is None:
            return self.events.subscribe(observer)

        fanout = self._light_observers.setdefault(light_id, EventFanout())
        remove = fanout.subscribe(observer)

        def unsubscribe() -> None:
            remove()
            if not fanout and self._light_observers.get(light_id) is fanout:
                del self._light_observers[light_id]

        light = self._lights.get(light_id)
        if light is not None:
            event = LightEvent(kind=EventKind.NEW, light_id=light_id, message=light.to_message())
            try:
                observer(event)
            except Exception:
                logger.exception(f"Observer failed handling initial state of {light_id}")

        return unsubscribe

    def light_change(self, device_id: str, payload: Any) -> None:
        """Apply a command payload to a light.

        Raises:
            LightNotFoundError: If the light is not registered
        """
        light = self._lights.get(device_id)
        if light is None:
            raise LightNotFoundError(device_id)
        light.apply_command(payload)

    # Getters

    def get_light(self, device_id: str) -> LightItem | None:
        return self._lights.get(device_id)

    def get_lights(self) -> list[dict[str, Any]]:
        """List id, address and label for each active light."""
        return [
            {"id": light.id, "address": light.address, "label": light.label}
            for light in self._lights.values()
        ]

    def get_health_summary(self) -> dict[str, Any]:
        """Summary of poll health for all lights."""
        lights = {light_id: light.health.to_dict() for light_id, light in self._lights.items()}
        healthy = sum(1 for light in self._lights.values() if light.health.is_healthy)
        return {
            "total_lights": len(lights),
            "healthy_lights": healthy,
            "unhealthy_lights": len(lights) - healthy,
            "lights": lights,
        }

    async def stop(self) -> None:
        """Stop every light, including any still initializing."""
        if self._initializing:
            await asyncio.gather(*self._initializing.values(), return_exceptions=True)
        for device_id in list(self._lights):
            await self.remove_light(device_id)
        self._light_observers.clear()
