"""Demo mode: a synthetic radio that advertises the configured beacons."""

from __future__ import annotations

import asyncio
import base64
import logging
import random
from typing import Optional

from .ble.radio import AdvertisementCallback, RadioStateNotifier
from .models import Advertisement, KnownDeviceRegistry

logger = logging.getLogger(__name__)

# Reproducible output
random.seed(42)

# Unrelated traffic mixed in with the beacons
DEMO_NOISE = [
    Advertisement(device_id="AA:BB:CC:DD:EE:01", rssi=-70, manufacturer_data=b"\x06\x00\x01\x09\x20\x02"),
    Advertisement(device_id="AA:BB:CC:DD:EE:02", rssi=-88, manufacturer_data=b""),
]


class DemoRadio(RadioStateNotifier):
    """Emits one advertisement per beacon roughly every ``interval`` seconds.

    The adapter reports powered on after ``power_on_delay`` seconds, so the
    deferred-start path is visible in the logs.
    """

    def __init__(
        self,
        registry: KnownDeviceRegistry,
        signature: str,
        interval: float = 0.25,
        power_on_delay: float = 0.5,
    ) -> None:
        super().__init__()
        self._registry = registry
        self._payload = base64.b64decode(signature)
        self._interval = interval
        self._power_on_delay = power_on_delay
        self._base_rssi = {device_id: random.randint(-90, -45) for device_id in registry.ids}
        self._task: Optional[asyncio.Task] = None

    async def start_scan(self, callback: AdvertisementCallback) -> None:
        if self._task is not None:
            logger.warning("Scan already running")
            return

        if not self.powered_on:
            asyncio.get_running_loop().call_later(
                self._power_on_delay, self._set_powered_on, True
            )
            await self.wait_powered_on()

        self._task = asyncio.create_task(self._advertise(callback), name="demo_radio")
        logger.info("Demo scan started")

    async def stop_scan(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Demo scan stopped")

    async def _advertise(self, callback: AdvertisementCallback) -> None:
        while True:
            events = [
                Advertisement(
                    device_id=device_id,
                    rssi=base + random.randint(-4, 4),
                    manufacturer_data=self._payload,
                )
                for device_id, base in self._base_rssi.items()
                if random.random() < 0.8
            ]
            events.extend(DEMO_NOISE)
            random.shuffle(events)

            for advertisement in events:
                callback(None, advertisement)
                await asyncio.sleep(self._interval / max(len(events), 1))
