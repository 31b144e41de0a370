"""BLE radio scan capability backed by Bleak."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol

from bleak import BleakScanner as BleakScannerLib
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from ..models import Advertisement
from .parsers.ibeacon import encode_manufacturer_data

logger = logging.getLogger(__name__)

# Called with (error, None) for delivery errors, (None, advertisement) otherwise
AdvertisementCallback = Callable[[Optional[Exception], Optional[Advertisement]], None]
StateCallback = Callable[[bool], None]


class RadioCapability(Protocol):
    """What a scan session needs from the radio."""

    @property
    def powered_on(self) -> bool: ...

    def on_state_change(self, callback: StateCallback) -> Callable[[], None]: ...

    async def wait_powered_on(self) -> None: ...

    async def start_scan(self, callback: AdvertisementCallback) -> None: ...

    async def stop_scan(self) -> None: ...


class RadioStateNotifier:
    """Power state bookkeeping shared by radio implementations."""

    def __init__(self) -> None:
        self._powered_on = False
        self._state_callbacks: list[StateCallback] = []
        self._powered_on_event: Optional[asyncio.Event] = None

    @property
    def powered_on(self) -> bool:
        """Whether the adapter last reported powered on."""
        return self._powered_on

    def on_state_change(self, callback: StateCallback) -> Callable[[], None]:
        """Subscribe to power state changes. Returns an unsubscribe function."""
        self._state_callbacks.append(callback)

        def _remove() -> None:
            if callback in self._state_callbacks:
                self._state_callbacks.remove(callback)

        return _remove

    async def wait_powered_on(self) -> None:
        """Wait until the adapter reports powered on."""
        if self._powered_on:
            return
        if self._powered_on_event is None:
            self._powered_on_event = asyncio.Event()
        await self._powered_on_event.wait()

    def _set_powered_on(self, powered_on: bool) -> None:
        if powered_on == self._powered_on:
            return
        self._powered_on = powered_on
        if self._powered_on_event is not None:
            if powered_on:
                self._powered_on_event.set()
            else:
                self._powered_on_event.clear()
        logger.info("Bluetooth adapter is %s", "on" if powered_on else "off")
        for callback in list(self._state_callbacks):
            try:
                callback(powered_on)
            except Exception as e:
                logger.warning("Radio state callback failed: %s", e)


class BleRadio(RadioStateNotifier):
    """Radio scan capability using a Bleak scanner.

    Starting a scan is deferred until the adapter accepts it: while
    ``BleakScanner.start()`` fails with BleakError the adapter is treated
    as powered off and the start is retried every ``poll_interval``.
    """

    # Timeout for stop() operation - don't let it hang forever
    STOP_TIMEOUT_SECONDS = 10

    def __init__(
        self,
        poll_interval: float = 2.0,
        scanner_factory: Optional[Callable[..., BleakScannerLib]] = None,
    ) -> None:
        super().__init__()
        self._poll_interval = poll_interval
        self._scanner_factory = scanner_factory or BleakScannerLib
        self._scanner: Optional[BleakScannerLib] = None
        self._callback: Optional[AdvertisementCallback] = None

    @property
    def is_scanning(self) -> bool:
        return self._scanner is not None

    def _detection_callback(
        self,
        device: BLEDevice,
        advertisement_data: AdvertisementData,
    ) -> None:
        """Convert a Bleak detection into an Advertisement event."""
        callback = self._callback
        if callback is None:
            return

        try:
            advertisement = Advertisement(
                device_id=device.address.upper(),
                rssi=int(advertisement_data.rssi),
                manufacturer_data=encode_manufacturer_data(advertisement_data.manufacturer_data),
                local_name=advertisement_data.local_name,
            )
        except Exception as e:
            callback(e, None)
            return

        callback(None, advertisement)

    async def start_scan(self, callback: AdvertisementCallback) -> None:
        """Start scanning, waiting for the adapter to power on if needed."""
        if self._scanner is not None:
            logger.warning("Scan already running")
            return

        self._callback = callback
        attempt = 0
        while True:
            attempt += 1
            scanner = self._scanner_factory(detection_callback=self._detection_callback)
            try:
                await scanner.start()
            except asyncio.CancelledError:
                await self._stop_scanner_safe(scanner)
                self._callback = None
                raise
            except BleakError as e:
                if attempt == 1:
                    logger.warning("Bluetooth unavailable, waiting for adapter: %s", e)
                else:
                    logger.debug("Bluetooth still unavailable (attempt %d): %s", attempt, e)
                self._set_powered_on(False)
                await asyncio.sleep(self._poll_interval)
                continue

            self._scanner = scanner
            self._set_powered_on(True)
            logger.info("BLE scan started")
            return

    async def stop_scan(self) -> None:
        """Stop scanning with timeout protection."""
        self._callback = None
        if self._scanner is None:
            return

        try:
            await self._stop_scanner_safe(self._scanner)
        finally:
            self._scanner = None
        logger.info("BLE scan stopped")

    async def _stop_scanner_safe(self, scanner: BleakScannerLib) -> None:
        """Stop a scanner with timeout protection."""
        try:
            await asyncio.wait_for(scanner.stop(), timeout=self.STOP_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("Scanner stop() timed out after %ds", self.STOP_TIMEOUT_SECONDS)
        except BleakError as e:
            logger.debug("Error stopping scanner: %s", e)
