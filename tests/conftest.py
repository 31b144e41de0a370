from __future__ import annotations

import asyncio
import base64
from typing import Optional

import pytest

from beaconlog.ble.radio import AdvertisementCallback, RadioStateNotifier
from beaconlog.i18n import init_lang
from beaconlog.models import DEFAULT_BEACON_SIGNATURE, Advertisement, KnownDeviceRegistry

DEVICE_A = "00:A0:50:00:00:0A"
DEVICE_B = "00:A0:50:00:00:0B"
BEACON_PAYLOAD = base64.b64decode(DEFAULT_BEACON_SIGNATURE)
# Apple iBeacon, but a different proximity UUID
FOREIGN_PAYLOAD = b"\x4c\x00\x02\x15" + b"\xfe" * 21


class FakeRadio(RadioStateNotifier):
    """Radio double that lets tests push advertisements by hand."""

    def __init__(self, power_on_delay: float = 0.0) -> None:
        super().__init__()
        self.power_on_delay = power_on_delay
        self.callback: Optional[AdvertisementCallback] = None
        self.start_calls = 0
        self.stop_calls = 0
        self.scanning = asyncio.Event()

    async def start_scan(self, callback: AdvertisementCallback) -> None:
        self.start_calls += 1
        if self.power_on_delay:
            await asyncio.sleep(self.power_on_delay)
        self._set_powered_on(True)
        self.callback = callback
        self.scanning.set()

    async def stop_scan(self) -> None:
        self.stop_calls += 1
        self.callback = None
        self.scanning.clear()

    def emit(self, device_id: str, rssi: int, payload: bytes = BEACON_PAYLOAD) -> None:
        assert self.callback is not None, "radio is not scanning"
        self.callback(None, Advertisement(device_id=device_id, rssi=rssi, manufacturer_data=payload))

    def emit_error(self, error: Exception) -> None:
        assert self.callback is not None, "radio is not scanning"
        self.callback(error, None)


@pytest.fixture(autouse=True)
def english() -> None:
    init_lang("en")


@pytest.fixture
def registry() -> KnownDeviceRegistry:
    return KnownDeviceRegistry({DEVICE_A: 0, DEVICE_B: 1})
