from __future__ import annotations

import asyncio
from types import SimpleNamespace

from bleak.exc import BleakError

from beaconlog.ble.radio import BleRadio


class FakeScanner:
    """Stands in for BleakScanner; fails to start while the adapter is off."""

    failures_left = 0
    instances: list["FakeScanner"] = []

    def __init__(self, detection_callback=None) -> None:
        self.detection_callback = detection_callback
        self.started = False
        self.stopped = False
        FakeScanner.instances.append(self)

    async def start(self) -> None:
        if FakeScanner.failures_left > 0:
            FakeScanner.failures_left -= 1
            raise BleakError("Bluetooth device is turned off")
        self.started = True

    async def stop(self) -> None:
        self.stopped = True


def reset_fake(failures: int = 0) -> None:
    FakeScanner.failures_left = failures
    FakeScanner.instances = []


def test_start_is_deferred_until_adapter_powers_on() -> None:
    reset_fake(failures=2)
    states: list[bool] = []

    async def scenario():
        radio = BleRadio(poll_interval=0.01, scanner_factory=FakeScanner)
        radio.on_state_change(states.append)
        # Adapter begins in the "on" state to make the off transition visible
        radio._set_powered_on(True)
        await radio.start_scan(lambda error, advertisement: None)
        return radio

    radio = asyncio.run(scenario())

    assert len(FakeScanner.instances) == 3
    assert FakeScanner.instances[-1].started
    assert states == [True, False, True]
    assert radio.powered_on
    assert radio.is_scanning


def test_detection_callback_converts_advertisement() -> None:
    reset_fake()
    events = []

    async def scenario():
        radio = BleRadio(scanner_factory=FakeScanner)
        await radio.start_scan(lambda error, advertisement: events.append((error, advertisement)))
        scanner = FakeScanner.instances[-1]
        device = SimpleNamespace(address="00:a0:50:12:24:2e")
        advertisement = SimpleNamespace(
            rssi=-58,
            manufacturer_data={0x004C: b"\x02\x15\x00"},
            local_name="tag",
        )
        scanner.detection_callback(device, advertisement)
        await radio.stop_scan()
        return scanner, radio

    scanner, radio = asyncio.run(scenario())

    assert scanner.stopped
    assert not radio.is_scanning
    error, advertisement = events[0]
    assert error is None
    assert advertisement.device_id == "00:A0:50:12:24:2E"
    assert advertisement.rssi == -58
    assert advertisement.manufacturer_data == b"\x4c\x00\x02\x15\x00"


def test_malformed_detection_is_delivered_as_error() -> None:
    reset_fake()
    events = []

    async def scenario():
        radio = BleRadio(scanner_factory=FakeScanner)
        await radio.start_scan(lambda error, advertisement: events.append((error, advertisement)))
        device = SimpleNamespace(address="00:A0:50:12:24:2E")
        advertisement = SimpleNamespace(rssi=None, manufacturer_data={}, local_name=None)
        FakeScanner.instances[-1].detection_callback(device, advertisement)
        await radio.stop_scan()

    asyncio.run(scenario())

    error, advertisement = events[0]
    assert isinstance(error, TypeError)
    assert advertisement is None


def test_unsubscribe_stops_state_notifications() -> None:
    radio = BleRadio(scanner_factory=FakeScanner)
    states: list[bool] = []
    unsubscribe = radio.on_state_change(states.append)

    radio._set_powered_on(True)
    unsubscribe()
    radio._set_powered_on(False)

    assert states == [True]


class HangingScanner(FakeScanner):
    """Scanner whose start() never completes."""

    async def start(self) -> None:
        await asyncio.Event().wait()


def test_cancelled_start_stops_the_pending_scanner() -> None:
    reset_fake()

    async def scenario():
        radio = BleRadio(scanner_factory=HangingScanner)
        task = asyncio.create_task(radio.start_scan(lambda error, advertisement: None))
        await asyncio.sleep(0.01)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return radio

    radio = asyncio.run(scenario())

    assert len(FakeScanner.instances) == 1
    assert FakeScanner.instances[0].stopped
    assert not radio.is_scanning


def test_wait_powered_on_returns_when_adapter_turns_on() -> None:
    async def scenario():
        radio = BleRadio(scanner_factory=FakeScanner)
        waiter = asyncio.create_task(radio.wait_powered_on())
        await asyncio.sleep(0.01)
        pending = not waiter.done()
        radio._set_powered_on(True)
        await asyncio.wait_for(waiter, timeout=1)
        # Already on: returns immediately
        await asyncio.wait_for(radio.wait_powered_on(), timeout=1)
        return pending

    assert asyncio.run(scenario())


def test_wait_powered_on_blocks_again_after_power_off() -> None:
    async def scenario():
        radio = BleRadio(scanner_factory=FakeScanner)
        radio._set_powered_on(True)
        await radio.wait_powered_on()
        radio._set_powered_on(False)
        waiter = asyncio.create_task(radio.wait_powered_on())
        await asyncio.sleep(0.01)
        pending = not waiter.done()
        waiter.cancel()
        return pending

    assert asyncio.run(scenario())
