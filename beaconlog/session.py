"""Scan session: collect one RSSI per known beacon during a fixed window."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from .activity_log import ActivityLog
from .ble.parsers import IBeaconParser
from .ble.radio import RadioCapability
from .i18n import t
from .models import DEFAULT_FILE_NAME, Advertisement, KnownDeviceRegistry, ScanRow
from .persist import RowPersister

logger = logging.getLogger(__name__)


class ScanSession:
    """Owns one scan pass at a time.

    States are Idle and Scanning. ``start`` moves to Scanning; the window
    timer is armed by the first advertisement that matches the beacon
    signature. Its expiry stamps the row, stops the radio, persists the
    row and returns to Idle. All mutation happens on the event loop, so
    the row and seen set need no locking.
    """

    def __init__(
        self,
        registry: KnownDeviceRegistry,
        radio: RadioCapability,
        persister: RowPersister,
        parser: Optional[IBeaconParser] = None,
        activity_log: Optional[ActivityLog] = None,
        stop_when_complete: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._registry = registry
        self._radio = radio
        self._persister = persister
        self._parser = parser or IBeaconParser()
        self._log = activity_log if activity_log is not None else ActivityLog()
        self._stop_when_complete = stop_when_complete
        self._clock = clock

        self._row = ScanRow(registry)
        self._seen: set[str] = set()
        self._active = False
        self._finishing = False
        self._window_ms = 0
        self._label = ""
        self._file_name = ""
        self._first_event_at: Optional[float] = None
        self._start_task: Optional[asyncio.Task] = None
        self._timer_task: Optional[asyncio.Task] = None
        self._done: Optional[asyncio.Future] = None

    @property
    def is_active(self) -> bool:
        """True while a session is scanning or finishing."""
        return self._active

    @property
    def row(self) -> ScanRow:
        """The in-progress row."""
        return self._row

    @property
    def seen(self) -> frozenset[str]:
        return frozenset(self._seen)

    def start(self, window_ms: int, label: str, file_name: Optional[str] = None) -> bool:
        """Begin a session. Returns False (and does nothing) if one is active.

        Must be called from a running event loop.
        """
        if self._active:
            logger.warning("Scan session already active, ignoring start")
            return False
        if window_ms <= 0:
            raise ValueError(f"Scan window must be positive, got {window_ms}")

        loop = asyncio.get_running_loop()
        self._active = True
        self._window_ms = window_ms
        self._label = label
        self._file_name = file_name or DEFAULT_FILE_NAME
        self._done = loop.create_future()
        self._log.add(t("scan_started"))
        self._start_task = asyncio.create_task(self._open_scan(), name="scan_start")
        return True

    async def wait(self) -> Optional[ScanRow]:
        """Wait for the current (or last) session and return its finished row.

        Returns None if the session was aborted; re-raises write failures.
        """
        if self._done is None:
            return None
        return await self._done

    async def run(self, window_ms: int, label: str, file_name: Optional[str] = None) -> Optional[ScanRow]:
        """Start a session and wait for it to finish."""
        if not self.start(window_ms, label, file_name):
            return None
        return await self.wait()

    async def abort(self) -> None:
        """Tear down an active session without persisting its row."""
        if not self._active or self._finishing:
            return

        self._finishing = True
        for task in (self._start_task, self._timer_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        await self._radio.stop_scan()
        self._log.add(t("scan_aborted"))
        done = self._done
        self._reset()
        if done and not done.done():
            done.set_result(None)

    async def _open_scan(self) -> None:
        try:
            await self._radio.start_scan(self._on_advertisement)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Could not start scan: %s", e)
            self._log.add(t("scan_start_failed", error=e))
            done = self._done
            self._reset()
            if done and not done.done():
                done.set_exception(e)

    def _on_advertisement(self, error: Optional[Exception], advertisement: Optional[Advertisement]) -> None:
        """Handle one radio event. Runs on the event loop."""
        if not self._active or self._finishing:
            return

        if error is not None or advertisement is None:
            logger.debug("Ignoring scan error: %s", error)
            return

        if not self._parser.can_parse(advertisement):
            return

        if self._timer_task is None:
            self._first_event_at = time.monotonic()
            self._timer_task = asyncio.create_task(self._window_elapsed(), name="scan_window")

        device_id = advertisement.device_id.upper()
        self._seen.add(device_id)

        if self._row.set_rssi(device_id, advertisement.rssi) and logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Beacon %s rssi %d (%s)",
                device_id,
                advertisement.rssi,
                self._parser.parse(advertisement),
            )

        if self._stop_when_complete and self._all_seen():
            logger.debug("All %d beacons reported, finishing early", len(self._registry))
            self._timer_task.cancel()
            self._finishing = True
            self._timer_task = asyncio.create_task(self._terminate(), name="scan_finish")

    def _all_seen(self) -> bool:
        return len(self._registry) > 0 and all(device_id in self._seen for device_id in self._registry.ids)

    async def _window_elapsed(self) -> None:
        await asyncio.sleep(self._window_ms / 1000)
        await self._terminate()

    async def _terminate(self) -> None:
        self._finishing = True
        done = self._done
        row = self._row.finish(int(self._clock() * 1000), self._label)

        try:
            await self._radio.stop_scan()
            elapsed_ms = int((time.monotonic() - (self._first_event_at or time.monotonic())) * 1000)
            self._log.add(t("scan_stopped", ms=elapsed_ms))
            self._log.add(t("scan_row", row=row.render()))
            path = self._persister.append(row, self._file_name)
        except Exception as e:
            logger.error("Saving scan row failed: %s", e)
            self._log.add(t("scan_save_failed", error=e))
            self._reset()
            if done and not done.done():
                done.set_exception(e)
            return

        logger.info("Saved row with %d beacons seen to %s", len(self._seen), path)
        self._reset()
        if done and not done.done():
            done.set_result(row)

    def _reset(self) -> None:
        self._row = ScanRow(self._registry)
        self._seen.clear()
        self._active = False
        self._finishing = False
        self._first_event_at = None
        self._start_task = None
        self._timer_task = None
