"""Main application coordinator."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Callable, Optional

from .activity_log import ActivityLog
from .ble.parsers import IBeaconParser
from .ble.radio import BleRadio, RadioCapability
from .console import ConsoleController
from .demo import DemoRadio
from .i18n import t
from .models import AppConfig, ScanRow
from .persist import RowPersister
from .session import ScanSession

logger = logging.getLogger(__name__)


class BeaconLogApp:
    """Wires radio, session, persister and console together."""

    def __init__(
        self,
        config: AppConfig,
        demo: bool = False,
        once: bool = False,
    ) -> None:
        self._config = config
        self._demo = demo
        self._once = once
        self._radio: Optional[RadioCapability] = None
        self._activity_log: Optional[ActivityLog] = None
        self._persister: Optional[RowPersister] = None
        self._session: Optional[ScanSession] = None
        self._console: Optional[ConsoleController] = None
        self._unsubscribe_state: Optional[Callable[[], None]] = None
        self._running = False
        self._shutdown_event: Optional[asyncio.Event] = None

    @property
    def session(self) -> Optional[ScanSession]:
        return self._session

    @property
    def activity_log(self) -> Optional[ActivityLog]:
        return self._activity_log

    def _build_radio(self) -> RadioCapability:
        if self._demo:
            return DemoRadio(self._config.registry, self._config.beacon_signature)
        return BleRadio(poll_interval=self._config.radio_poll_interval)

    async def start(self) -> None:
        """Start all components."""
        logger.info("Starting beaconlog...")

        self._radio = self._build_radio()
        self._activity_log = ActivityLog(self._config.log_capacity)
        self._unsubscribe_state = self._radio.on_state_change(self._on_radio_state)
        self._persister = RowPersister(self._config.registry, self._config.output_dir)
        self._session = ScanSession(
            self._config.registry,
            self._radio,
            self._persister,
            parser=IBeaconParser(self._config.beacon_signature, self._config.signature_prefix_length),
            activity_log=self._activity_log,
            stop_when_complete=self._config.stop_when_complete,
        )

        if not self._once:
            self._console = ConsoleController(
                self._config,
                self._session,
                self._persister,
                self._radio,
                self._activity_log,
                on_quit=self.request_shutdown,
            )
            await self._console.start()

        self._running = True
        logger.info(
            "beaconlog started: %d beacons, window %d ms, output %s",
            len(self._config.registry),
            self._config.window_ms,
            self._persister.path_for(self._config.file_name),
        )

    async def stop(self) -> None:
        """Stop all components."""
        if not self._running:
            return

        logger.info("Stopping beaconlog...")
        self._running = False

        if self._console:
            await self._console.stop()

        if self._session:
            await self._session.abort()

        if self._radio:
            await self._radio.stop_scan()

        if self._unsubscribe_state:
            self._unsubscribe_state()
            self._unsubscribe_state = None

        logger.info("beaconlog stopped")

    async def run_once(self) -> Optional[ScanRow]:
        """Run a single session with the configured label and window."""
        return await self._session.run(
            self._config.window_ms,
            self._config.label,
            self._config.file_name,
        )

    async def run(self) -> int:
        """Run the application until shutdown. Returns a process exit code."""
        self._shutdown_event = asyncio.Event()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except NotImplementedError:
                pass

        try:
            await self.start()

            if self._once:
                return await self._run_once_until_shutdown()

            await self._shutdown_event.wait()
            return 0
        finally:
            await self.stop()

    async def _run_once_until_shutdown(self) -> int:
        once_task = asyncio.create_task(self.run_once(), name="scan_once")
        shutdown_task = asyncio.create_task(self._shutdown_event.wait(), name="shutdown_wait")
        done, _ = await asyncio.wait({once_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED)

        if once_task not in done:
            once_task.cancel()
            try:
                await once_task
            except asyncio.CancelledError:
                pass
            logger.info("Interrupted before the scan finished")
            return 0

        shutdown_task.cancel()
        try:
            row = once_task.result()
        except Exception as e:
            logger.error("Scan session failed: %s", e)
            return 1

        if row is not None:
            print(row.render())
        return 0

    def request_shutdown(self) -> None:
        """Ask the run loop to exit."""
        logger.info("Shutdown requested")
        if self._shutdown_event:
            self._shutdown_event.set()

    def _on_radio_state(self, powered_on: bool) -> None:
        state = t("console_bluetooth_on") if powered_on else t("console_bluetooth_off")
        self._activity_log.add(t("radio_state", state=state))
