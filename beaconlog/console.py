"""Console controller: start button, input fields and log panel on stdin/stdout."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Callable, Optional, TextIO

from .activity_log import ActivityLog
from .ble.radio import RadioCapability
from .config import parse_window_ms
from .i18n import t
from .models import AppConfig, ConfigError
from .persist import RowPersister
from .session import ScanSession

logger = logging.getLogger(__name__)


class ConsoleController:
    """Reads commands from stdin and drives the scan session.

    An empty line starts a session with the current label, interval and
    file name. Fields cannot be changed while a session is running.
    """

    def __init__(
        self,
        config: AppConfig,
        session: ScanSession,
        persister: RowPersister,
        radio: RadioCapability,
        activity_log: ActivityLog,
        out: Optional[TextIO] = None,
        on_quit: Optional[Callable[[], None]] = None,
    ) -> None:
        self._config = config
        self._session = session
        self._persister = persister
        self._radio = radio
        self._log = activity_log
        self._out = out
        self._on_quit = on_quit
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._report_task: Optional[asyncio.Task] = None

    def _print(self, text: str) -> None:
        print(text, file=self._out or sys.stdout, flush=True)

    async def start(self) -> None:
        """Start reading commands."""
        self._running = True
        self._task = asyncio.create_task(self._run(), name="console_controller")
        logger.info("Console controller started")

    async def stop(self) -> None:
        """Stop reading commands."""
        self._running = False

        try:
            loop = asyncio.get_running_loop()
            loop.remove_reader(sys.stdin)
        except (ValueError, NotImplementedError):
            pass

        for task in (self._task, self._report_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._task = None
        self._report_task = None

    async def _run(self) -> None:
        self._print(t("console_prompt"))
        loop = asyncio.get_running_loop()
        lines: asyncio.Queue[str] = asyncio.Queue()

        def _on_stdin() -> None:
            lines.put_nowait(sys.stdin.readline())

        try:
            loop.add_reader(sys.stdin, _on_stdin)
        except NotImplementedError:
            # Fallback for platforms without add_reader (e.g. Windows)
            while self._running:
                line = await loop.run_in_executor(None, sys.stdin.readline)
                if not line or not self.handle_command(line):
                    break
            return

        while self._running:
            line = await lines.get()
            if not line:
                # EOF on stdin
                loop.remove_reader(sys.stdin)
                break
            if not self.handle_command(line):
                break

    def handle_command(self, line: str) -> bool:
        """Execute one command line. Returns False when the user quits."""
        command, _, argument = line.strip().partition(" ")
        command = command.lower()
        argument = argument.strip()

        if command in ("", "start"):
            self.start_scan()
        elif command == "label":
            if self._check_idle():
                self._config.label = argument
                self._print(t("console_label_set", label=argument))
        elif command == "interval":
            if self._check_idle():
                try:
                    self._config.window_ms = parse_window_ms(argument)
                except ConfigError:
                    self._print(t("console_interval_invalid", value=argument))
                else:
                    self._print(t("console_interval_set", interval=self._config.window_ms))
        elif command == "file":
            if self._check_idle():
                if argument:
                    self._config.file_name = argument
                    self._print(t("console_file_set", file_name=argument))
                else:
                    self._print(t("console_file_invalid"))
        elif command == "status":
            self._print_status()
        elif command == "logs":
            self._print_logs()
        elif command == "clear":
            self._log.clear()
            self._print(t("console_logs_cleared"))
        elif command == "help":
            self._print(t("console_help"))
        elif command in ("quit", "exit"):
            if self._on_quit:
                self._on_quit()
            return False
        else:
            self._print(t("console_unknown_command", command=command))
        return True

    def start_scan(self) -> bool:
        """Start a session with the current fields (the Start button)."""
        if not self._check_idle():
            return False
        self._session.start(self._config.window_ms, self._config.label, self._config.file_name)
        self._report_task = asyncio.create_task(self._report_result(), name="console_report")
        return True

    async def _report_result(self) -> None:
        try:
            row = await self._session.wait()
        except Exception as e:
            logger.error("Scan session failed: %s", e)
            self._print(t("scan_save_failed", error=e))
            return

        if row is None:
            self._print(t("scan_aborted"))
            return

        self._print(t("scan_row", row=row.render()))
        try:
            _, rows = self._persister.read_rows(self._config.file_name)
        except OSError as e:
            logger.debug("Could not count rows: %s", e)
            return
        self._print(
            t(
                "scan_saved",
                path=self._persister.path_for(self._config.file_name),
                rows=t("console_rows", n=len(rows)),
            )
        )

    def _check_idle(self) -> bool:
        if self._session.is_active:
            self._print(t("console_busy"))
            return False
        return True

    def _print_status(self) -> None:
        bluetooth = t("console_bluetooth_on") if self._radio.powered_on else t("console_bluetooth_off")
        self._print(
            t(
                "console_status",
                bluetooth=bluetooth,
                interval=self._config.window_ms,
                path=self._persister.path_for(self._config.file_name),
                label=self._config.label,
            )
        )

    def _print_logs(self) -> None:
        lines = self._log.lines()
        if not lines:
            self._print(t("console_no_logs"))
            return
        self._print("\n".join(lines))
