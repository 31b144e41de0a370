from __future__ import annotations

import asyncio
import io
from pathlib import Path

from beaconlog.activity_log import ActivityLog
from beaconlog.console import ConsoleController
from beaconlog.models import AppConfig
from beaconlog.persist import RowPersister
from beaconlog.session import ScanSession

from conftest import DEVICE_A, FakeRadio


def make_console(registry, tmp_path: Path, on_quit=None):
    config = AppConfig(registry=registry, output_dir=tmp_path, window_ms=30)
    radio = FakeRadio()
    log = ActivityLog()
    persister = RowPersister(registry, tmp_path)
    session = ScanSession(registry, radio, persister, activity_log=log)
    out = io.StringIO()
    console = ConsoleController(config, session, persister, radio, log, out=out, on_quit=on_quit)
    return console, config, radio, session, out


def test_fields_are_updated_by_commands(registry, tmp_path: Path) -> None:
    console, config, _, _, out = make_console(registry, tmp_path)

    assert console.handle_command("label  corner desk \n")
    assert console.handle_command("interval 1500")
    assert console.handle_command("interval soon")
    assert console.handle_command("file run2.csv")
    assert console.handle_command("file")

    assert config.label == "corner desk"
    assert config.window_ms == 1500
    assert config.file_name == "run2.csv"
    text = out.getvalue()
    assert "Invalid interval: soon" in text
    assert "File name must not be empty" in text


def test_status_reports_bluetooth_and_settings(registry, tmp_path: Path) -> None:
    console, _, _, _, out = make_console(registry, tmp_path)

    console.handle_command("status")

    assert "Bluetooth: OFF" in out.getvalue()
    assert "interval: 30 ms" in out.getvalue()


def test_logs_and_clear(registry, tmp_path: Path) -> None:
    console, _, _, _, out = make_console(registry, tmp_path)

    console.handle_command("logs")
    console._log.add("hello")
    console.handle_command("logs")
    console.handle_command("clear")

    assert "No log entries" in out.getvalue()
    assert "hello" in out.getvalue()
    assert len(console._log) == 0


def test_quit_and_unknown_command(registry, tmp_path: Path) -> None:
    calls = []
    console, _, _, _, out = make_console(registry, tmp_path, on_quit=lambda: calls.append(True))

    assert console.handle_command("dance")
    assert not console.handle_command("quit")

    assert "Unknown command: dance" in out.getvalue()
    assert calls == [True]


def test_enter_starts_session_and_locks_fields(registry, tmp_path: Path) -> None:
    async def scenario():
        console, config, radio, session, out = make_console(registry, tmp_path)
        config.label = "desk"
        console.handle_command("\n")
        assert session.is_active
        console.handle_command("label other")
        console.handle_command("")
        await radio.scanning.wait()
        radio.emit(DEVICE_A, -47)
        await session.wait()
        await console._report_task
        return config, radio, out

    config, radio, out = asyncio.run(scenario())

    text = out.getvalue()
    assert config.label == "desk"
    assert text.count("Scan in progress") == 2
    assert radio.start_calls == 1
    assert "-47,0,desk" in text
    assert "(1 row)" in text
    assert "Scanning started" not in text


def test_logs_command_shows_session_activity(registry, tmp_path: Path) -> None:
    async def scenario():
        console, _, radio, session, out = make_console(registry, tmp_path)
        console.handle_command("")
        await radio.scanning.wait()
        radio.emit(DEVICE_A, -47)
        await session.wait()
        await console._report_task
        console.handle_command("logs")
        return out

    out = asyncio.run(scenario())

    text = out.getvalue()
    assert text.count("Scanning started...") == 1
    assert "Scanning stopped, took" in text
    assert "No log entries" not in text
