"""Configuration loading from YAML."""

import base64
import binascii
import logging
from pathlib import Path
from typing import Optional

import yaml

from .models import AppConfig, ConfigError, KnownDeviceRegistry

logger = logging.getLogger(__name__)


def load_config(config_path: Optional[Path]) -> AppConfig:
    """Load configuration from a YAML file.

    ``None`` yields the built-in defaults (the nine-tag site table).
    """
    if config_path is None:
        logger.info("No configuration file, using built-in defaults")
        return AppConfig()

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        data = {}

    return config_from_dict(data)


def config_from_dict(data: dict) -> AppConfig:
    """Build an AppConfig from already parsed YAML data."""
    config = AppConfig()

    if "devices" in data:
        config.registry = _load_registry(data["devices"] or [])

    window_ms = data.get("window_ms")
    if window_ms is not None:
        config.window_ms = parse_window_ms(window_ms)

    if "label" in data:
        config.label = str(data["label"] or "")

    if data.get("file_name"):
        config.file_name = str(data["file_name"])

    if data.get("output_dir"):
        config.output_dir = Path(str(data["output_dir"])).expanduser()

    if "stop_when_complete" in data:
        config.stop_when_complete = bool(data["stop_when_complete"])

    beacon = data.get("beacon") or {}
    if "signature" in beacon:
        config.beacon_signature = str(beacon["signature"])
    if "prefix_length" in beacon:
        try:
            config.signature_prefix_length = int(beacon["prefix_length"])
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid beacon prefix_length: {beacon['prefix_length']!r}")
    _validate_signature(config.beacon_signature, config.signature_prefix_length)

    poll_interval = data.get("radio_poll_interval")
    if poll_interval is not None:
        try:
            config.radio_poll_interval = float(poll_interval)
        except (TypeError, ValueError):
            logger.warning("Invalid radio_poll_interval value: %s", poll_interval)

    log_capacity = data.get("log_capacity")
    if log_capacity is not None:
        try:
            config.log_capacity = int(log_capacity)
        except (TypeError, ValueError):
            logger.warning("Invalid log_capacity value: %s", log_capacity)

    config.language = data.get("language", config.language)

    logger.info(
        "Loaded configuration with %d devices, window %d ms",
        len(config.registry),
        config.window_ms,
    )
    return config


def parse_window_ms(value: object) -> int:
    """Parse a scan window in milliseconds, rejecting non-positive values."""
    try:
        window_ms = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid scan window: {value!r}")
    if window_ms <= 0:
        raise ConfigError(f"Scan window must be positive, got {window_ms}")
    return window_ms


def _load_registry(entries: list) -> KnownDeviceRegistry:
    """Build the registry from a list of ids or ``{mac, column}`` mappings."""
    columns: dict[str, int] = {}
    explicit = any(isinstance(entry, dict) and "column" in entry for entry in entries)

    for position, entry in enumerate(entries):
        if isinstance(entry, str):
            mac = entry
            column = position
        elif isinstance(entry, dict) and "mac" in entry:
            mac = str(entry["mac"])
            column = entry.get("column", position)
        else:
            raise ConfigError(f"Invalid device entry: {entry!r}")

        if explicit and not (isinstance(entry, dict) and "column" in entry):
            raise ConfigError(f"Device {mac} needs a column when others specify one")

        try:
            columns[mac] = int(column)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid column for device {mac}: {column!r}")
        logger.debug("Loaded device: %s (column %s)", mac, column)

    if len(columns) != len(entries):
        raise ConfigError("Duplicate device identifiers in configuration")

    return KnownDeviceRegistry(columns)


def _validate_signature(signature: str, prefix_length: int) -> None:
    try:
        raw = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError):
        raise ConfigError(f"Beacon signature is not valid base64: {signature!r}")
    if not 0 < prefix_length <= len(raw):
        raise ConfigError(
            f"Beacon prefix_length must be between 1 and {len(raw)}, got {prefix_length}"
        )
