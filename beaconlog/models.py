"""Data models for beaconlog."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

Cell = Union[int, str]

# Nine-tag site table, in column order
DEFAULT_DEVICE_IDS = (
    "00:A0:50:12:24:2E",
    "00:A0:50:07:1A:2E",
    "00:A0:50:18:0F:1F",
    "00:A0:50:03:1F:33",
    "00:A0:50:07:2B:2C",
    "00:A0:50:06:11:17",
    "00:A0:50:13:17:2B",
    "00:A0:50:08:28:1F",
    "00:A0:50:12:1F:27",
)

# iBeacon manufacturer data of the deployed tags (base64, company id first)
DEFAULT_BEACON_SIGNATURE = "TAACFQAFAAEAABAAgAAAgF+bATEABmd4ww=="
# Number of leading bytes that must match the signature
DEFAULT_SIGNATURE_PREFIX_LENGTH = 12

DEFAULT_WINDOW_MS = 2000
DEFAULT_FILE_NAME = "data.csv"
DEFAULT_OUTPUT_DIR = Path.home() / "Download"

TIMESTAMP_COLUMN = "timestamp"
LABEL_COLUMN = "label"


class ConfigError(ValueError):
    """Raised when configuration values are inconsistent."""


class RowFrozenError(RuntimeError):
    """Raised when a finished ScanRow is modified."""


class KnownDeviceRegistry:
    """Immutable mapping from device identifier to device column index."""

    def __init__(self, columns: Mapping[str, int]) -> None:
        normalized: dict[str, int] = {}
        for device_id, index in columns.items():
            key = device_id.upper()
            if key in normalized:
                raise ConfigError(f"Duplicate device identifier: {key}")
            normalized[key] = int(index)

        if sorted(normalized.values()) != list(range(len(normalized))):
            raise ConfigError(
                f"Device column indices must be 0..{len(normalized) - 1} without gaps"
            )

        self._columns = normalized
        self._ids = tuple(sorted(normalized, key=normalized.__getitem__))

    @classmethod
    def from_ids(cls, device_ids: Iterable[str]) -> KnownDeviceRegistry:
        """Build a registry whose column order follows the given identifiers."""
        return cls({device_id: index for index, device_id in enumerate(device_ids)})

    @property
    def ids(self) -> tuple[str, ...]:
        """Device identifiers in column order."""
        return self._ids

    def column_for(self, device_id: str) -> Optional[int]:
        """Return the device column index, or None for unknown devices."""
        return self._columns.get(device_id.upper())

    def __contains__(self, device_id: object) -> bool:
        return isinstance(device_id, str) and device_id.upper() in self._columns

    def __len__(self) -> int:
        return len(self._columns)

    def header(self) -> list[str]:
        """CSV header cells: timestamp, device ids, label."""
        return [TIMESTAMP_COLUMN, *self._ids, LABEL_COLUMN]


class ScanRow:
    """Fixed-width row: timestamp cell, one RSSI cell per device, label cell."""

    def __init__(self, registry: KnownDeviceRegistry) -> None:
        self._registry = registry
        self._cells: list[Cell] = [0] * (len(registry) + 2)
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def cells(self) -> tuple[Cell, ...]:
        return tuple(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RowFrozenError("ScanRow is finished and can no longer change")

    def set_rssi(self, device_id: str, rssi: int) -> bool:
        """Store the RSSI for a known device. Returns False for unknown ids."""
        self._check_mutable()
        column = self._registry.column_for(device_id)
        if column is None:
            return False
        self._cells[column + 1] = rssi
        return True

    def rssi_for(self, device_id: str) -> Optional[Cell]:
        column = self._registry.column_for(device_id)
        if column is None:
            return None
        return self._cells[column + 1]

    def finish(self, timestamp_ms: int, label: str) -> ScanRow:
        """Stamp timestamp and label cells, then freeze the row."""
        self._check_mutable()
        self._cells[0] = timestamp_ms
        self._cells[-1] = label
        self._frozen = True
        return self

    def render(self) -> str:
        """Render as a single comma-delimited line (CSV quoting for labels)."""
        buffer = io.StringIO()
        csv.writer(buffer, lineterminator="").writerow(self._cells)
        return buffer.getvalue()

    def __repr__(self) -> str:
        return f"ScanRow({self.render()!r})"


@dataclass(frozen=True)
class Advertisement:
    """A single advertisement event delivered by the radio.

    ``manufacturer_data`` holds the raw manufacturer-specific AD payload:
    company identifier (little-endian) followed by the vendor bytes.
    """

    device_id: str
    rssi: int
    manufacturer_data: bytes = b""
    local_name: Optional[str] = None


@dataclass(frozen=True)
class BeaconFrame:
    """Decoded iBeacon fields."""

    proximity_uuid: str
    major: int
    minor: int
    tx_power: int


@dataclass
class AppConfig:
    """Application configuration."""

    registry: KnownDeviceRegistry = field(
        default_factory=lambda: KnownDeviceRegistry.from_ids(DEFAULT_DEVICE_IDS)
    )
    window_ms: int = DEFAULT_WINDOW_MS
    label: str = ""
    file_name: str = DEFAULT_FILE_NAME
    output_dir: Path = DEFAULT_OUTPUT_DIR
    beacon_signature: str = DEFAULT_BEACON_SIGNATURE
    signature_prefix_length: int = DEFAULT_SIGNATURE_PREFIX_LENGTH
    stop_when_complete: bool = False
    radio_poll_interval: float = 2.0
    log_capacity: int = 500
    language: str = "fi"
