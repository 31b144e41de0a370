"""CSV persistence for finished scan rows."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

from .models import KnownDeviceRegistry, ScanRow

logger = logging.getLogger(__name__)


class RowPersister:
    """Appends finished rows to CSV files in an output directory.

    Any failure to read the existing file is treated as "file does not
    exist yet", so a fresh header is written. That can discard prior rows
    when the read error was transient; it is logged at warning level.
    Write failures propagate to the caller.
    """

    def __init__(self, registry: KnownDeviceRegistry, output_dir: Path) -> None:
        self._registry = registry
        self._output_dir = output_dir

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, file_name: str) -> Path:
        return self._output_dir / file_name

    def header_line(self) -> str:
        return ",".join(self._registry.header())

    def append(self, row: ScanRow, file_name: str) -> Path:
        """Append a row to the named file, writing a header for new files."""
        path = self.path_for(file_name)

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            if path.exists():
                logger.warning("Could not read %s, rewriting with header: %s", path, e)
            else:
                logger.debug("Creating %s", path)
            content = f"{self.header_line()}\n{row.render()}"
        else:
            content = f"{content}\n{row.render()}"

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.debug("Appended row to %s", path)
        return path

    def read_rows(self, file_name: str) -> tuple[list[str], list[list[str]]]:
        """Return (header, data rows) of a persisted file."""
        text = self.path_for(file_name).read_text(encoding="utf-8")
        rows = [row for row in csv.reader(io.StringIO(text)) if row]
        if not rows:
            return [], []
        return rows[0], rows[1:]
