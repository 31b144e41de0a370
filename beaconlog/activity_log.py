"""In-memory activity log shown to the operator."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 500


class ActivityLog:
    """Bounded list of operator-facing log lines, mirrored to logging."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._lines: deque[str] = deque(maxlen=capacity)

    def add(self, message: str) -> None:
        """Append a line, prefixed with the wall clock time."""
        self._lines.append(f"[{datetime.now().strftime('%H:%M:%S')}] {message}")
        logger.info("%s", message)

    def lines(self) -> list[str]:
        return list(self._lines)

    def clear(self) -> None:
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)
