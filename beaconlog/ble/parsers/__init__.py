"""BLE advertisement parsers."""

from .base import BaseParser
from .ibeacon import IBeaconParser

__all__ = ["BaseParser", "IBeaconParser"]
