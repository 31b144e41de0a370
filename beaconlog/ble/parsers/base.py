"""Base parser class for BLE advertisements."""

from abc import ABC, abstractmethod
from typing import Optional

from ...models import Advertisement, BeaconFrame


class BaseParser(ABC):
    """Abstract base class for BLE advertisement parsers."""

    @abstractmethod
    def parse(self, advertisement: Advertisement) -> Optional[BeaconFrame]:
        """
        Decode the advertisement payload.

        Args:
            advertisement: Advertisement event from the radio

        Returns:
            BeaconFrame if successfully parsed, None otherwise
        """
        pass

    @abstractmethod
    def can_parse(self, advertisement: Advertisement) -> bool:
        """
        Check if this parser can handle the given advertisement.

        Args:
            advertisement: Advertisement event from the radio

        Returns:
            True if this parser can handle the data
        """
        pass
