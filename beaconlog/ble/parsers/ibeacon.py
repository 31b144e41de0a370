"""iBeacon advertisement parser with signature prefix matching."""

import base64
import logging
import struct
import uuid
from typing import Mapping, Optional

from ...models import (
    DEFAULT_BEACON_SIGNATURE,
    DEFAULT_SIGNATURE_PREFIX_LENGTH,
    Advertisement,
    BeaconFrame,
)
from .base import BaseParser

logger = logging.getLogger(__name__)

# Apple company identifier, little-endian in the AD payload
APPLE_COMPANY_ID = 0x004C
# iBeacon type and remaining length
IBEACON_TYPE = 0x02
IBEACON_LENGTH = 0x15
IBEACON_FRAME_SIZE = 25


def encode_manufacturer_data(manufacturer_data: Mapping[int, bytes]) -> bytes:
    """Flatten a company-id keyed mapping into raw manufacturer data.

    Uses the first entry; beacons carry a single manufacturer record.
    """
    for company_id, data in manufacturer_data.items():
        return int(company_id).to_bytes(2, "little") + bytes(data)
    return b""


class IBeaconParser(BaseParser):
    """Matches advertisements against a known beacon signature.

    The signature is the full manufacturer data of a reference tag,
    base64 encoded. Only the first ``prefix_length`` bytes are compared,
    which covers company id, iBeacon type and the leading UUID bytes.
    """

    def __init__(
        self,
        signature: str = DEFAULT_BEACON_SIGNATURE,
        prefix_length: int = DEFAULT_SIGNATURE_PREFIX_LENGTH,
    ) -> None:
        self._prefix = base64.b64decode(signature)[:prefix_length]

    @property
    def prefix(self) -> bytes:
        return self._prefix

    def can_parse(self, advertisement: Advertisement) -> bool:
        """Check if the manufacturer data starts with the beacon signature."""
        data = advertisement.manufacturer_data
        if not data:
            return False
        return data[: len(self._prefix)] == self._prefix

    def parse(self, advertisement: Advertisement) -> Optional[BeaconFrame]:
        """
        Decode an iBeacon frame.

        Format:
        - Bytes 0-1: Company id (0x004C, little-endian)
        - Byte 2: Type (0x02)
        - Byte 3: Length (0x15)
        - Bytes 4-19: Proximity UUID
        - Bytes 20-21: Major (big-endian)
        - Bytes 22-23: Minor (big-endian)
        - Byte 24: Measured TX power at 1 m (signed)
        """
        if not self.can_parse(advertisement):
            return None

        data = advertisement.manufacturer_data
        if len(data) < IBEACON_FRAME_SIZE:
            logger.debug("iBeacon data too short: %d bytes", len(data))
            return None

        company_id = struct.unpack("<H", data[0:2])[0]
        if company_id != APPLE_COMPANY_ID or data[2] != IBEACON_TYPE or data[3] != IBEACON_LENGTH:
            return None

        major, minor, tx_power = struct.unpack(">HHb", data[20:25])
        return BeaconFrame(
            proximity_uuid=str(uuid.UUID(bytes=bytes(data[4:20]))),
            major=major,
            minor=minor,
            tx_power=tx_power,
        )
