"""beaconlog: record iBeacon RSSI snapshots to CSV."""

__version__ = "0.1.0"
