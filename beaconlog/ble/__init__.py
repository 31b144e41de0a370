"""BLE radio and parsing module."""

from .radio import BleRadio, RadioCapability, RadioStateNotifier

__all__ = ["BleRadio", "RadioCapability", "RadioStateNotifier"]
