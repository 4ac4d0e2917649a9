"""
Sensor transport module.

Provides the transport boundary and its Bluetooth implementation.
"""
from .base import Advertisement, Transport
from .ble import BleTransport

__all__ = [
    "Advertisement",
    "Transport",
    "BleTransport",
]
