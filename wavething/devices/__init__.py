"""
Device management module.

Provides per-sensor controllers and the registry that owns them.
"""
from .controller import SensorController
from .registry import DeviceRegistry

__all__ = [
    "SensorController",
    "DeviceRegistry",
]
