"""
wavething - Prometheus exporter for Airthings Wave sensors.

Polls sensors over Bluetooth Low Energy, timing each read to just after
the sensor refreshes its reading.
"""
from .config import ExporterSettings, get_settings
from .main import ExporterService

__all__ = [
    "ExporterSettings",
    "get_settings",
    "ExporterService",
]
