"""
Test data factories.
"""
from .reading_factory import SensorReadingFactory, encode_payload, manufacturer_data

__all__ = [
    "SensorReadingFactory",
    "encode_payload",
    "manufacturer_data",
]
