"""
Sensor payload module.

Decodes sensor readings and device serials.
"""
from .reading import PAYLOAD_SIZE, SensorReading, decode_reading, parse_serial

__all__ = [
    "PAYLOAD_SIZE",
    "SensorReading",
    "decode_reading",
    "parse_serial",
]
