"""
Sensor reading model and payload decoding.

Decodes the fixed-layout sensor-values characteristic exposed by
Airthings Wave devices and extracts device serials from advertisement
manufacturer data.
"""
import struct
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from ..config import AIRTHINGS_MANUFACTURER_ID
from ..exceptions import DecodeError

# <B version> <B humidity> <2x reserved> <H radon_st> <H radon_lt>
# <H temperature> <H pressure> <H co2> <H voc>
_SENSOR_VALUES = struct.Struct("<BB2xHHHHHH")

PAYLOAD_SIZE = _SENSOR_VALUES.size


@dataclass(frozen=True, eq=False)
class SensorReading:
    """One decoded set of sensor values."""
    humidity: float          # %RH
    temperature: float       # degrees C
    pressure: float          # mbar
    radon_short_term: int    # Bq/m3
    radon_long_term: int     # Bq/m3
    co2: int                 # ppm
    voc: int                 # ppb

    def __eq__(self, other: object) -> bool:
        # Field-wise with IEEE semantics: a NaN float never compares equal,
        # including to itself, so such readings always count as changed.
        if not isinstance(other, SensorReading):
            return NotImplemented
        return all(
            getattr(self, f.name) == getattr(other, f.name)
            for f in fields(self)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and metric export."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def decode_reading(data: bytes) -> SensorReading:
    """
    Decode a sensor-values payload.

    Args:
        data: Raw characteristic value, at least 16 bytes. Trailing
            bytes are ignored.

    Returns:
        Decoded SensorReading.

    Raises:
        DecodeError: If the payload is shorter than 16 bytes.
    """
    if data is None or len(data) < PAYLOAD_SIZE:
        length = None if data is None else len(data)
        raise DecodeError(
            f"Sensor payload too short: {length} bytes, expected {PAYLOAD_SIZE}",
            payload_length=length,
        )

    (
        _version,
        humidity_raw,
        radon_short_term,
        radon_long_term,
        temperature_raw,
        pressure_raw,
        co2,
        voc,
    ) = _SENSOR_VALUES.unpack_from(bytes(data))

    return SensorReading(
        humidity=humidity_raw / 2.0,
        temperature=temperature_raw / 100.0,
        pressure=pressure_raw / 50.0,
        radon_short_term=radon_short_term,
        radon_long_term=radon_long_term,
        co2=co2,
        voc=voc,
    )


def parse_serial(
    manufacturer_data: Mapping[int, bytes],
    manufacturer_id: int = AIRTHINGS_MANUFACTURER_ID,
) -> Optional[int]:
    """
    Extract the device serial from advertisement manufacturer data.

    The serial is the little-endian u32 in the first four bytes of the
    manufacturer-specific data block.

    Returns:
        The serial, or None if the device is not an Airthings sensor.
    """
    data = manufacturer_data.get(manufacturer_id)
    if data is None or len(data) < 4:
        return None
    return struct.unpack_from("<I", bytes(data))[0]
