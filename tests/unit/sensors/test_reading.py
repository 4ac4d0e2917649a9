"""
Unit tests for sensor payload decoding and reading equality.
"""
import math

import pytest

from wavething.exceptions import DecodeError
from wavething.sensors.reading import (
    PAYLOAD_SIZE,
    SensorReading,
    decode_reading,
    parse_serial,
)

from tests.factories import SensorReadingFactory


SAMPLE_PAYLOAD = bytes.fromhex("FF6400000500 0A005A0A90018002 3200".replace(" ", ""))


class TestDecodeReading:
    """Test decoding of the sensor-values characteristic."""

    def test_payload_size(self):
        assert PAYLOAD_SIZE == 16

    def test_decodes_known_payload(self):
        """Test every field of a captured payload."""
        reading = decode_reading(SAMPLE_PAYLOAD)

        assert reading.humidity == 50.0
        assert reading.radon_short_term == 5
        assert reading.radon_long_term == 10
        assert reading.temperature == pytest.approx(26.50)
        assert reading.pressure == pytest.approx(8.0)
        assert reading.co2 == 640
        assert reading.voc == 50

    def test_ignores_trailing_bytes(self):
        reading = decode_reading(SAMPLE_PAYLOAD + b"\x01\x02\x03\x04")
        assert reading == decode_reading(SAMPLE_PAYLOAD)

    def test_accepts_bytearray(self):
        assert decode_reading(bytearray(SAMPLE_PAYLOAD)).co2 == 640

    def test_reserved_bytes_do_not_matter(self):
        payload = bytearray(SAMPLE_PAYLOAD)
        payload[0] = 0x01
        payload[2] = 0xAB
        payload[3] = 0xCD
        assert decode_reading(bytes(payload)) == decode_reading(SAMPLE_PAYLOAD)

    def test_max_raw_values(self):
        reading = decode_reading(bytes([0x00, 0xFF, 0x00, 0x00]) + b"\xff\xff" * 6)

        assert reading.humidity == 127.5
        assert reading.radon_short_term == 65535
        assert reading.temperature == pytest.approx(655.35)
        assert reading.pressure == pytest.approx(1310.7)

    @pytest.mark.parametrize("length", [0, 1, 8, 15])
    def test_short_payload_raises(self, length):
        with pytest.raises(DecodeError) as exc_info:
            decode_reading(SAMPLE_PAYLOAD[:length])

        assert exc_info.value.payload_length == length
        assert exc_info.value.code == "DECODE_ERROR"

    def test_none_payload_raises(self):
        with pytest.raises(DecodeError):
            decode_reading(None)


class TestParseSerial:
    """Test serial extraction from manufacturer data."""

    def test_little_endian_serial(self):
        data = {820: bytes([0x39, 0x30, 0xA8, 0xAE, 0x09, 0x00])}
        assert parse_serial(data) == 0xAEA83039

    def test_missing_manufacturer(self):
        assert parse_serial({76: b"\x01\x02\x03\x04"}) is None

    def test_short_manufacturer_data(self):
        assert parse_serial({820: b"\x01\x02\x03"}) is None

    def test_custom_manufacturer_id(self):
        assert parse_serial({999: b"\x01\x00\x00\x00"}, manufacturer_id=999) == 1


class TestReadingEquality:
    """Test change detection semantics."""

    def test_identical_readings_equal(self):
        a = SensorReadingFactory(radon_short_term=10)
        b = SensorReadingFactory(radon_short_term=10)
        assert a == b
        assert not (a != b)

    @pytest.mark.parametrize(
        "field",
        ["radon_short_term", "radon_long_term", "co2", "voc"],
    )
    def test_differing_integer_field(self, field):
        a = SensorReadingFactory(radon_short_term=10)
        b = SensorReadingFactory(radon_short_term=10, **{field: getattr(a, field) + 1})
        assert a != b

    @pytest.mark.parametrize("field", ["humidity", "temperature", "pressure"])
    def test_differing_float_field(self, field):
        a = SensorReadingFactory(radon_short_term=10)
        b = SensorReadingFactory(radon_short_term=10, **{field: getattr(a, field) + 0.5})
        assert a != b

    def test_nan_never_equal(self):
        """A NaN-valued reading is never considered unchanged."""
        a = SensorReadingFactory(radon_short_term=10, humidity=math.nan)
        b = SensorReadingFactory(radon_short_term=10, humidity=math.nan)

        assert a != b
        assert a != a

    def test_not_equal_to_other_types(self):
        reading = SensorReadingFactory()
        assert reading != reading.to_dict()

    def test_is_immutable(self):
        reading = SensorReadingFactory()
        with pytest.raises(AttributeError):
            reading.co2 = 1

    def test_to_dict(self):
        reading = SensorReading(
            humidity=50.0,
            temperature=26.5,
            pressure=8.0,
            radon_short_term=5,
            radon_long_term=10,
            co2=640,
            voc=50,
        )
        assert reading.to_dict() == {
            "humidity": 50.0,
            "temperature": 26.5,
            "pressure": 8.0,
            "radon_short_term": 5,
            "radon_long_term": 10,
            "co2": 640,
            "voc": 50,
        }
