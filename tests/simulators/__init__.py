"""
Sensor simulators for testing.

Provides virtual sensors and an in-memory transport so the poll loop can
be exercised without Bluetooth hardware.
"""
from .sensor_simulator import FakeClock, SimulatedSensor, SimulatedTransport

__all__ = [
    "FakeClock",
    "SimulatedSensor",
    "SimulatedTransport",
]
