"""
Shared pytest fixtures for exporter tests.

Provides fixtures for:
- Settings with fast, deterministic defaults
- Prometheus sink on an isolated registry
- Label configuration
- Simulated sensors, transport and clock
"""
from unittest.mock import MagicMock

import pytest
from prometheus_client import CollectorRegistry

from wavething.config import ExporterSettings, PollingSettings
from wavething.labels.loader import LabelConfig
from wavething.metrics.sink import MetricsSink, PrometheusMetricsSink

from tests.simulators.sensor_simulator import FakeClock, SimulatedSensor, SimulatedTransport


# ============================================================================
# Settings Fixtures
# ============================================================================

@pytest.fixture
def settings(tmp_path) -> ExporterSettings:
    """Exporter settings isolated from the environment."""
    return ExporterSettings(
        labels_file=tmp_path / "devices.yaml",
        polling=PollingSettings(
            tick_interval=0.01,
            sensor_period=300.0,
            shutdown_grace=0.5,
        ),
    )


# ============================================================================
# Metrics Fixtures
# ============================================================================

@pytest.fixture
def label_config() -> LabelConfig:
    """Two configured devices sharing the room/floor schema."""
    return LabelConfig(
        label_names=("serial", "floor", "room"),
        devices={
            "2930012345": {"room": "bedroom", "floor": "1"},
            "2930054321": {"room": "basement"},
        },
    )


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def prometheus_sink(label_config, collector_registry) -> PrometheusMetricsSink:
    """Prometheus sink on a private registry."""
    return PrometheusMetricsSink(label_config.label_names, registry=collector_registry)


@pytest.fixture
def mock_sink():
    """Mock metrics sink for controller unit tests."""
    sink = MagicMock(spec=MetricsSink)
    sink.label_names = ("serial",)
    return sink


# ============================================================================
# Simulator Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(start=1000.0)


@pytest.fixture
def transport(clock) -> SimulatedTransport:
    return SimulatedTransport(clock)


@pytest.fixture
def bedroom_sensor(transport) -> SimulatedSensor:
    """Configured sensor refreshing 120s after the test clock starts."""
    return transport.add_sensor(
        SimulatedSensor(serial=2930012345, period=300.0, phase=1120.0)
    )


@pytest.fixture
def basement_sensor(transport) -> SimulatedSensor:
    """Configured sensor refreshing 37s after the test clock starts."""
    return transport.add_sensor(
        SimulatedSensor(serial=2930054321, period=300.0, phase=1037.0)
    )
