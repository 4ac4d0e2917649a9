"""
Metrics sink for sensor readings.

Defines the sink boundary used by sensor controllers and a Prometheus
implementation that keeps one labeled gauge per reading field.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence

from prometheus_client import CollectorRegistry, Gauge, start_http_server

logger = logging.getLogger(__name__)


# Reading field -> (metric name, help text)
SENSOR_METRICS: Dict[str, tuple] = {
    "humidity": ("humidity", "in rel%"),
    "temperature": ("temperature", "air temperature, in C"),
    "pressure": ("atm_pressure", "atmospheric pressure, in mbar"),
    "radon_short_term": ("radon_short", "in Bq/m3"),
    "radon_long_term": ("radon_long", "in Bq/m3"),
    "voc": ("voc", "in ppb"),
    "co2": ("co2", "in ppm"),
}


class MetricsSink(ABC):
    """
    Labeled time-series store.

    The label schema is fixed when the sink is created. Label values are
    passed positionally in schema order.
    """

    @property
    @abstractmethod
    def label_names(self) -> Sequence[str]:
        """Ordered label names shared by every metric."""

    @abstractmethod
    def set(self, metric: str, label_values: Sequence[str], value: float) -> None:
        """Set the current value of one series."""

    @abstractmethod
    def remove(self, metric: str, label_values: Sequence[str]) -> None:
        """Remove one series. Removing a missing series is a no-op."""


class PrometheusMetricsSink(MetricsSink):
    """
    MetricsSink backed by prometheus_client gauges.

    Gauges are registered on a dedicated CollectorRegistry so the
    exposition endpoint only carries sensor series.
    """

    def __init__(
        self,
        label_names: Sequence[str],
        namespace: str = "",
        registry: Optional[CollectorRegistry] = None,
    ):
        """
        Initialize the sink and register its gauges.

        Args:
            label_names: Ordered label names, device serial first.
            namespace: Optional prefix for every metric name.
            registry: Registry to use. A new one is created if not provided.
        """
        self._label_names = tuple(label_names)
        self.registry = registry or CollectorRegistry()

        self._gauges: Dict[str, Gauge] = {}
        for metric, documentation in SENSOR_METRICS.values():
            self._gauges[metric] = Gauge(
                metric,
                documentation,
                labelnames=self._label_names,
                namespace=namespace,
                registry=self.registry,
            )

        logger.debug(
            f"Registered {len(self._gauges)} gauges with labels {self._label_names}"
        )

    @property
    def label_names(self) -> Sequence[str]:
        return self._label_names

    @property
    def metric_names(self) -> Sequence[str]:
        return tuple(self._gauges)

    def _gauge(self, metric: str) -> Gauge:
        gauge = self._gauges.get(metric)
        if gauge is None:
            raise KeyError(f"Unknown metric: {metric}")
        return gauge

    def set(self, metric: str, label_values: Sequence[str], value: float) -> None:
        self._gauge(metric).labels(*label_values).set(value)

    def remove(self, metric: str, label_values: Sequence[str]) -> None:
        gauge = self._gauge(metric)
        try:
            gauge.remove(*label_values)
        except KeyError:
            # series was never set or is already gone
            pass

    def serve(self, host: str, port: int) -> None:
        """
        Start the HTTP exposition endpoint in a daemon thread.

        Args:
            host: Bind address.
            port: Bind port.
        """
        start_http_server(port, addr=host, registry=self.registry)
        logger.info(f"Serving metrics on http://{host}:{port}/metrics")
