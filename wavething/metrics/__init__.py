"""
Metrics module.

Provides the metrics sink boundary and its Prometheus implementation.
"""
from .sink import SENSOR_METRICS, MetricsSink, PrometheusMetricsSink

__all__ = [
    "SENSOR_METRICS",
    "MetricsSink",
    "PrometheusMetricsSink",
]
