"""
Per-sensor controller.

Tracks the last reading of one sensor, feeds change detection into its
query predictor, and publishes or retracts the sensor's metric series.
"""
import logging
from typing import Any, Dict, Optional, Sequence, Tuple

from ..metrics.sink import SENSOR_METRICS, MetricsSink
from ..polling.predictor import QueryPredictor
from ..sensors.reading import SensorReading

logger = logging.getLogger(__name__)


class SensorController:
    """
    Owns the polling state of one physical sensor.

    Not safe for concurrent use: the poll loop is the only caller.
    """

    def __init__(
        self,
        sink: MetricsSink,
        label_values: Sequence[str],
        period: float,
        created_at: float,
        stale_after: Optional[float] = None,
    ):
        """
        Initialize the controller.

        Args:
            sink: Metrics sink shared by all controllers.
            label_values: Ordered label values identifying this sensor.
            period: Nominal sensor refresh period in seconds.
            created_at: Monotonic creation time; staleness is measured from
                here until the first successful read.
            stale_after: Seconds without a successful read before metrics
                are retracted. Defaults to two periods.
        """
        self.sink = sink
        self.period = period
        self.stale_after = period * 2 if stale_after is None else stale_after
        self._label_values: Tuple[str, ...] = tuple(label_values)
        self._predictor = QueryPredictor(period)

        self._last_reading: Optional[SensorReading] = None
        self._last_update_time = created_at
        self._published = False

    @property
    def label_values(self) -> Tuple[str, ...]:
        return self._label_values

    @property
    def predictor(self) -> QueryPredictor:
        return self._predictor

    @property
    def last_reading(self) -> Optional[SensorReading]:
        return self._last_reading

    @property
    def last_update_time(self) -> float:
        """Monotonic time of the last successful update."""
        return self._last_update_time

    @property
    def is_published(self) -> bool:
        """Whether this sensor currently has metric series in the sink."""
        return self._published

    def should_query(self, now: float) -> bool:
        return self._predictor.should_poll(now)

    def update(self, now: float, reading: SensorReading) -> bool:
        """
        Record a successful reading.

        Args:
            now: Monotonic time the reading was taken.
            reading: Decoded reading.

        Returns:
            True if the reading differs from the previous one.
        """
        changed = self._last_reading is None or reading != self._last_reading

        self._last_reading = reading
        self._last_update_time = now
        self._predictor.update(now, changed)

        logger.info(f"device {list(self._label_values)}, {reading}")

        values = reading.to_dict()
        for field_name, (metric, _) in SENSOR_METRICS.items():
            self.sink.set(metric, self._label_values, values[field_name])
        self._published = True

        return changed

    def is_stale(self, now: float) -> bool:
        return now - self._last_update_time > self.stale_after

    def expire_if_stale(self, now: float) -> bool:
        """
        Retract this sensor's metrics if it has not been read recently.

        Predictor state and the last reading are kept, so a later successful
        read resumes without re-learning the refresh phase.

        Args:
            now: Current monotonic time.

        Returns:
            True if the sensor is stale.
        """
        if not self.is_stale(now):
            return False

        if self._published:
            logger.warning(
                f"peripheral {list(self._label_values)} has stale values, "
                f"removing from metrics"
            )
            self.retract()

        return True

    def retract(self) -> None:
        """Remove every metric series of this sensor from the sink."""
        for metric, _ in SENSOR_METRICS.values():
            self.sink.remove(metric, self._label_values)
        self._published = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for diagnostics."""
        return {
            "label_values": list(self._label_values),
            "last_reading": (
                self._last_reading.to_dict() if self._last_reading else None
            ),
            "last_update_time": self._last_update_time,
            "interval": self._predictor.interval,
            "published": self._published,
        }

    def __repr__(self) -> str:
        return (
            f"SensorController("
            f"labels={self._label_values}, "
            f"interval={self._predictor.interval})"
        )
