"""
Device registry.

Maps device serials to their sensor controllers. Controllers are created
on first sighting and kept for the lifetime of the process unless idle
pruning is enabled.
"""
import logging
from typing import Dict, List, Optional

from ..labels.loader import LabelConfig
from ..metrics.sink import MetricsSink
from .controller import SensorController

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """
    Tracks one SensorController per device serial.

    Only the poll loop mutates the registry.
    """

    def __init__(
        self,
        sink: MetricsSink,
        labels: LabelConfig,
        period: float,
        stale_after: Optional[float] = None,
    ):
        """
        Initialize the registry.

        Args:
            sink: Metrics sink handed to every controller.
            labels: Label configuration used to label new devices.
            period: Nominal sensor refresh period in seconds.
            stale_after: Staleness bound handed to every controller.
        """
        self.sink = sink
        self.labels = labels
        self.period = period
        self.stale_after = stale_after

        self._controllers: Dict[int, SensorController] = {}

    def lookup_or_create(self, serial: int, now: float) -> SensorController:
        """
        Get the controller for a device, creating it on first sighting.

        Args:
            serial: Device serial.
            now: Current monotonic time.

        Returns:
            The device's controller.
        """
        controller = self._controllers.get(serial)
        if controller is not None:
            return controller

        label_values = self.labels.resolve(serial)
        controller = SensorController(
            sink=self.sink,
            label_values=label_values,
            period=self.period,
            created_at=now,
            stale_after=self.stale_after,
        )
        self._controllers[serial] = controller

        if serial in self.labels:
            logger.info(f"Registered device {serial} with labels {list(label_values)}")
        else:
            logger.info(f"Registered unconfigured device {serial}")

        return controller

    def get(self, serial: int) -> Optional[SensorController]:
        return self._controllers.get(serial)

    def controllers(self) -> List[SensorController]:
        return list(self._controllers.values())

    def expire_stale(self, now: float) -> int:
        """
        Run the staleness check on every registered device.

        Args:
            now: Current monotonic time.

        Returns:
            Number of stale devices.
        """
        return sum(
            1 for controller in self._controllers.values()
            if controller.expire_if_stale(now)
        )

    def prune(self, now: float, max_idle: float) -> List[int]:
        """
        Forget devices without a successful read for ``max_idle`` seconds.

        Their metrics are removed first. A pruned device that shows up again
        starts over with a fresh predictor.

        Returns:
            Serials of the pruned devices.
        """
        pruned = [
            serial
            for serial, controller in self._controllers.items()
            if now - controller.last_update_time > max_idle
        ]

        for serial in pruned:
            controller = self._controllers.pop(serial)
            if controller.is_published:
                controller.retract()
            logger.info(f"Pruned idle device {serial}")

        return pruned

    def __contains__(self, serial: object) -> bool:
        return serial in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)
