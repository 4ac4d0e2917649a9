"""
Polling scheduler for sensor telemetry collection.

Runs one fixed-interval loop that discovers sensors, asks each sensor's
controller whether a read is worthwhile, performs the reads through the
transport and sweeps stale metrics.
"""
import asyncio
import logging
import time
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple

from ..config import ExporterSettings, get_settings
from ..exceptions import DecodeError, TransportError
from ..sensors.reading import decode_reading, parse_serial
from ..transport.base import Advertisement, Transport

if TYPE_CHECKING:
    from ..devices.controller import SensorController
    from ..devices.registry import DeviceRegistry

logger = logging.getLogger(__name__)


@dataclass
class PollStats:
    """Outcome of one poll tick."""
    discovered: int = 0
    skipped: int = 0
    queried: int = 0
    updated: int = 0
    changed: int = 0
    empty: int = 0
    failed: int = 0
    stale: int = 0
    pruned: int = 0
    duration_ms: float = 0.0


class PollingScheduler:
    """
    Drives discovery, reads and staleness sweeps for all sensors.

    Every controller is touched only from the scheduler's tick, and each
    serial is processed at most once per tick.
    """

    def __init__(
        self,
        transport: Transport,
        registry: "DeviceRegistry",
        settings: Optional[ExporterSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the polling scheduler.

        Args:
            transport: Sensor transport.
            registry: Device registry.
            settings: Exporter settings.
            clock: Monotonic time source in seconds.
        """
        self.transport = transport
        self.registry = registry
        self.settings = settings or get_settings()
        self._clock = clock

        self._read_semaphore = asyncio.Semaphore(
            self.settings.polling.max_concurrent_reads
        )

        # State
        self._running = False
        self._shutdown_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._ticks = 0
        self._last_stats: Optional[PollStats] = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the polling loop."""
        if self._running:
            logger.warning("Polling scheduler already running")
            return

        logger.info(
            f"Starting polling scheduler "
            f"(tick={self.settings.polling.tick_interval}s, "
            f"sensor period={self.settings.polling.sensor_period}s)"
        )
        self._running = True
        self._shutdown_event.clear()
        self._task = asyncio.create_task(self._poll_loop(), name="sensor_poll_loop")

    async def stop(self) -> None:
        """
        Stop the polling loop.

        An in-flight tick gets ``shutdown_grace`` seconds to notice the
        cancellation; after that it is abandoned.
        """
        if not self._running:
            return

        logger.info("Stopping polling scheduler")
        self._running = False
        self._shutdown_event.set()

        task, self._task = self._task, None
        if task and not task.done():
            task.cancel()
            _, pending = await asyncio.wait(
                {task}, timeout=self.settings.polling.shutdown_grace
            )
            if pending:
                logger.warning("Abandoning in-flight poll tick")

        logger.info("Polling scheduler stopped")

    async def _poll_loop(self) -> None:
        """Fixed-interval polling loop."""
        interval = self.settings.polling.tick_interval

        while self._running:
            started = self._clock()

            try:
                stats = await self.poll_once()
                logger.debug(f"Poll tick: {stats}")
            except asyncio.CancelledError:
                logger.debug("Poll loop cancelled")
                break
            except Exception as e:
                logger.error(f"Unexpected error in poll loop: {e}", exc_info=True)

            delay = max(0.0, interval - (self._clock() - started))
            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=delay)
                # Shutdown event was set
                break
            except asyncio.TimeoutError:
                pass
            except asyncio.CancelledError:
                break

        logger.debug("Poll loop ended")

    async def poll_once(self, now: Optional[float] = None) -> PollStats:
        """
        Run one poll tick.

        Args:
            now: Fixed time to use for every decision in this tick. Defaults
                to reading the clock, in which case each update is stamped
                with the time its read completed.

        Returns:
            Statistics for the tick.
        """
        started = time.monotonic()
        tick_time = self._clock() if now is None else now
        stats = PollStats()

        try:
            due = await self._collect_due_devices(tick_time, stats)

            if due:
                stats.queried = len(due)
                results = await asyncio.gather(
                    *(
                        self._poll_device(serial, device, controller, stats, now)
                        for serial, device, controller in due
                    ),
                    return_exceptions=True,
                )
                for (serial, _, _), result in zip(due, results):
                    if isinstance(result, Exception):
                        stats.failed += 1
                        logger.error(
                            f"Unexpected error polling device {serial}: {result}",
                            exc_info=result,
                        )
        finally:
            # runs even when discovery or a read blows up
            self._sweep(now, stats)

        stats.duration_ms = (time.monotonic() - started) * 1000
        self._ticks += 1
        self._last_stats = stats
        return stats

    def _sweep(self, now: Optional[float], stats: PollStats) -> None:
        """Retract stale devices and prune idle ones."""
        sweep_time = self._clock() if now is None else now
        stats.stale = self.registry.expire_stale(sweep_time)

        prune_after = self.settings.polling.prune_after
        if prune_after:
            stats.pruned = len(self.registry.prune(sweep_time, prune_after))

    async def _collect_due_devices(
        self,
        now: float,
        stats: PollStats,
    ) -> List[Tuple[int, Advertisement, "SensorController"]]:
        """
        Discover devices and select the ones due for a read.

        A discovery failure only skips this tick's reads; the staleness
        sweep still runs.

        Returns:
            List of (serial, advertisement, controller) to read this tick.
        """
        try:
            devices = await self.transport.discover()
        except TransportError as e:
            logger.warning(f"Could not get peripherals: {e}")
            return []
        except Exception as e:
            logger.error(f"Unexpected error discovering peripherals: {e}", exc_info=True)
            return []

        if not devices:
            logger.debug("No peripheral devices found, skipping")
            return []

        manufacturer_id = self.settings.bluetooth.manufacturer_id
        due: List[Tuple[int, Advertisement, "SensorController"]] = []
        seen = set()

        for device in devices:
            serial = parse_serial(device.manufacturer_data, manufacturer_id)
            if serial is None or serial in seen:
                continue
            seen.add(serial)
            stats.discovered += 1

            controller = self.registry.lookup_or_create(serial, now)
            if not controller.should_query(now):
                stats.skipped += 1
                continue

            due.append((serial, device, controller))

        return due

    async def _poll_device(
        self,
        serial: int,
        device: Advertisement,
        controller: "SensorController",
        stats: PollStats,
        now: Optional[float],
    ) -> None:
        """
        Read, decode and record one device.

        Failures are logged and leave the controller untouched.
        """
        async with self._read_semaphore:
            try:
                data = await self.transport.read(device)
            except TransportError as e:
                stats.failed += 1
                logger.debug(f"Failed to read peripheral {serial}, skipping: {e}")
                return

        if data is None:
            stats.empty += 1
            logger.debug(f"Peripheral {serial} has no data yet")
            return

        try:
            reading = decode_reading(data)
        except DecodeError as e:
            stats.failed += 1
            logger.warning(f"Could not decode payload from {serial}: {e}")
            return

        when = self._clock() if now is None else now
        if controller.update(when, reading):
            stats.changed += 1
        stats.updated += 1

    def get_polling_stats(self) -> Dict[str, Any]:
        """
        Get polling statistics.

        Returns:
            Dictionary of polling stats.
        """
        return {
            "running": self._running,
            "ticks": self._ticks,
            "devices": len(self.registry),
            "last_tick": asdict(self._last_stats) if self._last_stats else None,
        }
