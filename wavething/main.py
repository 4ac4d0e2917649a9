"""
wavething - Main Entry Point.

Starts the exporter that:
1. Loads device labels
2. Serves sensor metrics over HTTP
3. Scans for sensors over Bluetooth
4. Polls each sensor when its reading is expected to have changed
"""
import asyncio
import logging
import signal
import sys
from typing import Optional

from pydantic import ValidationError

from .config import ExporterSettings, get_settings
from .devices.registry import DeviceRegistry
from .exceptions import ConfigError, TransportError
from .labels.loader import load_label_config
from .metrics.sink import PrometheusMetricsSink
from .polling.scheduler import PollingScheduler
from .transport.base import Transport
from .transport.ble import BleTransport

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging to stdout."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


class ExporterService:
    """
    Main exporter orchestrator.

    Wires the label config, metrics sink, transport, registry and
    polling scheduler together and owns their lifecycle.
    """

    def __init__(
        self,
        settings: Optional[ExporterSettings] = None,
        transport: Optional[Transport] = None,
        serve_metrics: bool = True,
    ):
        """
        Initialize the exporter.

        Args:
            settings: Exporter settings.
            transport: Sensor transport. A BleTransport is created if not
                provided.
            serve_metrics: Whether to start the HTTP exposition endpoint.
        """
        self.settings = settings or get_settings()
        self.transport = transport or BleTransport(self.settings.bluetooth)
        self.serve_metrics = serve_metrics

        self.sink: Optional[PrometheusMetricsSink] = None
        self.registry: Optional[DeviceRegistry] = None
        self.scheduler: Optional[PollingScheduler] = None

        self._running = False
        self._shutdown_event = asyncio.Event()

    async def start(self) -> None:
        """
        Start the exporter.

        Raises:
            ConfigError: If the label config cannot be loaded or the metrics
                port cannot be bound.
            TransportError: If no usable Bluetooth adapter is available.
        """
        logger.info(f"Starting {self.settings.app_name}...")

        labels = load_label_config(self.settings.labels_file)

        self.sink = PrometheusMetricsSink(
            labels.label_names,
            namespace=self.settings.metrics.namespace,
        )
        self.registry = DeviceRegistry(
            sink=self.sink,
            labels=labels,
            period=self.settings.polling.sensor_period,
            stale_after=self.settings.stale_after,
        )

        await self.transport.start()
        self._running = True

        if self.serve_metrics:
            host, port = self.settings.metrics.host, self.settings.metrics.port
            try:
                self.sink.serve(host, port)
            except OSError as e:
                raise ConfigError(f"Could not serve metrics on {host}:{port}: {e}") from e

        self.scheduler = PollingScheduler(
            transport=self.transport,
            registry=self.registry,
            settings=self.settings,
        )
        await self.scheduler.start()

        logger.info(f"{self.settings.app_name} started")

    async def stop(self) -> None:
        """Stop the exporter."""
        if not self._running:
            return

        logger.info(f"Stopping {self.settings.app_name}...")
        self._running = False
        self._shutdown_event.set()

        if self.scheduler:
            await self.scheduler.stop()

        await self.transport.stop()

        logger.info(f"{self.settings.app_name} stopped")

    async def serve_forever(self) -> None:
        """Run until shutdown."""
        await self._shutdown_event.wait()

    def request_shutdown(self) -> None:
        self._shutdown_event.set()


def setup_signal_handlers(service: ExporterService, loop: asyncio.AbstractEventLoop):
    """Setup signal handlers for graceful shutdown."""
    def signal_handler():
        logger.info("Received shutdown signal")
        service.request_shutdown()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            signal.signal(sig, lambda s, f: signal_handler())


async def main() -> int:
    """Main entry point."""
    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging("INFO")
        logger.critical(f"Invalid settings: {e}")
        return 1

    configure_logging(settings.log_level)

    service = ExporterService(settings)
    setup_signal_handlers(service, asyncio.get_running_loop())

    try:
        await service.start()
        await service.serve_forever()
    except (ConfigError, TransportError) as e:
        logger.critical(f"Startup failed: {e.message}")
        return 1
    finally:
        await service.stop()

    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
