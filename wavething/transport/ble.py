"""
Bluetooth Low Energy transport built on bleak.

Keeps a background scanner running on each configured adapter and
performs short connect / read / disconnect cycles for sensor reads.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError

from ..config import BluetoothSettings
from ..exceptions import TransportError
from .base import Advertisement, Transport

logger = logging.getLogger(__name__)


class BleTransport(Transport):
    """
    Transport for Airthings Wave sensors.

    Only advertisements carrying the Airthings manufacturer id are
    reported by discovery.
    """

    def __init__(self, settings: Optional[BluetoothSettings] = None):
        """
        Initialize the transport.

        Args:
            settings: Bluetooth settings.
        """
        self.settings = settings or BluetoothSettings()
        self._scanners: Dict[str, BleakScanner] = {}

    @property
    def is_scanning(self) -> bool:
        return bool(self._scanners)

    async def start(self) -> None:
        """
        Start scanning on every configured adapter.

        Raises:
            TransportError: If no adapter could be started.
        """
        adapters = self.settings.adapters or [None]

        for adapter in adapters:
            name = adapter or "default"
            kwargs = {"adapter": adapter} if adapter else {}
            scanner = BleakScanner(
                service_uuids=[self.settings.service_uuid],
                **kwargs,
            )
            try:
                await scanner.start()
            except (BleakError, OSError) as e:
                logger.error(f"Could not start scanning on adapter {name}: {e}")
                continue

            self._scanners[name] = scanner
            logger.info(f"Scanning on adapter {name}")

        if not self._scanners:
            raise TransportError(
                "No usable Bluetooth adapter found",
                operation="start",
            )

    async def stop(self) -> None:
        """Stop all scanners."""
        for name, scanner in list(self._scanners.items()):
            try:
                await scanner.stop()
            except (BleakError, OSError) as e:
                logger.debug(f"Failed to stop scanner on adapter {name}: {e}")
        self._scanners.clear()

    async def discover(self) -> List[Advertisement]:
        if not self._scanners:
            raise TransportError("Transport not started", operation="discover")

        manufacturer_id = self.settings.manufacturer_id
        found: Dict[str, Advertisement] = {}

        for name, scanner in self._scanners.items():
            try:
                seen = scanner.discovered_devices_and_advertisement_data
            except (BleakError, OSError) as e:
                raise TransportError(
                    f"Could not list devices on adapter {name}: {e}",
                    operation="discover",
                ) from e

            for address, (device, adv) in seen.items():
                if manufacturer_id not in adv.manufacturer_data:
                    continue
                found[address] = Advertisement(
                    address=address,
                    manufacturer_data=dict(adv.manufacturer_data),
                    name=adv.local_name or device.name,
                    rssi=adv.rssi,
                    handle=device,
                )

        logger.debug(f"discovered {len(found)} peripherals")
        return list(found.values())

    async def read(self, device: Advertisement) -> Optional[bytes]:
        timeout = self.settings.connect_timeout + self.settings.read_timeout

        try:
            data = await asyncio.wait_for(self._read(device), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Timed out reading {device.address} after {timeout:.0f}s",
                address=device.address,
                operation="read",
            ) from e
        except (BleakError, OSError, EOFError) as e:
            raise TransportError(
                f"Failed to read {device.address}: {e}",
                address=device.address,
                operation="read",
            ) from e

        if not data:
            return None
        return bytes(data)

    async def _read(self, device: Advertisement) -> bytearray:
        target = device.handle if device.handle is not None else device.address

        async with BleakClient(target, timeout=self.settings.connect_timeout) as client:
            return await asyncio.wait_for(
                client.read_gatt_char(self.settings.characteristic_uuid),
                timeout=self.settings.read_timeout,
            )
