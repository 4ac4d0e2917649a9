"""
Transport boundary.

The poll loop talks to sensors only through this interface, so the
Bluetooth stack can be replaced by a simulator in tests.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Advertisement:
    """A device seen during discovery."""

    # Radio address, e.g. "AA:BB:CC:DD:EE:FF"
    address: str

    # Company id -> manufacturer-specific data
    manufacturer_data: Dict[int, bytes] = field(default_factory=dict)

    name: Optional[str] = None
    rssi: Optional[int] = None

    # Backend handle needed to connect (BLEDevice for bleak)
    handle: Any = field(default=None, repr=False, compare=False)


class Transport(ABC):
    """
    Abstract sensor transport.

    Implementations must bound every read with a timeout and raise
    TransportError on failure.
    """

    async def start(self) -> None:
        """Acquire radio resources. Raises TransportError if unusable."""

    async def stop(self) -> None:
        """Release radio resources."""

    @abstractmethod
    async def discover(self) -> List[Advertisement]:
        """
        List devices currently in range.

        Raises:
            TransportError: If the radio cannot be queried.
        """

    @abstractmethod
    async def read(self, device: Advertisement) -> Optional[bytes]:
        """
        Connect to a device and read its sensor values.

        Returns:
            The raw payload, or None if the device has no data yet.

        Raises:
            TransportError: If connecting or reading fails.
        """
