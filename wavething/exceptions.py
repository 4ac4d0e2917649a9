"""
Exceptions raised by the exporter.

Per-device errors (transport, decode) are recoverable and only skip the
affected device for one tick. Configuration errors are fatal at startup.
"""
from typing import Any, Dict, Optional


class WavethingError(Exception):
    """
    Base exception for all exporter errors.

    All exporter exceptions inherit from this class so callers can
    handle them consistently.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            'error': self.code,
            'message': self.message,
            'details': self.details
        }


class TransportError(WavethingError):
    """Raised when discovery, connect or characteristic read fails."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        operation: Optional[str] = None
    ):
        self.address = address
        self.operation = operation
        details = {}
        if address:
            details['address'] = address
        if operation:
            details['operation'] = operation
        super().__init__(
            message=message,
            code='TRANSPORT_ERROR',
            details=details
        )


class DecodeError(WavethingError):
    """Raised when a sensor payload is too short or malformed."""

    def __init__(self, message: str, payload_length: Optional[int] = None):
        self.payload_length = payload_length
        super().__init__(
            message=message,
            code='DECODE_ERROR',
            details={'payload_length': payload_length}
        )


class ConfigError(WavethingError):
    """
    Raised when label or service configuration cannot be loaded.

    Only reachable during startup.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(
            message=message,
            code='CONFIG_ERROR',
            details={'path': path}
        )
