"""
Configuration for the exporter.

Provides settings for the poll loop, the Bluetooth transport,
the metrics endpoint and the device label file.
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Airthings Wave sensor-values GATT service and characteristic.
SENSOR_SERVICE_UUID = "b42e1c08-ade7-11e4-89d3-123b93f75cba"
SENSOR_VALUES_CHARACTERISTIC_UUID = "b42e2a68-ade7-11e4-89d3-123b93f75cba"

# Bluetooth SIG company identifier assigned to Airthings.
AIRTHINGS_MANUFACTURER_ID = 820


class PollingSettings(BaseSettings):
    """Poll loop configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WAVETHING_POLLING_",
        env_file=".env",
        extra="ignore",
    )

    tick_interval: float = Field(default=5.0, gt=0, description="Seconds between poll ticks")
    sensor_period: float = Field(
        default=300.0,
        ge=10.0,
        description="Nominal interval at which sensors refresh their reading (seconds)",
    )
    max_concurrent_reads: int = Field(
        default=1,
        ge=1,
        description="Maximum device reads in flight during one tick",
    )
    prune_after: Optional[float] = Field(
        default=None,
        gt=0,
        description="Forget devices idle for this many seconds (disabled when unset)",
    )
    shutdown_grace: float = Field(
        default=2.0,
        ge=0,
        description="Seconds to wait for an in-flight tick before abandoning it",
    )


class BluetoothSettings(BaseSettings):
    """Bluetooth transport configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WAVETHING_BLE_",
        env_file=".env",
        extra="ignore",
    )

    adapters: List[str] = Field(
        default_factory=list,
        description="Adapters to scan on, e.g. [\"hci0\"]; default adapter when empty",
    )
    manufacturer_id: int = Field(default=AIRTHINGS_MANUFACTURER_ID)
    service_uuid: str = Field(default=SENSOR_SERVICE_UUID)
    characteristic_uuid: str = Field(default=SENSOR_VALUES_CHARACTERISTIC_UUID)
    connect_timeout: float = Field(default=10.0, gt=0, description="Connection timeout in seconds")
    read_timeout: float = Field(default=10.0, gt=0, description="Characteristic read timeout in seconds")


class MetricsSettings(BaseSettings):
    """Prometheus exposition configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WAVETHING_METRICS_",
        env_file=".env",
        extra="ignore",
    )

    host: str = Field(default="0.0.0.0", description="Exposition bind address")
    port: int = Field(default=8080, description="Exposition port")
    namespace: str = Field(default="", description="Optional metric name prefix")


class ExporterSettings(BaseSettings):
    """Main configuration for the exporter."""

    model_config = SettingsConfigDict(
        env_prefix="WAVETHING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="wavething")
    log_level: str = Field(default="INFO")

    # Paths
    labels_file: Path = Field(
        default=Path("devices.yaml"),
        description="YAML file mapping device serials to label values",
    )

    # Sub-settings
    polling: PollingSettings = Field(default_factory=PollingSettings)
    bluetooth: BluetoothSettings = Field(default_factory=BluetoothSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)

    @property
    def stale_after(self) -> float:
        """Seconds without a successful read before a device's metrics are removed."""
        return self.polling.sensor_period * 2


@lru_cache()
def get_settings() -> ExporterSettings:
    """
    Get cached exporter settings.

    Uses LRU cache to avoid re-reading environment variables on every access.
    """
    return ExporterSettings()
