"""
Unit tests for exporter settings.
"""
from pathlib import Path

import pytest
from pydantic import ValidationError

from wavething.config import (
    AIRTHINGS_MANUFACTURER_ID,
    BluetoothSettings,
    ExporterSettings,
    MetricsSettings,
    PollingSettings,
    get_settings,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestDefaults:
    """Test default values."""

    def test_polling_defaults(self):
        settings = PollingSettings()

        assert settings.tick_interval == 5.0
        assert settings.sensor_period == 300.0
        assert settings.max_concurrent_reads == 1
        assert settings.prune_after is None

    def test_bluetooth_defaults(self):
        settings = BluetoothSettings()

        assert settings.adapters == []
        assert settings.manufacturer_id == AIRTHINGS_MANUFACTURER_ID == 820
        assert settings.characteristic_uuid == "b42e2a68-ade7-11e4-89d3-123b93f75cba"

    def test_metrics_defaults(self):
        settings = MetricsSettings()

        assert settings.host == "0.0.0.0"
        assert settings.port == 8080

    def test_stale_after_is_two_periods(self):
        settings = ExporterSettings(polling=PollingSettings(sensor_period=120.0))
        assert settings.stale_after == 240.0


class TestEnvironment:
    """Test environment overrides."""

    def test_polling_override(self, monkeypatch):
        monkeypatch.setenv("WAVETHING_POLLING_SENSOR_PERIOD", "120")
        monkeypatch.setenv("WAVETHING_POLLING_PRUNE_AFTER", "3600")

        settings = ExporterSettings()

        assert settings.polling.sensor_period == 120.0
        assert settings.polling.prune_after == 3600.0

    def test_adapter_list_override(self, monkeypatch):
        monkeypatch.setenv("WAVETHING_BLE_ADAPTERS", '["hci0", "hci1"]')

        assert BluetoothSettings().adapters == ["hci0", "hci1"]

    def test_top_level_override(self, monkeypatch):
        monkeypatch.setenv("WAVETHING_LABELS_FILE", "/etc/wavething/devices.yaml")
        monkeypatch.setenv("WAVETHING_METRICS_PORT", "9200")

        settings = ExporterSettings()

        assert settings.labels_file == Path("/etc/wavething/devices.yaml")
        assert settings.metrics.port == 9200

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestValidation:
    """Test rejected values."""

    def test_period_below_resolution(self):
        with pytest.raises(ValidationError):
            PollingSettings(sensor_period=5)

    def test_zero_concurrency(self):
        with pytest.raises(ValidationError):
            PollingSettings(max_concurrent_reads=0)

    def test_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            BluetoothSettings(connect_timeout=0)
