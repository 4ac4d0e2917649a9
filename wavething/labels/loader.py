"""
Device label configuration.

Loads the YAML file that maps device serials to descriptive label values
and resolves the ordered label tuple attached to every metric sample.

Example file::

    "2930012345":
      room: bedroom
      floor: "1"
    "2930054321":
      room: basement
"""
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple, Union

import yaml

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

SERIAL_LABEL = "serial"

_LABEL_NAME = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


@dataclass
class LabelConfig:
    """
    Label schema and per-device label values.

    The schema always starts with ``serial``; the remaining names are the
    union of names used in the file, sorted.
    """
    label_names: Tuple[str, ...] = (SERIAL_LABEL,)
    devices: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def resolve(self, serial: Union[int, str]) -> Tuple[str, ...]:
        """
        Resolve ordered label values for a device.

        Args:
            serial: Device serial.

        Returns:
            Tuple of label values in schema order. Labels not configured for
            the device (or unknown devices) get an empty string.
        """
        key = str(serial)
        labels = self.devices.get(key, {})
        return tuple(
            key if name == SERIAL_LABEL else labels.get(name, "")
            for name in self.label_names
        )

    def __contains__(self, serial: object) -> bool:
        return str(serial) in self.devices


def parse_label_config(data: Any, source: str = "<memory>") -> LabelConfig:
    """
    Build a LabelConfig from parsed YAML data.

    Args:
        data: Mapping of serial -> mapping of label name -> value.
        source: Name of the source, used in error messages.

    Returns:
        Parsed LabelConfig.

    Raises:
        ConfigError: If the structure or a label name is invalid.
    """
    if data is None:
        return LabelConfig()

    if not isinstance(data, Mapping):
        raise ConfigError(
            f"Label config must be a mapping of serial to labels, got {type(data).__name__}",
            path=source,
        )

    devices: Dict[str, Dict[str, str]] = {}
    names = set()

    for serial, labels in data.items():
        key = str(serial)
        device_labels: Dict[str, str] = {}

        if labels is None:
            devices[key] = device_labels
            continue

        if not isinstance(labels, Mapping):
            raise ConfigError(
                f"Labels for device {key} must be a mapping",
                path=source,
            )

        for name, value in labels.items():
            name = str(name)
            if name == SERIAL_LABEL:
                raise ConfigError(
                    f"Device {key}: '{SERIAL_LABEL}' is reserved",
                    path=source,
                )
            if not _LABEL_NAME.match(name) or name.startswith("__"):
                raise ConfigError(
                    f"Device {key}: invalid label name '{name}'",
                    path=source,
                )

            if isinstance(value, (str, int, float, bool)):
                device_labels[name] = str(value)
                names.add(name)
            else:
                logger.warning(
                    f"Ignoring non-scalar label '{name}' for device {key}"
                )

        devices[key] = device_labels

    return LabelConfig(
        label_names=(SERIAL_LABEL, *sorted(names)),
        devices=devices,
    )


def load_label_config(file_path: Path) -> LabelConfig:
    """
    Load label configuration from a YAML file.

    A missing file is not an error: every device is then labeled by its
    serial only.

    Args:
        file_path: Path to the YAML file.

    Returns:
        Loaded LabelConfig.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        logger.warning(f"Label config not found: {file_path}, using serial only")
        return LabelConfig()

    logger.info(f"Loading device labels from {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load label config: {e}", path=str(file_path)) from e

    config = parse_label_config(data, source=str(file_path))
    logger.info(
        f"Loaded labels for {len(config.devices)} devices "
        f"(label names: {', '.join(config.label_names)})"
    )
    return config
