"""
Device label module.

Maps device serials to the label values attached to their metrics.
"""
from .loader import SERIAL_LABEL, LabelConfig, load_label_config, parse_label_config

__all__ = [
    "SERIAL_LABEL",
    "LabelConfig",
    "load_label_config",
    "parse_label_config",
]
