"""
Call alerting controller.

Decides how an incoming call alerts the user (ringtone, vibration, torch
flash) and coordinates alert state across overlapping calls.
"""

from .alerts import Call, Ringer, RingerMode, TorchMode
from .config import Config, ConfigSettingsStore, load_config

__version__ = "0.1.0"

__all__ = [
    "Call",
    "Ringer",
    "RingerMode",
    "TorchMode",
    "Config",
    "ConfigSettingsStore",
    "load_config",
]
