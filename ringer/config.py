"""
Configuration management for the call alerting controller.

Handles loading, validation, and access to system configuration.
"""

import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from pathlib import Path

from .alerts.collaborators import SettingsStore
from .alerts.types import RingerMode, TorchMode


@dataclass
class SystemConfig:
    """Top-level system configuration."""
    log_level: str = "INFO"
    event_log_file: Optional[str] = None  # JSON Lines call events, None = memory only
    event_flush_interval_s: float = 1.0


@dataclass
class RingerSettings:
    """User settings consulted while alerting."""
    theater_mode: bool = False
    increasing_ring: bool = False
    increasing_ring_start_volume: float = 0.1
    increasing_ring_ramp_up_time_s: int = 20
    vibrate_when_ringing: bool = True
    vibrate_on_call_waiting: bool = False
    torch_on_call: TorchMode = TorchMode.OFF
    use_simple_vibration_pattern: bool = False
    torch_blink_interval_ms: int = 500


@dataclass
class DeviceConfig:
    """Simulated device state used by the config-backed environment."""
    ring_volume: int = 5
    ringer_mode: RingerMode = RingerMode.NORMAL
    dialer_supports_ringing: bool = False
    allowed_contacts: Optional[List[str]] = None  # None = every contact may ring
    default_ringtone: Optional[str] = "sounds/ringtone.wav"
    contact_ringtones: Dict[str, str] = field(default_factory=dict)


@dataclass
class GPIOConfig:
    """GPIO configuration for Raspberry Pi."""
    enabled: bool = True
    vibrator_pin: int = 18
    torch_pin: int = 27
    pwm_frequency_hz: int = 200


@dataclass
class AudioConfig:
    """pygame audio output configuration."""
    enabled: bool = True
    sample_rate: int = 44100


@dataclass
class Config:
    """Complete system configuration."""
    system: SystemConfig = field(default_factory=SystemConfig)
    ringer: RingerSettings = field(default_factory=RingerSettings)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    gpio: GPIOConfig = field(default_factory=GPIOConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)


class ConfigSettingsStore(SettingsStore):
    """SettingsStore backed by a RingerSettings instance."""

    def __init__(self, settings: Optional[RingerSettings] = None):
        self.settings = settings if settings is not None else RingerSettings()

    def is_theater_mode_on(self) -> bool:
        return self.settings.theater_mode

    def is_increasing_ring_enabled(self) -> bool:
        return self.settings.increasing_ring

    def increasing_ring_start_volume(self) -> float:
        return self.settings.increasing_ring_start_volume

    def increasing_ring_ramp_up_time_s(self) -> int:
        return self.settings.increasing_ring_ramp_up_time_s

    def can_vibrate_when_ringing(self) -> bool:
        return self.settings.vibrate_when_ringing

    def vibrate_on_call_waiting(self) -> bool:
        return self.settings.vibrate_on_call_waiting

    def torch_on_call_mode(self) -> TorchMode:
        return self.settings.torch_on_call

    def use_simple_vibration_pattern(self) -> bool:
        return self.settings.use_simple_vibration_pattern


def _parse_torch_mode(value: Any) -> TorchMode:
    """Accept either the stored integer (0-3) or the mode name."""
    if isinstance(value, TorchMode):
        return value
    # YAML reads a bare `off` as False
    if value is None or value is False:
        return TorchMode.OFF
    try:
        if isinstance(value, int) and not isinstance(value, bool):
            return TorchMode(value)
        return TorchMode[str(value).upper()]
    except (KeyError, ValueError):
        raise ValueError(f"Invalid ringer.torch_on_call: {value!r}") from None


def _parse_ringer_mode(value: Any) -> RingerMode:
    if isinstance(value, RingerMode):
        return value
    try:
        return RingerMode(str(value).lower())
    except ValueError:
        raise ValueError(f"Invalid device.ringer_mode: {value!r}") from None


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses config.yaml in the
            project root

    Returns:
        Populated Config object

    Raises:
        yaml.YAMLError: If config file is malformed
        ValueError: If an enumerated setting has an unknown value
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent / "config.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        # Return default configuration
        return Config()

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    config = Config()

    if "system" in data:
        sys_data = data["system"] or {}
        config.system = SystemConfig(
            log_level=sys_data.get("log_level", "INFO"),
            event_log_file=sys_data.get("event_log_file"),
            event_flush_interval_s=sys_data.get("event_flush_interval_s", 1.0),
        )

    if "ringer" in data:
        ring_data = data["ringer"] or {}
        config.ringer = RingerSettings(
            theater_mode=ring_data.get("theater_mode", False),
            increasing_ring=ring_data.get("increasing_ring", False),
            increasing_ring_start_volume=ring_data.get("increasing_ring_start_volume", 0.1),
            increasing_ring_ramp_up_time_s=ring_data.get("increasing_ring_ramp_up_time_s", 20),
            vibrate_when_ringing=ring_data.get("vibrate_when_ringing", True),
            vibrate_on_call_waiting=ring_data.get("vibrate_on_call_waiting", False),
            torch_on_call=_parse_torch_mode(ring_data.get("torch_on_call", 0)),
            use_simple_vibration_pattern=ring_data.get("use_simple_vibration_pattern", False),
            torch_blink_interval_ms=ring_data.get("torch_blink_interval_ms", 500),
        )

    if "device" in data:
        dev_data = data["device"] or {}
        config.device = DeviceConfig(
            ring_volume=dev_data.get("ring_volume", 5),
            ringer_mode=_parse_ringer_mode(dev_data.get("ringer_mode", "normal")),
            dialer_supports_ringing=dev_data.get("dialer_supports_ringing", False),
            allowed_contacts=dev_data.get("allowed_contacts"),
            default_ringtone=dev_data.get("default_ringtone", "sounds/ringtone.wav"),
            contact_ringtones=dict(dev_data.get("contact_ringtones") or {}),
        )

    if "gpio" in data:
        gpio_data = data["gpio"] or {}
        config.gpio = GPIOConfig(
            enabled=gpio_data.get("enabled", True),
            vibrator_pin=gpio_data.get("vibrator_pin", 18),
            torch_pin=gpio_data.get("torch_pin", 27),
            pwm_frequency_hz=gpio_data.get("pwm_frequency_hz", 200),
        )

    if "audio" in data:
        audio_data = data["audio"] or {}
        config.audio = AudioConfig(
            enabled=audio_data.get("enabled", True),
            sample_rate=audio_data.get("sample_rate", 44100),
        )

    return config
