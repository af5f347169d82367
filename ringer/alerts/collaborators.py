"""
Abstract collaborator interfaces.

The controller issues commands to, and reads state from, these services.
Concrete implementations live in ringer.hardware and ringer.environment.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

from .patterns import VibrationPattern
from .types import Call, RingerMode, RingtoneInfo, TorchMode, VolumeRamp


class ToneKind(Enum):
    """In-call tones the tone player factory can create."""
    CALL_WAITING = "call_waiting"


class NotificationFilter(ABC):
    """Do-not-disturb / contact filter lookup."""

    @abstractmethod
    def matches_filter(self, contact_uri: Optional[str]) -> bool:
        """Return True if a call from this contact is allowed to ring."""


class RingtoneResolver(ABC):
    """Looks up the ringtone a call should play."""

    @abstractmethod
    def resolve(self, call: Call) -> RingtoneInfo:
        """Resolve the ringtone for a call. Never returns None."""


class SettingsStore(ABC):
    """Read-only access to the user settings the controller consults."""

    @abstractmethod
    def is_theater_mode_on(self) -> bool:
        pass

    @abstractmethod
    def is_increasing_ring_enabled(self) -> bool:
        pass

    @abstractmethod
    def increasing_ring_start_volume(self) -> float:
        pass

    @abstractmethod
    def increasing_ring_ramp_up_time_s(self) -> int:
        pass

    @abstractmethod
    def can_vibrate_when_ringing(self) -> bool:
        pass

    @abstractmethod
    def vibrate_on_call_waiting(self) -> bool:
        pass

    @abstractmethod
    def torch_on_call_mode(self) -> TorchMode:
        pass

    @abstractmethod
    def use_simple_vibration_pattern(self) -> bool:
        pass

    def volume_ramp(self) -> VolumeRamp:
        """Increasing-ring settings as a ramp (no ramp when disabled)."""
        if not self.is_increasing_ring_enabled():
            return VolumeRamp()
        return VolumeRamp(
            start_volume=self.increasing_ring_start_volume(),
            ramp_ms=self.increasing_ring_ramp_up_time_s() * 1000,
        )


class DialerDelegate(ABC):
    """The connected in-call UI."""

    @abstractmethod
    def supports_own_ringing(self) -> bool:
        """True if the dialer wants to play the ringtone itself."""


class AudioEnvironment(ABC):
    """Ring stream volume and ringer mode."""

    @abstractmethod
    def ring_stream_volume(self) -> int:
        pass

    @abstractmethod
    def ringer_mode(self) -> RingerMode:
        pass


class Vibrator(ABC):
    """Vibration motor."""

    @abstractmethod
    def vibrate(self, pattern: VibrationPattern) -> None:
        """Play a waveform, looping from its repeat index until cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        pass

    @abstractmethod
    def has_vibrator(self) -> bool:
        pass


class TorchHardware(ABC):
    """Camera flash / torch LED."""

    @abstractmethod
    def has_flash(self) -> bool:
        pass

    @abstractmethod
    def list_available_torches(self) -> List[str]:
        pass

    @abstractmethod
    def set_torch(self, torch_id: str, on: bool) -> None:
        pass


class RingtonePlayer(ABC):
    """Plays the ringtone asynchronously."""

    @abstractmethod
    def play(self, ringtone: RingtoneInfo, ramp: VolumeRamp) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass


class TonePlayer(ABC):
    """A single in-call tone instance."""

    @abstractmethod
    def start_tone(self) -> None:
        pass

    @abstractmethod
    def stop_tone(self) -> None:
        pass


class TonePlayerFactory(ABC):
    """Creates tone players for in-call tones."""

    @abstractmethod
    def create_player(self, kind: ToneKind) -> TonePlayer:
        pass
