"""Call, environment and decision types for the alerting controller."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Dict, Any

from .patterns import VibrationPattern

# Intent extra set by apps that already ring the call on their own hardware
EXTRA_CALL_EXTERNAL_RINGER = "android.telecom.extra.CALL_EXTERNAL_RINGER"


class RingerMode(Enum):
    """Device ringer mode as reported by the audio environment."""
    NORMAL = "normal"
    VIBRATE = "vibrate"
    SILENT = "silent"


class TorchMode(Enum):
    """Flash-on-call user setting (values match the stored integer)."""
    OFF = 0
    RING_ONLY = 1      # Flash only when the ringer is audible
    SILENT_ONLY = 2    # Flash only when the ringer is not audible
    ALWAYS = 3


@dataclass(frozen=True)
class Call:
    """
    Non-owning handle to a call that should alert the user.

    The telephony stack owns the call; the controller only keeps a reference
    while an alert is active.
    """
    call_id: str
    contact_uri: Optional[str] = None
    is_self_managed: bool = False
    intent_extras: Optional[Dict[str, Any]] = None

    @property
    def has_external_ringer(self) -> bool:
        """True if the call is already being rung outside this controller."""
        if self.intent_extras is None:
            return False
        return bool(self.intent_extras.get(EXTRA_CALL_EXTERNAL_RINGER, False))


@dataclass(frozen=True)
class RingtoneInfo:
    """Result of resolving the ringtone for a call."""
    present: bool = False
    uri: Optional[str] = None
    embedded_vibration: Optional[VibrationPattern] = None


@dataclass(frozen=True)
class VolumeRamp:
    """Increasing-ring parameters. A zero ramp plays at full volume."""
    start_volume: float = 0.0
    ramp_ms: int = 0

    @property
    def is_ramping(self) -> bool:
        return self.ramp_ms > 0


NO_RAMP = VolumeRamp()


@dataclass(frozen=True)
class AlertEnvironment:
    """
    Snapshot of everything the policy evaluator looks at.

    Defaults are the conservative "do not alert" values so a partially
    populated snapshot never produces an alert by accident.
    """
    ring_volume: int = 0
    should_ring_for_contact: bool = False
    ringtone: Optional[RingtoneInfo] = None
    theater_mode: bool = False
    dialer_handles_ringing: bool = False
    ringer_mode: RingerMode = RingerMode.SILENT
    vibrate_when_ringing: bool = False
    has_vibrator: bool = False
    torch_mode: TorchMode = TorchMode.OFF
    hfp_device_attached: bool = False
    already_vibrating: bool = False
    volume_ramp: VolumeRamp = NO_RAMP

    @property
    def is_ringtone_present(self) -> bool:
        return self.ringtone is not None and self.ringtone.present


@dataclass(frozen=True)
class AlertDecision:
    """Which channels to drive for one call, and with what parameters."""
    should_ring_audibly: bool
    should_acquire_audio_focus: bool
    should_vibrate: bool
    should_flash: bool
    vibration_effect: VibrationPattern
    ring_volume_ramp: VolumeRamp = NO_RAMP

    # Diagnostics
    is_ringer_audible: bool = False
    end_early: bool = False

    @property
    def starts_any_channel(self) -> bool:
        return self.should_ring_audibly or self.should_vibrate or self.should_flash


@dataclass
class AlertingSession:
    """
    Controller-wide alert state.

    Call references are kept for diagnostics only. Fields are reset one by
    one by the stop operations, never as a whole object.
    """
    ringing_call: Optional[Call] = None
    vibrating_call: Optional[Call] = None
    call_waiting_call: Optional[Call] = None
    is_vibrating: bool = False

    def snapshot(self) -> "AlertingSession":
        """Return a detached copy for callers that only want to read."""
        return replace(self)
