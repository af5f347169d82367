"""Alert policy evaluator - decides which alert channels a call gets."""

import logging
from typing import Optional

from .patterns import VibrationPattern
from .types import (
    AlertDecision,
    AlertEnvironment,
    Call,
    NO_RAMP,
    RingerMode,
    TorchMode,
)

logger = logging.getLogger(__name__)


def should_vibrate_globally(
    ringer_mode: RingerMode,
    vibrate_when_ringing: bool,
    has_vibrator: bool = True,
) -> bool:
    """
    Device-wide vibration rule, independent of any particular call.

    The "vibrate when ringing" preference only counts on devices that have a
    vibrator; vibrate-only ringer mode always vibrates.
    """
    if vibrate_when_ringing and has_vibrator:
        return ringer_mode != RingerMode.SILENT
    return ringer_mode == RingerMode.VIBRATE


def should_flash(torch_mode: TorchMode, is_ringer_audible: bool) -> bool:
    """Flash-on-call rule. Independent of whether audio or vibration starts."""
    return (
        (torch_mode == TorchMode.RING_ONLY and is_ringer_audible)
        or (torch_mode == TorchMode.SILENT_ONLY and not is_ringer_audible)
        or torch_mode == TorchMode.ALWAYS
    )


class AlertPolicyEvaluator:
    """
    Evaluates a call against an environment snapshot.

    Pure: no I/O, no state changes, never raises. The rules are applied in a
    fixed precedence:
    1. Ringer audibility (volume, contact filter, ringtone)
    2. Audio focus (audible, HFP + contact match, or self-managed)
    3. Early end (theater mode, dialer rings, self-managed, external ringer)
    4. Vibration
    5. Flash
    6. Waveform selection
    """

    def __init__(self, default_effect: VibrationPattern):
        """
        Args:
            default_effect: Waveform used when the ringtone carries none.
                Fixed for the lifetime of the evaluator.
        """
        self.default_effect = default_effect

    def evaluate(self, call: Optional[Call], env: AlertEnvironment) -> AlertDecision:
        """
        Compute the alert decision for a call.

        Args:
            call: Call to alert for. None is treated as an ordinary call with
                no self-management and no external ringer.
            env: Environment snapshot

        Returns:
            AlertDecision (always)
        """
        is_self_managed = call is not None and call.is_self_managed
        has_external_ringer = call is not None and call.has_external_ringer

        is_ringer_audible = (
            env.ring_volume > 0
            and env.should_ring_for_contact
            and env.is_ringtone_present
        )

        should_acquire_audio_focus = (
            is_ringer_audible
            or (env.hfp_device_attached and env.should_ring_for_contact)
            or is_self_managed
        )

        end_early = (
            env.theater_mode
            or env.dialer_handles_ringing
            or is_self_managed
            or has_external_ringer
        )

        if end_early:
            return AlertDecision(
                should_ring_audibly=False,
                should_acquire_audio_focus=should_acquire_audio_focus,
                should_vibrate=False,
                should_flash=False,
                vibration_effect=self.default_effect,
                is_ringer_audible=is_ringer_audible,
                end_early=True,
            )

        vibrate = (
            should_vibrate_globally(env.ringer_mode, env.vibrate_when_ringing, env.has_vibrator)
            and not env.already_vibrating
            and env.should_ring_for_contact
        )

        return AlertDecision(
            should_ring_audibly=is_ringer_audible,
            should_acquire_audio_focus=should_acquire_audio_focus,
            should_vibrate=vibrate,
            should_flash=should_flash(env.torch_mode, is_ringer_audible),
            vibration_effect=self._select_effect(env, is_ringer_audible),
            ring_volume_ramp=env.volume_ramp if is_ringer_audible else NO_RAMP,
            is_ringer_audible=is_ringer_audible,
            end_early=False,
        )

    def _select_effect(self, env: AlertEnvironment, is_ringer_audible: bool) -> VibrationPattern:
        """Prefer the ringtone's own haptics when it is going to play."""
        if is_ringer_audible and env.ringtone is not None:
            if env.ringtone.embedded_vibration is not None:
                return env.ringtone.embedded_vibration
        return self.default_effect
