"""
Alerting session controller.

Sequences the policy evaluator and the audible, haptic and torch channels
for incoming and call-waiting calls.

All methods run synchronously on the caller's thread and mutate the session
state without locking. Callers must serialize access to one controller.
"""

import logging
from typing import Optional

from .audible import AudibleChannel
from .collaborators import (
    AudioEnvironment,
    DialerDelegate,
    NotificationFilter,
    RingtonePlayer,
    RingtoneResolver,
    SettingsStore,
    TonePlayerFactory,
    TorchHardware,
    Vibrator,
)
from .decision import AlertPolicyEvaluator
from .haptic import HapticChannel
from .patterns import PatternRef, VibrationPatternLibrary
from .torch import TorchChannel, DEFAULT_BLINK_INTERVAL_MS
from .types import AlertDecision, AlertEnvironment, AlertingSession, Call
from ..telemetry.events import CallEvent, CallEventLog

logger = logging.getLogger(__name__)


class Ringer:
    """
    Controls ringing, vibration, torch flashing and the call-waiting tone.

    Usage:
        ringer = Ringer(tone_factory, settings, ringtone_player, resolver,
                        vibrator, dialer, notification_filter, audio_env, torch)
        if ringer.start_ringing(call, hfp_device_attached=False):
            ...  # request audio focus from the platform
        ringer.stop_ringing()
    """

    def __init__(
        self,
        tone_player_factory: TonePlayerFactory,
        settings: SettingsStore,
        ringtone_player: RingtonePlayer,
        ringtone_resolver: RingtoneResolver,
        vibrator: Vibrator,
        dialer: DialerDelegate,
        notification_filter: NotificationFilter,
        audio_environment: AudioEnvironment,
        torch: TorchHardware,
        event_log: Optional[CallEventLog] = None,
        torch_blink_interval_ms: int = DEFAULT_BLINK_INTERVAL_MS,
    ):
        self._settings = settings
        self._ringtone_resolver = ringtone_resolver
        self._vibrator = vibrator
        self._dialer = dialer
        self._notification_filter = notification_filter
        self._audio_environment = audio_environment
        self._events = event_log if event_log is not None else CallEventLog()

        self._session = AlertingSession()

        # Default waveform is fixed for the lifetime of the controller
        self.patterns = VibrationPatternLibrary(settings.use_simple_vibration_pattern())
        self.evaluator = AlertPolicyEvaluator(self.patterns.resolve(PatternRef.DEFAULT))

        self.audible = AudibleChannel(ringtone_player, ringtone_resolver, tone_player_factory)
        self.haptic = HapticChannel(vibrator, self._session)
        self.torch = TorchChannel(torch, torch_blink_interval_ms)

    @property
    def session(self) -> AlertingSession:
        """Copy of the current session state."""
        return self._session.snapshot()

    @property
    def events(self) -> CallEventLog:
        return self._events

    def snapshot_environment(self, call: Call, hfp_device_attached: bool = False) -> AlertEnvironment:
        """Read every collaborator the evaluator depends on."""
        return AlertEnvironment(
            ring_volume=self._audio_environment.ring_stream_volume(),
            should_ring_for_contact=self._notification_filter.matches_filter(call.contact_uri),
            ringtone=self._ringtone_resolver.resolve(call),
            theater_mode=self._settings.is_theater_mode_on(),
            dialer_handles_ringing=self._dialer.supports_own_ringing(),
            ringer_mode=self._audio_environment.ringer_mode(),
            vibrate_when_ringing=self._settings.can_vibrate_when_ringing(),
            has_vibrator=self._vibrator.has_vibrator(),
            torch_mode=self._settings.torch_on_call_mode(),
            hfp_device_attached=hfp_device_attached,
            already_vibrating=self._session.is_vibrating,
            volume_ramp=self._settings.volume_ramp(),
        )

    def start_ringing(self, call: Optional[Call], hfp_device_attached: bool = False) -> bool:
        """
        Alert the user to an incoming call.

        Args:
            call: Foreground incoming call
            hfp_device_attached: True if a hands-free device is connected

        Returns:
            True if the caller should request audio focus
        """
        if call is None:
            logger.critical("start_ringing called with no foreground call")
            return False

        env = self.snapshot_environment(call, hfp_device_attached)
        decision = self.evaluator.evaluate(call, env)

        if decision.end_early:
            if env.dialer_handles_ringing:
                self._events.add_event(call, CallEvent.SKIP_RINGING)
            logger.info(
                f"Ending early -- theater_mode={env.theater_mode}, "
                f"dialer_handles_ringing={env.dialer_handles_ringing}, "
                f"self_managed={call.is_self_managed}, "
                f"external_ringer={call.has_external_ringer}"
            )
            return decision.should_acquire_audio_focus

        self.stop_call_waiting()
        self._apply(call, env, decision)
        return decision.should_acquire_audio_focus

    def _apply(self, call: Call, env: AlertEnvironment, decision: AlertDecision) -> None:
        # Channels start independently; a failing channel never blocks the others
        if decision.should_ring_audibly:
            try:
                self.audible.start_ring(call, decision.ring_volume_ramp)
                self._session.ringing_call = call
                self._events.add_event(call, CallEvent.START_RINGER)
            except Exception as e:
                logger.error(f"Ringtone start failed: {e}")
        else:
            logger.info(
                f"start_ringing: skipping because ringer would not be audible. "
                f"volume={env.ring_volume}, "
                f"should_ring_for_contact={env.should_ring_for_contact}, "
                f"ringtone_present={env.is_ringtone_present}"
            )

        if decision.should_flash:
            try:
                self.torch.start()
            except Exception as e:
                logger.error(f"Torch start failed: {e}")

        vibration_detail = (
            f"has_vibrator={env.has_vibrator}, "
            f"vibrate_when_ringing={env.vibrate_when_ringing}, "
            f"ringer_mode={env.ringer_mode.value}, "
            f"is_vibrating={self._session.is_vibrating}"
        )
        if decision.should_vibrate:
            self._events.add_event(call, CallEvent.START_VIBRATOR, vibration_detail)
            try:
                self.haptic.start(decision.vibration_effect, call)
            except Exception as e:
                logger.error(f"Vibration start failed: {e}")
        elif self._session.is_vibrating:
            self._events.add_event(call, CallEvent.SKIP_VIBRATION, "already vibrating")
        else:
            self._events.add_event(call, CallEvent.SKIP_VIBRATION, vibration_detail)

    def start_call_waiting(self, call: Call) -> None:
        """Play the call-waiting alert for a call arriving during another call."""
        if self._settings.is_theater_mode_on():
            return

        if self._dialer.supports_own_ringing():
            self._events.add_event(call, CallEvent.SKIP_RINGING)
            return

        if call.is_self_managed:
            self._events.add_event(call, CallEvent.SKIP_RINGING, "Self-managed")
            return

        logger.debug("Playing call-waiting tone")

        self.stop_ringing()

        if self._settings.vibrate_on_call_waiting():
            self.haptic.vibrate_once(self.patterns.resolve(PatternRef.CALL_WAITING))

        if not self.audible.is_call_waiting_tone_active:
            self._events.add_event(call, CallEvent.START_CALL_WAITING_TONE)
            self._session.call_waiting_call = call
            self.audible.start_call_waiting_tone()

    def stop_ringing(self) -> None:
        """Stop ringtone, torch and ringing vibration. Safe when idle."""
        if self._session.ringing_call is not None:
            self._events.add_event(self._session.ringing_call, CallEvent.STOP_RINGER)
            self._session.ringing_call = None

        self.audible.stop_ring()
        self.torch.stop()

        if self._session.is_vibrating:
            self._events.add_event(self._session.vibrating_call, CallEvent.STOP_VIBRATOR)
            self.haptic.stop()

    def stop_call_waiting(self) -> None:
        """Stop the call-waiting tone. Safe when none is playing."""
        logger.debug("Stop call waiting")
        if not self.audible.is_call_waiting_tone_active:
            return

        if self._session.call_waiting_call is not None:
            self._events.add_event(self._session.call_waiting_call, CallEvent.STOP_CALL_WAITING_TONE)
            self._session.call_waiting_call = None

        self.audible.stop_call_waiting_tone()
