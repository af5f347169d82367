"""
Unit tests for the alert policy evaluator.

Covers rule precedence, early-end behaviour and waveform selection.
"""

import dataclasses
import itertools

import pytest

from ringer.alerts import (
    AlertEnvironment,
    AlertPolicyEvaluator,
    Call,
    RingerMode,
    RingtoneInfo,
    TorchMode,
    VolumeRamp,
    PULSE_PATTERN,
    SIMPLE_PATTERN,
    should_vibrate_globally,
)
from ringer.alerts.types import EXTRA_CALL_EXTERNAL_RINGER


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def evaluator():
    return AlertPolicyEvaluator(PULSE_PATTERN)


@pytest.fixture
def call():
    return Call(call_id="c1", contact_uri="tel:+15550001")


@pytest.fixture
def ringtone():
    return RingtoneInfo(present=True, uri="ringtones/default.ogg")


@pytest.fixture
def audible_env(ringtone):
    """Environment in which the ringer is audible and vibration is wanted."""
    return AlertEnvironment(
        ring_volume=5,
        should_ring_for_contact=True,
        ringtone=ringtone,
        ringer_mode=RingerMode.NORMAL,
        vibrate_when_ringing=True,
        has_vibrator=True,
    )


def _replace(env: AlertEnvironment, **kwargs) -> AlertEnvironment:
    return dataclasses.replace(env, **kwargs)


# =============================================================================
# Audibility and audio focus
# =============================================================================

class TestAudibility:
    """Rules 1 and 2."""

    def test_audible_ring(self, evaluator, call, audible_env):
        decision = evaluator.evaluate(call, audible_env)
        assert decision.is_ringer_audible is True
        assert decision.should_ring_audibly is True
        assert decision.should_acquire_audio_focus is True

    @pytest.mark.parametrize("field,value", [
        ("ring_volume", 0),
        ("should_ring_for_contact", False),
        ("ringtone", None),
        ("ringtone", RingtoneInfo(present=False)),
    ])
    def test_any_missing_input_makes_ringer_silent(self, evaluator, call, audible_env, field, value):
        decision = evaluator.evaluate(call, _replace(audible_env, **{field: value}))
        assert decision.is_ringer_audible is False
        assert decision.should_ring_audibly is False

    def test_volume_zero_uses_default_effect_and_no_focus(self, evaluator, call, audible_env):
        """volume=0, contact match, ringtone present: silent, default waveform, no focus."""
        decision = evaluator.evaluate(call, _replace(audible_env, ring_volume=0))
        assert decision.is_ringer_audible is False
        assert decision.vibration_effect is PULSE_PATTERN
        assert decision.should_acquire_audio_focus is False

    def test_volume_zero_with_hfp_acquires_focus(self, evaluator, call, audible_env):
        env = _replace(audible_env, ring_volume=0, hfp_device_attached=True)
        assert evaluator.evaluate(call, env).should_acquire_audio_focus is True

    def test_hfp_without_contact_match_does_not_acquire_focus(self, evaluator, call, audible_env):
        env = _replace(audible_env, should_ring_for_contact=False, hfp_device_attached=True)
        assert evaluator.evaluate(call, env).should_acquire_audio_focus is False

    def test_audible_always_implies_focus(self, evaluator, ringtone):
        """Exhaustive check over the boolean inputs that feed rules 1 and 2."""
        for volume, contact, present, hfp, self_managed, theater in itertools.product(
            (0, 3), (False, True), (False, True), (False, True), (False, True), (False, True)
        ):
            env = AlertEnvironment(
                ring_volume=volume,
                should_ring_for_contact=contact,
                ringtone=ringtone if present else None,
                hfp_device_attached=hfp,
                theater_mode=theater,
            )
            c = Call(call_id="x", is_self_managed=self_managed)
            decision = evaluator.evaluate(c, env)
            if decision.is_ringer_audible:
                assert decision.should_acquire_audio_focus
            if decision.should_ring_audibly:
                assert decision.should_acquire_audio_focus


# =============================================================================
# Early end
# =============================================================================

class TestEndEarly:
    """Rule 3: suppression by theater mode, dialer, self-managed, external ringer."""

    @pytest.mark.parametrize("env_kwargs,call_kwargs", [
        ({"theater_mode": True}, {}),
        ({"dialer_handles_ringing": True}, {}),
        ({}, {"is_self_managed": True}),
        ({}, {"intent_extras": {EXTRA_CALL_EXTERNAL_RINGER: True}}),
    ])
    def test_no_channel_starts(self, evaluator, audible_env, env_kwargs, call_kwargs):
        env = _replace(audible_env, torch_mode=TorchMode.ALWAYS, **env_kwargs)
        decision = evaluator.evaluate(Call(call_id="c", **call_kwargs), env)
        assert decision.end_early is True
        assert decision.should_ring_audibly is False
        assert decision.should_vibrate is False
        assert decision.should_flash is False
        assert decision.starts_any_channel is False

    def test_theater_mode_keeps_focus_from_rule_two(self, evaluator, call, audible_env):
        decision = evaluator.evaluate(call, _replace(audible_env, theater_mode=True))
        assert decision.end_early is True
        assert decision.should_acquire_audio_focus is True

    def test_theater_mode_silent_ring_has_no_focus(self, evaluator, call, audible_env):
        env = _replace(audible_env, theater_mode=True, ring_volume=0)
        assert evaluator.evaluate(call, env).should_acquire_audio_focus is False

    def test_self_managed_in_vibrate_mode(self, evaluator, audible_env):
        """Self-managed call, vibrate mode: focus requested, no vibration."""
        env = _replace(audible_env, ringer_mode=RingerMode.VIBRATE, ring_volume=0)
        decision = evaluator.evaluate(Call(call_id="sm", is_self_managed=True), env)
        assert decision.end_early is True
        assert decision.should_acquire_audio_focus is True
        assert decision.should_vibrate is False

    def test_external_ringer_extra_false_does_not_end_early(self, evaluator, audible_env):
        c = Call(call_id="c", intent_extras={EXTRA_CALL_EXTERNAL_RINGER: False})
        assert evaluator.evaluate(c, audible_env).end_early is False

    def test_missing_call_is_ordinary(self, evaluator, audible_env):
        decision = evaluator.evaluate(None, audible_env)
        assert decision.end_early is False
        assert decision.should_ring_audibly is True


# =============================================================================
# Vibration
# =============================================================================

class TestVibration:
    """Rule 4."""

    @pytest.mark.parametrize("mode,pref,has_vibrator,expected", [
        (RingerMode.NORMAL, True, True, True),
        (RingerMode.NORMAL, False, True, False),
        (RingerMode.VIBRATE, False, True, True),
        (RingerMode.VIBRATE, True, True, True),
        (RingerMode.SILENT, True, True, False),
        (RingerMode.SILENT, False, True, False),
        (RingerMode.NORMAL, True, False, False),
        (RingerMode.VIBRATE, True, False, True),
    ])
    def test_should_vibrate_globally(self, mode, pref, has_vibrator, expected):
        assert should_vibrate_globally(mode, pref, has_vibrator) is expected

    def test_already_vibrating_suppresses(self, evaluator, call, audible_env):
        decision = evaluator.evaluate(call, _replace(audible_env, already_vibrating=True))
        assert decision.should_vibrate is False

    def test_contact_filter_suppresses(self, evaluator, call, audible_env):
        decision = evaluator.evaluate(call, _replace(audible_env, should_ring_for_contact=False))
        assert decision.should_vibrate is False

    def test_vibrate_mode_vibrates_with_silent_ringer(self, evaluator, call, audible_env):
        env = _replace(audible_env, ring_volume=0, ringer_mode=RingerMode.VIBRATE,
                       vibrate_when_ringing=False)
        decision = evaluator.evaluate(call, env)
        assert decision.should_vibrate is True
        assert decision.should_ring_audibly is False


# =============================================================================
# Flash
# =============================================================================

class TestFlash:
    """Rule 5."""

    @pytest.mark.parametrize("mode,audible,expected", [
        (TorchMode.OFF, True, False),
        (TorchMode.OFF, False, False),
        (TorchMode.RING_ONLY, True, True),
        (TorchMode.RING_ONLY, False, False),
        (TorchMode.SILENT_ONLY, True, False),
        (TorchMode.SILENT_ONLY, False, True),
        (TorchMode.ALWAYS, True, True),
        (TorchMode.ALWAYS, False, True),
    ])
    def test_flash_rule(self, evaluator, call, audible_env, mode, audible, expected):
        env = _replace(audible_env, torch_mode=mode, ring_volume=5 if audible else 0)
        assert evaluator.evaluate(call, env).should_flash is expected

    def test_flash_independent_of_vibration(self, evaluator, call, audible_env):
        env = _replace(audible_env, torch_mode=TorchMode.ALWAYS, already_vibrating=True)
        decision = evaluator.evaluate(call, env)
        assert decision.should_flash is True
        assert decision.should_vibrate is False


# =============================================================================
# Waveform and volume ramp
# =============================================================================

class TestEffectSelection:
    """Rule 6."""

    def test_embedded_vibration_used_when_audible(self, evaluator, call, audible_env):
        ringtone = RingtoneInfo(present=True, uri="r.ogg", embedded_vibration=SIMPLE_PATTERN)
        decision = evaluator.evaluate(call, _replace(audible_env, ringtone=ringtone))
        assert decision.vibration_effect is SIMPLE_PATTERN

    def test_embedded_vibration_ignored_when_silent(self, evaluator, call, audible_env):
        ringtone = RingtoneInfo(present=True, uri="r.ogg", embedded_vibration=SIMPLE_PATTERN)
        env = _replace(audible_env, ringtone=ringtone, ring_volume=0)
        assert evaluator.evaluate(call, env).vibration_effect is PULSE_PATTERN

    def test_default_when_ringtone_has_no_haptics(self, evaluator, call, audible_env):
        assert evaluator.evaluate(call, audible_env).vibration_effect is PULSE_PATTERN

    def test_simple_default_effect(self, call, audible_env):
        decision = AlertPolicyEvaluator(SIMPLE_PATTERN).evaluate(call, audible_env)
        assert decision.vibration_effect is SIMPLE_PATTERN

    def test_volume_ramp_carried_when_audible(self, evaluator, call, audible_env):
        ramp = VolumeRamp(start_volume=0.1, ramp_ms=20000)
        decision = evaluator.evaluate(call, _replace(audible_env, volume_ramp=ramp))
        assert decision.ring_volume_ramp == ramp

    def test_volume_ramp_dropped_when_silent(self, evaluator, call, audible_env):
        ramp = VolumeRamp(start_volume=0.1, ramp_ms=20000)
        env = _replace(audible_env, volume_ramp=ramp, ring_volume=0)
        assert evaluator.evaluate(call, env).ring_volume_ramp.is_ramping is False


class TestDefaults:
    """An empty snapshot never alerts."""

    def test_empty_environment(self, evaluator, call):
        decision = evaluator.evaluate(call, AlertEnvironment())
        assert decision.starts_any_channel is False
        assert decision.should_acquire_audio_focus is False
