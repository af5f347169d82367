"""Shared fixtures for the alerting controller tests."""

from unittest.mock import MagicMock

import pytest

from ringer.alerts import Call, Ringer, RingerMode, TorchMode
from ringer.alerts.collaborators import RingtonePlayer, TonePlayer, TonePlayerFactory
from ringer.config import ConfigSettingsStore, RingerSettings
from ringer.environment import (
    ContactAllowlistFilter,
    FileRingtoneResolver,
    StaticAudioEnvironment,
    StaticDialer,
)
from ringer.hardware import StubTorch, StubVibrator
from ringer.telemetry import CallEventLog


class RingerHarness:
    """A Ringer wired to stubs and mocks, with handles on every collaborator."""

    def __init__(
        self,
        settings: RingerSettings = None,
        ring_volume: int = 5,
        ringer_mode: RingerMode = RingerMode.NORMAL,
        allowed_contacts=None,
        ringtone="ringtones/default.ogg",
        dialer_rings: bool = False,
        vibrator_present: bool = True,
        torch_has_flash: bool = True,
    ):
        self.settings = settings if settings is not None else RingerSettings(
            torch_blink_interval_ms=10,
        )
        self.audio_env = StaticAudioEnvironment(ring_volume, ringer_mode)
        self.notification_filter = ContactAllowlistFilter(allowed_contacts)
        self.resolver = FileRingtoneResolver(default_ringtone=ringtone)
        self.dialer = StaticDialer(dialer_rings)
        self.vibrator = StubVibrator(present=vibrator_present)
        self.torch = StubTorch(has_flash=torch_has_flash)
        self.ringtone_player = MagicMock(spec=RingtonePlayer)
        self.tone_factory = MagicMock(spec=TonePlayerFactory)
        self.tone_factory.create_player.side_effect = lambda kind: MagicMock(spec=TonePlayer)
        self.events = CallEventLog()

        self.ringer = Ringer(
            tone_player_factory=self.tone_factory,
            settings=ConfigSettingsStore(self.settings),
            ringtone_player=self.ringtone_player,
            ringtone_resolver=self.resolver,
            vibrator=self.vibrator,
            dialer=self.dialer,
            notification_filter=self.notification_filter,
            audio_environment=self.audio_env,
            torch=self.torch,
            event_log=self.events,
            torch_blink_interval_ms=self.settings.torch_blink_interval_ms,
        )

    def event_names(self, call: Call):
        return [r.event for r in self.events.events_for(call.call_id)]

    def shutdown(self) -> None:
        self.ringer.stop_ringing()
        self.ringer.stop_call_waiting()
        task = self.ringer.torch.task
        if task is not None:
            task.join(timeout=1.0)


@pytest.fixture
def make_harness():
    """Factory for RingerHarness instances, shut down after the test."""
    created = []

    def _make(**kwargs) -> RingerHarness:
        harness = RingerHarness(**kwargs)
        created.append(harness)
        return harness

    yield _make

    for harness in created:
        harness.shutdown()


@pytest.fixture
def harness(make_harness):
    """Harness with default settings: audible, vibrate when ringing, no torch."""
    return make_harness()


@pytest.fixture
def call():
    """An ordinary incoming call."""
    return Call(call_id="call-1", contact_uri="tel:+15550001")


@pytest.fixture
def second_call():
    """A second incoming call."""
    return Call(call_id="call-2", contact_uri="tel:+15550002")


@pytest.fixture
def torch_always_settings():
    return RingerSettings(torch_on_call=TorchMode.ALWAYS, torch_blink_interval_ms=10)
