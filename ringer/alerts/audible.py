"""Audible channel - ringtone and call-waiting tone sequencing."""

import logging
from typing import Optional

from .collaborators import (
    RingtonePlayer,
    RingtoneResolver,
    TonePlayer,
    TonePlayerFactory,
    ToneKind,
)
from .types import Call, VolumeRamp, NO_RAMP

logger = logging.getLogger(__name__)


class AudibleChannel:
    """
    Thin shim over the ringtone player and the in-call tone player.

    Holds at most one call-waiting tone player at a time.
    """

    def __init__(
        self,
        ringtone_player: RingtonePlayer,
        ringtone_resolver: RingtoneResolver,
        tone_player_factory: TonePlayerFactory,
    ):
        self._ringtone_player = ringtone_player
        self._ringtone_resolver = ringtone_resolver
        self._tone_player_factory = tone_player_factory
        self._call_waiting_player: Optional[TonePlayer] = None

    def start_ring(self, call: Call, ramp: VolumeRamp = NO_RAMP) -> None:
        """Resolve the call's ringtone and hand it to the player."""
        ringtone = self._ringtone_resolver.resolve(call)
        self._ringtone_player.play(ringtone, ramp)

    def stop_ring(self) -> None:
        self._ringtone_player.stop()

    @property
    def is_call_waiting_tone_active(self) -> bool:
        return self._call_waiting_player is not None

    def start_call_waiting_tone(self) -> bool:
        """
        Start the call-waiting tone.

        Returns:
            True if a tone player was created, False if one is already active
        """
        if self._call_waiting_player is not None:
            return False

        self._call_waiting_player = self._tone_player_factory.create_player(ToneKind.CALL_WAITING)
        self._call_waiting_player.start_tone()
        return True

    def stop_call_waiting_tone(self) -> bool:
        """
        Stop the call-waiting tone.

        Returns:
            True if a tone was playing
        """
        player = self._call_waiting_player
        if player is None:
            return False

        self._call_waiting_player = None
        player.stop_tone()
        return True
