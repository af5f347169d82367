"""Haptic channel - at most one ringing vibration across all calls."""

import logging
from typing import Optional

from .collaborators import Vibrator
from .patterns import VibrationPattern
from .types import AlertingSession, Call

logger = logging.getLogger(__name__)


class HapticChannel:
    """
    Starts and stops the ringing vibration.

    A second call arriving while one is already vibrating never starts a
    second vibration. The vibrating flag and call live in the shared
    AlertingSession owned by the controller.
    """

    def __init__(self, vibrator: Vibrator, session: AlertingSession):
        self._vibrator = vibrator
        self._session = session

    @property
    def is_vibrating(self) -> bool:
        return self._session.is_vibrating

    def start(self, effect: VibrationPattern, call: Optional[Call] = None) -> bool:
        """
        Start vibrating with the given waveform.

        Returns:
            True if a vibration was started, False if one was already active
        """
        if self._session.is_vibrating:
            return False

        self._vibrator.vibrate(effect)
        self._session.is_vibrating = True
        self._session.vibrating_call = call
        logger.debug(f"Vibration started: {effect.name}")
        return True

    def stop(self) -> None:
        """Cancel vibration. Safe to call when not vibrating."""
        self._vibrator.cancel()
        self._session.is_vibrating = False
        self._session.vibrating_call = None

    def vibrate_once(self, pattern: VibrationPattern) -> bool:
        """
        Play a one-shot burst that does not count as the ringing vibration.

        Returns:
            True if the burst was sent to the vibrator
        """
        if not self._vibrator.has_vibrator():
            logger.debug("No vibrator - skipping one-shot vibration")
            return False

        self._vibrator.vibrate(pattern)
        return True
