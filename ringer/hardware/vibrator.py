"""
GPIO vibration motor for Raspberry Pi.

Drives a motor (through a transistor/driver board) with PWM, mapping
waveform amplitudes 0-255 to duty cycle 0-100%.
"""

import logging
import threading
from typing import List, Optional, Tuple

from ..alerts.collaborators import Vibrator
from ..alerts.patterns import VibrationPattern, MAX_AMPLITUDE

logger = logging.getLogger(__name__)


def amplitude_to_duty_cycle(amplitude: int) -> float:
    """Map a 0-255 amplitude to a 0-100 PWM duty cycle."""
    amplitude = max(0, min(MAX_AMPLITUDE, amplitude))
    return amplitude * 100.0 / MAX_AMPLITUDE


class GPIOVibrator(Vibrator):
    """
    Vibration motor on a GPIO PWM pin.

    Features:
    - Non-blocking waveform playback in background thread
    - Loops from the pattern's repeat index until cancelled
    - Graceful fallback when GPIO unavailable

    Usage:
        vibrator = GPIOVibrator(pin=18)
        if vibrator.initialize():
            vibrator.vibrate(PULSE_PATTERN)
            # ... later
            vibrator.cancel()
            vibrator.cleanup()
    """

    def __init__(self, pin: int = 18, pwm_frequency_hz: int = 200, enabled: bool = True):
        """
        Args:
            pin: BCM GPIO pin number for the motor driver
            pwm_frequency_hz: PWM carrier frequency
            enabled: Whether the vibrator is enabled
        """
        self._pin = pin
        self._pwm_frequency_hz = pwm_frequency_hz
        self._enabled = enabled
        self._gpio = None
        self._pwm = None
        self._initialized = False

        # Playback state
        self._playing = False
        self._stop_event = threading.Event()
        self._play_thread: Optional[threading.Thread] = None

    def initialize(self) -> bool:
        """
        Initialize GPIO PWM output.

        Returns:
            True if initialization successful, False otherwise
        """
        if not self._enabled:
            logger.info("GPIO vibrator disabled by configuration")
            return False

        try:
            import RPi.GPIO as GPIO
            self._gpio = GPIO

            GPIO.setmode(GPIO.BCM)
            GPIO.setwarnings(False)
            GPIO.setup(self._pin, GPIO.OUT, initial=GPIO.LOW)

            self._pwm = GPIO.PWM(self._pin, self._pwm_frequency_hz)
            self._pwm.start(0)

            self._initialized = True
            logger.info(f"GPIO vibrator initialized on pin {self._pin}")
            return True

        except (ImportError, RuntimeError):
            logger.warning("RPi.GPIO not available - vibrator disabled")
            return False
        except Exception as e:
            logger.error(f"GPIO vibrator initialization failed: {e}")
            return False

    def has_vibrator(self) -> bool:
        return self._initialized

    def vibrate(self, pattern: VibrationPattern) -> None:
        """Play a waveform, replacing any waveform already playing."""
        if not self._initialized:
            return

        self.cancel()

        self._stop_event.clear()
        self._play_thread = threading.Thread(
            target=self._play_pattern,
            args=(pattern,),
            name="VibratorWaveform",
            daemon=True,
        )
        self._playing = True
        self._play_thread.start()

    def _play_pattern(self, pattern: VibrationPattern) -> None:
        """Play priming once, then the looping tail until stopped."""
        try:
            if self._play_segments(pattern.priming):
                return
            loop = pattern.loop
            if not loop or sum(duration for duration, _ in loop) <= 0:
                return
            while not self._play_segments(loop):
                pass
        except Exception as e:
            logger.error(f"Vibrator playback error: {e}")
        finally:
            self._set_duty(0)
            self._playing = False

    def _play_segments(self, segments: List[Tuple[int, int]]) -> bool:
        """Returns True if playback was stopped part way."""
        for duration_ms, amplitude in segments:
            if self._stop_event.is_set():
                return True
            if duration_ms <= 0:
                continue
            self._set_duty(amplitude_to_duty_cycle(amplitude))
            if self._stop_event.wait(duration_ms / 1000.0):
                return True
        return self._stop_event.is_set()

    def _set_duty(self, duty_cycle: float) -> None:
        if self._pwm is not None:
            self._pwm.ChangeDutyCycle(duty_cycle)

    def cancel(self) -> None:
        """Stop current playback and turn the motor off."""
        self._stop_event.set()

        if self._play_thread is not None and self._play_thread.is_alive():
            self._play_thread.join(timeout=0.5)
        self._play_thread = None

        if self._initialized:
            try:
                self._set_duty(0)
            except Exception as e:
                logger.warning(f"Failed to stop vibrator: {e}")

        self._playing = False

    def cleanup(self) -> None:
        """Release the PWM channel and GPIO pin."""
        self.cancel()

        if self._initialized and self._gpio is not None:
            try:
                self._pwm.stop()
                self._gpio.cleanup(self._pin)
            except Exception as e:
                logger.warning(f"GPIO vibrator cleanup warning: {e}")

        self._initialized = False
        logger.info("GPIO vibrator cleaned up")

    @property
    def is_playing(self) -> bool:
        return self._playing


class StubVibrator(Vibrator):
    """
    Stub vibrator for non-Raspberry Pi platforms.

    Logs commands instead of driving hardware and keeps them for inspection.
    """

    def __init__(self, present: bool = True):
        self._present = present
        self._playing = False
        self.commands: List[Tuple[str, Optional[str]]] = []

    def initialize(self) -> bool:
        logger.info("Stub vibrator initialized")
        return True

    def has_vibrator(self) -> bool:
        return self._present

    def vibrate(self, pattern: VibrationPattern) -> None:
        logger.debug(f"Stub vibrator: {pattern.name}")
        self.commands.append(("vibrate", pattern.name))
        self._playing = pattern.repeats

    def cancel(self) -> None:
        self.commands.append(("cancel", None))
        self._playing = False

    def cleanup(self) -> None:
        self._playing = False

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def vibrate_count(self) -> int:
        return sum(1 for command, _ in self.commands if command == "vibrate")


def create_vibrator(enabled: bool = True, pin: int = 18, pwm_frequency_hz: int = 200) -> Vibrator:
    """
    Factory function to create the vibrator.

    Returns:
        Initialized GPIOVibrator when RPi.GPIO works, StubVibrator otherwise
    """
    if not enabled:
        logger.info("GPIO vibrator disabled, using stub")
        return StubVibrator()

    vibrator = GPIOVibrator(pin=pin, pwm_frequency_hz=pwm_frequency_hz, enabled=enabled)
    if vibrator.initialize():
        return vibrator

    logger.warning("Falling back to stub vibrator")
    return StubVibrator()
