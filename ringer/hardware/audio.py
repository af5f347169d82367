"""
pygame ringtone and in-call tone players.

Ringtones are played from file with an optional linear volume ramp. In-call
tones are synthesized with numpy. When pygame is missing or the mixer cannot
be opened the players keep their timing and state but produce no sound.
"""

import logging
import threading
import time
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..alerts.collaborators import RingtonePlayer, TonePlayer, TonePlayerFactory, ToneKind
from ..alerts.types import RingtoneInfo, VolumeRamp

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100

# Format: [(frequency_hz, duration_ms), ...], 0 Hz is silence. Loops until stopped.
TONE_PATTERNS: Dict[ToneKind, List[Tuple[int, int]]] = {
    ToneKind.CALL_WAITING: [
        (440, 300), (0, 9700),
        (440, 100), (0, 100), (440, 100), (0, 9700),
    ],
}

RAMP_STEP_S = 0.1


def synthesize_tone(frequency: int, duration_ms: int, sample_rate: int = DEFAULT_SAMPLE_RATE) -> np.ndarray:
    """
    Generate a mono 16-bit sine tone.

    A 10ms fade in/out avoids clicks. A frequency of 0 yields silence.
    """
    duration_s = duration_ms / 1000.0
    n_samples = int(sample_rate * duration_s)
    if n_samples <= 0:
        return np.zeros(0, dtype=np.int16)
    if frequency <= 0:
        return np.zeros(n_samples, dtype=np.int16)

    t = np.arange(n_samples, dtype=np.float32) / sample_rate
    wave = np.sin(2 * np.pi * frequency * t)

    fade_samples = int(sample_rate * 0.01)
    if fade_samples > 0 and n_samples > 2 * fade_samples:
        wave[:fade_samples] *= np.linspace(0, 1, fade_samples, dtype=np.float32)
        wave[-fade_samples:] *= np.linspace(1, 0, fade_samples, dtype=np.float32)

    return (wave * 32767).astype(np.int16)


def ramp_volume(ramp: VolumeRamp, elapsed_s: float) -> float:
    """Volume at a point in a linear ramp from start_volume to 1.0."""
    if not ramp.is_ramping:
        return 1.0
    progress = min(1.0, max(0.0, elapsed_s * 1000.0 / ramp.ramp_ms))
    start = max(0.0, min(1.0, ramp.start_volume))
    return start + (1.0 - start) * progress


def init_mixer(enabled: bool = True, sample_rate: int = DEFAULT_SAMPLE_RATE):
    """
    Open the pygame mixer.

    Returns:
        The pygame module, or None if audio is disabled or unavailable
    """
    if not enabled:
        logger.info("Audio output disabled by configuration")
        return None

    try:
        import pygame
        if not pygame.mixer.get_init():
            pygame.mixer.pre_init(frequency=sample_rate, size=-16, channels=1, buffer=512)
            pygame.mixer.init()
        return pygame
    except Exception as e:
        logger.warning(f"pygame mixer not available - audio muted: {e}")
        return None


class PygameRingtonePlayer(RingtonePlayer):
    """
    Loops a ringtone file on a pygame channel.

    Features:
    - Non-blocking playback
    - Increasing-ring volume ramp in a background thread
    """

    def __init__(self, pygame_module=None):
        self._pygame = pygame_module
        self._sound = None
        self._stop_event = threading.Event()
        self._ramp_thread: Optional[threading.Thread] = None
        self._playing = False
        self.current_uri: Optional[str] = None

    def play(self, ringtone: RingtoneInfo, ramp: VolumeRamp) -> None:
        self.stop()

        if not ringtone.present or not ringtone.uri:
            logger.debug("No ringtone to play")
            return

        self.current_uri = ringtone.uri
        self._playing = True

        if self._pygame is None:
            logger.info(f"Ringtone (muted): {ringtone.uri}")
            return

        try:
            self._sound = self._pygame.mixer.Sound(ringtone.uri)
            self._sound.set_volume(ramp_volume(ramp, 0.0))
            self._sound.play(loops=-1)
        except Exception as e:
            logger.error(f"Ringtone playback failed: {e}")
            self._sound = None
            self._playing = False
            return

        if ramp.is_ramping:
            self._stop_event.clear()
            self._ramp_thread = threading.Thread(
                target=self._ramp_loop,
                args=(ramp,),
                name="RingtoneRamp",
                daemon=True,
            )
            self._ramp_thread.start()

    def _ramp_loop(self, ramp: VolumeRamp) -> None:
        started = time.monotonic()
        while not self._stop_event.wait(RAMP_STEP_S):
            elapsed = time.monotonic() - started
            sound = self._sound
            if sound is None:
                return
            sound.set_volume(ramp_volume(ramp, elapsed))
            if elapsed * 1000.0 >= ramp.ramp_ms:
                return

    def stop(self) -> None:
        self._stop_event.set()
        if self._ramp_thread is not None and self._ramp_thread.is_alive():
            self._ramp_thread.join(timeout=0.5)
        self._ramp_thread = None

        if self._sound is not None:
            try:
                self._sound.stop()
            except Exception as e:
                logger.warning(f"Ringtone stop failed: {e}")
            self._sound = None

        self._playing = False
        self.current_uri = None

    @property
    def is_playing(self) -> bool:
        return self._playing


class PygameTonePlayer(TonePlayer):
    """Loops one in-call tone pattern in a background thread."""

    def __init__(self, kind: ToneKind, pygame_module=None, sample_rate: int = DEFAULT_SAMPLE_RATE):
        self.kind = kind
        self._pattern = TONE_PATTERNS.get(kind, [(440, 200)])
        self._pygame = pygame_module
        self._sample_rate = sample_rate
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start_tone(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._play_loop,
            name=f"Tone-{self.kind.value}",
            daemon=True,
        )
        self._thread.start()

    def _play_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                for frequency, duration_ms in self._pattern:
                    if self._stop_event.is_set():
                        break
                    if frequency > 0 and self._pygame is not None:
                        self._play_segment(frequency, duration_ms)
                    else:
                        self._stop_event.wait(duration_ms / 1000.0)
        except Exception as e:
            logger.error(f"Tone playback error: {e}")

    def _play_segment(self, frequency: int, duration_ms: int) -> None:
        wave = synthesize_tone(frequency, duration_ms, self._sample_rate)
        sound = self._pygame.sndarray.make_sound(wave)
        sound.play()
        self._stop_event.wait(duration_ms / 1000.0)
        sound.stop()

    def stop_tone(self) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=0.5)
        self._thread = None

    @property
    def is_playing(self) -> bool:
        return self._thread is not None and self._thread.is_alive()


class PygameTonePlayerFactory(TonePlayerFactory):
    """Creates tone players sharing one pygame mixer."""

    def __init__(self, pygame_module=None, sample_rate: int = DEFAULT_SAMPLE_RATE):
        self._pygame = pygame_module
        self._sample_rate = sample_rate
        self.created: List[PygameTonePlayer] = []

    def create_player(self, kind: ToneKind) -> PygameTonePlayer:
        player = PygameTonePlayer(kind, self._pygame, self._sample_rate)
        self.created.append(player)
        return player
