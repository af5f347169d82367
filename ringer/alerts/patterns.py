"""
Vibration pattern library.

Waveforms are (duration_ms, amplitude) sequences with a repeat index marking
where looping resumes. Amplitudes run from 0 (off) to 255 (full strength).
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

MAX_AMPLITUDE = 255

# repeat_index value for patterns that play once
NO_REPEAT = -1


class PatternRef(Enum):
    """Named patterns the controller can ask for."""
    DEFAULT = "default"
    CALL_WAITING = "call_waiting"


@dataclass(frozen=True)
class VibrationPattern:
    """
    Timed amplitude waveform.

    When amplitudes is None the pattern has binary on/off semantics: even
    entries are off periods, odd entries are on periods at full amplitude.
    """
    name: str
    timings_ms: Tuple[int, ...]
    amplitudes: Optional[Tuple[int, ...]] = None
    repeat_index: int = NO_REPEAT

    def __post_init__(self):
        if not self.timings_ms:
            raise ValueError(f"Pattern {self.name!r} has no timings")
        if self.repeat_index >= len(self.timings_ms) or self.repeat_index < NO_REPEAT:
            raise ValueError(
                f"Pattern {self.name!r}: repeat_index {self.repeat_index} out of range "
                f"for {len(self.timings_ms)} entries"
            )
        if any(t < 0 for t in self.timings_ms):
            raise ValueError(f"Pattern {self.name!r} has negative timings")
        if self.amplitudes is not None:
            if len(self.amplitudes) != len(self.timings_ms):
                raise ValueError(f"Pattern {self.name!r}: timings/amplitudes length mismatch")
            if any(a < 0 or a > MAX_AMPLITUDE for a in self.amplitudes):
                raise ValueError(f"Pattern {self.name!r}: amplitude outside 0-{MAX_AMPLITUDE}")

    @property
    def repeats(self) -> bool:
        return self.repeat_index != NO_REPEAT

    def segments(self) -> List[Tuple[int, int]]:
        """Expand to (duration_ms, amplitude) pairs."""
        if self.amplitudes is not None:
            return list(zip(self.timings_ms, self.amplitudes))
        return [
            (duration, MAX_AMPLITUDE if i % 2 else 0)
            for i, duration in enumerate(self.timings_ms)
        ]

    @property
    def priming(self) -> List[Tuple[int, int]]:
        """Segments played once before the looping tail."""
        if not self.repeats:
            return self.segments()
        return self.segments()[:self.repeat_index]

    @property
    def loop(self) -> List[Tuple[int, int]]:
        """Segments that repeat until cancelled (empty for one-shot patterns)."""
        if not self.repeats:
            return []
        return self.segments()[self.repeat_index:]


# Priming buzzes, then a 14-step ease-in (min amplitude ~30%), a peak and a
# pause. Looping resumes at the ease-in so the priming only plays once.
PULSE_PATTERN = VibrationPattern(
    name="pulse",
    timings_ms=(
        0, 12, 250, 12, 500,
        50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50,
        300,
        1000,
    ),
    amplitudes=(
        0, 255, 0, 255, 0,
        77, 77, 78, 79, 81, 84, 87, 93, 101, 114, 133, 162, 205, 255,
        255,
        0,
    ),
    repeat_index=5,
)

SIMPLE_PATTERN = VibrationPattern(
    name="simple",
    timings_ms=(0, 1000, 1000),
    amplitudes=(0, 255, 0),
    repeat_index=1,
)

# off 200ms, on 300ms, off 500ms; played once per call-waiting start
CALL_WAITING_PATTERN = VibrationPattern(
    name="call_waiting",
    timings_ms=(200, 300, 500),
)


class VibrationPatternLibrary:
    """
    Resolves pattern references.

    The default ringing pattern is chosen once at construction and never
    re-evaluated per call.
    """

    def __init__(self, use_simple_pattern: bool = False):
        self._default = SIMPLE_PATTERN if use_simple_pattern else PULSE_PATTERN

    @property
    def default(self) -> VibrationPattern:
        return self._default

    @property
    def call_waiting(self) -> VibrationPattern:
        return CALL_WAITING_PATTERN

    def resolve(self, ref: PatternRef) -> VibrationPattern:
        """Return the waveform for a pattern reference."""
        if ref == PatternRef.CALL_WAITING:
            return CALL_WAITING_PATTERN
        return self._default
