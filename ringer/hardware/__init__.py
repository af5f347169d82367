"""Hardware adapters: GPIO vibrator and torch, pygame audio players."""

from .vibrator import GPIOVibrator, StubVibrator, create_vibrator
from .torch import GPIOTorch, StubTorch, create_torch
from .audio import (
    PygameRingtonePlayer,
    PygameTonePlayer,
    PygameTonePlayerFactory,
    init_mixer,
    synthesize_tone,
)

__all__ = [
    "GPIOVibrator",
    "StubVibrator",
    "create_vibrator",
    "GPIOTorch",
    "StubTorch",
    "create_torch",
    "PygameRingtonePlayer",
    "PygameTonePlayer",
    "PygameTonePlayerFactory",
    "init_mixer",
    "synthesize_tone",
]
