"""
Incoming-call alerting.

Provides the alert policy evaluator, vibration patterns, the audible,
haptic and torch channels, and the Ringer session controller.
"""

from .types import (
    AlertDecision,
    AlertEnvironment,
    AlertingSession,
    Call,
    RingerMode,
    RingtoneInfo,
    TorchMode,
    VolumeRamp,
)
from .patterns import (
    PatternRef,
    VibrationPattern,
    VibrationPatternLibrary,
    PULSE_PATTERN,
    SIMPLE_PATTERN,
    CALL_WAITING_PATTERN,
)
from .decision import AlertPolicyEvaluator, should_vibrate_globally
from .haptic import HapticChannel
from .audible import AudibleChannel
from .torch import TorchBlinkTask, TorchChannel, TorchState
from .ringer import Ringer

__all__ = [
    "AlertDecision",
    "AlertEnvironment",
    "AlertingSession",
    "Call",
    "RingerMode",
    "RingtoneInfo",
    "TorchMode",
    "VolumeRamp",
    "PatternRef",
    "VibrationPattern",
    "VibrationPatternLibrary",
    "PULSE_PATTERN",
    "SIMPLE_PATTERN",
    "CALL_WAITING_PATTERN",
    "AlertPolicyEvaluator",
    "should_vibrate_globally",
    "HapticChannel",
    "AudibleChannel",
    "TorchBlinkTask",
    "TorchChannel",
    "TorchState",
    "Ringer",
]
