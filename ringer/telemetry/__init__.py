"""
Diagnostics for the alerting controller.

Provides call event markers with an optional JSON Lines sink.
"""

from .events import CallEvent, CallEventLog, CallEventRecord

__all__ = [
    "CallEvent",
    "CallEventLog",
    "CallEventRecord",
]
