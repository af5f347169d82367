"""
Visual (torch) alert channel.

The blink loop is the only part of the controller with its own thread:

    IDLE -> BLINKING -> STOPPING -> IDLE
    IDLE -> UNAVAILABLE            (no flash hardware, terminal)

Stopping is cooperative. stop() only sets a cancellation token; the loop
notices it before its next torch-on toggle, so a stop can take up to one
on/off period to land. Starting a new session abandons the previous task
without joining it, and the two loops may both drive the torch for up to one
period during the handoff.
"""

import logging
import threading
from enum import Enum
from typing import Optional

from .collaborators import TorchHardware

logger = logging.getLogger(__name__)

DEFAULT_BLINK_INTERVAL_MS = 500


class TorchState(Enum):
    """Blink task lifecycle."""
    IDLE = "idle"
    BLINKING = "blinking"
    STOPPING = "stopping"
    UNAVAILABLE = "unavailable"


class TorchBlinkTask:
    """
    One blink session: torch on, wait, torch off, wait, repeat.

    Hardware errors end the loop and are logged, never raised.
    """

    def __init__(self, torch: TorchHardware, interval_ms: int = DEFAULT_BLINK_INTERVAL_MS):
        """
        Args:
            torch: Torch hardware handle, owned by this task while it runs
            interval_ms: Duration of each on and each off phase
        """
        self._torch = torch
        self._interval_s = interval_ms / 1000.0
        self._cancelled = threading.Event()
        self._state = TorchState.IDLE
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> TorchState:
        with self._lock:
            return self._state

    def _set_state(self, state: TorchState) -> None:
        with self._lock:
            self._state = state

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> bool:
        """
        Begin blinking in a background thread.

        Returns:
            True if the loop was started, False if there is no flash
        """
        if not self._torch.has_flash():
            logger.debug("No flash hardware - torch alert skipped")
            self._set_state(TorchState.UNAVAILABLE)
            return False

        self._set_state(TorchState.BLINKING)
        self._thread = threading.Thread(
            target=self._blink_loop,
            name="TorchBlink",
            daemon=True,
        )
        self._thread.start()
        return True

    def stop(self) -> None:
        """Signal the loop to end. Does not wait for it."""
        self._cancelled.set()
        with self._lock:
            if self._state == TorchState.BLINKING:
                self._state = TorchState.STOPPING

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the loop to exit. Returns True if it has finished."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _blink_loop(self) -> None:
        try:
            torch_ids = self._torch.list_available_torches()
            if not torch_ids:
                logger.debug("No torch listed - torch alert skipped")
                self._set_state(TorchState.UNAVAILABLE)
                return

            torch_id = torch_ids[0]
            while not self._cancelled.is_set():
                self._torch.set_torch(torch_id, True)
                self._cancelled.wait(self._interval_s)

                # An "on" is always followed by an "off"
                self._torch.set_torch(torch_id, False)
                self._cancelled.wait(self._interval_s)

        except Exception as e:
            logger.error(f"Torch blink failed: {e}")
        finally:
            with self._lock:
                if self._state != TorchState.UNAVAILABLE:
                    self._state = TorchState.IDLE


class TorchChannel:
    """
    Tracks the current blink task.

    Each start() creates a fresh task and abandons the previous one after
    signalling it to stop.
    """

    def __init__(self, torch: TorchHardware, interval_ms: int = DEFAULT_BLINK_INTERVAL_MS):
        self._torch = torch
        self._interval_ms = interval_ms
        self._task: Optional[TorchBlinkTask] = None

    @property
    def task(self) -> Optional[TorchBlinkTask]:
        return self._task

    @property
    def is_blinking(self) -> bool:
        return self._task is not None and self._task.state == TorchState.BLINKING

    def start(self) -> TorchBlinkTask:
        """Start a new blink session, replacing any current one."""
        previous = self._task
        self._task = TorchBlinkTask(self._torch, self._interval_ms)
        if previous is not None:
            previous.stop()
        self._task.start()
        return self._task

    def stop(self) -> None:
        """Stop the current session. Safe when nothing is blinking."""
        if self._task is not None:
            self._task.stop()
