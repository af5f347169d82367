"""
Call event log.

Structured diagnostics markers (start/stop/skip of each alert channel) kept
in memory and optionally appended to a JSON Lines file for offline analysis.
Events are for diagnostics only; nothing in the controller reads them back.
"""

import json
import logging
import threading
from collections import deque
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from queue import Queue, Full, Empty
from typing import Deque, List, Optional

logger = logging.getLogger(__name__)


class CallEvent(Enum):
    """Diagnostics markers emitted by the controller."""
    START_RINGER = "START_RINGER"
    STOP_RINGER = "STOP_RINGER"
    SKIP_RINGING = "SKIP_RINGING"
    START_VIBRATOR = "START_VIBRATOR"
    STOP_VIBRATOR = "STOP_VIBRATOR"
    SKIP_VIBRATION = "SKIP_VIBRATION"
    START_CALL_WAITING_TONE = "START_CALL_WAITING_TONE"
    STOP_CALL_WAITING_TONE = "STOP_CALL_WAITING_TONE"


@dataclass
class CallEventRecord:
    """One event against one call."""
    timestamp: str
    call_id: Optional[str]
    event: str
    detail: str = ""

    def to_json(self) -> str:
        return json.dumps(asdict(self), separators=(',', ':'))


class CallEventLog:
    """
    Event history for alerting diagnostics.

    Features:
    - Bounded in-memory history, queryable per call
    - Optional JSON Lines sink written by a background thread
    - Never blocks or raises into the caller

    Usage:
        events = CallEventLog("call_events.jsonl")
        events.start()

        events.add_event(call, CallEvent.START_RINGER)

        events.stop()
    """

    DEFAULT_HISTORY = 500  # records
    DEFAULT_FLUSH_INTERVAL = 1.0  # seconds
    DEFAULT_MAX_QUEUE = 1000  # records

    def __init__(
        self,
        log_file: Optional[str] = None,
        history: int = DEFAULT_HISTORY,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL,
        max_queue: int = DEFAULT_MAX_QUEUE,
    ):
        """
        Args:
            log_file: Path to output .jsonl file, or None for memory only
            history: Number of records kept in memory
            flush_interval: Seconds between file flushes
            max_queue: Maximum records waiting for the writer thread
        """
        self._log_file = Path(log_file) if log_file else None
        self._flush_interval = flush_interval
        self._history: Deque[CallEventRecord] = deque(maxlen=history)
        self._history_lock = threading.Lock()

        self._queue: "Queue[CallEventRecord]" = Queue(maxsize=max_queue)
        self._writer_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        self._records_written = 0
        self._records_dropped = 0

    def add_event(self, call, event: CallEvent, detail: str = "") -> CallEventRecord:
        """
        Record an event.

        Args:
            call: Call the event refers to (may be None)
            event: Event marker
            detail: Free-form diagnostic text

        Returns:
            The stored record
        """
        call_id = getattr(call, "call_id", None)
        record = CallEventRecord(
            timestamp=datetime.now(timezone.utc).isoformat(),
            call_id=call_id,
            event=event.value,
            detail=detail,
        )

        if detail:
            logger.info(f"[{call_id}] {event.value}: {detail}")
        else:
            logger.info(f"[{call_id}] {event.value}")

        with self._history_lock:
            self._history.append(record)

        if self._log_file is not None:
            try:
                self._queue.put_nowait(record)
            except Full:
                self._records_dropped += 1

        return record

    def events_for(self, call_id: str) -> List[CallEventRecord]:
        """Return the recorded events for one call, oldest first."""
        with self._history_lock:
            return [r for r in self._history if r.call_id == call_id]

    @property
    def recent(self) -> List[CallEventRecord]:
        """All records still held in memory, oldest first."""
        with self._history_lock:
            return list(self._history)

    def clear(self) -> None:
        with self._history_lock:
            self._history.clear()

    def start(self) -> None:
        """Start the background file writer (no-op without a log file)."""
        if self._log_file is None:
            return
        if self._writer_thread is not None and self._writer_thread.is_alive():
            return

        self._stop_event.clear()
        self._writer_thread = threading.Thread(
            target=self._writer_loop,
            name="CallEventWriter",
            daemon=True,
        )
        self._writer_thread.start()
        logger.info(f"Call event log started: {self._log_file}")

    def stop(self) -> None:
        """Stop the writer and flush whatever is still queued."""
        self._stop_event.set()

        if self._writer_thread is not None:
            self._writer_thread.join(timeout=5.0)
            self._writer_thread = None

        self._flush_remaining()

        if self._log_file is not None:
            logger.info(
                f"Call event log stopped. "
                f"Written: {self._records_written}, Dropped: {self._records_dropped}"
            )

    def _writer_loop(self) -> None:
        buffer: List[str] = []

        while not self._stop_event.is_set():
            try:
                record = self._queue.get(timeout=self._flush_interval)
                buffer.append(record.to_json())
                if len(buffer) >= 100:
                    self._write_buffer(buffer)
                    buffer.clear()
            except Empty:
                if buffer:
                    self._write_buffer(buffer)
                    buffer.clear()

        if buffer:
            self._write_buffer(buffer)

    def _flush_remaining(self) -> None:
        buffer: List[str] = []
        while True:
            try:
                buffer.append(self._queue.get_nowait().to_json())
            except Empty:
                break

        if buffer:
            self._write_buffer(buffer)

    def _write_buffer(self, buffer: List[str]) -> None:
        try:
            with open(self._log_file, "a", encoding="utf-8") as f:
                for line in buffer:
                    f.write(line + "\n")
            self._records_written += len(buffer)
        except OSError as e:
            logger.error(f"Call event write error: {e}")
            self._records_dropped += len(buffer)

    @property
    def records_written(self) -> int:
        return self._records_written

    @property
    def records_dropped(self) -> int:
        return self._records_dropped

    def __enter__(self) -> "CallEventLog":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
