"""
Serialized announcement output.

Entry/exit announcements are queued by the frame loop and handed to an
external sink one at a time, with a fixed minimum spacing between hand-offs
regardless of how fast they arrive or how slow the sink is.

The dispatcher can be driven two ways:
- ``pump()``: perform at most one due dispatch against the injected clock.
  Tests advance a ManualClock and pump, no sleeping involved.
- ``start()``/``stop()``: a daemon thread pumps until shutdown.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional

from models.room_event import EventKind
from runtime.clock import Clock, MonotonicClock
from .text import render_announcement

AnnouncementSink = Callable[[str], None]

DEFAULT_DELAY_MS = 2000.0


@dataclass(frozen=True)
class AnnouncementItem:
    """A rendered line waiting to be spoken/displayed."""
    text: str
    kind: EventKind


class AnnouncementDispatcher:
    """
    FIFO announcement queue with a single in-flight speaker.

    Ordinals count same-kind items within the current queue session: the
    span from the first enqueue into an idle dispatcher until the queue has
    drained and the last hand-off delay has elapsed. Three entries enqueued
    back to back therefore read "A person...", "A second person...",
    "A third person..." even though the first one may already be speaking.
    """

    def __init__(
        self,
        sink: AnnouncementSink,
        clock: Optional[Clock] = None,
        delay_ms: float = DEFAULT_DELAY_MS,
    ):
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self._sink = sink
        self._clock = clock or MonotonicClock()
        self.delay_ms = delay_ms

        self._queue: Deque[AnnouncementItem] = deque()
        self._cond = threading.Condition()
        self._session_counts: Dict[EventKind, int] = {}
        self._next_allowed_at: Optional[float] = None
        self._speaking = False
        self._dispatched = 0

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # --- producer side -------------------------------------------------

    def enqueue(self, kind: EventKind) -> AnnouncementItem:
        """Render and queue an announcement. Never blocks on the sink."""
        kind = EventKind(kind)
        with self._cond:
            self._end_session_if_idle(self._clock.now_ms())
            count = self._session_counts.get(kind, 0) + 1
            self._session_counts[kind] = count
            item = AnnouncementItem(text=render_announcement(kind, count), kind=kind)
            self._queue.append(item)
            self._cond.notify_all()
        logging.debug(f"Announcement queued: {item.text!r} (pending={len(self._queue)})")
        return item

    # --- consumer side -------------------------------------------------

    def pump(self) -> Optional[AnnouncementItem]:
        """
        Dispatch the head of the queue if the speaker is free and the
        spacing delay since the previous hand-off has elapsed.

        Returns:
            The item handed to the sink, or None if nothing was due.
        """
        with self._cond:
            now = self._clock.now_ms()
            if self._speaking:
                return None
            if self._next_allowed_at is not None and now < self._next_allowed_at:
                return None
            if not self._queue:
                self._end_session_if_idle(now)
                return None

            item = self._queue.popleft()
            self._speaking = True
            # Spacing is measured from hand-off, not from sink completion.
            self._next_allowed_at = now + self.delay_ms

        try:
            self._sink(item.text)
        except Exception as e:
            logging.warning(f"Announcement sink failed for {item.text!r}: {e}")
        finally:
            with self._cond:
                self._speaking = False
                self._dispatched += 1
                self._cond.notify_all()

        logging.debug(f"Announcement dispatched: {item.text!r}")
        return item

    def start(self) -> None:
        """Start the background dispatch thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="announcement-dispatcher", daemon=True
        )
        self._thread.start()
        logging.info("Announcement dispatcher started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the dispatch thread; pending items stay queued."""
        self._stop.set()
        with self._cond:
            self._cond.notify_all()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logging.info("Announcement dispatcher stopped")

    # --- introspection -------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def dispatched_count(self) -> int:
        return self._dispatched

    def pending(self) -> List[AnnouncementItem]:
        with self._cond:
            return list(self._queue)

    def __len__(self) -> int:
        with self._cond:
            return len(self._queue)

    # --- internals -----------------------------------------------------

    def _end_session_if_idle(self, now: float) -> None:
        # Caller holds self._cond.
        if self._queue or self._speaking:
            return
        if self._next_allowed_at is not None and now < self._next_allowed_at:
            return
        self._next_allowed_at = None
        self._session_counts.clear()

    def _seconds_until_due(self) -> Optional[float]:
        # Caller holds self._cond. None means wait for a notify.
        if not self._queue:
            return None
        if self._next_allowed_at is None:
            return 0.0
        return max(0.0, (self._next_allowed_at - self._clock.now_ms()) / 1000.0)

    def _run(self) -> None:
        while not self._stop.is_set():
            self.pump()
            with self._cond:
                if self._stop.is_set():
                    break
                wait = self._seconds_until_due()
                if wait is None or wait > 0:
                    self._cond.wait(timeout=wait)
