# src/nlp/scheduling.py
"""Deferred task scheduling with explicit cancellation tokens.

``AsyncioScheduler`` runs callbacks on an event loop after a real delay.
``ManualScheduler`` keeps a virtual clock that tests advance by hand.
"""
import asyncio
import heapq
import itertools
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class CancellationToken:
    """Handle for one scheduled task"""

    _ids = itertools.count(1)

    def __init__(self, label: Optional[str] = None):
        self.id = next(self._ids)
        self.label = label
        self._cancelled = False
        self._done = False
        self._cancel_callbacks: List[Callable[[], None]] = []

    def __repr__(self):
        state = "cancelled" if self._cancelled else "done" if self._done else "pending"
        return f"<CancellationToken {self.id} {self.label or ''} {state}>"

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    def add_cancel_callback(self, callback: Callable[[], None]):
        if self._cancelled:
            callback()
        else:
            self._cancel_callbacks.append(callback)

    def cancel(self) -> bool:
        """Cancel the task; returns False when it already ran or was cancelled"""
        if self._cancelled or self._done:
            return False
        self._cancelled = True
        callbacks, self._cancel_callbacks = self._cancel_callbacks, []
        for callback in callbacks:
            callback()
        return True

    def mark_done(self):
        self._done = True
        self._cancel_callbacks = []


class Scheduler:
    """Runs a callback once after a fixed delay"""

    def schedule(self, delay_ms: float, callback: Callable[[], None],
                 label: Optional[str] = None) -> CancellationToken:
        raise NotImplementedError

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def _run(token: CancellationToken, callback: Callable[[], None]):
    if token.cancelled:
        return
    token.mark_done()
    callback()


class AsyncioScheduler(Scheduler):
    """Schedules callbacks with ``loop.call_later``"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def schedule(self, delay_ms, callback, label=None):
        token = CancellationToken(label)
        handle = self.loop.call_later(delay_ms / 1000.0, _run, token, callback)
        token.add_cancel_callback(handle.cancel)
        return token


class ManualScheduler(Scheduler):
    """Virtual-clock scheduler; nothing runs until ``advance`` is called"""

    def __init__(self, start: Optional[datetime] = None):
        self._start = start or datetime(2024, 1, 15, tzinfo=timezone.utc)
        self._elapsed_ms = 0.0
        self._queue = []
        self._sequence = itertools.count()

    @property
    def elapsed_ms(self) -> float:
        return self._elapsed_ms

    @property
    def pending(self) -> int:
        return sum(1 for _, _, token, _ in self._queue if not token.cancelled)

    def now(self) -> datetime:
        return self._start + timedelta(milliseconds=self._elapsed_ms)

    def schedule(self, delay_ms, callback, label=None):
        token = CancellationToken(label)
        due = self._elapsed_ms + max(0.0, float(delay_ms))
        heapq.heappush(self._queue, (due, next(self._sequence), token, callback))
        return token

    def advance(self, delay_ms: float) -> int:
        """Move the clock forward, running every task that falls due; returns tasks run"""
        target = self._elapsed_ms + delay_ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, token, callback = heapq.heappop(self._queue)
            self._elapsed_ms = max(self._elapsed_ms, due)
            if token.cancelled:
                continue
            _run(token, callback)
            ran += 1
        self._elapsed_ms = target
        return ran

    def run_all(self) -> int:
        """Advance until the queue is empty, including tasks scheduled while running"""
        ran = 0
        while self._queue:
            ran += self.advance(self._queue[0][0] - self._elapsed_ms)
        return ran
