"""Cancelable delayed callbacks and per-field debouncing."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

_logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Schedule ``callback`` after ``delay`` seconds; the handle cancels it."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class LoopScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class Debouncer:
    """Single-slot debounce timer for one field.

    Every :meth:`trigger` cancels the pending timer (if any) and arms a new
    one; ``on_settled`` only runs once ``delay`` passes without a further
    trigger.  At most one timer is pending at any time.
    """

    def __init__(
        self,
        name: str,
        delay: float,
        scheduler: Scheduler,
        on_settled: Callable[[str], None],
    ) -> None:
        self._name = name
        self._delay = delay
        self._scheduler = scheduler
        self._on_settled = on_settled
        self._handle: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, value: str) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(self._delay, lambda: self._fire(value))

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, value: str) -> None:
        self._handle = None
        _logger.debug("%s settled on %r", self._name, value)
        self._on_settled(value)
