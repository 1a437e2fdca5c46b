"""Bidirectional locality / postal code synchronization engine."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from plzsync._scheduler import Debouncer, LoopScheduler, Scheduler
from plzsync.client import LookupService
from plzsync.config import PlzConfig
from plzsync.exceptions import PlzError
from plzsync.state.events import (
    CandidateSelected,
    Direction,
    LocalityEdited,
    LocalityResolved,
    LookupFailed,
    LookupStarted,
    PostalCodeEdited,
    PostalCodeResolved,
    ResetRequested,
    SettledBlank,
)
from plzsync.state.policy import LastResolvedRef, LookupDecision, decide_lookup
from plzsync.state.store import FieldState, FieldStateStore, StateListener

_logger = logging.getLogger(__name__)


class SyncEngine:
    """Keeps a locality field and a postal code field consistent.

    Field edits update the store immediately; lookups are triggered only
    once a field's value has been stable for the debounce delay.  The
    engine deduplicates repeat lookups, refuses to start a lookup while
    the opposite direction is loading and folds every lookup outcome into
    the store.

    Usage::

        async with PlzClient() as client, SyncEngine(client) as engine:
            engine.set_locality("Berlin")
            await asyncio.sleep(1.1)
            await engine.wait_idle()
            print(engine.state.postal_code)
    """

    def __init__(
        self,
        lookup: LookupService,
        *,
        config: PlzConfig | None = None,
        scheduler: Scheduler | None = None,
        store: FieldStateStore | None = None,
        on_state_change: StateListener | None = None,
    ) -> None:
        self._lookup = lookup
        self._config = config or PlzConfig()
        self._store = store or FieldStateStore()
        self._last_resolved = LastResolvedRef()
        self._tasks: set[asyncio.Task[None]] = set()
        # Bumped on reset so responses to earlier lookups are dropped.
        self._epoch = 0

        scheduler = scheduler or LoopScheduler()
        delay = self._config.debounce_delay
        self._debouncers: dict[Direction, Debouncer] = {
            direction: Debouncer(
                direction.value,
                delay,
                scheduler,
                lambda value, direction=direction: self.settle(direction, value),
            )
            for direction in Direction
        }

        self._store.subscribe(self._on_store_change)
        if on_state_change is not None:
            self._store.subscribe(on_state_change)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SyncEngine:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Cancel pending debounce timers and in-flight lookups."""
        for debouncer in self._debouncers.values():
            debouncer.cancel()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> FieldState:
        return self._store.state

    @property
    def store(self) -> FieldStateStore:
        return self._store

    @property
    def last_resolved(self) -> LastResolvedRef:
        """Copy of the deduplication references."""
        return LastResolvedRef(
            locality=self._last_resolved.locality,
            postal_code=self._last_resolved.postal_code,
        )

    @property
    def busy(self) -> bool:
        """Whether a timer is pending or a lookup is in flight."""
        return bool(self._tasks) or any(d.pending for d in self._debouncers.values())

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self._store.subscribe(listener)

    async def wait_idle(self) -> None:
        """Wait until every in-flight lookup has been applied or cancelled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # UI events
    # ------------------------------------------------------------------

    def field_changed(self, direction: Direction, value: str) -> None:
        """A user edit of one field."""
        self._last_resolved.clear(direction)
        if direction is Direction.LOCALITY:
            self._store.apply(LocalityEdited(value=value))
        else:
            self._store.apply(PostalCodeEdited(value=value))

    def set_locality(self, value: str) -> None:
        self.field_changed(Direction.LOCALITY, value)

    def set_postal_code(self, value: str) -> None:
        self.field_changed(Direction.POSTAL_CODE, value)

    def candidate_selected(self, postal_code: str) -> None:
        """The user picked one of the offered postal codes.

        No lookup is issued here; the postal code settles through the
        regular debounce path.
        """
        self._last_resolved.clear(Direction.POSTAL_CODE)
        self._store.apply(CandidateSelected(postal_code=postal_code))

    def reset(self) -> None:
        """Return to the empty initial state and drop pending timers."""
        self._epoch += 1
        self._last_resolved.clear()
        self._store.apply(ResetRequested())
        for debouncer in self._debouncers.values():
            debouncer.cancel()

    # ------------------------------------------------------------------
    # Settling and lookups
    # ------------------------------------------------------------------

    def _on_store_change(self, old: FieldState, new: FieldState) -> None:
        for direction in Direction:
            if old.value(direction) != new.value(direction):
                self._debouncers[direction].trigger(new.value(direction))

    def settle(self, direction: Direction, value: str) -> None:
        """Handle a settled field value.

        Normally invoked by the debounce timer; callers with their own
        settle trigger (e.g. focus loss) may call it directly.
        """
        decision = decide_lookup(
            value=value,
            last_resolved=self._last_resolved.get(direction),
            opposite_loading=self._store.state.loading(direction.opposite),
        )
        if decision is LookupDecision.CLEAR_BLANK:
            self._last_resolved.clear(direction)
            self._store.apply(SettledBlank(direction=direction))
            return
        if decision is not LookupDecision.ISSUE:
            _logger.debug("Not looking up %s %r: %s", direction, value, decision)
            return

        self._last_resolved.set(direction, value)
        self._store.apply(LookupStarted(direction=direction))
        task = asyncio.get_running_loop().create_task(self._run_lookup(direction, value, self._epoch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_lookup(self, direction: Direction, value: str, epoch: int) -> None:
        try:
            if direction is Direction.LOCALITY:
                results = await self._lookup.find_by_name(value)
            else:
                results = await self._lookup.find_by_postal_code(value)
        except PlzError as exc:
            if epoch != self._epoch:
                _logger.debug("Dropping failed %s lookup for %r issued before reset", direction, value)
                return
            _logger.warning("%s lookup for %r failed: %s", direction, value, exc)
            self._store.apply(LookupFailed(direction=direction, reason=str(exc)))
            return
        except Exception as exc:
            if epoch != self._epoch:
                return
            _logger.exception("Unexpected error in %s lookup for %r", direction, value)
            self._store.apply(LookupFailed(direction=direction, reason=repr(exc)))
            return

        if epoch != self._epoch:
            _logger.debug("Dropping %s lookup result for %r issued before reset", direction, value)
            return

        if direction is Direction.LOCALITY:
            if len(results) == 1:
                # The auto-filled postal code must not trigger a reverse lookup.
                self._last_resolved.set(Direction.POSTAL_CODE, results[0].postal_code)
            self._store.apply(LocalityResolved(query=value, results=tuple(results)))
        else:
            if results:
                self._last_resolved.set(Direction.LOCALITY, results[0].name)
            self._store.apply(PostalCodeResolved(query=value, results=tuple(results)))
