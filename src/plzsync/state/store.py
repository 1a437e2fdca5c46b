"""Field state store.

This is the only component allowed to replace the field state.  Every
write merges a partial update over the previous snapshot, so fields not
named in the update always keep their value.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from plzsync._constants import (
    LOCALITY_LOOKUP_FAILED,
    LOCALITY_NOT_FOUND,
    POSTAL_CODE_LOOKUP_FAILED,
    POSTAL_CODE_NOT_FOUND,
)
from plzsync.models.locality import PostalCodeCandidate
from plzsync.state.events import (
    CandidateSelected,
    Direction,
    FieldEvent,
    LocalityEdited,
    LocalityResolved,
    LookupFailed,
    LookupStarted,
    PostalCodeEdited,
    PostalCodeResolved,
    ResetRequested,
    SettledBlank,
)

_logger = logging.getLogger(__name__)

StateListener = Callable[["FieldState", "FieldState"], None]


class FieldState(BaseModel):
    """Snapshot of both address fields and their lookup status."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    locality: str = ""
    postal_code: str = ""
    candidates: tuple[PostalCodeCandidate, ...] = ()
    locality_loading: bool = False
    postal_code_loading: bool = False
    locality_error: str = ""
    postal_code_error: str = ""
    show_candidates: bool = False

    @model_validator(mode="after")
    def _check_candidates(self) -> FieldState:
        if len(self.candidates) == 1:
            raise ValueError("a single candidate must be resolved into postal_code")
        if self.show_candidates != (len(self.candidates) > 1):
            raise ValueError("show_candidates must be true exactly when there are several candidates")
        return self

    def value(self, direction: Direction) -> str:
        return self.locality if direction is Direction.LOCALITY else self.postal_code

    def loading(self, direction: Direction) -> bool:
        return self.locality_loading if direction is Direction.LOCALITY else self.postal_code_loading

    def error(self, direction: Direction) -> str:
        return self.locality_error if direction is Direction.LOCALITY else self.postal_code_error

    @property
    def is_validated(self) -> bool:
        """Both fields filled in and neither carries an error."""
        return bool(self.locality and self.postal_code and not self.locality_error and not self.postal_code_error)

    @property
    def has_input(self) -> bool:
        return bool(self.locality or self.postal_code)

    @property
    def locality_input_enabled(self) -> bool:
        return not self.postal_code_loading

    @property
    def postal_code_input_enabled(self) -> bool:
        return not self.locality_loading


_FIELD_NAMES = frozenset(FieldState.model_fields)

_LOADING_FIELD = {Direction.LOCALITY: "locality_loading", Direction.POSTAL_CODE: "postal_code_loading"}
_ERROR_FIELD = {Direction.LOCALITY: "locality_error", Direction.POSTAL_CODE: "postal_code_error"}
_FAILURE_MESSAGE = {Direction.LOCALITY: LOCALITY_LOOKUP_FAILED, Direction.POSTAL_CODE: POSTAL_CODE_LOOKUP_FAILED}

_NO_CANDIDATES: dict[str, Any] = {"candidates": (), "show_candidates": False}


def merge(state: FieldState, **partial: Any) -> FieldState:
    """Return ``state`` with ``partial`` merged over it."""
    unknown = set(partial) - _FIELD_NAMES
    if unknown:
        raise ValueError(f"Unknown field state keys: {sorted(unknown)}")
    if not partial:
        return state
    if "candidates" in partial:
        requested_show = partial.get("show_candidates")
        partial = {**partial, **_candidates_patch(partial["candidates"])}
        if requested_show is not None and requested_show != partial["show_candidates"]:
            raise ValueError("show_candidates disagrees with the number of candidates")
    elif "show_candidates" in partial and partial["show_candidates"] != (len(state.candidates) > 1):
        raise ValueError("show_candidates disagrees with the number of candidates")
    return state.model_copy(update=partial)


def _candidates_patch(candidates: Iterable[PostalCodeCandidate]) -> dict[str, Any]:
    items = tuple(candidates)
    if len(items) == 1:
        # A single candidate is never offered for selection.
        return {"postal_code": items[0].postal_code, **_NO_CANDIDATES}
    return {"candidates": items, "show_candidates": len(items) > 1}


def _locality_resolved(state: FieldState, event: LocalityResolved) -> FieldState:
    results = event.results
    if not results:
        return merge(state, locality_loading=False, locality_error=LOCALITY_NOT_FOUND, **_NO_CANDIDATES)
    if len(results) == 1:
        return merge(
            state,
            locality_loading=False,
            postal_code=results[0].postal_code,
            locality_error="",
            **_NO_CANDIDATES,
        )
    return merge(
        state,
        locality_loading=False,
        locality_error="",
        **_candidates_patch(PostalCodeCandidate.from_locality(item) for item in results),
    )


def _postal_code_resolved(state: FieldState, event: PostalCodeResolved) -> FieldState:
    if not event.results:
        return merge(state, postal_code_loading=False, postal_code_error=POSTAL_CODE_NOT_FOUND, locality="")
    # Only the first record is authoritative for a postal code.
    return merge(
        state,
        postal_code_loading=False,
        locality=event.results[0].name,
        postal_code_error="",
        **_NO_CANDIDATES,
    )


def _lookup_failed(state: FieldState, event: LookupFailed) -> FieldState:
    patch: dict[str, Any] = {
        _LOADING_FIELD[event.direction]: False,
        _ERROR_FIELD[event.direction]: _FAILURE_MESSAGE[event.direction],
    }
    if event.direction is Direction.LOCALITY:
        patch.update(_NO_CANDIDATES)
    return merge(state, **patch)


def _settled_blank(state: FieldState, event: SettledBlank) -> FieldState:
    if event.direction is Direction.LOCALITY:
        return merge(state, locality_error="", **_NO_CANDIDATES)
    return merge(state, postal_code_error="")


def transition(state: FieldState, event: FieldEvent) -> FieldState:
    """Fold a single event into ``state``; pure, no side effects."""
    if isinstance(event, LocalityEdited):
        return merge(state, locality=event.value, locality_error="")
    if isinstance(event, PostalCodeEdited):
        return merge(state, postal_code=event.value, postal_code_error="", **_NO_CANDIDATES)
    if isinstance(event, CandidateSelected):
        return merge(state, postal_code=event.postal_code, **_NO_CANDIDATES)
    if isinstance(event, LookupStarted):
        return merge(state, **{_LOADING_FIELD[event.direction]: True, _ERROR_FIELD[event.direction]: ""})
    if isinstance(event, SettledBlank):
        return _settled_blank(state, event)
    if isinstance(event, LocalityResolved):
        return _locality_resolved(state, event)
    if isinstance(event, PostalCodeResolved):
        return _postal_code_resolved(state, event)
    if isinstance(event, LookupFailed):
        return _lookup_failed(state, event)
    if isinstance(event, ResetRequested):
        return FieldState()
    raise TypeError(f"Unsupported field event: {type(event).__name__}")


class FieldStateStore:
    """In-memory holder of the current :class:`FieldState`.

    Listeners registered with :meth:`subscribe` are called with
    ``(old, new)`` after every write that changes the snapshot.
    """

    def __init__(self, initial: FieldState | None = None) -> None:
        self._state = initial or FieldState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> FieldState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _replace(self, new: FieldState) -> FieldState:
        old = self._state
        if new == old:
            return old
        self._state = new
        for listener in list(self._listeners):
            try:
                listener(old, new)
            except Exception:
                _logger.exception("State listener %r failed", listener)
        return new

    def update(self, **partial: Any) -> FieldState:
        return self._replace(merge(self._state, **partial))

    def apply(self, event: FieldEvent) -> FieldState:
        _logger.debug("Applying %s", event.kind)
        return self._replace(transition(self._state, event))

    def set_locality(self, value: str) -> FieldState:
        return self.update(locality=value)

    def set_postal_code(self, value: str) -> FieldState:
        return self.update(postal_code=value)

    def set_candidates(self, candidates: Iterable[PostalCodeCandidate]) -> FieldState:
        """Store candidates, keeping ``show_candidates`` in step with their count."""
        return self.update(**_candidates_patch(candidates))

    def set_loading(self, direction: Direction, loading: bool) -> FieldState:
        return self.update(**{_LOADING_FIELD[direction]: loading})

    def set_error(self, direction: Direction, message: str) -> FieldState:
        return self.update(**{_ERROR_FIELD[direction]: message})

    def reset(self) -> FieldState:
        return self._replace(FieldState())
