"""Settle-time lookup policy.

Pure decision logic: given a settled field value, the last value that
direction was looked up for and whether the opposite direction is busy,
decide what the engine does next.  No I/O here.
"""

from __future__ import annotations

import dataclasses
from enum import StrEnum

from plzsync.state.events import Direction


class LookupDecision(StrEnum):
    ISSUE = "issue"
    CLEAR_BLANK = "clear_blank"
    SKIP_DUPLICATE = "skip_duplicate"
    SKIP_OPPOSITE_LOADING = "skip_opposite_loading"


@dataclasses.dataclass
class LastResolvedRef:
    """Last input value each direction's lookup actually ran for.

    Used only for deduplication; never shown to the user.
    """

    locality: str = ""
    postal_code: str = ""

    def get(self, direction: Direction) -> str:
        return self.locality if direction is Direction.LOCALITY else self.postal_code

    def set(self, direction: Direction, value: str) -> None:
        if direction is Direction.LOCALITY:
            self.locality = value
        else:
            self.postal_code = value

    def clear(self, direction: Direction | None = None) -> None:
        """Clear one direction, or both when ``direction`` is ``None``."""
        if direction is None or direction is Direction.LOCALITY:
            self.locality = ""
        if direction is None or direction is Direction.POSTAL_CODE:
            self.postal_code = ""


def decide_lookup(*, value: str, last_resolved: str, opposite_loading: bool) -> LookupDecision:
    """Decide what a settled value triggers.

    Policy:
    - Blank values never hit the network; the direction's lookup state is cleared.
    - A value equal to the last looked-up one is a duplicate.
    - While the opposite direction is loading the settle is dropped, not retried.
    """
    if not value.strip():
        return LookupDecision.CLEAR_BLANK
    if value == last_resolved:
        return LookupDecision.SKIP_DUPLICATE
    if opposite_loading:
        return LookupDecision.SKIP_OPPOSITE_LOADING
    return LookupDecision.ISSUE
