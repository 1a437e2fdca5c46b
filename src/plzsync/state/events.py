"""Field events.

Every change to the field state is expressed as one of these events.
Only the state/store layer is allowed to fold them into a snapshot.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from plzsync.models.locality import Locality


class Direction(StrEnum):
    """Lookup direction, named after the field whose value drives it."""

    LOCALITY = "locality"
    POSTAL_CODE = "postal_code"

    @property
    def opposite(self) -> Direction:
        return Direction.POSTAL_CODE if self is Direction.LOCALITY else Direction.LOCALITY


class _FieldEvent(BaseModel):
    model_config = ConfigDict(frozen=True)


class LocalityEdited(_FieldEvent):
    """User typed into the locality field."""

    kind: Literal["locality_edited"] = "locality_edited"
    value: str


class PostalCodeEdited(_FieldEvent):
    """User typed into the postal code field."""

    kind: Literal["postal_code_edited"] = "postal_code_edited"
    value: str


class CandidateSelected(_FieldEvent):
    """User picked one postal code out of the candidate list."""

    kind: Literal["candidate_selected"] = "candidate_selected"
    postal_code: str


class LookupStarted(_FieldEvent):
    kind: Literal["lookup_started"] = "lookup_started"
    direction: Direction


class SettledBlank(_FieldEvent):
    """A field settled on a blank value; its transient lookup state is dropped."""

    kind: Literal["settled_blank"] = "settled_blank"
    direction: Direction


class LocalityResolved(_FieldEvent):
    """Name lookup finished with zero or more matching localities."""

    kind: Literal["locality_resolved"] = "locality_resolved"
    query: str
    results: tuple[Locality, ...] = ()


class PostalCodeResolved(_FieldEvent):
    """Postal code lookup finished with zero or more matching localities."""

    kind: Literal["postal_code_resolved"] = "postal_code_resolved"
    query: str
    results: tuple[Locality, ...] = ()


class LookupFailed(_FieldEvent):
    """Lookup in ``direction`` failed at the transport or parse layer."""

    kind: Literal["lookup_failed"] = "lookup_failed"
    direction: Direction
    reason: str = ""


class ResetRequested(_FieldEvent):
    kind: Literal["reset_requested"] = "reset_requested"


FieldEvent = Annotated[
    LocalityEdited
    | PostalCodeEdited
    | CandidateSelected
    | LookupStarted
    | SettledBlank
    | LocalityResolved
    | PostalCodeResolved
    | LookupFailed
    | ResetRequested,
    Field(discriminator="kind"),
]
