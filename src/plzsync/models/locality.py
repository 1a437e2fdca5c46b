"""Locality records returned by the OpenPLZ ``/Localities`` endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from plzsync.models._base import PlzBaseModel


class Municipality(PlzBaseModel):
    """Municipality (Gemeinde) a locality belongs to."""

    key: str | None = None
    name: str | None = None
    type: str | None = None


class District(PlzBaseModel):
    """District (Kreis) a locality belongs to."""

    key: str | None = None
    name: str | None = None


class FederalState(PlzBaseModel):
    """Federal state (Bundesland) a locality belongs to."""

    key: str | None = None
    name: str | None = None


class Locality(PlzBaseModel):
    """A single ``{postalCode, name}`` record from the lookup service.

    Parameters
    ----------
    postal_code : str
        German postal code (PLZ).
    name : str
        Locality name.
    municipality : Municipality or None
        Owning municipality, when the service reports one.
    district : District or None
        Owning district, when the service reports one.
    federal_state : FederalState or None
        Owning federal state, when the service reports one.
    """

    postal_code: str
    name: str
    municipality: Municipality | None = None
    district: District | None = None
    federal_state: FederalState | None = None

    @field_validator("postal_code", "name", mode="before")
    @classmethod
    def _coerce_str(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class PostalCodeCandidate(BaseModel):
    """One postal code offered for an ambiguous locality."""

    model_config = ConfigDict(frozen=True)

    postal_code: str
    name: str

    @classmethod
    def from_locality(cls, locality: Locality) -> PostalCodeCandidate:
        return cls(postal_code=locality.postal_code, name=locality.name)
