"""Typed models for lookup service records."""

from plzsync.models.locality import (
    District,
    FederalState,
    Locality,
    Municipality,
    PostalCodeCandidate,
)

__all__ = [
    "District",
    "FederalState",
    "Locality",
    "Municipality",
    "PostalCodeCandidate",
]
