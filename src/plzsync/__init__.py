"""plzsync - Keep a German locality and postal code consistent via OpenPLZ lookups."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("plzsync")
except PackageNotFoundError:
    __version__ = "0+local"
from plzsync.client import LookupService, PlzClient
from plzsync.config import PlzConfig
from plzsync.engine import SyncEngine
from plzsync.exceptions import PlzConfigError, PlzError, PlzTransportError
from plzsync.models import (
    District,
    FederalState,
    Locality,
    Municipality,
    PostalCodeCandidate,
)
from plzsync.state.events import Direction
from plzsync.state.policy import LastResolvedRef
from plzsync.state.store import FieldState, FieldStateStore

__all__ = [
    "__version__",
    "Direction",
    "District",
    "FederalState",
    "FieldState",
    "FieldStateStore",
    "LastResolvedRef",
    "Locality",
    "LookupService",
    "Municipality",
    "PlzClient",
    "PlzConfig",
    "PlzConfigError",
    "PlzError",
    "PlzTransportError",
    "PostalCodeCandidate",
    "SyncEngine",
]
