"""Custom exception hierarchy for plzsync."""

from __future__ import annotations


class PlzError(Exception):
    """Base exception for all plzsync errors."""


class PlzConfigError(PlzError):
    """Invalid or missing configuration."""


class PlzTransportError(PlzError):
    """Lookup failure (network, non-200, invalid JSON, unexpected payload)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
