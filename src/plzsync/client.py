"""High-level async client for the OpenPLZ locality lookup service."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import aiohttp

from plzsync._api import localities as _localities_api
from plzsync._transport import HttpTransport, Transport
from plzsync.config import PlzConfig
from plzsync.exceptions import PlzError
from plzsync.models.locality import Locality

_logger = logging.getLogger(__name__)


class LookupService(Protocol):
    """The two lookups the synchronization engine depends on.

    Both return records in server order and raise
    :class:`~plzsync.exceptions.PlzError` on any failure.
    """

    async def find_by_name(self, name: str) -> list[Locality]:
        ...

    async def find_by_postal_code(self, postal_code: str) -> list[Locality]:
        ...


class PlzClient:
    """Async client for the OpenPLZ API.

    Usage::

        async with PlzClient() as client:
            localities = await client.find_by_name("Berlin")
    """

    def __init__(
        self,
        config: PlzConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or PlzConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    @property
    def config(self) -> PlzConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PlzClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise PlzError("Client not initialized. Use 'async with PlzClient(...) as client:'")
        return self._transport

    async def find_by_name(self, name: str) -> list[Locality]:
        """Find localities (and their postal codes) by locality name."""
        if not name.strip():
            raise ValueError("name must be non-empty")
        return await _localities_api.fetch_localities_by_name(self._config, self._require_transport(), name)

    async def find_by_postal_code(self, postal_code: str) -> list[Locality]:
        """Find localities served by a postal code."""
        if not postal_code.strip():
            raise ValueError("postal_code must be non-empty")
        return await _localities_api.fetch_localities_by_postal_code(
            self._config,
            self._require_transport(),
            postal_code,
        )
