"""HTTP transport for the OpenPLZ JSON API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from plzsync.config import PlzConfig
from plzsync.exceptions import PlzTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, str]) -> Any:
        ...


class HttpTransport:
    """HTTP transport that issues GET requests and decodes JSON bodies."""

    def __init__(self, config: PlzConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def get_json(self, endpoint: str, params: Mapping[str, str]) -> Any:
        """GET ``endpoint`` below the configured country URL.

        Any non-200 status, network error or undecodable body raises
        :class:`PlzTransportError`.
        """
        url = f"{self._config.localities_url}{endpoint}"
        headers = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }

        _logger.debug("GET %s params=%s", url, dict(params))

        try:
            async with self._http.get(url, params=dict(params), headers=headers) as resp:
                body = await resp.read()
                if resp.status != 200:
                    raise PlzTransportError(
                        f"HTTP {resp.status} from {endpoint}: {body[:200].decode('utf-8', 'replace')}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except PlzTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise PlzTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PlzTransportError(
                f"Invalid JSON from {endpoint}: {body[:200]!r}",
                endpoint=endpoint,
            ) from exc
