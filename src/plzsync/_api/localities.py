"""Locality lookup endpoints.

Endpoints:
  - /{country}/Localities?name=...
  - /{country}/Localities?postalCode=...
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from plzsync._constants import LOCALITIES_ENDPOINT
from plzsync._transport import Transport
from plzsync.config import PlzConfig
from plzsync.exceptions import PlzTransportError
from plzsync.models.locality import Locality

_logger = logging.getLogger(__name__)


def _build_params(config: PlzConfig, **query: str) -> dict[str, str]:
    params = dict(query)
    if config.page_size is not None:
        params["page"] = "1"
        params["pageSize"] = str(config.page_size)
    return params


def _parse_localities(payload: Any) -> list[Locality]:
    """Parse the JSON array of locality records, keeping server order."""
    if not isinstance(payload, list):
        raise PlzTransportError(
            f"Expected a JSON array from {LOCALITIES_ENDPOINT}, got {type(payload).__name__}",
            endpoint=LOCALITIES_ENDPOINT,
        )
    try:
        return [Locality.model_validate(item) for item in payload]
    except ValidationError as exc:
        raise PlzTransportError(
            f"Malformed locality record from {LOCALITIES_ENDPOINT}: {exc.error_count()} error(s)",
            endpoint=LOCALITIES_ENDPOINT,
        ) from exc


async def fetch_localities_by_name(config: PlzConfig, transport: Transport, name: str) -> list[Locality]:
    """Find localities whose name matches ``name``."""
    payload = await transport.get_json(LOCALITIES_ENDPOINT, _build_params(config, name=name))
    localities = _parse_localities(payload)
    _logger.debug("Name lookup %r returned %d localities", name, len(localities))
    return localities


async def fetch_localities_by_postal_code(
    config: PlzConfig,
    transport: Transport,
    postal_code: str,
) -> list[Locality]:
    """Find localities served by ``postal_code``."""
    payload = await transport.get_json(LOCALITIES_ENDPOINT, _build_params(config, postalCode=postal_code))
    localities = _parse_localities(payload)
    _logger.debug("Postal code lookup %r returned %d localities", postal_code, len(localities))
    return localities
