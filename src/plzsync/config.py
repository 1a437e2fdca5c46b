"""Client and engine configuration for plzsync."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from plzsync._constants import BASE_URL, COUNTRY, DEFAULT_DEBOUNCE_DELAY, USER_AGENT
from plzsync.exceptions import PlzConfigError


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise PlzConfigError(f"{name} must be a number, got {value!r}") from exc


def _env_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise PlzConfigError(f"{name} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class PlzConfig:
    """Client and engine configuration.

    Parameters
    ----------
    base_url : str
        OpenPLZ API base URL.
    country : str
        Country path segment of the API (only ``"de"`` is supported).
    debounce_delay : float
        Seconds a field must stay unchanged before its lookup fires.
    page_size : int or None
        Page size sent with lookups.  ``None`` leaves paging to the
        server default and sends no paging parameters at all.
    user_agent : str
        ``User-Agent`` header sent with every request.
    """

    base_url: str = BASE_URL
    country: str = COUNTRY
    debounce_delay: float = DEFAULT_DEBOUNCE_DELAY
    page_size: int | None = None
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if self.debounce_delay < 0:
            raise PlzConfigError(f"debounce_delay must be >= 0, got {self.debounce_delay}")
        if self.page_size is not None and self.page_size <= 0:
            raise PlzConfigError(f"page_size must be positive, got {self.page_size}")
        if not self.country.strip():
            raise PlzConfigError("country must be non-empty")

    @property
    def localities_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.country}"

    @classmethod
    def from_env(cls, **overrides: Any) -> PlzConfig:
        """Create configuration from environment variables.

        Reads the optional ``PLZ_BASE_URL``, ``PLZ_COUNTRY``,
        ``PLZ_DEBOUNCE_DELAY``, ``PLZ_PAGE_SIZE`` and ``PLZ_USER_AGENT``
        variables. Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        PlzConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "PLZ_BASE_URL": "base_url",
            "PLZ_COUNTRY": "country",
            "PLZ_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        delay_env = env.get("PLZ_DEBOUNCE_DELAY")
        if delay_env is not None and "debounce_delay" not in overrides:
            config_kwargs["debounce_delay"] = _env_float("PLZ_DEBOUNCE_DELAY", delay_env)

        page_size_env = env.get("PLZ_PAGE_SIZE")
        if page_size_env and "page_size" not in overrides:
            config_kwargs["page_size"] = _env_int("PLZ_PAGE_SIZE", page_size_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
