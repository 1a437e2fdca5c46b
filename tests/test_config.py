from __future__ import annotations

import pytest

from plzsync.config import PlzConfig
from plzsync.exceptions import PlzConfigError


def test_defaults_target_openplz_germany() -> None:
    config = PlzConfig()
    assert config.localities_url == "https://openplzapi.org/de"
    assert config.debounce_delay == 1.0
    assert config.page_size is None


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLZ_BASE_URL", "http://localhost:8080/")
    monkeypatch.setenv("PLZ_DEBOUNCE_DELAY", "0.25")
    monkeypatch.setenv("PLZ_PAGE_SIZE", "20")

    config = PlzConfig.from_env()

    assert config.localities_url == "http://localhost:8080/de"
    assert config.debounce_delay == 0.25
    assert config.page_size == 20


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLZ_DEBOUNCE_DELAY", "5")
    config = PlzConfig.from_env(debounce_delay=0.0)
    assert config.debounce_delay == 0.0


def test_malformed_env_value_raises_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLZ_DEBOUNCE_DELAY", "soon")
    with pytest.raises(PlzConfigError, match="PLZ_DEBOUNCE_DELAY"):
        PlzConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [{"debounce_delay": -1.0}, {"page_size": 0}, {"country": " "}],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(PlzConfigError):
        PlzConfig(**kwargs)  # type: ignore[arg-type]
