"""Unit tests for runtime configuration parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from railmap.config import ServerConfig
from railmap.constants import (
    DEFAULT_CACHE_MAX_YEARS,
    DEFAULT_PORT,
    RAIL_DATA_FILE_NAME,
    STATION_DATA_FILE_NAME,
)
from railmap.errors import RailmapConfigError


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset variables fall back to the N05 defaults."""
    for name in (
        "RAILMAP_UTF8_DIR",
        "RAILMAP_STATIC_DIR",
        "RAILMAP_PORT",
        "RAILMAP_CORS_ORIGINS",
        "RAILMAP_CACHE_FILTERED",
        "RAILMAP_CACHE_MAX_YEARS",
        "RAILMAP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    config = ServerConfig.from_env()

    assert config.port == DEFAULT_PORT
    assert config.utf8_dir == Path("N05-24_GML") / "UTF-8"
    assert config.cors_origins == ()
    assert config.cache_filtered_responses is True
    assert config.cache_max_years == DEFAULT_CACHE_MAX_YEARS


def test_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Environment values should populate the config."""
    monkeypatch.setenv("RAILMAP_UTF8_DIR", str(tmp_path))
    monkeypatch.setenv("RAILMAP_PORT", "9090")
    monkeypatch.setenv("RAILMAP_CORS_ORIGINS", "http://localhost:5173, ,http://localhost:3000")
    monkeypatch.setenv("RAILMAP_CACHE_FILTERED", "off")
    monkeypatch.setenv("RAILMAP_CACHE_MAX_YEARS", "32")

    config = ServerConfig.from_env()

    assert config.port == 9090
    assert config.rail_path == tmp_path / RAIL_DATA_FILE_NAME
    assert config.station_path == tmp_path / STATION_DATA_FILE_NAME
    assert config.cors_origins == ("http://localhost:5173", "http://localhost:3000")
    assert config.cache_filtered_responses is False
    assert config.cache_max_years == 32


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("RAILMAP_PORT", "eighty"),
        ("RAILMAP_PORT", "70000"),
        ("RAILMAP_CACHE_FILTERED", "maybe"),
        ("RAILMAP_CACHE_MAX_YEARS", "0"),
        ("RAILMAP_CACHE_MAX_YEARS", "lots"),
        ("RAILMAP_LOG_LEVEL", "loud"),
        ("RAILMAP_UTF8_DIR", "  "),
    ],
)
def test_from_env_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    """Invalid environment values raise a config error."""
    monkeypatch.setenv(name, value)

    with pytest.raises(RailmapConfigError):
        ServerConfig.from_env()
