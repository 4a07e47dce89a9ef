"""Shared pytest fixtures for railmap tests."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Dict

import pytest

from railmap.config import ServerConfig
from railmap.constants import RAIL_DATA_FILE_NAME, STATION_DATA_FILE_NAME
from railmap.dataset import Dataset, load_dataset
from railmap.features import Feature

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def fixture_path(relative_path: str) -> Path:
    """Resolve a path under tests/fixtures."""
    return FIXTURES_DIR / relative_path


def make_feature(properties: Dict[str, Any] | None = None, **extra: Any) -> Feature:
    """Build a point feature with the given properties and extra keys."""
    obj: Dict[str, Any] = {
        "type": "Feature",
        "properties": properties or {},
        "geometry": {"type": "Point", "coordinates": [139.7, 35.6]},
    }
    obj.update(extra)
    return Feature.from_geojson(obj)


@pytest.fixture
def rail_path() -> Path:
    return fixture_path("railroads.geojson")


@pytest.fixture
def station_path() -> Path:
    return fixture_path("stations.geojson")


@pytest.fixture
def rail_dataset(rail_path: Path) -> Dataset:
    return load_dataset(rail_path, name="railroads")


@pytest.fixture
def station_dataset(station_path: Path) -> Dataset:
    return load_dataset(station_path, name="stations")


@pytest.fixture
def utf8_dir(tmp_path: Path, rail_path: Path, station_path: Path) -> Path:
    """Dataset directory laid out with the N05 file names."""
    target = tmp_path / "UTF-8"
    target.mkdir()
    shutil.copyfile(rail_path, target / RAIL_DATA_FILE_NAME)
    shutil.copyfile(station_path, target / STATION_DATA_FILE_NAME)
    return target


@pytest.fixture
def server_config(tmp_path: Path, utf8_dir: Path) -> ServerConfig:
    return ServerConfig(utf8_dir=utf8_dir, static_dir=tmp_path / "static")


@pytest.fixture
def feature_factory():
    return make_feature
