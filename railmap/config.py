"""Runtime configuration for the railmap server.

All environment variable parsing and validation happens here. The HTTP
application and CLI consume a typed ServerConfig instead of raw env reads.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from railmap.constants import (
    DEFAULT_CACHE_MAX_YEARS,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_STATIC_DIR,
    DEFAULT_UTF8_DIR,
    RAIL_DATA_FILE_NAME,
    STATION_DATA_FILE_NAME,
)
from railmap.errors import RailmapConfigError
from railmap.logging_config import parse_log_level

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ServerConfig:
    """Validated server configuration.

    Attributes:
        utf8_dir: Directory holding the UTF-8 GeoJSON source files.
        static_dir: Directory served at "/" for the map frontend.
        host: Listen address.
        port: Listen port.
        cors_origins: Origins allowed by the CORS middleware; empty disables it.
        cache_filtered_responses: Keep filtered payloads per requested year.
        cache_max_years: Most years each payload cache holds before evicting
            the least recently used one.
        log_level: structlog minimum level name.
    """

    utf8_dir: Path
    static_dir: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_origins: Tuple[str, ...] = ()
    cache_filtered_responses: bool = True
    cache_max_years: int = DEFAULT_CACHE_MAX_YEARS
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def rail_path(self) -> Path:
        return self.utf8_dir / RAIL_DATA_FILE_NAME

    @property
    def station_path(self) -> Path:
        return self.utf8_dir / STATION_DATA_FILE_NAME

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Build config from process environment variables.

        Raises:
            RailmapConfigError: If environment values are invalid.
        """
        config = cls(
            utf8_dir=_parse_dir("RAILMAP_UTF8_DIR", os.getenv("RAILMAP_UTF8_DIR", str(DEFAULT_UTF8_DIR))),
            static_dir=_parse_dir(
                "RAILMAP_STATIC_DIR", os.getenv("RAILMAP_STATIC_DIR", str(DEFAULT_STATIC_DIR))
            ),
            host=os.getenv("RAILMAP_HOST", DEFAULT_HOST),
            port=_parse_port(os.getenv("RAILMAP_PORT", str(DEFAULT_PORT))),
            cors_origins=tuple(_parse_csv_list(os.getenv("RAILMAP_CORS_ORIGINS"))),
            cache_filtered_responses=_parse_bool(
                "RAILMAP_CACHE_FILTERED", os.getenv("RAILMAP_CACHE_FILTERED", "true")
            ),
            cache_max_years=_parse_positive_int(
                "RAILMAP_CACHE_MAX_YEARS",
                os.getenv("RAILMAP_CACHE_MAX_YEARS", str(DEFAULT_CACHE_MAX_YEARS)),
            ),
            log_level=os.getenv("RAILMAP_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check values that may also arrive through CLI overrides.

        Raises:
            RailmapConfigError: If a value is out of range.
        """
        if not str(self.utf8_dir).strip():
            raise RailmapConfigError("UTF-8 dataset directory is required")
        if not str(self.static_dir).strip():
            raise RailmapConfigError("static directory is required")
        if not 0 < self.port < 65536:
            raise RailmapConfigError(f"Invalid port {self.port}: expected 1-65535.")
        if self.cache_max_years < 1:
            raise RailmapConfigError(
                f"Invalid cache size {self.cache_max_years}: expected a positive integer."
            )
        parse_log_level(self.log_level)


def _parse_dir(name: str, raw_value: str) -> Path:
    if not raw_value.strip():
        raise RailmapConfigError(f"{name} must not be empty.")
    return Path(raw_value).expanduser()


def _parse_port(raw_value: str) -> int:
    try:
        return int(raw_value)
    except ValueError as error:
        raise RailmapConfigError(
            "Invalid RAILMAP_PORT value: "
            f"expected integer, got '{raw_value}'. "
            "Set RAILMAP_PORT to a numeric value."
        ) from error


def _parse_positive_int(name: str, raw_value: str) -> int:
    try:
        value = int(raw_value)
    except ValueError as error:
        raise RailmapConfigError(
            f"Invalid {name} value: expected integer, got '{raw_value}'."
        ) from error
    if value < 1:
        raise RailmapConfigError(f"Invalid {name} value {value}: expected a positive integer.")
    return value


def _parse_bool(name: str, raw_value: str) -> bool:
    value = raw_value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise RailmapConfigError(f"Invalid {name} value '{raw_value}': expected true or false.")


def _parse_csv_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    items = [v.strip() for v in value.split(",")]
    return [v for v in items if v]
