"""Railmap exception hierarchy.

Load-time errors are fatal and stop the server before it accepts requests.
SerializationError at request time means a loaded feature could not be
re-encoded, which is a bug.
"""

from __future__ import annotations


class RailmapError(Exception):
    """Base exception for all railmap failures."""


class RailmapConfigError(RailmapError):
    """Raised for invalid runtime configuration."""


class DatasetReadError(RailmapError, OSError):
    """Raised when a dataset file cannot be read."""


class MalformedDocumentError(RailmapError):
    """Raised when a GeoJSON document root is structurally invalid."""


class MalformedFeatureError(RailmapError):
    """Raised when a feature object cannot be decoded."""


class SerializationError(RailmapError):
    """Raised when a filtered document cannot be encoded."""
