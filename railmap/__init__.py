"""Historical rail line and station GeoJSON server."""

__version__ = "0.1.0"
