"""GeoJSON feature model with round-trip preservation of unknown keys.

A Feature keeps the five keys GeoJSON defines on a feature object and
captures every other key (vendor extensions) as a pydantic extra, so
decoding then encoding never drops data the server does not understand.
Geometry and bbox are held as opaque JSON values and never interpreted.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, JsonValue, StrictStr, ValidationError

from railmap.errors import MalformedFeatureError, SerializationError

KNOWN_FEATURE_KEYS = frozenset({"type", "id", "properties", "geometry", "bbox"})

Properties = Dict[str, JsonValue]


def reject_json_constant(token: str) -> Any:
    """parse_constant hook refusing NaN and Infinity, which JSON does not allow."""
    raise ValueError(f"non-standard JSON constant {token}")


class Feature(BaseModel):
    """One GeoJSON feature.

    Attributes:
        type: Feature tag, "Feature" in well-formed documents.
        id: Opaque identifier, usually a string or number; None means the
            source had none.
        properties: Attribute mapping, or None when the source had null.
        geometry: Opaque geometry value.
        bbox: Opaque bbox value; only emitted when the source carried one.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    type: StrictStr = ""
    id: JsonValue = None
    properties: Optional[Properties] = None
    geometry: JsonValue = None
    bbox: JsonValue = None

    @classmethod
    def from_geojson(cls, obj: Any) -> "Feature":
        """Build a feature from a decoded JSON object.

        Raises:
            MalformedFeatureError: If obj is not an object or a known key
                has an incompatible shape.
        """
        if not isinstance(obj, dict):
            raise MalformedFeatureError(
                f"feature must be a JSON object, got {type(obj).__name__}"
            )
        try:
            return cls.model_validate(obj)
        except ValidationError as error:
            raise MalformedFeatureError(f"invalid feature: {error}") from error

    @classmethod
    def decode(cls, raw: Union[bytes, str]) -> "Feature":
        """Decode one serialized feature object."""
        try:
            obj = json.loads(raw, parse_constant=reject_json_constant)
        except ValueError as error:
            raise MalformedFeatureError(f"feature is not valid JSON: {error}") from error
        return cls.from_geojson(obj)

    @property
    def extras(self) -> Dict[str, Any]:
        """Top-level keys other than the five known ones."""
        return dict(self.model_extra or {})

    def to_geojson(self) -> Dict[str, Any]:
        """Return the feature as a plain JSON-ready dict.

        Raises:
            SerializationError: If an extra key collides with a known key.
        """
        payload: Dict[str, Any] = {"type": self.type}
        if self.id is not None:
            payload["id"] = self.id
        payload["properties"] = self.properties
        payload["geometry"] = self.geometry
        if "bbox" in self.model_fields_set:
            payload["bbox"] = self.bbox
        for key, value in (self.model_extra or {}).items():
            if key in KNOWN_FEATURE_KEYS:
                raise SerializationError(f"extra key '{key}' shadows a known feature key")
            payload[key] = value
        return payload

    def encode(self) -> bytes:
        """Serialize the feature as compact UTF-8 JSON."""
        try:
            text = json.dumps(
                self.to_geojson(), ensure_ascii=False, separators=(",", ":"), allow_nan=False
            )
        except (TypeError, ValueError) as error:
            raise SerializationError(f"cannot encode feature: {error}") from error
        return text.encode("utf-8")
