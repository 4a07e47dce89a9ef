"""Unit tests for feature decoding and encoding."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from railmap.errors import MalformedFeatureError, SerializationError
from railmap.features import Feature


def test_decode_captures_unknown_keys_as_extras() -> None:
    """Keys outside the GeoJSON feature members should land in extras."""
    feature = Feature.decode(
        b'{"type":"Feature","properties":{},"geometry":null,"custom":"x","vendor":{"a":1}}'
    )

    assert feature.extras == {"custom": "x", "vendor": {"a": 1}}


def test_encode_keeps_extras_without_duplicating_known_keys() -> None:
    """Round trip should keep "custom" and emit each known key once."""
    raw = b'{"type":"Feature","id":7,"properties":{"N05_002":"Yamanote"},"geometry":null,"custom":"x"}'

    encoded = Feature.decode(raw).encode()
    text = encoded.decode("utf-8")
    obj = json.loads(text)

    assert obj["custom"] == "x"
    for key in ("type", "id", "properties", "geometry"):
        assert text.count(f'"{key}":') == 1
    assert obj == json.loads(raw)


def test_encode_omits_absent_id_and_bbox() -> None:
    """Missing id and bbox should not appear in the output."""
    obj = Feature.from_geojson({"type": "Feature", "properties": {}, "geometry": None}).to_geojson()

    assert set(obj) == {"type", "properties", "geometry"}


def test_encode_keeps_bbox_when_present() -> None:
    """A source bbox should be emitted unchanged."""
    source = {"type": "Feature", "properties": {}, "geometry": None, "bbox": [1.5, 2, 3, 4]}

    assert Feature.from_geojson(source).to_geojson() == source


def test_encode_always_emits_geometry_and_properties() -> None:
    """Geometry and properties appear even when missing from the source."""
    obj = Feature.from_geojson({"type": "Feature"}).to_geojson()

    assert obj == {"type": "Feature", "properties": None, "geometry": None}


@pytest.mark.parametrize("feature_id", ["abc", 12, 3.5, True, {"source": "N05", "seq": 4}, ["a", 1]])
def test_id_round_trips(feature_id: object) -> None:
    """Ids of any JSON kind should come back unchanged."""
    source = {"type": "Feature", "id": feature_id, "properties": {}, "geometry": None}

    assert Feature.from_geojson(source).to_geojson()["id"] == feature_id


def test_property_value_kinds_are_preserved() -> None:
    """Booleans, nulls and nested values should keep their JSON kinds."""
    properties = {"flag": True, "none": None, "count": 3, "ratio": 0.5, "tags": ["a", {"b": 2}]}
    feature = Feature.from_geojson({"type": "Feature", "properties": properties, "geometry": None})

    assert feature.to_geojson()["properties"] == properties
    assert feature.properties is not None and feature.properties["flag"] is True


@pytest.mark.parametrize(
    "raw",
    [
        b"[1, 2]",
        b"not json",
        b'{"type":"Feature","properties":[1,2],"geometry":null}',
        b'{"type":"Feature","properties":"text","geometry":null}',
        b'{"type":5,"properties":{},"geometry":null}',
        b'{"type":"Feature","properties":{"a":NaN},"geometry":null}',
        b'{"type":"Feature","properties":{},"geometry":{"type":"Point","coordinates":[Infinity,0]}}',
    ],
)
def test_decode_rejects_malformed_features(raw: bytes) -> None:
    """Non-objects and incompatible member shapes should fail."""
    with pytest.raises(MalformedFeatureError):
        Feature.decode(raw)


def test_feature_is_immutable() -> None:
    """Loaded features are shared across requests and must not change."""
    feature = Feature.from_geojson({"type": "Feature", "properties": {}, "geometry": None})

    with pytest.raises(ValidationError):
        feature.type = "Other"  # type: ignore[misc]


def test_encode_rejects_extra_shadowing_known_key() -> None:
    """An extra reusing a known key name must not produce a duplicate key."""
    feature = Feature.model_construct(type="Feature", properties={}, geometry=None)
    object.__setattr__(feature, "__pydantic_extra__", {"geometry": {"type": "Point"}})

    with pytest.raises(SerializationError):
        feature.encode()
