"""GeoJSON dataset loading.

A Dataset keeps three views of one source file: the original bytes (served
verbatim when no filter is requested), the root object's fields (the
template for reassembling filtered documents), and the decoded features.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple, Union

from railmap.errors import DatasetReadError, MalformedDocumentError, MalformedFeatureError
from railmap.features import Feature, reject_json_constant
from railmap.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Dataset:
    """Immutable in-memory view of one GeoJSON file.

    Attributes:
        name: Short label used in logs and health output.
        path: Source file path.
        original: Exact source bytes.
        top_level_fields: Every key of the source root object.
        features: Decoded features in source order.
    """

    name: str
    path: Path
    original: bytes
    top_level_fields: Mapping[str, Any]
    features: Tuple[Feature, ...]

    def __len__(self) -> int:
        return len(self.features)


def load_dataset(path: Union[str, Path], name: Optional[str] = None) -> Dataset:
    """Read and decode a GeoJSON FeatureCollection file.

    Args:
        path: File to read.
        name: Optional label; defaults to the file stem.

    Returns:
        A fully decoded dataset. No partial dataset is ever returned.

    Raises:
        DatasetReadError: If the file cannot be read.
        MalformedDocumentError: If the root is not an object with features.
        MalformedFeatureError: If any feature cannot be decoded.
    """
    source = Path(path)
    try:
        raw_bytes = source.read_bytes()
    except OSError as error:
        raise DatasetReadError(f"cannot read dataset {source}: {error}") from error

    root = _parse_root(raw_bytes, source)
    features = _decode_features(root["features"], source)
    dataset = Dataset(
        name=name or source.stem,
        path=source,
        original=raw_bytes,
        top_level_fields=MappingProxyType(root),
        features=tuple(features),
    )
    logger.info(
        "dataset_loaded",
        dataset=dataset.name,
        path=str(source),
        feature_count=len(features),
        size_bytes=len(raw_bytes),
    )
    return dataset


def _parse_root(raw_bytes: bytes, source: Path) -> dict:
    try:
        root = json.loads(raw_bytes, parse_constant=reject_json_constant)
    except ValueError as error:
        raise MalformedDocumentError(f"unmarshal GeoJSON root of {source}: {error}") from error
    if not isinstance(root, dict):
        raise MalformedDocumentError(f"GeoJSON root of {source} is not an object")
    if "features" not in root:
        raise MalformedDocumentError(f"GeoJSON root of {source} is missing features array")
    if root["features"] is not None and not isinstance(root["features"], list):
        raise MalformedDocumentError(f"features of {source} is not an array")
    return root


def _decode_features(raw_features: Optional[list], source: Path) -> List[Feature]:
    features: List[Feature] = []
    for index, obj in enumerate(raw_features or ()):
        try:
            features.append(Feature.from_geojson(obj))
        except MalformedFeatureError as error:
            raise MalformedFeatureError(f"feature #{index} of {source}: {error}") from error
    return features