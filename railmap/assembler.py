"""Build response payloads from a dataset.

Unfiltered requests get the source bytes back untouched. Filtered requests
get the source root object with its features array replaced by the
surviving features; field order and whitespace may then differ from the
source, but every root key is kept.
"""

from __future__ import annotations

import json
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from railmap.constants import DEFAULT_CACHE_MAX_YEARS
from railmap.dataset import Dataset
from railmap.errors import SerializationError
from railmap.filtering import FeatureModifier, filter_dataset, station_cross_filter
from railmap.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DatasetPayload:
    """Serialized response body plus the metadata the HTTP layer exposes.

    Attributes:
        body: GeoJSON bytes.
        feature_count: Number of features in body.
        year: Year the features were filtered for, None when unfiltered.
    """

    body: bytes
    feature_count: int
    year: Optional[int] = None


def build_unfiltered(dataset: Dataset) -> DatasetPayload:
    return DatasetPayload(body=dataset.original, feature_count=len(dataset.features))


def build_filtered(
    dataset: Dataset, year: int, modifier: Optional[FeatureModifier] = None
) -> DatasetPayload:
    """Filter the dataset for a year and serialize the result.

    Args:
        dataset: Source dataset.
        year: Requested year; 0 keeps every feature.
        modifier: Optional extra restriction applied after the year filter.

    Raises:
        SerializationError: If a feature or the document cannot be encoded.
    """
    features = filter_dataset(dataset, year)
    if modifier is not None:
        features = modifier(year, features)

    document = dict(dataset.top_level_fields)
    document["features"] = [feature.to_geojson() for feature in features]
    try:
        text = json.dumps(document, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as error:
        raise SerializationError(
            f"cannot encode filtered {dataset.name} for year {year}: {error}"
        ) from error
    return DatasetPayload(body=text.encode("utf-8"), feature_count=len(features), year=year)


def build_station_filtered(
    station_dataset: Dataset, year: int, rail_dataset: Dataset
) -> DatasetPayload:
    """Filter stations for a year, keeping only those on rail lines active then."""
    return build_filtered(station_dataset, year, station_cross_filter(rail_dataset))


class FilteredPayloadCache:
    """Thread-safe LRU memo of filtered payloads keyed by year.

    Datasets never change after load, so an entry never goes stale. The
    year comes from the request, so the memo is bounded: once it holds
    max_entries years, the least recently used one is evicted.
    """

    def __init__(self, name: str, max_entries: int = DEFAULT_CACHE_MAX_YEARS) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self._name = name
        self._max_entries = max_entries
        self._payloads: OrderedDict[int, DatasetPayload] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._payloads)

    def __contains__(self, year: object) -> bool:
        with self._lock:
            return year in self._payloads

    def get_or_build(self, year: int, build: Callable[[int], DatasetPayload]) -> DatasetPayload:
        with self._lock:
            cached = self._payloads.get(year)
            if cached is not None:
                self._payloads.move_to_end(year)
                return cached

        # Concurrent misses for the same year may both build; the results are identical.
        payload = build(year)
        evicted: Optional[int] = None
        with self._lock:
            payload = self._payloads.setdefault(year, payload)
            self._payloads.move_to_end(year)
            if len(self._payloads) > self._max_entries:
                evicted, _ = self._payloads.popitem(last=False)
        logger.debug(
            "filtered_payload_cached",
            dataset=self._name,
            year=year,
            feature_count=payload.feature_count,
            evicted_year=evicted,
        )
        return payload
