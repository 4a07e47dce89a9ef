"""Temporal filtering and the rail-to-station cross-reference.

Survey features carry a start year (N05_005b) and an end year (N05_005e).
Either bound may be missing or hold a sentinel (999, or 9000 and above)
meaning "unknown", in which case that side of the range is open.

Stations are additionally restricted to those whose line name (N05_002)
belongs to a rail line active in the requested year.
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, FrozenSet, Iterable, List, Mapping, Optional

from railmap.constants import (
    END_YEAR_KEY,
    LINE_NAME_KEY,
    NO_FILTER_YEAR,
    OPEN_YEAR_THRESHOLD,
    START_YEAR_KEY,
    UNKNOWN_YEAR,
)
from railmap.dataset import Dataset
from railmap.features import Feature

FeatureModifier = Callable[[int, List[Feature]], List[Feature]]

_YEAR_TEXT_RE = re.compile(r"[+-]?[0-9]+")


def parse_year_field(value: Any) -> Optional[int]:
    """Interpret a start/end year property.

    Strings are trimmed and must be plain ASCII base-10 integers; fullwidth
    digits and underscores count as unparsable. Ints are used as-is and
    floats are truncated. Anything else, an unparsable string, 999, or a
    value of 9000 and above yields None (an open bound).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if not _YEAR_TEXT_RE.fullmatch(text):
            return None
        year = int(text)
    elif isinstance(value, int):
        year = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        year = int(value)
    else:
        return None

    if year == UNKNOWN_YEAR or year >= OPEN_YEAR_THRESHOLD:
        return None
    return year


def is_active_for_year(feature: Feature, year: int) -> bool:
    """Return True if the feature existed during the given year.

    Year 0 means no filter was requested and every feature is active.
    Both bounds are inclusive.
    """
    if year == NO_FILTER_YEAR:
        return True

    properties = feature.properties or {}
    start_year = parse_year_field(properties.get(START_YEAR_KEY))
    if start_year is not None and year < start_year:
        return False

    end_year = parse_year_field(properties.get(END_YEAR_KEY))
    if end_year is not None and year > end_year:
        return False

    return True


def filter_by_year(features: Iterable[Feature], year: int) -> List[Feature]:
    return [f for f in features if is_active_for_year(f, year)]


def filter_dataset(dataset: Dataset, year: int) -> List[Feature]:
    """Features of the dataset active in the year, in source order."""
    return filter_by_year(dataset.features, year)


def property_string(properties: Optional[Mapping[str, Any]], key: str) -> str:
    """Trimmed string property, or "" when missing or not a string."""
    if not properties:
        return ""
    value = properties.get(key)
    if isinstance(value, str):
        return value.strip()
    return ""


def active_line_names(features: Iterable[Feature]) -> FrozenSet[str]:
    """Line names of the given rail features, empty names skipped."""
    names = set()
    for feature in features:
        name = property_string(feature.properties, LINE_NAME_KEY)
        if name:
            names.add(name)
    return frozenset(names)


def station_cross_filter(rail_dataset: Dataset) -> FeatureModifier:
    """Build the modifier restricting stations to lines active that year.

    If no rail line is active for the year, no station survives. Names are
    compared after whitespace trimming only.
    """

    def modifier(year: int, features: List[Feature]) -> List[Feature]:
        if year == NO_FILTER_YEAR:
            return features

        allowed = active_line_names(filter_dataset(rail_dataset, year))
        if not allowed:
            return []

        return [f for f in features if _line_name_in(f, allowed)]

    return modifier


def _line_name_in(feature: Feature, allowed: FrozenSet[str]) -> bool:
    name = property_string(feature.properties, LINE_NAME_KEY)
    return bool(name) and name in allowed
