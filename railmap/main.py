"""
Railmap - FastAPI Backend
Serves the N05 rail line and station GeoJSON, optionally filtered to a date

"""

import re
from datetime import date
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles

from railmap import __version__
from railmap.assembler import (
    DatasetPayload,
    FilteredPayloadCache,
    build_filtered,
    build_station_filtered,
    build_unfiltered,
)
from railmap.config import ServerConfig
from railmap.constants import (
    CACHE_CONTROL_VALUE,
    DATE_FORMAT_HINT,
    FEATURE_COUNT_HEADER,
    FILTER_YEAR_HEADER,
    GEOJSON_MEDIA_TYPE,
    NO_FILTER_YEAR,
)
from railmap.dataset import Dataset, load_dataset
from railmap.errors import SerializationError
from railmap.logging_config import get_logger

logger = get_logger(__name__)

_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

PayloadBuilder = Callable[[int], DatasetPayload]


def _parse_filter_year(value: Optional[str]) -> Optional[int]:
    """Resolve the optional date query value into a year.

    Returns None when no date was given. Year 0000 is a valid request: it
    keeps every feature but the document is still reassembled.
    """
    text = (value or "").strip()
    if not text:
        return None
    if not _DATE_RE.match(text):
        raise HTTPException(status_code=400, detail=DATE_FORMAT_HINT)
    # datetime.date starts at year 1; 2000 shares year 0's leap-year calendar.
    calendar_text = "2000" + text[4:] if text.startswith("0000") else text
    try:
        parsed = date.fromisoformat(calendar_text)
    except ValueError:
        raise HTTPException(status_code=400, detail=DATE_FORMAT_HINT)
    return NO_FILTER_YEAR if text.startswith("0000") else parsed.year


def _dataset_endpoint(
    dataset: Dataset, build: PayloadBuilder, cache: Optional[FilteredPayloadCache]
) -> Callable[..., Response]:
    def endpoint(request: Request, date_param: Optional[str] = Query(None, alias="date")) -> Response:
        year = _parse_filter_year(date_param)

        headers = {"Cache-Control": CACHE_CONTROL_VALUE}
        if year is None:
            payload = build_unfiltered(dataset)
        else:
            try:
                payload = cache.get_or_build(year, build) if cache is not None else build(year)
            except SerializationError as e:
                logger.error("filtered_payload_failed", dataset=dataset.name, year=year, error=str(e))
                raise HTTPException(status_code=500, detail="failed to build filtered dataset")
            headers[FILTER_YEAR_HEADER] = str(payload.year)
        headers[FEATURE_COUNT_HEADER] = str(payload.feature_count)

        body = b"" if request.method == "HEAD" else payload.body
        return Response(content=body, media_type=GEOJSON_MEDIA_TYPE, headers=headers)

    return endpoint


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    """Load both datasets and build the application.

    Dataset load errors propagate: the server must not start with a
    missing or partially loaded dataset.
    """
    config = config or ServerConfig.from_env()
    config.validate()

    rail_dataset = load_dataset(config.rail_path, name="railroads")
    station_dataset = load_dataset(config.station_path, name="stations")

    app = FastAPI(
        title="Railmap API",
        description="N05 rail lines and stations, filtered by historical date",
        version=__version__,
    )

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(config.cors_origins),
            allow_methods=["GET", "HEAD"],
            allow_headers=["*"],
            expose_headers=[FEATURE_COUNT_HEADER, FILTER_YEAR_HEADER],
        )

    def _cache(name: str) -> Optional[FilteredPayloadCache]:
        if not config.cache_filtered_responses:
            return None
        return FilteredPayloadCache(name, max_entries=config.cache_max_years)

    app.add_api_route(
        "/api/railroads",
        _dataset_endpoint(
            rail_dataset,
            lambda year: build_filtered(rail_dataset, year),
            _cache(rail_dataset.name),
        ),
        methods=["GET", "HEAD"],
        response_class=Response,
    )
    app.add_api_route(
        "/api/stations",
        _dataset_endpoint(
            station_dataset,
            lambda year: build_station_filtered(station_dataset, year, rail_dataset),
            _cache(station_dataset.name),
        ),
        methods=["GET", "HEAD"],
        response_class=Response,
    )

    @app.get("/health")
    def health() -> Dict[str, Any]:
        """Health check endpoint"""
        return {
            "status": "ok",
            "version": __version__,
            "datasets": {
                rail_dataset.name: len(rail_dataset.features),
                station_dataset.name: len(station_dataset.features),
            },
        }

    # Mounted last so the API routes above take precedence.
    if config.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="static")
    else:
        logger.warning("static_dir_missing", static_dir=str(config.static_dir))

    logger.info(
        "app_created",
        railroads=len(rail_dataset.features),
        stations=len(station_dataset.features),
        cache_filtered=config.cache_filtered_responses,
        cache_max_years=config.cache_max_years,
    )
    return app
