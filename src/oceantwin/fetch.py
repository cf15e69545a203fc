"""Fetch a GeoJSON layer and fall back to an empty collection on failure."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional, Tuple

import requests

from .client import ApiClient
from .config import data_config

logger = logging.getLogger(__name__)

FailureKind = Literal["transport", "status", "decode"]
BBox = Tuple[float, float, float, float]


def empty_feature_collection() -> Dict[str, Any]:
    return {"type": "FeatureCollection", "features": []}


@dataclass
class FetchFailure:
    kind: FailureKind
    message: str
    status_code: Optional[int] = None


@dataclass
class FetchResult:
    """Decoded collection plus the failure that replaced it, if any."""

    collection: Dict[str, Any]
    failure: Optional[FetchFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def is_empty(self) -> bool:
        return not self.collection.get("features")


def build_layer_params(
    raw_data: bool = False,
    *,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    bbox: Optional[BBox] = None,
) -> Dict[str, str]:
    """Query parameters understood by the layer endpoints; empty for a plain call."""

    params: Dict[str, str] = {}
    if raw_data:
        params["raw_data"] = "true"
    if start is not None:
        params["start_time"] = _format_datetime(start)
    if end is not None:
        params["end_time"] = _format_datetime(end)
    if bbox is not None:
        if len(bbox) != 4:
            raise ValueError(f"bbox must be (min_lon, min_lat, max_lon, max_lat), got {len(bbox)} values")
        min_lon, min_lat, max_lon, max_lat = bbox
        if min_lon >= max_lon or min_lat >= max_lat:
            raise ValueError("bbox must be ordered as min_lon < max_lon and min_lat < max_lat")
        params["min_lat"] = f"{min_lat:.6f}"
        params["min_lon"] = f"{min_lon:.6f}"
        params["max_lat"] = f"{max_lat:.6f}"
        params["max_lon"] = f"{max_lon:.6f}"
    return params


def fetch_layer(
    path: str,
    label: str,
    params: Dict[str, str],
    *,
    client: Optional[ApiClient] = None,
) -> FetchResult:
    """GET ``path`` and decode it; every failure becomes an empty collection.

    ``label`` names the layer in log messages. When ``client`` is omitted a
    short-lived client for the default data host is used and closed afterwards.
    """

    if client is None:
        with ApiClient(data_config()) as transient:
            return _fetch(transient, path, label, params)
    return _fetch(client, path, label, params)


def _fetch(client: ApiClient, path: str, label: str, params: Dict[str, str]) -> FetchResult:
    try:
        response = client.get(path, params=params or None)
    except requests.RequestException as exc:
        return _fail(label, FetchFailure("transport", str(exc)))

    if not 200 <= response.status_code < 300:
        message = f"Failed to fetch {label} data: {response.status_code}"
        return _fail(label, FetchFailure("status", message, response.status_code))

    logger.debug("%s response status=%s", label, response.status_code)
    try:
        payload = response.json()
    except ValueError as exc:
        return _fail(label, FetchFailure("decode", f"invalid JSON: {exc}", response.status_code))
    if not isinstance(payload, dict):
        message = f"expected a JSON object, got {type(payload).__name__}"
        return _fail(label, FetchFailure("decode", message, response.status_code))
    return FetchResult(collection=payload)


def _fail(label: str, failure: FetchFailure) -> FetchResult:
    logger.error("Error fetching %s data (%s): %s", label, failure.kind, failure.message)
    return FetchResult(collection=empty_feature_collection(), failure=failure)


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (
        value.astimezone(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )
