"""Chlorophyll-a concentration layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from .client import ApiClient
from .fetch import BBox, FetchResult, build_layer_params, fetch_layer

_CHLOROPHYLL_ENDPOINT = "chlorophyll"


def fetch_chlorophyll(
    raw_data: bool = False,
    *,
    client: Optional[ApiClient] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    bbox: Optional[BBox] = None,
) -> FetchResult:
    """Fetch chlorophyll points, reporting whether an empty result was a failure."""

    params = build_layer_params(raw_data, start=start, end=end, bbox=bbox)
    return fetch_layer(_CHLOROPHYLL_ENDPOINT, "chlorophyll", params, client=client)


def fetch_chlorophyll_data(
    raw_data: bool = False,
    *,
    client: Optional[ApiClient] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    bbox: Optional[BBox] = None,
) -> Dict[str, Any]:
    """Return the chlorophyll FeatureCollection, or an empty one if the fetch fails."""

    return fetch_chlorophyll(raw_data, client=client, start=start, end=end, bbox=bbox).collection
