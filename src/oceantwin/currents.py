"""Surface current (u/v) vector layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from .client import ApiClient
from .fetch import BBox, FetchResult, build_layer_params, fetch_layer

_CURRENTS_ENDPOINT = "currents"


def fetch_currents(
    raw_data: bool = False,
    *,
    client: Optional[ApiClient] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    bbox: Optional[BBox] = None,
) -> FetchResult:
    params = build_layer_params(raw_data, start=start, end=end, bbox=bbox)
    return fetch_layer(_CURRENTS_ENDPOINT, "currents", params, client=client)


def fetch_currents_data(
    raw_data: bool = False,
    *,
    client: Optional[ApiClient] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    bbox: Optional[BBox] = None,
) -> Dict[str, Any]:
    """Return the currents FeatureCollection, or an empty one if the fetch fails."""

    return fetch_currents(raw_data, client=client, start=start, end=end, bbox=bbox).collection
