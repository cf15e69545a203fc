"""Client for the ocean digital-twin chlorophyll and currents layers."""

from .chlorophyll import fetch_chlorophyll, fetch_chlorophyll_data
from .client import ApiClient, ApiError, create_client, get_count, update_count
from .config import ClientConfig, ConfigError, load_env
from .currents import fetch_currents, fetch_currents_data
from .features import (
    ChlorophyllCollection,
    ChlorophyllFeature,
    ChlorophyllSummary,
    CurrentsCollection,
    CurrentsFeature,
    CurrentsSummary,
    FeatureError,
    build_feature_collection,
    collection_bounds,
    current_heading,
    current_magnitude,
    summarize_chlorophyll,
    summarize_currents,
)
from .fetch import FetchFailure, FetchResult, empty_feature_collection

__all__ = [
    "ApiClient",
    "ApiError",
    "ClientConfig",
    "ConfigError",
    "create_client",
    "get_count",
    "load_env",
    "update_count",
    "FetchFailure",
    "FetchResult",
    "empty_feature_collection",
    "fetch_chlorophyll",
    "fetch_chlorophyll_data",
    "fetch_currents",
    "fetch_currents_data",
    "ChlorophyllCollection",
    "ChlorophyllFeature",
    "ChlorophyllSummary",
    "CurrentsCollection",
    "CurrentsFeature",
    "CurrentsSummary",
    "FeatureError",
    "build_feature_collection",
    "collection_bounds",
    "current_heading",
    "current_magnitude",
    "summarize_chlorophyll",
    "summarize_currents",
]
