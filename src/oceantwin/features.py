"""Typed views over chlorophyll and currents FeatureCollections."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from shapely.geometry import MultiPoint, Point, mapping, shape


class FeatureError(ValueError):
    """Raised when a feature payload does not match the expected point shape."""


class _PointFeature(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: int = Field(..., description="Row identifier assigned by the service")
    measurement_time: datetime = Field(..., description="Measurement timestamp (UTC)")
    geometry: Point = Field(..., description="Measurement location (lon, lat)")

    @field_validator("geometry", mode="before")
    @classmethod
    def _coerce_geometry(cls, value: Any) -> Point:
        if isinstance(value, Mapping):
            try:
                value = shape(value)
            except (KeyError, TypeError) as exc:
                raise ValueError(f"malformed GeoJSON geometry: {exc}") from exc
        if not isinstance(value, Point):
            raise ValueError("geometry must be a GeoJSON Point mapping or shapely Point")
        return value

    @classmethod
    def from_feature(cls, feature: Mapping[str, Any]):
        if not isinstance(feature, Mapping):
            raise FeatureError(f"Feature must be a JSON object, got {type(feature).__name__}")
        geometry = feature.get("geometry")
        if geometry is None:
            raise FeatureError("Feature missing geometry")
        raw_properties = feature.get("properties")
        if raw_properties is None:
            raw_properties = {}
        if not isinstance(raw_properties, Mapping):
            raise FeatureError(f"Feature properties must be a JSON object, got {type(raw_properties).__name__}")
        properties = dict(raw_properties)
        try:
            return cls(geometry=geometry, **properties)
        except (ValidationError, TypeError) as exc:  # TypeError: "geometry" repeated in properties
            raise FeatureError(f"Invalid {cls.__name__} payload: {exc}") from exc

    @property
    def lon(self) -> float:
        return self.geometry.x

    @property
    def lat(self) -> float:
        return self.geometry.y

    def to_feature(self) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": mapping(self.geometry),
            "properties": self.model_dump(exclude={"geometry"}, exclude_none=True, mode="json"),
        }


class ChlorophyllFeature(_PointFeature):
    """Chlorophyll-a concentration sample."""

    chlor_a: float = Field(..., description="Chlorophyll-a concentration (mg m-3)")


class CurrentsFeature(_PointFeature):
    """Surface geostrophic current sample."""

    u_current: float = Field(..., description="Eastward velocity (m/s)")
    v_current: float = Field(..., description="Northward velocity (m/s)")
    current_angle: Optional[float] = Field(None, description="Heading sent by the service")
    magnitude: Optional[float] = Field(None, description="Speed sent by the service")

    @property
    def heading(self) -> float:
        return current_heading(self.u_current, self.v_current)

    @property
    def speed(self) -> float:
        return current_magnitude(self.u_current, self.v_current)

    @property
    def is_valid(self) -> bool:
        return not (math.isnan(self.u_current) or math.isnan(self.v_current))


AnyFeature = Union[ChlorophyllFeature, CurrentsFeature]
_F = TypeVar("_F", bound=_PointFeature)


def _parse_features(payload: Mapping[str, Any], model: Type[_F]) -> List[_F]:
    if not isinstance(payload, Mapping) or payload.get("type") != "FeatureCollection":
        raise FeatureError("Payload is not a FeatureCollection")
    features = payload.get("features", [])
    if not isinstance(features, list):
        raise FeatureError(f"FeatureCollection features must be a list, got {type(features).__name__}")
    return [model.from_feature(feature) for feature in features]


class ChlorophyllCollection(BaseModel):
    features: List[ChlorophyllFeature] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ChlorophyllCollection":
        return cls(features=_parse_features(payload, ChlorophyllFeature))


class CurrentsCollection(BaseModel):
    features: List[CurrentsFeature] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CurrentsCollection":
        return cls(features=_parse_features(payload, CurrentsFeature))


def current_heading(u: float, v: float) -> float:
    """Compass bearing of a (u, v) vector: 0 is north, increasing clockwise."""

    if u == 0 and v == 0:
        return 0.0
    if u == 0:
        return 0.0 if v > 0 else 180.0
    if v == 0:
        return 90.0 if u > 0 else 270.0
    from_east = math.degrees(math.atan2(v, u))
    return (90.0 - from_east) % 360.0


def current_magnitude(u: float, v: float) -> float:
    return math.hypot(u, v)


@dataclass
class ChlorophyllSummary:
    count: int
    min_chlor_a: Optional[float]
    max_chlor_a: Optional[float]
    mean_chlor_a: Optional[float]
    latest_measurement: Optional[datetime]


@dataclass
class CurrentsSummary:
    count: int
    mean_speed: Optional[float]
    max_speed: Optional[float]
    mean_heading: Optional[float]


def summarize_chlorophyll(features: Sequence[ChlorophyllFeature]) -> ChlorophyllSummary:
    """Concentration range, mean and newest sample time; NaN readings are ignored."""

    measured = [f for f in features if not math.isnan(f.chlor_a)]
    values = [f.chlor_a for f in measured]
    if not values:
        return ChlorophyllSummary(
            count=0,
            min_chlor_a=None,
            max_chlor_a=None,
            mean_chlor_a=None,
            latest_measurement=None,
        )
    return ChlorophyllSummary(
        count=len(values),
        min_chlor_a=min(values),
        max_chlor_a=max(values),
        mean_chlor_a=sum(values) / len(values),
        latest_measurement=max(f.measurement_time for f in measured),
    )


def summarize_currents(features: Sequence[CurrentsFeature]) -> CurrentsSummary:
    valid = [f for f in features if f.is_valid]
    if not valid:
        return CurrentsSummary(count=0, mean_speed=None, max_speed=None, mean_heading=None)
    speeds = [f.speed for f in valid]
    # Heading of the mean vector; averaging bearings directly breaks across north.
    mean_u = sum(f.u_current for f in valid) / len(valid)
    mean_v = sum(f.v_current for f in valid) / len(valid)
    return CurrentsSummary(
        count=len(valid),
        mean_speed=sum(speeds) / len(speeds),
        max_speed=max(speeds),
        mean_heading=current_heading(mean_u, mean_v),
    )


def build_feature_collection(features: Sequence[AnyFeature]) -> Dict[str, Any]:
    """Return a GeoJSON FeatureCollection for map overlays."""

    out: List[Dict[str, Any]] = []
    for feature in features:
        if isinstance(feature, CurrentsFeature) and not feature.is_valid:
            continue
        out.append(feature.to_feature())
    return {"type": "FeatureCollection", "features": out}


def collection_bounds(features: Sequence[AnyFeature]) -> Optional[Tuple[float, float, float, float]]:
    """``(min_lon, min_lat, max_lon, max_lat)`` covering the features."""

    if not features:
        return None
    return tuple(MultiPoint([f.geometry for f in features]).bounds)
