"""
Geometry helpers — great-circle distance and polygon intersection.

Coordinates are [lon, lat] (GeoJSON order). Distance is plain haversine on a
spherical earth, good enough for a travel surcharge. Polygon work goes through
shapely; any fault reading a geometry surfaces as GeometryError.
"""

import json
import math
from typing import Any, Sequence

from shapely.errors import ShapelyError
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

EARTH_RADIUS_M = 6371008.8
METERS_PER_MILE = 1609.344
EARTH_RADIUS_MILES = EARTH_RADIUS_M / METERS_PER_MILE


class GeometryError(ValueError):
    """Raised when a GeoJSON object can't be read or compared."""


def is_lonlat(point: Any) -> bool:
    """True for a 2-element [lon, lat] pair of finite numbers."""
    if not isinstance(point, (list, tuple)) or len(point) != 2:
        return False
    for value in point:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if not math.isfinite(value):
            return False
    return True


def distance_miles(point_a: Sequence[float], point_b: Sequence[float]) -> float:
    """Haversine distance in miles. Malformed points give 0 instead of an error."""
    if not (is_lonlat(point_a) and is_lonlat(point_b)):
        return 0.0
    a_lon, a_lat = point_a
    b_lon, b_lat = point_b

    phi1 = math.radians(a_lat)
    phi2 = math.radians(b_lat)
    dphi = math.radians(b_lat - a_lat)
    dlmb = math.radians(b_lon - a_lon)

    s = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    # Clamp float drift so asin never sees a value above 1
    miles = 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(min(1.0, s)))
    return miles if math.isfinite(miles) and miles > 0 else 0.0


def to_shape(obj: Any) -> BaseGeometry:
    """
    Convert a GeoJSON geometry, Feature or FeatureCollection to a shapely geometry.

    FeatureCollections are unioned into a single geometry.

    Raises:
        GeometryError: if the object is not readable GeoJSON
    """
    if isinstance(obj, BaseGeometry):
        return obj
    if not isinstance(obj, dict):
        raise GeometryError(f"Expected a GeoJSON object, got {type(obj).__name__}")

    kind = obj.get("type")
    try:
        if kind == "FeatureCollection":
            parts = [to_shape(f) for f in obj.get("features") or []]
            if not parts:
                raise GeometryError("FeatureCollection is empty")
            return unary_union(parts)
        if kind == "Feature":
            geometry = obj.get("geometry")
            if not geometry:
                raise GeometryError("Feature has no geometry")
            return shape(geometry)
        return shape(obj)
    except GeometryError:
        raise
    except (ShapelyError, ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
        raise GeometryError(f"Unreadable {kind or 'GeoJSON'} geometry: {e}") from e


def intersects(feature_a: Any, feature_b: Any) -> bool:
    """
    True if the two features share any area or boundary.

    Raises:
        GeometryError: if either feature is malformed
    """
    geom_a = to_shape(feature_a)
    geom_b = feature_b if hasattr(feature_b, "intersects") else to_shape(feature_b)
    try:
        return bool(geom_b.intersects(geom_a))
    except (ShapelyError, ValueError, TypeError) as e:
        raise GeometryError(f"Intersection check failed: {e}") from e


def load_geojson(path: str) -> dict:
    """Read a GeoJSON file from disk."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
