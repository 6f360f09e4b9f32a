"""
Auto-quote eligibility — size limit and service-area membership.

The service area is loaded once at startup and shared read-only by every
request.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from shapely.geometry.base import BaseGeometry
from shapely.prepared import prep

from .geometry import intersects, load_geojson, to_shape
from .schemas import EligibilityFlags

logger = logging.getLogger(__name__)

MAX_AUTO_QUOTE_ACRES = 300


@dataclass(frozen=True)
class ServiceArea:
    """Auto-quote service area polygon, prepared for repeated predicates."""
    geometry: BaseGeometry
    source: str = ""

    def __post_init__(self):
        object.__setattr__(self, "_prepared", prep(self.geometry))

    @property
    def prepared(self):
        return self._prepared

    @classmethod
    def from_geojson(cls, obj: Any, source: str = "") -> "ServiceArea":
        return cls(geometry=to_shape(obj), source=source)


def load_service_area(path: str) -> ServiceArea:
    """Read the service area GeoJSON. Fails loudly — the service can't run without it."""
    area = ServiceArea.from_geojson(load_geojson(path), source=path)
    logger.info("Loaded auto-quote service area from %s (bounds %s)", path, area.geometry.bounds)
    return area


def check_in_service_area(features: Iterable[Any], service_area: ServiceArea) -> Optional[bool]:
    """
    True if any AOI feature touches the service area, False if none do.

    Returns None (unknown) for an empty feature list or when any geometry
    can't be checked.
    """
    features = list(features or [])
    if not features:
        return None
    try:
        return any(intersects(f, service_area.prepared) for f in features)
    except Exception as e:
        logger.warning("Service-area check failed: %s", e)
        return None


def evaluate_eligibility(
    acres: float,
    features: Iterable[Any],
    service_area: ServiceArea,
) -> EligibilityFlags:
    area_over = acres > MAX_AUTO_QUOTE_ACRES
    in_area = check_in_service_area(features, service_area)
    return EligibilityFlags(
        area_over_300_acres=area_over,
        in_service_area=in_area,
        auto_quote_eligible=(not area_over) and in_area is True,
    )
