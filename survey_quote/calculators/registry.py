"""
Calculator registry — maps service strings to calculator classes.

Anything unrecognized is priced as lidar, the default service.
"""

from .base import BaseCalculator
from .lidar import LidarCalculator
from .photo import PhotoCalculator

DEFAULT_SERVICE = "lidar"

CALCULATOR_REGISTRY: dict[str, type] = {
    "lidar": LidarCalculator,
    "photo": PhotoCalculator,
    "photogrammetry": PhotoCalculator,
}


def normalize_service(service) -> str:
    """Lower-cased service key; missing or blank means lidar."""
    if service is None or str(service).strip() == "":
        return DEFAULT_SERVICE
    return str(service).strip().lower()


def get_calculator(service: str) -> BaseCalculator:
    """Returns a calculator for the service, falling back to lidar."""
    cls = CALCULATOR_REGISTRY.get(normalize_service(service), CALCULATOR_REGISTRY[DEFAULT_SERVICE])
    return cls()


def has_calculator(service: str) -> bool:
    """Check if a service has its own calculator (rather than the lidar fallback)."""
    return normalize_service(service) in CALCULATOR_REGISTRY


def list_calculators() -> list[str]:
    """List all registered service keys."""
    return list(CALCULATOR_REGISTRY.keys())
