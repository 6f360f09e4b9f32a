"""
Mobilization surcharge — travel from the Buda, TX depot to the AOI centroid.

The first 30 miles are free. Past that: $250 flat plus $1 per mile of overage,
rounded half-up to whole miles.
"""

import math
from typing import Any, NamedTuple, Sequence

from .geometry import distance_miles

DEPOT_LONLAT = (-97.8403, 30.0810)  # Buda, TX
FREE_RADIUS_MILES = 30.0
BASE_FEE = 250.0
RATE_PER_MILE = 1.0


class Mobilization(NamedTuple):
    miles: float
    charge: float


def round_half_up(value: float) -> int:
    """0.5 always rounds up (Python's round() would go to even)."""
    return int(math.floor(value + 0.5))


def charge_for_miles(miles: float) -> float:
    """Surcharge for a one-way distance in miles."""
    if miles <= FREE_RADIUS_MILES:
        return 0.0
    over = max(0.0, miles - FREE_RADIUS_MILES)
    return BASE_FEE + RATE_PER_MILE * round_half_up(over)


def calculate_mobilization(
    centroid_lonlat: Any,
    requested: bool = False,
    depot_lonlat: Sequence[float] = DEPOT_LONLAT,
) -> Mobilization:
    """
    Distance and charge for a job site.

    A missing or malformed centroid measures as 0 miles, so it never
    produces a charge.
    """
    if not requested:
        return Mobilization(miles=0.0, charge=0.0)
    miles = distance_miles(depot_lonlat, centroid_lonlat)
    return Mobilization(miles=miles, charge=charge_for_miles(miles))
