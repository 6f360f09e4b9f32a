"""
Aerial lidar scan pricing.

Base is tiered on acreage, then scaled by point density and vertical accuracy
tiers. Deliverable add-ons are flat fees on top of the scaled base.
"""

from types import MappingProxyType
from typing import Iterable

from .base import BaseCalculator, tier_table
from ..schemas import LidarBreakdown, LidarOptions, PricedQuote, Quote

# Points per square meter
DENSITY_FACTORS = tier_table({
    "8": 0.9,
    "20": 1.0,
    "40": 1.15,
    "60": 1.25,
    "250": 1.6,
})

# Vertical accuracy in feet
ACCURACY_FACTORS = tier_table({
    "0.5": 0.9,
    "0.3": 1.0,
    "0.1": 1.15,
})

ADD_ONS = MappingProxyType({
    "dtm": 450.0,
    "las": 450.0,
    "contours2ft": 450.0,
    "intensityGeoTIFF": 450.0,
    "dsm": 450.0,
    "planimetric": 1200.0,
})

DEFAULT_DENSITY = "20"
DEFAULT_ACCURACY = "0.3"


def add_ons_total(keys: Iterable[str]) -> float:
    """Sum of catalog fees for the selected add-ons. Unknown keys add nothing."""
    return sum(ADD_ONS.get(k, 0.0) for k in keys)


class LidarCalculator(BaseCalculator):

    SMALL_RATE = 100.0
    MINIMUM = 2000.0
    LARGE_RATE = 45.0
    BASE_FEE = 3500.0

    def calculate(self, acres: float, options: LidarOptions = None) -> Quote:
        options = options or LidarOptions()
        base = self.compute_base(acres)
        if base is None:
            return self.manual_quote()

        density_factor = self.lookup_factor(
            DENSITY_FACTORS, self.resolve_key(options.density, DEFAULT_DENSITY)
        )
        accuracy_factor = self.lookup_factor(
            ACCURACY_FACTORS, self.resolve_key(options.accuracy, DEFAULT_ACCURACY)
        )
        selected = list(options.add_ons or [])
        extras = add_ons_total(selected)

        price = base * density_factor * accuracy_factor + extras
        return PricedQuote(
            price=price,
            breakdown=LidarBreakdown(
                base=base,
                density_factor=density_factor,
                accuracy_factor=accuracy_factor,
                add_ons=selected,
                add_ons_total=extras,
            ),
        )
