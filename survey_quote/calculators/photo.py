"""
Photogrammetry pricing — tiered base scaled by ground sample distance.
"""

from .base import BaseCalculator, tier_table
from ..schemas import PhotoBreakdown, PhotoOptions, PricedQuote, Quote

GSD_FACTORS = tier_table({
    "6in": 0.85,
    "3in": 1.0,
    "1in": 1.25,
})

DEFAULT_GSD = "3in"


class PhotoCalculator(BaseCalculator):

    SMALL_RATE = 40.0
    MINIMUM = 800.0
    LARGE_RATE = 20.0
    BASE_FEE = 1400.0

    def calculate(self, acres: float, options: PhotoOptions = None) -> Quote:
        options = options or PhotoOptions()
        base = self.compute_base(acres)
        if base is None:
            return self.manual_quote()

        gsd = self.resolve_key(options.gsd, DEFAULT_GSD)
        factor = self.lookup_factor(GSD_FACTORS, gsd)
        return PricedQuote(
            price=base * factor,
            breakdown=PhotoBreakdown(base=base, gsd=gsd, factor=factor),
        )
