"""
Quote engine.

Combines the service calculator with the mobilization surcharge.
Pure math — no I/O.

Input: clamped acreage, service key, service options, centroid, mobilization toggle
Output: PricedQuote, or ManualQuote that still records mobilization figures
"""

import logging
from typing import Any, Sequence

from .calculators.registry import DEFAULT_SERVICE, get_calculator, has_calculator, normalize_service
from .mobilization import DEPOT_LONLAT, calculate_mobilization, round_half_up
from .schemas import PricedQuote, Quote, ServiceOptions

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Prices a normalized submission.
    Holds only static configuration, so one instance can serve every request.
    """

    def __init__(self, depot_lonlat: Sequence[float] = DEPOT_LONLAT):
        self.depot_lonlat = tuple(depot_lonlat)

    def options_for(self, service: str, options: ServiceOptions):
        """The option block the service's calculator reads."""
        if normalize_service(service) in ("photo", "photogrammetry"):
            return options.photo
        return options.lidar

    def build_quote(
        self,
        acres: float,
        service: str,
        options: ServiceOptions,
        centroid_lonlat: Any = None,
    ) -> Quote:
        """
        Base quote from the service calculator plus the mobilization surcharge.

        Mobilization miles and charge land in the breakdown either way; only a
        priced quote has the charge added to its price.
        """
        options = options or ServiceOptions()
        if not has_calculator(service):
            logger.info("No calculator for service %r, pricing as %s", service, DEFAULT_SERVICE)
        calculator = get_calculator(service)
        quote = calculator.calculate(acres, self.options_for(service, options))

        mob = calculate_mobilization(
            centroid_lonlat,
            requested=bool(options.mobilization.on),
            depot_lonlat=self.depot_lonlat,
        )
        breakdown = quote.breakdown.with_mobilization(round_half_up(mob.miles), mob.charge)

        if isinstance(quote, PricedQuote):
            return quote.model_copy(update={"price": quote.price + mob.charge, "breakdown": breakdown})
        return quote.model_copy(update={"breakdown": breakdown})
