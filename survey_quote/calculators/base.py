"""
Abstract base class for the per-service pricing calculators.

Input: clamped acreage + the service's option block from the submission
Output: PricedQuote, or ManualQuote when the area is past the auto-quote limit
"""

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Mapping, Optional

from ..schemas import ManualQuote, Quote

NEUTRAL_FACTOR = 1.0


def tier_table(factors: dict) -> Mapping[str, float]:
    """Read-only tier key -> factor table."""
    return MappingProxyType(dict(factors))


class BaseCalculator(ABC):
    """All service calculators inherit from this."""

    # Tiered base formula — override per service
    SMALL_THRESHOLD_ACRES = 35
    SMALL_RATE = 0.0        # $/acre up to the small threshold
    MINIMUM = 0.0           # minimum job charge
    LARGE_RATE = 0.0        # $/acre past the small threshold
    BASE_FEE = 0.0          # flat fee added past the small threshold
    MAX_AUTO_ACRES = 300    # past this, a human prices the job

    @abstractmethod
    def calculate(self, acres: float, options) -> Quote:
        """
        Takes clamped acreage and the service option block.
        Returns a PricedQuote or ManualQuote. Never raises.
        """
        pass

    def compute_base(self, acres: float) -> Optional[float]:
        """Tiered base price, or None when the job needs a manual quote."""
        if acres <= self.SMALL_THRESHOLD_ACRES:
            return max(self.MINIMUM, acres * self.SMALL_RATE)
        if acres <= self.MAX_AUTO_ACRES:
            return acres * self.LARGE_RATE + self.BASE_FEE
        return None

    def lookup_factor(self, table: Mapping[str, float], key: Optional[str]) -> float:
        """Unknown tier keys are neutral, never an error."""
        return table.get(str(key), NEUTRAL_FACTOR)

    def resolve_key(self, key: Optional[str], default: str) -> str:
        """Missing, blank or falsy (0, false) tier keys fall back to the standard tier."""
        if not key or str(key).strip() == "":
            return default
        return str(key)

    def manual_quote(self) -> ManualQuote:
        return ManualQuote()
