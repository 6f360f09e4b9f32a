"""
Submission orchestrator — normalize, evaluate, dispatch.

1. Normalize: clamp acreage, default the service, stamp requestId/submittedAt,
   fill in derived AOI figures.
2. Evaluate: eligibility flags + quote, both read from the normalized submission.
3. Dispatch: notifiers run in background threads; the caller is acknowledged
   immediately without waiting on them.

Bad input never fails a request — it degrades to 0 acres, no mobilization
charge, or unknown eligibility. Only an unexpected fault produces the generic
error acknowledgment, and then nothing is dispatched.
"""

import logging
import math
import time
import uuid
from typing import Callable, Iterable, Optional, Tuple

from .calculators.registry import normalize_service
from .eligibility import ServiceArea, evaluate_eligibility
from .notifications import Notifier, dispatch_notifications
from .pricing_engine import PricingEngine
from .schemas import (
    ACRES_TO_HECTARES,
    ACRES_TO_SQ_KM,
    QuoteResult,
    QuoteSubmission,
    SubmitQuoteResponse,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"


def clamp_number(value) -> float:
    """Non-numeric, non-finite or negative input becomes 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return max(0.0, float(value))


def _is_finite_number(value) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float)) and math.isfinite(value)


def make_request_id(clock: Callable[[], float] = time.time) -> str:
    """<epoch millis>-<8 random hex chars>; the suffix keeps same-millisecond ids distinct."""
    return f"{int(clock() * 1000)}-{uuid.uuid4().hex[:8]}"


class SubmissionOrchestrator:
    """Turns a raw submission into a flagged, priced result and hands it to the notifiers."""

    def __init__(
        self,
        service_area: ServiceArea,
        notifiers: Iterable[Notifier] = (),
        engine: Optional[PricingEngine] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.service_area = service_area
        self.notifiers = tuple(notifiers)
        self.engine = engine or PricingEngine()
        self.clock = clock

    # --- Stage 1 ---

    def normalize(self, submission: QuoteSubmission) -> Tuple[QuoteSubmission, float, str]:
        """Returns (normalized submission, clamped acres, service key)."""
        acres = clamp_number(submission.aoi.total_area_acres)
        service = normalize_service(submission.options.service)

        aoi = submission.aoi
        aoi_updates = {"total_area_acres": acres}
        if not _is_finite_number(aoi.total_area_hectares):
            aoi_updates["total_area_hectares"] = acres * ACRES_TO_HECTARES
        if not _is_finite_number(aoi.total_area_sq_km):
            aoi_updates["total_area_sq_km"] = acres * ACRES_TO_SQ_KM
        if aoi.count is None:
            aoi_updates["count"] = len(aoi.features)

        meta = submission.meta
        meta_updates = {}
        if not meta.request_id:
            meta_updates["request_id"] = make_request_id(self.clock)
        if meta.submitted_at is None or meta.submitted_at == "":
            meta_updates["submitted_at"] = int(self.clock() * 1000)

        normalized = submission.model_copy(update={
            "aoi": aoi.model_copy(update=aoi_updates),
            "options": submission.options.model_copy(update={"service": service}),
            "meta": meta.model_copy(update=meta_updates),
        })
        return normalized, acres, service

    # --- Stage 2 ---

    def evaluate(self, submission: QuoteSubmission, acres: float, service: str) -> QuoteResult:
        flags = evaluate_eligibility(acres, submission.aoi.features, self.service_area)
        quote = self.engine.build_quote(
            acres,
            service,
            submission.options,
            centroid_lonlat=submission.aoi.centroid_lonlat,
        )
        return QuoteResult(submission=submission, flags=flags, service=service, quote=quote)

    def process(self, submission: QuoteSubmission) -> QuoteResult:
        """Normalize + evaluate without dispatching."""
        normalized, acres, service = self.normalize(submission)
        return self.evaluate(normalized, acres, service)

    # --- Stage 3 ---

    def submit(self, submission: QuoteSubmission) -> SubmitQuoteResponse:
        """Process the submission, start notifications, acknowledge the caller."""
        try:
            result = self.process(submission)
            dispatch_notifications(self.notifiers, result)
        except Exception:
            logger.exception("Quote submission failed")
            return SubmitQuoteResponse(status="error", message=GENERIC_ERROR_MESSAGE)

        logger.info(
            "Quote %s: service=%s acres=%.2f manual=%s in_area=%s",
            result.submission.meta.request_id,
            result.service,
            result.submission.aoi.total_area_acres,
            result.quote.manual,
            result.flags.in_service_area,
        )
        return SubmitQuoteResponse(status="ok")
