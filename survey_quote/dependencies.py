"""
Process-wide collaborators, built once and injected into routes with Depends().
"""

import logging
from functools import lru_cache

from .config import settings
from .eligibility import ServiceArea, load_service_area
from .notifications.mailer import EmailNotifier
from .notifications.sheets import SheetsWebhookNotifier
from .pricing_engine import PricingEngine
from .submission import SubmissionOrchestrator

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_service_area() -> ServiceArea:
    return load_service_area(settings.SERVICE_AREA_PATH)


def build_notifiers() -> list:
    email = EmailNotifier(settings)
    sheets = SheetsWebhookNotifier(settings)
    logger.info(
        "Notifiers: email=%s sheets=%s",
        "smtp" if email.enabled else "disabled",
        "webhook" if sheets.enabled else "disabled",
    )
    return [email, sheets]


@lru_cache(maxsize=1)
def get_orchestrator() -> SubmissionOrchestrator:
    return SubmissionOrchestrator(
        service_area=get_service_area(),
        notifiers=build_notifiers(),
        engine=PricingEngine(),
    )
