"""
Google Sheets logging — POSTs each quote result to an Apps Script webhook.

No-op when SHEETS_WEBHOOK_URL is unset.
"""

import json
import logging
import urllib.request

from ..config import Settings, settings as default_settings
from ..schemas import QuoteResult

logger = logging.getLogger(__name__)


class SheetsWebhookNotifier:
    """Appends the flattened quote result to the tracking sheet."""

    name = "sheets"

    def __init__(self, config: Settings = None):
        self.config = config or default_settings

    @property
    def enabled(self) -> bool:
        return bool(self.config.SHEETS_WEBHOOK_URL)

    def notify(self, result: QuoteResult) -> None:
        url = self.config.SHEETS_WEBHOOK_URL
        if not url:
            return

        payload = json.dumps(result.to_webhook_payload()).encode("utf-8")
        req = urllib.request.Request(
            url,
            data=payload,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        with urllib.request.urlopen(req, timeout=self.config.WEBHOOK_TIMEOUT_SECONDS) as response:
            text = response.read().decode("utf-8", errors="replace")
            logger.info("Sheets webhook: %s %s", response.status, text[:200])
