"""
Fire-and-forget notification dispatch.

Each notifier runs in its own daemon thread. Failures are logged inside the
thread and never reach the request that triggered them; nothing is retried.
"""

import logging
import threading
from typing import Iterable, List, Protocol

from ..schemas import QuoteResult

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    name: str

    def notify(self, result: QuoteResult) -> None:
        ...


def _run_safely(notifier: Notifier, result: QuoteResult) -> None:
    name = getattr(notifier, "name", type(notifier).__name__)
    try:
        notifier.notify(result)
    except Exception:
        logger.exception("%s notification failed for request %s", name, result.submission.meta.request_id)


def dispatch_notifications(notifiers: Iterable[Notifier], result: QuoteResult) -> List[threading.Thread]:
    """Start one background thread per notifier and return without joining them."""
    threads = []
    for notifier in notifiers:
        name = getattr(notifier, "name", type(notifier).__name__)
        t = threading.Thread(
            target=_run_safely,
            args=(notifier, result),
            daemon=True,
            name=f"notify-{name}"[:32],
        )
        t.start()
        threads.append(t)
    return threads
