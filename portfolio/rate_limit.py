"""
Sliding-window throttle for contact-form submissions.

The count is derived from the stored inquiries themselves, so the check and
the later insert are two separate store calls. Two concurrent submissions
from the same key can both pass; this is a soft limit, not a hard quota.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from portfolio.db import DocumentStore, FieldFilter
from portfolio.errors import StoreError
from shared.constants import MAX_INQUIRIES_PER_WINDOW, RATE_LIMIT_WINDOW_SECONDS
from shared.firebase_constants import INQUIRIES_COLLECTION

logger = logging.getLogger(__name__)


class RateLimiter:
    def __init__(
        self,
        store: DocumentStore,
        *,
        max_submissions: int = MAX_INQUIRIES_PER_WINDOW,
        window: timedelta = timedelta(seconds=RATE_LIMIT_WINDOW_SECONDS),
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._store = store
        self.max_submissions = max_submissions
        self.window = window
        self._clock = clock

    def recent_submission_count(
        self, client_key: str, window: Optional[timedelta] = None
    ) -> int:
        since = self._clock() - (window or self.window)
        try:
            return self._store.count(
                INQUIRIES_COLLECTION,
                [
                    FieldFilter("ip", "==", client_key),
                    FieldFilter("timestamp", ">", since),
                ],
            )
        except StoreError:
            logger.exception("Rate limit query failed for client %s", client_key)
            raise

    def is_over_limit(self, client_key: str) -> bool:
        return self.recent_submission_count(client_key) >= self.max_submissions
