from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from solis_chart.aggregator import AggregationResult

NBSP = "\u00a0"


def format_swedish_number(value: float) -> str:
    """Format like sv-SE Intl.NumberFormat: '1 234,5' (non-breaking space)."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text.replace(",", NBSP).replace(".", ",")


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


class PageCache:
    """
    Keeps the last good page data and rebuilds it once it is older than
    `revalidate_seconds`, or when asked to. After a failed rebuild the
    previous data is served and the next attempt waits `retry_seconds`.
    """

    def __init__(
        self,
        builder: Callable[[], AggregationResult],
        revalidate_seconds: int = 3600,
        log: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
        retry_seconds: int = 300,
    ):
        self.builder = builder
        self.revalidate_seconds = revalidate_seconds
        self.retry_seconds = min(retry_seconds, revalidate_seconds)
        self.log = log or logging.getLogger(__name__)
        self.clock = clock
        self._lock = threading.Lock()
        self._result: Optional[AggregationResult] = None
        self._expires_at: Optional[float] = None

    @property
    def is_stale(self) -> bool:
        if self._result is None or self._expires_at is None:
            return True
        return self.clock() >= self._expires_at

    def get(self) -> AggregationResult:
        with self._lock:
            if not self.is_stale:
                return self._result
            return self._rebuild()

    def regenerate(self) -> AggregationResult:
        with self._lock:
            return self._rebuild()

    def invalidate(self) -> None:
        with self._lock:
            self._expires_at = None
            self.log.info("Page data invalidated; next request rebuilds it")

    def _rebuild(self) -> AggregationResult:
        result = self.builder()
        if result.error:
            if self._result is not None:
                self._expires_at = self.clock() + self.retry_seconds
                self.log.warning(
                    "Rebuild failed (%s); serving previous page data, retrying in %ss",
                    result.error,
                    self.retry_seconds,
                )
                return self._result
            return result
        self._result = result
        self._expires_at = self.clock() + self.revalidate_seconds
        self.log.info(
            "Page data rebuilt: %s days, %s kWh", len(result.daily_totals), result.monthly_total
        )
        return result
