"""
Fixed-interval rate limiter.

Paces calls to the external analysis service by pausing for a constant
delay between crawl batches. The delay does not adapt to response times
or error rates.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from seocrawl.cancellation import CancellationToken
from seocrawl.constants import DEFAULT_BATCH_DELAY_SECONDS

logger = logging.getLogger(__name__)


@dataclass
class LimiterMetrics:
    """Wait statistics for a limiter."""
    delay: float
    total_waits: int
    total_wait_time: float
    last_wait_at: datetime | None


class FixedIntervalLimiter:
    """
    Waits a fixed delay each time it is called.

    A cancellation token cuts the current wait short.
    """

    def __init__(self, delay_seconds: float = DEFAULT_BATCH_DELAY_SECONDS):
        """
        Initialize limiter.

        Args:
            delay_seconds: Pause applied by every wait() call
        """
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay = delay_seconds

        # Statistics
        self._total_waits = 0
        self._total_wait_time = 0.0
        self._last_wait_at: datetime | None = None

    async def wait(self, token: Optional[CancellationToken] = None) -> float:
        """
        Wait for the fixed delay.

        Args:
            token: Optional cancellation token; the wait ends early once it is set

        Returns:
            Actual time waited (seconds)
        """
        start = time.monotonic()

        if self.delay > 0:
            if token is None:
                await asyncio.sleep(self.delay)
            elif not token.cancelled:
                try:
                    await asyncio.wait_for(token.wait(), timeout=self.delay)
                except asyncio.TimeoutError:
                    pass

        waited = time.monotonic() - start
        self._total_waits += 1
        self._total_wait_time += waited
        self._last_wait_at = datetime.now()
        logger.debug(f"Rate limiter waited {waited:.2f}s")
        return waited

    def get_metrics(self) -> LimiterMetrics:
        """
        Get wait statistics.

        Returns:
            LimiterMetrics with current statistics
        """
        return LimiterMetrics(
            delay=self.delay,
            total_waits=self._total_waits,
            total_wait_time=self._total_wait_time,
            last_wait_at=self._last_wait_at,
        )
