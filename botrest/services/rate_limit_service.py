"""Per-route rate-limit buckets learned from response headers."""

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Dict, Optional

from botrest.models.response import RateLimitHeaders

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class BucketState(str, Enum):
    """Rate-limit bucket states."""

    FRESH = "fresh"  # No response seen yet
    AVAILABLE = "available"  # Budget left or reset elapsed
    EXHAUSTED = "exhausted"  # No budget until reset


class RateLimitBucket:
    """Call budget for one bucket key."""

    def __init__(
        self,
        key: str,
        guard_margin: float = 0.1,
        clock: Clock = time.monotonic,
    ):
        """Initialize rate-limit bucket.

        Args:
            key: Bucket key (normalized route)
            guard_margin: Seconds added to every reset to absorb clock skew
            clock: Monotonic time source
        """
        self.key = key
        self.guard_margin = guard_margin
        self.clock = clock

        self.limit: Optional[int] = None
        self.remaining: Optional[int] = None
        self.reset_at: Optional[float] = None
        self.bucket_hash: Optional[str] = None

    @property
    def state(self) -> BucketState:
        if self.remaining is None:
            return BucketState.FRESH
        if self.is_consumed():
            return BucketState.EXHAUSTED
        return BucketState.AVAILABLE

    def is_consumed(self) -> bool:
        """True while the budget is spent and the reset time is still ahead."""
        if self.remaining is None or self.reset_at is None:
            return False
        return self.remaining <= 0 and self.clock() < self.reset_at

    def set_remaining(self, remaining: int):
        self.remaining = max(int(remaining), 0)

    def reset_after(self, seconds: float):
        self.reset_at = self.clock() + max(float(seconds), 0.0) + self.guard_margin

    def time_until_reset(self) -> float:
        if self.reset_at is None:
            return 0.0
        return max(self.reset_at - self.clock(), 0.0)

    def update(self, info: RateLimitHeaders):
        """Refresh the bucket from one response's headers.

        Applied without suspending, so concurrent calls on one loop never interleave.
        """
        if info.limit is not None:
            self.limit = info.limit
        if info.bucket:
            self.bucket_hash = info.bucket
        self.set_remaining(info.remaining)
        self.reset_after(info.reset_after)

        if self.remaining <= 0:
            logger.debug(
                f"Rate limit bucket {self.key} exhausted, "
                f"resets in {self.time_until_reset():.2f}s"
            )

    def get_state(self) -> Dict:
        """Get bucket state.

        Returns:
            Dict with state information
        """
        return {
            "key": self.key,
            "state": self.state.value,
            "bucket": self.bucket_hash,
            "limit": self.limit,
            "remaining": self.remaining,
            "reset_in": round(self.time_until_reset(), 3),
            "consumed": self.is_consumed(),
        }


class RateLimitService:
    """Bucket table owned by one client instance."""

    def __init__(
        self,
        guard_margin: float = 0.1,
        poll_interval: float = 1.0,
        clock: Clock = time.monotonic,
        sleep: Callable = asyncio.sleep,
    ):
        """Initialize rate limit service.

        Args:
            guard_margin: Seconds added to every server-provided reset
            poll_interval: Longest single sleep while a bucket is exhausted
            clock: Monotonic time source shared by all buckets
            sleep: Coroutine function used for cooperative waits
        """
        self.guard_margin = guard_margin
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep
        self._buckets: Dict[str, RateLimitBucket] = {}

    def get_bucket(self, key: str) -> Optional[RateLimitBucket]:
        return self._buckets.get(key)

    def _get_or_create_bucket(self, key: str) -> RateLimitBucket:
        if key not in self._buckets:
            self._buckets[key] = RateLimitBucket(
                key=key, guard_margin=self.guard_margin, clock=self.clock
            )
        return self._buckets[key]

    def is_consumed(self, key: str) -> bool:
        bucket = self.get_bucket(key)
        return bucket is not None and bucket.is_consumed()

    async def wait_until_available(self, key: str) -> float:
        """Suspend until the bucket for ``key`` has budget again.

        Sleeps toward the reset time in steps of at most ``poll_interval`` so a
        refresh from another response is picked up.

        Returns:
            Total seconds spent waiting
        """
        waited = 0.0
        bucket = self.get_bucket(key)
        if bucket is None:
            return waited

        while bucket.is_consumed():
            delay = min(bucket.time_until_reset(), self.poll_interval)
            logger.debug(f"Rate limit bucket {key} exhausted, waiting {delay:.2f}s")
            await self.sleep(delay)
            waited += delay
        return waited

    async def update_from_headers(self, key: str, headers) -> Optional[RateLimitBucket]:
        """Refresh (or create) the bucket for ``key`` from response headers.

        Missing or malformed rate-limit headers leave the table untouched.
        """
        info = RateLimitHeaders.from_headers(headers)
        if info is None:
            return None
        bucket = self._get_or_create_bucket(key)
        bucket.update(info)
        return bucket

    def get_all_states(self) -> Dict[str, Dict]:
        """Get state of all buckets.

        Returns:
            Dict mapping bucket key to state
        """
        return {key: bucket.get_state() for key, bucket in self._buckets.items()}
