"""Core services for the REST client."""

from botrest.services.cache_service import ResponseCache
from botrest.services.error_service import ErrorService
from botrest.services.rate_limit_service import BucketState, RateLimitBucket, RateLimitService
from botrest.services.scheduler_service import RequestScheduler, SchedulerClosedError

__all__ = [
    "ResponseCache",
    "ErrorService",
    "BucketState",
    "RateLimitBucket",
    "RateLimitService",
    "RequestScheduler",
    "SchedulerClosedError",
]
