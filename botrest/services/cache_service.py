"""Overwrite-only cache of decoded GET results."""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ResponseCache:
    """Results keyed by the exact route string; entries never expire."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._storage: Dict[str, Any] = {}

    def __contains__(self, route: str) -> bool:
        return self.enabled and route in self._storage

    def __len__(self) -> int:
        return len(self._storage)

    def get(self, route: str) -> Optional[Any]:
        if not self.enabled:
            return None
        return self._storage.get(route)

    def set(self, route: str, value: Any):
        if self.enabled:
            self._storage[route] = value

    def invalidate(self, route: str) -> bool:
        """Drop one entry.

        Returns:
            True if an entry was removed
        """
        if self._storage.pop(route, None) is not None:
            logger.debug(f"Invalidated cached response for {route}")
            return True
        return False

    def clear(self):
        count = len(self._storage)
        self._storage.clear()
        if count:
            logger.info(f"Cleared {count} cached responses")
