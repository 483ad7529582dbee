"""
Request pacing for third-party feeds and search endpoints.

Every scraper owns one Pacer configured with the minimum interval for its
source category (blogs, Reddit search, Nitter search). Awaiting `wait()`
before each request guarantees that consecutive requests are at least
`min_interval` seconds apart.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class Pacer:
    """
    Minimum-interval pacer.

    The first call returns immediately; later calls sleep only for the part
    of the interval that has not already elapsed.
    """

    min_interval: float  # seconds
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    _last_request: float | None = field(default=None, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def wait(self) -> float:
        """
        Wait until the next request is allowed.

        Returns:
            Seconds actually slept
        """
        async with self._lock:
            slept = 0.0
            if self._last_request is not None and self.min_interval > 0:
                elapsed = self.clock() - self._last_request
                remaining = self.min_interval - elapsed
                if remaining > 0:
                    logger.debug(f"Pacing, waiting {remaining:.2f}s")
                    await asyncio.sleep(remaining)
                    slept = remaining

            self._last_request = self.clock()
            return slept

    def reset(self) -> None:
        """Forget the previous request so the next wait() is immediate."""
        self._last_request = None
