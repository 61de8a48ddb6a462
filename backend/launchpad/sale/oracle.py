"""
Native currency price source.

Wraps the oracle store read used on the native payment path. A zero value
means no price has been published and is never treated as a real price.
"""

import time
from typing import Callable, Dict, Optional, Tuple

from launchpad.core.errors import InvalidPriceFeed
from launchpad.sale.base import PriceFeed


class InMemoryPriceFeed(PriceFeed):
    """Oracle store holding the latest ``(value, timestamp)`` per key."""

    def __init__(self):
        self._values: Dict[str, Tuple[int, int]] = {}

    def set_value(self, key: str, value: int, timestamp: int) -> None:
        self._values[key] = (value, timestamp)

    def get_value(self, key: str) -> Tuple[int, int]:
        return self._values.get(key, (0, 0))


class NativePriceSource:
    """Validated reads of the native currency price in USD × 10^8."""

    def __init__(
        self,
        feed: PriceFeed,
        key: str,
        clock: Optional[Callable[[], int]] = None,
        max_age_seconds: int = 0,
    ):
        self._feed = feed
        self._key = key
        self._clock = clock or (lambda: int(time.time()))
        self._max_age_seconds = max_age_seconds

    @property
    def key(self) -> str:
        return self._key

    def get_native_price_e8(self) -> int:
        value, timestamp = self._feed.get_value(self._key)
        if value <= 0:
            raise InvalidPriceFeed()
        if self._max_age_seconds > 0 and self._clock() - timestamp > self._max_age_seconds:
            raise InvalidPriceFeed(f"Native price is older than {self._max_age_seconds}s")
        return value
