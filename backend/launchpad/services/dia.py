"""
DIA price API client.

Reads asset quotations used to publish the native currency price into the
sale's oracle store.
API docs: https://docs.diadata.org/
"""

import logging
import re
from datetime import datetime, timezone
from decimal import ROUND_DOWN, Decimal
from typing import Any, Dict, Optional, Tuple

import httpx

from launchpad.core.config import settings
from launchpad.core.constants import ORACLE_PRICE_DECIMALS

logger = logging.getLogger(__name__)

# DIA reports nanosecond precision; datetime handles microseconds
_FRACTION_REGEX = re.compile(r"\.(\d{6})\d+")


def _parse_time(value: str) -> int:
    normalized = _FRACTION_REGEX.sub(r".\1", value.replace("Z", "+00:00"))
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def to_price_e8(price: Any) -> int:
    """Convert a float/str USD price to the oracle's 8-decimal integer format."""
    scaled = Decimal(str(price)) * (10**ORACLE_PRICE_DECIMALS)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


class DIAClient:
    """Client for the DIA REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = (base_url or settings.dia_api_url).rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=10.0)

    async def get_quotation(self, symbol: str) -> Dict[str, Any]:
        """GET /quotation/{symbol}: latest USD quotation of an asset."""
        async with self._client() as client:
            resp = await client.get(f"{self._base_url}/quotation/{symbol}")
            resp.raise_for_status()
            return resp.json()

    async def get_price_e8(self, symbol: str) -> Tuple[int, int]:
        """
        Return ``(price_e8, timestamp)`` for ``symbol``.

        Raises ValueError when the quotation has no usable price.
        """
        quotation = await self.get_quotation(symbol)
        price = quotation.get("Price")
        if price is None:
            raise ValueError(f"DIA quotation for {symbol} has no price")

        price_e8 = to_price_e8(price)
        if price_e8 <= 0:
            raise ValueError(f"DIA quotation for {symbol} is not positive: {price}")

        raw_time = quotation.get("Time")
        timestamp = (
            _parse_time(raw_time)
            if raw_time
            else int(datetime.now(timezone.utc).timestamp())
        )
        return price_e8, timestamp


# Singleton instance
dia_client = DIAClient()
