"""
Native price feeder worker.

Polls the DIA API and publishes the native currency price into the sale's
oracle store under the configured key. The sale engine only ever reads the
store; this worker is its sole writer in production.
"""

import asyncio
import logging

from launchpad.core.config import settings
from launchpad.sale.oracle import InMemoryPriceFeed
from launchpad.services.dia import DIAClient

logger = logging.getLogger(__name__)

# Back off for this long after a failed update
RETRY_DELAY_SECONDS = 30


async def _do_price_update(feed: InMemoryPriceFeed, client: DIAClient) -> bool:
    symbol = settings.dia_asset_symbol
    try:
        price_e8, timestamp = await client.get_price_e8(symbol)
    except Exception as e:
        logger.error(f"price_feed: failed to fetch {symbol} price: {e}")
        return False

    previous, previous_ts = feed.get_value(settings.native_price_key)
    if timestamp < previous_ts:
        logger.info(
            f"price_feed: quotation at {timestamp} older than stored {previous_ts}, skipping"
        )
        return True

    feed.set_value(settings.native_price_key, price_e8, timestamp)
    logger.info(
        f"price_feed: {settings.native_price_key} {previous} → {price_e8} (t={timestamp})"
    )
    return True


async def price_feed_loop(feed: InMemoryPriceFeed, client: DIAClient) -> None:
    """Background loop publishing the native price every interval."""
    logger.info("price_feed: starting")
    while True:
        try:
            success = await _do_price_update(feed, client)
        except Exception as e:
            logger.error(f"price_feed: unhandled error: {e}")
            success = False

        if success:
            await asyncio.sleep(settings.price_feed_interval_seconds)
        else:
            logger.info(f"price_feed: update failed, retrying in {RETRY_DELAY_SECONDS}s")
            await asyncio.sleep(RETRY_DELAY_SECONDS)
