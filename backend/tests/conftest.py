import pytest

from helpers import (
    NATIVE_KEY,
    OWNER,
    SALE_ADDRESS,
    USDC_ADDRESS,
    USDT_ADDRESS,
    FakeClock,
)
from launchpad.sale import InMemoryPriceFeed, NativePriceSource, TokenSale
from launchpad.sale.assets import InMemoryToken, NativeBank


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def usdc():
    return InMemoryToken(USDC_ADDRESS, "USDC", decimals=6)


@pytest.fixture
def usdt():
    return InMemoryToken(USDT_ADDRESS, "USDT", decimals=6)


@pytest.fixture
def native():
    return NativeBank()


@pytest.fixture
def feed():
    return InMemoryPriceFeed()


@pytest.fixture
def price_source(feed, clock):
    return NativePriceSource(feed, NATIVE_KEY, clock=clock)


@pytest.fixture
def sale(usdc, usdt, native, price_source, clock):
    return TokenSale(
        owner=OWNER,
        usdc=usdc,
        usdt=usdt,
        native=native,
        price_source=price_source,
        address=SALE_ADDRESS,
        clock=clock,
    )
